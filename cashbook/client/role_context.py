"""
Client-side role context: a cached view of the signed-in user's role for UI decisions.

This is a convenience for clients (scripts, front-end backends, CLIs) that want
to show or hide actions. It is never an authorization decision: every API
route re-resolves the session and re-checks the role on the server.

Usage:
    with RoleContext(httpx.Client(base_url="http://localhost:8000")) as ctx:
        if ctx.has_role("ADMIN"):
            ...
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from cashbook.models.user import ROLE_ADMIN, RoleName, effective_role

logger = logging.getLogger(__name__)

CHECK_SESSION_PATH = "/api/v1/auth/check-session"


@dataclass(frozen=True)
class SessionClaims:
    """Claims carried by an authenticated session held by the client (e.g. from the OAuth library)."""

    email: str | None = None
    role: str | None = None


@dataclass(frozen=True)
class RoleState:
    role: RoleName | None
    is_loading: bool


Listener = Callable[[RoleState], None]


class RoleContext:
    """
    Observable {role, is_loading} container.

    Lifecycle: mount() derives the role for the first time, set_session()
    re-derives it when the session reference changes, refresh() re-derives on
    demand, close() tears down listeners and any owned HTTP client.
    """

    def __init__(
        self,
        http: httpx.Client,
        session: SessionClaims | None = None,
        check_session_path: str = CHECK_SESSION_PATH,
        owns_client: bool = False,
    ) -> None:
        self._http = http
        self._session = session
        self._check_session_path = check_session_path
        self._owns_client = owns_client
        self._state = RoleState(role=None, is_loading=True)
        self._listeners: list[Listener] = []
        self._closed = False

    @property
    def state(self) -> RoleState:
        return self._state

    @property
    def role(self) -> RoleName | None:
        return self._state.role

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def session(self) -> SessionClaims | None:
        return self._session

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener for state changes; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mount(self) -> RoleState:
        return self.refresh()

    def set_session(self, session: SessionClaims | None) -> RoleState:
        """Swap the session reference; the role is re-derived only when it actually changed."""
        if session == self._session:
            return self._state
        self._session = session
        return self.refresh()

    def refresh(self) -> RoleState:
        if self._closed:
            raise RuntimeError("RoleContext is closed")
        self._set_state(RoleState(role=self._state.role, is_loading=True))
        role = self._derive_role()
        self._set_state(RoleState(role=role, is_loading=False))
        return self._state

    def has_role(self, required_role: RoleName | None = None) -> bool:
        """UX gate: signed in and, when given, holding exactly required_role."""
        if self._state.role is None:
            return False
        return required_role is None or self._state.role == required_role

    def close(self) -> None:
        self._listeners.clear()
        if self._owns_client:
            self._http.close()
        self._closed = True

    def __enter__(self) -> "RoleContext":
        self.mount()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _set_state(self, state: RoleState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _derive_role(self) -> RoleName | None:
        if self._session is None:
            return self._role_from_status_endpoint()
        # Same default as the OAuth sign-in callback: no role claim means ADMIN.
        return effective_role(self._session.email, self._session.role or ROLE_ADMIN)

    def _role_from_status_endpoint(self) -> RoleName | None:
        try:
            response = self._http.get(self._check_session_path)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Session status check failed: %s", e)
            return None
        if not isinstance(data, dict) or not data.get("authenticated"):
            return None
        user = data.get("user")
        if not isinstance(user, dict):
            logger.warning("Session status reported authenticated without a user object")
            return None
        return effective_role(user.get("email"), user.get("role"))
