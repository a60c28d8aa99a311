"""Resolve a request's Cookie header to the identity that owns a valid, non-expired session."""

import logging
from dataclasses import dataclass
from datetime import datetime

from cashbook.core.security import CookieTokenSource, extract_session_token, token_sources
from cashbook.models import User
from cashbook.models.user import effective_role
from cashbook.schemas.auth import CurrentUser
from cashbook.services.session_store import AuthInfraError, SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSession:
    """Identity plus the public part of the session it came from."""

    identity: CurrentUser
    session_id: str
    expires_at: datetime


def identity_from_user(user: User) -> CurrentUser:
    """
    Build the resolved identity for user, applying the test-account override.

    Raises AuthInfraError if the stored role is outside the closed role set.
    """
    role = effective_role(user.email, user.role)
    if role is None:
        raise AuthInfraError(f"User {user.id} has an unknown role")
    return CurrentUser(id=user.id, email=user.email, name=user.name, role=role)


class SessionResolver:
    """
    Cookie header -> CurrentUser, or None when unauthenticated.

    Token sources are tried in priority order (custom-auth-token,
    <provider>.session-token, session-token). Read-only: never mutates
    session state. Store faults propagate as AuthInfraError.
    """

    def __init__(
        self,
        store: SessionStore,
        sources: tuple[CookieTokenSource, ...] | None = None,
    ) -> None:
        self.store = store
        self.sources = sources if sources is not None else token_sources()

    def extract_token(self, cookie_header: str | None) -> str | None:
        return extract_session_token(cookie_header, self.sources)

    def resolve_session(
        self, cookie_header: str | None, now: datetime | None = None
    ) -> ResolvedSession | None:
        token = self.extract_token(cookie_header)
        if token is None:
            return None
        session = self.store.find_active_session(token, now=now)
        if session is None:
            logger.debug("No active session for presented token")
            return None
        if session.user is None:
            raise AuthInfraError(f"Session {session.id} has no owning user")
        return ResolvedSession(
            identity=identity_from_user(session.user),
            session_id=session.id,
            expires_at=session.expires_at,
        )

    def resolve(
        self, cookie_header: str | None, now: datetime | None = None
    ) -> CurrentUser | None:
        resolved = self.resolve_session(cookie_header, now=now)
        return resolved.identity if resolved is not None else None
