"""Session auth: route authorization dependencies and sign-in/sign-out endpoints."""

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.orm import Session

from cashbook.core.config import get_settings
from cashbook.core.database import get_db
from cashbook.core.security import (
    has_session_cookie,
    provider_cookie_name,
    session_cookie_names,
)
from cashbook.models.user import ROLE_ADMIN, RoleName
from cashbook.schemas.auth import (
    CredentialsSignInRequest,
    CurrentUser,
    SessionInfo,
    SessionStatusResponse,
    SignInResponse,
    TestUserResponse,
)
from cashbook.services.role_guard import INSUFFICIENT_ROLE, Deny, authorize
from cashbook.services.session_issuer import IssuedSession, TestSessionIssuer
from cashbook.services.session_resolver import SessionResolver, identity_from_user
from cashbook.services.session_store import AuthInfraError, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_AUTHENTICATED_MESSAGE = "No autenticado"
AUTH_ERROR_MESSAGE = "Error de autenticación"
INTERNAL_ERROR_MESSAGE = "Error interno del servidor"


def get_session_store(db: Annotated[Session, Depends(get_db)]) -> SessionStore:
    """Dependency: session store bound to this request's DB session."""
    return SessionStore(db, timeout_ms=get_settings().AUTH_STORE_TIMEOUT_MS)


def get_session_resolver(
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionResolver:
    return SessionResolver(store)


def get_test_session_issuer(
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> TestSessionIssuer:
    settings = get_settings()
    return TestSessionIssuer(
        store,
        expires_in=timedelta(days=settings.SESSION_EXPIRE_DAYS),
        password=settings.TEST_USER_PASSWORD.get_secret_value(),
    )


def _unauthorized(message: str = NOT_AUTHENTICATED_MESSAGE) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)


def _deny_to_http(decision: Deny) -> HTTPException:
    if decision.reason == INSUFFICIENT_ROLE:
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": f"Acceso denegado. Rol requerido: {decision.required_role}",
                "userRole": decision.user_role,
                "requiredRole": decision.required_role,
            },
        )
    return _unauthorized()


def get_current_user(
    request: Request,
    resolver: Annotated[SessionResolver, Depends(get_session_resolver)],
) -> CurrentUser:
    """
    Dependency: require a valid session cookie and return the resolved user.

    Raises 401 when no recognized cookie is present (without touching the
    store) or when no active session matches. Store faults and any other
    error also end in 401: authorization fails closed.
    """
    cookie_header = request.headers.get("cookie")
    if not has_session_cookie(cookie_header, resolver.sources):
        raise _unauthorized()
    try:
        identity = resolver.resolve(cookie_header)
    except AuthInfraError as e:
        logger.error("Session resolution failed: %s", e.message, exc_info=e.cause or e)
        raise _unauthorized(AUTH_ERROR_MESSAGE) from e
    except Exception as e:
        logger.exception("Unexpected error during session resolution")
        raise _unauthorized(AUTH_ERROR_MESSAGE) from e

    decision = authorize(identity)
    if isinstance(decision, Deny):
        logger.debug("Request without an active session: %s %s", request.method, request.url.path)
        raise _deny_to_http(decision)
    request.state.user = decision.identity
    return decision.identity


def ensure_role(current_user: CurrentUser, required_role: RoleName) -> CurrentUser:
    """Raise 403 unless current_user has exactly required_role."""
    decision = authorize(current_user, required_role)
    if isinstance(decision, Deny):
        logger.info(
            "Role denied: user_id=%s role=%s required=%s",
            current_user.id,
            current_user.role,
            required_role,
        )
        raise _deny_to_http(decision)
    return current_user


def require_role(required_role: RoleName) -> Callable[..., CurrentUser]:
    """Dependency factory: authenticated user that must hold required_role."""

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        return ensure_role(current_user, required_role)

    return dependency


require_admin = require_role(ROLE_ADMIN)


def _set_session_cookies(response: Response, issued: IssuedSession) -> None:
    """Set the token under every recognized cookie name so any reader finds it."""
    settings = get_settings()
    max_age = int(timedelta(days=settings.SESSION_EXPIRE_DAYS).total_seconds())
    for name in session_cookie_names():
        response.set_cookie(
            key=name,
            value=issued.token,
            max_age=max_age,
            path="/",
            httponly=True,
            samesite="lax",
            secure=settings.SESSION_COOKIE_SECURE,
        )


def _clear_cookies(response: Response, names: tuple[str, ...]) -> None:
    settings = get_settings()
    for name in names:
        response.delete_cookie(
            key=name,
            path="/",
            httponly=True,
            samesite="lax",
            secure=settings.SESSION_COOKIE_SECURE,
        )


def _require_test_login_enabled() -> None:
    if not get_settings().TEST_LOGIN_ENABLED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No disponible")


@router.get("/check-session", response_model=SessionStatusResponse, response_model_exclude_none=True)
def check_session(
    request: Request,
    resolver: Annotated[SessionResolver, Depends(get_session_resolver)],
) -> SessionStatusResponse:
    """
    Report whether the request carries an active session and whose it is.
    Always 200 unless the session store fails (500).
    """
    cookie_header = request.headers.get("cookie")
    if resolver.extract_token(cookie_header) is None:
        return SessionStatusResponse(authenticated=False, message="No hay sesión activa")
    try:
        resolved = resolver.resolve_session(cookie_header)
    except AuthInfraError as e:
        logger.error("Session status check failed: %s", e.message, exc_info=e.cause or e)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE) from e
    if resolved is None:
        return SessionStatusResponse(authenticated=False, message="Sesión no válida")
    return SessionStatusResponse(
        authenticated=True,
        user=resolved.identity,
        session=SessionInfo(id=resolved.session_id, expiresAt=resolved.expires_at),
    )


@router.get("/test-login")
def test_login(
    issuer: Annotated[TestSessionIssuer, Depends(get_test_session_issuer)],
) -> RedirectResponse:
    """Sign in as the seeded test account (role USER) and redirect to the home page."""
    _require_test_login_enabled()
    try:
        issued = issuer.issue()
    except AuthInfraError as e:
        logger.error("Test login failed: %s", e.message, exc_info=e.cause or e)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE) from e
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    _set_session_cookies(response, issued)
    return response


@router.post("/test-user", response_model=TestUserResponse)
def ensure_test_user(
    issuer: Annotated[TestSessionIssuer, Depends(get_test_session_issuer)],
) -> TestUserResponse:
    """Create or reset the seeded test account."""
    _require_test_login_enabled()
    try:
        user = issuer.ensure_test_user()
    except AuthInfraError as e:
        logger.error("Test user setup failed: %s", e.message, exc_info=e.cause or e)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE) from e
    return TestUserResponse(
        message="Usuario de prueba configurado correctamente",
        user=identity_from_user(user),
    )


@router.post("/sign-in/credentials", response_model=SignInResponse)
def sign_in_with_credentials(
    body: CredentialsSignInRequest,
    response: Response,
    issuer: Annotated[TestSessionIssuer, Depends(get_test_session_issuer)],
) -> SignInResponse:
    """Email/password sign-in. Only the seeded test account has credentials."""
    _require_test_login_enabled()
    try:
        issued = issuer.authenticate(body.email, body.password)
    except AuthInfraError as e:
        logger.error("Credentials sign-in failed: %s", e.message, exc_info=e.cause or e)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE) from e
    if issued is None:
        raise _unauthorized("Credenciales inválidas")
    _set_session_cookies(response, issued)
    return SignInResponse(
        user=issued.identity,
        session=SessionInfo(id=issued.session_id, expiresAt=issued.expires_at),
    )


@router.api_route("/logout", methods=["GET", "POST"])
def logout(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> RedirectResponse:
    """Delete the presented session and clear every session cookie."""
    resolver = SessionResolver(store)
    token = resolver.extract_token(request.headers.get("cookie"))
    if token is not None:
        try:
            store.delete_sessions_by_token(token)
        except AuthInfraError as e:
            logger.error("Logout failed: %s", e.message, exc_info=e.cause or e)
            raise HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE) from e
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    _clear_cookies(response, session_cookie_names())
    return response


@router.post("/force-session-refresh")
def force_session_refresh(
    request: Request,
    resolver: Annotated[SessionResolver, Depends(get_session_resolver)],
) -> RedirectResponse:
    """Drop the provider's session and CSRF cookies so the client re-establishes them."""
    try:
        identity = resolver.resolve(request.headers.get("cookie"))
    except AuthInfraError as e:
        logger.error("Session refresh failed: %s", e.message, exc_info=e.cause or e)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE) from e
    if identity is None:
        raise _unauthorized("No hay sesión activa")
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    _clear_cookies(
        response,
        (provider_cookie_name("session-token"), provider_cookie_name("csrf-token")),
    )
    return response
