"""Password hashing, session token generation and session cookie extraction."""

import secrets
from dataclasses import dataclass

import bcrypt
from starlette.requests import cookie_parser

from cashbook.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

SESSION_TOKEN_BYTES = 32

CUSTOM_AUTH_COOKIE = "custom-auth-token"
GENERIC_SESSION_COOKIE = "session-token"


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def generate_session_token() -> str:
    """Return a new opaque session token. Treat as a secret: never log it."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


@dataclass(frozen=True)
class CookieTokenSource:
    """One cookie name that may carry a session token."""

    name: str

    def extract(self, cookies: dict[str, str]) -> str | None:
        """Return the token in this cookie, or None when absent or empty."""
        value = cookies.get(self.name, "").strip()
        return value or None


def session_cookie_names(provider: str | None = None) -> tuple[str, ...]:
    """Recognized session cookie names in priority order."""
    provider = provider or settings.SESSION_COOKIE_PROVIDER
    return (
        CUSTOM_AUTH_COOKIE,
        f"{provider}.session-token",
        GENERIC_SESSION_COOKIE,
    )


def provider_cookie_name(suffix: str, provider: str | None = None) -> str:
    """Name of a provider-issued cookie, e.g. '<provider>.csrf-token'."""
    return f"{provider or settings.SESSION_COOKIE_PROVIDER}.{suffix}"


def token_sources(provider: str | None = None) -> tuple[CookieTokenSource, ...]:
    """Ordered token sources; the first one holding a non-empty value wins."""
    return tuple(CookieTokenSource(name) for name in session_cookie_names(provider))


def has_session_cookie(
    cookie_header: str | None,
    sources: tuple[CookieTokenSource, ...] | None = None,
) -> bool:
    """Cheap pre-check: does any recognized cookie name appear in the header at all."""
    if not cookie_header:
        return False
    sources = sources if sources is not None else token_sources()
    return any(source.name in cookie_header for source in sources)


def extract_session_token(
    cookie_header: str | None,
    sources: tuple[CookieTokenSource, ...] | None = None,
) -> str | None:
    """
    Return the session token from the first recognized cookie that carries one.

    An empty value does not stop the search; the next source in priority order is tried.
    Returns None when no source yields a token.
    """
    if not cookie_header:
        return None
    sources = sources if sources is not None else token_sources()
    cookies = cookie_parser(cookie_header)
    for source in sources:
        token = source.extract(cookies)
        if token is not None:
            return token
    return None
