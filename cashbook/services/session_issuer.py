"""
Session issuers: the two sign-in flows that create sessions for the same resolver.

TestSessionIssuer  - seeded test account (test login link and credentials sign-in).
OAuthSessionIssuer - sign-in callback for an identity verified by the OAuth provider.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from cashbook.core.security import generate_session_token, hash_password, verify_password
from cashbook.models import User
from cashbook.models.user import (
    ROLE_USER,
    ROLE_VALUES,
    TEST_USER_EMAIL,
    TEST_USER_ID,
    TEST_USER_NAME,
    RoleName,
    is_test_user_email,
    normalize_email,
)
from cashbook.schemas.auth import CurrentUser
from cashbook.services.session_resolver import identity_from_user
from cashbook.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    """A freshly created session. token is the cookie value; never log it."""

    token: str
    session_id: str
    expires_at: datetime
    identity: CurrentUser


class SessionIssuer:
    """Base issuer: creates a session row for a user and returns the resolved identity."""

    def __init__(self, store: SessionStore, expires_in: timedelta) -> None:
        self.store = store
        self.expires_in = expires_in

    def issue_for(self, user: User) -> IssuedSession:
        session = self.store.create_session(
            user, token=generate_session_token(), expires_in=self.expires_in
        )
        return IssuedSession(
            token=session.token,
            session_id=session.id,
            expires_at=session.expires_at,
            identity=identity_from_user(user),
        )


class TestSessionIssuer(SessionIssuer):
    """Issues sessions for the seeded test account (always role USER)."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(
        self,
        store: SessionStore,
        expires_in: timedelta,
        password: str | None = None,
    ) -> None:
        super().__init__(store, expires_in)
        self.password = password

    def ensure_test_user(self) -> User:
        """Create or reset the test account: name, verified email, role USER, password hash."""
        user = self.store.get_user_by_email(TEST_USER_EMAIL)
        if user is None:
            user = User(id=TEST_USER_ID, email=TEST_USER_EMAIL)
        user.name = TEST_USER_NAME
        user.email_verified = True
        user.role = ROLE_USER
        if self.password and not (
            user.password_hash and verify_password(self.password, user.password_hash)
        ):
            user.password_hash = hash_password(self.password)
        return self.store.save_user(user)

    def issue(self) -> IssuedSession:
        return self.issue_for(self.ensure_test_user())

    def authenticate(self, email: str, password: str) -> IssuedSession | None:
        """Credentials sign-in. Only the test account has a password; returns None on any mismatch."""
        if not is_test_user_email(normalize_email(email)):
            return None
        user = self.store.get_user_by_email(TEST_USER_EMAIL)
        if user is None or not user.password_hash:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return self.issue_for(user)


class OAuthSessionIssuer(SessionIssuer):
    """
    Sign-in callback for a provider-verified profile.

    New users, and existing users without a valid role, are given
    default_role. The test account email is always kept at USER.
    """

    def __init__(
        self,
        store: SessionStore,
        expires_in: timedelta,
        default_role: RoleName,
    ) -> None:
        super().__init__(store, expires_in)
        self.default_role = default_role

    def sign_in(self, email: str, name: str | None = None) -> IssuedSession:
        email = normalize_email(email)
        if "@" not in email:
            raise ValueError("OAuth profile has no usable email")
        user = self.store.get_user_by_email(email)
        if user is None:
            user = User(
                email=email,
                name=(name or email.split("@")[0]).strip(),
                email_verified=True,
                role=self.default_role,
            )
            logger.info("OAuth sign-in created user with role=%s", self.default_role)
        elif user.role not in ROLE_VALUES:
            user.role = self.default_role
            logger.info("OAuth sign-in assigned missing role=%s to user_id=%s", self.default_role, user.id)
        if is_test_user_email(email):
            user.role = ROLE_USER
        user = self.store.save_user(user)
        return self.issue_for(user)
