"""Session and user persistence used by the authorization path (SQLAlchemy-backed)."""

import logging
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from cashbook.models import AuthSession, User
from cashbook.models.base import new_id
from cashbook.models.user import normalize_email

logger = logging.getLogger(__name__)


class AuthInfraError(Exception):
    """Raised when the session/user store is unreachable or a query fails (not the same as 'no session')."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class SessionStore:
    """
    Lookups and writes for sessions and users.

    Every SQLAlchemy failure surfaces as AuthInfraError. On PostgreSQL the
    active-session lookup is bounded by timeout_ms via a transaction-local
    statement_timeout.
    """

    def __init__(self, db: Session, timeout_ms: int | None = None) -> None:
        self.db = db
        self.timeout_ms = timeout_ms

    def _is_postgres(self) -> bool:
        return self.db.get_bind().dialect.name == "postgresql"

    @contextmanager
    def _bounded(self) -> Iterator[None]:
        """Apply statement_timeout for the duration of one lookup (PostgreSQL only)."""
        if not self.timeout_ms or not self._is_postgres():
            yield
            return
        self.db.execute(text(f"SET LOCAL statement_timeout = {int(self.timeout_ms)}"))
        yield
        # Not reached on failure: a cancelled statement aborts the transaction anyway.
        self.db.execute(text("SET LOCAL statement_timeout TO DEFAULT"))

    def find_active_session(
        self, token: str, now: datetime | None = None
    ) -> AuthSession | None:
        """Return the session whose token matches and whose expires_at is strictly after now, with its user loaded."""
        now = now or datetime.now(UTC)
        try:
            with self._bounded():
                return (
                    self.db.query(AuthSession)
                    .options(joinedload(AuthSession.user))
                    .filter(AuthSession.token == token, AuthSession.expires_at > now)
                    .first()
                )
        except SQLAlchemyError as e:
            raise AuthInfraError("Session lookup failed", cause=e) from e

    def get_user(self, user_id: str) -> User | None:
        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as e:
            raise AuthInfraError("User lookup failed", cause=e) from e

    def get_user_by_email(self, email: str) -> User | None:
        email = normalize_email(email)
        if not email:
            return None
        try:
            return self.db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as e:
            raise AuthInfraError("User lookup failed", cause=e) from e

    def save_user(self, user: User) -> User:
        """Insert or update a user row and commit."""
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except SQLAlchemyError as e:
            self.db.rollback()
            raise AuthInfraError("User write failed", cause=e) from e

    def create_session(
        self,
        user: User,
        token: str,
        expires_in: timedelta,
        now: datetime | None = None,
    ) -> AuthSession:
        """Persist a new session for user that expires expires_in from now."""
        now = now or datetime.now(UTC)
        session = AuthSession(
            id=new_id(),
            token=token,
            user_id=user.id,
            created_at=now,
            updated_at=now,
            expires_at=now + expires_in,
        )
        try:
            self.db.add(session)
            self.db.commit()
            self.db.refresh(session)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise AuthInfraError("Session write failed", cause=e) from e
        logger.info("Session created: user_id=%s expires_at=%s", user.id, session.expires_at)
        return session

    def delete_sessions_by_token(self, token: str) -> int:
        """Delete every session row holding token. Returns the number of rows removed."""
        try:
            deleted = (
                self.db.query(AuthSession)
                .filter(AuthSession.token == token)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return deleted
        except SQLAlchemyError as e:
            self.db.rollback()
            raise AuthInfraError("Session delete failed", cause=e) from e

    def delete_expired_sessions(self, now: datetime | None = None) -> int:
        """Delete sessions with expires_at <= now. Resolution never depends on this having run."""
        now = now or datetime.now(UTC)
        try:
            deleted = (
                self.db.query(AuthSession)
                .filter(AuthSession.expires_at <= now)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return deleted
        except SQLAlchemyError as e:
            self.db.rollback()
            raise AuthInfraError("Expired session purge failed", cause=e) from e
