"""ORM model for application users (auth and RBAC)."""

from typing import Literal

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String, func
from sqlalchemy.orm import relationship

from cashbook.models.base import Base, new_id

RoleName = Literal["USER", "ADMIN"]

ROLE_USER: RoleName = "USER"
ROLE_ADMIN: RoleName = "ADMIN"
ROLE_VALUES: frozenset[str] = frozenset({ROLE_USER, ROLE_ADMIN})

# Seeded account used for demos: cannot be deleted and always resolves to USER.
TEST_USER_ID = "test-user-id"
TEST_USER_EMAIL = "test-user@example.com"
TEST_USER_NAME = "Usuario de Prueba"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_test_user_email(email: str | None) -> bool:
    return email == TEST_USER_EMAIL


def effective_role(email: str | None, role: str | None) -> RoleName | None:
    """
    Role an identity resolves to.

    The test account is always USER, whatever is stored. Values outside the
    closed role set resolve to None.
    """
    if is_test_user_email(email):
        return ROLE_USER
    if role in ROLE_VALUES:
        return role  # type: ignore[return-value]
    return None


class User(Base):
    """
    User account for session authentication and role-based access control.

    role: 'USER' (read-only on transactions) or 'ADMIN' (full read/write)
    """

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('USER', 'ADMIN')", name="ck_users_role"),)

    id = Column(String(64), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    phone = Column(String(32), nullable=True)
    role = Column(String(16), nullable=False, default=ROLE_USER)
    password_hash = Column(String(255), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    sessions = relationship(
        "AuthSession",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    transactions = relationship(
        "Transaction",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
