"""SQLAlchemy ORM models."""

from cashbook.models.base import Base
from cashbook.models.session import AuthSession
from cashbook.models.transaction import Transaction
from cashbook.models.user import User

__all__ = ["AuthSession", "Base", "Transaction", "User"]
