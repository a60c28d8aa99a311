"""SQLAlchemy declarative Base and shared model configuration."""

import uuid

from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    """Primary key for new rows: random, URL-safe hex string."""
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass
