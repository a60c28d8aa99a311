"""Core app configuration and database."""

from cashbook.core.config import get_settings, settings
from cashbook.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
