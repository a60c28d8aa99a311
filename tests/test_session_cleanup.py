"""Unit and SQLite-backed tests for run_session_cleanup."""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from cashbook.models import AuthSession
from cashbook.services.session_cleanup import run_session_cleanup
from cashbook.services.session_store import AuthInfraError
from db_support import add_session, add_user, make_session_factory


def _settings(enabled: bool = True) -> MagicMock:
    settings = MagicMock()
    settings.SESSION_CLEANUP_ENABLED = enabled
    return settings


class TestCleanupDisabled(unittest.TestCase):
    """When SESSION_CLEANUP_ENABLED is False, nothing is queried."""

    def test_returns_zero_and_does_not_query(self) -> None:
        session = MagicMock()
        self.assertEqual(run_session_cleanup(session, _settings(False)), 0)
        session.query.assert_not_called()


class TestCleanupWithMockSession(unittest.TestCase):
    def test_returns_deleted_count(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 3
        self.assertEqual(run_session_cleanup(session, _settings()), 3)
        session.commit.assert_called_once()

    def test_database_error_is_infra_error(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.side_effect = OperationalError(
            "DELETE", {}, Exception("connection refused")
        )
        with self.assertRaises(AuthInfraError):
            run_session_cleanup(session, _settings())
        session.rollback.assert_called_once()


class TestCleanupAgainstDatabase(unittest.TestCase):
    """Only sessions whose expires_at has passed are removed."""

    def test_deletes_only_expired(self) -> None:
        db = make_session_factory()()
        try:
            add_user(db, "u1", "user1@example.com")
            add_session(db, "u1", "live")
            add_session(db, "u1", "old", expires_in=timedelta(hours=-2))
            add_session(db, "u1", "older", expires_in=timedelta(days=-10))
            self.assertEqual(run_session_cleanup(db, _settings()), 2)
            self.assertEqual([s.token for s in db.query(AuthSession).all()], ["live"])
            self.assertEqual(run_session_cleanup(db, _settings()), 0)
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
