"""Session cleanup: delete sessions whose expires_at has passed."""

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from cashbook.services.session_store import SessionStore

if TYPE_CHECKING:
    from cashbook.core.config import Settings

logger = logging.getLogger(__name__)


def run_session_cleanup(session: Session, settings: "Settings") -> int:
    """
    Delete expired sessions. Returns the number of rows removed.

    Idempotent: safe to run repeatedly. Resolution already ignores expired
    rows, so this only keeps the table small.
    """
    if not settings.SESSION_CLEANUP_ENABLED:
        logger.info("Session cleanup is disabled (SESSION_CLEANUP_ENABLED=false); skipping.")
        return 0

    now = datetime.now(UTC)
    deleted_count = SessionStore(session).delete_expired_sessions(now=now)

    if deleted_count > 0:
        logger.info(
            "Session cleanup run: now=%s, sessions_deleted=%s",
            now.isoformat(),
            deleted_count,
        )
    return deleted_count
