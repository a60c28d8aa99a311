"""
CLI entrypoint for the expired-session cleanup job. Run from cron, e.g.:

  python -m cashbook.session_cleanup

Or daily: 0 3 * * * cd /path/to/cashbook && .venv/bin/python -m cashbook.session_cleanup
"""

import logging
import sys

from cashbook.core.config import get_settings
from cashbook.core.database import SessionLocal
from cashbook.services.session_cleanup import run_session_cleanup
from cashbook.services.session_store import AuthInfraError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete sessions whose expires_at has passed."""
    settings = get_settings()
    db = SessionLocal()
    try:
        sessions_deleted = run_session_cleanup(db, settings)
        logger.info("Session cleanup completed: sessions_deleted=%s", sessions_deleted)
        return 0
    except AuthInfraError as e:
        logger.exception("Session cleanup failed: %s", e.message)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
