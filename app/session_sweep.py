"""
CLI entrypoint for the session sweep job. Run from cron, e.g.:

  python -m app.session_sweep

Or daily: 0 3 * * * cd /path/to/keystone && .venv/bin/python -m app.session_sweep
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging_config import configure_logging
from app.core.security import get_token_issuer
from app.services.session_sweep import run_session_sweep

logger = logging.getLogger(__name__)


def main() -> int:
    """Clear stored refresh tokens that can no longer be used."""
    configure_logging(get_settings().LOG_LEVEL)
    db = SessionLocal()
    try:
        cleared = run_session_sweep(db, get_token_issuer())
        logger.info("Session sweep completed: sessions_cleared=%s", cleared)
        return 0
    except Exception as e:
        logger.exception("Session sweep failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
