"""Database connectivity check used at startup and by the readiness probe."""

import os
import sqlite3
from pathlib import Path

from src.config import Config
from src.utils.logging import get_logger

logger = get_logger(__name__)

# sqlite error text -> operator hint
_OPERATIONAL_HINTS = {
    "unable to open database file": "Cannot open database file: {path}. Check file permissions.",
    "database is locked": "Database is locked: {path}. Another process may be using it.",
    "disk I/O error": "Disk I/O error accessing database: {path}. Check disk health.",
}


def check_database_connectivity(db_path: Path | None = None) -> tuple[bool, str | None]:
    """Check that the weather database can be opened and queried.

    Args:
        db_path: Optional path to database file. Uses Config.DATABASE_PATH if not provided.

    Returns:
        Tuple of (success: bool, error_message: str | None)
    """
    db_path = db_path or Config.DATABASE_PATH

    error: str | None = None
    if not db_path.parent.exists():
        error = f"Database directory does not exist: {db_path.parent}"
    elif not os.access(db_path.parent, os.W_OK):
        error = f"Database directory is not writable: {db_path.parent}"
    elif db_path.exists() and not os.access(db_path, os.R_OK | os.W_OK):
        error = f"Database file is not readable/writable: {db_path}"

    if error is None:
        try:
            conn = sqlite3.connect(db_path)
            try:
                conn.execute("SELECT 1")
            finally:
                conn.close()
        except sqlite3.OperationalError as e:
            hints = [h for text, h in _OPERATIONAL_HINTS.items() if text in str(e)]
            error = hints[0].format(path=db_path) if hints else f"Database error: {e}"
        except Exception as e:
            error = f"Unexpected database error: {e}"

    if error:
        logger.error("Database connectivity check failed", extra={"error": error})
        return False, error

    logger.debug("Database connectivity check passed", extra={"db_path": str(db_path)})
    return True, None
