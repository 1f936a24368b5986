"""Base database infrastructure.

DatabaseBase owns the connection pool, timed query execution and schema
migrations. Entity operations are added by mixins in sibling modules.
"""

import sqlite3
from pathlib import Path
from typing import Any

from yoyo import get_backend, read_migrations

from src.config import Config
from src.utils.connection_pool import ConnectionPool
from src.utils.db_helpers import execute_with_timing, init_query_logging
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Path to migrations directory
MIGRATIONS_DIR = Path(__file__).parent.parent.parent.parent / "migrations"


class DatabaseBase:
    """Connection pooling, query timing and yoyo migrations."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or Config.DATABASE_PATH
        self._should_log_queries, self._slow_query_threshold_ms = init_query_logging()
        self._pool = ConnectionPool(self.db_path)
        self._init_db()

    def close(self) -> None:
        """Close all pooled connections (application shutdown)."""
        self._pool.close_all()

    def _execute_with_timing(
        self,
        conn: sqlite3.Connection,
        query: str,
        params: tuple[Any, ...] = (),
    ) -> sqlite3.Cursor:
        return execute_with_timing(
            conn,
            query,
            params,
            should_log=self._should_log_queries,
            slow_query_threshold_ms=self._slow_query_threshold_ms,
        )

    def _init_db(self) -> None:
        """Apply pending yoyo migrations."""
        logger.debug("Initializing weather database", extra={"db_path": str(self.db_path)})
        backend = get_backend(f"sqlite:///{self.db_path}")
        migrations = read_migrations(str(MIGRATIONS_DIR))
        try:
            with backend.lock():
                pending = backend.to_apply(migrations)
                if pending:
                    logger.info("Applying database migrations", extra={"count": len(pending)})
                backend.apply_migrations(pending)
        finally:
            backend.connection.close()
