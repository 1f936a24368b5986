"""Per-thread SQLite connections for the weather database.

Flask serves requests on worker threads; each thread keeps one connection
open for its lifetime instead of reconnecting on every profile or cache
lookup. Connections of exited threads are closed the next time a thread
connects.
"""

import sqlite3
import threading
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from src.utils.logging import get_logger

logger = get_logger(__name__)

# Seconds to wait for a competing writer before raising "database is locked"
BUSY_TIMEOUT_SECONDS = 30.0


def _close_quietly(conn: sqlite3.Connection) -> None:
    try:
        conn.close()
    except sqlite3.Error as e:
        logger.debug("Ignoring error while closing connection", extra={"error": str(e)})


class ConnectionPool:
    """Thread-local SQLite connection pool."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self._local = threading.local()
        self._lock = threading.Lock()
        self._connections: dict[int, sqlite3.Connection] = {}

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=BUSY_TIMEOUT_SECONDS,
        )
        conn.row_factory = sqlite3.Row
        # WAL lets cache reads proceed while another request writes
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _forget_dead_threads(self) -> None:
        """Close connections owned by threads that have exited (lock held)."""
        alive = {t.ident for t in threading.enumerate()}
        for thread_id in [tid for tid in self._connections if tid not in alive]:
            _close_quietly(self._connections.pop(thread_id))

    def _thread_connection(self) -> sqlite3.Connection:
        conn: sqlite3.Connection | None = getattr(self._local, "connection", None)
        if conn is not None:
            try:
                conn.execute("SELECT 1")
                return conn
            except sqlite3.Error:
                logger.warning(
                    "Pooled connection is broken, reconnecting",
                    extra={"db_path": str(self.db_path)},
                )

        conn = self._connect()
        self._local.connection = conn
        with self._lock:
            self._forget_dead_threads()
            self._connections[threading.get_ident()] = conn
            total = len(self._connections)
        logger.debug(
            "Opened database connection",
            extra={"db_path": str(self.db_path), "total_connections": total},
        )
        return conn

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection]:
        """Yield this thread's connection, rolling back if the block raises.

        The connection stays open after the block for reuse by the same thread.
        """
        conn = self._thread_connection()
        try:
            yield conn
        except Exception:
            try:
                conn.rollback()
            except sqlite3.Error:
                logger.debug("Rollback failed", extra={"db_path": str(self.db_path)})
            raise

    def close_all(self) -> None:
        """Close every pooled connection (shutdown and test teardown)."""
        with self._lock:
            for conn in self._connections.values():
                _close_quietly(conn)
            self._connections.clear()
        self._local.connection = None
        logger.debug("Closed pooled connections", extra={"db_path": str(self.db_path)})

    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)
