"""Query timing for the weather database."""

import sqlite3
import time
from typing import Any

from src.config import Config
from src.utils.logging import get_logger

logger = get_logger(__name__)

QUERY_SNIPPET_MAX_LENGTH = 200
PARAMS_SNIPPET_MAX_LENGTH = 100


def _snippet(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def execute_with_timing(
    conn: sqlite3.Connection,
    query: str,
    params: tuple[Any, ...] = (),
    *,
    should_log: bool,
    slow_query_threshold_ms: float,
) -> sqlite3.Cursor:
    """Execute a query, logging it when it is slow (or always at DEBUG).

    Args:
        conn: SQLite connection
        query: SQL query string
        params: Query parameters
        should_log: Whether to time the query at all
        slow_query_threshold_ms: Queries at or above this are logged as warnings

    Returns:
        SQLite cursor with results
    """
    if not should_log:
        return conn.execute(query, params)

    start_time = time.perf_counter()
    cursor = conn.execute(query, params)
    elapsed_ms = round((time.perf_counter() - start_time) * 1000, 2)

    query_snippet = _snippet(" ".join(query.split()), QUERY_SNIPPET_MAX_LENGTH)
    if elapsed_ms >= slow_query_threshold_ms:
        logger.warning(
            "Slow query detected",
            extra={
                "query_snippet": query_snippet,
                # Cache rows carry whole JSON envelopes
                "params_snippet": _snippet(str(params), PARAMS_SNIPPET_MAX_LENGTH),
                "elapsed_ms": elapsed_ms,
                "threshold_ms": slow_query_threshold_ms,
            },
        )
    elif Config.LOG_LEVEL == "DEBUG":
        logger.debug(
            "Query executed",
            extra={"query_snippet": query_snippet, "elapsed_ms": elapsed_ms},
        )
    return cursor


def init_query_logging() -> tuple[bool, float]:
    """Return (should_log_queries, slow_query_threshold_ms) from Config."""
    should_log = Config.LOG_LEVEL == "DEBUG" or Config.is_development()
    return should_log, Config.SLOW_QUERY_THRESHOLD_MS
