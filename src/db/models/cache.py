"""Weather cache database operations mixin.

Rows are keyed by cache key and hold an opaque JSON envelope. Interpreting the
envelope (freshness, validation) is the job of src.weather.cache.WeatherCache.
"""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any

from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.utils.connection_pool import ConnectionPool

logger = get_logger(__name__)

WEATHER_TOPIC = "weather"


class CacheMixin:
    """Mixin providing weather cache database operations."""

    _pool: ConnectionPool

    def _execute_with_timing(
        self,
        conn: sqlite3.Connection,
        query: str,
        params: tuple[Any, ...] = (),
    ) -> sqlite3.Cursor:
        """Execute query with timing (defined in base class)."""
        raise NotImplementedError

    def get_weather_cache_row(self, cache_key: str) -> dict[str, Any] | None:
        """Get the raw cache row for a key.

        Args:
            cache_key: Cache key (e.g., "weather:mysuru-karnataka-india")

        Returns:
            Dict with cache_key, location_key, data and fetched_at, or None
        """
        with self._pool.get_connection() as conn:
            row = self._execute_with_timing(
                conn,
                """
                SELECT cache_key, location_key, data, fetched_at
                FROM weather_cache
                WHERE cache_key = ?
                """,
                (cache_key,),
            ).fetchone()

        if not row:
            return None
        return dict(row)

    def upsert_weather_cache_row(
        self,
        cache_key: str,
        location_key: str,
        data: str,
        fetched_at: str,
    ) -> None:
        """Insert or overwrite the cache row for a key.

        Args:
            cache_key: Cache key
            location_key: Normalized location token
            data: Serialized JSON envelope
            fetched_at: ISO-8601 UTC timestamp of the payload
        """
        with self._pool.get_connection() as conn:
            self._execute_with_timing(
                conn,
                """
                INSERT INTO weather_cache (cache_key, topic, location_key, data, fetched_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(cache_key) DO UPDATE SET
                    topic = excluded.topic,
                    location_key = excluded.location_key,
                    data = excluded.data,
                    fetched_at = excluded.fetched_at
                """,
                (cache_key, WEATHER_TOPIC, location_key, data, fetched_at),
            )
            conn.commit()

        logger.debug("Weather cache row upserted", extra={"cache_key": cache_key})
