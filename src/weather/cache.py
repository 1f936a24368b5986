"""Weather cache store.

Wraps the weather_cache table with the envelope format and freshness
bookkeeping. A row that cannot be fully interpreted reads as a miss; the
orchestrator never sees partial cache data.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from src.utils.logging import get_logger
from src.weather.models import (
    CacheEntry,
    SummaryProvider,
    WeatherPayload,
    parse_timestamp,
)

logger = get_logger(__name__)

ENVELOPE_VERSION = 1
DEFAULT_PROVIDER = "open-meteo"


class CacheBackend(Protocol):
    """Row-level storage the cache store runs on (the Database mixin)."""

    def get_weather_cache_row(self, cache_key: str) -> dict[str, Any] | None: ...

    def upsert_weather_cache_row(
        self, cache_key: str, location_key: str, data: str, fetched_at: str
    ) -> None: ...


class WeatherCache:
    """Reads and writes cache envelopes keyed by cache key."""

    def __init__(
        self,
        backend: CacheBackend,
        provider: str = DEFAULT_PROVIDER,
    ) -> None:
        self.backend = backend
        self.provider = provider

    def read(self, cache_key: str) -> CacheEntry | None:
        """Return the stored entry, or None if missing or unreadable."""
        row = self.backend.get_weather_cache_row(cache_key)
        if row is None:
            return None

        try:
            envelope = json.loads(row["data"])
        except (TypeError, ValueError):
            logger.warning("Weather cache row is not valid JSON", extra={"cache_key": cache_key})
            return None

        if not isinstance(envelope, dict) or not isinstance(envelope.get("payload"), dict):
            logger.warning("Weather cache envelope is malformed", extra={"cache_key": cache_key})
            return None

        try:
            payload = WeatherPayload.from_dict(envelope["payload"])
        except ValueError as e:
            logger.warning(
                "Weather cache payload is invalid",
                extra={"cache_key": cache_key, "error": str(e)},
            )
            return None

        fetched_at = parse_timestamp(row.get("fetched_at"))
        if fetched_at is None:
            logger.warning("Weather cache fetched_at is unparsable", extra={"cache_key": cache_key})
            return None

        summary_provider = (
            SummaryProvider.AI if envelope.get("summary_provider") == "ai" else SummaryProvider.RULE
        )
        provider = envelope.get("provider")
        return CacheEntry(
            cache_key=cache_key,
            payload=payload,
            fetched_at=fetched_at,
            provider=provider if isinstance(provider, str) else self.provider,
            summary_provider=summary_provider,
        )

    def write(
        self,
        cache_key: str,
        location_key: str,
        payload: WeatherPayload,
        summary_provider: SummaryProvider,
    ) -> None:
        """Overwrite the entry for cache_key with a freshly fetched payload."""
        envelope = {
            "version": ENVELOPE_VERSION,
            "provider": self.provider,
            "summary_provider": summary_provider.value,
            "payload": payload.to_dict(),
        }
        self.backend.upsert_weather_cache_row(
            cache_key=cache_key,
            location_key=location_key,
            data=json.dumps(envelope),
            fetched_at=payload.fetched_at,
        )
        logger.debug("Weather cached", extra={"cache_key": cache_key})
