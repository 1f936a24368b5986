"""Weather resolution orchestrator.

Composes the candidate builder, cache store, geocoding resolver and forecast
fetcher and applies the two-tier freshness policy:

- cache age <= fresh TTL: serve the cached payload, no network calls
- otherwise geocode and fetch; on success overwrite the cache
- on geocoding or forecast failure: serve the cached payload if its age is
  <= stale TTL, else report the weather as unavailable

The caller is authenticated before resolve() is called. Every outcome carries
the telemetry fields for the single terminal event the HTTP layer emits.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from src.utils.logging import get_logger
from src.weather.cache import CacheBackend, WeatherCache
from src.weather.candidates import build_location_candidates, cache_key_for, location_key
from src.weather.errors import ForecastUnavailableError
from src.weather.forecast import ForecastFetcher
from src.weather.geocoding import GeocodingResolver
from src.weather.models import AddressRecord, CacheEntry, WeatherPayload, utc_now
from src.weather.settings import WeatherSettings
from src.weather.summary import get_summary_enhancer

logger = get_logger(__name__)

MESSAGE_PROFILE_MISSING = "Weather unavailable: profile not found"
MESSAGE_NO_LOCATION = "Weather unavailable: set district or pincode"
MESSAGE_GEOCODE_STALE = "Serving cached weather; location lookup failed"
MESSAGE_GEOCODE_FAILED = "Weather unavailable: location could not be resolved"
MESSAGE_UPSTREAM_STALE = "Serving cached weather while provider is unavailable"
MESSAGE_UPSTREAM_ERROR = "Weather unavailable: weather provider unavailable"


class OutcomeStatus(str, Enum):
    """Terminal state of one weather request."""

    PROFILE_MISSING = "profile_missing"
    NO_LOCATION = "no_location"
    CACHE_HIT = "cache_hit"
    GEOCODE_STALE_FALLBACK = "geocode_stale_fallback"
    GEOCODE_FAILED = "geocode_failed"
    SUCCESS = "success"
    STALE_CACHE_FALLBACK = "stale_cache_fallback"
    UPSTREAM_ERROR = "upstream_error"


@dataclass(frozen=True)
class WeatherOutcome:
    """Result of WeatherService.resolve: response fields plus telemetry."""

    status: OutcomeStatus
    data: WeatherPayload | None = None
    cached: bool = False
    stale: bool | None = None
    cache_age_minutes: int | None = None
    message: str | None = None
    telemetry: dict[str, Any] = field(default_factory=dict)

    @property
    def http_status(self) -> int:
        # Only an upstream failure with nothing to fall back on is a transport error
        return 502 if self.status is OutcomeStatus.UPSTREAM_ERROR else 200

    @property
    def body(self) -> dict[str, Any]:
        """JSON response body; optional fields are omitted when not applicable."""
        body: dict[str, Any] = {
            "data": self.data.to_dict() if self.data else None,
            "cached": self.cached,
        }
        if self.stale is not None:
            body["stale"] = self.stale
        if self.cache_age_minutes is not None:
            body["cache_age_minutes"] = self.cache_age_minutes
        if self.message:
            body["message"] = self.message
        return body


class AddressStore(Protocol):
    """Read access to callers' stored addresses."""

    def get_address(self, user_id: str) -> AddressRecord | None: ...


class WeatherService:
    """Resolves current weather for an authenticated caller."""

    def __init__(
        self,
        settings: WeatherSettings,
        address_store: AddressStore,
        cache: WeatherCache,
        resolver: GeocodingResolver,
        fetcher: ForecastFetcher,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.address_store = address_store
        self.cache = cache
        self.resolver = resolver
        self.fetcher = fetcher
        self.clock = clock

    def resolve(self, caller_id: str) -> WeatherOutcome:
        """Run the resolution pipeline for one caller.

        Args:
            caller_id: Authenticated caller identity

        Returns:
            WeatherOutcome describing the terminal state

        Raises:
            Exception: Address store failures propagate to the HTTP layer
        """
        address = self.address_store.get_address(caller_id)
        if address is None:
            return WeatherOutcome(
                status=OutcomeStatus.PROFILE_MISSING,
                message=MESSAGE_PROFILE_MISSING,
            )

        candidates = build_location_candidates(address, self.settings)
        if not candidates:
            return WeatherOutcome(status=OutcomeStatus.NO_LOCATION, message=MESSAGE_NO_LOCATION)

        primary = candidates[0]
        cache_key = cache_key_for(primary)
        entry = self.cache.read(cache_key)
        age = entry.age_minutes(self.clock()) if entry else None

        if entry is not None and age is not None and age <= self.settings.fresh_ttl_minutes:
            return WeatherOutcome(
                status=OutcomeStatus.CACHE_HIT,
                data=entry.payload,
                cached=True,
                stale=False,
                cache_age_minutes=age,
                telemetry={"cache_key": cache_key, "cache_age_minutes": age},
            )

        match = self.resolver.resolve(candidates)
        if match is None:
            fallback = self._stale_fallback(
                entry, age, OutcomeStatus.GEOCODE_STALE_FALLBACK, MESSAGE_GEOCODE_STALE
            )
            if fallback is not None:
                return fallback
            return WeatherOutcome(
                status=OutcomeStatus.GEOCODE_FAILED,
                message=MESSAGE_GEOCODE_FAILED,
                telemetry={"cache_key": cache_key, "candidates": len(candidates)},
            )

        try:
            result = self.fetcher.fetch(match.point, match.candidate.query)
        except ForecastUnavailableError as e:
            logger.warning(
                "Weather provider unavailable",
                extra={"cache_key": cache_key, "error": str(e)},
            )
            fallback = self._stale_fallback(
                entry, age, OutcomeStatus.STALE_CACHE_FALLBACK, MESSAGE_UPSTREAM_STALE
            )
            if fallback is not None:
                return fallback
            return WeatherOutcome(
                status=OutcomeStatus.UPSTREAM_ERROR,
                message=MESSAGE_UPSTREAM_ERROR,
                telemetry={"cache_key": cache_key, "error": str(e)},
            )

        self.cache.write(
            cache_key,
            location_key(primary.query),
            result.payload,
            result.summary_provider,
        )
        return WeatherOutcome(
            status=OutcomeStatus.SUCCESS,
            data=result.payload,
            cached=False,
            stale=False,
            telemetry={
                "cache_key": cache_key,
                "location_source": match.candidate.label.value,
                "geocode_strategy": match.strategy,
                "provider": self.fetcher.provider_name,
                "summary_provider": result.summary_provider.value,
            },
        )

    def _stale_fallback(
        self,
        entry: CacheEntry | None,
        age: int | None,
        status: OutcomeStatus,
        message: str,
    ) -> WeatherOutcome | None:
        if entry is None or age is None or age > self.settings.stale_ttl_minutes:
            return None
        return WeatherOutcome(
            status=status,
            data=entry.payload,
            cached=True,
            stale=True,
            cache_age_minutes=age,
            message=message,
            telemetry={"cache_key": entry.cache_key, "cache_age_minutes": age},
        )


def build_weather_service(
    database: Any,
    settings: WeatherSettings | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> WeatherService:
    """Wire a WeatherService over a Database (address store and cache backend)."""
    settings = settings or WeatherSettings.from_config()
    backend: CacheBackend = database
    return WeatherService(
        settings=settings,
        address_store=database,
        cache=WeatherCache(backend),
        resolver=GeocodingResolver(settings),
        fetcher=ForecastFetcher(settings, get_summary_enhancer(settings), clock=clock),
        clock=clock,
    )
