"""Weather domain dataclasses.

These dataclasses flow between the candidate builder, the geocoding resolver,
the forecast fetcher, the cache store and the orchestrator. They are plain
values: network and storage access live in the components that produce them.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal, get_args

WeatherIcon = Literal["sun", "cloud", "rain", "drizzle", "snow", "thunderstorm"]
WEATHER_ICONS: frozenset[str] = frozenset(get_args(WeatherIcon))


class CandidateLabel(str, Enum):
    """Which address fields a location candidate was built from."""

    PINCODE = "pincode"
    PINCODE_DISTRICT = "pincode_district"
    VILLAGE_DISTRICT = "village_district"
    DISTRICT = "district"
    LOCATION_TEXT = "location_text"


class SummaryProvider(str, Enum):
    """Which path produced forecast_short."""

    RULE = "rule"
    AI = "ai"


def round_half_up(value: Any) -> int:
    """Round to the nearest integer, halves toward +infinity; non-finite becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return math.floor(number + 0.5)


def finite_number(value: Any) -> float | None:
    """Return value as a float if it is a finite real number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def isoformat_utc(moment: datetime) -> str:
    """Serialize a datetime as ISO-8601 UTC with a trailing Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime, or None."""
    if not isinstance(value, str) or not value.strip():
        return None
    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    return parsed.astimezone(UTC) if parsed.tzinfo else parsed.replace(tzinfo=UTC)


@dataclass(frozen=True)
class AddressRecord:
    """A caller's stored address. Any field may be missing or blank."""

    user_id: str
    village: str | None = None
    district: str | None = None
    pincode: str | None = None
    location: str | None = None


@dataclass(frozen=True)
class LocationCandidate:
    """One geocoding query derived from an address."""

    query: str
    label: CandidateLabel


@dataclass(frozen=True)
class GeoPoint:
    """A resolved place with finite coordinates."""

    latitude: float
    longitude: float
    name: str | None = None
    country: str | None = None
    admin1: str | None = None  # state
    admin2: str | None = None  # district

    @classmethod
    def from_result(cls, result: Any) -> GeoPoint | None:
        """Build a point from a geocoding result row, or None if unusable."""
        if not isinstance(result, dict):
            return None
        latitude = finite_number(result.get("latitude"))
        longitude = finite_number(result.get("longitude"))
        if latitude is None or longitude is None:
            return None

        def text(key: str) -> str | None:
            value = result.get(key)
            return value.strip() or None if isinstance(value, str) else None

        return cls(
            latitude=latitude,
            longitude=longitude,
            name=text("name"),
            country=text("country"),
            admin1=text("admin1"),
            admin2=text("admin2"),
        )

    def display_name(self, fallback: str) -> str:
        """Join name, district, state and country, deduplicated, or return fallback."""
        parts: list[str] = []
        for part in (self.name, self.admin2, self.admin1, self.country):
            if part and part not in parts:
                parts.append(part)
        return ", ".join(parts) if parts else fallback


@dataclass(frozen=True)
class WeatherPayload:
    """Normalized weather returned to callers and stored in the cache."""

    temp_c: int
    humidity: int
    wind_kmh: int
    description: str
    icon: WeatherIcon
    forecast_short: str
    fetched_at: str  # ISO-8601 UTC
    location: str

    def __post_init__(self) -> None:
        # Numeric fields never carry fractions
        object.__setattr__(self, "temp_c", round_half_up(self.temp_c))
        object.__setattr__(self, "humidity", round_half_up(self.humidity))
        object.__setattr__(self, "wind_kmh", round_half_up(self.wind_kmh))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> WeatherPayload:
        """Rebuild a payload from its dict form.

        Raises:
            ValueError: If a field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError("Weather payload must be an object")

        numbers: dict[str, float] = {}
        for key in ("temp_c", "humidity", "wind_kmh"):
            number = finite_number(data.get(key))
            if number is None:
                raise ValueError(f"Weather payload field '{key}' must be a number")
            numbers[key] = number

        texts: dict[str, str] = {}
        for key in ("description", "icon", "forecast_short", "fetched_at", "location"):
            value = data.get(key)
            if not isinstance(value, str):
                raise ValueError(f"Weather payload field '{key}' must be a string")
            texts[key] = value

        if texts["icon"] not in WEATHER_ICONS:
            raise ValueError(f"Unknown weather icon '{texts['icon']}'")

        return cls(
            temp_c=round_half_up(numbers["temp_c"]),
            humidity=round_half_up(numbers["humidity"]),
            wind_kmh=round_half_up(numbers["wind_kmh"]),
            description=texts["description"],
            icon=texts["icon"],  # type: ignore[arg-type]
            forecast_short=texts["forecast_short"],
            fetched_at=texts["fetched_at"],
            location=texts["location"],
        )


@dataclass(frozen=True)
class CacheEntry:
    """The last successful result stored for a cache key."""

    cache_key: str
    payload: WeatherPayload
    fetched_at: datetime
    provider: str
    summary_provider: SummaryProvider

    def age_minutes(self, now: datetime) -> int:
        """Whole minutes since the entry was fetched, never negative."""
        elapsed = (now - self.fetched_at).total_seconds()
        return max(0, math.floor(elapsed / 60))
