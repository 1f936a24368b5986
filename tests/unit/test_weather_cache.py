"""Unit tests for the weather cache store and its database mixin."""

import json
from datetime import datetime, timedelta

import pytest

from src.db.models import Database
from src.weather.cache import WeatherCache
from src.weather.models import SummaryProvider, WeatherPayload, isoformat_utc

CACHE_KEY = "weather:571103-india"


def make_payload(fetched_at: datetime, temp_c: int = 28, **overrides: object) -> WeatherPayload:
    fields: dict[str, object] = {
        "temp_c": temp_c,
        "humidity": 61,
        "wind_kmh": 12,
        "description": "Partly cloudy",
        "icon": "cloud",
        "forecast_short": "Partly cloudy. High 32C / Low 22C",
        "fetched_at": isoformat_utc(fetched_at),
        "location": "Mysuru, Karnataka, India",
    }
    fields.update(overrides)
    return WeatherPayload(**fields)  # type: ignore[arg-type]


@pytest.fixture
def cache(test_database: Database) -> WeatherCache:
    return WeatherCache(test_database)


def _store_raw(database: Database, data: str, fetched_at: str = "2026-06-01T05:50:00.000Z") -> None:
    database.upsert_weather_cache_row(CACHE_KEY, "571103-india", data, fetched_at)


class TestWeatherCacheRoundTrip:
    """Tests for WeatherCache.write() followed by read()."""

    def test_missing_key_is_none(self, cache: WeatherCache) -> None:
        assert cache.read(CACHE_KEY) is None

    def test_write_then_read(self, cache: WeatherCache, now: datetime) -> None:
        payload = make_payload(now)

        cache.write(CACHE_KEY, "571103-india", payload, SummaryProvider.AI)
        entry = cache.read(CACHE_KEY)

        assert entry is not None
        assert entry.payload == payload
        assert entry.fetched_at == now
        assert entry.provider == "open-meteo"
        assert entry.summary_provider == SummaryProvider.AI

    def test_envelope_format(self, cache: WeatherCache, test_database: Database, now: datetime) -> None:
        cache.write(CACHE_KEY, "571103-india", make_payload(now), SummaryProvider.RULE)

        row = test_database.get_weather_cache_row(CACHE_KEY)

        assert row is not None
        assert row["location_key"] == "571103-india"
        assert row["fetched_at"] == "2026-06-01T06:00:00.000Z"
        envelope = json.loads(row["data"])
        assert envelope["version"] == 1
        assert envelope["provider"] == "open-meteo"
        assert envelope["summary_provider"] == "rule"
        assert envelope["payload"]["fetched_at"] == row["fetched_at"]

    def test_second_write_overwrites(
        self, cache: WeatherCache, test_database: Database, now: datetime
    ) -> None:
        """Upsert keeps exactly one row holding the latest payload."""
        cache.write(CACHE_KEY, "571103-india", make_payload(now, temp_c=20), SummaryProvider.RULE)
        later = now + timedelta(minutes=45)
        cache.write(CACHE_KEY, "571103-india", make_payload(later, temp_c=31), SummaryProvider.AI)

        entry = cache.read(CACHE_KEY)
        assert entry is not None
        assert entry.payload.temp_c == 31
        assert entry.fetched_at == later
        assert entry.summary_provider == SummaryProvider.AI

        with test_database._pool.get_connection() as conn:
            count = conn.execute(
                "SELECT COUNT(*) FROM weather_cache WHERE cache_key = ?", (CACHE_KEY,)
            ).fetchone()[0]
        assert count == 1


class TestWeatherCacheMalformedRows:
    """Unreadable rows are cache misses, never errors."""

    @pytest.mark.parametrize(
        "data",
        [
            "not json {",
            json.dumps(["a", "list"]),
            json.dumps({"version": 1}),
            json.dumps({"version": 1, "payload": "string"}),
            json.dumps({"version": 1, "payload": {"temp_c": 20}}),
            json.dumps(
                {
                    "version": 1,
                    "payload": {
                        "temp_c": "hot",
                        "humidity": 61,
                        "wind_kmh": 12,
                        "description": "Rain",
                        "icon": "rain",
                        "forecast_short": "Rain",
                        "fetched_at": "2026-06-01T05:50:00.000Z",
                        "location": "Mysuru",
                    },
                }
            ),
        ],
    )
    def test_bad_envelope_is_miss(
        self, cache: WeatherCache, test_database: Database, data: str
    ) -> None:
        _store_raw(test_database, data)

        assert cache.read(CACHE_KEY) is None

    def test_unknown_icon_is_miss(
        self, cache: WeatherCache, test_database: Database, now: datetime
    ) -> None:
        payload = make_payload(now).to_dict() | {"icon": "tornado"}
        _store_raw(test_database, json.dumps({"version": 1, "payload": payload}))

        assert cache.read(CACHE_KEY) is None

    def test_unparsable_fetched_at_is_miss(
        self, cache: WeatherCache, test_database: Database, now: datetime
    ) -> None:
        envelope = {"version": 1, "payload": make_payload(now).to_dict()}
        _store_raw(test_database, json.dumps(envelope), fetched_at="yesterday-ish")

        assert cache.read(CACHE_KEY) is None

    def test_missing_provider_fields_use_defaults(
        self, cache: WeatherCache, test_database: Database, now: datetime
    ) -> None:
        envelope = {"payload": make_payload(now).to_dict()}
        _store_raw(test_database, json.dumps(envelope))

        entry = cache.read(CACHE_KEY)

        assert entry is not None
        assert entry.provider == "open-meteo"
        assert entry.summary_provider == SummaryProvider.RULE


class TestCacheEntryAge:
    """Tests for CacheEntry.age_minutes()."""

    def test_floors_to_whole_minutes(self, cache: WeatherCache, now: datetime) -> None:
        cache.write(CACHE_KEY, "571103-india", make_payload(now), SummaryProvider.RULE)
        entry = cache.read(CACHE_KEY)
        assert entry is not None

        assert entry.age_minutes(now + timedelta(minutes=30, seconds=59)) == 30

    def test_never_negative(self, cache: WeatherCache, now: datetime) -> None:
        """Clock skew (entry from the future) reads as age zero."""
        cache.write(CACHE_KEY, "571103-india", make_payload(now), SummaryProvider.RULE)
        entry = cache.read(CACHE_KEY)
        assert entry is not None

        assert entry.age_minutes(now - timedelta(minutes=5)) == 0
