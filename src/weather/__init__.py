"""Location-aware weather resolution with a two-tier cache.

Usage:
    from src.weather import build_weather_service

    outcome = build_weather_service(db).resolve(user_id)
    return outcome.body, outcome.http_status
"""

from src.weather.errors import ForecastUnavailableError, WeatherConfigError, WeatherError
from src.weather.models import (
    AddressRecord,
    CacheEntry,
    CandidateLabel,
    GeoPoint,
    LocationCandidate,
    SummaryProvider,
    WeatherPayload,
)
from src.weather.service import OutcomeStatus, WeatherOutcome, WeatherService, build_weather_service
from src.weather.settings import WeatherSettings

__all__ = [
    "AddressRecord",
    "CacheEntry",
    "CandidateLabel",
    "ForecastUnavailableError",
    "GeoPoint",
    "LocationCandidate",
    "OutcomeStatus",
    "SummaryProvider",
    "WeatherConfigError",
    "WeatherError",
    "WeatherOutcome",
    "WeatherPayload",
    "WeatherService",
    "WeatherSettings",
    "build_weather_service",
]
