"""Forecast fetcher backed by the Open-Meteo forecast API.

Open-Meteo provides current conditions and daily aggregates without an API key.
API Documentation: https://open-meteo.com/en/docs

The response is normalized into a WeatherPayload: WMO weather codes map to a
small icon set, numeric values are rounded to integers and a one-line summary
is attached (rule-based, optionally replaced by the configured enhancer).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import requests

from src.utils.logging import get_logger
from src.weather.errors import ForecastUnavailableError
from src.weather.models import (
    GeoPoint,
    SummaryProvider,
    WeatherIcon,
    WeatherPayload,
    finite_number,
    isoformat_utc,
    round_half_up,
    utc_now,
)
from src.weather.settings import WeatherSettings
from src.weather.summary import SummaryEnhancer, WeatherFacts, build_rule_summary

logger = get_logger(__name__)

CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,wind_speed_10m,weather_code"
DAILY_FIELDS = "temperature_2m_max,temperature_2m_min,precipitation_probability_max"

# WMO weather interpretation codes -> (icon, description)
_WMO_GROUPS: list[tuple[frozenset[int], WeatherIcon, str]] = [
    (frozenset({0}), "sun", "Clear sky"),
    (frozenset({1, 2}), "cloud", "Partly cloudy"),
    (frozenset({3, 45, 48}), "cloud", "Cloudy"),
    (frozenset({51, 53, 55, 56, 57}), "drizzle", "Light drizzle"),
    (frozenset({61, 63, 65, 66, 67, 80, 81, 82}), "rain", "Rain"),
    (frozenset({71, 73, 75, 77, 85, 86}), "snow", "Snow"),
    (frozenset({95, 96, 99}), "thunderstorm", "Thunderstorm"),
]
UNKNOWN_WEATHER: tuple[WeatherIcon, str] = ("cloud", "Variable weather")


def wmo_to_weather(code: float) -> tuple[WeatherIcon, str]:
    """Map a WMO weather code to (icon, description)."""
    for codes, icon, description in _WMO_GROUPS:
        if code in codes:
            return icon, description
    return UNKNOWN_WEATHER


@dataclass(frozen=True)
class ForecastResult:
    """A fetched payload plus which summary path produced forecast_short."""

    payload: WeatherPayload
    summary_provider: SummaryProvider


def _parse_number(value: Any) -> float | None:
    # Numeric strings count as numbers
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    return finite_number(value)


def _number(value: Any, default: float = 0.0) -> float:
    number = _parse_number(value)
    return default if number is None else number


def _first_daily(daily: dict[str, Any], key: str) -> float | None:
    values = daily.get(key)
    if not isinstance(values, list) or not values:
        return None
    return _parse_number(values[0])


class ForecastFetcher:
    """Fetches current weather for a point and builds the cached payload."""

    provider_name = "open-meteo"

    def __init__(
        self,
        settings: WeatherSettings,
        enhancer: SummaryEnhancer,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.enhancer = enhancer
        self.clock = clock

    def fetch(self, point: GeoPoint, fallback_label: str) -> ForecastResult:
        """Fetch and normalize weather for a geocoded point.

        Args:
            point: Resolved coordinates and place names
            fallback_label: Location text used when the point carries no names

        Returns:
            ForecastResult with the payload and summary provider

        Raises:
            ForecastUnavailableError: If the provider fails or returns garbage
        """
        body = self._request_forecast(point)

        current = body.get("current")
        current = current if isinstance(current, dict) else {}
        daily = body.get("daily")
        daily = daily if isinstance(daily, dict) else {}

        icon, description = wmo_to_weather(_number(current.get("weather_code")))
        location = point.display_name(fallback_label)
        facts = WeatherFacts(
            location=location,
            description=description,
            temp_c=_number(current.get("temperature_2m")),
            humidity=_number(current.get("relative_humidity_2m")),
            wind_kmh=_number(current.get("wind_speed_10m")),
            max_temp_c=_first_daily(daily, "temperature_2m_max"),
            min_temp_c=_first_daily(daily, "temperature_2m_min"),
            rain_chance=_first_daily(daily, "precipitation_probability_max"),
        )

        summary = build_rule_summary(facts)
        summary_provider = SummaryProvider.RULE
        enhanced = self.enhancer.summarize(facts)
        if enhanced:
            summary = enhanced
            summary_provider = SummaryProvider.AI

        payload = WeatherPayload(
            temp_c=round_half_up(facts.temp_c),
            humidity=round_half_up(facts.humidity),
            wind_kmh=round_half_up(facts.wind_kmh),
            description=description,
            icon=icon,
            forecast_short=summary,
            fetched_at=isoformat_utc(self.clock()),
            location=location,
        )
        logger.info(
            "Weather forecast fetched",
            extra={"location": location, "summary_provider": summary_provider.value},
        )
        return ForecastResult(payload=payload, summary_provider=summary_provider)

    def _request_forecast(self, point: GeoPoint) -> dict[str, Any]:
        if finite_number(point.latitude) is None or finite_number(point.longitude) is None:
            raise ForecastUnavailableError("Invalid geocode coordinates")

        try:
            response = requests.get(
                self.settings.forecast_url,
                params={
                    "latitude": point.latitude,
                    "longitude": point.longitude,
                    "current": CURRENT_FIELDS,
                    "daily": DAILY_FIELDS,
                    "forecast_days": 1,
                    "timezone": "auto",
                },
                headers={"User-Agent": self.settings.user_agent},
                timeout=self.settings.forecast_timeout,
            )
        except requests.RequestException as e:
            raise ForecastUnavailableError(f"Open-Meteo request failed: {e}") from e

        if response.status_code >= 400:
            logger.warning(
                "Open-Meteo API error",
                extra={"status_code": response.status_code, "error": response.text[:300]},
            )
            raise ForecastUnavailableError(f"Open-Meteo weather error {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise ForecastUnavailableError("Open-Meteo returned non-JSON response") from e

        if not isinstance(body, dict):
            raise ForecastUnavailableError(
                f"Open-Meteo returned unexpected payload type {type(body).__name__}"
            )
        return body
