"""Mock helpers for Open-Meteo geocoding and forecast responses."""

from typing import Any
from unittest.mock import MagicMock


def create_mock_response(
    json_body: Any = None,
    status_code: int = 200,
    json_error: bool = False,
) -> MagicMock:
    """Create a mock requests.Response.

    Args:
        json_body: Value returned by response.json()
        status_code: HTTP status code
        json_error: If True, response.json() raises ValueError

    Returns:
        Mock Response object
    """
    response = MagicMock()
    response.status_code = status_code
    response.text = "" if json_body is None else str(json_body)
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = json_body
    return response


def geocode_result(
    name: str = "Mysuru",
    latitude: Any = 12.2958,
    longitude: Any = 76.6394,
    admin2: str | None = "Mysuru",
    admin1: str | None = "Karnataka",
    country: str | None = "India",
) -> dict[str, Any]:
    """One row of the geocoding "results" array."""
    return {
        "name": name,
        "latitude": latitude,
        "longitude": longitude,
        "admin2": admin2,
        "admin1": admin1,
        "country": country,
    }


def geocode_body(*results: dict[str, Any]) -> dict[str, Any]:
    """Geocoding response body; no results means the key is absent."""
    return {"results": list(results)} if results else {"generationtime_ms": 0.4}


def forecast_body(
    temperature: Any = 28.4,
    humidity: Any = 61,
    wind_speed: Any = 12.2,
    weather_code: Any = 2,
    daily_max: Any = 31.6,
    daily_min: Any = 21.5,
    rain_chance: Any = 40,
) -> dict[str, Any]:
    """Forecast response body with current conditions and one daily row."""
    daily: dict[str, Any] = {}
    if daily_max is not None:
        daily["temperature_2m_max"] = [daily_max]
    if daily_min is not None:
        daily["temperature_2m_min"] = [daily_min]
    if rain_chance is not None:
        daily["precipitation_probability_max"] = [rain_chance]
    return {
        "current": {
            "temperature_2m": temperature,
            "relative_humidity_2m": humidity,
            "wind_speed_10m": wind_speed,
            "weather_code": weather_code,
        },
        "daily": daily,
    }
