"""Exceptions raised by the weather service.

Expected misses (no geocode match, cache miss, summary enhancement failure)
are returned as None rather than raised. These exceptions cover the cases the
HTTP layer must turn into a distinct status.
"""


class WeatherError(Exception):
    """Base class for weather service errors."""


class ForecastUnavailableError(WeatherError):
    """The forecast provider could not be reached or returned an unusable response."""


class WeatherConfigError(WeatherError):
    """Required runtime configuration is missing."""
