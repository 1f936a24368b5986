"""Immutable weather settings injected into the orchestrator and providers."""

from __future__ import annotations

from dataclasses import dataclass

from src.config import Config


@dataclass(frozen=True)
class WeatherSettings:
    """Provider endpoints, timeouts, toggles and cache policy for one service instance."""

    fresh_ttl_minutes: int = 30
    stale_ttl_minutes: int = 120
    geocoding_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    geocoding_timeout: float = 8.0
    forecast_timeout: float = 10.0
    country_code: str = "IN"
    country_name: str = "India"
    default_state: str = "Karnataka"
    summary_provider: str = "rule"
    summary_model: str = "gemini-2.0-flash"
    summary_timeout: float = 4.0
    gemini_api_key: str = ""
    user_agent: str = "farm-weather/1.0.0"

    @property
    def ai_summary_enabled(self) -> bool:
        """True when the generative summary is both selected and has credentials."""
        return self.summary_provider == "gemini" and bool(self.gemini_api_key)

    @classmethod
    def from_config(cls) -> WeatherSettings:
        """Build settings from the process-wide Config (read once at startup)."""
        return cls(
            fresh_ttl_minutes=Config.WEATHER_FRESH_TTL_MINUTES,
            stale_ttl_minutes=Config.WEATHER_STALE_TTL_MINUTES,
            geocoding_url=Config.GEOCODING_API_URL,
            forecast_url=Config.FORECAST_API_URL,
            geocoding_timeout=Config.WEATHER_GEOCODING_TIMEOUT,
            forecast_timeout=Config.WEATHER_FORECAST_TIMEOUT,
            country_code=Config.WEATHER_COUNTRY_CODE,
            country_name=Config.WEATHER_COUNTRY_NAME,
            default_state=Config.WEATHER_DEFAULT_STATE,
            summary_provider=Config.WEATHER_SUMMARY_PROVIDER,
            summary_model=Config.WEATHER_SUMMARY_MODEL,
            summary_timeout=Config.WEATHER_SUMMARY_TIMEOUT,
            gemini_api_key=Config.GEMINI_API_KEY,
            user_agent=f"{Config.APP_NAME}/{Config.APP_VERSION}",
        )
