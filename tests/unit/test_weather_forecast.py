"""Unit tests for the forecast fetcher and summaries."""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.weather.errors import ForecastUnavailableError
from src.weather.forecast import ForecastFetcher, wmo_to_weather
from src.weather.models import WEATHER_ICONS, GeoPoint, SummaryProvider
from src.weather.settings import WeatherSettings
from src.weather.summary import RuleSummaryProvider, WeatherFacts, build_rule_summary
from tests.mocks.open_meteo import create_mock_response, forecast_body

MYSURU = GeoPoint(
    latitude=12.2958,
    longitude=76.6394,
    name="Mysuru",
    admin2="Mysuru",
    admin1="Karnataka",
    country="India",
)


@pytest.fixture
def fetcher(weather_settings: WeatherSettings, now: datetime) -> ForecastFetcher:
    return ForecastFetcher(weather_settings, RuleSummaryProvider(), clock=lambda: now)


class TestWmoToWeather:
    """Tests for the WMO code table."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            (0, ("sun", "Clear sky")),
            (2, ("cloud", "Partly cloudy")),
            (45, ("cloud", "Cloudy")),
            (56, ("drizzle", "Light drizzle")),
            (81, ("rain", "Rain")),
            (86, ("snow", "Snow")),
            (99, ("thunderstorm", "Thunderstorm")),
            (4, ("cloud", "Variable weather")),
            (-1, ("cloud", "Variable weather")),
        ],
    )
    def test_mapping(self, code: int, expected: tuple[str, str]) -> None:
        assert wmo_to_weather(code) == expected

    def test_icon_set_matches_mapping(self) -> None:
        """Every mapped icon is accepted when a cached payload is read back."""
        icons = {wmo_to_weather(code)[0] for code in range(-1, 100)}

        assert icons == WEATHER_ICONS


class TestRuleSummary:
    """Tests for build_rule_summary()."""

    def test_full_facts(self) -> None:
        facts = WeatherFacts(
            location="Mysuru",
            description="Rain",
            temp_c=27.2,
            humidity=80,
            wind_kmh=25.4,
            max_temp_c=30.5,
            min_temp_c=21.4,
            rain_chance=80,
        )

        assert build_rule_summary(facts) == (
            "Rain. High 31C / Low 21C. Rain chance 80%. Breezy (25 km/h)"
        )

    def test_without_daily_range_uses_current_temperature(self) -> None:
        facts = WeatherFacts(
            location="Mysuru",
            description="Clear sky",
            temp_c=29.6,
            humidity=40,
            wind_kmh=20,
            max_temp_c=31,
        )

        # Wind of exactly 20 km/h is not breezy
        assert build_rule_summary(facts) == "Clear sky. Around 30C"


class TestForecastFetcher:
    """Tests for ForecastFetcher.fetch()."""

    def test_builds_rounded_payload(self, fetcher: ForecastFetcher, now: datetime) -> None:
        with patch("src.weather.forecast.requests.get") as mock_get:
            mock_get.return_value = create_mock_response(forecast_body())

            result = fetcher.fetch(MYSURU, "571103, India")

        payload = result.payload
        assert payload.temp_c == 28
        assert payload.humidity == 61
        assert payload.wind_kmh == 12
        assert payload.icon == "cloud"
        assert payload.description == "Partly cloudy"
        assert payload.forecast_short == "Partly cloudy. High 32C / Low 22C. Rain chance 40%"
        assert payload.fetched_at == "2026-06-01T06:00:00.000Z"
        assert payload.location == "Mysuru, Karnataka, India"
        assert result.summary_provider == SummaryProvider.RULE

    def test_request_parameters(self, fetcher: ForecastFetcher) -> None:
        with patch("src.weather.forecast.requests.get") as mock_get:
            mock_get.return_value = create_mock_response(forecast_body())

            fetcher.fetch(MYSURU, "Mysuru")

        kwargs = mock_get.call_args.kwargs
        assert kwargs["params"]["latitude"] == 12.2958
        assert kwargs["params"]["longitude"] == 76.6394
        assert kwargs["params"]["forecast_days"] == 1
        assert kwargs["params"]["timezone"] == "auto"
        assert kwargs["timeout"] == 10.0

    def test_halves_round_up(self, fetcher: ForecastFetcher) -> None:
        body = forecast_body(temperature=-2.5, humidity=62.5, wind_speed=0.49)
        with patch("src.weather.forecast.requests.get", return_value=create_mock_response(body)):
            payload = fetcher.fetch(MYSURU, "Mysuru").payload

        assert (payload.temp_c, payload.humidity, payload.wind_kmh) == (-2, 63, 0)

    def test_missing_fields_default_to_zero(self, fetcher: ForecastFetcher) -> None:
        body = {"current": {}, "daily": {}}
        with patch("src.weather.forecast.requests.get", return_value=create_mock_response(body)):
            payload = fetcher.fetch(MYSURU, "Mysuru").payload

        assert (payload.temp_c, payload.humidity, payload.wind_kmh) == (0, 0, 0)
        assert payload.icon == "sun"
        assert payload.forecast_short == "Clear sky. Around 0C"

    def test_location_falls_back_to_label(self, fetcher: ForecastFetcher) -> None:
        bare_point = GeoPoint(latitude=12.3, longitude=76.3)
        with patch(
            "src.weather.forecast.requests.get",
            return_value=create_mock_response(forecast_body()),
        ):
            payload = fetcher.fetch(bare_point, "Hunsur, India").payload

        assert payload.location == "Hunsur, India"

    def test_location_parts_are_deduplicated(self, fetcher: ForecastFetcher) -> None:
        with patch(
            "src.weather.forecast.requests.get",
            return_value=create_mock_response(forecast_body()),
        ):
            payload = fetcher.fetch(MYSURU, "Mysuru").payload

        assert payload.location.count("Mysuru") == 1

    @pytest.mark.parametrize(
        "response",
        [
            create_mock_response({"reason": "bad"}, status_code=503),
            create_mock_response(json_error=True),
            create_mock_response([1, 2, 3]),
        ],
    )
    def test_provider_failures_raise(
        self, fetcher: ForecastFetcher, response: MagicMock
    ) -> None:
        with patch("src.weather.forecast.requests.get", return_value=response):
            with pytest.raises(ForecastUnavailableError):
                fetcher.fetch(MYSURU, "Mysuru")

    def test_network_error_raises(self, fetcher: ForecastFetcher) -> None:
        with patch(
            "src.weather.forecast.requests.get",
            side_effect=requests.ConnectionError("refused"),
        ):
            with pytest.raises(ForecastUnavailableError):
                fetcher.fetch(MYSURU, "Mysuru")

    def test_enhanced_summary_replaces_only_forecast_short(
        self, weather_settings: WeatherSettings, now: datetime
    ) -> None:
        enhancer = MagicMock()
        enhancer.summarize.return_value = "Warm day with light cloud; irrigate in the evening."
        fetcher = ForecastFetcher(weather_settings, enhancer, clock=lambda: now)

        with patch(
            "src.weather.forecast.requests.get",
            return_value=create_mock_response(forecast_body()),
        ):
            result = fetcher.fetch(MYSURU, "Mysuru")

        assert result.summary_provider == SummaryProvider.AI
        assert result.payload.forecast_short.startswith("Warm day")
        assert (result.payload.temp_c, result.payload.humidity, result.payload.wind_kmh) == (
            28,
            61,
            12,
        )
        facts = enhancer.summarize.call_args.args[0]
        assert facts.location == "Mysuru, Karnataka, India"
        assert facts.max_temp_c == 31.6
