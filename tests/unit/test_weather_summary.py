"""Unit tests for the optional Gemini summary enhancer."""

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest

from src.weather.settings import WeatherSettings
from src.weather.summary import (
    AI_SUMMARY_MAX_CHARS,
    GeminiSummaryProvider,
    RuleSummaryProvider,
    WeatherFacts,
    build_summary_prompt,
    get_summary_enhancer,
)

FACTS = WeatherFacts(
    location="Mysuru, Karnataka, India",
    description="Rain",
    temp_c=26.6,
    humidity=88,
    wind_kmh=14,
    max_temp_c=29,
    min_temp_c=None,
    rain_chance=90,
)

GEMINI_SETTINGS = WeatherSettings(summary_provider="gemini", gemini_api_key="test-key")


@pytest.fixture
def mock_genai_client() -> Generator[MagicMock]:
    """Mock genai.Client so no request leaves the process."""
    with patch("google.genai.Client") as mock:
        yield mock


def _reply(mock_client: MagicMock, text: str | None) -> None:
    mock_client.return_value.models.generate_content.return_value = MagicMock(text=text)


class TestSummaryPrompt:
    """Tests for build_summary_prompt()."""

    def test_includes_rounded_facts_and_placeholders(self) -> None:
        prompt = build_summary_prompt(FACTS)

        assert "for Mysuru, Karnataka, India" in prompt
        assert "Rain, 27C" in prompt
        assert "humidity 88%" in prompt
        assert "Day range: NA-29C" in prompt
        assert "Rain chance: 90%" in prompt
        assert "max 22 words" in prompt


class TestGeminiSummaryProvider:
    """Tests for GeminiSummaryProvider.summarize()."""

    def test_returns_normalized_text(self, mock_genai_client: MagicMock) -> None:
        _reply(mock_genai_client, "  Heavy rain  expected;\n keep harvest covered. ")

        summary = GeminiSummaryProvider(GEMINI_SETTINGS).summarize(FACTS)

        assert summary == "Heavy rain expected; keep harvest covered."
        call = mock_genai_client.return_value.models.generate_content.call_args
        assert call.kwargs["model"] == GEMINI_SETTINGS.summary_model
        assert call.kwargs["config"].max_output_tokens == 60

    def test_truncates_long_text(self, mock_genai_client: MagicMock) -> None:
        _reply(mock_genai_client, "word " * 100)

        summary = GeminiSummaryProvider(GEMINI_SETTINGS).summarize(FACTS)

        assert summary is not None
        assert len(summary) == AI_SUMMARY_MAX_CHARS

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_reply_is_none(self, mock_genai_client: MagicMock, text: str | None) -> None:
        _reply(mock_genai_client, text)

        assert GeminiSummaryProvider(GEMINI_SETTINGS).summarize(FACTS) is None

    def test_client_error_is_none(self, mock_genai_client: MagicMock) -> None:
        mock_genai_client.return_value.models.generate_content.side_effect = RuntimeError("quota")

        assert GeminiSummaryProvider(GEMINI_SETTINGS).summarize(FACTS) is None

    def test_missing_key_skips_call(self, mock_genai_client: MagicMock) -> None:
        settings = WeatherSettings(summary_provider="gemini", gemini_api_key="")

        assert GeminiSummaryProvider(settings).summarize(FACTS) is None
        mock_genai_client.assert_not_called()


class TestGetSummaryEnhancer:
    """Tests for get_summary_enhancer()."""

    def test_rule_provider_by_default(self) -> None:
        enhancer = get_summary_enhancer(WeatherSettings())

        assert isinstance(enhancer, RuleSummaryProvider)
        assert enhancer.summarize(FACTS) is None

    def test_gemini_provider_when_configured(self) -> None:
        assert isinstance(get_summary_enhancer(GEMINI_SETTINGS), GeminiSummaryProvider)
