"""Forecast summaries: the rule-based sentence and the optional Gemini note.

The rule-based summary is always computed. A generative provider may offer an
alternative phrasing; any failure on that path collapses to None so the
request carries on with the rule-based text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from src.utils.logging import get_logger
from src.weather.models import round_half_up
from src.weather.settings import WeatherSettings

logger = get_logger(__name__)

BREEZY_WIND_KMH = 20
AI_SUMMARY_MAX_CHARS = 220
AI_SUMMARY_MAX_TOKENS = 60


@dataclass(frozen=True)
class WeatherFacts:
    """Structured inputs shared by every summary path."""

    location: str
    description: str
    temp_c: float
    humidity: float
    wind_kmh: float
    max_temp_c: float | None = None
    min_temp_c: float | None = None
    rain_chance: float | None = None


def build_rule_summary(facts: WeatherFacts) -> str:
    """Build the rule-based one-line summary.

    Example: "Rain. High 31C / Low 22C. Rain chance 80%. Breezy (25 km/h)"
    """
    parts = [facts.description]

    if facts.max_temp_c is not None and facts.min_temp_c is not None:
        parts.append(
            f"High {round_half_up(facts.max_temp_c)}C / Low {round_half_up(facts.min_temp_c)}C"
        )
    else:
        parts.append(f"Around {round_half_up(facts.temp_c)}C")

    if facts.rain_chance is not None:
        parts.append(f"Rain chance {round_half_up(facts.rain_chance)}%")

    if facts.wind_kmh > BREEZY_WIND_KMH:
        parts.append(f"Breezy ({round_half_up(facts.wind_kmh)} km/h)")

    return ". ".join(parts)


def build_summary_prompt(facts: WeatherFacts) -> str:
    """Prompt for the generative provider."""

    def fmt(value: float | None) -> str:
        return "NA" if value is None else str(round_half_up(value))

    return (
        f"Create one short farmer-friendly weather note (max 22 words) for {facts.location}. "
        f"Current: {facts.description}, {round_half_up(facts.temp_c)}C, "
        f"humidity {round_half_up(facts.humidity)}%, wind {round_half_up(facts.wind_kmh)} km/h. "
        f"Day range: {fmt(facts.min_temp_c)}-{fmt(facts.max_temp_c)}C. "
        f"Rain chance: {fmt(facts.rain_chance)}%. "
        "Return plain text only."
    )


class SummaryEnhancer(Protocol):
    """Optional provider of an alternative forecast summary."""

    def summarize(self, facts: WeatherFacts) -> str | None: ...


class RuleSummaryProvider:
    """No enhancement: the rule-based summary is used as-is."""

    def summarize(self, facts: WeatherFacts) -> str | None:
        return None


class GeminiSummaryProvider:
    """Asks Gemini for a short farmer-friendly note. Best effort only."""

    def __init__(self, settings: WeatherSettings) -> None:
        self.settings = settings

    def summarize(self, facts: WeatherFacts) -> str | None:
        """Return Gemini's note, or None on any failure."""
        if not self.settings.ai_summary_enabled:
            return None

        try:
            # Import here so the rule-only deployment never loads the SDK
            from google import genai
            from google.genai import types

            client = genai.Client(
                api_key=self.settings.gemini_api_key,
                http_options=types.HttpOptions(timeout=int(self.settings.summary_timeout * 1000)),
            )
            response = client.models.generate_content(
                model=self.settings.summary_model,
                contents=build_summary_prompt(facts),
                config=types.GenerateContentConfig(
                    temperature=0.2,
                    max_output_tokens=AI_SUMMARY_MAX_TOKENS,
                ),
            )
            text = (response.text or "").strip()
        except Exception as e:
            logger.warning(
                "Gemini weather summary failed, using rule summary",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return None

        if not text:
            logger.debug("Gemini returned an empty weather summary")
            return None
        return " ".join(text.split())[:AI_SUMMARY_MAX_CHARS]


def get_summary_enhancer(settings: WeatherSettings) -> SummaryEnhancer:
    """Pick the enhancer for the configured summary provider."""
    if settings.summary_provider == "gemini":
        return GeminiSummaryProvider(settings)
    return RuleSummaryProvider()
