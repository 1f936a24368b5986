"""Geocoding resolver backed by the Open-Meteo geocoding API.

Open-Meteo geocoding is free and needs no API key.
API Documentation: https://open-meteo.com/en/docs/geocoding-api

Candidates are tried in priority order. For each candidate the full query is
tried first, then (if the query has a comma) only its first token; each
variant is looked up strictly (country filter) and then relaxed (no filter).
The first result with finite coordinates wins and the chain stops.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

import requests

from src.utils.logging import get_logger
from src.weather.models import GeoPoint, LocationCandidate
from src.weather.settings import WeatherSettings

logger = get_logger(__name__)

GeocodeStrategy = Literal["strict", "relaxed"]

# Number of results requested per lookup
GEOCODE_RESULT_COUNT = 3


@dataclass(frozen=True)
class GeocodeAttempt:
    """One step of the fallback chain."""

    candidate: LocationCandidate
    variant: str
    strategy: GeocodeStrategy


@dataclass(frozen=True)
class GeocodeMatch:
    """A successful geocode and the attempt that produced it."""

    point: GeoPoint
    candidate: LocationCandidate
    variant: str
    strategy: GeocodeStrategy


def query_variants(query: str) -> list[str]:
    """Full query first, then the text before the first comma if it differs."""
    variants: list[str] = []
    for variant in (query.strip(), query.split(",")[0].strip()):
        if variant and variant not in variants:
            variants.append(variant)
    return variants


def plan_attempts(candidates: Sequence[LocationCandidate]) -> list[GeocodeAttempt]:
    """Expand candidates into the ordered list of lookups to try."""
    attempts: list[GeocodeAttempt] = []
    for candidate in candidates:
        for variant in query_variants(candidate.query):
            attempts.append(GeocodeAttempt(candidate, variant, "strict"))
            attempts.append(GeocodeAttempt(candidate, variant, "relaxed"))
    return attempts


class GeocodingResolver:
    """Resolves location candidates to coordinates."""

    provider_name = "open-meteo"

    def __init__(self, settings: WeatherSettings) -> None:
        self.settings = settings

    def resolve(self, candidates: Sequence[LocationCandidate]) -> GeocodeMatch | None:
        """Return the first successful geocode across all candidates, or None.

        A miss is not an error: the orchestrator decides what to do with it.
        """
        attempts = plan_attempts(candidates)
        for attempt in attempts:
            point = self.search(attempt.variant, country_filter=attempt.strategy == "strict")
            if point is not None:
                logger.debug(
                    "Geocode resolved",
                    extra={
                        "query": attempt.variant,
                        "label": attempt.candidate.label.value,
                        "strategy": attempt.strategy,
                    },
                )
                return GeocodeMatch(point, attempt.candidate, attempt.variant, attempt.strategy)

        logger.info("No geocoding candidate resolved", extra={"attempts": len(attempts)})
        return None

    def search(self, query: str, country_filter: bool) -> GeoPoint | None:
        """Look up a single query; provider failures count as a miss.

        Args:
            query: Free-text place query
            country_filter: Restrict results to the configured country

        Returns:
            The first result with finite coordinates, or None
        """
        params: dict[str, Any] = {
            "name": query,
            "count": GEOCODE_RESULT_COUNT,
            "language": "en",
            "format": "json",
        }
        if country_filter:
            params["countryCode"] = self.settings.country_code

        try:
            response = requests.get(
                self.settings.geocoding_url,
                params=params,
                headers={"User-Agent": self.settings.user_agent},
                timeout=self.settings.geocoding_timeout,
            )
        except requests.RequestException as e:
            logger.warning(
                "Geocoding request failed",
                extra={"query": query, "country_filter": country_filter, "error": str(e)},
            )
            return None

        if response.status_code >= 400:
            logger.warning(
                "Geocoding API error",
                extra={"query": query, "status_code": response.status_code},
            )
            return None

        try:
            body = response.json()
        except ValueError:
            logger.warning("Geocoding API returned non-JSON response", extra={"query": query})
            return None

        results = body.get("results") if isinstance(body, dict) else None
        if not isinstance(results, list):
            return None

        for row in results:
            point = GeoPoint.from_result(row)
            if point is not None:
                return point
        return None
