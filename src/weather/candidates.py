"""Location candidate builder.

Turns a sparse address record into an ordered list of geocoding queries,
most specific first. No network or cache access happens here.
"""

from __future__ import annotations

import re

from src.weather.models import AddressRecord, CandidateLabel, LocationCandidate
from src.weather.settings import WeatherSettings

LOCATION_KEY_MAX_LENGTH = 120

_DISALLOWED_KEY_CHARS = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def _clean(value: str | None) -> str:
    return (value or "").strip()


def build_location_candidates(
    address: AddressRecord,
    settings: WeatherSettings,
) -> tuple[LocationCandidate, ...]:
    """Build ordered, case-insensitively deduplicated geocoding candidates.

    Args:
        address: The caller's stored address
        settings: Supplies the state and country appended to queries

    Returns:
        Candidates in priority order; empty when the address has nothing usable
    """
    candidates: list[LocationCandidate] = []
    seen: set[str] = set()

    def push(query: str, label: CandidateLabel) -> None:
        query = query.strip()
        if not query or query.lower() in seen:
            return
        seen.add(query.lower())
        candidates.append(LocationCandidate(query=query, label=label))

    village = _clean(address.village)
    district = _clean(address.district)
    pincode = _clean(address.pincode)
    location = _clean(address.location)
    state = settings.default_state
    country = settings.country_name

    if pincode:
        push(f"{pincode}, {country}", CandidateLabel.PINCODE)
        if district:
            push(f"{pincode}, {district}, {state}, {country}", CandidateLabel.PINCODE_DISTRICT)
    if village and district:
        push(f"{village}, {district}, {state}, {country}", CandidateLabel.VILLAGE_DISTRICT)
    if district:
        push(f"{district}, {state}, {country}", CandidateLabel.DISTRICT)
    if location:
        if country.lower() not in location.lower():
            location = f"{location}, {country}"
        push(location, CandidateLabel.LOCATION_TEXT)

    return tuple(candidates)


def location_key(query: str) -> str:
    """Normalize a query into a stable cache token.

    Lower-cases, keeps only letters, digits, whitespace and hyphens, turns
    whitespace runs into single hyphens and caps the length.
    """
    normalized = _DISALLOWED_KEY_CHARS.sub("", query.lower().strip()).replace("_", "")
    normalized = _WHITESPACE.sub("-", normalized)
    normalized = _HYPHENS.sub("-", normalized)
    return normalized[:LOCATION_KEY_MAX_LENGTH] or "unknown"


def cache_key_for(candidate: LocationCandidate) -> str:
    """Cache key for a candidate (callers pass the primary candidate)."""
    return f"weather:{location_key(candidate.query)}"
