"""Pydantic schemas for API request validation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class WeatherRequest(BaseModel):
    """Schema for POST /api/weather.

    The location is derived server-side from the caller's profile, so the body
    carries no required fields. Unknown keys sent by older clients are ignored.
    """

    model_config = ConfigDict(extra="ignore")
