"""Weather routes.

POST /api/weather resolves current weather for the authenticated caller from
their stored address. POST /functions/v1/get-weather is kept as an alias for
clients built against the old edge function path.

This module is the only place that decides HTTP status codes for weather
outcomes, and it emits exactly one telemetry event per request. Every
response carries CORS headers, and an OPTIONS preflight is answered with an
empty 200 before authentication.
"""

import time
from typing import Any

from apiflask import APIBlueprint
from flask import Response, g, request

from src.api.errors import (
    configuration_error,
    external_service_error,
    method_not_allowed_error,
    server_error,
)
from src.api.schemas import WeatherRequest
from src.api.validation import validate_request
from src.auth.jwt_auth import get_caller_id, require_auth
from src.db.models import db
from src.utils.logging import get_logger, log_event
from src.weather.errors import WeatherConfigError
from src.weather.service import OutcomeStatus, build_weather_service

logger = get_logger(__name__)

api = APIBlueprint("weather", __name__, tag="Weather")

TELEMETRY_ENDPOINT = "get-weather"

# Browser clients call the endpoint cross-origin
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, x-request-id"
    ),
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

# Telemetry status for responses that never reached the orchestrator
_STATUS_BY_CODE = {
    401: "unauthorized",
    405: "method_not_allowed",
    500: "error",
}


@api.before_request
def start_weather_request() -> Response | None:
    g.request_started_at = time.perf_counter()
    # CORS preflight is answered before auth runs
    if request.method == "OPTIONS":
        g.weather_status = "preflight"
        return Response(status=200)
    return None


@api.after_request
def add_cors_headers(response: Response) -> Response:
    response.headers.update(CORS_HEADERS)
    return response


@api.after_request
def emit_telemetry(response: Response) -> Response:
    """Emit the single terminal telemetry event for this request."""
    status = getattr(g, "weather_status", None) or _STATUS_BY_CODE.get(
        response.status_code, "error"
    )
    started = getattr(g, "request_started_at", None)
    duration_ms = round((time.perf_counter() - started) * 1000) if started else None
    log_event(
        TELEMETRY_ENDPOINT,
        status,
        http_status=response.status_code,
        duration_ms=duration_ms,
        user_id=get_caller_id(),
        **getattr(g, "weather_telemetry", {}),
    )
    return response


@api.route("/api/weather", methods=["POST"])
@api.route("/functions/v1/get-weather", methods=["POST"])
@api.doc(responses=[401, 405, 500, 502])
@require_auth
@validate_request(WeatherRequest, lenient=True)
def get_weather(data: WeatherRequest) -> tuple[dict[str, Any], int]:
    """Get current weather for the caller's stored location.

    Soft outcomes (no location on file, unresolved location, stale cache)
    are 200 responses with an explanatory message.

    Returns:
        200: Fresh, cached or unavailable-with-message weather
        502: Weather provider failed and no usable cached copy exists
    """
    _ = data
    caller_id = get_caller_id()
    assert caller_id is not None  # Guaranteed by @require_auth

    try:
        outcome = build_weather_service(db).resolve(caller_id)
    except WeatherConfigError as e:
        logger.error("Weather service misconfigured", extra={"error": str(e)})
        g.weather_status = "config_error"
        return configuration_error()
    except Exception as e:
        logger.exception("Weather request failed", extra={"user_id": caller_id})
        g.weather_status = "error"
        g.weather_telemetry = {"error": str(e), "error_type": type(e).__name__}
        return server_error()

    g.weather_status = outcome.status.value
    g.weather_telemetry = outcome.telemetry

    if outcome.status is OutcomeStatus.UPSTREAM_ERROR:
        body, code = external_service_error(outcome.message or "", service="open-meteo")
        return {**body, **outcome.body}, code
    return outcome.body, outcome.http_status


@api.route("/api/weather", methods=["GET", "PUT", "PATCH", "DELETE"])
@api.route("/functions/v1/get-weather", methods=["GET", "PUT", "PATCH", "DELETE"])
@api.doc(hide=True)
def weather_method_not_allowed() -> tuple[dict[str, Any], int]:
    return method_not_allowed_error()
