"""Error responses for the weather API.

Every error body keeps the weather response shape, so a client can always
read `message`:

    {
        "data": null,
        "cached": false,
        "message": "Unauthorized",
        "error": {"code": "AUTH_REQUIRED", "message": "Unauthorized", "retryable": false}
    }

The "error" object lets the frontend tell a re-login from a retry.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    # Authentication (client should re-authenticate)
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"
    AUTH_EXPIRED = "AUTH_EXPIRED"

    # Request
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_FORMAT = "INVALID_FORMAT"  # Body is not valid JSON
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # Server
    SERVER_ERROR = "SERVER_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"  # Weather provider failed


# The weather endpoint is idempotent, so these are safe to retry automatically
RETRYABLE_ERRORS = frozenset({ErrorCode.SERVER_ERROR, ErrorCode.EXTERNAL_SERVICE_ERROR})


def is_retryable(code: ErrorCode) -> bool:
    return code in RETRYABLE_ERRORS


def create_error_response(
    code: ErrorCode,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build an error body.

    Args:
        code: Error code
        message: Human-readable message, safe to show to users
        details: Optional extra context (e.g. the offending field)

    Returns:
        The weather-shaped body with an "error" object attached
    """
    error: dict[str, Any] = {
        "code": code.value,
        "message": message,
        "retryable": is_retryable(code),
    }
    if details:
        error["details"] = details
    return {"data": None, "cached": False, "message": message, "error": error}


def validation_error(message: str, field: str | None = None) -> tuple[dict[str, Any], int]:
    details = {"field": field} if field else None
    return create_error_response(ErrorCode.VALIDATION_ERROR, message, details), 400


def invalid_json_error() -> tuple[dict[str, Any], int]:
    return create_error_response(ErrorCode.INVALID_FORMAT, "Invalid JSON in request body"), 400


def auth_required_error() -> tuple[dict[str, Any], int]:
    return create_error_response(ErrorCode.AUTH_REQUIRED, "Unauthorized"), 401


def auth_invalid_error(message: str = "Unauthorized") -> tuple[dict[str, Any], int]:
    return create_error_response(ErrorCode.AUTH_INVALID, message), 401


def auth_expired_error(message: str = "Token has expired") -> tuple[dict[str, Any], int]:
    return create_error_response(ErrorCode.AUTH_EXPIRED, message), 401


def method_not_allowed_error() -> tuple[dict[str, Any], int]:
    return create_error_response(ErrorCode.METHOD_NOT_ALLOWED, "Method not allowed"), 405


def server_error(message: str = "Internal error") -> tuple[dict[str, Any], int]:
    """500 with a generic message. Details belong in the server log, never the body."""
    return create_error_response(ErrorCode.SERVER_ERROR, message), 500


def configuration_error(
    message: str = "Weather service is not configured",
) -> tuple[dict[str, Any], int]:
    return create_error_response(ErrorCode.CONFIG_ERROR, message), 500


def external_service_error(
    message: str = "Weather unavailable: weather provider unavailable",
    service: str | None = None,
) -> tuple[dict[str, Any], int]:
    details = {"service": service} if service else None
    return create_error_response(ErrorCode.EXTERNAL_SERVICE_ERROR, message, details), 502
