"""Request validation utilities using Pydantic.

This module provides a decorator for validating Flask request bodies against
Pydantic schemas, converting validation errors to the standardized error
format used throughout the API.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import Request, request
from pydantic import BaseModel, ValidationError

from src.api.errors import invalid_json_error, validation_error
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Sentinel for a body that is present but not parseable JSON
_INVALID_JSON = object()


def get_request_json(req: Request) -> Any:
    """Parse the request body as JSON.

    An empty body reads as {}. Returns _INVALID_JSON when the body cannot be
    parsed.
    """
    if not req.get_data(cache=True):
        return {}
    data = req.get_json(force=True, silent=True)
    return _INVALID_JSON if data is None else data


def pydantic_to_error_response(
    error: ValidationError,
) -> tuple[dict[str, Any], int]:
    """Convert Pydantic ValidationError to standardized API error response."""
    # Get first error (most relevant)
    first_error = error.errors()[0]

    loc = first_error.get("loc", ())
    field = ".".join(str(x) for x in loc) if loc else None
    message = first_error.get("msg", "Invalid input")

    # Custom validators prefix their messages
    if message.startswith("Value error, "):
        message = message[13:]

    logger.debug(
        "Pydantic validation failed",
        extra={"field": field, "detail": message, "error_count": len(error.errors())},
    )

    return validation_error(message, field=field)


def validate_request[T: BaseModel](
    schema_class: type[T],
    lenient: bool = False,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator that validates request JSON against a Pydantic schema.

    Usage:
        @api.route("/weather", methods=["POST"])
        @require_auth
        @validate_request(WeatherRequest)
        def get_weather(data: WeatherRequest) -> ...:
            ...

    Place it AFTER @require_auth so auth errors win over validation errors.

    With lenient=True a body that is not valid JSON, or is not a JSON object,
    validates as {} instead of returning a 400. Use it for endpoints that read
    no required fields from the body.
    """

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(f)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            data = get_request_json(request)
            if lenient and not isinstance(data, dict):
                logger.debug("Ignoring unusable request body", extra={"path": request.path})
                data = {}
            if data is _INVALID_JSON:
                return invalid_json_error()
            if not isinstance(data, dict):
                return validation_error("Request body must be a JSON object")

            try:
                validated = schema_class.model_validate(data)
            except ValidationError as e:
                return pydantic_to_error_response(e)

            return f(validated, *args, **kwargs)

        return wrapper

    return decorator
