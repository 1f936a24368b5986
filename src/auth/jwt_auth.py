"""Bearer token verification for the weather API.

Sessions are issued by the marketplace's identity service as HS256 JWTs whose
`sub` claim is the caller id. This module only verifies them; create_token()
exists for provisioning scripts, the smoke check and tests.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from functools import wraps
from typing import Any

import jwt
from flask import Request, g, request

from src.api.errors import (
    auth_expired_error,
    auth_invalid_error,
    auth_required_error,
    configuration_error,
)
from src.config import Config
from src.utils.logging import get_logger
from src.weather.errors import WeatherConfigError

logger = get_logger(__name__)


class TokenStatus(Enum):
    """Status codes for token validation results."""

    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass
class TokenResult:
    """Result of token validation."""

    status: TokenStatus
    payload: dict[str, Any] | None = None
    error: str | None = None


def _secret() -> str:
    if not Config.JWT_SECRET_KEY:
        raise WeatherConfigError("JWT_SECRET_KEY is not set")
    return Config.JWT_SECRET_KEY


def create_token(user_id: str, expires_in: timedelta | None = None) -> str:
    """Issue a signed token for a caller id."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "exp": now + (expires_in or timedelta(hours=Config.JWT_EXPIRATION_HOURS)),
        "iat": now,
    }
    return jwt.encode(payload, _secret(), algorithm=Config.JWT_ALGORITHM)


def decode_token_with_status(token: str) -> TokenResult:
    """Decode and validate a JWT token with detailed status.

    Raises:
        WeatherConfigError: If no signing secret is configured
    """
    secret = _secret()
    try:
        payload: dict[str, Any] = jwt.decode(token, secret, algorithms=[Config.JWT_ALGORITHM])
        return TokenResult(status=TokenStatus.VALID, payload=payload)
    except jwt.ExpiredSignatureError:
        return TokenResult(status=TokenStatus.EXPIRED, error="Token has expired")
    except jwt.InvalidTokenError as e:
        return TokenResult(status=TokenStatus.INVALID, error=str(e))


def caller_id_from(result: TokenResult) -> str | None:
    """Return the `sub` claim of a valid token result, None otherwise."""
    if result.status != TokenStatus.VALID or result.payload is None:
        return None
    caller_id = result.payload.get("sub")
    return caller_id if isinstance(caller_id, str) and caller_id else None


def verify_bearer_token(token: str) -> str | None:
    """Return the caller id for a valid token, None otherwise."""
    return caller_id_from(decode_token_with_status(token))


def get_token_from_request(req: Request) -> str | None:
    """Extract the bearer token from the Authorization header."""
    scheme, _, token = req.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_caller_id() -> str | None:
    """Get the authenticated caller id from the request context."""
    return getattr(g, "caller_id", None)


def require_auth[F: Callable[..., Any]](f: F) -> F:
    """Decorator to require a valid bearer token.

    Returns standardized error responses:
    - AUTH_REQUIRED (401): No token provided
    - AUTH_EXPIRED (401): Token has expired
    - AUTH_INVALID (401): Token is malformed, badly signed or has no subject
    - CONFIG_ERROR (500): No signing secret configured
    """

    @wraps(f)
    def decorated(*args: Any, **kwargs: Any) -> Any:
        token = get_token_from_request(request)
        if not token:
            logger.warning("Missing authentication token", extra={"path": request.path})
            return auth_required_error()

        try:
            result = decode_token_with_status(token)
        except WeatherConfigError as e:
            logger.error("Token verification is not configured", extra={"error": str(e)})
            g.weather_status = "config_error"
            return configuration_error()

        if result.status == TokenStatus.EXPIRED:
            logger.warning("Token expired", extra={"path": request.path})
            return auth_expired_error()

        if result.status == TokenStatus.INVALID:
            logger.warning("Invalid token", extra={"path": request.path, "error": result.error})
            return auth_invalid_error()

        caller_id = caller_id_from(result)
        if caller_id is None:
            logger.warning("Invalid token payload - missing sub", extra={"path": request.path})
            return auth_invalid_error()

        g.caller_id = caller_id
        logger.debug("Authentication successful", extra={"user_id": caller_id})
        return f(*args, **kwargs)

    return decorated  # type: ignore[return-value]
