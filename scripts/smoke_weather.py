#!/usr/bin/env python3
"""Staging smoke check for the weather endpoint.

Calls POST /api/weather with a bearer token, validates the response shape and
writes a JSON artifact describing the run.

Usage:
    python scripts/smoke_weather.py --base-url https://staging.example.com --token <jwt>
    python scripts/smoke_weather.py --user-id farmer-123   # mint a token locally

The token can also come from WEATHER_SMOKE_TOKEN. Minting with --user-id needs
the same JWT_SECRET_KEY as the target server. Exits 1 on any failure.
"""

import argparse
import json
import os
import sys
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import requests

# Add parent directory to path so we can import from src
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.auth.jwt_auth import create_token
from src.utils.logging import get_logger, setup_logging
from src.weather.models import WEATHER_ICONS

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_ARTIFACT = Path("artifacts/weather-smoke.json")
REQUEST_TIMEOUT_SECONDS = 30

PAYLOAD_FIELDS: dict[str, type | tuple[type, ...]] = {
    "temp_c": int,
    "humidity": int,
    "wind_kmh": int,
    "description": str,
    "icon": str,
    "forecast_short": str,
    "fetched_at": str,
    "location": str,
}


def validate_body(body: Any) -> list[str]:
    """Return a list of problems with a weather response body (empty if valid)."""
    if not isinstance(body, dict):
        return [f"body is {type(body).__name__}, expected object"]

    problems: list[str] = []
    if not isinstance(body.get("cached"), bool):
        problems.append("'cached' missing or not a boolean")
    if "stale" in body and not isinstance(body["stale"], bool):
        problems.append("'stale' is not a boolean")
    if "cache_age_minutes" in body and not isinstance(body["cache_age_minutes"], int):
        problems.append("'cache_age_minutes' is not an integer")

    data = body.get("data")
    if data is None:
        if not body.get("message"):
            problems.append("'data' is null without an explanatory 'message'")
        return problems
    if not isinstance(data, dict):
        return [*problems, "'data' is neither null nor an object"]

    for name, expected in PAYLOAD_FIELDS.items():
        value = data.get(name)
        # bool is an int subclass
        if not isinstance(value, expected) or isinstance(value, bool):
            problems.append(f"data.{name} missing or wrong type ({value!r})")
    if data.get("icon") not in WEATHER_ICONS:
        problems.append(f"data.icon {data.get('icon')!r} is not a known icon")
    return problems


def run_smoke(base_url: str, token: str, path: str) -> dict[str, Any]:
    """Call the endpoint once and describe the result."""
    url = base_url.rstrip("/") + path
    result: dict[str, Any] = {
        "url": url,
        "started_at": datetime.now(UTC).isoformat(),
        "ok": False,
    }

    start = time.perf_counter()
    try:
        response = requests.post(
            url,
            json={},
            headers={"Authorization": f"Bearer {token}"},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        result["problems"] = [f"request failed: {e}"]
        return result
    result["duration_ms"] = round((time.perf_counter() - start) * 1000)
    result["http_status"] = response.status_code
    result["request_id"] = response.headers.get("X-Request-ID")

    try:
        body = response.json()
    except ValueError:
        result["problems"] = ["response is not JSON"]
        result["body_snippet"] = response.text[:500]
        return result

    result["body"] = body
    problems = validate_body(body)
    if response.status_code != 200:
        problems.insert(0, f"unexpected HTTP status {response.status_code}")
    if not result["request_id"]:
        problems.append("X-Request-ID header missing")

    result["problems"] = problems
    result["ok"] = not problems
    return result


def write_artifact(path: Path, result: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result, indent=2, sort_keys=True))
    logger.info("Smoke artifact written", extra={"path": str(path)})


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    setup_logging()

    parser = argparse.ArgumentParser(description="Smoke-test the weather endpoint")
    parser.add_argument(
        "--base-url",
        default=os.getenv("WEATHER_SMOKE_BASE_URL", DEFAULT_BASE_URL),
        help=f"Server base URL (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument("--token", default=os.getenv("WEATHER_SMOKE_TOKEN", ""))
    parser.add_argument("--user-id", help="Mint a token for this caller instead of --token")
    parser.add_argument("--path", default="/api/weather", help="Endpoint path")
    parser.add_argument("--output", type=Path, default=DEFAULT_ARTIFACT, help="Artifact path")
    args = parser.parse_args()

    token = args.token
    if args.user_id:
        token = create_token(args.user_id)
    if not token:
        logger.error("No token: pass --token, set WEATHER_SMOKE_TOKEN or use --user-id")
        return 1

    logger.info("Running weather smoke check", extra={"base_url": args.base_url})
    result = run_smoke(args.base_url, token, args.path)
    write_artifact(args.output, result)

    if not result["ok"]:
        logger.error("Weather smoke check failed", extra={"problems": result["problems"]})
        return 1

    body = result["body"]
    logger.info(
        "Weather smoke check passed",
        extra={
            "http_status": result["http_status"],
            "cached": body.get("cached"),
            "stale": body.get("stale"),
            "has_data": body.get("data") is not None,
            "duration_ms": result["duration_ms"],
        },
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
