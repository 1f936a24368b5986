"""Structured JSON logging.

Every log line is a single JSON object on stderr (Loki friendly). Fields
passed via `extra=` become top-level keys, and the current request id is
attached when one is known.

Telemetry goes through log_event() on the dedicated "telemetry" logger so it
can be routed separately from application logs. The weather route emits
exactly one such event per request.
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from typing import Any, cast

from flask import g, has_request_context

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

TELEMETRY_LOGGER_NAME = "telemetry"

# Attributes every LogRecord has; anything else on a record came from `extra=`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName", "extra_fields"}

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("urllib3", "httpx", "httpcore", "google_genai")


def get_request_id() -> str | None:
    """Return the request id from Flask's g, else from the context variable."""
    if has_request_context() and hasattr(g, "request_id"):
        return cast(str | None, g.request_id)
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)
    if has_request_context():
        g.request_id = request_id


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        # Telemetry events carry their fields as one dict
        entry.update(getattr(record, "extra_fields", {}))

        return json.dumps(entry, default=str)


def setup_logging() -> None:
    """Send all logging to stderr as JSON at Config.LOG_LEVEL."""
    from src.config import Config

    log_level = getattr(logging, Config.LOG_LEVEL, logging.INFO)

    # stderr, since process managers often capture stdout
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_event(endpoint: str, status: str, **fields: Any) -> None:
    """Emit a structured telemetry event.

    Args:
        endpoint: Logical endpoint name (e.g., "get-weather")
        status: Terminal outcome of the request (e.g., "success", "cache_hit")
        **fields: Additional event fields (duration_ms, cache_key, ...); None values are dropped
    """
    event: dict[str, Any] = {"event": "request_completed", "endpoint": endpoint, "status": status}
    request_id = get_request_id()
    if request_id:
        event["request_id"] = request_id
    event.update({key: value for key, value in fields.items() if value is not None})

    level = logging.ERROR if status in {"error", "config_error"} else logging.INFO
    get_logger(TELEMETRY_LOGGER_NAME).log(
        level, f"{endpoint} {status}", extra={"extra_fields": event}
    )
