import sys
import uuid

from apiflask import APIFlask
from flask import Response, g, request

from src.api.routes import register_blueprints
from src.config import Config
from src.utils.logging import get_logger, set_request_id, setup_logging

REQUEST_ID_HEADER = "X-Request-ID"


def create_app() -> APIFlask:
    """Create and configure the Flask application."""
    setup_logging()
    logger = get_logger(__name__)

    app = APIFlask(__name__, title="Farm Weather API", version=Config.APP_VERSION)

    # Runs before blueprint hooks so every log line carries the request id
    @app.before_request
    def start_request() -> None:
        set_request_id(request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4()))
        logger.info(
            "Incoming request",
            extra={
                "method": request.method,
                "path": request.path,
                "remote_addr": request.remote_addr,
                "user_agent": request.headers.get("User-Agent", ""),
            },
        )

    @app.after_request
    def finish_request(response: Response) -> Response:
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "Outgoing response",
            extra={
                "method": request.method,
                "path": request.path,
                "status_code": response.status_code,
            },
        )
        return response

    register_blueprints(app)

    logger.info(
        "Flask app created",
        extra={"environment": Config.FLASK_ENV, "log_level": Config.LOG_LEVEL},
    )
    return app


def main() -> None:
    """Validate configuration and run the development server."""
    setup_logging()
    logger = get_logger(__name__)

    errors = Config.validate()
    if errors:
        logger.error("Configuration validation failed", extra={"errors": errors})
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)

    app = create_app()
    logger.info(
        "Starting farm weather service",
        extra={
            "port": Config.PORT,
            "environment": Config.FLASK_ENV,
            "summary_provider": Config.WEATHER_SUMMARY_PROVIDER,
            "fresh_ttl_minutes": Config.WEATHER_FRESH_TTL_MINUTES,
            "stale_ttl_minutes": Config.WEATHER_STALE_TTL_MINUTES,
        },
    )
    app.run(host="0.0.0.0", port=Config.PORT, debug=Config.is_development())


if __name__ == "__main__":
    main()
