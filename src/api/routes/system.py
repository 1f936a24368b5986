"""System routes: liveness and readiness probes."""

from typing import Any

from apiflask import APIBlueprint

from src.config import Config
from src.db.models import check_database_connectivity
from src.utils.logging import get_logger

logger = get_logger(__name__)

api = APIBlueprint("system", __name__, url_prefix="/api", tag="System")


@api.route("/health", methods=["GET"])
def health_check() -> tuple[dict[str, str | None], int]:
    """Liveness probe - checks if the application process is running.

    Does NOT check dependencies; use /api/ready for that.
    """
    return {"status": "ok", "version": Config.APP_VERSION}, 200


@api.route("/ready", methods=["GET"])
@api.doc(responses=[503])
def readiness_check() -> tuple[dict[str, Any], int]:
    """Readiness probe - checks that the weather database is reachable.

    Returns:
        200: Application is ready to serve traffic
        503: Application is not ready (dependency failure)
    """
    db_ok, db_error = check_database_connectivity()
    checks = {
        "database": {
            "status": "ok" if db_ok else "error",
            "message": "Connected" if db_ok else db_error,
        }
    }

    if not db_ok:
        logger.warning("Readiness check failed", extra={"checks": checks})

    return {
        "status": "ready" if db_ok else "not_ready",
        "checks": checks,
        "version": Config.APP_VERSION,
    }, 200 if db_ok else 503
