"""API routes module - registers all route blueprints.

Route Organization:
- weather.py: Weather resolution (POST /api/weather and its legacy alias)
- system.py: Health and readiness probes
"""

from apiflask import APIFlask

from src.api.routes import system, weather


def register_blueprints(app: APIFlask) -> None:
    """Register all route blueprints with the Flask app.

    Args:
        app: APIFlask application instance
    """
    app.register_blueprint(weather.api)
    app.register_blueprint(system.api)


__all__ = ["register_blueprints"]
