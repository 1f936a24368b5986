"""Shared pytest fixtures for farm weather tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from flask import Flask
from flask.testing import FlaskClient

if TYPE_CHECKING:
    from src.db.models import Database
    from src.weather.settings import WeatherSettings

# Set test environment variables before importing app modules
_SESSION_DB_DIR = tempfile.mkdtemp(prefix="farm-weather-tests-")
os.environ["FLASK_ENV"] = "testing"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["DATABASE_PATH"] = str(Path(_SESSION_DB_DIR) / "global.db")
os.environ["WEATHER_SUMMARY_PROVIDER"] = "rule"
os.environ["GEMINI_API_KEY"] = ""

# Fixed "current time" used by clock-injected components
NOW = datetime(2026, 6, 1, 6, 0, tzinfo=UTC)


# -----------------------------------------------------------------------------
# Database fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def temp_db_dir() -> Generator[Path]:
    """Create a temporary directory for test databases."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_db_path(temp_db_dir: Path, request: pytest.FixtureRequest) -> Path:
    """Create unique database path for each test."""
    test_name = request.node.name.replace("[", "_").replace("]", "_").replace("/", "_")
    return temp_db_dir / f"{test_name}.db"


@pytest.fixture
def test_database(test_db_path: Path) -> Generator[Database]:
    """Create isolated test database for each test."""
    from src.db.models import Database

    db = Database(db_path=test_db_path)
    yield db
    db.close()


# -----------------------------------------------------------------------------
# Flask app fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def app(test_database: Database) -> Generator[Flask]:
    """Create Flask test application backed by the isolated test database."""
    with patch("src.db.models.db", test_database):
        with patch("src.api.routes.weather.db", test_database):
            from src.app import create_app

            flask_app = create_app()
            flask_app.config["TESTING"] = True
            yield flask_app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create Flask test client."""
    return app.test_client()


# -----------------------------------------------------------------------------
# Caller and auth fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def test_user_id() -> str:
    """Caller id carried in the token's sub claim."""
    return "farmer-123"


@pytest.fixture
def auth_token(test_user_id: str) -> str:
    """Generate valid JWT token for the test caller."""
    from src.auth.jwt_auth import create_token

    return create_token(test_user_id)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Auth headers for authenticated requests."""
    return {"Authorization": f"Bearer {auth_token}"}


# -----------------------------------------------------------------------------
# Weather fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def weather_settings() -> WeatherSettings:
    """Default weather settings (30/120 minute TTLs, India/Karnataka)."""
    from src.weather.settings import WeatherSettings

    return WeatherSettings()


@pytest.fixture
def now() -> datetime:
    """Fixed current time."""
    return NOW
