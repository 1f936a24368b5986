import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Config:
    # Base paths
    BASE_DIR = Path(__file__).parent.parent

    APP_NAME = "farm-weather"
    APP_VERSION: str = os.getenv("APP_VERSION", "1.0.0")

    # JWT Authentication (identity provider shared with the marketplace)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRATION_HOURS: int = int(os.getenv("JWT_EXPIRATION_HOURS", str(24 * 7)))  # 1 week

    # Server
    PORT: int = int(os.getenv("PORT", "8000"))
    FLASK_ENV: str = os.getenv("FLASK_ENV", "development")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Slow query logging (only active in development/debug mode)
    SLOW_QUERY_THRESHOLD_MS: int = int(os.getenv("SLOW_QUERY_THRESHOLD_MS", "100"))

    # Database
    DATABASE_PATH: Path = BASE_DIR / os.getenv("DATABASE_PATH", "weather.db")

    # Weather summary enhancement (optional)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    WEATHER_SUMMARY_PROVIDER: str = os.getenv("WEATHER_SUMMARY_PROVIDER", "rule").strip().lower()
    WEATHER_SUMMARY_MODEL: str = os.getenv("WEATHER_SUMMARY_MODEL", "gemini-2.0-flash")
    WEATHER_SUMMARY_TIMEOUT: float = float(
        os.getenv("WEATHER_SUMMARY_TIMEOUT", "4")
    )  # seconds, best-effort side call
    WEATHER_SUMMARY_PROVIDERS = {"rule", "gemini"}

    # Weather cache policy
    WEATHER_FRESH_TTL_MINUTES: int = int(os.getenv("WEATHER_FRESH_TTL_MINUTES", "30"))
    WEATHER_STALE_TTL_MINUTES: int = int(os.getenv("WEATHER_STALE_TTL_MINUTES", "120"))

    # Weather providers (Open-Meteo needs no API key)
    GEOCODING_API_URL: str = os.getenv(
        "GEOCODING_API_URL", "https://geocoding-api.open-meteo.com/v1/search"
    )
    FORECAST_API_URL: str = os.getenv("FORECAST_API_URL", "https://api.open-meteo.com/v1/forecast")
    WEATHER_GEOCODING_TIMEOUT: float = float(os.getenv("WEATHER_GEOCODING_TIMEOUT", "8"))
    WEATHER_FORECAST_TIMEOUT: float = float(os.getenv("WEATHER_FORECAST_TIMEOUT", "10"))

    # Address defaults used when building geocoding queries
    WEATHER_COUNTRY_CODE: str = os.getenv("WEATHER_COUNTRY_CODE", "IN").upper()
    WEATHER_COUNTRY_NAME: str = os.getenv("WEATHER_COUNTRY_NAME", "India")
    WEATHER_DEFAULT_STATE: str = os.getenv("WEATHER_DEFAULT_STATE", "Karnataka")

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development mode."""
        return cls.FLASK_ENV == "development"

    @classmethod
    def validate(cls) -> list[str]:
        """Validate required configuration. Returns list of errors with clear guidance."""
        errors: list[str] = []

        if not cls.JWT_SECRET_KEY:
            errors.append("JWT_SECRET_KEY is required to verify caller tokens.")
        elif not cls.is_development():
            if cls.JWT_SECRET_KEY == "dev-secret-change-me":
                errors.append(
                    "JWT_SECRET_KEY must be set to a secure random value in production. "
                    'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
                )
            elif len(cls.JWT_SECRET_KEY) < 32:
                errors.append(
                    f"JWT_SECRET_KEY must be at least 32 characters for security (got {len(cls.JWT_SECRET_KEY)}). "
                    'Generate a secure key with: python -c "import secrets; print(secrets.token_hex(32))"'
                )

        if cls.WEATHER_SUMMARY_PROVIDER not in cls.WEATHER_SUMMARY_PROVIDERS:
            valid = ", ".join(sorted(cls.WEATHER_SUMMARY_PROVIDERS))
            errors.append(
                f"WEATHER_SUMMARY_PROVIDER '{cls.WEATHER_SUMMARY_PROVIDER}' is not supported. "
                f"Valid providers: {valid}"
            )
        elif cls.WEATHER_SUMMARY_PROVIDER == "gemini" and not cls.GEMINI_API_KEY:
            errors.append(
                "GEMINI_API_KEY is required when WEATHER_SUMMARY_PROVIDER=gemini. "
                "Get your API key from https://ai.google.dev/ and set it in .env"
            )

        # Validate cache policy
        if cls.WEATHER_FRESH_TTL_MINUTES < 0:
            errors.append(
                f"WEATHER_FRESH_TTL_MINUTES must not be negative, got {cls.WEATHER_FRESH_TTL_MINUTES}"
            )
        if cls.WEATHER_STALE_TTL_MINUTES < cls.WEATHER_FRESH_TTL_MINUTES:
            errors.append(
                "WEATHER_STALE_TTL_MINUTES must be at least WEATHER_FRESH_TTL_MINUTES "
                f"(got {cls.WEATHER_STALE_TTL_MINUTES} < {cls.WEATHER_FRESH_TTL_MINUTES})"
            )

        # Validate timeouts
        for name in ("WEATHER_GEOCODING_TIMEOUT", "WEATHER_FORECAST_TIMEOUT", "WEATHER_SUMMARY_TIMEOUT"):
            value = getattr(cls, name)
            if value <= 0:
                errors.append(f"{name} must be positive, got {value}")

        if cls.PORT < 1 or cls.PORT > 65535:
            errors.append(f"PORT must be between 1 and 65535, got {cls.PORT}")

        # Validate log level
        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if cls.LOG_LEVEL not in valid_log_levels:
            errors.append(
                f"LOG_LEVEL '{cls.LOG_LEVEL}' is not valid. "
                f"Valid levels: {', '.join(sorted(valid_log_levels))}"
            )

        return errors
