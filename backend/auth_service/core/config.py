"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Selects a key of CONFIG_MAP
ENV_VAR: Final[str] = "APP_ENV"

# Placeholder secret; rejected at startup in production
DEFAULT_JWT_SECRET: Final[str] = "your-secret-key-change-in-production"

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag such as ``USE_PROXYFIX=yes``; unset means ``default``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, keeping ``default`` when unset."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def database_url() -> str:
    """Resolve the SQLAlchemy URL.

    ``DATABASE_URL`` wins. Otherwise, when ``DB_HOST`` is set, a PostgreSQL URL
    is assembled from the discrete ``DB_*`` variables; the final fallback is a
    local SQLite file.
    """
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit
    host = os.getenv("DB_HOST")
    if not host:
        return "sqlite:///./auth.db"
    port = os.getenv("DB_PORT", "5432")
    user = os.getenv("DB_USER", "postgres")
    password = os.getenv("DB_PASSWORD", "postgres")
    name = os.getenv("DB_NAME", "auth_db")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{name}"


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET_KEY: str
        Symmetric key signing access tokens. Read from ``JWT_SECRET`` (or
        ``JWT_SECRET_KEY``); validated once at startup.
    JWT_ALGORITHM: str
        HMAC algorithm for access tokens. Not overridable from the environment.
    ACCESS_TOKEN_TTL_SECONDS: int
        Access token lifetime (24h by default).
    REFRESH_TOKEN_TTL_SECONDS: int
        Refresh token lifetime (7 days by default).
    REFRESH_LEDGER_BACKEND: str
        ``"sql"`` (refresh_tokens table) or ``"redis"``.
    REDIS_URL: str | None
        Redis connection URL, required for the ``redis`` ledger.
    PASSWORD_HASH_METHOD: str
        Werkzeug hashing method for newly provisioned credentials.
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to the login endpoint.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    """

    APP_ENV = "development"
    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Token signing
    JWT_SECRET_KEY = os.getenv("JWT_SECRET") or os.getenv("JWT_SECRET_KEY") or DEFAULT_JWT_SECRET
    JWT_ALGORITHM = "HS256"
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 24 * 60 * 60)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 60 * 60)

    # Refresh ledger
    REFRESH_LEDGER_BACKEND = os.getenv("REFRESH_LEDGER_BACKEND", "sql")
    REDIS_URL = os.getenv("REDIS_URL")

    # Credentials
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # DB
    SQLALCHEMY_DATABASE_URI = database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Rate limiting
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "10 per minute")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Rate limiting is disabled so suites can log in repeatedly.
    """

    APP_ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET_KEY = "testing-secret-key-with-at-least-32-bytes!!"
    REFRESH_LEDGER_BACKEND = "sql"
    REDIS_URL = None
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    RATELIMIT_ENABLED = False
    USE_PROXYFIX = False
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    The signing secret must be provided through the environment; the
    placeholder default makes :func:`auth_service.factory.create_app` fail.
    """

    APP_ENV = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
