"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Values that must never sign tokens in production.
PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {"", "CHANGE_ME", "CHANGE_ME_ACCESS", "CHANGE_ME_REFRESH", "secret", "changeme"}
)

# Loads .env in development (no-op when missing)
load_dotenv()

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})


def env_bool(name: str, default: bool = False) -> bool:
    """
    Read a boolean flag from the environment.

    Unset keeps ``default``; otherwise only ``1/true/yes/y/on`` (any case)
    count as true.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_float(name: str, default: float | None) -> float | None:
    """Parse a float from an environment variable, keeping ``default`` on bad input."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    DATABASE_URL: str
        SQLAlchemy connection string used to build the
        :class:`~alertify_auth.core.database.Database`.
    DATABASE_POOL_TIMEOUT: float | None
        Seconds to wait for a pooled connection.
    JWT_ACCESS_SECRET: str
        Signing key for access tokens (falls back to ``JWT_SECRET``). Also fed
        to ``flask-jwt-extended`` as ``JWT_SECRET_KEY`` for the bearer gate.
    JWT_REFRESH_SECRET: str
        Signing key for refresh tokens; must differ from the access secret.
    JWT_ACCESS_TTL, JWT_REFRESH_TTL: str
        Lifetimes as ``<integer><unit>`` with unit in ``s``, ``m``, ``h``, ``d``.
    DEFAULT_ROLE: str
        Role granted on registration.
    BLACKLIST_CLEANUP_ENABLED: bool
        Start the background sweep of expired blacklist entries.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Every value can be overridden through the environment (or ``.env``).
    """

    ENV_NAME = "development"
    API_BASE_PREFIX = os.getenv("API_BASE_PREFIX", "/api")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET") or os.getenv("JWT_SECRET", "CHANGE_ME_ACCESS")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "CHANGE_ME_REFRESH")
    JWT_ACCESS_TTL = os.getenv("JWT_ACCESS_TTL", "15m")
    JWT_REFRESH_TTL = os.getenv("JWT_REFRESH_TTL", "7d")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")
    DEFAULT_ROLE = os.getenv("DEFAULT_ROLE", "citizen")

    # DB
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    DATABASE_POOL_TIMEOUT = env_float("DATABASE_POOL_TIMEOUT", 10.0)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Background jobs (off unless opted in; see ProductionConfig)
    BLACKLIST_CLEANUP_ENABLED = env_bool("BLACKLIST_CLEANUP_ENABLED", False)
    BLACKLIST_CLEANUP_INTERVAL_SECONDS = env_float("BLACKLIST_CLEANUP_INTERVAL_SECONDS", 3600.0)
    BLACKLIST_CLEANUP_RETRY_BACKOFF_SECONDS = env_float(
        "BLACKLIST_CLEANUP_RETRY_BACKOFF_SECONDS", 3.0
    )

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local development: debug on, browser preflights cached for ten minutes."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a cheap password hash and never starts the cleanup thread.
    """

    ENV_NAME = "testing"
    TESTING = True
    DEBUG = False
    DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ECHO = False
    JWT_ACCESS_SECRET = "test-access-secret-0123456789abcdef"
    JWT_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    BLACKLIST_CLEANUP_ENABLED = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. Runs the blacklist cleanup thread unless
    ``BLACKLIST_CLEANUP_ENABLED`` says otherwise. The factory refuses to start
    when the JWT secrets are placeholders or identical.
    """

    ENV_NAME = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    BLACKLIST_CLEANUP_ENABLED = env_bool("BLACKLIST_CLEANUP_ENABLED", True)


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def secret_problems(access_secret: str | None, refresh_secret: str | None) -> list[str]:
    """
    List what is wrong with the configured JWT secrets.

    :param access_secret: Access token signing key.
    :param refresh_secret: Refresh token signing key.
    :returns: Human-readable problems; empty when both secrets are usable.
    """
    problems: list[str] = []
    if (access_secret or "") in PLACEHOLDER_SECRETS:
        problems.append("JWT_ACCESS_SECRET is missing or a placeholder")
    if (refresh_secret or "") in PLACEHOLDER_SECRETS:
        problems.append("JWT_REFRESH_SECRET is missing or a placeholder")
    if access_secret and access_secret == refresh_secret:
        problems.append("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
    return problems
