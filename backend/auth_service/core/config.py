"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

from auth_service.services.auth.dto import AuthTokenConfig

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Load .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET_KEY: str
        Process-wide HMAC secret signing access and refresh tokens.
    JWT_ALGORITHM: str
        HMAC algorithm used by the claims codec.
    ACCESS_TOKEN_TTL_SECONDS: int
        Access token lifetime (15 minutes by default).
    REFRESH_TOKEN_TTL_SECONDS: int
        Refresh token lifetime (7 days by default). Must exceed the access TTL.
    CLOCK_SKEW_LEEWAY_SECONDS: int
        Tolerance applied to expiry checks when issuers and validators run on
        different hosts. ``0`` compares raw timestamps.
    SIGN_OUT_ALLOW_EXPIRED_ACCESS: bool
        Accept an expired (correctly signed) access token on sign-out.
    REDIS_URL: str | None
        Session store connection string. Required outside tests.
    REDIS_SOCKET_TIMEOUT: float
        Per-call timeout (seconds); a timeout surfaces as store unavailability.
    SQLALCHEMY_DATABASE_URI: str
        Account database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are read from environment variables at process start and are not
    reloaded at runtime.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT_SECRET_AT_LEAST_32_BYTES")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    # Token lifecycle
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 15 * 60)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 60 * 60)
    CLOCK_SKEW_LEEWAY_SECONDS = env_int("CLOCK_SKEW_LEEWAY_SECONDS", 0)
    SIGN_OUT_ALLOW_EXPIRED_ACCESS = env_bool("SIGN_OUT_ALLOW_EXPIRED_ACCESS", False)

    # Session store
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "2.0"))

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Leaves ``REDIS_URL`` unset; tests install a fakeredis client.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REDIS_URL = None
    JWT_SECRET_KEY = "test-secret-key-with-at-least-32-bytes!!"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug disabled; :func:`token_settings` refuses the placeholder
    secret when running with this configuration.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
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


def token_settings(config: Mapping[str, Any]) -> AuthTokenConfig:
    """Build the validated token configuration from a Flask config mapping.

    Parameters
    ----------
    config: Mapping[str, Any]
        Flask ``app.config`` (or any mapping with the same keys).

    Returns
    -------
    AuthTokenConfig
        Lifetimes and sign-out policy. Construction fails with ``ValueError``
        when the access lifetime is not shorter than the refresh lifetime.

    Raises
    ------
    RuntimeError
        If the signing secret is empty, or still the placeholder outside
        debug/testing.
    """
    secret = str(config.get("JWT_SECRET_KEY") or "")
    if not secret:
        raise RuntimeError("JWT_SECRET_KEY must be configured.")
    if secret.startswith("CHANGE_ME") and not (config.get("DEBUG") or config.get("TESTING")):
        raise RuntimeError("JWT_SECRET_KEY still holds the placeholder value.")

    return AuthTokenConfig(
        access_expires=timedelta(seconds=int(config["ACCESS_TOKEN_TTL_SECONDS"])),
        refresh_expires=timedelta(seconds=int(config["REFRESH_TOKEN_TTL_SECONDS"])),
        sign_out_allow_expired_access=bool(config.get("SIGN_OUT_ALLOW_EXPIRED_ACCESS", False)),
    )
