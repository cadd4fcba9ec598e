"""Environment-driven settings for the auth core.

``APP_ENV`` picks one of the classes below; each value can be overridden by
the environment variable of the same name (``DATABASE_URL`` for the
database). A ``.env`` file is loaded when present.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # development | testing | production
PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset({"", "CHANGE_ME", "CHANGE_ME_JWT"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag; ``1/true/yes/y/on`` (any case) mean ``True``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Read an integer, keeping ``default`` for unset, blank or non-numeric values."""
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    JWT_SECRET_KEY: str
        HMAC key for access and refresh tokens.
    JWT_ALGORITHM: str
        The one algorithm accepted when verifying (``HS256`` by default).
    ACCESS_TOKEN_TTL_SECONDS: int
        Access token lifetime, 15 minutes by default.
    REFRESH_TOKEN_TTL_SECONDS: int
        Refresh token lifetime, 7 days by default.
    REFRESH_TOKEN_RETENTION_HOURS: int
        How long ``flask auth clean-expired`` keeps revoked rows.
    PASSWORD_HASH_METHOD: str
        ``werkzeug.security`` method string, work factor included.
    AUTH_OPERATION_TIMEOUT_SECONDS: float
        Deadline for one login, refresh or logout; ``0`` disables it.
    REQUIRE_STRONG_SECRETS: bool
        Refuse to start with a placeholder or short JWT key.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    REQUIRE_STRONG_SECRETS = False

    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 15 * 60)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 3600)
    REFRESH_TOKEN_RETENTION_HOURS = env_int("REFRESH_TOKEN_RETENTION_HOURS", 24)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt:32768:8:1")
    AUTH_OPERATION_TIMEOUT_SECONDS = env_float("AUTH_OPERATION_TIMEOUT_SECONDS", 10.0)

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    JSON_SORT_KEYS = False
    # Keep error handlers in charge of every response.
    PROPAGATE_EXCEPTIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """In-memory SQLite (or ``TEST_DATABASE_URL``), a fixed key and a cheap hash."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    JWT_SECRET_KEY = "testing-secret-key-with-enough-bytes"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"


class ProductionConfig(BaseConfig):
    """Strict secrets; see :func:`cmdb.factory.create_app`."""

    REQUIRE_STRONG_SECRETS = True
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the class named by ``APP_ENV``, development when unset or unknown."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
