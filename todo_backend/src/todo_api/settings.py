from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

_SQLITE_PREFIX = "sqlite:///"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'sqlite' (default) or 'memory'
    - DATABASE_URL: 'sqlite:///<path>' or a bare file path. Default 'sqlite:///./data/todos.db'
    - DB_TIMEOUT_SECONDS: seconds a statement waits on a locked database (default: 5)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - ENABLE_BASIC_AUTH: 'true' to gate every route behind HTTP Basic Auth (default: false)
    - BASIC_AUTH_USERNAME: username for basic auth (required when ENABLE_BASIC_AUTH=true)
    - BASIC_AUTH_PASSWORD: password for basic auth (required when ENABLE_BASIC_AUTH=true)
    - ENABLE_SECRETS: 'false' to leave the /admin/secrets route unmounted (default: true)
    - HOST / PORT: listener address (default: 0.0.0.0:8080)
    - LOG_LEVEL: root logging level (default: INFO)
    """

    persistence_backend: str = "sqlite"
    database_url: str = "sqlite:///./data/todos.db"
    db_timeout_seconds: float = 5.0
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    enable_basic_auth: bool = False
    basic_auth_username: Optional[str] = None
    basic_auth_password: Optional[str] = None
    enable_secrets: bool = True
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    @property
    def sqlite_db_path(self) -> str:
        """Filesystem path of the sqlite database named by database_url."""
        return parse_database_url(self.database_url)


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_number(name: str, default: str, cast):
    raw = _get_env(name, default)
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Invalid %s value '%s', using default=%s", name, raw, default)
        return cast(default)


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in _LOG_LEVELS:
        logger.warning("Invalid LOG_LEVEL value '%s', using default=INFO", value)
        return "INFO"
    return level


# PUBLIC_INTERFACE
def parse_database_url(url: str) -> str:
    """
    Return the sqlite file path for a DATABASE_URL.

    Accepts 'sqlite:///relative/or/absolute/path' or a bare path. In-memory
    databases are refused because each operation opens its own connection.
    """
    value = url.strip()
    if value.startswith(_SQLITE_PREFIX):
        value = value[len(_SQLITE_PREFIX):]
    elif "://" in value:
        raise ValueError(f"Unsupported DATABASE_URL scheme: {url!r}")
    if not value or value == ":memory:":
        raise ValueError("DATABASE_URL must name a database file; use PERSISTENCE_BACKEND=memory instead")
    return value


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "sqlite").strip().lower()
    if backend not in {"memory", "sqlite"}:
        logger.warning("Unsupported PERSISTENCE_BACKEND '%s', using sqlite", backend)
        backend = "sqlite"

    enable_basic_auth = _parse_bool(_get_env("ENABLE_BASIC_AUTH", "false"), False)
    basic_user = os.getenv("BASIC_AUTH_USERNAME") if enable_basic_auth else None
    basic_pass = os.getenv("BASIC_AUTH_PASSWORD") if enable_basic_auth else None

    return Settings(
        persistence_backend=backend,
        database_url=_get_env("DATABASE_URL", "sqlite:///./data/todos.db").strip(),
        db_timeout_seconds=_parse_number("DB_TIMEOUT_SECONDS", "5", float),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        enable_basic_auth=enable_basic_auth,
        basic_auth_username=basic_user,
        basic_auth_password=basic_pass,
        enable_secrets=_parse_bool(_get_env("ENABLE_SECRETS", "true"), True),
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_number("PORT", "8080", int),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )
