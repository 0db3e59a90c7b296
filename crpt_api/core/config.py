"""Client configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

DEFAULT_DOCUMENTS_URL = "https://ismp.crpt.ru/api/v3/lk/documents/create"

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_client_settings() -> "ClientSettings":
    """Build registry client settings from environment."""

    return ClientSettings()


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


class ClientSettings(BaseSettings):
    """Registry client configuration.

    Only transport and dispatch knobs live here. The rate window itself
    (time unit and request limit) is a constructor argument of CrptApi.
    """

    base_url: str = Field(
        DEFAULT_DOCUMENTS_URL,
        description="Endpoint that accepts document creation requests",
    )
    signature_header: str = Field(
        "X-signature",
        description="Header carrying the caller-supplied signature",
    )
    http_timeout_seconds: float = Field(
        30.0,
        description="Timeout applied to each HTTP exchange",
        gt=0,
    )
    result_timeout_seconds: float | None = Field(
        None,
        description="Upper bound on how long a caller waits for its scheduled send (None waits forever)",
        gt=0,
    )
    max_pending: int | None = Field(
        None,
        description="Maximum scheduled sends in flight; extra submissions are rejected (None is unbounded)",
        ge=1,
    )
    failure_status: int = Field(
        400,
        description="Status returned to callers when a submission fails internally",
    )

    model_config = SettingsConfigDict(
        env_prefix="CRPT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep", ge=0)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on import if a configured value is invalid.
    """

    app_env: str = APP_ENV
    client: ClientSettings = Field(default_factory=_build_client_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
