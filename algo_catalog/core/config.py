"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import MutableMapping

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Bundled default dataset used when no data file exists yet
DEFAULT_SEED_FILE = Path(__file__).resolve().parents[1] / "data" / "seed_data.json"

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)

# Variable names used by earlier deployments, mapped to their current names
LEGACY_ENV_NAMES = {
    "ADMIN_PASS": "ADMIN_PASSWORD",
    "PORT": "APP_PORT",
    "DATA_DIR": "APP_DATA_DIR",
    "CORS_ORIGIN": "APP_CORS_ORIGIN",
    "RESEED": "APP_RESEED",
}


def apply_legacy_env(environ: MutableMapping[str, str]) -> list[str]:
    """Copy legacy variables to their current names unless those are already set.

    Returns:
        The legacy names that were applied.
    """
    applied = []
    for legacy, current in LEGACY_ENV_NAMES.items():
        if legacy in environ and current not in environ:
            environ[current] = environ[legacy]
            applied.append(legacy)
    return applied


LEGACY_ENV_APPLIED = apply_legacy_env(os.environ)


def _build_log_settings() -> "LogSettings":
    return LogSettings()


def _build_app_settings() -> "AppSettings":
    return AppSettings()


def _build_rate_limit_settings() -> "RateLimitSettings":
    return RateLimitSettings()


def _build_admin_settings() -> "AdminSettings":
    return AdminSettings()


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10 * 1024 * 1024, description="Rotate log file at this size (0 disables)")
    backup_count: int = Field(5, description="Rotated log files to keep")
    request_id_header: str = Field("X-Request-ID", description="Header carrying the correlation id")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    host: str = Field("0.0.0.0", description="Bind address for the HTTP server")
    port: int = Field(8080, description="Port for the HTTP server")
    data_dir: str = Field(
        "",
        description="Directory holding data.json (empty means current directory)",
    )
    seed_file: str = Field(
        str(DEFAULT_SEED_FILE),
        description="Default dataset used when data.json is missing or on reseed",
    )
    reseed: bool = Field(
        False,
        description="Rebuild data.json from the seed file on startup",
    )
    cors_origin: str = Field("*", description="Allowed CORS origin")
    static_dir: str = Field("static", description="Directory with the built frontend")

    max_body_bytes: int = Field(1024 * 1024, description="Maximum submission body size", ge=1)
    max_name_chars: int = Field(200, description="Maximum algorithm name length", ge=1)
    max_description_chars: int = Field(5000, description="Maximum description length", ge=1)
    max_pseudocode_chars: int = Field(50000, description="Maximum pseudocode length", ge=1)
    max_field_chars: int = Field(1000, description="Maximum length of other text fields", ge=1)
    max_list_items: int = Field(50, description="Maximum items in any list field", ge=1)

    captcha_ttl_seconds: int = Field(600, description="Captcha lifetime", ge=1)
    captcha_sweep_seconds: int = Field(300, description="Interval between expired captcha sweeps", ge=1)

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )

    @property
    def data_file(self) -> Path:
        return Path(self.data_dir or ".") / "data.json"


class RateLimitSettings(BaseSettings):
    """Per-surface rate limit budgets (requests per window, per client IP)."""

    enabled: bool = Field(True, description="Enable rate limiting")
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    submit_requests: int = Field(5, ge=1)
    submit_window_seconds: int = Field(60, ge=1)
    admin_requests: int = Field(10, ge=1)
    admin_window_seconds: int = Field(60, ge=1)
    api_requests: int = Field(100, ge=1)
    api_window_seconds: int = Field(60, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


DEFAULT_ADMIN_PASSWORD = "changeme"


class AdminSettings(BaseSettings):
    """Credentials for the moderation endpoints (HTTP Basic Auth)."""

    user: str = Field("admin", description="Admin username")
    password: str = Field(DEFAULT_ADMIN_PASSWORD, description="Admin password")

    model_config = SettingsConfigDict(
        env_prefix="ADMIN_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=_build_log_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    admin: AdminSettings = Field(default_factory=_build_admin_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
