"""Application configuration using Pydantic Settings.

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

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_llm_settings() -> "LLMSettings":
    """Build LLM settings from environment.

    Static type checkers treat required fields as constructor arguments,
    which is not how BaseSettings is intended to be used.
    """

    return LLMSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_redis_settings() -> "RedisSettings":
    return RedisSettings()  # type: ignore[call-arg]


def _build_spotify_settings() -> "SpotifySettings":
    return SpotifySettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class LLMSettings(BaseSettings):
    """LLM provider configuration.

    Validation of provider-specific requirements happens in the factory.
    """

    provider: str = Field(
        "openai",
        description="LLM provider name (e.g., openai)",
    )
    model: str = Field(
        "gpt-4o-mini",
        description="Model name (e.g., gpt-4o, gpt-4o-mini)",
    )
    api_key: str | None = Field(
        None,
        description="API key for cloud providers (required for OpenAI)",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint (OpenAI-compatible gateways)",
    )
    timeout_seconds: float = Field(
        30.0,
        description="Request timeout in seconds",
    )
    temperature: float = Field(
        0.7,
        description="Sampling temperature for moodic generation",
        ge=0.0,
        le=2.0,
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    production: bool = Field(
        False,
        description="Production mode: strict CORS allow-list and security headers",
    )
    cors_allowed_origins: str = Field(
        "https://moodic.com.ar,https://www.moodic.com.ar",
        description="Comma-separated list of browser origins allowed in production",
    )
    security_headers_enabled: bool = Field(
        True,
        description="Attach hardening headers to responses in production",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on quota-bearing routes",
    )
    mood_rate_limit_requests: int = Field(
        4,
        description="Maximum /mood requests per window (per client)",
        ge=1,
    )
    mood_rate_limit_window_seconds: int = Field(
        3600,
        description="/mood rate limit window size in seconds",
        ge=1,
    )
    playlists_rate_limit_requests: int = Field(
        20,
        description="Maximum /playlists requests per window (per client)",
        ge=1,
    )
    playlists_rate_limit_window_seconds: int = Field(
        3600,
        description="/playlists rate limit window size in seconds",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class RedisSettings(BaseSettings):
    """Shared counter store configuration.

    When ``url`` is unset the limiter falls back to a per-process in-memory
    store, which is only suitable for local development.
    """

    url: str | None = Field(
        None,
        description="Redis connection URL (e.g., redis://localhost:6379/0)",
    )
    socket_timeout_seconds: float = Field(
        2.0,
        description="Socket timeout for Redis commands",
    )
    socket_connect_timeout_seconds: float = Field(
        2.0,
        description="Connect timeout for Redis",
    )

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        case_sensitive=False,
    )


class SpotifySettings(BaseSettings):
    """Spotify Web API and OAuth configuration."""

    client_id: str | None = Field(None, description="Spotify application client id")
    client_secret: str | None = Field(None, description="Spotify application client secret")
    redirect_uri: str | None = Field(
        None,
        description="Redirect URI registered in the Spotify developer dashboard",
    )
    auth_url: str = Field(
        "https://accounts.spotify.com/authorize",
        description="Authorization endpoint",
    )
    token_url: str = Field(
        "https://accounts.spotify.com/api/token",
        description="Token endpoint (code exchange and refresh)",
    )
    api_base: str = Field(
        "https://api.spotify.com/v1",
        description="Web API base URL",
    )
    scopes: str = Field(
        "user-read-private user-read-email user-top-read",
        description="Space-separated OAuth scopes requested at login",
    )
    timeout_seconds: float = Field(10.0, description="HTTP timeout for Spotify calls")

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10 * 1024 * 1024, description="Rotate after this many bytes (0 disables)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation header name")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    llm: LLMSettings = Field(default_factory=_build_llm_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    redis: RedisSettings = Field(default_factory=_build_redis_settings)
    spotify: SpotifySettings = Field(default_factory=_build_spotify_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
