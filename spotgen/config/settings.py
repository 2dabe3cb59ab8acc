"""Configuration management using Pydantic Settings.

This module provides type-safe configuration management with automatic
environment variable loading and validation.

The configuration is organized into logical groups:
- LoggingConfig: Logging levels and log file
- CredentialsConfig: Spotify and Last.fm API credentials
- APIConfig: Market and retry behaviour of the external services
- ResolutionConfig: Bounds of the entry resolution engine
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("spotgen.log")
    real_time_debug: bool = True


class CredentialsConfig(BaseModel):
    """API credentials."""

    # Spotify credentials (client credentials flow)
    spotify_client_id: str = ""
    spotify_client_secret: str = ""

    # LastFM credentials
    lastfm_key: str = ""
    lastfm_secret: str = ""
    lastfm_username: str = ""


class APIConfig(BaseModel):
    """External API configuration and retry behaviour."""

    # Spotify API Configuration
    spotify_market: str = "US"
    spotify_retry_count: int = 3
    spotify_retry_max_delay: float = 30.0
    spotify_page_size: int = 50

    # LastFM API Configuration
    lastfm_retry_count: int = 3
    lastfm_retry_base_delay: float = 2.0
    lastfm_retry_max_delay: float = 60.0


class ResolutionConfig(BaseModel):
    """Entry resolution engine bounds."""

    # Composite entries may resolve into further entries; each pass
    # dispatches and flattens the whole queue once.
    max_passes: int = 2


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: SPOTIFY_CLIENT_ID, CONSOLE_LOG_LEVEL, LASTFM_KEY
    - Nested: CREDENTIALS__SPOTIFY_CLIENT_ID, LOGGING__CONSOLE_LEVEL

    The .env file is automatically loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Nested configuration groups
    logging: LoggingConfig = LoggingConfig()
    credentials: CredentialsConfig = CredentialsConfig()
    api: APIConfig = APIConfig()
    resolution: ResolutionConfig = ResolutionConfig()

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Transform flat environment variables to nested structure.

        Maps flat env vars (SPOTIFY_CLIENT_ID) onto the nested structure
        expected by the models (credentials.spotify_client_id).
        """
        if not isinstance(data, dict):
            return data

        transformed = {}

        log_mapping = {
            "console_log_level": "console_level",
            "file_log_level": "file_level",
            "log_file": "log_file",
            "log_real_time_debug": "real_time_debug",
        }
        for env_key, field_key in log_mapping.items():
            if env_key in data:
                transformed.setdefault("logging", {})[field_key] = data.pop(env_key)

        cred_mapping = {
            "spotify_client_id": "spotify_client_id",
            "spotify_client_secret": "spotify_client_secret",
            "lastfm_key": "lastfm_key",
            "lastfm_secret": "lastfm_secret",
            "lastfm_username": "lastfm_username",
        }
        for env_key, field_key in cred_mapping.items():
            if env_key in data:
                transformed.setdefault("credentials", {})[field_key] = data.pop(env_key)

        if "max_resolve_passes" in data:
            transformed.setdefault("resolution", {})["max_passes"] = data.pop(
                "max_resolve_passes"
            )

        # Merge transformed nested structure back into data
        for section, values in transformed.items():
            existing = data.get(section)
            if isinstance(existing, dict):
                data[section] = {**existing, **values}
            else:
                data[section] = values

        return data


# Singleton instance for application use
settings = Settings()


# =============================================================================
# BACKWARD COMPATIBILITY FUNCTIONS
# =============================================================================

_LEGACY_KEY_MAP = {
    # Logging settings
    "CONSOLE_LOG_LEVEL": lambda: settings.logging.console_level,
    "FILE_LOG_LEVEL": lambda: settings.logging.file_level,
    "LOG_FILE": lambda: settings.logging.log_file,
    # Credentials
    "SPOTIFY_CLIENT_ID": lambda: settings.credentials.spotify_client_id,
    "SPOTIFY_CLIENT_SECRET": lambda: settings.credentials.spotify_client_secret,
    "LASTFM_KEY": lambda: settings.credentials.lastfm_key,
    "LASTFM_SECRET": lambda: settings.credentials.lastfm_secret,
    "LASTFM_USERNAME": lambda: settings.credentials.lastfm_username,
    # Spotify API settings
    "SPOTIFY_MARKET": lambda: settings.api.spotify_market,
    "SPOTIFY_API_RETRY_COUNT": lambda: settings.api.spotify_retry_count,
    "SPOTIFY_API_RETRY_MAX_DELAY": lambda: settings.api.spotify_retry_max_delay,
    "SPOTIFY_API_PAGE_SIZE": lambda: settings.api.spotify_page_size,
    # LastFM API settings
    "LASTFM_API_RETRY_COUNT": lambda: settings.api.lastfm_retry_count,
    "LASTFM_API_RETRY_BASE_DELAY": lambda: settings.api.lastfm_retry_base_delay,
    "LASTFM_API_RETRY_MAX_DELAY": lambda: settings.api.lastfm_retry_max_delay,
    # Resolution engine
    "MAX_RESOLVE_PASSES": lambda: settings.resolution.max_passes,
}


def get_config(key: str, default=None):
    """Get configuration value by key with optional default.

    Maps flat keys to the nested Pydantic settings structure.

    Example:
        >>> retries = get_config("LASTFM_API_RETRY_COUNT", 3)
    """
    if key in _LEGACY_KEY_MAP:
        return _LEGACY_KEY_MAP[key]()

    return default
