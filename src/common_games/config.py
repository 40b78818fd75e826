"""
Bot configuration.

One pydantic-settings section per concern, each with its own env
prefix, all read from the process environment and the same `.env` file.
`get_settings()` builds them once per process.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class _EnvSection(BaseSettings):
    """Section read from the environment and the shared .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class SteamAPIConfig(_EnvSection):
    """Steam endpoints and credentials."""

    model_config = SettingsConfigDict(env_prefix="STEAM_")

    api_key: SecretStr = Field(
        default=...,
        description="Steam Web API key from https://steamcommunity.com/dev/apikey",
    )
    base_url: str = Field(
        default="https://api.steampowered.com",
        description="Keyed Steam Web API (owned games, vanity names)",
    )
    store_url: str = Field(
        default="https://store.steampowered.com/api",
        description="Store API serving appdetails",
    )
    store_page_url: str = Field(
        default="https://store.steampowered.com/app",
        description="Public store pages, scanned for player counts",
    )
    media_url: str = Field(
        default="https://media.steampowered.com",
        description="CDN serving game icons",
    )
    timeout_seconds: int = Field(
        default=30,
        ge=5,
        le=120,
        description="HTTP request timeout in seconds",
    )

    @field_validator("base_url", "store_url", "store_page_url", "media_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class RetryConfig(_EnvSection):
    """Backoff for individual failing requests."""

    model_config = SettingsConfigDict(env_prefix="RETRY_")

    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per request, the first one included",
    )
    base_delay_seconds: float = Field(
        default=0.5,
        ge=0.1,
        le=30.0,
        description="First backoff delay",
    )
    max_delay_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=300.0,
        description="Backoff ceiling; keep it short, a member is waiting on the reply",
    )
    exponential_base: float = Field(
        default=2.0,
        ge=1.5,
        le=4.0,
        description="Growth factor between consecutive delays",
    )

    @model_validator(mode="after")
    def check_delays(self) -> "RetryConfig":
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must not be below base_delay_seconds")
        return self


class EnrichmentConfig(_EnvSection):
    """Multiplayer enrichment batching."""

    model_config = SettingsConfigDict(env_prefix="ENRICHMENT_")

    batch_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Games classified concurrently per batch",
    )
    batch_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Pause between consecutive batches",
    )
    enable_store_page_fallback: bool = Field(
        default=True,
        description="Scrape the public store page when categories carry no player count",
    )


class KnownGamesConfig(_EnvSection):
    """Static player-count table overrides."""

    model_config = SettingsConfigDict(env_prefix="KNOWN_GAMES_")

    path: Path | None = Field(
        default=None,
        description="JSON file mapping app ids to known player counts",
    )
    replace_defaults: bool = Field(
        default=False,
        description="Use only the file contents instead of merging with built-in entries",
    )

    @field_validator("path")
    @classmethod
    def validate_path_exists(cls, v: Path | None) -> Path | None:
        """Fail early on a missing override file."""
        if v is not None and not v.is_file():
            raise ValueError(f"Known games file not found: {v}")
        return v


class DatabaseConfig(_EnvSection):
    """Ownership store configuration."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    path: str = Field(
        default="data.db",
        description="SQLite database file (':memory:' for an in-process store)",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="SQLite busy timeout",
    )


class LoggingConfig(_EnvSection):
    """Log level and rendering."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: LogLevel = Field(default="INFO")
    format: Literal["json", "console"] = Field(
        default="json",
        description="JSON lines for the hosted bot, console while developing",
    )
    include_timestamp: bool = Field(default=True)

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


class Settings(_EnvSection):
    """All configuration sections of the bot."""

    steam: SteamAPIConfig = Field(default_factory=SteamAPIConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    known_games: KnownGamesConfig = Field(default_factory=KnownGamesConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    """
    Settings for this process, loaded on first call.

    Tests that change the environment call `get_settings.cache_clear()`.
    """
    return Settings()
