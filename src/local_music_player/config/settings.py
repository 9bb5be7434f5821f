"""Player configuration.

Three frozen groups (database, library, playback) hang off one
``Settings`` object that pydantic-settings fills from the process
environment and an optional ``.env`` file in the working directory.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.constants import AudioConstants, PlaylistConstants
from ..domain.shared.messages import ErrorMessages

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class DatabaseSettings(BaseModel):
    """Where the document table lives and how long SQLite may wait on locks."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/player.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        le=30000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: int = Field(
        default=10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def check_sqlite_url(cls, v: str) -> str:
        if not v.startswith("sqlite://") and v != ":memory:":
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class LibrarySettings(BaseModel):
    """Media library configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    music_dir: str = Field(
        default="~/Music", validation_alias=AliasChoices("music_dir", "dir", "path")
    )
    extensions: tuple[str, ...] = Field(default=AudioConstants.SUPPORTED_EXTENSIONS)

    @field_validator("extensions", mode="before")
    @classmethod
    def validate_extensions(cls, v: tuple[str, ...] | list[str] | str) -> tuple[str, ...]:
        """Accept a comma-separated string or a list and normalise to lowercase."""
        if isinstance(v, str):
            v = [part.strip() for part in v.split(",") if part.strip()]
        normalised = tuple(ext.lower() for ext in v)
        for ext in normalised:
            if not ext.startswith("."):
                raise ValueError(ErrorMessages.INVALID_EXTENSION.format(extension=ext))
        return normalised


class PlaybackSettings(BaseModel):
    """Playback coordinator and engine configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    position_poll_interval_s: float = Field(
        default=1.0,
        gt=0.0,
        le=10.0,
        validation_alias=AliasChoices("position_poll_interval_s", "poll_interval"),
    )
    max_recently_played: int = Field(
        default=PlaylistConstants.MAX_RECENTLY_PLAYED, ge=1, le=1000
    )
    ffplay_path: str = Field(
        default="ffplay", validation_alias=AliasChoices("ffplay_path", "ffplay")
    )


class Settings(BaseSettings):
    """Root settings object.

    Top-level keys are ENVIRONMENT, DEBUG and LOG_LEVEL. Group fields use a
    double underscore, for example:
    - DATABASE__URL, DATABASE__BUSY_TIMEOUT_MS
    - LIBRARY__MUSIC_DIR, LIBRARY__EXTENSIONS
    - PLAYBACK__POSITION_POLL_INTERVAL_S, PLAYBACK__FFPLAY_PATH
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    library: LibrarySettings = Field(default_factory=LibrarySettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=", ".join(LOG_LEVELS))
            )
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build ``Settings`` once per process; defaults fill anything the environment omits."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached ``Settings`` so the next call re-reads the environment."""
    get_settings.cache_clear()
