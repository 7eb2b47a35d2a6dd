"""Configuration management with Pydantic and XDG base directory support."""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_xdg_data_home() -> Path:
    """Get XDG_DATA_HOME directory, defaulting to ~/.local/share."""
    xdg_data = os.getenv("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


MetricName = Literal["euclidean", "cosine"]
LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings(BaseSettings):
    """flatvec configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLATVEC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path | None = Field(
        default=None,
        description="Override data directory (defaults to XDG_DATA_HOME/flatvec)",
    )

    default_store_name: str = Field(
        default="vectors.dat",
        description="File name of the store used when no path is given",
    )

    default_metric: MetricName = Field(
        default="euclidean",
        description="Distance metric used by search when none is given",
    )

    verify_dimension: bool = Field(
        default=True,
        description="Reject reopening a store whose header dimension differs from the caller's",
    )

    max_metadata_bytes: int = Field(
        default=64 * 1024 * 1024,
        ge=1,
        description="Largest metadata length prefix accepted before a record is deemed corrupt",
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level for the CLI (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {value}")
        return level

    def get_data_dir(self) -> Path:
        """Get data directory, creating if necessary."""
        if self.data_dir:
            data_dir = self.data_dir
        else:
            data_dir = get_xdg_data_home() / "flatvec"

        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_default_store_path(self) -> Path:
        """Return the store file used when a command is given no explicit path."""
        return self.get_data_dir() / self.default_store_name


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
