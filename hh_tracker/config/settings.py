"""Configuration settings for HH Tracker."""

import json
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hh_tracker.parser.vocabulary import NOISE_SUBSTRINGS


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every setting has a default and can be overridden via environment
    variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        enable_decoding=False,
        extra="ignore",
    )

    # Storage
    tracker_db_path: Path = Field(
        default=Path("./data/hh_tracker.db"),
        description="Path to the SQLite database with buffers and responses",
    )

    # Stats
    stats_window_days: Annotated[int, Field(gt=0)] = Field(
        default=30,
        description="Trailing window (days) used by the /stats command",
    )
    top_companies: Annotated[int, Field(gt=0)] = Field(
        default=5,
        description="How many companies the stats summary lists",
    )
    list_limit: Annotated[int, Field(gt=0)] = Field(
        default=2000,
        description="Maximum number of stored responses returned by listings",
    )

    # Chat handler
    ack_interval_seconds: Annotated[float, Field(ge=0)] = Field(
        default=5.0,
        description="Minimum pause between 'got it' replies to pasted text",
    )

    # Parser
    extra_noise_substrings: list[str] = Field(
        default_factory=list,
        description=(
            "Additional boilerplate substrings to drop from pastes, on top of "
            "the built-in hh.ru list"
        ),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @property
    def noise_substrings(self) -> tuple[str, ...]:
        """Built-in noise substrings followed by the configured extras."""
        return NOISE_SUBSTRINGS + tuple(self.extra_noise_substrings)

    @field_validator("extra_noise_substrings", mode="before")
    @classmethod
    def parse_noise_substrings(cls, v: object) -> list[str]:
        """Parse EXTRA_NOISE_SUBSTRINGS from env-friendly formats.

        Supports:
        - JSON list: ["Реклама", "Premium"]
        - Comma-separated: Реклама, Premium
        - Newline-separated entries
        """
        if v is None:
            return []

        if isinstance(v, list):
            return [str(item).strip() for item in v if str(item).strip()]

        if not isinstance(v, str):
            return [str(v).strip()] if str(v).strip() else []

        raw = v.strip()
        if not raw:
            return []

        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            else:
                if isinstance(parsed, list):
                    return [str(item).strip() for item in parsed if str(item).strip()]

        parts: list[str] = []
        for chunk in raw.replace("\n", ",").split(","):
            item = chunk.strip()
            if item:
                parts.append(item)
        return parts

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
