"""Environment-driven configuration helpers for LedgerLab."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGERLAB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    book_name: str = Field(default="FanDuel")
    et_utc_offset: str = Field(default="-05:00", pattern=r"^[+-]\d{2}:\d{2}$")
    description_max_length: int = Field(default=200, ge=20)

    # Characters of raw card text inspected around an entity when inferring its game.
    matchup_window_before: int = Field(default=40, ge=0)
    matchup_window_after: int = Field(default=140, ge=0)

    log_level: str = Field(default="WARNING")

    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000, validation_alias=AliasChoices("LEDGERLAB_API_PORT", "PORT"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]
