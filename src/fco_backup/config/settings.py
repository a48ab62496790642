"""Application settings.

All configuration is sourced from environment variables (and optionally `.env`).
Every variable is prefixed with ``FCO_BACKUP_``, e.g. ``FCO_BACKUP_BRANCH``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.exceptions import ConfigurationError

GOV_UK_TRAVEL_ADVICE = "https://www.gov.uk/foreign-travel-advice"


class Settings(BaseSettings):
    """Typed environment-backed settings for the fetcher."""

    model_config = SettingsConfigDict(
        env_prefix="FCO_BACKUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Git
    remote_url: str = "git@github.com:fcobackup/fco-backup.git"
    remote: str = "origin"
    branch: str = "master"
    author_name: str = "FCO Backup"
    author_email: str = "ukfcobackup@gmail.com"
    countries_dir: str = "countries"

    # gov.uk
    index_url: str = GOV_UK_TRAVEL_ADVICE
    feed_url: str = f"{GOV_UK_TRAVEL_ADVICE}.atom"
    request_timeout: float = Field(default=30.0, gt=0)

    # Polling and retries
    poll_interval_seconds: float = Field(default=5 * 60, gt=0)
    retry_attempts: int = Field(default=3, ge=1)

    # Browser
    headless: bool = True
    chrome_executable: str | None = None
    navigation_timeout_ms: int = Field(default=60_000, gt=0)

    @property
    def author(self) -> str:
        return f"{self.author_name} <{self.author_email}>"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid FCO_BACKUP_* settings: {exc}") from exc
