from functools import lru_cache
from pathlib import Path

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AZIONE_",
        extra="ignore",
    )

    app_name: str = "Messaggio Azione"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    allowed_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Reference timezone for every parsed or suggested date
    timezone: str = "Europe/Rome"

    # Calendar event durations (minutes)
    event_duration_call_min: int = Field(default=30, gt=0)
    event_duration_meet_min: int = Field(default=60, gt=0)

    data_dir: str = "~/.messaggio-azione"
    log_level: str = "INFO"

    # Sentry error tracking
    sentry_dsn: str = ""
    sentry_environment: str = "production"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def analyses_path(self) -> Path:
        return self.data_path / "analyses.jsonl"

    @property
    def preferences_path(self) -> Path:
        return self.data_path / "preferences.json"

    @property
    def has_sentry(self) -> bool:
        return bool(self.sentry_dsn)


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Settings for the HTTP layer, cached so tests can reset them."""
    return Settings()
