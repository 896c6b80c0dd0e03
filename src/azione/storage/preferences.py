import json
import logging
import threading
from pathlib import Path

import pytz
from pydantic import BaseModel, Field, ValidationError, field_validator

from azione.config import settings
from azione.schemas import ContextType, Tone

logger = logging.getLogger(__name__)


class Preferences(BaseModel):
    """User defaults applied to new analyses."""

    timezone: str = "Europe/Rome"
    default_context: ContextType = ContextType.OTHER
    default_tone: Tone = Tone.CORDIAL
    event_duration_call_min: int = Field(default=30, gt=0)
    event_duration_meet_min: int = Field(default=60, gt=0)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @classmethod
    def from_settings(cls) -> "Preferences":
        return cls(
            timezone=settings.timezone,
            event_duration_call_min=settings.event_duration_call_min,
            event_duration_meet_min=settings.event_duration_meet_min,
        )


class PreferencesStore:
    def __init__(self, path: Path | None = None):
        self.path = path or settings.preferences_path
        self._lock = threading.Lock()

    def load(self) -> Preferences:
        """Stored preferences; defaults are written on first read."""
        with self._lock:
            if self.path.exists():
                try:
                    return Preferences.model_validate_json(self.path.read_text(encoding="utf-8"))
                except (json.JSONDecodeError, ValidationError) as e:
                    logger.warning(f"Ignoring malformed preferences file: {e}")

            preferences = Preferences.from_settings()
            self._write(preferences)
            return preferences

    def save(self, preferences: Preferences) -> Preferences:
        with self._lock:
            self._write(preferences)
        logger.info("Saved preferences")
        return preferences

    def _write(self, preferences: Preferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(preferences.model_dump_json(indent=2), encoding="utf-8")
