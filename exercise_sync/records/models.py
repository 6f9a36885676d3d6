"""Exercise record model.

One record is one logged activity session. Start times are wall-clock
(no timezone) at minute resolution.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExerciseType(StrEnum):
    """Exercise type labels. Matching between records is exact."""

    RUNNING = "Running"
    WALKING = "Walking"
    SWIMMING = "Swimming"
    YOGA = "Yoga"
    HIKING = "Hiking"
    OTHER = "Other"

    @classmethod
    def parse(cls, label: str) -> ExerciseType:
        """Look up a label case-insensitively.

        Raises:
            ValueError: If the label is not a known exercise type
        """
        normalized = label.strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"Unknown exercise type: {label!r}")


class DataSource(StrEnum):
    """Where a record came from."""

    MANUAL = "manual"
    SAMSUNG_HEALTH = "samsung_health"
    GARMIN = "garmin"
    OTHER_PROVIDER = "other_provider"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def is_manual(self) -> bool:
        return self is DataSource.MANUAL


_DISPLAY_NAMES: dict[DataSource, str] = {
    DataSource.MANUAL: "Manual",
    DataSource.SAMSUNG_HEALTH: "Samsung Health",
    DataSource.GARMIN: "Garmin",
    DataSource.OTHER_PROVIDER: "Health Connect",
}


class ExerciseRecord(BaseModel):
    """A single exercise session from any source."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    exercise_type: ExerciseType
    start_time: datetime
    duration_minutes: int = Field(gt=0)
    source: DataSource
    distance_km: float | None = Field(default=None, ge=0)
    calories: int | None = Field(default=None, ge=0)
    notes: str | None = None

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, value: datetime) -> datetime:
        """Require a wall-clock time and drop anything below the minute."""
        if value.tzinfo is not None:
            raise ValueError("start_time must be a wall-clock time without timezone")
        return value.replace(second=0, microsecond=0)

    @property
    def sort_key(self) -> str:
        """Fixed-width "YYYY-MM-DDTHH:MM" form; sorts like the timestamp itself."""
        return self.start_time.isoformat(timespec="minutes")

    def describe(self) -> str:
        return f"{self.exercise_type.value} @ {self.sort_key} ({self.duration_minutes}min, {self.source.display_name}, id={self.id})"
