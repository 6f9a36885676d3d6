"""Manual exercise entry.

Form values arrive as loosely typed input (text fields, query params, JSON).
Validation collects one message per failing field, then builds a Manual
record with a fresh id.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel

from exercise_sync.errors import ManualEntryError
from exercise_sync.records.models import DataSource, ExerciseRecord, ExerciseType


def _now_to_minute() -> datetime:
    return datetime.now().replace(second=0, microsecond=0)


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ManualEntry(BaseModel):
    exercise_type: str | None = None
    duration_minutes: str | int | None = None
    start_time: datetime | None = None
    distance_km: str | float | None = None
    calories: str | int | None = None
    notes: str | None = None

    def field_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}

        if _is_blank(self.exercise_type):
            errors["exercise_type"] = "Exercise type is required"
        else:
            try:
                ExerciseType.parse(str(self.exercise_type))
            except ValueError:
                allowed = ", ".join(member.value for member in ExerciseType)
                errors["exercise_type"] = f"Exercise type must be one of: {allowed}"

        if _is_blank(self.duration_minutes):
            errors["duration_minutes"] = "Duration is required"
        else:
            duration = _parse_int(self.duration_minutes)
            if duration is None:
                errors["duration_minutes"] = "Duration must be a whole number of minutes"
            elif duration <= 0:
                errors["duration_minutes"] = "Duration must be greater than zero"

        if self.start_time is not None and self.start_time.tzinfo is not None:
            errors["start_time"] = "Start time must not carry a timezone"

        if not _is_blank(self.distance_km):
            distance = _parse_float(self.distance_km)
            if distance is None:
                errors["distance_km"] = "Distance must be a valid number"
            elif distance < 0:
                errors["distance_km"] = "Distance cannot be negative"

        if not _is_blank(self.calories):
            calories = _parse_int(self.calories)
            if calories is None:
                errors["calories"] = "Calories must be a valid number"
            elif calories < 0:
                errors["calories"] = "Calories cannot be negative"

        return errors

    def to_record(
        self,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        now: Callable[[], datetime] = _now_to_minute,
    ) -> ExerciseRecord:
        """Validate the form and build a Manual record.

        Raises:
            ManualEntryError: With one message per invalid field
        """
        errors = self.field_errors()
        if errors:
            raise ManualEntryError(errors)

        return ExerciseRecord(
            id=id_factory(),
            exercise_type=ExerciseType.parse(str(self.exercise_type)),
            start_time=self.start_time or now(),
            duration_minutes=_parse_int(self.duration_minutes),
            source=DataSource.MANUAL,
            distance_km=None if _is_blank(self.distance_km) else _parse_float(self.distance_km),
            calories=None if _is_blank(self.calories) else _parse_int(self.calories),
            notes=None if _is_blank(self.notes) else self.notes.strip(),
        )


def _parse_int(value: str | int | float | None) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_float(value: str | int | float | None) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        parsed = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None
