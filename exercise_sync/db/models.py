from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from exercise_sync.records.models import DataSource, ExerciseRecord, ExerciseType


class Base(DeclarativeBase):
    """Base class for all database models."""


class ExerciseRow(Base):
    """Stored exercise record.

    Schema:
    - id: Record id (provider-assigned or UUID for manual entries)
    - exercise_type: Exercise type label ("Running", "Yoga", ...)
    - start_time: Wall-clock start, minute resolution, no timezone
    - duration_minutes: Session length
    - source: DataSource value
    - distance_km / calories / notes: Optional metrics
    - updated_at: Last write timestamp (UTC)
    """

    __tablename__ = "exercises"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    exercise_type: Mapped[str] = mapped_column(String, nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False)
    distance_km: Mapped[float | None] = mapped_column(Float, nullable=True)
    calories: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (Index("idx_exercises_start_time", "start_time"),)

    def to_record(self) -> ExerciseRecord:
        return ExerciseRecord(
            id=self.id,
            exercise_type=ExerciseType(self.exercise_type),
            start_time=self.start_time,
            duration_minutes=self.duration_minutes,
            source=DataSource(self.source),
            distance_km=self.distance_km,
            calories=self.calories,
            notes=self.notes,
        )

    @classmethod
    def from_record(cls, record: ExerciseRecord) -> ExerciseRow:
        return cls(
            id=record.id,
            exercise_type=record.exercise_type.value,
            start_time=record.start_time,
            duration_minutes=record.duration_minutes,
            source=record.source.value,
            distance_km=record.distance_km,
            calories=record.calories,
            notes=record.notes,
            updated_at=datetime.now(timezone.utc),
        )
