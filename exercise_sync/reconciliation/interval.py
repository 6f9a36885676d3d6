"""Interval model and overlap detection.

Each record covers the half-open interval [start, start + duration) measured
in absolute minutes, so intervals compare correctly across month and year
boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from exercise_sync.records.models import ExerciseRecord

EPOCH = datetime(1970, 1, 1)
ONE_MINUTE = timedelta(minutes=1)


def minute_stamp(moment: datetime) -> int:
    """Whole minutes between the epoch and a wall-clock time."""
    return (moment - EPOCH) // ONE_MINUTE


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


@dataclass(frozen=True)
class Interval:
    start: int
    end: int

    @classmethod
    def from_record(cls, record: ExerciseRecord) -> Interval:
        start = minute_stamp(record.start_time)
        return cls(start=start, end=start + record.duration_minutes)

    def overlaps(self, other: Interval) -> bool:
        # Strict: an interval ending when another begins does not overlap it
        return self.start < other.end and other.start < self.end


def records_overlap(first: ExerciseRecord, second: ExerciseRecord) -> bool:
    """Check whether two records' time intervals intersect."""
    return Interval.from_record(first).overlaps(Interval.from_record(second))
