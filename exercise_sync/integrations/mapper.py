"""Provider session mapping.

Turns raw provider sessions into exercise records: source from the origin
package name, exercise type from the provider's numeric code, and a
wall-clock start time in the local zone.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from loguru import logger
from pydantic import ValidationError

from exercise_sync.integrations.provider import RawExerciseSession
from exercise_sync.reconciliation.interval import ONE_MINUTE
from exercise_sync.records.models import DataSource, ExerciseRecord, ExerciseType

# Matched case-insensitively as substrings of the origin package name
KNOWN_ORIGINS: tuple[tuple[str, DataSource], ...] = (
    ("samsung", DataSource.SAMSUNG_HEALTH),
    ("garmin", DataSource.GARMIN),
)

# Health Connect ExerciseSessionRecord.EXERCISE_TYPE_* codes
EXERCISE_TYPE_CODES: dict[int, ExerciseType] = {
    56: ExerciseType.RUNNING,
    79: ExerciseType.WALKING,
    74: ExerciseType.SWIMMING,
    83: ExerciseType.YOGA,
    37: ExerciseType.HIKING,
}


def map_source(origin: str) -> DataSource:
    origin_lower = origin.lower()
    for needle, source in KNOWN_ORIGINS:
        if needle in origin_lower:
            return source
    return DataSource.OTHER_PROVIDER


def map_exercise_type(code: int) -> ExerciseType:
    return EXERCISE_TYPE_CODES.get(code, ExerciseType.OTHER)


def resolve_timezone(name: str | None) -> tzinfo | None:
    """ZoneInfo for a configured name, None for the system local zone."""
    return ZoneInfo(name) if name else None


def to_wall_clock(moment: datetime, zone: tzinfo | None = None) -> datetime:
    """Convert a provider instant to a timezone-less local time.

    Naive inputs are taken as already local.
    """
    if moment.tzinfo is None:
        return moment.replace(second=0, microsecond=0)
    return moment.astimezone(zone).replace(tzinfo=None, second=0, microsecond=0)


def map_raw_session(session: RawExerciseSession, zone: tzinfo | None = None) -> ExerciseRecord | None:
    """Map a provider session to an ExerciseRecord.

    Args:
        session: Raw provider session
        zone: Local zone for the wall-clock start (None = system local)

    Returns:
        ExerciseRecord, or None if the session is shorter than a minute
    """
    duration_minutes = (session.end_time - session.start_time) // ONE_MINUTE
    if duration_minutes <= 0:
        logger.warning(f"[SYNC] Skipping provider session {session.id}: duration under one minute")
        return None

    try:
        return ExerciseRecord(
            id=session.id,
            exercise_type=map_exercise_type(session.exercise_type_code),
            start_time=to_wall_clock(session.start_time, zone),
            duration_minutes=duration_minutes,
            source=map_source(session.origin),
            notes=(session.title or "").strip() or None,
        )
    except ValidationError as e:
        logger.warning(f"[SYNC] Skipping invalid provider session {session.id}: {e}")
        return None


def map_raw_sessions(sessions: list[RawExerciseSession], zone: tzinfo | None = None) -> list[ExerciseRecord]:
    records: list[ExerciseRecord] = []
    for session in sessions:
        record = map_raw_session(session, zone)
        if record is not None:
            logger.debug(f"[SYNC] Provider session: {record.describe()}")
            records.append(record)
    return records
