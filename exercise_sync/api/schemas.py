from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from exercise_sync.reconciliation.conflicts import ConflictGroup
from exercise_sync.reconciliation.pipeline import SyncResult
from exercise_sync.records.models import ExerciseRecord


class ExerciseResponse(BaseModel):
    id: str
    exercise_type: str
    start_time: datetime
    duration_minutes: int
    source: str
    source_name: str
    distance_km: float | None
    calories: int | None
    notes: str | None

    @classmethod
    def from_record(cls, record: ExerciseRecord) -> ExerciseResponse:
        return cls(
            id=record.id,
            exercise_type=record.exercise_type.value,
            start_time=record.start_time,
            duration_minutes=record.duration_minutes,
            source=record.source.value,
            source_name=record.source.display_name,
            distance_km=record.distance_km,
            calories=record.calories,
            notes=record.notes,
        )


class ConflictGroupResponse(BaseModel):
    exercises: list[ExerciseResponse]
    overlapping_pairs: list[tuple[str, str]]

    @classmethod
    def from_group(cls, group: ConflictGroup) -> ConflictGroupResponse:
        return cls(
            exercises=[ExerciseResponse.from_record(record) for record in group],
            overlapping_pairs=group.overlapping_pairs(),
        )


class SyncResponse(BaseModel):
    status: str
    fetched_count: int
    fetch_failed: bool
    exercise_count: int
    discarded_ids: list[str]
    conflict_group_count: int
    current_conflict: ConflictGroupResponse | None

    @classmethod
    def from_result(cls, result: SyncResult) -> SyncResponse:
        return cls(
            status=result.status.value,
            fetched_count=result.fetched_count,
            fetch_failed=result.fetch_failed,
            exercise_count=len(result.records),
            discarded_ids=result.discarded_ids,
            conflict_group_count=len(result.groups),
            current_conflict=ConflictGroupResponse.from_group(result.current_group) if result.current_group else None,
        )


class ResolveRequest(BaseModel):
    survivor_id: str


class ResolveResponse(BaseModel):
    survivor_id: str
    deleted_ids: list[str]
    next_conflict: ConflictGroupResponse | None
