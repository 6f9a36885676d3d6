from __future__ import annotations

from exercise_sync.reconciliation.duplicates import sort_newest_first
from exercise_sync.records.models import ExerciseRecord
from exercise_sync.store.base import RecordStore


class InMemoryRecordStore(RecordStore):
    """Process-local store. Records with equal start times list in insertion order."""

    def __init__(self, records: list[ExerciseRecord] | None = None) -> None:
        super().__init__()
        self._records: dict[str, ExerciseRecord] = {record.id: record for record in records or []}

    async def list_all(self) -> list[ExerciseRecord]:
        return sort_newest_first(self._records.values())

    async def get_by_id(self, record_id: str) -> ExerciseRecord | None:
        return self._records.get(record_id)

    async def _write(self, upserts: list[ExerciseRecord], delete_ids: list[str] | None) -> None:
        records = {} if delete_ids is None else dict(self._records)
        for record_id in delete_ids or []:
            records.pop(record_id, None)
        for record in upserts:
            records[record.id] = record
        self._records = records
