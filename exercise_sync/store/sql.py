"""SQLAlchemy-backed record store.

Blocking database work runs in a worker thread so the event loop stays free
during persist and query calls.
"""

from __future__ import annotations

import asyncio

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from exercise_sync.db.models import ExerciseRow
from exercise_sync.db.session import session_scope
from exercise_sync.errors import RecordStoreError
from exercise_sync.records.models import ExerciseRecord
from exercise_sync.store.base import RecordStore


class SqlRecordStore(RecordStore):
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        super().__init__()
        self._session_factory = session_factory

    async def list_all(self) -> list[ExerciseRecord]:
        return await asyncio.to_thread(self._list_all_sync)

    async def get_by_id(self, record_id: str) -> ExerciseRecord | None:
        return await asyncio.to_thread(self._get_by_id_sync, record_id)

    async def _write(self, upserts: list[ExerciseRecord], delete_ids: list[str] | None) -> None:
        await asyncio.to_thread(self._write_sync, upserts, delete_ids)

    def _list_all_sync(self) -> list[ExerciseRecord]:
        try:
            with session_scope(self._session_factory) as session:
                rows = session.execute(
                    select(ExerciseRow).order_by(ExerciseRow.start_time.desc(), ExerciseRow.id)
                ).scalars()
                return [row.to_record() for row in rows]
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to list exercises: {e}") from e

    def _get_by_id_sync(self, record_id: str) -> ExerciseRecord | None:
        try:
            with session_scope(self._session_factory) as session:
                row = session.get(ExerciseRow, record_id)
                return row.to_record() if row is not None else None
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to load exercise {record_id}: {e}") from e

    def _write_sync(self, upserts: list[ExerciseRecord], delete_ids: list[str] | None) -> None:
        try:
            with session_scope(self._session_factory) as session:
                if delete_ids is None:
                    session.execute(delete(ExerciseRow))
                elif delete_ids:
                    session.execute(delete(ExerciseRow).where(ExerciseRow.id.in_(delete_ids)))
                for record in upserts:
                    session.merge(ExerciseRow.from_record(record))
                session.commit()
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to write exercises: {e}") from e
