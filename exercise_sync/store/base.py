"""Record store contract.

The reconciliation pipeline is the only writer. Readers observe the store
and receive a fresh snapshot after every write.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable

from loguru import logger

from exercise_sync.records.models import ExerciseRecord


class RecordStore(ABC):
    """Durable collection of exercise records keyed by id.

    Listing order is start time descending. Deletes are idempotent.
    """

    def __init__(self) -> None:
        self._observers: list[asyncio.Queue[list[ExerciseRecord]]] = []

    @abstractmethod
    async def list_all(self) -> list[ExerciseRecord]:
        """All records, newest start time first."""

    @abstractmethod
    async def get_by_id(self, record_id: str) -> ExerciseRecord | None: ...

    @abstractmethod
    async def _write(self, upserts: list[ExerciseRecord], delete_ids: list[str] | None) -> None:
        """Apply upserts and deletes in one atomic step.

        delete_ids=None means delete everything before upserting.
        """

    async def upsert_many(self, records: Iterable[ExerciseRecord]) -> None:
        """Replace existing records by id, insert the rest."""
        await self._commit(list(records), [])

    async def upsert(self, record: ExerciseRecord) -> None:
        await self.upsert_many([record])

    async def delete_by_id(self, record_id: str) -> None:
        await self.delete_by_ids([record_id])

    async def delete_by_ids(self, record_ids: Iterable[str]) -> None:
        await self._commit([], list(record_ids))

    async def delete_all(self) -> None:
        await self._commit([], None)

    async def save_reconciled(self, records: Iterable[ExerciseRecord], discarded_ids: Iterable[str]) -> None:
        """Persist a reconciled set in one step.

        Survivors are upserted and records absorbed as duplicates are removed.
        Either both happen or neither does.
        """
        survivors = list(records)
        survivor_ids = {record.id for record in survivors}
        removed = [record_id for record_id in discarded_ids if record_id not in survivor_ids]
        await self._commit(survivors, removed)

    async def _commit(self, upserts: list[ExerciseRecord], delete_ids: list[str] | None) -> None:
        if not upserts and delete_ids == []:
            return
        await self._write(upserts, delete_ids)
        deleted = "all" if delete_ids is None else len(delete_ids)
        logger.debug(f"[STORE] upserted={len(upserts)} deleted={deleted}")
        await self._publish()

    async def _publish(self) -> None:
        if not self._observers:
            return
        snapshot = await self.list_all()
        for queue in self._observers:
            queue.put_nowait(snapshot)

    async def observe(self) -> AsyncIterator[list[ExerciseRecord]]:
        """Yield the current contents, then a new snapshot after each write."""
        queue: asyncio.Queue[list[ExerciseRecord]] = asyncio.Queue()
        self._observers.append(queue)
        try:
            yield await self.list_all()
            while True:
                yield await queue.get()
        finally:
            self._observers.remove(queue)
