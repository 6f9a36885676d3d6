"""Reconciliation pipeline.

One pass: check the provider, fetch the trailing window, union the fetched
records with the store, collapse duplicates, persist once, group conflicts,
and present the first group for resolution.

Passes never overlap. A sync triggered while a pass is in flight is
reported as busy and leaves the store alone. The store is written exactly
once per pass, so a pass cancelled before that write changes nothing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from enum import StrEnum

from loguru import logger

from exercise_sync.errors import PipelineBusyError
from exercise_sync.integrations.mapper import map_raw_sessions
from exercise_sync.integrations.provider import HealthDataProvider
from exercise_sync.reconciliation.conflicts import ConflictGroup, group_conflicts
from exercise_sync.reconciliation.duplicates import DEFAULT_THRESHOLD_MINUTES, merge_duplicates
from exercise_sync.reconciliation.resolution import ResolutionDecision, ResolutionSession
from exercise_sync.records.manual import ManualEntry
from exercise_sync.records.models import ExerciseRecord
from exercise_sync.store.base import RecordStore

DEFAULT_SYNC_WINDOW = timedelta(days=7)


class SyncStatus(StrEnum):
    COMPLETED = "completed"
    BUSY = "busy"
    UNAVAILABLE = "unavailable"
    NEEDS_AUTHORIZATION = "needs_authorization"


@dataclass
class SyncResult:
    status: SyncStatus
    fetched_count: int = 0
    fetch_failed: bool = False
    records: list[ExerciseRecord] = field(default_factory=list)
    discarded_ids: list[str] = field(default_factory=list)
    groups: list[ConflictGroup] = field(default_factory=list)
    current_group: ConflictGroup | None = None

    @property
    def needs_authorization(self) -> bool:
        return self.status is SyncStatus.NEEDS_AUTHORIZATION


def union_by_id(existing: Iterable[ExerciseRecord], incoming: Iterable[ExerciseRecord]) -> list[ExerciseRecord]:
    """Existing records first; an incoming record replaces the one with its id in place."""
    combined: dict[str, ExerciseRecord] = {record.id: record for record in existing}
    for record in incoming:
        combined[record.id] = record
    return list(combined.values())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReconciliationPipeline:
    def __init__(
        self,
        store: RecordStore,
        provider: HealthDataProvider,
        *,
        duplicate_threshold_minutes: int = DEFAULT_THRESHOLD_MINUTES,
        sync_window: timedelta = DEFAULT_SYNC_WINDOW,
        local_zone: tzinfo | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store = store
        self.provider = provider
        self.session = ResolutionSession(store)
        self.duplicate_threshold_minutes = duplicate_threshold_minutes
        self.sync_window = sync_window
        self.local_zone = local_zone
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def sync(self) -> SyncResult:
        """Run one sync pass against the provider.

        Returns:
            SyncResult; status is BUSY, UNAVAILABLE or NEEDS_AUTHORIZATION
            when the pass stopped before touching the store
        """
        if self.busy:
            logger.info("[SYNC] Sync already in progress, ignoring trigger")
            return SyncResult(status=SyncStatus.BUSY)

        async with self._lock:
            if not await self.provider.is_available():
                logger.info("[SYNC] Provider unavailable, nothing synced")
                return SyncResult(status=SyncStatus.UNAVAILABLE)

            if not await self.provider.has_grants():
                logger.warning("[SYNC] Provider grants missing, authorization needed")
                return SyncResult(status=SyncStatus.NEEDS_AUTHORIZATION)

            end = self._clock()
            start = end - self.sync_window
            fetch_failed = False
            try:
                raw_sessions = await self.provider.read_sessions(start, end)
            except Exception as e:
                logger.warning(f"[SYNC] Fetch failed, continuing with stored records only: {e}")
                raw_sessions = []
                fetch_failed = True

            fetched = map_raw_sessions(raw_sessions, self.local_zone)
            logger.info(f"[SYNC] Fetched {len(fetched)} records from provider")
            result = await self._reconcile(fetched)
            result.fetched_count = len(fetched)
            result.fetch_failed = fetch_failed
            return result

    async def refresh(self) -> SyncResult:
        """Re-run dedup and conflict grouping on the stored records only."""
        async with self._exclusive():
            return await self._reconcile([])

    async def add_manual(self, entry: ManualEntry) -> tuple[ExerciseRecord, SyncResult]:
        """Validate a manual entry and reconcile it into the store.

        Raises:
            ManualEntryError: If the form is invalid
            PipelineBusyError: If a pass is in flight
        """
        record = entry.to_record()
        async with self._exclusive():
            logger.info(f"[SYNC] Manual entry: {record.describe()}")
            return record, await self._reconcile([record])

    async def resolve(self, survivor_id: str) -> ResolutionDecision:
        async with self._exclusive():
            return await self.session.choose(survivor_id)

    def dismiss(self) -> ConflictGroup:
        return self.session.dismiss()

    async def delete_record(self, record_id: str) -> None:
        async with self._exclusive():
            await self.store.delete_by_id(record_id)
            current = self.session.current_group
            if current is not None and record_id in current:
                self.session.regroup(await self.store.list_all())

    async def delete_all(self) -> None:
        async with self._exclusive():
            await self.store.delete_all()
            self.session.begin([])

    def _exclusive(self) -> asyncio.Lock:
        if self.busy:
            raise PipelineBusyError("A reconciliation pass is already running")
        return self._lock

    async def _reconcile(self, incoming: list[ExerciseRecord]) -> SyncResult:
        existing = await self.store.list_all()
        combined = union_by_id(existing, incoming)
        merged = merge_duplicates(combined, self.duplicate_threshold_minutes)

        await self.store.save_reconciled(merged.records, merged.discarded_ids)

        groups = group_conflicts(merged.records)
        current = self.session.begin(groups)
        logger.info(f"[SYNC] Pass complete: records={len(merged.records)} dropped={len(merged.discarded)} conflict_groups={len(groups)}")
        return SyncResult(
            status=SyncStatus.COMPLETED,
            records=merged.records,
            discarded_ids=merged.discarded_ids,
            groups=groups,
            current_group=current,
        )
