"""Conflict resolution session.

Presents one conflict group at a time. The user either picks the record to
keep (every other member is deleted) or dismisses the group (every member
is kept). After a pick the remaining records are regrouped and the next
group, if any, is presented straight away.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from loguru import logger

from exercise_sync.errors import InvalidSurvivorError, ResolutionStateError
from exercise_sync.reconciliation.conflicts import ConflictGroup, group_conflicts
from exercise_sync.records.models import ExerciseRecord
from exercise_sync.store.base import RecordStore


class ResolutionState(StrEnum):
    IDLE = "idle"
    AWAITING_CHOICE = "awaiting_choice"


@dataclass(frozen=True)
class ResolutionDecision:
    survivor_id: str
    deleted_ids: list[str]


class ResolutionSession:
    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._current: ConflictGroup | None = None
        self._pending: deque[ConflictGroup] = deque()
        self._dismissed: set[frozenset[str]] = set()

    @property
    def state(self) -> ResolutionState:
        return ResolutionState.IDLE if self._current is None else ResolutionState.AWAITING_CHOICE

    @property
    def current_group(self) -> ConflictGroup | None:
        return self._current

    @property
    def pending(self) -> list[ConflictGroup]:
        """Groups queued behind the current one."""
        return list(self._pending)

    def begin(self, groups: Iterable[ConflictGroup]) -> ConflictGroup | None:
        """Start over with the groups found by a pipeline pass.

        Returns:
            The group now awaiting a choice, or None if there are no groups
        """
        self._dismissed.clear()
        self._current = None
        self._pending = deque(groups)
        return self.present_next()

    def regroup(self, records: Sequence[ExerciseRecord]) -> ConflictGroup | None:
        """Rebuild the queue from the current records, skipping dismissed groups."""
        self._current = None
        self._pending = deque(group for group in group_conflicts(records) if group.id_set not in self._dismissed)
        return self.present_next()

    def present_next(self) -> ConflictGroup | None:
        """Move the next pending group into AwaitingChoice, if idle."""
        if self._current is None and self._pending:
            self._current = self._pending.popleft()
            logger.info(f"[RESOLUTION] Presenting conflict group {self._current.ids} ({len(self._pending)} more pending)")
        return self._current

    async def choose(self, survivor_id: str) -> ResolutionDecision:
        """Keep survivor_id, delete the rest of the current group, then regroup.

        Raises:
            ResolutionStateError: If no group is awaiting a choice
            InvalidSurvivorError: If survivor_id is not in the current group
        """
        group = self._require_current()
        if survivor_id not in group:
            raise InvalidSurvivorError(survivor_id, group.ids)

        deleted_ids = [record_id for record_id in group.ids if record_id != survivor_id]
        await self._store.delete_by_ids(deleted_ids)
        logger.info(f"[RESOLUTION] Kept {survivor_id}, deleted {deleted_ids}")

        self.regroup(await self._store.list_all())
        return ResolutionDecision(survivor_id=survivor_id, deleted_ids=deleted_ids)

    def dismiss(self) -> ConflictGroup:
        """Drop the current group without deleting anything.

        Raises:
            ResolutionStateError: If no group is awaiting a choice
        """
        group = self._require_current()
        self._dismissed.add(group.id_set)
        self._current = None
        logger.info(f"[RESOLUTION] Dismissed conflict group {group.ids}, all records kept")
        return group

    def _require_current(self) -> ConflictGroup:
        if self._current is None:
            raise ResolutionStateError("No conflict group is awaiting a choice")
        return self._current
