"""Conflict grouping.

Distinct records whose time intervals overlap cannot all be true: the user
has to pick one. Overlap is chained, so a group is a connected component of
the overlap graph, even when two members do not overlap directly.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from itertools import combinations

from loguru import logger

from exercise_sync.reconciliation.interval import Interval
from exercise_sync.records.models import ExerciseRecord


@dataclass(frozen=True)
class ConflictGroup:
    """Two or more overlapping records, in discovery order."""

    records: tuple[ExerciseRecord, ...]

    @property
    def ids(self) -> list[str]:
        return [record.id for record in self.records]

    @property
    def id_set(self) -> frozenset[str]:
        return frozenset(self.ids)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self.id_set

    def __iter__(self) -> Iterator[ExerciseRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def overlapping_pairs(self) -> list[tuple[str, str]]:
        """Pairs of member ids whose intervals intersect directly."""
        return [
            (first.id, second.id)
            for first, second in combinations(self.records, 2)
            if Interval.from_record(first).overlaps(Interval.from_record(second))
        ]


def group_conflicts(records: Sequence[ExerciseRecord]) -> list[ConflictGroup]:
    """Partition records into conflict groups.

    Records are scanned in the given order. Each unassigned record seeds a
    breadth-first expansion that pulls in every unassigned record
    overlapping any member so far.

    Args:
        records: Deduplicated records

    Returns:
        Groups with more than one member, in order of their seed record
    """
    intervals = [Interval.from_record(record) for record in records]
    assigned = [False] * len(records)
    groups: list[ConflictGroup] = []

    for seed_index in range(len(records)):
        if assigned[seed_index]:
            continue
        assigned[seed_index] = True
        member_indexes = [seed_index]
        frontier = deque([seed_index])

        while frontier:
            current = frontier.popleft()
            for other_index in range(len(records)):
                if assigned[other_index]:
                    continue
                if intervals[current].overlaps(intervals[other_index]):
                    assigned[other_index] = True
                    member_indexes.append(other_index)
                    frontier.append(other_index)

        if len(member_indexes) > 1:
            group = ConflictGroup(records=tuple(records[index] for index in member_indexes))
            logger.info(f"[CONFLICTS] Found conflict group with {len(group)} records: {group.ids}")
            groups.append(group)

    if not groups:
        logger.debug("[CONFLICTS] No conflicts detected")
    return groups
