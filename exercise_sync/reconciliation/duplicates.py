"""Duplicate merging.

Records of the same exercise type, on the same calendar date, whose start
times are within a few minutes of each other describe one real event.
Duplicates are collapsed automatically: provider data wins over manual
entries, otherwise the first record in input order is kept.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from loguru import logger

from exercise_sync.reconciliation.interval import minute_of_day
from exercise_sync.records.models import ExerciseRecord

DEFAULT_THRESHOLD_MINUTES = 5


def is_same_event(seed: ExerciseRecord, other: ExerciseRecord, threshold_minutes: int = DEFAULT_THRESHOLD_MINUTES) -> bool:
    """Check whether two records describe the same event.

    Args:
        seed: Record the cluster is built around
        other: Candidate record
        threshold_minutes: Max allowed difference between start-of-day minutes

    Returns:
        True if type and date match and start times are within the threshold
    """
    if seed.exercise_type != other.exercise_type:
        return False
    if seed.start_time.date() != other.start_time.date():
        return False
    return abs(minute_of_day(seed.start_time) - minute_of_day(other.start_time)) <= threshold_minutes


def choose_survivor(members: Sequence[ExerciseRecord]) -> ExerciseRecord:
    """First non-manual member in input order, else the first member."""
    for member in members:
        if not member.source.is_manual:
            return member
    return members[0]


@dataclass
class DuplicateCluster:
    """Records judged to be the same event. Built around its first member."""

    members: list[ExerciseRecord]

    @property
    def seed(self) -> ExerciseRecord:
        return self.members[0]

    @property
    def survivor(self) -> ExerciseRecord:
        return choose_survivor(self.members)

    @property
    def discarded(self) -> list[ExerciseRecord]:
        survivor = self.survivor
        return [member for member in self.members if member is not survivor]


@dataclass
class MergeResult:
    """Deduplicated records (start time descending) plus what was dropped."""

    records: list[ExerciseRecord]
    discarded: list[ExerciseRecord] = field(default_factory=list)

    @property
    def discarded_ids(self) -> list[str]:
        return [record.id for record in self.discarded]


def find_duplicate_clusters(
    records: Sequence[ExerciseRecord],
    threshold_minutes: int = DEFAULT_THRESHOLD_MINUTES,
) -> list[DuplicateCluster]:
    """Partition records into clusters, in input order.

    Membership is always tested against the cluster's seed record, never
    chained through other members. Single-record clusters are included.
    """
    assigned = [False] * len(records)
    clusters: list[DuplicateCluster] = []

    for seed_index, seed in enumerate(records):
        if assigned[seed_index]:
            continue
        assigned[seed_index] = True
        members = [seed]
        for other_index in range(seed_index + 1, len(records)):
            if assigned[other_index]:
                continue
            other = records[other_index]
            if is_same_event(seed, other, threshold_minutes):
                assigned[other_index] = True
                members.append(other)
        clusters.append(DuplicateCluster(members=members))

    return clusters


def _collapse_once(
    records: Sequence[ExerciseRecord],
    threshold_minutes: int,
) -> tuple[list[ExerciseRecord], list[ExerciseRecord]]:
    kept: list[ExerciseRecord] = []
    discarded: list[ExerciseRecord] = []

    for cluster in find_duplicate_clusters(records, threshold_minutes):
        survivor = cluster.survivor
        kept.append(survivor)
        if len(cluster.members) == 1:
            continue

        logger.debug(f"[DEDUP] Found {len(cluster.members) - 1} duplicate(s) for {cluster.seed.exercise_type.value} at {cluster.seed.sort_key}")
        for member in cluster.discarded:
            logger.debug(f"[DEDUP]   dropping {member.describe()}")
        logger.debug(f"[DEDUP]   keeping {survivor.describe()}")
        discarded.extend(cluster.discarded)

    return kept, discarded


def sort_newest_first(records: Iterable[ExerciseRecord]) -> list[ExerciseRecord]:
    """Order by start time descending; ties keep their input order."""
    return sorted(records, key=lambda record: record.sort_key, reverse=True)


def merge_duplicates(
    records: Iterable[ExerciseRecord],
    threshold_minutes: int = DEFAULT_THRESHOLD_MINUTES,
) -> MergeResult:
    """Collapse duplicate records into one survivor each.

    Collapsing repeats until a pass finds nothing to merge: a survivor can
    land within the threshold of a record that its cluster's seed did not
    reach, and merging that pair now keeps the operation idempotent.

    Args:
        records: Existing and newly fetched records, in priority order
        threshold_minutes: Max start-of-day difference for duplicates

    Returns:
        MergeResult with survivors ordered by start time descending
    """
    current = list(records)
    discarded: list[ExerciseRecord] = []
    before = len(current)

    while True:
        kept, dropped = _collapse_once(current, threshold_minutes)
        if not dropped:
            break
        discarded.extend(dropped)
        current = kept

    logger.info(f"[DEDUP] before={before} after={len(current)} dropped={len(discarded)}")
    return MergeResult(records=sort_newest_first(current), discarded=discarded)
