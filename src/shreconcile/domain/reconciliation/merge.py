"""Generic two-into-one merge of table snapshots.

A snapshot is an immutable mapping from natural key to record. Merging is a
pure function of both snapshots and a conflict resolver; nothing here touches a
store.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType

log = getLogger(__name__)

type Snapshot[K: Hashable, R] = Mapping[K, R]
type ConflictResolver[R] = Callable[[R, R], R]


@dataclass(slots=True)
class MergeStats:
    only_first: int = 0
    only_second: int = 0
    identical: int = 0
    conflicts: int = 0

    @property
    def total(self) -> int:
        return self.only_first + self.only_second + self.identical + self.conflicts


@dataclass
class MergeResult[K: Hashable, R]:
    records: Snapshot[K, R]
    stats: MergeStats = field(default_factory=MergeStats)

    def values(self) -> list[R]:
        return list(self.records.values())


def index_records[K: Hashable, R](
    records: Iterable[R],
    key: Callable[[R], K],
    *,
    table: str,
) -> Snapshot[K, R]:
    """Build a snapshot from loaded rows, keeping the first row per key."""

    indexed: dict[K, R] = {}
    for record in records:
        record_key = key(record)
        existing = indexed.get(record_key)
        if existing is not None:
            if existing != record:
                log.warning(
                    "%s: duplicate key %r inside one source, keeping %r over %r",
                    table,
                    record_key,
                    existing,
                    record,
                )
            continue
        indexed[record_key] = record
    return MappingProxyType(indexed)


def merge_snapshots[K: Hashable, R](
    first: Snapshot[K, R],
    second: Snapshot[K, R],
    *,
    resolve: ConflictResolver[R],
    table: str,
) -> MergeResult[K, R]:
    """Merge two snapshots key by key.

    Keys present on one side only are adopted unconditionally, equal records are
    adopted once and differing records are handed to ``resolve``. The result
    lists the first snapshot's keys in their order followed by keys that only
    the second snapshot has.
    """

    stats = MergeStats()
    merged: dict[K, R] = {}

    for key, first_record in first.items():
        second_record = second.get(key)
        if second_record is None:
            log.debug("%s: %r missing in second source", table, key)
            stats.only_first += 1
            merged[key] = first_record
            continue
        if first_record == second_record:
            stats.identical += 1
            merged[key] = first_record
            continue
        resolved = resolve(first_record, second_record)
        log.info(
            "%s: conflict on %r: first=%r second=%r resolved=%r",
            table,
            key,
            first_record,
            second_record,
            resolved,
        )
        stats.conflicts += 1
        merged[key] = resolved

    for key, second_record in second.items():
        if key in first:
            continue
        log.debug("%s: %r missing in first source", table, key)
        stats.only_second += 1
        merged[key] = second_record

    log.info(
        "%s: merged %d records (first only=%d, second only=%d, identical=%d, conflicts=%d)",
        table,
        len(merged),
        stats.only_first,
        stats.only_second,
        stats.identical,
        stats.conflicts,
    )
    return MergeResult(records=MappingProxyType(merged), stats=stats)
