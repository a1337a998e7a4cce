"""Orchestrator for merging two identity stores into a third.

Tables are processed strictly in ``MERGE_ORDER``. Each table is loaded from both
sources, merged in memory, written to the destination as a full replacement and
committed before the next table starts. Domains and enrollments reference
organizations, so the destination's organization index is built right after the
organizations table has been written.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from shreconcile.domain.model import MERGE_ORDER, Table

from .merge import MergeStats, index_records, merge_snapshots
from .policy import (
    keep_first_enrollment,
    merge_identities,
    merge_profiles,
    merge_unique_identities,
    prefer_first,
)

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Sequence

    from shreconcile.domain.ports import IdentitySnapshotReader, IdentitySnapshotWriter

    from .merge import ConflictResolver
    from .organizations import OrganizationIndex

log = getLogger(__name__)


@dataclass(slots=True)
class TableOutcome:
    table: Table
    stats: MergeStats
    written: int


@dataclass(slots=True)
class ReconciliationResult:
    tables: list[TableOutcome] = field(default_factory=list["TableOutcome"])

    def outcome(self, table: Table) -> TableOutcome:
        for outcome in self.tables:
            if outcome.table is table:
                return outcome
        raise KeyError(table)


@dataclass(frozen=True)
class TableMerge[R]:
    """How one table is loaded, keyed, resolved and written."""

    table: Table
    load: Callable[[IdentitySnapshotReader], Sequence[R]]
    key: Callable[[R], Hashable]
    resolve: ConflictResolver[R]
    write: Callable[[IdentitySnapshotWriter, Iterable[R], OrganizationIndex | None], int]


def _record_key(record: object) -> Hashable:
    return record.key  # pyright: ignore[reportAttributeAccessIssue]


TABLE_MERGES: dict[Table, TableMerge[object]] = {
    Table.COUNTRIES: TableMerge(
        table=Table.COUNTRIES,
        load=lambda store: store.load_countries(),
        key=_record_key,
        resolve=prefer_first,
        write=lambda store, records, _orgs: store.replace_countries(records),
    ),
    Table.ORGANIZATIONS: TableMerge(
        table=Table.ORGANIZATIONS,
        load=lambda store: store.load_organizations(),
        key=_record_key,
        resolve=prefer_first,
        write=lambda store, records, _orgs: store.replace_organizations(records),
    ),
    Table.DOMAINS: TableMerge(
        table=Table.DOMAINS,
        load=lambda store: store.load_domains(),
        key=_record_key,
        resolve=prefer_first,
        write=lambda store, records, orgs: store.replace_domains(
            records, organizations=_require_index(orgs, Table.DOMAINS)
        ),
    ),
    Table.BLACKLIST: TableMerge(
        table=Table.BLACKLIST,
        load=lambda store: store.load_blacklist(),
        key=_record_key,
        resolve=prefer_first,
        write=lambda store, records, _orgs: store.replace_blacklist(records),
    ),
    Table.UNIQUE_IDENTITIES: TableMerge(
        table=Table.UNIQUE_IDENTITIES,
        load=lambda store: store.load_unique_identities(),
        key=_record_key,
        resolve=merge_unique_identities,
        write=lambda store, records, _orgs: store.replace_unique_identities(records),
    ),
    Table.PROFILES: TableMerge(
        table=Table.PROFILES,
        load=lambda store: store.load_profiles(),
        key=_record_key,
        resolve=merge_profiles,
        write=lambda store, records, _orgs: store.replace_profiles(records),
    ),
    Table.IDENTITIES: TableMerge(
        table=Table.IDENTITIES,
        load=lambda store: store.load_identities(),
        key=_record_key,
        resolve=merge_identities,
        write=lambda store, records, _orgs: store.replace_identities(records),
    ),
    Table.ENROLLMENTS: TableMerge(
        table=Table.ENROLLMENTS,
        load=lambda store: store.load_enrollments(),
        key=_record_key,
        resolve=keep_first_enrollment,
        write=lambda store, records, orgs: store.replace_enrollments(
            records, organizations=_require_index(orgs, Table.ENROLLMENTS)
        ),
    ),
}  # pyright: ignore[reportAssignmentType]


def _require_index(index: OrganizationIndex | None, table: Table) -> OrganizationIndex:
    if index is None:
        raise RuntimeError(f"{table}: organization index requested before organizations merge")
    return index


@dataclass(slots=True)
class ReconciliationEngine:
    """Merge ``first`` and ``second`` into ``destination``, table by table."""

    first: IdentitySnapshotReader
    second: IdentitySnapshotReader
    destination: IdentitySnapshotWriter
    commit: Callable[[], None]
    tables: Sequence[Table] = MERGE_ORDER

    def run(self) -> ReconciliationResult:
        result = ReconciliationResult()
        organizations: OrganizationIndex | None = None
        for table in self.tables:
            outcome = self._merge_table(TABLE_MERGES[table], organizations)
            result.tables.append(outcome)
            if table is Table.ORGANIZATIONS:
                organizations = self.destination.organization_index()
                log.info("Organization index built with %d names", len(organizations))
        return result

    def _merge_table(
        self,
        table_merge: TableMerge[object],
        organizations: OrganizationIndex | None,
    ) -> TableOutcome:
        table = table_merge.table
        key = table_merge.key
        first = index_records(table_merge.load(self.first), key, table=f"{table} (first)")
        second = index_records(table_merge.load(self.second), key, table=f"{table} (second)")
        merged = merge_snapshots(first, second, resolve=table_merge.resolve, table=table)
        written = table_merge.write(self.destination, merged.values(), organizations)
        self.commit()
        log.info("%s: wrote %d records to destination", table, written)
        return TableOutcome(table=table, stats=merged.stats, written=written)
