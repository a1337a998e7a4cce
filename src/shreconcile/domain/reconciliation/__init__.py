"""Reconciliation of two identity stores into one.

Flow per table, in dependency order:
1) load a snapshot from each source (organization references as names)
2) key both snapshots by natural key
3) merge key by key with the table's conflict policy
4) replace the destination table and commit
"""

from __future__ import annotations

from .engine import ReconciliationEngine, ReconciliationResult, TableOutcome
from .merge import MergeResult, MergeStats, index_records, merge_snapshots
from .organizations import OrganizationIndex, OrganizationNames
from .policy import (
    keep_first_enrollment,
    merge_identities,
    merge_profiles,
    merge_unique_identities,
    prefer_first,
)

__all__ = [
    "MergeResult",
    "MergeStats",
    "OrganizationIndex",
    "OrganizationNames",
    "ReconciliationEngine",
    "ReconciliationResult",
    "TableOutcome",
    "index_records",
    "keep_first_enrollment",
    "merge_identities",
    "merge_profiles",
    "merge_snapshots",
    "merge_unique_identities",
    "prefer_first",
]
