"""Ports the domain services depend on."""

from __future__ import annotations

from .store import (
    AffiliationStore,
    IdentityLookup,
    IdentitySnapshotReader,
    IdentitySnapshotWriter,
)

__all__ = [
    "AffiliationStore",
    "IdentityLookup",
    "IdentitySnapshotReader",
    "IdentitySnapshotWriter",
]
