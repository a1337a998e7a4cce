"""Ports for reading and writing identity stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from datetime import datetime

    from shreconcile.domain.model import (
        BlacklistEntry,
        Country,
        DomainOrganization,
        Enrollment,
        Identity,
        Organization,
        OrganizationId,
        Profile,
        UniqueIdentity,
        Uuid,
    )
    from shreconcile.domain.reconciliation.organizations import OrganizationIndex


@runtime_checkable
class IdentitySnapshotReader(Protocol):
    """Full-table reads of one source store.

    Rows referencing organizations come back with the organization *name*,
    resolved within the same store.
    """

    def load_countries(self) -> Sequence[Country]: ...

    def load_organizations(self) -> Sequence[Organization]: ...

    def load_domains(self) -> Sequence[DomainOrganization]: ...

    def load_blacklist(self) -> Sequence[BlacklistEntry]: ...

    def load_unique_identities(self) -> Sequence[UniqueIdentity]: ...

    def load_profiles(self) -> Sequence[Profile]: ...

    def load_identities(self) -> Sequence[Identity]: ...

    def load_enrollments(self) -> Sequence[Enrollment]: ...


@runtime_checkable
class IdentitySnapshotWriter(Protocol):
    """Full-table replacement in the destination store."""

    def replace_countries(self, records: Iterable[Country]) -> int: ...

    def replace_organizations(self, records: Iterable[Organization]) -> int: ...

    def organization_index(self) -> OrganizationIndex: ...

    def replace_domains(
        self, records: Iterable[DomainOrganization], *, organizations: OrganizationIndex
    ) -> int: ...

    def replace_blacklist(self, records: Iterable[BlacklistEntry]) -> int: ...

    def replace_unique_identities(self, records: Iterable[UniqueIdentity]) -> int: ...

    def replace_profiles(self, records: Iterable[Profile]) -> int: ...

    def replace_identities(self, records: Iterable[Identity]) -> int: ...

    def replace_enrollments(
        self, records: Iterable[Enrollment], *, organizations: OrganizationIndex
    ) -> int: ...


@dataclass(frozen=True, slots=True)
class IdentityLookup:
    """The columns of an identity needed to match feed records."""

    uuid: Uuid
    email: str | None
    username: str | None
    source: str


@runtime_checkable
class AffiliationStore(Protocol):
    """Incremental reads and writes used by the affiliation import."""

    def identity_lookups(self) -> Sequence[IdentityLookup]: ...

    def organization_ids(self) -> Mapping[str, OrganizationId]: ...

    def country_codes(self) -> set[str]: ...

    def get_profile(self, uuid: Uuid) -> Profile | None: ...

    def update_profile(self, uuid: Uuid, changes: Mapping[str, object]) -> None: ...

    def add_organization(self, name: str) -> OrganizationId: ...

    def enrollment_exists(
        self, uuid: Uuid, organization_id: OrganizationId, start: datetime, end: datetime
    ) -> bool: ...

    def replace_enrollment(
        self, uuid: Uuid, organization_id: OrganizationId, start: datetime, end: datetime
    ) -> None: ...

    def touch_identities(self, uuids: Sequence[Uuid]) -> int: ...

    def delete_affiliations(self) -> None: ...
