"""In-memory implementations of the store ports for domain tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from shreconcile.domain.ports import IdentityLookup
from shreconcile.domain.reconciliation import OrganizationIndex

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

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

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@dataclass
class InMemorySnapshotStore:
    countries: list[Country] = field(default_factory=list)
    organizations: list[Organization] = field(default_factory=list)
    domains: list[DomainOrganization] = field(default_factory=list)
    blacklist: list[BlacklistEntry] = field(default_factory=list)
    unique_identities: list[UniqueIdentity] = field(default_factory=list)
    profiles: list[Profile] = field(default_factory=list)
    identities: list[Identity] = field(default_factory=list)
    enrollments: list[Enrollment] = field(default_factory=list)
    commits: int = 0

    def load_countries(self) -> list[Country]:
        return list(self.countries)

    def load_organizations(self) -> list[Organization]:
        return list(self.organizations)

    def load_domains(self) -> list[DomainOrganization]:
        return list(self.domains)

    def load_blacklist(self) -> list[BlacklistEntry]:
        return list(self.blacklist)

    def load_unique_identities(self) -> list[UniqueIdentity]:
        return list(self.unique_identities)

    def load_profiles(self) -> list[Profile]:
        return list(self.profiles)

    def load_identities(self) -> list[Identity]:
        return list(self.identities)

    def load_enrollments(self) -> list[Enrollment]:
        return list(self.enrollments)

    def replace_countries(self, records: Iterable[Country]) -> int:
        self.countries = list(records)
        return len(self.countries)

    def replace_organizations(self, records: Iterable[Organization]) -> int:
        self.organizations = list(records)
        return len(self.organizations)

    def organization_index(self) -> OrganizationIndex:
        return OrganizationIndex.from_rows(
            (index, organization.name)
            for index, organization in enumerate(self.organizations, start=1)
        )

    def replace_domains(
        self, records: Iterable[DomainOrganization], *, organizations: OrganizationIndex
    ) -> int:
        self.domains = list(records)
        for domain in self.domains:
            organizations.id_for(domain.organization, context=domain.domain)
        return len(self.domains)

    def replace_blacklist(self, records: Iterable[BlacklistEntry]) -> int:
        self.blacklist = list(records)
        return len(self.blacklist)

    def replace_unique_identities(self, records: Iterable[UniqueIdentity]) -> int:
        self.unique_identities = list(records)
        return len(self.unique_identities)

    def replace_profiles(self, records: Iterable[Profile]) -> int:
        self.profiles = list(records)
        return len(self.profiles)

    def replace_identities(self, records: Iterable[Identity]) -> int:
        self.identities = list(records)
        return len(self.identities)

    def replace_enrollments(
        self, records: Iterable[Enrollment], *, organizations: OrganizationIndex
    ) -> int:
        self.enrollments = list(records)
        for enrollment in self.enrollments:
            organizations.id_for(enrollment.organization, context=enrollment.uuid)
        return len(self.enrollments)

    def commit(self) -> None:
        self.commits += 1


@dataclass
class InMemoryAffiliationStore:
    lookups: list[IdentityLookup] = field(default_factory=list)
    profiles: dict[Uuid, Profile] = field(default_factory=dict)
    organizations: dict[OrganizationId, str] = field(default_factory=dict)
    countries: set[str] = field(default_factory=set)
    enrollments: set[tuple[Uuid, OrganizationId, datetime, datetime]] = field(
        default_factory=set
    )
    touched: dict[Uuid, datetime] = field(default_factory=dict)
    touch_batches: list[int] = field(default_factory=list)
    commits: int = 0

    def add_identity(
        self,
        uuid: Uuid,
        *,
        email: str | None = None,
        username: str | None = None,
        source: str = "git",
    ) -> None:
        self.lookups.append(
            IdentityLookup(uuid=uuid, email=email, username=username, source=source)
        )

    def identity_lookups(self) -> list[IdentityLookup]:
        return list(self.lookups)

    def organization_ids(self) -> dict[str, OrganizationId]:
        return {name.lower(): org_id for org_id, name in self.organizations.items()}

    def country_codes(self) -> set[str]:
        return {code.lower() for code in self.countries}

    def get_profile(self, uuid: Uuid) -> Profile | None:
        return self.profiles.get(uuid)

    def update_profile(self, uuid: Uuid, changes: Mapping[str, object]) -> None:
        self.profiles[uuid] = replace(self.profiles[uuid], **changes)  # type: ignore[arg-type]

    def add_organization(self, name: str) -> OrganizationId:
        existing = self.organization_ids().get(name.lower())
        if existing is not None:
            return existing
        org_id = max(self.organizations, default=0) + 1
        self.organizations[org_id] = name
        return org_id

    def enrollment_exists(
        self, uuid: Uuid, organization_id: OrganizationId, start: datetime, end: datetime
    ) -> bool:
        return (uuid, organization_id, start, end) in self.enrollments

    def replace_enrollment(
        self, uuid: Uuid, organization_id: OrganizationId, start: datetime, end: datetime
    ) -> None:
        self.enrollments = {
            row for row in self.enrollments if (row[0], row[2], row[3]) != (uuid, start, end)
        }
        self.enrollments.add((uuid, organization_id, start, end))

    def touch_identities(self, uuids: Sequence[Uuid]) -> int:
        self.touch_batches.append(len(uuids))
        updated = 0
        for lookup in self.lookups:
            if lookup.uuid in uuids:
                self.touched[lookup.uuid] = FIXED_NOW
                updated += 1
        return updated

    def delete_affiliations(self) -> None:
        self.enrollments.clear()
        self.organizations.clear()

    def commit(self) -> None:
        self.commits += 1

    def enrollments_for(self, uuid: Uuid) -> list[tuple[str, datetime, datetime]]:
        return sorted(
            (self.organizations[org_id], start, end)
            for row_uuid, org_id, start, end in self.enrollments
            if row_uuid == uuid
        )
