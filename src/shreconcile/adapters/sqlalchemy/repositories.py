"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, func, insert, select, update

from shreconcile.adapters.sqlalchemy.mappings import (
    blacklist_table,
    countries_table,
    domains_table,
    enrollments_table,
    identities_table,
    organizations_table,
    profiles_table,
    unique_identities_table,
)
from shreconcile.domain.model import (
    BlacklistEntry,
    Country,
    DomainOrganization,
    Enrollment,
    Identity,
    Organization,
    Profile,
    UniqueIdentity,
)
from shreconcile.domain.ports import IdentityLookup
from shreconcile.domain.reconciliation.organizations import OrganizationIndex, OrganizationNames

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from sqlalchemy import CursorResult, Table
    from sqlalchemy.orm import Session

    from shreconcile.domain.model import OrganizationId, Uuid

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SqlAlchemySnapshotRepository:
    """Full-table snapshots of one store, readable as a source and writable as destination."""

    def __init__(self, session: Session, *, store: str = "store") -> None:
        self.session = session
        self.store = store
        self._organization_names: OrganizationNames | None = None

    # reads ---------------------------------------------------------------

    def load_countries(self) -> list[Country]:
        stmt = select(
            countries_table.c.code, countries_table.c.name, countries_table.c.alpha3
        ).order_by(countries_table.c.code)
        return [
            Country(code=code, name=name, alpha3=alpha3)
            for code, name, alpha3 in self.session.execute(stmt)
        ]

    def load_organizations(self) -> list[Organization]:
        stmt = select(organizations_table.c.name).order_by(organizations_table.c.id)
        return [Organization(name=name) for name in self.session.execute(stmt).scalars()]

    def load_domains(self) -> list[DomainOrganization]:
        names = self.organization_names()
        stmt = select(
            domains_table.c.domain,
            domains_table.c.is_top_domain,
            domains_table.c.organization_id,
        ).order_by(domains_table.c.id)
        return [
            DomainOrganization(
                domain=domain,
                is_top_domain=bool(is_top_domain),
                organization=names.name_for(organization_id, context=f"domain {domain!r}"),
            )
            for domain, is_top_domain, organization_id in self.session.execute(stmt)
        ]

    def load_blacklist(self) -> list[BlacklistEntry]:
        stmt = select(blacklist_table.c.excluded).order_by(blacklist_table.c.excluded)
        return [BlacklistEntry(excluded=value) for value in self.session.execute(stmt).scalars()]

    def load_unique_identities(self) -> list[UniqueIdentity]:
        stmt = select(
            unique_identities_table.c.uuid, unique_identities_table.c.last_modified
        ).order_by(unique_identities_table.c.uuid)
        return [
            UniqueIdentity(uuid=uuid, last_modified=last_modified)
            for uuid, last_modified in self.session.execute(stmt)
        ]

    def load_profiles(self) -> list[Profile]:
        stmt = select(profiles_table).order_by(profiles_table.c.uuid)
        rows = self.session.execute(stmt).mappings()
        return [_profile_from_row(row) for row in rows]

    def load_identities(self) -> list[Identity]:
        stmt = select(identities_table).order_by(identities_table.c.id)
        return [
            Identity(
                id=row.id,
                source=row.source,
                uuid=row.uuid,
                name=row.name,
                email=row.email,
                username=row.username,
                last_modified=row.last_modified,
            )
            for row in self.session.execute(stmt)
        ]

    def load_enrollments(self) -> list[Enrollment]:
        names = self.organization_names()
        stmt = select(
            enrollments_table.c.uuid,
            enrollments_table.c.start,
            enrollments_table.c.end,
            enrollments_table.c.organization_id,
        ).order_by(enrollments_table.c.id)
        return [
            Enrollment(
                uuid=uuid,
                start=start,
                end=end,
                organization=names.name_for(
                    organization_id, context=f"enrollment {uuid} {start}..{end}"
                ),
            )
            for uuid, start, end, organization_id in self.session.execute(stmt)
        ]

    def organization_names(self) -> OrganizationNames:
        if self._organization_names is None:
            stmt = select(organizations_table.c.id, organizations_table.c.name)
            self._organization_names = OrganizationNames(
                names_by_id=dict(self.session.execute(stmt).tuples().all()),
                store=self.store,
            )
        return self._organization_names

    # writes --------------------------------------------------------------

    def replace_countries(self, records: Iterable[Country]) -> int:
        return self._replace(
            countries_table,
            records,
            lambda country: {
                "code": country.code,
                "name": country.name,
                "alpha3": country.alpha3,
            },
        )

    def replace_organizations(self, records: Iterable[Organization]) -> int:
        written = self._replace(
            organizations_table, records, lambda organization: {"name": organization.name}
        )
        self._organization_names = None
        return written

    def organization_index(self) -> OrganizationIndex:
        stmt = select(organizations_table.c.id, organizations_table.c.name)
        return OrganizationIndex.from_rows(self.session.execute(stmt).tuples())

    def replace_domains(
        self,
        records: Iterable[DomainOrganization],
        *,
        organizations: OrganizationIndex,
    ) -> int:
        return self._replace(
            domains_table,
            records,
            lambda domain: {
                "domain": domain.domain,
                "is_top_domain": domain.is_top_domain,
                "organization_id": organizations.id_for(
                    domain.organization, context=f"domain {domain.domain!r}"
                ),
            },
        )

    def replace_blacklist(self, records: Iterable[BlacklistEntry]) -> int:
        return self._replace(blacklist_table, records, lambda entry: {"excluded": entry.excluded})

    def replace_unique_identities(self, records: Iterable[UniqueIdentity]) -> int:
        return self._replace(
            unique_identities_table,
            records,
            lambda identity: {"uuid": identity.uuid, "last_modified": identity.last_modified},
        )

    def replace_profiles(self, records: Iterable[Profile]) -> int:
        return self._replace(
            profiles_table,
            records,
            lambda profile: {
                "uuid": profile.uuid,
                "name": profile.name,
                "email": profile.email,
                "gender": profile.gender,
                "gender_acc": profile.gender_acc,
                "is_bot": profile.is_bot,
                "country_code": profile.country_code,
            },
        )

    def replace_identities(self, records: Iterable[Identity]) -> int:
        return self._replace(
            identities_table,
            records,
            lambda identity: {
                "id": identity.id,
                "name": identity.name,
                "email": identity.email,
                "username": identity.username,
                "source": identity.source,
                "uuid": identity.uuid,
                "last_modified": identity.last_modified,
            },
        )

    def replace_enrollments(
        self,
        records: Iterable[Enrollment],
        *,
        organizations: OrganizationIndex,
    ) -> int:
        return self._replace(
            enrollments_table,
            records,
            lambda enrollment: {
                "uuid": enrollment.uuid,
                "start": enrollment.start,
                "end": enrollment.end,
                "organization_id": organizations.id_for(
                    enrollment.organization,
                    context=f"enrollment {enrollment.uuid} {enrollment.start}..{enrollment.end}",
                ),
            },
        )

    def _replace[R](
        self,
        table: Table,
        records: Iterable[R],
        to_row: Callable[[R], dict[str, Any]],
    ) -> int:
        rows = [to_row(record) for record in records]
        self.session.execute(delete(table))
        if rows:
            self.session.execute(insert(table), rows)
        log.debug("%s: replaced with %d rows in %s", table.name, len(rows), self.store)
        return len(rows)


def _profile_from_row(row: Mapping[str, Any]) -> Profile:
    is_bot = row["is_bot"]
    return Profile(
        uuid=row["uuid"],
        name=row["name"],
        email=row["email"],
        gender=row["gender"],
        gender_acc=row["gender_acc"],
        is_bot=None if is_bot is None else bool(is_bot),
        country_code=row["country_code"],
    )


class SqlAlchemyAffiliationRepository:
    """Incremental profile and enrollment writes for the affiliation import."""

    def __init__(self, session: Session, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self.session = session
        self.clock = clock

    def identity_lookups(self) -> list[IdentityLookup]:
        stmt = select(
            identities_table.c.uuid,
            identities_table.c.email,
            identities_table.c.username,
            identities_table.c.source,
        ).where(identities_table.c.uuid.is_not(None))
        return [
            IdentityLookup(uuid=uuid, email=email, username=username, source=source)
            for uuid, email, username, source in self.session.execute(stmt)
        ]

    def organization_ids(self) -> dict[str, OrganizationId]:
        stmt = select(organizations_table.c.id, organizations_table.c.name)
        rows = self.session.execute(stmt)
        return {name.lower(): organization_id for organization_id, name in rows}

    def country_codes(self) -> set[str]:
        stmt = select(countries_table.c.code)
        return {code.lower() for code in self.session.execute(stmt).scalars()}

    def get_profile(self, uuid: Uuid) -> Profile | None:
        stmt = select(profiles_table).where(profiles_table.c.uuid == uuid)
        row = self.session.execute(stmt).mappings().one_or_none()
        if row is None:
            return None
        return _profile_from_row(row)

    def update_profile(self, uuid: Uuid, changes: Mapping[str, object]) -> None:
        stmt = update(profiles_table).where(profiles_table.c.uuid == uuid).values(dict(changes))
        self.session.execute(stmt)

    def add_organization(self, name: str) -> OrganizationId:
        existing = self.session.execute(
            select(organizations_table.c.id, organizations_table.c.name).where(
                func.lower(organizations_table.c.name) == name.lower()
            )
        ).first()
        if existing is not None:
            log.warning(
                "Name collision: trying to insert %r, exists: %r", name, existing.name
            )
            return existing.id
        result = self.session.execute(insert(organizations_table).values(name=name))
        organization_id = result.inserted_primary_key
        if organization_id is None:
            raise RuntimeError(f"Organization {name!r} was inserted without an id")
        return cast("OrganizationId", organization_id[0])

    def enrollment_exists(
        self,
        uuid: Uuid,
        organization_id: OrganizationId,
        start: datetime,
        end: datetime,
    ) -> bool:
        stmt = (
            select(enrollments_table.c.id)
            .where(enrollments_table.c.uuid == uuid)
            .where(enrollments_table.c.start == start)
            .where(enrollments_table.c.end == end)
            .where(enrollments_table.c.organization_id == organization_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none() is not None

    def replace_enrollment(
        self,
        uuid: Uuid,
        organization_id: OrganizationId,
        start: datetime,
        end: datetime,
    ) -> None:
        self.session.execute(
            delete(enrollments_table)
            .where(enrollments_table.c.uuid == uuid)
            .where(enrollments_table.c.start == start)
            .where(enrollments_table.c.end == end)
        )
        self.session.execute(
            insert(enrollments_table).values(
                uuid=uuid, organization_id=organization_id, start=start, end=end
            )
        )

    def touch_identities(self, uuids: Sequence[Uuid]) -> int:
        stmt = (
            update(identities_table)
            .where(identities_table.c.uuid.in_(list(uuids)))
            .values(last_modified=self.clock())
        )
        result = cast("CursorResult[Any]", self.session.execute(stmt))
        return result.rowcount

    def delete_affiliations(self) -> None:
        self.session.execute(delete(enrollments_table))
        self.session.execute(delete(organizations_table))


if TYPE_CHECKING:
    from shreconcile.domain.ports import (
        AffiliationStore,
        IdentitySnapshotReader,
        IdentitySnapshotWriter,
    )

    _session_stub = cast("Session", object())
    _reader_check: IdentitySnapshotReader = SqlAlchemySnapshotRepository(_session_stub)
    _writer_check: IdentitySnapshotWriter = SqlAlchemySnapshotRepository(_session_stub)
    _affiliation_check: AffiliationStore = SqlAlchemyAffiliationRepository(_session_stub)
