"""Enrich an identity store from the external affiliation feed.

Feed records are matched to identities by e-mail (any source) and by login
(account-linking sources only). Every matched UUID gets its profile
demographics refreshed and one enrollment per parsed affiliation interval.
Writes are idempotent, so re-running with the same feed changes nothing.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from shreconcile.domain.model import BEGINNING_OF_TIME, Gender

from .history import decode_email, is_unknown_affiliation, parse_affiliation_history

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping, Sequence
    from datetime import datetime

    from shreconcile.domain.model import AffiliationRecord, OrganizationId, Profile, Uuid
    from shreconcile.domain.ports import AffiliationStore

    from .company_mapper import CompanyNameMapper

log = getLogger(__name__)

DEFAULT_TOUCH_BATCH_SIZE: Final[int] = 1000
ACCOUNT_LINKING_SOURCES: Final[frozenset[str]] = frozenset({"git", "github"})


@dataclass(frozen=True, slots=True)
class PendingEnrollment:
    uuid: Uuid
    company: str
    start: datetime
    end: datetime


@dataclass(slots=True)
class AffiliationImportResult:
    """Summary counts reported at the end of an import."""

    hits: int = 0
    affiliations: int = 0
    companies: set[str] = field(default_factory=set["str"])
    updated_profiles: set[Uuid] = field(default_factory=set["Uuid"])
    not_updated_profiles: set[Uuid] = field(default_factory=set["Uuid"])
    updated_enrollments: set[Uuid] = field(default_factory=set["Uuid"])
    not_updated_enrollments: set[Uuid] = field(default_factory=set["Uuid"])
    created_organizations: int = 0
    actual_updates: int = 0

    @property
    def updated_uuids(self) -> set[Uuid]:
        return self.updated_profiles | self.updated_enrollments

    @property
    def not_updated_uuids(self) -> set[Uuid]:
        return self.not_updated_profiles | self.not_updated_enrollments


@dataclass(slots=True)
class IdentityMatcher:
    """E-mail and login lookups built from the store's identities."""

    uuid_by_email: dict[str, Uuid] = field(default_factory=dict["str", "Uuid"])
    uuid_by_username: dict[str, Uuid] = field(default_factory=dict["str", "Uuid"])

    @classmethod
    def from_store(
        cls,
        store: AffiliationStore,
        *,
        linking_sources: frozenset[str] = ACCOUNT_LINKING_SOURCES,
    ) -> IdentityMatcher:
        matcher = cls()
        for identity in store.identity_lookups():
            if identity.email:
                matcher.uuid_by_email[identity.email] = identity.uuid
            if identity.username and identity.source in linking_sources:
                matcher.uuid_by_username[identity.username] = identity.uuid
        return matcher

    def match(self, *, email: str, login: str) -> list[Uuid]:
        """All UUIDs hit by either lookup, e-mail match first."""

        uuids: list[Uuid] = []
        for uuid in (self.uuid_by_email.get(email), self.uuid_by_username.get(login)):
            if uuid is not None and uuid not in uuids:
                uuids.append(uuid)
        return uuids


def profile_changes(
    current: Profile,
    record: AffiliationRecord,
    *,
    country_codes: set[str],
) -> dict[str, object]:
    """Columns of ``current`` the feed record would actually change."""

    wanted: dict[str, object] = {}
    gender = Gender.from_code(record.sex)
    if gender is not None:
        wanted["gender"] = gender.value
    if record.sex_prob is not None:
        wanted["gender_acc"] = int(record.sex_prob * 100.0)
    if record.country_code is not None:
        if record.country_code.lower() in country_codes:
            wanted["country_code"] = record.country_code.upper()
        else:
            log.warning(
                "Store has no %r country code, skipping country code update",
                record.country_code,
            )
    return {
        column: value for column, value in wanted.items() if getattr(current, column) != value
    }


def chunked[T](items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for offset in range(0, len(items), size):
        yield items[offset : offset + size]


def touch_updated_identities(
    store: AffiliationStore,
    uuids: Iterable[Uuid],
    *,
    batch_size: int = DEFAULT_TOUCH_BATCH_SIZE,
) -> int:
    """Bump ``last_modified`` of the identities owned by ``uuids`` in fixed batches."""

    ordered = sorted(set(uuids))
    if not ordered:
        log.info("No identities to update.")
        return 0
    total = 0
    for pack, batch in enumerate(chunked(ordered, batch_size), start=1):
        updated = store.touch_identities(batch)
        total += updated
        log.info("Pack %d updated: %d/%d", pack, updated, len(batch))
    return total


@dataclass(slots=True)
class AffiliationImporter:
    store: AffiliationStore
    mapper: CompanyNameMapper
    commit: Callable[[], None]
    batch_size: int = DEFAULT_TOUCH_BATCH_SIZE
    result: AffiliationImportResult = field(default_factory=AffiliationImportResult)

    def run(
        self, records: Iterable[AffiliationRecord], *, cleanup: bool = False
    ) -> AffiliationImportResult:
        if cleanup:
            self.store.delete_affiliations()
            self.commit()
            log.info("Current affiliation data cleaned.")

        matcher = IdentityMatcher.from_store(self.store)
        organization_ids = dict(self.store.organization_ids())
        country_codes = self.store.country_codes()

        pending: list[PendingEnrollment] = []
        for record in records:
            pending.extend(self._process_record(record, matcher, country_codes))
        self.commit()

        self._add_organizations(organization_ids)
        self.commit()
        self._add_enrollments(pending, organization_ids)
        self.commit()

        self.result.actual_updates = touch_updated_identities(
            self.store, self.result.updated_uuids, batch_size=self.batch_size
        )
        self.commit()
        self._log_summary()
        self.mapper.log_report()
        return self.result

    def _process_record(
        self,
        record: AffiliationRecord,
        matcher: IdentityMatcher,
        country_codes: set[str],
    ) -> list[PendingEnrollment]:
        email = decode_email(record.email).lower()
        uuids = matcher.match(email=email, login=record.login)
        if not uuids:
            return []

        for uuid in uuids:
            if self._update_profile(uuid, record, country_codes):
                self.result.updated_profiles.add(uuid)
            else:
                self.result.not_updated_profiles.add(uuid)
        self.result.hits += 1

        if is_unknown_affiliation(record.affiliation):
            return []

        pending: list[PendingEnrollment] = []
        # a blank segment does not advance the start of the next one
        start = BEGINNING_OF_TIME
        for interval in parse_affiliation_history(record.affiliation):
            if not interval.company:
                continue
            interval_start, start = start, interval.end
            company = self.mapper.map(interval.company)
            if not company:
                continue
            self.result.companies.add(company)
            for uuid in uuids:
                pending.append(
                    PendingEnrollment(
                        uuid=uuid, company=company, start=interval_start, end=interval.end
                    )
                )
                self.result.affiliations += 1
        return pending

    def _update_profile(
        self,
        uuid: Uuid,
        record: AffiliationRecord,
        country_codes: set[str],
    ) -> bool:
        current = self.store.get_profile(uuid)
        if current is None:
            log.warning("No profile for %s, skipping profile update", uuid)
            return False
        changes = profile_changes(current, record, country_codes=country_codes)
        if not changes:
            return False
        self.store.update_profile(uuid, changes)
        return True

    def _add_organizations(self, organization_ids: dict[str, OrganizationId]) -> None:
        for company in sorted(self.result.companies):
            key = company.lower()
            if key in organization_ids:
                continue
            organization_ids[key] = self.store.add_organization(company)
            self.result.created_organizations += 1

    def _add_enrollments(
        self,
        pending: Iterable[PendingEnrollment],
        organization_ids: Mapping[str, OrganizationId],
    ) -> None:
        for enrollment in pending:
            organization_id = organization_ids[enrollment.company.lower()]
            args = (enrollment.uuid, organization_id, enrollment.start, enrollment.end)
            if self.store.enrollment_exists(*args):
                self.result.not_updated_enrollments.add(enrollment.uuid)
                continue
            self.store.replace_enrollment(*args)
            self.result.updated_enrollments.add(enrollment.uuid)

    def _log_summary(self) -> None:
        result = self.result
        log.info(
            "Hits: %d, affiliations: %d, companies: %d, updated profiles: %d, "
            "updated enrollments: %d, updated uuids: %d, actual uuid updates: %d, "
            "created organizations: %d, not updated profiles: %d, "
            "not updated enrollments: %d, not updated uuids: %d",
            result.hits,
            result.affiliations,
            len(result.companies),
            len(result.updated_profiles),
            len(result.updated_enrollments),
            len(result.updated_uuids),
            result.actual_updates,
            result.created_organizations,
            len(result.not_updated_profiles),
            len(result.not_updated_enrollments),
            len(result.not_updated_uuids),
        )


def import_affiliations(
    records: Iterable[AffiliationRecord],
    *,
    store: AffiliationStore,
    mapper: CompanyNameMapper,
    commit: Callable[[], None],
    cleanup: bool = False,
    batch_size: int = DEFAULT_TOUCH_BATCH_SIZE,
) -> AffiliationImportResult:
    """Import ``records`` into ``store`` and return the summary counts."""

    importer = AffiliationImporter(
        store=store, mapper=mapper, commit=commit, batch_size=batch_size
    )
    return importer.run(records, cleanup=cleanup)
