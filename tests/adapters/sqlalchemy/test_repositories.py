from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import insert, select

from shreconcile.adapters.sqlalchemy import (
    SqlAlchemyAffiliationRepository,
    SqlAlchemySnapshotRepository,
)
from shreconcile.adapters.sqlalchemy.mappings import (
    countries_table,
    domains_table,
    enrollments_table,
    identities_table,
    organizations_table,
    profiles_table,
    unique_identities_table,
)
from shreconcile.domain.errors import UnresolvedOrganizationError
from shreconcile.domain.model import (
    BEGINNING_OF_TIME,
    END_OF_TIME,
    Country,
    DomainOrganization,
    Enrollment,
    Identity,
    Organization,
    Profile,
    UniqueIdentity,
)
from shreconcile.domain.ports import AffiliationStore, IdentitySnapshotReader
from shreconcile.domain.reconciliation import OrganizationIndex

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

MODIFIED = datetime(2021, 6, 1, 8, 30, tzinfo=UTC)
FROZEN_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _seed_identity(session: Session, uuid: str, **identity: object) -> None:
    session.execute(insert(unique_identities_table).values(uuid=uuid))
    session.execute(insert(profiles_table).values(uuid=uuid, name=f"Name {uuid}"))
    if identity:
        session.execute(insert(identities_table).values(uuid=uuid, **identity))


def test_repositories_satisfy_ports(sqlite_session: Session) -> None:
    assert isinstance(SqlAlchemySnapshotRepository(sqlite_session), IdentitySnapshotReader)
    assert isinstance(SqlAlchemyAffiliationRepository(sqlite_session), AffiliationStore)


def test_organization_references_load_as_names(sqlite_session: Session) -> None:
    sqlite_session.execute(insert(organizations_table).values(id=42, name="Acme"))
    sqlite_session.execute(
        insert(domains_table).values(domain="acme.com", is_top_domain=True, organization_id=42)
    )
    sqlite_session.execute(insert(unique_identities_table).values(uuid="u1"))
    sqlite_session.execute(
        insert(enrollments_table).values(
            uuid="u1", organization_id=42, start=BEGINNING_OF_TIME, end=END_OF_TIME
        )
    )
    repo = SqlAlchemySnapshotRepository(sqlite_session)

    assert repo.load_domains() == [
        DomainOrganization(domain="acme.com", is_top_domain=True, organization="Acme")
    ]
    assert repo.load_enrollments() == [
        Enrollment(uuid="u1", start=BEGINNING_OF_TIME, end=END_OF_TIME, organization="Acme")
    ]


def test_dangling_organization_reference_is_fatal(sqlite_session: Session) -> None:
    sqlite_session.execute(
        insert(domains_table).values(domain="ghost.com", is_top_domain=False, organization_id=9)
    )
    repo = SqlAlchemySnapshotRepository(sqlite_session, store="first source")

    with pytest.raises(UnresolvedOrganizationError, match="first source"):
        repo.load_domains()


def test_replace_round_trip_keeps_datetimes_utc(sqlite_session: Session) -> None:
    repo = SqlAlchemySnapshotRepository(sqlite_session)
    repo.replace_countries([Country(code="PL", name="Poland", alpha3="POL")])
    repo.replace_unique_identities([UniqueIdentity(uuid="u1", last_modified=MODIFIED)])
    repo.replace_profiles(
        [
            Profile(
                uuid="u1",
                name="Alice",
                gender="female",
                gender_acc=90,
                is_bot=False,
                country_code="PL",
            )
        ]
    )
    repo.replace_identities(
        [Identity(id="i1", source="git", uuid="u1", email="a@x.org", last_modified=MODIFIED)]
    )
    sqlite_session.commit()

    assert repo.load_unique_identities() == [UniqueIdentity(uuid="u1", last_modified=MODIFIED)]
    assert repo.load_profiles()[0].is_bot is False
    assert repo.load_identities()[0].last_modified == MODIFIED


def test_replace_overwrites_whole_table(sqlite_session: Session) -> None:
    repo = SqlAlchemySnapshotRepository(sqlite_session)
    repo.replace_organizations([Organization(name="Old")])

    written = repo.replace_organizations([Organization(name="Acme"), Organization(name="Globex")])

    assert written == 2
    assert [o.name for o in repo.load_organizations()] == ["Acme", "Globex"]


def test_replace_domains_resolves_destination_ids(sqlite_session: Session) -> None:
    repo = SqlAlchemySnapshotRepository(sqlite_session)
    repo.replace_organizations([Organization(name="Acme")])
    index = repo.organization_index()

    repo.replace_domains(
        [DomainOrganization(domain="acme.com", is_top_domain=False, organization="ACME")],
        organizations=index,
    )

    organization_id = sqlite_session.execute(select(domains_table.c.organization_id)).scalar_one()
    assert organization_id == index.id_for("acme", context="test")


def test_replace_enrollments_fails_on_unknown_name(sqlite_session: Session) -> None:
    repo = SqlAlchemySnapshotRepository(sqlite_session)

    with pytest.raises(UnresolvedOrganizationError):
        repo.replace_enrollments(
            [Enrollment(uuid="u1", start=BEGINNING_OF_TIME, end=END_OF_TIME, organization="X")],
            organizations=OrganizationIndex(ids_by_name={}),
        )


def test_identity_lookups_skip_unlinked_identities(sqlite_session: Session) -> None:
    _seed_identity(sqlite_session, "u1", id="i1", source="github", username="alice")
    sqlite_session.execute(insert(identities_table).values(id="i2", source="git", uuid=None))
    repo = SqlAlchemyAffiliationRepository(sqlite_session)

    lookups = repo.identity_lookups()

    assert [(lookup.uuid, lookup.username, lookup.source) for lookup in lookups] == [
        ("u1", "alice", "github")
    ]


def test_add_organization_reuses_case_insensitive_match(
    sqlite_session: Session, caplog: pytest.LogCaptureFixture
) -> None:
    repo = SqlAlchemyAffiliationRepository(sqlite_session)
    acme = repo.add_organization("Acme")

    with caplog.at_level(logging.WARNING):
        again = repo.add_organization("ACME")

    assert again == acme
    assert repo.organization_ids() == {"acme": acme}
    assert any("Name collision" in message for message in caplog.messages)


def test_enrollment_exists_and_replace(sqlite_session: Session) -> None:
    _seed_identity(sqlite_session, "u1")
    repo = SqlAlchemyAffiliationRepository(sqlite_session)
    acme = repo.add_organization("Acme")
    globex = repo.add_organization("Globex")

    repo.replace_enrollment("u1", acme, BEGINNING_OF_TIME, END_OF_TIME)
    assert repo.enrollment_exists("u1", acme, BEGINNING_OF_TIME, END_OF_TIME)

    repo.replace_enrollment("u1", globex, BEGINNING_OF_TIME, END_OF_TIME)
    assert not repo.enrollment_exists("u1", acme, BEGINNING_OF_TIME, END_OF_TIME)
    assert repo.enrollment_exists("u1", globex, BEGINNING_OF_TIME, END_OF_TIME)


def test_update_profile_and_country_codes(sqlite_session: Session) -> None:
    sqlite_session.execute(insert(countries_table).values(code="PL", name="Poland", alpha3="POL"))
    _seed_identity(sqlite_session, "u1")
    repo = SqlAlchemyAffiliationRepository(sqlite_session)

    repo.update_profile("u1", {"gender": "male", "gender_acc": 77, "country_code": "PL"})

    assert repo.country_codes() == {"pl"}
    profile = repo.get_profile("u1")
    assert profile is not None
    assert (profile.gender, profile.gender_acc, profile.country_code) == ("male", 77, "PL")
    assert repo.get_profile("missing") is None


def test_touch_identities_sets_last_modified(sqlite_session: Session) -> None:
    _seed_identity(sqlite_session, "u1", id="i1", source="git")
    sqlite_session.execute(insert(identities_table).values(id="i2", source="github", uuid="u1"))
    repo = SqlAlchemyAffiliationRepository(sqlite_session, clock=lambda: FROZEN_NOW)

    updated = repo.touch_identities(["u1"])

    assert updated == 2
    stamps = sqlite_session.execute(select(identities_table.c.last_modified)).scalars().all()
    assert stamps == [FROZEN_NOW, FROZEN_NOW]


def test_delete_affiliations(sqlite_session: Session) -> None:
    _seed_identity(sqlite_session, "u1")
    repo = SqlAlchemyAffiliationRepository(sqlite_session)
    acme = repo.add_organization("Acme")
    repo.replace_enrollment("u1", acme, BEGINNING_OF_TIME, END_OF_TIME)

    repo.delete_affiliations()

    assert repo.organization_ids() == {}
    assert not repo.enrollment_exists("u1", acme, BEGINNING_OF_TIME, END_OF_TIME)
