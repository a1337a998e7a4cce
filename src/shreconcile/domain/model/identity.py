"""Immutable records for the identity store tables.

Each record exposes ``key`` which is its natural key inside a snapshot. Surrogate
ids assigned by a store (organizations, domains, enrollments) are store-local and
deliberately absent: organization references are carried by name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from .primitives import CountryCode, EnrollmentKey, Uuid


@dataclass(frozen=True, slots=True)
class Country:
    code: CountryCode
    name: str
    alpha3: str

    @property
    def key(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class Organization:
    name: str

    @property
    def key(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class DomainOrganization:
    domain: str
    is_top_domain: bool
    organization: str

    @property
    def key(self) -> str:
        return self.domain.lower()


@dataclass(frozen=True, slots=True)
class BlacklistEntry:
    excluded: str

    @property
    def key(self) -> str:
        return self.excluded.lower()


@dataclass(frozen=True, slots=True)
class UniqueIdentity:
    uuid: Uuid
    last_modified: datetime | None = None

    @property
    def key(self) -> str:
        return self.uuid


@dataclass(frozen=True, slots=True)
class Profile:
    uuid: Uuid
    name: str | None = None
    email: str | None = None
    gender: str | None = None
    gender_acc: int | None = None
    is_bot: bool | None = None
    country_code: CountryCode | None = None

    @property
    def key(self) -> str:
        return self.uuid


@dataclass(frozen=True, slots=True)
class Identity:
    id: str
    source: str
    uuid: Uuid | None = None
    name: str | None = None
    email: str | None = None
    username: str | None = None
    last_modified: datetime | None = None

    @property
    def key(self) -> str:
        return self.id


@dataclass(frozen=True, slots=True)
class Enrollment:
    uuid: Uuid
    start: datetime
    end: datetime
    organization: str

    @property
    def key(self) -> EnrollmentKey:
        return (self.uuid, self.start, self.end)
