"""Enumerations shared across the identity model."""

from __future__ import annotations

from enum import StrEnum


class Table(StrEnum):
    """Identity store tables in merge dependency order."""

    COUNTRIES = "countries"
    ORGANIZATIONS = "organizations"
    DOMAINS = "domains_organizations"
    BLACKLIST = "matching_blacklist"
    UNIQUE_IDENTITIES = "uidentities"
    PROFILES = "profiles"
    IDENTITIES = "identities"
    ENROLLMENTS = "enrollments"


MERGE_ORDER: tuple[Table, ...] = tuple(Table)


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def from_code(cls, code: str | None) -> Gender | None:
        """Translate the feed's one-letter sex code; anything else is unknown."""

        if code == "m":
            return cls.MALE
        if code == "f":
            return cls.FEMALE
        return None
