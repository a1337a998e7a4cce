"""Public domain model surface."""

from __future__ import annotations

from shreconcile.domain.model.affiliation import (
    AcquisitionRule,
    AffiliationInterval,
    AffiliationRecord,
)
from shreconcile.domain.model.enums import MERGE_ORDER, Gender, Table
from shreconcile.domain.model.identity import (
    BlacklistEntry,
    Country,
    DomainOrganization,
    Enrollment,
    Identity,
    Organization,
    Profile,
    UniqueIdentity,
)
from shreconcile.domain.model.primitives import (
    BEGINNING_OF_TIME,
    END_OF_TIME,
    CountryCode,
    EnrollmentKey,
    OrganizationId,
    Uuid,
)

__all__ = [  # noqa: RUF022
    # records
    "BlacklistEntry",
    "Country",
    "DomainOrganization",
    "Enrollment",
    "Identity",
    "Organization",
    "Profile",
    "UniqueIdentity",
    # feeds
    "AcquisitionRule",
    "AffiliationInterval",
    "AffiliationRecord",
    # enums
    "Gender",
    "MERGE_ORDER",
    "Table",
    # primitives
    "BEGINNING_OF_TIME",
    "END_OF_TIME",
    "CountryCode",
    "EnrollmentKey",
    "OrganizationId",
    "Uuid",
]
