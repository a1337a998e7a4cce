"""Affiliation resolution: feed records to profiles and enrollments."""

from __future__ import annotations

from .company_mapper import UNMAPPED, CompanyNameMapper, MappingStats, compile_rules
from .history import (
    decode_email,
    is_unknown_affiliation,
    parse_affiliation_history,
    parse_date_any,
)
from .importer import (
    ACCOUNT_LINKING_SOURCES,
    DEFAULT_TOUCH_BATCH_SIZE,
    AffiliationImporter,
    AffiliationImportResult,
    IdentityMatcher,
    import_affiliations,
    profile_changes,
    touch_updated_identities,
)

__all__ = [
    "ACCOUNT_LINKING_SOURCES",
    "DEFAULT_TOUCH_BATCH_SIZE",
    "UNMAPPED",
    "AffiliationImportResult",
    "AffiliationImporter",
    "CompanyNameMapper",
    "IdentityMatcher",
    "MappingStats",
    "compile_rules",
    "decode_email",
    "import_affiliations",
    "is_unknown_affiliation",
    "parse_affiliation_history",
    "parse_date_any",
    "profile_changes",
    "touch_updated_identities",
]
