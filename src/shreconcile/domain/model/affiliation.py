"""Records coming from the external affiliation and company-mapping feeds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class AffiliationRecord:
    """One person from the affiliation feed."""

    login: str
    email: str
    affiliation: str
    name: str = ""
    country_code: str | None = None
    sex: str | None = None
    sex_prob: float | None = None


@dataclass(frozen=True, slots=True)
class AcquisitionRule:
    """Company names matching ``pattern`` (a regex) are reported as ``result``."""

    pattern: str
    result: str


@dataclass(frozen=True, slots=True)
class AffiliationInterval:
    company: str
    start: datetime
    end: datetime
