"""Translate feed payloads into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shreconcile.domain.model import AcquisitionRule, AffiliationRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import AcquisitionsPayload, GitHubUserPayload


def translate_github_user(payload: GitHubUserPayload) -> AffiliationRecord:
    return AffiliationRecord(
        login=payload.login,
        email=payload.email,
        affiliation=payload.affiliation,
        name=payload.name,
        country_code=payload.country_id,
        sex=payload.sex,
        sex_prob=payload.sex_prob,
    )


def translate_github_users(payloads: Iterable[GitHubUserPayload]) -> list[AffiliationRecord]:
    return [translate_github_user(payload) for payload in payloads]


def translate_acquisitions(payload: AcquisitionsPayload) -> list[AcquisitionRule]:
    return [
        AcquisitionRule(pattern=pattern, result=result)
        for pattern, result in payload.acquisitions
    ]
