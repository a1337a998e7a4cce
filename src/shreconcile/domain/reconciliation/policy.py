"""Per-entity conflict resolution rules.

Every resolver receives the record from the first source and the record from
the second source for the same natural key and returns the merged record. The
first source wins every tie.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from shreconcile.domain.model import Enrollment, Identity, Profile, UniqueIdentity

log = getLogger(__name__)


def prefer_first[R](first: R, second: R) -> R:
    """Reference data: countries, organizations, blacklist entries and domains."""

    _ = second
    return first


def _fill[T](preferred: T | None, fallback: T | None) -> T | None:
    return preferred if preferred is not None else fallback


def _second_is_newer(first: datetime | None, second: datetime | None) -> bool:
    if second is None:
        return False
    if first is None:
        return True
    return second > first


def merge_unique_identities(first: UniqueIdentity, second: UniqueIdentity) -> UniqueIdentity:
    if _second_is_newer(first.last_modified, second.last_modified):
        return second
    return first


def _confidence(value: int | None) -> int:
    return -1 if value is None else value


def _merge_gender(first: Profile, second: Profile) -> tuple[str | None, int | None]:
    if second.gender is not None and (
        first.gender is None or _confidence(second.gender_acc) > _confidence(first.gender_acc)
    ):
        return second.gender, second.gender_acc
    if first.gender is not None:
        return first.gender, first.gender_acc
    return None, _fill(first.gender_acc, second.gender_acc)


def merge_profiles(first: Profile, second: Profile) -> Profile:
    """Field-wise fill, with gender and its confidence decided together.

    The side with the strictly higher confidence provides both values, as long
    as it actually has a gender. Equal confidences keep the first source.
    """

    gender, gender_acc = _merge_gender(first, second)
    return replace(
        first,
        name=_fill(first.name, second.name),
        email=_fill(first.email, second.email),
        gender=gender,
        gender_acc=gender_acc,
        is_bot=_fill(first.is_bot, second.is_bot),
        country_code=_fill(first.country_code, second.country_code),
    )


def merge_identities(first: Identity, second: Identity) -> Identity:
    """Newest side leads; the other only fills gaps.

    ``source`` and ``last_modified`` come from the leading side, a missing
    timestamp never overrides a present one.
    """

    if _second_is_newer(first.last_modified, second.last_modified):
        primary, secondary = second, first
    else:
        primary, secondary = first, second
    return replace(
        primary,
        uuid=_fill(primary.uuid, secondary.uuid),
        name=_fill(primary.name, secondary.name),
        email=_fill(primary.email, secondary.email),
        username=_fill(primary.username, secondary.username),
        last_modified=_fill(primary.last_modified, secondary.last_modified),
    )


def keep_first_enrollment(first: Enrollment, second: Enrollment) -> Enrollment:
    if first.organization.lower() != second.organization.lower():
        log.warning(
            "Enrollment %s %s..%s: organization %r kept, %r from second source dropped",
            first.uuid,
            first.start,
            first.end,
            first.organization,
            second.organization,
        )
    return first
