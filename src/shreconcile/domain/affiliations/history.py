"""Parsing of textual affiliation histories.

A history reads ``segment, segment, ...`` where a segment is either
``Company`` (open-ended) or ``Company < date`` (ends at ``date``). The first
segment starts at ``BEGINNING_OF_TIME`` and every later one starts where its
predecessor ended, so the intervals partition the whole career without gaps.
A segment carrying more than one date is read up to its first date.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Final

from shreconcile.domain.errors import AffiliationFormatError
from shreconcile.domain.model import BEGINNING_OF_TIME, END_OF_TIME, AffiliationInterval

UNKNOWN_AFFILIATIONS: Final[frozenset[str]] = frozenset({"NotFound", "(Unknown)", "?", ""})
SEGMENT_SEPARATOR: Final[str] = ", "
DATE_SEPARATOR: Final[str] = " < "
DATE_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H",
    "%Y-%m-%d",
    "%Y-%m",
    "%Y",
)

_ESCAPED_EMAIL = re.compile(r"([^\s!]+)!([^\s!]+)")


def decode_email(value: str) -> str:
    """The feed writes ``user!example.com`` for ``user@example.com``."""

    return _ESCAPED_EMAIL.sub(r"\1@\2", value)


def parse_date_any(text: str) -> datetime:
    value = text.strip()
    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)  # noqa: DTZ007
        except ValueError:
            continue
        return parsed.replace(tzinfo=UTC)
    raise AffiliationFormatError(f"Cannot parse date: {text!r}")


def is_unknown_affiliation(text: str) -> bool:
    return text in UNKNOWN_AFFILIATIONS


def parse_affiliation_history(text: str) -> tuple[AffiliationInterval, ...]:
    intervals: list[AffiliationInterval] = []
    start = BEGINNING_OF_TIME
    for segment in text.split(SEGMENT_SEPARATOR):
        company, *dates = segment.split(DATE_SEPARATOR)
        end = parse_date_any(dates[0]) if dates else END_OF_TIME
        intervals.append(AffiliationInterval(company=company.strip(), start=start, end=end))
        start = end
    return tuple(intervals)
