from __future__ import annotations

import logging

import pytest

from shreconcile.domain.model import Country, Organization
from shreconcile.domain.reconciliation import index_records, merge_snapshots, prefer_first


def _countries(*rows: tuple[str, str]) -> dict[str, Country]:
    return {code: Country(code=code, name=name, alpha3=code.upper() + "X") for code, name in rows}


def test_disjoint_keys_are_unioned_in_first_then_second_order() -> None:
    first = _countries(("DE", "Germany"), ("PL", "Poland"))
    second = _countries(("US", "United States"), ("FR", "France"))

    result = merge_snapshots(first, second, resolve=prefer_first, table="countries")

    assert list(result.records) == ["DE", "PL", "US", "FR"]
    assert result.stats.only_first == 2
    assert result.stats.only_second == 2
    assert result.stats.conflicts == 0
    assert result.stats.total == 4


def test_identical_records_are_adopted_once() -> None:
    first = _countries(("DE", "Germany"))
    second = _countries(("DE", "Germany"))

    result = merge_snapshots(first, second, resolve=prefer_first, table="countries")

    assert result.values() == [first["DE"]]
    assert result.stats.identical == 1


def test_conflicts_go_through_the_resolver() -> None:
    first = _countries(("DE", "Germany"))
    second = _countries(("DE", "Deutschland"))
    calls: list[tuple[Country, Country]] = []

    def resolve(a: Country, b: Country) -> Country:
        calls.append((a, b))
        return b

    result = merge_snapshots(first, second, resolve=resolve, table="countries")

    assert calls == [(first["DE"], second["DE"])]
    assert result.records["DE"].name == "Deutschland"
    assert result.stats.conflicts == 1


def test_missing_on_other_side_is_logged_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="shreconcile.domain.reconciliation.merge")

    merge_snapshots(
        _countries(("DE", "Germany")),
        _countries(("US", "United States")),
        resolve=prefer_first,
        table="countries",
    )

    debug_messages = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
    assert "countries: 'DE' missing in second source" in debug_messages
    assert "countries: 'US' missing in first source" in debug_messages


def test_index_records_keeps_first_row_and_warns_on_differing_duplicate(
    caplog: pytest.LogCaptureFixture,
) -> None:
    rows = [Organization(name="Intel"), Organization(name="intel"), Organization(name="Intel")]

    with caplog.at_level(logging.WARNING):
        snapshot = index_records(rows, lambda org: org.key, table="organizations")

    assert dict(snapshot) == {"intel": Organization(name="Intel")}
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 1


def test_snapshot_is_read_only() -> None:
    snapshot = index_records([Organization(name="Intel")], lambda org: org.key, table="orgs")

    with pytest.raises(TypeError):
        snapshot["other"] = Organization(name="Other")  # type: ignore[index]
