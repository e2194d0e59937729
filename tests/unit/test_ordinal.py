from __future__ import annotations

import pytest

from shaker.domain.ordinal import (
    ancestor_of,
    compare_ordinals,
    ordinal_key,
    parent_of,
    parse_ordinal,
    sibling_of,
)
from shaker.exceptions import InvalidOrdinal


@pytest.mark.parametrize(
    "ordinal, expected",
    [
        ("1", None),
        ("12", None),
        ("1.2", "1"),
        ("3.1.4", "3.1"),
        ("10.20.30.40", "10.20.30"),
    ],
)
def test_parent_of_strips_last_segment(ordinal: str, expected: str | None) -> None:
    assert parent_of(ordinal) == expected


@pytest.mark.parametrize("ordinal", ["1.1", "2.0", "3.9", "7.10", "1.2.3"])
def test_sibling_of_next_then_previous_returns_original(ordinal: str) -> None:
    assert sibling_of(sibling_of(ordinal, 1), -1) == ordinal


def test_sibling_of_keeps_leading_segments() -> None:
    assert sibling_of("3.1.4", 1) == "3.1.5"
    assert sibling_of("3.1.4", -1) == "3.1.3"


def test_sibling_of_has_no_lower_bound() -> None:
    assert sibling_of("1.0", -1) == "1.-1"


def test_sibling_of_single_segment_shifts_itself() -> None:
    assert sibling_of("3", 1) == "4"
    assert sibling_of("3", -1) == "2"


def test_sibling_of_rejects_non_integer_last_segment() -> None:
    with pytest.raises(InvalidOrdinal):
        sibling_of("1.x", 1)


@pytest.mark.parametrize("ordinal, expected", [("1", 1), ("3.1.4", 3), ("12.5", 12), ("0.1", 0)])
def test_ancestor_of_reads_first_segment(ordinal: str, expected: int) -> None:
    assert ancestor_of(ordinal) == expected


@pytest.mark.parametrize("ordinal", ["", "a.1", "-1.2", " 1.2", "١.2"])
def test_ancestor_of_rejects_malformed_first_segment(ordinal: str) -> None:
    with pytest.raises(InvalidOrdinal):
        ancestor_of(ordinal)


@pytest.mark.parametrize("ordinal", ["1.", ".1", "1..2", "1.a", "1.-1", "1,2"])
def test_parse_ordinal_rejects_malformed(ordinal: str) -> None:
    with pytest.raises(InvalidOrdinal) as excinfo:
        parse_ordinal(ordinal)
    assert excinfo.value.ordinal == ordinal


def test_parse_ordinal_returns_segments() -> None:
    assert parse_ordinal("2.1.3") == (2, 1, 3)


def test_ordinal_key_orders_numerically_per_segment() -> None:
    ordinals = ["10", "1.10", "2", "1.2", "1", "1.9", "1.2.1"]
    assert sorted(ordinals, key=ordinal_key) == ["1", "1.2", "1.2.1", "1.9", "1.10", "2", "10"]


def test_ordinal_key_sorts_malformed_last_without_raising() -> None:
    assert sorted(["b", "2", "a", "1"], key=ordinal_key) == ["1", "2", "a", "b"]


def test_compare_ordinals_is_three_way() -> None:
    assert compare_ordinals("1.2", "1.10") == -1
    assert compare_ordinals("1.10", "1.2") == 1
    assert compare_ordinals("1.2", "1.2") == 0
