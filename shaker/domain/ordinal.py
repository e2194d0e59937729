"""
Ordinal helpers.

An ordinal is a dotted sequence of non-negative integers (``"2.1.3"``) that
identifies a record and its lineage. Every function here is pure: relationships
between records are derived from the ordinal strings alone, and whether the
derived ordinal actually exists is left to the record store.
"""

from __future__ import annotations

from typing import Optional, Tuple

from shaker.exceptions import InvalidOrdinal

SEPARATOR = "."


def _segment(ordinal: str, raw: str) -> int:
    if not raw or not raw.isascii() or not raw.isdigit():
        raise InvalidOrdinal(ordinal, f"segment {raw!r} is not a non-negative integer")
    return int(raw)


def parse_ordinal(ordinal: str) -> Tuple[int, ...]:
    """Parse an ordinal into its integer segments, rejecting anything malformed."""
    return tuple(_segment(ordinal, raw) for raw in ordinal.split(SEPARATOR))


def ordinal_key(ordinal: str) -> Tuple[int, Tuple[int, ...], str]:
    """
    Sort key comparing ordinals numerically per segment.

    Malformed ordinals sort after every well-formed one instead of raising, so
    the key is safe to use inside a SQLite collation.
    """
    try:
        return (0, parse_ordinal(ordinal), "")
    except InvalidOrdinal:
        return (1, (), ordinal)


def compare_ordinals(left: str, right: str) -> int:
    """Three-way comparison of two ordinals (SQLite collation contract)."""
    left_key, right_key = ordinal_key(left), ordinal_key(right)
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def ancestor_of(ordinal: str) -> int:
    """Return the top-level section number of ``ordinal``."""
    head = ordinal.split(SEPARATOR)[0]
    return _segment(ordinal, head)


def parent_of(ordinal: str) -> Optional[str]:
    """Return the parent ordinal, or ``None`` when ``ordinal`` is a section."""
    trail = ordinal.split(SEPARATOR)
    if len(trail) == 1:
        return None
    return SEPARATOR.join(trail[:-1])


def sibling_of(ordinal: str, delta: int) -> str:
    """
    Shift the last segment of ``ordinal`` by ``delta``.

    There is no bounds checking: ``sibling_of("1.0", -1)`` is ``"1.-1"``, which
    simply never matches a stored record.
    """
    trail = ordinal.split(SEPARATOR)
    current = _segment(ordinal, trail[-1])
    return SEPARATOR.join([*trail[:-1], str(current + delta)])


__all__ = [
    "parse_ordinal",
    "ordinal_key",
    "compare_ordinals",
    "ancestor_of",
    "parent_of",
    "sibling_of",
]
