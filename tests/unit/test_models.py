from __future__ import annotations

import pytest
from pydantic import ValidationError

from shaker.domain.models import Metadata, Record, slugify
from shaker.exceptions import InvalidOrdinal


def test_slugify_drops_non_ascii_letters_instead_of_transliterating() -> None:
    assert slugify("Equació de Segon Grau") == "equaci-de-segon-grau"


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Intro", "intro"),
        ("Advanced Topics", "advanced-topics"),
        ("Pre-Calculus", "pre-calculus"),
        ("Chapter 3: Limits!", "chapter--limits"),
        ("Àlgebra", "lgebra"),
        ("", ""),
    ],
)
def test_slugify_keeps_only_lowercase_letters_and_dashes(title: str, expected: str) -> None:
    assert slugify(title) == expected


def test_build_derives_parent_ancestor_and_slug() -> None:
    record = Record.build("3.1.4", "Pi Day", "Body", difficulty=2)

    assert record.parent == "3.1"
    assert record.ancestor == 3
    assert record.slug == "pi-day"
    assert record.difficulty == 2
    assert not record.is_section


def test_build_keeps_explicit_parent() -> None:
    record = Record.build("2.1", "Orphan", parent="9")
    assert record.parent == "9"


def test_build_section_has_no_parent() -> None:
    record = Record.build("2", "Advanced")
    assert record.parent is None
    assert record.is_section


def test_build_rejects_invalid_ordinal() -> None:
    with pytest.raises(InvalidOrdinal):
        Record.build("x.1", "Broken")


def test_metadata_omits_absent_optional_fields_and_content() -> None:
    record = Record.build("1", "Intro", "Secret body")
    assert record.metadata() == {"ordinal": "1", "slug": "intro", "title": "Intro"}


def test_metadata_keeps_field_order() -> None:
    record = Record.build("1.1", "A", "Body", difficulty=4)
    assert list(record.metadata()) == ["ordinal", "parent", "slug", "title", "difficulty"]


def test_record_is_frozen() -> None:
    record = Record.build("1", "Intro")
    with pytest.raises(ValidationError):
        record.title = "Other"  # type: ignore[misc]


def test_metadata_item_for_language() -> None:
    meta = Metadata.model_validate(
        {
            "number": "1",
            "data": [{"lang": "en", "name": "Intro"}, {"lang": "ca", "name": "Introducció"}],
        }
    )
    assert meta.item_for("ca").name == "Introducció"
    assert meta.item_for("es") is None
    assert meta.parent is None
    assert meta.difficulty is None


def test_metadata_data_defaults_to_empty() -> None:
    meta = Metadata.model_validate({"number": "4"})
    assert meta.data == []
