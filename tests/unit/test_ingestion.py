from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from shaker.domain.models import MetaItem
from shaker.exceptions import DuplicateOrdinal, InvalidOrdinal, MetadataError
from shaker.ingestion import (
    InlineDescription,
    TheoryFile,
    build_record,
    iter_entries,
    load_metadata,
    read_entries,
    resolve_content,
)
from shaker.store import RecordStore

EXPECTED_ENGLISH_RECORDS = 4


def test_read_entries_inserts_every_entry(store: RecordStore, source_tree: Path) -> None:
    report = read_entries(store, source_tree, lang="en")

    assert report.inserted == EXPECTED_ENGLISH_RECORDS
    assert report.skipped == []
    assert [r.ordinal for r in store.all()] == ["1", "1.1", "1.2", "2"]


def test_read_entries_resolves_fields(store: RecordStore, source_tree: Path) -> None:
    read_entries(store, source_tree, lang="en")
    record = store.require("1.1")

    assert record.parent == "1"
    assert record.ancestor == 1
    assert record.slug == "a"
    assert record.title == "A"
    assert record.difficulty == 1
    assert record.content == "First topic."


def test_read_entries_skips_entries_without_language(
    store: RecordStore, source_tree: Path
) -> None:
    report = read_entries(store, source_tree, lang="ca")

    assert report.inserted == 2
    assert report.skipped == ["1.2", "2"]
    assert store.require("1").title == "Introducció"
    assert store.require("1").slug == "introducci"
    assert store.require("1.1").content == "Primer tema."


def test_fallback_language_fills_missing_entries(store: RecordStore, source_tree: Path) -> None:
    report = read_entries(store, source_tree, lang="ca", fallback_lang="en")

    assert report.inserted == EXPECTED_ENGLISH_RECORDS
    assert report.skipped_count == 0
    assert store.require("2").title == "Advanced"
    assert store.require("1").title == "Introducció"


def test_excluded_names_are_ignored(store: RecordStore, source_tree: Path) -> None:
    names = [path.name for path in iter_entries(source_tree, excluded_names=["assets", "2"])]
    assert names == ["1", "1.1", "1.2"]


def test_unexcluded_folder_without_metadata_fails(store: RecordStore, source_tree: Path) -> None:
    with pytest.raises(MetadataError, match="metadata.json"):
        read_entries(store, source_tree, excluded_names=[], lang="en")


def test_inline_description_wins_over_theory_file(
    tmp_path: Path, make_entry: Callable[..., Path]
) -> None:
    entry = make_entry(
        tmp_path,
        "3",
        [{"lang": "en", "name": "Both", "desc": "Inline body."}],
        theory={"en": "File body."},
    )
    record = build_record(entry, "en")
    assert record.content == "Inline body."


def test_missing_content_everywhere_fails(tmp_path: Path, make_entry: Callable[..., Path]) -> None:
    entry = make_entry(tmp_path, "3", [{"lang": "en", "name": "Empty"}])

    with pytest.raises(MetadataError, match="tried: inline, theory"):
        build_record(entry, "en")


def test_resolve_content_follows_chain_order(tmp_path: Path) -> None:
    (tmp_path / "theory").mkdir()
    (tmp_path / "theory" / "es.md").write_text("Desde archivo.", encoding="utf-8")
    item = MetaItem(lang="es", name="Tema", desc="En línea.")

    assert resolve_content(tmp_path, item, [InlineDescription(), TheoryFile()]) == "En línea."
    assert resolve_content(tmp_path, item, [TheoryFile(), InlineDescription()]) == "Desde archivo."


def test_parent_defaults_to_ordinal_prefix(tmp_path: Path, make_entry: Callable[..., Path]) -> None:
    entry = make_entry(tmp_path, "2.3.1", [{"lang": "en", "name": "Leaf", "desc": "x"}])
    assert build_record(entry, "en").parent == "2.3"


def test_malformed_json_raises_metadata_error(tmp_path: Path) -> None:
    entry = tmp_path / "1"
    entry.mkdir()
    (entry / "metadata.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(MetadataError, match="Malformed"):
        load_metadata(entry)


def test_schema_violation_raises_metadata_error(tmp_path: Path) -> None:
    entry = tmp_path / "1"
    entry.mkdir()
    (entry / "metadata.json").write_text('{"data": []}', encoding="utf-8")

    with pytest.raises(MetadataError):
        load_metadata(entry)


def test_invalid_ordinal_aborts_ingestion(
    store: RecordStore, tmp_path: Path, make_entry: Callable[..., Path]
) -> None:
    make_entry(tmp_path, "one", [{"lang": "en", "name": "Bad", "desc": "x"}])

    with pytest.raises(InvalidOrdinal):
        read_entries(store, tmp_path, lang="en")


def test_duplicate_number_aborts_ingestion(
    store: RecordStore, tmp_path: Path, make_entry: Callable[..., Path]
) -> None:
    first = make_entry(tmp_path, "1", [{"lang": "en", "name": "Intro", "desc": "x"}])
    copy = tmp_path / "1-copy"
    copy.mkdir()
    (copy / "metadata.json").write_text(
        (first / "metadata.json").read_text(encoding="utf-8"), encoding="utf-8"
    )

    with pytest.raises(DuplicateOrdinal):
        read_entries(store, tmp_path, lang="en")
    assert store.count() == 1


def test_metadata_with_invalid_utf8_raises_metadata_error(tmp_path: Path) -> None:
    entry = tmp_path / "1"
    entry.mkdir()
    (entry / "metadata.json").write_bytes(
        b'{"number": "1", "data": [{"lang": "en", "name": "\xff", "desc": "x"}]}'
    )

    with pytest.raises(MetadataError, match="Cannot read"):
        load_metadata(entry)


def test_theory_file_with_invalid_utf8_raises_metadata_error(
    tmp_path: Path, make_entry: Callable[..., Path]
) -> None:
    entry = make_entry(tmp_path, "1", [{"lang": "en", "name": "Intro"}])
    (entry / "theory").mkdir(exist_ok=True)
    (entry / "theory" / "en.md").write_bytes(b"\xff\xfe broken")

    with pytest.raises(MetadataError, match="en.md"):
        build_record(entry, "en")
