"""
Ingestion of a source tree into the record store.

The expected directory structure is one folder per topic named after its
ordinal::

    src/
    ├── 1/
    │   └── metadata.json
    ├── 1.1/
    │   └── metadata.json
    ├── 1.1.2/
    │   ├── metadata.json
    │   └── theory/
    │       ├── ca.md
    │       ├── en.md
    │       └── es.md
    └── assets/

Each ``metadata.json`` holds the ordinal (``number``), an optional parent and
difficulty, and one item per language with a title (``name``) and an optional
inline body (``desc``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from pydantic import ValidationError

from shaker.domain.models import MetaItem, Metadata, Record
from shaker.domain.ordinal import ordinal_key
from shaker.exceptions import MetadataError
from shaker.store import RecordStore
from shaker.utils.logging import get_logger

log = get_logger(__name__)

METADATA_FILENAME = "metadata.json"
DEFAULT_EXCLUDED_NAMES: Tuple[str, ...] = ("assets", "temario.md")


class ContentSource(Protocol):
    """One step of the content resolution chain."""

    name: str

    def resolve(self, entry: Path, item: MetaItem) -> Optional[str]:
        """Return the body for ``item`` or ``None`` to defer to the next source."""
        ...


class InlineDescription:
    """Uses the ``desc`` field of the language item when present."""

    name = "inline"

    def resolve(self, entry: Path, item: MetaItem) -> Optional[str]:
        del entry
        return item.desc


class TheoryFile:
    """Reads ``theory/<lang>.md`` from the entry directory."""

    name = "theory"

    def __init__(self, folder: str = "theory") -> None:
        self.folder = folder

    def resolve(self, entry: Path, item: MetaItem) -> Optional[str]:
        path = entry / self.folder / f"{item.lang}.md"
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise MetadataError(f"Cannot read {path}: {exc}") from exc


def default_content_chain() -> Tuple[ContentSource, ...]:
    """Inline description first, then the per-language theory file."""
    return (InlineDescription(), TheoryFile())


@dataclass
class IngestionReport:
    inserted: int = 0
    skipped: List[str] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def load_metadata(entry: Path) -> Metadata:
    """Parse ``metadata.json`` of a source entry."""
    path = entry / METADATA_FILENAME
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MetadataError(f"Cannot read {path}: {exc}") from exc
    try:
        return Metadata.model_validate_json(raw)
    except ValidationError as exc:
        raise MetadataError(f"Malformed {path}: {exc}") from exc


def resolve_item(meta: Metadata, lang: str, fallback_lang: Optional[str] = None) -> Optional[MetaItem]:
    """Pick the language item for ``lang``, else for ``fallback_lang``."""
    item = meta.item_for(lang)
    if item is None and fallback_lang and fallback_lang != lang:
        item = meta.item_for(fallback_lang)
    return item


def resolve_content(entry: Path, item: MetaItem, chain: Sequence[ContentSource]) -> str:
    for source in chain:
        content = source.resolve(entry, item)
        if content is not None:
            return content
    tried = ", ".join(source.name for source in chain)
    raise MetadataError(f"No content for {entry.name} in {item.lang!r} (tried: {tried})")


def build_record(
    entry: Path,
    lang: str,
    fallback_lang: Optional[str] = None,
    chain: Sequence[ContentSource] | None = None,
) -> Optional[Record]:
    """
    Turn one source entry into a record, or ``None`` when it has no item for
    the requested (or fallback) language.
    """
    meta = load_metadata(entry)
    item = resolve_item(meta, lang, fallback_lang)
    if item is None:
        return None
    content = resolve_content(entry, item, chain if chain is not None else default_content_chain())
    return Record.build(
        ordinal=meta.number,
        title=item.name,
        content=content,
        parent=meta.parent,
        difficulty=meta.difficulty,
    )


def iter_entries(source: Path, excluded_names: Iterable[str] = DEFAULT_EXCLUDED_NAMES) -> List[Path]:
    """Entry directories of ``source`` in ordinal order, minus excluded names."""
    excluded = set(excluded_names)
    entries = [
        path for path in Path(source).iterdir() if path.is_dir() and path.name not in excluded
    ]
    return sorted(entries, key=lambda path: ordinal_key(path.name))


def read_entries(
    store: RecordStore,
    source: Path | str,
    excluded_names: Iterable[str] = DEFAULT_EXCLUDED_NAMES,
    lang: str = "en",
    fallback_lang: Optional[str] = None,
    chain: Sequence[ContentSource] | None = None,
) -> IngestionReport:
    """
    Read every entry under ``source`` for ``lang`` and insert it into ``store``.

    Entries without an item for the language are skipped and reported. Any
    other problem (malformed metadata, invalid or duplicate ordinal) aborts the
    ingestion and propagates.
    """
    report = IngestionReport()
    for entry in iter_entries(Path(source), excluded_names):
        record = build_record(entry, lang, fallback_lang, chain)
        if record is None:
            log.info(f"Skipping {entry.name}. No content for {lang}.", extra={"entry": entry.name})
            report.skipped.append(entry.name)
            continue
        store.insert(record)
        report.inserted += 1

    log.info(
        "Ingestion complete",
        extra={"inserted": report.inserted, "skipped": report.skipped_count, "lang": lang},
    )
    return report


__all__ = [
    "ContentSource",
    "InlineDescription",
    "TheoryFile",
    "IngestionReport",
    "build_record",
    "default_content_chain",
    "iter_entries",
    "load_metadata",
    "read_entries",
    "resolve_content",
    "resolve_item",
]
