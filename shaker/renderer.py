"""
Markdown tree renderer.

Walks the record store from a section root and renders every record into a
Markdown document:

- a YAML metadata block terminated by a ``---`` line,
- a level-1 heading with the title followed by the content body,
- a "Table of contents" when the record has children (node), or a
  "Navigation" block with previous/next sibling links when it has none (leaf).

Section roots are written as ``index.md``; every descendant, whatever its
depth, is written as ``<slug>.md`` next to it in the section directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, NamedTuple, Protocol, Sequence, Tuple, runtime_checkable

import yaml

from shaker.domain.models import Record
from shaker.store import RecordStore, Siblings
from shaker.utils.logging import get_logger

log = get_logger(__name__)

INDEX_FILENAME = "index.md"
METADATA_TERMINATOR = "---\n"


@runtime_checkable
class OutputWriter(Protocol):
    """
    Destination for rendered documents.

    Implementations receive the directory a document belongs to, its file name
    and the finished text. Failures must propagate.
    """

    def write(self, directory: Path, filename: str, document: str) -> None:
        ...


class FileSystemWriter:
    """Writes documents as UTF-8 files into existing directories."""

    def write(self, directory: Path, filename: str, document: str) -> None:
        (Path(directory) / filename).write_text(document, encoding="utf-8")


@dataclass
class MemoryWriter:
    """Collects documents in memory, keyed by their would-be path."""

    documents: Dict[Path, str] = field(default_factory=dict)

    def write(self, directory: Path, filename: str, document: str) -> None:
        self.documents[Path(directory) / filename] = document


class RenderedNode(NamedTuple):
    document: str
    children: Tuple[Record, ...]

    @property
    def is_leaf(self) -> bool:
        return not self.children


def build_metadata(record: Record) -> str:
    """Serialize the record's metadata (never its content) as a YAML block."""
    blob = yaml.safe_dump(
        record.metadata(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )
    return blob + METADATA_TERMINATOR


def _body(record: Record) -> str:
    return f"# {record.title}\n\n{record.content}\n\n"


def build_node(record: Record, children: Sequence[Record]) -> str:
    """Render a record with children: body plus a table of contents."""
    parts = [build_metadata(record), _body(record), "## Table of contents\n\n"]
    parts.extend(f"- [{child.title}](./{child.slug}.md)\n" for child in children)
    return "".join(parts)


def build_leaf(record: Record, siblings: Siblings) -> str:
    """
    Render a record without children: body plus previous/next navigation.

    Missing siblings are omitted; with neither, the section is left empty.
    """
    previous, following = siblings
    nav: List[str] = []
    if previous is not None:
        nav.append(f"- Previous: [{previous.title}]({previous.slug}.md)")
    if following is not None:
        nav.append(f"- Next: [{following.title}]({following.slug}.md)")
    return "".join([build_metadata(record), _body(record), "## Navigation\n\n", "\n".join(nav)])


class TreeRenderer:
    """
    Recursive renderer over a ``RecordStore``.

    Parameters
    ----------
    store : RecordStore
        Fully populated store; the renderer only reads from it.
    writer : OutputWriter
        Where finished documents go. Defaults to the filesystem.
    """

    def __init__(self, store: RecordStore, writer: OutputWriter | None = None) -> None:
        self.store = store
        self.writer = writer if writer is not None else FileSystemWriter()

    def render(self, record: Record) -> RenderedNode:
        children = self.store.children_of(record.ordinal)
        if children:
            document = build_node(record, children)
        else:
            document = build_leaf(record, self.store.siblings_of(record.ordinal))
        return RenderedNode(document=document, children=tuple(children))

    def write_tree(self, record: Record, directory: Path) -> int:
        """
        Write a section root as ``index.md`` and its whole subtree beside it.

        Returns the number of documents written.
        """
        rendered = self.render(record)
        self.writer.write(Path(directory), INDEX_FILENAME, rendered.document)
        log.debug(
            "Wrote section index",
            extra={"ordinal": record.ordinal, "directory": str(directory)},
        )
        written = 1
        for child in rendered.children:
            written += self.write_node(child, directory)
        return written

    def write_node(self, record: Record, directory: Path) -> int:
        """Write ``<slug>.md`` and recurse into children in the same directory."""
        rendered = self.render(record)
        self.writer.write(Path(directory), f"{record.slug}.md", rendered.document)
        log.debug(
            "Wrote document",
            extra={"ordinal": record.ordinal, "file": f"{record.slug}.md", "leaf": rendered.is_leaf},
        )
        written = 1
        for child in rendered.children:
            written += self.write_node(child, directory)
        return written


__all__ = [
    "FileSystemWriter",
    "MemoryWriter",
    "OutputWriter",
    "RenderedNode",
    "TreeRenderer",
    "build_leaf",
    "build_metadata",
    "build_node",
]
