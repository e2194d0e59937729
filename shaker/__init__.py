"""
shaker - render a hierarchy of dotted-ordinal entries as cross-linked Markdown.

The package ingests a source tree with one directory per entry, stages every
entry into a single-table SQLite cache keyed by its ordinal (``1.2.3``), and
writes the hierarchy back out:

- one directory per top-level section, with the section as ``index.md``
- every descendant as ``<slug>.md`` beside it
- tables of contents for entries with children, previous/next navigation
  for entries without
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from shaker.config import Settings, get_settings
from shaker.domain.models import Record, slugify
from shaker.domain.ordinal import ancestor_of, parent_of, sibling_of
from shaker.exceptions import (
    DuplicateOrdinal,
    InvalidOrdinal,
    MetadataError,
    NotFound,
    ShakerError,
    StoreCorruption,
)
from shaker.infrastructure.db_factory import CachePool, CacheStrategy, connect
from shaker.ingestion import read_entries
from shaker.orchestrator import RunSummary, run
from shaker.renderer import FileSystemWriter, MemoryWriter, TreeRenderer
from shaker.store import RecordStore
from shaker.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Record",
    "slugify",
    "ancestor_of",
    "parent_of",
    "sibling_of",
    # Errors
    "ShakerError",
    "InvalidOrdinal",
    "DuplicateOrdinal",
    "NotFound",
    "StoreCorruption",
    "MetadataError",
    # Cache and store
    "CachePool",
    "CacheStrategy",
    "connect",
    "RecordStore",
    # Ingestion, rendering, orchestration
    "read_entries",
    "TreeRenderer",
    "FileSystemWriter",
    "MemoryWriter",
    "RunSummary",
    "run",
    # Logging
    "configure_logging",
    "get_logger",
]
