"""
Record store backed by the ``entry`` table.

Holds one row per ordinal for a single ingestion run. Records are inserted
once, then queried any number of times by the renderer. Every ordered query
uses the ``ORDINAL`` collation, so siblings compare numerically per segment
(``1.2`` before ``1.10``).
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, List, Optional, Sequence, Tuple

from shaker.domain.models import Record
from shaker.domain.ordinal import parse_ordinal, sibling_of
from shaker.exceptions import DuplicateOrdinal, NotFound, StoreCorruption
from shaker.infrastructure.db_factory import ORDINAL_COLLATION, CachePool
from shaker.utils.logging import get_logger

log = get_logger(__name__)

Siblings = Tuple[Optional[Record], Optional[Record]]

_COLUMNS = "ordinal, parent, ancestor, slug, title, difficulty, content"

_SELECT_ONE = f"SELECT {_COLUMNS} FROM entry WHERE ordinal = ?;"

_SELECT_CHILDREN = f"""
    SELECT {_COLUMNS}
    FROM entry
    WHERE parent = ?
    ORDER BY ordinal COLLATE {ORDINAL_COLLATION};
"""

_SELECT_SECTIONS = f"""
    SELECT {_COLUMNS}
    FROM entry
    WHERE parent IS NULL
    ORDER BY ordinal COLLATE {ORDINAL_COLLATION};
"""

_SELECT_ALL = f"SELECT {_COLUMNS} FROM entry ORDER BY ordinal COLLATE {ORDINAL_COLLATION};"

_INSERT = f"INSERT INTO entry ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?);"


def _to_record(row: sqlite3.Row) -> Record:
    return Record(
        ordinal=row["ordinal"],
        parent=row["parent"],
        ancestor=row["ancestor"],
        slug=row["slug"],
        title=row["title"],
        difficulty=row["difficulty"],
        content=row["content"],
    )


class RecordStore:
    """
    Queryable cache of records keyed by ordinal.

    Each call checks a connection out of ``pool`` for its own duration, so one
    store may be shared by threads rendering different sections.
    """

    def __init__(self, pool: CachePool) -> None:
        self.pool = pool

    def _select(self, sql: str, params: Sequence[object] = ()) -> List[Record]:
        try:
            with self.pool.connection() as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.DatabaseError as exc:
            raise StoreCorruption(f"Cache query failed: {exc}") from exc
        return [_to_record(row) for row in rows]

    def insert(self, record: Record) -> None:
        """
        Add ``record`` to the store.

        Raises
        ------
        InvalidOrdinal
            If the record's ordinal is malformed.
        DuplicateOrdinal
            If a record with the same ordinal already exists. The store is left
            unchanged.
        """
        parse_ordinal(record.ordinal)
        values = (
            record.ordinal,
            record.parent,
            record.ancestor,
            record.slug,
            record.title,
            record.difficulty,
            record.content,
        )
        try:
            with self.pool.connection() as conn:
                with conn:
                    conn.execute(_INSERT, values)
        except sqlite3.IntegrityError as exc:
            raise DuplicateOrdinal(record.ordinal) from exc
        except sqlite3.DatabaseError as exc:
            raise StoreCorruption(f"Cannot insert {record.ordinal!r}: {exc}") from exc
        log.debug("Record inserted", extra={"ordinal": record.ordinal, "slug": record.slug})

    def insert_many(self, records: Iterable[Record]) -> int:
        """Insert records in order, stopping at the first failure."""
        inserted = 0
        for record in records:
            self.insert(record)
            inserted += 1
        return inserted

    def get(self, ordinal: str) -> Optional[Record]:
        """Point lookup; ``None`` when no record has ``ordinal``."""
        found = self._select(_SELECT_ONE, (ordinal,))
        return found[0] if found else None

    def require(self, ordinal: str) -> Record:
        """Like ``get`` but raises ``NotFound`` on absence."""
        record = self.get(ordinal)
        if record is None:
            raise NotFound(ordinal)
        return record

    def children_of(self, ordinal: str) -> List[Record]:
        """Direct children of ``ordinal`` in ascending ordinal order."""
        return self._select(_SELECT_CHILDREN, (ordinal,))

    def sections(self) -> List[Record]:
        """Top-level records (no parent) in ascending ordinal order."""
        return self._select(_SELECT_SECTIONS)

    def siblings_of(self, ordinal: str) -> Siblings:
        """
        Previous and next siblings of ``ordinal``.

        Either side is ``None`` when no record exists at the shifted ordinal.
        Raises ``InvalidOrdinal`` if ``ordinal`` itself cannot be parsed.
        """
        previous = self.get(sibling_of(ordinal, -1))
        following = self.get(sibling_of(ordinal, 1))
        return previous, following

    def all(self) -> List[Record]:
        """Every stored record, orphans included, in ascending ordinal order."""
        return self._select(_SELECT_ALL)

    def count(self) -> int:
        try:
            with self.pool.connection() as conn:
                (total,) = conn.execute("SELECT COUNT(*) FROM entry;").fetchone()
        except sqlite3.DatabaseError as exc:
            raise StoreCorruption(f"Cache query failed: {exc}") from exc
        return int(total)


__all__ = ["RecordStore", "Siblings"]
