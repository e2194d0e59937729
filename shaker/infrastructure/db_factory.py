"""
Cache connection factory utilities for shaker.

Provides the SQLite cache strategy (shared in-memory database or a file on
disk), schema bootstrap, and a SQLAlchemy ``QueuePool`` with scoped
checkout/release. There is no process-wide singleton: callers create a
``CachePool`` and pass it to whatever needs the cache.
"""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import event
from sqlalchemy.pool import QueuePool

from shaker.config import MEMORY_CACHE
from shaker.domain.ordinal import compare_ordinals
from shaker.exceptions import StoreCorruption
from shaker.utils.logging import get_logger

log = get_logger(__name__)

ORDINAL_COLLATION = "ORDINAL"

SCHEMA = """
CREATE TABLE IF NOT EXISTS entry (
  ordinal    TEXT NOT NULL PRIMARY KEY,
  parent     TEXT,
  ancestor   INTEGER NOT NULL,
  slug       TEXT NOT NULL,
  title      TEXT NOT NULL,
  difficulty INTEGER,
  content    TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_entry_parent ON entry(parent);
"""


def _prepare_connection(dbapi_connection, connection_record) -> None:
    """Set row access by column name and register the ordinal collation."""
    del connection_record
    dbapi_connection.row_factory = sqlite3.Row
    dbapi_connection.create_collation(ORDINAL_COLLATION, compare_ordinals)


@dataclass(frozen=True)
class CacheStrategy:
    """
    Where the cache lives.

    ``path`` is ``None`` for a private in-memory database shared by every
    connection of one pool; otherwise it is a SQLite file, reused if present.
    """

    path: Optional[Path] = None

    @classmethod
    def parse(cls, value: str | Path) -> "CacheStrategy":
        if str(value) == MEMORY_CACHE:
            return cls.memory()
        return cls.disk(value)

    @classmethod
    def memory(cls) -> "CacheStrategy":
        return cls(path=None)

    @classmethod
    def disk(cls, path: str | Path) -> "CacheStrategy":
        return cls(path=Path(path))

    @property
    def in_memory(self) -> bool:
        return self.path is None

    def describe(self) -> str:
        return MEMORY_CACHE if self.path is None else str(self.path)


class CachePool:
    """
    Bounded pool of SQLite connections against one cache.

    Backed by a SQLAlchemy ``QueuePool`` holding at most ``max_size``
    connections, handed out through the ``connection()`` context manager. Each
    connection gets the ``ORDINAL`` collation from the pool's ``connect``
    event. For in-memory caches an anchor connection is held for the lifetime
    of the pool so the database survives idle periods.

    Example
    -------
        with CachePool(CacheStrategy.memory()) as pool:
            with pool.connection() as conn:
                conn.execute("SELECT 1")
    """

    def __init__(self, strategy: CacheStrategy, max_size: int = 4) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.strategy = strategy
        self.max_size = max_size
        self._closed = False
        if strategy.in_memory:
            self._target = f"file:shaker-{uuid.uuid4().hex}?mode=memory&cache=shared"
        else:
            self._target = str(strategy.path)
        self._anchor = self._create()
        _prepare_connection(self._anchor, None)
        try:
            self._bootstrap(self._anchor)
        except StoreCorruption:
            self._anchor.close()
            raise
        self._pool = QueuePool(
            self._create,
            pool_size=max_size,
            max_overflow=0,
            reset_on_return="rollback",
        )
        event.listen(self._pool, "connect", _prepare_connection)
        log.debug(
            "Cache pool opened",
            extra={"cache": strategy.describe(), "max_size": max_size},
        )

    def _create(self) -> sqlite3.Connection:
        try:
            return sqlite3.connect(
                self._target,
                uri=self.strategy.in_memory,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise StoreCorruption(f"Cannot open cache {self.strategy.describe()}: {exc}") from exc

    @staticmethod
    def _bootstrap(conn: sqlite3.Connection) -> None:
        try:
            with conn:
                conn.executescript(SCHEMA)
        except sqlite3.DatabaseError as exc:
            raise StoreCorruption(f"Cannot bootstrap cache schema: {exc}") from exc

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Check out a connection for the duration of the block.

        The pool rolls back any open transaction when the connection is
        returned, so a block that raises leaves nothing half-written.
        """
        if self._closed:
            raise RuntimeError("cache pool is already closed")
        pooled = self._pool.connect()
        try:
            yield pooled.dbapi_connection
        finally:
            pooled.close()

    @property
    def checked_out(self) -> int:
        return self._pool.checkedout()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close every pooled connection, including the in-memory anchor."""
        if self._closed:
            return
        self._closed = True
        self._pool.dispose()
        self._anchor.close()
        log.debug("Cache pool closed", extra={"cache": self.strategy.describe()})

    def __enter__(self) -> "CachePool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        self.close()


def connect(cache_path: str | Path = MEMORY_CACHE, max_size: int = 4) -> CachePool:
    """
    Open a pool for the cache described by ``cache_path``.

    Parameters
    ----------
    cache_path : str | Path
        ``":memory:"`` for a private in-memory cache, otherwise a SQLite file
        path that is created if missing and reused if it already exists.
    max_size : int
        Maximum number of pooled connections.

    Returns
    -------
    CachePool
        A pool with the ``entry`` schema in place.
    """
    return CachePool(CacheStrategy.parse(cache_path), max_size=max_size)


__all__ = [
    "CachePool",
    "CacheStrategy",
    "ORDINAL_COLLATION",
    "SCHEMA",
    "connect",
]
