"""
Pytest configuration for shaker.

Provides fixtures for:
- An in-memory cache pool and record store per test
- A small populated hierarchy
- A source tree on disk in the mana layout
- Settings cache isolation
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Optional

import pytest

from shaker.config import get_settings
from shaker.domain.models import Record
from shaker.infrastructure.db_factory import CachePool, CacheStrategy
from shaker.store import RecordStore


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """
    Drop the cached Settings around every test so env overrides apply.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def pool() -> Generator[CachePool, None, None]:
    cache = CachePool(CacheStrategy.memory(), max_size=4)
    try:
        yield cache
    finally:
        cache.close()


@pytest.fixture
def store(pool: CachePool) -> RecordStore:
    return RecordStore(pool)


@pytest.fixture
def sample_records() -> List[Record]:
    """
    Two sections; the first has two leaf children.

        1   Intro
        1.1   A
        1.2   B
        2   Advanced
    """
    return [
        Record.build("1", "Intro", "Welcome."),
        Record.build("1.1", "A", "First topic."),
        Record.build("1.2", "B", "Second topic."),
        Record.build("2", "Advanced", "Harder things."),
    ]


@pytest.fixture
def populated_store(store: RecordStore, sample_records: List[Record]) -> RecordStore:
    store.insert_many(sample_records)
    return store


def write_entry(
    root: Path,
    number: str,
    items: List[Dict[str, Optional[str]]],
    parent: Optional[str] = None,
    difficulty: Optional[int] = None,
    theory: Optional[Dict[str, str]] = None,
) -> Path:
    """Create ``root/<number>/metadata.json`` (and theory files) like the mana layout."""
    entry = root / number
    entry.mkdir(parents=True)
    meta: Dict[str, Any] = {"number": number, "data": items}
    if parent is not None:
        meta["parent"] = parent
    if difficulty is not None:
        meta["difficulty"] = difficulty
    (entry / "metadata.json").write_text(json.dumps(meta), encoding="utf-8")
    for lang, body in (theory or {}).items():
        folder = entry / "theory"
        folder.mkdir(exist_ok=True)
        (folder / f"{lang}.md").write_text(body, encoding="utf-8")
    return entry


@pytest.fixture
def make_entry() -> Callable[..., Path]:
    return write_entry


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """
    A mana source tree with two sections, one nested topic and an assets folder.
    """
    root = tmp_path / "src"
    root.mkdir()
    write_entry(
        root,
        "1",
        [
            {"lang": "en", "name": "Intro", "desc": "Welcome."},
            {"lang": "ca", "name": "Introducció", "desc": "Benvinguts."},
        ],
    )
    write_entry(
        root,
        "1.1",
        [{"lang": "en", "name": "A"}, {"lang": "ca", "name": "A"}],
        parent="1",
        difficulty=1,
        theory={"en": "First topic.", "ca": "Primer tema."},
    )
    write_entry(
        root,
        "1.2",
        [{"lang": "en", "name": "B", "desc": "Second topic."}],
        parent="1",
        difficulty=2,
    )
    write_entry(root, "2", [{"lang": "en", "name": "Advanced", "desc": "Harder things."}])
    (root / "assets").mkdir()
    (root / "assets" / "logo.png").write_bytes(b"\x89PNG")
    (root / "temario.md").write_text("# Temario\n", encoding="utf-8")
    return root
