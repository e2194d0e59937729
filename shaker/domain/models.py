"""
Domain models for shaker.

Defines the cached ``Record`` schema aligned with the ``entry`` table, plus the
``metadata.json`` structures read during ingestion.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from shaker.domain.ordinal import ancestor_of, parent_of


def slugify(title: str) -> str:
    """
    Lowercase ``title`` keeping only ASCII ``a``-``z`` and ``-``.

    Spaces become ``-``; everything else (digits, punctuation, accented letters)
    is dropped rather than transliterated.
    """
    chars = []
    for ch in title.lower():
        if "a" <= ch <= "z" or ch == "-":
            chars.append(ch)
        elif ch == " ":
            chars.append("-")
    return "".join(chars)


class Record(BaseModel):
    """
    Representation of a single row in the ``entry`` table.
    """

    ordinal: str = Field(..., description="Dotted hierarchical identifier (primary key).")
    parent: Optional[str] = Field(None, description="Ordinal of the parent; None for sections.")
    ancestor: int = Field(..., ge=0, description="Top-level section number.")
    slug: str = Field(..., description="Filename-safe identifier derived from the title.")
    title: str = Field(..., description="Display name in the resolved language.")
    difficulty: Optional[int] = Field(None, description="Advisory difficulty rating.")
    content: str = Field("", description="Body text in the resolved language.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @classmethod
    def build(
        cls,
        ordinal: str,
        title: str,
        content: str = "",
        parent: Optional[str] = None,
        difficulty: Optional[int] = None,
        derive_parent: bool = True,
    ) -> "Record":
        """
        Build a record deriving ``ancestor`` and ``slug`` from the ordinal and title.

        When ``parent`` is not given and ``derive_parent`` is set, it is derived
        from the ordinal.
        """
        if parent is None and derive_parent:
            parent = parent_of(ordinal)
        return cls(
            ordinal=ordinal,
            parent=parent,
            ancestor=ancestor_of(ordinal),
            slug=slugify(title),
            title=title,
            difficulty=difficulty,
            content=content,
        )

    def metadata(self) -> Dict[str, Any]:
        """Fields serialized into the rendered metadata block, in order."""
        data: Dict[str, Any] = {"ordinal": self.ordinal}
        if self.parent is not None:
            data["parent"] = self.parent
        data["slug"] = self.slug
        data["title"] = self.title
        if self.difficulty is not None:
            data["difficulty"] = self.difficulty
        return data

    @property
    def is_section(self) -> bool:
        return self.parent is None


class MetaItem(BaseModel):
    """Per-language entry of ``metadata.json``."""

    lang: str
    name: str
    desc: Optional[str] = None


class Metadata(BaseModel):
    """Structure held in each entry's ``metadata.json``."""

    number: str
    parent: Optional[str] = None
    difficulty: Optional[int] = Field(None, ge=0)
    data: List[MetaItem] = Field(default_factory=list)

    def item_for(self, lang: str) -> Optional[MetaItem]:
        return next((item for item in self.data if item.lang == lang), None)


__all__ = ["Record", "MetaItem", "Metadata", "slugify"]
