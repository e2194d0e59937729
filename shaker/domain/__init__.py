"""
Domain package for shaker.

Exports the record model and the pure ordinal helpers used by the store,
renderer and ingestion layers. Keep this package free of I/O.
"""

from shaker.domain.models import MetaItem, Metadata, Record, slugify
from shaker.domain.ordinal import (
    ancestor_of,
    compare_ordinals,
    ordinal_key,
    parent_of,
    parse_ordinal,
    sibling_of,
)

__all__ = [
    "Record",
    "MetaItem",
    "Metadata",
    "slugify",
    "ancestor_of",
    "compare_ordinals",
    "ordinal_key",
    "parent_of",
    "parse_ordinal",
    "sibling_of",
]
