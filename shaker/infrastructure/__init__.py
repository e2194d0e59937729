"""
Infrastructure package for shaker.

Centralizes cache connectivity concerns (strategy, schema bootstrap, pooling).
Keep this layer focused on I/O and resource management, decoupled from
rendering and ingestion logic.
"""

from shaker.infrastructure.db_factory import CachePool, CacheStrategy, connect

__all__ = [
    "CachePool",
    "CacheStrategy",
    "connect",
]
