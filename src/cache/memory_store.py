# src/cache/memory_store.py — v1
"""In-memory cache store (CACHE_BACKEND=memory or --no-cache).

Starts empty and persists nothing, so every asset is reprocessed.
"""

from __future__ import annotations

from assetopt.cache.base_cache_store import BaseCacheStore


class MemoryCacheStore(BaseCacheStore):
    """Non-persistent cache store."""

    async def load(self) -> None:
        self._entries = {}

    async def save(self) -> bool:
        return True
