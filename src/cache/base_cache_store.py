# src/cache/base_cache_store.py — v1
"""Abstract cache store interface.

A store is loaded once at run start, mutated in memory while files are
processed, and saved once at the end.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from assetopt.cache.models import CacheEntry


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    @abstractmethod
    async def load(self) -> None:
        """Populate the in-memory map. Never raises on bad persisted data."""

    @abstractmethod
    async def save(self) -> bool:
        """Persist the in-memory map. Returns False if persisting failed."""

    def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by output key."""
        return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> None:
        """Insert or replace a cache entry."""
        self._entries[key] = entry

    def delete(self, key: str) -> None:
        """Remove a cache entry if present."""
        self._entries.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
