# src/cache/cache_factory.py — v1
"""Factory for cache store instantiation."""

from __future__ import annotations

from assetopt.cache.base_cache_store import BaseCacheStore
from assetopt.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the JSON backend at
            ``.image-cache.json``.

    Returns:
        Configured BaseCacheStore implementation.
    """
    if settings is not None and not settings.cache_enabled:
        from assetopt.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    backend = "json" if settings is None else settings.cache_backend

    if backend == "json":
        from assetopt.cache.json_store import JsonCacheStore
        cache_file = ".image-cache.json" if settings is None else settings.cache_file
        return JsonCacheStore(cache_file=cache_file)

    if backend == "memory":
        from assetopt.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    raise ValueError(f"Unsupported cache backend: {backend!r}")
