# src/cache/json_store.py — v1
"""JSON file-based cache store (default CACHE_BACKEND=json).

The whole cache lives in one JSON document that is read in full by
``load()`` and overwritten in full by ``save()``. Concurrent invocations
against the same file are not coordinated: the last writer wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from assetopt.cache.base_cache_store import BaseCacheStore
from assetopt.cache.models import CacheDocument, CacheEntry

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """Single-document JSON cache."""

    def __init__(self, cache_file: Path | str) -> None:
        super().__init__()
        self._path = Path(cache_file).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> None:
        """Read the cache document; fall back to an empty store on any failure."""
        self._entries = {}
        if not self._path.exists():
            logger.debug("No cache file at %s, starting empty", self._path)
            return

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", self._path, e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring cache file %s: not a JSON object", self._path)
            return

        for key, raw in data.items():
            try:
                self._entries[key] = CacheEntry.model_validate(raw)
            except ValidationError:
                logger.debug("Dropping malformed cache entry %s", key)

        logger.debug("Loaded %d cache entries from %s", len(self._entries), self._path)

    async def save(self) -> bool:
        """Overwrite the cache document with the current in-memory map."""
        document = CacheDocument(dict(sorted(self._entries.items())))
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                document.model_dump_json(indent=2), encoding="utf-8"
            )
        except OSError as e:
            logger.error("Error saving cache to %s: %s", self._path, e)
            return False

        logger.debug("Saved %d cache entries to %s", len(self._entries), self._path)
        return True


def clear_cache(cache_file: Path | str) -> bool:
    """Delete the cache document. Returns True if a file was removed."""
    path = Path(cache_file).expanduser()
    if not path.exists():
        return False
    path.unlink()
    return True
