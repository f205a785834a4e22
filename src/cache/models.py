# src/cache/models.py — v1
"""Cache domain models: CacheEntry and the on-disk document shape.

The persisted document is a single JSON object mapping each output key
(destination-relative path) to ``{"hash": ..., "timestamp": ...}``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, RootModel


class CacheEntry(BaseModel):
    """Single cache entry for one output artifact.

    ``timestamp`` is informational; freshness is decided by ``hash`` and the
    presence of the destination file only.
    """

    hash: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CacheDocument(RootModel[dict[str, CacheEntry]]):
    """Whole cache file: key -> CacheEntry."""

    root: dict[str, CacheEntry] = Field(default_factory=dict)
