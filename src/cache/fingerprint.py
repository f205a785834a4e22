# src/cache/fingerprint.py — v1
"""Change-detection fingerprints for source assets.

A fingerprint combines the source size, its modification time and the
config hash. It is a change-detection token, not a content identity:
identical inputs under identical configuration always produce the same
value, and touching any of the three inputs produces a different one.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from assetopt.cache.models import CacheEntry


def compute_fingerprint(size_bytes: int, mtime_ns: int, config_hash: str) -> str:
    """Hash (size, mtime, config hash) into a hex digest.

    Args:
        size_bytes: Source file size.
        mtime_ns: Source modification time in nanoseconds.
        config_hash: Hash of the active optimization profile.
    """
    payload = f"{size_bytes}-{mtime_ns}-{config_hash}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def fingerprint_file(path: Path, config_hash: str) -> str:
    """Stat ``path`` and compute its fingerprint.

    Raises:
        OSError: If the file cannot be stat'ed.
    """
    stat = path.stat()
    return compute_fingerprint(stat.st_size, stat.st_mtime_ns, config_hash)


def is_fresh(entry: CacheEntry | None, fingerprint: str, dest_path: Path) -> bool:
    """True iff the entry matches the fingerprint AND the output still exists."""
    if entry is None or entry.hash != fingerprint:
        return False
    return dest_path.is_file()
