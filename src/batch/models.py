# src/batch/models.py — v1
"""Batch processing models: AssetFile, RunStatistics."""

from __future__ import annotations

from enum import Enum
from pathlib import Path, PurePosixPath

from pydantic import BaseModel

# Extension written for converted (standard raster) assets.
CONVERTED_SUFFIX = ".webp"


class AssetKind(str, Enum):
    RASTER = "raster"
    VECTOR = "vector"


class AssetVariant(str, Enum):
    """Standard assets are converted; preview assets keep their format."""

    STANDARD = "standard"
    PREVIEW = "preview"


class AssetFile(BaseModel):
    """A source file discovered during the scan."""

    path: Path
    relative_path: str
    extension: str
    kind: AssetKind
    variant: AssetVariant
    size_bytes: int

    @property
    def is_og_variant(self) -> bool:
        return self.variant is AssetVariant.PREVIEW

    @property
    def is_converted(self) -> bool:
        """True if the output extension differs from the source extension."""
        return self.kind is AssetKind.RASTER and self.variant is AssetVariant.STANDARD

    def output_relpath(self) -> str:
        """Destination path relative to the destination root.

        Also used as the cache key.
        """
        if self.is_converted:
            return str(PurePosixPath(self.relative_path).with_suffix(CONVERTED_SUFFIX))
        return self.relative_path


class RunStatistics(BaseModel):
    """Counters accumulated over one run.

    ``total_savings`` may be negative when re-encoding enlarged a file.
    """

    total: int = 0
    processed: int = 0
    optimized: int = 0
    skipped: int = 0
    errors: int = 0
    total_savings: int = 0
    original_bytes: int = 0
    optimized_bytes: int = 0
    duration_seconds: float = 0.0

    def record_skip(self) -> None:
        self.processed += 1
        self.skipped += 1

    def record_error(self) -> None:
        self.processed += 1
        self.errors += 1

    def record_success(self, original_size: int, optimized_size: int) -> None:
        self.processed += 1
        self.optimized += 1
        self.original_bytes += original_size
        self.optimized_bytes += optimized_size
        self.total_savings += original_size - optimized_size
