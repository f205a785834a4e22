# src/optimizers/models.py — v1
"""Optimizer models: RasterTarget, OptimizationResult."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field


class OptimizationError(Exception):
    """Raised inside an engine when a file cannot be optimized."""


class RasterTarget(BaseModel):
    """Output format and encoder parameters for one raster asset."""

    format: Literal["WEBP", "PNG"]
    params: dict[str, Any] = Field(default_factory=dict)
    palette_colors: int | None = None


class OptimizationResult(BaseModel):
    """Outcome of optimizing one file.

    On success ``dest_path`` is the file actually written, which may differ
    from the requested destination when the extension was rewritten.
    """

    success: bool
    original_size: int = 0
    optimized_size: int = 0
    dest_path: Path | None = None
    error: str | None = None
    duration_ms: float = 0.0

    @property
    def savings(self) -> int:
        return self.original_size - self.optimized_size

    @property
    def savings_percent(self) -> float:
        if self.original_size <= 0:
            return 0.0
        return self.savings / self.original_size * 100

    @classmethod
    def ok(
        cls, original_size: int, optimized_size: int, dest_path: Path,
    ) -> OptimizationResult:
        return cls(
            success=True,
            original_size=original_size,
            optimized_size=optimized_size,
            dest_path=dest_path,
        )

    @classmethod
    def failed(cls, error: str) -> OptimizationResult:
        return cls(success=False, error=error)
