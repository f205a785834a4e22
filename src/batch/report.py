# src/batch/report.py — v1
"""Human-readable per-file outcome lines and the end-of-run summary."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from assetopt.batch.models import AssetFile, RunStatistics
    from assetopt.optimizers.models import OptimizationResult

_UNITS = ["B", "KB", "MB", "GB"]
_BANNER = "=" * 60


def format_file_size(size: int) -> str:
    """Format a byte count with a 1024 base, e.g. ``1.5 KB``.

    Negative values (files that grew) keep their sign.
    """
    if size == 0:
        return "0 B"
    sign = "-" if size < 0 else ""
    magnitude = abs(size)
    i = 0
    while i < len(_UNITS) - 1 and magnitude >= 1024 ** (i + 1):
        i += 1
    value = round(magnitude / 1024**i, 2)
    return f"{sign}{value:g} {_UNITS[i]}"


def format_outcome_line(asset: AssetFile, result: OptimizationResult) -> str:
    """One log line for a successfully optimized asset."""
    marker = "✔" if result.savings > 0 else "≈"
    note = "saved" if result.savings > 0 else "saved, no gain"
    return (
        f"{marker} {asset.relative_path} "
        f"({format_file_size(result.original_size)} -> "
        f"{format_file_size(result.optimized_size)}) "
        f"[{result.savings_percent:.1f}% {note}] in {result.duration_ms:.0f}ms"
    )


def render_summary(stats: RunStatistics) -> str:
    """Multi-line summary block printed at the end of a run."""
    lines = [
        _BANNER,
        "OPTIMIZATION SUMMARY",
        _BANNER,
        f"Total Images : {stats.total}",
        f"Optimized    : {stats.optimized}",
        f"Cached       : {stats.skipped}",
        f"Errors       : {stats.errors}",
        f"Space Saved  : {format_file_size(stats.total_savings)}",
        f"Duration     : {stats.duration_seconds:.1f}s",
        _BANNER,
    ]
    return "\n".join(lines)
