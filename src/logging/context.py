# src/logging/context.py — v1
"""Contextual logging support — attach run_id and asset to log records.

Each per-file asyncio task runs in its own copy of the context, so setting
the asset inside a task never leaks into sibling tasks.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_asset: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "asset", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    asset: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(run_id=_run_id.get(), asset=_asset.get())


def set_run_context(run_id: str) -> None:
    """Set run-level context (called once per invocation)."""
    _run_id.set(run_id)


def set_asset_context(asset: str | None) -> None:
    """Set asset-level context (called per file task)."""
    _asset.set(asset)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _asset.set(None)
