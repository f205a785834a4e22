# src/optimizers/base_optimizer.py — v1
"""Abstract optimizer interface for asset formats."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path

from assetopt.batch.models import AssetFile, AssetKind
from assetopt.optimizers.models import OptimizationResult

logger = logging.getLogger(__name__)


class BaseOptimizer(ABC):
    """Unified interface for format-specific optimizers.

    ``optimize`` never raises: any failure becomes a failed result so that
    one bad file cannot abort the batch. It is blocking and is meant to be
    run in a worker thread.
    """

    @property
    @abstractmethod
    def kind(self) -> AssetKind:
        """Asset kind this optimizer handles."""

    @abstractmethod
    def _optimize(self, asset: AssetFile, dest_path: Path) -> OptimizationResult:
        """Optimize ``asset`` into ``dest_path``; may raise."""

    def optimize(self, asset: AssetFile, dest_path: Path) -> OptimizationResult:
        """Optimize one asset, converting any failure into a failed result.

        Args:
            asset: Source asset.
            dest_path: Requested destination (mirrors the source layout).
        """
        t0 = time.perf_counter()
        try:
            result = self._optimize(asset, dest_path)
        except Exception as e:
            logger.debug("Optimizer failure for %s", asset.relative_path, exc_info=True)
            result = OptimizationResult.failed(str(e) or type(e).__name__)
        result.duration_ms = (time.perf_counter() - t0) * 1000
        return result
