# src/optimizers/optimizer_factory.py — v1
"""Factory: route assets to the optimizer for their kind."""

from __future__ import annotations

from assetopt.batch.models import AssetFile, AssetKind
from assetopt.config.settings import Settings
from assetopt.optimizers.base_optimizer import BaseOptimizer
from assetopt.optimizers.raster_optimizer import RasterOptimizer
from assetopt.optimizers.svg_optimizer import SvgOptimizer


class UnsupportedAssetError(ValueError):
    """Raised when no optimizer is registered for an asset kind."""


class OptimizerRegistry:
    """One optimizer instance per asset kind."""

    def __init__(self, optimizers: list[BaseOptimizer]) -> None:
        self._by_kind: dict[AssetKind, BaseOptimizer] = {
            opt.kind: opt for opt in optimizers
        }

    def for_asset(self, asset: AssetFile) -> BaseOptimizer:
        """Return the optimizer for ``asset``.

        Raises:
            UnsupportedAssetError: If no optimizer handles the asset kind.
        """
        optimizer = self._by_kind.get(asset.kind)
        if optimizer is None:
            raise UnsupportedAssetError(
                f"No optimizer for {asset.kind.value} asset {asset.relative_path!r}"
            )
        return optimizer


def create_registry(
    settings: Settings,
    raster: BaseOptimizer | None = None,
    svg: BaseOptimizer | None = None,
) -> OptimizerRegistry:
    """Build the default registry, substituting any given optimizers."""
    return OptimizerRegistry([
        raster or RasterOptimizer(settings),
        svg or SvgOptimizer(settings),
    ])
