# src/optimizers/raster_optimizer.py — v1
"""Raster optimizer — WebP conversion and social-preview PNG recompression.

Standard assets are re-encoded to WebP and their extension is rewritten.
Preview assets (under the OG subdirectory) stay PNG-compatible because
several social platforms still reject WebP previews; their extension is
kept as-is.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path

from PIL import Image

from assetopt.batch.models import CONVERTED_SUFFIX, AssetFile, AssetKind
from assetopt.config.settings import PngOptions, Settings, WebpOptions
from assetopt.optimizers.base_optimizer import BaseOptimizer
from assetopt.optimizers.models import OptimizationError, OptimizationResult, RasterTarget


RasterEncoder = Callable[[Path, RasterTarget], bytes]


def webp_target(options: WebpOptions) -> RasterTarget:
    """Encoder target for standard assets."""
    return RasterTarget(
        format="WEBP",
        params={
            "quality": options.quality,
            "alpha_quality": options.alpha_quality,
            "lossless": options.lossless,
            "method": options.method,
        },
    )


def png_target(options: PngOptions) -> RasterTarget:
    """Encoder target for social-preview assets."""
    return RasterTarget(
        format="PNG",
        params={
            "optimize": options.optimize,
            "compress_level": options.compress_level,
        },
        palette_colors=options.colors if options.palette else None,
    )


def encode_with_pillow(source: Path, target: RasterTarget) -> bytes:
    """Decode ``source`` and re-encode it according to ``target``.

    Animated inputs are reduced to their first frame.

    Raises:
        OptimizationError: If the source cannot be decoded or encoded.
    """
    try:
        with Image.open(source) as img:
            img.load()
            img = _normalize_mode(img)
            if target.format == "PNG" and target.palette_colors:
                img = img.quantize(
                    colors=target.palette_colors,
                    method=Image.Quantize.FASTOCTREE,
                )
            buf = io.BytesIO()
            img.save(buf, format=target.format, **target.params)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise OptimizationError(f"Cannot encode {source.name}: {e}") from e
    return buf.getvalue()


def _normalize_mode(img: Image.Image) -> Image.Image:
    """Convert to RGB or RGBA, keeping transparency when present."""
    if img.mode in ("RGB", "RGBA"):
        return img
    has_alpha = "A" in img.getbands() or "transparency" in img.info
    return img.convert("RGBA" if has_alpha else "RGB")


class RasterOptimizer(BaseOptimizer):
    """Re-encode raster assets with a pluggable encoder."""

    def __init__(
        self,
        settings: Settings,
        encoder: RasterEncoder | None = None,
    ) -> None:
        profile = settings.optimization_profile()
        self._webp = webp_target(profile.webp)
        self._png = png_target(profile.png)
        self._encoder = encoder or encode_with_pillow

    @property
    def kind(self) -> AssetKind:
        return AssetKind.RASTER

    def target_for(self, asset: AssetFile) -> RasterTarget:
        return self._png if asset.is_og_variant else self._webp

    def _optimize(self, asset: AssetFile, dest_path: Path) -> OptimizationResult:
        final_dest = dest_path if asset.is_og_variant else dest_path.with_suffix(CONVERTED_SUFFIX)

        original_size = asset.path.stat().st_size
        data = self._encoder(asset.path, self.target_for(asset))

        final_dest.parent.mkdir(parents=True, exist_ok=True)
        final_dest.write_bytes(data)

        return OptimizationResult.ok(
            original_size=original_size,
            optimized_size=len(data),
            dest_path=final_dest,
        )
