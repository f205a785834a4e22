# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for paths, concurrency and codec parameters.
Every parameter that changes output bytes is grouped into an
``OptimizationProfile`` whose hash feeds the cache fingerprint, so editing
any of them invalidates every cached entry on the next run.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class WebpOptions(BaseModel):
    """Encoder settings for standard raster assets."""

    quality: int
    alpha_quality: int
    lossless: bool
    method: int


class PngOptions(BaseModel):
    """Encoder settings for social-preview raster assets."""

    compress_level: int
    optimize: bool
    palette: bool
    colors: int


class SvgOptions(BaseModel):
    """Minifier pipeline settings."""

    multipass: bool
    max_passes: int
    precision: int
    strip_comments: bool
    remove_metadata: bool
    sort_attrs: bool
    add_xmlns: bool


class OptimizationProfile(BaseModel):
    """Everything that influences optimized output."""

    webp: WebpOptions
    png: PngOptions
    svg: SvgOptions


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Paths ===
    source_dir: Path = Path("assets")
    dest_dir: Path = Path("public")
    cache_file: Path = Path(".image-cache.json")
    og_subdir: str = "og"

    # === Run ===
    concurrency: int = Field(default=4, ge=1)
    cache_enabled: bool = True
    cache_backend: Literal["json", "memory"] = "json"

    # === Discovery ===
    raster_extensions: str = ".jpg,.jpeg,.png,.gif,.tiff,.bmp,.webp"
    svg_extensions: str = ".svg"

    # === WebP (standard assets) ===
    webp_quality: int = Field(default=80, ge=0, le=100)
    webp_alpha_quality: int = Field(default=85, ge=0, le=100)
    webp_lossless: bool = False
    webp_method: int = Field(default=6, ge=0, le=6)

    # === PNG (social-preview assets) ===
    png_compress_level: int = Field(default=9, ge=0, le=9)
    png_optimize: bool = True
    png_palette: bool = True
    png_colors: int = Field(default=256, ge=2, le=256)

    # === SVG ===
    svg_multipass: bool = True
    svg_max_passes: int = Field(default=10, ge=1)
    svg_precision: int = Field(default=2, ge=0)  # decimal places
    svg_strip_comments: bool = True
    svg_remove_metadata: bool = True
    svg_sort_attrs: bool = True
    svg_add_xmlns: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("og_subdir")
    @classmethod
    def validate_og_subdir(cls, v: str) -> str:  # noqa: N805
        """OG_SUBDIR is a single path component."""
        v = v.strip().strip("/")
        if not v or "/" in v or "\\" in v:
            raise ValueError("og_subdir must be a single directory name")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if not self.raster_extensions_list and not self.svg_extensions_list:
            errors.append("RASTER_EXTENSIONS and SVG_EXTENSIONS are both empty")

        overlap = set(self.raster_extensions_list) & set(self.svg_extensions_list)
        if overlap:
            errors.append(
                f"Extensions listed as both raster and vector: {sorted(overlap)}"
            )

        source = self.source_dir.expanduser().resolve()
        dest = self.dest_dir.expanduser().resolve()
        if dest == source or source in dest.parents:
            errors.append("DEST_DIR must not be SOURCE_DIR or inside it")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def raster_extensions_list(self) -> list[str]:
        """Parse comma-separated raster extensions."""
        return _parse_extensions(self.raster_extensions)

    @property
    def svg_extensions_list(self) -> list[str]:
        """Parse comma-separated vector extensions."""
        return _parse_extensions(self.svg_extensions)

    def optimization_profile(self) -> OptimizationProfile:
        """Group the output-affecting parameters."""
        return OptimizationProfile(
            webp=WebpOptions(
                quality=self.webp_quality,
                alpha_quality=self.webp_alpha_quality,
                lossless=self.webp_lossless,
                method=self.webp_method,
            ),
            png=PngOptions(
                compress_level=self.png_compress_level,
                optimize=self.png_optimize,
                palette=self.png_palette,
                colors=self.png_colors,
            ),
            svg=SvgOptions(
                multipass=self.svg_multipass,
                max_passes=self.svg_max_passes,
                precision=self.svg_precision,
                strip_comments=self.svg_strip_comments,
                remove_metadata=self.svg_remove_metadata,
                sort_attrs=self.svg_sort_attrs,
                add_xmlns=self.svg_add_xmlns,
            ),
        )

    @property
    def config_hash(self) -> str:
        """Hash of the optimization profile (see compute_config_hash)."""
        return compute_config_hash(self.optimization_profile())


def _parse_extensions(raw: str) -> list[str]:
    exts = []
    for item in raw.split(","):
        item = item.strip().lower()
        if not item:
            continue
        if not item.startswith("."):
            item = f".{item}"
        exts.append(item)
    return exts


def compute_config_hash(profile: OptimizationProfile) -> str:
    """SHA-256 over the canonical JSON form of the profile."""
    canonical = json.dumps(profile.model_dump(mode="json"), sort_keys=True)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (CLI flags or tests).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
