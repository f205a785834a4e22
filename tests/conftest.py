# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a settings factory, a real asset tree (PNG, JPEG, SVG, OG preview)
generated with Pillow, and instrumented fake encoders/minifiers that record
how many calls are in flight at once.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from types import SimpleNamespace

import pytest
from PIL import Image

from assetopt.config.settings import Settings, SvgOptions
from assetopt.optimizers.models import RasterTarget

SAMPLE_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg width="100.000000" height="100.000000" viewBox="0 0 100 100" version="1.1" xmlns="http://www.w3.org/2000/svg">
  <!-- exported by a drawing tool -->
  <metadata>generator junk</metadata>
  <g>
    <rect y="10.123456" x="10.654321" width="30.000001" height="30.000001" fill="#ff0000"/>
    <circle r="12.345678" cy="70.987654" cx="70.123456" fill="#0000ff"/>
  </g>
</svg>
"""


# === FIXTURES: Logging ===


@pytest.fixture(autouse=True)
def _reset_assetopt_logger():
    """Drop handlers installed by setup_logging so streams do not leak across tests."""
    yield
    root_logger = logging.getLogger("assetopt")
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.NOTSET)


# === FIXTURES: Settings ===


@pytest.fixture
def make_settings(tmp_path: Path):
    """Factory for Settings rooted in tmp_path, ignoring any local .env."""

    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {
            "source_dir": tmp_path / "assets",
            "dest_dir": tmp_path / "public",
            "cache_file": tmp_path / ".image-cache.json",
            "concurrency": 2,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


# === FIXTURES: Asset trees ===


def write_png(path: Path, size: tuple[int, int] = (64, 64), color=(200, 30, 30)) -> Path:
    """Write a small RGB PNG with a gradient so it is not trivially compressible."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color)
    for x in range(size[0]):
        img.putpixel((x, x % size[1]), (x * 3 % 256, 120, 255 - x * 3 % 256))
    img.save(path, format="PNG")
    return path


def write_rgba_png(path: Path, size: tuple[int, int] = (32, 32)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, (10, 200, 10, 128)).save(path, format="PNG")
    return path


def write_jpeg(path: Path, size: tuple[int, int] = (48, 48)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, (20, 40, 220)).save(path, format="JPEG", quality=95)
    return path


def write_svg(path: Path, text: str = SAMPLE_SVG) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def sample_svg() -> str:
    return SAMPLE_SVG


@pytest.fixture
def writers() -> SimpleNamespace:
    """Image writers, for tests that build their own trees."""
    return SimpleNamespace(
        png=write_png, rgba_png=write_rgba_png, jpeg=write_jpeg, svg=write_svg,
    )


@pytest.fixture
def asset_tree(tmp_path: Path) -> dict[str, Path]:
    """Source tree with a standard PNG, an OG preview PNG and an SVG."""
    root = tmp_path / "assets"
    return {
        "a.png": write_png(root / "a.png"),
        "og/b.png": write_png(root / "og" / "b.png", color=(30, 200, 30)),
        "c.svg": write_svg(root / "c.svg"),
    }


# === FIXTURES: Instrumented fakes ===


class InFlightRecorder:
    """Thread-safe counter of concurrent calls with a high-water mark."""

    def __init__(self, delay: float = 0.02) -> None:
        self._lock = threading.Lock()
        self._delay = delay
        self.in_flight = 0
        self.high_water = 0
        self.calls = 0

    def __enter__(self) -> InFlightRecorder:
        with self._lock:
            self.in_flight += 1
            self.calls += 1
            self.high_water = max(self.high_water, self.in_flight)
        return self

    def __exit__(self, *exc: object) -> None:
        with self._lock:
            self.in_flight -= 1

    def pause(self) -> None:
        time.sleep(self._delay)


@pytest.fixture
def recorder() -> InFlightRecorder:
    return InFlightRecorder()


@pytest.fixture
def fake_encoder(recorder: InFlightRecorder):
    """Raster encoder that returns the format name as bytes."""

    def _encode(source: Path, target: RasterTarget) -> bytes:
        with recorder:
            recorder.pause()
            return f"{target.format}:{source.name}".encode()

    return _encode


@pytest.fixture
def fake_minifier(recorder: InFlightRecorder):
    """Minifier that collapses whitespace runs."""

    def _minify(text: str, options: SvgOptions) -> str:
        with recorder:
            recorder.pause()
            return " ".join(text.split())

    return _minify
