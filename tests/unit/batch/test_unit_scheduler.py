# tests/unit/batch/test_unit_scheduler.py — v1
"""Tests for batch/scheduler.py — cache decisions, isolation, concurrency bound.

Uses instrumented fake encoders/minifiers; real codecs are covered by the
integration tests.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from assetopt.batch.scanner import AssetScanner, SourceDirectoryError
from assetopt.batch.scheduler import BatchScheduler, run_pipeline
from assetopt.cache.json_store import JsonCacheStore
from assetopt.cache.memory_store import MemoryCacheStore
from assetopt.optimizers.models import OptimizationError, RasterTarget
from assetopt.optimizers.optimizer_factory import create_registry
from assetopt.optimizers.raster_optimizer import RasterOptimizer
from assetopt.optimizers.svg_optimizer import SvgOptimizer


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class CountingStore(MemoryCacheStore):
    def __init__(self) -> None:
        super().__init__()
        self.saves = 0

    async def save(self) -> bool:
        self.saves += 1
        return True


def _make_files(root: Path, names: list[str]) -> None:
    for name in names:
        p = root / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"source-bytes-" + name.encode() * 10)


def _registry(settings, encoder, minifier):
    return create_registry(
        settings,
        raster=RasterOptimizer(settings, encoder=encoder),
        svg=SvgOptimizer(settings, minifier=minifier),
    )


async def _run(settings, store, encoder, minifier):
    assets = AssetScanner(settings).scan(settings.source_dir)
    scheduler = BatchScheduler(settings, store, registry=_registry(settings, encoder, minifier))
    return await scheduler.run(assets)


# ---------------------------------------------------------------------------
# Tests — per-file pipeline
# ---------------------------------------------------------------------------

class TestBatchSchedulerRouting:
    @pytest.mark.asyncio
    async def test_outputs_and_keys(self, settings, fake_encoder, fake_minifier):
        _make_files(settings.source_dir, ["a.png", "og/b.png", "c.svg"])
        store = MemoryCacheStore()

        stats = await _run(settings, store, fake_encoder, fake_minifier)

        dest = settings.dest_dir
        assert (dest / "a.webp").read_bytes() == b"WEBP:a.png"
        assert (dest / "og" / "b.png").read_bytes() == b"PNG:b.png"
        assert (dest / "c.svg").is_file()
        assert not (dest / "a.png").exists()
        assert store.keys() == ["a.webp", "c.svg", "og/b.png"]
        assert stats.total == 3
        assert stats.optimized == 3
        assert stats.skipped == 0
        assert stats.errors == 0

    @pytest.mark.asyncio
    async def test_savings_accumulated(self, settings, fake_encoder, fake_minifier):
        _make_files(settings.source_dir, ["a.png"])
        original = (settings.source_dir / "a.png").stat().st_size
        stats = await _run(settings, MemoryCacheStore(), fake_encoder, fake_minifier)
        assert stats.total_savings == original - len(b"WEBP:a.png")


class TestBatchSchedulerCache:
    @pytest.mark.asyncio
    async def test_second_run_skips(self, settings, fake_encoder, fake_minifier, recorder):
        _make_files(settings.source_dir, ["a.png", "og/b.png", "c.svg"])
        store = MemoryCacheStore()
        await _run(settings, store, fake_encoder, fake_minifier)
        calls_after_first = recorder.calls

        stats = await _run(settings, store, fake_encoder, fake_minifier)
        assert stats.optimized == 0
        assert stats.skipped == 3
        assert recorder.calls == calls_after_first

    @pytest.mark.asyncio
    async def test_missing_destination_reprocessed(self, settings, fake_encoder, fake_minifier):
        _make_files(settings.source_dir, ["a.png", "c.svg"])
        store = MemoryCacheStore()
        await _run(settings, store, fake_encoder, fake_minifier)

        (settings.dest_dir / "a.webp").unlink()
        stats = await _run(settings, store, fake_encoder, fake_minifier)
        assert stats.optimized == 1
        assert stats.skipped == 1
        assert (settings.dest_dir / "a.webp").is_file()

    @pytest.mark.asyncio
    async def test_config_change_reprocesses(self, make_settings, fake_encoder, fake_minifier):
        settings = make_settings()
        _make_files(settings.source_dir, ["a.png", "c.svg"])
        store = MemoryCacheStore()
        await _run(settings, store, fake_encoder, fake_minifier)

        changed = make_settings(webp_quality=60)
        stats = await _run(changed, store, fake_encoder, fake_minifier)
        assert stats.optimized == 2
        assert stats.skipped == 0

    @pytest.mark.asyncio
    async def test_failed_file_not_cached(self, settings, fake_minifier):
        _make_files(settings.source_dir, ["bad.png"])
        store = MemoryCacheStore()

        def failing(source: Path, target: RasterTarget) -> bytes:
            raise OptimizationError("corrupt")

        stats = await _run(settings, store, failing, fake_minifier)
        assert stats.errors == 1
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_failed_reprocess_drops_old_entry(
        self, settings, fake_encoder, fake_minifier,
    ):
        _make_files(settings.source_dir, ["a.png", "c.svg"])
        store = MemoryCacheStore()
        await _run(settings, store, fake_encoder, fake_minifier)
        assert "a.webp" in store

        (settings.dest_dir / "a.webp").unlink()

        def failing(source: Path, target: RasterTarget) -> bytes:
            raise OptimizationError("disk full")

        stats = await _run(settings, store, failing, fake_minifier)
        assert stats.errors == 1
        assert "a.webp" not in store
        assert "c.svg" in store

    @pytest.mark.asyncio
    async def test_cache_saved_exactly_once(self, settings, fake_encoder, fake_minifier):
        _make_files(settings.source_dir, ["a.png", "b.png", "c.svg"])
        store = CountingStore()
        await _run(settings, store, fake_encoder, fake_minifier)
        assert store.saves == 1


class TestBatchSchedulerIsolation:
    @pytest.mark.asyncio
    async def test_one_failure_does_not_affect_others(
        self, settings, fake_encoder, fake_minifier,
    ):
        _make_files(settings.source_dir, ["a.png", "bad.png", "c.png", "d.svg"])

        def encoder(source: Path, target: RasterTarget) -> bytes:
            if source.name == "bad.png":
                raise OptimizationError("cannot identify image file")
            return fake_encoder(source, target)

        stats = await _run(settings, MemoryCacheStore(), encoder, fake_minifier)
        assert stats.optimized == 3
        assert stats.errors == 1
        assert stats.processed == 4

    @pytest.mark.asyncio
    async def test_unexpected_exception_counted(self, settings, fake_encoder, fake_minifier):
        _make_files(settings.source_dir, ["a.png", "b.png"])
        assets = AssetScanner(settings).scan(settings.source_dir)
        (settings.source_dir / "a.png").unlink()  # vanishes between scan and fingerprint

        scheduler = BatchScheduler(
            settings, MemoryCacheStore(),
            registry=_registry(settings, fake_encoder, fake_minifier),
        )
        stats = await scheduler.run(assets)
        assert stats.errors == 1
        assert stats.optimized == 1

    @pytest.mark.asyncio
    async def test_error_is_logged_with_cause(
        self, settings, fake_minifier, caplog,
    ):
        _make_files(settings.source_dir, ["bad.png"])

        def failing(source: Path, target: RasterTarget) -> bytes:
            raise OptimizationError("truncated stream")

        await _run(settings, MemoryCacheStore(), failing, fake_minifier)
        assert "bad.png" in caplog.text
        assert "truncated stream" in caplog.text


class TestBatchSchedulerConcurrency:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 3])
    async def test_bound_respected(
        self, make_settings, fake_encoder, fake_minifier, recorder, limit,
    ):
        settings = make_settings(concurrency=limit)
        _make_files(settings.source_dir, [f"img{i}.png" for i in range(10)])

        stats = await _run(settings, MemoryCacheStore(), fake_encoder, fake_minifier)

        assert stats.optimized == 10
        assert recorder.calls == 10
        assert 1 <= recorder.high_water <= limit


# ---------------------------------------------------------------------------
# Tests — run_pipeline()
# ---------------------------------------------------------------------------

class TestRunPipeline:
    @pytest.mark.asyncio
    async def test_missing_source_is_fatal(self, settings):
        with pytest.raises(SourceDirectoryError):
            await run_pipeline(settings)
        assert not settings.cache_file.exists()

    @pytest.mark.asyncio
    async def test_writes_cache_document(self, settings, fake_encoder, fake_minifier):
        _make_files(settings.source_dir, ["a.png", "og/b.png", "c.svg"])
        stats = await run_pipeline(
            settings,
            registry=_registry(settings, fake_encoder, fake_minifier),
        )
        assert stats.optimized == 3
        data = json.loads(settings.cache_file.read_text(encoding="utf-8"))
        assert set(data) == {"a.webp", "og/b.png", "c.svg"}
        assert all(set(v) == {"hash", "timestamp"} for v in data.values())

    @pytest.mark.asyncio
    async def test_corrupt_cache_document_ignored(self, settings, fake_encoder, fake_minifier):
        _make_files(settings.source_dir, ["a.png"])
        settings.cache_file.write_text("not json at all", encoding="utf-8")
        stats = await run_pipeline(
            settings,
            cache_store=JsonCacheStore(settings.cache_file),
            registry=_registry(settings, fake_encoder, fake_minifier),
        )
        assert stats.optimized == 1
        assert json.loads(settings.cache_file.read_text(encoding="utf-8"))
