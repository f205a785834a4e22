# src/batch/scheduler.py — v1
"""Batch scheduler — bounded-concurrency cache-check → optimize → cache-update.

Every asset runs in its own asyncio task gated by a semaphore, so at most
``concurrency`` per-file pipelines are in flight. Encoders run in worker
threads via ``asyncio.to_thread``; all bookkeeping (cache map, statistics)
happens on the event loop and needs no locking.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from assetopt.batch.models import AssetFile, RunStatistics
from assetopt.batch.report import format_outcome_line
from assetopt.batch.scanner import AssetScanner
from assetopt.cache.fingerprint import fingerprint_file, is_fresh
from assetopt.cache.models import CacheEntry
from assetopt.logging.context import set_asset_context, set_run_context
from assetopt.optimizers.optimizer_factory import OptimizerRegistry, create_registry

if TYPE_CHECKING:
    from assetopt.cache.base_cache_store import BaseCacheStore
    from assetopt.config.settings import Settings

logger = logging.getLogger(__name__)


class BatchScheduler:
    """Drive discovered assets through the optimization pipeline.

    Per asset:
      1. Derive the output key and destination path
      2. Fingerprint the source and check the cache entry + destination
      3. On a miss, run the matching optimizer in a worker thread
      4. On success, update the cache and statistics; on failure, count it
    After all tasks settle the cache is saved exactly once.
    """

    def __init__(
        self,
        settings: Settings,
        cache_store: BaseCacheStore,
        registry: OptimizerRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._cache_store = cache_store
        self._registry = registry or create_registry(settings)
        self._dest_root = Path(settings.dest_dir).expanduser()
        self._config_hash = settings.config_hash
        self._stats = RunStatistics()

    @property
    def stats(self) -> RunStatistics:
        return self._stats

    async def run(self, assets: list[AssetFile]) -> RunStatistics:
        """Process every asset and persist the cache.

        Returns:
            RunStatistics for this run.
        """
        t0 = time.perf_counter()
        self._stats = RunStatistics(total=len(assets))
        semaphore = asyncio.Semaphore(self._settings.concurrency)

        async def bounded(asset: AssetFile) -> None:
            async with semaphore:
                await self._process_asset(asset)

        await asyncio.gather(*(bounded(a) for a in assets))

        await self._cache_store.save()
        self._stats.duration_seconds = round(time.perf_counter() - t0, 2)
        return self._stats

    async def _process_asset(self, asset: AssetFile) -> None:
        """Run one asset through the pipeline; never raises."""
        set_asset_context(asset.relative_path)
        try:
            await self._process_asset_inner(asset)
        except Exception as e:
            self._stats.record_error()
            logger.error("✖ Error processing %s: %s", asset.relative_path, e)
            logger.debug("Traceback for %s", asset.relative_path, exc_info=True)

    async def _process_asset_inner(self, asset: AssetFile) -> None:
        key = asset.output_relpath()
        expected_dest = self._dest_root / key
        fingerprint = fingerprint_file(asset.path, self._config_hash)

        if is_fresh(self._cache_store.get(key), fingerprint, expected_dest):
            self._stats.record_skip()
            logger.info("⏭ Skipped %s (cached)", asset.relative_path)
            return

        optimizer = self._registry.for_asset(asset)
        requested_dest = self._dest_root / asset.relative_path
        result = await asyncio.to_thread(optimizer.optimize, asset, requested_dest)

        if not result.success:
            # The old artifact may be half-written; do not vouch for it.
            self._cache_store.delete(key)
            self._stats.record_error()
            logger.error("✖ Error processing %s: %s", asset.relative_path, result.error)
            return

        if result.dest_path != expected_dest:
            # The cache key is derived from the expected path; a divergent
            # write means the key no longer tracks the artifact on disk.
            logger.warning(
                "Optimizer wrote %s but cache key expects %s",
                result.dest_path, expected_dest,
            )

        self._cache_store.put(
            key,
            CacheEntry(hash=fingerprint, timestamp=datetime.now(timezone.utc)),
        )
        self._stats.record_success(result.original_size, result.optimized_size)
        logger.info(format_outcome_line(asset, result))


async def run_pipeline(
    settings: Settings,
    cache_store: BaseCacheStore | None = None,
    registry: OptimizerRegistry | None = None,
) -> RunStatistics:
    """Scan → load cache → schedule → save.

    Raises:
        SourceDirectoryError: If the source root cannot be scanned. Nothing
            is processed and the cache is left untouched in that case.
    """
    from assetopt.cache.cache_factory import create_cache_store

    set_run_context(uuid.uuid4().hex[:8])

    assets = AssetScanner(settings).scan(Path(settings.source_dir))

    store = cache_store or create_cache_store(settings)
    await store.load()

    logger.info(
        "Found %d assets. Processing with concurrency: %d",
        len(assets), settings.concurrency,
    )

    scheduler = BatchScheduler(settings, store, registry=registry)
    return await scheduler.run(assets)
