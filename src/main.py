# src/main.py — v1
"""CLI entry point — optimize and clear-cache commands.

Usage:
    assetopt optimize [--source DIR] [--dest DIR] [-j N] [--no-cache]
    assetopt clear-cache [--cache-file FILE]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from assetopt.version import __version__

if TYPE_CHECKING:
    from assetopt.config.settings import Settings

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="assetopt",
        description=f"assetopt v{__version__} — cached image asset optimizer",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- optimize ---
    p_opt = subparsers.add_parser(
        "optimize", help="Optimize the source asset tree into the destination",
    )
    p_opt.add_argument(
        "-s", "--source", type=Path, default=None,
        help="Source asset directory (default: SOURCE_DIR or ./assets)",
    )
    p_opt.add_argument(
        "-d", "--dest", type=Path, default=None,
        help="Destination directory (default: DEST_DIR or ./public)",
    )
    p_opt.add_argument(
        "--cache-file", type=Path, default=None,
        help="Cache document path (default: CACHE_FILE or ./.image-cache.json)",
    )
    p_opt.add_argument(
        "-j", "--concurrency", type=int, default=None,
        help="Max files optimized at once (default: CONCURRENCY or 4)",
    )
    p_opt.add_argument(
        "--og-subdir", default=None,
        help="Subdirectory whose images keep their format (default: og)",
    )
    p_opt.add_argument(
        "--no-cache", action="store_true",
        help="Ignore and do not update the cache",
    )
    p_opt.set_defaults(func=_cmd_optimize)

    # --- clear-cache ---
    p_clear = subparsers.add_parser(
        "clear-cache", help="Delete the cache document",
    )
    p_clear.add_argument(
        "--cache-file", type=Path, default=None,
        help="Cache document path (default: CACHE_FILE or ./.image-cache.json)",
    )
    p_clear.set_defaults(func=_cmd_clear_cache)

    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, object]:
    """Map CLI flags onto Settings fields, skipping unset ones."""
    mapping = {
        "source": "source_dir",
        "dest": "dest_dir",
        "cache_file": "cache_file",
        "concurrency": "concurrency",
        "og_subdir": "og_subdir",
    }
    overrides: dict[str, object] = {}
    for arg_name, field in mapping.items():
        value = getattr(args, arg_name, None)
        if value is not None:
            overrides[field] = value
    if getattr(args, "no_cache", False):
        overrides["cache_enabled"] = False
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return overrides


def _load(args: argparse.Namespace) -> Settings | None:
    """Build Settings from .env plus CLI flags; report errors on stderr."""
    from pydantic import ValidationError

    from assetopt.config.settings import ConfigurationError, load_settings

    try:
        return load_settings(**_settings_overrides(args))
    except (ConfigurationError, ValidationError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return None


def _cmd_optimize(args: argparse.Namespace) -> int:
    """Run the optimization pipeline."""
    from assetopt.batch.report import render_summary
    from assetopt.batch.scanner import SourceDirectoryError
    from assetopt.batch.scheduler import run_pipeline
    from assetopt.logging.logger import setup_logging

    settings = _load(args)
    if settings is None:
        return 1

    setup_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )

    logger.info("Scanning assets in %s", settings.source_dir)
    try:
        stats = asyncio.run(run_pipeline(settings))
    except SourceDirectoryError as exc:
        print(f"✖ {exc}", file=sys.stderr)
        return 1

    print()
    print(render_summary(stats))
    return 0


def _cmd_clear_cache(args: argparse.Namespace) -> int:
    """Delete the cache document."""
    from assetopt.cache.json_store import clear_cache

    settings = _load(args)
    if settings is None:
        return 1

    if clear_cache(settings.cache_file):
        print(f"Removed {settings.cache_file}")
    else:
        print(f"No cache file at {settings.cache_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
