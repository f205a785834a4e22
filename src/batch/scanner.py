# src/batch/scanner.py — v1
"""Asset scanner — directory walk, file discovery and classification.

Entries are visited in whatever order the filesystem returns them; callers
must not rely on it for anything but completeness. Symlinked directories are
not descended, so symlink cycles cannot occur; symlinked files are included.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from assetopt.batch.models import AssetFile, AssetKind, AssetVariant

if TYPE_CHECKING:
    from assetopt.config.settings import Settings

logger = logging.getLogger(__name__)


class SourceDirectoryError(Exception):
    """Raised when the source root is missing or unreadable."""


class AssetScanner:
    """Discover optimizable assets under a source root.

    Workflow:
        1. Check the root exists, is a directory and is readable
        2. Walk every subdirectory, keeping allow-listed extensions
        3. Classify each file as raster/vector and standard/preview
    """

    def __init__(self, settings: Settings) -> None:
        self._raster_exts = set(settings.raster_extensions_list)
        self._svg_exts = set(settings.svg_extensions_list)
        self._og_subdir = settings.og_subdir

    def scan(self, scan_root: Path) -> list[AssetFile]:
        """Return every supported file under ``scan_root``.

        Raises:
            SourceDirectoryError: If the root cannot be scanned.
        """
        root = Path(scan_root).expanduser()
        if not root.exists():
            raise SourceDirectoryError(f"Source directory not found: {root}")
        if not root.is_dir():
            raise SourceDirectoryError(f"Source path is not a directory: {root}")
        if not os.access(root, os.R_OK | os.X_OK):
            raise SourceDirectoryError(f"Source directory is not readable: {root}")

        root = root.resolve()
        assets: list[AssetFile] = []
        self._walk(root, root, assets)

        logger.info("Scanned %s: found %d assets", root, len(assets))
        return assets

    def classify(self, path: Path, root: Path) -> AssetFile | None:
        """Build an AssetFile for ``path`` or None if it is not supported."""
        ext = path.suffix.lower()
        if ext in self._raster_exts:
            kind = AssetKind.RASTER
        elif ext in self._svg_exts:
            kind = AssetKind.VECTOR
        else:
            return None

        relative = path.relative_to(root).as_posix()
        first_part = relative.split("/", 1)[0]
        variant = (
            AssetVariant.PREVIEW
            if first_part == self._og_subdir and "/" in relative
            else AssetVariant.STANDARD
        )

        return AssetFile(
            path=path,
            relative_path=relative,
            extension=ext,
            kind=kind,
            variant=variant,
            size_bytes=path.stat().st_size,
        )

    def _walk(self, root: Path, directory: Path, out: list[AssetFile]) -> None:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            if directory == root:
                raise SourceDirectoryError(
                    f"Cannot read source directory {root}: {e}"
                ) from e
            logger.warning("Skipping unreadable directory %s: %s", directory, e)
            return

        for entry in entries:
            path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                self._walk(root, path, out)
                continue
            try:
                asset = self.classify(path, root)
            except OSError as e:
                logger.warning("Skipping unreadable file %s: %s", path, e)
                continue
            if asset is not None:
                out.append(asset)
