# src/optimizers/svg_optimizer.py — v1
"""SVG optimizer — multi-pass minification.

The default minifier runs scour (comment and metadata stripping, redundant
attribute removal) and then a DOM pass that rounds geometry to a fixed
number of decimal places, injects the SVG namespace and sorts attributes.
With multipass enabled the pipeline is repeated until its output stops
changing.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path
from xml.dom import minidom

from scour import scour

from assetopt.batch.models import AssetFile, AssetKind
from assetopt.config.settings import Settings, SvgOptions
from assetopt.optimizers.base_optimizer import BaseOptimizer
from assetopt.optimizers.models import OptimizationError, OptimizationResult

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

SvgMinifier = Callable[[str, SvgOptions], str]

# Significant digits scour keeps; decimal rounding happens in the DOM pass.
_SCOUR_PRECISION = 10

# Attributes whose numbers are coordinates or lengths. Transforms are left
# alone: rounding matrix factors scales the whole subtree.
_GEOMETRY_ATTRS = frozenset({
    "x", "y", "x1", "x2", "y1", "y2", "cx", "cy", "r", "rx", "ry", "fx", "fy",
    "width", "height", "d", "points", "viewBox", "stroke-width",
})
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?")

# Leading attributes, in order; everything else follows alphabetically.
_ATTR_ORDER = [
    "id", "width", "height", "x", "x1", "x2", "y", "y1", "y2",
    "cx", "cy", "r", "fill", "stroke", "marker", "d", "points",
]
_ATTR_RANK = {name: i for i, name in enumerate(_ATTR_ORDER)}


def _scour_args(options: SvgOptions) -> list[str]:
    args = [
        f"--set-precision={_SCOUR_PRECISION}",
        f"--set-c-precision={_SCOUR_PRECISION}",
        "--strip-xml-prolog",
        "--indent=none",
        "--no-line-breaks",
        "--quiet",
    ]
    if options.strip_comments:
        args.append("--enable-comment-stripping")
    if options.remove_metadata:
        args.append("--remove-metadata")
    return args


def _attr_sort_key(name: str) -> tuple[int, int, str]:
    if name == "xmlns" or name.startswith("xmlns:"):
        return (0, 0, name)
    if name in _ATTR_RANK:
        return (1, _ATTR_RANK[name], name)
    return (2, 0, name)


def round_decimals(value: str, places: int) -> str:
    """Round every decimal number in ``value`` to ``places`` decimal places.

    Integers and exponent forms are left untouched, so packed arc flags such
    as ``011`` in path data survive. A separator is inserted where the
    rounded number would otherwise merge with the preceding one.
    """

    def replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if "." not in token or "e" in token.lower():
            return token
        text = f"{float(token):.{places}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        if text in ("-0", "+0", ""):
            text = "0"
        if text.startswith("0."):
            text = text[1:]
        elif text.startswith("-0."):
            text = "-" + text[2:]
        start = match.start()
        if start and text[0].isdigit() and (value[start - 1].isdigit() or value[start - 1] == "."):
            text = " " + text
        return text

    return _NUMBER_RE.sub(replace, value)


def _round_geometry(element: minidom.Element, places: int) -> None:
    for name, value in list(element.attributes.items()):
        if name in _GEOMETRY_ATTRS:
            element.setAttribute(name, round_decimals(value, places))
    for child in element.childNodes:
        if child.nodeType == child.ELEMENT_NODE:
            _round_geometry(child, places)


def _sort_attributes(element: minidom.Element) -> None:
    items = sorted(element.attributes.items(), key=lambda kv: _attr_sort_key(kv[0]))
    for name, _ in items:
        element.removeAttribute(name)
    for name, value in items:
        element.setAttribute(name, value)
    for child in element.childNodes:
        if child.nodeType == child.ELEMENT_NODE:
            _sort_attributes(child)


def minify_with_scour(text: str, options: SvgOptions) -> str:
    """Run one minification pass over ``text``.

    Raises:
        OptimizationError: If the document cannot be parsed.
    """
    try:
        scoured = scour.scourString(text, scour.parse_args(_scour_args(options)))
        doc = minidom.parseString(scoured.encode("utf-8"))
    except Exception as e:
        raise OptimizationError(f"Invalid SVG: {e}") from e

    root = doc.documentElement
    if root is None or root.tagName.split(":")[-1] != "svg":
        raise OptimizationError("Invalid SVG: root element is not <svg>")

    _round_geometry(root, options.precision)
    if options.add_xmlns and root.getAttribute("xmlns") != SVG_NAMESPACE:
        root.setAttribute("xmlns", SVG_NAMESPACE)
    if options.sort_attrs:
        _sort_attributes(root)

    return root.toxml()


class SvgOptimizer(BaseOptimizer):
    """Minify SVG text with a pluggable minifier, optionally to a fixed point."""

    def __init__(
        self,
        settings: Settings,
        minifier: SvgMinifier | None = None,
    ) -> None:
        self._options = settings.optimization_profile().svg
        self._minifier = minifier or minify_with_scour

    @property
    def kind(self) -> AssetKind:
        return AssetKind.VECTOR

    def minify(self, text: str) -> str:
        """Apply the minifier once, or repeatedly until output is stable."""
        passes = self._options.max_passes if self._options.multipass else 1
        current = text
        for n in range(1, passes + 1):
            result = self._minifier(current, self._options)
            if result == current:
                logger.debug("SVG reached fixed point after %d pass(es)", n)
                break
            current = result
        return current

    def _optimize(self, asset: AssetFile, dest_path: Path) -> OptimizationResult:
        original = asset.path.read_text(encoding="utf-8")
        optimized = self.minify(original)

        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_text(optimized, encoding="utf-8")

        return OptimizationResult.ok(
            original_size=len(original.encode("utf-8")),
            optimized_size=len(optimized.encode("utf-8")),
            dest_path=dest_path,
        )
