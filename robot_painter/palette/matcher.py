"""Nearest-color search over a palette.

Distance is plain Euclidean distance in RGB space.  The search is a full
linear scan in palette construction order, comparing with strict ``<`` so
that among equidistant swatches the earliest one wins.  Palettes hold a
few dozen colors, so no spatial index is used.
"""

from __future__ import annotations

import functools
import logging
import math

from robot_painter.palette.palette import EmptyPalette, Palette
from robot_painter.stroke_ir.operations import Color

logger = logging.getLogger(__name__)

DEFAULT_MEMO_SIZE = 4096


def rgb_distance(a: Color, b: Color) -> float:
    """Euclidean distance between two colors in RGB space."""
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    return math.sqrt(dr * dr + dg * dg + db * db)


class ColorMatcher:
    """Map arbitrary colors to their nearest palette color.

    Parameters
    ----------
    palette : Palette
        Catalog to search.  Immutable, so results are memoized per target.
    memo_size : int
        Most recently matched targets kept in the memo.
    """

    def __init__(self, palette: Palette, memo_size: int = DEFAULT_MEMO_SIZE) -> None:
        if memo_size < 1:
            raise ValueError(f"memo_size must be >= 1, got {memo_size}")
        self._palette = palette
        self._lookup = functools.lru_cache(maxsize=memo_size)(self._scan)

    @property
    def palette(self) -> Palette:
        return self._palette

    def nearest(self, target: Color) -> Color:
        """Return the palette color closest to *target*.

        Raises
        ------
        EmptyPalette
            If the palette has no entries.
        """
        return self._lookup(target)

    def _scan(self, target: Color) -> Color:
        entries = self._palette.all()
        if not entries:
            raise EmptyPalette("Cannot match colors against an empty palette")

        best = entries[0].color
        best_dist = math.inf
        for entry in entries:
            dist = rgb_distance(target, entry.color)
            if dist < best_dist:
                best_dist = dist
                best = entry.color

        return best

    def cache_size(self) -> int:
        return self._lookup.cache_info().currsize
