"""Read-only source image wrapper.

Pixels are stored as a ``(height, width, 3)`` uint8 array that is marked
non-writeable.  Alpha is dropped on load; only RGB is painted.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Union

import numpy as np
from PIL import Image

from robot_painter.stroke_ir.operations import Color


class SourceImage:
    """Immutable RGB pixel grid, origin top-left, row-major.

    Parameters
    ----------
    pixels : np.ndarray
        ``(H, W, 3)`` array.  Copied, cast to uint8 and frozen.
    """

    def __init__(self, pixels: np.ndarray) -> None:
        arr = np.asarray(pixels)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ValueError(
                f"Source image must have shape (H, W, 3), got {arr.shape}"
            )
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError("Source image must be at least 1x1")
        if arr.dtype != np.uint8:
            if arr.min() < 0 or arr.max() > 255:
                raise ValueError("Pixel values must be in [0, 255]")
            arr = arr.astype(np.uint8)
        else:
            arr = arr.copy()
        arr.flags.writeable = False
        self._pixels = arr

    # -- Constructors -------------------------------------------------------------

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> SourceImage:
        """Load any Pillow-readable image as RGB."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")
        with Image.open(path) as img:
            rgb = img.convert("RGB")
            return cls(np.array(rgb))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Color]]) -> SourceImage:
        """Build from rows of :class:`Color` (``rows[y][x]``)."""
        if not rows or not rows[0]:
            raise ValueError("Source image must be at least 1x1")
        width = len(rows[0])
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {y} has {len(row)} pixels, expected {width}"
                )
        data = np.array(
            [[c.as_tuple() for c in row] for row in rows], dtype=np.uint8,
        )
        return cls(data)

    # -- Accessors ----------------------------------------------------------------

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def pixels(self) -> np.ndarray:
        """Read-only ``(H, W, 3)`` view."""
        return self._pixels

    def pixel(self, x: int, y: int) -> Color:
        """Color at column *x*, row *y*."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"Pixel ({x}, {y}) outside {self.width}x{self.height} image"
            )
        return Color.from_rgb(self._pixels[y, x])

    def __repr__(self) -> str:
        return f"SourceImage({self.width}x{self.height})"
