"""Palette catalog and nearest-color matching."""

from robot_painter.palette.matcher import ColorMatcher, rgb_distance
from robot_painter.palette.palette import (
    DuplicateColor,
    EmptyPalette,
    Palette,
    PaletteEntry,
    PaletteError,
    UnknownColor,
    grid_positions,
)

__all__ = [
    "ColorMatcher",
    "DuplicateColor",
    "EmptyPalette",
    "Palette",
    "PaletteEntry",
    "PaletteError",
    "UnknownColor",
    "grid_positions",
    "rgb_distance",
]
