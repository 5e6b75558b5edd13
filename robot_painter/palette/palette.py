"""Palette -- the fixed catalog of pickable colors.

A palette is built once, from an ordered sequence of ``(Color, Position)``
pairs, and never mutated.  Construction order is preserved because the
matcher breaks distance ties by it.

Swatch grid
-----------
Editors lay their swatches out as a fixed grid.  ``grid_positions`` returns
the click points of such a grid in **column-major** order (all rows of the
first column, then the next column), which is the order swatches are
sampled off screen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Union

from robot_painter.stroke_ir.operations import Color, Position

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PaletteError(Exception):
    """Base class for palette failures."""

    pass


class UnknownColor(PaletteError):
    """A color that is not a palette member was looked up."""

    pass


class DuplicateColor(PaletteError):
    """The same color was supplied twice at construction."""

    pass


class EmptyPalette(PaletteError):
    """A nearest-color query was made against a palette with no entries."""

    pass


# ---------------------------------------------------------------------------
# Palette
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PaletteEntry:
    """One swatch: its color and where to click it."""

    color: Color
    position: Position


EntryLike = Union[PaletteEntry, tuple[Color, Position]]


class Palette:
    """Immutable, insertion-ordered ``Color -> Position`` catalog.

    Parameters
    ----------
    entries : Iterable[PaletteEntry | tuple[Color, Position]]
        Swatches in construction order.

    Raises
    ------
    DuplicateColor
        If a color appears more than once.
    """

    def __init__(self, entries: Iterable[EntryLike]) -> None:
        ordered: list[PaletteEntry] = []
        positions: dict[Color, Position] = {}

        for item in entries:
            entry = item if isinstance(item, PaletteEntry) else PaletteEntry(*item)
            if entry.color in positions:
                raise DuplicateColor(
                    f"Color {entry.color.as_tuple()} at {entry.position.as_tuple()} "
                    f"already in palette at {positions[entry.color].as_tuple()}"
                )
            positions[entry.color] = entry.position
            ordered.append(entry)

        self._entries = tuple(ordered)
        self._positions = positions
        logger.debug("Palette built with %d colors", len(self._entries))

    @classmethod
    def from_grid(
        cls,
        colors: Sequence[Color],
        origin: Position,
        spacing: int,
        columns: int,
        rows: int,
        on_duplicate: str = "error",
    ) -> Palette:
        """Pair sampled swatch colors with their grid click positions.

        ``colors`` must be in the same column-major order as
        :func:`grid_positions`.  Neighbouring swatches can sample to the same
        color: ``on_duplicate="keep_first"`` drops the later ones with a
        warning, ``"error"`` raises :class:`DuplicateColor`.
        """
        if on_duplicate not in ("error", "keep_first"):
            raise ValueError(f"Unknown duplicate policy: {on_duplicate!r}")
        positions = grid_positions(origin, spacing, columns, rows)
        if len(colors) != len(positions):
            raise ValueError(
                f"Expected {len(positions)} colors for a {columns}x{rows} grid, "
                f"got {len(colors)}"
            )

        kept: dict[Color, Position] = {}
        for color, pos in zip(colors, positions):
            if color not in kept:
                kept[color] = pos
            elif on_duplicate == "error":
                raise DuplicateColor(
                    f"Swatch {pos.as_tuple()} repeats {color.hex} "
                    f"from {kept[color].as_tuple()}"
                )
            else:
                logger.warning(
                    "Swatch %s repeats %s from %s; keeping the first",
                    pos.as_tuple(),
                    color.hex,
                    kept[color].as_tuple(),
                )
        return cls(kept.items())

    # -- Queries -------------------------------------------------------------

    def lookup(self, color: Color) -> Position:
        """Return the click position of an exact palette color.

        Raises
        ------
        UnknownColor
            If *color* is not a member.
        """
        try:
            return self._positions[color]
        except KeyError:
            raise UnknownColor(
                f"Color {color.as_tuple()} is not in the palette"
            ) from None

    def all(self) -> tuple[PaletteEntry, ...]:
        """Entries in construction order."""
        return self._entries

    def colors(self) -> list[Color]:
        return [e.color for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, color: object) -> bool:
        return color in self._positions

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"Palette({len(self._entries)} colors)"


def grid_positions(
    origin: Position,
    spacing: int,
    columns: int,
    rows: int,
) -> list[Position]:
    """Click points of a fixed swatch grid, column-major.

    Parameters
    ----------
    origin : Position
        Center of the first swatch (screen pixels).
    spacing : int
        Distance between neighbouring swatch centers.
    columns, rows : int
        Grid dimensions.

    Returns
    -------
    list[Position]
        ``columns * rows`` positions.
    """
    if columns < 1 or rows < 1:
        raise ValueError(f"Grid must be at least 1x1, got {columns}x{rows}")
    if spacing < 1:
        raise ValueError(f"Grid spacing must be >= 1, got {spacing}")
    return [
        origin.offset(col * spacing, row * spacing)
        for col in range(columns)
        for row in range(rows)
    ]
