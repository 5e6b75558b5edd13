"""Stroke IR -- the vocabulary between the scan converter and the editor.

Every value that crosses the planner/boundary seam is an immutable,
slotted dataclass.  Commands use **semantic** names (``SelectSlot``, not
"right-click at 111,71") and **image-relative** pixel coordinates for
canvas strokes.  Palette positions are absolute screen coordinates.

Commands
--------
``SelectSlot``
    A palette click that loads a color into one of the two picker slots.
``PaintBlock``
    One press-drag-release stroke with the filled-rectangle tool, painting
    a ``size x size`` square in the slot's color.

The executor consumes commands strictly in emission order; nothing is
batched, reordered or replayed.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Color:
    """Opaque RGB triple.

    Parameters
    ----------
    r, g, b : int
        Channel values in ``[0, 255]``.
    """

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for ch, val in [("r", self.r), ("g", self.g), ("b", self.b)]:
            if not isinstance(val, int) or isinstance(val, bool):
                raise ValueError(
                    f"Color {ch} must be an int, got {type(val).__name__}"
                )
            if not 0 <= val <= 255:
                raise ValueError(
                    f"Color {ch} must be in [0, 255], got {val}"
                )

    @classmethod
    def from_rgb(cls, rgb: Iterable[int]) -> Color:
        """Create from any 3-item iterable (tuple, list, numpy row)."""
        r, g, b = (int(c) for c in rgb)
        return cls(r, g, b)

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)


@dataclass(frozen=True, slots=True)
class Position:
    """Integer 2D coordinate (x right, y down)."""

    x: int
    y: int

    def offset(self, dx: int, dy: int) -> Position:
        return Position(self.x + dx, self.y + dy)

    def __add__(self, other: Position) -> Position:
        return Position(self.x + other.x, self.y + other.y)

    def as_tuple(self) -> tuple[int, int]:
        return (self.x, self.y)


ORIGIN = Position(0, 0)


class Slot(Enum):
    """The editor's two color-picker slots."""

    PRIMARY = "primary"
    SECONDARY = "secondary"

    @property
    def other(self) -> Slot:
        return Slot.SECONDARY if self is Slot.PRIMARY else Slot.PRIMARY


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DrawCommand(ABC):
    """Base class for all draw commands."""

    pass


@dataclass(frozen=True, slots=True)
class SelectSlot(DrawCommand):
    """Load *color* into *slot* by clicking its palette swatch.

    Parameters
    ----------
    slot : Slot
        Slot being reassigned.  Decides which mouse button clicks.
    color : Color
        Palette color to load.
    """

    slot: Slot
    color: Color


@dataclass(frozen=True, slots=True)
class PaintBlock(DrawCommand):
    """Filled-square stroke: press at ``top_left``, drag, release.

    Parameters
    ----------
    slot : Slot
        Slot whose color paints the block.
    top_left : Position
        Image-relative press point.  Both coordinates must be >= 0.
    size : int
        Side of the square in pixels.  Must be >= 1.
    """

    slot: Slot
    top_left: Position
    size: int

    def __post_init__(self) -> None:
        if self.size < 1:
            raise ValueError(f"PaintBlock size must be >= 1, got {self.size}")
        if self.top_left.x < 0 or self.top_left.y < 0:
            raise ValueError(
                f"PaintBlock top_left must be non-negative, got {self.top_left.as_tuple()}"
            )

    @property
    def bottom_right(self) -> Position:
        """Release point of the drag."""
        return self.top_left.offset(self.size, self.size)


# ---------------------------------------------------------------------------
# Stream helpers
# ---------------------------------------------------------------------------


def paint_blocks(commands: Iterable[DrawCommand]) -> list[PaintBlock]:
    """Return only the ``PaintBlock`` commands, in order."""
    return [cmd for cmd in commands if isinstance(cmd, PaintBlock)]


def slot_switches(commands: Iterable[DrawCommand]) -> list[SelectSlot]:
    """Return only the ``SelectSlot`` commands, in order."""
    return [cmd for cmd in commands if isinstance(cmd, SelectSlot)]


def summarize(commands: Iterable[DrawCommand]) -> dict[str, int]:
    """Count commands by kind.

    Returns
    -------
    dict[str, int]
        ``{"paint_blocks": n, "slot_switches": m}``
    """
    counts = {"paint_blocks": 0, "slot_switches": 0}
    for cmd in commands:
        if isinstance(cmd, PaintBlock):
            counts["paint_blocks"] += 1
        elif isinstance(cmd, SelectSlot):
            counts["slot_switches"] += 1
    return counts
