"""Virtual canvas -- an in-memory stand-in for the editor and the pointer.

``VirtualCanvas`` is both the :class:`InputInjector` and the
:class:`PointerSensor` of a run, so a dry run exercises the exact same
command stream and cancellation path as a live one:

- ``SelectSlot`` moves the virtual pointer to the swatch and loads the
  color into the slot.
- ``PaintBlock`` fills the square ``[top_left, top_left + size)`` (clipped
  to the canvas) with the slot's color and leaves the pointer at the drag
  end, ``canvas_origin + top_left + (size, size)``.
- ``nudge()`` moves the pointer as an outside user would.

With a ``surface`` the pointer cannot leave the screen: like the OS cursor it
stops on the last pixel when a drag ends past the edge.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np

from painter_utils import fs
from robot_painter.palette.palette import Palette
from robot_painter.planner.scan import SurfaceBounds
from robot_painter.stroke_ir.operations import (
    BLACK,
    ORIGIN,
    WHITE,
    Color,
    DrawCommand,
    PaintBlock,
    Position,
    SelectSlot,
    Slot,
)

logger = logging.getLogger(__name__)


class VirtualCanvas:
    """Pixel buffer plus simulated picker and pointer.

    Parameters
    ----------
    width, height : int
        Canvas size in pixels.
    palette : Palette
        Swatches available to ``SelectSlot``.
    canvas_origin : Position
        Screen position of canvas pixel ``(0, 0)``.
    primary, secondary : Color
        Colors loaded in the picker at start.
    background : Color
        Initial fill.
    surface : SurfaceBounds | None
        Screen the pointer is confined to; ``None`` leaves it unbounded.
    """

    def __init__(
        self,
        width: int,
        height: int,
        palette: Palette,
        canvas_origin: Position = ORIGIN,
        primary: Color = BLACK,
        secondary: Color = WHITE,
        background: Color = WHITE,
        surface: SurfaceBounds | None = None,
    ) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        self._palette = palette
        self._origin = canvas_origin
        self._slots = {Slot.PRIMARY: primary, Slot.SECONDARY: secondary}
        self._pixels = np.empty((height, width, 3), dtype=np.uint8)
        self._pixels[:, :] = background.as_tuple()
        self._surface = surface
        self._pointer = ORIGIN
        self.executed = 0

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    def slot_color(self, slot: Slot) -> Color:
        return self._slots[slot]

    # -- PointerSensor -------------------------------------------------------

    def current_position(self) -> Position:
        return self._pointer

    def nudge(self, position: Position) -> None:
        """Move the pointer from outside the run."""
        logger.debug("Pointer nudged to %s", position.as_tuple())
        self._pointer = position

    # -- InputInjector -------------------------------------------------------

    def execute(self, command: DrawCommand) -> None:
        if isinstance(command, SelectSlot):
            self._move(self._palette.lookup(command.color))
            self._slots[command.slot] = command.color
        elif isinstance(command, PaintBlock):
            x0, y0 = command.top_left.as_tuple()
            x1 = min(x0 + command.size, self.width)
            y1 = min(y0 + command.size, self.height)
            if x0 < x1 and y0 < y1:
                self._pixels[y0:y1, x0:x1] = self._slots[command.slot].as_tuple()
            self._move(self._origin + command.bottom_right)
        else:
            raise TypeError(f"Unsupported draw command: {command!r}")
        self.executed += 1

    def _move(self, target: Position) -> None:
        if self._surface is not None:
            target = Position(
                min(max(target.x, 0), self._surface.width - 1),
                min(max(target.y, 0), self._surface.height - 1),
            )
        self._pointer = target

    # -- Output --------------------------------------------------------------

    def pixel(self, x: int, y: int) -> Color:
        return Color.from_rgb(self._pixels[y, x])

    def to_array(self) -> np.ndarray:
        """Copy of the canvas as an ``(H, W, 3)`` uint8 array."""
        return self._pixels.copy()

    def save(self, path: Union[str, Path]) -> None:
        fs.save_image_atomic(self._pixels, path)
        logger.info("Saved %dx%d preview to %s", self.width, self.height, path)
