"""Active slot cache -- which two colors the editor's picker holds.

The editor keeps two colors loaded: the primary slot (painted with the left
button) and the secondary slot (right button).  Loading a new color costs a
palette click, so the cache only asks for one on a miss.

Eviction
--------
On a miss the slot that was **not** used for the last stroke is overwritten
and becomes the active one.  The slot just painted with is kept, so a run of
two alternating colors settles into zero switches, and a flat region of one
color costs one switch for the whole run.
"""

from __future__ import annotations

import logging

from robot_painter.palette.palette import Palette, UnknownColor
from robot_painter.stroke_ir.operations import (
    BLACK,
    WHITE,
    Color,
    DrawCommand,
    SelectSlot,
    Slot,
)

logger = logging.getLogger(__name__)


class ActiveSlotCache:
    """Two-slot color cache mirroring the editor's picker.

    Parameters
    ----------
    primary, secondary : Color
        Colors already loaded in the editor at startup.  Both may be equal.
    palette : Palette | None
        When given, colors loaded on a miss must be palette members.
    """

    def __init__(
        self,
        primary: Color = BLACK,
        secondary: Color = WHITE,
        palette: Palette | None = None,
    ) -> None:
        self._colors: dict[Slot, Color] = {
            Slot.PRIMARY: primary,
            Slot.SECONDARY: secondary,
        }
        self._active = Slot.PRIMARY
        self._palette = palette
        self._switches = 0

    # -- State ----------------------------------------------------------------

    @property
    def primary(self) -> Color:
        return self.color_of(Slot.PRIMARY)

    @property
    def secondary(self) -> Color:
        return self.color_of(Slot.SECONDARY)

    @property
    def active(self) -> Slot:
        """Slot most recently used for painting."""
        return self._active

    @property
    def switches(self) -> int:
        """Total ``SelectSlot`` commands issued by this cache."""
        return self._switches

    def color_of(self, slot: Slot) -> Color:
        """Color currently loaded in *slot*."""
        return self._colors[slot]

    # -- Resolution -------------------------------------------------------------

    def resolve(self, color: Color) -> tuple[Slot, list[DrawCommand]]:
        """Pick the slot to paint *color* with.

        Returns
        -------
        tuple[Slot, list[DrawCommand]]
            The slot, and either no commands (hit) or a single
            ``SelectSlot`` (miss).

        Raises
        ------
        UnknownColor
            On a miss with a color outside the configured palette.
        """
        # Primary is checked first when both slots hold the same color
        for slot in (Slot.PRIMARY, Slot.SECONDARY):
            if color == self.color_of(slot):
                self._active = slot
                return slot, []

        if self._palette is not None and color not in self._palette:
            raise UnknownColor(
                f"Cannot load {color.as_tuple()} into a slot: not in the palette"
            )

        evicted = self._active.other
        logger.debug(
            "Slot miss: loading %s into %s (was %s)",
            color.hex,
            evicted.value,
            self._colors[evicted].hex,
        )
        self._colors[evicted] = color
        self._active = evicted
        self._switches += 1
        return evicted, [SelectSlot(slot=evicted, color=color)]

    def __repr__(self) -> str:
        return (
            f"ActiveSlotCache(primary={self.primary.hex}, "
            f"secondary={self.secondary.hex}, active={self._active.value})"
        )
