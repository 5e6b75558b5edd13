"""Scan converter -- source image to an ordered stream of draw commands.

The image is walked in fixed-size square blocks, row-major: rows of blocks
top to bottom, blocks left to right within a row.  Each block is painted
with one filled-square stroke whose color is the palette color nearest to
the block's **top-left pixel** (no averaging).

Edge policy:
    Blocks at the right and bottom edges are emitted at full size even when
    they overrun the image.  Choose a block size dividing both dimensions
    for an exact fit.  With a known surface, the pointer position expected
    after such a block is clamped to the surface like the real cursor.

Cancellation:
    The watch is polled once per block, before any command for that block
    is produced, so a block's commands are never split by an abort.  An
    abort simply ends the stream; it is not an exception.

Pre-conditions (block size, non-empty palette, surface fit) are checked
when :meth:`StrokeGenerator.generate` is **called**, not when the returned
iterator is first advanced, so a failing run never yields a command.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Protocol

from robot_painter.palette.matcher import ColorMatcher
from robot_painter.palette.palette import EmptyPalette, Palette
from robot_painter.planner.cancellation import Decision
from robot_painter.planner.slot_cache import ActiveSlotCache
from robot_painter.planner.source_image import SourceImage
from robot_painter.stroke_ir.operations import (
    ORIGIN,
    DrawCommand,
    PaintBlock,
    Position,
)

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 5


class SurfaceTooSmall(Exception):
    """The image, placed at the canvas origin, does not fit the surface."""

    pass


@dataclass(frozen=True)
class SurfaceBounds:
    """Addressable drawing surface in screen pixels."""

    width: int
    height: int


@dataclass
class GenerationStats:
    """Counters for the most recent :meth:`StrokeGenerator.generate` run."""

    total_blocks: int = 0
    painted_blocks: int = 0
    slot_switches: int = 0
    aborted: bool = False
    finished: bool = False


def check_fit(
    width: int,
    height: int,
    origin: Position,
    surface: SurfaceBounds,
) -> None:
    """Raise :class:`SurfaceTooSmall` if a ``width x height`` image placed at
    *origin* reaches past the surface.  Touching the edge exactly is fine."""
    right = width + origin.x
    bottom = height + origin.y
    if right > surface.width or bottom > surface.height:
        raise SurfaceTooSmall(
            f"Image {width}x{height} at origin {origin.as_tuple()} needs "
            f"{right}x{bottom}, surface is {surface.width}x{surface.height}"
        )


class Watch(Protocol):
    """What the scan loop polls between blocks."""

    def poll(self) -> Decision: ...

    def expect(self, position: Position) -> None: ...

    def reset(self) -> None: ...


class StrokeGenerator:
    """Turn a :class:`SourceImage` into draw commands.

    Parameters
    ----------
    palette : Palette
        Pickable colors.
    block_size : int
        Default block side in pixels.
    canvas_origin : Position
        Screen position of image pixel ``(0, 0)``.
    surface : SurfaceBounds | None
        Addressable surface; ``None`` skips the fit check.
    slots : ActiveSlotCache | None
        Picker state.  Defaults to black/white.  Kept across runs because it
        mirrors what the editor has loaded.
    watch : Watch | None
        Cancellation source; ``None`` never cancels.
    """

    def __init__(
        self,
        palette: Palette,
        *,
        block_size: int = DEFAULT_BLOCK_SIZE,
        canvas_origin: Position = ORIGIN,
        surface: SurfaceBounds | None = None,
        slots: ActiveSlotCache | None = None,
        watch: Watch | None = None,
    ) -> None:
        self._palette = palette
        self._matcher = ColorMatcher(palette)
        self._block_size = block_size
        self._origin = canvas_origin
        self._surface = surface
        self._slots = slots if slots is not None else ActiveSlotCache(palette=palette)
        self._watch = watch
        self.last_stats = GenerationStats()

    @property
    def slots(self) -> ActiveSlotCache:
        return self._slots

    @property
    def canvas_origin(self) -> Position:
        return self._origin

    @property
    def block_size(self) -> int:
        return self._block_size

    # ------------------------------------------------------------------
    # Pre-conditions
    # ------------------------------------------------------------------

    def validate(self, image: SourceImage, block_size: int | None = None) -> int:
        """Check every run pre-condition without producing commands.

        Returns
        -------
        int
            The effective block size.

        Raises
        ------
        ValueError
            If the block size is < 1.
        EmptyPalette
            If the palette has no colors.
        SurfaceTooSmall
            If the image overruns the surface from the canvas origin.
        """
        size = self._block_size if block_size is None else block_size
        if size < 1:
            raise ValueError(f"Block size must be >= 1, got {size}")

        if len(self._palette) == 0:
            raise EmptyPalette("Cannot paint with an empty palette")

        if self._surface is not None:
            check_fit(image.width, image.height, self._origin, self._surface)
        return size

    def block_count(self, image: SourceImage, block_size: int | None = None) -> int:
        """Number of blocks a full scan paints: ``ceil(W/k) * ceil(H/k)``."""
        size = self._block_size if block_size is None else block_size
        if size < 1:
            raise ValueError(f"Block size must be >= 1, got {size}")
        return math.ceil(image.width / size) * math.ceil(image.height / size)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(
        self,
        image: SourceImage,
        block_size: int | None = None,
    ) -> Iterator[DrawCommand]:
        """Validate, then return a lazy command stream for *image*.

        The stream is finite and not resumable; call again to restart.
        """
        size = self.validate(image, block_size)
        self.last_stats = GenerationStats(
            total_blocks=self.block_count(image, size),
        )
        if self._watch is not None:
            self._watch.reset()

        logger.info(
            "Scanning %dx%d image in %d px blocks (%d blocks)",
            image.width,
            image.height,
            size,
            self.last_stats.total_blocks,
        )
        return self._scan(image, size, self.last_stats)

    def _scan(
        self,
        image: SourceImage,
        size: int,
        stats: GenerationStats,
    ) -> Iterator[DrawCommand]:
        for by in range(0, image.height, size):
            for bx in range(0, image.width, size):
                if self._watch is not None and self._watch.poll() is Decision.ABORT:
                    stats.aborted = True
                    logger.warning(
                        "Run aborted before block (%d, %d) after %d/%d blocks",
                        bx,
                        by,
                        stats.painted_blocks,
                        stats.total_blocks,
                    )
                    return

                matched = self._matcher.nearest(image.pixel(bx, by))
                slot, switch_cmds = self._slots.resolve(matched)
                for cmd in switch_cmds:
                    stats.slot_switches += 1
                    yield cmd

                block = PaintBlock(slot=slot, top_left=Position(bx, by), size=size)
                if self._watch is not None:
                    self._watch.expect(self._resting_point(block))
                stats.painted_blocks += 1
                yield block

        stats.finished = True
        logger.info(
            "Scan complete: %d blocks, %d slot switches",
            stats.painted_blocks,
            stats.slot_switches,
        )

    def _resting_point(self, block: PaintBlock) -> Position:
        """Screen point where the pointer stops after painting *block*.

        Edge blocks can release past the surface; the cursor is held on the
        last addressable pixel there.
        """
        end = self._origin + block.bottom_right
        if self._surface is None:
            return end
        return Position(
            min(end.x, self._surface.width - 1),
            min(end.y, self._surface.height - 1),
        )
