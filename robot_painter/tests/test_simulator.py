"""Tests for the virtual canvas."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from robot_painter.hardware.simulator import VirtualCanvas
from robot_painter.hardware.executor import PaintExecutor, RunOutcome
from robot_painter.palette import Palette, UnknownColor
from robot_painter.planner import PointerWatch, SourceImage, StrokeGenerator, SurfaceBounds
from robot_painter.stroke_ir.operations import (
    BLACK,
    WHITE,
    Color,
    PaintBlock,
    Position,
    SelectSlot,
    Slot,
)

RED = Color(255, 0, 0)


@pytest.fixture()
def palette() -> Palette:
    return Palette([
        (BLACK, Position(95, 55)),
        (WHITE, Position(95, 71)),
        (RED, Position(111, 55)),
    ])


@pytest.fixture()
def canvas(palette: Palette) -> VirtualCanvas:
    return VirtualCanvas(8, 6, palette, canvas_origin=Position(61, 94))


class TestVirtualCanvas:
    def test_starts_blank(self, canvas: VirtualCanvas) -> None:
        arr = canvas.to_array()
        assert arr.shape == (6, 8, 3)
        assert (arr == 255).all()

    def test_select_moves_pointer_and_loads_slot(self, canvas: VirtualCanvas) -> None:
        canvas.execute(SelectSlot(slot=Slot.SECONDARY, color=RED))
        assert canvas.current_position() == Position(111, 55)
        assert canvas.slot_color(Slot.SECONDARY) == RED
        assert canvas.slot_color(Slot.PRIMARY) == BLACK

    def test_select_unknown_color(self, canvas: VirtualCanvas) -> None:
        with pytest.raises(UnknownColor):
            canvas.execute(SelectSlot(slot=Slot.PRIMARY, color=Color(1, 2, 3)))

    def test_paint_fills_square(self, canvas: VirtualCanvas) -> None:
        canvas.execute(PaintBlock(slot=Slot.PRIMARY, top_left=Position(2, 1), size=3))
        arr = canvas.to_array()
        assert (arr[1:4, 2:5] == 0).all()
        assert (arr[0, :] == 255).all()
        assert (arr[:, 5:] == 255).all()

    def test_paint_leaves_pointer_at_drag_end(self, canvas: VirtualCanvas) -> None:
        canvas.execute(PaintBlock(slot=Slot.PRIMARY, top_left=Position(2, 1), size=3))
        assert canvas.current_position() == Position(61 + 5, 94 + 4)

    def test_overrun_is_clipped(self, canvas: VirtualCanvas) -> None:
        canvas.execute(PaintBlock(slot=Slot.PRIMARY, top_left=Position(5, 5), size=5))
        arr = canvas.to_array()
        assert (arr[5, 5:] == 0).all()
        assert canvas.executed == 1

    def test_nudge(self, canvas: VirtualCanvas) -> None:
        canvas.nudge(Position(3, 3))
        assert canvas.current_position() == Position(3, 3)

    def test_to_array_is_copy(self, canvas: VirtualCanvas) -> None:
        arr = canvas.to_array()
        arr[:] = 0
        assert canvas.pixel(0, 0) == WHITE

    def test_save(self, canvas: VirtualCanvas, tmp_path: Path) -> None:
        canvas.execute(PaintBlock(slot=Slot.PRIMARY, top_left=Position(0, 0), size=2))
        out = tmp_path / "preview.png"
        canvas.save(out)
        with Image.open(out) as img:
            arr = np.array(img.convert("RGB"))
        assert arr.shape == (6, 8, 3)
        assert tuple(arr[0, 0]) == (0, 0, 0)

    def test_rejects_empty(self, palette: Palette) -> None:
        with pytest.raises(ValueError):
            VirtualCanvas(0, 5, palette)

    def test_unsupported_command(self, canvas: VirtualCanvas) -> None:
        with pytest.raises(TypeError):
            canvas.execute(object())  # type: ignore[arg-type]

    def test_pointer_held_on_surface(self, palette: Palette) -> None:
        canvas = VirtualCanvas(
            10, 10, palette, canvas_origin=Position(10, 10), surface=SurfaceBounds(20, 20),
        )
        canvas.execute(PaintBlock(slot=Slot.PRIMARY, top_left=Position(5, 0), size=5))
        assert canvas.current_position() == Position(19, 15)

    def test_run_reaching_screen_edge_completes(self, palette: Palette) -> None:
        origin = Position(10, 10)
        surface = SurfaceBounds(18, 18)
        canvas = VirtualCanvas(8, 8, palette, canvas_origin=origin, surface=surface)
        generator = StrokeGenerator(
            palette,
            block_size=5,
            canvas_origin=origin,
            surface=surface,
            watch=PointerWatch(canvas),
        )
        pixels = np.zeros((8, 8, 3), dtype=np.uint8)
        result = PaintExecutor(canvas, generator).run(SourceImage(pixels))

        assert result.outcome is RunOutcome.COMPLETED
        assert result.painted_blocks == 4
        assert (canvas.to_array() == 0).all()
