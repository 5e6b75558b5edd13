"""Tests for the paint executor.

Runs the real generator against a virtual canvas, so ordering between
command execution and cancellation polling is exercised end to end.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import numpy as np
import pytest

from robot_painter.hardware.executor import (
    ExecutorProgress,
    ExecutorState,
    InjectionAborted,
    PaintExecutor,
    RunOutcome,
)
from robot_painter.hardware.simulator import VirtualCanvas
from robot_painter.palette import Palette
from robot_painter.planner import (
    PointerWatch,
    SourceImage,
    StrokeGenerator,
    SurfaceBounds,
    SurfaceTooSmall,
)
from robot_painter.stroke_ir.operations import (
    BLACK,
    WHITE,
    Color,
    DrawCommand,
    PaintBlock,
    Position,
    Slot,
)

RED = Color(255, 0, 0)
ORIGIN = Position(61, 94)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def palette() -> Palette:
    return Palette([
        (BLACK, Position(95, 55)),
        (WHITE, Position(95, 71)),
        (RED, Position(111, 55)),
    ])


@pytest.fixture()
def image() -> SourceImage:
    """4x2 image: left half red, right half black."""
    pixels = np.zeros((2, 4, 3), dtype=np.uint8)
    pixels[:, :2] = RED.as_tuple()
    return SourceImage(pixels)


def build(palette: Palette, image: SourceImage, **gen_kwargs) -> tuple[PaintExecutor, VirtualCanvas]:
    canvas = VirtualCanvas(image.width, image.height, palette, canvas_origin=ORIGIN)
    gen = StrokeGenerator(
        palette,
        block_size=1,
        canvas_origin=ORIGIN,
        watch=PointerWatch(canvas),
        **gen_kwargs,
    )
    return PaintExecutor(canvas, gen), canvas


class NudgingCanvas(VirtualCanvas):
    """Moves its own pointer after a given number of paint blocks."""

    def __init__(self, *args, nudge_after: int, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._nudge_after = nudge_after
        self._painted = 0

    def execute(self, command: DrawCommand) -> None:
        super().execute(command)
        if isinstance(command, PaintBlock):
            self._painted += 1
            if self._painted == self._nudge_after:
                self.nudge(Position(0, 0))


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


class TestRun:
    def test_completes(self, palette: Palette, image: SourceImage) -> None:
        executor, canvas = build(palette, image)
        result = executor.run(image)

        assert result.outcome is RunOutcome.COMPLETED
        assert result.completed
        assert result.painted_blocks == result.total_blocks == 8
        assert result.slot_switches == 1
        assert canvas.pixel(0, 0) == RED
        assert canvas.pixel(3, 1) == BLACK
        assert executor.get_state() is ExecutorState.IDLE

    def test_pointer_interference_aborts(self, palette: Palette, image: SourceImage) -> None:
        canvas = NudgingCanvas(
            image.width, image.height, palette, canvas_origin=ORIGIN, nudge_after=3,
        )
        gen = StrokeGenerator(
            palette, block_size=1, canvas_origin=ORIGIN, watch=PointerWatch(canvas),
        )
        result = PaintExecutor(canvas, gen).run(image)

        assert result.outcome is RunOutcome.ABORTED
        assert result.painted_blocks == 3
        # Fourth block (top row, x=3) was never painted.
        assert canvas.pixel(3, 0) == WHITE

    def test_injection_aborted(self, palette: Palette, image: SourceImage) -> None:
        injector = MagicMock()
        injector.execute.side_effect = [None, None, InjectionAborted("corner")]
        gen = StrokeGenerator(palette, block_size=1)

        result = PaintExecutor(injector, gen).run(image)

        assert result.outcome is RunOutcome.ABORTED
        assert injector.execute.call_count == 3

    def test_injector_error_propagates(self, palette: Palette, image: SourceImage) -> None:
        injector = MagicMock()
        injector.execute.side_effect = OSError("display gone")
        executor = PaintExecutor(injector, StrokeGenerator(palette, block_size=1))

        with pytest.raises(OSError):
            executor.run(image)
        assert executor.get_state() is ExecutorState.ERROR

    def test_precondition_failure_executes_nothing(self, palette: Palette, image: SourceImage) -> None:
        injector = MagicMock()
        gen = StrokeGenerator(
            palette, canvas_origin=ORIGIN, surface=SurfaceBounds(62, 95),
        )
        with pytest.raises(SurfaceTooSmall):
            PaintExecutor(injector, gen).run(image)
        injector.execute.assert_not_called()


# ---------------------------------------------------------------------------
# Cancel and progress
# ---------------------------------------------------------------------------


class TestCancelAndProgress:
    def test_cancel_at_block_boundary(self, palette: Palette, image: SourceImage) -> None:
        executor, canvas = build(palette, image)

        def on_progress(p: ExecutorProgress) -> None:
            if p.completed_blocks == 2:
                executor.cancel()

        executor.set_progress_callback(on_progress)
        result = executor.run(image)

        assert result.outcome is RunOutcome.CANCELLED
        assert result.painted_blocks == 2

    def test_cancel_does_not_split_block(self, palette: Palette) -> None:
        # Red evicts white, so the near-white block needs a SelectSlot first.
        image = SourceImage.from_rows([[RED, Color(250, 250, 250)]])
        executor, canvas = build(palette, image)
        executor.set_progress_callback(
            lambda p: executor.cancel() if p.completed_blocks == 1 else None
        )
        result = executor.run(image)
        assert result.painted_blocks == 1
        assert result.slot_switches == 1
        assert canvas.executed == 2
        slots = executor.generator.slots
        for slot in Slot:
            assert slots.color_of(slot) == canvas.slot_color(slot)
        assert slots.primary == BLACK
        assert slots.secondary == RED

    def test_progress_reported(self, palette: Palette, image: SourceImage) -> None:
        executor, _ = build(palette, image)
        seen: list[int] = []
        executor.set_progress_callback(lambda p: seen.append(p.completed_blocks))
        executor.run(image)
        assert seen[-1] == 8
        assert 1 in seen

    def test_callback_errors_are_logged(self, palette: Palette, image: SourceImage) -> None:
        executor, _ = build(palette, image)
        executor.set_progress_callback(MagicMock(side_effect=RuntimeError("ui")))
        assert executor.run(image).completed

    def test_cancel_cleared_between_runs(self, palette: Palette, image: SourceImage) -> None:
        executor, _ = build(palette, image)
        executor.cancel()
        assert executor.run(image).completed
