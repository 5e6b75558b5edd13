"""Paint executor -- drive an input injector from the command stream.

The executor is the only consumer of :meth:`StrokeGenerator.generate`.  It
pulls one command at a time and hands it to an :class:`InputInjector`
before asking for the next, so the generator's pointer watch always sees
the pointer where the last executed stroke left it.

Stopping a run is **safe by construction**:
    - Pointer interference: the generator ends the stream before the next
      block; the run finishes as ``ABORTED``.
    - Injector abort (e.g. the pyautogui fail-safe corner): the injector
      raises :class:`InjectionAborted`; the run finishes as ``ABORTED``.
    - ``cancel()``: honoured at the next block boundary; the run finishes as
      ``CANCELLED``.  A block is never left half painted by a cancel.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Protocol

from robot_painter.planner.scan import StrokeGenerator
from robot_painter.planner.source_image import SourceImage
from robot_painter.stroke_ir.operations import DrawCommand, PaintBlock, SelectSlot

logger = logging.getLogger(__name__)


class InjectionAborted(Exception):
    """The injector refused to continue (user fail-safe, lost focus, ...)."""

    pass


class InputInjector(Protocol):
    """Performs one draw command against the drawing surface."""

    def execute(self, command: DrawCommand) -> None: ...


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


class ExecutorState(Enum):
    """Current executor state."""

    IDLE = auto()
    RUNNING = auto()
    ERROR = auto()


class RunOutcome(Enum):
    """How a run ended."""

    COMPLETED = auto()
    ABORTED = auto()
    CANCELLED = auto()


@dataclass
class ExecutorProgress:
    """Execution progress snapshot."""

    state: ExecutorState
    total_blocks: int = 0
    completed_blocks: int = 0
    slot_switches: int = 0
    message: str = ""


@dataclass(frozen=True)
class RunResult:
    """Summary of a finished run."""

    outcome: RunOutcome
    total_blocks: int
    painted_blocks: int
    slot_switches: int
    elapsed_s: float

    @property
    def completed(self) -> bool:
        return self.outcome is RunOutcome.COMPLETED


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class PaintExecutor:
    """Run a :class:`StrokeGenerator` against an :class:`InputInjector`.

    Parameters
    ----------
    injector : InputInjector
        Desktop backend or virtual canvas.
    generator : StrokeGenerator
        Configured stroke generator; its watch (if any) must observe the
        same pointer the injector moves.
    """

    def __init__(
        self,
        injector: InputInjector,
        generator: StrokeGenerator,
    ) -> None:
        self._injector = injector
        self._gen = generator

        self._state = ExecutorState.IDLE
        self._cancel_flag = threading.Event()
        self._progress_cb: Callable[[ExecutorProgress], None] | None = None
        self._progress = ExecutorProgress(state=ExecutorState.IDLE)

    # ------------------------------------------------------------------
    # Common
    # ------------------------------------------------------------------

    @property
    def generator(self) -> StrokeGenerator:
        return self._gen

    def get_state(self) -> ExecutorState:
        """Return current executor state."""
        return self._state

    def set_progress_callback(
        self, fn: Callable[[ExecutorProgress], None],
    ) -> None:
        """Register a callback invoked on progress updates."""
        self._progress_cb = fn

    def cancel(self) -> None:
        """Set cancel flag -- stops before the next block starts."""
        self._cancel_flag.set()
        logger.info("Cancel requested")

    def _notify(self, **kwargs: object) -> None:
        """Update internal progress and fire callback."""
        for k, v in kwargs.items():
            if hasattr(self._progress, k):
                setattr(self._progress, k, v)
        self._progress.state = self._state
        if self._progress_cb is not None:
            try:
                self._progress_cb(self._progress)
            except Exception as exc:  # noqa: BLE001
                logger.error("Progress callback error: %s", exc)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, image: SourceImage, block_size: int | None = None) -> RunResult:
        """Paint *image*, one command at a time.

        Parameters
        ----------
        image : SourceImage
            Image to paint.
        block_size : int | None
            Overrides the generator's block size for this run.

        Returns
        -------
        RunResult
            Outcome and counters.

        Raises
        ------
        ValueError, EmptyPalette, SurfaceTooSmall
            From pre-condition checks; nothing has been executed.
        Exception
            Any injector error other than :class:`InjectionAborted`
            propagates after the state is set to ``ERROR``.
        """
        stream = self._gen.generate(image, block_size)
        stats = self._gen.last_stats

        self._cancel_flag.clear()
        self._state = ExecutorState.RUNNING
        self._progress = ExecutorProgress(
            state=self._state, total_blocks=stats.total_blocks,
        )
        self._notify(message="Starting")
        logger.info("Starting run (%d blocks)", stats.total_blocks)

        start = time.monotonic()
        outcome = RunOutcome.COMPLETED
        painted = 0
        switches = 0
        at_boundary = True

        try:
            while True:
                # Never advance the stream past a boundary once cancelled.
                if at_boundary and self._cancel_flag.is_set():
                    outcome = RunOutcome.CANCELLED
                    logger.info("Run cancelled after %d blocks", painted)
                    break

                cmd = next(stream, None)
                if cmd is None:
                    if stats.aborted:
                        outcome = RunOutcome.ABORTED
                    break

                try:
                    self._injector.execute(cmd)
                except InjectionAborted as exc:
                    outcome = RunOutcome.ABORTED
                    logger.warning("Injector aborted the run: %s", exc)
                    break

                if isinstance(cmd, SelectSlot):
                    switches += 1
                    at_boundary = False
                elif isinstance(cmd, PaintBlock):
                    painted += 1
                    at_boundary = True
                    self._notify(
                        completed_blocks=painted,
                        slot_switches=switches,
                        message=f"Block {painted}/{stats.total_blocks}",
                    )
        except Exception:
            self._state = ExecutorState.ERROR
            self._notify(message="Error")
            logger.exception("Run failed after %d blocks", painted)
            raise
        finally:
            stream.close()

        elapsed = time.monotonic() - start
        self._state = ExecutorState.IDLE
        self._notify(message=outcome.name.capitalize())
        logger.info(
            "Run %s: %d/%d blocks, %d slot switches in %.2f s",
            outcome.name.lower(),
            painted,
            stats.total_blocks,
            switches,
            elapsed,
        )
        return RunResult(
            outcome=outcome,
            total_blocks=stats.total_blocks,
            painted_blocks=painted,
            slot_switches=switches,
            elapsed_s=elapsed,
        )
