"""Desktop backend -- real pointer and keyboard injection via pyautogui.

Three pieces, all sharing one ``gui`` object (the ``pyautogui`` module
unless a stand-in is supplied):

``DesktopPointer``
    :class:`~robot_painter.planner.cancellation.PointerSensor` backed by
    ``gui.position()``.
``DesktopInjector``
    :class:`~robot_painter.hardware.executor.InputInjector` that turns
    ``SelectSlot`` into a swatch click and ``PaintBlock`` into a press-drag-
    release with the slot's button (primary = left, secondary = right).
``EditorSession``
    Starts and prepares the paint program: maximize, resize the canvas,
    select the filled-rectangle tool, sample the swatch grid.

pyautogui's fail-safe (pointer slammed into a screen corner) surfaces as
:class:`~robot_painter.hardware.executor.InjectionAborted`.
"""

from __future__ import annotations

import logging
import subprocess
import time
from types import TracebackType
from typing import Any, Callable

from robot_painter.configs.loader import PainterConfig
from robot_painter.hardware.executor import InjectionAborted
from robot_painter.palette.palette import Palette, grid_positions
from robot_painter.planner.scan import SurfaceBounds
from robot_painter.stroke_ir.operations import (
    Color,
    DrawCommand,
    PaintBlock,
    Position,
    SelectSlot,
    Slot,
)

logger = logging.getLogger(__name__)

BUTTONS = {Slot.PRIMARY: "left", Slot.SECONDARY: "right"}


def _default_gui() -> Any:
    import pyautogui

    return pyautogui


def screen_bounds(gui: Any = None) -> SurfaceBounds:
    """Size of the primary screen as a :class:`SurfaceBounds`."""
    gui = gui or _default_gui()
    width, height = gui.size()
    return SurfaceBounds(width=int(width), height=int(height))


class DesktopPointer:
    """Read the real pointer position."""

    def __init__(self, gui: Any = None) -> None:
        self._gui = gui or _default_gui()

    def current_position(self) -> Position:
        x, y = self._gui.position()
        return Position(int(x), int(y))


class DesktopInjector:
    """Execute draw commands with the real pointer.

    Parameters
    ----------
    config : PainterConfig
        Supplies the canvas origin and input pacing.
    palette : Palette
        Swatch positions to click for ``SelectSlot``.
    gui : module-like, optional
        ``pyautogui`` or a compatible stand-in.
    """

    def __init__(
        self,
        config: PainterConfig,
        palette: Palette,
        gui: Any = None,
    ) -> None:
        self._gui = gui or _default_gui()
        self._palette = palette
        self._origin = config.canvas.origin
        self._gui.PAUSE = config.input.action_pause_s
        self._gui.FAILSAFE = config.input.failsafe

    def execute(self, command: DrawCommand) -> None:
        """Perform one command.

        Raises
        ------
        InjectionAborted
            If the pyautogui fail-safe fired.
        TypeError
            For an unsupported command type.
        """
        try:
            if isinstance(command, SelectSlot):
                self._select(command)
            elif isinstance(command, PaintBlock):
                self._paint(command)
            else:
                raise TypeError(f"Unsupported draw command: {command!r}")
        except self._gui.FailSafeException as exc:
            raise InjectionAborted(f"pyautogui fail-safe triggered: {exc}") from exc

    def _select(self, cmd: SelectSlot) -> None:
        pos = self._palette.lookup(cmd.color)
        logger.debug(
            "Loading %s into %s slot from swatch %s",
            cmd.color.hex,
            cmd.slot.value,
            pos.as_tuple(),
        )
        self._gui.click(pos.x, pos.y, button=BUTTONS[cmd.slot])

    def _paint(self, cmd: PaintBlock) -> None:
        start = self._origin + cmd.top_left
        end = self._origin + cmd.bottom_right
        button = BUTTONS[cmd.slot]
        self._gui.moveTo(start.x, start.y)
        self._gui.mouseDown(button=button)
        self._gui.moveTo(end.x, end.y)
        self._gui.mouseUp(button=button)


# ---------------------------------------------------------------------------
# Editor session
# ---------------------------------------------------------------------------


class EditorSession:
    """Start and prepare the paint program.

    Used as a context manager, the editor is terminated if the block raises
    and left open (showing the painting) otherwise.

    Parameters
    ----------
    config : PainterConfig
        Editor command, hotkeys, tool buttons and swatch grid.
    gui : module-like, optional
        ``pyautogui`` or a compatible stand-in.
    popen : callable, optional
        Process launcher, ``subprocess.Popen`` by default.
    sleep : callable, optional
        Used by :meth:`wait_until_ready`, ``time.sleep`` by default.
    """

    def __init__(
        self,
        config: PainterConfig,
        gui: Any = None,
        popen: Callable[..., Any] = subprocess.Popen,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._cfg = config
        self._gui = gui or _default_gui()
        self._popen = popen
        self._sleep = sleep
        self._proc: Any = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def __enter__(self) -> EditorSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def launch(self) -> None:
        """Start the editor process and wait for its window."""
        cmd = list(self._cfg.editor.command)
        logger.info("Launching editor: %s", " ".join(cmd))
        self._proc = self._popen(cmd)
        self.wait_until_ready()

    def wait_until_ready(self, seconds: float | None = None) -> None:
        """Block for the configured startup time (or *seconds*)."""
        wait = self._cfg.editor.startup_wait_s if seconds is None else seconds
        if wait > 0:
            self._sleep(wait)

    def close(self) -> None:
        """Terminate the editor process if this session started it."""
        if self.running:
            logger.info("Closing editor")
            self._proc.terminate()
        self._proc = None

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------

    def maximize(self) -> None:
        self._gui.hotkey(*self._cfg.editor.maximize_hotkey)

    def resize_canvas(self, width: int, height: int) -> None:
        """Set the canvas size through the attributes dialog.

        Raises
        ------
        ValueError
            If either dimension is < 1.
        """
        if width < 1 or height < 1:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        logger.info("Resizing canvas to %dx%d", width, height)
        self._gui.hotkey(*self._cfg.editor.attributes_hotkey)
        self._gui.write(str(width))
        self._gui.press("tab")
        self._gui.write(str(height))
        self._gui.press("enter")

    def choose_filled_rectangle(self) -> None:
        tool = self._cfg.editor.rectangle_tool
        style = self._cfg.editor.filled_style
        self._gui.click(tool.x, tool.y)
        self._gui.click(style.x, style.y)

    def sample_palette(self) -> Palette:
        """Read every swatch of the configured grid off the screen.

        Swatches are read column-major.  A color seen twice keeps its first
        position (``on_duplicate: keep_first``) or fails
        (``on_duplicate: error``).

        Raises
        ------
        DuplicateColor
            On a repeated color with ``on_duplicate: error``.
        """
        grid = self._cfg.palette
        positions = grid_positions(grid.origin, grid.spacing_px, grid.columns, grid.rows)
        colors = [Color.from_rgb(self._gui.pixel(p.x, p.y)[:3]) for p in positions]
        palette = Palette.from_grid(
            colors,
            grid.origin,
            grid.spacing_px,
            grid.columns,
            grid.rows,
            on_duplicate=grid.on_duplicate,
        )
        logger.info("Sampled %d distinct colors from %d swatches", len(palette), len(positions))
        return palette

    def prepare(self, width: int, height: int, palette: Palette | None = None) -> Palette:
        """Maximize, resize the canvas, sample the palette, pick the tool.

        A *palette* loaded from a snapshot skips the sampling step and is
        returned as is.
        """
        self.maximize()
        self.resize_canvas(width, height)
        if palette is None:
            palette = self.sample_palette()
        self.choose_filled_rectangle()
        return palette
