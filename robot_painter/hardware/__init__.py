"""Execution boundary: executor, desktop backend, virtual canvas.

``desktop`` imports pyautogui lazily, so importing this package does not
require a display.
"""

from robot_painter.hardware.desktop import (
    DesktopInjector,
    DesktopPointer,
    EditorSession,
    screen_bounds,
)
from robot_painter.hardware.executor import (
    ExecutorProgress,
    ExecutorState,
    InjectionAborted,
    InputInjector,
    PaintExecutor,
    RunOutcome,
    RunResult,
)
from robot_painter.hardware.simulator import VirtualCanvas

__all__ = [
    "DesktopInjector",
    "DesktopPointer",
    "EditorSession",
    "ExecutorProgress",
    "ExecutorState",
    "InjectionAborted",
    "InputInjector",
    "PaintExecutor",
    "RunOutcome",
    "RunResult",
    "VirtualCanvas",
    "screen_bounds",
]
