"""Cooperative cancellation by pointer interference.

The pointer is a single shared resource.  Between two blocks it should rest
exactly where this system's last stroke released it; if it is anywhere else
when the next block is polled, someone else moved it and the run stops.

``CancellationMonitor`` is the pure comparator.  ``PointerWatch`` binds it
to a sensor and is the only thing the scan converter polls, so the scan
loop sees a ``Decision`` and never a raw position.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Protocol

from robot_painter.stroke_ir.operations import Position

logger = logging.getLogger(__name__)


class Decision(Enum):
    """Outcome of a cancellation poll."""

    CONTINUE = auto()
    ABORT = auto()


class PointerSensor(Protocol):
    """Reads the current pointer position (screen pixels)."""

    def current_position(self) -> Position: ...


class CancellationMonitor:
    """Compare observed pointer positions against the expected one."""

    def __init__(self) -> None:
        self._last: Position | None = None

    @property
    def last_position(self) -> Position | None:
        return self._last

    def check_and_update(self, current: Position) -> Decision:
        """Record a baseline on first call; afterwards detect movement.

        Returns
        -------
        Decision
            ``ABORT`` if *current* differs from the last recorded position.
        """
        if self._last is None:
            self._last = current
            return Decision.CONTINUE
        if current != self._last:
            logger.warning(
                "Pointer moved externally: expected %s, found %s",
                self._last.as_tuple(),
                current.as_tuple(),
            )
            return Decision.ABORT
        return Decision.CONTINUE

    def record(self, position: Position) -> None:
        """Note where this system's own stroke leaves the pointer."""
        self._last = position

    def reset(self) -> None:
        self._last = None


class PointerWatch:
    """Poll a :class:`PointerSensor` through a :class:`CancellationMonitor`.

    Parameters
    ----------
    sensor : PointerSensor
        Supplied by the execution boundary.
    monitor : CancellationMonitor | None
        Defaults to a fresh monitor.
    """

    def __init__(
        self,
        sensor: PointerSensor,
        monitor: CancellationMonitor | None = None,
    ) -> None:
        self._sensor = sensor
        self._monitor = monitor or CancellationMonitor()

    @property
    def monitor(self) -> CancellationMonitor:
        return self._monitor

    def poll(self) -> Decision:
        return self._monitor.check_and_update(self._sensor.current_position())

    def expect(self, position: Position) -> None:
        self._monitor.record(position)

    def reset(self) -> None:
        self._monitor.reset()
