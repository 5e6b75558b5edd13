"""
Stroke planning module.

Turns a source image into an ordered stream of draw commands: nearest
palette color per block, two-slot picker cache, and cooperative
cancellation polled between blocks.
"""

from robot_painter.planner.cancellation import (
    CancellationMonitor,
    Decision,
    PointerSensor,
    PointerWatch,
)
from robot_painter.planner.scan import (
    DEFAULT_BLOCK_SIZE,
    GenerationStats,
    StrokeGenerator,
    SurfaceBounds,
    SurfaceTooSmall,
    check_fit,
)
from robot_painter.planner.slot_cache import ActiveSlotCache
from robot_painter.planner.source_image import SourceImage

__all__ = [
    "ActiveSlotCache",
    "CancellationMonitor",
    "DEFAULT_BLOCK_SIZE",
    "Decision",
    "GenerationStats",
    "PointerSensor",
    "PointerWatch",
    "SourceImage",
    "StrokeGenerator",
    "SurfaceBounds",
    "SurfaceTooSmall",
    "check_fit",
]
