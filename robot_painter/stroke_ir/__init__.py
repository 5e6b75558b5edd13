"""
Stroke Intermediate Representation module.

Defines colors, positions, picker slots and the draw commands as immutable
dataclasses.  This vocabulary is the contract between the scan converter
and the execution boundary.
"""

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
    paint_blocks,
    slot_switches,
    summarize,
)

__all__ = [
    "BLACK",
    "ORIGIN",
    "WHITE",
    "Color",
    "DrawCommand",
    "PaintBlock",
    "Position",
    "SelectSlot",
    "Slot",
    "paint_blocks",
    "slot_switches",
    "summarize",
]
