"""
Robot Painter Package.

Reproduces a raster image inside an external paint program by driving its
input surface only: pointer clicks on palette swatches and press-drag-release
strokes on the canvas, with the editor's two-slot color picker (left button =
primary, right button = secondary).

Subpackages:
    stroke_ir: Immutable vocabulary of colors, positions and draw commands
    palette: Palette catalog and nearest-color matching
    planner: Slot cache, cancellation monitor and block scan converter
    hardware: Execution boundary (executor, desktop backend, virtual canvas)
    configs: Painter configuration loading and validation

Layering: ``hardware`` and ``scripts`` depend on ``planner``, which depends
on ``palette`` and ``stroke_ir``.  Nothing below ``hardware`` imports it.
"""

__version__ = "1.0.0"

__all__ = ["stroke_ir", "palette", "planner", "hardware", "configs"]
