#!/usr/bin/env python3
"""
Paint Image Script.

Reproduce an image in the paint program, block by block, or preview the
result on a virtual canvas.

Usage:
    python -m robot_painter.scripts.paint_image photo.png --dry-run
    python -m robot_painter.scripts.paint_image photo.png --dry-run --preview out.png
    python -m robot_painter.scripts.paint_image photo.png --block-size 3
    python -m robot_painter.scripts.paint_image photo.png --save-palette palette.yaml
    python -m robot_painter.scripts.paint_image photo.png --no-launch --palette-file palette.yaml

Moving the mouse while painting stops the run before the next block.

Exit codes:
    0  painting completed
    1  error (bad config, image, palette or surface)
    2  aborted by pointer movement or cancelled
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from painter_utils.logging_config import install_excepthook, log_context, setup_logging
from painter_utils.validators import load_palette_file, save_palette_file
from robot_painter.configs.loader import (
    DEFAULT_PALETTE_PATH,
    ConfigError,
    PainterConfig,
    load_config,
)
from robot_painter.hardware.executor import (
    ExecutorProgress,
    PaintExecutor,
    RunOutcome,
    RunResult,
)
from robot_painter.palette.palette import Palette, PaletteError
from robot_painter.planner import (
    ActiveSlotCache,
    PointerWatch,
    SourceImage,
    StrokeGenerator,
    SurfaceTooSmall,
)
from robot_painter.planner.scan import check_fit
from robot_painter.stroke_ir.operations import Color, Position

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ABORTED = 2


# ---------------------------------------------------------------------------
# Palette snapshots
# ---------------------------------------------------------------------------


def load_palette(path: str | Path) -> Palette:
    """Build a :class:`Palette` from a ``palette.v1`` snapshot file."""
    snapshot = load_palette_file(path)
    palette = Palette(
        (Color.from_rgb(rgb), Position(*pos)) for rgb, pos in snapshot.to_pairs()
    )
    logger.info("Loaded %d palette colors from %s", len(palette), path)
    return palette


def save_palette(palette: Palette, path: str | Path, source: str) -> None:
    save_palette_file(
        [(e.color.as_tuple(), e.position.as_tuple()) for e in palette],
        path,
        source=source,
    )
    logger.info("Saved %d palette colors to %s", len(palette), path)


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


def _log_progress(progress: ExecutorProgress) -> None:
    total = progress.total_blocks
    done = progress.completed_blocks
    step = max(total // 10, 1)
    if done and (done % step == 0 or done == total):
        logger.info(
            "Progress: %d/%d blocks (%.0f%%), %d slot switches",
            done,
            total,
            100.0 * done / total,
            progress.slot_switches,
        )


def _slots(config: PainterConfig, palette: Palette) -> ActiveSlotCache:
    return ActiveSlotCache(
        primary=config.slots.primary,
        secondary=config.slots.secondary,
        palette=palette,
    )


def run_dry(
    config: PainterConfig,
    image: SourceImage,
    palette: Palette,
    block_size: int,
    preview: str | Path,
) -> RunResult:
    """Paint *image* on a :class:`VirtualCanvas` and save the result."""
    from robot_painter.hardware.simulator import VirtualCanvas

    surface = config.surface.bounds()
    canvas = VirtualCanvas(
        image.width,
        image.height,
        palette,
        canvas_origin=config.canvas.origin,
        primary=config.slots.primary,
        secondary=config.slots.secondary,
        surface=surface,
    )
    generator = StrokeGenerator(
        palette,
        block_size=block_size,
        canvas_origin=config.canvas.origin,
        surface=surface,
        slots=_slots(config, palette),
        watch=PointerWatch(canvas),
    )
    executor = PaintExecutor(canvas, generator)
    executor.set_progress_callback(_log_progress)

    result = executor.run(image)
    canvas.save(preview)
    return result


def run_live(
    config: PainterConfig,
    image: SourceImage,
    block_size: int,
    palette_file: str | None,
    save_palette_to: str | None,
    launch: bool,
) -> RunResult:
    """Prepare the editor and paint *image* with the real pointer."""
    from robot_painter.hardware.desktop import (
        DesktopInjector,
        DesktopPointer,
        EditorSession,
        screen_bounds,
    )

    surface = config.surface.bounds() or screen_bounds()
    logger.info("Drawing surface is %dx%d", surface.width, surface.height)
    check_fit(image.width, image.height, config.canvas.origin, surface)
    if block_size < 1:
        raise ValueError(f"Block size must be >= 1, got {block_size}")

    known = load_palette(palette_file) if palette_file else None

    with EditorSession(config) as session:
        if launch:
            session.launch()
        palette = session.prepare(image.width, image.height, palette=known)
        if save_palette_to:
            save_palette(palette, save_palette_to, source="file" if known else "screen")

        generator = StrokeGenerator(
            palette,
            block_size=block_size,
            canvas_origin=config.canvas.origin,
            surface=surface,
            slots=_slots(config, palette),
            watch=PointerWatch(DesktopPointer()),
        )
        executor = PaintExecutor(DesktopInjector(config, palette), generator)
        executor.set_progress_callback(_log_progress)
        return executor.run(image)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Paint an image in the paint program, block by block",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Move the mouse during painting to stop the run.",
    )
    parser.add_argument("image", type=str, help="Image to paint")
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path",
    )
    parser.add_argument(
        "--block-size",
        "-b",
        type=int,
        help="Block side in pixels (overrides scan.block_size)",
    )

    # Execution mode
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Paint on a virtual canvas instead of the screen",
    )
    parser.add_argument(
        "--preview",
        type=str,
        help="Dry-run output image (default: <image>.preview.png)",
    )
    parser.add_argument(
        "--no-launch",
        action="store_true",
        help="Use an already running editor instead of starting one",
    )

    # Palette
    parser.add_argument(
        "--palette-file",
        type=str,
        help="Palette snapshot to use instead of sampling the screen",
    )
    parser.add_argument(
        "--save-palette",
        type=str,
        help="Write the palette in use to this snapshot file",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides logging.level)",
    )
    parser.add_argument("--log-file", type=str, help="Also log to this file")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="JSON lines in the log file",
    )
    return parser


def _paint(args: argparse.Namespace, config: PainterConfig) -> RunResult:
    block_size = args.block_size if args.block_size is not None else config.scan.block_size
    image = SourceImage.from_file(args.image)
    if args.dry_run:
        palette = load_palette(args.palette_file or DEFAULT_PALETTE_PATH)
        if args.save_palette:
            save_palette(palette, args.save_palette, source="file")
        preview = args.preview or str(Path(args.image).with_suffix(".preview.png"))
        return run_dry(config, image, palette, block_size, preview)
    return run_live(
        config,
        image,
        block_size,
        args.palette_file,
        args.save_palette,
        launch=not args.no_launch,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as exc:
        setup_logging(args.log_level or "INFO", args.log_file)
        logger.error("Error loading config: %s", exc)
        return EXIT_ERROR

    setup_logging(
        args.log_level or config.logging.level,
        args.log_file or config.logging.file,
        json=args.json_logs or config.logging.json,
        quiet_libs=["PIL"],
        context={"app": "paint_image"},
    )
    install_excepthook()

    mode = "dry-run" if args.dry_run else "live"
    try:
        with log_context(image=Path(args.image).name, mode=mode):
            result = _paint(args, config)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return EXIT_ABORTED
    except (
        FileNotFoundError,
        ValueError,
        PaletteError,
        SurfaceTooSmall,
        OSError,
        RuntimeError,
    ) as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return EXIT_ERROR

    if result.outcome is RunOutcome.COMPLETED:
        return EXIT_OK
    logger.warning(
        "Painting stopped (%s) after %d/%d blocks",
        result.outcome.name.lower(),
        result.painted_blocks,
        result.total_blocks,
    )
    return EXIT_ABORTED


if __name__ == "__main__":
    sys.exit(main())
