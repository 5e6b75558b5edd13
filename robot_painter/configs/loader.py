"""Configuration loader for the painter.

Loads and validates ``painter.yaml`` into typed, frozen dataclasses.  Screen
layout (canvas origin, swatch grid, tool buttons), scan parameters and input
pacing all come from the config -- nothing is hardcoded in the planner.

Usage::

    from robot_painter.configs.loader import load_config
    cfg = load_config()                        # default path
    cfg = load_config("/custom/painter.yaml")  # explicit path
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from painter_utils.fs import load_yaml
from robot_painter.planner.scan import SurfaceBounds
from robot_painter.stroke_ir.operations import Color, Position

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "painter.yaml"
DEFAULT_PALETTE_PATH = Path(__file__).parent / "palette_default.yaml"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CanvasConfig:
    """Where image pixel (0, 0) lands on screen."""

    origin_x: int
    origin_y: int

    @property
    def origin(self) -> Position:
        return Position(self.origin_x, self.origin_y)


@dataclass(frozen=True)
class SurfaceConfig:
    """Addressable drawing surface.  ``None`` dimensions mean "screen size"."""

    width_px: int | None
    height_px: int | None

    @property
    def is_explicit(self) -> bool:
        return self.width_px is not None and self.height_px is not None

    def bounds(self) -> SurfaceBounds | None:
        if not self.is_explicit:
            return None
        return SurfaceBounds(width=self.width_px, height=self.height_px)


@dataclass(frozen=True)
class ScanConfig:
    """Block scan parameters."""

    block_size: int


@dataclass(frozen=True)
class PaletteGridConfig:
    """Fixed swatch grid of the editor's palette.

    ``on_duplicate`` decides what happens when two sampled swatches have the
    same color: ``"keep_first"`` drops the later one, ``"error"`` fails.
    """

    origin_x: int
    origin_y: int
    spacing_px: int
    columns: int
    rows: int
    on_duplicate: str = "keep_first"

    @property
    def origin(self) -> Position:
        return Position(self.origin_x, self.origin_y)

    @property
    def size(self) -> int:
        return self.columns * self.rows


@dataclass(frozen=True)
class SlotsConfig:
    """Colors loaded in the picker at startup."""

    primary: Color
    secondary: Color


@dataclass(frozen=True)
class EditorConfig:
    """How to start and prepare the editor."""

    command: tuple[str, ...]
    startup_wait_s: float
    maximize_hotkey: tuple[str, ...]
    attributes_hotkey: tuple[str, ...]
    rectangle_tool: Position
    filled_style: Position


@dataclass(frozen=True)
class InputConfig:
    """Pointer injection pacing."""

    action_pause_s: float
    failsafe: bool


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    file: str | None
    json: bool


@dataclass(frozen=True)
class PainterConfig:
    """Complete painter configuration loaded from ``painter.yaml``."""

    canvas: CanvasConfig
    surface: SurfaceConfig
    scan: ScanConfig
    palette: PaletteGridConfig
    slots: SlotsConfig
    editor: EditorConfig
    input: InputConfig
    logging: LoggingConfig


# ---------------------------------------------------------------------------
# Internal parsing helpers
# ---------------------------------------------------------------------------


def _parse_color(label: str, raw: Any) -> Color:
    if not isinstance(raw, (list, tuple)) or len(raw) != 3:
        raise ConfigError(f"{label} must be a 3-element [r, g, b] list, got {raw!r}")
    try:
        return Color.from_rgb(raw)
    except ValueError as exc:
        raise ConfigError(f"{label}: {exc}") from exc


def _parse_point(label: str, raw: Any) -> Position:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ConfigError(f"{label} must be a 2-element [x, y] list, got {raw!r}")
    return Position(int(raw[0]), int(raw[1]))


def _parse_keys(label: str, raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)) or not raw:
        raise ConfigError(f"{label} must be a non-empty list of key names")
    return tuple(str(k) for k in raw)


def _optional_int(raw: Any) -> int | None:
    return None if raw is None else int(raw)


def _validate_config(cfg: PainterConfig) -> None:
    """Validate cross-field consistency.

    Raises
    ------
    ConfigError
        On any invalid combination.
    """
    if cfg.canvas.origin_x < 0 or cfg.canvas.origin_y < 0:
        raise ConfigError(
            f"Canvas origin must be non-negative, got "
            f"({cfg.canvas.origin_x}, {cfg.canvas.origin_y})"
        )

    s = cfg.surface
    if (s.width_px is None) != (s.height_px is None):
        raise ConfigError(
            "surface.width_px and surface.height_px must both be set or both null"
        )
    if s.is_explicit:
        if s.width_px <= cfg.canvas.origin_x or s.height_px <= cfg.canvas.origin_y:
            raise ConfigError(
                f"Surface {s.width_px}x{s.height_px} leaves no room past the "
                f"canvas origin ({cfg.canvas.origin_x}, {cfg.canvas.origin_y})"
            )

    if cfg.scan.block_size < 1:
        raise ConfigError(f"scan.block_size must be >= 1, got {cfg.scan.block_size}")

    p = cfg.palette
    if p.columns < 1 or p.rows < 1:
        raise ConfigError(f"Palette grid must be at least 1x1, got {p.columns}x{p.rows}")
    if p.spacing_px < 1:
        raise ConfigError(f"palette.spacing_px must be >= 1, got {p.spacing_px}")
    if p.on_duplicate not in ("keep_first", "error"):
        raise ConfigError(
            f"palette.on_duplicate must be 'keep_first' or 'error', "
            f"got '{p.on_duplicate}'"
        )

    if cfg.editor.startup_wait_s < 0:
        raise ConfigError(
            f"editor.startup_wait_s must be non-negative, got {cfg.editor.startup_wait_s}"
        )
    if not cfg.editor.command:
        raise ConfigError("editor.command must not be empty")

    if cfg.input.action_pause_s < 0:
        raise ConfigError(
            f"input.action_pause_s must be non-negative, got {cfg.input.action_pause_s}"
        )

    if cfg.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"Unknown logging.level '{cfg.logging.level}'")

    if cfg.slots.primary == cfg.slots.secondary:
        logger.warning(
            "Both picker slots start as %s; the first miss will evict the secondary slot",
            cfg.slots.primary.hex,
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> PainterConfig:
    """Load and validate painter configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``painter.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    PainterConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data: dict[str, Any] = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    try:
        # -- canvas ---------------------------------------------------------
        cv = data["canvas"]
        canvas = CanvasConfig(
            origin_x=int(cv["origin_x"]),
            origin_y=int(cv["origin_y"]),
        )

        # -- surface (optional) ---------------------------------------------
        sf = data.get("surface") or {}
        surface = SurfaceConfig(
            width_px=_optional_int(sf.get("width_px")),
            height_px=_optional_int(sf.get("height_px")),
        )

        # -- scan -----------------------------------------------------------
        sc = data.get("scan") or {}
        scan = ScanConfig(block_size=int(sc.get("block_size", 5)))

        # -- palette grid ---------------------------------------------------
        pg = data["palette"]
        palette = PaletteGridConfig(
            origin_x=int(pg["origin_x"]),
            origin_y=int(pg["origin_y"]),
            spacing_px=int(pg["spacing_px"]),
            columns=int(pg["columns"]),
            rows=int(pg["rows"]),
            on_duplicate=str(pg.get("on_duplicate", "keep_first")),
        )

        # -- slots ----------------------------------------------------------
        sl = data.get("slots") or {}
        slots = SlotsConfig(
            primary=_parse_color("slots.primary", sl.get("primary", [0, 0, 0])),
            secondary=_parse_color(
                "slots.secondary", sl.get("secondary", [255, 255, 255])
            ),
        )

        # -- editor ---------------------------------------------------------
        ed = data["editor"]
        editor = EditorConfig(
            command=_parse_keys("editor.command", ed["command"]),
            startup_wait_s=float(ed.get("startup_wait_s", 1.0)),
            maximize_hotkey=_parse_keys(
                "editor.maximize_hotkey", ed.get("maximize_hotkey", ["alt", "space", "m"])
            ),
            attributes_hotkey=_parse_keys(
                "editor.attributes_hotkey", ed.get("attributes_hotkey", ["ctrl", "e"])
            ),
            rectangle_tool=_parse_point("editor.rectangle_tool", ed["rectangle_tool"]),
            filled_style=_parse_point("editor.filled_style", ed["filled_style"]),
        )

        # -- input ----------------------------------------------------------
        ip = data.get("input") or {}
        input_cfg = InputConfig(
            action_pause_s=float(ip.get("action_pause_s", 0.001)),
            failsafe=bool(ip.get("failsafe", True)),
        )

        # -- logging --------------------------------------------------------
        lg = data.get("logging") or {}
        logging_cfg = LoggingConfig(
            level=str(lg.get("level", "INFO")),
            file=lg.get("file"),
            json=bool(lg.get("json", False)),
        )

        config = PainterConfig(
            canvas=canvas,
            surface=surface,
            scan=scan,
            palette=palette,
            slots=slots,
            editor=editor,
            input=input_cfg,
            logging=logging_cfg,
        )

        _validate_config(config)
        logger.info("Configuration loaded successfully")
        return config

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc
