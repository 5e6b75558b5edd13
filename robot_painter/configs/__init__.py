"""Painter configuration loading and validation."""

from robot_painter.configs.loader import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_PALETTE_PATH,
    CanvasConfig,
    ConfigError,
    EditorConfig,
    InputConfig,
    PainterConfig,
    PaletteGridConfig,
    ScanConfig,
    SlotsConfig,
    SurfaceConfig,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_PALETTE_PATH",
    "CanvasConfig",
    "ConfigError",
    "EditorConfig",
    "InputConfig",
    "PainterConfig",
    "PaletteGridConfig",
    "ScanConfig",
    "SlotsConfig",
    "SurfaceConfig",
    "load_config",
]
