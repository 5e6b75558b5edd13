"""YAML schema validation for palette snapshots.

A palette snapshot records the swatch colors sampled off screen together
with their click positions, so a later run can skip sampling:

    schema: palette.v1
    source: screen
    entries:
      - rgb: [0, 0, 0]
        position: [95, 55]
      - rgb: [255, 255, 255]
        position: [95, 71]

Validation uses pydantic and fails fast with the offending entry index.

Usage:
    from painter_utils import validators
    snapshot = validators.load_palette_file("palette.yaml")
    pairs = snapshot.to_pairs()
"""

from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


# ============================================================================
# PALETTE SCHEMA V1
# ============================================================================

class PaletteEntryV1(BaseModel):
    """One swatch: RGB color and screen click position."""
    rgb: Tuple[int, int, int] = Field(..., description="Swatch color, each channel 0-255")
    position: Tuple[int, int] = Field(..., description="Click point (x, y) in screen pixels")

    @field_validator('rgb')
    @classmethod
    def validate_rgb(cls, v: Tuple[int, int, int]) -> Tuple[int, int, int]:
        for channel in v:
            if not 0 <= channel <= 255:
                raise ValueError(f"RGB channels must be in [0, 255], got {list(v)}")
        return v

    @field_validator('position')
    @classmethod
    def validate_position(cls, v: Tuple[int, int]) -> Tuple[int, int]:
        if v[0] < 0 or v[1] < 0:
            raise ValueError(f"Swatch position must be non-negative, got {list(v)}")
        return v


class PaletteFileV1(BaseModel):
    """Palette snapshot file (palette.v1 schema)."""
    schema_version: str = Field("palette.v1", alias="schema")
    source: str = Field("screen", description="Where the colors came from")
    entries: List[PaletteEntryV1] = Field(..., min_length=1)

    model_config = {"populate_by_name": True}

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "palette.v1":
            raise ValueError(f"Expected schema 'palette.v1', got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_unique_colors(self) -> 'PaletteFileV1':
        seen: Dict[Tuple[int, int, int], int] = {}
        for idx, entry in enumerate(self.entries):
            if entry.rgb in seen:
                raise ValueError(
                    f"Entry {idx} repeats color {list(entry.rgb)} "
                    f"from entry {seen[entry.rgb]}"
                )
            seen[entry.rgb] = idx
        return self

    def to_pairs(self) -> List[Tuple[Tuple[int, int, int], Tuple[int, int]]]:
        """Entries as ``((r, g, b), (x, y))`` tuples, file order."""
        return [(e.rgb, e.position) for e in self.entries]

    def to_yaml_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema_version,
            "source": self.source,
            "entries": [
                {"rgb": list(e.rgb), "position": list(e.position)}
                for e in self.entries
            ],
        }


# ============================================================================
# PUBLIC API
# ============================================================================

def load_palette_file(path: Union[str, Path]) -> PaletteFileV1:
    """Load and validate a palette snapshot from YAML.

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Palette file not found: {path}")

    try:
        data = fs.load_yaml(path)
    except yaml.YAMLError as e:
        raise ValueError(f"Palette file {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Palette file {path} must contain a mapping")
    try:
        return PaletteFileV1(**data)
    except Exception as e:
        raise ValueError(f"Palette file validation failed at {path}: {e}") from e


def save_palette_file(
    pairs: Sequence[Tuple[Sequence[int], Sequence[int]]],
    path: Union[str, Path],
    source: str = "screen",
) -> PaletteFileV1:
    """Validate ``(rgb, position)`` pairs and write them atomically."""
    from . import fs

    snapshot = PaletteFileV1(
        schema="palette.v1",
        source=source,
        entries=[
            PaletteEntryV1(rgb=tuple(rgb), position=tuple(pos))
            for rgb, pos in pairs
        ],
    )
    fs.dump_yaml_atomic(snapshot.to_yaml_dict(), path)
    return snapshot
