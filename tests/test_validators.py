"""Test palette snapshot schema validation.

Tests for painter_utils.validators:
    - Valid snapshot loads; entries keep file order
    - Channel range, negative positions, wrong schema, duplicate colors
    - save_palette_file writes a file load_palette_file accepts

Run:
    pytest tests/test_validators.py -v
"""

import pytest
import yaml
from pydantic import ValidationError

from painter_utils import validators


def _write(path, data):
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


@pytest.fixture
def snapshot_dict():
    return {
        "schema": "palette.v1",
        "source": "screen",
        "entries": [
            {"rgb": [0, 0, 0], "position": [95, 55]},
            {"rgb": [255, 255, 255], "position": [95, 71]},
            {"rgb": [255, 0, 0], "position": [111, 55]},
        ],
    }


# ============================================================================
# SCHEMA
# ============================================================================

def test_valid_snapshot(tmp_path, snapshot_dict):
    snap = validators.load_palette_file(_write(tmp_path / "p.yaml", snapshot_dict))
    assert snap.schema_version == "palette.v1"
    assert snap.to_pairs()[0] == ((0, 0, 0), (95, 55))
    assert [p[0] for p in snap.to_pairs()] == [(0, 0, 0), (255, 255, 255), (255, 0, 0)]


def test_rgb_out_of_range():
    with pytest.raises(ValidationError, match=r"\[0, 255\]"):
        validators.PaletteEntryV1(rgb=(0, 0, 256), position=(0, 0))


def test_negative_position():
    with pytest.raises(ValidationError, match="non-negative"):
        validators.PaletteEntryV1(rgb=(0, 0, 0), position=(-1, 0))


def test_wrong_schema(tmp_path, snapshot_dict):
    snapshot_dict["schema"] = "palette.v2"
    with pytest.raises(ValueError, match="palette.v1"):
        validators.load_palette_file(_write(tmp_path / "p.yaml", snapshot_dict))


def test_duplicate_colors(tmp_path, snapshot_dict):
    snapshot_dict["entries"].append({"rgb": [0, 0, 0], "position": [111, 71]})
    with pytest.raises(ValueError, match="repeats color"):
        validators.load_palette_file(_write(tmp_path / "p.yaml", snapshot_dict))


def test_empty_entries(tmp_path, snapshot_dict):
    snapshot_dict["entries"] = []
    with pytest.raises(ValueError):
        validators.load_palette_file(_write(tmp_path / "p.yaml", snapshot_dict))


def test_non_mapping(tmp_path):
    path = tmp_path / "p.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError, match="mapping"):
        validators.load_palette_file(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        validators.load_palette_file(tmp_path / "none.yaml")


# ============================================================================
# SAVE
# ============================================================================

def test_save_then_load(tmp_path):
    pairs = [((10, 20, 30), (1, 2)), ((40, 50, 60), (3, 4))]
    path = tmp_path / "out" / "palette.yaml"

    validators.save_palette_file(pairs, path, source="test")
    snap = validators.load_palette_file(path)

    assert snap.source == "test"
    assert snap.to_pairs() == pairs
    assert path.read_text().startswith("schema: palette.v1")


def test_save_rejects_duplicates(tmp_path):
    pairs = [((1, 1, 1), (0, 0)), ((1, 1, 1), (5, 5))]
    with pytest.raises(ValidationError):
        validators.save_palette_file(pairs, tmp_path / "p.yaml")
    assert not (tmp_path / "p.yaml").exists()
