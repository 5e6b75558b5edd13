"""File helpers for palette snapshots, configs and preview images.

Every writer goes through :func:`replacing`, which hands out a temporary
sibling of the target and moves it into place only once the write has
finished.  A crashed or interrupted run therefore leaves the previous
snapshot or preview untouched.

Usage:
    from painter_utils import fs
    fs.save_image_atomic(canvas.to_array(), "out/preview.png")
    fs.dump_yaml_atomic(snapshot, "out/palette.yaml")
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Any, Iterator, Union

import numpy as np
import yaml
from PIL import Image

PathLike = Union[str, Path]


def ensure_dir(p: PathLike) -> Path:
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


@contextlib.contextmanager
def replacing(path: PathLike) -> Iterator[Path]:
    """Yield a temporary path that replaces *path* when the block exits cleanly.

    The temporary file keeps the target's suffix so format-sniffing writers
    (Pillow) pick the right encoder.  If the block raises, the temporary is
    removed and the exception propagates.

    Examples
    --------
    >>> with replacing("palette.yaml") as tmp:
    ...     tmp.write_text("schema: palette.v1\\n")
    """
    target = Path(path)
    ensure_dir(target.parent)
    fd, name = tempfile.mkstemp(
        dir=target.parent, prefix=f".{target.stem}.", suffix=f".tmp{target.suffix}"
    )
    os.close(fd)
    tmp = Path(name)
    try:
        yield tmp
        os.replace(tmp, target)
    finally:
        if tmp.exists():
            tmp.unlink()


def write_bytes_atomic(path: PathLike, data: bytes) -> None:
    with replacing(path) as tmp:
        with open(tmp, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())


def write_text_atomic(path: PathLike, text: str, encoding: str = "utf-8") -> None:
    write_bytes_atomic(path, text.encode(encoding))


def save_image_atomic(pixels: np.ndarray, path: PathLike, **pil_kwargs: Any) -> None:
    """Write an ``(H, W, 3)`` or ``(H, W)`` array as an image file.

    Parameters
    ----------
    pixels : np.ndarray
        Pixel data.  Anything other than uint8 is clipped to [0, 255].
    path : str or Path
        Target; the extension selects the format.
    **pil_kwargs
        Passed through to ``PIL.Image.Image.save``.
    """
    if pixels.dtype != np.uint8:
        pixels = np.clip(pixels, 0, 255).astype(np.uint8)
    with replacing(path) as tmp:
        Image.fromarray(pixels).save(tmp, **pil_kwargs)


def dump_yaml_atomic(obj: Any, path: PathLike) -> None:
    """Write *obj* as block-style YAML, keeping mapping order."""
    text = yaml.safe_dump(obj, default_flow_style=False, sort_keys=False, allow_unicode=True)
    write_text_atomic(path, text)


def load_yaml(path: PathLike) -> Any:
    """Parse a YAML file with ``safe_load``.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    yaml.YAMLError
        If the document is malformed.
    """
    with Path(path).open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)
