"""Reading and writing the files around the stencil transform.

Provides:
    - load_image: any Pillow-readable raster -> RGBImage (alpha dropped)
    - save_image: flat RGB bytes + width/height -> image file (format from extension)
    - read_buffer / write_buffer: whole-file byte I/O for stencil files

Writes go to a temporary sibling file which is renamed over the target
only after the data is complete, so a failed run leaves no partial output.
"""

import os
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from hyperstencil.codec import RGBImage
from hyperstencil.config import CHANNELS
from hyperstencil.errors import StencilImageError, StencilIOError

PathLike = Union[str, Path]


def _atomic_write(path: Path, write) -> None:
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        write(tmp_path)
        tmp_path.replace(path)
    except BaseException:
        if tmp_path.exists():
            tmp_path.unlink()
        raise


def read_buffer(path: PathLike) -> bytes:
    path = Path(path)
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise StencilIOError(f"cannot read {path}: {e.strerror or e}") from e


def write_buffer(data: bytes, path: PathLike) -> None:
    path = Path(path)

    def write(tmp_path):
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

    try:
        _atomic_write(path, write)
    except OSError as e:
        raise StencilIOError(f"cannot write {path}: {e.strerror or e}") from e


def load_image(path: PathLike) -> RGBImage:
    path = Path(path)
    try:
        with Image.open(path) as im:
            im = im.convert("RGB")
            arr = np.array(im, dtype=np.uint8)
    except Image.DecompressionBombError as e:
        raise StencilImageError(f"refusing to decode {path}: {e}") from e
    except UnidentifiedImageError as e:
        raise StencilImageError(f"unsupported or corrupt image {path}") from e
    except (FileNotFoundError, PermissionError, IsADirectoryError) as e:
        raise StencilIOError(f"cannot read {path}: {e.strerror or e}") from e
    except (OSError, ValueError) as e:
        raise StencilImageError(f"failed to decode image {path}: {e}") from e

    h, w, _ = arr.shape
    return RGBImage(width=w, height=h, pixels=arr)


def save_image(data: bytes, width: int, height: int, path: PathLike) -> None:
    """Encode flat 8-bit RGB bytes as an image file; format follows the extension."""
    path = Path(path)
    if width <= 0 or height <= 0:
        raise StencilImageError(f"image dimensions must be positive, got {width}x{height}")
    if len(data) != width * height * CHANNELS:
        raise StencilImageError(
            f"{len(data)} bytes do not make a {width}x{height} RGB image"
        )

    arr = np.frombuffer(data, dtype=np.uint8).reshape(height, width, CHANNELS)
    img = Image.fromarray(arr)
    # Pillow picks the container from the real suffix, not from ".tmp"
    fmt = Image.registered_extensions().get(path.suffix.lower())
    if fmt is None:
        raise StencilImageError(f"unknown image format for extension {path.suffix!r}")

    try:
        _atomic_write(path, lambda tmp_path: img.save(tmp_path, format=fmt))
    except (KeyError, ValueError) as e:
        raise StencilImageError(f"failed to encode image {path}: {e}") from e
    except OSError as e:
        raise StencilIOError(f"cannot write {path}: {e.strerror or e}") from e
