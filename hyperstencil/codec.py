# codec.py
# Stencil transform: RGB bytes -> one byte per layer per colour byte, and back.

import logging
import struct
from dataclasses import dataclass

import numpy as np

from hyperstencil.config import CHANNELS, HEADER_FORMAT, HEADER_MAGIC, HEADER_VERSION
from hyperstencil.errors import StencilFormatError
from hyperstencil.partition import layer_lookup

log = logging.getLogger(__name__)

HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 24 bytes


@dataclass(eq=False)
class RGBImage:
    """
    Decoded raster, row-major, top-to-bottom, left-to-right.

    pixels : uint8 array of shape (height, width, 3)
    """
    width: int
    height: int
    pixels: np.ndarray

    @classmethod
    def from_bytes(cls, data, width: int, height: int) -> 'RGBImage':
        arr = np.frombuffer(bytes(data), dtype=np.uint8)
        if arr.size != width * height * CHANNELS:
            raise ValueError(
                f"expected {width * height * CHANNELS} bytes for {width}x{height} RGB, got {arr.size}"
            )
        return cls(width=width, height=height, pixels=arr.reshape(height, width, CHANNELS))

    def tobytes(self) -> bytes:
        return np.ascontiguousarray(self.pixels[..., :CHANNELS], dtype=np.uint8).tobytes()


def clamp_layers(num_layers) -> int:
    """A layer count of 0 (or less) is treated as 1."""
    return max(1, int(num_layers))


def _color_bytes(image) -> np.ndarray:
    if isinstance(image, RGBImage):
        image = image.pixels
    arr = np.asarray(image, dtype=np.uint8)
    if arr.ndim == 1:
        if arr.size % CHANNELS:
            raise ValueError(f"flat RGB data length {arr.size} is not a multiple of {CHANNELS}")
        return arr
    if arr.ndim != 3 or arr.shape[-1] < CHANNELS:
        raise ValueError(f"expected an (H, W, 3) or (H, W, 4) pixel array, got shape {arr.shape}")
    # drop alpha, keep R,G,B order
    return np.ascontiguousarray(arr[..., :CHANNELS]).ravel()


# ---------------- ENCODE ----------------

def stencilize(image, num_layers: int) -> bytes:
    """
    Expand every colour byte into num_layers bytes.

    Layout: for each pixel, for each of R,G,B, for each layer 0..L-1 one
    output byte: the original byte when it lies in that layer's range,
    else 0. Output length is width * height * 3 * L.
    """
    num_layers = clamp_layers(num_layers)
    flat = _color_bytes(image)
    table = layer_lookup(num_layers)

    out = np.zeros((flat.size, num_layers), dtype=np.uint8)
    out[np.arange(flat.size), table[flat]] = flat

    log.debug("stencilized %d colour bytes into %d layers", flat.size, num_layers)
    return out.tobytes()


# ---------------- DECODE ----------------

def destencilize(buffer, width: int, height: int, num_layers: int,
                 legacy_wrap: bool = False) -> bytes:
    """
    Rebuild width * height * 3 RGB bytes by summing the layer bytes of
    every colour byte (saturating at 255).

    Source offsets are taken modulo the buffer length, so a buffer that
    does not match width/height/layers still yields a full-size output.
    legacy_wrap uses (buffer length - 1) as the modulus, which reproduces
    stencil tools that wrapped the final offset to 0.
    """
    num_layers = clamp_layers(num_layers)
    out_len = width * height * CHANNELS

    src = np.frombuffer(bytes(buffer), dtype=np.uint8)
    if src.size == 0:
        log.debug("empty stencil buffer, output is all zero")
        return bytes(out_len)

    modulus = src.size - 1 if legacy_wrap else src.size
    modulus = max(modulus, 1)

    expected = out_len * num_layers
    if src.size != expected:
        log.debug("stencil buffer is %d bytes, expected %d; wrapping offsets", src.size, expected)

    base = np.arange(out_len, dtype=np.int64) * num_layers
    acc = np.zeros(out_len, dtype=np.int64)
    for layer in range(num_layers):
        acc += src[(base + layer) % modulus]

    return np.minimum(acc, 255).astype(np.uint8).tobytes()


# ---------------- HEADER ----------------

def pack_header(num_layers: int, width: int, height: int) -> bytes:
    return struct.pack(HEADER_FORMAT, HEADER_MAGIC, HEADER_VERSION, 0,
                       num_layers, width, height)


def unpack_header(data):
    """Split a headed stencil stream. Returns ((layers, width, height), payload)."""
    data = bytes(data)
    if len(data) < HEADER_SIZE:
        raise StencilFormatError(f"stencil header needs {HEADER_SIZE} bytes, got {len(data)}")

    magic, version, _reserved, layers, width, height = struct.unpack(HEADER_FORMAT, data[:HEADER_SIZE])
    if magic != HEADER_MAGIC:
        raise StencilFormatError(f"invalid stencil magic: {magic!r}")
    if version != HEADER_VERSION:
        raise StencilFormatError(f"unsupported stencil header version {version}")

    return (layers, width, height), data[HEADER_SIZE:]


def check_header(fields, num_layers: int, width: int, height: int) -> None:
    layers, w, h = fields
    if (layers, w, h) != (num_layers, width, height):
        raise StencilFormatError(
            f"stencil header says layers={layers} width={w} height={h}, "
            f"but layers={num_layers} width={width} height={height} were given"
        )
