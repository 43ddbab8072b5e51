# partition.py
# Splits the byte domain [0, 255] into contiguous value ranges, one per layer.

import numpy as np

from hyperstencil.config import BYTE_VALUES


def layer_ranges(num_layers: int):
    """
    Closed [lo, hi] range of every layer for a given layer count.
    Ranges are BYTE_VALUES // num_layers wide; the last layer also takes
    the remainder so the ranges cover [0, 255] without gaps or overlaps.
    """
    if num_layers < 1:
        raise ValueError(f"layer count must be >= 1, got {num_layers}")

    width = BYTE_VALUES // num_layers
    remainder = BYTE_VALUES % num_layers

    ranges = []
    for layer in range(num_layers):
        lo = layer * width
        hi = lo + width - 1
        if layer == num_layers - 1:
            hi += remainder
        ranges.append((lo, hi))
    return ranges


def layer_of(value: int, num_layers: int) -> int:
    """Index of the layer whose range contains value."""
    if num_layers < 1:
        raise ValueError(f"layer count must be >= 1, got {num_layers}")

    width = BYTE_VALUES // num_layers
    # more layers than byte values: every range but the last is empty
    if width == 0:
        return num_layers - 1
    return min(value // width, num_layers - 1)


def layer_lookup(num_layers: int) -> np.ndarray:
    """
    Precomputed layer index for every byte value, shape (256,).
    Indexing it with a uint8 array maps each byte to its layer in one step.
    """
    table = np.empty(BYTE_VALUES, dtype=np.int64)
    for layer, (lo, hi) in enumerate(layer_ranges(num_layers)):
        if hi >= lo:
            table[lo:hi + 1] = layer
    return table
