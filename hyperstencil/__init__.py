"""
Hyperstencil
============

A bespoke multichannel raw image utility. Splits every RGB byte of an
image across a number of value-range layers ("stencil format") and
rebuilds the image by summing the layers back together.
"""

from hyperstencil.errors import (
    HyperstencilError, StencilIOError, StencilImageError, StencilFormatError,
)
from hyperstencil.partition import layer_ranges, layer_of, layer_lookup
from hyperstencil.codec import stencilize, destencilize, clamp_layers

__version__ = "0.1.0"
__all__ = [
    'stencilize', 'destencilize', 'clamp_layers',
    'layer_ranges', 'layer_of', 'layer_lookup',
    'HyperstencilError', 'StencilIOError', 'StencilImageError', 'StencilFormatError',
]
