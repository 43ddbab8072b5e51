# image_stencil.py
# File-level hyperstencil pipeline: image file <-> stencil file, plus layer analysis

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from hyperstencil import fileio
from hyperstencil.codec import (
    HEADER_SIZE, check_header, clamp_layers, destencilize, pack_header,
    stencilize, unpack_header,
)
from hyperstencil.config import CHANNELS, LEGACY_WRAP
from hyperstencil.errors import StencilIOError
from hyperstencil.partition import layer_lookup, layer_ranges

log = logging.getLogger(__name__)


class ImageStencilPlugin:
    name = "image_hyperstencil"

    # ---------------- EMBED ----------------
    def embed(self, infile, outfile, layers: int, header: bool = False):
        """Encode an image file into a stencil file."""
        layers = clamp_layers(layers)
        image = fileio.load_image(infile)
        log.info("encoding %s (%dx%d) into %d layers", infile, image.width, image.height, layers)

        data = stencilize(image, layers)
        if header:
            data = pack_header(layers, image.width, image.height) + data

        fileio.write_buffer(data, outfile)

        return {
            "outfile": str(outfile),
            "width": image.width,
            "height": image.height,
            "layers": layers,
            "header": header,
            "stencil_bytes": len(data),
        }

    # ---------------- EXTRACT ----------------
    def extract(self, infile, outfile, layers: int, width: int, height: int,
                header: bool = False, legacy_wrap: Optional[bool] = None):
        """Decode a stencil file into an RGB image file."""
        layers = clamp_layers(layers)
        if legacy_wrap is None:
            legacy_wrap = LEGACY_WRAP

        data = fileio.read_buffer(infile)
        if header:
            fields, data = unpack_header(data)
            check_header(fields, layers, width, height)

        expected = width * height * CHANNELS * layers
        if len(data) != expected:
            log.warning("%s holds %d stencil bytes, %dx%d with %d layers needs %d",
                        infile, len(data), width, height, layers, expected)

        log.info("decoding %s (%dx%d, %d layers%s)", infile, width, height, layers,
                 ", legacy wrap" if legacy_wrap else "")
        rgb = destencilize(data, width, height, layers, legacy_wrap=legacy_wrap)
        fileio.save_image(rgb, width, height, outfile)

        return {
            "outfile": str(outfile),
            "width": width,
            "height": height,
            "layers": layers,
            "stencil_bytes": len(data) + (HEADER_SIZE if header else 0),
            "legacy_wrap": legacy_wrap,
        }

    # ---------------- ANALYZE ----------------
    def analyze(self, path, layers: int, export_dir=None):
        """
        Count how many colour bytes of each channel fall into each layer.
        With export_dir, also write one PNG per layer showing only the
        bytes of that layer (layer_0.png is the darkest range).
        """
        layers = clamp_layers(layers)
        image = fileio.load_image(path)
        arr = image.pixels
        table = layer_lookup(layers)
        owner = table[arr]  # (H, W, 3) layer index of every byte

        counts = {}
        for idx, ch in enumerate(["R", "G", "B"]):
            hist = np.bincount(owner[:, :, idx].ravel(), minlength=layers)
            counts[ch] = [int(n) for n in hist]

        result = {
            "width": image.width,
            "height": image.height,
            "layers": layers,
            "ranges": [list(r) for r in layer_ranges(layers)],
            "counts": counts,
        }

        if export_dir is not None:
            export_dir = Path(export_dir)
            try:
                export_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StencilIOError(f"cannot create {export_dir}: {e.strerror or e}") from e
            files = []
            for layer in range(layers):
                plane = np.where(owner == layer, arr, 0).astype(np.uint8)
                out = export_dir / f"layer_{layer}.png"
                fileio.save_image(plane.tobytes(), image.width, image.height, out)
                files.append(str(out))
            result["exported"] = files
            log.info("exported %d layer images to %s", layers, export_dir)

        return result
