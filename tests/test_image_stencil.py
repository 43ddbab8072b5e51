"""Test the file-level stencil pipeline.

Test cases:
    - test_embed_writes_stencil_file()
    - test_embed_extract_roundtrip()
    - test_extract_legacy_wrap()
    - test_embed_extract_with_header()
    - test_extract_header_mismatch_writes_nothing()
    - test_extract_mismatched_dimensions()
    - test_analyze_counts()
    - test_analyze_export_layers()
    - test_analyze_export_leaves_no_tmp()

Run:
    pytest tests/test_image_stencil.py -v
"""

import numpy as np
import pytest
from PIL import Image

from hyperstencil.codec import stencilize
from hyperstencil.errors import StencilFormatError
from hyperstencil.image_stencil import ImageStencilPlugin


@pytest.fixture
def plugin():
    return ImageStencilPlugin()


def _read_png(path):
    with Image.open(path) as im:
        return np.array(im.convert("RGB"))


def test_embed_writes_stencil_file(plugin, png_path, rgb_array, tmp_path):
    out = tmp_path / "out.hst"
    info = plugin.embed(png_path, out, 3)

    assert info["width"] == 5 and info["height"] == 4 and info["layers"] == 3
    assert info["stencil_bytes"] == 5 * 4 * 3 * 3
    assert out.read_bytes() == stencilize(rgb_array, 3)


def test_embed_extract_roundtrip(plugin, png_path, rgb_array, tmp_path):
    stencil = tmp_path / "out.hst"
    restored = tmp_path / "restored.png"
    plugin.embed(png_path, stencil, 4)
    info = plugin.extract(stencil, restored, 4, 5, 4, legacy_wrap=False)

    assert info["legacy_wrap"] is False
    np.testing.assert_array_equal(_read_png(restored), rgb_array)


def test_extract_legacy_wrap(plugin, png_path, rgb_array, tmp_path):
    stencil = tmp_path / "out.hst"
    restored = tmp_path / "restored.png"
    plugin.embed(png_path, stencil, 1)
    plugin.extract(stencil, restored, 1, 5, 4, legacy_wrap=True)

    flat = _read_png(restored).ravel()
    expected = rgb_array.ravel()
    np.testing.assert_array_equal(flat[:-1], expected[:-1])
    assert flat[-1] == expected[0]


def test_embed_extract_with_header(plugin, png_path, rgb_array, tmp_path):
    stencil = tmp_path / "out.hst"
    restored = tmp_path / "restored.png"
    info = plugin.embed(png_path, stencil, 2, header=True)

    assert stencil.read_bytes()[:8] == b"HSTENCIL"
    assert info["stencil_bytes"] == 24 + 5 * 4 * 3 * 2

    plugin.extract(stencil, restored, 2, 5, 4, header=True, legacy_wrap=False)
    np.testing.assert_array_equal(_read_png(restored), rgb_array)


def test_extract_header_mismatch_writes_nothing(plugin, png_path, tmp_path):
    stencil = tmp_path / "out.hst"
    restored = tmp_path / "restored.png"
    plugin.embed(png_path, stencil, 2, header=True)

    with pytest.raises(StencilFormatError):
        plugin.extract(stencil, restored, 3, 5, 4, header=True)
    assert not restored.exists()


def test_extract_mismatched_dimensions(plugin, png_path, tmp_path):
    stencil = tmp_path / "out.hst"
    restored = tmp_path / "restored.png"
    plugin.embed(png_path, stencil, 2)

    info = plugin.extract(stencil, restored, 2, 7, 3, legacy_wrap=False)
    assert (info["width"], info["height"]) == (7, 3)
    assert _read_png(restored).shape == (3, 7, 3)


def test_analyze_counts(plugin, tmp_path):
    arr = np.array([[[10, 130, 250], [0, 64, 200]],
                    [[99, 5, 180], [33, 250, 1]]], dtype=np.uint8)
    path = tmp_path / "sample.png"
    Image.fromarray(arr).save(path)

    report = plugin.analyze(path, 4)
    assert report["ranges"] == [[0, 63], [64, 127], [128, 191], [192, 255]]
    assert report["counts"] == {
        "R": [3, 1, 0, 0],
        "G": [1, 1, 1, 1],
        "B": [1, 0, 1, 2],
    }
    assert "exported" not in report


def test_analyze_export_layers(plugin, png_path, rgb_array, tmp_path):
    export_dir = tmp_path / "layers"
    report = plugin.analyze(png_path, 3, export_dir=export_dir)

    assert len(report["exported"]) == 3
    planes = [_read_png(export_dir / f"layer_{i}.png").astype(int) for i in range(3)]
    # every byte lives in exactly one layer image
    np.testing.assert_array_equal(sum(planes), rgb_array.astype(int))


def test_analyze_export_leaves_no_tmp(plugin, png_path, tmp_path):
    export_dir = tmp_path / "layers"
    plugin.analyze(png_path, 2, export_dir=export_dir)
    assert sorted(p.name for p in export_dir.iterdir()) == ["layer_0.png", "layer_1.png"]
