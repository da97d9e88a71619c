from __future__ import annotations

import numpy as np
import pytest

from pixie_stitch.color.palette_loader import DMC
from pixie_stitch.color.palette_matcher import quantize_image
from pixie_stitch.core.color_mapping import (
    build_color_mapping,
    colorize_stitch_tiles,
    extract_colors_and_counts,
    hls_sort_key,
    total_stitches,
)
from pixie_stitch.core.types import PixelColor
from tests.utils import bundled_resources, make_gradient_image, make_rgba_image


def _mapping(image):
    resources = bundled_resources()
    return build_color_mapping(
        image,
        DMC,
        resources.glyph_symbols,
        resources.alphanumeric_symbols,
        resources.stitch_tiles,
        resources.stitch_luminance_tiles,
    )


def test_counts_sum_to_opaque_pixels():
    image = quantize_image(make_gradient_image(30, 7), DMC)
    image[0, :5, 3] = 0
    counts = extract_colors_and_counts(image)
    assert sum(counts.values()) == int((image[..., 3] != 0).sum())


def test_order_is_hue_then_lightness_then_saturation():
    rng = np.random.default_rng(5)
    image = rng.integers(0, 256, size=(12, 12, 4), dtype=np.uint8)
    image[..., 3] = 255
    keys = [hls_sort_key(color) for color in extract_colors_and_counts(image)]
    assert keys == sorted(keys)


def test_transparent_pixels_are_not_counted():
    image = make_rgba_image([[(1, 2, 3, 0), (1, 2, 3, 0)], [(7, 7, 7), (7, 7, 7)]])
    assert extract_colors_and_counts(image) == {PixelColor(7, 7, 7): 2}


def test_two_by_two_scenario_maps_three_colors():
    image = make_rgba_image(
        [
            [(0, 0, 0), (255, 255, 255)],
            [(190, 45, 45), (0, 0, 0, 0)],
        ]
    )
    mapping = _mapping(quantize_image(image, DMC))
    assert len(mapping) == 3
    assert total_stitches(mapping) == 3
    assert {info.thread_id for info in mapping.values()} >= {"310", "B5200"}
    for info in mapping.values():
        assert info.count == 1
        assert len(info.stitches) == 3


def test_mapping_is_read_only():
    mapping = _mapping(quantize_image(make_gradient_image(10, 2, levels=3), DMC))
    with pytest.raises(TypeError):
        mapping[PixelColor(1, 1, 1)] = None  # type: ignore[index]


def test_symbols_follow_mapping_order():
    resources = bundled_resources()
    mapping = _mapping(quantize_image(make_gradient_image(24, 3, levels=6), DMC))
    for index, info in enumerate(mapping.values()):
        assert info.symbol is resources.glyph_symbols[index]
        assert info.symbol_alphanumeric is resources.alphanumeric_symbols[index]


def test_colored_stitches_keep_the_stitch_shape():
    resources = bundled_resources()
    tiles = colorize_stitch_tiles(
        PixelColor(200, 30, 30), resources.stitch_tiles, resources.stitch_luminance_tiles
    )
    assert len(tiles) == len(resources.stitch_tiles)
    for tinted, base in zip(tiles, resources.stitch_tiles):
        assert tinted.shape == base.shape
        # nothing is drawn outside the base stitch
        assert np.all(tinted[base[..., 3] == 0] == 0)
        assert np.all(tinted[..., :3] <= tinted[..., 3:4] + 1e-5)
    assert colorize_stitch_tiles(PixelColor(0, 0, 0, 0), resources.stitch_tiles, resources.stitch_luminance_tiles) == ()
