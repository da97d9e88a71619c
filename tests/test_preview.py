import numpy as np

from pixie_stitch.color.palette_loader import DMC
from pixie_stitch.color.palette_matcher import quantize_image
from pixie_stitch.core.color_mapping import build_color_mapping
from pixie_stitch.core.preview import (
    PREVIEW_MARGIN_CELLS,
    preview_filenames,
    render_preview,
    tile_background,
)
from tests.utils import bundled_resources, make_rgba_image


def _prepared(pixels):
    resources = bundled_resources()
    image = quantize_image(make_rgba_image(pixels), DMC)
    mapping = build_color_mapping(
        image,
        DMC,
        resources.glyph_symbols,
        resources.alphanumeric_symbols,
        resources.stitch_tiles,
        resources.stitch_luminance_tiles,
    )
    return image, mapping, resources


RING = [
    [(200, 40, 40), (200, 40, 40), (200, 40, 40)],
    [(200, 40, 40), (0, 0, 0, 0), (40, 40, 200)],
    [(40, 40, 200), (40, 40, 200), (40, 40, 200)],
]


def test_preview_size_includes_the_margin():
    image, mapping, resources = _prepared(RING)
    cell = resources.background_tile_8x8.shape[1] // 8
    preview = render_preview(image, mapping, resources.background_tile_8x8)
    expected = (cell * (3 + 2 * PREVIEW_MARGIN_CELLS), cell * (3 + 2 * PREVIEW_MARGIN_CELLS), 4)
    for layer in (preview.background, preview.stitches, preview.combined):
        assert layer.shape == expected
        assert layer.dtype == np.uint8


def test_stitches_only_cover_opaque_cells():
    image, mapping, resources = _prepared(RING)
    cell = resources.background_tile_8x8.shape[1] // 8
    stitches = render_preview(image, mapping, resources.background_tile_8x8).stitches
    margin = PREVIEW_MARGIN_CELLS * cell

    # the margin stays empty apart from the small stitch overhang
    assert not stitches[: margin - cell, :, 3].any()
    assert not stitches[:, : margin - cell, 3].any()
    # so does the middle of the transparent cell
    y0 = margin + cell + cell // 4
    x0 = margin + cell + cell // 4
    assert not stitches[y0 : y0 + cell // 2, x0 : x0 + cell // 2, 3].any()
    # and every opaque cell received a stitch
    centre = margin + cell // 2
    assert stitches[centre - 1 : centre + 1, centre - 1 : centre + 1, 3].any()


def test_preview_is_deterministic_for_a_seed():
    image, mapping, resources = _prepared(RING)
    first = render_preview(image, mapping, resources.background_tile_8x8, seed=7)
    second = render_preview(image, mapping, resources.background_tile_8x8, seed=7)
    assert np.array_equal(first.combined, second.combined)
    assert np.array_equal(first.stitches, second.stitches)


def test_combined_keeps_the_opaque_fabric():
    image, mapping, resources = _prepared(RING)
    preview = render_preview(image, mapping, resources.background_tile_8x8)
    assert np.all(preview.background[..., 3] == 255)
    assert np.all(preview.combined[..., 3] == 255)


def test_tile_background_repeats_and_crops():
    resources = bundled_resources()
    tile = resources.background_tile_8x8
    th, tw = tile.shape[:2]
    tiled = tile_background(tile, tw * 2 + 3, th + 1)
    assert tiled.shape[:2] == (th + 1, tw * 2 + 3)
    assert np.array_equal(tiled[:th, :tw], tile)
    assert np.array_equal(tiled[:th, tw : 2 * tw], tile)


def test_preview_filenames():
    assert preview_filenames("cat") == {
        "background": "cat_complete_background.png",
        "stitches": "cat_complete_stitches.png",
        "combined": "cat_complete.png",
    }
