import numpy as np

from pixie_stitch.color.palette_loader import DMC
from pixie_stitch.color.palette_matcher import quantize_image
from pixie_stitch.core.color_mapping import build_color_mapping
from pixie_stitch.core.legend import (
    build_legend,
    legend_filename,
    render_legend,
    render_legend_entry,
    render_page_layout,
)
from tests.utils import bundled_resources, make_gradient_image, make_rgba_image

T = 16


def _mapping(image):
    resources = bundled_resources()
    quantized = quantize_image(image, DMC)
    return build_color_mapping(
        quantized, DMC, resources.glyph_symbols, resources.alphanumeric_symbols
    )


def _has_black_separator(sheet):
    inner = sheet[T:-T, T:-T]
    return bool(np.any(np.all(inner[..., :3] == 0, axis=(1, 2))))


def test_build_legend_rows_follow_mapping():
    image = make_rgba_image([[(0, 0, 0), (0, 0, 0)], [(255, 255, 255), (0, 0, 0, 0)]])
    mapping = _mapping(image)
    legend = build_legend(mapping)
    assert [row["code"] for row in legend] == [info.thread_id for info in mapping.values()]
    assert sum(row["count"] for row in legend) == 3
    assert abs(sum(row["percent"] for row in legend) - 100.0) < 0.05
    counts = {row["code"]: row["count"] for row in legend}
    assert counts["310"] == 2 and counts["B5200"] == 1


def test_entry_is_swatch_then_text():
    resources = bundled_resources()
    mapping = _mapping(make_rgba_image([[(0, 0, 0)]]))
    entry = render_legend_entry(resources.font, next(iter(mapping.values())))
    assert entry.shape[0] >= T
    assert entry.shape[1] > 2 * T
    # the swatch is filled with the thread color inside its black frame
    assert tuple(entry[(entry.shape[0] - T) // 2 + T // 2, 3, :3]) == (0, 0, 0)


def test_legend_is_padded_with_white():
    resources = bundled_resources()
    mapping = _mapping(make_gradient_image(12, 2, levels=4))
    sheet = render_legend(mapping, 12, 2, resources.font)
    white = np.array([255, 255, 255, 255], dtype=np.uint8)
    assert np.all(sheet[:T] == white)
    assert np.all(sheet[-T:] == white)
    assert np.all(sheet[:, :T] == white)
    assert np.all(sheet[:, -T:] == white)


def test_more_colors_make_a_taller_legend():
    resources = bundled_resources()
    small = _mapping(make_gradient_image(4, 1, levels=2))
    large = _mapping(make_gradient_image(24, 1, levels=12))
    assert len(large) > len(small)
    short = render_legend(small, 4, 1, resources.font)
    tall = render_legend(large, 24, 1, resources.font)
    assert tall.shape[0] > short.shape[0]


def test_page_layout_only_for_multi_page_patterns():
    resources = bundled_resources()
    mapping = _mapping(make_gradient_image(8, 2, levels=3))
    single = render_legend(mapping, 8, 2, resources.font, segment_positions=[(0, 0)])
    multi = render_legend(
        mapping, 8, 2, resources.font, segment_positions=[(0, 0), (1, 0), (0, 1), (1, 1)]
    )
    assert multi.shape[0] > single.shape[0]
    assert _has_black_separator(multi)
    assert not _has_black_separator(single)


def test_page_layout_grid_matches_positions():
    resources = bundled_resources()
    one_row = render_page_layout(resources.font, [(0, 0), (1, 0), (2, 0)])
    two_rows = render_page_layout(resources.font, [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)])
    assert two_rows.shape[0] > one_row.shape[0]


def test_legend_filename():
    assert legend_filename("cat") == "cat_legend.png"
