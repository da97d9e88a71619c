from __future__ import annotations

import numpy as np
import pytest

from pixie_stitch import settings
from pixie_stitch.core.errors import InsufficientSymbolsError
from pixie_stitch.core.symbols import (
    ALPHANUMERIC_SYMBOLS,
    assign_symbols_to_colors,
    read_symbol_list,
)
from pixie_stitch.core.types import PixelColor
from tests.utils import bundled_resources


def test_bundled_symbol_list_is_unique_and_keeps_hash_symbol():
    symbols = read_symbol_list(settings.BUNDLED_RESOURCES_DIR / "symbols.txt")
    assert len(symbols) == len(set(symbols))
    assert "#" in symbols
    assert len(symbols) >= len(ALPHANUMERIC_SYMBOLS)


def test_read_symbol_list_skips_comments_blanks_and_repeats(tmp_path):
    path = tmp_path / "symbols.txt"
    path.write_text("# header line\n+\n\nx\n+\n#\n", encoding="utf-8")
    assert read_symbol_list(path) == ["+", "x", "#"]


def test_alphanumeric_set_has_no_zero():
    assert len(ALPHANUMERIC_SYMBOLS) == 35
    assert "0" not in ALPHANUMERIC_SYMBOLS


def test_assign_symbols_produces_unique_values():
    resources = bundled_resources()
    count = min(len(resources.glyph_symbols), len(resources.alphanumeric_symbols))
    colors = [PixelColor(i, i, i) for i in range(count)]
    assigned = assign_symbols_to_colors(
        colors, resources.glyph_symbols, resources.alphanumeric_symbols
    )
    glyph_ids = {id(glyph) for glyph, _alnum in assigned.values()}
    alnum_ids = {id(alnum) for _glyph, alnum in assigned.values()}
    assert len(glyph_ids) == count
    assert len(alnum_ids) == count
    # i-th color gets the i-th symbol
    assert assigned[colors[0]][0] is resources.glyph_symbols[0]
    assert assigned[colors[-1]][1] is resources.alphanumeric_symbols[count - 1]


def test_rendered_symbols_fill_one_tile_each():
    resources = bundled_resources()
    for symbols in (resources.glyph_symbols, resources.alphanumeric_symbols):
        for tile in symbols:
            assert tile.shape == (settings.TILE_SIZE, settings.TILE_SIZE, 4)
    # letters and digits always leave ink on their transparent tile
    for tile in resources.alphanumeric_symbols:
        assert (tile[..., 3] != 0).any()


def test_too_many_colors_raises_insufficient_symbols():
    glyphs = [np.zeros((16, 16, 4), np.uint8) for _ in range(3)]
    alnum = [np.zeros((16, 16, 4), np.uint8) for _ in range(5)]
    colors = [PixelColor(i, 0, 0) for i in range(4)]
    with pytest.raises(InsufficientSymbolsError) as exc_info:
        assign_symbols_to_colors(colors, glyphs, alnum, image_path="big.png")
    assert exc_info.value.purpose == "cross stitch"
    assert "big.png" in str(exc_info.value)


def test_paint_by_numbers_symbols_run_out_too():
    glyphs = [np.zeros((16, 16, 4), np.uint8) for _ in range(10)]
    alnum = [np.zeros((16, 16, 4), np.uint8) for _ in range(2)]
    colors = [PixelColor(i, 0, 0) for i in range(3)]
    with pytest.raises(InsufficientSymbolsError) as exc_info:
        assign_symbols_to_colors(colors, glyphs, alnum)
    assert exc_info.value.purpose == "paint by numbers"
