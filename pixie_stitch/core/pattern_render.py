"""
Tile renderer: turns a quantized bitmap into one printable pattern sheet.

Every source pixel becomes a ``tile_size`` square cell. On top of the cells come the symbols,
the thin cell grid, the thick grid every 10 printed coordinates, the origin bars, the
coordinate labels and finally the "Pattern Part N" banner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .. import settings
from ..color.blend import relative_luminance
from ..imaging.bitmap import GluePosition, draw_rect_filled, extended, glued_to
from ..imaging.text import BitmapFont
from .color_mapping import ColorMapping
from .types import BLACK, TRANSPARENT, WHITE, PatternVariant, PixelColor, pack_rgba

logger = logging.getLogger(__name__)

COLOR_GRID_THIN = PixelColor(128, 128, 128, 255)
COLOR_GRID_THICK = PixelColor(64, 64, 64, 255)

LABEL_MIN_PARTIAL_BLOCK = 3


@dataclass(frozen=True)
class RenderOptions:
    variant: PatternVariant
    logical_x: int = 0
    logical_y: int = 0
    thick_grid: bool = True
    origin_bars: bool = False
    segment_number: Optional[int] = None
    symbol_mask: PixelColor = WHITE

    @classmethod
    def for_variant(
        cls,
        variant: PatternVariant,
        logical_x: int = 0,
        logical_y: int = 0,
        origin_bars: bool = False,
        segment_number: Optional[int] = None,
    ) -> "RenderOptions":
        # paint by numbers sheets stay bare: no thick grid, labels or origin bars
        if variant is PatternVariant.PAINT_BY_NUMBERS:
            return cls(
                variant=variant,
                logical_x=logical_x,
                logical_y=logical_y,
                thick_grid=False,
                origin_bars=False,
                segment_number=segment_number,
                symbol_mask=TRANSPARENT,
            )
        return cls(
            variant=variant,
            logical_x=logical_x,
            logical_y=logical_y,
            thick_grid=True,
            origin_bars=origin_bars,
            segment_number=segment_number,
            symbol_mask=WHITE,
        )


# --------------------------------------------------------------------------- symbols


def symbol_ink(background: PixelColor) -> PixelColor:
    """Black symbols on light backgrounds, white ones on dark backgrounds."""
    return BLACK if relative_luminance(background) > 0.2 else WHITE


def symbol_pixel_mask(symbol: np.ndarray, mask_color: PixelColor) -> np.ndarray:
    return np.any(symbol != np.array(tuple(mask_color), dtype=np.uint8), axis=-1)


def blit_symbol(
    symbol: np.ndarray, bitmap: np.ndarray, x: int, y: int, mask_color: PixelColor
) -> None:
    """
    Stamp ``symbol`` in place at ``(x, y)``. The ink is chosen against the destination pixel
    under the symbol's top-left corner; pixels equal to ``mask_color`` are skipped.
    """
    sh, sw = symbol.shape[:2]
    h, w = bitmap.shape[:2]
    if x < 0 or y < 0 or x + sw > w or y + sh > h:
        raise ValueError(f"Symbol at ({x}, {y}) does not fit into a {w}x{h} bitmap")
    ink = symbol_ink(PixelColor(*bitmap[y, x].tolist()))
    region = bitmap[y : y + sh, x : x + sw]
    region[symbol_pixel_mask(symbol, mask_color)] = tuple(ink)


def _fill_cells(bitmap: np.ndarray, colorize: bool, tile_size: int) -> np.ndarray:
    opaque = bitmap[..., 3] != 0
    if colorize:
        cells = np.where(opaque[..., None], bitmap, np.array(tuple(WHITE), dtype=np.uint8))
    else:
        cells = np.empty_like(bitmap)
        cells[...] = tuple(WHITE)
    return np.repeat(np.repeat(cells, tile_size, axis=0), tile_size, axis=1)


def _stamp_symbols(
    scaled: np.ndarray,
    bitmap: np.ndarray,
    mapping: ColorMapping,
    options: RenderOptions,
    tile_size: int,
) -> None:
    h, w = bitmap.shape[:2]
    cells = scaled.reshape(h, tile_size, w, tile_size, 4).swapaxes(1, 2)
    keys = pack_rgba(bitmap)
    opaque = bitmap[..., 3] != 0

    for key in np.unique(keys[opaque]).tolist():
        color = PixelColor.from_key(key)
        info = mapping[color]
        symbol = info.symbol_alphanumeric if options.variant.uses_alphanumeric else info.symbol
        background = color if options.variant.colorize else WHITE

        ys, xs = np.nonzero(keys == key)
        tiles = cells[ys, xs]
        tiles[:, symbol_pixel_mask(symbol, options.symbol_mask)] = tuple(symbol_ink(background))
        cells[ys, xs] = tiles


# --------------------------------------------------------------------------- grids


def _draw_thin_grid(scaled: np.ndarray, width: int, height: int, tile_size: int) -> None:
    color = tuple(COLOR_GRID_THIN)
    scaled[:, 0 : tile_size * width : tile_size] = color
    scaled[0 : tile_size * height : tile_size, :] = color
    # close the grid on the right and bottom border
    scaled[:, -1] = color
    scaled[-1, :] = color


def _draw_thick_grid(
    scaled: np.ndarray, width: int, height: int, logical_x: int, logical_y: int, tile_size: int
) -> None:
    sh, sw = scaled.shape[:2]
    for bx in range(width):
        if (logical_x + bx) % 10 == 0:
            draw_rect_filled(scaled, tile_size * bx, 0, 2, sh, COLOR_GRID_THICK)
    for by in range(height):
        if (logical_y + by) % 10 == 0:
            draw_rect_filled(scaled, 0, tile_size * by, sw, 2, COLOR_GRID_THICK)
    if (logical_x + width) % 10 == 0:
        draw_rect_filled(scaled, sw - 2, 0, 2, sh, COLOR_GRID_THICK)
    if (logical_y + height) % 10 == 0:
        draw_rect_filled(scaled, 0, sh - 2, sw, 2, COLOR_GRID_THICK)


def draw_origin_line_vertical(bitmap: np.ndarray, x: int) -> None:
    h = bitmap.shape[0]
    draw_rect_filled(bitmap, x - 2, 0, 4, h, BLACK)
    draw_rect_filled(bitmap, x - 1, 0, 2, h, WHITE)


def draw_origin_line_horizontal(bitmap: np.ndarray, y: int) -> None:
    w = bitmap.shape[1]
    draw_rect_filled(bitmap, 0, y - 2, w, 4, BLACK)
    draw_rect_filled(bitmap, 0, y - 1, w, 2, WHITE)


def _draw_origin_bars(
    scaled: np.ndarray, width: int, height: int, logical_x: int, logical_y: int, tile_size: int
) -> np.ndarray:
    origin_x = -logical_x
    if 0 < origin_x < width:
        draw_origin_line_vertical(scaled, tile_size * origin_x)
    origin_y = -logical_y
    if 0 < origin_y < height:
        draw_origin_line_horizontal(scaled, tile_size * origin_y)

    # an origin on the border gets 2px of room so the bar is not clipped away
    sh, sw = scaled.shape[:2]
    needs_left = logical_x == 0
    needs_top = logical_y == 0
    needs_right = logical_x + width == 0
    needs_bottom = logical_y + height == 0
    result = extended(
        scaled,
        2 if needs_left else 0,
        2 if needs_top else 0,
        2 if needs_right else 0,
        2 if needs_bottom else 0,
        WHITE,
    )
    if needs_left:
        draw_origin_line_vertical(result, 2)
    if needs_right:
        draw_origin_line_vertical(result, sw)
    if needs_top:
        draw_origin_line_horizontal(result, 2)
    if needs_bottom:
        draw_origin_line_horizontal(result, sh)
    return result


# --------------------------------------------------------------------------- labels


def ceil_to_multiple_of_ten(value: int) -> int:
    return -(-value // 10) * 10


def floor_to_multiple_of_ten(value: int) -> int:
    return (value // 10) * 10


def grid_label_positions(first: int, count: int) -> List[Tuple[int, int]]:
    """
    ``(grid offset, printed coordinate)`` pairs for one axis spanning ``count`` cells.

    Every multiple of 10 is labelled. The first and last partial blocks are labelled as well
    when they span more than 3 cells, so a 7 to 9 cell block does not pass for a full one.
    """
    last = first + count
    positions = [(offset, first + offset) for offset in range(count + 1) if (first + offset) % 10 == 0]
    if abs(ceil_to_multiple_of_ten(first) - first) > LABEL_MIN_PARTIAL_BLOCK:
        positions.append((0, first))
    if abs(floor_to_multiple_of_ten(last) - last) > LABEL_MIN_PARTIAL_BLOCK:
        positions.append((count, last))
    return positions


def label_padding(font: BitmapFont, first_x: int, first_y: int, grid_width: int, grid_height: int) -> int:
    coordinates = (first_x, first_y, first_x + grid_width, first_y + grid_height)
    longest = max(len(str(c)) for c in coordinates)
    return font.horizontal_advance_max * (longest + 4)


def place_grid_labels(
    scaled: np.ndarray, tile_size: int, font: BitmapFont, first_x: int, first_y: int
) -> np.ndarray:
    """Pad the sheet on all sides and print the coordinates of the thick grid lines."""
    grid_width = scaled.shape[1] // tile_size
    grid_height = scaled.shape[0] // tile_size
    padding = label_padding(font, first_x, first_y, grid_width, grid_height)
    result = extended(scaled, padding, padding, padding, padding, WHITE)
    height, width = result.shape[:2]

    for offset, coordinate in grid_label_positions(first_x, grid_width):
        text = str(coordinate)
        x = padding + tile_size * offset
        font.draw_text_centered(result, text, x, padding // 2, BLACK)
        font.draw_text_centered(result, text, x, height - padding // 2, BLACK)

    for offset, coordinate in grid_label_positions(first_y, grid_height):
        # pixel rows grow downwards, printed rows grow upwards
        text = str(-coordinate)
        y = padding + tile_size * offset
        font.draw_text_centered(result, text, padding // 2, y, BLACK)
        font.draw_text_centered(result, text, width - padding // 2, y, BLACK)

    return result


def segment_banner(font_big: BitmapFont, segment_number: int) -> np.ndarray:
    return font_big.create_text_bitmap(f"\n Pattern Part {segment_number} \n")


# --------------------------------------------------------------------------- render


def render_pattern(
    bitmap: np.ndarray,
    mapping: ColorMapping,
    options: RenderOptions,
    font: BitmapFont,
    font_big: BitmapFont,
    tile_size: int = settings.TILE_SIZE,
) -> np.ndarray:
    """
    Render one pattern sheet. Every opaque color of ``bitmap`` must be in ``mapping``;
    an unmapped color raises KeyError.
    """
    height, width = bitmap.shape[:2]
    variant = options.variant

    scaled = _fill_cells(bitmap, variant.colorize, tile_size)
    if variant.draws_symbols:
        _stamp_symbols(scaled, bitmap, mapping, options, tile_size)

    _draw_thin_grid(scaled, width, height, tile_size)
    if options.thick_grid:
        _draw_thick_grid(scaled, width, height, options.logical_x, options.logical_y, tile_size)

    if options.origin_bars:
        scaled = _draw_origin_bars(
            scaled, width, height, options.logical_x, options.logical_y, tile_size
        )

    result = scaled
    if options.thick_grid:
        result = place_grid_labels(result, tile_size, font, options.logical_x, options.logical_y)

    if options.segment_number is not None:
        result = glued_to(
            segment_banner(font_big, options.segment_number), result, GluePosition.TOP_CENTER
        )
    return result


def pattern_filename(image_name: str, variant: PatternVariant, suffix: str) -> str:
    return f"{image_name}_{variant.value}_{suffix}.png"


__all__ = [
    "COLOR_GRID_THICK",
    "COLOR_GRID_THIN",
    "RenderOptions",
    "blit_symbol",
    "ceil_to_multiple_of_ten",
    "floor_to_multiple_of_ten",
    "grid_label_positions",
    "label_padding",
    "pattern_filename",
    "place_grid_labels",
    "render_pattern",
    "symbol_ink",
]
