from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from .. import settings
from ..imaging.bitmap import (
    GluePosition,
    draw_rect,
    draw_rect_filled,
    extended,
    glue_together,
    glued_to,
    new_filled,
)
from ..imaging.text import BitmapFont
from .color_mapping import ColorInfo, ColorMapping, total_stitches
from .pattern_render import blit_symbol
from .types import BLACK, WHITE


def build_legend(mapping: ColorMapping, brand: str = "DMC") -> List[dict]:
    """Return the legend rows in mapping order, enriched with counts and percentages."""
    total = total_stitches(mapping) or 1
    legend: List[dict] = []
    for info in mapping.values():
        legend.append(
            {
                "brand": brand,
                "code": info.thread_id,
                "rgb": info.color.rgb,
                "count": info.count,
                "percent": round(info.count / total * 100, 2),
            }
        )
    return legend


def _chunks(items: Sequence, size: int) -> List[Sequence]:
    return [items[i : i + size] for i in range(0, len(items), size)]


def render_legend_entry(
    font: BitmapFont, info: ColorInfo, brand: str = "DMC", tile_size: int = settings.TILE_SIZE
) -> np.ndarray:
    """Swatch, symbol and `` <count> stitches <brand> <code>`` on a single line."""
    swatch = new_filled(2 * tile_size, tile_size, WHITE)
    draw_rect_filled(swatch, 0, 0, tile_size, tile_size, info.color)
    draw_rect(swatch, 0, 0, tile_size, tile_size, BLACK)
    blit_symbol(info.symbol, swatch, tile_size, 0, WHITE)
    draw_rect(swatch, tile_size, 0, tile_size, tile_size, BLACK)

    text = font.create_text_bitmap(f" {info.count} stitches {brand} {info.thread_id}")
    return glued_to(text, swatch, GluePosition.RIGHT_CENTER)


def render_legend_block(
    font: BitmapFont,
    infos: Sequence[ColorInfo],
    brand: str = "DMC",
    tile_size: int = settings.TILE_SIZE,
) -> np.ndarray:
    entries = [render_legend_entry(font, info, brand, tile_size) for info in infos]
    return glue_together(entries, GluePosition.BOTTOM_LEFT, tile_size)


def render_page_layout(font: BitmapFont, positions: Sequence[Tuple[int, int]]) -> np.ndarray:
    """
    Numbered boxes at each segment's ``(column, row)``, in segment order, under a caption.
    Boxes are one pixel apart.
    """
    caption = font.create_text_bitmap("\n\nPattern parts overview:\n")

    page_count = len(positions)
    columns = 1 + max(column for column, _row in positions)
    rows = 1 + max(row for _column, row in positions)
    tile_w = 1 + font.text_width(f" {page_count} ")
    tile_h = 1 + int(tile_w * 1.5)

    layout = new_filled(columns * tile_w, rows * tile_h, WHITE)
    for index, (column, row) in enumerate(positions):
        x, y = column * tile_w, row * tile_h
        draw_rect(layout, x, y, tile_w - 1, tile_h - 1, BLACK)
        font.draw_text_centered(layout, str(index + 1), x + tile_w // 2, y + tile_h // 2, BLACK)

    return glued_to(caption, layout, GluePosition.TOP_LEFT)


def render_legend(
    mapping: ColorMapping,
    image_width: int,
    image_height: int,
    font: BitmapFont,
    segment_positions: Sequence[Tuple[int, int]] = (),
    brand: str = "DMC",
    tile_size: int = settings.TILE_SIZE,
) -> np.ndarray:
    """
    Build the legend sheet: the size/colors/stitches header, the entries packed into blocks of
    5 (at most 4 blocks per row) and, for multi-page patterns, the page layout overview.
    """
    header = font.create_text_bitmap(
        f"Size:     {image_width}x{image_height}\n\n"
        f"Colors:   {len(mapping)}\n\n"
        f"Stitches: {total_stitches(mapping)}\n\n\n"
    )

    infos = list(mapping.values())
    blocks = [
        render_legend_block(font, chunk, brand, tile_size)
        for chunk in _chunks(infos, settings.LEGEND_BLOCK_ENTRY_COUNT)
    ]
    block_rows = [
        glue_together(chunk, GluePosition.RIGHT_TOP, tile_size)
        for chunk in _chunks(blocks, settings.LEGEND_MAX_BLOCK_COLUMNS)
    ]
    body = glue_together(block_rows, GluePosition.BOTTOM_LEFT, tile_size)
    body = extended(body, 0, 0, 0, int(1.5 * tile_size), WHITE)

    legend = glued_to(header, body, GluePosition.TOP_LEFT)

    if len(segment_positions) > 1:
        layout = render_page_layout(font, segment_positions)
        legend = glued_to(legend, layout, GluePosition.TOP_LEFT)
        legend[legend.shape[0] - layout.shape[0], :] = tuple(BLACK)

    return extended(legend, tile_size, tile_size, tile_size, tile_size, WHITE)


def legend_filename(image_name: str) -> str:
    return f"{image_name}_legend.png"


__all__ = [
    "build_legend",
    "legend_filename",
    "render_legend",
    "render_legend_block",
    "render_legend_entry",
    "render_page_layout",
]
