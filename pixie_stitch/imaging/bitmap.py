"""
Bitmap helpers. A bitmap is a row-major ``(height, width, 4)`` uint8 RGBA numpy array; all
functions return new arrays unless they are documented to draw in place.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

import numpy as np

from ..core.types import WHITE, PixelColor


class GluePosition(Enum):
    TOP_LEFT = "top_left"
    TOP_CENTER = "top_center"
    RIGHT_TOP = "right_top"
    RIGHT_CENTER = "right_center"
    BOTTOM_LEFT = "bottom_left"


def new_filled(width: int, height: int, color: PixelColor = WHITE) -> np.ndarray:
    bitmap = np.empty((max(0, int(height)), max(0, int(width)), 4), dtype=np.uint8)
    bitmap[...] = tuple(color)
    return bitmap


def bitmap_to_bytes(bitmap: np.ndarray) -> bytes:
    """Serialize as consecutive 4-byte RGBA records, row-major."""
    return np.ascontiguousarray(bitmap, dtype=np.uint8).tobytes()


def bitmap_from_bytes(width: int, height: int, data: bytes) -> np.ndarray:
    expected = width * height * 4
    if len(data) != expected:
        raise ValueError(f"Expected {expected} bytes for a {width}x{height} bitmap, got {len(data)}")
    return np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4).copy()


def _clip_rect(bitmap: np.ndarray, x: int, y: int, width: int, height: int):
    h, w = bitmap.shape[:2]
    x0 = max(0, min(w, x))
    x1 = max(0, min(w, x + width))
    y0 = max(0, min(h, y))
    y1 = max(0, min(h, y + height))
    return x0, y0, x1, y1


def draw_rect_filled(
    bitmap: np.ndarray, x: int, y: int, width: int, height: int, color: PixelColor
) -> None:
    """Fill a rectangle in place; parts outside the bitmap are dropped."""
    x0, y0, x1, y1 = _clip_rect(bitmap, x, y, width, height)
    if x0 < x1 and y0 < y1:
        bitmap[y0:y1, x0:x1] = tuple(color)


def draw_rect(
    bitmap: np.ndarray, x: int, y: int, width: int, height: int, color: PixelColor
) -> None:
    """Draw a 1px outline of a ``width`` x ``height`` rectangle in place."""
    if width <= 0 or height <= 0:
        return
    draw_rect_filled(bitmap, x, y, width, 1, color)
    draw_rect_filled(bitmap, x, y + height - 1, width, 1, color)
    draw_rect_filled(bitmap, x, y, 1, height, color)
    draw_rect_filled(bitmap, x + width - 1, y, 1, height, color)


def blit(source: np.ndarray, dest: np.ndarray, x: int, y: int) -> None:
    """Copy ``source`` into ``dest`` at ``(x, y)`` in place, clipped to the destination."""
    sh, sw = source.shape[:2]
    x0, y0, x1, y1 = _clip_rect(dest, x, y, sw, sh)
    if x0 >= x1 or y0 >= y1:
        return
    dest[y0:y1, x0:x1] = source[y0 - y : y1 - y, x0 - x : x1 - x]


def extended(
    bitmap: np.ndarray,
    left: int,
    top: int,
    right: int,
    bottom: int,
    fill: PixelColor = WHITE,
) -> np.ndarray:
    h, w = bitmap.shape[:2]
    result = new_filled(w + left + right, h + top + bottom, fill)
    result[top : top + h, left : left + w] = bitmap
    return result


def glued_to(
    bitmap: np.ndarray,
    target: np.ndarray,
    position: GluePosition,
    padding: int = 0,
    fill: PixelColor = WHITE,
) -> np.ndarray:
    """Return a new bitmap with ``bitmap`` attached to the ``position`` side of ``target``."""
    ah, aw = bitmap.shape[:2]
    bh, bw = target.shape[:2]

    if position in (GluePosition.TOP_LEFT, GluePosition.TOP_CENTER, GluePosition.BOTTOM_LEFT):
        width = max(aw, bw)
        height = ah + padding + bh
        result = new_filled(width, height, fill)
        if position is GluePosition.TOP_CENTER:
            ax, bx = (width - aw) // 2, (width - bw) // 2
        else:
            ax = bx = 0
        if position is GluePosition.BOTTOM_LEFT:
            ay, by = bh + padding, 0
        else:
            ay, by = 0, ah + padding
    else:
        width = aw + padding + bw
        height = max(ah, bh)
        result = new_filled(width, height, fill)
        ax, bx = bw + padding, 0
        if position is GluePosition.RIGHT_CENTER:
            ay, by = (height - ah) // 2, (height - bh) // 2
        else:
            ay = by = 0

    result[by : by + bh, bx : bx + bw] = target
    result[ay : ay + ah, ax : ax + aw] = bitmap
    return result


def glue_together(
    bitmaps: Sequence[np.ndarray],
    position: GluePosition,
    padding: int = 0,
    fill: PixelColor = WHITE,
) -> np.ndarray:
    """Chain bitmaps in order, each one attached to the ``position`` side of the previous ones."""
    if not bitmaps:
        return new_filled(0, 0, fill)
    result = bitmaps[0]
    for bitmap in bitmaps[1:]:
        result = glued_to(bitmap, result, position, padding, fill)
    return result


__all__ = [
    "GluePosition",
    "bitmap_from_bytes",
    "bitmap_to_bytes",
    "blit",
    "draw_rect",
    "draw_rect_filled",
    "extended",
    "glue_together",
    "glued_to",
    "new_filled",
]
