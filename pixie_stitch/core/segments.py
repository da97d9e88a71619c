from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .types import CoordinateMode


@dataclass(frozen=True, eq=False)
class Segment:
    """One printable page of a larger image, ``index`` counting from zero in row-major order."""

    index: int
    column: int
    row: int
    bitmap: np.ndarray
    pixel_x: int
    pixel_y: int

    @property
    def width(self) -> int:
        return int(self.bitmap.shape[1])

    @property
    def height(self) -> int:
        return int(self.bitmap.shape[0])

    @property
    def number(self) -> int:
        return self.index + 1


def segment_grid_size(width: int, height: int, segment_width: int, segment_height: int) -> Tuple[int, int]:
    if segment_width <= 0 or segment_height <= 0:
        raise ValueError("Segment width and height must be positive")
    return math.ceil(width / segment_width), math.ceil(height / segment_height)


def split_into_segments(image: np.ndarray, segment_width: int, segment_height: int) -> List[Segment]:
    """
    Cut ``image`` into ``ceil(W / segment_width) x ceil(H / segment_height)`` segments.
    The last column and row may be narrower. Segment bitmaps are copies.
    """
    height, width = image.shape[:2]
    columns, rows = segment_grid_size(width, height, segment_width, segment_height)
    segments: List[Segment] = []
    for row in range(rows):
        for column in range(columns):
            x = column * segment_width
            y = row * segment_height
            segments.append(
                Segment(
                    index=len(segments),
                    column=column,
                    row=row,
                    bitmap=image[y : y + segment_height, x : x + segment_width].copy(),
                    pixel_x=x,
                    pixel_y=y,
                )
            )
    return segments


def make_even_upwards(value: int) -> int:
    return value + (value % 2)


def image_center(width: int, height: int) -> Tuple[int, int]:
    """Center cell of an image; odd dimensions round up."""
    return make_even_upwards(width) // 2, make_even_upwards(height) // 2


def logical_origin(
    mode: CoordinateMode,
    image_width: int,
    image_height: int,
    pixel_x: int = 0,
    pixel_y: int = 0,
) -> Tuple[int, int]:
    """Printed coordinate of the top-left cell found at ``(pixel_x, pixel_y)`` of the image."""
    if mode == "absolute":
        return pixel_x, pixel_y
    if mode == "centered":
        cx, cy = image_center(image_width, image_height)
        return pixel_x - cx, pixel_y - cy
    raise ValueError(f"Unknown coordinate mode '{mode}'")


__all__ = [
    "Segment",
    "image_center",
    "logical_origin",
    "make_even_upwards",
    "segment_grid_size",
    "split_into_segments",
]
