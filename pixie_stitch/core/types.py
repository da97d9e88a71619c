"""Common lightweight types shared across the pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Literal, NamedTuple

import numpy as np

CoordinateMode = Literal["absolute", "centered"]


class PixelColor(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255

    @property
    def is_transparent(self) -> bool:
        return self.a == 0

    @property
    def rgb(self) -> tuple:
        return (self.r, self.g, self.b)

    def pack(self) -> bytes:
        """Encode as a fixed 4-byte RGBA record."""
        return bytes((self.r, self.g, self.b, self.a))

    @classmethod
    def unpack(cls, data: bytes) -> "PixelColor":
        if len(data) != 4:
            raise ValueError(f"A color record is 4 bytes, got {len(data)}")
        return cls(data[0], data[1], data[2], data[3])

    @property
    def key(self) -> int:
        return (self.r << 24) | (self.g << 16) | (self.b << 8) | self.a

    @classmethod
    def from_key(cls, key: int) -> "PixelColor":
        key = int(key)
        return cls((key >> 24) & 0xFF, (key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)


WHITE = PixelColor(255, 255, 255, 255)
BLACK = PixelColor(0, 0, 0, 255)
TRANSPARENT = PixelColor(0, 0, 0, 0)


def pack_rgba(pixels: np.ndarray) -> np.ndarray:
    """Pack an ``(..., 4)`` uint8 array into ``uint32`` keys matching ``PixelColor.key``."""
    p = pixels.astype(np.uint32)
    return (p[..., 0] << 24) | (p[..., 1] << 16) | (p[..., 2] << 8) | p[..., 3]


def unpack_rgba(keys: np.ndarray) -> np.ndarray:
    keys = np.asarray(keys, dtype=np.uint32)
    out = np.empty(keys.shape + (4,), dtype=np.uint8)
    out[..., 0] = (keys >> 24) & 0xFF
    out[..., 1] = (keys >> 16) & 0xFF
    out[..., 2] = (keys >> 8) & 0xFF
    out[..., 3] = keys & 0xFF
    return out


class PatternVariant(str, Enum):
    """Rendering variants; the value doubles as the output filename prefix."""

    OUTLINE = "cross_stitch"
    COLORIZED = "cross_stitch_colorized"
    COLORIZED_NO_SYMBOLS = "cross_stitch_colorized_no_symbols"
    PAINT_BY_NUMBERS = "paint_by_numbers"

    @property
    def colorize(self) -> bool:
        return self in (PatternVariant.COLORIZED, PatternVariant.COLORIZED_NO_SYMBOLS)

    @property
    def draws_symbols(self) -> bool:
        return self is not PatternVariant.COLORIZED_NO_SYMBOLS

    @property
    def uses_alphanumeric(self) -> bool:
        return self is PatternVariant.PAINT_BY_NUMBERS


__all__ = [
    "BLACK",
    "CoordinateMode",
    "PatternVariant",
    "PixelColor",
    "TRANSPARENT",
    "WHITE",
    "pack_rgba",
    "unpack_rgba",
]
