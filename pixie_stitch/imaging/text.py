from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ..core.types import BLACK, TRANSPARENT, WHITE, PixelColor
from .bitmap import new_filled

logger = logging.getLogger(__name__)

FONT_CANDIDATES = [
    Path("assets/fonts/DejaVuSans.ttf"),
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    Path("/usr/local/share/fonts/DejaVuSans.ttf"),
]

FontLike = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


def _load_pil_font(size: int, extra_candidates: Iterable[Path] = ()) -> FontLike:
    for candidate in [*extra_candidates, *FONT_CANDIDATES]:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size)
            except OSError as exc:
                logger.warning("Failed to load font %s: %s", candidate, exc)
    logger.warning("No TrueType font found, using Pillow's default font")
    try:
        return ImageFont.load_default(size=size)
    except TypeError:  # Pillow < 10.1 has no sized default font
        return ImageFont.load_default()


class BitmapFont:
    """
    Rasterizes single-color, non anti-aliased text into RGBA bitmaps.

    Zero is printed as a capital O because low-resolution printers smear 0 into 8.
    """

    def __init__(self, font: FontLike, replace_zero: bool = True) -> None:
        self.font = font
        self.replace_zero = replace_zero
        if hasattr(font, "getmetrics"):
            ascent, descent = font.getmetrics()
            self.line_height = int(ascent + descent)
        else:
            self.line_height = int(font.getbbox("Ag")[3])
        self.horizontal_advance_max = max(
            int(math.ceil(font.getlength(ch))) for ch in "0123456789-O"
        )

    @classmethod
    def load(
        cls,
        size: int,
        font_dir: Optional[Path] = None,
        replace_zero: bool = True,
    ) -> "BitmapFont":
        extra = sorted(font_dir.glob("*.ttf")) if font_dir and font_dir.is_dir() else []
        return cls(_load_pil_font(size, extra), replace_zero=replace_zero)

    def _printable(self, text: str) -> str:
        return text.replace("0", "O") if self.replace_zero else text

    def text_width(self, text: str) -> int:
        lines = self._printable(text).split("\n")
        return max(int(math.ceil(self.font.getlength(line))) for line in lines)

    def text_size(self, text: str) -> tuple:
        return self.text_width(text), self.line_height * len(text.split("\n"))

    def render_mask(self, text: str) -> np.ndarray:
        """Boolean ink mask of ``text``, one ``line_height`` row band per line."""
        lines = self._printable(text).split("\n")
        width = max(1, self.text_width(text))
        img = Image.new("L", (width, self.line_height * len(lines)), 0)
        draw = ImageDraw.Draw(img)
        for index, line in enumerate(lines):
            if line:
                draw.text((0, index * self.line_height), line, fill=255, font=self.font)
        return np.asarray(img) >= 128

    def create_text_bitmap(
        self,
        text: str,
        color: PixelColor = BLACK,
        background: PixelColor = WHITE,
    ) -> np.ndarray:
        mask = self.render_mask(text)
        bitmap = new_filled(mask.shape[1], mask.shape[0], background)
        bitmap[mask] = tuple(color)
        return bitmap

    def draw_text_centered(
        self,
        bitmap: np.ndarray,
        text: str,
        center_x: int,
        center_y: int,
        color: PixelColor = BLACK,
    ) -> None:
        """Draw ``text`` in place, centered on the given point and clipped to the bitmap."""
        mask = self.render_mask(text)
        mh, mw = mask.shape
        x = int(center_x) - mw // 2
        y = int(center_y) - mh // 2
        h, w = bitmap.shape[:2]
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(w, x + mw), min(h, y + mh)
        if x0 >= x1 or y0 >= y1:
            return
        region = mask[y0 - y : y1 - y, x0 - x : x1 - x]
        bitmap[y0:y1, x0:x1][region] = tuple(color)

    def create_glyph_tile(
        self,
        text: str,
        tile_size: int,
        background: PixelColor = TRANSPARENT,
    ) -> np.ndarray:
        """Render ``text`` centered in a square tile (used for symbol glyphs)."""
        tile = new_filled(tile_size, tile_size, background)
        self.draw_text_centered(tile, text, tile_size // 2, tile_size // 2, BLACK)
        return tile


__all__ = ["BitmapFont", "FONT_CANDIDATES"]
