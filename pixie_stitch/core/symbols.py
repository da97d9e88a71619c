from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import numpy as np

from ..imaging.codec import decode_image
from ..imaging.text import BitmapFont
from .errors import InsufficientSymbolsError, ResourceError
from .types import TRANSPARENT, WHITE, PixelColor

logger = logging.getLogger(__name__)

# No zero: the label font prints it as O.
ALPHANUMERIC_SYMBOLS = "123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
SYMBOLS_LIST_FILENAME = "symbols.txt"


def _normalise_symbol(symbol: str) -> str | None:
    symbol = symbol.strip()
    if not symbol or len(symbol) > 3:
        return None
    return symbol


def read_symbol_list(path: Path) -> List[str]:
    """One symbol per line; blank lines, ``# `` comment lines and repeats are skipped."""
    symbols: List[str] = []
    seen: set[str] = set()
    for line in path.read_text(encoding="utf-8").splitlines():
        if line.startswith("# "):
            continue
        symbol = _normalise_symbol(line)
        if symbol and symbol not in seen:
            seen.add(symbol)
            symbols.append(symbol)
    return symbols


def _fit_to_tile(symbol: np.ndarray, tile_size: int, background: PixelColor, source: Path) -> np.ndarray:
    h, w = symbol.shape[:2]
    if h > tile_size or w > tile_size:
        raise ResourceError(f"Symbol image '{source}' is {w}x{h}, larger than a {tile_size}px tile")
    tile = np.empty((tile_size, tile_size, 4), dtype=np.uint8)
    tile[...] = tuple(background)
    y = (tile_size - h) // 2
    x = (tile_size - w) // 2
    tile[y : y + h, x : x + w] = symbol
    return tile


def load_symbol_images(resource_dir: Path, tile_size: int) -> List[np.ndarray]:
    """Numbered symbol images (``1.png``, ``2.png``, ...) in numeric order, black on white."""
    paths = [p for p in resource_dir.rglob("*.png") if p.stem.isdigit()]
    paths.sort(key=lambda p: (int(p.stem), str(p)))
    return [_fit_to_tile(decode_image(p), tile_size, WHITE, p) for p in paths]


def render_symbol_glyphs(symbols: Sequence[str], font: BitmapFont, tile_size: int) -> List[np.ndarray]:
    """Glyph symbols drawn black on white, matching the authored symbol images."""
    return [font.create_glyph_tile(symbol, tile_size, background=WHITE) for symbol in symbols]


def create_alphanumeric_symbols(font: BitmapFont, tile_size: int) -> List[np.ndarray]:
    """Paint-by-numbers symbols drawn black on transparent."""
    return [
        font.create_glyph_tile(ch, tile_size, background=TRANSPARENT) for ch in ALPHANUMERIC_SYMBOLS
    ]


def assign_symbols_to_colors(
    colors: Sequence[PixelColor],
    glyph_symbols: Sequence[np.ndarray],
    alphanumeric_symbols: Sequence[np.ndarray],
    image_path: str | None = None,
) -> Dict[PixelColor, Tuple[np.ndarray, np.ndarray]]:
    """
    The i-th color gets the i-th glyph and the i-th alphanumeric symbol.
    Symbols are never reused: running out is an InsufficientSymbolsError.
    """
    if len(colors) > len(glyph_symbols):
        raise InsufficientSymbolsError(
            len(colors), len(glyph_symbols), "cross stitch", image_path=image_path
        )
    if len(colors) > len(alphanumeric_symbols):
        raise InsufficientSymbolsError(
            len(colors), len(alphanumeric_symbols), "paint by numbers", image_path=image_path
        )
    return {
        color: (glyph_symbols[i], alphanumeric_symbols[i]) for i, color in enumerate(colors)
    }


__all__ = [
    "ALPHANUMERIC_SYMBOLS",
    "SYMBOLS_LIST_FILENAME",
    "assign_symbols_to_colors",
    "create_alphanumeric_symbols",
    "load_symbol_images",
    "read_symbol_list",
    "render_symbol_glyphs",
]
