from __future__ import annotations

import colorsys
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..color.blend import BlendMode, blend, color_to_premultiplied, masked_by
from ..color.palette_loader import Palette
from .symbols import assign_symbols_to_colors
from .types import PixelColor, pack_rgba

logger = logging.getLogger(__name__)

STITCH_SCREEN_TINT = PixelColor(105, 109, 128, 255)


@dataclass(frozen=True, eq=False)
class ColorInfo:
    color: PixelColor
    count: int
    thread_id: str
    symbol: np.ndarray
    symbol_alphanumeric: np.ndarray
    # colored stitch textures, premultiplied
    stitches: Tuple[np.ndarray, ...] = ()


ColorMapping = Mapping[PixelColor, ColorInfo]


def hls_sort_key(color: PixelColor) -> Tuple[float, float, float]:
    h, l, s = colorsys.rgb_to_hls(color.r / 255.0, color.g / 255.0, color.b / 255.0)
    return (h, l, s)


def extract_colors_and_counts(image: np.ndarray) -> Dict[PixelColor, int]:
    """
    Count every opaque pixel per exact RGBA value.

    The returned dict is ordered by hue, then lightness, then saturation, so color ramps come
    out contiguous in the legend.
    """
    pixels = image[image[..., 3] != 0]
    if pixels.size == 0:
        return {}
    keys, counts = np.unique(pack_rgba(pixels), return_counts=True)
    colors = [(PixelColor.from_key(k), int(c)) for k, c in zip(keys.tolist(), counts.tolist())]
    colors.sort(key=lambda item: hls_sort_key(item[0]))
    return dict(colors)


def colorize_stitch_tiles(
    color: PixelColor,
    stitch_tiles: Sequence[np.ndarray],
    stitch_luminance_tiles: Sequence[np.ndarray],
) -> Tuple[np.ndarray, ...]:
    """Tint the neutral stitch textures with ``color``; brighter colors get flatter shading."""
    if color.is_transparent:
        return ()

    screen = color_to_premultiplied(STITCH_SCREEN_TINT)
    fill = color_to_premultiplied(color)
    intensity = (color.r + color.g + color.b) / (3.0 * 255.0)
    divisor = 6 + int(8.0 * intensity * intensity)

    result = []
    for stitch, luminance in zip(stitch_tiles, stitch_luminance_tiles):
        tinted = blend(np.broadcast_to(screen, stitch.shape), stitch, BlendMode.SCREEN)
        tinted = blend(np.broadcast_to(fill, stitch.shape), tinted, BlendMode.MULTIPLY)
        tinted = blend(luminance / divisor, tinted, BlendMode.LUMINOSITY)
        result.append(masked_by(tinted, stitch))
    return tuple(result)


def build_color_mapping(
    image: np.ndarray,
    palette: Palette,
    glyph_symbols: Sequence[np.ndarray],
    alphanumeric_symbols: Sequence[np.ndarray],
    stitch_tiles: Sequence[np.ndarray] = (),
    stitch_luminance_tiles: Sequence[np.ndarray] = (),
    image_path: Optional[str] = None,
) -> ColorMapping:
    """
    Build the read-only ColorMapping of a quantized image.

    Every distinct opaque color gets its count, its thread id, the symbol pair at its sort
    position and its colored stitch textures. Raises InsufficientSymbolsError when there are
    more colors than symbols.
    """
    counts = extract_colors_and_counts(image)
    symbols = assign_symbols_to_colors(
        list(counts), glyph_symbols, alphanumeric_symbols, image_path=image_path
    )

    entries: Dict[PixelColor, ColorInfo] = {}
    for color, count in counts.items():
        glyph, alphanumeric = symbols[color]
        entries[color] = ColorInfo(
            color=color,
            count=count,
            thread_id=palette.thread_id(color) or "",
            symbol=glyph,
            symbol_alphanumeric=alphanumeric,
            stitches=colorize_stitch_tiles(color, stitch_tiles, stitch_luminance_tiles),
        )
    logger.debug("Color mapping holds %d colors", len(entries))
    return MappingProxyType(entries)


def total_stitches(mapping: ColorMapping) -> int:
    return sum(info.count for info in mapping.values())


__all__ = [
    "ColorInfo",
    "ColorMapping",
    "build_color_mapping",
    "colorize_stitch_tiles",
    "extract_colors_and_counts",
    "hls_sort_key",
    "total_stitches",
]
