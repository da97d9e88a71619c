"""
Premultiplied-alpha compositing, after https://cairographics.org/operators/

Colors are float arrays of shape ``(..., 4)`` in ``[0, 1]`` with RGB already scaled by alpha:

    result.a = src.a + dst.a * (1 - src.a)
    result.x = (1 - dst.a) * src.x + (1 - src.a) * dst.x + blend(src, dst)

where ``blend`` already contains the ``src.a * dst.a`` factor.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Union

import numpy as np

from ..core.types import PixelColor


class BlendMode(Enum):
    NORMAL = "normal"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"
    DARKEN = "darken"
    LIGHTEN = "lighten"
    LUMINOSITY = "luminosity"


# --------------------------------------------------------------------------- conversions


def to_premultiplied(bitmap: np.ndarray) -> np.ndarray:
    """uint8 RGBA bitmap -> premultiplied float32 colors."""
    colors = bitmap.astype(np.float32) / 255.0
    colors[..., :3] *= colors[..., 3:4]
    return colors


def to_unpremultiplied(colors: np.ndarray) -> np.ndarray:
    """Premultiplied float colors -> straight-alpha float colors. Zero alpha becomes transparent."""
    alpha = colors[..., 3:4]
    result = np.zeros_like(colors)
    np.divide(colors[..., :3], alpha, out=result[..., :3], where=alpha > 0)
    result[..., 3:4] = alpha
    return result


def premultiplied_to_bitmap(colors: np.ndarray) -> np.ndarray:
    """Premultiplied float colors -> straight-alpha uint8 RGBA bitmap."""
    straight = np.clip(to_unpremultiplied(colors), 0.0, 1.0)
    return (straight * 255.0 + 0.5).astype(np.uint8)


def color_to_premultiplied(color: PixelColor) -> np.ndarray:
    return to_premultiplied(np.array(tuple(color), dtype=np.uint8))


# --------------------------------------------------------------------------- luminance


def _srgb_to_linear(c: np.ndarray) -> np.ndarray:
    # https://en.wikipedia.org/wiki/SRGB#The_reverse_transformation
    return np.where(c < 0.04045, (25.0 / 323.0) * c, ((200.0 * c + 11.0) / 211.0) ** (12.0 / 5.0))


def relative_luminance(color: Union[PixelColor, np.ndarray]) -> float:
    """Relative luminance of an sRGB color (https://en.wikipedia.org/wiki/Relative_luminance)."""
    rgb = np.asarray(tuple(color)[:3], dtype=np.float64) / 255.0
    lin = _srgb_to_linear(rgb)
    return float(0.2126 * lin[0] + 0.7152 * lin[1] + 0.0722 * lin[2])


def luminosity(rgb: np.ndarray) -> np.ndarray:
    return 0.3 * rgb[..., 0] + 0.59 * rgb[..., 1] + 0.11 * rgb[..., 2]


def with_replaced_luminosity(rgb: np.ndarray, new_luminosity: np.ndarray) -> np.ndarray:
    """Shift ``rgb`` to ``new_luminosity`` and clip back into gamut around that luminosity."""
    d = np.asarray(new_luminosity) - luminosity(rgb)
    result = rgb + d[..., None]

    lum = luminosity(result)[..., None]
    low = result.min(axis=-1, keepdims=True)
    high = result.max(axis=-1, keepdims=True)

    with np.errstate(divide="ignore", invalid="ignore"):
        clipped_low = lum + (result - lum) * lum / (lum - low)
        result = np.where(low < 0.0, clipped_low, result)
        clipped_high = lum + (result - lum) * (1.0 - lum) / (high - lum)
        result = np.where(high > 1.0, clipped_high, result)
    return result


# --------------------------------------------------------------------------- blend functions


def _normal(s, sa, d, da):
    return s * da


def _multiply(s, sa, d, da):
    return s * d


def _screen(s, sa, d, da):
    return da * s + sa * d - s * d


def _darken(s, sa, d, da):
    return np.minimum(s * da, d * sa)


def _lighten(s, sa, d, da):
    return np.maximum(s * da, d * sa)


def _overlay(s, sa, d, da):
    return np.where(2.0 * d <= da, 2.0 * s * d, sa * da - 2.0 * (da - d) * (sa - s))


_SEPARABLE: Dict[BlendMode, Callable] = {
    BlendMode.NORMAL: _normal,
    BlendMode.MULTIPLY: _multiply,
    BlendMode.SCREEN: _screen,
    BlendMode.DARKEN: _darken,
    BlendMode.LIGHTEN: _lighten,
    BlendMode.OVERLAY: _overlay,
}


def _luminosity_term(source: np.ndarray, dest: np.ndarray) -> np.ndarray:
    src = to_unpremultiplied(source)[..., :3]
    dst = to_unpremultiplied(dest)[..., :3]
    blended = with_replaced_luminosity(dst, luminosity(src))
    return (source[..., 3:4] * dest[..., 3:4]) * blended


def blend(source: np.ndarray, dest: np.ndarray, mode: BlendMode = BlendMode.NORMAL) -> np.ndarray:
    """Composite premultiplied ``source`` over premultiplied ``dest``; shapes must broadcast."""
    source = np.asarray(source, dtype=np.float32)
    dest = np.asarray(dest, dtype=np.float32)
    sa = source[..., 3:4]
    da = dest[..., 3:4]

    alpha = sa + da * (1.0 - sa)
    if mode is BlendMode.LUMINOSITY:
        term = _luminosity_term(source, dest)
    else:
        term = _SEPARABLE[mode](source[..., :3], sa, dest[..., :3], da)
    rgb = (1.0 - da) * source[..., :3] + (1.0 - sa) * dest[..., :3] + term

    result = np.concatenate([rgb, alpha], axis=-1).astype(np.float32)
    result[alpha[..., 0] == 0.0] = 0.0
    return result


def blit_blended(
    source: np.ndarray,
    dest: np.ndarray,
    x: int,
    y: int,
    mode: BlendMode = BlendMode.NORMAL,
) -> None:
    """Blend premultiplied ``source`` onto premultiplied ``dest`` at ``(x, y)`` in place, clipped."""
    sh, sw = source.shape[:2]
    h, w = dest.shape[:2]
    x0, y0 = max(0, x), max(0, y)
    x1, y1 = min(w, x + sw), min(h, y + sh)
    if x0 >= x1 or y0 >= y1:
        return
    region = source[y0 - y : y1 - y, x0 - x : x1 - x]
    dest[y0:y1, x0:x1] = blend(region, dest[y0:y1, x0:x1], mode)


def masked_by(colors: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Scale premultiplied ``colors`` by the alpha of premultiplied ``mask``."""
    return colors * mask[..., 3:4]


__all__ = [
    "BlendMode",
    "blend",
    "blit_blended",
    "color_to_premultiplied",
    "luminosity",
    "masked_by",
    "premultiplied_to_bitmap",
    "relative_luminance",
    "to_premultiplied",
    "to_unpremultiplied",
    "with_replaced_luminosity",
]
