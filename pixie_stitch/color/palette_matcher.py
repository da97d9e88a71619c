from __future__ import annotations

import logging

import numpy as np
from skimage.color import rgb2lab
from sklearn.metrics import pairwise_distances_argmin

from ..core.errors import ConfigurationError
from ..core.types import PixelColor
from .palette_loader import Palette

logger = logging.getLogger(__name__)


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """``(N, 3)`` uint8 sRGB -> ``(N, 3)`` CIE L*a*b* (D65)."""
    rgb = np.asarray(rgb, dtype=np.float64).reshape(-1, 1, 3) / 255.0
    return rgb2lab(rgb).reshape(-1, 3)


def color_distance(rgb_a, rgb_b) -> float:
    """CIE76 delta E between two sRGB triples; alpha is ignored."""
    lab = rgb_to_lab(np.array([tuple(rgb_a)[:3], tuple(rgb_b)[:3]]))
    return float(np.linalg.norm(lab[0] - lab[1]))


class PaletteMatcher:
    """
    Nearest palette entry by CIE76 delta E (euclidean distance in Lab).

    Matching is deterministic. When the computed float distances are exactly equal the entry
    that comes first in the palette wins; distances are computed in the expanded dot-product
    form, so entries whose true distances differ only by rounding error may resolve either way.
    """

    def __init__(self, palette: Palette) -> None:
        if len(palette) == 0:
            raise ConfigurationError(f"Palette '{palette.brand}' is empty, cannot match colors")
        self.palette = palette
        self._rgb = palette.rgb_array()
        self._lab = rgb_to_lab(self._rgb)

    def nearest_indices(self, rgb: np.ndarray) -> np.ndarray:
        rgb = np.asarray(rgb).reshape(-1, 3)
        if rgb.shape[0] == 0:
            return np.zeros(0, dtype=np.intp)
        return pairwise_distances_argmin(rgb_to_lab(rgb), self._lab)

    def nearest_color(self, color) -> PixelColor:
        index = int(self.nearest_indices(np.array([tuple(color)[:3]]))[0])
        return self.palette.colors[index]

    def quantize(self, image: np.ndarray) -> np.ndarray:
        """
        Map every non-transparent pixel to its nearest palette color (made fully opaque).
        Transparent pixels (alpha == 0) pass through untouched.
        """
        result = image.copy()
        opaque = image[..., 3] != 0
        if not opaque.any():
            return result

        pixels = image[opaque][:, :3]
        unique, inverse = np.unique(pixels, axis=0, return_inverse=True)
        inverse = inverse.reshape(-1)
        indices = self.nearest_indices(unique)
        logger.debug("Matched %d distinct colors onto %s", len(unique), self.palette.brand)

        matched = self._rgb[indices][inverse]
        quantized = np.empty((matched.shape[0], 4), dtype=np.uint8)
        quantized[:, :3] = matched
        quantized[:, 3] = 255
        result[opaque] = quantized
        return result


def quantize_image(image: np.ndarray, palette: Palette) -> np.ndarray:
    return PaletteMatcher(palette).quantize(image)


__all__ = ["PaletteMatcher", "color_distance", "quantize_image", "rgb_to_lab"]
