"""Stitched-fabric preview: colored stitch textures scattered over a tiled aida background."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

import numpy as np

from .. import settings
from ..color.blend import BlendMode, blend, blit_blended, premultiplied_to_bitmap
from ..imaging.bitmap import extended
from .color_mapping import ColorMapping
from .types import TRANSPARENT, PixelColor

logger = logging.getLogger(__name__)

PREVIEW_MARGIN_CELLS = 10


@dataclass(frozen=True, eq=False)
class PreviewImages:
    """Straight-alpha uint8 bitmaps ready to be encoded."""

    background: np.ndarray
    stitches: np.ndarray
    combined: np.ndarray


def tile_background(background_tile_8x8: np.ndarray, width: int, height: int) -> np.ndarray:
    """Repeat the premultiplied 8x8-cell fabric tile over a ``width`` x ``height`` pixel area."""
    th, tw = background_tile_8x8.shape[:2]
    reps_y = -(-height // th)
    reps_x = -(-width // tw)
    return np.tile(background_tile_8x8, (reps_y, reps_x, 1))[:height, :width].copy()


def render_preview(
    image: np.ndarray,
    mapping: ColorMapping,
    background_tile_8x8: np.ndarray,
    seed: int = settings.PREVIEW_SEED,
) -> PreviewImages:
    """
    Place one randomly picked colored stitch centered on every opaque cell of ``image``.
    The image gets a transparent margin of 10 cells so the fabric shows around it.
    """
    bitmap = extended(
        image,
        PREVIEW_MARGIN_CELLS,
        PREVIEW_MARGIN_CELLS,
        PREVIEW_MARGIN_CELLS,
        PREVIEW_MARGIN_CELLS,
        TRANSPARENT,
    )
    height, width = bitmap.shape[:2]
    tile_w = background_tile_8x8.shape[1] // 8
    tile_h = background_tile_8x8.shape[0] // 8

    background = tile_background(background_tile_8x8, tile_w * width, tile_h * height)
    stitches_layer = np.zeros_like(background)

    rng = random.Random(seed)
    ys, xs = np.nonzero(bitmap[..., 3] != 0)
    for y, x in zip(ys.tolist(), xs.tolist()):
        info = mapping[PixelColor(*bitmap[y, x].tolist())]
        if not info.stitches:
            continue
        stitch = info.stitches[rng.randrange(len(info.stitches))]
        center_x = tile_w * x + tile_w // 2
        center_y = tile_h * y + tile_h // 2
        blit_blended(
            stitch,
            stitches_layer,
            center_x - stitch.shape[1] // 2,
            center_y - stitch.shape[0] // 2,
            BlendMode.NORMAL,
        )

    combined = blend(stitches_layer, background, BlendMode.NORMAL)
    logger.debug("Rendered %d preview stitches", len(ys))
    return PreviewImages(
        background=premultiplied_to_bitmap(background),
        stitches=premultiplied_to_bitmap(stitches_layer),
        combined=premultiplied_to_bitmap(combined),
    )


PREVIEW_FILE_SUFFIXES = {
    "background": "_complete_background.png",
    "stitches": "_complete_stitches.png",
    "combined": "_complete.png",
}


def preview_filenames(image_name: str) -> dict:
    return {part: image_name + suffix for part, suffix in PREVIEW_FILE_SUFFIXES.items()}


__all__ = ["PreviewImages", "preview_filenames", "render_preview", "tile_background"]
