from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Sequence, Tuple

import numpy as np
from PIL import Image

from pixie_stitch import settings
from pixie_stitch.core.resources import Resources, load_resources


def make_rgba_image(
    pixels: Sequence[Sequence[Tuple[int, ...]]],
) -> np.ndarray:
    """Build a bitmap from rows of RGB or RGBA tuples."""
    rows = [[tuple(p) + (255,) * (4 - len(p)) for p in row] for row in pixels]
    return np.array(rows, dtype=np.uint8)


def make_checker_image(cols: int, rows: int, colors=((180, 80, 60), (60, 90, 180))) -> np.ndarray:
    image = np.zeros((rows, cols, 4), dtype=np.uint8)
    for y in range(rows):
        for x in range(cols):
            image[y, x, :3] = colors[(x + y) % len(colors)]
            image[y, x, 3] = 255
    return image


def make_gradient_image(cols: int, rows: int, levels: int = 6) -> np.ndarray:
    """Horizontal ramp with ``levels`` distinct gray-blue steps."""
    image = np.zeros((rows, cols, 4), dtype=np.uint8)
    for x in range(cols):
        step = (x * levels) // max(cols, 1)
        value = int(step * 255 / max(levels - 1, 1))
        image[:, x] = (value, value, min(255, value + 20), 255)
    return image


def write_png(path: Path, image: np.ndarray) -> Path:
    Image.fromarray(image).save(path, format="PNG")
    return path


@lru_cache(maxsize=1)
def bundled_resources() -> Resources:
    return load_resources(settings.BUNDLED_RESOURCES_DIR)
