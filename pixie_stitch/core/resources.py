"""
Static assets shared (read-only) by every render task: fonts, symbol sets and the stitch
textures used by the preview. Loaded once before a batch starts.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .. import settings
from ..color.blend import to_premultiplied
from ..imaging.codec import decode_image
from ..imaging.text import BitmapFont
from .errors import ResourceError
from .symbols import (
    SYMBOLS_LIST_FILENAME,
    create_alphanumeric_symbols,
    load_symbol_images,
    read_symbol_list,
    render_symbol_glyphs,
)

logger = logging.getLogger(__name__)

BACKGROUND_TILE_FILENAME = "aida_8x8.png"
STITCH_FILENAMES = ("stitch1.png", "stitch2.png", "stitch3.png")
STITCH_LUMINANCE_FILENAMES = ("stitch1_lum.png", "stitch2_lum.png", "stitch3_lum.png")

FABRIC_CELL_PX = 8


@dataclass(frozen=True, eq=False)
class Resources:
    resource_dir: Path
    font: BitmapFont
    font_big: BitmapFont
    glyph_symbols: Tuple[np.ndarray, ...]
    alphanumeric_symbols: Tuple[np.ndarray, ...]
    # premultiplied float32 colors
    stitch_tiles: Tuple[np.ndarray, ...]
    stitch_luminance_tiles: Tuple[np.ndarray, ...]
    background_tile_8x8: np.ndarray


def _executable_dir() -> Path:
    argv0 = sys.argv[0] if sys.argv and sys.argv[0] else ""
    return Path(argv0).resolve().parent if argv0 else Path.cwd()


def resource_dir_candidates() -> List[Path]:
    if settings.RESOURCES_DIR:
        return [Path(settings.RESOURCES_DIR)]
    return [
        _executable_dir() / "resources",
        Path.cwd() / "resources",
        settings.BUNDLED_RESOURCES_DIR,
    ]


def resolve_resource_dir(candidates: Optional[Sequence[Path]] = None) -> Path:
    candidates = list(candidates) if candidates is not None else resource_dir_candidates()
    for candidate in candidates:
        if candidate.is_dir():
            return candidate
    searched = ", ".join(f"'{c}'" for c in candidates)
    raise ResourceError(f"Missing `resources` path (searched {searched})")


# --------------------------------------------------------------------------- textures


def _synthesize_fabric_tile(cell_px: int = FABRIC_CELL_PX) -> np.ndarray:
    """8x8 cells of plain aida weave with a hole at every cell corner."""
    size = 8 * cell_px
    yy, xx = np.mgrid[0:size, 0:size]
    ux = (xx % cell_px) / (cell_px - 1)
    uy = (yy % cell_px) / (cell_px - 1)
    weave = 0.92 + 0.05 * np.cos(np.pi * (ux - 0.5)) * np.cos(np.pi * (uy - 0.5))
    hole = ((xx % cell_px) < 2) & ((yy % cell_px) < 2)
    shade = np.where(hole, 0.72, weave)

    tile = np.empty((size, size, 4), dtype=np.uint8)
    base = np.array([240, 236, 226], dtype=np.float64)
    tile[..., :3] = np.clip(base * shade[..., None], 0, 255).astype(np.uint8)
    tile[..., 3] = 255
    return tile


def _synthesize_stitch(cell_px: int, variant: int, luminance: bool) -> np.ndarray:
    """One cross stitch slightly larger than a cell; the luminance version carries the shading."""
    size = cell_px + 4
    yy, xx = np.mgrid[0:size, 0:size].astype(np.float64)
    thickness = 1.6 + 0.3 * variant
    diag_a = np.abs(xx - yy) / np.sqrt(2.0)
    diag_b = np.abs(xx + yy - (size - 1)) / np.sqrt(2.0)
    coverage = np.clip(thickness - np.minimum(diag_a, diag_b), 0.0, 1.0)

    along = (xx + yy) / (2.0 * (size - 1))
    twist = 0.5 + 0.5 * np.cos(2.0 * np.pi * (along * (2 + variant)))

    tile = np.zeros((size, size, 4), dtype=np.uint8)
    value = (180 + 60 * twist) if luminance else np.full_like(twist, 235.0)
    tile[..., :3] = np.clip(value, 0, 255).astype(np.uint8)[..., None]
    tile[..., 3] = (coverage * 255).astype(np.uint8)
    return tile


def _load_texture(path: Path) -> Optional[np.ndarray]:
    if not path.is_file():
        return None
    return decode_image(path)


def _load_textures(resource_dir: Path):
    background = _load_texture(resource_dir / BACKGROUND_TILE_FILENAME)
    stitches = [_load_texture(resource_dir / name) for name in STITCH_FILENAMES]
    luminance = [_load_texture(resource_dir / name) for name in STITCH_LUMINANCE_FILENAMES]

    if background is None:
        logger.warning("No %s in %s, synthesizing fabric texture", BACKGROUND_TILE_FILENAME, resource_dir)
        background = _synthesize_fabric_tile()
    cell_px = max(1, background.shape[1] // 8)

    if any(s is None for s in stitches) or any(s is None for s in luminance):
        logger.warning("Stitch textures missing in %s, synthesizing them", resource_dir)
        stitches = [_synthesize_stitch(cell_px, i, luminance=False) for i in range(3)]
        luminance = [_synthesize_stitch(cell_px, i, luminance=True) for i in range(3)]

    for stitch, lum in zip(stitches, luminance):
        if stitch.shape != lum.shape:
            raise ResourceError(
                f"Stitch texture and its luminance texture differ in size in '{resource_dir}'"
            )

    return (
        tuple(to_premultiplied(s) for s in stitches),
        tuple(to_premultiplied(s) for s in luminance),
        to_premultiplied(background),
    )


# --------------------------------------------------------------------------- loading


def load_resources(resource_dir: Optional[Path] = None) -> Resources:
    resource_dir = Path(resource_dir) if resource_dir is not None else resolve_resource_dir()
    if not resource_dir.is_dir():
        raise ResourceError(f"Missing `resources` path '{resource_dir}'")
    logger.info("Loading resources from %s", resource_dir)

    font_dir = resource_dir / "fonts"
    font = BitmapFont.load(settings.FONT_SIZE, font_dir)
    font_big = BitmapFont.load(settings.FONT_SIZE_BIG, font_dir)

    glyph_symbols = load_symbol_images(resource_dir, settings.TILE_SIZE)
    if not glyph_symbols:
        symbol_list = resource_dir / SYMBOLS_LIST_FILENAME
        if not symbol_list.is_file():
            symbol_list = settings.BUNDLED_RESOURCES_DIR / SYMBOLS_LIST_FILENAME
        if not symbol_list.is_file():
            raise ResourceError(f"No symbol images or {SYMBOLS_LIST_FILENAME} in '{resource_dir}'")
        glyph_symbols = render_symbol_glyphs(read_symbol_list(symbol_list), font, settings.TILE_SIZE)
    alphanumeric_symbols = create_alphanumeric_symbols(font, settings.TILE_SIZE)

    stitch_tiles, stitch_luminance_tiles, background = _load_textures(resource_dir)
    logger.debug(
        "Loaded %d glyph symbols, %d alphanumeric symbols, %d stitch textures",
        len(glyph_symbols),
        len(alphanumeric_symbols),
        len(stitch_tiles),
    )

    return Resources(
        resource_dir=resource_dir,
        font=font,
        font_big=font_big,
        glyph_symbols=tuple(glyph_symbols),
        alphanumeric_symbols=tuple(alphanumeric_symbols),
        stitch_tiles=stitch_tiles,
        stitch_luminance_tiles=stitch_luminance_tiles,
        background_tile_8x8=background,
    )


__all__ = ["Resources", "load_resources", "resolve_resource_dir", "resource_dir_candidates"]
