import io
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..core.errors import ImageInputError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {".png", ".gif"}


def decode_image(image_path: Union[str, Path]) -> np.ndarray:
    """
    Decode a PNG or the first frame of a GIF into an RGBA bitmap.
    Raises ImageInputError for anything we cannot read.
    """
    path = Path(image_path)
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ImageInputError("We only support GIF or PNG images", image_path=path)
    if not path.is_file():
        raise ImageInputError(f"Cannot open file '{path}'", image_path=path)

    try:
        with Image.open(path) as img:
            if getattr(img, "n_frames", 1) < 1:
                raise ImageInputError(f"No frame found in '{path}'", image_path=path)
            img.seek(0)
            rgba = img.convert("RGBA")
            bitmap = np.array(rgba, dtype=np.uint8)
    except ImageInputError:
        raise
    except (UnidentifiedImageError, OSError, ValueError, EOFError) as exc:
        raise ImageInputError(f"Cannot decode file '{path}': {exc}", image_path=path) from exc

    if bitmap.size == 0:
        raise ImageInputError(f"Image '{path}' is empty", image_path=path)
    logger.debug("Decoded %s (%dx%d)", path, bitmap.shape[1], bitmap.shape[0])
    return bitmap


def encode_png(bitmap: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(bitmap, dtype=np.uint8)).save(buf, format="PNG")
    return buf.getvalue()


__all__ = ["SUPPORTED_SUFFIXES", "decode_image", "encode_png"]
