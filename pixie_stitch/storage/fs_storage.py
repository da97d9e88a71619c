import logging
import shutil
from pathlib import Path
from typing import Optional, Union

import numpy as np

from .. import settings
from ..core.errors import OutputError
from ..imaging.codec import encode_png

logger = logging.getLogger(__name__)


class FSStorage:
    """
    Output directories of one batch, rooted at ``PIXIE_OUTPUT_DIR``.

    Every filesystem failure is raised as OutputError naming the output path, so a bad output
    location fails the image being written instead of the batch.
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root if root is not None else settings.OUTPUT_DIR)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(f"Cannot create output root '{self.root}': {exc}", self.root) from exc

    def output_dir(self, image_name: str, suffix: str = "") -> Path:
        return self.root / (f"{image_name}_{suffix}" if suffix else image_name)

    def prepare_dir(self, image_name: str, suffix: str = "") -> Path:
        """Remove the directory from a previous run and create it empty."""
        path = self.output_dir(image_name, suffix)
        # only directories are replaced; any other file there is left alone
        if path.exists() and not path.is_dir():
            raise OutputError(f"Output path '{path}' exists and is not a directory", path)
        try:
            if path.exists():
                logger.debug("Removing previous output %s", path)
                shutil.rmtree(path)
            path.mkdir(parents=True)
        except OSError as exc:
            raise OutputError(f"Cannot prepare output directory '{path}': {exc}", path) from exc
        return path

    def save_bytes(self, path: Union[str, Path], data: bytes) -> Path:
        p = self.root / path
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(data)
        except OSError as exc:
            raise OutputError(f"Cannot write '{p}': {exc}", p) from exc
        return p

    def save_png(self, path: Union[str, Path], bitmap: np.ndarray) -> Path:
        return self.save_bytes(path, encode_png(bitmap))

    def save_text(self, path: Union[str, Path], text: str) -> Path:
        return self.save_bytes(path, text.encode("utf-8"))

    def read_bytes(self, path: Union[str, Path]) -> bytes:
        p = self.root / path
        try:
            return p.read_bytes()
        except OSError as exc:
            raise OutputError(f"Cannot read back '{p}': {exc}", p) from exc
