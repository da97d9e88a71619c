from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .fs_storage import FSStorage


def get_storage(root: Optional[Union[str, Path]] = None) -> FSStorage:
    return FSStorage(root)


__all__ = ["FSStorage", "get_storage"]
