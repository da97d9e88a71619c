"""Failures that stop processing of an input image (or of the whole batch)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class PixieStitchError(Exception):
    def __init__(self, message: str, image_path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.image_path = str(image_path) if image_path is not None else None

    def __str__(self) -> str:
        if self.image_path and self.image_path not in self.message:
            return f"{self.message} ('{self.image_path}')"
        return self.message


class ConfigurationError(PixieStitchError):
    pass


class ResourceError(ConfigurationError):
    pass


class InsufficientSymbolsError(ConfigurationError, ValueError):
    def __init__(
        self,
        color_count: int,
        symbol_count: int,
        purpose: str,
        image_path: Optional[Union[str, Path]] = None,
    ) -> None:
        super().__init__(
            f"Not enough symbols to map {color_count} colors found in given image for {purpose} "
            f"(only {symbol_count} available)",
            image_path=image_path,
        )
        self.color_count = color_count
        self.symbol_count = symbol_count
        self.purpose = purpose


class ImageInputError(PixieStitchError):
    pass


class OutputError(PixieStitchError):
    """An output directory or file could not be prepared, written or read back."""

    def __init__(
        self,
        message: str,
        output_path: Union[str, Path],
        image_path: Optional[Union[str, Path]] = None,
    ) -> None:
        super().__init__(message, image_path=image_path)
        self.output_path = str(output_path)


__all__ = [
    "ConfigurationError",
    "ImageInputError",
    "InsufficientSymbolsError",
    "OutputError",
    "PixieStitchError",
    "ResourceError",
]
