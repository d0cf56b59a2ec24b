"""
RGBA pixel buffer.

Holds float colors while rendering and quantizes to 8 bits per channel
only when the raster is exported or saved.
"""

from __future__ import annotations
from pathlib import Path
from typing import Union
import numpy as np

from .color import Color


class Image:
    """A width x height raster of RGBA floats."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        self._pixels = np.zeros((height, width, 4), dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Image:
        """Wrap an (height, width, 4) array of floats."""
        data = np.asarray(arr, dtype=np.float64)
        if data.ndim != 3 or data.shape[2] != 4:
            raise ValueError(f"Expected an (H, W, 4) array, got shape {data.shape}")
        image = cls.__new__(cls)
        image._pixels = data.copy()
        return image

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    def new_like(self) -> Image:
        """A blank image with the same dimensions."""
        return Image(self.width, self.height)

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        self._pixels[y, x] = color.to_array()

    def get_pixel(self, x: int, y: int) -> Color:
        return Color.from_array(self._pixels[y, x].copy())

    def paste(self, x0: int, y0: int, block: np.ndarray) -> None:
        """Copy an (h, w, 4) block with its top-left corner at (x0, y0)."""
        h, w = block.shape[:2]
        self._pixels[y0:y0 + h, x0:x0 + w] = block

    def to_array(self) -> np.ndarray:
        """Return the float RGBA raster (copy)."""
        return self._pixels.copy()

    def to_rgba8(self) -> np.ndarray:
        """Clamp and quantize to an (H, W, 4) uint8 array."""
        return (np.clip(self._pixels, 0.0, 1.0) * 255.0).astype(np.uint8)

    def save(self, filename: Union[str, Path]) -> None:
        """Save as an 8-bit RGBA image; the extension picks the format.

        Args:
            filename: Output filename
        """
        from PIL import Image as PILImage

        pil_image = PILImage.fromarray(self.to_rgba8())
        pil_image.save(str(filename))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and bool(np.array_equal(self._pixels, other._pixels))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Image({self.width}x{self.height})"
