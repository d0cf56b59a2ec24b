"""
RGBA color values.

Colors carry four float channels nominally in [0, 1]. The alpha channel
doubles as opacity for materials and as coverage for traced samples.
"""

from __future__ import annotations
from typing import Iterable, Union
import numpy as np

# Rec. 601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


class Color:
    """An RGBA color.

    Scaling by a number touches only r, g and b; multiplying two colors
    filters every channel, alpha included.
    """

    __slots__ = ('_data',)

    def __init__(self, r: float = 0.0, g: float = 0.0, b: float = 0.0, a: float = 1.0):
        self._data = np.array([r, g, b, a], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Color:
        """Create a Color from a length-4 (RGBA) or length-3 (RGB) array."""
        data = np.asarray(arr, dtype=np.float64)
        if data.shape == (3,):
            data = np.append(data, 1.0)
        if data.shape != (4,):
            raise ValueError(f"Color needs 3 or 4 channels, got shape {data.shape}")
        c = cls.__new__(cls)
        c._data = data
        return c

    @classmethod
    def from_rgba8(cls, r: int, g: int, b: int, a: int = 255) -> Color:
        """Create a color from 8-bit channel values."""
        return cls(r / 255.0, g / 255.0, b / 255.0, a / 255.0)

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse ``#rrggbb`` or ``#rrggbbaa``."""
        digits = text[1:] if text.startswith('#') else text
        if len(digits) not in (6, 8):
            raise ValueError(f"Expected #rrggbb or #rrggbbaa, got {text!r}")
        channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        return cls.from_rgba8(*channels)

    @classmethod
    def mean(cls, colors: Iterable[Color]) -> Color:
        """Average all four channels over ``colors`` (a box filter)."""
        stacked = np.array([c._data for c in colors])
        if stacked.size == 0:
            raise ValueError("Cannot average an empty set of colors")
        return cls.from_array(stacked.mean(axis=0))

    @property
    def r(self) -> float:
        return float(self._data[0])

    @property
    def g(self) -> float:
        return float(self._data[1])

    @property
    def b(self) -> float:
        return float(self._data[2])

    @property
    def a(self) -> float:
        return float(self._data[3])

    def __repr__(self) -> str:
        return f"Color({self.r:.4f}, {self.g:.4f}, {self.b:.4f}, {self.a:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    __hash__ = None

    def __add__(self, other: Color) -> Color:
        return Color.from_array(self._data + other._data)

    def __mul__(self, other: Union[Color, float]) -> Color:
        if isinstance(other, Color):
            return Color.from_array(self._data * other._data)
        scaled = self._data.copy()
        scaled[:3] *= other
        return Color.from_array(scaled)

    def __rmul__(self, other: float) -> Color:
        return self * other

    def overlay(self, other: Color) -> Color:
        """Composite this color over ``other`` using this color's alpha."""
        alpha = self._data[3]
        rgb = self._data[:3] * alpha + other._data[:3] * (1.0 - alpha)
        return Color.from_array(np.append(rgb, other._data[3]))

    def average(self, other: Color, weight: float) -> Color:
        """Blend every channel: ``self * weight + other * (1 - weight)``."""
        return Color.from_array(self._data * weight + other._data * (1.0 - weight))

    def luminance(self) -> float:
        return float(np.dot(self._data[:3], LUMA_WEIGHTS))

    def to_gray(self) -> Color:
        """Return the grayscale equivalent, keeping alpha."""
        y = self.luminance()
        return Color(y, y, y, self.a)

    def with_alpha(self, alpha: float) -> Color:
        data = self._data.copy()
        data[3] = alpha
        return Color.from_array(data)

    def clamp(self, min_val: float = 0.0, max_val: float = 1.0) -> Color:
        """Clamp all channels to the given range."""
        return Color.from_array(np.clip(self._data, min_val, max_val))

    def to_rgba8(self) -> tuple[int, int, int, int]:
        """Quantize to 8-bit channels (clamped, truncated)."""
        r, g, b, a = (np.clip(self._data, 0.0, 1.0) * 255.0).astype(np.uint8)
        return int(r), int(g), int(b), int(a)

    def to_hex(self) -> str:
        r, g, b, _ = self.to_rgba8()
        return f"#{r:02x}{g:02x}{b:02x}"

    def to_array(self) -> np.ndarray:
        """Return the underlying RGBA array (copy)."""
        return self._data.copy()


BLACK = Color(0.0, 0.0, 0.0, 1.0)
WHITE = Color(1.0, 1.0, 1.0, 1.0)
TRANSPARENT = Color(0.0, 0.0, 0.0, 0.0)

# Anaglyph glasses: left eye sees through cyan, right eye through red
CYAN = Color(0.0, 1.0, 1.0, 1.0)
RED = Color(1.0, 0.0, 0.0, 1.0)
