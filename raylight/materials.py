"""
Surface materials for the local illumination model.

A material bundles the light-response parameters of a surface:
- Base color (its alpha channel is the surface opacity)
- Diffuse and specular coefficients
- Specular exponent
- Reflectivity for mirror bounces

Materials are frozen once built and may be shared by any number of shapes.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .color import Color


class InvalidMaterialError(ValueError):
    """A material parameter is outside its valid range."""
    pass


class Shading(Enum):
    """How a surface responds to lights."""
    PHONG = 'phong'  # ambient + diffuse + specular, shadowed
    FLAT = 'flat'    # self-luminous: raw color, no lighting


@dataclass(frozen=True)
class Material:
    """Light-response parameters for a surface.

    Attributes:
        color: Base color; alpha < 1 lets light through the surface
        diffuse: Lambertian coefficient in [0, 1]
        specular: Specular highlight coefficient in [0, 1]
        specular_n: Specular exponent (higher is a tighter highlight)
        reflectivity: Fraction of a mirror-reflected ray added in [0, 1]
        shading: Lighting model for the surface
        texture: Reserved texture slot, not sampled by the renderer
    """
    color: Color
    diffuse: float = 0.8
    specular: float = 0.2
    specular_n: int = 16
    reflectivity: float = 0.0
    shading: Shading = Shading.PHONG
    texture: Optional[Any] = None

    def __post_init__(self):
        if not isinstance(self.color, Color):
            raise InvalidMaterialError(f"color must be a Color, got {type(self.color).__name__}")
        for channel, value in zip('rgba', self.color.to_array()):
            if not 0.0 <= value <= 1.0:
                raise InvalidMaterialError(f"color.{channel} must be in [0, 1], got {value}")
        for name in ('diffuse', 'specular', 'reflectivity'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidMaterialError(f"{name} must be in [0, 1], got {value}")
        if isinstance(self.specular_n, bool) or not isinstance(self.specular_n, int) or self.specular_n < 0:
            raise InvalidMaterialError(f"specular_n must be a non-negative int, got {self.specular_n!r}")

    @property
    def alpha(self) -> float:
        """Opacity of the surface."""
        return self.color.a

    @property
    def is_transparent(self) -> bool:
        return self.color.a < 1.0

    @classmethod
    def flat(cls, color: Color) -> Material:
        """A self-luminous material, e.g. for a backdrop."""
        return cls(color, diffuse=0.0, specular=0.0, shading=Shading.FLAT)

    @classmethod
    def mirror(cls, color: Color, reflectivity: float = 0.8) -> Material:
        """A shiny surface that mostly reflects its surroundings."""
        return cls(color, diffuse=0.2, specular=0.6, specular_n=64, reflectivity=reflectivity)

    @classmethod
    def glass(cls, color: Color, opacity: float = 0.2) -> Material:
        """A mostly transparent surface tinted by ``color``."""
        return cls(color.with_alpha(opacity), diffuse=0.3, specular=0.5, specular_n=64)
