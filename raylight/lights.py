"""
Light sources for the ray tracer.

Point lights emit from a single position with a color and a scalar
intensity. The light list keeps the running sum of intensities, which the
renderer uses to normalize shading so scene brightness does not grow with
the number of lights.
"""

from __future__ import annotations
from typing import Iterable, Iterator, Optional

from .vec3 import Point3
from .color import Color


class PointLight:
    """A point light source.

    Point lights emit light equally in all directions from a single point.
    They produce hard shadows.
    """

    def __init__(self, position: Point3, color: Color, intensity: float = 1.0):
        """Create a point light.

        Args:
            position: Position of the light
            color: Color of the light
            intensity: Relative weight of this light, >= 0
        """
        if intensity < 0:
            raise ValueError(f"Light intensity must be >= 0, got {intensity}")
        self.position = position
        self.color = color
        self.intensity = intensity

    def __repr__(self) -> str:
        return f"PointLight(position={self.position}, intensity={self.intensity})"


class LightList:
    """An ordered set of lights with their precomputed total intensity."""

    def __init__(self, lights: Optional[Iterable[PointLight]] = None):
        self.lights: list[PointLight] = []
        self.total_intensity = 0.0
        for light in lights or ():
            self.add(light)

    def add(self, light: PointLight) -> None:
        """Add a light and fold its intensity into the total."""
        self.lights.append(light)
        self.total_intensity += light.intensity

    @property
    def is_lit(self) -> bool:
        """True when normalized shading is meaningful (total > 0)."""
        return self.total_intensity > 0

    def __len__(self) -> int:
        return len(self.lights)

    def __iter__(self) -> Iterator[PointLight]:
        return iter(self.lights)
