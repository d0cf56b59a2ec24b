"""
Scene container.

The scene is an arena of geometry. Adding a shape returns an integer
handle, and hits carry the handle of the shape that produced them. Rays
spawned from a surface exclude that surface by handle, so two shapes that
happen to be geometrically identical are still told apart.
"""

from __future__ import annotations
from typing import Iterable, Iterator, Optional

from .ray import Ray
from .color import Color
from .shapes import Geometry, Hit

DEFAULT_AMBIENT = 0.2


class Scene:
    """Geometry plus the scene-wide ambient coefficient and backdrop color.

    Attributes:
        ambient: Fraction of each light's color applied regardless of shadow
        background: Color returned for rays that hit nothing (None means
            transparent black)
    """

    def __init__(
        self,
        objects: Optional[Iterable[Geometry]] = None,
        ambient: float = DEFAULT_AMBIENT,
        background: Optional[Color] = None
    ):
        if not 0.0 <= ambient <= 1.0:
            raise ValueError(f"Ambient coefficient must be in [0, 1], got {ambient}")
        self.objects: list[Geometry] = []
        self.ambient = ambient
        self.background = background
        for obj in objects or ():
            self.add(obj)

    def add(self, obj: Geometry) -> int:
        """Add an object and return its handle."""
        self.objects.append(obj)
        return len(self.objects) - 1

    def closest_hit(self, ray: Ray, ignore: Optional[int] = None) -> Optional[Hit]:
        """Find the nearest intersection, skipping the object ``ignore``."""
        closest_hit: Optional[Hit] = None
        closest_t = float('inf')

        for index, obj in enumerate(self.objects):
            if index == ignore:
                continue
            hit = obj.intersect(ray, closest_t)
            if hit is not None:
                hit.index = index
                closest_hit = hit
                closest_t = hit.t

        return closest_hit

    def __getitem__(self, index: int) -> Geometry:
        return self.objects[index]

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Geometry]:
        return iter(self.objects)
