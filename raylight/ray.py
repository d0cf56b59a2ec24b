"""
Ray class for representing rays in 3D space.

A ray is defined by an origin point and a direction vector.
Ray(t) = origin + t * direction
"""

from __future__ import annotations
from .vec3 import Vec3, Point3


class Ray:
    """A ray with origin and direction.

    The parametric form is: P(t) = origin + t * direction.
    Every ray the renderer builds carries a unit direction, so t is a
    distance in world units.
    """

    __slots__ = ('origin', 'direction')

    def __init__(self, origin: Point3, direction: Vec3):
        """Create a ray with given origin and direction.

        Args:
            origin: The starting point of the ray
            direction: The direction vector
        """
        self.origin = origin
        self.direction = direction

    @classmethod
    def towards(cls, origin: Point3, target: Point3) -> tuple[Ray, float]:
        """Build a unit ray from ``origin`` aimed at ``target``.

        Returns:
            The ray and the distance between the two points
        """
        offset = target - origin
        distance = offset.length()
        return cls(origin, offset.normalize()), distance

    def at(self, t: float) -> Point3:
        """Get the point along the ray at parameter t.

        Args:
            t: The parameter value (distance if direction is normalized)

        Returns:
            The point at origin + t * direction
        """
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"
