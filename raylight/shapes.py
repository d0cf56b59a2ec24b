"""
Geometric shapes for the ray tracer.

Each shape implements the Geometry interface: an ``intersect`` method that
finds the nearest acceptable hit closer than a caller-supplied bound, and a
``normal`` method.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .materials import Material

# Determinants smaller than this mean a degenerate or edge-on triangle
DETERMINANT_EPSILON = 1e-12


@dataclass
class Hit:
    """Stores information about a ray-object intersection.

    Attributes:
        t: The ray parameter at intersection (inf for the background)
        point: The intersection point in world space
        normal: The unit surface normal at the intersection
        material: The material of the surface that was hit
        index: Scene handle of the geometry, set by the scene (None until then)
    """
    t: float
    point: Point3
    normal: Vec3
    material: Material
    index: Optional[int] = None

    @property
    def is_background(self) -> bool:
        return math.isinf(self.t)


class Geometry(ABC):
    """Interface for all objects that can be hit by rays."""

    material: Material

    @abstractmethod
    def intersect(self, ray: Ray, closest: float) -> Optional[Hit]:
        """Test if ray intersects this object nearer than ``closest``.

        Args:
            ray: The ray to test
            closest: Distance of the nearest hit found so far (pruning bound)

        Returns:
            Hit if an acceptable intersection was found, None otherwise
        """

    @abstractmethod
    def normal(self, point: Point3) -> Vec3:
        """Unit surface normal at ``point``."""


class Sphere(Geometry):
    """A sphere defined by center and radius.

    A sphere of infinite radius acts as a catch-all backdrop: it is hit at
    infinite distance by any ray that has hit nothing else.
    """

    def __init__(self, center: Point3, radius: float, material: Material):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Non-negative radius, or math.inf for a backdrop
            material: Material for shading
        """
        if math.isnan(radius) or radius < 0:
            raise ValueError(f"Sphere radius must be >= 0 or inf, got {radius}")
        self.center = center
        self.radius = radius
        self.material = material

    @classmethod
    def background(cls, material: Material) -> Sphere:
        """Create an infinite backdrop sphere."""
        return cls(Point3(0, 0, 0), math.inf, material)

    def intersect(self, ray: Ray, closest: float) -> Optional[Hit]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0.
        """
        if math.isinf(self.radius):
            # Only reported when nothing finite has been hit yet
            if not math.isinf(closest):
                return None
            return Hit(
                t=math.inf,
                point=Point3(0, 0, 0),
                normal=-ray.direction.normalize(),
                material=self.material
            )

        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant <= 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Smallest positive root, then the pruning bound
        root = (-half_b - sqrtd) / a
        if root <= 0:
            root = (-half_b + sqrtd) / a
            if root <= 0:
                return None
        if root >= closest:
            return None

        point = ray.at(root)
        return Hit(
            t=root,
            point=point,
            normal=self.normal(point),
            material=self.material
        )

    def normal(self, point: Point3) -> Vec3:
        return (point - self.center).normalize()

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Triangle(Geometry):
    """A triangle defined by three vertices.

    The normal is cross(c - a, b - a), so the winding of the vertices
    decides which side it faces.
    """

    def __init__(self, a: Point3, b: Point3, c: Point3, material: Material):
        """Create a triangle from three vertices.

        Args:
            a, b, c: The three vertices
            material: Material for shading
        """
        self.a = a
        self.b = b
        self.c = c
        self.material = material

        # Pre-compute the system columns and the constant normal
        self.e1 = a - b
        self.e2 = a - c
        self._normal = (c - a).cross(b - a).normalize()

    def intersect(self, ray: Ray, closest: float) -> Optional[Hit]:
        """Solve beta(a-b) + gamma(a-c) + t*d = a - o with Cramer's rule."""
        d = ray.direction
        r = self.a - ray.origin

        e2_x_d = self.e2.cross(d)
        det = self.e1.dot(e2_x_d)
        if abs(det) < DETERMINANT_EPSILON:
            return None

        inv_det = 1.0 / det
        t = self.e1.dot(self.e2.cross(r)) * inv_det
        if t <= 0 or t > closest:
            return None

        gamma = self.e1.dot(r.cross(d)) * inv_det
        if gamma < 0 or gamma > 1:
            return None

        beta = r.dot(e2_x_d) * inv_det
        if beta < 0 or beta > 1 - gamma:
            return None

        return Hit(
            t=t,
            point=ray.at(t),
            normal=self._normal,
            material=self.material
        )

    def normal(self, point: Point3) -> Vec3:
        return self._normal

    def __repr__(self) -> str:
        return f"Triangle({self.a}, {self.b}, {self.c})"
