"""
Camera module for generating primary rays.

The camera is described by a position, a look vector whose length is the
focal distance, an up hint and a field of view. The up hint does not need
to be orthogonal to the look vector: the viewport re-orthogonalizes it.

Coordinate ground rules: x is east/west, y is up/down, z is north/south.
With the default camera (look +z, up +y) image x grows toward world +x.
"""

from __future__ import annotations
import math

from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A pinhole camera."""

    def __init__(
        self,
        position: Point3 = Point3(0, 0, 0),
        look: Vec3 = Vec3(0, 0, 1),
        up: Vec3 = Vec3(0, 1, 0),
        fov: float = 60.0
    ):
        """Create a camera.

        Args:
            position: Camera position in world space
            look: Viewing direction; its length is the focal distance
            up: Which way is up on screen (re-orthogonalized against look)
            fov: Horizontal field of view in degrees
        """
        if look.length_squared() == 0:
            raise ValueError("Camera look vector must be non-zero")
        if not 0 < fov < 180:
            raise ValueError(f"Camera fov must be in (0, 180) degrees, got {fov}")
        if up.cross(look).length_squared() == 0:
            raise ValueError("Camera up vector must not be parallel to look")
        self.position = position
        self.look = look
        self.up = up
        self.fov = fov

    @property
    def right(self) -> Vec3:
        """Unit vector pointing to the right of the image."""
        return self.up.cross(self.look).normalize()

    def shifted(self, distance: float) -> Camera:
        """Return a copy moved ``distance`` along the right vector."""
        return Camera(
            position=self.position + self.right * distance,
            look=self.look,
            up=self.up,
            fov=self.fov
        )

    def viewport(self, width: int, height: int) -> Viewport:
        """Bind the camera to an image size."""
        return Viewport(self, width, height)

    def __repr__(self) -> str:
        return f"Camera(position={self.position}, look={self.look}, fov={self.fov})"


class Viewport:
    """A camera projected onto a ``width`` x ``height`` image plane."""

    def __init__(self, camera: Camera, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport size must be positive, got {width}x{height}")
        self.origin = camera.position
        self.width = width
        self.height = height

        # Orthonormal basis; up is rebuilt so it is exactly orthogonal to look
        self.right = camera.right
        self.up = camera.look.cross(self.right).normalize()
        self.center = camera.position + camera.look

        distance = camera.look.length()
        self.half_width = distance * math.tan(math.radians(camera.fov) / 2)
        self.half_height = self.half_width * height / width

    def get_ray(self, x: float, y: float) -> Ray:
        """Generate the ray through continuous image coordinates (x, y).

        Pixel (i, j) covers [i, i+1) x [j, j+1); y grows downward.
        The direction is normalized.

        Returns:
            A ray from the camera through the image-plane point
        """
        target = (
            self.center
            + self.right * (self.half_width * (2.0 * x / self.width - 1.0))
            - self.up * (self.half_height * (2.0 * y / self.height - 1.0))
        )
        return Ray(self.origin, (target - self.origin).normalize())

    def pixel_center_ray(self, i: int, j: int) -> Ray:
        return self.get_ray(i + 0.5, j + 0.5)
