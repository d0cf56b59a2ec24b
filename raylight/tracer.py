"""
Recursive trace/shade - the heart of the ray tracer.

Implements:
- Nearest-hit search over the scene with self-exclusion by handle
- Local illumination (ambient + diffuse + specular), normalized by the
  total light intensity
- Shadow rays attenuated by the opacity of every occluder
- Mirror reflection and pass-through transparency drawing on one shared
  recursion budget

Ray directions are assumed to be unit length, so every ``t`` is a distance.
"""

from __future__ import annotations
import logging
from typing import Optional, Tuple

from .color import Color, TRANSPARENT
from .ray import Ray
from .scene import Scene
from .shapes import Hit
from .lights import LightList
from .materials import Shading

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """Base class for renderer failures."""
    pass


class RenderPreconditionError(RenderError):
    """The renderer was entered in a state it cannot recover from."""
    pass


def clamp(value: float) -> float:
    """Clamp ``value`` to [0, 1]."""
    return min(max(value, 0.0), 1.0)


def check_depth(depth: int) -> None:
    """Reject a non-positive recursion budget at an outer entry point."""
    if depth <= 0:
        raise RenderPreconditionError(f"Recursion budget must be > 0, got {depth}")


def trace(
    ray: Ray,
    scene: Scene,
    lights: LightList,
    remaining: int,
    ignore: Optional[int] = None
) -> Tuple[Color, int]:
    """Trace a ray through the scene.

    Args:
        ray: The ray to trace (unit direction)
        scene: The scene to trace against
        lights: Light sources used for shading
        remaining: Recursion budget shared by reflection and transparency
        ignore: Handle of a scene object to skip entirely

    Returns:
        The color seen along the ray and the number of rays traced

    Raises:
        RenderPreconditionError: if ``remaining`` is not positive
    """
    check_depth(remaining)
    return _trace(ray, scene, lights, remaining, ignore)


def shade(ray: Ray, hit: Hit, scene: Scene, lights: LightList, remaining: int) -> Tuple[Color, int]:
    """Shade a known hit, recursing for reflection and transparency.

    The hit must come from ``Scene.closest_hit`` so that it carries the
    handle used to keep the surface from shadowing or reflecting itself.

    Raises:
        RenderPreconditionError: if ``remaining`` is not positive
        ValueError: if the hit has no scene handle
    """
    check_depth(remaining)
    if hit.index is None:
        raise ValueError("Hit has no scene handle; find it with Scene.closest_hit")
    return _shade(ray, hit, scene, lights, remaining)


def _trace(
    ray: Ray,
    scene: Scene,
    lights: LightList,
    remaining: int,
    ignore: Optional[int]
) -> Tuple[Color, int]:
    hit = scene.closest_hit(ray, ignore)
    if hit is None:
        if scene.background is not None:
            return scene.background, 1
        return TRANSPARENT, 1
    return _shade(ray, hit, scene, lights, remaining)


def _shade(ray: Ray, hit: Hit, scene: Scene, lights: LightList, remaining: int) -> Tuple[Color, int]:
    material = hit.material

    # The backdrop is self-luminous and has no position to bounce from
    if hit.is_background:
        return material.color, 1

    ray_count = 1
    if material.shading is Shading.FLAT:
        local = material.color
    else:
        local = local_illumination(ray, hit, scene, lights)

    reflected = TRANSPARENT
    if material.reflectivity > 0:
        if remaining > 0:
            bounce = Ray(hit.point, ray.direction.reflect(hit.normal))
            reflected, rays = _trace(bounce, scene, lights, remaining - 1, hit.index)
            ray_count += rays
        else:
            # Out of budget: approximate the reflection by the surface itself
            reflected = material.color
        reflected = reflected * material.reflectivity

    alpha = material.alpha
    transmitted = TRANSPARENT
    if material.is_transparent and remaining > 0:
        passthrough = Ray(hit.point, ray.direction)
        transmitted, rays = _trace(passthrough, scene, lights, remaining - 1, hit.index)
        ray_count += rays

    color = local + reflected + transmitted * (1.0 - alpha)
    coverage = alpha + (1.0 - alpha) * transmitted.a
    return color.with_alpha(coverage), ray_count


def local_illumination(ray: Ray, hit: Hit, scene: Scene, lights: LightList) -> Color:
    """Ambient + diffuse + specular from every light, normalized.

    The sum over lights is weighted by each light's intensity and divided
    by the total intensity. An unlit scene contributes nothing.
    """
    if not lights.is_lit:
        return TRANSPARENT

    material = hit.material
    color = TRANSPARENT

    for light in lights:
        to_light_ray, distance = Ray.towards(hit.point, light.position)
        to_light = to_light_ray.direction
        light_amount = shadow_factor(to_light_ray, distance, scene, hit.index)
        half_angle = (to_light - ray.direction).normalize()

        mixed = light.color * material.color
        ambient = mixed * scene.ambient
        diffuse = mixed * (clamp(hit.normal.dot(to_light)) * light_amount * material.diffuse)
        specular = light.color * (
            clamp(hit.normal.dot(half_angle)) ** material.specular_n
            * light_amount
            * material.specular
        )
        color = color + (ambient + diffuse + specular) * light.intensity

    return color * (1.0 / lights.total_intensity)


def shadow_factor(ray: Ray, distance: float, scene: Scene, ignore: Optional[int]) -> float:
    """Fraction of a light that reaches the ray origin.

    Every object between the origin and the light (other than ``ignore``)
    lets through ``1 - alpha`` of what reaches it.
    """
    light_amount = 1.0
    for index, obj in enumerate(scene):
        if index == ignore:
            continue
        occluder = obj.intersect(ray, distance)
        if occluder is None:
            continue
        light_amount *= 1.0 - occluder.material.alpha
        if light_amount <= 0.0:
            return 0.0
    return light_amount
