"""
Per-pixel sampling.

With antialiasing off a pixel gets one ray through its center. With a grid
of size n it gets n x n evenly spaced sub-rays whose colors are averaged.
"""

from __future__ import annotations
from typing import Tuple

from .camera import Viewport
from .color import Color
from .lights import LightList
from .scene import Scene
from .tracer import trace


def grid_offsets(n: int) -> list[float]:
    """Sub-pixel offsets from the pixel center for an n x n grid.

    The first offset is -0.5 + step/2 with step = 1/n, so the samples are
    centered in n equal cells spanning the pixel.
    """
    if n < 1:
        raise ValueError(f"Grid size must be >= 1, got {n}")
    step = 1.0 / n
    first = -0.5 + step / 2
    return [first + step * k for k in range(n)]


def sample_pixel(
    viewport: Viewport,
    x: int,
    y: int,
    scene: Scene,
    lights: LightList,
    max_depth: int,
    antialiasing: int = 0
) -> Tuple[Color, int]:
    """Compute the color of pixel (x, y).

    Args:
        viewport: Camera bound to the image size
        x, y: Pixel coordinates
        scene: The scene to trace against
        lights: Light sources
        max_depth: Recursion budget for every primary ray
        antialiasing: 0 for a single centered ray, else the grid size

    Returns:
        The pixel color and the total number of rays traced
    """
    cx = x + 0.5
    cy = y + 0.5

    if antialiasing <= 0:
        return trace(viewport.get_ray(cx, cy), scene, lights, max_depth)

    offsets = grid_offsets(antialiasing)
    samples = []
    ray_count = 0
    for dx in offsets:
        for dy in offsets:
            color, rays = trace(viewport.get_ray(cx + dx, cy + dy), scene, lights, max_depth)
            samples.append(color)
            ray_count += rays

    return Color.mean(samples), ray_count
