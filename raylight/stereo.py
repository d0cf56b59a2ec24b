"""
Red/cyan anaglyph stereo rendering.

Two cameras, offset left and right of the base camera by half the
interocular distance, each render the full scene. Each eye's image is
reduced to luma and tinted through its glasses filter: cyan for the left
eye, red for the right. The tinted images are then summed.
"""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional
import numpy as np

from .camera import Camera
from .color import CYAN, RED, LUMA_WEIGHTS, Color
from .image import Image
from .lights import LightList
from .renderer import Renderer, RenderSettings
from .scene import Scene

logger = logging.getLogger(__name__)


@dataclass
class StereoResult:
    """Both eye renders and their anaglyph composite."""
    left: Image
    right: Image
    composite: Image


def merge_anaglyph(
    left: Image,
    right: Image,
    left_filter: Color = CYAN,
    right_filter: Color = RED
) -> Image:
    """Combine two eye images into one anaglyph.

    final = gray(left) * left_filter + gray(right) * right_filter,
    where gray uses Rec. 601 luma. The alpha is the larger of the two eyes.
    """
    if (left.width, left.height) != (right.width, right.height):
        raise ValueError(
            f"Eye images differ in size: {left.width}x{left.height} vs {right.width}x{right.height}"
        )

    left_px = left.to_array()
    right_px = right.to_array()
    left_gray = left_px[..., :3] @ LUMA_WEIGHTS
    right_gray = right_px[..., :3] @ LUMA_WEIGHTS

    merged = np.empty_like(left_px)
    merged[..., :3] = (
        left_gray[..., None] * left_filter.to_array()[:3]
        + right_gray[..., None] * right_filter.to_array()[:3]
    )
    merged[..., 3] = np.maximum(left_px[..., 3], right_px[..., 3])
    return Image.from_array(merged)


class AnaglyphRenderer:
    """Renders a scene once per eye and merges the results."""

    def __init__(self, settings: RenderSettings = None, interocular: float = 0.5):
        """Create a stereo renderer.

        Args:
            settings: Render configuration shared by both eyes
            interocular: Distance between the two eye positions
        """
        if interocular < 0:
            raise ValueError(f"Interocular distance must be >= 0, got {interocular}")
        self.settings = settings if settings else RenderSettings()
        self.interocular = interocular
        self.left = Renderer(self.settings)
        self.right = Renderer(self.settings)

    def eye_cameras(self, camera: Camera) -> tuple[Camera, Camera]:
        """The left and right eye cameras for ``camera``."""
        half = self.interocular / 2.0
        return camera.shifted(-half), camera.shifted(half)

    def render(
        self,
        scene: Scene,
        camera: Camera,
        lights: LightList,
        max_depth: Optional[int] = None
    ) -> StereoResult:
        """Render both eyes concurrently and merge them.

        Returns:
            StereoResult with the left, right and composite images
        """
        left_camera, right_camera = self.eye_cameras(camera)
        logger.info("Rendering anaglyph with interocular distance %.3f", self.interocular)

        with ThreadPoolExecutor(max_workers=2) as executor:
            left_future = executor.submit(self.left.render, scene, left_camera, lights, max_depth)
            right_future = executor.submit(self.right.render, scene, right_camera, lights, max_depth)
            left_image = left_future.result()
            right_image = right_future.result()

        return StereoResult(
            left=left_image,
            right=right_image,
            composite=merge_anaglyph(left_image, right_image)
        )

    @property
    def ray_count(self) -> int:
        """Rays traced by both eyes in the last render."""
        return sum(r.last_stats.ray_count for r in (self.left, self.right) if r.last_stats)
