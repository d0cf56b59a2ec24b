"""
Renderer module - drives the tracer over a whole image.

Implements:
- Camera ray generation per pixel (optionally supersampled)
- Multi-threaded tile-based rendering
- Ray count and timing diagnostics
"""

from __future__ import annotations
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Callable, Tuple
import numpy as np

from .camera import Camera, Viewport
from .image import Image
from .lights import LightList
from .sampling import sample_pixel
from .scene import Scene
from .tracer import check_depth

logger = logging.getLogger(__name__)

Tile = Tuple[int, int, int, int]


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 800
    height: int = 600
    max_depth: int = 5
    antialiasing: int = 0  # 0 = off, n = n x n grid
    tile_size: int = 32
    num_threads: int = 0  # 0 = auto-detect

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.antialiasing < 0:
            raise ValueError(f"antialiasing must be >= 0, got {self.antialiasing}")
        if self.tile_size <= 0:
            raise ValueError(f"tile_size must be positive, got {self.tile_size}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must be >= 0, got {self.num_threads}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4


@dataclass
class RenderStats:
    """Diagnostics from the most recent render."""
    ray_count: int
    elapsed: float
    pixels: int

    @property
    def rays_per_second(self) -> float:
        return self.ray_count / self.elapsed if self.elapsed > 0 else 0.0


class Renderer:
    """Whitted-style renderer with multi-threading support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self.last_stats: Optional[RenderStats] = None
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(
        self,
        scene: Scene,
        camera: Camera,
        lights: LightList,
        max_depth: Optional[int] = None
    ) -> Image:
        """Render the scene and return the pixel buffer.

        Args:
            scene: The scene to render
            camera: The camera to render from
            lights: Light sources
            max_depth: Recursion budget (defaults to settings.max_depth)

        Returns:
            RGBA image of settings.width x settings.height

        Raises:
            RenderPreconditionError: if the recursion budget is not positive
        """
        depth = self.settings.max_depth if max_depth is None else max_depth
        check_depth(depth)

        if not lights.is_lit:
            logger.warning("Scene has no light intensity; surfaces will be unlit")

        width = self.settings.width
        height = self.settings.height
        viewport = camera.viewport(width, height)
        image = Image(width, height)

        tiles = self._generate_tiles(width, height)
        total_tiles = len(tiles)

        logger.info(
            "Rendering %dx%d (%d objects, %d lights, depth %d, aa %d) on %d thread(s)",
            width, height, len(scene), len(lights), depth,
            self.settings.antialiasing, self.settings.num_threads
        )
        start = time.perf_counter()

        def render_tile(tile: Tile) -> Tuple[Tile, np.ndarray, int]:
            return self._render_tile(tile, viewport, scene, lights, depth)

        ray_count = 0
        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                results = executor.map(render_tile, tiles)
                ray_count = self._collect(results, image, total_tiles)
        else:
            ray_count = self._collect(map(render_tile, tiles), image, total_tiles)

        elapsed = time.perf_counter() - start
        self.last_stats = RenderStats(ray_count=ray_count, elapsed=elapsed, pixels=width * height)
        logger.info("Render took %.2fs and traced %d rays", elapsed, ray_count)
        return image

    def _collect(self, results, image: Image, total_tiles: int) -> int:
        """Paste finished tiles into the image, reporting progress."""
        ray_count = 0
        for completed, (tile, block, rays) in enumerate(results, start=1):
            x0, y0, _, _ = tile
            image.paste(x0, y0, block)
            ray_count += rays
            if self._progress_callback:
                self._progress_callback(completed / total_tiles)
        return ray_count

    def _render_tile(
        self,
        tile: Tile,
        viewport: Viewport,
        scene: Scene,
        lights: LightList,
        depth: int
    ) -> Tuple[Tile, np.ndarray, int]:
        """Render a single tile into its own buffer."""
        x0, y0, x1, y1 = tile
        logger.debug("Tile (%d, %d)-(%d, %d)", x0, y0, x1, y1)
        block = np.zeros((y1 - y0, x1 - x0, 4), dtype=np.float64)
        ray_count = 0

        for y in range(y0, y1):
            for x in range(x0, x1):
                color, rays = sample_pixel(
                    viewport, x, y, scene, lights, depth, self.settings.antialiasing
                )
                block[y - y0, x - x0] = color.to_array()
                ray_count += rays

        return tile, block, ray_count

    def _generate_tiles(self, width: int, height: int) -> list[Tile]:
        """Generate tiles for parallel rendering.

        Args:
            width: Image width
            height: Image height

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles
