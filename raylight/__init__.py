"""
raylight - A recursive ray tracer

A Whitted-style ray tracer with support for:
- Spheres and triangles with analytic intersection
- Ambient + diffuse + specular shading with shadows
- Mirror reflection and transparency under one recursion budget
- Grid supersampling (antialiasing)
- Red/cyan anaglyph stereo rendering
- Multi-threaded tile rendering
- YAML/JSON scene files
"""

__version__ = "0.1.0"

from .vec3 import Vec3, Point3
from .color import Color, BLACK, WHITE, TRANSPARENT, CYAN, RED
from .ray import Ray
from .materials import Material, Shading, InvalidMaterialError
from .shapes import Geometry, Hit, Sphere, Triangle
from .lights import PointLight, LightList
from .scene import Scene
from .camera import Camera, Viewport
from .tracer import trace, shade, RenderError, RenderPreconditionError
from .sampling import grid_offsets, sample_pixel
from .image import Image
from .renderer import Renderer, RenderSettings, RenderStats
from .stereo import AnaglyphRenderer, StereoResult, merge_anaglyph
from .scene_parser import SceneParser, SceneDescription, SceneParseError, load_scene, parse_scene
from .logging_config import setup_logging
