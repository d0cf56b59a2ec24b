"""
Scene description language parser.

Supports a YAML (or JSON) scene description format with:
- Camera configuration
- Render settings
- Scene-wide ambient and background
- Materials library
- Objects (shapes with materials)
- Lights
- Stereo settings

Example scene file:
```yaml
camera:
  position: [0, 0, 0]
  look: [0, 0, 1]
  up: [0, 1, 0]
  fov: 60

render:
  width: 320
  height: 240
  max_depth: 4
  antialiasing: 2

scene:
  ambient: 0.2
  background: "#102040"

materials:
  white:
    color: [1, 1, 1]
    diffuse: 0.6
    specular: 0.2
    specular_n: 32

objects:
  - type: sphere
    center: [0, 0, 16]
    radius: 5
    material: white

lights:
  - type: point
    position: [3, 5, 15]
    color: [1, 1, 1]
    intensity: 1

stereo:
  interocular: 0.5
```
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional, Union

import yaml

from .vec3 import Vec3
from .color import Color
from .camera import Camera
from .shapes import Sphere, Triangle
from .materials import Material, Shading, InvalidMaterialError
from .lights import PointLight, LightList
from .scene import Scene, DEFAULT_AMBIENT
from .renderer import RenderSettings

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


@dataclass
class SceneDescription:
    """Everything a scene file describes."""
    scene: Scene
    camera: Camera
    lights: LightList
    settings: RenderSettings
    interocular: Optional[float] = None


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}

    def parse_file(self, filepath: Union[str, Path]) -> SceneDescription:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            The parsed scene description
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                # YAML is a superset of JSON
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot read scene file {filepath}: {e}") from e

        logger.debug("Loaded scene file %s", path)
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> SceneDescription:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            The parsed scene description
        """
        if not isinstance(data, dict):
            raise SceneParseError(f"Scene description must be a mapping, got {type(data).__name__}")

        try:
            scene = self._parse_scene(data.get('scene', {}))

            # Parse materials first (objects reference them)
            self._parse_materials(data.get('materials', {}))
            self._parse_objects(data.get('objects', []), scene)
            lights = self._parse_lights(data.get('lights', []))

            camera = self._parse_camera(data.get('camera', {}))
            settings = self._parse_settings(data.get('render', {}))
            interocular = None
            if 'stereo' in data:
                interocular = float(data['stereo'].get('interocular', 0.5))
        except SceneParseError:
            raise
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise SceneParseError(f"Invalid scene description: {e}") from e

        logger.debug("Parsed %d objects, %d lights, %d materials", len(scene), len(lights), len(self.materials))
        return SceneDescription(scene, camera, lights, settings, interocular)

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from a list or an x/y/z mapping."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Vec3(
                float(data.get('x', 0)),
                float(data.get('y', 0)),
                float(data.get('z', 0))
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from a list, an r/g/b/a mapping or a hex string."""
        if isinstance(data, (list, tuple)):
            if len(data) not in (3, 4):
                raise SceneParseError(f"Color must have 3 or 4 components, got {len(data)}")
            return Color(*(float(c) for c in data))
        elif isinstance(data, dict):
            return Color(
                float(data.get('r', 0)),
                float(data.get('g', 0)),
                float(data.get('b', 0)),
                float(data.get('a', 1))
            )
        elif isinstance(data, str):
            try:
                return Color.from_hex(data)
            except ValueError as e:
                raise SceneParseError(f"Cannot parse color from string: {data}") from e
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        shading_name = str(mat_data.get('shading', 'phong')).lower()
        try:
            shading = Shading(shading_name)
        except ValueError as e:
            raise SceneParseError(f"Unknown shading: {shading_name}") from e

        try:
            return Material(
                color=self._parse_color(mat_data.get('color', [1, 1, 1])),
                diffuse=float(mat_data.get('diffuse', 0.8)),
                specular=float(mat_data.get('specular', 0.2)),
                specular_n=int(mat_data.get('specular_n', 16)),
                reflectivity=float(mat_data.get('reflectivity', 0.0)),
                shading=shading,
            )
        except InvalidMaterialError as e:
            raise SceneParseError(f"Invalid material: {e}") from e

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in materials_data.items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list, scene: Scene) -> None:
        """Parse objects section."""
        for obj_data in objects_data:
            obj_type = obj_data.get('type', 'sphere').lower()
            material = self._get_material(obj_data.get('material'))

            if obj_type == 'sphere':
                center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
                radius = float(obj_data.get('radius', 1.0))
                scene.add(Sphere(center, radius, material))

            elif obj_type == 'triangle':
                a = self._parse_vec3(obj_data['a'])
                b = self._parse_vec3(obj_data['b'])
                c = self._parse_vec3(obj_data['c'])
                scene.add(Triangle(a, b, c, material))

            elif obj_type == 'background':
                scene.add(Sphere.background(material))

            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_lights(self, lights_data: list) -> LightList:
        """Parse lights section."""
        lights = LightList()
        for light_data in lights_data:
            light_type = light_data.get('type', 'point').lower()
            if light_type != 'point':
                raise SceneParseError(f"Unknown light type: {light_type}")

            position = self._parse_vec3(light_data.get('position', [0, 5, 0]))
            color = self._parse_color(light_data.get('color', [1, 1, 1]))
            intensity = float(light_data.get('intensity', 1.0))
            lights.add(PointLight(position, color, intensity))
        return lights

    def _parse_scene(self, scene_data: Dict[str, Any]) -> Scene:
        """Parse scene-wide settings."""
        background = None
        if 'background' in scene_data:
            background = self._parse_color(scene_data['background'])
        return Scene(
            ambient=float(scene_data.get('ambient', DEFAULT_AMBIENT)),
            background=background
        )

    def _parse_camera(self, camera_data: Dict[str, Any]) -> Camera:
        """Parse camera section."""
        return Camera(
            position=self._parse_vec3(camera_data.get('position', [0, 0, 0])),
            look=self._parse_vec3(camera_data.get('look', [0, 0, 1])),
            up=self._parse_vec3(camera_data.get('up', [0, 1, 0])),
            fov=float(camera_data.get('fov', 60))
        )

    def _parse_settings(self, settings_data: Dict[str, Any]) -> RenderSettings:
        """Parse render settings section."""
        return RenderSettings(
            width=int(settings_data.get('width', 800)),
            height=int(settings_data.get('height', 600)),
            max_depth=int(settings_data.get('max_depth', 5)),
            antialiasing=int(settings_data.get('antialiasing', 0)),
            tile_size=int(settings_data.get('tile_size', 32)),
            num_threads=int(settings_data.get('threads', 0))
        )


def load_scene(filepath: Union[str, Path]) -> SceneDescription:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        The parsed scene description
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> SceneDescription:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        The parsed scene description
    """
    parser = SceneParser()
    return parser.parse_dict(data)
