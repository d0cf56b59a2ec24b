#!/usr/bin/env python3
"""
raylight - A recursive ray tracer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from raylight.vec3 import Vec3, Point3
from raylight.color import Color
from raylight.camera import Camera
from raylight.shapes import Sphere, Triangle
from raylight.materials import Material
from raylight.lights import PointLight, LightList
from raylight.scene import Scene
from raylight.renderer import Renderer, RenderSettings
from raylight.stereo import AnaglyphRenderer
from raylight.scene_parser import SceneDescription, SceneParseError, load_scene
from raylight.tracer import RenderPreconditionError
from raylight.logging_config import setup_logging

logger = logging.getLogger("raylight.main")


def create_demo_scene(settings: RenderSettings) -> SceneDescription:
    """A single white sphere in front of a dark backdrop."""
    scene = Scene()
    scene.add(Sphere.background(Material.flat(Color(0.1, 0.1, 0.2))))
    scene.add(Sphere(Point3(0, 0, 16), 5, Material(Color(1, 1, 1), diffuse=0.6, specular=0.2, specular_n=32)))

    lights = LightList([PointLight(Point3(3, 5, 15), Color(1, 1, 1), 1.0)])
    camera = Camera(Point3(0, 0, 0), Vec3(0, 0, 1), Vec3(0, 1, 0), fov=60)
    return SceneDescription(scene, camera, lights, settings)


def create_stereo_scene(settings: RenderSettings) -> SceneDescription:
    """Spheres at several depths over a mirror floor, with a glass sphere."""
    scene = Scene(background=Color(0.05, 0.05, 0.1))

    floor = Material(Color(0.6, 0.6, 0.6), diffuse=0.7, specular=0.1, reflectivity=0.3)
    scene.add(Triangle(Point3(-20, -4, 0), Point3(20, -4, 0), Point3(-20, -4, 40), floor))
    scene.add(Triangle(Point3(20, -4, 0), Point3(20, -4, 40), Point3(-20, -4, 40), floor))

    scene.add(Sphere(Point3(-4, -1, 14), 3, Material(Color(0.9, 0.2, 0.2))))
    scene.add(Sphere(Point3(3, 0, 20), 4, Material.mirror(Color(0.8, 0.8, 0.9))))
    scene.add(Sphere(Point3(0, -2.5, 9), 1.5, Material.glass(Color(0.3, 0.6, 1.0))))

    lights = LightList([
        PointLight(Point3(-10, 10, 5), Color(1, 1, 1), 1.0),
        PointLight(Point3(10, 8, 10), Color(1, 0.9, 0.8), 0.5),
    ])
    camera = Camera(Point3(0, 1, 0), Vec3(0, -0.1, 1), Vec3(0, 1, 0), fov=60)
    return SceneDescription(scene, camera, lights, settings, interocular=0.6)


BUILTIN_SCENES = {
    'demo': create_demo_scene,
    'stereo': create_stereo_scene,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='raylight - A recursive ray tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene demo --output render.png
  python main.py --scene stereo --stereo --aa 3 --output anaglyph.png
  python main.py --scene scenes/spheres.yaml --threads 8
        '''
    )

    parser.add_argument('--scene', type=str, default='demo',
                        help='Built-in scene (demo, stereo) or path to a YAML/JSON scene file')
    parser.add_argument('--width', type=int, help='Image width')
    parser.add_argument('--height', type=int, help='Image height')
    parser.add_argument('--depth', type=int, help='Recursion budget for reflection/transparency')
    parser.add_argument('--aa', type=int, help='Antialiasing grid size (0 = off)')
    parser.add_argument('--threads', type=int, help='Number of threads (0=auto)')
    parser.add_argument('--stereo', action='store_true', help='Render a red/cyan anaglyph')
    parser.add_argument('--ipd', type=float, help='Interocular distance for --stereo')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('--log-level', type=str, default='INFO', help='Log level (default: INFO)')
    parser.add_argument('--log-file', type=str, help='Also log to this file')
    return parser


def load_description(args: argparse.Namespace) -> SceneDescription:
    """Resolve --scene and apply command-line overrides."""
    if args.scene in BUILTIN_SCENES:
        description = BUILTIN_SCENES[args.scene](RenderSettings(width=320, height=240, max_depth=4))
    else:
        description = load_scene(args.scene)

    settings = description.settings
    overrides = {
        'width': args.width,
        'height': args.height,
        'max_depth': args.depth,
        'antialiasing': args.aa,
        'tile_size': None,
        'num_threads': args.threads,
    }
    description.settings = RenderSettings(**{
        name: value if value is not None else getattr(settings, name)
        for name, value in overrides.items()
    })
    if args.ipd is not None:
        description.interocular = args.ipd
    return description


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        description = load_description(args)
    except (SceneParseError, ValueError) as e:
        logger.error("Cannot load scene: %s", e)
        return 2

    settings = description.settings
    logger.info("Scene %s: %d objects, %d lights", args.scene, len(description.scene), len(description.lights))

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    try:
        if args.stereo:
            interocular = description.interocular if description.interocular is not None else 0.5
            stereo = AnaglyphRenderer(settings, interocular)
            image = stereo.render(description.scene, description.camera, description.lights).composite
            logger.info("Both eyes traced %d rays", stereo.ray_count)
        else:
            renderer = Renderer(settings)
            renderer.set_progress_callback(progress_callback)
            image = renderer.render(description.scene, description.camera, description.lights)
            print()
            logger.info("Rays per second: %.0f", renderer.last_stats.rays_per_second)
    except (RenderPreconditionError, ValueError) as e:
        logger.error("Cannot render: %s", e)
        return 2

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info("Saving to: %s", output_path)
    image.save(output_path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
