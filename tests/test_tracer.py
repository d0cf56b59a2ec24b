"""Tests for the recursive trace/shade algorithm."""

import pytest

from raylight.vec3 import Vec3, Point3
from raylight.ray import Ray
from raylight.color import Color, TRANSPARENT
from raylight.materials import Material
from raylight.shapes import Sphere, Triangle
from raylight.lights import PointLight, LightList
from raylight.scene import Scene
from raylight.tracer import (
    trace, shade, local_illumination, shadow_factor,
    RenderPreconditionError, RenderError
)

FORWARD = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))


def gray_material(**kwargs):
    params = dict(diffuse=0.6, specular=0.2, specular_n=8)
    params.update(kwargs)
    return Material(Color(0.5, 0.5, 0.5), **params)


def flat_wall(z, color):
    """A large flat-shaded triangle facing the origin at depth z."""
    return Triangle(Point3(-50, -50, z), Point3(50, -50, z), Point3(0, 50, z), Material.flat(color))


def rgb(color):
    return color.to_array()[:3]


class TestTraceBasics:
    """Test misses, background and preconditions."""

    def test_miss_is_transparent_black(self):
        color, rays = trace(FORWARD, Scene(), LightList(), 1)
        assert color == TRANSPARENT
        assert rays == 1

    def test_miss_uses_scene_background(self):
        background = Color(0.1, 0.2, 0.3)
        color, rays = trace(FORWARD, Scene(background=background), LightList(), 1)
        assert color == background
        assert rays == 1

    def test_background_sphere_is_self_luminous(self):
        backdrop = Color(0.1, 0.2, 0.3)
        scene = Scene([Sphere.background(Material.flat(backdrop))])
        lights = LightList([PointLight(Point3(0, 5, 0), Color(1, 1, 1), 4.0)])

        color, rays = trace(FORWARD, scene, lights, 3)

        assert color == backdrop
        assert rays == 1

    @pytest.mark.parametrize("depth", [0, -1])
    def test_non_positive_budget_is_fatal(self, depth):
        with pytest.raises(RenderPreconditionError):
            trace(FORWARD, Scene(), LightList(), depth)

    def test_precondition_is_render_error(self):
        assert issubclass(RenderPreconditionError, RenderError)

    def test_shade_checks_budget(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 1, gray_material())])
        hit = scene.closest_hit(FORWARD)
        with pytest.raises(RenderPreconditionError):
            shade(FORWARD, hit, scene, LightList(), 0)

    def test_shade_needs_scene_handle(self):
        sphere = Sphere(Point3(0, 0, 10), 1, gray_material())
        scene = Scene([sphere])
        hit = sphere.intersect(FORWARD, float('inf'))
        with pytest.raises(ValueError):
            shade(FORWARD, hit, scene, LightList(), 1)

    def test_shade_matches_trace(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 2, gray_material())])
        lights = LightList([PointLight(Point3(-3, 4, 0), Color(1, 1, 1), 1.0)])
        ray, _ = Ray.towards(Point3(0, 0, 0), Point3(0.7, -0.4, 8))

        shaded = shade(ray, scene.closest_hit(ray), scene, lights, 2)

        assert shaded == trace(ray, scene, lights, 2)

    def test_lit_side_never_shadows_itself(self):
        material = Material(Color(1, 1, 1), diffuse=0.6, specular=0.2)
        scene = Scene([Sphere(Point3(0, 0, 10), 2, material)])
        lights = LightList([PointLight(Point3(0, 0, 0), Color(1, 1, 1), 1.0)])

        steps = [-1.0 + 0.25 * k for k in range(9)]
        for x in steps:
            for y in steps:
                ray, _ = Ray.towards(Point3(0, 0, 0), Point3(x, y, 8))
                hit = scene.closest_hit(ray)
                color, _ = shade(ray, hit, scene, lights, 1)
                # Ambient alone is 0.2; the camera side faces the light
                assert color.r > 0.2 + 1e-6


class TestDirectLighting:
    """Test the local illumination model."""

    def test_head_on_light(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 1, gray_material())])
        lights = LightList([PointLight(Point3(0, 0, 0), Color(1, 1, 1), 1.0)])

        color, rays = trace(FORWARD, scene, lights, 2)

        # ambient 0.5*0.2 + diffuse 0.5*0.6 + specular 1*0.2
        assert color == Color(0.6, 0.6, 0.6, 1.0)
        assert rays == 1

    def test_opaque_matte_equals_direct_term(self):
        scene = Scene([Sphere(Point3(0.5, 0.3, 10), 2, gray_material())])
        lights = LightList([PointLight(Point3(-3, 4, 2), Color(1, 0.9, 0.8), 1.0)])
        ray, _ = Ray.towards(Point3(0, 0, 0), Point3(0.2, 0.4, 9))

        color, rays = trace(ray, scene, lights, 5)
        direct = local_illumination(ray, scene.closest_hit(ray), scene, lights)

        assert (rgb(color) == rgb(direct)).all()
        assert color.a == 1.0
        assert rays == 1

    def test_two_equal_lights_are_normalized(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 2, gray_material())])
        hit = scene.closest_hit(FORWARD)
        left = PointLight(Point3(-5, 2, 0), Color(1, 1, 1), 2.0)
        right = PointLight(Point3(5, -1, 3), Color(1, 0.5, 0.5), 2.0)

        both = local_illumination(FORWARD, hit, scene, LightList([left, right]))
        only_left = local_illumination(FORWARD, hit, scene, LightList([left]))
        only_right = local_illumination(FORWARD, hit, scene, LightList([right]))

        # Each single-light result is already divided by its own intensity
        unnormalized_sum = (only_left + only_right) * 2.0
        assert rgb(both) == pytest.approx(rgb(unnormalized_sum) / 4.0)

    def test_unequal_lights_are_weighted(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 2, gray_material())])
        hit = scene.closest_hit(FORWARD)
        dim = PointLight(Point3(-5, 2, 0), Color(1, 1, 1), 1.0)
        bright = PointLight(Point3(5, -1, 3), Color(1, 1, 1), 3.0)

        both = local_illumination(FORWARD, hit, scene, LightList([dim, bright]))
        only_dim = local_illumination(FORWARD, hit, scene, LightList([dim]))
        only_bright = local_illumination(FORWARD, hit, scene, LightList([bright]))

        expected = rgb(only_dim) * 0.25 + rgb(only_bright) * 0.75
        assert rgb(both) == pytest.approx(expected)

    def test_light_behind_surface_leaves_ambient(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 1, gray_material())])
        lights = LightList([PointLight(Point3(0, 0, 20), Color(1, 1, 1), 1.0)])
        color, _ = trace(FORWARD, scene, lights, 1)
        assert rgb(color) == pytest.approx([0.1, 0.1, 0.1])

    def test_scene_ambient_is_configurable(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 1, gray_material())], ambient=0.5)
        lights = LightList([PointLight(Point3(0, 0, 20), Color(1, 1, 1), 1.0)])
        color, _ = trace(FORWARD, scene, lights, 1)
        assert rgb(color) == pytest.approx([0.25, 0.25, 0.25])

    def test_no_lights_is_unlit(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 1, gray_material())])
        color, rays = trace(FORWARD, scene, LightList(), 1)
        assert color == Color(0, 0, 0, 1)
        assert rays == 1

    def test_flat_material_ignores_lights(self):
        scene = Scene([flat_wall(10, Color(0.2, 0.4, 0.6))])
        lights = LightList([PointLight(Point3(0, 0, 0), Color(1, 0, 0), 1.0)])
        color, _ = trace(FORWARD, scene, lights, 1)
        assert color == Color(0.2, 0.4, 0.6, 1.0)


class TestShadows:
    """Test shadow ray attenuation."""

    def setup_method(self):
        self.to_light, self.distance = Ray.towards(Point3(0, 0, 0), Point3(0, 0, 10))

    def test_unblocked(self):
        assert shadow_factor(self.to_light, self.distance, Scene(), None) == 1.0

    def test_opaque_blocks(self):
        scene = Scene([Sphere(Point3(0, 0, 5), 1, gray_material())])
        assert shadow_factor(self.to_light, self.distance, scene, None) == 0.0

    def test_transparent_attenuates(self):
        glass = Material(Color(1, 1, 1, 0.5))
        scene = Scene([Sphere(Point3(0, 0, 3), 1, glass), Sphere(Point3(0, 0, 6), 1, glass)])
        assert shadow_factor(self.to_light, self.distance, scene, None) == pytest.approx(0.25)

    def test_occluder_beyond_light_ignored(self):
        scene = Scene([Sphere(Point3(0, 0, 15), 1, gray_material())])
        assert shadow_factor(self.to_light, self.distance, scene, None) == 1.0

    def test_ignored_object(self):
        scene = Scene([Sphere(Point3(0, 0, 5), 1, gray_material())])
        assert shadow_factor(self.to_light, self.distance, scene, 0) == 1.0

    def test_background_never_shadows(self):
        scene = Scene([Sphere.background(Material.flat(Color(0, 0, 0)))])
        assert shadow_factor(self.to_light, self.distance, scene, None) == 1.0

    def test_shadowed_point_gets_ambient_only(self):
        scene = Scene()
        scene.add(Sphere(Point3(0, 0, 10), 1, gray_material()))
        scene.add(Sphere(Point3(0, 0, 4), 0.5, gray_material()))
        lights = LightList([PointLight(Point3(0, 0, 2), Color(1, 1, 1), 1.0)])
        # Starts past the small sphere so only the big one is hit
        ray = Ray(Point3(0, 0, 6), Vec3(0, 0, 1))

        color, _ = trace(ray, scene, lights, 1)

        assert rgb(color) == pytest.approx([0.1, 0.1, 0.1])


class TestReflection:
    """Test mirror reflection recursion."""

    def mirror_scene(self, wall_color=Color(1, 0, 0)):
        scene = Scene()
        scene.add(Sphere(Point3(0, 0, 10), 1, Material(Color(1, 1, 1), diffuse=0, specular=0, reflectivity=1.0)))
        scene.add(flat_wall(-5, wall_color))
        return scene

    def test_reflects_what_is_behind_the_camera(self):
        color, rays = trace(FORWARD, self.mirror_scene(), LightList(), 1)
        assert color == Color(1, 0, 0, 1)
        assert rays == 2

    def test_reflectivity_scales(self):
        scene = Scene()
        scene.add(Sphere(Point3(0, 0, 10), 1, Material(Color(1, 1, 1), diffuse=0, specular=0, reflectivity=0.25)))
        scene.add(flat_wall(-5, Color(1, 1, 1)))
        color, _ = trace(FORWARD, scene, LightList(), 1)
        assert rgb(color) == pytest.approx([0.25, 0.25, 0.25])

    def test_no_self_hit_on_bounce(self):
        scene = self.mirror_scene()
        hit = scene.closest_hit(FORWARD)
        bounce = Ray(hit.point, FORWARD.direction.reflect(hit.normal))

        again = scene.closest_hit(bounce, ignore=hit.index)

        assert again is not None
        assert again.index != hit.index
        assert again.t > 0

    def test_exhausted_budget_uses_surface_color(self):
        scene = Scene()
        scene.add(Sphere(Point3(0, 0, 10), 1, Material(Color(1, 1, 1), diffuse=0, specular=0, reflectivity=1.0)))
        scene.add(Triangle(
            Point3(-50, -50, -5), Point3(50, -50, -5), Point3(0, 50, -5),
            Material(Color(0, 0, 1), diffuse=0, specular=0, reflectivity=0.5)
        ))

        color, rays = trace(FORWARD, scene, LightList(), 1)

        # The wall is reached with no budget left, so it adds 0.5 * its own color
        assert rgb(color) == pytest.approx([0, 0, 0.5])
        assert rays == 2

    def test_non_reflective_adds_nothing(self):
        scene = Scene()
        scene.add(Sphere(Point3(0, 0, 10), 1, gray_material()))
        scene.add(flat_wall(-5, Color(1, 0, 0)))
        lights = LightList([PointLight(Point3(0, 0, 0), Color(1, 1, 1), 1.0)])

        color, rays = trace(FORWARD, scene, lights, 4)

        assert rays == 1
        assert color == Color(0.6, 0.6, 0.6, 1.0)


class TestTransparency:
    """Test pass-through recursion."""

    def test_sees_through_glass(self):
        scene = Scene()
        scene.add(Sphere(Point3(0, 0, 10), 1, Material(Color(0, 0, 0, 0.25), diffuse=0, specular=0)))
        scene.add(flat_wall(20, Color(1, 0, 0)))

        color, rays = trace(FORWARD, scene, LightList(), 1)

        assert rgb(color) == pytest.approx([0.75, 0, 0])
        assert color.a == pytest.approx(1.0)
        assert rays == 2

    def test_coverage_over_nothing(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 1, Material(Color(0, 0, 0, 0.25), diffuse=0, specular=0))])
        color, _ = trace(FORWARD, scene, LightList(), 1)
        assert color.a == pytest.approx(0.25)

    def test_pass_through_skips_own_back_face(self):
        scene = Scene([Sphere(Point3(0, 0, 10), 1, Material(Color(0, 0, 0, 0.5), diffuse=0, specular=0))])
        _, rays = trace(FORWARD, scene, LightList(), 5)
        assert rays == 2

    def test_touching_transparent_surfaces_terminate(self):
        glass = Material(Color(1, 1, 1, 0.5))
        scene = Scene()
        scene.add(Triangle(Point3(-5, -5, 10), Point3(5, -5, 10), Point3(0, 5, 10), glass))
        scene.add(Triangle(Point3(-5, -5, 10), Point3(5, -5, 10), Point3(0, 5, 10), glass))

        _, rays = trace(FORWARD, scene, LightList(), 10)

        assert rays <= 11

    def test_budget_limits_transparency(self):
        glass = Material(Color(1, 1, 1, 0.5), diffuse=0, specular=0)
        scene = Scene([Sphere(Point3(0, 0, 5 * k), 1, glass) for k in range(2, 8)])
        _, rays = trace(FORWARD, scene, LightList(), 3)
        assert rays == 4
