"""Tests for materials."""

import pytest

from raylight.color import Color
from raylight.materials import Material, Shading, InvalidMaterialError


class TestMaterial:
    """Test Material construction and validation."""

    def test_defaults(self):
        m = Material(Color(1, 0, 0))
        assert m.shading is Shading.PHONG
        assert m.reflectivity == 0.0
        assert m.texture is None
        assert m.alpha == 1.0
        assert not m.is_transparent

    def test_frozen(self):
        m = Material(Color(1, 0, 0))
        with pytest.raises(AttributeError):
            m.diffuse = 0.5

    def test_transparent(self):
        m = Material(Color(1, 1, 1, 0.25))
        assert m.alpha == 0.25
        assert m.is_transparent

    @pytest.mark.parametrize("kwargs", [
        {'reflectivity': 1.5},
        {'reflectivity': -0.1},
        {'diffuse': 2.0},
        {'specular': -1.0},
        {'specular_n': -1},
        {'specular_n': 2.5},
    ])
    def test_out_of_range(self, kwargs):
        with pytest.raises(InvalidMaterialError):
            Material(Color(1, 1, 1), **kwargs)

    def test_alpha_out_of_range(self):
        with pytest.raises(InvalidMaterialError):
            Material(Color(1, 1, 1, 1.5))

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            Material(Color(1, 1, 1), reflectivity=3)

    def test_color_type_checked(self):
        with pytest.raises(InvalidMaterialError):
            Material((1, 1, 1))

    def test_texture_slot_is_inert(self):
        m = Material(Color(1, 1, 1), texture="checker.png")
        assert m.texture == "checker.png"


class TestMaterialPresets:
    """Test convenience constructors."""

    def test_flat(self):
        m = Material.flat(Color(0.1, 0.2, 0.3))
        assert m.shading is Shading.FLAT

    def test_mirror(self):
        m = Material.mirror(Color(1, 1, 1), 0.9)
        assert m.reflectivity == 0.9

    def test_glass(self):
        m = Material.glass(Color(0.5, 0.5, 1.0), opacity=0.3)
        assert m.alpha == 0.3
        assert m.is_transparent
