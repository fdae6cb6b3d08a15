"""
Tests for mapping scene points back to formula coordinates.
"""

import math

import pytest
from formulagraph.catalog import get_formula
from formulagraph.coordinates import (
    MathCoordinates, format_coordinates, format_value, scene_to_math,
)
from formulagraph.formula import FormulaKind, FormulaSpec


def _spec(kind, id="test_formula"):
    return FormulaSpec(id=id, display_name="Test", category="Test",
                       raw_expression="z = x*y", kind=kind)


class TestNamedShapes:
    """Named shapes report their natural parameterization."""

    def test_sphere_pole(self):
        coords = scene_to_math((0.0, 0.0, 3.0), get_formula("sphere"), {"radius": 3.0})
        assert coords.parameterization["r"] == pytest.approx(3.0)
        assert coords.parameterization["phi"] == pytest.approx(0.0)

    def test_sphere_equator(self):
        coords = scene_to_math((0.0, 2.0, 0.0), get_formula("sphere"))
        assert coords.parameterization["theta"] == pytest.approx(math.pi / 2)
        assert coords.parameterization["phi"] == pytest.approx(math.pi / 2)

    def test_sphere_origin(self):
        coords = scene_to_math((0.0, 0.0, 0.0), get_formula("sphere"))
        assert coords.parameterization["phi"] == 0.0

    def test_torus_angles(self):
        spec = get_formula("torus")
        outer = scene_to_math((4.5, 0.0, 0.0), spec, {"R": 3.0, "r": 1.5})
        assert outer.parameterization["u"] == pytest.approx(0.0)
        assert outer.parameterization["v"] == pytest.approx(0.0)
        top = scene_to_math((0.0, 3.0, 1.5), spec, {"R": 3.0, "r": 1.5})
        assert top.parameterization["u"] == pytest.approx(math.pi / 2)
        assert top.parameterization["v"] == pytest.approx(math.pi / 2)

    def test_ellipsoid_is_normalized(self):
        spec = get_formula("ellipsoid")
        coords = scene_to_math((0.0, 0.0, 1.5), spec, {"a": 3.0, "b": 2.0, "c": 1.5})
        assert coords.parameterization["phi"] == pytest.approx(0.0)

    def test_cone_height(self):
        coords = scene_to_math((3.0, 4.0, 2.0), get_formula("cone"))
        assert coords.parameterization["r"] == pytest.approx(5.0)
        assert coords.parameterization["h"] == 2.0

    def test_cartesian_kept(self):
        coords = scene_to_math((1.0, 2.0, 3.0), get_formula("sphere"))
        assert (coords.x, coords.y, coords.z) == (1.0, 2.0, 3.0)


class TestGenericFormulas:
    """Formulas without a named inverse."""

    def test_polar_curve(self):
        coords = scene_to_math((0.0, 2.0), _spec(FormulaKind.POLAR_2D))
        assert coords.z == 0.0
        assert coords.parameterization["r"] == pytest.approx(2.0)
        assert coords.parameterization["theta"] == pytest.approx(math.pi / 2)

    def test_surface_without_inverse(self):
        coords = scene_to_math((1.0, 2.0, 3.0), _spec(FormulaKind.SURFACE_3D))
        assert coords == MathCoordinates(1.0, 2.0, 3.0)
        assert coords.parameterization == {}

    def test_edited_named_shape_is_generic(self):
        edited = get_formula("sphere").with_expression("z = x^2 + y^2")
        coords = scene_to_math((0.0, 0.0, 3.0), edited)
        assert coords.parameterization == {}

    @pytest.mark.parametrize("point", [("a", 1.0), (1.0,), None])
    def test_bad_point(self, point):
        coords = scene_to_math(point, _spec(FormulaKind.SURFACE_3D))
        assert math.isnan(coords.x)
        assert math.isnan(coords.y)
        assert math.isnan(coords.z)


class TestFormatting:
    """Tooltip text."""

    @pytest.mark.parametrize("value, text", [
        (0.0, "0.000"),
        (0.0004, "0.000"),
        (-0.0004, "0.000"),
        (1.23456, "1.235"),
        (-2.5, "-2.500"),
    ])
    def test_format_value(self, value, text):
        assert format_value(value) == text

    def test_format_non_finite(self):
        assert format_value(math.inf) == "inf"

    def test_polar(self):
        spec = _spec(FormulaKind.POLAR_2D)
        coords = scene_to_math((0.0, 2.0), spec)
        assert format_coordinates(coords, spec) == "r=2.000, θ=1.571"

    def test_sphere(self):
        spec = get_formula("sphere")
        coords = scene_to_math((0.0, 0.0, 3.0), spec)
        assert format_coordinates(coords, spec) == "r=3.000, θ=0.000, φ=0.000"

    def test_cylinder(self):
        spec = get_formula("cylinder")
        coords = scene_to_math((1.0, 0.0, 2.0), spec)
        assert format_coordinates(coords, spec) == "r=1.000, θ=0.000, z=2.000"

    def test_planar(self):
        spec = _spec(FormulaKind.FUNCTION_2D)
        coords = scene_to_math((1.0, 2.0), spec)
        assert format_coordinates(coords, spec) == "(1.000, 2.000)"

    def test_spatial(self):
        spec = _spec(FormulaKind.PARAMETRIC_CURVE_3D)
        coords = scene_to_math((1.0, 2.0, 3.0), spec)
        assert format_coordinates(coords, spec) == "(1.000, 2.000, 3.000)"

    def test_torus_falls_back_to_cartesian(self):
        spec = get_formula("torus")
        coords = scene_to_math((4.5, 0.0, 0.0), spec)
        assert format_coordinates(coords, spec) == "(4.500, 0.000, 0.000)"
