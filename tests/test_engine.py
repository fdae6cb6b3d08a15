"""
Tests for the formula-to-geometry engine.
"""

import math

import pytest
from formulagraph.catalog import default_parameters, get_formula, load_formulas
from formulagraph.classifier import classify_custom
from formulagraph.config import EngineConfig
from formulagraph.engine import (
    LINE_MATERIAL, SURFACE_MATERIAL, build_geometry, material_hint, split_components,
)
from formulagraph.expr import DiagnosticCollector, SyntaxFault
from formulagraph.formula import FormulaKind, FormulaSpec
from formulagraph.geometry import Mesh, Polyline


def _spec(raw, kind, id="test_formula", name="Test Formula"):
    return FormulaSpec(id=id, display_name=name, category="Test", raw_expression=raw, kind=kind)


def _catalog_build(formula_id, resolution=None, **overrides):
    params = default_parameters(formula_id)
    params.update(overrides)
    if resolution is not None:
        params["resolution"] = resolution
    return build_geometry(get_formula(formula_id), params)


class TestCatalogFunctions:
    """Every catalog function of x draws something."""

    @pytest.mark.parametrize("spec", [
        s for s in load_formulas() if s.kind is FormulaKind.FUNCTION_2D
    ], ids=lambda s: s.id)
    def test_non_empty_polyline(self, spec):
        geometry = build_geometry(spec, default_parameters(spec.id))
        assert isinstance(geometry, Polyline)
        assert geometry.point_count >= 2

    @pytest.mark.parametrize("spec", load_formulas(), ids=lambda s: s.id)
    def test_every_formula_builds(self, spec):
        diagnostics = DiagnosticCollector()
        params = default_parameters(spec.id)
        params["resolution"] = 12
        geometry = build_geometry(spec, params, diagnostics=diagnostics)
        assert "W003" not in diagnostics.codes()
        if isinstance(geometry, Mesh):
            assert geometry.triangle_count > 0
        else:
            assert geometry.point_count >= 2


class TestPurity:
    """Identical inputs give identical buffers."""

    @pytest.mark.parametrize("formula_id", ["torus", "tangent", "cardioid", "quadratic_function"])
    def test_idempotent(self, formula_id):
        first = _catalog_build(formula_id)
        second = _catalog_build(formula_id)
        assert first == second
        assert first.vertex_buffer().tobytes() == second.vertex_buffer().tobytes()

    def test_params_not_mutated(self):
        params = {"radius": 2.0, "resolution": 10}
        build_geometry(get_formula("sphere"), params)
        assert params == {"radius": 2.0, "resolution": 10}


class TestScenarios:
    """End-to-end behaviour on typed and catalog formulas."""

    def test_saddle(self):
        spec = classify_custom("x^2 - y^2")
        assert spec.kind is FormulaKind.SURFACE_3D
        mesh = build_geometry(spec, {})
        assert isinstance(mesh, Mesh)
        assert mesh.vertex_count == 51 * 51
        centre = mesh.vertices[25 * 51 + 25]
        assert centre[0] == pytest.approx(0.0)
        assert centre[1] == pytest.approx(0.0)
        assert centre[2] == pytest.approx(0.0)

    def test_saddle_resolution_override(self):
        mesh = build_geometry(classify_custom("z = x^2 - y^2"), {"resolution": 10})
        assert mesh.vertex_count == 121

    def test_reciprocal_excludes_zero(self):
        spec = classify_custom("1/x")
        line = build_geometry(spec, {"resolution": 20})
        assert line.point_count == 10
        assert all(abs(p[0]) > 1e-10 for p in line.points)
        # Both branches have ten points; the first one wins
        assert all(p[0] < 0 for p in line.points)

    @pytest.mark.parametrize("raw", [r"y = \tan(x)", None])
    def test_tangent_clamped_single_branch(self, raw):
        spec = classify_custom(raw) if raw else get_formula("tangent")
        line = build_geometry(spec, default_parameters(spec.id) if raw is None else {})
        assert all(abs(p[1]) <= 100.0 for p in line.points)
        xs = [p[0] for p in line.points]
        # One branch between two asymptotes
        assert max(xs) - min(xs) < math.pi

    def test_surface_values_clamped(self):
        diagnostics = DiagnosticCollector()
        mesh = build_geometry(classify_custom("z = x^3 + y^3"), {}, diagnostics=diagnostics)
        assert max(abs(v[2]) for v in mesh.vertices) <= 10.0
        assert "W001" in diagnostics.codes()

    def test_domain_faults_reported(self):
        diagnostics = DiagnosticCollector()
        line = build_geometry(classify_custom(r"y = \sqrt{x}"), {}, diagnostics=diagnostics)
        assert min(p[0] for p in line.points) >= 0
        assert "W002" in diagnostics.codes()

    def test_log_base_fault_is_absorbed(self):
        diagnostics = DiagnosticCollector()
        line = build_geometry(classify_custom("y = log(2, x)"), {"resolution": 20},
                              diagnostics=diagnostics)
        assert isinstance(line, Polyline)
        assert all(p[0] > 1.0 for p in line.points)
        assert "W002" in diagnostics.codes()

    def test_function_parameters(self):
        spec = _spec("y = k x", FormulaKind.FUNCTION_2D)
        line = build_geometry(spec, {"k": 3.0, "resolution": 4})
        assert line.points[-1] == pytest.approx((10.0, 30.0, 0.0))

    def test_physics_alias(self):
        """t stands in for x in a formula of time."""
        spec = _spec(r"y = 2t", FormulaKind.FUNCTION_2D)
        line = build_geometry(spec, {"resolution": 2})
        assert line.points[0] == pytest.approx((-10.0, -20.0, 0.0))


class TestFailureModes:
    """Unknown symbols and malformed text."""

    def test_unknown_symbol_placeholder(self):
        diagnostics = DiagnosticCollector()
        geometry = build_geometry(_spec("y = q x", FormulaKind.FUNCTION_2D), {},
                                  diagnostics=diagnostics)
        assert isinstance(geometry, Mesh)
        assert geometry.vertex_count == 24
        assert diagnostics.codes() == ["E201", "W003"]
        assert diagnostics.has_errors
        assert diagnostics.summary() == "1 error(s), 1 warning(s)"
        assert diagnostics.to_json()["error_count"] == 1

    def test_placeholder_size_from_config(self):
        config = EngineConfig(placeholder_size=4.0)
        box = build_geometry(_spec("z = q x y", FormulaKind.SURFACE_3D), {}, config=config)
        assert max(v[0] for v in box.vertices) == pytest.approx(2.0)

    def test_syntax_error_propagates(self):
        with pytest.raises(SyntaxFault):
            build_geometry(_spec("y = (x +", FormulaKind.FUNCTION_2D), {})

    def test_missing_component(self):
        with pytest.raises(SyntaxFault) as exc:
            build_geometry(_spec(r"x = \cos t", FormulaKind.PARAMETRIC_2D), {})
        assert exc.value.diagnostic.code == "E105"

    def test_empty_geometry_warning(self):
        diagnostics = DiagnosticCollector()
        line = build_geometry(_spec(r"y = \sqrt{-1 - x^2}", FormulaKind.FUNCTION_2D), {},
                              diagnostics=diagnostics)
        assert line.is_empty
        assert "W004" in diagnostics.codes()


class TestCurves:
    """Parametric and polar curves, closure and fill."""

    def test_catalog_circle_filled(self):
        mesh = _catalog_build("circle")
        assert isinstance(mesh, Mesh)
        assert mesh.vertex_count == 50
        assert mesh.triangle_count == 48
        assert all(n == (0.0, 0.0, 1.0) for n in mesh.normals)

    def test_generic_closed_curve_outline(self):
        spec = _spec(r"x = 2\cos t, y = 2\sin t", FormulaKind.PARAMETRIC_2D, name="Loop")
        line = build_geometry(spec, {})
        assert isinstance(line, Polyline)
        assert line.closed
        assert line.point_count == 50
        for x, y, z in line.points:
            assert math.hypot(x, y) == pytest.approx(2.0)

    def test_helix_open(self):
        line = _catalog_build("helix")
        assert isinstance(line, Polyline)
        assert not line.closed
        assert line.point_count == 51
        assert line.points[-1][2] > line.points[0][2]

    def test_cardioid_filled(self):
        assert isinstance(_catalog_build("cardioid"), Mesh)

    def test_generic_polar(self):
        line = build_geometry(get_formula("limacon"), {"a": 2.0, "b": 3.0})
        assert isinstance(line, Polyline)
        assert line.closed
        assert line.points[0] == pytest.approx((5.0, 0.0, 0.0))

    def test_generic_space_curve(self):
        line = _catalog_build("conical_spiral")
        assert line.point_count == 51
        assert line.points[-1][2] == pytest.approx(12.0)

    def test_edited_catalog_curve_is_generic(self):
        circle = get_formula("circle")
        edited = circle.with_expression(r"x = 5\cos t, y = 5\sin t")
        assert edited.id == "circle.edited"
        geometry = build_geometry(edited, {})
        points = geometry.vertices if isinstance(geometry, Mesh) else geometry.points
        for x, y, z in points:
            assert math.hypot(x, y) == pytest.approx(5.0)


class TestSurfaces:
    """Named-shape surfaces."""

    def test_sphere_vertices_on_surface(self):
        mesh = _catalog_build("sphere", resolution=16, radius=3.0)
        for x, y, z in mesh.vertices:
            assert x * x + y * y + z * z == pytest.approx(9.0, abs=1e-6)

    def test_two_sheets_merged(self):
        mesh = _catalog_build("hyperboloid_two_sheets", resolution=8)
        assert mesh.vertex_count == 2 * 81
        assert any(v[2] > 0 for v in mesh.vertices)
        assert any(v[2] < 0 for v in mesh.vertices)

    def test_height_field_extent(self):
        mesh = _catalog_build("paraboloid", resolution=4, scale=4.0)
        assert max(v[0] for v in mesh.vertices) == pytest.approx(2.0)


class TestHelpers:

    def test_split_components(self):
        raw = r"x = \cos(t, 1), y = \frac{a}{b}, z = t"
        assert split_components(raw) == [r"x = \cos(t, 1)", r"y = \frac{a}{b}", "z = t"]

    def test_material_hint(self):
        assert material_hint(FormulaKind.SURFACE_3D) is SURFACE_MATERIAL
        assert material_hint(FormulaKind.POLAR_2D) is LINE_MATERIAL
        assert material_hint(FormulaKind.PARAMETRIC_2D, _catalog_build("circle")) is SURFACE_MATERIAL
        assert SURFACE_MATERIAL.double_sided
