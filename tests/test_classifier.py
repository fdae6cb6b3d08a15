"""
Unit tests for variable extraction and kind classification of typed formulas.
"""

import pytest
from formulagraph.classifier import (
    CUSTOM_FORMULA_ID, classify, classify_custom, coordinates_for,
    extract_variables, generate_parameter_controls, validate_syntax,
)
from formulagraph.expr import SyntaxFault
from formulagraph.formula import FormulaKind


class TestExtractVariables:
    """Free variables, builtins and constants excluded."""

    def test_simple(self):
        assert extract_variables("y = a x^2 + b") == ["a", "b", "x"]

    def test_constants_excluded(self):
        assert extract_variables(r"y = \sin(\pi x) + e") == ["x"]

    def test_parse_error_propagates(self):
        with pytest.raises(SyntaxFault):
            extract_variables("y = (x")


class TestClassify:
    """Both classification rules."""

    def test_z_prefix_is_surface(self):
        variables, kind = classify("z = x^2 + y^2")
        assert kind is FormulaKind.SURFACE_3D
        assert variables == ["x", "y"]

    def test_two_coordinates_without_prefix(self):
        _, kind = classify("x^2 - y^2")
        assert kind is FormulaKind.SURFACE_3D

    def test_function_of_x(self):
        variables, kind = classify("y = sin(x)")
        assert kind is FormulaKind.FUNCTION_2D
        assert variables == ["x"]

    def test_parameter_like_names_do_not_count(self):
        """t and theta are sweep parameters, not plot axes."""
        _, kind = classify(r"y = x \cos(t) + \theta")
        assert kind is FormulaKind.FUNCTION_2D

    def test_z_as_parameter_name(self):
        """A free z plus x counts as two coordinates."""
        _, kind = classify("y = z x")
        assert kind is FormulaKind.SURFACE_3D

    def test_coordinates_for(self):
        assert coordinates_for(FormulaKind.SURFACE_3D, ["x", "y"]) == ("x", "y")
        assert coordinates_for(FormulaKind.FUNCTION_2D, ["a", "x"]) == ("x",)
        assert coordinates_for(FormulaKind.FUNCTION_2D, ["V"]) == ("V",)
        assert coordinates_for(FormulaKind.FUNCTION_2D, ["t"]) == ("x",)


class TestClassifyCustom:
    """FormulaSpec construction for user-entered text."""

    def test_surface(self):
        spec = classify_custom("z = x^2 + y^2")
        assert spec.kind is FormulaKind.SURFACE_3D
        assert spec.id == CUSTOM_FORMULA_ID
        assert spec.parameters == ()

    def test_function(self):
        spec = classify_custom("y = sin(x)")
        assert spec.kind is FormulaKind.FUNCTION_2D
        assert spec.variable == "x"

    def test_sliders_for_free_parameters(self):
        spec = classify_custom("z = a x + y")
        assert spec.parameter_names == ("a",)
        slider = spec.parameters[0]
        assert slider.label == "A"
        assert (slider.min, slider.max, slider.default) == (0.1, 10.0, 2.0)

    @pytest.mark.parametrize("raw", ["", "   ", "y = (x", "y = x +"])
    def test_rejected(self, raw):
        assert classify_custom(raw) is None

    def test_generic_slider_range(self):
        controls = generate_parameter_controls(["n", "foo"])
        assert (controls[0].min, controls[0].max, controls[0].step) == (1.0, 10.0, 1.0)
        assert (controls[1].min, controls[1].max, controls[1].default) == (-10.0, 10.0, 1.0)


class TestValidateSyntax:
    """Cheap pre-check."""

    def test_ok(self):
        assert validate_syntax("y = x^2").ok

    def test_empty(self):
        status = validate_syntax("")
        assert not status.ok
        assert status.message == "Equation cannot be empty"

    def test_trailing_operator(self):
        status = validate_syntax("y = x +")
        assert not status.ok
        assert "unexpected end" in status.message
