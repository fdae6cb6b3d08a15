"""
Unit tests for LaTeX notation normalization.
"""

import pytest
from formulagraph.expr import normalize, parse_expression
from formulagraph.expr.normalize import (
    expand_absolute_bars,
    expand_structures,
    insert_implicit_multiplication,
    move_function_powers,
    strip_relation,
)


class TestRewriteSteps:
    """Each rewrite step in isolation."""

    def test_strip_relation_keeps_right_side(self):
        assert strip_relation("y = x + 1").strip() == "x + 1"

    def test_strip_relation_approx(self):
        assert strip_relation(r"B/A \approx a_v").strip() == "a_v"

    def test_strip_relation_without_relation(self):
        assert strip_relation("x^2") == "x^2"

    def test_fraction(self):
        assert expand_structures(r"\frac{1}{x}") == "(1)/(x)"

    def test_nested_fraction(self):
        assert expand_structures(r"\frac{\frac{1}{2}}{x}") == "((1)/(2))/(x)"

    def test_sqrt_and_root(self):
        assert expand_structures(r"\sqrt{x}") == "sqrt(x)"
        assert expand_structures(r"\sqrt[3]{x}") == "(x)^(1/(3))"

    def test_function_power(self):
        assert move_function_powers(r"\sin^2(x)").strip() == "sin(x)^2"

    def test_absolute_bars(self):
        assert expand_absolute_bars("|x|").strip() == "abs(x)"

    def test_odd_bars_untouched(self):
        assert expand_absolute_bars("|x") == "|x"


class TestImplicitMultiplication:
    """Implied products become explicit."""

    @pytest.mark.parametrize("text,expected", [
        ("2x", "2*x"),
        ("xy", "x*y"),
        ("2(x+1)", "2*(x+1)"),
        ("(x)(y)", "(x)*(y)"),
        ("x(y)", "x*(y)"),
        ("(x)y", "(x)*y"),
    ])
    def test_products(self, text, expected):
        assert insert_implicit_multiplication(text) == expected

    def test_function_names_kept_whole(self):
        assert insert_implicit_multiplication("sin(x)") == "sin(x)"

    def test_bare_function_argument(self):
        assert insert_implicit_multiplication("sin x") == "sin(x)"

    def test_protected_parameter_name(self):
        assert insert_implicit_multiplication("kx", protected=["k"]) == "k*x"
        assert insert_implicit_multiplication("amp x", protected=["amp"]) == "amp*x"

    def test_subscripted_name(self):
        assert insert_implicit_multiplication("2V_T") == "2*V_T"


class TestNormalize:
    """End-to-end normalization of catalog-style text."""

    def test_reciprocal(self):
        assert normalize(r"y = \frac{1}{x}") == "(1)/(x)"

    def test_cardioid(self):
        assert normalize(r"r = 2(1-\cos\theta)") == "2*(1-cos(theta))"

    def test_absolute_value(self):
        assert normalize("y = |x|") == "abs(x)"

    def test_greek_and_spacing(self):
        assert normalize(r"\theta\, t") == "theta*t"

    def test_empty(self):
        assert normalize("") == ""

    def test_never_raises(self):
        text = normalize(r"\frac{1}")
        assert isinstance(text, str)

    @pytest.mark.parametrize("raw", [
        r"y = ax^2 + bx + c",
        r"y = a e^{bx}",
        r"z = \frac{x^2}{a^2} - \frac{y^2}{b^2}",
        r"r = b + a\cos\theta",
        r"y = \sin^2(x) + \cos^2(x)",
    ])
    def test_result_parses(self, raw):
        parse_expression(normalize(raw, protected=["a", "b", "c"]))
