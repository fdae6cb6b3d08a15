"""
Unit tests for the textual domain check.
"""

import math

import pytest
from formulagraph.domain import VALID, DomainStatus, check, constrained_calls, validate
from formulagraph.expr import parse_expression


class TestCheck:
    """Trouble signatures in formula text."""

    def test_log(self):
        assert not validate("log(x)", -1).is_valid
        assert validate("log(x)", 1).is_valid

    def test_ln_latex(self):
        assert not check(r"\ln(x)", 0).is_valid

    def test_sqrt(self):
        status = check("sqrt(x)", -0.5)
        assert not status
        assert status.reason == "Square root undefined for x < 0"

    @pytest.mark.parametrize("text", ["1/x", "1 / x", r"\frac{1}{x}"])
    def test_reciprocal(self, text):
        assert not check(text, 0.0).is_valid
        assert check(text, 0.5).is_valid

    def test_tangent(self):
        assert not check("tan(x)", math.pi / 2).is_valid
        assert check("tan(x)", 0.3).is_valid

    def test_y_checked_only_when_present(self):
        assert not check("sqrt(x + y)", 1, -1).is_valid
        assert check("sqrt(x)", 1, -1).is_valid

    def test_whole_words_only(self):
        """A name that merely contains "log" is not a logarithm."""
        assert check("catalog * x", -1).is_valid

    def test_status_truthiness(self):
        assert VALID
        assert not DomainStatus.undefined("nope")


class TestConstrainedCalls:
    """Domain constraints bound to call nodes at parse time."""

    def test_source_order(self):
        expr = parse_expression("sqrt(x) + sin(log(x))")
        assert constrained_calls(expr) == ["sqrt", "log"]

    def test_unconstrained(self):
        assert constrained_calls(parse_expression("sin(x) * exp(x)")) == []
