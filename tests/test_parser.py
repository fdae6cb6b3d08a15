"""
Unit tests for the expression parser.
"""

import pytest
from formulagraph.expr import (
    BinaryOp, FunctionCall, Number, ParserError, Symbol, TokenType, UnaryOp,
    UnknownSymbolError, evaluate, free_symbols, function_names, parse_expression,
)


def _value(text, **scope):
    return evaluate(parse_expression(text), scope).value


class TestPrecedence:
    """Operator precedence and associativity."""

    def test_product_before_sum(self):
        assert _value("1 + 2 * 3") == 7

    def test_parentheses(self):
        assert _value("(1 + 2) * 3") == 9

    def test_power_is_right_associative(self):
        assert _value("2^3^2") == 512

    def test_unary_minus_below_power(self):
        expr = parse_expression("-x^2")
        assert isinstance(expr, UnaryOp)
        assert expr.operator == TokenType.MINUS
        assert isinstance(expr.operand, BinaryOp)
        assert expr.operand.operator == TokenType.CARET
        assert _value("-x^2", x=3) == -9

    def test_negative_exponent(self):
        assert _value("2^-1") == 0.5

    def test_left_associative_subtraction(self):
        assert _value("10 - 4 - 3") == 3


class TestNodes:
    """Shape of the produced tree."""

    def test_number(self):
        expr = parse_expression("42")
        assert isinstance(expr, Number)
        assert expr.value == 42

    def test_symbol(self):
        expr = parse_expression("theta")
        assert isinstance(expr, Symbol)
        assert expr.name == "theta"

    def test_call_binds_builtin(self):
        expr = parse_expression("log(x, 2)")
        assert isinstance(expr, FunctionCall)
        assert expr.builtin is not None
        assert len(expr.arguments) == 2

    def test_free_symbols(self):
        expr = parse_expression("a*x + sin(y) + pi")
        assert free_symbols(expr) == ["a", "x", "y"]

    def test_function_names(self):
        expr = parse_expression("sqrt(x) + sin(cos(x))")
        assert function_names(expr) == {"sqrt", "sin", "cos"}


class TestParserErrors:
    """Error codes for malformed text."""

    def test_unbalanced(self):
        with pytest.raises(ParserError) as exc:
            parse_expression("(1 + 2")
        assert exc.value.diagnostic.code == "E102"

    def test_empty(self):
        with pytest.raises(ParserError) as exc:
            parse_expression("   ")
        assert exc.value.diagnostic.code == "E103"

    def test_trailing_tokens(self):
        with pytest.raises(ParserError) as exc:
            parse_expression("1 2")
        assert exc.value.diagnostic.code == "E101"

    def test_wrong_argument_count(self):
        with pytest.raises(ParserError) as exc:
            parse_expression("atan2(1)")
        assert exc.value.diagnostic.code == "E104"

    def test_unknown_function(self):
        with pytest.raises(UnknownSymbolError) as exc:
            parse_expression("foo(x)")
        assert exc.value.diagnostic.code == "E202"
        assert exc.value.name == "foo"
