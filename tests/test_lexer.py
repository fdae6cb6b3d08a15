"""
Unit tests for the expression lexer.
"""

import pytest
from formulagraph.expr import tokenize, Lexer, TokenType, LexerError


class TestLexerBasics:
    """Test basic lexer functionality."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_simple_expression(self):
        tokens = tokenize("2*sin(x)^2")
        types = [t.type for t in tokens]
        assert types == [
            TokenType.NUMBER,
            TokenType.STAR,
            TokenType.IDENTIFIER,
            TokenType.LPAREN,
            TokenType.IDENTIFIER,
            TokenType.RPAREN,
            TokenType.CARET,
            TokenType.NUMBER,
            TokenType.EOF,
        ]

    def test_double_star_is_power(self):
        types = [t.type for t in tokenize("x**2")]
        assert types == [TokenType.IDENTIFIER, TokenType.CARET, TokenType.NUMBER, TokenType.EOF]

    def test_subscripted_identifier(self):
        tokens = tokenize("V_T")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "V_T"

    def test_position_tracking(self):
        tokens = tokenize("x + y")
        assert tokens[0].span.start.column == 1
        assert tokens[2].span.start.column == 5

    def test_streaming(self):
        types = [t.type for t in Lexer("a,b")]
        assert types == [TokenType.IDENTIFIER, TokenType.COMMA, TokenType.IDENTIFIER, TokenType.EOF]


class TestNumbers:
    """Numeric literals."""

    @pytest.mark.parametrize("text,value", [
        ("3", 3.0),
        ("3.25", 3.25),
        (".5", 0.5),
        ("1e-9", 1e-9),
        ("2.5E+3", 2500.0),
    ])
    def test_literal(self, text, value):
        tokens = tokenize(text)
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == pytest.approx(value)
        assert tokens[1].type == TokenType.EOF

    def test_trailing_e_is_constant(self):
        """"2e" is the number 2 followed by the constant e."""
        tokens = tokenize("2e")
        assert tokens[0].value == 2.0
        assert tokens[1].type == TokenType.IDENTIFIER
        assert tokens[1].value == "e"


class TestLexerErrors:
    """Lexer error reporting."""

    def test_unexpected_character(self):
        with pytest.raises(LexerError) as exc:
            tokenize("x $ 2")
        assert exc.value.diagnostic.code == "E001"
        assert "$" in exc.value.diagnostic.message
