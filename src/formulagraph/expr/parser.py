"""
Precedence-climbing parser for canonical formula expressions.

Grammar (lowest to highest binding):

    expression := term (('+' | '-') term)*
    term       := unary (('*' | '/') unary)*
    unary      := ('-' | '+') unary | power
    power      := primary ('^' unary)?
    primary    := NUMBER | IDENTIFIER | IDENTIFIER '(' args ')' | '(' expression ')'

``^`` is right-associative and binds tighter than a leading sign, so
``-x^2`` is ``-(x^2)`` and ``2^-x`` is ``2^(-x)``.
"""

from typing import List, Optional

from .tokens import Token, TokenType, SourceSpan, describe_token
from .lexer import Lexer
from .ast import Expression, Number, Symbol, UnaryOp, BinaryOp, FunctionCall
from .builtins import get_builtin
from .errors import (
    error_unexpected_token,
    error_unexpected_end,
    error_empty_expression,
    error_wrong_argument_count,
    error_unknown_function,
)


class Parser:
    """
    Parser for canonical infix expressions.

    Usage:
        tokens = Lexer(text).tokenize()
        expr = Parser(tokens, source=text).parse()
    """

    # Operator precedence (higher binds tighter); '^' is handled in _parse_power
    PRECEDENCE = {
        TokenType.PLUS: 1,
        TokenType.MINUS: 1,
        TokenType.STAR: 2,
        TokenType.SLASH: 2,
    }

    def __init__(self, tokens: List[Token], source: Optional[str] = None):
        self.tokens = tokens
        self.source = source
        self.pos = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _consume(self, token_type: TokenType, expected: str) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        self._error(expected)

    def _error(self, expected: str) -> None:
        """Raise a parser error at the current token."""
        token = self._current()
        if token.type == TokenType.EOF:
            raise error_unexpected_end(expected, token.span, self.source)
        raise error_unexpected_token(expected, describe_token(token), token.span, self.source)

    # =========================================================================
    # Expressions
    # =========================================================================

    def parse(self) -> Expression:
        """Parse a complete expression; trailing tokens are an error."""
        if self._is_at_end():
            raise error_empty_expression(self._current().span)
        expr = self._parse_binary_expr(1)
        if not self._is_at_end():
            self._error("operator or end of expression")
        return expr

    def _parse_binary_expr(self, min_precedence: int) -> Expression:
        """Parse binary expressions with precedence climbing."""
        left = self._parse_unary_expr()

        while True:
            op_token = self._current()
            precedence = self.PRECEDENCE.get(op_token.type)
            if precedence is None or precedence < min_precedence:
                break

            self._advance()
            right = self._parse_binary_expr(precedence + 1)
            left = BinaryOp(
                span=SourceSpan(left.span.start, right.span.end),
                left=left,
                operator=op_token.type,
                right=right,
            )

        return left

    def _parse_unary_expr(self) -> Expression:
        """Parse a leading sign."""
        op = self._match(TokenType.MINUS, TokenType.PLUS)
        if op is not None:
            operand = self._parse_unary_expr()
            return UnaryOp(
                span=SourceSpan(op.span.start, operand.span.end),
                operator=op.type,
                operand=operand,
            )
        return self._parse_power()

    def _parse_power(self) -> Expression:
        """Parse exponentiation (right-associative)."""
        base = self._parse_primary_expr()
        if self._match(TokenType.CARET):
            exponent = self._parse_unary_expr()
            return BinaryOp(
                span=SourceSpan(base.span.start, exponent.span.end),
                left=base,
                operator=TokenType.CARET,
                right=exponent,
            )
        return base

    def _parse_primary_expr(self) -> Expression:
        token = self._current()

        if token.type == TokenType.NUMBER:
            self._advance()
            return Number(span=token.span, value=token.value)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            if self._check(TokenType.LPAREN):
                return self._parse_call(token)
            return Symbol(span=token.span, name=token.value)

        if token.type == TokenType.LPAREN:
            self._advance()
            inner = self._parse_binary_expr(1)
            self._consume(TokenType.RPAREN, "')'")
            return inner

        self._error("number, name or '('")

    def _parse_call(self, name_token: Token) -> FunctionCall:
        """Parse a builtin call and bind its definition."""
        name = name_token.value
        builtin = get_builtin(name)
        if builtin is None:
            raise error_unknown_function(name, name_token.span, self.source)

        self._consume(TokenType.LPAREN, "'('")
        args: List[Expression] = []
        if not self._check(TokenType.RPAREN):
            args.append(self._parse_binary_expr(1))
            while self._match(TokenType.COMMA):
                args.append(self._parse_binary_expr(1))
        close = self._consume(TokenType.RPAREN, "')' or ','")

        span = SourceSpan(name_token.span.start, close.span.end)
        if not builtin.accepts(len(args)):
            raise error_wrong_argument_count(
                name, builtin.arity_text(), len(args), span, self.source
            )
        return FunctionCall(span=span, name=name, arguments=args, builtin=builtin)


def parse_expression(text: str) -> Expression:
    """
    Parse canonical expression text into an AST.

    Raises:
        LexerError, ParserError: the text is not a well-formed expression
        UnknownSymbolError: a call names a function that is not a builtin
    """
    if not text or not text.strip():
        raise error_empty_expression()
    tokens = Lexer(text).tokenize()
    return Parser(tokens, source=text).parse()
