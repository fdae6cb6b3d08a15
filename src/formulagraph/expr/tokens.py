"""
Token types for the formula expression lexer.

Canonical expressions are single-line infix text produced by the notation
normalizer, so the token set is small: numbers, identifiers, the five
arithmetic operators, parentheses and the argument separator.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the expression lexer."""

    # --- Literals ---
    NUMBER = auto()             # 3, 3.14, .5, 1e-9

    # --- Identifiers ---
    IDENTIFIER = auto()         # x, theta, V_T, sin

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # /
    CARET = auto()              # ^ (also accepts **)

    # --- Delimiters ---
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    COMMA = auto()              # ,

    # --- Special ---
    EOF = auto()                # end of input


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in an expression."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in an expression."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # float for numbers, str for identifiers
    lexeme: str             # The original source text
    span: SourceSpan        # Location in source

    def __str__(self) -> str:
        if self.type in (TokenType.NUMBER, TokenType.IDENTIFIER):
            return f"{self.type.name}({self.value!r})"
        return self.type.name


# Single-character operators and delimiters
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
}


def describe_token(token: Optional[Token]) -> str:
    """Human-readable token description for diagnostics."""
    if token is None or token.type == TokenType.EOF:
        return "end of expression"
    if token.type == TokenType.NUMBER:
        return f"number '{token.lexeme}'"
    if token.type == TokenType.IDENTIFIER:
        return f"identifier '{token.lexeme}'"
    return f"'{token.lexeme}'"
