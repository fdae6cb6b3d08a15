"""
Lexer for canonical formula expressions.

Converts normalized expression text into a stream of tokens for the parser.
Supports:
- Integer and float literals (including scientific notation)
- Identifiers with underscore subscripts (V_T, x_0)
- Arithmetic operators, with ``**`` accepted as an alias of ``^``
- Parentheses and commas
"""

from typing import List, Iterator
from .tokens import (
    Token, TokenType, SourceLocation, SourceSpan, SINGLE_CHAR_TOKENS,
)
from .errors import (
    error_unexpected_character,
    error_invalid_number_literal,
)


class Lexer:
    """
    Tokenizer for canonical infix expressions.

    Usage:
        lexer = Lexer("2*sin(x)^2")
        tokens = lexer.tokenize()

    Or for streaming:
        for token in Lexer(text):
            process(token)
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0            # Current position in source
        self.column = 1         # Current column (1-indexed)

    def _location(self) -> SourceLocation:
        return SourceLocation(1, self.column, self.pos)

    def _span(self, start: SourceLocation) -> SourceSpan:
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        self.column += 1
        return ch

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _make_token(self, token_type: TokenType, value, start: SourceLocation) -> Token:
        lexeme = self.source[start.offset:self.pos]
        return Token(token_type, value, lexeme, self._span(start))

    def _scan_number(self) -> Token:
        start = self._location()
        while self._peek().isdigit():
            self._advance()
        if self._peek() == '.':
            self._advance()
            while self._peek().isdigit():
                self._advance()

        # Exponent only when digits follow, so "2e" stays number * constant e
        if self._peek() in 'eE':
            sign = 1 if self._peek(1) in '+-' else 0
            if self._peek(1 + sign).isdigit():
                self._advance()
                if sign:
                    self._advance()
                while self._peek().isdigit():
                    self._advance()

        text = self.source[start.offset:self.pos]
        if text == '.':
            raise error_invalid_number_literal(text, self._span(start), self.source)
        try:
            value = float(text)
        except ValueError:
            raise error_invalid_number_literal(text, self._span(start), self.source) from None
        return self._make_token(TokenType.NUMBER, value, start)

    def _scan_identifier(self) -> Token:
        start = self._location()
        while self._peek().isalnum() or self._peek() == '_':
            self._advance()
        text = self.source[start.offset:self.pos]
        return self._make_token(TokenType.IDENTIFIER, text, start)

    def next_token(self) -> Token:
        """Scan and return the next token."""
        while self._peek() in ' \t\r\n' and not self._is_at_end():
            self._advance()

        if self._is_at_end():
            return self._make_token(TokenType.EOF, None, self._location())

        ch = self._peek()
        if ch.isdigit() or (ch == '.' and self._peek(1).isdigit()):
            return self._scan_number()
        if ch.isalpha() or ch == '_':
            return self._scan_identifier()

        start = self._location()
        if ch == '*' and self._peek(1) == '*':
            self._advance()
            self._advance()
            return self._make_token(TokenType.CARET, None, start)

        token_type = SINGLE_CHAR_TOKENS.get(ch)
        if token_type is None:
            self._advance()
            raise error_unexpected_character(ch, self._span(start), self.source)
        self._advance()
        return self._make_token(token_type, None, start)

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, ending with an EOF token."""
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break


def tokenize(source: str) -> List[Token]:
    """Convenience function to tokenize expression text."""
    return Lexer(source).tokenize()
