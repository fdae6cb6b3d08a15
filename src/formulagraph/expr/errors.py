"""
Expression-specific exceptions and diagnostics.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E2xx: Evaluation errors
- W0xx: Sampling diagnostics (never fatal)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional
from .tokens import SourceSpan, SourceLocation


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"


def _empty_span() -> SourceSpan:
    loc = SourceLocation(1, 1, 0)
    return SourceSpan(loc, loc)


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: SourceSpan = field(default_factory=_empty_span)
    source_line: Optional[str] = None   # The expression text
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = [f"{self.span.start}: {self.severity.value}[{self.code}]: {self.message}"]

        # Source line with caret
        if show_source and self.source_line is not None:
            parts.append("  |")
            parts.append(f"  | {self.source_line}")
            col = self.span.start.column
            underline_len = max(1, self.span.end.column - col)
            parts.append(f"  | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "range": {
                "start": {"column": self.span.start.column, "offset": self.span.start.offset},
                "end": {"column": self.span.end.column, "offset": self.span.end.offset},
            },
            "hints": self.hints,
        }


class ExpressionError(Exception):
    """Base exception for expression errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()


class SyntaxFault(ExpressionError):
    """The expression text cannot be tokenized or parsed."""
    pass


class LexerError(SyntaxFault):
    """Error during lexical analysis (E0xx)."""
    pass


class ParserError(SyntaxFault):
    """Error during parsing (E1xx)."""
    pass


class EvaluationError(ExpressionError):
    """Error during evaluation (E2xx)."""
    pass


class UnknownSymbolError(EvaluationError):
    """A symbol or function with no binding in the evaluation scope."""

    def __init__(self, diagnostic: Diagnostic, name: str):
        self.name = name
        super().__init__(diagnostic)


# --- Lexer error codes ---

def error_unexpected_character(char: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E001: Unexpected character."""
    diag = Diagnostic(
        code="E001",
        message=f"unexpected character '{char}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return LexerError(diag)


def error_invalid_number_literal(text: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E002: Invalid number literal."""
    diag = Diagnostic(
        code="E002",
        message=f"invalid number literal '{text}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return LexerError(diag)


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, span: SourceSpan,
                           source_line: str = None) -> ParserError:
    """E101: Unexpected token."""
    diag = Diagnostic(
        code="E101",
        message=f"expected {expected}, found {found}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


def error_unexpected_end(expected: str, span: SourceSpan, source_line: str = None) -> ParserError:
    """E102: Unexpected end of expression."""
    diag = Diagnostic(
        code="E102",
        message=f"unexpected end of expression, expected {expected}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=["check for unbalanced parentheses or a trailing operator"],
    )
    return ParserError(diag)


def error_empty_expression(span: SourceSpan = None) -> ParserError:
    """E103: Empty expression."""
    diag = Diagnostic(
        code="E103",
        message="expression is empty",
        severity=ErrorSeverity.ERROR,
        span=span or _empty_span(),
    )
    return ParserError(diag)


def error_wrong_argument_count(name: str, expected: str, found: int, span: SourceSpan,
                               source_line: str = None) -> ParserError:
    """E104: Builtin called with the wrong number of arguments."""
    diag = Diagnostic(
        code="E104",
        message=f"function '{name}' takes {expected} argument(s), found {found}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


def error_component_count(expected: int, found: int, source_line: str = None) -> ParserError:
    """E105: Parametric formula with too few components."""
    diag = Diagnostic(
        code="E105",
        message=f"parametric formula needs {expected} comma-separated component(s), found {found}",
        severity=ErrorSeverity.ERROR,
        source_line=source_line,
        hints=["write the components as 'x = ..., y = ...'"],
    )
    return ParserError(diag)


# --- Evaluation error codes ---

def error_unknown_symbol(name: str, span: SourceSpan = None,
                         source_line: str = None) -> UnknownSymbolError:
    """E201: Symbol with no binding in scope."""
    diag = Diagnostic(
        code="E201",
        message=f"unknown symbol '{name}'",
        severity=ErrorSeverity.ERROR,
        span=span or _empty_span(),
        source_line=source_line,
        hints=["add a parameter with this name or remove it from the formula"],
    )
    return UnknownSymbolError(diag, name)


def error_unknown_function(name: str, span: SourceSpan = None,
                           source_line: str = None) -> UnknownSymbolError:
    """E202: Call to a function that is not a builtin."""
    diag = Diagnostic(
        code="E202",
        message=f"unknown function '{name}'",
        severity=ErrorSeverity.ERROR,
        span=span or _empty_span(),
        source_line=source_line,
    )
    return UnknownSymbolError(diag, name)


# --- Sampling diagnostics ---

def warning_values_clamped(count: int, low: float, high: float) -> Diagnostic:
    """W001: Sample values were clamped to the visible range."""
    return Diagnostic(
        code="W001",
        message=f"{count} sample value(s) clamped to [{low:g}, {high:g}]",
        severity=ErrorSeverity.INFO,
    )


def warning_domain_faults(count: int, reason: str) -> Diagnostic:
    """W002: Samples fell outside the formula's domain."""
    return Diagnostic(
        code="W002",
        message=f"{count} sample(s) undefined: {reason}",
        severity=ErrorSeverity.INFO,
    )


def warning_placeholder_geometry(reason: str) -> Diagnostic:
    """W003: Build fell back to placeholder geometry."""
    return Diagnostic(
        code="W003",
        message=f"using placeholder geometry: {reason}",
        severity=ErrorSeverity.WARNING,
    )


def warning_empty_geometry(name: str) -> Diagnostic:
    """W004: No valid segment was produced."""
    return Diagnostic(
        code="W004",
        message=f"'{name}' produced no drawable samples",
        severity=ErrorSeverity.WARNING,
    )


class DiagnosticCollector:
    """Accumulates the diagnostics of one geometry build.

    Builds never stop early on a diagnostic, so there is no error limit; the
    collector only records and reports.
    """

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def add(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def add_error(self, error: ExpressionError) -> None:
        """Record a caught expression error."""
        self.add(error.diagnostic)

    def _of(self, severity: ErrorSeverity) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is severity]

    @property
    def errors(self) -> List[Diagnostic]:
        return self._of(ErrorSeverity.ERROR)

    @property
    def warnings(self) -> List[Diagnostic]:
        return self._of(ErrorSeverity.WARNING)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def has_errors(self) -> bool:
        return any(d.severity is ErrorSeverity.ERROR for d in self.diagnostics)

    def codes(self) -> List[str]:
        """Diagnostic codes in the order they were reported."""
        return [d.code for d in self.diagnostics]

    def summary(self) -> str:
        """One line such as ``1 error(s), 2 warning(s)``; empty when clean."""
        if not self.diagnostics:
            return ""
        if self.error_count:
            return f"{self.error_count} error(s), {self.warning_count} warning(s)"
        return f"{self.warning_count} warning(s)"

    def format_all(self, show_source: bool = True) -> str:
        """Every diagnostic followed by the summary line."""
        blocks = [d.format(show_source) for d in self.diagnostics]
        tally = self.summary()
        if tally:
            blocks.append(tally)
        return "\n\n".join(blocks)

    def to_json(self) -> dict:
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self.error_count,
            "warning_count": self.warning_count,
        }
