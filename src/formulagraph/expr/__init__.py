"""
Formula expression language: notation normalization, lexing, parsing and
evaluation of real-valued infix expressions.

Usage:
    from formulagraph.expr import normalize, parse_expression, evaluate

    expr = parse_expression(normalize(r"y = \\frac{1}{x}"))
    result = evaluate(expr, {"x": 2.0})
    result.value   # 0.5
"""

from .tokens import Token, TokenType, SourceLocation, SourceSpan
from .errors import (
    ErrorSeverity,
    Diagnostic,
    DiagnosticCollector,
    ExpressionError,
    SyntaxFault,
    LexerError,
    ParserError,
    EvaluationError,
    UnknownSymbolError,
)
from .lexer import Lexer, tokenize
from .ast import (
    AstNode, AstVisitor, Expression, Number, Symbol, UnaryOp, BinaryOp,
    FunctionCall, free_symbols, function_names,
)
from .builtins import (
    BuiltinFunction, BUILTIN_FUNCTIONS, BUILTIN_CONSTANTS, PHYSICAL_CONSTANTS,
    RESERVED_NAMES, TAN_EPSILON, DIVISION_EPSILON,
)
from .parser import Parser, parse_expression
from .evaluator import EvalResult, Evaluator, evaluate
from .normalize import normalize, GREEK_LETTERS

__all__ = [
    # Tokens
    "Token", "TokenType", "SourceLocation", "SourceSpan",
    # Errors
    "ErrorSeverity", "Diagnostic", "DiagnosticCollector", "ExpressionError",
    "SyntaxFault", "LexerError", "ParserError", "EvaluationError",
    "UnknownSymbolError",
    # Lexer / parser
    "Lexer", "tokenize", "Parser", "parse_expression",
    # AST
    "AstNode", "AstVisitor", "Expression", "Number", "Symbol", "UnaryOp",
    "BinaryOp", "FunctionCall", "free_symbols", "function_names",
    # Builtins
    "BuiltinFunction", "BUILTIN_FUNCTIONS", "BUILTIN_CONSTANTS",
    "PHYSICAL_CONSTANTS", "RESERVED_NAMES", "TAN_EPSILON", "DIVISION_EPSILON",
    # Evaluation
    "EvalResult", "Evaluator", "evaluate",
    # Notation
    "normalize", "GREEK_LETTERS",
]
