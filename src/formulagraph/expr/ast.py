"""
Abstract Syntax Tree (AST) node definitions for formula expressions.

The parser produces a tree of these nodes; the evaluator walks it once per
sample. Function calls carry the builtin they resolved to at parse time,
including its domain constraint, so the tree is self-contained and can be
evaluated many times without further lookups.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Set
from abc import ABC
from .tokens import SourceSpan, TokenType
from .builtins import BuiltinFunction, BUILTIN_CONSTANTS


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode(ABC):
    """Base class for all AST nodes."""
    span: SourceSpan  # Source location for error reporting

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass
class Number(Expression):
    """A numeric literal."""
    value: float


@dataclass
class Symbol(Expression):
    """A variable, parameter or constant reference."""
    name: str


@dataclass
class UnaryOp(Expression):
    """A unary sign (e.g., -x, +2)."""
    operator: TokenType  # PLUS or MINUS
    operand: Expression


@dataclass
class BinaryOp(Expression):
    """A binary arithmetic operation (e.g., a + b, x ^ 2)."""
    left: Expression
    operator: TokenType  # PLUS, MINUS, STAR, SLASH, CARET
    right: Expression


@dataclass
class FunctionCall(Expression):
    """A call to a builtin function (e.g., sqrt(x), log(x, 2))."""
    name: str
    arguments: List[Expression] = field(default_factory=list)
    builtin: Optional[BuiltinFunction] = None  # bound by the parser


# =============================================================================
# Visitors
# =============================================================================

class SymbolCollector(AstVisitor):
    """Collects symbol names referenced by an expression."""

    def __init__(self, include_constants: bool = False):
        self.include_constants = include_constants
        self.names: Set[str] = set()

    def visit_Number(self, node: Number) -> None:
        pass

    def visit_Symbol(self, node: Symbol) -> None:
        if self.include_constants or node.name not in BUILTIN_CONSTANTS:
            self.names.add(node.name)

    def visit_UnaryOp(self, node: UnaryOp) -> None:
        node.operand.accept(self)

    def visit_BinaryOp(self, node: BinaryOp) -> None:
        node.left.accept(self)
        node.right.accept(self)

    def visit_FunctionCall(self, node: FunctionCall) -> None:
        for arg in node.arguments:
            arg.accept(self)


def free_symbols(expr: Expression) -> List[str]:
    """Sorted names an expression needs from its scope, constants excluded."""
    collector = SymbolCollector()
    expr.accept(collector)
    return sorted(collector.names)


def function_names(expr: Expression) -> Set[str]:
    """Names of every function called anywhere in the expression."""
    found: Set[str] = set()
    stack = [expr]
    while stack:
        node = stack.pop()
        if isinstance(node, FunctionCall):
            found.add(node.name)
            stack.extend(node.arguments)
        elif isinstance(node, BinaryOp):
            stack.extend((node.left, node.right))
        elif isinstance(node, UnaryOp):
            stack.append(node.operand)
    return found
