"""
Tree-walking evaluator for parsed formula expressions.

Evaluation is total over the reals: a domain violation (logarithm of a
non-positive value, division by a near-zero denominator, ...) is reported as a
fault on the result and the value becomes NaN. Overflow yields an infinity.
Only a symbol missing from the scope is an exception, since no sample can
succeed in that case.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
import math

from .ast import AstVisitor, Expression, Number, Symbol, UnaryOp, BinaryOp, FunctionCall
from .builtins import BUILTIN_CONSTANTS, DIVISION_EPSILON
from .errors import error_unknown_symbol
from .tokens import TokenType


@dataclass(frozen=True)
class EvalResult:
    """Outcome of one evaluation."""
    value: float                    # clamped value, NaN on fault
    raw: float                      # value before clamping
    clamped: bool = False
    fault: Optional[str] = None     # domain fault reason

    @property
    def ok(self) -> bool:
        """True for a finite, fault-free value."""
        return self.fault is None and math.isfinite(self.value)


class _Fault(Exception):
    """Internal short-circuit for a domain fault."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


def _power(base: float, exponent: float) -> float:
    if base < 0 and not float(exponent).is_integer():
        raise _Fault("fractional power of a negative value")
    if base == 0 and exponent < 0:
        raise _Fault("division by zero")
    try:
        return base ** exponent
    except OverflowError:
        if base < 0 and int(exponent) % 2 == 1:
            return -math.inf
        return math.inf


class Evaluator(AstVisitor):
    """Evaluates an expression tree against a fixed scope."""

    def __init__(self, scope: Mapping[str, float]):
        self.scope = scope

    def visit_Number(self, node: Number) -> float:
        return node.value

    def visit_Symbol(self, node: Symbol) -> float:
        value = self.scope.get(node.name)
        if value is None:
            value = BUILTIN_CONSTANTS.get(node.name)
        if value is None:
            raise error_unknown_symbol(node.name, node.span)
        return float(value)

    def visit_UnaryOp(self, node: UnaryOp) -> float:
        operand = node.operand.accept(self)
        if node.operator == TokenType.MINUS:
            return -operand
        return operand

    def visit_BinaryOp(self, node: BinaryOp) -> float:
        left = node.left.accept(self)
        right = node.right.accept(self)
        op = node.operator

        if op == TokenType.PLUS:
            return left + right
        if op == TokenType.MINUS:
            return left - right
        if op == TokenType.STAR:
            return left * right
        if op == TokenType.SLASH:
            if abs(right) < DIVISION_EPSILON:
                raise _Fault("division by zero")
            return left / right
        if op == TokenType.CARET:
            return _power(left, right)
        raise NotImplementedError(f"operator {op.name}")

    def visit_FunctionCall(self, node: FunctionCall) -> float:
        args = [arg.accept(self) for arg in node.arguments]
        builtin = node.builtin
        if builtin is None:
            raise NotImplementedError(f"unbound call to {node.name}")
        reason = builtin.check_domain(*args)
        if reason is not None:
            raise _Fault(reason)
        return float(builtin.implementation(*args))


def evaluate(expr: Expression, scope: Mapping[str, float],
             clamp: Optional[Tuple[float, float]] = None) -> EvalResult:
    """
    Evaluate ``expr`` with the names in ``scope``.

    Parameters
    ----------
    expr : Expression
        Parsed expression tree.
    scope : Mapping[str, float]
        Coordinates, parameters and constants visible to this call.
    clamp : tuple of float, optional
        ``(low, high)`` range; finite values outside it are clamped and the
        result is flagged ``clamped``.

    Returns
    -------
    EvalResult

    Raises
    ------
    UnknownSymbolError
        A symbol has no binding in ``scope``.
    """
    try:
        raw = expr.accept(Evaluator(scope))
    except _Fault as fault:
        return EvalResult(math.nan, math.nan, False, fault.reason)

    value = raw
    clamped = False
    if clamp is not None and math.isfinite(raw):
        low, high = clamp
        if raw < low:
            value, clamped = low, True
        elif raw > high:
            value, clamped = high, True
    return EvalResult(value, raw, clamped, None)
