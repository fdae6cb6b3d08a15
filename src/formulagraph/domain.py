"""Domain checks for formula text.

:func:`check` is a fast textual heuristic over the raw formula: it looks for
whole-word function names and rejects coordinates where those functions are
undefined. Builds do not depend on it; the parser binds a domain constraint to
every call node and the evaluator reports the violated one per sample (see
:mod:`formulagraph.expr.builtins`).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional

from .expr import Expression, FunctionCall, BinaryOp, UnaryOp, TAN_EPSILON, DIVISION_EPSILON

__all__ = [
    "DomainStatus",
    "VALID",
    "check",
    "validate",
    "constrained_calls",
]


@dataclass(frozen=True)
class DomainStatus:
    """Valid, or undefined with a reason."""
    reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.reason is None

    @classmethod
    def undefined(cls, reason: str) -> "DomainStatus":
        return cls(reason)

    def __bool__(self) -> bool:
        return self.is_valid


VALID = DomainStatus()

_LOG = re.compile(r"\b(log|ln|log10)\b")
_SQRT = re.compile(r"\bsqrt\b")
_TAN = re.compile(r"\btan\b")
_Y = re.compile(r"\by\b")
_RECIPROCAL = re.compile(r"(?<![\w.])1\s*/\s*x\b|\\frac\s*\{\s*1\s*\}\s*\{\s*x\s*\}")


def check(expr: str, x: float, y: Optional[float] = None) -> DomainStatus:
    """Textual domain check of ``expr`` at ``(x, y)``.

    >>> check("log(x)", -1).is_valid
    False
    >>> check("log(x)", 1).is_valid
    True
    """
    text = expr.lower()
    uses_y = y is not None and _Y.search(text) is not None

    if _LOG.search(text):
        if x <= 0:
            return DomainStatus.undefined("Logarithmic functions undefined for x ≤ 0")
        if uses_y and y <= 0:
            return DomainStatus.undefined("Logarithmic functions undefined for y ≤ 0")

    if _SQRT.search(text):
        if x < 0:
            return DomainStatus.undefined("Square root undefined for x < 0")
        if uses_y and y < 0:
            return DomainStatus.undefined("Square root undefined for y < 0")

    if _RECIPROCAL.search(text) and abs(x) < DIVISION_EPSILON:
        return DomainStatus.undefined("Division by zero at x = 0")

    if _TAN.search(text) and abs(math.cos(x)) < TAN_EPSILON:
        return DomainStatus.undefined("Tangent discontinuity at x = π/2 + nπ")

    return VALID


validate = check


def constrained_calls(expr: Expression) -> List[str]:
    """Names of calls in ``expr`` that carry a domain constraint, in source order."""
    found: List[str] = []

    def walk(node: Expression) -> None:
        if isinstance(node, FunctionCall):
            if node.builtin is not None and node.builtin.domain is not None:
                found.append(node.name)
            for arg in node.arguments:
                walk(arg)
        elif isinstance(node, BinaryOp):
            walk(node.left)
            walk(node.right)
        elif isinstance(node, UnaryOp):
            walk(node.operand)

    walk(expr)
    return found
