"""Variable extraction and geometry-kind classification for typed formulas.

A user-entered formula carries no catalog metadata, so its kind and sliders
are inferred from the text:

- ``z = ...`` is a surface over (x, y)
- otherwise two or more coordinate-like variables (anything outside
  ``t, u, v, theta, phi, r``) make a surface, and everything else is a 2D
  function of x

Every detected variable that is not a coordinate of the chosen kind gets a
slider with a conventional default range.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from .expr import (
    Expression, ExpressionError, RESERVED_NAMES, free_symbols, normalize,
    parse_expression,
)
from .formula import FormulaKind, FormulaSpec, ParameterDef

__all__ = [
    "CUSTOM_FORMULA_ID",
    "PARAMETER_LIKE",
    "SyntaxCheck",
    "extract_variables",
    "classify",
    "coordinates_for",
    "generate_parameter_controls",
    "classify_custom",
    "validate_syntax",
]

logger = logging.getLogger(__name__)

CUSTOM_FORMULA_ID = "custom_equation"
CUSTOM_FORMULA_NAME = "Custom Equation"
CUSTOM_CATEGORY = "Custom"

# Variables that parameterize a curve rather than span a plot axis
PARAMETER_LIKE = frozenset({"t", "u", "v", "theta", "phi", "r"})

_SURFACE_PREFIX = re.compile(r"^\s*z\s*=", re.IGNORECASE)

# name -> (min, max, default, step)
_CONTROL_DEFAULTS = {
    "a": (0.1, 10.0, 2.0, 0.1),
    "b": (0.1, 10.0, 2.0, 0.1),
    "c": (0.1, 10.0, 2.0, 0.1),
    "r": (0.1, 10.0, 3.0, 0.1),
    "radius": (0.1, 10.0, 3.0, 0.1),
    "theta": (0.0, 6.28, 0.0, 0.1),
    "phi": (0.0, 6.28, 0.0, 0.1),
    "t": (0.0, 10.0, 1.0, 0.1),
    "omega": (0.1, 10.0, 1.0, 0.1),
    "w": (0.1, 10.0, 1.0, 0.1),
    "k": (0.1, 5.0, 1.0, 0.1),
    "n": (1.0, 10.0, 2.0, 1.0),
}
_GENERIC_CONTROL = (-10.0, 10.0, 1.0, 0.1)


@dataclass(frozen=True)
class SyntaxCheck:
    """Result of a syntax pre-check."""
    ok: bool
    message: Optional[str] = None


def extract_variables(expression: Union[str, Expression]) -> List[str]:
    """Sorted free variables of a formula, builtins and constants excluded.

    Text is normalized and parsed first; parse errors propagate.
    """
    if isinstance(expression, str):
        expression = parse_expression(normalize(expression))
    return [name for name in free_symbols(expression) if name not in RESERVED_NAMES]


def classify(raw: str) -> Tuple[List[str], FormulaKind]:
    """Detect the variables and the geometry kind of formula text.

    Raises:
        SyntaxFault: If the text cannot be parsed
        UnknownSymbolError: If the text calls an unknown function
    """
    variables = extract_variables(raw)
    if _SURFACE_PREFIX.match(raw):
        return variables, FormulaKind.SURFACE_3D
    inputs = [v for v in variables if v not in PARAMETER_LIKE]
    if len(inputs) >= 2:
        return variables, FormulaKind.SURFACE_3D
    return variables, FormulaKind.FUNCTION_2D


def coordinates_for(kind: FormulaKind, variables: Sequence[str]) -> Tuple[str, ...]:
    """Swept coordinates of a classified formula."""
    if kind is FormulaKind.SURFACE_3D:
        return ("x", "y")
    if "x" in variables:
        return ("x",)
    inputs = [v for v in variables if v not in PARAMETER_LIKE]
    if len(inputs) == 1:
        return (inputs[0],)
    return ("x",)


def generate_parameter_controls(variables: Sequence[str]) -> Tuple[ParameterDef, ...]:
    """Slider definitions for detected variables, using conventional ranges."""
    controls = []
    for name in variables:
        low, high, default, step = _CONTROL_DEFAULTS.get(name, _GENERIC_CONTROL)
        controls.append(ParameterDef(
            name=name,
            label=name.upper(),
            min=low,
            max=high,
            step=step,
            default=default,
        ))
    return tuple(controls)


def classify_custom(raw: str) -> Optional[FormulaSpec]:
    """Build a FormulaSpec for user-entered text.

    Returns None for empty or unparseable text.
    """
    if not raw or not raw.strip():
        return None
    try:
        variables, kind = classify(raw)
    except ExpressionError as exc:
        logger.debug("custom formula %r rejected: %s", raw, exc.diagnostic.message)
        return None

    coordinates = coordinates_for(kind, variables)
    sliders = generate_parameter_controls([v for v in variables if v not in coordinates])
    logger.debug("custom formula %r classified as %s with variables %s",
                 raw, kind.label, variables)
    return FormulaSpec(
        id=CUSTOM_FORMULA_ID,
        display_name=CUSTOM_FORMULA_NAME,
        category=CUSTOM_CATEGORY,
        raw_expression=raw,
        kind=kind,
        variable=coordinates[0],
        parameters=sliders,
    )


def validate_syntax(raw: str) -> SyntaxCheck:
    """Check that formula text parses, without building anything."""
    if not raw or not raw.strip():
        return SyntaxCheck(False, "Equation cannot be empty")
    try:
        parse_expression(normalize(raw))
    except ExpressionError as exc:
        return SyntaxCheck(False, exc.diagnostic.message)
    return SyntaxCheck(True)
