"""
Built-in function and constant tables for the expression evaluator.

Each builtin carries its arity and, where the function is only defined on
part of the real line, a domain constraint. The parser binds the builtin to
call nodes once so the evaluator can report a violated constraint as a point
fault instead of silently producing a wrong value.

Both tables are read-only and shared by every build.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional
import math


# Asymptote tolerance for tan: |cos(arg)| below this is treated as a pole
TAN_EPSILON = 1e-6

# Denominators with magnitude below this are a division fault
DIVISION_EPSILON = 1e-10

DomainCheck = Callable[..., Optional[str]]


@dataclass(frozen=True)
class BuiltinFunction:
    """A built-in function with its implementation and domain constraint."""
    name: str
    implementation: Callable[..., float]
    min_args: int = 1
    max_args: Optional[int] = 1         # None means variadic
    domain: Optional[DomainCheck] = None
    doc: str = ""

    def arity_text(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"

    def accepts(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

    def check_domain(self, *args: float) -> Optional[str]:
        """Return a fault reason if the arguments violate the domain."""
        if self.domain is None:
            return None
        return self.domain(*args)


def _overflow_safe(fn: Callable[..., float]) -> Callable[..., float]:
    """Map math overflow to infinity and domain errors to NaN."""

    def wrapper(*args: float) -> float:
        try:
            return fn(*args)
        except OverflowError:
            return math.inf
        except (ValueError, ZeroDivisionError):
            return math.nan

    wrapper.__name__ = getattr(fn, '__name__', 'builtin')
    return wrapper


def _positive(*args: float) -> Optional[str]:
    if args[0] <= 0:
        return "logarithm of a non-positive value"
    return None


def _log_domain(*args: float) -> Optional[str]:
    if args[0] <= 0:
        return "logarithm of a non-positive value"
    if len(args) > 1 and (args[1] <= 0 or args[1] == 1):
        return "logarithm base must be positive and not 1"
    return None


def _non_negative(*args: float) -> Optional[str]:
    if args[0] < 0:
        return "square root of a negative value"
    return None


def _unit_interval(*args: float) -> Optional[str]:
    if abs(args[0]) > 1:
        return "inverse sine/cosine outside [-1, 1]"
    return None


def _tan_domain(*args: float) -> Optional[str]:
    if abs(math.cos(args[0])) < TAN_EPSILON:
        return "tangent asymptote at an odd multiple of pi/2"
    return None


def _sign(x: float) -> float:
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return 0.0


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


def _log(x: float, base: float = math.e) -> float:
    return math.log(x) / math.log(base) if base != math.e else math.log(x)


def _builtin(name, impl, min_args=1, max_args=1, domain=None, doc=""):
    return BuiltinFunction(name, _overflow_safe(impl), min_args, max_args, domain, doc)


_FUNCTIONS = [
    _builtin("sin", math.sin, doc="sine"),
    _builtin("cos", math.cos, doc="cosine"),
    _builtin("tan", math.tan, domain=_tan_domain, doc="tangent"),
    _builtin("asin", math.asin, domain=_unit_interval, doc="inverse sine"),
    _builtin("acos", math.acos, domain=_unit_interval, doc="inverse cosine"),
    _builtin("atan", math.atan, doc="inverse tangent"),
    _builtin("atan2", math.atan2, 2, 2, doc="two-argument inverse tangent"),
    _builtin("sinh", math.sinh, doc="hyperbolic sine"),
    _builtin("cosh", math.cosh, doc="hyperbolic cosine"),
    _builtin("tanh", math.tanh, doc="hyperbolic tangent"),
    _builtin("log", _log, 1, 2, domain=_log_domain, doc="natural logarithm, optional base"),
    _builtin("ln", math.log, domain=_positive, doc="natural logarithm"),
    _builtin("log10", math.log10, domain=_positive, doc="base-10 logarithm"),
    _builtin("exp", math.exp, doc="exponential"),
    _builtin("sqrt", math.sqrt, domain=_non_negative, doc="square root"),
    _builtin("cbrt", _cbrt, doc="real cube root"),
    _builtin("abs", abs, doc="absolute value"),
    _builtin("sign", _sign, doc="sign (-1, 0 or 1)"),
    _builtin("floor", math.floor, doc="round down"),
    _builtin("ceil", math.ceil, doc="round up"),
    _builtin("pow", math.pow, 2, 2, doc="power"),
    _builtin("min", min, 1, None, doc="minimum"),
    _builtin("max", max, 1, None, doc="maximum"),
]

BUILTIN_FUNCTIONS: Mapping[str, BuiltinFunction] = MappingProxyType(
    {fn.name: fn for fn in _FUNCTIONS}
)

# Mathematical constants; never reported as free variables
BUILTIN_CONSTANTS: Mapping[str, float] = MappingProxyType({
    "pi": math.pi,
    "e": math.e,
})

# Physical constants available to catalog formulas at the lowest scope priority
PHYSICAL_CONSTANTS: Mapping[str, float] = MappingProxyType({
    "h": 6.626e-34,
    "hbar": 1.055e-34,
    "kB": 1.381e-23,
})

# Names excluded from free-variable extraction
RESERVED_NAMES = frozenset(BUILTIN_FUNCTIONS) | frozenset(BUILTIN_CONSTANTS) | {"PI", "E"}


def is_builtin_function(name: str) -> bool:
    return name in BUILTIN_FUNCTIONS


def get_builtin(name: str) -> Optional[BuiltinFunction]:
    return BUILTIN_FUNCTIONS.get(name)
