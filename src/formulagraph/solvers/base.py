"""
Solver interfaces and the named-shape registry.

Each classical shape in the catalog is one small solver object. Solvers are
looked up by catalog id or by display name (case-insensitive), and are
consulted before generic expression evaluation.

Parameter lookup follows slider semantics: a missing, zero or NaN value
means "use the shape's default", so a slider parked at 0 never produces a
degenerate shape.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple
import math

from ..formula import FormulaKind

Vec3 = Tuple[float, float, float]
Params = Mapping[str, float]


def pick(params: Params, *names: str, default: float) -> float:
    """First usable value among ``names``, else ``default``."""
    for name in names:
        value = params.get(name)
        if value is None:
            continue
        value = float(value)
        if value != 0 and not math.isnan(value):
            return value
    return default


@dataclass(frozen=True)
class Patch:
    """A parametric (u, v) patch of a surface."""
    solve: Callable[[float, float], Optional[Vec3]]
    u_range: Tuple[float, float]
    v_range: Tuple[float, float]


class Solver:
    """Base class for named-shape solvers."""

    id: str = ""
    names: Tuple[str, ...] = ()      # display-name aliases
    kind: FormulaKind = FormulaKind.FUNCTION_2D

    def keys(self) -> Tuple[str, ...]:
        return (self.id,) + tuple(n.lower() for n in self.names)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.id!r})"


class SurfaceSolver(Solver):
    """A surface given as a height field and, optionally, as (u, v) patches."""

    kind = FormulaKind.SURFACE_3D

    def implicit_solve(self, x: float, y: float, params: Params) -> float:
        """Height over ``(x, y)``; NaN outside the shape's domain."""
        return math.nan

    def parametric_solve(self, u: float, v: float, params: Params) -> Optional[Vec3]:
        """Point at ``(u, v)``; None for shapes with no parametric form."""
        return None

    def patches(self, params: Params) -> List[Patch]:
        """Patches covering the shape; empty means build a height field."""
        return []

    def extent(self, params: Params, default: float) -> float:
        """Half-width of the height-field grid."""
        return default


class FunctionSolver(Solver):
    """A function of one variable, ``y = f(x)``."""

    kind = FormulaKind.FUNCTION_2D

    def solve(self, x: float, params: Params) -> float:
        raise NotImplementedError


class ParametricCurveSolver(Solver):
    """A curve traced by ``t``; planar curves return ``z = 0``."""

    kind = FormulaKind.PARAMETRIC_2D

    def solve(self, t: float, params: Params) -> Vec3:
        raise NotImplementedError

    def t_range(self, params: Params, default: Tuple[float, float]) -> Tuple[float, float]:
        return (pick(params, "tMin", default=default[0]),
                pick(params, "tMax", default=default[1]))


class PolarSolver(Solver):
    """A polar curve ``r = f(theta)``."""

    kind = FormulaKind.POLAR_2D

    def solve(self, theta: float, params: Params) -> float:
        raise NotImplementedError


class SolverRegistry:
    """
    Registry of named-shape solvers.

    Solvers are registered under their id and every display-name alias.
    """

    def __init__(self, solvers: Iterable[Solver] = ()):
        self._by_key: Dict[str, Solver] = {}
        self._solvers: List[Solver] = []
        for solver in solvers:
            self.register(solver)

    def register(self, solver: Solver) -> None:
        """Register a solver; a clashing key is an error."""
        for key in solver.keys():
            existing = self._by_key.get(key)
            if existing is not None and existing is not solver:
                raise ValueError(f"Solver key '{key}' already registered by {existing!r}")
            self._by_key[key] = solver
        self._solvers.append(solver)

    def get(self, key: str) -> Optional[Solver]:
        """Look up a solver by id or display name."""
        if not key:
            return None
        return self._by_key.get(key) or self._by_key.get(key.strip().lower())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __iter__(self):
        return iter(self._solvers)

    def __len__(self) -> int:
        return len(self._solvers)

    def ids(self) -> List[str]:
        return [s.id for s in self._solvers]
