"""
Named-shape solvers.

Classical shapes are solved in closed form rather than through generic
expression evaluation. The registry maps catalog ids and display names to
solver objects:

    >>> from formulagraph.solvers import get_solver
    >>> get_solver("sphere").parametric_solve(0.0, 0.0, {"radius": 3})
    (3.0, 0.0, 0.0)
"""

from typing import List, Optional

from .base import (
    FunctionSolver,
    ParametricCurveSolver,
    Patch,
    PolarSolver,
    Solver,
    SolverRegistry,
    SurfaceSolver,
    pick,
)
from . import curves, functions, quadrics, surfaces


_registry: Optional[SolverRegistry] = None


def get_solver_registry() -> SolverRegistry:
    """Get the global solver registry."""
    global _registry
    if _registry is None:
        registry = SolverRegistry()
        for module in (quadrics, surfaces, functions, curves):
            for solver in module.SOLVERS:
                registry.register(solver)
        _registry = registry
    return _registry


def get_solver(key: str) -> Optional[Solver]:
    """Look up a solver by catalog id or display name."""
    return get_solver_registry().get(key)


def all_solvers() -> List[Solver]:
    return list(get_solver_registry())


__all__ = [
    'FunctionSolver',
    'ParametricCurveSolver',
    'Patch',
    'PolarSolver',
    'Solver',
    'SolverRegistry',
    'SurfaceSolver',
    'pick',
    'get_solver_registry',
    'get_solver',
    'all_solvers',
]
