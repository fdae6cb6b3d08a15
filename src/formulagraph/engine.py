"""
Formula-to-geometry engine.

:func:`build_geometry` is a pure function from a formula and a parameter
snapshot to drawable geometry:

    >>> from formulagraph.classifier import classify_custom
    >>> spec = classify_custom("z = x^2 - y^2")
    >>> mesh = build_geometry(spec, {})
    >>> mesh.vertex_count
    2601

Named shapes are built by their closed-form solver; anything else goes
through normalization, parsing and generic evaluation. Point-wise failures
are absorbed by the sampler. A syntax error propagates to the caller; a
symbol with no value yields a placeholder box.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .assembler import (
    fill_polyline, is_filled_shape, merge_meshes, mesh_from_grid, polyline_from_segment,
)
from .classifier import classify_custom, validate_syntax
from .config import DEFAULT_CONFIG, EngineConfig
from .expr import (
    DiagnosticCollector, Expression, UnknownSymbolError, evaluate, free_symbols,
    normalize, parse_expression,
)
from .expr.errors import (
    error_component_count, error_unknown_symbol, warning_domain_faults,
    warning_empty_geometry, warning_placeholder_geometry, warning_values_clamped,
)
from .formula import NAMED_CONSTANTS, FormulaKind, FormulaSpec, build_scope
from .geometry import Geometry, Mesh, Polyline, placeholder_box
from .sampler import (
    SamplePoint, longest_segment, sample_grid, sample_parametric_grid, sweep,
)
from .solvers import (
    FunctionSolver, ParametricCurveSolver, PolarSolver, Solver, SurfaceSolver,
    get_solver, pick,
)

__all__ = [
    "MaterialHint",
    "LINE_MATERIAL",
    "SURFACE_MATERIAL",
    "FALLBACK_SYMBOLS",
    "build_geometry",
    "material_hint",
    "split_components",
    "classify_custom",
    "validate_syntax",
]

logger = logging.getLogger(__name__)

Params = Mapping[str, float]
Clamp = Optional[Tuple[float, float]]

# Symbols a generic formula may use without declaring a slider
FALLBACK_SYMBOLS: Dict[FormulaKind, Dict[str, float]] = {
    FormulaKind.FUNCTION_2D: {
        "a": 1.0, "b": 1.0, "c": 0.0, "d": 0.0, "k": 1.0,
        "A": 1.0, "B": 1.0, "C": 0.0, "D": 0.0, "r": 2.0,
        "I": 1.0, "I_0": 1.0, "V_T": 0.026, "n": 1.0,
        "phi": 0.0, "omega": 1.0, "gamma": 0.1, "T": 300.0,
    },
    FormulaKind.SURFACE_3D: {"a": 2.0, "b": 2.0, "c": 2.0, "r": 2.0, "R": 3.0},
    FormulaKind.POLAR_2D: {"r": 2.0, "a": 2.0, "k": 4.0},
    FormulaKind.PARAMETRIC_2D: {
        "a": 3.0, "b": 2.0, "c": 1.0, "r": 3.0, "A": 3.0, "B": 2.0,
        "delta": math.pi / 4, "phi": 0.0,
    },
    FormulaKind.PARAMETRIC_CURVE_3D: {
        "a": 2.0, "b": 1.0, "c": 1.0, "r": 2.0, "R": 2.0, "A": 1.0, "B": 1.0,
    },
}

# Closing point of a curve must match its start this closely
_CLOSURE_TOLERANCE = 1e-6


@dataclass(frozen=True)
class MaterialHint:
    """How a renderer should draw a geometry."""
    style: str                  # "line" or "mesh"
    color: str
    line_width: float = 1.0
    opacity: float = 1.0
    transparent: bool = False
    double_sided: bool = False


LINE_MATERIAL = MaterialHint("line", "#ff6b35", line_width=2.0)
SURFACE_MATERIAL = MaterialHint("mesh", "#4a9eff", opacity=0.8, transparent=True,
                                double_sided=True)


def material_hint(kind: FormulaKind, geometry: Optional[Geometry] = None) -> MaterialHint:
    """Material for a formula kind; filled curves are drawn as surfaces."""
    if isinstance(geometry, Mesh) or (geometry is None and kind.is_surface):
        return SURFACE_MATERIAL
    return LINE_MATERIAL


# =============================================================================
# Helpers
# =============================================================================

def split_components(raw: str) -> List[str]:
    """Split parametric text such as ``x = cos t, y = sin t`` at top-level commas."""
    parts: List[str] = []
    depth = 0
    start = 0
    for idx, ch in enumerate(raw):
        if ch in "({[":
            depth += 1
        elif ch in ")}]":
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            parts.append(raw[start:idx])
            start = idx + 1
    parts.append(raw[start:])
    return [p.strip() for p in parts if p.strip()]


def _clamp(value: float, bounds: Clamp) -> Tuple[float, bool]:
    if bounds is None or not math.isfinite(value):
        return value, False
    low, high = bounds
    if value < low:
        return low, True
    if value > high:
        return high, True
    return value, False


def _function_aliases(x: float) -> Dict[str, float]:
    """Per-sample names that stand in for the swept coordinate in physics formulas."""
    return {"t": x, "V": x, "E": x, "f": abs(x), "lambda": abs(x) + 1}


class _Compiled:
    """A generic formula parsed once for a whole build."""

    def __init__(self, spec: FormulaSpec, text: str, coordinates: Sequence[str], params: Params):
        self.fallbacks = FALLBACK_SYMBOLS.get(spec.kind, {})
        protected = set(params) | set(self.fallbacks) | set(coordinates)
        self.expression: Expression = parse_expression(normalize(text, protected))
        self._check_bound(spec.kind, coordinates, params)

    def _check_bound(self, kind: FormulaKind, coordinates: Sequence[str], params: Params) -> None:
        known = set(NAMED_CONSTANTS) | set(self.fallbacks) | set(params) | set(coordinates)
        if kind is FormulaKind.FUNCTION_2D:
            known |= set(_function_aliases(0.0))
        for name in free_symbols(self.expression):
            if name not in known:
                raise error_unknown_symbol(name)


def _result_sample(coords: Tuple[float, ...], point: Tuple[float, ...], result) -> SamplePoint:
    if not result.ok:
        return SamplePoint(coords, None, result.fault, result.raw)
    return SamplePoint(coords, point, None, result.raw, result.clamped)


def _solver_scalar(coords: Tuple[float, ...], point: Tuple[float, ...], raw: float,
                   bounds: Clamp) -> SamplePoint:
    if not math.isfinite(raw):
        return SamplePoint(coords, None, "outside the shape's domain", raw)
    value, clamped = _clamp(raw, bounds)
    return SamplePoint(coords, point[:-1] + (value,), None, raw, clamped)


def _report(faults: Mapping[str, int], clamped: int, bounds: Clamp,
                 collector: DiagnosticCollector) -> None:
    if clamped and bounds is not None:
        collector.add(warning_values_clamped(clamped, *bounds))
    for reason, count in sorted(faults.items()):
        collector.add(warning_domain_faults(count, reason))


# =============================================================================
# Builders per kind
# =============================================================================

def _build_function(spec: FormulaSpec, params: Params, solver: Optional[Solver],
                    config: EngineConfig, resolution: int,
                    collector: DiagnosticCollector) -> Polyline:
    bounds = config.function_clamp

    if isinstance(solver, FunctionSolver):
        def sample(x: float) -> SamplePoint:
            return _solver_scalar((x,), (x, 0.0), solver.solve(x, params), bounds)
    else:
        var = spec.variable or "x"
        compiled = _Compiled(spec, spec.raw_expression, (var,), params)

        def sample(x: float) -> SamplePoint:
            fallbacks = {**compiled.fallbacks, **_function_aliases(x)}
            scope = build_scope({var: x}, params, fallbacks)
            result = evaluate(compiled.expression, scope, bounds)
            return _result_sample((x,), (x, result.value), result)

    span = config.function_range
    result = sweep(sample, -span, span, resolution, detect_poles=True,
                   bisection_steps=config.pole_bisection_steps)
    _report(result.fault_reasons, result.clamped_count, bounds, collector)
    if result.pole_count:
        logger.debug("%s: %d pole(s) split the curve", spec.id, result.pole_count)

    segment = longest_segment(result.segments)
    if segment is None:
        collector.add(warning_empty_geometry(spec.display_name))
        return Polyline(())
    return polyline_from_segment(segment)


def _build_surface(spec: FormulaSpec, params: Params, solver: Optional[Solver],
                   config: EngineConfig, resolution: int,
                   collector: DiagnosticCollector) -> Mesh:
    if isinstance(solver, SurfaceSolver):
        patches = solver.patches(params)
        if patches:
            meshes = []
            for patch in patches:
                def sample_uv(u: float, v: float, solve=patch.solve) -> SamplePoint:
                    point = solve(u, v)
                    if point is None:
                        return SamplePoint.faulted((u, v), "outside the shape's domain")
                    return SamplePoint((u, v), point)

                grid = sample_parametric_grid(sample_uv, patch.u_range, patch.v_range, resolution)
                _report(grid.fault_reasons, 0, None, collector)
                meshes.append(mesh_from_grid(grid))
            return merge_meshes(meshes)

        extent = solver.extent(params, config.surface_extent)

        def sample_xy(x: float, y: float) -> SamplePoint:
            return _solver_scalar((x, y), (x, y, 0.0), solver.implicit_solve(x, y, params), None)

        grid = sample_grid(sample_xy, extent, resolution)
        _report(grid.fault_reasons, 0, None, collector)
        return mesh_from_grid(grid)

    bounds = config.surface_clamp
    compiled = _Compiled(spec, spec.raw_expression, ("x", "y"), params)

    def sample_generic(x: float, y: float) -> SamplePoint:
        scope = build_scope({"x": x, "y": y}, params, compiled.fallbacks)
        result = evaluate(compiled.expression, scope, bounds)
        return _result_sample((x, y), (x, y, result.value), result)

    grid = sample_grid(sample_generic, config.surface_extent, resolution)
    _report(grid.fault_reasons, grid.clamped_count, bounds, collector)
    return mesh_from_grid(grid)


def _curve_sampler(spec: FormulaSpec, params: Params, solver: Optional[Solver]
                   ) -> Callable[[float], SamplePoint]:
    kind = spec.kind
    planar = kind.is_planar

    if kind is FormulaKind.POLAR_2D:
        if isinstance(solver, PolarSolver):
            def radius(theta: float) -> Tuple[float, Optional[str]]:
                return solver.solve(theta, params), None
        else:
            compiled = _Compiled(spec, spec.raw_expression, ("theta",), params)

            def radius(theta: float) -> Tuple[float, Optional[str]]:
                scope = build_scope({"theta": theta}, params, compiled.fallbacks)
                result = evaluate(compiled.expression, scope)
                return abs(result.value), result.fault

        def sample_polar(theta: float) -> SamplePoint:
            r, fault = radius(theta)
            if fault is not None or not math.isfinite(r):
                return SamplePoint((theta,), None, fault, r)
            return SamplePoint((theta,), (r * math.cos(theta), r * math.sin(theta)), None, r)

        return sample_polar

    if isinstance(solver, ParametricCurveSolver):
        def sample_solver(t: float) -> SamplePoint:
            point = solver.solve(t, params)
            return SamplePoint((t,), point[:2] if planar else point)

        return sample_solver

    needed = 2 if planar else 3
    components = split_components(spec.raw_expression)
    if len(components) < needed:
        raise error_component_count(needed, len(components), spec.raw_expression)
    compiled = [_Compiled(spec, text, ("t",), params) for text in components[:needed]]

    def sample_generic(t: float) -> SamplePoint:
        values = []
        for part in compiled:
            scope = build_scope({"t": t}, params, part.fallbacks)
            result = evaluate(part.expression, scope)
            if not result.ok:
                return SamplePoint((t,), None, result.fault, result.raw)
            values.append(result.value)
        return SamplePoint((t,), tuple(values))

    return sample_generic


def _curve_range(spec: FormulaSpec, params: Params, solver: Optional[Solver],
                 config: EngineConfig) -> Tuple[float, float]:
    if spec.kind is FormulaKind.POLAR_2D:
        return (0.0, config.theta_max)
    default = (config.t_min, config.t_max)
    if isinstance(solver, ParametricCurveSolver):
        return solver.t_range(params, default)
    return (pick(params, "tMin", default=default[0]), pick(params, "tMax", default=default[1]))


def _build_curve(spec: FormulaSpec, params: Params, solver: Optional[Solver],
                 config: EngineConfig, resolution: int,
                 collector: DiagnosticCollector) -> Geometry:
    start, stop = _curve_range(spec, params, solver, config)
    result = sweep(_curve_sampler(spec, params, solver), start, stop, resolution)
    _report(result.fault_reasons, 0, None, collector)

    segment = longest_segment(result.segments)
    if segment is None:
        collector.add(warning_empty_geometry(spec.display_name))
        return Polyline(())

    polyline = polyline_from_segment(segment)
    first, last = polyline.points[0], polyline.points[-1]
    closes = len(segment) == result.sample_count and all(
        abs(a - b) <= _CLOSURE_TOLERANCE for a, b in zip(first, last))
    if not closes:
        return polyline

    outline = Polyline(polyline.points[:-1], closed=True)
    if spec.kind.is_planar and (is_filled_shape(spec.id) or is_filled_shape(spec.display_name)):
        filled = fill_polyline(outline)
        if filled is not None:
            return filled
        logger.debug("%s: fill produced no triangles, drawing the outline", spec.id)
    return outline


_BUILDERS = {
    FormulaKind.FUNCTION_2D: _build_function,
    FormulaKind.SURFACE_3D: _build_surface,
    FormulaKind.PARAMETRIC_2D: _build_curve,
    FormulaKind.POLAR_2D: _build_curve,
    FormulaKind.PARAMETRIC_CURVE_3D: _build_curve,
}


# =============================================================================
# Entry point
# =============================================================================

def build_geometry(
    spec: FormulaSpec,
    params: Optional[Params] = None,
    *,
    config: Optional[EngineConfig] = None,
    diagnostics: Optional[DiagnosticCollector] = None,
) -> Geometry:
    """
    Build drawable geometry for a formula.

    Parameters
    ----------
    spec : FormulaSpec
        The formula to draw.
    params : Mapping[str, float], optional
        Current slider values. A ``resolution`` entry overrides the
        configured sample count.
    config : EngineConfig, optional
        Sampling ranges and clamps; defaults to :data:`DEFAULT_CONFIG`.
    diagnostics : DiagnosticCollector, optional
        Receives clamp, domain and fallback diagnostics.

    Returns
    -------
    Polyline or Mesh
        A polyline for curves and functions of one variable, a mesh for
        surfaces and filled closed curves, or a placeholder box when the
        formula names a symbol with no value.

    Raises
    ------
    SyntaxFault
        The formula text cannot be parsed.
    """
    config = config or DEFAULT_CONFIG
    collector = diagnostics if diagnostics is not None else DiagnosticCollector()
    values: Dict[str, float] = {k: float(v) for k, v in (params or {}).items()}
    resolution = config.clamp_resolution(values.pop("resolution", None))

    solver = get_solver(spec.id)
    if solver is not None and solver.kind is not spec.kind:
        logger.debug("%s: solver %r does not draw %s, evaluating generically",
                     spec.id, solver, spec.kind.label)
        solver = None

    builder = _BUILDERS[spec.kind]
    try:
        geometry = builder(spec, values, solver, config, resolution, collector)
    except UnknownSymbolError as exc:
        logger.warning("%s: %s; drawing placeholder", spec.id, exc.diagnostic.message)
        collector.add_error(exc)
        collector.add(warning_placeholder_geometry(exc.diagnostic.message))
        return placeholder_box(config.placeholder_size)

    if isinstance(geometry, Mesh):
        logger.debug("%s: mesh with %d vertices, %d triangles",
                     spec.id, geometry.vertex_count, geometry.triangle_count)
    else:
        logger.debug("%s: polyline with %d points%s", spec.id, geometry.point_count,
                     " (closed)" if geometry.closed else "")
    return geometry
