"""Inverse mapping from scene points to mathematical coordinates.

Used for hover read-outs: given a point on the drawn geometry, report the
point in the formula's own coordinates. Named shapes get their natural
parameterization back (spherical for the sphere and ellipsoid, cylindrical
for the cylinder, paraboloid and cone, toroidal angles for the torus); polar
curves get ``(r, theta)``. Everything else is shown as is.

Nothing here raises; a point that cannot be inverted degrades to its raw
coordinates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence

from .formula import FormulaKind, FormulaSpec
from .solvers import pick

__all__ = [
    "MathCoordinates",
    "scene_to_math",
    "format_coordinates",
    "format_value",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MathCoordinates:
    """Cartesian coordinates plus an optional parameterization."""
    x: float
    y: float
    z: float
    parameterization: Dict[str, float] = field(default_factory=dict)


def _cylindrical(x: float, y: float) -> Dict[str, float]:
    return {"r": math.hypot(x, y), "theta": math.atan2(y, x)}


def _polar_angle(z: float, radius: float) -> float:
    if radius == 0:
        return 0.0
    return math.acos(max(-1.0, min(1.0, z / radius)))


def _sphere(x, y, z, params):
    radius = math.sqrt(x * x + y * y + z * z)
    return {"r": radius, "theta": math.atan2(y, x), "phi": _polar_angle(z, radius)}


def _ellipsoid(x, y, z, params):
    # Normalize to the unit sphere, then read spherical angles
    xn = x / pick(params, "a", default=3.0)
    yn = y / pick(params, "b", default=2.0)
    zn = z / pick(params, "c", default=1.5)
    radius = math.sqrt(xn * xn + yn * yn + zn * zn)
    return {"theta": math.atan2(yn, xn), "phi": _polar_angle(zn, radius)}


def _torus(x, y, z, params):
    big = pick(params, "R", default=3.0)
    small = pick(params, "r", default=1.5)
    rho = math.hypot(x, y)
    return {"u": math.atan2(y, x), "v": math.atan2(z, rho - big), "R": big, "r": small}


def _cone(x, y, z, params):
    coords = _cylindrical(x, y)
    coords["h"] = z
    return coords


_NAMED = {
    "sphere": _sphere,
    "ellipsoid": _ellipsoid,
    "torus": _torus,
    "cylinder": lambda x, y, z, params: _cylindrical(x, y),
    "paraboloid": lambda x, y, z, params: _cylindrical(x, y),
    "cone": _cone,
}


def scene_to_math(point: Sequence[float], spec: FormulaSpec,
                  params: Optional[Mapping[str, float]] = None) -> MathCoordinates:
    """
    Map a scene point back to the formula's coordinates.

    Parameters
    ----------
    point : sequence of float
        ``(x, y)`` or ``(x, y, z)`` in scene space.
    spec : FormulaSpec
        The formula the point belongs to.
    params : Mapping[str, float], optional
        Slider values used for the build.

    Returns
    -------
    MathCoordinates
    """
    params = params or {}
    try:
        x = float(point[0])
        y = float(point[1])
        z = float(point[2]) if len(point) > 2 else 0.0
    except (TypeError, ValueError, IndexError):
        return MathCoordinates(math.nan, math.nan, math.nan)

    inverse = _NAMED.get(spec.id)
    try:
        if inverse is not None:
            return MathCoordinates(x, y, z, inverse(x, y, z, params))
        if spec.kind is FormulaKind.POLAR_2D:
            return MathCoordinates(x, y, z, _cylindrical(x, y))
    except (ArithmeticError, ValueError) as exc:
        # Bad slider values: show the raw point
        logger.debug("no inverse for %s at %s: %s", spec.id, (x, y, z), exc)
    return MathCoordinates(x, y, z)


def format_value(value: float) -> str:
    """Three decimals; tiny magnitudes print as ``0.000``."""
    if not math.isfinite(value):
        return str(value)
    if abs(value) < 0.001:
        return "0.000"
    return f"{value:.3f}"


def format_coordinates(coords: MathCoordinates, spec: FormulaSpec) -> str:
    """Tooltip text for a mapped point."""
    p = coords.parameterization
    if p:
        if spec.kind is FormulaKind.POLAR_2D:
            return f"r={format_value(p.get('r', 0.0))}, θ={format_value(p.get('theta', 0.0))}"
        if spec.id == "sphere" and {"r", "theta", "phi"} <= p.keys():
            return (f"r={format_value(p['r'])}, θ={format_value(p['theta'])}, "
                    f"φ={format_value(p['phi'])}")
        if spec.id == "cylinder" and {"r", "theta"} <= p.keys():
            return (f"r={format_value(p['r'])}, θ={format_value(p['theta'])}, "
                    f"z={format_value(coords.z)}")

    if spec.kind.is_planar:
        return f"({format_value(coords.x)}, {format_value(coords.y)})"
    return f"({format_value(coords.x)}, {format_value(coords.y)}, {format_value(coords.z)})"
