"""Parametric and polar curves."""

from math import cos, sin, sqrt, pi

from ..formula import FormulaKind
from .base import ParametricCurveSolver, PolarSolver, pick


# --- 2D parametric curves ---

class Circle(ParametricCurveSolver):
    id = "circle"
    names = ("Circle",)

    def solve(self, t, params):
        r = pick(params, "r", "radius", default=3.0)
        return (r * cos(t), r * sin(t), 0.0)


class Ellipse(ParametricCurveSolver):
    id = "ellipse"
    names = ("Ellipse",)

    def solve(self, t, params):
        a = pick(params, "a", "xRadius", default=4.0)
        b = pick(params, "b", "yRadius", default=2.0)
        return (a * cos(t), b * sin(t), 0.0)


class Astroid(ParametricCurveSolver):
    """x = a cos^3(t), y = a sin^3(t)."""

    id = "astroid"
    names = ("Astroid",)

    def solve(self, t, params):
        a = pick(params, "a", default=3.0)
        return (a * cos(t) ** 3, a * sin(t) ** 3, 0.0)


class Lissajous(ParametricCurveSolver):
    """x = A sin(a t + delta), y = B sin(b t)."""

    id = "lissajous_curve"
    names = ("Lissajous Curve",)

    def solve(self, t, params):
        big_a = pick(params, "A", "xAmplitude", default=3.0)
        big_b = pick(params, "B", "yAmplitude", default=2.0)
        a = pick(params, "a", "xFrequency", default=3.0)
        b = pick(params, "b", "yFrequency", default=2.0)
        delta = pick(params, "delta", "phaseShift", default=pi / 4)
        return (big_a * sin(a * t + delta), big_b * sin(b * t), 0.0)


class Cycloid(ParametricCurveSolver):
    """One arch of x = r(t - sin t), y = r(1 - cos t), centred on the origin."""

    id = "cycloid"
    names = ("Cycloid",)

    def solve(self, t, params):
        r = pick(params, "r", "radius", default=1.5)
        x = r * (t - sin(t))
        y = r * (1 - cos(t))
        return (x - pi * r, y - r, 0.0)


# --- 3D parametric curves ---

class TrefoilKnot(ParametricCurveSolver):
    """((R + cos(n t)) cos(2t), (R + cos(n t)) sin(2t), sin(n t))."""

    id = "trefoil_knot"
    names = ("Trefoil Knot",)
    kind = FormulaKind.PARAMETRIC_CURVE_3D

    def solve(self, t, params):
        big = pick(params, "R", default=2.0)
        n = pick(params, "n", default=3.0)
        ring = big + cos(n * t)
        return (ring * cos(2 * t), ring * sin(2 * t), sin(n * t))


class Viviani(ParametricCurveSolver):
    """Intersection of a sphere of radius 2a with a cylinder of radius a.

    The closed curve needs t in [0, 4 pi].
    """

    id = "vivianis_curve"
    names = ("Viviani's Curve",)
    kind = FormulaKind.PARAMETRIC_CURVE_3D

    def solve(self, t, params):
        a = pick(params, "a", default=2.0)
        return (a * (1 + cos(t)), a * sin(t), 2 * a * sin(t / 2))

    def t_range(self, params, default):
        return (pick(params, "tMin", default=0.0), pick(params, "tMax", default=4 * pi))


class Helix(ParametricCurveSolver):
    """(r cos t, r sin t, c t)."""

    id = "helix"
    names = ("Helix",)
    kind = FormulaKind.PARAMETRIC_CURVE_3D

    def solve(self, t, params):
        r = pick(params, "r", "radius", default=1.0)
        c = pick(params, "c", "pitch", default=0.2)
        return (r * cos(t), r * sin(t), c * t)

    def t_range(self, params, default):
        return (pick(params, "tMin", default=0.0), pick(params, "tMax", default=6 * pi))


# --- Polar curves ---

class Cardioid(PolarSolver):
    id = "cardioid"
    names = ("Cardioid",)

    def solve(self, theta, params):
        return pick(params, "a", default=2.0) * (1 - cos(theta))


class RoseCurve(PolarSolver):
    """r = a cos(k theta); odd k gives k petals, even k gives 2k."""

    id = "rose_curve"
    names = ("Rose Curve",)

    def solve(self, theta, params):
        a = pick(params, "a", "scale", default=3.0)
        k = pick(params, "k", "petals", default=5.0)
        return a * cos(k * theta)


class Lemniscate(PolarSolver):
    """r^2 = a^2 cos(2 theta); r = 0 where cos(2 theta) < 0."""

    id = "lemniscate_of_bernoulli"
    names = ("Lemniscate of Bernoulli", "Lemniscate")

    def solve(self, theta, params):
        a = pick(params, "a", default=2.0)
        c2 = cos(2 * theta)
        return a * sqrt(c2) if c2 >= 0 else 0.0


class ArchimedeanSpiral(PolarSolver):
    """r = a + b theta."""

    id = "archimedean_spiral"
    names = ("Archimedean Spiral", "Spiral")

    def solve(self, theta, params):
        # a = 0 is a valid spiral through the pole
        a = float(params.get("a", 0.0))
        b = pick(params, "b", default=0.5)
        return a + b * theta


SOLVERS = [
    Circle(),
    Ellipse(),
    Astroid(),
    Lissajous(),
    Cycloid(),
    TrefoilKnot(),
    Viviani(),
    Helix(),
    Cardioid(),
    RoseCurve(),
    Lemniscate(),
    ArchimedeanSpiral(),
]
