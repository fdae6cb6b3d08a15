"""Quadric surfaces: sphere, ellipsoid, cone, cylinder, torus, paraboloids
and hyperboloids.

Closed and multi-sheet quadrics are built from (u, v) patches; the
paraboloids are height fields. Every solver also answers ``implicit_solve``
with the upper half of the surface, and NaN where no point of the surface
lies above (x, y).
"""

from math import cos, sin, sqrt, pi, nan

from .base import Patch, SurfaceSolver, pick


def _upper_sqrt(term):
    """Upper root; NaN off the surface's footprint."""
    return sqrt(term) if term >= 0 else nan


class Sphere(SurfaceSolver):
    """x^2 + y^2 + z^2 = r^2.

    Parameterized by longitude u in [0, 2*pi] and latitude v in
    [-pi/2, pi/2], so every vertex lies exactly on the sphere.
    """

    id = "sphere"
    names = ("Sphere",)

    def _radius(self, params):
        return pick(params, "radius", "r", default=3.0)

    def implicit_solve(self, x, y, params):
        r = self._radius(params)
        return _upper_sqrt(r * r - x * x - y * y)

    def parametric_solve(self, u, v, params):
        r = self._radius(params)
        cos_v = cos(v)
        return (r * cos_v * cos(u), r * cos_v * sin(u), r * sin(v))

    def patches(self, params):
        return [Patch(lambda u, v: self.parametric_solve(u, v, params),
                      (0.0, 2 * pi), (-pi / 2, pi / 2))]


class Ellipsoid(SurfaceSolver):
    """x^2/a^2 + y^2/b^2 + z^2/c^2 = 1."""

    id = "ellipsoid"
    names = ("Ellipsoid",)

    def _axes(self, params):
        return (pick(params, "a", default=3.0),
                pick(params, "b", default=2.0),
                pick(params, "c", default=1.5))

    def implicit_solve(self, x, y, params):
        a, b, c = self._axes(params)
        term = 1 - (x * x) / (a * a) - (y * y) / (b * b)
        return c * _upper_sqrt(term)

    def parametric_solve(self, u, v, params):
        a, b, c = self._axes(params)
        cos_v = cos(v)
        return (a * cos_v * cos(u), b * cos_v * sin(u), c * sin(v))

    def patches(self, params):
        return [Patch(lambda u, v: self.parametric_solve(u, v, params),
                      (0.0, 2 * pi), (-pi / 2, pi / 2))]


class Cone(SurfaceSolver):
    """Double cone x^2/a^2 + y^2/a^2 = z^2/c^2, one patch per nappe."""

    id = "cone"
    names = ("Cone",)

    def _params(self, params):
        return (pick(params, "a", default=2.0),
                pick(params, "c", default=2.0),
                pick(params, "zRange", default=4.0))

    def implicit_solve(self, x, y, params):
        a, c, _ = self._params(params)
        return c * sqrt((x * x) / (a * a) + (y * y) / (a * a))

    def parametric_solve(self, u, v, params):
        # v is the signed height; the radius grows linearly with |v|
        a, c, _ = self._params(params)
        rho = a * abs(v) / c
        return (rho * cos(u), rho * sin(u), v)

    def patches(self, params):
        _, _, z_range = self._params(params)
        solve = lambda u, v: self.parametric_solve(u, v, params)
        return [Patch(solve, (0.0, 2 * pi), (0.0, z_range)),
                Patch(solve, (0.0, 2 * pi), (-z_range, 0.0))]


class Cylinder(SurfaceSolver):
    """Open cylinder x^2 + y^2 = r^2 of finite height."""

    id = "cylinder"
    names = ("Cylinder",)

    def implicit_solve(self, x, y, params):
        r = pick(params, "radius", "r", default=2.0)
        return 0.0 if sqrt(x * x + y * y) <= r else nan

    def parametric_solve(self, u, v, params):
        r = pick(params, "radius", "r", default=2.0)
        return (r * cos(u), r * sin(u), v)

    def patches(self, params):
        half = pick(params, "height", default=8.0) / 2
        return [Patch(lambda u, v: self.parametric_solve(u, v, params),
                      (0.0, 2 * pi), (-half, half))]


class Torus(SurfaceSolver):
    """(sqrt(x^2 + y^2) - R)^2 + z^2 = r^2."""

    id = "torus"
    names = ("Torus (Doughnut)", "Torus")

    def _radii(self, params):
        return pick(params, "R", default=3.0), pick(params, "r", default=1.5)

    def implicit_solve(self, x, y, params):
        big, small = self._radii(params)
        rho = sqrt(x * x + y * y)
        term = 1 - ((rho - big) / small) ** 2
        return small * _upper_sqrt(term)

    def parametric_solve(self, u, v, params):
        big, small = self._radii(params)
        ring = big + small * cos(v)
        return (ring * cos(u), ring * sin(u), small * sin(v))

    def patches(self, params):
        return [Patch(lambda u, v: self.parametric_solve(u, v, params),
                      (0.0, 2 * pi), (0.0, 2 * pi))]


class Paraboloid(SurfaceSolver):
    """z = (x^2/a^2 + y^2/b^2) * scale / 8 over a grid ``scale`` wide."""

    id = "paraboloid"
    names = ("Paraboloid", "Elliptic Paraboloid")
    sign = 1.0

    def implicit_solve(self, x, y, params):
        scale = pick(params, "scale", default=8.0)
        a = pick(params, "a", default=2.0)
        b = pick(params, "b", default=2.0)
        return ((x * x) / (a * a) + self.sign * (y * y) / (b * b)) * scale / 8

    def extent(self, params, default):
        return pick(params, "scale", default=8.0) / 2


class HyperbolicParaboloid(Paraboloid):
    """z = (x^2/a^2 - y^2/b^2) * scale / 8, the saddle."""

    id = "hyperbolic_paraboloid"
    names = ("Hyperbolic Paraboloid",)
    sign = -1.0


class HyperboloidOneSheet(SurfaceSolver):
    """x^2/a^2 + y^2/a^2 - z^2/c^2 = 1, swept in z over [-zRange, zRange]."""

    id = "hyperboloid_one_sheet"
    names = ("Hyperboloid of One Sheet",)

    def implicit_solve(self, x, y, params):
        a = pick(params, "a", default=2.0)
        c = pick(params, "c", default=2.0)
        term = (x * x) / (a * a) + (y * y) / (a * a) - 1
        return c * _upper_sqrt(term)

    def parametric_solve(self, u, v, params):
        a = pick(params, "a", default=2.0)
        c = pick(params, "c", default=2.0)
        rho = a * sqrt(1 + (v * v) / (c * c))
        return (rho * cos(u), rho * sin(u), v)

    def patches(self, params):
        z_range = pick(params, "zRange", default=4.0)
        return [Patch(lambda u, v: self.parametric_solve(u, v, params),
                      (0.0, 2 * pi), (-z_range, z_range))]


class HyperboloidTwoSheets(SurfaceSolver):
    """-x^2/a^2 - y^2/a^2 + z^2/c^2 = 1, one patch per sheet.

    Each sheet is swept in |z| from ``max(zMin, c)`` (the vertex) to ``zMax``.
    """

    id = "hyperboloid_two_sheets"
    names = ("Hyperboloid of Two Sheets",)

    def implicit_solve(self, x, y, params):
        a = pick(params, "a", default=2.0)
        c = pick(params, "c", default=2.0)
        return c * sqrt(1 + (x * x) / (a * a) + (y * y) / (a * a))

    def parametric_solve(self, u, v, params):
        a = pick(params, "a", default=2.0)
        c = pick(params, "c", default=2.0)
        term = (v * v) / (c * c) - 1
        if term < -1e-9:
            return None
        rho = a * sqrt(max(term, 0.0))
        return (rho * cos(u), rho * sin(u), v)

    def patches(self, params):
        c = pick(params, "c", default=2.0)
        z_min = max(pick(params, "zMin", default=1.2), abs(c))
        z_max = max(pick(params, "zMax", default=4.0), z_min)
        solve = lambda u, v: self.parametric_solve(u, v, params)
        return [Patch(solve, (0.0, 2 * pi), (z_min, z_max)),
                Patch(solve, (0.0, 2 * pi), (-z_max, -z_min))]


SOLVERS = [
    Sphere(),
    Ellipsoid(),
    Cone(),
    Cylinder(),
    Torus(),
    Paraboloid(),
    HyperbolicParaboloid(),
    HyperboloidOneSheet(),
    HyperboloidTwoSheets(),
]
