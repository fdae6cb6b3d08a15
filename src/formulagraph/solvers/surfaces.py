"""Minimal surfaces and explicit height-field surfaces."""

from math import atan2, cos, cosh, exp, sin, sqrt, pi, nan, acosh

from .base import Patch, SurfaceSolver, pick


class Helicoid(SurfaceSolver):
    """x = u cos(w), y = u sin(w), z = c v with w = 2 pi v / vRange.

    One full turn over a disc of radius ``uRange``.
    """

    id = "helicoid"
    names = ("Helicoid",)

    def _params(self, params):
        return (pick(params, "c", default=1.0),
                pick(params, "uRange", default=3.0),
                pick(params, "vRange", default=2 * pi))

    def implicit_solve(self, x, y, params):
        c, u_range, v_range = self._params(params)
        if sqrt(x * x + y * y) > u_range:
            return nan
        return c * atan2(y, x) * (v_range / (2 * pi))

    def parametric_solve(self, u, v, params):
        c, _, v_range = self._params(params)
        w = 2 * pi * v / v_range
        return (u * cos(w), u * sin(w), c * v)

    def patches(self, params):
        _, u_range, v_range = self._params(params)
        return [Patch(lambda u, v: self.parametric_solve(u, v, params),
                      (0.0, u_range), (-v_range / 2, v_range / 2))]


class EnneperSurface(SurfaceSolver):
    """Height-field view of Enneper's surface: z = u^2 - v^2 with u, v scaled from x, y."""

    id = "enneper_surface"
    names = ("Enneper Surface",)

    def implicit_solve(self, x, y, params):
        scale = pick(params, "scale", default=0.5)
        u = x * scale * pick(params, "uRange", default=2.0) / 2
        v = y * scale * pick(params, "vRange", default=2.0) / 2
        return u * u - v * v


class Catenoid(SurfaceSolver):
    """x = c cosh(v/c) cos(u), y = c cosh(v/c) sin(u), z = v."""

    id = "catenoid"
    names = ("Catenoid",)

    def implicit_solve(self, x, y, params):
        c = pick(params, "c", default=1.0)
        rho = sqrt(x * x + y * y)
        if rho < c:
            return nan
        return c * acosh(rho / c)

    def parametric_solve(self, u, v, params):
        c = pick(params, "c", default=1.0)
        ring = c * cosh(v / c)
        return (ring * cos(u), ring * sin(u), v)

    def patches(self, params):
        v_range = pick(params, "vRange", default=2.0)
        return [Patch(lambda u, v: self.parametric_solve(u, v, params),
                      (0.0, 2 * pi), (-v_range, v_range))]


class MobiusStrip(SurfaceSolver):
    """Band of half-width ``width`` around a circle of radius ``R`` with a half twist."""

    id = "mobius_strip"
    names = ("Möbius Strip", "Mobius Strip")

    def parametric_solve(self, u, v, params):
        big = pick(params, "R", default=2.0)
        ring = big + v * cos(u / 2)
        return (ring * cos(u), ring * sin(u), v * sin(u / 2))

    def patches(self, params):
        width = pick(params, "width", default=1.0)
        return [Patch(lambda u, v: self.parametric_solve(u, v, params),
                      (0.0, 2 * pi), (-width, width))]


class SineWaveSurface(SurfaceSolver):
    """z = A1 sin(f1 x) + A2 cos(f2 y)."""

    id = "sine_wave_surface"
    names = ("Sine Wave Surface",)

    def implicit_solve(self, x, y, params):
        return (pick(params, "xAmplitude", default=1.0) * sin(pick(params, "xFrequency", default=1.0) * x)
                + pick(params, "yAmplitude", default=1.0) * cos(pick(params, "yFrequency", default=1.0) * y))


class GaussianSurface(SurfaceSolver):
    """z = A exp(-(x^2 + y^2) / (2 sigma^2))."""

    id = "gaussian_surface"
    names = ("Gaussian (Bell Curve) Surface", "Gaussian Surface")

    def implicit_solve(self, x, y, params):
        sigma = pick(params, "sigma", default=2.5)
        amplitude = pick(params, "amplitude", default=4.0)
        return amplitude * exp(-(x * x + y * y) / (2 * sigma * sigma))


class MonkeySaddle(SurfaceSolver):
    """z = scale (x^3 - 3 x y^2), limited to [-5, 5]."""

    id = "monkey_saddle"
    names = ("Monkey Saddle",)

    def implicit_solve(self, x, y, params):
        z = (x * x * x - 3 * x * y * y) * pick(params, "scale", default=0.2)
        return max(-5.0, min(5.0, z))


class WaveFunction(SurfaceSolver):
    """Real part of a radial wave packet: A exp(-rho^2/s^2) cos(2 pi rho / wavelength)."""

    id = "wave_function"
    names = ("Wave Function (Quantum Mechanics)", "Wave Function")

    def implicit_solve(self, x, y, params):
        wavelength = pick(params, "waveLength", default=2.0)
        amplitude = pick(params, "amplitude", default=1.5)
        envelope = pick(params, "envelope", default=3.0)
        rho = sqrt(x * x + y * y)
        return (amplitude * exp(-(x * x + y * y) / (envelope * envelope))
                * cos(2 * pi * rho / wavelength))


class Ripple(SurfaceSolver):
    """z = A sin(k rho) / (k rho), a decaying ripple; A at the centre."""

    id = "ripple"
    names = ("Ripple Surface", "Ripple")

    def implicit_solve(self, x, y, params):
        amplitude = pick(params, "amplitude", default=3.0)
        k = pick(params, "frequency", default=2.0)
        arg = k * sqrt(x * x + y * y)
        if arg == 0:
            return amplitude
        return amplitude * sin(arg) / arg


class Plane(SurfaceSolver):
    """ax + by + cz = d, so z = (d - ax - by) / c."""

    id = "plane"
    names = ("Linear Function (Plane)", "Plane")

    def implicit_solve(self, x, y, params):
        a = pick(params, "a", default=1.0)
        b = pick(params, "b", default=1.0)
        c = pick(params, "c", default=1.0)
        d = pick(params, "d", default=0.0)
        return (d - a * x - b * y) / c


SOLVERS = [
    Helicoid(),
    EnneperSurface(),
    Catenoid(),
    MobiusStrip(),
    SineWaveSurface(),
    GaussianSurface(),
    MonkeySaddle(),
    WaveFunction(),
    Ripple(),
    Plane(),
]
