"""Named functions of one variable, y = f(x).

Outside a function's mathematical domain the solver returns NaN so the
sweep breaks the line there. Physical laws with a threshold (a diode below
zero bias, photoelectrons below the work function, gases below absolute
zero) return 0, which is the physical value.
"""

from math import cos, exp, log, sin, sqrt, tan, e, nan

from .base import FunctionSolver, pick

# Tangent is treated as undefined where |cos| drops below this
TAN_ASYMPTOTE_TOLERANCE = 0.01
TAN_LIMIT = 100.0


def _scaled(x, params):
    return (x - pick(params, "xTranslation", default=0.0)) / pick(params, "xScale", default=1.0)


class SquareRoot(FunctionSolver):
    id = "square_root"
    names = ("Square Root Function",)

    def solve(self, x, params):
        sx = _scaled(x, params)
        if sx < 0:
            return nan
        return pick(params, "yScale", default=1.0) * sqrt(sx) + pick(params, "yTranslation", default=0.0)


class AbsoluteValue(FunctionSolver):
    id = "absolute_value"
    names = ("Absolute Value Function",)

    def solve(self, x, params):
        return (pick(params, "yScale", default=1.0) * abs(_scaled(x, params))
                + pick(params, "yTranslation", default=0.0))


class Reciprocal(FunctionSolver):
    """y = yScale / (x xScale)."""

    id = "reciprocal"
    names = ("Reciprocal Function (Hyperbola)", "Reciprocal Function")

    def solve(self, x, params):
        sx = x * pick(params, "xScale", default=1.0)
        if sx == 0:
            return nan
        return pick(params, "yScale", default=1.0) / sx


class Tangent(FunctionSolver):
    """y = A tan(f x + phase), undefined near the asymptotes."""

    id = "tangent"
    names = ("Tangent Function",)

    def solve(self, x, params):
        arg = pick(params, "frequency", default=1.0) * x + pick(params, "phase", default=0.0)
        if abs(cos(arg)) < TAN_ASYMPTOTE_TOLERANCE:
            return nan
        value = pick(params, "amplitude", default=1.0) * tan(arg)
        if abs(value) > TAN_LIMIT:
            return nan
        return value


class Logarithmic(FunctionSolver):
    id = "logarithmic"
    names = ("Logarithmic Function",)

    def solve(self, x, params):
        base = pick(params, "base", default=e)
        sx = x / pick(params, "xScale", default=1.0)
        if sx <= 0 or base <= 0 or base == 1:
            return nan
        return pick(params, "yScale", default=1.0) * log(sx) / log(base)


class SineWave(FunctionSolver):
    """y = A sin(B x + C) + D."""

    id = "sine_cosine_waves"
    names = ("Sine and Cosine Waves", "Sine Wave")

    def solve(self, x, params):
        amplitude = pick(params, "amplitude", "A", default=1.0)
        frequency = pick(params, "frequency", "B", default=1.0)
        phase = pick(params, "phaseShift", "C", default=0.0)
        shift = pick(params, "verticalShift", "D", default=0.0)
        return amplitude * sin(frequency * x + phase) + shift


class PositionTime(FunctionSolver):
    """x(t) = x0 + v0 t + a t^2 / 2, with the sweep variable as time."""

    id = "position_time"
    names = ("Position vs. Time (Kinematics)",)

    def solve(self, x, params):
        x0 = pick(params, "x0", "initialPosition", default=1.0)
        v0 = pick(params, "v0", "initialVelocity", default=2.0)
        a = pick(params, "a", "acceleration", default=0.3)
        return x0 + v0 * x + 0.5 * a * x * x


class VelocityTime(FunctionSolver):
    id = "velocity_time"
    names = ("Velocity vs. Time (Kinematics)",)

    def solve(self, x, params):
        v0 = pick(params, "v0", "initialVelocity", default=2.0)
        a = pick(params, "a", "acceleration", default=0.3)
        return v0 + a * x


class AccelerationTime(FunctionSolver):
    id = "acceleration_time"
    names = ("Acceleration vs. Time (Kinematics)",)

    def solve(self, x, params):
        return pick(params, "a", "acceleration", default=0.3)


class HookesLaw(FunctionSolver):
    id = "hookes_law"
    names = ("Force vs. Extension (Hooke's Law)",)

    def solve(self, x, params):
        return pick(params, "k", "springConstant", default=2.0) * x


class BoylesLaw(FunctionSolver):
    id = "boyles_law"
    names = ("Pressure vs. Volume (Boyle's Law)",)

    def solve(self, x, params):
        if x == 0:
            return nan
        return pick(params, "k", "constant", default=5.0) / x


class CharlesLaw(FunctionSolver):
    """V = k T with x in degrees Celsius."""

    id = "charles_law"
    names = ("Volume vs. Temperature (Charles's Law)",)

    def solve(self, x, params):
        kelvin = x + 273.15
        return pick(params, "k", "proportionalityConstant", default=0.01) * kelvin if kelvin > 0 else 0.0


class GayLussacLaw(FunctionSolver):
    """P = k T with x scaled to 50 degrees Celsius per unit."""

    id = "gay_lussac_law"
    names = ("Pressure vs. Temperature (Gay-Lussac's Law)",)

    def solve(self, x, params):
        kelvin = x * 50 + 273.15
        return pick(params, "k", "proportionalityConstant", default=0.02) * kelvin if kelvin > 0 else 0.0


class ResistorIV(FunctionSolver):
    id = "resistor_iv"
    names = ("I-V Characteristic of a Resistor",)

    def solve(self, x, params):
        return pick(params, "R", "resistance", default=2.0) * x


class DiodeIV(FunctionSolver):
    """I = exp(V / V_T) - 1 for forward bias."""

    id = "diode_iv"
    names = ("I-V Characteristic of a Diode",)

    def solve(self, x, params):
        if x <= 0:
            return 0.0
        v_t = pick(params, "V_T", "thermalVoltage", default=0.026)
        try:
            return exp(x / v_t) - 1
        except OverflowError:
            return float("inf")


class Blackbody(FunctionSolver):
    """Planck spectrum shape 1 / (lambda^5 (exp(hc/(lambda k T)) - 1))."""

    id = "blackbody"
    names = ("Blackbody Radiation Spectrum",)

    def solve(self, x, params):
        temperature = pick(params, "T", default=300.0)
        wavelength = abs(x) + 0.5
        hc_kt = 14387.7 / temperature
        try:
            return 1 / (wavelength ** 5 * (exp(hc_kt / wavelength) - 1))
        except OverflowError:
            return 0.0


class Photoelectric(FunctionSolver):
    id = "photoelectric"
    names = ("Photoelectric Effect",)

    def solve(self, x, params):
        work_function = pick(params, "phi", "workFunction", default=2.0)
        return x - work_function if x > work_function else 0.0


class BindingEnergy(FunctionSolver):
    """Parabolic approximation peaking at iron-56."""

    id = "binding_energy"
    names = ("Binding Energy per Nucleon",)

    def solve(self, x, params):
        peak_mass = pick(params, "peakMass", default=56.0)
        peak_energy = pick(params, "peakEnergy", default=8.5)
        width = pick(params, "width", default=30.0)
        return peak_energy - ((abs(x) - peak_mass) / width) ** 2


class SimpleHarmonicMotion(FunctionSolver):
    id = "simple_harmonic_motion"
    names = ("Simple Harmonic Motion",)

    def solve(self, x, params):
        amplitude = pick(params, "A", "amplitude", default=2.0)
        omega = pick(params, "omega", "angularFrequency", default=1.0)
        phi = pick(params, "phi", "phaseAngle", default=0.0)
        return amplitude * cos(omega * x + phi)


class DampedOscillation(FunctionSolver):
    id = "damped_oscillations"
    names = ("Damped Oscillations",)

    def solve(self, x, params):
        amplitude = pick(params, "A", "amplitude", default=2.0)
        gamma = pick(params, "gamma", "dampingCoefficient", default=0.1)
        omega = pick(params, "omega", "angularFrequency", default=1.0)
        phi = pick(params, "phi", "phaseAngle", default=0.0)
        try:
            envelope = exp(-gamma * x)
        except OverflowError:
            return float("inf")
        return amplitude * envelope * cos(omega * x + phi)


class WitchOfAgnesi(FunctionSolver):
    """y = 8 a^3 / (x^2 + 4 a^2), scaled and translated."""

    id = "witch_of_agnesi"
    names = ("Witch of Agnesi",)

    def solve(self, x, params):
        a = pick(params, "a", default=1.0)
        sx = _scaled(x, params)
        value = (8 * a ** 3) / (sx * sx + 4 * a * a)
        return pick(params, "yScale", default=1.0) * value + pick(params, "yTranslation", default=0.0)


SOLVERS = [
    SquareRoot(),
    AbsoluteValue(),
    Reciprocal(),
    Tangent(),
    Logarithmic(),
    SineWave(),
    PositionTime(),
    VelocityTime(),
    AccelerationTime(),
    HookesLaw(),
    BoylesLaw(),
    CharlesLaw(),
    GayLussacLaw(),
    ResistorIV(),
    DiodeIV(),
    Blackbody(),
    Photoelectric(),
    BindingEnergy(),
    SimpleHarmonicMotion(),
    DampedOscillation(),
    WitchOfAgnesi(),
]
