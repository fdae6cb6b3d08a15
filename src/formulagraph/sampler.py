"""Sampling of formulas along sweeps and over grids.

Line sweeps (x for functions, t for parametric curves, theta for polar
curves) are cut into *segments*: maximal runs of consecutive valid samples.
A sample that faults, is NaN or infinite ends the current segment. For
functions of x, a sign change between two finite neighbours is bisected; if
the magnitude grows toward the crossing instead of shrinking, the interval
holds a pole and the segment ends there too, so no line is drawn across an
asymptote.

Grids always come back complete, ``(resolution + 1)**2`` vertices laid out
row by row with ``index = j * (resolution + 1) + i``; a faulted cell keeps its
position with a zero height and is flagged.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

__all__ = [
    "SamplePoint",
    "Segment",
    "SegmentBuilder",
    "SweepResult",
    "GridSample",
    "linspace",
    "sweep",
    "sample_grid",
    "sample_parametric_grid",
    "longest_segment",
]

logger = logging.getLogger(__name__)

Point = Tuple[float, ...]


@dataclass(frozen=True)
class SamplePoint:
    """One evaluated sample.

    ``value`` is the drawable point, or None when the sample is unusable;
    ``raw`` is the unclamped scalar used for discontinuity tests.
    """
    coordinates: Tuple[float, ...]
    value: Optional[Point]
    fault: Optional[str] = None
    raw: Optional[float] = None
    clamped: bool = False

    @property
    def valid(self) -> bool:
        if self.fault is not None or self.value is None:
            return False
        return all(math.isfinite(c) for c in self.value)

    @classmethod
    def faulted(cls, coordinates: Tuple[float, ...], reason: str) -> "SamplePoint":
        return cls(coordinates, None, reason)


Segment = Tuple[SamplePoint, ...]


class SegmentBuilder:
    """Accumulates valid samples into segments.

    ``add`` extends the open segment, ``fault`` closes it, ``finish`` closes
    the last one and returns every segment of two or more points.
    """

    def __init__(self):
        self._segments: List[Segment] = []
        self._current: List[SamplePoint] = []

    def add(self, point: SamplePoint) -> None:
        if not point.valid:
            self.fault()
            return
        self._current.append(point)

    def fault(self) -> None:
        if len(self._current) >= 2:
            self._segments.append(tuple(self._current))
        self._current = []

    def finish(self) -> List[Segment]:
        self.fault()
        segments, self._segments = self._segments, []
        return segments

    @property
    def open_length(self) -> int:
        return len(self._current)


@dataclass
class SweepResult:
    """Segments of one sweep and what went wrong along it."""
    segments: List[Segment]
    sample_count: int = 0
    clamped_count: int = 0
    pole_count: int = 0
    fault_reasons: Counter = field(default_factory=Counter)

    @property
    def fault_count(self) -> int:
        return sum(self.fault_reasons.values())

    @property
    def longest(self) -> Optional[Segment]:
        return longest_segment(self.segments)


@dataclass
class GridSample:
    """A full height or parametric grid."""
    vertices: List[Point]
    u_divisions: int
    v_divisions: int
    faulted: List[bool]
    clamped_count: int = 0
    fault_reasons: Counter = field(default_factory=Counter)

    @property
    def fault_count(self) -> int:
        return sum(self.faulted)


def linspace(start: float, stop: float, resolution: int) -> List[float]:
    """``resolution + 1`` evenly spaced values from start to stop inclusive."""
    span = stop - start
    return [start + span * i / resolution for i in range(resolution + 1)]


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _is_pole(fn: Callable[[float], SamplePoint], left: SamplePoint, right: SamplePoint,
             steps: int) -> bool:
    """Bisect a sign change; True when it hides a pole rather than a root."""
    lo, hi = left.coordinates[0], right.coordinates[0]
    f_lo, f_hi = left.raw, right.raw
    bound = max(abs(f_lo), abs(f_hi))

    for _ in range(steps):
        mid = 0.5 * (lo + hi)
        sample = fn(mid)
        if not sample.valid or sample.raw is None or not math.isfinite(sample.raw):
            return True
        f_mid = sample.raw
        if f_mid == 0:
            return False
        if _sign(f_mid) == _sign(f_lo):
            lo, f_lo = mid, f_mid
        else:
            hi, f_hi = mid, f_mid

    return min(abs(f_lo), abs(f_hi)) > bound


def sweep(
    fn: Callable[[float], SamplePoint],
    start: float,
    stop: float,
    resolution: int,
    *,
    detect_poles: bool = False,
    bisection_steps: int = 24,
) -> SweepResult:
    """Sample ``fn`` at ``resolution + 1`` evenly spaced parameters.

    Parameters
    ----------
    fn : callable
        Maps the sweep parameter to a :class:`SamplePoint`.
    start, stop : float
        Parameter range, both ends sampled.
    resolution : int
        Number of intervals.
    detect_poles : bool
        Bisect sign changes of ``SamplePoint.raw`` and end the segment at
        poles. Meaningful only for single-valued functions.
    bisection_steps : int
        Bisection depth for pole detection.

    Returns
    -------
    SweepResult
    """
    builder = SegmentBuilder()
    result = SweepResult(segments=[])
    previous: Optional[SamplePoint] = None

    for param in linspace(start, stop, resolution):
        sample = fn(param)
        result.sample_count += 1
        if sample.clamped:
            result.clamped_count += 1

        if not sample.valid:
            result.fault_reasons[sample.fault or "non-finite value"] += 1
            builder.fault()
            previous = None
            continue

        if (detect_poles and previous is not None
                and sample.raw is not None and previous.raw is not None
                and _sign(sample.raw) * _sign(previous.raw) < 0
                and _is_pole(fn, previous, sample, bisection_steps)):
            result.pole_count += 1
            builder.fault()

        builder.add(sample)
        previous = sample

    result.segments = builder.finish()
    logger.debug("sweep [%g, %g] x%d: %d segment(s), %d fault(s), %d pole(s)",
                 start, stop, resolution, len(result.segments),
                 result.fault_count, result.pole_count)
    return result


def sample_grid(
    fn: Callable[[float, float], SamplePoint],
    extent: float,
    resolution: int,
) -> GridSample:
    """Sample a height function over ``[-extent, extent]**2``.

    Faulted cells get height 0 so the grid stays complete.
    """
    coords = linspace(-extent, extent, resolution)
    vertices: List[Point] = []
    faulted: List[bool] = []
    reasons: Counter = Counter()
    clamped = 0

    for y in coords:
        for x in coords:
            sample = fn(x, y)
            if sample.valid:
                vertices.append((x, y, sample.value[-1]))
                faulted.append(False)
                clamped += sample.clamped
            else:
                vertices.append((x, y, 0.0))
                faulted.append(True)
                reasons[sample.fault or "non-finite value"] += 1

    return GridSample(vertices, resolution, resolution, faulted, clamped, reasons)


def sample_parametric_grid(
    fn: Callable[[float, float], SamplePoint],
    u_range: Tuple[float, float],
    v_range: Tuple[float, float],
    u_divisions: int,
    v_divisions: Optional[int] = None,
) -> GridSample:
    """Sample a parametric patch ``(u, v) -> (x, y, z)``.

    Faulted samples are placed at the origin and flagged.
    """
    if v_divisions is None:
        v_divisions = u_divisions
    us = linspace(u_range[0], u_range[1], u_divisions)
    vs = linspace(v_range[0], v_range[1], v_divisions)
    vertices: List[Point] = []
    faulted: List[bool] = []
    reasons: Counter = Counter()

    for v in vs:
        for u in us:
            sample = fn(u, v)
            if sample.valid:
                vertices.append(tuple(float(c) for c in sample.value))
                faulted.append(False)
            else:
                vertices.append((0.0, 0.0, 0.0))
                faulted.append(True)
                reasons[sample.fault or "non-finite value"] += 1

    return GridSample(vertices, u_divisions, v_divisions, faulted, 0, reasons)


def longest_segment(segments: Sequence[Segment]) -> Optional[Segment]:
    """The longest segment; the first one seen wins ties."""
    if not segments:
        return None
    return max(segments, key=len)
