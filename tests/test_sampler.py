"""
Unit tests for sweeps, segmentation and grid sampling.
"""

import math

import pytest
from formulagraph.expr import evaluate, parse_expression
from formulagraph.sampler import (
    SamplePoint, SegmentBuilder, linspace, longest_segment, sample_grid,
    sample_parametric_grid, sweep,
)


def _reciprocal(x):
    if x == 0:
        return SamplePoint.faulted((x,), "division by zero")
    value = 1.0 / x
    return SamplePoint((x,), (x, value), raw=value)


def _sine(x):
    value = math.sin(x)
    return SamplePoint((x,), (x, value), raw=value)


def _expression_sampler(text, bounds):
    expr = parse_expression(text)

    def sample(x):
        result = evaluate(expr, {"x": x}, bounds)
        if not result.ok:
            return SamplePoint((x,), None, result.fault, result.raw)
        return SamplePoint((x,), (x, result.value), None, result.raw, result.clamped)

    return sample


class TestLinspace:

    def test_inclusive(self):
        assert linspace(0.0, 1.0, 4) == [0.0, 0.25, 0.5, 0.75, 1.0]


class TestSegmentBuilder:
    """Segment state machine."""

    def test_fault_splits(self):
        builder = SegmentBuilder()
        for x in (1.0, 2.0, 3.0):
            builder.add(_sine(x))
        builder.fault()
        for x in (5.0, 6.0):
            builder.add(_sine(x))
        segments = builder.finish()
        assert [len(s) for s in segments] == [3, 2]

    def test_single_points_dropped(self):
        builder = SegmentBuilder()
        builder.add(_sine(1.0))
        builder.fault()
        builder.add(_sine(2.0))
        assert builder.finish() == []

    def test_invalid_point_faults(self):
        builder = SegmentBuilder()
        builder.add(_sine(1.0))
        builder.add(_sine(2.0))
        builder.add(SamplePoint((3.0,), (3.0, math.nan)))
        assert builder.open_length == 0
        assert len(builder.finish()) == 1


class TestSweep:
    """Line sweeps."""

    def test_sample_count(self):
        result = sweep(_sine, -1.0, 1.0, 10)
        assert result.sample_count == 11
        assert len(result.segments) == 1

    def test_fault_at_zero(self):
        result = sweep(_reciprocal, -10.0, 10.0, 20)
        assert len(result.segments) == 2
        assert result.fault_reasons["division by zero"] == 1
        for segment in result.segments:
            assert all(abs(p.coordinates[0]) > 1e-10 for p in segment)

    def test_pole_between_samples(self):
        """Odd resolution skips x = 0; the sign change is bisected into a pole."""
        result = sweep(_reciprocal, -1.0, 1.0, 21, detect_poles=True)
        assert result.pole_count == 1
        assert len(result.segments) == 2

    def test_root_is_not_a_pole(self):
        result = sweep(_sine, -3.0, 3.0, 21, detect_poles=True)
        assert result.pole_count == 0
        assert len(result.segments) == 1

    def test_tangent_breaks_at_asymptotes(self):
        result = sweep(_expression_sampler("tan(x)", (-100.0, 100.0)), -10.0, 10.0, 50,
                       detect_poles=True)
        assert len(result.segments) >= 2
        for segment in result.segments:
            assert all(abs(p.value[1]) <= 100.0 for p in segment)

    def test_clamped_count(self):
        result = sweep(_expression_sampler("x^3", (-10.0, 10.0)), -5.0, 5.0, 10)
        assert result.clamped_count > 0


class TestLongestSegment:

    def test_empty(self):
        assert longest_segment([]) is None

    def test_first_wins_ties(self):
        a = (_sine(0.0), _sine(1.0))
        b = (_sine(2.0), _sine(3.0))
        assert longest_segment([a, b]) is a


class TestGrids:
    """Height and parametric grids."""

    def test_height_grid_complete(self):
        def fn(x, y):
            if x < 0:
                return SamplePoint.faulted((x, y), "left half")
            return SamplePoint((x, y), (x, y, x + y))

        grid = sample_grid(fn, 1.0, 4)
        assert len(grid.vertices) == 25
        assert grid.fault_count == 10
        assert grid.fault_reasons["left half"] == 10
        faulted = [v for v, bad in zip(grid.vertices, grid.faulted) if bad]
        assert all(v[2] == 0.0 for v in faulted)

    def test_row_major_layout(self):
        grid = sample_grid(lambda x, y: SamplePoint((x, y), (x, y, 0.0)), 1.0, 2)
        # index = j * (resolution + 1) + i
        assert grid.vertices[1] == (0.0, -1.0, 0.0)
        assert grid.vertices[3] == (-1.0, 0.0, 0.0)

    def test_parametric_grid(self):
        def fn(u, v):
            return SamplePoint((u, v), (math.cos(u), math.sin(u), v))

        grid = sample_parametric_grid(fn, (0.0, math.pi), (0.0, 1.0), 6, 3)
        assert len(grid.vertices) == 7 * 4
        assert grid.u_divisions == 6
        assert grid.v_divisions == 3
        assert grid.fault_count == 0

    def test_parametric_fault_at_origin(self):
        grid = sample_parametric_grid(
            lambda u, v: SamplePoint.faulted((u, v), "bad"), (0.0, 1.0), (0.0, 1.0), 1)
        assert grid.vertices == [(0.0, 0.0, 0.0)] * 4
        assert grid.fault_reasons["bad"] == 4
