"""Triangulation of closed planar curves.

We delegate to ``mapbox-earcut`` (the fast ear clipping implementation
used by Mapbox GL). The helpers here clean the sampled outline into the
format expected by earcut and return index triples into the cleaned
loop, every triangle wound counter-clockwise so its normal is ``+z``.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to fill closed curves"
    ) from exc

Point2D = Tuple[float, float]

# Consecutive points closer than this are merged
EPSILON = 1e-9


def triangulate_loop(points: Sequence[Sequence[float]]
                     ) -> Tuple[List[Point2D], List[Tuple[int, int, int]]]:
    """Return the cleaned loop and the triangles covering it.

    ``points`` is a sequence of XY-like points; a repeated closing point is
    dropped. Loops with fewer than three distinct points give no triangles.
    """

    loop = _prepare_loop(points)
    if len(loop) < 3:
        return loop, []

    vertices = np.asarray(loop, dtype=np.float64).reshape(-1, 2)
    ring_ends = np.asarray([len(loop)], dtype=np.uint32)
    flat = _earcut.triangulate_float64(vertices, ring_ends)

    triangles: List[Tuple[int, int, int]] = []
    for i in range(0, len(flat), 3):
        a, b, c = int(flat[i]), int(flat[i + 1]), int(flat[i + 2])
        if _signed_area((loop[a], loop[b], loop[c])) < 0:
            b, c = c, b
        triangles.append((a, b, c))
    return loop, triangles


def _prepare_loop(points: Sequence[Sequence[float]]) -> List[Point2D]:
    loop: List[Point2D] = []
    for pt in points:
        x, y = float(pt[0]), float(pt[1])
        if loop and _near(loop[-1], (x, y)):
            continue
        loop.append((x, y))
    if len(loop) > 1 and _near(loop[0], loop[-1]):
        loop.pop()
    if len(loop) >= 3 and _signed_area(loop) < 0:
        loop.reverse()
    return loop


def _near(p1: Point2D, p2: Point2D) -> bool:
    return abs(p1[0] - p2[0]) <= EPSILON and abs(p1[1] - p2[1]) <= EPSILON


def _signed_area(loop: Sequence[Point2D]) -> float:
    total = 0.0
    for i, (x0, y0) in enumerate(loop):
        x1, y1 = loop[(i + 1) % len(loop)]
        total += x0 * y1 - x1 * y0
    return total / 2.0
