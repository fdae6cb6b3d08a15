"""Drawable geometry values returned by the engine.

A build returns either a :class:`Polyline` (curves and functions of one
variable) or a :class:`Mesh` (surfaces and filled closed curves). Both are
frozen and hold plain float tuples, so equal inputs give equal values; the
numpy buffer accessors exist for uploading to a renderer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union

import numpy as np

__all__ = [
    "Vec3",
    "Triangle",
    "Polyline",
    "Mesh",
    "Geometry",
    "to_vec3",
    "triangle_normal",
    "placeholder_box",
]

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Triangle:
    """Immutable triangle representation in XYZ space."""

    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3


def to_vec3(point_like: Sequence[float]) -> Vec3:
    """Return XYZ components as a float tuple; 2D points get ``z = 0``."""

    if len(point_like) == 2:
        return float(point_like[0]), float(point_like[1]), 0.0
    if len(point_like) < 3:
        raise ValueError("value must have two or three components")
    return float(point_like[0]), float(point_like[1]), float(point_like[2])


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3 | None:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    ax, ay, az = v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2]
    bx, by, bz = v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2]
    nx, ny, nz = ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx
    length = math.sqrt(nx * nx + ny * ny + nz * nz)
    if length <= 1e-12:
        return None
    return (nx / length, ny / length, nz / length)


@dataclass(frozen=True)
class Polyline:
    """An ordered run of points, optionally closed."""

    points: Tuple[Vec3, ...]
    closed: bool = False

    @property
    def point_count(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return len(self.points) < 2

    def vertex_buffer(self) -> np.ndarray:
        """``(N, 3)`` float32 positions."""
        return np.asarray(self.points, dtype=np.float32).reshape(-1, 3)


@dataclass(frozen=True)
class Mesh:
    """An indexed triangle mesh with per-vertex normals."""

    vertices: Tuple[Vec3, ...]
    indices: Tuple[Tuple[int, int, int], ...]
    normals: Tuple[Vec3, ...]

    def __post_init__(self) -> None:
        if len(self.normals) != len(self.vertices):
            raise ValueError("mesh needs exactly one normal per vertex")

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices)

    def vertex_buffer(self) -> np.ndarray:
        """``(N, 3)`` float32 positions."""
        return np.asarray(self.vertices, dtype=np.float32).reshape(-1, 3)

    def normal_buffer(self) -> np.ndarray:
        """``(N, 3)`` float32 normals."""
        return np.asarray(self.normals, dtype=np.float32).reshape(-1, 3)

    def index_buffer(self) -> np.ndarray:
        """Flat uint32 triangle indices."""
        return np.asarray(self.indices, dtype=np.uint32).reshape(-1)

    def triangles(self) -> Iterator[Triangle]:
        """Yield every face with its geometric normal."""
        for a, b, c in self.indices:
            v0, v1, v2 = self.vertices[a], self.vertices[b], self.vertices[c]
            normal = triangle_normal(v0, v1, v2) or (0.0, 0.0, 0.0)
            yield Triangle(normal, v0, v1, v2)


Geometry = Union[Polyline, Mesh]


_BOX_FACES = (
    # normal, corner offsets in the order of a counter-clockwise quad
    ((1.0, 0.0, 0.0), ((1, -1, -1), (1, 1, -1), (1, 1, 1), (1, -1, 1))),
    ((-1.0, 0.0, 0.0), ((-1, 1, -1), (-1, -1, -1), (-1, -1, 1), (-1, 1, 1))),
    ((0.0, 1.0, 0.0), ((1, 1, -1), (-1, 1, -1), (-1, 1, 1), (1, 1, 1))),
    ((0.0, -1.0, 0.0), ((-1, -1, -1), (1, -1, -1), (1, -1, 1), (-1, -1, 1))),
    ((0.0, 0.0, 1.0), ((-1, -1, 1), (1, -1, 1), (1, 1, 1), (-1, 1, 1))),
    ((0.0, 0.0, -1.0), ((-1, 1, -1), (1, 1, -1), (1, -1, -1), (-1, -1, -1))),
)


def placeholder_box(size: float = 2.0) -> Mesh:
    """Axis-aligned cube centred on the origin, flat-shaded."""
    half = size / 2.0
    vertices = []
    normals = []
    indices = []
    for normal, corners in _BOX_FACES:
        base = len(vertices)
        for cx, cy, cz in corners:
            vertices.append((cx * half, cy * half, cz * half))
            normals.append(normal)
        indices.append((base, base + 1, base + 2))
        indices.append((base, base + 2, base + 3))
    return Mesh(tuple(vertices), tuple(indices), tuple(normals))
