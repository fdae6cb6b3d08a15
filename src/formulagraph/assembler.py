"""Assembly of sampled data into drawable geometry.

Grids become indexed meshes with two triangles per cell, using the winding

    [i00, i10, i11], [i00, i11, i01]

where ``i00 = j * (u_divisions + 1) + i``. Vertex normals are the
area-weighted average of the adjacent face normals. Line sweeps become
polylines, and the outlines of a few closed planar shapes are filled by
ear clipping.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .geometry import Mesh, Polyline, Vec3, to_vec3
from .sampler import GridSample, Segment
from .triangulator import triangulate_loop

__all__ = [
    "FILLED_SHAPES",
    "is_filled_shape",
    "polyline_from_segment",
    "grid_indices",
    "vertex_normals",
    "mesh_from_grid",
    "merge_meshes",
    "fill_polyline",
]

# Closed planar curves drawn as filled regions
FILLED_SHAPES = frozenset({"circle", "ellipse", "cardioid", "rose curve", "astroid"})


def is_filled_shape(name: str) -> bool:
    """True if a shape id or display name is on the fill list."""
    return name.strip().lower().replace("_", " ") in FILLED_SHAPES


def polyline_from_segment(segment: Segment, closed: bool = False) -> Polyline:
    """Lift a segment's sample values into a 3D polyline (2D points get z = 0)."""
    return Polyline(tuple(to_vec3(p.value) for p in segment), closed)


def grid_indices(u_divisions: int, v_divisions: Optional[int] = None
                 ) -> Tuple[Tuple[int, int, int], ...]:
    """Triangle indices for a ``(u_divisions + 1) x (v_divisions + 1)`` vertex grid."""
    if v_divisions is None:
        v_divisions = u_divisions
    faces = []
    for j in range(v_divisions):
        for i in range(u_divisions):
            # Indices of quad corners
            i00 = j * (u_divisions + 1) + i
            i10 = i00 + 1
            i01 = i00 + (u_divisions + 1)
            i11 = i01 + 1

            # Two triangles per quad
            faces.append((i00, i10, i11))
            faces.append((i00, i11, i01))
    return tuple(faces)


def vertex_normals(vertices: Sequence[Vec3],
                   indices: Sequence[Tuple[int, int, int]]) -> Tuple[Vec3, ...]:
    """Area-weighted vertex normals.

    Vertices touched only by degenerate faces get ``(0, 0, 1)``.
    """
    if not vertices:
        return ()
    pts = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    accum = np.zeros_like(pts)
    if len(indices):
        tri = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
        v0, v1, v2 = pts[tri[:, 0]], pts[tri[:, 1]], pts[tri[:, 2]]
        # Unnormalized cross product: length is twice the face area
        face = np.cross(v1 - v0, v2 - v0)
        for k in range(3):
            np.add.at(accum, tri[:, k], face)

    lengths = np.linalg.norm(accum, axis=1)
    normals = np.tile(np.array([0.0, 0.0, 1.0]), (len(pts), 1))
    good = lengths > 1e-12
    normals[good] = accum[good] / lengths[good, None]
    return tuple((float(x), float(y), float(z)) for x, y, z in normals)


def mesh_from_grid(grid: GridSample) -> Mesh:
    """Triangulate a complete sample grid."""
    vertices = tuple(to_vec3(v) for v in grid.vertices)
    indices = grid_indices(grid.u_divisions, grid.v_divisions)
    return Mesh(vertices, indices, vertex_normals(vertices, indices))


def merge_meshes(meshes: Iterable[Mesh]) -> Mesh:
    """Concatenate meshes into one, offsetting indices; normals are kept."""
    vertices: List[Vec3] = []
    normals: List[Vec3] = []
    indices: List[Tuple[int, int, int]] = []
    for mesh in meshes:
        offset = len(vertices)
        vertices.extend(mesh.vertices)
        normals.extend(mesh.normals)
        indices.extend((a + offset, b + offset, c + offset) for a, b, c in mesh.indices)
    return Mesh(tuple(vertices), tuple(indices), tuple(normals))


def fill_polyline(polyline: Polyline) -> Optional[Mesh]:
    """Fill a closed planar outline in the ``z = 0`` plane.

    Returns None when the outline has fewer than three distinct points.
    """
    loop, triangles = triangulate_loop([(p[0], p[1]) for p in polyline.points])
    if not triangles:
        return None
    vertices = tuple((x, y, 0.0) for x, y in loop)
    normals = tuple((0.0, 0.0, 1.0) for _ in loop)
    return Mesh(vertices, tuple(triangles), normals)
