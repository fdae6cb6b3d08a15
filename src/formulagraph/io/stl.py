"""STL export for built surfaces.

Facets are written straight from the mesh buffers: one flat-shaded facet per
triangle, its normal taken from the winding. Degenerate triangles keep a zero
normal, which STL readers accept.
"""

from __future__ import annotations

import contextlib
import struct

import numpy as np

from ..geometry import Mesh

_HEADER_SIZE = 80

# normal, three vertices, attribute byte count
_FACET_DTYPE = np.dtype([
    ('normal', '<f4', (3,)),
    ('vertices', '<f4', (3, 3)),
    ('attributes', '<u2'),
])

_ASCII_FACET = (
    "  facet normal {0[0]:.6e} {0[1]:.6e} {0[2]:.6e}\n"
    "    outer loop\n"
    "      vertex {1[0]:.6e} {1[1]:.6e} {1[2]:.6e}\n"
    "      vertex {2[0]:.6e} {2[1]:.6e} {2[2]:.6e}\n"
    "      vertex {3[0]:.6e} {3[1]:.6e} {3[2]:.6e}\n"
    "    endloop\n"
    "  endfacet\n"
)


def write_stl(mesh: Mesh, path_or_file, *, binary: bool = True, name: str = 'formulagraph') -> int:
    """Write ``mesh`` to STL and return the number of facets written.

    ``path_or_file`` can be a filesystem path or an open binary/text stream.
    """
    if not isinstance(mesh, Mesh):
        raise TypeError("only meshes can be written to STL")

    corners, normals = _facets(mesh)
    if binary:
        with _open_stream(path_or_file, 'wb') as stream:
            _write_binary(stream, corners, normals, name)
    else:
        with _open_stream(path_or_file, 'w') as stream:
            _write_ascii(stream, corners, normals, name)
    return len(corners)


@contextlib.contextmanager
def _open_stream(path_or_file, mode: str):
    """Yield a writable stream; paths are opened and closed here."""
    if hasattr(path_or_file, 'write'):
        yield path_or_file
        return
    encoding = None if 'b' in mode else 'ascii'
    with open(path_or_file, mode, encoding=encoding) as stream:
        yield stream


def _facets(mesh: Mesh):
    """Triangle corners as an ``(n, 3, 3)`` array plus unit facet normals."""
    vertices = np.asarray(mesh.vertices, dtype=np.float64).reshape(-1, 3)
    indices = np.asarray(mesh.indices, dtype=np.intp).reshape(-1, 3)
    corners = vertices[indices] if len(indices) else np.zeros((0, 3, 3))
    normals = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])
    lengths = np.linalg.norm(normals, axis=1)
    np.divide(normals, lengths[:, None], out=normals, where=lengths[:, None] > 0)
    return corners, normals


def _write_binary(stream, corners: np.ndarray, normals: np.ndarray, name: str) -> None:
    header = name[:_HEADER_SIZE].encode('ascii', errors='replace')
    stream.write(header.ljust(_HEADER_SIZE, b' '))
    stream.write(struct.pack('<I', len(corners)))

    records = np.zeros(len(corners), dtype=_FACET_DTYPE)
    records['normal'] = normals
    records['vertices'] = corners
    stream.write(records.tobytes())


def _write_ascii(stream, corners: np.ndarray, normals: np.ndarray, name: str) -> None:
    stream.write(f"solid {name}\n")
    for normal, (v0, v1, v2) in zip(normals, corners):
        stream.write(_ASCII_FACET.format(normal, v0, v1, v2))
    stream.write(f"endsolid {name}\n")
