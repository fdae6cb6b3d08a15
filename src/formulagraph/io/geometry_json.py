"""Geometry JSON serialization/deserialization helpers.

A document holds one built geometry plus the formula it came from::

    {
      "schema": "formulagraph-geometry-json-v0.1",
      "formula": {"id": ..., "name": ..., "kind": ..., "expression": ...},
      "parameters": {...},
      "material": {...},
      "entity": {"type": "mesh" | "polyline", ...}
    }
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..engine import material_hint
from ..formula import FormulaSpec
from ..geometry import Geometry, Mesh, Polyline

SCHEMA_ID = "formulagraph-geometry-json-v0.1"


def _float_vec(vec: Iterable[float]) -> List[float]:
    return [float(c) for c in vec]


def _int_vec(vec: Iterable[int]) -> List[int]:
    return [int(c) for c in vec]


def _bbox_or_none(points: Sequence[Sequence[float]]) -> Optional[List[float]]:
    if not points:
        return None
    xs, ys, zs = zip(*points)
    return [float(min(xs)), float(min(ys)), float(min(zs)),
            float(max(xs)), float(max(ys)), float(max(zs))]


def _serialize_mesh(mesh: Mesh) -> Dict[str, Any]:
    return {
        "type": "mesh",
        "boundingBox": _bbox_or_none(mesh.vertices),
        "vertices": [_float_vec(v) for v in mesh.vertices],
        "normals": [_float_vec(n) for n in mesh.normals],
        "faces": [_int_vec(face) for face in mesh.indices],
        "triangulation": {
            "winding": "ccw",
            "topology": "triangle",
        },
    }


def _serialize_polyline(polyline: Polyline) -> Dict[str, Any]:
    return {
        "type": "polyline",
        "boundingBox": _bbox_or_none(polyline.points),
        "closed": polyline.closed,
        "points": [_float_vec(p) for p in polyline.points],
    }


def geometry_to_json(
    geometry: Geometry,
    spec: Optional[FormulaSpec] = None,
    params: Optional[Mapping[str, float]] = None,
    *,
    generator: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Serialize a built geometry into the geometry JSON document."""
    if isinstance(geometry, Mesh):
        entity = _serialize_mesh(geometry)
    elif isinstance(geometry, Polyline):
        entity = _serialize_polyline(geometry)
    else:
        raise ValueError("unsupported entity type for serialization")

    doc: Dict[str, Any] = {
        "schema": SCHEMA_ID,
        "entity": entity,
    }
    if spec is not None:
        doc["formula"] = {
            "id": spec.id,
            "name": spec.display_name,
            "kind": spec.kind.value,
            "expression": spec.raw_expression,
        }
        doc["material"] = asdict(material_hint(spec.kind, geometry))
    if params:
        doc["parameters"] = {name: float(value) for name, value in params.items()}
    if generator:
        doc["generator"] = generator
    return doc


def _vec3(components: Sequence[float]):
    if len(components) != 3:
        raise ValueError(f"expected three components, found {len(components)}")
    return (float(components[0]), float(components[1]), float(components[2]))


def geometry_from_json(doc: Dict[str, Any]) -> Geometry:
    """Rebuild the geometry stored in a document."""
    if doc.get("schema") != SCHEMA_ID:
        raise ValueError(f"unsupported geometry schema: {doc.get('schema')}")
    entry = doc.get("entity")
    if not isinstance(entry, dict):
        raise ValueError("geometry document has no entity")

    kind = entry.get("type")
    if kind == "mesh":
        vertices = tuple(_vec3(v) for v in entry.get("vertices", ()))
        normals = tuple(_vec3(n) for n in entry.get("normals", ()))
        faces = []
        for face in entry.get("faces", ()):
            if len(face) != 3:
                raise ValueError("mesh faces must be triangles")
            a, b, c = (int(i) for i in face)
            if max(a, b, c) >= len(vertices) or min(a, b, c) < 0:
                raise ValueError(f"face {face} references a missing vertex")
            faces.append((a, b, c))
        return Mesh(vertices, tuple(faces), normals)
    if kind == "polyline":
        points = tuple(_vec3(p) for p in entry.get("points", ()))
        return Polyline(points, bool(entry.get("closed", False)))
    raise ValueError(f"unsupported entity type: {kind}")


__all__ = [
    "SCHEMA_ID",
    "geometry_to_json",
    "geometry_from_json",
]
