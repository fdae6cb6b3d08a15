"""
Tests for geometry JSON and STL export.
"""

import io
import struct

import pytest
from formulagraph.catalog import get_formula
from formulagraph.engine import build_geometry
from formulagraph.geometry import Mesh, Polyline, placeholder_box
from formulagraph.io import SCHEMA_ID, geometry_from_json, geometry_to_json, write_stl


@pytest.fixture
def box():
    return placeholder_box(2.0)


@pytest.fixture
def zigzag():
    return Polyline(((0.0, 0.0, 0.0), (1.0, 1.0, 0.0), (2.0, 0.0, 0.0)), False)


class TestGeometryJson:
    """Geometry JSON documents."""

    def test_mesh_document(self, box):
        doc = geometry_to_json(box)
        assert doc["schema"] == SCHEMA_ID
        entity = doc["entity"]
        assert entity["type"] == "mesh"
        assert len(entity["vertices"]) == 24
        assert len(entity["faces"]) == 12
        assert entity["boundingBox"] == [-1.0, -1.0, -1.0, 1.0, 1.0, 1.0]
        assert entity["triangulation"]["winding"] == "ccw"

    def test_mesh_round_trip(self, box):
        restored = geometry_from_json(geometry_to_json(box))
        assert isinstance(restored, Mesh)
        assert restored.indices == box.indices
        assert restored.vertices == box.vertices

    def test_polyline_round_trip(self, zigzag):
        doc = geometry_to_json(zigzag)
        assert doc["entity"]["closed"] is False
        restored = geometry_from_json(doc)
        assert restored == zigzag

    def test_empty_polyline_has_no_bounding_box(self):
        doc = geometry_to_json(Polyline((), False))
        assert doc["entity"]["boundingBox"] is None

    def test_formula_metadata(self):
        spec = get_formula("sphere")
        mesh = build_geometry(spec, {"radius": 2.0, "resolution": 8})
        doc = geometry_to_json(mesh, spec, {"radius": 2.0}, generator={"name": "tests"})
        assert doc["formula"]["id"] == "sphere"
        assert doc["formula"]["kind"] == "surface_3d"
        assert doc["material"]["style"] == "mesh"
        assert doc["material"]["double_sided"] is True
        assert doc["parameters"] == {"radius": 2.0}
        assert doc["generator"] == {"name": "tests"}

    def test_curve_material(self, zigzag):
        spec = get_formula("helix")
        doc = geometry_to_json(zigzag, spec)
        assert doc["material"]["style"] == "line"
        assert "parameters" not in doc

    def test_unsupported_geometry(self):
        with pytest.raises(ValueError):
            geometry_to_json([(0.0, 0.0, 0.0)])

    def test_wrong_schema(self, box):
        doc = geometry_to_json(box)
        doc["schema"] = "something-else"
        with pytest.raises(ValueError, match="schema"):
            geometry_from_json(doc)

    def test_bad_faces(self, box):
        doc = geometry_to_json(box)
        doc["entity"]["faces"][0] = [0, 1]
        with pytest.raises(ValueError, match="triangles"):
            geometry_from_json(doc)
        doc["entity"]["faces"][0] = [0, 1, 99]
        with pytest.raises(ValueError, match="missing vertex"):
            geometry_from_json(doc)

    def test_unknown_entity(self):
        with pytest.raises(ValueError, match="entity type"):
            geometry_from_json({"schema": SCHEMA_ID, "entity": {"type": "nurbs"}})


class TestStl:
    """STL export."""

    def test_binary_layout(self, box):
        stream = io.BytesIO()
        count = write_stl(box, stream, name="box")
        data = stream.getvalue()
        assert count == 12
        assert len(data) == 84 + 50 * 12
        assert data[:3] == b"box"
        assert struct.unpack("<I", data[80:84]) == (12,)

    def test_binary_to_path(self, box, tmp_path):
        path = tmp_path / "box.stl"
        write_stl(box, path)
        assert path.stat().st_size == 84 + 50 * 12
        assert path.read_bytes().startswith(b"formulagraph")

    def test_ascii(self, box):
        stream = io.StringIO()
        write_stl(box, stream, binary=False, name="box")
        text = stream.getvalue()
        assert text.startswith("solid box")
        assert text.rstrip().endswith("endsolid box")
        assert text.count("facet normal") == 12
        assert text.count("vertex ") == 36

    def test_polyline_rejected(self, zigzag):
        with pytest.raises(TypeError):
            write_stl(zigzag, io.BytesIO())
