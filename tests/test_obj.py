"""
Unit tests for meshful.io.obj (OBJ reader, OBJ + MTL writer).
"""

import io

import pytest

from meshful.errors import OBJParseError
from meshful.geometry.mesh import Mesh
from meshful.geometry.triangle import Color, Triangle
from meshful.geometry.vec3 import Vec3
from meshful.io.obj import (
    MTL_HEADER,
    OBJ_HEADER,
    read_mtl,
    read_obj,
    read_obj_file,
    write_mtl,
    write_obj,
    write_obj_file,
)

SQUARE_OBJ = """\
# unit square in the XY plane
v 0.000000 0.000000 0.000000
v 1.000000 0.000000 0.000000
v 1.000000 1.000000 0.000000

v 0.000000 1.000000 0.000000
vn 0 0 1
f 1 2 3
f 1/1/1 3/3/1 4/4/1
"""


def _square(color=None) -> Mesh:
    a, b, c, d = Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(1, 1, 0), Vec3(0, 1, 0)
    return Mesh((
        Triangle.from_vertices(a, b, c, attribute=color),
        Triangle.from_vertices(a, c, d, attribute=color),
    ))


class TestReadOBJ:
    """Tests for read_obj."""

    def test_vertices_and_faces(self):
        mesh = read_obj(io.StringIO(SQUARE_OBJ))

        assert len(mesh) == 2
        assert mesh[0].vertices == (Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(1, 1, 0))
        assert mesh[1].vertices == (Vec3(0, 0, 0), Vec3(1, 1, 0), Vec3(0, 1, 0))

    def test_normals_follow_winding(self):
        mesh = read_obj(io.StringIO(SQUARE_OBJ))
        assert all(t.normal == Vec3(0, 0, 1) for t in mesh)

    def test_no_attribute_without_materials(self):
        mesh = read_obj(io.StringIO(SQUARE_OBJ))
        assert all(t.attribute is None for t in mesh)

    def test_index_forms(self):
        text = "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1//1 2//1 3//1\nf 1/1 2/2 3/3\nf -3 -2 -1\n"
        mesh = read_obj(io.StringIO(text))
        assert len(mesh) == 3
        assert mesh[0] == mesh[1] == mesh[2]

    def test_face_uses_vertices_seen_so_far(self):
        text = "v 0 0 0\nv 1 0 0\nf 1 2 3\nv 0 1 0\n"
        with pytest.raises(OBJParseError, match="out of range"):
            read_obj(io.StringIO(text))

    def test_zero_index_rejected(self):
        text = "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 0 1 2\n"
        with pytest.raises(OBJParseError, match="Line 4"):
            read_obj(io.StringIO(text))

    def test_bad_vertex_arity(self):
        with pytest.raises(OBJParseError, match="vertex line"):
            read_obj(io.StringIO("v 1 2\n"))

    def test_bad_vertex_number(self):
        with pytest.raises(OBJParseError, match="Line 1: invalid number"):
            read_obj(io.StringIO("v 1 two 3\n"))

    def test_quad_rejected(self):
        text = "v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n"
        with pytest.raises(OBJParseError, match="face line"):
            read_obj(io.StringIO(text))

    def test_bad_face_index(self):
        text = "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 x 3\n"
        with pytest.raises(OBJParseError, match="invalid vertex index"):
            read_obj(io.StringIO(text))

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            read_obj(io.StringIO("v a b c\n"))

    def test_materials_applied(self):
        text = ("mtllib square.mtl\nv 0 0 0\nv 1 0 0\nv 0 1 0\n"
                "usemtl red\nf 1 2 3\nusemtl blue\nf 1 2 3\n")
        materials = {"red": Color(1, 0, 0), "blue": Color(0, 0, 1)}
        mesh = read_obj(io.StringIO(text), materials=materials)
        assert mesh[0].color == Color(1, 0, 0)
        assert mesh[1].color == Color(0, 0, 1)

    def test_unknown_material_logged(self, caplog):
        text = "v 0 0 0\nv 1 0 0\nv 0 1 0\nusemtl green\nf 1 2 3\n"
        mesh = read_obj(io.StringIO(text), materials={"red": Color(1, 0, 0)})
        assert mesh[0].attribute is None
        assert "unknown material 'green'" in caplog.text


class TestReadMTL:
    """Tests for read_mtl."""

    def test_materials(self):
        text = "# comment\nnewmtl mtl1\nKd 0.3 0.3 0.3\n\nnewmtl mtl2\nKa 1 1 1\nKd 1 0 0\n"
        materials = read_mtl(io.StringIO(text))
        assert materials == {"mtl1": Color(0.3, 0.3, 0.3), "mtl2": Color(1, 0, 0)}

    def test_kd_before_newmtl(self):
        with pytest.raises(OBJParseError, match="Kd before newmtl"):
            read_mtl(io.StringIO("Kd 1 1 1\n"))


class TestWriteOBJ:
    """Tests for write_obj / write_mtl."""

    def test_vertices_deduplicated(self):
        out = io.StringIO()
        write_obj(_square(), out)
        lines = out.getvalue().splitlines()

        assert [l for l in lines if l.startswith("v ")] == [
            "v 0.000000 0.000000 0.000000",
            "v 1.000000 0.000000 0.000000",
            "v 1.000000 1.000000 0.000000",
            "v 0.000000 1.000000 0.000000",
        ]
        assert [l for l in lines if l.startswith("f ")] == ["f 1 2 3", "f 1 3 4"]

    def test_header_and_default_material(self):
        out = io.StringIO()
        mtl_lines = write_obj(_square(), out)

        assert out.getvalue().startswith(OBJ_HEADER)
        assert "usemtl mtl1\n" in out.getvalue()
        assert mtl_lines == ["newmtl mtl1\n", "Kd 0.300000 0.300000 0.300000\n", "\n"]

    def test_faces_grouped_by_color(self):
        red, blue = Color(1, 0, 0), Color(0, 0, 1)
        a, b, c = Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0)
        mesh = Mesh((
            Triangle.from_vertices(a, b, c, attribute=red),
            Triangle.from_vertices(a, c, b, attribute=blue),
            Triangle.from_vertices(b, c, a, attribute=red),
        ))
        out = io.StringIO()
        mtl_lines = write_obj(mesh, out)

        body = out.getvalue().split("usemtl ")
        assert body[1].splitlines() == ["mtl1", "f 1 2 3", "f 2 3 1"]
        assert body[2].splitlines() == ["mtl2", "f 1 3 2"]
        assert "Kd 1.000000 0.000000 0.000000\n" in mtl_lines
        assert "Kd 0.000000 0.000000 1.000000\n" in mtl_lines

    def test_mtllib_line(self):
        out = io.StringIO()
        write_obj(_square(), out, mtl_name="square.mtl")
        assert "mtllib square.mtl\n" in out.getvalue()

    def test_write_mtl(self):
        out = io.StringIO()
        write_mtl(["newmtl mtl1\n", "Kd 1 1 1\n"], out)
        assert out.getvalue() == MTL_HEADER + "newmtl mtl1\nKd 1 1 1\n"

    def test_empty_mesh(self):
        out = io.StringIO()
        assert write_obj(Mesh(), out) == []
        assert out.getvalue() == OBJ_HEADER


class TestOBJFiles:
    """Tests for read_obj_file / write_obj_file."""

    def test_round_trip_with_colors(self, tmp_path):
        mesh = _square(color=Color(0.25, 0.5, 0.75))
        path = tmp_path / "square.obj"

        mtl_path = write_obj_file(path, mesh)

        assert mtl_path == tmp_path / "square.mtl"
        assert mtl_path.exists()
        assert read_obj_file(path) == mesh

    def test_default_color_round_trip(self, tmp_path):
        path = tmp_path / "plain.obj"
        write_obj_file(path, _square(), default_color=(0.5, 0.5, 0.5))
        mesh = read_obj_file(path)
        assert all(t.color == Color(0.5, 0.5, 0.5) for t in mesh)

    def test_without_materials(self, tmp_path):
        path = tmp_path / "plain.obj"
        assert write_obj_file(path, _square(), write_materials=False) is None
        assert not (tmp_path / "plain.mtl").exists()
        assert "mtllib" not in path.read_text()
        assert read_obj_file(path) == _square()

    def test_missing_mtl_logged(self, tmp_path, caplog):
        path = tmp_path / "lonely.obj"
        path.write_text("mtllib gone.mtl\n" + SQUARE_OBJ)
        mesh = read_obj_file(path)
        assert len(mesh) == 2
        assert "Material library not found" in caplog.text

    def test_cube_geometry_survives(self, tmp_path, cube):
        path = tmp_path / "cube.obj"
        write_obj_file(path, cube)
        mesh = read_obj_file(path)

        assert len(mesh) == 12
        assert mesh.bounding_box() == Vec3(10, 10, 10)
        assert mesh.volume() == pytest.approx(1000.0)
        assert "v " in path.read_text()
        assert sum(1 for l in path.read_text().splitlines() if l.startswith("v ")) == 8
