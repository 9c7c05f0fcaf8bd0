import io

import numpy as np
import pytest

from meshcore import AttributeRate, ObjParseError, TriMesh, read_mesh, write_mesh
from meshcore.io import read_obj, write_obj


def parse(text: str) -> TriMesh:
    return read_obj(io.StringIO(text))


class TestObjRead:
    def test_basic_triangle(self):
        mesh = parse(
            "# a comment\n"
            "v 0 0 0\n"
            "v 1 0 0\n"
            "v 0 1 0\n"
            "f 1 2 3\n"
        )
        assert mesh.num_vertices == 3
        np.testing.assert_array_equal(mesh.indices, [0, 1, 2])

    def test_all_reference_forms(self):
        mesh = parse(
            "v 0 0 0\nv 1 0 0\nv 0 1 0\n"
            "vt 0 0\nvt 1 0\nvt 0 1\n"
            "vn 0 0 1\n"
            "f 1/1/1 2/2/1 3/3/1\n"
            "f 1//1 2//1 3//1\n"
            "f 1/1 2/2 3/3\n"
        )
        assert mesh.num_triangles == 3
        assert len(mesh.tex_coords) == 3
        assert len(mesh.normals) == 1

    def test_quad_is_fan_triangulated(self):
        mesh = parse(
            "v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nv -1 1 0\n"
            "f 1 2 3 4 5\n"
        )
        np.testing.assert_array_equal(mesh.triangles(), [[0, 1, 2], [0, 2, 3], [0, 3, 4]])

    def test_negative_indices_are_relative(self):
        mesh = parse(
            "v 0 0 0\nv 1 0 0\nv 0 1 0\n"
            "f -3 -2 -1\n"
            "v 5 5 5\n"
            "f -1 -2 -3\n"
        )
        np.testing.assert_array_equal(mesh.indices, [0, 1, 2, 3, 2, 1])

    def test_unknown_directives_are_skipped(self):
        mesh = parse(
            "mtllib scene.mtl\n"
            "o thing\n"
            "g group\n"
            "s off\n"
            "usemtl red\n"
            "v 0 0 0\nv 1 0 0\nv 0 1 0\n"
            "l 1 2\n"
            "\n"
            "   \n"
            "f 1 2 3\n"
        )
        assert mesh.num_vertices == 3
        assert mesh.num_triangles == 1

    def test_vertex_colors_and_w(self):
        mesh = parse(
            "v 0 0 0 1\n"
            "v 1 0 0 0.5 0.25 0.125\n"
            "v 0 1 0 1 1 1 0.5\n"
        )
        assert mesh.num_vertices == 3
        np.testing.assert_array_equal(mesh.colors_rgb, [[0.5, 0.25, 0.125]])
        np.testing.assert_array_equal(mesh.colors_rgba, [[1, 1, 1, 0.5]])

    def test_tex_coord_defaults(self):
        mesh = parse("vt 0.25\nvt 0.5 0.75 1.0\n")
        np.testing.assert_array_equal(mesh.tex_coords, [[0.25, 0.0], [0.5, 0.75]])

    def test_crlf_lines(self):
        mesh = parse("v 0 0 0\r\nv 1 0 0\r\nv 0 1 0\r\nf 1 2 3\r\n")
        assert mesh.num_triangles == 1


class TestObjErrors:
    @pytest.mark.parametrize("text, line_no", [
        ("v 0 0\n", 1),
        ("v 0 0 0 0 0\n", 1),
        ("v 0 zero 0\n", 1),
        ("v 0 0 0\nvn 0 1\n", 2),
        ("vt\n", 1),
        ("v 0 0 0\nv 1 0 0\nf 1 2\n", 3),
        ("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 4\n", 4),
        ("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 0 1 2\n", 4),
        ("v 0 0 0\nv 1 0 0\nv 0 1 0\nf -4 1 2\n", 4),
        ("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1/1 2 3\n", 4),
        ("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1//1 2 3\n", 4),
        ("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1/ 2/ a/\n", 4),
        ("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1/1/1/1 2 3\n", 4),
        ("v 0 0 0\nv 1 0 0\nv 0 1 0\nf /1 2 3\n", 4),
        ("v 0 0 0\n#rgb 1 0\n", 2),
        ("#rgba 1 0 0 x\n", 1),
        ("#rate normals sideways\n", 1),
        ("#rate vertices face\n", 1),
        ("#rate colors_rgb\n", 1),
    ])
    def test_malformed_records(self, text, line_no):
        with pytest.raises(ObjParseError) as exc_info:
            parse(text)
        assert exc_info.value.line_no == line_no

    def test_face_ahead_of_vertex_leaves_mesh_unchanged(self, full_mesh, tmp_path):
        before = full_mesh.copy()
        bad = tmp_path / "bad.obj"
        bad.write_text("v 0 0 0\nv 1 0 0\nf 1 2 3\nv 0 1 0\n", encoding="utf-8")

        with pytest.raises(ObjParseError, match="line 3"):
            full_mesh.read(bad)

        assert full_mesh.buffers_equal(before)


class TestObjWrite:
    def test_records_and_one_based_faces(self, triangle_mesh):
        out = io.StringIO()
        write_obj(triangle_mesh, out)
        lines = out.getvalue().splitlines()

        assert lines[:3] == ["v 0 0 0", "v 1 0 0", "v 0 1 0"]
        assert lines[-1] == "f 1 2 3"

    def test_face_references_follow_per_vertex_buffers(self, full_mesh):
        out = io.StringIO()
        write_obj(full_mesh, out)
        faces = [ln for ln in out.getvalue().splitlines() if ln.startswith("f ")]
        assert faces == ["f 1/1/1 2/2/2 3/3/3", "f 1/1/1 3/3/3 4/4/4"]

    def test_round_trip(self, full_mesh, tmp_path):
        full_mesh.vertices[2] = (1.0 / 3.0, 2.0 / 3.0, 1e-7)
        path = tmp_path / "quad.obj"

        full_mesh.write(path)
        back = TriMesh.from_file(path)

        assert back.buffers_equal(full_mesh)

    def test_both_color_buffers_survive(self, full_mesh, tmp_path, caplog):
        path = tmp_path / "quad.obj"
        with caplog.at_level("WARNING", logger="meshcore"):
            full_mesh.write(path)
        assert not caplog.records
        back = TriMesh.from_file(path)

        np.testing.assert_array_equal(back.colors_rgb, full_mesh.colors_rgb)
        np.testing.assert_array_equal(back.colors_rgba, full_mesh.colors_rgba)

    def test_extra_colors_are_comment_records(self, full_mesh):
        out = io.StringIO()
        write_obj(full_mesh, out)
        lines = out.getvalue().splitlines()

        # RGBA rides on the v records, RGB follows as comments.
        assert lines[0] == "v 0 0 0 1 0 0 1"
        assert "#rgb 0.25 0.5 0.75" in lines
        assert not any(ln.startswith("#rgba") for ln in lines)

    def test_per_face_attributes_round_trip(self, triangle_mesh, tmp_path):
        triangle_mesh.append_normal((0, 0, 1))
        triangle_mesh.append_color_rgb((0.5, 0.5, 0.5))
        triangle_mesh.append_color_rgba((1, 0, 0, 0.5))
        for name in ("normals", "colors_rgb", "colors_rgba"):
            triangle_mesh.set_rate(name, AttributeRate.PER_FACE)
        path = tmp_path / "flat.obj"

        triangle_mesh.write(path)
        back = TriMesh.from_file(path)

        assert back.buffers_equal(triangle_mesh)
        assert back.rates == triangle_mesh.rates

    def test_comment_records_ignored_by_plain_parsing(self):
        # Lines such as "# rgb" are ordinary comments.
        mesh = parse("# rgb 1 0 0\n# rate normals face\nv 0 0 0\n")
        assert len(mesh.colors_rgb) == 0
        assert mesh.rates["normals"] == AttributeRate.PER_VERTEX

    def test_per_face_normals_not_referenced(self, triangle_mesh):
        triangle_mesh.append_normal((0, 0, 1))
        triangle_mesh.set_rate("normals", AttributeRate.PER_FACE)
        out = io.StringIO()
        write_obj(triangle_mesh, out)
        text = out.getvalue()

        assert "vn 0 0 1" in text
        assert text.splitlines()[-1] == "f 1 2 3"

    def test_invalid_mesh_is_not_written(self, triangle_mesh, tmp_path):
        triangle_mesh.append_triangle(0, 1, 3)
        path = tmp_path / "broken.obj"
        with pytest.raises(IndexError):
            write_mesh(triangle_mesh, path)
        assert not path.exists()

    def test_stream_round_trip_via_sniffing(self, triangle_mesh):
        buf = io.BytesIO()
        write_mesh(triangle_mesh, buf, format="obj")
        buf.seek(0)
        back = read_mesh(buf)
        assert back.buffers_equal(triangle_mesh)
        assert not buf.closed


class TestObjEncoding:
    def test_byte_order_mark_from_path(self, tmp_path):
        path = tmp_path / "bom.obj"
        path.write_bytes(b"\xef\xbb\xbfv 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")

        mesh = TriMesh.from_file(path)

        assert mesh.num_vertices == 3
        np.testing.assert_array_equal(mesh.indices, [0, 1, 2])

    def test_byte_order_mark_from_stream(self):
        buf = io.BytesIO(b"\xef\xbb\xbfv 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")

        mesh = read_mesh(buf)

        assert mesh.num_vertices == 3
        assert mesh.num_triangles == 1

    def test_byte_order_mark_in_text(self):
        mesh = parse("\ufeffv 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")
        assert mesh.num_triangles == 1

    def test_invalid_utf8_reports_line(self, tmp_path):
        path = tmp_path / "latin.obj"
        path.write_bytes(b"v 0 0 0\n# \xff\xfe\nv 1 0 0\n")

        with pytest.raises(ObjParseError, match="invalid UTF-8") as exc_info:
            TriMesh.from_file(path)
        assert exc_info.value.line_no == 2

    def test_non_ascii_comment_is_fine(self, tmp_path):
        path = tmp_path / "named.obj"
        path.write_text("# modèle\nv 0 0 0\n", encoding="utf-8")
        assert TriMesh.from_file(path).num_vertices == 1
