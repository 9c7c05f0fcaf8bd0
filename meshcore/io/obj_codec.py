from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, List, Optional, TextIO

import numpy as np

from ..config import OBJ_FLOAT_FORMAT
from ..errors import ObjParseError
from ..mesh.buffers import AttributeRate
from ..mesh.tri_mesh import TriMesh

logger = logging.getLogger(__name__)


class ObjReader:
    """
    Parses Wavefront OBJ text into a fresh TriMesh.

    Records:
      v  x y z [w]          position (w ignored)
      v  x y z r g b [a]    position + per-vertex RGB (or RGBA) color
      vt u [v [w]]          texture coordinate (v defaults to 0, w ignored)
      vn x y z              normal
      f  a b c ...          face; each reference is one of
                              v, v/vt, v//vn, v/vt/vn

    Comment records written by write_obj (other readers skip them):
      #rgb  r g b           RGB color that could not ride on a `v` record
      #rgba r g b a         RGBA color that could not ride on a `v` record
      #rate name face       `name` is stored per face rather than per vertex

    Notes:
    - Face references are 1-based; negative references count back from the
      end of the respective buffer at the point the face is read.
    - Every reference must name an entry already read.
    - Polygons (n-gons) are fan triangulated: (v0, v1, v2), (v0, v2, v3), ...
    - Only position references end up in the index buffer. vt/vn references
      are checked but the buffers themselves are kept in file order.
    - Everything else (comments, o, g, s, l, usemtl, mtllib, ...) is skipped.
    - Text must be UTF-8; a leading byte-order mark is ignored.
    """

    def __init__(self) -> None:
        self.mesh = TriMesh()
        self.skipped: Counter = Counter()
        self._line_no = 0
        self._line = ""

    def read(self, lines: Iterable[str]) -> TriMesh:
        for line_no, raw in enumerate(lines, start=1):
            self._line_no = line_no
            self._line = ""
            if line_no == 1:
                raw = raw.lstrip("\ufeff")
            if not raw.isascii():
                self._check_utf8(raw)
            line = raw.strip()
            if not line:
                continue
            self._line = line

            tokens = line.split()
            kind = tokens[0]
            if kind == "v":
                self._vertex(tokens[1:])
            elif kind == "vn":
                self._normal(tokens[1:])
            elif kind == "vt":
                self._tex_coord(tokens[1:])
            elif kind == "f":
                self._face(tokens[1:])
            elif kind in ("#rgb", "#rgba"):
                self._color(kind, tokens[1:])
            elif kind == "#rate":
                self._rate(tokens[1:])
            elif not kind.startswith("#"):
                self.skipped[kind] += 1

        if self.skipped:
            logger.debug("Skipped OBJ records: %s", dict(self.skipped))
        return self.mesh

    # -------------------------
    # Records
    # -------------------------
    def _fail(self, reason: str) -> ObjParseError:
        return ObjParseError(self._line_no, self._line, reason)

    def _check_utf8(self, raw: str) -> None:
        # Undecodable bytes arrive as lone surrogates (errors="surrogateescape").
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError:
            self._line = raw.strip().encode("utf-8", "replace").decode("utf-8")
            raise self._fail("invalid UTF-8") from None

    def _floats(self, fields: List[str]) -> List[float]:
        try:
            return [float(f) for f in fields]
        except ValueError:
            raise self._fail("non-numeric field") from None

    def _vertex(self, fields: List[str]) -> None:
        values = self._floats(fields)
        n = len(values)
        if n in (3, 4):
            self.mesh.append_vertex(values[:3])
        elif n == 6:
            self.mesh.append_vertex(values[:3])
            self.mesh.append_color_rgb(values[3:6])
        elif n == 7:
            self.mesh.append_vertex(values[:3])
            self.mesh.append_color_rgba(values[3:7])
        else:
            raise self._fail(f"vertex needs 3, 4, 6 or 7 values, got {n}")

    def _normal(self, fields: List[str]) -> None:
        values = self._floats(fields)
        if len(values) != 3:
            raise self._fail(f"normal needs 3 values, got {len(values)}")
        self.mesh.append_normal(values)

    def _tex_coord(self, fields: List[str]) -> None:
        values = self._floats(fields)
        if not 1 <= len(values) <= 3:
            raise self._fail(f"texture coordinate needs 1 to 3 values, got {len(values)}")
        u = values[0]
        v = values[1] if len(values) > 1 else 0.0
        self.mesh.append_tex_coord((u, v))

    def _color(self, kind: str, fields: List[str]) -> None:
        values = self._floats(fields)
        if kind == "#rgb":
            if len(values) != 3:
                raise self._fail(f"RGB color needs 3 values, got {len(values)}")
            self.mesh.append_color_rgb(values)
        else:
            if len(values) != 4:
                raise self._fail(f"RGBA color needs 4 values, got {len(values)}")
            self.mesh.append_color_rgba(values)

    def _rate(self, fields: List[str]) -> None:
        if len(fields) != 2 or fields[0] not in self.mesh.rates:
            raise self._fail("rate record needs an attribute name and 'vertex' or 'face'")
        try:
            rate = AttributeRate(fields[1])
        except ValueError:
            raise self._fail(f"unknown attribute rate '{fields[1]}'") from None
        self.mesh.set_rate(fields[0], rate)

    def _face(self, tokens: List[str]) -> None:
        if len(tokens) < 3:
            raise self._fail(f"face needs at least 3 vertices, got {len(tokens)}")

        vidx = [self._parse_reference(tok) for tok in tokens]

        v0 = vidx[0]
        for i in range(1, len(vidx) - 1):
            self.mesh.append_triangle(v0, vidx[i], vidx[i + 1])

    def _parse_reference(self, token: str) -> int:
        """
        Parse one face token and return its 0-based position index.
        - token examples: "3", "3/2", "3//7", "3/2/7", "-1/-1/-1"
        """
        parts = token.split("/")
        if len(parts) > 3 or not parts[0]:
            raise self._fail(f"invalid face reference '{token}'")

        mesh = self.mesh
        idx = self._resolve(parts[0], mesh.num_vertices, "vertex")
        if len(parts) > 1 and parts[1]:
            self._resolve(parts[1], len(mesh.tex_coords), "texture coordinate")
        if len(parts) > 2:
            if not parts[2]:
                raise self._fail(f"invalid face reference '{token}'")
            self._resolve(parts[2], len(mesh.normals), "normal")
        return idx

    def _resolve(self, field: str, count: int, what: str) -> int:
        try:
            ref = int(field)
        except ValueError:
            raise self._fail(f"non-numeric {what} index '{field}'") from None

        if ref > 0:
            idx = ref - 1
        elif ref < 0:
            # -1 refers to the most recently defined entry
            idx = count + ref
        else:
            raise self._fail(f"{what} index 0 is not valid")

        if idx < 0 or idx >= count:
            raise self._fail(f"{what} index {ref} refers to an undefined {what} ({count} defined)")
        return idx


def read_obj(stream: TextIO) -> TriMesh:
    """Parse OBJ text from `stream` into a new TriMesh."""
    return ObjReader().read(stream)


# -------------------------
# Writer
# -------------------------
def _fmt(values: Iterable[float]) -> str:
    return " ".join(OBJ_FLOAT_FORMAT % float(x) for x in values)


def _per_vertex(mesh: TriMesh, name: str, buf: np.ndarray) -> bool:
    return (
        len(buf) > 0
        and len(buf) == mesh.num_vertices
        and mesh.rates[name] == AttributeRate.PER_VERTEX
    )


def _vertex_color_name(mesh: TriMesh) -> Optional[str]:
    """Pick the color buffer that rides on `v` records, if any (RGBA first)."""
    for name in ("colors_rgba", "colors_rgb"):
        if _per_vertex(mesh, name, mesh.buffer(name).data):
            return name
    return None


def write_obj(mesh: TriMesh, stream: TextIO) -> None:
    """
    Write `mesh` as OBJ text.

    Order: v (with color when possible), #rgb / #rgba, vt, vn, #rate, f.
    At most one per-vertex color buffer fits on the `v` records; any other
    color buffer goes out as #rgb / #rgba comment records, and every
    attribute stored per face gets a #rate record, so ObjReader gets back
    what was written while other readers see plain comments.

    Face references get /vt and //vn parts when those buffers are per-vertex
    and the same length as `vertices`; in that case the same 1-based index is
    used for all parts.
    """
    mesh.validate()

    on_vertex = _vertex_color_name(mesh)
    colors = mesh.buffer(on_vertex).data if on_vertex else None
    for i, v in enumerate(mesh.vertices):
        if colors is None:
            stream.write(f"v {_fmt(v)}\n")
        else:
            stream.write(f"v {_fmt(v)} {_fmt(colors[i])}\n")

    for name, record in (("colors_rgb", "#rgb"), ("colors_rgba", "#rgba")):
        if name == on_vertex:
            continue
        for c in mesh.buffer(name).data:
            stream.write(f"{record} {_fmt(c)}\n")

    for uv in mesh.tex_coords:
        stream.write(f"vt {_fmt(uv)}\n")
    for n in mesh.normals:
        stream.write(f"vn {_fmt(n)}\n")

    for name, rate in mesh.rates.items():
        if rate != AttributeRate.PER_VERTEX:
            stream.write(f"#rate {name} {rate.value}\n")

    with_vt = _per_vertex(mesh, "tex_coords", mesh.tex_coords)
    with_vn = _per_vertex(mesh, "normals", mesh.normals)
    if with_vt and with_vn:
        ref = "{0}/{0}/{0}"
    elif with_vt:
        ref = "{0}/{0}"
    elif with_vn:
        ref = "{0}//{0}"
    else:
        ref = "{0}"

    for tri in mesh.triangles() + 1:
        stream.write("f " + " ".join(ref.format(int(i)) for i in tri) + "\n")
