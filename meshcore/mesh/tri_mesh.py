"""
Indexed triangle meshes.

To build a quad out of two triangles, append the four corners and then the
two triangles that reference them by index:

    mesh = TriMesh()
    mesh.append_vertex((10, 10, 0))
    mesh.append_color_rgb((1, 0, 0))
    mesh.append_vertex((10, 100, 0))
    mesh.append_color_rgb((0, 1, 0))
    mesh.append_vertex((100, 100, 0))
    mesh.append_color_rgb((0, 1, 0))
    mesh.append_vertex((100, 10, 0))
    mesh.append_color_rgb((1, 0, 0))

    base = mesh.num_vertices - 4
    mesh.append_triangle(base + 0, base + 1, base + 2)
    mesh.append_triangle(base + 0, base + 2, base + 3)

Appends never check indices against the vertex count (vertices and triangles
may arrive in any order). `validate()` is the explicit check; normal
recalculation and writing run it first.
"""
from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np

from ..errors import IncompleteTriangleError, IndexOutOfRangeError
from .bounds import BoundingBox, calc_bounding_box
from .buffers import AttributeBuffer, AttributeRate, IndexBuffer
from .normals import recalculate_normals


class _IndexedMesh:
    """Buffers and bookkeeping shared by TriMesh and TriMesh2d."""

    DIM: int = 3
    ATTRIBUTES: Tuple[str, ...] = ("colors_rgb", "colors_rgba", "tex_coords")
    _WIDTHS: Dict[str, int] = {"colors_rgb": 3, "colors_rgba": 4, "tex_coords": 2}

    def __init__(self) -> None:
        self._vertices = AttributeBuffer(self.DIM)
        self._attrs: Dict[str, AttributeBuffer] = {
            name: AttributeBuffer(self._WIDTHS[name]) for name in self.ATTRIBUTES
        }
        self._indices = IndexBuffer()
        self.rates: Dict[str, AttributeRate] = {
            name: AttributeRate.PER_VERTEX for name in self.ATTRIBUTES
        }

    # -------------------------
    # Lifecycle
    # -------------------------
    def clear(self) -> None:
        self._vertices.clear()
        for buf in self._attrs.values():
            buf.clear()
        self._indices.clear()

    def _take_buffers(self, other: "_IndexedMesh") -> None:
        """Replace every buffer with `other`'s (used by codecs after a successful parse)."""
        if type(other) is not type(self):
            raise TypeError(f"Cannot take buffers from {type(other).__name__}")
        self._vertices = other._vertices
        self._attrs = other._attrs
        self._indices = other._indices
        self.rates = dict(other.rates)

    def copy(self):
        out = type(self)()
        out._vertices = self._vertices.copy()
        out._attrs = {name: buf.copy() for name, buf in self._attrs.items()}
        out._indices = self._indices.copy()
        out.rates = dict(self.rates)
        return out

    # -------------------------
    # Append
    # -------------------------
    def append_vertex(self, v) -> None:
        self._vertices.append(v)

    def append_vertices(self, verts) -> None:
        self._vertices.extend(verts)

    def append_color_rgb(self, rgb) -> None:
        self._attrs["colors_rgb"].append(rgb)

    def append_colors_rgb(self, rgbs) -> None:
        self._attrs["colors_rgb"].extend(rgbs)

    def append_color_rgba(self, rgba) -> None:
        self._attrs["colors_rgba"].append(rgba)

    def append_colors_rgba(self, rgbas) -> None:
        self._attrs["colors_rgba"].extend(rgbas)

    def append_tex_coord(self, uv) -> None:
        self._attrs["tex_coords"].append(uv)

    def append_tex_coords(self, uvs) -> None:
        self._attrs["tex_coords"].extend(uvs)

    def set_tex_coords(self, uvs) -> None:
        self._attrs["tex_coords"].replace(uvs)

    def append_triangle(self, v0: int, v1: int, v2: int) -> None:
        self._indices.extend((v0, v1, v2))

    def append_indices(self, indices) -> None:
        self._indices.extend(indices)

    # -------------------------
    # Buffers (writable views)
    # -------------------------
    @property
    def vertices(self) -> np.ndarray:
        return self._vertices.data

    @property
    def colors_rgb(self) -> np.ndarray:
        return self._attrs["colors_rgb"].data

    @property
    def colors_rgba(self) -> np.ndarray:
        return self._attrs["colors_rgba"].data

    @property
    def tex_coords(self) -> np.ndarray:
        return self._attrs["tex_coords"].data

    @property
    def indices(self) -> np.ndarray:
        return self._indices.data

    def buffer(self, name: str) -> AttributeBuffer:
        """The AttributeBuffer behind `name`."""
        if name == "vertices":
            return self._vertices
        if name == "indices":
            return self._indices
        try:
            return self._attrs[name]
        except KeyError:
            raise KeyError(f"Unknown buffer: {name}") from None

    def readonly(self, name: str) -> np.ndarray:
        """Non-writable view of buffer `name` (e.g. 'vertices', 'indices')."""
        return self.buffer(name).readonly()

    def buffer_names(self) -> Tuple[str, ...]:
        return ("vertices",) + self.ATTRIBUTES + ("indices",)

    def set_rate(self, name: str, rate: AttributeRate) -> None:
        if name not in self.rates:
            raise KeyError(f"Unknown attribute: {name}")
        self.rates[name] = AttributeRate(rate)

    # -------------------------
    # Queries
    # -------------------------
    def has_colors_rgb(self) -> bool:
        return len(self._attrs["colors_rgb"]) > 0

    def has_colors_rgba(self) -> bool:
        return len(self._attrs["colors_rgba"]) > 0

    def has_tex_coords(self) -> bool:
        return len(self._attrs["tex_coords"]) > 0

    @property
    def num_vertices(self) -> int:
        return len(self._vertices)

    @property
    def num_indices(self) -> int:
        return len(self._indices)

    @property
    def num_triangles(self) -> int:
        # A trailing partial triple is not a triangle; validate() reports it.
        return len(self._indices) // 3

    def triangles(self) -> np.ndarray:
        """(num_triangles, 3) int64 copy of the complete index triples."""
        n = self.num_triangles
        return self.indices[: 3 * n].astype(np.int64).reshape(n, 3)

    def get_triangle_vertices(self, idx: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Copies of the three corner positions of triangle `idx`."""
        idx = int(idx)
        if idx < 0 or idx >= self.num_triangles:
            raise IndexOutOfRangeError(
                f"Triangle {idx} out of range (mesh has {self.num_triangles} triangles)"
            )
        corners = self.indices[3 * idx: 3 * idx + 3]
        n_verts = self.num_vertices
        for i in corners:
            if int(i) >= n_verts:
                raise IndexOutOfRangeError(
                    f"Triangle {idx} references vertex {int(i)} (mesh has {n_verts} vertices)"
                )
        v = self.vertices
        return v[corners[0]].copy(), v[corners[1]].copy(), v[corners[2]].copy()

    def validate(self) -> None:
        """
        Check the index buffer against the vertex buffer.

        Raises:
            IncompleteTriangleError: index count is not a multiple of 3
            IndexOutOfRangeError:    some index >= num_vertices
        """
        n_idx = self.num_indices
        if n_idx % 3 != 0:
            raise IncompleteTriangleError(
                f"Index buffer holds {n_idx} indices, which is not a multiple of 3"
            )
        if n_idx == 0:
            return
        idx = self.indices
        bad = np.flatnonzero(idx >= self.num_vertices)
        if bad.size:
            pos = int(bad[0])
            raise IndexOutOfRangeError(
                f"indices[{pos}] = {int(idx[pos])} out of range "
                f"(mesh has {self.num_vertices} vertices)"
            )

    def calc_bounding_box(self, transform: Optional[np.ndarray] = None) -> BoundingBox:
        """Bounding box of all vertices, optionally under an affine `transform`."""
        return calc_bounding_box(self.vertices, transform)

    def buffers_equal(self, other: "_IndexedMesh", atol: float = 0.0) -> bool:
        """
        True when both meshes hold the same buffers. atol=0 compares values
        exactly; a positive atol allows float drift (text round trips).
        """
        if type(other) is not type(self):
            return False
        for name in self.buffer_names():
            a = self.buffer(name).data
            b = other.buffer(name).data
            if a.shape != b.shape:
                return False
            if atol > 0 and name != "indices":
                if not np.allclose(a, b, rtol=0.0, atol=atol):
                    return False
            elif not np.array_equal(a, b):
                return False
        return True

    def summary(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "vertices": self.num_vertices,
            "indices": self.num_indices,
            "triangles": self.num_triangles,
        }
        for name in self.ATTRIBUTES:
            out[name] = len(self._attrs[name])
        return out

    def __repr__(self) -> str:
        counts = ", ".join(f"{k}={v}" for k, v in self.summary().items())
        return f"{type(self).__name__}({counts})"


class TriMesh(_IndexedMesh):
    """
    3D indexed triangle mesh.

    Buffers:
      - vertices     (N, 3) float32
      - normals      (K, 3) float32, per vertex after recalculate_normals();
                     callers may store one per face instead (see `rates`)
      - colors_rgb   (C, 3) float32
      - colors_rgba  (D, 4) float32
      - tex_coords   (T, 2) float32
      - indices      (3 * num_triangles,) uint32

    Triangle t is (indices[3t], indices[3t + 1], indices[3t + 2]).
    """

    DIM = 3
    ATTRIBUTES = ("normals", "colors_rgb", "colors_rgba", "tex_coords")
    _WIDTHS = {"normals": 3, "colors_rgb": 3, "colors_rgba": 4, "tex_coords": 2}

    def append_vertices(self, verts) -> None:
        # Homogeneous (n, 4) input keeps x, y, z.
        self._vertices.extend(_drop_w(verts))

    def append_normal(self, n) -> None:
        self._attrs["normals"].append(n)

    def append_normals(self, normals) -> None:
        self._attrs["normals"].extend(_drop_w(normals))

    @property
    def normals(self) -> np.ndarray:
        return self._attrs["normals"].data

    def has_normals(self) -> bool:
        return len(self._attrs["normals"]) > 0

    def recalculate_normals(self) -> None:
        """Replace `normals` with smooth per-vertex normals computed from the faces."""
        self.validate()
        normals = recalculate_normals(self.vertices, self.indices)
        self._attrs["normals"].replace(normals)
        self.rates["normals"] = AttributeRate.PER_VERTEX

    # -------------------------
    # Persistence
    # -------------------------
    @classmethod
    def from_file(cls, source, format: Optional[str] = None) -> "TriMesh":
        from ..io.codec import read_mesh
        return read_mesh(source, format=format)

    def read(self, source, format: Optional[str] = None) -> None:
        """Replace this mesh's content with the mesh stored in `source` (.obj or .dat)."""
        from ..io.codec import read_mesh
        read_mesh(source, mesh=self, format=format)

    def write(self, target, format: Optional[str] = None) -> None:
        """Write this mesh to `target` (.obj or .dat)."""
        from ..io.codec import write_mesh
        write_mesh(self, target, format=format)


class TriMesh2d(_IndexedMesh):
    """2D indexed triangle mesh: vertices are (N, 2) and there are no normals."""

    DIM = 2


def _drop_w(rows) -> np.ndarray:
    arr = np.asarray(rows)
    if arr.ndim == 2 and arr.shape[1] == 4:
        return arr[:, :3]
    return arr
