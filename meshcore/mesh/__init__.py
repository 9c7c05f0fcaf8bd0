# meshcore/mesh/__init__.py
from .bounds import BoundingBox, calc_bounding_box
from .buffers import AttributeBuffer, AttributeRate, IndexBuffer
from .normals import face_normals, recalculate_normals
from .tri_mesh import TriMesh, TriMesh2d

__all__ = [
    "TriMesh", "TriMesh2d",
    "AttributeBuffer", "AttributeRate", "IndexBuffer",
    "BoundingBox", "calc_bounding_box",
    "face_normals", "recalculate_normals",
]
