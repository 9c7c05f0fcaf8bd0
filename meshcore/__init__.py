# meshcore/__init__.py
from .errors import (
    DatFormatError, FormatVersionError, IncompleteTriangleError, IndexOutOfRangeError,
    MeshError, MeshParseError, ObjParseError, UnsupportedFormatError,
)
from .io import read_mesh, write_mesh
from .logging_config import setup_logging
from .mesh import AttributeRate, BoundingBox, TriMesh, TriMesh2d

__version__ = "0.1.0"

__all__ = [
    # Containers
    "TriMesh", "TriMesh2d", "AttributeRate", "BoundingBox",
    # Persistence
    "read_mesh", "write_mesh",
    # Errors
    "MeshError", "IndexOutOfRangeError", "IncompleteTriangleError",
    "MeshParseError", "ObjParseError", "DatFormatError", "FormatVersionError",
    "UnsupportedFormatError",
    "setup_logging",
]
