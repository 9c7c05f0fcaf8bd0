# meshcore/io/__init__.py
from .codec import read_mesh, resolve_format, sniff_format, write_mesh
from .dat_codec import read_dat, write_dat
from .obj_codec import ObjReader, read_obj, write_obj

__all__ = [
    "read_mesh", "write_mesh", "resolve_format", "sniff_format",
    "read_dat", "write_dat",
    "ObjReader", "read_obj", "write_obj",
]
