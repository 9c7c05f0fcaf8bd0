"""
Compact binary ("DAT") mesh format.

All integers and floats are little-endian.

Version 1 (read only):
    u8   version = 1
    u32  n_vertices, n_normals, n_tex_coords, n_indices
    f32  vertices    [n_vertices * 3]
    f32  normals     [n_normals * 3]
    f32  tex_coords  [n_tex_coords * 2]
    u32  indices     [n_indices]

Version 2 (written):
    u8   version = 2
    u8   rate of normals, colors_rgb, colors_rgba, tex_coords (0 = vertex, 1 = face)
    u32  n_vertices, n_normals, n_tex_coords, n_indices, n_colors_rgb, n_colors_rgba
    then the six buffers in the same order as the counts
"""
from __future__ import annotations

import logging
import struct
from typing import BinaryIO, Dict, List, Tuple

import numpy as np

from ..config import (
    DAT_FLOAT_DTYPE,
    DAT_INDEX_DTYPE,
    DAT_VERSION,
    DAT_VERSION_LEGACY,
    SUPPORTED_DAT_VERSIONS,
)
from ..errors import DatFormatError, FormatVersionError
from ..mesh.buffers import AttributeRate
from ..mesh.tri_mesh import TriMesh

logger = logging.getLogger(__name__)

_RATE_CODES: Dict[AttributeRate, int] = {AttributeRate.PER_VERTEX: 0, AttributeRate.PER_FACE: 1}
_RATES_BY_CODE: Dict[int, AttributeRate] = {v: k for k, v in _RATE_CODES.items()}

# (buffer name, components per entry), in stream order
_LAYOUT_V1: List[Tuple[str, int]] = [
    ("vertices", 3),
    ("normals", 3),
    ("tex_coords", 2),
    ("indices", 1),
]
_LAYOUT_V2: List[Tuple[str, int]] = _LAYOUT_V1 + [
    ("colors_rgb", 3),
    ("colors_rgba", 4),
]
_RATED: Tuple[str, ...] = ("normals", "colors_rgb", "colors_rgba", "tex_coords")


def _read_exact(stream: BinaryIO, n: int, what: str) -> bytes:
    data = stream.read(n)
    if data is None or len(data) != n:
        got = 0 if data is None else len(data)
        raise DatFormatError(f"Truncated DAT stream while reading {what}: expected {n} bytes, got {got}")
    return data


def read_dat(stream: BinaryIO) -> TriMesh:
    """Decode a DAT stream into a new TriMesh."""
    (version,) = struct.unpack("<B", _read_exact(stream, 1, "version"))
    if version not in SUPPORTED_DAT_VERSIONS:
        raise FormatVersionError(version, SUPPORTED_DAT_VERSIONS)

    mesh = TriMesh()
    if version == DAT_VERSION_LEGACY:
        layout = _LAYOUT_V1
    else:
        layout = _LAYOUT_V2
        codes = struct.unpack("<4B", _read_exact(stream, 4, "attribute rates"))
        for name, code in zip(_RATED, codes):
            if code not in _RATES_BY_CODE:
                raise DatFormatError(f"Unknown attribute rate {code} for {name}")
            mesh.set_rate(name, _RATES_BY_CODE[code])

    fmt = "<%dI" % len(layout)
    counts = struct.unpack(fmt, _read_exact(stream, struct.calcsize(fmt), "buffer counts"))

    for (name, width), count in zip(layout, counts):
        dtype = DAT_INDEX_DTYPE if name == "indices" else DAT_FLOAT_DTYPE
        n_items = count * width
        raw = _read_exact(stream, n_items * dtype.itemsize, name)
        arr = np.frombuffer(raw, dtype=dtype, count=n_items)
        if name == "indices":
            mesh.append_indices(arr)
        else:
            mesh.buffer(name).extend(arr.reshape(count, width))

    logger.debug("Read DAT v%d: %s", version, mesh.summary())
    return mesh


def write_dat(mesh: TriMesh, stream: BinaryIO) -> None:
    """Encode `mesh` as DAT version 2."""
    mesh.validate()

    stream.write(struct.pack("<B", DAT_VERSION))
    stream.write(struct.pack("<4B", *(_RATE_CODES[mesh.rates[name]] for name in _RATED)))

    buffers = [mesh.buffer(name).data for name, _ in _LAYOUT_V2]
    stream.write(struct.pack("<%dI" % len(buffers), *(len(b) for b in buffers)))

    for (name, _), buf in zip(_LAYOUT_V2, buffers):
        dtype = DAT_INDEX_DTYPE if name == "indices" else DAT_FLOAT_DTYPE
        stream.write(np.ascontiguousarray(buf, dtype=dtype).tobytes())

    logger.debug("Wrote DAT v%d: %s", DAT_VERSION, mesh.summary())
