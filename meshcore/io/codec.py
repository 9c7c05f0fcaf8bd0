from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..config import (
    FORMATS, OBJ_ENCODING, OBJ_READ_ENCODING, SNIFF_BYTES, SUFFIX_FORMATS, UTF8_BOM,
)
from ..errors import UnsupportedFormatError
from ..mesh.tri_mesh import TriMesh
from .dat_codec import read_dat, write_dat
from .obj_codec import read_obj, write_obj

logger = logging.getLogger(__name__)

Source = Union[str, Path, BinaryIO]


def _is_path(obj) -> bool:
    return isinstance(obj, (str, Path))


def resolve_format(location: Source, format: Optional[str] = None) -> Optional[str]:
    """
    Pick the codec for `location`.

    Priority:
      1) explicit `format` ("obj" / "dat", case-insensitive)
      2) file suffix of a path, or of a stream's `name`
    Returns None when neither applies (streams are sniffed by the reader).
    """
    if format is not None:
        fmt = format.lower().lstrip(".")
        if fmt not in FORMATS:
            raise UnsupportedFormatError(f"Unknown mesh format: {format!r} (known: {', '.join(FORMATS)})")
        return fmt

    name = location if _is_path(location) else getattr(location, "name", None)
    if isinstance(name, (str, Path)):
        suffix = Path(name).suffix.lower()
        if suffix in SUFFIX_FORMATS:
            return SUFFIX_FORMATS[suffix]
        if _is_path(location):
            raise UnsupportedFormatError(f"Unsupported mesh file suffix: {suffix or '(none)'}")
    return None


def sniff_format(stream: BinaryIO) -> str:
    """
    Guess the format of a seekable binary stream from its first bytes.

    OBJ is text: it never holds NUL or non-whitespace control bytes, and may
    start with a UTF-8 byte-order mark. A DAT header always holds such bytes,
    in its version byte (1, 2) or in its attribute rates and counts, so a DAT
    stream with an unknown (even printable) version byte still reaches the DAT
    reader and is reported as a version error.

    Limitation: a stream whose first bytes are all printable is taken as OBJ.
    Pass format="dat" explicitly for such data.
    """
    pos = stream.tell()
    head = stream.read(SNIFF_BYTES)
    stream.seek(pos)
    if not head or head.startswith(UTF8_BOM):
        return "obj"
    if any(b < 0x20 and b not in (0x09, 0x0A, 0x0C, 0x0D) for b in head):
        return "dat"
    return "obj"


def _decode(stream: BinaryIO, fmt: str) -> TriMesh:
    if fmt == "dat":
        return read_dat(stream)
    # Undecodable bytes are kept as surrogates; the reader reports their line.
    text = io.TextIOWrapper(stream, encoding=OBJ_READ_ENCODING, errors="surrogateescape", newline=None)
    try:
        return read_obj(text)
    finally:
        # Leave the caller's stream open.
        text.detach()


def read_mesh(source: Source, mesh: Optional[TriMesh] = None, format: Optional[str] = None) -> TriMesh:
    """
    Read a mesh from a path or a binary stream.

    The file is parsed into a scratch mesh first; `mesh` (if given) only
    receives the result when parsing succeeds, otherwise it is left unchanged.

    Returns:
        `mesh` if given, else the newly read TriMesh.
    """
    fmt = resolve_format(source, format)

    if _is_path(source):
        path = Path(source)
        with path.open("rb") as f:
            parsed = _decode(f, fmt)
    else:
        if fmt is None:
            fmt = sniff_format(source)
        parsed = _decode(source, fmt)

    logger.debug("Read %s mesh: %s", fmt, parsed.summary())
    if mesh is None:
        return parsed
    mesh._take_buffers(parsed)
    return mesh


def _encode(mesh: TriMesh, stream: BinaryIO, fmt: str) -> None:
    if fmt == "dat":
        write_dat(mesh, stream)
        return
    text = io.TextIOWrapper(stream, encoding=OBJ_ENCODING, newline="\n")
    try:
        write_obj(mesh, text)
        text.flush()
    finally:
        text.detach()


def write_mesh(mesh: TriMesh, target: Source, format: Optional[str] = None) -> None:
    """
    Write `mesh` to a path or a binary stream.

    Streams without a usable name need an explicit `format`.
    """
    fmt = resolve_format(target, format)
    if fmt is None:
        raise UnsupportedFormatError("Cannot infer mesh format for stream; pass format='obj' or 'dat'.")

    # Fail before touching the target.
    mesh.validate()

    if _is_path(target):
        path = Path(target)
        with path.open("wb") as f:
            _encode(mesh, f, fmt)
    else:
        _encode(mesh, target, fmt)
    logger.debug("Wrote %s mesh: %s", fmt, mesh.summary())
