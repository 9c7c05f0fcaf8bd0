# meshcore/errors.py
from __future__ import annotations

from typing import Optional


class MeshError(Exception):
    """Base class for every error raised by meshcore."""


class IndexOutOfRangeError(MeshError, IndexError):
    """A triangle or vertex index points past the end of its buffer."""


class IncompleteTriangleError(MeshError, ValueError):
    """The index buffer length is not a multiple of three."""


class UnsupportedFormatError(MeshError, ValueError):
    """No codec is registered for the requested file format."""


class MeshParseError(MeshError, ValueError):
    """Input data could not be decoded into a mesh."""


class ObjParseError(MeshParseError):
    """
    Malformed OBJ record.

    line_no: 1-based line number of the offending record
    line:    raw text of the record (stripped)
    reason:  short description of what is wrong with it
    """

    def __init__(self, line_no: int, line: str, reason: str) -> None:
        self.line_no = int(line_no)
        self.line = line
        self.reason = reason
        super().__init__(f"OBJ line {self.line_no}: {reason} ({line!r})")


class DatFormatError(MeshParseError):
    """Binary mesh data is truncated or inconsistent."""


class FormatVersionError(DatFormatError):
    """Binary mesh data declares a version this reader does not understand."""

    def __init__(self, version: int, supported: Optional[tuple] = None) -> None:
        self.version = int(version)
        self.supported = tuple(supported or ())
        msg = f"Unsupported DAT version: {self.version}"
        if self.supported:
            msg += f" (supported: {', '.join(str(v) for v in self.supported)})"
        super().__init__(msg)


__all__ = [
    "MeshError",
    "IndexOutOfRangeError",
    "IncompleteTriangleError",
    "UnsupportedFormatError",
    "MeshParseError",
    "ObjParseError",
    "DatFormatError",
    "FormatVersionError",
]
