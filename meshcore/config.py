"""
Format constants and defaults
=============================
Central registry for the values shared by the mesh containers and codecs,
so that file layouts and dtypes are not hardcoded in several places.

Exports:
    VERTEX_DTYPE (np.dtype): storage type of every float attribute buffer.
    INDEX_DTYPE (np.dtype): storage type of the index buffer.
    DAT_VERSION (int): version byte written by the DAT writer.
    SUPPORTED_DAT_VERSIONS (tuple): versions the DAT reader accepts.
    SUFFIX_FORMATS (dict): file suffix -> codec name.
    OBJ_FLOAT_FORMAT (str): printf format used for OBJ floats.
    LOG_FORMAT (str): record format of the console handler set up by setup_logging.
"""
from typing import Dict, Tuple

import numpy as np

# Buffers
VERTEX_DTYPE = np.dtype(np.float32)
INDEX_DTYPE = np.dtype(np.uint32)
MAX_INDEX: int = int(np.iinfo(INDEX_DTYPE).max)
INITIAL_CAPACITY: int = 16

# Binary "DAT" layout
DAT_VERSION_LEGACY: int = 1   # vertices, normals, tex coords, indices
DAT_VERSION: int = 2          # + attribute rates and RGB/RGBA colors
SUPPORTED_DAT_VERSIONS: Tuple[int, ...] = (DAT_VERSION_LEGACY, DAT_VERSION)
DAT_FLOAT_DTYPE = np.dtype("<f4")
DAT_INDEX_DTYPE = np.dtype("<u4")

# Text "OBJ" layout
# 9 significant digits round-trip any float32 exactly.
OBJ_FLOAT_FORMAT: str = "%.9g"
OBJ_ENCODING: str = "utf-8"
# Reading also accepts (and drops) a leading byte-order mark.
OBJ_READ_ENCODING: str = "utf-8-sig"
UTF8_BOM: bytes = b"\xef\xbb\xbf"

# Console logging (scripts)
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT: str = "%H:%M:%S"

# Bytes examined when guessing the format of an unnamed stream.
SNIFF_BYTES: int = 32

SUFFIX_FORMATS: Dict[str, str] = {
    ".obj": "obj",
    ".dat": "dat",
}
FORMATS: Tuple[str, ...] = ("obj", "dat")
