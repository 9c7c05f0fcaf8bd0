from __future__ import annotations

import logging

import numpy as np

from ..config import VERTEX_DTYPE

logger = logging.getLogger(__name__)


def face_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """
    Un-normalized face normals (v1 - v0) x (v2 - v0), one row per triangle.
    Their length is twice the triangle area, so degenerate faces give zeros.
    """
    v = np.asarray(vertices, dtype=np.float64)
    a = v[triangles[:, 0]]
    b = v[triangles[:, 1]]
    c = v[triangles[:, 2]]
    return np.cross(b - a, c - a)


def recalculate_normals(vertices: np.ndarray, indices: np.ndarray, *, eps: float = 0.0) -> np.ndarray:
    """
    Smooth per-vertex normals for an indexed triangle mesh.

    Each face normal is added, un-normalized, to its three corner vertices, so
    larger faces weigh more and degenerate faces add nothing. The sums are then
    normalized. A vertex whose sum has length <= eps (unreferenced, or only
    touched by degenerate faces) gets (0, 0, 0).

    Caller must have validated `indices` (multiple of 3, all < len(vertices)).

    Returns:
        (N, 3) float32 array aligned with `vertices`.
    """
    v = np.asarray(vertices)
    tris = np.asarray(indices, dtype=np.int64).reshape(-1, 3)

    accum = np.zeros((v.shape[0], 3), dtype=np.float64)
    if tris.shape[0] > 0:
        fn = face_normals(v, tris)
        for corner in range(3):
            np.add.at(accum, tris[:, corner], fn)

    lengths = np.linalg.norm(accum, axis=1)
    valid = lengths > eps
    out = np.zeros_like(accum)
    out[valid] = accum[valid] / lengths[valid, None]

    n_zero = int((~valid).sum())
    if n_zero:
        logger.warning(
            "%d of %d vertices have no usable face area; their normals are set to zero.",
            n_zero, v.shape[0],
        )
    return out.astype(VERTEX_DTYPE)
