from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True, eq=False)
class BoundingBox:
    """
    Axis-aligned box (2D or 3D).

    lower: (D,) float64 per-axis minimum
    upper: (D,) float64 per-axis maximum

    The empty box has lower=+inf and upper=-inf on every axis, so that
    including any point yields exactly that point.
    Boxes compare equal when both corners match exactly (all empty boxes of
    one dimension are equal). They are not hashable.
    """
    lower: np.ndarray
    upper: np.ndarray

    @classmethod
    def empty(cls, dim: int = 3) -> "BoundingBox":
        return cls(
            lower=np.full(dim, np.inf, dtype=np.float64),
            upper=np.full(dim, -np.inf, dtype=np.float64),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundingBox):
            return NotImplemented
        return bool(
            np.array_equal(self.lower, other.lower) and np.array_equal(self.upper, other.upper)
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def dim(self) -> int:
        return int(self.lower.shape[0])

    @property
    def is_empty(self) -> bool:
        return bool(np.any(self.lower > self.upper))

    @property
    def size(self) -> np.ndarray:
        if self.is_empty:
            return np.zeros(self.dim, dtype=np.float64)
        return self.upper - self.lower

    @property
    def center(self) -> np.ndarray:
        if self.is_empty:
            raise ValueError("Empty bounding box has no center.")
        return 0.5 * (self.lower + self.upper)

    def include(self, points) -> "BoundingBox":
        """Return the smallest box containing this box and `points` (N, D)."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, self.dim)
        if pts.shape[0] == 0:
            return self
        return BoundingBox(
            lower=np.minimum(self.lower, pts.min(axis=0)),
            upper=np.maximum(self.upper, pts.max(axis=0)),
        )

    def contains(self, point) -> bool:
        p = np.asarray(point, dtype=np.float64).reshape(self.dim)
        return bool(np.all(p >= self.lower) and np.all(p <= self.upper))


def apply_affine(points: np.ndarray, transform) -> np.ndarray:
    """
    Transform (N, D) points by a (D+1, D+1) affine matrix (column-vector
    convention, translation in the last column). The projective row is ignored.
    """
    pts = np.asarray(points, dtype=np.float64)
    dim = pts.shape[1]
    m = np.asarray(transform, dtype=np.float64)
    if m.shape != (dim + 1, dim + 1):
        raise ValueError(f"Expected a ({dim + 1}, {dim + 1}) transform, got {m.shape}")
    return pts @ m[:dim, :dim].T + m[:dim, dim]


def calc_bounding_box(vertices: np.ndarray, transform: Optional[np.ndarray] = None) -> BoundingBox:
    """
    Minimal axis-aligned box around `vertices` (N, D).

    With `transform`, every vertex is mapped through it first; the input
    array is never modified. No vertices -> BoundingBox.empty(D).
    """
    v = np.asarray(vertices)
    if v.ndim != 2:
        raise ValueError(f"Invalid vertices array shape: {v.shape}")
    dim = int(v.shape[1])
    if v.shape[0] == 0:
        return BoundingBox.empty(dim)

    pts = apply_affine(v, transform) if transform is not None else v.astype(np.float64)
    return BoundingBox(lower=pts.min(axis=0), upper=pts.max(axis=0))
