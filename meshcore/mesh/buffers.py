from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ..config import INDEX_DTYPE, INITIAL_CAPACITY, MAX_INDEX, VERTEX_DTYPE


class AttributeRate(str, Enum):
    """Which element an attribute buffer is aligned with."""
    PER_VERTEX = "vertex"
    PER_FACE = "face"


class AttributeBuffer:
    """
    Growable, contiguous numpy store for one mesh attribute.

    Rows are appended with amortized O(1) cost (capacity doubles when full).
    `data` is a view of the filled rows: it shares memory with the store, so
    writes through it are writes to the mesh.

    Notes:
      - width=None gives a flat 1-D buffer (used for indices).
      - A view taken before a growth keeps pointing at the old storage; take a
        fresh view after appending.
    """

    def __init__(self, width: Optional[int], dtype: np.dtype = VERTEX_DTYPE) -> None:
        self.width = width
        self.dtype = np.dtype(dtype)
        self._size = 0
        self._store = np.empty(self._shape(INITIAL_CAPACITY), dtype=self.dtype)

    def _shape(self, rows: int) -> Tuple[int, ...]:
        return (rows,) if self.width is None else (rows, self.width)

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return int(self._store.shape[0])

    @property
    def data(self) -> np.ndarray:
        return self._store[: self._size]

    def readonly(self) -> np.ndarray:
        view = self._store[: self._size]
        view.flags.writeable = False
        return view

    # -------------------------
    # Mutation
    # -------------------------
    def _reserve(self, rows: int) -> None:
        if rows <= self.capacity:
            return
        new_cap = max(self.capacity, 1)
        while new_cap < rows:
            new_cap *= 2
        grown = np.empty(self._shape(new_cap), dtype=self.dtype)
        grown[: self._size] = self._store[: self._size]
        self._store = grown

    def _coerce(self, rows) -> np.ndarray:
        arr = np.asarray(rows)
        if self.width is None:
            arr = arr.reshape(-1)
        elif arr.size == 0:
            # zero-count bulk append
            arr = arr.reshape(0, self.width)
        else:
            if arr.ndim == 1 and arr.size == self.width:
                arr = arr.reshape(1, self.width)
            if arr.ndim != 2 or arr.shape[1] != self.width:
                raise ValueError(
                    f"Expected rows of width {self.width}, got shape {arr.shape}"
                )
        return arr

    def append(self, row) -> None:
        self.extend(self._coerce(row))

    def extend(self, rows) -> None:
        arr = self._coerce(rows)
        n = int(arr.shape[0])
        if n == 0:
            return
        self._reserve(self._size + n)
        self._store[self._size: self._size + n] = arr
        self._size += n

    def replace(self, rows) -> None:
        self.clear()
        self.extend(rows)

    def clear(self) -> None:
        self._size = 0
        self._store = np.empty(self._shape(INITIAL_CAPACITY), dtype=self.dtype)

    def copy(self) -> "AttributeBuffer":
        out = AttributeBuffer(self.width, self.dtype)
        out.extend(self.data)
        return out


class IndexBuffer(AttributeBuffer):
    """Flat uint32 index store; rejects values an unsigned 32-bit slot cannot hold."""

    def __init__(self) -> None:
        super().__init__(None, INDEX_DTYPE)

    def _coerce(self, rows) -> np.ndarray:
        arr = np.asarray(rows).reshape(-1)
        if arr.size == 0:
            return arr.astype(self.dtype)
        if arr.dtype.kind == "f":
            if not np.all(np.isfinite(arr)) or not np.all(arr == np.floor(arr)):
                raise ValueError("Indices must be whole numbers.")
        elif arr.dtype.kind not in "iu":
            raise ValueError(f"Indices must be integers, got dtype {arr.dtype}")
        if arr.min() < 0:
            raise ValueError(f"Indices must be non-negative, got {int(arr.min())}")
        if arr.max() > MAX_INDEX:
            raise ValueError(f"Index {int(arr.max())} does not fit in {self.dtype}")
        return arr.astype(self.dtype)

    def copy(self) -> "IndexBuffer":
        out = IndexBuffer()
        out.extend(self.data)
        return out
