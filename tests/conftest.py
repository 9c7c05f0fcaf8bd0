"""Pytest configuration and shared mesh fixtures."""
import logging
import sys
from pathlib import Path

import numpy as np
import pytest

# Make the repo root importable without installing.
repo_root = Path(__file__).resolve().parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from meshcore import TriMesh  # noqa: E402


@pytest.fixture
def triangle_mesh():
    """Single triangle in the z=0 plane, counter-clockwise seen from +z."""
    mesh = TriMesh()
    mesh.append_vertices(np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
    ], dtype=np.float32))
    mesh.append_triangle(0, 1, 2)
    return mesh


@pytest.fixture
def full_mesh():
    """Quad (two triangles) carrying every attribute buffer."""
    mesh = TriMesh()
    mesh.append_vertices(np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
    ], dtype=np.float32))
    mesh.append_triangle(0, 1, 2)
    mesh.append_triangle(0, 2, 3)
    mesh.append_colors_rgb(np.array([
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
        [0.25, 0.5, 0.75],
    ], dtype=np.float32))
    mesh.append_colors_rgba(np.array([
        [1.0, 0.0, 0.0, 1.0],
        [0.0, 1.0, 0.0, 0.5],
        [0.0, 0.0, 1.0, 0.25],
        [0.1, 0.2, 0.3, 0.4],
    ], dtype=np.float32))
    mesh.append_tex_coords(np.array([
        [0.0, 0.0],
        [1.0, 0.0],
        [1.0, 1.0],
        [0.0, 1.0],
    ], dtype=np.float32))
    mesh.recalculate_normals()
    return mesh


@pytest.fixture(autouse=True)
def reset_meshcore_logging():
    """Scripts call setup_logging(); drop their handlers after each test."""
    yield
    logger = logging.getLogger("meshcore")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
