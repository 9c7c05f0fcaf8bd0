#!/usr/bin/env python3
"""
inspect_mesh.py

Print buffer counts, attribute flags and the bounding box of a mesh file.

Run:
    python scripts/inspect_mesh.py data/bunny.obj

Useful dev runs:
    python scripts/inspect_mesh.py data/bunny.dat --transform-scale 0.01
    python scripts/inspect_mesh.py data/cube.obj --validate --log-level DEBUG
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from meshcore import MeshError, TriMesh, read_mesh, setup_logging


def scale_matrix(s: float) -> np.ndarray:
    m = np.eye(4, dtype=np.float64)
    m[0, 0] = m[1, 1] = m[2, 2] = float(s)
    return m


def describe(mesh: TriMesh, transform: Optional[np.ndarray] = None) -> List[str]:
    lines = [f"{name:<12} {count}" for name, count in mesh.summary().items()]
    lines.append(
        "flags        "
        f"normals={mesh.has_normals()} rgb={mesh.has_colors_rgb()} "
        f"rgba={mesh.has_colors_rgba()} texcoords={mesh.has_tex_coords()}"
    )
    lines.append("rates        " + " ".join(f"{k}={v.value}" for k, v in mesh.rates.items()))

    box = mesh.calc_bounding_box(transform)
    if box.is_empty:
        lines.append("bbox         (empty)")
    else:
        lines.append(f"bbox.lower   {np.array2string(box.lower, precision=6)}")
        lines.append(f"bbox.upper   {np.array2string(box.upper, precision=6)}")
        lines.append(f"bbox.size    {np.array2string(box.size, precision=6)}")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Inspect an OBJ/DAT mesh file.")
    ap.add_argument("path", type=str, help="Mesh file (.obj or .dat)")
    ap.add_argument("--format", choices=["obj", "dat"], default=None, help="Override format detection")
    ap.add_argument("--transform-scale", type=float, default=None,
                    help="Report the bounding box under a uniform scale")
    ap.add_argument("--validate", action="store_true", help="Check triangle indices against the vertex count")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args(argv)

    setup_logging(args.log_level)

    path = Path(args.path)
    if not path.exists():
        print(f"[ERROR] Mesh file not found: {path}", file=sys.stderr)
        return 2

    try:
        mesh = read_mesh(path, format=args.format)
        if args.validate:
            mesh.validate()
    except MeshError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    transform = scale_matrix(args.transform_scale) if args.transform_scale is not None else None

    print(f"Mesh: {path}")
    for line in describe(mesh, transform):
        print("  " + line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
