#!/usr/bin/env python3
"""
convert_mesh.py

Convert a mesh between the OBJ text format and the binary DAT format.

Behavior:
- Formats come from the file suffixes unless --in-format / --out-format is given.
- --recalculate-normals replaces the normals with smooth per-vertex normals
  before writing.
- --verify reads the written file back and compares every buffer
  (exactly for DAT, within --atol for OBJ).

Run:
    python scripts/convert_mesh.py data/bunny.obj data/bunny.dat

Useful dev runs:
    python scripts/convert_mesh.py data/bunny.obj out/bunny.dat --recalculate-normals --verify
    python scripts/convert_mesh.py data/bunny.dat out/bunny.obj --verify --atol 1e-6
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from meshcore import MeshError, read_mesh, setup_logging, write_mesh
from meshcore.io import resolve_format

logger = logging.getLogger("meshcore.scripts.convert_mesh")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Convert meshes between OBJ and DAT.")
    ap.add_argument("src", type=str, help="Input mesh (.obj or .dat)")
    ap.add_argument("dst", type=str, help="Output mesh (.obj or .dat)")
    ap.add_argument("--in-format", choices=["obj", "dat"], default=None)
    ap.add_argument("--out-format", choices=["obj", "dat"], default=None)
    ap.add_argument("--recalculate-normals", action="store_true")
    ap.add_argument("--verify", action="store_true", help="Re-read the output and compare buffers")
    ap.add_argument("--atol", type=float, default=0.0, help="Float tolerance for --verify on OBJ output")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args(argv)

    setup_logging(args.log_level)

    src = Path(args.src)
    dst = Path(args.dst)
    if not src.exists():
        print(f"[ERROR] Input mesh not found: {src}", file=sys.stderr)
        return 2

    t0 = time.time()
    try:
        mesh = read_mesh(src, format=args.in_format)
        logger.info("Read %s: %s", src, mesh.summary())

        if args.recalculate_normals:
            mesh.recalculate_normals()
            logger.info("Recalculated %d normals", len(mesh.normals))

        dst.parent.mkdir(parents=True, exist_ok=True)
        write_mesh(mesh, dst, format=args.out_format)
        logger.info("Wrote %s (%.3fs)", dst, time.time() - t0)

        if args.verify:
            out_fmt = resolve_format(dst, args.out_format)
            back = read_mesh(dst, format=out_fmt)
            atol = args.atol if out_fmt == "obj" else 0.0
            if not mesh.buffers_equal(back, atol=atol):
                print(f"[ERROR] Verification failed: {dst} does not reproduce {src}", file=sys.stderr)
                return 1
            logger.info("Verified %s", dst)
    except MeshError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
