#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import time
import os
import sys

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `duoqueen/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from duoqueen.engine.perft import divide, perft
from duoqueen.engine.position import Position, start_fen


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument("--fen", type=str, default=None, help="FEN string (default: startpos)")
    parser.add_argument(
        "--rows", type=int, default=8, choices=(8, 9), help="Start position height (default: 8)"
    )
    parser.add_argument("--depth", type=int, default=2, help="Perft depth (default: 2)")
    parser.add_argument("--divide", action="store_true", help="Print per-move counts")
    args = parser.parse_args()

    pos = Position.from_fen(args.fen or start_fen(args.rows))
    start = time.perf_counter()
    if args.divide:
        counts = divide(pos, args.depth)
        for mv, n in sorted(counts.items()):
            print(f"{mv}: {n}")
        nodes = sum(counts.values())
    else:
        nodes = perft(pos, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
