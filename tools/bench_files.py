#!/usr/bin/env python3
"""Per-file benchmark: compress -> decompress -> compare, with timing and sizes.

Usage example:
  python tools/bench_files.py data/*.bin --profile @profiles/wide.json --iters 3

Notes:
- Uses internal APIs (no subprocess). Run inside repo venv.
- One JSON line per file per iteration, then a summary line.
"""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path
from typing import Any


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="bench_files.py", description="rlehuff file benchmark")
    ap.add_argument("inputs", type=Path, nargs="+")
    ap.add_argument("--profile", default=None, help="Codec profile (@file.json or inline JSON)")
    ap.add_argument("--iters", type=int, default=1)
    ns = ap.parse_args(argv)

    from rlehuff.core.baseline import baseline_sizes
    from rlehuff.engine.container import Engine
    from rlehuff.profile_spec import DEFAULT_PROFILE, load_profile_spec

    profile = load_profile_spec(ns.profile) if ns.profile else DEFAULT_PROFILE
    engine = Engine(profile)

    rows: list[dict[str, Any]] = []
    t0_all = time.perf_counter()

    for i in range(int(ns.iters)):
        for inp in ns.inputs:
            data = inp.read_bytes()

            t0 = time.perf_counter()
            blob, stats = engine.compress_with_stats(data)
            t_comp = time.perf_counter() - t0

            t1 = time.perf_counter()
            back = engine.decompress(blob)
            t_decomp = time.perf_counter() - t1

            row = {
                "iter": i + 1,
                "file": str(inp),
                "profile": profile.name,
                "times_sec": {"compress": t_comp, "decompress": t_decomp},
                "stats": stats.as_dict(),
                "baselines": baseline_sizes(data),
                "roundtrip_ok": back == data,
            }
            rows.append(row)
            print(json.dumps(row, ensure_ascii=False))
            if back != data:
                raise SystemExit(f"roundtrip non lossless: {inp}")

    total = time.perf_counter() - t0_all
    summary = {
        "schema": "rlehuff.bench_files.v1",
        "rows": len(rows),
        "wall_total_sec": total,
        "bytes_in": sum(r["stats"]["original_len"] for r in rows),
        "bytes_out": sum(r["stats"]["compressed_len"] for r in rows),
    }
    print(json.dumps(summary, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
