#!/usr/bin/env python3
"""Render docs/exit_codes.md from rlehuff.errors.EXIT_CODES.

  python scripts/gen_exit_codes_md.py          # rewrite the doc
  python scripts/gen_exit_codes_md.py --check  # exit 1 if the doc is stale
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Generate docs/exit_codes.md")
    ap.add_argument("--check", action="store_true", help="Only compare, do not write")
    args = ap.parse_args(argv)

    repo = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo / "src"))

    from rlehuff.errors import render_exit_codes_markdown  # noqa: E402

    out = repo / "docs" / "exit_codes.md"
    text = render_exit_codes_markdown()

    if args.check:
        current = out.read_text(encoding="utf-8") if out.is_file() else ""
        if current != text:
            print(f"[rlehuff] {out} is stale; rerun without --check", file=sys.stderr)
            return 1
        print(f"[rlehuff] {out} up to date")
        return 0

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    print(f"[rlehuff] wrote {out} ({len(text.splitlines())} lines)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
