"""Run the import-boundary checks outside pytest (pre-commit, CI shell step).

Exit codes: 0 ok, 2 boundary violated, 3 harness failure.
"""

from __future__ import annotations

import sys
from pathlib import Path


def _load_checks(test_path: Path) -> list[tuple[str, object]]:
    ns: dict[str, object] = {"__file__": str(test_path), "__name__": "arch_boundaries"}
    exec(compile(test_path.read_text(encoding="utf-8"), str(test_path), "exec"), ns, ns)
    return sorted((k, v) for k, v in ns.items() if k.startswith("test_") and callable(v))


def main() -> int:
    repo_root = Path(__file__).resolve().parents[1]
    test_path = repo_root / "tests" / "test_arch_boundaries.py"
    if not test_path.is_file():
        print(f"ERROR: {test_path} not found.", file=sys.stderr)
        return 3

    try:
        checks = _load_checks(test_path)
    except Exception as e:
        print(f"ERROR: cannot load checks: {e}", file=sys.stderr)
        return 3
    if not checks:
        print("ERROR: no test_* checks found.", file=sys.stderr)
        return 3

    failed = 0
    for name, fn in checks:
        try:
            fn()  # type: ignore[operator]
        except AssertionError as e:
            failed += 1
            print(f"FAIL {name}\n{e}", file=sys.stderr)
            continue
        except Exception as e:
            print(f"ERROR {name}: unexpected failure: {e}", file=sys.stderr)
            return 3
        print(f"ok   {name}")

    if failed:
        return 2
    print("OK: architecture boundaries respected.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
