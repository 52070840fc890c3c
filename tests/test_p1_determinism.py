from __future__ import annotations

import hashlib
import os
import subprocess
import sys
from pathlib import Path

import pytest

from rlehuff import CodecProfile, Engine

pytestmark = pytest.mark.p1


def _tie_heavy() -> bytes:
    # ogni simbolo compare lo stesso numero di volte: solo il tie-break decide l'albero
    return bytes(range(256)) * 4 + bytes(range(255, -1, -1)) * 4


@pytest.mark.parametrize(
    "profile",
    [CodecProfile(), CodecProfile(run_width=16), CodecProfile(rle=False)],
    ids=["rle8", "rle16", "plain"],
)
def test_same_input_same_bytes(profile: CodecProfile) -> None:
    data = _tie_heavy() + b"aaaabbbcc" * 11
    a = Engine(profile).compress(data)
    b = Engine(profile).compress(bytes(bytearray(data)))
    assert a == b


def test_determinism_across_processes(tmp_path: Path) -> None:
    """Hash seed randomization must not leak into the tree shape."""
    inp = tmp_path / "in.bin"
    inp.write_bytes(_tie_heavy())

    digests = set()
    for seed in ("0", "1", "12345"):
        out = tmp_path / f"out_{seed}.rhc"
        cp = subprocess.run(
            [
                sys.executable,
                "-c",
                "from rlehuff.cli import main; raise SystemExit(main())",
                "file",
                "compress",
                str(inp),
                str(out),
            ],
            text=True,
            capture_output=True,
            env={"PYTHONHASHSEED": seed, **_inherited_env()},
        )
        assert cp.returncode == 0, (cp.stdout, cp.stderr)
        digests.add(hashlib.sha256(out.read_bytes()).hexdigest())

    assert len(digests) == 1


def _inherited_env() -> dict[str, str]:
    return {k: v for k, v in os.environ.items() if k != "PYTHONHASHSEED"}
