from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from rlehuff.errors import MalformedRun, RunLengthOverflow

RUN_WIDTHS: tuple[int, ...] = (8, 16)


@dataclass(frozen=True)
class RLERun:
    value: int
    count: int


def max_run(run_width: int) -> int:
    if run_width not in RUN_WIDTHS:
        raise ValueError(f"run_width non supportato: {run_width} (ammessi {RUN_WIDTHS})")
    return (1 << run_width) - 1


def encode_runs(data: bytes, run_width: int = 8) -> list[RLERun]:
    """Maximal runs, split when they exceed the counter: 300 x 'a' @8 bit -> 255 + 45."""
    limit = max_run(run_width)
    runs: list[RLERun] = []
    if not data:
        return runs

    cur = data[0]
    count = 1
    for b in data[1:]:
        if b == cur and count < limit:
            count += 1
        else:
            runs.append(RLERun(cur, count))
            cur = b
            count = 1
    runs.append(RLERun(cur, count))
    return runs


def pack_runs(runs: Iterable[RLERun], run_width: int = 8) -> bytes:
    """(value u8, count big-endian u8/u16) per run."""
    limit = max_run(run_width)
    nbytes = run_width // 8
    out = bytearray()
    for r in runs:
        if r.count <= 0:
            raise MalformedRun(f"rle: count non valido ({r.count})")
        if r.count > limit:
            raise RunLengthOverflow(f"rle: run di {r.count} > max {limit} per contatore a {run_width} bit")
        out.append(r.value)
        out += r.count.to_bytes(nbytes, "big")
    return bytes(out)


def unpack_runs(blob: bytes, run_width: int = 8) -> list[RLERun]:
    max_run(run_width)
    pair = 1 + run_width // 8
    if len(blob) % pair:
        raise MalformedRun("rle: stream troncato a metà di una coppia")

    runs: list[RLERun] = []
    for idx in range(0, len(blob), pair):
        count = int.from_bytes(blob[idx + 1 : idx + pair], "big")
        if count == 0:
            raise MalformedRun(f"rle: count zero all'offset {idx}")
        runs.append(RLERun(blob[idx], count))
    return runs


def expand_runs(runs: Iterable[RLERun]) -> bytes:
    out = bytearray()
    for r in runs:
        if r.count <= 0:
            raise MalformedRun(f"rle: count non valido ({r.count})")
        out += bytes([r.value]) * r.count
    return bytes(out)


@dataclass(frozen=True)
class LayerRLE:
    """
    Layer lossless: byte -> coppie (valore, contatore).
    - symbols: bytes con le coppie impacchettate (pack_runs)
    - layer_meta: {"run_width": int, "n_runs": int}
    """

    run_width: int = 8
    id: str = "rle"

    def encode(self, data: bytes) -> tuple[bytes, dict[str, Any]]:
        runs = encode_runs(data, self.run_width)
        return pack_runs(runs, self.run_width), {"run_width": self.run_width, "n_runs": len(runs)}

    def decode(self, symbols: bytes, layer_meta: dict[str, Any]) -> bytes:
        width = int(layer_meta.get("run_width", self.run_width))
        return expand_runs(unpack_runs(symbols, width))
