from __future__ import annotations

import pytest

from rlehuff.errors import MalformedRun, RunLengthOverflow
from rlehuff.layers.rle import (
    LayerRLE,
    RLERun,
    encode_runs,
    expand_runs,
    max_run,
    pack_runs,
    unpack_runs,
)


def test_runs_aaaabbbcc() -> None:
    assert encode_runs(b"aaaabbbcc") == [
        RLERun(ord("a"), 4),
        RLERun(ord("b"), 3),
        RLERun(ord("c"), 2),
    ]


def test_runs_empty() -> None:
    assert encode_runs(b"") == []
    assert pack_runs([]) == b""
    assert expand_runs(unpack_runs(b"")) == b""


def test_300_identical_bytes_split_255_45() -> None:
    runs = encode_runs(b"\x07" * 300, run_width=8)
    assert runs == [RLERun(7, 255), RLERun(7, 45)]
    assert pack_runs(runs, 8) == b"\x07\xff\x07\x2d"


def test_16_bit_counter_split() -> None:
    runs = encode_runs(b"z" * 70000, run_width=16)
    assert [r.count for r in runs] == [65535, 4465]
    assert pack_runs(runs, 16) == b"z\xff\xffz\x11\x71"


def test_no_run_exceeds_max() -> None:
    data = b"a" * 1000 + b"b" + b"c" * 511 + b"a" * 256
    for width in (8, 16):
        runs = encode_runs(data, run_width=width)
        assert all(1 <= r.count <= max_run(width) for r in runs)
        assert expand_runs(runs) == data


def test_max_run_values() -> None:
    assert max_run(8) == 255
    assert max_run(16) == 65535
    with pytest.raises(ValueError, match="run_width"):
        max_run(12)


def test_pack_unpack_roundtrip() -> None:
    runs = [RLERun(0, 1), RLERun(255, 255), RLERun(9, 3)]
    assert unpack_runs(pack_runs(runs, 8), 8) == runs
    assert unpack_runs(pack_runs(runs, 16), 16) == runs


def test_pack_overflow_rejected() -> None:
    with pytest.raises(RunLengthOverflow):
        pack_runs([RLERun(1, 256)], 8)


def test_pack_zero_count_rejected() -> None:
    with pytest.raises(MalformedRun):
        pack_runs([RLERun(1, 0)], 8)


def test_unpack_zero_count() -> None:
    with pytest.raises(MalformedRun, match="count zero"):
        unpack_runs(b"a\x02b\x00", 8)


def test_unpack_truncated_mid_pair() -> None:
    with pytest.raises(MalformedRun, match="troncato"):
        unpack_runs(b"a\x02b", 8)
    with pytest.raises(MalformedRun, match="troncato"):
        unpack_runs(b"a\x00\x02b\x00", 16)


def test_layer_rle_roundtrip() -> None:
    layer = LayerRLE(run_width=8)
    symbols, meta = layer.encode(b"aaaabbbcc")
    assert symbols == b"a\x04b\x03c\x02"
    assert meta == {"run_width": 8, "n_runs": 3}
    assert layer.decode(symbols, meta) == b"aaaabbbcc"
