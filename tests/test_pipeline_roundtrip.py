from __future__ import annotations

import os
import random

import pytest

from rlehuff import CodecProfile, Engine, compress, decompress

PROFILES = [
    CodecProfile(name="rle8"),
    CodecProfile(name="rle16", run_width=16),
    CodecProfile(name="plain", rle=False),
    CodecProfile(name="rle8-nocrc", checksum=False),
    CodecProfile(name="plain-nocrc", rle=False, checksum=False),
]


def _samples() -> list[bytes]:
    rng = random.Random(1234)
    return [
        b"",
        b"\x00",
        b"aaaabbbcc",
        b"\x41" * 10,
        b"\x07" * 300,
        b"z" * 70000,
        bytes(range(256)),
        bytes(range(256)) * 3,
        b"ab" * 500,
        bytes(rng.randrange(4) for _ in range(5000)),
        bytes(rng.choice(b"\x00\x00\x00\x00\xff") for _ in range(3000)),
        os.urandom(2048),
    ]


@pytest.mark.parametrize("profile", PROFILES, ids=lambda p: p.name)
def test_roundtrip_all_samples(profile: CodecProfile) -> None:
    eng = Engine(profile)
    for data in _samples():
        assert eng.decompress(eng.compress(data)) == data


def test_module_level_helpers() -> None:
    data = b"hello hello hello" * 20
    assert decompress(compress(data)) == data


def test_aaaabbbcc_scenario() -> None:
    blob, stats = Engine().compress_with_stats(b"aaaabbbcc")
    assert stats.n_runs == 3
    assert stats.intermediate_len == 6
    assert stats.distinct_symbols == 6
    assert stats.degenerate_alphabet is False
    assert decompress(blob) == b"aaaabbbcc"


def test_single_distinct_byte_is_degenerate_not_error() -> None:
    blob, stats = Engine(CodecProfile(rle=False)).compress_with_stats(b"\x41" * 10)
    assert stats.degenerate_alphabet is True
    assert stats.payload_bits == 10
    assert decompress(blob) == b"\x41" * 10


def test_300_identical_bytes_two_runs() -> None:
    _, stats = Engine(CodecProfile(run_width=8)).compress_with_stats(b"\x07" * 300)
    assert stats.n_runs == 2
    _, stats16 = Engine(CodecProfile(run_width=16)).compress_with_stats(b"\x07" * 300)
    assert stats16.n_runs == 1


def test_empty_stats() -> None:
    blob, stats = Engine().compress_with_stats(b"")
    assert stats.original_len == 0
    assert stats.compressed_len == len(blob)
    assert stats.ratio == 0.0


def test_stats_as_dict_keys() -> None:
    _, stats = Engine().compress_with_stats(b"abcabcabc")
    d = stats.as_dict()
    assert d["original_len"] == 9
    assert d["compressed_len"] > 0
    assert set(d) >= {"payload_bits", "tree_len", "n_runs", "ratio"}


def test_runs_compress_well() -> None:
    data = b"\x00" * 10000 + b"\xff" * 10000
    blob = compress(data)
    assert len(blob) < 200
    assert decompress(blob) == data
