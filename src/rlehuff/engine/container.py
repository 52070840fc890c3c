"""Container v1 and the RLE -> Huffman pipeline.

Layout:
  MAGIC "RHC" | VER u8 | FLAGS u8 | varint(original_len)
  [RUN_WIDTH u8]   if F_RLE
  [CRC32 u32 BE]   if F_CHECKSUM
  TREE             pre-order, byte-aligned      (absent if F_EMPTY)
  varint(bit_count)                             (absent if F_EMPTY)
  PAYLOAD          ceil(bit_count / 8) bytes    (absent if F_EMPTY)

IMPORTANT: the layout is pinned by golden vectors in tests/test_container_vectors.py.
Any change must bump VER_V1, never alter it silently.
"""

from __future__ import annotations

import zlib
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from rlehuff.core.bitio import pack_codes, unpack_symbols
from rlehuff.core.huffman import (
    HuffmanNode,
    build_code_table,
    build_freq_table,
    build_huffman_tree,
    deserialize_tree,
    serialize_tree,
)
from rlehuff.core.varint import dec_varint, enc_varint
from rlehuff.errors import (
    BadMagic,
    CorruptPayload,
    HashMismatch,
    MalformedHeader,
    RLEHuffError,
    TruncatedStream,
    UnsupportedVersion,
)
from rlehuff.layers import layer_for
from rlehuff.layers.rle import RUN_WIDTHS
from rlehuff.profile_spec import DEFAULT_PROFILE, CodecProfile

MAGIC = b"RHC"
VER_V1 = 1

# flags
F_EMPTY = 0x01
F_RLE = 0x02
F_CHECKSUM = 0x04
_KNOWN_FLAGS = F_EMPTY | F_RLE | F_CHECKSUM

EMPTY_STREAM = MAGIC + bytes([VER_V1, F_EMPTY]) + enc_varint(0)


class Stage(str, Enum):
    RLE_ENCODING = "rle-encoding"
    FREQUENCY_ANALYSIS = "frequency-analysis"
    TREE_BUILDING = "tree-building"
    CODE_DERIVATION = "code-derivation"
    HEADER_SERIALIZATION = "header-serialization"
    BIT_PACKING = "bit-packing"
    HEADER_PARSING = "header-parsing"
    BIT_UNPACKING = "bit-unpacking"
    RLE_EXPANSION = "rle-expansion"


@contextmanager
def _stage(stage: Stage) -> Iterator[None]:
    try:
        yield
    except RLEHuffError as e:
        if e.stage is None:
            e.stage = stage.value
        raise


def is_container(blob: bytes) -> bool:
    return len(blob) >= 5 and blob[:3] == MAGIC and blob[3] == VER_V1


@dataclass(frozen=True)
class StreamHeader:
    flags: int
    original_len: int
    run_width: int | None
    crc32: int | None
    tree: HuffmanNode | None
    bit_count: int
    payload_offset: int

    @property
    def is_empty(self) -> bool:
        return bool(self.flags & F_EMPTY)

    @property
    def has_rle(self) -> bool:
        return bool(self.flags & F_RLE)

    @property
    def has_checksum(self) -> bool:
        return bool(self.flags & F_CHECKSUM)


@dataclass(frozen=True)
class CompressStats:
    original_len: int
    intermediate_len: int
    n_runs: int | None
    distinct_symbols: int
    degenerate_alphabet: bool
    tree_len: int
    payload_bits: int
    compressed_len: int

    @property
    def ratio(self) -> float:
        if self.original_len == 0:
            return 0.0
        return self.compressed_len / self.original_len

    def as_dict(self) -> dict[str, Any]:
        return {
            "original_len": self.original_len,
            "intermediate_len": self.intermediate_len,
            "n_runs": self.n_runs,
            "distinct_symbols": self.distinct_symbols,
            "degenerate_alphabet": self.degenerate_alphabet,
            "tree_len": self.tree_len,
            "payload_bits": self.payload_bits,
            "compressed_len": self.compressed_len,
            "ratio": round(self.ratio, 6),
        }


def parse_header(blob: bytes) -> StreamHeader:
    """Validate the whole container framing and return its header fields."""
    blob = bytes(blob)
    if len(blob) < 3:
        raise TruncatedStream("container troppo corto")
    if blob[:3] != MAGIC:
        raise BadMagic("magic non valido")
    if len(blob) < 5:
        raise TruncatedStream("container troppo corto")
    ver = blob[3]
    if ver != VER_V1:
        raise UnsupportedVersion(f"versione container non supportata: {ver}")

    flags = blob[4]
    if flags & ~_KNOWN_FLAGS:
        raise MalformedHeader(f"flag sconosciuti: 0x{flags:02x}")

    original_len, idx = dec_varint(blob, 5)

    if flags & F_EMPTY:
        if flags != F_EMPTY:
            raise MalformedHeader("stream vuoto con flag aggiuntivi")
        if original_len != 0:
            raise MalformedHeader("stream vuoto con original_len != 0")
        if idx != len(blob):
            raise MalformedHeader("byte in eccesso dopo lo stream vuoto")
        return StreamHeader(
            flags=flags,
            original_len=0,
            run_width=None,
            crc32=None,
            tree=None,
            bit_count=0,
            payload_offset=idx,
        )

    if original_len == 0:
        raise MalformedHeader("original_len zero senza flag EMPTY")

    run_width = None
    if flags & F_RLE:
        if idx >= len(blob):
            raise TruncatedStream("run_width mancante")
        run_width = blob[idx]
        idx += 1
        if run_width not in RUN_WIDTHS:
            raise MalformedHeader(f"run_width non valido: {run_width}")

    crc = None
    if flags & F_CHECKSUM:
        if idx + 4 > len(blob):
            raise TruncatedStream("crc32 troncato")
        crc = int.from_bytes(blob[idx : idx + 4], "big")
        idx += 4

    tree, idx = deserialize_tree(blob, idx)
    bit_count, idx = dec_varint(blob, idx)
    if bit_count == 0:
        raise MalformedHeader("bit_count zero per uno stream non vuoto")

    need = (bit_count + 7) // 8
    have = len(blob) - idx
    if have < need:
        raise TruncatedStream(f"payload troncato: attesi {need} byte, presenti {have}")
    if have > need:
        raise MalformedHeader(f"{have - need} byte in eccesso dopo il payload")

    return StreamHeader(
        flags=flags,
        original_len=original_len,
        run_width=run_width,
        crc32=crc,
        tree=tree,
        bit_count=bit_count,
        payload_offset=idx,
    )


# -------------------
# Engine
# -------------------
@dataclass(frozen=True)
class Engine:
    """Stateless codec: holds only the (immutable) profile."""

    profile: CodecProfile = DEFAULT_PROFILE

    def _layer(self) -> Any:
        return layer_for(self.profile.rle, self.profile.run_width)

    def compress(self, data: bytes) -> bytes:
        blob, _ = self.compress_with_stats(data)
        return blob

    def compress_with_stats(self, data: bytes) -> tuple[bytes, CompressStats]:
        data = bytes(data)
        if not data:
            return EMPTY_STREAM, CompressStats(
                original_len=0,
                intermediate_len=0,
                n_runs=0 if self.profile.rle else None,
                distinct_symbols=0,
                degenerate_alphabet=False,
                tree_len=0,
                payload_bits=0,
                compressed_len=len(EMPTY_STREAM),
            )

        with _stage(Stage.RLE_ENCODING):
            symbols, layer_meta = self._layer().encode(data)
        with _stage(Stage.FREQUENCY_ANALYSIS):
            freq = build_freq_table(symbols)
        with _stage(Stage.TREE_BUILDING):
            root = build_huffman_tree(freq)
        with _stage(Stage.CODE_DERIVATION):
            codes = build_code_table(root)
        with _stage(Stage.HEADER_SERIALIZATION):
            flags = 0
            head = bytearray()
            head += enc_varint(len(data))
            if self.profile.rle:
                flags |= F_RLE
                head.append(self.profile.run_width)
            if self.profile.checksum:
                flags |= F_CHECKSUM
                head += zlib.crc32(data).to_bytes(4, "big")
            tree_b = serialize_tree(root)
        with _stage(Stage.BIT_PACKING):
            payload, bit_count = pack_codes(symbols, codes)

        blob = b"".join(
            [MAGIC, bytes([VER_V1, flags]), bytes(head), tree_b, enc_varint(bit_count), payload]
        )
        distinct = sum(1 for f in freq if f)
        stats = CompressStats(
            original_len=len(data),
            intermediate_len=len(symbols),
            n_runs=layer_meta.get("n_runs"),
            distinct_symbols=distinct,
            degenerate_alphabet=distinct == 1,
            tree_len=len(tree_b),
            payload_bits=bit_count,
            compressed_len=len(blob),
        )
        return blob, stats

    def decompress(self, blob: bytes) -> bytes:
        # Il profilo non serve in decode: l'header è autosufficiente.
        with _stage(Stage.HEADER_PARSING):
            hdr = parse_header(blob)
        if hdr.is_empty:
            return b""

        with _stage(Stage.BIT_UNPACKING):
            symbols = unpack_symbols(
                bytes(blob[hdr.payload_offset :]), hdr.bit_count, hdr.tree  # type: ignore[arg-type]
            )

        with _stage(Stage.RLE_EXPANSION):
            layer = layer_for(hdr.has_rle, hdr.run_width)
            data = layer.decode(symbols, {"run_width": hdr.run_width})
            if len(data) != hdr.original_len:
                raise CorruptPayload(
                    f"lunghezza decodificata {len(data)} != original_len {hdr.original_len}"
                )
            if hdr.crc32 is not None and zlib.crc32(data) != hdr.crc32:
                raise HashMismatch("crc32 dei dati decodificati non corrisponde")
        return data


def compress(data: bytes, profile: CodecProfile | None = None) -> bytes:
    return Engine(profile or DEFAULT_PROFILE).compress(data)


def decompress(blob: bytes) -> bytes:
    return Engine().decompress(blob)
