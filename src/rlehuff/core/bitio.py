"""Bit-level I/O.

Bits are written and read MSB-first. The writer pads the last byte with zero
bits; callers record how many bits are valid (``bit_count``) so the reader
never interprets padding as data.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Dict, Tuple

from rlehuff.errors import TruncatedStream

if TYPE_CHECKING:
    from rlehuff.core.huffman import HuffmanNode


class BitWriter:
    def __init__(self) -> None:
        self._out = bytearray()
        self._cur = 0
        self._nbits = 0  # bits pending in _cur (0..7)
        self.bit_count = 0

    def write_bit(self, bit: int) -> None:
        self._cur = (self._cur << 1) | (bit & 1)
        self._nbits += 1
        self.bit_count += 1
        if self._nbits == 8:
            self._out.append(self._cur)
            self._cur = 0
            self._nbits = 0

    def write_bits(self, value: int, length: int) -> None:
        """Write the low ``length`` bits of ``value``, most significant first."""
        if length < 0:
            raise ValueError("lunghezza negativa")
        for i in range(length - 1, -1, -1):
            self.write_bit((value >> i) & 1)

    def getvalue(self) -> bytes:
        """Return the packed bytes, zero-padding a partial last byte."""
        if self._nbits == 0:
            return bytes(self._out)
        return bytes(self._out) + bytes([self._cur << (8 - self._nbits)])


class BitReader:
    def __init__(self, buf: bytes, bit_limit: int | None = None) -> None:
        self._buf = bytes(buf)
        avail = len(self._buf) * 8
        self._limit = avail if bit_limit is None else int(bit_limit)
        if self._limit > avail:
            raise TruncatedStream(
                f"bitstream troncato: attesi {self._limit} bit, disponibili {avail}"
            )
        self.pos = 0

    @property
    def remaining(self) -> int:
        return self._limit - self.pos

    def read_bit(self) -> int:
        if self.pos >= self._limit:
            raise TruncatedStream("bitstream troncato")
        byte = self._buf[self.pos >> 3]
        bit = (byte >> (7 - (self.pos & 7))) & 1
        self.pos += 1
        return bit

    def read_bits(self, length: int) -> int:
        if self.pos + length > self._limit:
            raise TruncatedStream("bitstream troncato")
        val = 0
        for _ in range(length):
            val = (val << 1) | self.read_bit()
        return val

    def align(self) -> int:
        """Skip to the next byte boundary; return the skipped padding bits as an int."""
        pad = (-self.pos) % 8
        if pad == 0:
            return 0
        return self.read_bits(pad)


def pack_codes(symbols: Iterable[int], codes: Dict[int, str]) -> Tuple[bytes, int]:
    """symbols -> (payload, bit_count). The last byte is zero-padded."""
    # "0101" -> (0b0101, 4) once per symbol, not once per occurrence
    table = {sym: (int(code, 2), len(code)) for sym, code in codes.items()}
    out = bytearray()
    acc = 0
    nbits = 0  # bits pending in acc
    total = 0
    for sym in symbols:
        value, length = table[sym]
        acc = (acc << length) | value
        nbits += length
        total += length
        while nbits >= 8:
            nbits -= 8
            out.append((acc >> nbits) & 0xFF)
        acc &= (1 << nbits) - 1
    if nbits:
        out.append((acc << (8 - nbits)) & 0xFF)
    return bytes(out), total


def _step_byte(root: "HuffmanNode", node: "HuffmanNode", byte: int) -> Tuple[bytes, "HuffmanNode"]:
    """Feed 8 bits from ``node``: (symbols completed, node reached)."""
    emitted = bytearray()
    for i in range(7, -1, -1):
        node = node.right if (byte >> i) & 1 else node.left  # type: ignore[assignment]
        if node.is_leaf:
            emitted.append(node.symbol)  # type: ignore[arg-type]
            node = root
    return bytes(emitted), node


def unpack_symbols(payload: bytes, bit_count: int, root: "HuffmanNode") -> bytes:
    """
    Decode exactly ``bit_count`` bits against ``root``.

    Whole bytes go through a (node, byte) -> (symbols, node) table filled on
    first use; the tail bits of the last byte are walked one by one.
    A code cut short by the end of the bits is a TruncatedStream.
    """
    payload = bytes(payload)
    avail = len(payload) * 8
    if bit_count > avail:
        raise TruncatedStream(f"bitstream troncato: attesi {bit_count} bit, disponibili {avail}")

    full, tail = divmod(bit_count, 8)
    steps: Dict[Tuple[int, int], Tuple[bytes, "HuffmanNode"]] = {}
    out = bytearray()
    node = root
    for byte in payload[:full]:
        key = (id(node), byte)
        hit = steps.get(key)
        if hit is None:
            hit = steps[key] = _step_byte(root, node, byte)
        emitted, node = hit
        out += emitted

    if tail:
        r = BitReader(payload[full : full + 1], tail)
        while r.remaining:
            node = node.right if r.read_bit() else node.left  # type: ignore[assignment]
            if node.is_leaf:
                out.append(node.symbol)  # type: ignore[arg-type]
                node = root

    if node is not root:
        raise TruncatedStream("bitstream terminato a metà di un codice")
    return bytes(out)
