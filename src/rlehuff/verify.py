"""Verification helpers.

  - verify: full decode of a container file + length and CRC32 checks
  - inspect: header fields only (no payload decode)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from rlehuff.core.huffman import build_code_table
from rlehuff.engine.container import Engine, parse_header
from rlehuff.errors import UsageError


def _read(path: Path) -> bytes:
    p = Path(path)
    if not p.is_file():
        raise UsageError(f"file non trovato: {p}")
    return p.read_bytes()


def verify_container_file(path: Path) -> int:
    """Decode the whole container; return the restored length. Raises on any defect."""
    blob = _read(path)
    data = Engine().decompress(blob)
    return len(data)


def inspect_container_file(path: Path) -> dict[str, Any]:
    blob = _read(path)
    hdr = parse_header(blob)
    info: dict[str, Any] = {
        "container_len": len(blob),
        "empty": hdr.is_empty,
        "original_len": hdr.original_len,
        "rle": hdr.has_rle,
        "run_width": hdr.run_width,
        "checksum": hdr.has_checksum,
        "crc32": f"{hdr.crc32:08x}" if hdr.has_checksum else None,
        "payload_bits": hdr.bit_count,
        "payload_offset": hdr.payload_offset,
    }
    if hdr.tree is not None:
        codes = build_code_table(hdr.tree)
        info["n_symbols"] = len(codes)
        info["code_lengths"] = {f"{sym:02x}": len(codes[sym]) for sym in sorted(codes)}
    return info
