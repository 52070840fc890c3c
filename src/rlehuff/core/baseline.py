"""Reference byte codecs used as a yardstick in size reports.

They are not part of the rlehuff container; the report just prints their
output size next to ours for the same buffer.
"""

from __future__ import annotations

import zlib
from dataclasses import dataclass

from rlehuff.errors import MissingResource

try:
    import zstandard as zstd  # type: ignore
except ImportError:  # pragma: no cover
    zstd = None


@dataclass(frozen=True)
class CodecZlib:
    """zlib/DEFLATE (no external deps)."""

    level: int = 9
    codec_id: str = "zlib"

    def __post_init__(self) -> None:
        if not (0 <= self.level <= 9):
            raise ValueError(f"zlib level must be 0..9, got {self.level}")

    def compress(self, data: bytes) -> bytes:
        return zlib.compress(bytes(data), self.level)

    def decompress(self, comp: bytes) -> bytes:
        return zlib.decompress(bytes(comp))


@dataclass(frozen=True)
class CodecZstd:
    level: int = 19
    codec_id: str = "zstd"

    @staticmethod
    def available() -> bool:
        return zstd is not None

    def _require(self) -> None:
        if zstd is None:
            raise MissingResource(
                "Modulo 'zstandard' non disponibile. Installa con: python3 -m pip install zstandard"
            )

    def compress(self, data: bytes) -> bytes:
        self._require()
        return zstd.ZstdCompressor(level=int(self.level)).compress(bytes(data))

    def decompress(self, comp: bytes) -> bytes:
        self._require()
        return zstd.ZstdDecompressor().decompress(bytes(comp))


def baseline_sizes(data: bytes) -> dict[str, int]:
    """codec_id -> compressed size; zstd is skipped when the module is missing."""
    out = {"zlib": len(CodecZlib().compress(data))}
    if CodecZstd.available():
        out["zstd"] = len(CodecZstd().compress(data))
    return out
