from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LayerPlain:
    """No pre-pass: Huffman codes the input bytes directly (profile rle=false)."""

    id: str = "plain"

    def encode(self, data: bytes) -> tuple[bytes, dict[str, Any]]:
        return bytes(data), {"n_runs": None}

    def decode(self, symbols: bytes, layer_meta: dict[str, Any]) -> bytes:
        return bytes(symbols)
