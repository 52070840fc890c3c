"""rlehuff: run-length pre-pass + Huffman entropy coding for byte streams."""

from __future__ import annotations

from rlehuff.engine.container import Engine, compress, decompress
from rlehuff.profile_spec import CodecProfile

__version__ = "0.1.0"

__all__ = ["CodecProfile", "Engine", "__version__", "compress", "decompress"]
