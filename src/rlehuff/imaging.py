"""Image collaborator (OpenCV).

The codec never parses image formats: this module turns image files into an
opaque pixel buffer and writes the lossy/lossless renditions used in reports.
"""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np

from rlehuff.errors import ImageReadError, UsageError

PNG_COMPRESSION_DEFAULT = 3


def decode_image(path: str | Path) -> np.ndarray:
    """Read an image as a BGR uint8 array."""
    p = Path(path)
    if not p.is_file():
        raise ImageReadError(f"immagine non trovata: {p}")
    img = cv2.imread(str(p), cv2.IMREAD_COLOR)
    if img is None or img.size == 0:
        raise ImageReadError(f"OpenCV non riesce a decodificare: {p}")
    return img


def encode_image(pixels: np.ndarray, path: str | Path, *, quality: int | None = None) -> int:
    """
    Write ``pixels`` to ``path`` and return the number of bytes written.

    quality=None -> PNG (lossless); quality=0..100 -> JPEG at that quality.
    The container is chosen by ``quality``, not by the file suffix.
    """
    if quality is None:
        ext = ".png"
        params = [cv2.IMWRITE_PNG_COMPRESSION, PNG_COMPRESSION_DEFAULT]
    else:
        if not (0 <= int(quality) <= 100):
            raise UsageError(f"quality JPEG deve essere 0..100, got {quality}")
        ext = ".jpg"
        params = [cv2.IMWRITE_JPEG_QUALITY, int(quality)]

    ok, buf = cv2.imencode(ext, pixels, params)
    if not ok:
        raise ImageReadError(f"OpenCV non riesce a codificare {ext}")
    data = buf.tobytes()
    Path(path).write_bytes(data)
    return len(data)


def size_of(path: str | Path) -> int:
    return Path(path).stat().st_size


def pixel_bytes(pixels: np.ndarray) -> bytes:
    """Row-major raw buffer handed to the byte codec."""
    return np.ascontiguousarray(pixels, dtype=np.uint8).tobytes()
