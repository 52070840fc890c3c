"""Image size report.

For one image:
  original file size
  JPEG (lossy, OpenCV quality)
  PNG (lossless, OpenCV)
  rlehuff container of the raw pixel buffer
  zlib / zstd of the same pixel buffer (baselines)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rlehuff.core.baseline import baseline_sizes
from rlehuff.engine.container import CompressStats, Engine
from rlehuff.imaging import decode_image, encode_image, pixel_bytes, size_of
from rlehuff.profile_spec import DEFAULT_PROFILE, CodecProfile

JPEG_QUALITY_DEFAULT = 50


@dataclass(frozen=True)
class SizeRow:
    label: str
    size: int
    path: Path | None = None


@dataclass
class SizeReport:
    image: Path
    shape: tuple[int, ...]
    raw_len: int
    rows: list[SizeRow] = field(default_factory=list)
    stats: CompressStats | None = None

    def render(self) -> str:
        lines = [f"image: {self.image}  shape={'x'.join(str(d) for d in self.shape)}"]
        width = max(len(r.label) for r in self.rows) if self.rows else 0
        for r in self.rows:
            pct = (100.0 * r.size / self.raw_len) if self.raw_len else 0.0
            where = f"  {r.path}" if r.path is not None else ""
            lines.append(f"  {r.label.ljust(width)}  {r.size:>12} bytes  {pct:7.2f}% of raw{where}")
        return "\n".join(lines) + "\n"


def image_size_report(
    image_path: Path,
    out_dir: Path,
    *,
    quality: int = JPEG_QUALITY_DEFAULT,
    profile: CodecProfile = DEFAULT_PROFILE,
) -> SizeReport:
    image_path = Path(image_path)
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    pixels = decode_image(image_path)
    raw = pixel_bytes(pixels)
    stem = image_path.stem

    jpg_path = out_dir / f"{stem}.q{quality}.jpg"
    png_path = out_dir / f"{stem}.lossless.png"
    rhc_path = out_dir / f"{stem}.rhc"

    jpg_size = encode_image(pixels, jpg_path, quality=quality)
    png_size = encode_image(pixels, png_path)

    blob, stats = Engine(profile).compress_with_stats(raw)
    rhc_path.write_bytes(blob)

    rep = SizeReport(image=image_path, shape=tuple(pixels.shape), raw_len=len(raw), stats=stats)
    rep.rows.append(SizeRow("original file", size_of(image_path), image_path))
    rep.rows.append(SizeRow("raw pixels", len(raw)))
    rep.rows.append(SizeRow(f"jpeg q={quality}", jpg_size, jpg_path))
    rep.rows.append(SizeRow("png lossless", png_size, png_path))
    rep.rows.append(SizeRow("rlehuff", len(blob), rhc_path))
    for codec_id, size in baseline_sizes(raw).items():
        rep.rows.append(SizeRow(codec_id, size))
    return rep
