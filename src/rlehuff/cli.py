"""rlehuff CLI.

This is the stable CLI entrypoint (console-script: ``rlehuff``).

UX policy:
  - results go to stdout, diagnostics to stderr with a ``[rlehuff]`` prefix
  - exit codes come from rlehuff.errors (docs/exit_codes.md)
  - ``--debug`` re-raises to show the full traceback
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from rlehuff.errors import EXIT_GENERIC, EXIT_USAGE, RLEHuffError
from rlehuff.layers.rle import RUN_WIDTHS
from rlehuff.profile_spec import DEFAULT_PROFILE, CodecProfile, ProfileSpecError, load_profile_spec


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _add_profile_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--profile",
        default=None,
        help="Codec profile (JSON). Use '@file.json' to load from file, or pass JSON inline.",
    )
    p.add_argument(
        "--run-width",
        type=int,
        choices=list(RUN_WIDTHS),
        default=None,
        help="RLE counter width in bits (overrides the profile)",
    )
    p.add_argument("--no-rle", action="store_true", help="Skip the RLE pre-pass (Huffman only)")
    p.add_argument("--no-checksum", action="store_true", help="Do not store a CRC32 of the input")


def _resolve_profile(ns: argparse.Namespace) -> CodecProfile:
    # precedence: CLI flags > --profile > defaults
    base = load_profile_spec(ns.profile) if ns.profile else DEFAULT_PROFILE
    return base.with_overrides(
        rle=False if ns.no_rle else None,
        run_width=ns.run_width,
        checksum=False if ns.no_checksum else None,
    )


def _file_compress(input_path: Path, output_path: Path, profile: CodecProfile, *, stats: bool) -> int:
    from rlehuff.engine.container import Engine

    data = input_path.read_bytes()
    blob, st = Engine(profile).compress_with_stats(data)
    output_path.write_bytes(blob)
    if stats:
        print(json.dumps(st.as_dict(), sort_keys=True))
    return 0


def _file_decompress(input_path: Path, output_path: Path) -> int:
    from rlehuff.engine.container import Engine

    data = Engine().decompress(input_path.read_bytes())
    output_path.write_bytes(data)
    return 0


def _file_verify(input_path: Path) -> int:
    from rlehuff.verify import verify_container_file

    verify_container_file(input_path)
    print("OK")
    return 0


def _file_inspect(input_path: Path) -> int:
    from rlehuff.verify import inspect_container_file

    print(json.dumps(inspect_container_file(input_path), indent=2, sort_keys=True))
    return 0


def _profile_validate(profile_arg: str) -> int:
    # load is the validation
    load_profile_spec(profile_arg)
    print("OK")
    return 0


def _image_report(image: Path, out_dir: Path, quality: int, profile: CodecProfile) -> int:
    from rlehuff.report import image_size_report

    rep = image_size_report(image, out_dir, quality=quality, profile=profile)
    sys.stdout.write(rep.render())
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rlehuff", description="RLE + Huffman lossless byte codec")
    sub = p.add_subparsers(dest="cmd", required=True)

    # file ...
    p_file = sub.add_parser("file", help="File operations")
    sub_file = p_file.add_subparsers(dest="file_cmd", required=True)

    p_c = sub_file.add_parser("compress", help="Lossless compress (RLE -> Huffman)")
    p_c.add_argument("input", type=Path)
    p_c.add_argument("output", type=Path)
    p_c.add_argument("--stats", action="store_true", help="Print compression stats as JSON")
    _add_profile_args(p_c)
    _add_common_args(p_c)

    p_d = sub_file.add_parser("decompress", help="Lossless decompress")
    p_d.add_argument("input", type=Path)
    p_d.add_argument("output", type=Path)
    _add_common_args(p_d)

    p_v = sub_file.add_parser("verify", help="Decode a container and check length + CRC32")
    p_v.add_argument("input", type=Path)
    _add_common_args(p_v)

    p_i = sub_file.add_parser("inspect", help="Print container header fields as JSON")
    p_i.add_argument("input", type=Path)
    _add_common_args(p_i)

    # profile-validate
    p_pv = sub.add_parser("profile-validate", help="Validate a codec profile (v1)")
    p_pv.add_argument("profile", help="Profile JSON (@file.json or inline JSON)")
    _add_common_args(p_pv)

    # image ...
    p_img = sub.add_parser("image", help="Image workflow (OpenCV collaborator)")
    sub_img = p_img.add_subparsers(dest="image_cmd", required=True)

    p_r = sub_img.add_parser(
        "report", help="Write JPEG/PNG/rlehuff renditions of an image and print their sizes"
    )
    p_r.add_argument("image", type=Path)
    p_r.add_argument("out_dir", type=Path)
    p_r.add_argument("--quality", type=int, default=50, help="JPEG quality 0..100 (default: 50)")
    _add_profile_args(p_r)
    _add_common_args(p_r)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "file":
            if ns.file_cmd == "compress":
                return _file_compress(ns.input, ns.output, _resolve_profile(ns), stats=bool(ns.stats))
            if ns.file_cmd == "decompress":
                return _file_decompress(ns.input, ns.output)
            if ns.file_cmd == "verify":
                return _file_verify(ns.input)
            if ns.file_cmd == "inspect":
                return _file_inspect(ns.input)
            raise AssertionError("unreachable")

        if ns.cmd == "profile-validate":
            return _profile_validate(str(ns.profile))

        if ns.cmd == "image":
            if ns.image_cmd == "report":
                return _image_report(ns.image, ns.out_dir, int(ns.quality), _resolve_profile(ns))
            raise AssertionError("unreachable")

        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except ProfileSpecError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[rlehuff] {e}", file=sys.stderr)
        return EXIT_USAGE
    except RLEHuffError as e:
        if getattr(ns, "debug", False):
            raise
        where = f" (stage: {e.stage})" if e.stage else ""
        print(f"[rlehuff] {type(e).__name__}: {e}{where}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[rlehuff] error: {e}", file=sys.stderr)
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
