"""Typed errors for rlehuff.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- Every codec stage raises one of these; nothing is recovered silently.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_UNSUPPORTED_VERSION = 11
EXIT_MISSING_RESOURCE = 12
EXIT_HASH_MISMATCH = 13
EXIT_TRUNCATED = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid profile, etc.)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (malformed header/run, unexpected error, etc.)"),
    ExitCodeInfo(EXIT_UNSUPPORTED_VERSION, "UNSUPPORTED_VERSION", "Unsupported container version"),
    ExitCodeInfo(EXIT_MISSING_RESOURCE, "MISSING_RESOURCE", "Missing resource (unreadable image, optional codec not installed)"),
    ExitCodeInfo(EXIT_HASH_MISMATCH, "HASH_MISMATCH", "Integrity failure (CRC32 mismatch after decode)"),
    ExitCodeInfo(EXIT_TRUNCATED, "TRUNCATED", "Compressed stream ends before the declared data"),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE, do not edit manually.\n")
    lines.append("> Source of truth: `src/rlehuff/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Every internal error extends `RLEHuffError` and carries an `exit_code`.\n")
    lines.append("- Errors raised inside the codec pipeline also carry the failing `stage`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class RLEHuffError(Exception):
    """Base error for rlehuff."""

    exit_code: int = EXIT_GENERIC
    # Set by the pipeline to the Stage value that was running.
    stage: str | None = None


class UsageError(RLEHuffError):
    exit_code = EXIT_USAGE


class EmptyInput(RLEHuffError):
    """A tree was requested for an empty frequency table."""


class RunLengthOverflow(RLEHuffError):
    """A run does not fit the counter width of the stream."""


class CorruptPayload(RLEHuffError):
    exit_code = EXIT_GENERIC


class MalformedRun(CorruptPayload):
    pass


class MalformedHeader(CorruptPayload):
    pass


class BadMagic(MalformedHeader):
    pass


class TruncatedStream(CorruptPayload):
    exit_code = EXIT_TRUNCATED


class UnsupportedVersion(RLEHuffError):
    exit_code = EXIT_UNSUPPORTED_VERSION


class MissingResource(RLEHuffError):
    exit_code = EXIT_MISSING_RESOURCE


class ImageReadError(MissingResource):
    pass


class HashMismatch(RLEHuffError):
    exit_code = EXIT_HASH_MISMATCH
