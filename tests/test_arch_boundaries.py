from __future__ import annotations

import ast
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

PACKAGE_ROOT = "rlehuff"

# Orchestrators: they wire the codec to files, images and the terminal.
# Nothing below them may import them.
ORCH_PREFIXES: tuple[str, ...] = (
    "rlehuff.cli",
    "rlehuff.verify",
    "rlehuff.report",
)

# Low-level stack, bottom to top. A module may import its own rank or lower.
# errors/profile_spec are shared contracts and stay unranked.
RANKS: tuple[tuple[str, int], ...] = (
    ("rlehuff.core", 0),
    ("rlehuff.layers", 1),
    ("rlehuff.engine", 2),
)


@dataclass(frozen=True)
class ImportEdge:
    src: str
    dst: str
    file: Path
    lineno: int


def _has_prefix(mod: str, prefix: str) -> bool:
    return mod == prefix or mod.startswith(prefix + ".")


def _is_orch(mod: str) -> bool:
    return any(_has_prefix(mod, p) for p in ORCH_PREFIXES)


def _rank(mod: str) -> int | None:
    for prefix, rank in RANKS:
        if _has_prefix(mod, prefix):
            return rank
    return None


def _module_name(src_dir: Path, py_file: Path) -> str | None:
    parts = list(py_file.relative_to(src_dir).parts)
    if not parts or parts[0] != PACKAGE_ROOT:
        return None
    if py_file.name == "__init__.py":
        parts = parts[:-1]
    else:
        parts[-1] = py_file.stem
    return ".".join(parts) or None


def _resolve_relative(current: str, is_pkg: bool, level: int, module: str | None) -> str | None:
    if level <= 0:
        return module
    base = current.split(".")
    if not is_pkg:
        base = base[:-1]
    if level - 1 > len(base):
        return None
    base = base[: len(base) - (level - 1)]
    return ".".join(base + (module.split(".") if module else []))


def _iter_import_edges(src_dir: Path) -> Iterable[ImportEdge]:
    for py in sorted(src_dir.rglob("*.py")):
        mod = _module_name(src_dir, py)
        if not mod:
            continue
        is_pkg = py.name == "__init__.py"
        tree = ast.parse(py.read_text(encoding="utf-8"), filename=str(py))

        for node in ast.walk(tree):
            targets: list[str] = []
            if isinstance(node, ast.Import):
                targets = [a.name for a in node.names]
            elif isinstance(node, ast.ImportFrom):
                resolved = _resolve_relative(mod, is_pkg, node.level, node.module)
                if resolved:
                    targets = [resolved]
            for dst in targets:
                if _has_prefix(dst, PACKAGE_ROOT):
                    yield ImportEdge(src=mod, dst=dst, file=py, lineno=getattr(node, "lineno", 0))


def _src_dir() -> Path:
    src_dir = Path(__file__).resolve().parents[1] / "src"
    if not src_dir.is_dir():
        raise AssertionError(f"Expected src/ directory at: {src_dir}")
    return src_dir


def _fail(title: str, violations: list[ImportEdge], hint: str) -> None:
    lines = [title]
    for v in sorted(violations, key=lambda e: (str(e.file), e.lineno, e.src, e.dst)):
        lines.append(f"  {v.file}:{v.lineno}  {v.src}  ->  {v.dst}")
    lines.append("")
    lines.append(hint)
    raise AssertionError("\n".join(lines))


def test_no_low_level_imports_orchestrator() -> None:
    """
    ORCH -> may depend on LOW
    LOW  -> must NOT depend on ORCH
    """
    violations = [
        e
        for e in _iter_import_edges(_src_dir())
        if e.src != e.dst and not _is_orch(e.src) and _is_orch(e.dst)
    ]
    if violations:
        _fail(
            "Forbidden imports detected (LOW -> ORCH):",
            violations,
            "Fix: move high-level logic out of LOW modules, or invert the dependency.",
        )


def test_codec_stack_only_imports_downwards() -> None:
    """core <- layers <- engine: no upward imports inside the codec stack."""
    violations: list[ImportEdge] = []
    for e in _iter_import_edges(_src_dir()):
        rs, rd = _rank(e.src), _rank(e.dst)
        if rs is not None and rd is not None and rd > rs:
            violations.append(e)
    if violations:
        _fail(
            "Upward imports detected inside the codec stack:",
            violations,
            "Fix: core must not know about layers, layers must not know about the engine.",
        )


def test_codec_stack_has_no_image_dependency() -> None:
    """The byte codec never touches OpenCV/numpy; only the image collaborator does."""
    src_dir = _src_dir()
    offenders: list[str] = []
    for py in sorted((src_dir / PACKAGE_ROOT).rglob("*.py")):
        mod = _module_name(src_dir, py)
        if not mod or _rank(mod) is None:
            continue
        tree = ast.parse(py.read_text(encoding="utf-8"), filename=str(py))
        for node in ast.walk(tree):
            names: list[str] = []
            if isinstance(node, ast.Import):
                names = [a.name for a in node.names]
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                names = [node.module]
            for n in names:
                if n.split(".")[0] in {"cv2", "numpy"}:
                    offenders.append(f"{py}:{node.lineno}  {mod} -> {n}")
    assert not offenders, "\n".join(offenders)
