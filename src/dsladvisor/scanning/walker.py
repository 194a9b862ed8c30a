"""Walk a corpus root and yield candidate text files."""

from __future__ import annotations

from pathlib import Path
from typing import NamedTuple

import pathspec

from dsladvisor.constants import BINARY_DETECTION_BUFFER


class WalkResult(NamedTuple):
    files: list[Path]
    # directories below the root that could not be listed
    unreadable: list[tuple[Path, str]]


def walk_corpus(
    root: Path,
    skip_dirs: set[str],
    extensions: set[str] | None = None,
) -> WalkResult:
    """Return all regular files under ``root`` in sorted order.

    * Skips hidden directories and directories in ``skip_dirs``.
    * Honours the root's ``.gitignore`` via pathspec.
    * Keeps only files whose suffix is in ``extensions`` when given.
    * Skips symlinks that resolve outside the root.
    """
    gitignore_spec = _load_gitignore(root)
    files: list[Path] = []
    unreadable: list[tuple[Path, str]] = []
    _walk_inner(
        root,
        root,
        skip_dirs,
        {e.lower() for e in extensions} if extensions else None,
        gitignore_spec,
        root.resolve(),
        files,
        unreadable,
    )
    return WalkResult(files=files, unreadable=unreadable)


def _walk_inner(
    current: Path,
    root: Path,
    skip_dirs: set[str],
    extensions: set[str] | None,
    gitignore_spec: pathspec.PathSpec,
    resolved_root: Path,
    files: list[Path],
    unreadable: list[tuple[Path, str]],
) -> None:
    """Recursive walk helper with symlink protection."""
    try:
        items = sorted(current.iterdir())
    except OSError as exc:
        unreadable.append((current, str(exc)))
        return
    for item in items:
        if item.is_symlink():
            resolved = item.resolve()
            if not resolved.is_relative_to(resolved_root):
                continue
        rel = item.relative_to(root).as_posix()
        if item.is_dir():
            if item.name.startswith(".") or item.name in skip_dirs:
                continue
            if gitignore_spec.match_file(rel + "/"):
                continue
            _walk_inner(
                item,
                root,
                skip_dirs,
                extensions,
                gitignore_spec,
                resolved_root,
                files,
                unreadable,
            )
        elif item.is_file():
            if gitignore_spec.match_file(rel):
                continue
            if extensions is not None and item.suffix.lower() not in extensions:
                continue
            files.append(item)


def _load_gitignore(root: Path) -> pathspec.PathSpec:
    """Load .gitignore patterns using pathspec."""
    gitignore = root / ".gitignore"
    if not gitignore.exists():
        return pathspec.PathSpec.from_lines("gitignore", [])
    try:
        with open(gitignore, encoding="utf-8") as f:
            return pathspec.PathSpec.from_lines("gitignore", f)
    except OSError:
        return pathspec.PathSpec.from_lines("gitignore", [])


def is_binary(head: bytes) -> bool:
    """Return True if ``head`` looks binary (null byte in first N bytes)."""
    return b"\x00" in head[:BINARY_DETECTION_BUFFER]
