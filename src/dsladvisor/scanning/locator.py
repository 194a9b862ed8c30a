"""Resolve corpus locators into readable roots with commit metadata."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

from dsladvisor.constants import GIT_REVPARSE_TIMEOUT
from dsladvisor.resilience.errors import CorpusUnreadableError
from dsladvisor.scanning.schemas import CorpusLocator, CorpusRoot


async def resolve_corpus(
    locator: CorpusLocator | Sequence[Path | str],
) -> tuple[CorpusRoot, ...]:
    """Resolve every root in ``locator``.

    Raises :class:`CorpusUnreadableError` if any root does not
    exist, is not a directory, or cannot be listed. Duplicate
    roots are collapsed; the order of first appearance is kept.
    """
    paths = (
        locator.roots
        if isinstance(locator, CorpusLocator)
        else [Path(p) for p in locator]
    )
    if not paths:
        msg = "Corpus locator names no roots"
        raise CorpusUnreadableError(msg)

    seen: set[Path] = set()
    roots: list[CorpusRoot] = []
    for raw in paths:
        src = Path(raw).resolve()
        if src in seen:
            continue
        seen.add(src)
        _check_readable(src)
        sha = await _get_commit_sha(src)
        roots.append(CorpusRoot(path=src, commit_sha=sha))
    return tuple(roots)


def _check_readable(src: Path) -> None:
    if not src.is_dir():
        msg = f"Corpus root does not exist or is not a directory: {src}"
        raise CorpusUnreadableError(msg)
    try:
        next(src.iterdir(), None)
    except OSError as exc:
        msg = f"Corpus root cannot be read: {src} ({exc})"
        raise CorpusUnreadableError(msg) from exc


async def _rev_parse(repo_dir: Path) -> str:
    """Get HEAD commit SHA from a git repo."""
    proc = await asyncio.create_subprocess_exec(
        "git",
        "-C",
        str(repo_dir),
        "rev-parse",
        "HEAD",
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, _ = await asyncio.wait_for(
            proc.communicate(), timeout=GIT_REVPARSE_TIMEOUT
        )
    except TimeoutError:
        proc.kill()
        return "unknown"
    if proc.returncode != 0:
        return "unknown"
    return stdout.decode().strip()


async def _get_commit_sha(repo_dir: Path) -> str:
    """Try to get commit SHA; return 'unknown' if not a git checkout."""
    if (repo_dir / ".git").exists():
        try:
            return await _rev_parse(repo_dir)
        except OSError:
            # git binary missing
            return "unknown"
    return "unknown"
