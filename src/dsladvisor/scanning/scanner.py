"""Scan a usage corpus for DSL construct occurrences.

Files are scanned independently in worker threads, bounded by
``Settings.scan_max_concurrency``. A file that cannot be read or
parsed becomes a ScanWarning; only an unreadable corpus locator
aborts the scan. Results are merged by a single reducer in sorted
path order so the output does not depend on completion order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

from dsladvisor.config import Settings
from dsladvisor.constants import ERROR_TRUNCATION_CHARS, EVIDENCE_LOG_SUFFIX
from dsladvisor.resilience.errors import (
    BinaryFileError,
    FileTooLargeError,
    ScanFailure,
    classify_scan_error,
)
from dsladvisor.scanning.evidence import parse_evidence
from dsladvisor.scanning.front_ends import extract_constructs, language_for
from dsladvisor.scanning.indicators import infer_outcome, scan_indicators
from dsladvisor.scanning.locator import resolve_corpus
from dsladvisor.scanning.schemas import (
    ConstructOccurrence,
    CorpusLocator,
    CorpusRoot,
    FileIndicators,
    FileObservation,
    ScanResult,
    ScanWarning,
    occurrence_complexity,
)
from dsladvisor.scanning.walker import is_binary, walk_corpus

logger = logging.getLogger(__name__)


class CancelSignal(Protocol):
    """Anything with ``is_set()``: asyncio.Event or threading.Event."""

    def is_set(self) -> bool: ...


type FileScannedCallback = Callable[[int, int], None]

type _Outcome = FileObservation | ScanWarning | None


async def scan_corpus(
    locator: CorpusLocator | Sequence[Path | str],
    keywords: frozenset[str],
    *,
    settings: Settings | None = None,
    cancel_event: CancelSignal | None = None,
    on_file: FileScannedCallback | None = None,
) -> ScanResult:
    """Scan every text file under the locator's roots.

    Raises :class:`CorpusUnreadableError` if the locator cannot be read.
    Cancellation is checked between files; a cancelled scan returns
    whatever completed with ``partial=True``.
    """
    cfg = settings or Settings()
    roots = await resolve_corpus(locator)

    targets: list[tuple[CorpusRoot, Path]] = []
    warnings: list[ScanWarning] = []
    for root in roots:
        walk = await asyncio.to_thread(
            walk_corpus,
            root.path,
            set(cfg.skip_directories),
            set(cfg.scan_extensions),
        )
        targets.extend((root, path) for path in walk.files)
        for directory, reason in walk.unreadable:
            logger.warning(
                "event=scan_dir_skipped path=%s reason=%s",
                directory,
                reason,
            )
            warnings.append(
                ScanWarning(
                    path=str(directory),
                    reason=ScanFailure.READ_ERROR,
                    message=reason,
                )
            )

    semaphore = asyncio.Semaphore(cfg.scan_max_concurrency)
    total = len(targets)
    completed = 0

    async def _scan_one(root: CorpusRoot, path: Path) -> _Outcome:
        nonlocal completed
        async with semaphore:
            if cancel_event is not None and cancel_event.is_set():
                return None
            try:
                result: _Outcome = await asyncio.to_thread(
                    scan_file,
                    path,
                    root,
                    keywords,
                    cfg.scan_max_file_bytes,
                )
            except Exception as exc:  # noqa: BLE001
                reason = classify_scan_error(exc)
                logger.warning(
                    "event=scan_file_skipped path=%s reason=%s",
                    path,
                    reason.value,
                )
                result = ScanWarning(
                    path=_relative(path, root),
                    reason=reason,
                    message=str(exc)[:ERROR_TRUNCATION_CHARS],
                )
            completed += 1
            if on_file is not None:
                on_file(completed, total)
            return result

    outcomes = await asyncio.gather(
        *(_scan_one(root, path) for root, path in targets)
    )
    return _merge(roots, outcomes, warnings, total)


def _merge(
    roots: tuple[CorpusRoot, ...],
    outcomes: Sequence[_Outcome],
    warnings: list[ScanWarning],
    total: int,
) -> ScanResult:
    """Single-threaded reducer over independent per-file outcomes."""
    observations: list[FileObservation] = []
    all_warnings = list(warnings)
    skipped = 0
    for outcome in outcomes:
        if outcome is None:
            skipped += 1
        elif isinstance(outcome, ScanWarning):
            all_warnings.append(outcome)
        elif outcome.occurrences:
            observations.append(outcome)

    observations.sort(key=lambda o: (o.root, o.path))
    all_warnings.sort(key=lambda w: (w.path, w.reason.value))
    partial = skipped > 0
    logger.info(
        "event=scan_complete files=%d observed=%d warnings=%d partial=%s",
        total - skipped,
        len(observations),
        len(all_warnings),
        partial,
    )
    return ScanResult(
        roots=roots,
        observations=tuple(observations),
        warnings=tuple(all_warnings),
        files_scanned=total - skipped,
        partial=partial,
    )


def scan_file(
    path: Path,
    root: CorpusRoot,
    keywords: frozenset[str],
    max_bytes: int,
) -> FileObservation:
    """Scan one file. Raises on any condition that should skip it."""
    size = path.stat().st_size
    if size > max_bytes:
        msg = f"{size} bytes exceeds limit of {max_bytes}"
        raise FileTooLargeError(msg)
    raw = path.read_bytes()
    if is_binary(raw):
        msg = "null byte in file head"
        raise BinaryFileError(msg)
    text = raw.decode("utf-8")

    rel = _relative(path, root)
    if path.suffix.lower() == EVIDENCE_LOG_SUFFIX:
        occurrences = parse_evidence(text, keywords, source=rel)
        return FileObservation(
            root=str(root.path),
            path=rel,
            language="evidence",
            occurrences=tuple(occurrences),
            naming_tokens=_names(occurrences),
        )

    language = language_for(path.suffix)
    lines = text.splitlines()
    indicators = scan_indicators(lines)
    occurrences = [
        ConstructOccurrence(
            construct=m.construct,
            name=m.name,
            line=m.line,
            option_count=m.option_count,
            complexity=occurrence_complexity(m.option_count),
            outcome=infer_outcome(lines, m.line, indicators),
            snippet=m.snippet,
        )
        for m in extract_constructs(text, language, keywords)
    ]
    return FileObservation(
        root=str(root.path),
        path=rel,
        language=language,
        occurrences=tuple(occurrences),
        naming_tokens=_names(occurrences),
        indicators=indicators if occurrences else FileIndicators(),
    )


def _names(occurrences: Sequence[ConstructOccurrence]) -> tuple[str, ...]:
    return tuple(o.name for o in occurrences if o.name)


def _relative(path: Path, root: CorpusRoot) -> str:
    try:
        return path.relative_to(root.path).as_posix()
    except ValueError:
        return path.as_posix()
