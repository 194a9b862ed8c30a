"""Heuristic error indicators and per-occurrence outcome inference."""

from __future__ import annotations

import re

from dsladvisor.constants import Outcome
from dsladvisor.scanning.schemas import FileIndicators

_ERROR_MARKER = re.compile(r"\b(?:TODO|FIXME|BUG)\b")
_WORKAROUND_MARKER = re.compile(r"\b(?:HACK|XXX)\b|\b[Ww]orkaround\b")
_EXCEPTION_BLOCK = re.compile(
    r"^\s*(?:\}\s*)?(?:try\b|rescue\b|catch\b|except\b)"
)
_COMMENT_PREFIXES = ("#", "//")
_NOTE_MARKER = re.compile(r"TODO|FIXME|NOTE")


def scan_indicators(lines: list[str]) -> FileIndicators:
    todo = 0
    exceptions = 0
    workarounds = 0
    commented = 0
    non_empty = 0
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        non_empty += 1
        if _ERROR_MARKER.search(line):
            todo += 1
        if _WORKAROUND_MARKER.search(line):
            workarounds += 1
        if _EXCEPTION_BLOCK.match(line):
            exceptions += 1
        if _is_commented_code(stripped):
            commented += 1
    ratio = commented / non_empty if non_empty else 0.0
    return FileIndicators(
        todo_markers=todo,
        exception_blocks=exceptions,
        workaround_markers=workarounds,
        commented_code_ratio=round(ratio, 6),
    )


def infer_outcome(
    lines: list[str], line: int, indicators: FileIndicators
) -> Outcome | None:
    """Outcome of the construct use on 1-based ``line``.

    An error marker on the same line or the line above marks an error;
    a workaround marker there marks a workaround. A use in a file with
    no error indicators at all counts as a success.
    """
    nearby = [
        lines[i]
        for i in (line - 2, line - 1)
        if 0 <= i < len(lines)
    ]
    if any(_ERROR_MARKER.search(text) for text in nearby):
        return Outcome.ERROR
    if any(_WORKAROUND_MARKER.search(text) for text in nearby):
        return Outcome.WORKAROUND
    if not indicators.has_error_indicators:
        return Outcome.SUCCESS
    return None


def _is_commented_code(stripped: str) -> bool:
    if not stripped.startswith(_COMMENT_PREFIXES):
        return False
    if len(stripped) <= 5:
        return False
    return _NOTE_MARKER.search(stripped) is None
