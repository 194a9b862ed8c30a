"""Naming-convention classification."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

# Checked in order; the first matching convention wins.
_CONVENTIONS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("snake_case", re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)*[?!]?$")),
    ("screaming_snake", re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*$")),
    ("camelCase", re.compile(r"^[a-z][a-z0-9]*(?:[A-Z][a-z0-9]*)+$")),
    ("PascalCase", re.compile(r"^[A-Z][a-z0-9]+(?:[A-Z][a-z0-9]*)*$")),
    ("kebab-case", re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)+$")),
)


def classify_name(name: str) -> str:
    for convention, pattern in _CONVENTIONS:
        if pattern.match(name):
            return convention
    return "other"


def naming_consistency(
    names: Iterable[str],
) -> tuple[float | None, str | None]:
    """Fraction of names in the dominant convention, and that convention.

    Returns ``(None, None)`` when there are no names. Ties between
    conventions resolve alphabetically.
    """
    counts = Counter(classify_name(n) for n in names)
    total = sum(counts.values())
    if total == 0:
        return None, None
    dominant, count = min(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return round(count / total, 6), dominant
