"""Pydantic models for the corpus scan data flow."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from dsladvisor.constants import (
    COMMENTED_CODE_RATIO,
    OCCURRENCE_BASE_COMPLEXITY,
    OCCURRENCE_OPTION_WEIGHT,
    Outcome,
)
from dsladvisor.resilience.errors import ScanFailure


class CorpusLocator(BaseModel):
    """Input to the scanner: one or more local directories or checkouts."""

    roots: list[Path]


class CorpusRoot(BaseModel):
    """A resolved corpus root with its commit metadata."""

    model_config = ConfigDict(frozen=True)

    path: Path
    commit_sha: str = "unknown"


class ConstructOccurrence(BaseModel):
    """One use of a DSL construct found in a file or evidence log."""

    model_config = ConfigDict(frozen=True)

    construct: str
    name: str | None = None
    line: int = 0
    option_count: int = 0
    complexity: float = 0.0
    outcome: Outcome | None = None
    snippet: str | None = None
    message: str | None = None
    duration_ms: float | None = None


class FileIndicators(BaseModel):
    """Heuristic error markers counted over a whole source file."""

    model_config = ConfigDict(frozen=True)

    todo_markers: int = 0
    exception_blocks: int = 0
    workaround_markers: int = 0
    commented_code_ratio: float = 0.0

    @property
    def has_error_indicators(self) -> bool:
        return (
            self.todo_markers > 0
            or self.exception_blocks > 0
            or self.commented_code_ratio > COMMENTED_CODE_RATIO
        )


class FileObservation(BaseModel):
    """Per-file scan output, independent of every other file."""

    model_config = ConfigDict(frozen=True)

    root: str
    path: str  # posix path relative to root
    language: str
    occurrences: tuple[ConstructOccurrence, ...] = ()
    naming_tokens: tuple[str, ...] = ()
    indicators: FileIndicators = Field(default_factory=FileIndicators)

    @property
    def constructs(self) -> tuple[str, ...]:
        """Distinct constructs used in this file, sorted."""
        return tuple(sorted({o.construct for o in self.occurrences}))


class ScanWarning(BaseModel):
    """A file that was skipped without aborting the scan."""

    model_config = ConfigDict(frozen=True)

    path: str
    reason: ScanFailure
    message: str = ""


class ScanResult(BaseModel):
    """Merged scan output. ``partial`` is set when the scan was cancelled."""

    model_config = ConfigDict(frozen=True)

    roots: tuple[CorpusRoot, ...] = ()
    observations: tuple[FileObservation, ...] = ()
    warnings: tuple[ScanWarning, ...] = ()
    files_scanned: int = 0
    partial: bool = False

    @property
    def total_occurrences(self) -> int:
        return sum(len(o.occurrences) for o in self.observations)


def occurrence_complexity(option_count: int) -> float:
    """Inferred complexity of one construct use from its option count."""
    return OCCURRENCE_BASE_COMPLEXITY + OCCURRENCE_OPTION_WEIGHT * max(
        0, option_count
    )
