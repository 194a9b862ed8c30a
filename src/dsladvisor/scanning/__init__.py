"""Usage corpus scanning: locate, walk, parse, observe."""

from dsladvisor.scanning.locator import resolve_corpus
from dsladvisor.scanning.scanner import CancelSignal, scan_corpus, scan_file
from dsladvisor.scanning.schemas import (
    ConstructOccurrence,
    CorpusLocator,
    CorpusRoot,
    FileIndicators,
    FileObservation,
    ScanResult,
    ScanWarning,
)

__all__ = [
    "CancelSignal",
    "ConstructOccurrence",
    "CorpusLocator",
    "CorpusRoot",
    "FileIndicators",
    "FileObservation",
    "ScanResult",
    "ScanWarning",
    "resolve_corpus",
    "scan_corpus",
    "scan_file",
]
