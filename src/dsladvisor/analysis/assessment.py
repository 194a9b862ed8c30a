"""Analysis-level confidence from sample size and evidence coverage."""

from __future__ import annotations

from dsladvisor.analysis.mining.schemas import MiningResult
from dsladvisor.analysis.schemas import InsufficientEvidence
from dsladvisor.constants import (
    EVIDENCE_COMPLETENESS_FLOOR,
    PARTIAL_SCAN_PENALTY,
    SAMPLE_SIZE_CONFIDENCE,
    SAMPLE_SIZE_CONFIDENCE_FLOOR,
)


def sample_size_confidence(sample_size: int) -> float:
    for minimum, confidence in SAMPLE_SIZE_CONFIDENCE:
        if sample_size >= minimum:
            return confidence
    return SAMPLE_SIZE_CONFIDENCE_FLOOR


def evidence_completeness(mining: MiningResult) -> float:
    """0.5 plus 0.5 times the share of evidence kinds present.

    Kinds: error patterns, success patterns, naming data, co-occurrence.
    """
    kinds = (
        mining.has_error_data,
        mining.has_success_data,
        mining.has_naming_data,
        mining.has_combination_data,
    )
    share = sum(kinds) / len(kinds)
    return EVIDENCE_COMPLETENESS_FLOOR + (1 - EVIDENCE_COMPLETENESS_FLOOR) * share


def analysis_confidence(
    sample_size: int, mining: MiningResult, *, partial: bool = False
) -> float:
    confidence = sample_size_confidence(sample_size) * evidence_completeness(
        mining
    )
    if partial:
        confidence *= PARTIAL_SCAN_PENALTY
    return round(max(0.0, min(1.0, confidence)), 6)


def insufficient_evidence(
    sample_size: int, minimum: int
) -> InsufficientEvidence | None:
    if sample_size >= minimum:
        return None
    return InsufficientEvidence(sample_size=sample_size, minimum=minimum)
