"""Pattern confidence and validation-status thresholds."""

from __future__ import annotations

import math

from dsladvisor.constants import ValidationStatus
from dsladvisor.heuristics import DEFAULT_MINING_CONFIG, MiningConfig

_CONTEXT_MAPS = 4


def logistic(frequency: int, base: int) -> float:
    """Compress an unbounded frequency into [0, 1]: log(f+1)/log(N)."""
    if frequency <= 0:
        return 0.0
    return min(1.0, math.log(frequency + 1) / math.log(base))


def context_completeness(populated: int) -> float:
    populated = max(0, min(_CONTEXT_MAPS, populated))
    return 0.5 + 0.5 * (populated / _CONTEXT_MAPS)


def pattern_confidence(
    pattern_type: str,
    frequency: int,
    populated_contexts: int,
    config: MiningConfig | None = None,
) -> float:
    cfg = config or DEFAULT_MINING_CONFIG
    reliability = cfg.reliability.get(pattern_type, 0.5)
    score = (
        logistic(frequency, cfg.logistic_base)
        * reliability
        * context_completeness(populated_contexts)
    )
    return round(max(0.0, min(1.0, score)), 6)


def status_for(
    confidence: float, config: MiningConfig | None = None
) -> ValidationStatus:
    cfg = config or DEFAULT_MINING_CONFIG
    if confidence >= cfg.validated_min:
        return ValidationStatus.VALIDATED
    if confidence >= cfg.partially_validated_min:
        return ValidationStatus.PARTIALLY_VALIDATED
    return ValidationStatus.PENDING
