"""Pattern mining: deterministic fold over scan observations."""

from dsladvisor.analysis.mining.confidence import (
    logistic,
    pattern_confidence,
    status_for,
)
from dsladvisor.analysis.mining.miner import mine_patterns, observe, validate
from dsladvisor.analysis.mining.naming import classify_name, naming_consistency
from dsladvisor.analysis.mining.schemas import (
    Combination,
    MiningResult,
    UsagePattern,
)

__all__ = [
    "Combination",
    "MiningResult",
    "UsagePattern",
    "classify_name",
    "logistic",
    "mine_patterns",
    "naming_consistency",
    "observe",
    "pattern_confidence",
    "status_for",
    "validate",
]
