"""Batch recalibration from historical implementation outcomes."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from dsladvisor.feedback.schemas import ImprovementResult
from dsladvisor.heuristics import (
    DEFAULT_LEARNING_CONFIG,
    Calibration,
    LearningConfig,
)

logger = logging.getLogger(__name__)


def learn(
    results: Sequence[ImprovementResult],
    config: LearningConfig | None = None,
) -> Calibration:
    """Derive per-type effort/impact multipliers from past results.

    effort multiplier = mean(actual effort / estimated effort)
    impact multiplier = mean(actual impact / estimated impact)

    Rolled-back results count toward success rates only. A type needs
    ``min_samples`` usable results before a multiplier is learned;
    multipliers are clamped to [multiplier_min, multiplier_max].
    """
    cfg = config or DEFAULT_LEARNING_CONFIG
    by_type: dict[str, list[ImprovementResult]] = defaultdict(list)
    for result in results:
        by_type[str(result.improvement_type)].append(result)

    effort_multipliers: dict[str, float] = {}
    impact_multipliers: dict[str, float] = {}
    success_rates: dict[str, float] = {}
    sample_counts: dict[str, int] = {}
    insights: list[str] = []

    for improvement_type in sorted(by_type):
        group = by_type[improvement_type]
        sample_counts[improvement_type] = len(group)
        success_rates[improvement_type] = round(
            sum(1 for r in group if r.implementation_success) / len(group), 6
        )
        live = [r for r in group if not r.rolled_back]

        effort_ratios = [
            r.actual_effort / r.estimated_effort
            for r in live
            if r.actual_effort is not None and r.estimated_effort > 0
        ]
        if len(effort_ratios) >= cfg.min_samples:
            multiplier = _clamp(_mean(effort_ratios), cfg)
            effort_multipliers[improvement_type] = multiplier
            insight = _effort_insight(improvement_type, multiplier, cfg)
            if insight:
                insights.append(insight)

        impact_ratios = [
            r.actual_impact_score / r.estimated_impact
            for r in live
            if r.estimated_impact > 0
        ]
        if len(impact_ratios) >= cfg.min_samples:
            multiplier = _clamp(_mean(impact_ratios), cfg)
            impact_multipliers[improvement_type] = multiplier
            insight = _impact_insight(improvement_type, multiplier, cfg)
            if insight:
                insights.append(insight)

    logger.info(
        "event=calibration_learned results=%d types=%d effort=%d impact=%d",
        len(results),
        len(by_type),
        len(effort_multipliers),
        len(impact_multipliers),
    )
    return Calibration(
        effort_multipliers=effort_multipliers,
        impact_multipliers=impact_multipliers,
        success_rates=success_rates,
        sample_counts=sample_counts,
        insights=tuple(insights),
    )


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def _clamp(value: float, cfg: LearningConfig) -> float:
    return round(max(cfg.multiplier_min, min(cfg.multiplier_max, value)), 6)


def _effort_insight(
    improvement_type: str, multiplier: float, cfg: LearningConfig
) -> str | None:
    deviation = multiplier - 1.0
    if abs(deviation) < cfg.insight_min_deviation:
        return None
    verb = "underestimate" if deviation > 0 else "overestimate"
    return (
        f"{improvement_type} improvements {verb} effort by "
        f"{abs(deviation):.0%} on average"
    )


def _impact_insight(
    improvement_type: str, multiplier: float, cfg: LearningConfig
) -> str | None:
    deviation = multiplier - 1.0
    if abs(deviation) < cfg.insight_min_deviation:
        return None
    verb = "underestimate" if deviation > 0 else "overestimate"
    return (
        f"{improvement_type} improvements {verb} impact by "
        f"{abs(deviation):.0%} on average"
    )
