"""Effort, impact, value ratio and priority formulas."""

from __future__ import annotations

import math

from dsladvisor.heuristics import DEFAULT_ESTIMATION_CONFIG, EstimationConfig


def complexity_multiplier(
    affected: int, config: EstimationConfig | None = None
) -> float:
    """1 + step per affected construct beyond the first, capped."""
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    extra = max(0, affected - 1)
    return min(cfg.multiplier_cap, 1.0 + cfg.multiplier_step * extra)


def frequency_factor(
    frequency: int, config: EstimationConfig | None = None
) -> float:
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    boost = cfg.frequency_step * math.log2(1 + max(0, frequency))
    return 1.0 + min(cfg.frequency_cap, boost)


def estimate_effort(
    template: str,
    affected: int,
    *,
    calibration_multiplier: float = 1.0,
    config: EstimationConfig | None = None,
) -> float:
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    effort = (
        cfg.base_effort[template]
        * complexity_multiplier(affected, cfg)
        * calibration_multiplier
    )
    return round(max(0.0, min(cfg.max_effort, effort)), 6)


def estimate_impact(
    template: str,
    severity: str,
    frequency: int,
    *,
    calibration_multiplier: float = 1.0,
    config: EstimationConfig | None = None,
) -> float:
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    impact = (
        cfg.base_impact[template]
        * cfg.severity_factor[severity]
        * frequency_factor(frequency, cfg)
        * calibration_multiplier
    )
    return round(max(0.0, min(1.0, impact)), 6)


def value_ratio(
    impact: float, effort: float, config: EstimationConfig | None = None
) -> float:
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    return round(impact / max(effort, cfg.epsilon), 6)


def priority_score(
    impact: float,
    effort: float,
    breaking: bool,
    config: EstimationConfig | None = None,
) -> float:
    """impact / max(1, effort / scale), penalized when breaking."""
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    score = impact / max(1.0, effort / cfg.priority_effort_scale)
    if breaking:
        score *= cfg.breaking_penalty
    return round(max(0.0, min(1.0, score)), 6)


def is_viable(
    effort: float, impact: float, config: EstimationConfig | None = None
) -> bool:
    """The filtering law: within the feasibility ceiling and above the
    materiality floor."""
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    return effort <= cfg.feasibility_ceiling and impact >= cfg.materiality_floor
