"""Consistency checks an Improvement must pass before it is emitted."""

from __future__ import annotations

from dsladvisor.analysis.synthesis.schemas import Improvement
from dsladvisor.heuristics import DEFAULT_ESTIMATION_CONFIG, EstimationConfig
from dsladvisor.resilience.errors import ValidationFailure


def validate_improvement(
    improvement: Improvement, config: EstimationConfig | None = None
) -> None:
    """Raise :class:`ValidationFailure` on the first failed check."""
    cfg = config or DEFAULT_ESTIMATION_CONFIG

    steps = improvement.implementation_steps
    if len(steps) < cfg.min_steps:
        raise ValidationFailure(
            "implementation_steps",
            f"needs at least {cfg.min_steps} steps, got {len(steps)}",
        )
    if any(len(s.strip()) < cfg.min_step_chars for s in steps):
        raise ValidationFailure(
            "implementation_steps",
            f"every step needs at least {cfg.min_step_chars} characters",
        )

    criteria = improvement.success_criteria
    if len(criteria) < cfg.min_criteria:
        raise ValidationFailure(
            "success_criteria",
            f"needs at least {cfg.min_criteria} criteria, got {len(criteria)}",
        )
    if any(len(c.strip()) < cfg.min_criterion_chars for c in criteria):
        raise ValidationFailure(
            "success_criteria",
            f"every criterion needs at least {cfg.min_criterion_chars} characters",
        )

    if (
        improvement.impact_score > cfg.suspicious_impact
        and improvement.effort_score < cfg.suspicious_effort
        and improvement.breaking_changes
    ):
        raise ValidationFailure(
            "effort_score",
            "high impact at low effort is implausible for a breaking change",
        )
    if (
        improvement.effort_score > cfg.wasteful_effort
        and improvement.impact_score < cfg.wasteful_impact
    ):
        raise ValidationFailure(
            "impact_score",
            "high effort with low impact is not worth recommending",
        )
