"""Map friction points to templated, estimated improvements."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from dsladvisor.analysis.friction.schemas import FrictionPoint
from dsladvisor.analysis.synthesis.estimator import (
    estimate_effort,
    estimate_impact,
    is_viable,
    priority_score,
    value_ratio,
)
from dsladvisor.analysis.synthesis.schemas import Improvement
from dsladvisor.analysis.synthesis.templates import (
    BREAKING_RISKS,
    TEMPLATES,
    ImprovementTemplate,
)
from dsladvisor.analysis.synthesis.validation import validate_improvement
from dsladvisor.constants import FRICTION_TEMPLATES, TEMPLATE_IMPROVEMENT_TYPES
from dsladvisor.heuristics import (
    DEFAULT_ESTIMATION_CONFIG,
    IDENTITY_CALIBRATION,
    Calibration,
    EstimationConfig,
)
from dsladvisor.introspection.schemas import SchemaDescription
from dsladvisor.resilience.errors import ValidationFailure

logger = logging.getLogger(__name__)


def synthesize(
    point: FrictionPoint,
    schema: SchemaDescription,
    *,
    config: EstimationConfig | None = None,
    calibration: Calibration | None = None,
) -> Improvement | None:
    """Build the improvement for one friction point.

    Returns None when the estimate falls outside the feasibility
    ceiling or materiality floor, or when the improvement fails
    validation. These are the only places improvements are dropped.
    """
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    cal = calibration or IDENTITY_CALIBRATION
    template_name = FRICTION_TEMPLATES[point.category]
    template = TEMPLATES[template_name]
    improvement_type = TEMPLATE_IMPROVEMENT_TYPES[template_name]
    affected = point.affected_constructs or (point.construct,)

    effort = estimate_effort(
        template_name,
        len(affected),
        calibration_multiplier=cal.effort_multiplier(improvement_type),
        config=cfg,
    )
    impact = estimate_impact(
        template_name,
        point.severity,
        point.frequency,
        calibration_multiplier=cal.impact_multiplier(improvement_type),
        config=cfg,
    )
    if not is_viable(effort, impact, cfg):
        logger.info(
            "event=improvement_filtered template=%s construct=%s "
            "effort=%.2f impact=%.2f",
            template_name,
            point.construct,
            effort,
            impact,
        )
        return None

    breaking = (
        template_name in cfg.call_site_templates
        and len(affected) > cfg.max_non_breaking_constructs
    )
    improvement = _render(
        template,
        point,
        schema,
        affected,
        effort=effort,
        impact=impact,
        breaking=breaking,
        config=cfg,
    )
    try:
        validate_improvement(improvement, cfg)
    except ValidationFailure as exc:
        logger.info(
            "event=improvement_rejected title=%s field=%s reason=%s",
            improvement.title,
            exc.field,
            exc.message,
        )
        return None
    return improvement


def synthesize_all(
    points: Sequence[FrictionPoint],
    schema: SchemaDescription,
    *,
    config: EstimationConfig | None = None,
    calibration: Calibration | None = None,
) -> list[Improvement]:
    improvements: list[Improvement] = []
    for point in points:
        improvement = synthesize(
            point, schema, config=config, calibration=calibration
        )
        if improvement is not None:
            improvements.append(improvement)
    logger.info(
        "event=improvements_synthesized points=%d improvements=%d",
        len(points),
        len(improvements),
    )
    return improvements


def refine(
    improvement: Improvement,
    *,
    effort_score: float | None = None,
    impact_score: float | None = None,
    config: EstimationConfig | None = None,
) -> Improvement:
    """Update effort and/or impact and recompute derived scores.

    Raises :class:`ValidationFailure` if the refined values are
    inconsistent or fall outside the feasibility ceiling or
    materiality floor.
    """
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    effort = (
        improvement.effort_score if effort_score is None else effort_score
    )
    impact = (
        improvement.impact_score if impact_score is None else impact_score
    )
    refined = Improvement.model_validate(
        {
            **improvement.model_dump(),
            "effort_score": effort,
            "impact_score": impact,
            "value_ratio": value_ratio(impact, effort, cfg),
            "priority_score": priority_score(
                impact, effort, improvement.breaking_changes, cfg
            ),
        }
    )
    validate_improvement(refined, cfg)
    if effort > cfg.feasibility_ceiling:
        raise ValidationFailure(
            "effort_score",
            f"{effort:g} exceeds the feasibility ceiling "
            f"{cfg.feasibility_ceiling:g}",
        )
    if not is_viable(effort, impact, cfg):
        raise ValidationFailure(
            "impact_score",
            f"{impact:g} is below the materiality floor "
            f"{cfg.materiality_floor:g}",
        )
    return refined


def _render(
    template: ImprovementTemplate,
    point: FrictionPoint,
    schema: SchemaDescription,
    affected: tuple[str, ...],
    *,
    effort: float,
    impact: float,
    breaking: bool,
    config: EstimationConfig,
) -> Improvement:
    fmt = {
        "construct": point.construct,
        "constructs": ", ".join(affected),
        "dsl": schema.dsl_name,
    }
    risks = tuple(r.format(**fmt) for r in template.risks)
    if breaking:
        risks += BREAKING_RISKS
    return Improvement(
        title=template.title.format(**fmt),
        improvement_type=TEMPLATE_IMPROVEMENT_TYPES[template.name],
        template=template.name,
        friction_category=point.category,
        description=f"{template.problem.format(**fmt)} Evidence: {point.evidence}.",
        proposed_solution=template.solution.format(**fmt),
        effort_score=effort,
        impact_score=impact,
        priority_score=priority_score(impact, effort, breaking, config),
        value_ratio=value_ratio(impact, effort, config),
        breaking_changes=breaking,
        affected_constructs=affected,
        implementation_steps=tuple(s.format(**fmt) for s in template.steps),
        success_criteria=tuple(c.format(**fmt) for c in template.criteria),
        risks=risks,
        migration_strategy=template.migration_strategy.format(**fmt),
        validation_approach=template.validation_approach.format(**fmt),
        rollback_plan=template.rollback_plan.format(**fmt),
        example_before=template.example_before.format(**fmt),
        example_after=template.example_after.format(**fmt),
    )
