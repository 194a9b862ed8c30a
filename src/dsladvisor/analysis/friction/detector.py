"""Run every friction rule and order the results by impact."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from dsladvisor.analysis.friction.rules import ALL_RULES, FrictionRule
from dsladvisor.analysis.friction.schemas import FrictionPoint
from dsladvisor.analysis.mining.schemas import MiningResult
from dsladvisor.constants import FRICTION_TEMPLATES, TEMPLATE_IMPROVEMENT_TYPES
from dsladvisor.heuristics import (
    DEFAULT_FRICTION_THRESHOLDS,
    IDENTITY_CALIBRATION,
    Calibration,
    FrictionThresholds,
)
from dsladvisor.introspection.schemas import SchemaDescription

logger = logging.getLogger(__name__)


def detect_friction(
    schema: SchemaDescription,
    mining: MiningResult,
    *,
    thresholds: FrictionThresholds | None = None,
    calibration: Calibration | None = None,
    rules: Sequence[FrictionRule] = ALL_RULES,
) -> list[FrictionPoint]:
    """Emit every firing rule's points, sorted by impact descending.

    Calibration scales each point's impact by the learned impact
    multiplier of the improvement type its category maps to. Ties
    break by category then construct so the order is stable.
    """
    t = thresholds or DEFAULT_FRICTION_THRESHOLDS
    cal = calibration or IDENTITY_CALIBRATION

    points: list[FrictionPoint] = []
    for rule in rules:
        points.extend(rule(schema, mining, t))

    if not cal.is_identity:
        points = [_calibrate(p, cal) for p in points]

    points.sort(key=lambda p: (-p.impact_score, p.category.value, p.construct))
    logger.info(
        "event=friction_detected dsl=%s points=%d",
        schema.dsl_name,
        len(points),
    )
    return points


def _calibrate(point: FrictionPoint, cal: Calibration) -> FrictionPoint:
    improvement_type = TEMPLATE_IMPROVEMENT_TYPES[
        FRICTION_TEMPLATES[point.category]
    ]
    scaled = point.impact_score * cal.impact_multiplier(improvement_type)
    return point.model_copy(
        update={"impact_score": round(max(0.0, min(1.0, scaled)), 6)}
    )
