"""Rank improvements by value ratio."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from dsladvisor.analysis.synthesis.estimator import priority_score, value_ratio
from dsladvisor.analysis.synthesis.schemas import Improvement
from dsladvisor.heuristics import DEFAULT_ESTIMATION_CONFIG, EstimationConfig

logger = logging.getLogger(__name__)


def prioritize(
    improvements: Sequence[Improvement],
    config: EstimationConfig | None = None,
) -> list[Improvement]:
    """Annotate value ratio, priority and rank, sorted best first.

    Order: value ratio descending, then lower effort, then title.
    The breaking-change penalty only affects ``priority_score``.
    """
    cfg = config or DEFAULT_ESTIMATION_CONFIG
    annotated = [
        imp.model_copy(
            update={
                "value_ratio": value_ratio(
                    imp.impact_score, imp.effort_score, cfg
                ),
                "priority_score": priority_score(
                    imp.impact_score,
                    imp.effort_score,
                    imp.breaking_changes,
                    cfg,
                ),
            }
        )
        for imp in improvements
    ]
    annotated.sort(key=lambda i: (-i.value_ratio, i.effort_score, i.title))
    ranked = [
        imp.model_copy(update={"rank": position})
        for position, imp in enumerate(annotated, start=1)
    ]
    logger.debug("event=improvements_ranked count=%d", len(ranked))
    return ranked
