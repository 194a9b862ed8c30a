"""Record what happened after an improvement was applied."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from dsladvisor.analysis.synthesis.schemas import Improvement
from dsladvisor.constants import ROLLBACK_IMPACT_SCORE
from dsladvisor.feedback.criteria import evaluate_criteria
from dsladvisor.feedback.metrics import compute_deltas, net_impact
from dsladvisor.feedback.schemas import ImprovementResult
from dsladvisor.heuristics import DEFAULT_TRACKING_CONFIG, TrackingConfig
from dsladvisor.resilience.errors import ResultStateError

logger = logging.getLogger(__name__)

_POSITIVE_WORDS = frozenset({"good", "great", "better", "love", "easier", "clear"})
_NEGATIVE_WORDS = frozenset(
    {"bad", "worse", "hate", "terrible", "confusing", "harder"}
)
_THEMES: dict[str, tuple[str, ...]] = {
    "usability": ("easy", "easier", "hard", "harder", "intuitive", "confusing", "usab"),
    "performance": ("fast", "slow", "performance", "latency", "speed"),
    "documentation": ("doc", "docs", "documentation", "example", "guide"),
}


def record_result(
    improvement: Improvement,
    before_metrics: Mapping[str, float],
    after_metrics: Mapping[str, float],
    *,
    implementation_success: bool | None = None,
    actual_effort: float | None = None,
    config: TrackingConfig | None = None,
) -> ImprovementResult:
    """Compare before/after metrics and judge the improvement's criteria.

    ``implementation_success`` defaults to a positive actual impact.
    """
    cfg = config or DEFAULT_TRACKING_CONFIG
    deltas = compute_deltas(before_metrics, after_metrics, cfg)
    impact = net_impact(deltas, cfg)
    met, failed = evaluate_criteria(
        improvement.success_criteria, deltas, impact, cfg
    )
    success = impact > 0 if implementation_success is None else implementation_success
    insights = _insights(
        impact, success, improvement.effort_score, actual_effort, cfg
    )
    logger.info(
        "event=result_recorded title=%s impact=%.3f success=%s met=%d failed=%d",
        improvement.title,
        impact,
        success,
        len(met),
        len(failed),
    )
    return ImprovementResult(
        improvement_title=improvement.title,
        improvement_type=improvement.improvement_type,
        estimated_effort=improvement.effort_score,
        estimated_impact=improvement.impact_score,
        before_metrics=dict(before_metrics),
        after_metrics=dict(after_metrics),
        deltas=deltas,
        actual_impact_score=impact,
        implementation_success=success,
        success_supplied=implementation_success is not None,
        actual_effort=actual_effort,
        success_criteria_met=met,
        success_criteria_failed=failed,
        learning_insights=insights,
    )


def update_metrics(
    result: ImprovementResult,
    improvement: Improvement,
    after_metrics: Mapping[str, float],
    *,
    config: TrackingConfig | None = None,
) -> ImprovementResult:
    """Re-evaluate a result against newer after-metrics.

    A success value supplied when the result was recorded is kept.

    Raises :class:`ResultStateError` for a rolled-back result.
    """
    if result.rolled_back:
        msg = f"Result for '{result.improvement_title}' was rolled back"
        raise ResultStateError(msg)
    updated = record_result(
        improvement,
        result.before_metrics,
        after_metrics,
        implementation_success=(
            result.implementation_success if result.success_supplied else None
        ),
        actual_effort=result.actual_effort,
        config=config,
    )
    return updated.model_copy(update={"user_feedback": result.user_feedback})


def rollback(result: ImprovementResult, reason: str) -> ImprovementResult:
    """Force the terminal rolled-back state, whatever the prior state."""
    logger.info(
        "event=result_rolled_back title=%s reason=%s",
        result.improvement_title,
        reason,
    )
    return result.model_copy(
        update={
            "implementation_success": False,
            "actual_impact_score": ROLLBACK_IMPACT_SCORE,
            "rolled_back": True,
            "rollback_reason": reason,
            "learning_insights": (
                *result.learning_insights,
                f"Rolled back: {reason}",
            ),
        }
    )


def add_user_feedback(
    result: ImprovementResult, feedback: str
) -> ImprovementResult:
    """Attach free-text feedback and the insight derived from it.

    Never changes success or impact.
    """
    sentiment = feedback_sentiment(feedback)
    themes = feedback_themes(feedback)
    insight = f"User feedback ({sentiment})"
    if themes:
        insight += f": {', '.join(themes)}"
    return result.model_copy(
        update={
            "user_feedback": (*result.user_feedback, feedback),
            "learning_insights": (*result.learning_insights, insight),
        }
    )


def feedback_sentiment(feedback: str) -> str:
    words = _words(feedback)
    positive = len(words & _POSITIVE_WORDS)
    negative = len(words & _NEGATIVE_WORDS)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def feedback_themes(feedback: str) -> list[str]:
    words = _words(feedback)
    return [
        theme
        for theme, markers in _THEMES.items()
        if any(w.startswith(m) for w in words for m in markers)
    ]


def _words(text: str) -> set[str]:
    return {w.strip(".,!?;:()\"'").lower() for w in text.split()} - {""}


def _insights(
    impact: float,
    success: bool,
    estimated_effort: float,
    actual_effort: float | None,
    cfg: TrackingConfig,
) -> tuple[str, ...]:
    insights: list[str] = []
    if impact > cfg.high_impact:
        insights.append(
            "High impact improvement validated - consider similar approaches"
        )
    if impact < 0:
        insights.append(
            "Negative impact detected - review implementation approach"
        )
    if not success:
        insights.append("Implementation failure - analyze root causes")
    if actual_effort is not None and estimated_effort > 0:
        ratio = actual_effort / estimated_effort
        if ratio > 1.1:
            insights.append(f"Effort underestimated by {ratio - 1:.0%}")
        elif ratio < 0.9:
            insights.append(f"Effort overestimated by {1 - ratio:.0%}")
    return tuple(insights)
