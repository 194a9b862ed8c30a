"""Implementation tracking and the learning loop."""

from dsladvisor.feedback.learning import learn
from dsladvisor.feedback.metrics import compute_deltas, lower_is_better, net_impact
from dsladvisor.feedback.schemas import ImprovementResult, MetricDelta
from dsladvisor.feedback.tracker import (
    add_user_feedback,
    record_result,
    rollback,
    update_metrics,
)

__all__ = [
    "ImprovementResult",
    "MetricDelta",
    "add_user_feedback",
    "compute_deltas",
    "learn",
    "lower_is_better",
    "net_impact",
    "record_result",
    "rollback",
    "update_metrics",
]
