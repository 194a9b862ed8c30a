"""Judge success criteria against observed metric deltas.

A criterion is tied to a metric when every token of the metric key
appears among the criterion's words (``error_rate`` matches "Error
rate reduced by at least 20%"). A tied criterion states its goal one
of two ways:

* ``by N%`` is a relative target: each tied metric must improve by at
  least N percent of its baseline.
* any other ``N%`` ("rises above 90%", "reaches at least 90%") is an
  absolute level: each tied metric's after value must reach N/100, from
  below for higher-is-better metrics and from above otherwise.

A tied criterion without a percentage is met when each tied metric
improved. Untied criteria are judged by the overall impact.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from dsladvisor.feedback.metrics import metric_tokens
from dsladvisor.feedback.schemas import MetricDelta
from dsladvisor.heuristics import DEFAULT_TRACKING_CONFIG, TrackingConfig

_WORD = re.compile(r"[a-z0-9]+")
_PERCENT = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_RELATIVE = re.compile(r"\bby\s+(?:at\s+least\s+)?(\d+(?:\.\d+)?)\s*%")


def criterion_target(criterion: str) -> float | None:
    """The fractional relative improvement ``criterion`` asks for."""
    m = _RELATIVE.search(criterion.lower())
    if m is None:
        return None
    return float(m.group(1)) / 100


def criterion_level(criterion: str) -> float | None:
    """The absolute fractional level ``criterion`` asks a metric to reach."""
    if _RELATIVE.search(criterion.lower()):
        return None
    m = _PERCENT.search(criterion)
    if m is None:
        return None
    return float(m.group(1)) / 100


def matching_deltas(
    criterion: str, deltas: Sequence[MetricDelta]
) -> list[MetricDelta]:
    words = set(_WORD.findall(criterion.lower()))
    return [
        d
        for d in deltas
        if (tokens := metric_tokens(d.key)) and all(t in words for t in tokens)
    ]


def _reaches(delta: MetricDelta, level: float) -> bool:
    if delta.lower_is_better:
        return delta.after <= level
    return delta.after >= level


def evaluate_criteria(
    criteria: Sequence[str],
    deltas: Sequence[MetricDelta],
    actual_impact: float,
    config: TrackingConfig | None = None,
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Partition ``criteria`` into (met, failed), preserving order."""
    cfg = config or DEFAULT_TRACKING_CONFIG
    met: list[str] = []
    failed: list[str] = []
    for criterion in criteria:
        matched = matching_deltas(criterion, deltas)
        if not matched:
            ok = actual_impact >= cfg.criterion_impact_fallback
        elif (level := criterion_level(criterion)) is not None:
            ok = all(_reaches(d, level) for d in matched)
        else:
            target = criterion_target(criterion) or 0.0
            ok = all(
                d.improvement > 0 and d.improvement >= target for d in matched
            )
        (met if ok else failed).append(criterion)
    return tuple(met), tuple(failed)
