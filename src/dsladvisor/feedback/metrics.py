"""Before/after metric deltas and the net impact score."""

from __future__ import annotations

import re
from collections.abc import Mapping

from dsladvisor.constants import DeltaDirection
from dsladvisor.feedback.schemas import MetricDelta
from dsladvisor.heuristics import DEFAULT_TRACKING_CONFIG, TrackingConfig

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def metric_tokens(key: str) -> tuple[str, ...]:
    """Lower-case word tokens of a metric key (``error_rate`` → error, rate)."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", key)
    return tuple(t for t in _TOKEN_SPLIT.split(spaced.lower()) if t)


def lower_is_better(key: str, config: TrackingConfig | None = None) -> bool:
    cfg = config or DEFAULT_TRACKING_CONFIG
    explicit = cfg.metric_directions.get(key)
    if explicit is not None:
        return explicit.lower() == "lower"
    tokens = metric_tokens(key)
    return any(
        token.startswith(marker)
        for token in tokens
        for marker in cfg.lower_is_better_tokens
    )


def compute_deltas(
    before: Mapping[str, float],
    after: Mapping[str, float],
    config: TrackingConfig | None = None,
) -> tuple[MetricDelta, ...]:
    """Deltas over the keys present in both maps, sorted by key."""
    cfg = config or DEFAULT_TRACKING_CONFIG
    deltas: list[MetricDelta] = []
    for key in sorted(set(before) & set(after)):
        b = float(before[key])
        a = float(after[key])
        if b != 0:
            relative = (a - b) / abs(b)
        else:
            relative = 0.0 if a == 0 else (1.0 if a > 0 else -1.0)
        lower = lower_is_better(key, cfg)
        improvement = -relative if lower else relative
        if abs(relative) <= cfg.unchanged_band:
            direction = DeltaDirection.UNCHANGED
        elif improvement > 0:
            direction = DeltaDirection.POSITIVE
        else:
            direction = DeltaDirection.NEGATIVE
        deltas.append(
            MetricDelta(
                key=key,
                before=b,
                after=a,
                relative_change=round(relative, 6),
                improvement=round(improvement, 6),
                direction=direction,
                lower_is_better=lower,
            )
        )
    return tuple(deltas)


def net_impact(
    deltas: tuple[MetricDelta, ...],
    config: TrackingConfig | None = None,
) -> float:
    """Weighted mean of per-metric improvements, clamped to [-1, 1].

    Unchanged metrics count as zero; each metric's improvement is
    clamped to [-1, 1] before weighting.
    """
    cfg = config or DEFAULT_TRACKING_CONFIG
    if not deltas:
        return 0.0
    total_weight = 0.0
    weighted = 0.0
    for delta in deltas:
        weight = cfg.metric_weights.get(delta.key, 1.0)
        total_weight += weight
        if delta.direction == DeltaDirection.UNCHANGED:
            continue
        weighted += weight * max(-1.0, min(1.0, delta.improvement))
    if total_weight <= 0:
        return 0.0
    return round(max(-1.0, min(1.0, weighted / total_weight)), 6)
