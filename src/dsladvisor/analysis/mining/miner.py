"""Fold per-file observations into usage patterns.

Pure and deterministic: the same observations always produce the same
MiningResult, in the same order, regardless of input order.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Sequence
from typing import Any

from dsladvisor.analysis.mining.confidence import pattern_confidence, status_for
from dsladvisor.analysis.mining.naming import classify_name, naming_consistency
from dsladvisor.analysis.mining.schemas import (
    CONTEXT_FIELDS,
    Combination,
    MiningResult,
    UsagePattern,
)
from dsladvisor.constants import Outcome, PatternType, ValidationStatus
from dsladvisor.heuristics import DEFAULT_MINING_CONFIG, MiningConfig
from dsladvisor.scanning.schemas import ConstructOccurrence, FileObservation

logger = logging.getLogger(__name__)

_TYPE_ORDER = {t: i for i, t in enumerate(PatternType)}

_OUTCOME_TYPES: dict[Outcome, PatternType] = {
    Outcome.ERROR: PatternType.ERROR,
    Outcome.SUCCESS: PatternType.SUCCESS,
    Outcome.WORKAROUND: PatternType.WORKAROUND,
}

type _Located = tuple[str, ConstructOccurrence]


def mine_patterns(
    observations: Sequence[FileObservation],
    config: MiningConfig | None = None,
) -> MiningResult:
    cfg = config or DEFAULT_MINING_CONFIG
    ordered = sorted(observations, key=lambda o: (o.root, o.path))
    files_observed = sum(1 for o in ordered if o.occurrences)

    by_construct: dict[str, list[_Located]] = defaultdict(list)
    for obs in ordered:
        file_key = f"{obs.root}/{obs.path}"
        for occ in sorted(obs.occurrences, key=lambda o: o.line):
            by_construct[occ.construct].append((file_key, occ))

    patterns: list[UsagePattern] = []
    for construct in sorted(by_construct):
        patterns.extend(
            _construct_patterns(
                construct, by_construct[construct], files_observed, cfg
            )
        )
    patterns.sort(
        key=lambda p: (p.construct_name, _TYPE_ORDER[p.pattern_type])
    )

    names = [n for obs in ordered for n in obs.naming_tokens]
    consistency, dominant = naming_consistency(names)
    outliers = _naming_outliers(by_construct, dominant)
    combinations = _combinations(ordered, files_observed, cfg)
    total = sum(len(v) for v in by_construct.values())

    logger.info(
        "event=patterns_mined constructs=%d patterns=%d occurrences=%d",
        len(by_construct),
        len(patterns),
        total,
    )
    return MiningResult(
        patterns=tuple(patterns),
        naming_consistency=consistency,
        dominant_convention=dominant,
        naming_outliers=outliers,
        combinations=combinations,
        total_occurrences=total,
        files_observed=files_observed,
    )


def observe(
    pattern: UsagePattern,
    *,
    context: dict[str, dict[str, Any]] | None = None,
    config: MiningConfig | None = None,
) -> UsagePattern:
    """Record one more consistent observation of ``pattern``.

    Frequency grows by one, context maps are merged (never emptied)
    and confidence is recomputed; it can only stay equal or grow.
    """
    cfg = config or DEFAULT_MINING_CONFIG
    update: dict[str, Any] = {"frequency": pattern.frequency + 1}
    for name in CONTEXT_FIELDS:
        merged = dict(getattr(pattern, name))
        if context and context.get(name):
            merged.update(context[name])
        update[name] = merged
    populated = sum(1 for name in CONTEXT_FIELDS if update[name])
    confidence = max(
        pattern.confidence_score,
        pattern_confidence(
            pattern.pattern_type,
            pattern.frequency + 1,
            populated,
            cfg,
        ),
    )
    update["confidence_score"] = confidence
    if pattern.validation_status != ValidationStatus.INVALIDATED:
        update["validation_status"] = status_for(confidence, cfg)
    return pattern.model_copy(update=update)


def validate(
    pattern: UsagePattern, status: ValidationStatus
) -> UsagePattern:
    """Explicitly set a pattern's validation status."""
    return pattern.model_copy(update={"validation_status": status})


def _construct_patterns(
    construct: str,
    located: list[_Located],
    files_observed: int,
    cfg: MiningConfig,
) -> list[UsagePattern]:
    groups: dict[PatternType, list[_Located]] = {}
    usage_type = (
        PatternType.COMMON
        if len(located) >= cfg.common_min_frequency
        else PatternType.RARE
    )
    groups[usage_type] = located
    for file_key, occ in located:
        if occ.outcome is not None:
            groups.setdefault(_OUTCOME_TYPES[occ.outcome], []).append(
                (file_key, occ)
            )
        if occ.complexity > cfg.antipattern_complexity:
            groups.setdefault(PatternType.ANTIPATTERN, []).append(
                (file_key, occ)
            )
    return [
        _build_pattern(ptype, construct, members, files_observed, cfg)
        for ptype, members in groups.items()
    ]


def _build_pattern(
    pattern_type: PatternType,
    construct: str,
    members: list[_Located],
    files_observed: int,
    cfg: MiningConfig,
) -> UsagePattern:
    occurrences = [occ for _, occ in members]
    files = {file_key for file_key, _ in members}
    contexts = {
        "error_context": _error_context(occurrences, cfg),
        "user_context": _user_context(occurrences, cfg),
        "performance_context": _performance_context(occurrences),
        "business_context": (
            {
                "files": len(files),
                "file_share": round(len(files) / files_observed, 6),
            }
            if files_observed
            else {}
        ),
    }
    populated = sum(1 for v in contexts.values() if v)
    confidence = pattern_confidence(
        pattern_type, len(members), populated, cfg
    )
    example = next((o.snippet for o in occurrences if o.snippet), None)
    return UsagePattern(
        pattern_type=pattern_type,
        construct_name=construct,
        frequency=len(members),
        confidence_score=confidence,
        validation_status=status_for(confidence, cfg),
        example_snippet=example,
        **contexts,
    )


def _error_context(
    occurrences: list[ConstructOccurrence], cfg: MiningConfig
) -> dict[str, Any]:
    errors = [o for o in occurrences if o.outcome == Outcome.ERROR]
    if not errors:
        return {}
    messages = sorted({o.message for o in errors if o.message})
    return {
        "error_count": len(errors),
        "messages": messages[: cfg.max_examples],
    }


def _user_context(
    occurrences: list[ConstructOccurrence], cfg: MiningConfig
) -> dict[str, Any]:
    counts = Counter(o.name for o in occurrences if o.name)
    if not counts:
        return {}
    top = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return {
        "distinct_names": len(counts),
        "top_names": [name for name, _ in top[: cfg.max_examples]],
    }


def _performance_context(
    occurrences: list[ConstructOccurrence],
) -> dict[str, Any]:
    durations = [
        o.duration_ms for o in occurrences if o.duration_ms is not None
    ]
    if not durations:
        return {}
    return {
        "samples": len(durations),
        "mean_duration_ms": round(sum(durations) / len(durations), 3),
        "max_duration_ms": max(durations),
    }


def _naming_outliers(
    by_construct: dict[str, list[_Located]],
    dominant: str | None,
) -> tuple[str, ...]:
    if dominant is None:
        return ()
    return tuple(
        sorted(
            construct
            for construct, located in by_construct.items()
            if any(
                occ.name and classify_name(occ.name) != dominant
                for _, occ in located
            )
        )
    )


def _combinations(
    observations: list[FileObservation],
    files_observed: int,
    cfg: MiningConfig,
) -> tuple[Combination, ...]:
    counts = Counter(o.constructs for o in observations if o.occurrences)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return tuple(
        Combination(
            constructs=constructs,
            frequency=freq,
            file_share=round(freq / files_observed, 6),
        )
        for constructs, freq in ranked[: cfg.max_combinations]
    )
