"""Independent friction rules over (schema, mined patterns).

Every rule returns zero or more FrictionPoints and never raises:
missing data means the rule does not fire. Impact is the normalized
amount by which the rule's threshold is exceeded, clamped to [0, 1].
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable

from dsladvisor.analysis.friction.schemas import FrictionPoint
from dsladvisor.analysis.mining.schemas import Combination, MiningResult
from dsladvisor.constants import SEVERITY_RANK, FrictionCategory, Severity
from dsladvisor.heuristics import FrictionThresholds
from dsladvisor.introspection.schemas import SchemaDescription

type FrictionRule = Callable[
    [SchemaDescription, MiningResult, FrictionThresholds],
    list[FrictionPoint],
]


def excess(value: float, threshold: float) -> float:
    """Normalized overshoot of ``value`` above ``threshold``."""
    if threshold <= 0:
        return 1.0 if value > threshold else 0.0
    return round(max(0.0, min(1.0, (value - threshold) / threshold)), 6)


def shortfall(value: float, threshold: float) -> float:
    """Normalized undershoot of ``value`` below ``threshold``."""
    if threshold <= 0:
        return 0.0
    return round(max(0.0, min(1.0, (threshold - value) / threshold)), 6)


def cognitive_overload(
    schema: SchemaDescription,
    mining: MiningResult,
    t: FrictionThresholds,
) -> list[FrictionPoint]:
    """One point when cognitive load, entity count or nesting is too high."""
    triggered: list[tuple[Severity, float, str]] = []
    affected: set[str] = set()
    populated = [s.name for s in schema.sections if s.entity_count]

    cognitive = schema.complexity.cognitive
    if cognitive > t.cognitive_max:
        triggered.append(
            (
                Severity.HIGH,
                excess(cognitive, t.cognitive_max),
                f"cognitive complexity {cognitive:g} exceeds {t.cognitive_max:g}",
            )
        )
        affected.update(populated)
    if schema.entity_count > t.entity_max:
        triggered.append(
            (
                Severity.MEDIUM,
                excess(schema.entity_count, t.entity_max),
                f"{schema.entity_count} entities exceed the maximum of {t.entity_max}",
            )
        )
        affected.update(populated)
    if schema.max_depth > t.nesting_max:
        triggered.append(
            (
                Severity.MEDIUM,
                excess(schema.max_depth, t.nesting_max),
                f"nesting depth {schema.max_depth} exceeds {t.nesting_max}",
            )
        )
        affected.update(
            s.name for s in schema.sections if s.depth > t.nesting_max
        )
    if not triggered:
        return []

    severity = max(
        (sev for sev, _, _ in triggered), key=lambda s: SEVERITY_RANK[s]
    )
    return [
        FrictionPoint(
            category=FrictionCategory.COGNITIVE_OVERLOAD,
            severity=severity,
            construct=schema.dsl_name,
            evidence="; ".join(msg for _, _, msg in triggered),
            impact_score=max(score for _, score, _ in triggered),
            affected_constructs=tuple(sorted(affected)),
        )
    ]


def error_prone(
    schema: SchemaDescription,
    mining: MiningResult,
    t: FrictionThresholds,
) -> list[FrictionPoint]:
    """One point per construct whose error observations exceed the limit."""
    points: list[FrictionPoint] = []
    for construct, count in sorted(mining.error_counts().items()):
        if count <= t.error_count_max:
            continue
        severity = (
            Severity.HIGH
            if count > 2 * t.error_count_max
            else Severity.MEDIUM
        )
        points.append(
            FrictionPoint(
                category=FrictionCategory.ERROR_PRONE,
                severity=severity,
                construct=construct,
                evidence=(
                    f"{count} error observations for '{construct}' "
                    f"(threshold {t.error_count_max})"
                ),
                impact_score=excess(count, t.error_count_max),
                affected_constructs=(construct,),
                frequency=count,
            )
        )
    return points


def is_boilerplate(
    combination: Combination, t: FrictionThresholds
) -> bool:
    """A combination is repetitive when it spans several constructs
    and appears in a large share of files."""
    return (
        len(combination.constructs) >= t.boilerplate_min_constructs
        and combination.file_share >= t.boilerplate_min_file_share
    )


def verbosity(
    schema: SchemaDescription,
    mining: MiningResult,
    t: FrictionThresholds,
) -> list[FrictionPoint]:
    points: list[FrictionPoint] = []
    per_entity = schema.complexity_per_entity
    if per_entity > t.complexity_per_entity_max:
        heavy = sorted(
            e.name
            for e in schema.entities
            if e.complexity > t.complexity_per_entity_max
        )
        points.append(
            FrictionPoint(
                category=FrictionCategory.VERBOSITY,
                severity=Severity.MEDIUM,
                construct=schema.dsl_name,
                evidence=(
                    f"schema complexity per entity {per_entity:.2f} "
                    f"exceeds {t.complexity_per_entity_max:g}"
                ),
                impact_score=excess(per_entity, t.complexity_per_entity_max),
                affected_constructs=tuple(heavy),
            )
        )

    for combo in mining.combinations:
        if combo.frequency <= t.combination_frequency_max:
            continue
        if not is_boilerplate(combo, t):
            continue
        points.append(
            FrictionPoint(
                category=FrictionCategory.VERBOSITY,
                severity=Severity.LOW,
                construct="+".join(combo.constructs),
                evidence=(
                    f"combination {' + '.join(combo.constructs)} repeats in "
                    f"{combo.frequency} files ({combo.file_share:.0%})"
                ),
                impact_score=excess(
                    combo.frequency, t.combination_frequency_max
                ),
                affected_constructs=combo.constructs,
                frequency=combo.frequency,
            )
        )
    return points


def inconsistency(
    schema: SchemaDescription,
    mining: MiningResult,
    t: FrictionThresholds,
) -> list[FrictionPoint]:
    score = mining.naming_consistency
    if score is None or score >= t.naming_consistency_min:
        return []
    severity = Severity.HIGH if score < 0.5 else Severity.MEDIUM
    affected = mining.naming_outliers or schema.construct_names
    return [
        FrictionPoint(
            category=FrictionCategory.INCONSISTENCY,
            severity=severity,
            construct=schema.dsl_name,
            evidence=(
                f"naming consistency {score:.2f} below "
                f"{t.naming_consistency_min:g} "
                f"(dominant: {mining.dominant_convention})"
            ),
            impact_score=shortfall(score, t.naming_consistency_min),
            affected_constructs=tuple(affected),
            frequency=len(mining.naming_outliers),
        )
    ]


def discoverability(
    schema: SchemaDescription,
    mining: MiningResult,
    t: FrictionThresholds,
) -> list[FrictionPoint]:
    completeness = schema.documentation_completeness
    if completeness is None or completeness >= t.documentation_min:
        return []
    undocumented = sorted(e.name for e in schema.entities if not e.documented)
    return [
        FrictionPoint(
            category=FrictionCategory.DISCOVERABILITY,
            severity=Severity.LOW,
            construct=schema.dsl_name,
            evidence=(
                f"documentation completeness {completeness:.2f} below "
                f"{t.documentation_min:g}"
            ),
            impact_score=shortfall(completeness, t.documentation_min),
            affected_constructs=tuple(undocumented),
        )
    ]


def composition_difficulty(
    schema: SchemaDescription,
    mining: MiningResult,
    t: FrictionThresholds,
) -> list[FrictionPoint]:
    """Fires on any dependency cycle or too many cross-construct edges.

    Interaction complexity is the number of dependency edges between
    known entities.
    """
    edges = schema.dependency_edges
    if not edges:
        return []
    cyclic = find_cycle_members(edges)
    interaction = float(len(edges))
    over = interaction > t.interaction_max
    if not cyclic and not over:
        return []

    messages: list[str] = []
    affected: set[str] = set(cyclic)
    impact = excess(interaction, t.interaction_max)
    if cyclic:
        messages.append(
            f"dependency cycle through {', '.join(sorted(cyclic))}"
        )
        impact = max(impact, 0.5)
    if over:
        messages.append(
            f"interaction complexity {interaction:g} exceeds "
            f"{t.interaction_max:g}"
        )
        affected.update(src for src, _ in edges)
    return [
        FrictionPoint(
            category=FrictionCategory.COMPOSITION_DIFFICULTY,
            severity=Severity.HIGH if cyclic else Severity.MEDIUM,
            construct=schema.dsl_name,
            evidence="; ".join(messages),
            impact_score=impact,
            affected_constructs=tuple(sorted(affected)),
            frequency=len(edges),
        )
    ]


def find_cycle_members(
    edges: tuple[tuple[str, str], ...],
) -> set[str]:
    """Nodes lying on at least one directed cycle (Tarjan SCC)."""
    graph: dict[str, list[str]] = defaultdict(list)
    for src, dst in edges:
        graph[src].append(dst)
        graph.setdefault(dst, [])

    index: dict[str, int] = {}
    low: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    members: set[str] = set()
    counter = 0

    def strongconnect(node: str) -> None:
        nonlocal counter
        index[node] = low[node] = counter
        counter += 1
        stack.append(node)
        on_stack.add(node)
        for nxt in sorted(graph[node]):
            if nxt not in index:
                strongconnect(nxt)
                low[node] = min(low[node], low[nxt])
            elif nxt in on_stack:
                low[node] = min(low[node], index[nxt])
        if low[node] == index[node]:
            component: list[str] = []
            while True:
                top = stack.pop()
                on_stack.discard(top)
                component.append(top)
                if top == node:
                    break
            if len(component) > 1 or node in graph[node]:
                members.update(component)

    for node in sorted(graph):
        if node not in index:
            strongconnect(node)
    return members


ALL_RULES: tuple[FrictionRule, ...] = (
    cognitive_overload,
    error_prone,
    verbosity,
    inconsistency,
    discoverability,
    composition_difficulty,
)
