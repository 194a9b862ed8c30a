"""Turn a DSL handle into a normalized SchemaDescription."""

from __future__ import annotations

import logging

from dsladvisor.heuristics import DEFAULT_COMPLEXITY_WEIGHTS, ComplexityWeights
from dsladvisor.introspection.protocols import (
    REQUIRED_CAPABILITIES,
    DslHandle,
    EntityInfo,
    SectionInfo,
)
from dsladvisor.introspection.schemas import (
    ComplexityMetrics,
    EntitySummary,
    SchemaDescription,
    SectionSummary,
)
from dsladvisor.resilience.errors import IntrospectionError

logger = logging.getLogger(__name__)


def introspect(
    handle: object,
    weights: ComplexityWeights | None = None,
) -> SchemaDescription:
    """Enumerate sections, entities and fields into a SchemaDescription.

    Raises :class:`IntrospectionError` when the handle lacks the
    enumeration capability or enumeration itself fails. No partial
    schema is ever returned.
    """
    w = weights or DEFAULT_COMPLEXITY_WEIGHTS
    dsl = _require_capability(handle)
    name = _dsl_name(handle)

    try:
        sections = list(dsl.list_sections())
        section_summaries: list[SectionSummary] = []
        entity_summaries: list[EntitySummary] = []
        for section in sections:
            top_level = list(dsl.list_entities(section))
            collected: list[EntitySummary] = []
            for entity in top_level:
                _collect_entity(
                    dsl, entity, section, None, 1, w, collected
                )
            depth = max((e.depth for e in collected), default=0)
            section_summaries.append(
                SectionSummary(
                    name=section.name,
                    depth=depth,
                    entity_count=len(collected),
                    documented=section.documented,
                )
            )
            entity_summaries.extend(collected)
    except IntrospectionError:
        raise
    except Exception as exc:
        msg = f"Failed to enumerate DSL '{name}': {exc}"
        raise IntrospectionError(msg) from exc

    complexity = compute_complexity(
        section_summaries, entity_summaries, w
    )
    logger.info(
        "event=introspected dsl=%s sections=%d entities=%d cognitive=%.2f",
        name,
        len(section_summaries),
        len(entity_summaries),
        complexity.cognitive,
    )
    return SchemaDescription(
        dsl_name=name,
        sections=tuple(section_summaries),
        entities=tuple(entity_summaries),
        complexity=complexity,
    )


def construct_keywords(handle: object) -> frozenset[str]:
    """Entity names the DSL declares, without fetching field schemas.

    The scanner uses these as the keywords it searches a corpus for.
    """
    dsl = _require_capability(handle)
    names: set[str] = set()
    try:
        for section in dsl.list_sections():
            stack = list(dsl.list_entities(section))
            while stack:
                entity = stack.pop()
                names.add(entity.name)
                stack.extend(entity.children)
    except Exception as exc:
        msg = f"Failed to enumerate DSL constructs: {exc}"
        raise IntrospectionError(msg) from exc
    return frozenset(names)


def compute_complexity(
    sections: list[SectionSummary],
    entities: list[EntitySummary],
    weights: ComplexityWeights | None = None,
) -> ComplexityMetrics:
    w = weights or DEFAULT_COMPLEXITY_WEIGHTS
    constraints = sum(e.constraint_count for e in entities)
    fields = sum(e.field_count for e in entities)
    max_depth = max((s.depth for s in sections), default=0)

    cyclomatic = sum(e.complexity for e in entities)
    cognitive = (
        w.cognitive_section * len(sections)
        + w.cognitive_entity * len(entities)
        + w.cognitive_constraint * constraints
        + w.cognitive_depth * max_depth
    )
    api_surface = (
        w.api_entity * len(entities)
        + w.api_section * len(sections)
        + w.api_field * fields
    )
    return ComplexityMetrics(
        cyclomatic=round(cyclomatic, 6),
        cognitive=round(cognitive, 6),
        api_surface=round(api_surface, 6),
    )


def _collect_entity(
    dsl: DslHandle,
    entity: EntityInfo,
    section: SectionInfo,
    parent: str | None,
    depth: int,
    weights: ComplexityWeights,
    out: list[EntitySummary],
) -> None:
    """Summarize one entity, then recurse into nested children."""
    fields = list(dsl.entity_schema(entity))
    required = sum(1 for f in fields if f.required)
    optional = len(fields) - required
    constraints = sum(len(f.constraints) for f in fields)
    complexity = (
        weights.required_field * required
        + weights.optional_field * optional
        + weights.constraint * constraints
    )
    out.append(
        EntitySummary(
            name=entity.name,
            section=section.name,
            parent=parent,
            depth=depth,
            required_fields=required,
            optional_fields=optional,
            constraint_count=constraints,
            documented=entity.documented,
            depends_on=tuple(entity.depends_on),
            complexity=round(complexity, 6),
        )
    )
    for child in entity.children:
        _collect_entity(
            dsl, child, section, entity.name, depth + 1, weights, out
        )


def _require_capability(handle: object) -> DslHandle:
    missing = [
        cap
        for cap in REQUIRED_CAPABILITIES
        if not callable(getattr(handle, cap, None))
    ]
    if missing:
        msg = (
            f"DSL handle {type(handle).__name__} lacks required "
            f"capabilities: {', '.join(missing)}"
        )
        raise IntrospectionError(msg)
    return handle  # type: ignore[return-value]


def _dsl_name(handle: object) -> str:
    name = getattr(handle, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(handle).__name__
