"""Schema introspection: DSL handle to normalized SchemaDescription."""

from dsladvisor.introspection.definition_loader import (
    YamlDslHandle,
    load_definition,
    parse_definition,
)
from dsladvisor.introspection.introspector import (
    compute_complexity,
    construct_keywords,
    introspect,
)
from dsladvisor.introspection.protocols import (
    DslHandle,
    EntityInfo,
    FieldSpec,
    SectionInfo,
)
from dsladvisor.introspection.schemas import (
    ComplexityMetrics,
    EntitySummary,
    SchemaDescription,
    SectionSummary,
)

__all__ = [
    "ComplexityMetrics",
    "DslHandle",
    "EntityInfo",
    "EntitySummary",
    "FieldSpec",
    "SchemaDescription",
    "SectionInfo",
    "SectionSummary",
    "YamlDslHandle",
    "compute_complexity",
    "construct_keywords",
    "introspect",
    "load_definition",
    "parse_definition",
]
