"""Pydantic models for the normalized schema description."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SectionSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    depth: int = 0  # max entity containment depth, 0 when empty
    entity_count: int = 0
    documented: bool = False


class EntitySummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    section: str
    parent: str | None = None
    depth: int = 1
    required_fields: int = 0
    optional_fields: int = 0
    constraint_count: int = 0
    documented: bool = False
    depends_on: tuple[str, ...] = ()
    complexity: float = 0.0

    @property
    def field_count(self) -> int:
        return self.required_fields + self.optional_fields


class ComplexityMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    cyclomatic: float = Field(default=0.0, ge=0.0)
    cognitive: float = Field(default=0.0, ge=0.0)
    api_surface: float = Field(default=0.0, ge=0.0)


class SchemaDescription(BaseModel):
    """Immutable snapshot of a DSL's shape, created once per run."""

    model_config = ConfigDict(frozen=True)

    dsl_name: str
    sections: tuple[SectionSummary, ...] = ()
    entities: tuple[EntitySummary, ...] = ()
    complexity: ComplexityMetrics = Field(default_factory=ComplexityMetrics)

    @property
    def section_count(self) -> int:
        return len(self.sections)

    @property
    def entity_count(self) -> int:
        return len(self.entities)

    @property
    def constraint_count(self) -> int:
        return sum(e.constraint_count for e in self.entities)

    @property
    def total_fields(self) -> int:
        return sum(e.field_count for e in self.entities)

    @property
    def max_depth(self) -> int:
        return max((s.depth for s in self.sections), default=0)

    @property
    def construct_names(self) -> tuple[str, ...]:
        return tuple(sorted({e.name for e in self.entities}))

    @property
    def complexity_per_entity(self) -> float:
        if not self.entities:
            return 0.0
        return self.complexity.cyclomatic / len(self.entities)

    @property
    def documentation_completeness(self) -> float | None:
        """Documented fraction of sections and entities, None when empty."""
        total = len(self.sections) + len(self.entities)
        if total == 0:
            return None
        documented = sum(1 for s in self.sections if s.documented) + sum(
            1 for e in self.entities if e.documented
        )
        return documented / total

    @property
    def dependency_edges(self) -> tuple[tuple[str, str], ...]:
        """(entity, dependency) pairs whose target is a known entity."""
        known = {e.name for e in self.entities}
        return tuple(
            sorted(
                {
                    (e.name, dep)
                    for e in self.entities
                    for dep in e.depends_on
                    if dep in known
                }
            )
        )

    def entity(self, name: str) -> EntitySummary | None:
        for e in self.entities:
            if e.name == name:
                return e
        return None
