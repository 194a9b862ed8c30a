"""Tests for schema introspection and complexity metrics."""

from __future__ import annotations

import pytest

from dsladvisor.heuristics import ComplexityWeights
from dsladvisor.introspection.introspector import (
    construct_keywords,
    introspect,
)
from dsladvisor.introspection.protocols import (
    EntityInfo,
    FieldSpec,
    SectionInfo,
)
from dsladvisor.introspection.schemas import SchemaDescription
from dsladvisor.resilience.errors import IntrospectionError
from tests.conftest import make_handle, make_schema, resource_definition


class _FailingHandle:
    name = "broken"

    def list_sections(self) -> list[SectionInfo]:
        return [SectionInfo(name="s")]

    def list_entities(self, section: SectionInfo) -> list[EntityInfo]:
        raise RuntimeError("reflection blew up")

    def entity_schema(self, entity: EntityInfo) -> list[FieldSpec]:
        return []


class _EmptyHandle:
    def list_sections(self) -> list[SectionInfo]:
        return []

    def list_entities(self, section: SectionInfo) -> list[EntityInfo]:
        return []

    def entity_schema(self, entity: EntityInfo) -> list[FieldSpec]:
        return []


class TestIntrospect:
    def test_sections_and_entities(
        self, resource_schema: SchemaDescription
    ) -> None:
        assert resource_schema.dsl_name == "resource"
        assert [s.name for s in resource_schema.sections] == [
            "attributes",
            "relationships",
        ]
        assert resource_schema.section_count == 2
        assert resource_schema.entity_count == 3
        assert resource_schema.construct_names == (
            "attribute",
            "belongs_to",
            "timestamps",
        )

    def test_entity_field_counts(
        self, resource_schema: SchemaDescription
    ) -> None:
        attribute = resource_schema.entity("attribute")
        assert attribute is not None
        assert attribute.required_fields == 2
        assert attribute.optional_fields == 1
        assert attribute.constraint_count == 1
        # 1.5 * 2 + 0.8 * 1 + 0.5 * 1
        assert attribute.complexity == pytest.approx(4.3)
        assert resource_schema.entity("missing") is None

    def test_complexity_metrics(
        self, resource_schema: SchemaDescription
    ) -> None:
        metrics = resource_schema.complexity
        assert metrics.cyclomatic == pytest.approx(7.3)
        # 2 * 2 sections + 3 entities + 0.5 * 1 constraint + 1 depth
        assert metrics.cognitive == pytest.approx(8.5)
        # 1.5 * 3 entities + 2 * 2 sections + 0.25 * 5 fields
        assert metrics.api_surface == pytest.approx(9.75)

    def test_documentation_and_dependencies(
        self, resource_schema: SchemaDescription
    ) -> None:
        assert resource_schema.documentation_completeness == 1.0
        assert resource_schema.dependency_edges == (
            ("belongs_to", "attribute"),
        )

    def test_nested_entities_increase_depth(self) -> None:
        schema = make_schema({
            "name": "nested",
            "sections": [
                {
                    "name": "actions",
                    "entities": [
                        {
                            "name": "action",
                            "children": [
                                {
                                    "name": "argument",
                                    "children": [{"name": "constraint"}],
                                }
                            ],
                        }
                    ],
                }
            ],
        })
        assert schema.max_depth == 3
        assert schema.sections[0].entity_count == 3
        argument = schema.entity("argument")
        assert argument is not None
        assert argument.parent == "action"
        assert argument.depth == 2

    def test_custom_weights(self) -> None:
        weights = ComplexityWeights(required_field=10.0)
        schema = introspect(make_handle(resource_definition()), weights)
        attribute = schema.entity("attribute")
        assert attribute is not None
        assert attribute.complexity == pytest.approx(21.3)

    def test_empty_dsl(self) -> None:
        schema = introspect(_EmptyHandle())
        assert schema.dsl_name == "_EmptyHandle"
        assert schema.entity_count == 0
        assert schema.max_depth == 0
        assert schema.complexity_per_entity == 0.0
        assert schema.documentation_completeness is None

    def test_missing_capability_raises(self) -> None:
        with pytest.raises(IntrospectionError, match="list_sections"):
            introspect(object())

    def test_enumeration_failure_raises(self) -> None:
        with pytest.raises(IntrospectionError, match="reflection blew up"):
            introspect(_FailingHandle())


class TestConstructKeywords:
    def test_includes_nested_entities(self) -> None:
        handle = make_handle({
            "name": "n",
            "sections": [
                {
                    "name": "s",
                    "entities": [
                        {"name": "outer", "children": [{"name": "inner"}]}
                    ],
                }
            ],
        })
        assert construct_keywords(handle) == frozenset({"outer", "inner"})

    def test_enumeration_failure_raises(self) -> None:
        with pytest.raises(IntrospectionError):
            construct_keywords(_FailingHandle())
