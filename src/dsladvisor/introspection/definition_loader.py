"""Load a DSL definition from YAML into a DslHandle.

Lets the advisor analyze a DSL described by hand instead of through
live reflection. The file layout::

    name: resource
    sections:
      - name: attributes
        doc: Typed fields of a resource
        entities:
          - name: attribute
            doc: Declares one field
            depends_on: [type]
            fields:
              - {name: name, type: atom, required: true}
              - {name: default, type: any, constraints: [matches_type]}
            children: []
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from dsladvisor.introspection.protocols import (
    EntityInfo,
    FieldSpec,
    SectionInfo,
)
from dsladvisor.resilience.errors import IntrospectionError


class FieldDefinition(BaseModel):
    name: str
    type: str = "any"
    required: bool = False
    constraints: list[str] = Field(default_factory=lambda: list[str]())


class EntityDefinition(BaseModel):
    name: str
    doc: str | None = None
    fields: list[FieldDefinition] = Field(
        default_factory=lambda: list[FieldDefinition]()
    )
    depends_on: list[str] = Field(default_factory=lambda: list[str]())
    children: list[EntityDefinition] = Field(
        default_factory=lambda: list[EntityDefinition]()
    )


class SectionDefinition(BaseModel):
    name: str
    doc: str | None = None
    entities: list[EntityDefinition] = Field(
        default_factory=lambda: list[EntityDefinition]()
    )


class DslDefinition(BaseModel):
    name: str
    sections: list[SectionDefinition] = Field(
        default_factory=lambda: list[SectionDefinition]()
    )


class YamlDslHandle:
    """DslHandle backed by a validated DslDefinition."""

    def __init__(self, definition: DslDefinition) -> None:
        self._definition = definition
        # (section, entity) -> definition, nested entities included
        self._entities: dict[tuple[str, str], EntityDefinition] = {}
        for section in definition.sections:
            stack = list(section.entities)
            while stack:
                entity = stack.pop()
                self._entities[(section.name, entity.name)] = entity
                stack.extend(entity.children)

    @property
    def name(self) -> str:
        return self._definition.name

    def list_sections(self) -> list[SectionInfo]:
        return [
            SectionInfo(name=s.name, documented=bool(s.doc))
            for s in self._definition.sections
        ]

    def list_entities(self, section: SectionInfo) -> list[EntityInfo]:
        for s in self._definition.sections:
            if s.name == section.name:
                return [_to_info(e, s.name) for e in s.entities]
        return []

    def entity_schema(self, entity: EntityInfo) -> list[FieldSpec]:
        definition = self._entities.get((entity.section, entity.name))
        if definition is None:
            return []
        return [
            FieldSpec(
                name=f.name,
                type=f.type,
                required=f.required,
                constraints=tuple(f.constraints),
            )
            for f in definition.fields
        ]


def _to_info(entity: EntityDefinition, section: str) -> EntityInfo:
    return EntityInfo(
        name=entity.name,
        section=section,
        documented=bool(entity.doc),
        children=tuple(_to_info(c, section) for c in entity.children),
        depends_on=tuple(entity.depends_on),
    )


def parse_definition(data: dict[str, Any]) -> YamlDslHandle:
    try:
        definition = DslDefinition.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid DSL definition: {exc}"
        raise IntrospectionError(msg) from exc
    return YamlDslHandle(definition)


def load_definition(path: Path) -> YamlDslHandle:
    """Load ``path`` and return a handle over its DSL definition.

    Raises :class:`IntrospectionError` when the file is missing,
    is not valid YAML, or does not describe a DSL.
    """
    if not path.is_file():
        msg = f"DSL definition not found: {path}"
        raise IntrospectionError(msg)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Cannot read DSL definition {path}: {exc}"
        raise IntrospectionError(msg) from exc
    if not isinstance(data, dict):
        msg = f"DSL definition {path} must be a mapping"
        raise IntrospectionError(msg)
    return parse_definition(data)  # pyright: ignore[reportUnknownArgumentType]
