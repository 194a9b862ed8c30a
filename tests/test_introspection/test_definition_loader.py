"""Tests for loading DSL definitions from YAML."""

from __future__ import annotations

from pathlib import Path

import pytest

from dsladvisor.introspection.definition_loader import (
    load_definition,
    parse_definition,
)
from dsladvisor.introspection.protocols import SectionInfo
from dsladvisor.resilience.errors import IntrospectionError

_YAML = """\
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
        children:
          - name: constraint
            fields:
              - {name: value, required: true}
"""


def test_load_definition(tmp_path: Path) -> None:
    path = tmp_path / "resource.yaml"
    path.write_text(_YAML)

    handle = load_definition(path)
    assert handle.name == "resource"
    (section,) = handle.list_sections()
    assert section == SectionInfo(name="attributes", documented=True)

    (entity,) = handle.list_entities(section)
    assert entity.name == "attribute"
    assert entity.documented is True
    assert entity.depends_on == ("type",)
    assert [c.name for c in entity.children] == ["constraint"]

    fields = handle.entity_schema(entity)
    assert [f.name for f in fields] == ["name", "default"]
    assert fields[0].required is True
    assert fields[1].constraints == ("matches_type",)


def test_nested_entity_schema_resolved(tmp_path: Path) -> None:
    path = tmp_path / "resource.yaml"
    path.write_text(_YAML)
    handle = load_definition(path)

    (entity,) = handle.list_entities(handle.list_sections()[0])
    (child,) = entity.children
    (field,) = handle.entity_schema(child)
    assert field.name == "value"
    assert field.required is True


def test_unknown_section_has_no_entities() -> None:
    handle = parse_definition({"name": "empty"})
    assert handle.list_entities(SectionInfo(name="nope")) == []


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(IntrospectionError, match="not found"):
        load_definition(tmp_path / "absent.yaml")


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("name: [unclosed\n")
    with pytest.raises(IntrospectionError, match="Cannot read"):
        load_definition(path)


def test_non_mapping_raises(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(IntrospectionError, match="must be a mapping"):
        load_definition(path)


def test_schema_violation_raises() -> None:
    with pytest.raises(IntrospectionError, match="Invalid DSL definition"):
        parse_definition({"sections": []})
