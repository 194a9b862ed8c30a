"""The enumeration capability a DSL must expose to be analyzed.

Any host can satisfy DslHandle structurally: a reflection adapter, a
hand-written adapter, or the YAML-backed handle in definition_loader.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Protocol


class FieldSpec(NamedTuple):
    """One field of an entity: (field, type, required, constraints)."""

    name: str
    type: str
    required: bool
    constraints: tuple[str, ...] = ()


@dataclass(frozen=True)
class SectionInfo:
    name: str
    documented: bool = False


@dataclass(frozen=True)
class EntityInfo:
    """A declarable construct. ``children`` are entities nested inside it."""

    name: str
    section: str
    documented: bool = False
    children: tuple[EntityInfo, ...] = ()
    depends_on: tuple[str, ...] = ()


class DslHandle(Protocol):
    @property
    def name(self) -> str: ...
    def list_sections(self) -> list[SectionInfo]: ...
    def list_entities(self, section: SectionInfo) -> list[EntityInfo]: ...
    def entity_schema(self, entity: EntityInfo) -> list[FieldSpec]: ...


REQUIRED_CAPABILITIES = ("list_sections", "list_entities", "entity_schema")
