"""Shared test fixtures: in-memory SQLite, async session, DSL builders."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from dsladvisor.config import create_app_engine, create_session_factory
from dsladvisor.constants import Outcome
from dsladvisor.introspection.definition_loader import (
    YamlDslHandle,
    parse_definition,
)
from dsladvisor.introspection.introspector import introspect
from dsladvisor.introspection.schemas import SchemaDescription
from dsladvisor.models.base import Base
from dsladvisor.scanning.schemas import (
    ConstructOccurrence,
    FileObservation,
    occurrence_complexity,
)

# ── DSL builders ─────────────────────────────────────────


def resource_definition() -> dict[str, Any]:
    """A small, fully documented resource DSL."""
    return {
        "name": "resource",
        "sections": [
            {
                "name": "attributes",
                "doc": "Typed fields of a resource",
                "entities": [
                    {
                        "name": "attribute",
                        "doc": "Declares one field",
                        "fields": [
                            {"name": "name", "type": "atom", "required": True},
                            {"name": "type", "type": "module", "required": True},
                            {
                                "name": "default",
                                "type": "any",
                                "constraints": ["matches_type"],
                            },
                        ],
                    },
                    {
                        "name": "timestamps",
                        "doc": "Adds inserted_at and updated_at",
                    },
                ],
            },
            {
                "name": "relationships",
                "doc": "Links between resources",
                "entities": [
                    {
                        "name": "belongs_to",
                        "doc": "Declares a parent relationship",
                        "depends_on": ["attribute"],
                        "fields": [
                            {"name": "name", "type": "atom", "required": True},
                            {"name": "destination", "type": "module", "required": True},
                        ],
                    },
                ],
            },
        ],
    }


def flat_definition(
    entity_count: int,
    *,
    documented: bool = True,
    name: str = "flat",
) -> dict[str, Any]:
    """One section holding ``entity_count`` entities with one required field."""
    return {
        "name": name,
        "sections": [
            {
                "name": "section",
                "doc": "The only section" if documented else None,
                "entities": [
                    {
                        "name": f"entity_{i:02d}",
                        "doc": "An entity" if documented else None,
                        "fields": [
                            {"name": "name", "type": "atom", "required": True}
                        ],
                    }
                    for i in range(entity_count)
                ],
            }
        ],
    }


def make_handle(data: dict[str, Any]) -> YamlDslHandle:
    return parse_definition(data)


def make_schema(data: dict[str, Any]) -> SchemaDescription:
    return introspect(parse_definition(data))


def make_observation(
    path: str,
    uses: Sequence[tuple[str, str | None, Outcome | None]],
    *,
    root: str = "/corpus",
    option_count: int = 0,
) -> FileObservation:
    """Build a FileObservation from (construct, name, outcome) triples."""
    occurrences = tuple(
        ConstructOccurrence(
            construct=construct,
            name=name,
            line=line,
            option_count=option_count,
            complexity=occurrence_complexity(option_count),
            outcome=outcome,
            snippet=f"{construct} :{name}" if name else construct,
        )
        for line, (construct, name, outcome) in enumerate(uses, start=1)
    )
    return FileObservation(
        root=root,
        path=path,
        language="elixir",
        occurrences=occurrences,
        naming_tokens=tuple(o.name for o in occurrences if o.name),
    )


@pytest.fixture
def resource_schema() -> SchemaDescription:
    return make_schema(resource_definition())


# ── Database ─────────────────────────────────────────────


@pytest_asyncio.fixture
async def engine():
    """In-memory engine with foreign keys on, tables created."""
    engine = create_app_engine("sqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    """Function-scoped session with connection-level rollback.

    Wraps each test in a connection-level transaction so that
    even ``session.commit()`` calls inside tests are rolled
    back at teardown.
    """
    async with engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(
            bind=connection, expire_on_commit=False
        )
        yield session
        await session.close()
        await transaction.rollback()


@pytest.fixture
def session_factory(engine):
    """Short-lived sessions for service tests against real SQL."""
    return create_session_factory(engine)
