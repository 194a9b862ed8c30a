"""Tests for the friction rules and the detector."""

from __future__ import annotations

from typing import Any

import pytest

from dsladvisor.analysis.friction.detector import detect_friction
from dsladvisor.analysis.friction.rules import (
    cognitive_overload,
    composition_difficulty,
    discoverability,
    error_prone,
    excess,
    find_cycle_members,
    inconsistency,
    shortfall,
    verbosity,
)
from dsladvisor.analysis.mining.schemas import (
    Combination,
    MiningResult,
    UsagePattern,
)
from dsladvisor.constants import FrictionCategory, PatternType, Severity
from dsladvisor.heuristics import DEFAULT_FRICTION_THRESHOLDS, Calibration
from tests.conftest import flat_definition, make_schema, resource_definition

T = DEFAULT_FRICTION_THRESHOLDS
EMPTY = MiningResult()


def _errors(construct: str, count: int) -> MiningResult:
    return MiningResult(
        patterns=(
            UsagePattern(
                pattern_type=PatternType.ERROR,
                construct_name=construct,
                frequency=count,
            ),
        )
    )


def _section(entities: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "name": "graph",
        "sections": [{"name": "s", "doc": "d", "entities": entities}],
    }


def test_excess_and_shortfall() -> None:
    assert excess(25, 20) == 0.25
    assert excess(10, 20) == 0.0
    assert excess(100, 20) == 1.0
    assert shortfall(0.6, 0.8) == 0.25
    assert shortfall(0.9, 0.8) == 0.0


class TestCognitiveOverload:
    def test_entity_count_over_limit(self) -> None:
        schema = make_schema(flat_definition(25))
        (point,) = cognitive_overload(schema, EMPTY, T)
        assert point.category == FrictionCategory.COGNITIVE_OVERLOAD
        assert point.severity == Severity.MEDIUM
        assert point.impact_score == 0.25
        assert point.affected_constructs == ("section",)
        assert "25 entities exceed the maximum of 20" in point.evidence

    def test_high_cognitive_load_wins_severity(self) -> None:
        schema = make_schema(flat_definition(45))
        (point,) = cognitive_overload(schema, EMPTY, T)
        assert point.severity == Severity.HIGH
        assert point.impact_score == 1.0
        assert "cognitive complexity 48" in point.evidence

    def test_deep_nesting(self) -> None:
        leaf: dict[str, Any] = {"name": "e4", "doc": "d"}
        for name in ("e3", "e2", "e1"):
            leaf = {"name": name, "doc": "d", "children": [leaf]}
        schema = make_schema(_section([leaf]))
        (point,) = cognitive_overload(schema, EMPTY, T)
        assert point.severity == Severity.MEDIUM
        assert point.impact_score == pytest.approx(0.333333)
        assert point.affected_constructs == ("s",)

    def test_small_schema_does_not_fire(self, resource_schema) -> None:
        assert cognitive_overload(resource_schema, EMPTY, T) == []


class TestErrorProne:
    def test_medium_and_high(self) -> None:
        (medium,) = error_prone(make_schema(resource_definition()), _errors("attribute", 5), T)
        assert medium.severity == Severity.MEDIUM
        assert medium.impact_score == pytest.approx(0.666667)
        assert medium.frequency == 5

        (high,) = error_prone(make_schema(resource_definition()), _errors("attribute", 45), T)
        assert high.severity == Severity.HIGH
        assert high.impact_score == 1.0
        assert high.affected_constructs == ("attribute",)

    def test_at_threshold_does_not_fire(self, resource_schema) -> None:
        assert error_prone(resource_schema, _errors("attribute", 3), T) == []


class TestVerbosity:
    def test_heavy_entities(self) -> None:
        fields = [{"name": f"f{i}", "required": True} for i in range(6)]
        schema = make_schema(_section([{"name": "big", "doc": "d", "fields": fields}]))
        (point,) = verbosity(schema, EMPTY, T)
        assert point.severity == Severity.MEDIUM
        assert point.impact_score == 0.125
        assert point.affected_constructs == ("big",)

    def test_boilerplate_combination(self, resource_schema) -> None:
        mining = MiningResult(
            combinations=(
                Combination(
                    constructs=("attribute", "timestamps"),
                    frequency=12,
                    file_share=0.8,
                ),
                Combination(constructs=("attribute",), frequency=30, file_share=1.0),
                Combination(
                    constructs=("attribute", "belongs_to"),
                    frequency=12,
                    file_share=0.2,
                ),
            )
        )
        (point,) = verbosity(resource_schema, mining, T)
        assert point.severity == Severity.LOW
        assert point.construct == "attribute+timestamps"
        assert point.impact_score == 0.2
        assert point.frequency == 12


class TestInconsistency:
    def test_medium(self, resource_schema) -> None:
        mining = MiningResult(
            naming_consistency=0.6,
            dominant_convention="snake_case",
            naming_outliers=("belongs_to",),
        )
        (point,) = inconsistency(resource_schema, mining, T)
        assert point.severity == Severity.MEDIUM
        assert point.impact_score == 0.25
        assert point.affected_constructs == ("belongs_to",)

    def test_high_falls_back_to_all_constructs(self, resource_schema) -> None:
        mining = MiningResult(naming_consistency=0.4)
        (point,) = inconsistency(resource_schema, mining, T)
        assert point.severity == Severity.HIGH
        assert point.affected_constructs == resource_schema.construct_names

    def test_no_naming_data(self, resource_schema) -> None:
        assert inconsistency(resource_schema, EMPTY, T) == []


class TestDiscoverability:
    def test_undocumented_schema(self) -> None:
        schema = make_schema(flat_definition(4, documented=False))
        (point,) = discoverability(schema, EMPTY, T)
        assert point.severity == Severity.LOW
        assert point.impact_score == 1.0
        assert len(point.affected_constructs) == 4

    def test_documented_schema(self, resource_schema) -> None:
        assert discoverability(resource_schema, EMPTY, T) == []


class TestCompositionDifficulty:
    def test_cycle(self) -> None:
        schema = make_schema(_section([
            {"name": "a", "doc": "d", "depends_on": ["b"]},
            {"name": "b", "doc": "d", "depends_on": ["a"]},
            {"name": "c", "doc": "d", "depends_on": ["a"]},
        ]))
        (point,) = composition_difficulty(schema, EMPTY, T)
        assert point.severity == Severity.HIGH
        assert point.impact_score == 0.5
        assert point.affected_constructs == ("a", "b")
        assert point.frequency == 3

    def test_too_many_edges(self) -> None:
        leaves = [{"name": f"leaf{i:02d}", "doc": "d"} for i in range(11)]
        hub = {
            "name": "hub",
            "doc": "d",
            "depends_on": [leaf["name"] for leaf in leaves],
        }
        schema = make_schema(_section([hub, *leaves]))
        (point,) = composition_difficulty(schema, EMPTY, T)
        assert point.severity == Severity.MEDIUM
        assert point.impact_score == pytest.approx(0.1)
        assert point.affected_constructs == ("hub",)

    def test_acyclic_and_sparse(self, resource_schema) -> None:
        assert composition_difficulty(resource_schema, EMPTY, T) == []

    def test_cycle_members(self) -> None:
        edges = (("a", "b"), ("b", "c"), ("c", "a"), ("c", "d"), ("e", "e"))
        assert find_cycle_members(edges) == {"a", "b", "c", "e"}


class TestDetectFriction:
    def test_sorted_by_impact(self) -> None:
        schema = make_schema(flat_definition(25, documented=False))
        points = detect_friction(schema, _errors("entity_00", 5))
        assert [p.category for p in points] == [
            FrictionCategory.DISCOVERABILITY,
            FrictionCategory.ERROR_PRONE,
            FrictionCategory.COGNITIVE_OVERLOAD,
        ]
        impacts = [p.impact_score for p in points]
        assert impacts == sorted(impacts, reverse=True)

    def test_calibration_scales_impact(self, resource_schema) -> None:
        calibration = Calibration(impact_multipliers={"validation": 0.5})
        (point,) = detect_friction(
            resource_schema, _errors("attribute", 5), calibration=calibration
        )
        assert point.impact_score == pytest.approx(0.333333)

    def test_rule_subset(self) -> None:
        schema = make_schema(flat_definition(25, documented=False))
        points = detect_friction(schema, EMPTY, rules=[discoverability])
        assert [p.category for p in points] == [FrictionCategory.DISCOVERABILITY]

    def test_clean_dsl_has_no_friction(self, resource_schema) -> None:
        assert detect_friction(resource_schema, EMPTY) == []
