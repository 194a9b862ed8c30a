"""Tests for pattern mining, confidence and naming analysis."""

from __future__ import annotations

import math

import pytest

from dsladvisor.analysis.mining.confidence import (
    context_completeness,
    logistic,
    pattern_confidence,
    status_for,
)
from dsladvisor.analysis.mining.miner import mine_patterns, observe, validate
from dsladvisor.analysis.mining.naming import classify_name, naming_consistency
from dsladvisor.analysis.mining.schemas import UsagePattern
from dsladvisor.constants import Outcome, PatternType, ValidationStatus
from tests.conftest import make_observation


class TestConfidence:
    def test_logistic(self) -> None:
        assert logistic(0, 50) == 0.0
        assert logistic(9, 50) == pytest.approx(math.log(10) / math.log(50))
        assert logistic(1000, 50) == 1.0

    def test_context_completeness(self) -> None:
        assert context_completeness(0) == 0.5
        assert context_completeness(2) == 0.75
        assert context_completeness(9) == 1.0

    def test_pattern_confidence(self) -> None:
        # log(50) / log(50) * 0.95 * 1.0
        assert pattern_confidence(PatternType.ERROR, 49, 4) == pytest.approx(0.95)

    def test_status_thresholds(self) -> None:
        assert status_for(0.9) == ValidationStatus.VALIDATED
        assert status_for(0.85) == ValidationStatus.VALIDATED
        assert status_for(0.7) == ValidationStatus.PARTIALLY_VALIDATED
        assert status_for(0.69) == ValidationStatus.PENDING


class TestNaming:
    @pytest.mark.parametrize(
        ("name", "convention"),
        [
            ("display_name", "snake_case"),
            ("valid?", "snake_case"),
            ("MAX_SIZE", "screaming_snake"),
            ("displayName", "camelCase"),
            ("DisplayName", "PascalCase"),
            ("display-name", "kebab-case"),
            ("9lives", "other"),
        ],
    )
    def test_classify_name(self, name: str, convention: str) -> None:
        assert classify_name(name) == convention

    def test_consistency(self) -> None:
        score, dominant = naming_consistency(
            ["email", "display_name", "createdAt", "id"]
        )
        assert score == 0.75
        assert dominant == "snake_case"

    def test_no_names(self) -> None:
        assert naming_consistency([]) == (None, None)

    def test_tie_resolves_alphabetically(self) -> None:
        _, dominant = naming_consistency(["createdAt", "email"])
        assert dominant == "camelCase"


class TestMinePatterns:
    def test_usage_and_outcome_patterns(self) -> None:
        obs = [
            make_observation(
                "lib/a.ex",
                [
                    ("attribute", "email", Outcome.ERROR),
                    ("attribute", "name", Outcome.SUCCESS),
                    ("timestamps", None, None),
                ],
            ),
            make_observation(
                "lib/b.ex",
                [("attribute", "createdAt", Outcome.ERROR)],
            ),
        ]
        result = mine_patterns(obs)

        kinds = [(p.construct_name, p.pattern_type) for p in result.patterns]
        assert kinds == [
            ("attribute", PatternType.RARE),
            ("attribute", PatternType.ERROR),
            ("attribute", PatternType.SUCCESS),
            ("timestamps", PatternType.RARE),
        ]
        assert result.error_counts() == {"attribute": 2}
        assert result.total_occurrences == 4
        assert result.files_observed == 2

        error = result.patterns_of(PatternType.ERROR)[0]
        assert error.frequency == 2
        assert error.error_context == {"error_count": 2, "messages": []}
        assert error.business_context == {"files": 2, "file_share": 1.0}
        assert error.user_context["distinct_names"] == 2

    def test_common_threshold(self) -> None:
        obs = [
            make_observation(
                "a.ex", [("attribute", f"f{i}", None) for i in range(5)]
            )
        ]
        (pattern,) = mine_patterns(obs).patterns
        assert pattern.pattern_type == PatternType.COMMON
        assert pattern.frequency == 5

    def test_antipattern_from_option_count(self) -> None:
        obs = [
            make_observation("a.ex", [("attribute", "x", None)], option_count=9)
        ]
        types = {p.pattern_type for p in mine_patterns(obs).patterns}
        assert PatternType.ANTIPATTERN in types

    def test_naming_and_outliers(self) -> None:
        obs = [
            make_observation(
                "a.ex",
                [
                    ("attribute", "email", None),
                    ("attribute", "display_name", None),
                    ("belongs_to", "ownerId", None),
                ],
            )
        ]
        result = mine_patterns(obs)
        assert result.naming_consistency == pytest.approx(2 / 3, abs=1e-6)
        assert result.dominant_convention == "snake_case"
        assert result.naming_outliers == ("belongs_to",)

    def test_combinations(self) -> None:
        obs = [
            make_observation("a.ex", [("attribute", "x", None), ("timestamps", None, None)]),
            make_observation("b.ex", [("timestamps", None, None), ("attribute", "y", None)]),
            make_observation("c.ex", [("attribute", "z", None)]),
        ]
        first, second = mine_patterns(obs).combinations
        assert first.constructs == ("attribute", "timestamps")
        assert first.frequency == 2
        assert first.file_share == pytest.approx(0.666667)
        assert second.constructs == ("attribute",)

    def test_empty_corpus(self) -> None:
        result = mine_patterns([])
        assert result.patterns == ()
        assert result.naming_consistency is None
        assert result.has_error_data is False

    def test_order_independent(self) -> None:
        a = make_observation("a.ex", [("attribute", "email", Outcome.ERROR)])
        b = make_observation("b.ex", [("timestamps", None, Outcome.SUCCESS)])
        assert mine_patterns([a, b]) == mine_patterns([b, a])


class TestObserveAndValidate:
    def _pattern(self) -> UsagePattern:
        return UsagePattern(
            pattern_type=PatternType.ERROR,
            construct_name="attribute",
            frequency=10,
            confidence_score=0.4,
        )

    def test_observe_grows_frequency_and_confidence(self) -> None:
        pattern = self._pattern()
        updated = observe(
            pattern, context={"error_context": {"error_count": 11}}
        )
        assert updated.frequency == 11
        assert updated.error_context == {"error_count": 11}
        assert updated.confidence_score >= pattern.confidence_score

    def test_observe_never_lowers_confidence(self) -> None:
        pattern = self._pattern().model_copy(update={"confidence_score": 0.99})
        assert observe(pattern).confidence_score == 0.99
        assert observe(pattern).validation_status == ValidationStatus.VALIDATED

    def test_observe_keeps_invalidated_status(self) -> None:
        pattern = validate(self._pattern(), ValidationStatus.INVALIDATED)
        assert observe(pattern).validation_status == ValidationStatus.INVALIDATED

    def test_validate_sets_status(self) -> None:
        updated = validate(self._pattern(), ValidationStatus.VALIDATED)
        assert updated.validation_status == ValidationStatus.VALIDATED
        assert updated.frequency == 10
