"""Tests for batch recalibration from past results."""

from __future__ import annotations

import pytest

from dsladvisor.constants import ImprovementType
from dsladvisor.feedback.learning import learn
from dsladvisor.feedback.schemas import ImprovementResult
from dsladvisor.heuristics import LearningConfig


def _result(
    *,
    improvement_type: ImprovementType = ImprovementType.VALIDATION,
    estimated_effort: float = 2.0,
    actual_effort: float | None = 3.0,
    estimated_impact: float = 0.8,
    actual_impact: float = 0.4,
    success: bool = True,
    rolled_back: bool = False,
) -> ImprovementResult:
    return ImprovementResult(
        improvement_title="Add validation for attribute",
        improvement_type=improvement_type,
        estimated_effort=estimated_effort,
        estimated_impact=estimated_impact,
        actual_effort=actual_effort,
        actual_impact_score=actual_impact,
        implementation_success=success,
        rolled_back=rolled_back,
    )


def test_multipliers_from_mean_ratios() -> None:
    calibration = learn([_result(), _result(), _result()])

    assert calibration.effort_multipliers == {"validation": 1.5}
    assert calibration.impact_multipliers == {"validation": 0.5}
    assert calibration.sample_counts == {"validation": 3}
    assert calibration.success_rates == {"validation": 1.0}
    assert calibration.insights == (
        "validation improvements underestimate effort by 50% on average",
        "validation improvements overestimate impact by 50% on average",
    )
    assert calibration.effort_multiplier("validation") == 1.5
    assert calibration.effort_multiplier("composition") == 1.0


def test_below_min_samples_learns_nothing() -> None:
    calibration = learn([_result(), _result(success=False)])

    assert calibration.is_identity
    assert calibration.sample_counts == {"validation": 2}
    assert calibration.success_rates == {"validation": 0.5}
    assert calibration.insights == ()


def test_min_samples_configurable() -> None:
    calibration = learn([_result()], LearningConfig(min_samples=1))
    assert calibration.effort_multipliers == {"validation": 1.5}


def test_multipliers_clamped() -> None:
    results = [
        _result(actual_effort=20.0, actual_impact=-0.4) for _ in range(3)
    ]
    calibration = learn(results)
    assert calibration.effort_multipliers["validation"] == 2.0
    assert calibration.impact_multipliers["validation"] == 0.5


def test_rolled_back_only_count_toward_success() -> None:
    results = [
        _result(),
        _result(),
        _result(),
        _result(actual_effort=9.0, actual_impact=-0.5, success=False, rolled_back=True),
    ]
    calibration = learn(results)

    assert calibration.effort_multipliers == {"validation": 1.5}
    assert calibration.impact_multipliers == {"validation": 0.5}
    assert calibration.sample_counts == {"validation": 4}
    assert calibration.success_rates == {"validation": 0.75}


def test_missing_actual_effort_skips_effort_only() -> None:
    calibration = learn([_result(actual_effort=None) for _ in range(3)])
    assert calibration.effort_multipliers == {}
    assert calibration.impact_multipliers == {"validation": 0.5}


def test_small_deviation_has_no_insight() -> None:
    results = [
        _result(actual_effort=2.1, actual_impact=0.8) for _ in range(3)
    ]
    calibration = learn(results)
    assert calibration.effort_multipliers["validation"] == pytest.approx(1.05)
    assert calibration.impact_multipliers["validation"] == 1.0
    assert calibration.insights == ()


def test_types_learned_independently() -> None:
    results = [_result() for _ in range(3)] + [
        _result(
            improvement_type=ImprovementType.COMPOSITION,
            estimated_effort=7.0,
            actual_effort=7.0,
        )
        for _ in range(3)
    ]
    calibration = learn(results)
    assert calibration.effort_multipliers == {
        "composition": 1.0,
        "validation": 1.5,
    }


def test_empty_history() -> None:
    assert learn([]).is_identity
