"""Pydantic models for implementation outcomes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from dsladvisor.constants import DeltaDirection, ImprovementType


class MetricDelta(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    before: float
    after: float
    relative_change: float  # (after - before) / |before|
    improvement: float  # relative change signed so positive is better
    direction: DeltaDirection
    lower_is_better: bool


class ImprovementResult(BaseModel):
    """Outcome of applying one improvement in the real world."""

    model_config = ConfigDict(frozen=True)

    improvement_title: str
    improvement_type: ImprovementType
    estimated_effort: float = Field(ge=0.0)
    estimated_impact: float = Field(ge=0.0, le=1.0)
    before_metrics: dict[str, float] = Field(
        default_factory=lambda: dict[str, float]()
    )
    after_metrics: dict[str, float] = Field(
        default_factory=lambda: dict[str, float]()
    )
    deltas: tuple[MetricDelta, ...] = ()
    actual_impact_score: float = Field(default=0.0, ge=-1.0, le=1.0)
    implementation_success: bool = False
    # caller-supplied success survives later re-evaluation
    success_supplied: bool = False
    actual_effort: float | None = Field(default=None, ge=0.0)
    success_criteria_met: tuple[str, ...] = ()
    success_criteria_failed: tuple[str, ...] = ()
    learning_insights: tuple[str, ...] = ()
    user_feedback: tuple[str, ...] = ()
    rolled_back: bool = False
    rollback_reason: str | None = None

    @property
    def impact_magnitude(self) -> float:
        return abs(self.actual_impact_score)

    @property
    def success_rate(self) -> float | None:
        """Fraction of success criteria met, None without criteria."""
        total = len(self.success_criteria_met) + len(
            self.success_criteria_failed
        )
        if total == 0:
            return None
        return len(self.success_criteria_met) / total

    @property
    def implementation_efficiency(self) -> float | None:
        """Actual impact per unit of actual effort."""
        if not self.actual_effort:
            return None
        return self.actual_impact_score / self.actual_effort

    @property
    def learning_value(self) -> float:
        """How much this result teaches, in [0, 1].

        Weighted: magnitude 0.3, significance 0.3, metric sample 0.2,
        insights 0.2.
        """
        magnitude = min(1.0, self.impact_magnitude)
        significance = min(1.0, self.impact_magnitude / 0.2)
        sample = min(1.0, len(self.deltas) / 5)
        insights = min(1.0, len(self.learning_insights) / 3)
        return round(
            0.3 * magnitude + 0.3 * significance + 0.2 * sample + 0.2 * insights,
            6,
        )
