"""Pydantic model for improvement recommendations."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from dsladvisor.constants import (
    HIGH_IMPACT_MIN,
    FrictionCategory,
    ImprovementType,
    RiskLevel,
    TemplateName,
)


class Improvement(BaseModel):
    """A ranked, actionable redesign recommendation."""

    model_config = ConfigDict(frozen=True)

    title: str
    improvement_type: ImprovementType
    template: TemplateName
    friction_category: FrictionCategory
    description: str = ""
    proposed_solution: str = ""
    effort_score: float = Field(ge=0.0, le=10.0)
    impact_score: float = Field(ge=0.0, le=1.0)
    priority_score: float = Field(default=0.0, ge=0.0, le=1.0)
    value_ratio: float = Field(default=0.0, ge=0.0)
    breaking_changes: bool = False
    affected_constructs: tuple[str, ...] = ()
    implementation_steps: tuple[str, ...] = ()
    success_criteria: tuple[str, ...] = ()
    risks: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    migration_strategy: str | None = None
    validation_approach: str | None = None
    rollback_plan: str | None = None
    example_before: str | None = None
    example_after: str | None = None
    rank: int | None = None

    @property
    def risk_level(self) -> RiskLevel:
        if self.breaking_changes and len(self.risks) > 2:
            return RiskLevel.HIGH
        if self.breaking_changes or len(self.risks) > 1:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    @property
    def implementation_readiness(self) -> float:
        """Fraction of readiness factors present."""
        factors = (
            bool(self.implementation_steps),
            bool(self.example_before and self.example_after),
            len(self.success_criteria) >= 2,
            bool(self.validation_approach),
            not self.dependencies,
        )
        return sum(factors) / len(factors)

    @property
    def is_high_impact(self) -> bool:
        return self.impact_score > HIGH_IMPACT_MIN
