"""Top-level analysis record binding every stage's output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from dsladvisor.analysis.friction.schemas import FrictionPoint
from dsladvisor.analysis.mining.schemas import UsagePattern
from dsladvisor.analysis.synthesis.schemas import Improvement
from dsladvisor.constants import (
    HEALTH_COMPLEXITY_WEIGHT,
    HEALTH_ERROR_WEIGHT,
    HEALTH_FRICTION_CAP,
    HEALTH_FRICTION_STEP,
    IMPROVEMENT_POTENTIAL_TOP,
    PatternType,
)
from dsladvisor.heuristics import DEFAULT_FRICTION_THRESHOLDS
from dsladvisor.introspection.schemas import SchemaDescription
from dsladvisor.scanning.schemas import CorpusRoot, ScanWarning


class InsufficientEvidence(BaseModel):
    """Attached when the corpus is too small to trust the analysis."""

    model_config = ConfigDict(frozen=True)

    sample_size: int
    minimum: int

    @property
    def message(self) -> str:
        return (
            f"Only {self.sample_size} construct occurrences observed "
            f"(minimum {self.minimum}); confidence is reduced"
        )


class DslAnalysis(BaseModel):
    """One complete analysis of a DSL against a usage corpus."""

    model_config = ConfigDict(frozen=True)

    dsl_name: str
    schema_description: SchemaDescription
    patterns: tuple[UsagePattern, ...] = ()
    friction_points: tuple[FrictionPoint, ...] = ()
    improvements: tuple[Improvement, ...] = ()
    analysis_confidence: float = Field(ge=0.0, le=1.0)
    sample_size: int = Field(default=0, ge=0)
    files_scanned: int = Field(default=0, ge=0)
    naming_consistency: float | None = None
    partial: bool = False
    warnings: tuple[ScanWarning, ...] = ()
    insufficient_evidence: InsufficientEvidence | None = None
    roots: tuple[CorpusRoot, ...] = ()

    @property
    def total_friction_points(self) -> int:
        return len(self.friction_points)

    @property
    def high_impact_improvements(self) -> list[Improvement]:
        return [i for i in self.improvements if i.is_high_impact]

    @property
    def error_occurrences(self) -> int:
        return sum(
            p.frequency
            for p in self.patterns
            if p.pattern_type == PatternType.ERROR
        )

    @property
    def overall_health_score(self) -> float:
        """1.0 for a frictionless, simple, error-free DSL; floored at 0."""
        friction_penalty = min(
            HEALTH_FRICTION_CAP,
            HEALTH_FRICTION_STEP * self.total_friction_points,
        )
        cognitive = self.schema_description.complexity.cognitive
        complexity_penalty = HEALTH_COMPLEXITY_WEIGHT * min(
            1.0, cognitive / (2 * DEFAULT_FRICTION_THRESHOLDS.cognitive_max)
        )
        error_penalty = 0.0
        if self.sample_size > 0:
            error_penalty = HEALTH_ERROR_WEIGHT * min(
                1.0, self.error_occurrences / self.sample_size
            )
        score = 1.0 - friction_penalty - complexity_penalty - error_penalty
        return round(max(0.0, score), 6)

    @property
    def improvement_potential(self) -> float:
        """Mean impact of the top-ranked improvements."""
        top = self.improvements[:IMPROVEMENT_POTENTIAL_TOP]
        if not top:
            return 0.0
        return round(sum(i.impact_score for i in top) / len(top), 6)
