"""Pydantic models for mined usage patterns."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dsladvisor.constants import PatternType, ValidationStatus

CONTEXT_FIELDS = (
    "error_context",
    "user_context",
    "performance_context",
    "business_context",
)


class UsagePattern(BaseModel):
    """A statistical observation about how one construct is used."""

    model_config = ConfigDict(frozen=True)

    pattern_type: PatternType
    construct_name: str
    frequency: int = Field(default=0, ge=0)
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    validation_status: ValidationStatus = ValidationStatus.PENDING
    example_snippet: str | None = None
    error_context: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())
    user_context: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())
    performance_context: dict[str, Any] = Field(
        default_factory=lambda: dict[str, Any]()
    )
    business_context: dict[str, Any] = Field(
        default_factory=lambda: dict[str, Any]()
    )

    @property
    def populated_contexts(self) -> int:
        return sum(1 for name in CONTEXT_FIELDS if getattr(self, name))


class Combination(BaseModel):
    """A set of constructs used together in the same file."""

    model_config = ConfigDict(frozen=True)

    constructs: tuple[str, ...]
    frequency: int = 0
    file_share: float = 0.0


class MiningResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    patterns: tuple[UsagePattern, ...] = ()
    naming_consistency: float | None = None  # None when no names observed
    dominant_convention: str | None = None
    naming_outliers: tuple[str, ...] = ()
    combinations: tuple[Combination, ...] = ()
    total_occurrences: int = 0
    files_observed: int = 0

    def patterns_of(self, pattern_type: PatternType) -> list[UsagePattern]:
        return [p for p in self.patterns if p.pattern_type == pattern_type]

    def error_counts(self) -> dict[str, int]:
        """Error-pattern frequency summed per construct."""
        counts: dict[str, int] = {}
        for p in self.patterns_of(PatternType.ERROR):
            counts[p.construct_name] = (
                counts.get(p.construct_name, 0) + p.frequency
            )
        return counts

    @property
    def error_occurrences(self) -> int:
        return sum(p.frequency for p in self.patterns_of(PatternType.ERROR))

    @property
    def has_error_data(self) -> bool:
        return bool(self.patterns_of(PatternType.ERROR))

    @property
    def has_success_data(self) -> bool:
        return bool(self.patterns_of(PatternType.SUCCESS))

    @property
    def has_naming_data(self) -> bool:
        return self.naming_consistency is not None

    @property
    def has_combination_data(self) -> bool:
        return bool(self.combinations)
