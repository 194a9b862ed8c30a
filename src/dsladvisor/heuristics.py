"""Tunable heuristic configuration for every scoring stage.

Each stage takes its config as an optional argument and falls back to
the module-level default, so callers can override any threshold
without touching stage code. Calibration is produced by the learning
loop and consumed by friction detection and synthesis on the next run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dsladvisor.constants import (
    BREAKING_PRIORITY_PENALTY,
    PRIORITY_EFFORT_SCALE,
    VALUE_RATIO_EPSILON,
    PatternType,
    Severity,
    TemplateName,
)


@dataclass(frozen=True)
class ComplexityWeights:
    """Weights for the three schema complexity metrics."""

    # cyclomatic, per entity
    required_field: float = 1.5
    optional_field: float = 0.8
    constraint: float = 0.5
    # cognitive
    cognitive_section: float = 2.0
    cognitive_entity: float = 1.0
    cognitive_constraint: float = 0.5
    cognitive_depth: float = 1.0
    # api surface
    api_entity: float = 1.5
    api_section: float = 2.0
    api_field: float = 0.25


@dataclass(frozen=True)
class MiningConfig:
    """Pattern-miner confidence and classification settings."""

    logistic_base: int = 50
    reliability: dict[str, float] = field(
        default_factory=lambda: {
            PatternType.ERROR: 0.95,
            PatternType.SUCCESS: 0.9,
            PatternType.COMMON: 0.8,
            PatternType.WORKAROUND: 0.7,
            PatternType.ANTIPATTERN: 0.7,
            PatternType.RARE: 0.6,
        }
    )
    common_min_frequency: int = 5
    antipattern_complexity: float = 5.0
    validated_min: float = 0.85
    partially_validated_min: float = 0.70
    max_combinations: int = 10
    max_examples: int = 5


@dataclass(frozen=True)
class FrictionThresholds:
    """Firing thresholds for the friction rules."""

    cognitive_max: float = 40.0
    entity_max: int = 20
    nesting_max: int = 3
    error_count_max: int = 3
    complexity_per_entity_max: float = 8.0
    combination_frequency_max: int = 10
    boilerplate_min_constructs: int = 2
    boilerplate_min_file_share: float = 0.5
    naming_consistency_min: float = 0.8
    documentation_min: float = 0.7
    interaction_max: float = 10.0


@dataclass(frozen=True)
class EstimationConfig:
    """Effort/impact tables, filtering gates and priority shaping."""

    base_effort: dict[str, float] = field(
        default_factory=lambda: {
            TemplateName.DOCUMENTATION: 1.0,
            TemplateName.VALIDATION: 2.0,
            TemplateName.CONCISENESS: 2.5,
            TemplateName.SIMPLIFICATION: 3.0,
            TemplateName.CONSISTENCY: 5.0,
            TemplateName.COMPOSITION: 7.0,
        }
    )
    base_impact: dict[str, float] = field(
        default_factory=lambda: {
            TemplateName.VALIDATION: 0.8,
            TemplateName.SIMPLIFICATION: 0.7,
            TemplateName.CONCISENESS: 0.6,
            TemplateName.DOCUMENTATION: 0.6,
            TemplateName.CONSISTENCY: 0.5,
            TemplateName.COMPOSITION: 0.4,
        }
    )
    severity_factor: dict[str, float] = field(
        default_factory=lambda: {
            Severity.HIGH: 1.0,
            Severity.MEDIUM: 0.85,
            Severity.LOW: 0.7,
        }
    )
    # templates whose changes alter existing call sites
    call_site_templates: frozenset[str] = frozenset({
        TemplateName.SIMPLIFICATION,
        TemplateName.CONCISENESS,
        TemplateName.CONSISTENCY,
        TemplateName.COMPOSITION,
    })
    multiplier_step: float = 0.1
    multiplier_cap: float = 2.0
    frequency_step: float = 0.05
    frequency_cap: float = 0.25
    feasibility_ceiling: float = 9.0
    materiality_floor: float = 0.3
    max_effort: float = 10.0
    breaking_penalty: float = BREAKING_PRIORITY_PENALTY
    epsilon: float = VALUE_RATIO_EPSILON
    priority_effort_scale: float = PRIORITY_EFFORT_SCALE
    max_non_breaking_constructs: int = 2
    # ValidationFailure rules
    min_steps: int = 3
    min_step_chars: int = 10
    min_criteria: int = 2
    min_criterion_chars: int = 15
    suspicious_impact: float = 0.8
    suspicious_effort: float = 2.0
    wasteful_effort: float = 8.0
    wasteful_impact: float = 0.3


_LOWER_IS_BETTER = (
    "error",
    "failure",
    "latency",
    "time",
    "duration",
    "complexity",
    "lines",
    "loc",
    "abandon",
    "warning",
)


@dataclass(frozen=True)
class TrackingConfig:
    """Implementation tracker settings."""

    lower_is_better_tokens: tuple[str, ...] = _LOWER_IS_BETTER
    # explicit "lower"/"higher" per metric key, wins over token inference
    metric_directions: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )
    metric_weights: dict[str, float] = field(
        default_factory=lambda: dict[str, float]()
    )
    unchanged_band: float = 0.01
    criterion_impact_fallback: float = 0.2
    high_impact: float = 0.5


@dataclass(frozen=True)
class LearningConfig:
    """Batch recalibration settings."""

    min_samples: int = 3
    multiplier_min: float = 0.5
    multiplier_max: float = 2.0
    # relative deviation below which no insight is written
    insight_min_deviation: float = 0.1


@dataclass(frozen=True)
class Calibration:
    """Per-improvement-type multipliers learned from past outcomes."""

    effort_multipliers: dict[str, float] = field(
        default_factory=lambda: dict[str, float]()
    )
    impact_multipliers: dict[str, float] = field(
        default_factory=lambda: dict[str, float]()
    )
    success_rates: dict[str, float] = field(
        default_factory=lambda: dict[str, float]()
    )
    sample_counts: dict[str, int] = field(
        default_factory=lambda: dict[str, int]()
    )
    insights: tuple[str, ...] = ()

    def effort_multiplier(self, improvement_type: str) -> float:
        return self.effort_multipliers.get(improvement_type, 1.0)

    def impact_multiplier(self, improvement_type: str) -> float:
        return self.impact_multipliers.get(improvement_type, 1.0)

    @property
    def is_identity(self) -> bool:
        return not self.effort_multipliers and not self.impact_multipliers


IDENTITY_CALIBRATION = Calibration()

DEFAULT_COMPLEXITY_WEIGHTS = ComplexityWeights()
DEFAULT_MINING_CONFIG = MiningConfig()
DEFAULT_FRICTION_THRESHOLDS = FrictionThresholds()
DEFAULT_ESTIMATION_CONFIG = EstimationConfig()
DEFAULT_TRACKING_CONFIG = TrackingConfig()
DEFAULT_LEARNING_CONFIG = LearningConfig()

__all__ = [
    "Calibration",
    "ComplexityWeights",
    "DEFAULT_COMPLEXITY_WEIGHTS",
    "DEFAULT_ESTIMATION_CONFIG",
    "DEFAULT_FRICTION_THRESHOLDS",
    "DEFAULT_LEARNING_CONFIG",
    "DEFAULT_MINING_CONFIG",
    "DEFAULT_TRACKING_CONFIG",
    "EstimationConfig",
    "FrictionThresholds",
    "IDENTITY_CALIBRATION",
    "LearningConfig",
    "MiningConfig",
    "TrackingConfig",
]
