"""Shared constants: single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON, SQL,
CLI output) works unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class PatternType(StrEnum):
    """Kinds of mined usage patterns."""

    COMMON = "common"
    RARE = "rare"
    ERROR = "error"
    SUCCESS = "success"
    WORKAROUND = "workaround"
    ANTIPATTERN = "antipattern"


class ValidationStatus(StrEnum):
    """How far a mined pattern has been confirmed."""

    PENDING = "pending"
    PARTIALLY_VALIDATED = "partially_validated"
    VALIDATED = "validated"
    INVALIDATED = "invalidated"


class Outcome(StrEnum):
    """Observed outcome attached to a single construct occurrence."""

    SUCCESS = "success"
    ERROR = "error"
    WORKAROUND = "workaround"


class FrictionCategory(StrEnum):
    """Friction point categories emitted by the detector."""

    COGNITIVE_OVERLOAD = "cognitive_overload"
    ERROR_PRONE = "error_prone"
    VERBOSITY = "verbosity"
    INCONSISTENCY = "inconsistency"
    DISCOVERABILITY = "discoverability"
    COMPOSITION_DIFFICULTY = "composition_difficulty"


class Severity(StrEnum):
    """Friction severity levels."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ImprovementType(StrEnum):
    """Recommendation kinds stored on an Improvement."""

    SIMPLIFICATION = "simplification"
    VALIDATION = "validation"
    CONSISTENCY = "consistency"
    DISCOVERABILITY = "discoverability"
    PERFORMANCE = "performance"
    COMPOSITION = "composition"
    ERROR_PREVENTION = "error_prevention"


class TemplateName(StrEnum):
    """Improvement templates, one per friction category."""

    SIMPLIFICATION = "simplification"
    VALIDATION = "validation"
    CONCISENESS = "conciseness"
    CONSISTENCY = "consistency"
    DOCUMENTATION = "documentation"
    COMPOSITION = "composition"


class RiskLevel(StrEnum):
    """Qualitative risk of applying an improvement."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DeltaDirection(StrEnum):
    """Classification of a before/after metric delta."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    UNCHANGED = "unchanged"


class StageProgress(StrEnum):
    """Progress status for pipeline stage events."""

    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


# ── Friction → Improvement mapping ───────────────────────

FRICTION_TEMPLATES: dict[FrictionCategory, TemplateName] = {
    FrictionCategory.COGNITIVE_OVERLOAD: TemplateName.SIMPLIFICATION,
    FrictionCategory.ERROR_PRONE: TemplateName.VALIDATION,
    FrictionCategory.VERBOSITY: TemplateName.CONCISENESS,
    FrictionCategory.INCONSISTENCY: TemplateName.CONSISTENCY,
    FrictionCategory.DISCOVERABILITY: TemplateName.DOCUMENTATION,
    FrictionCategory.COMPOSITION_DIFFICULTY: TemplateName.COMPOSITION,
}

TEMPLATE_IMPROVEMENT_TYPES: dict[TemplateName, ImprovementType] = {
    TemplateName.SIMPLIFICATION: ImprovementType.SIMPLIFICATION,
    TemplateName.VALIDATION: ImprovementType.VALIDATION,
    TemplateName.CONCISENESS: ImprovementType.SIMPLIFICATION,
    TemplateName.CONSISTENCY: ImprovementType.CONSISTENCY,
    TemplateName.DOCUMENTATION: ImprovementType.DISCOVERABILITY,
    TemplateName.COMPOSITION: ImprovementType.COMPOSITION,
}

SEVERITY_RANK: dict[str, int] = {
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}

# ── Analysis Confidence ──────────────────────────────────

# (minimum sample size, base confidence), checked top-down
SAMPLE_SIZE_CONFIDENCE: tuple[tuple[int, float], ...] = (
    (100, 0.9),
    (50, 0.8),
    (20, 0.7),
    (10, 0.6),
)
SAMPLE_SIZE_CONFIDENCE_FLOOR = 0.4
PARTIAL_SCAN_PENALTY = 0.8
EVIDENCE_COMPLETENESS_FLOOR = 0.5

# ── Prioritization ───────────────────────────────────────

VALUE_RATIO_EPSILON = 0.1
BREAKING_PRIORITY_PENALTY = 0.7
PRIORITY_EFFORT_SCALE = 5.0
HIGH_PRIORITY_MIN = 0.7
HIGH_IMPACT_MIN = 0.5
LOW_EFFORT_MAX = 3.0
LOW_EFFORT_HIGH_IMPACT_MIN = 0.7

# ── Rollback ─────────────────────────────────────────────

ROLLBACK_IMPACT_SCORE = -0.5

# ── Analysis Health ─────────────────────────────────────

HEALTH_FRICTION_STEP = 0.05
HEALTH_FRICTION_CAP = 0.5
HEALTH_COMPLEXITY_WEIGHT = 0.2
HEALTH_ERROR_WEIGHT = 0.3
IMPROVEMENT_POTENTIAL_TOP = 5

# ── Scanning ─────────────────────────────────────────────

BINARY_DETECTION_BUFFER = 8192
GIT_REVPARSE_TIMEOUT = 10
COMMENTED_CODE_RATIO = 0.1
EVIDENCE_LOG_SUFFIX = ".jsonl"
OCCURRENCE_BASE_COMPLEXITY = 1.0
OCCURRENCE_OPTION_WEIGHT = 0.5

# ── Misc ─────────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 200
ID_HEX_LENGTH = 12
SNIPPET_MAX_CHARS = 2000

# ── Stage Labels (user-facing) ─────────────────────────

STAGE_LABELS: dict[str, str] = {
    "introspection": "Introspecting DSL schema",
    "scan": "Scanning usage corpus",
    "mining": "Mining usage patterns",
    "friction": "Detecting friction points",
    "synthesis": "Synthesizing improvements",
    "prioritization": "Ranking improvements",
    "persistence": "Saving results",
}
