"""Improvement synthesis: friction points to estimated recommendations."""

from dsladvisor.analysis.synthesis.estimator import (
    complexity_multiplier,
    estimate_effort,
    estimate_impact,
    frequency_factor,
    is_viable,
    priority_score,
    value_ratio,
)
from dsladvisor.analysis.synthesis.schemas import Improvement
from dsladvisor.analysis.synthesis.synthesizer import (
    refine,
    synthesize,
    synthesize_all,
)
from dsladvisor.analysis.synthesis.templates import TEMPLATES
from dsladvisor.analysis.synthesis.validation import validate_improvement

__all__ = [
    "TEMPLATES",
    "Improvement",
    "complexity_multiplier",
    "estimate_effort",
    "estimate_impact",
    "frequency_factor",
    "is_viable",
    "priority_score",
    "refine",
    "synthesize",
    "synthesize_all",
    "validate_improvement",
    "value_ratio",
]
