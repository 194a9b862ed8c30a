"""Friction detection: threshold heuristics over schema and patterns."""

from dsladvisor.analysis.friction.detector import detect_friction
from dsladvisor.analysis.friction.rules import (
    ALL_RULES,
    find_cycle_members,
    is_boilerplate,
)
from dsladvisor.analysis.friction.schemas import FrictionPoint

__all__ = [
    "ALL_RULES",
    "FrictionPoint",
    "detect_friction",
    "find_cycle_members",
    "is_boilerplate",
]
