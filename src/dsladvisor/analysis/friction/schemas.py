"""Pydantic models for detected friction points."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from dsladvisor.constants import FrictionCategory, Severity


class FrictionPoint(BaseModel):
    """A detected usability problem, tagged by category and severity."""

    model_config = ConfigDict(frozen=True)

    category: FrictionCategory
    severity: Severity
    construct: str
    evidence: str
    impact_score: float = Field(ge=0.0, le=1.0)
    affected_constructs: tuple[str, ...] = ()
    frequency: int = Field(default=0, ge=0)
