"""DslAnalysis ORM model: one analysis run and its summary scores."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dsladvisor.models.base import Base

if TYPE_CHECKING:
    from dsladvisor.models.improvement import ImprovementRecord
    from dsladvisor.models.pattern import PatternRecord


class AnalysisRecord(Base):
    __tablename__ = "dsl_analyses"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    dsl_name: Mapped[str] = mapped_column(String(200), index=True)
    analysis_confidence: Mapped[float] = mapped_column(default=0.0)
    sample_size: Mapped[int] = mapped_column(default=0)
    files_scanned: Mapped[int] = mapped_column(default=0)
    partial: Mapped[bool] = mapped_column(default=False)
    insufficient_evidence: Mapped[bool] = mapped_column(default=False)
    total_friction_points: Mapped[int] = mapped_column(default=0)
    overall_health_score: Mapped[float] = mapped_column(default=1.0)
    improvement_potential: Mapped[float] = mapped_column(default=0.0)
    # Frozen snapshots: schema description, friction points, warnings, roots
    schema_json: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    friction_json: Mapped[list[Any]] = mapped_column(JSON, default=list)
    warnings_json: Mapped[list[Any]] = mapped_column(JSON, default=list)
    roots_json: Mapped[list[Any]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    patterns: Mapped[list["PatternRecord"]] = relationship(
        back_populates="analysis",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    improvements: Mapped[list["ImprovementRecord"]] = relationship(
        back_populates="analysis",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "dsl_name": self.dsl_name,
            "analysis_confidence": self.analysis_confidence,
            "sample_size": self.sample_size,
            "files_scanned": self.files_scanned,
            "partial": self.partial,
            "insufficient_evidence": self.insufficient_evidence,
            "total_friction_points": self.total_friction_points,
            "overall_health_score": self.overall_health_score,
            "improvement_potential": self.improvement_potential,
            "schema": self.schema_json,
            "friction_points": self.friction_json,
            "warnings": self.warnings_json,
            "roots": self.roots_json,
            "created_at": self.created_at.isoformat(),
        }
