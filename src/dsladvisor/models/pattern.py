"""UsagePattern ORM model."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dsladvisor.constants import ValidationStatus
from dsladvisor.models.base import Base

if TYPE_CHECKING:
    from dsladvisor.models.analysis import AnalysisRecord


class PatternRecord(Base):
    __tablename__ = "usage_patterns"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    analysis_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("dsl_analyses.id", ondelete="CASCADE"),
        index=True,
    )
    pattern_type: Mapped[str] = mapped_column(String(30))
    construct_name: Mapped[str] = mapped_column(String(200), index=True)
    frequency: Mapped[int] = mapped_column(default=0)
    confidence_score: Mapped[float] = mapped_column(default=0.0)
    validation_status: Mapped[str] = mapped_column(
        String(30), default=ValidationStatus.PENDING
    )
    example_snippet: Mapped[str | None] = mapped_column(Text, nullable=True)
    contexts_json: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        onupdate=lambda: datetime.now(UTC),
    )

    analysis: Mapped["AnalysisRecord"] = relationship(
        back_populates="patterns"
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "analysis_id": self.analysis_id,
            "pattern_type": self.pattern_type,
            "construct_name": self.construct_name,
            "frequency": self.frequency,
            "confidence_score": self.confidence_score,
            "validation_status": self.validation_status,
            "example_snippet": self.example_snippet,
            **self.contexts_json,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
