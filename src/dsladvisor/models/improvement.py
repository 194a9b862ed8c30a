"""Improvement ORM model: one ranked recommendation."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dsladvisor.models.base import Base

if TYPE_CHECKING:
    from dsladvisor.models.analysis import AnalysisRecord
    from dsladvisor.models.result import ResultRecord


class ImprovementRecord(Base):
    __tablename__ = "improvements"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    analysis_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("dsl_analyses.id", ondelete="CASCADE"),
        index=True,
    )
    rank: Mapped[int | None] = mapped_column(nullable=True)
    title: Mapped[str] = mapped_column(String(300))
    improvement_type: Mapped[str] = mapped_column(String(30), index=True)
    effort_score: Mapped[float] = mapped_column(default=0.0)
    impact_score: Mapped[float] = mapped_column(default=0.0)
    priority_score: Mapped[float] = mapped_column(default=0.0)
    value_ratio: Mapped[float] = mapped_column(default=0.0)
    breaking_changes: Mapped[bool] = mapped_column(default=False)
    # Full serialized Improvement; the columns above are query projections
    payload_json: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    analysis: Mapped["AnalysisRecord"] = relationship(
        back_populates="improvements"
    )
    results: Mapped[list["ResultRecord"]] = relationship(
        back_populates="improvement",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.payload_json,
            "id": self.id,
            "analysis_id": self.analysis_id,
            "rank": self.rank,
            "created_at": self.created_at.isoformat(),
        }
