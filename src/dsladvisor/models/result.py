"""ImprovementResult ORM model: one real-world implementation attempt."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dsladvisor.models.base import Base

if TYPE_CHECKING:
    from dsladvisor.models.improvement import ImprovementRecord


class ResultRecord(Base):
    __tablename__ = "improvement_results"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    improvement_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("improvements.id", ondelete="CASCADE"),
        index=True,
    )
    improvement_type: Mapped[str] = mapped_column(String(30), index=True)
    actual_impact_score: Mapped[float] = mapped_column(default=0.0)
    implementation_success: Mapped[bool] = mapped_column(default=False)
    rolled_back: Mapped[bool] = mapped_column(default=False)
    payload_json: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        onupdate=lambda: datetime.now(UTC),
    )

    improvement: Mapped["ImprovementRecord"] = relationship(
        back_populates="results"
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.payload_json,
            "id": self.id,
            "improvement_id": self.improvement_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
