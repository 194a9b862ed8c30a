"""Calibration ORM model: output of one learning-loop run."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from dsladvisor.models.base import Base


class CalibrationRecord(Base):
    __tablename__ = "calibrations"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    result_count: Mapped[int] = mapped_column(default=0)
    effort_multipliers: Mapped[dict[str, float]] = mapped_column(
        JSON, default=dict
    )
    impact_multipliers: Mapped[dict[str, float]] = mapped_column(
        JSON, default=dict
    )
    success_rates: Mapped[dict[str, float]] = mapped_column(JSON, default=dict)
    sample_counts: Mapped[dict[str, int]] = mapped_column(JSON, default=dict)
    insights: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "result_count": self.result_count,
            "effort_multipliers": self.effort_multipliers,
            "impact_multipliers": self.impact_multipliers,
            "success_rates": self.success_rates,
            "sample_counts": self.sample_counts,
            "insights": self.insights,
            "created_at": self.created_at.isoformat(),
        }
