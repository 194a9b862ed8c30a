"""SQL implementation of ImprovementRepository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dsladvisor.constants import (
    HIGH_PRIORITY_MIN,
    LOW_EFFORT_HIGH_IMPACT_MIN,
    LOW_EFFORT_MAX,
)
from dsladvisor.models.improvement import ImprovementRecord


class SqlImprovementRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(
        self, improvement_id: str
    ) -> ImprovementRecord | None:
        result = await self._session.execute(
            select(ImprovementRecord).where(
                ImprovementRecord.id == improvement_id
            )
        )
        return result.scalar_one_or_none()

    async def bulk_insert(self, improvements: list[ImprovementRecord]) -> None:
        self._session.add_all(improvements)
        await self._session.flush()

    async def list_by_analysis(
        self, analysis_id: str
    ) -> list[ImprovementRecord]:
        """Improvements of one analysis in rank order."""
        result = await self._session.execute(
            select(ImprovementRecord)
            .where(ImprovementRecord.analysis_id == analysis_id)
            .order_by(ImprovementRecord.rank)
        )
        return list(result.scalars().all())

    async def list_by_type(
        self, improvement_type: str
    ) -> list[ImprovementRecord]:
        result = await self._session.execute(
            select(ImprovementRecord)
            .where(ImprovementRecord.improvement_type == improvement_type)
            .order_by(ImprovementRecord.value_ratio.desc())
        )
        return list(result.scalars().all())

    async def list_high_priority(
        self, min_priority: float = HIGH_PRIORITY_MIN
    ) -> list[ImprovementRecord]:
        result = await self._session.execute(
            select(ImprovementRecord)
            .where(ImprovementRecord.priority_score >= min_priority)
            .order_by(ImprovementRecord.priority_score.desc())
        )
        return list(result.scalars().all())

    async def list_low_effort_high_impact(self) -> list[ImprovementRecord]:
        result = await self._session.execute(
            select(ImprovementRecord)
            .where(
                ImprovementRecord.effort_score <= LOW_EFFORT_MAX,
                ImprovementRecord.impact_score >= LOW_EFFORT_HIGH_IMPACT_MIN,
            )
            .order_by(ImprovementRecord.value_ratio.desc())
        )
        return list(result.scalars().all())

    async def list_non_breaking(
        self, analysis_id: str
    ) -> list[ImprovementRecord]:
        result = await self._session.execute(
            select(ImprovementRecord)
            .where(
                ImprovementRecord.analysis_id == analysis_id,
                ImprovementRecord.breaking_changes.is_(False),
            )
            .order_by(ImprovementRecord.rank)
        )
        return list(result.scalars().all())

    async def update(self, improvement: ImprovementRecord) -> ImprovementRecord:
        merged = await self._session.merge(improvement)
        await self._session.flush()
        return merged
