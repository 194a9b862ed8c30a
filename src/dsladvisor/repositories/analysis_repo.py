"""SQL implementation of AnalysisRepository."""

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dsladvisor.models.analysis import AnalysisRecord


class SqlAnalysisRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, analysis_id: str) -> AnalysisRecord | None:
        result = await self._session.execute(
            select(AnalysisRecord).where(AnalysisRecord.id == analysis_id)
        )
        return result.scalar_one_or_none()

    async def create(self, analysis: AnalysisRecord) -> AnalysisRecord:
        self._session.add(analysis)
        await self._session.flush()
        return analysis

    async def list_by_dsl(self, dsl_name: str) -> list[AnalysisRecord]:
        """Analyses of one DSL, newest first."""
        result = await self._session.execute(
            select(AnalysisRecord)
            .where(AnalysisRecord.dsl_name == dsl_name)
            .order_by(AnalysisRecord.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_min_confidence(
        self, min_confidence: float
    ) -> list[AnalysisRecord]:
        result = await self._session.execute(
            select(AnalysisRecord)
            .where(AnalysisRecord.analysis_confidence >= min_confidence)
            .order_by(AnalysisRecord.analysis_confidence.desc())
        )
        return list(result.scalars().all())

    async def list_with_friction(self) -> list[AnalysisRecord]:
        result = await self._session.execute(
            select(AnalysisRecord)
            .where(AnalysisRecord.total_friction_points > 0)
            .order_by(AnalysisRecord.created_at.desc())
        )
        return list(result.scalars().all())

    async def delete(self, analysis_id: str) -> None:
        """Delete an analysis; patterns, improvements and results cascade."""
        await self._session.execute(
            sa_delete(AnalysisRecord).where(AnalysisRecord.id == analysis_id)
        )
        await self._session.flush()
