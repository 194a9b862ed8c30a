"""SQL implementation of PatternRepository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dsladvisor.models.pattern import PatternRecord


class SqlPatternRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, pattern_id: str) -> PatternRecord | None:
        result = await self._session.execute(
            select(PatternRecord).where(PatternRecord.id == pattern_id)
        )
        return result.scalar_one_or_none()

    async def bulk_insert(self, patterns: list[PatternRecord]) -> None:
        self._session.add_all(patterns)
        await self._session.flush()

    async def list_by_analysis(self, analysis_id: str) -> list[PatternRecord]:
        result = await self._session.execute(
            select(PatternRecord)
            .where(PatternRecord.analysis_id == analysis_id)
            .order_by(
                PatternRecord.construct_name, PatternRecord.pattern_type
            )
        )
        return list(result.scalars().all())

    async def list_by_type(
        self, analysis_id: str, pattern_type: str
    ) -> list[PatternRecord]:
        result = await self._session.execute(
            select(PatternRecord)
            .where(
                PatternRecord.analysis_id == analysis_id,
                PatternRecord.pattern_type == pattern_type,
            )
            .order_by(PatternRecord.frequency.desc())
        )
        return list(result.scalars().all())

    async def list_by_construct(
        self, construct_name: str
    ) -> list[PatternRecord]:
        result = await self._session.execute(
            select(PatternRecord)
            .where(PatternRecord.construct_name == construct_name)
            .order_by(PatternRecord.confidence_score.desc())
        )
        return list(result.scalars().all())

    async def update(self, pattern: PatternRecord) -> PatternRecord:
        merged = await self._session.merge(pattern)
        await self._session.flush()
        return merged
