"""SQL implementation of ResultRepository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dsladvisor.models.result import ResultRecord


class SqlResultRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, result_id: str) -> ResultRecord | None:
        result = await self._session.execute(
            select(ResultRecord).where(ResultRecord.id == result_id)
        )
        return result.scalar_one_or_none()

    async def create(self, result: ResultRecord) -> ResultRecord:
        self._session.add(result)
        await self._session.flush()
        return result

    async def update(self, result: ResultRecord) -> ResultRecord:
        merged = await self._session.merge(result)
        await self._session.flush()
        return merged

    async def list_all(self) -> list[ResultRecord]:
        result = await self._session.execute(
            select(ResultRecord).order_by(ResultRecord.created_at)
        )
        return list(result.scalars().all())

    async def list_by_improvement(
        self, improvement_id: str
    ) -> list[ResultRecord]:
        result = await self._session.execute(
            select(ResultRecord)
            .where(ResultRecord.improvement_id == improvement_id)
            .order_by(ResultRecord.created_at)
        )
        return list(result.scalars().all())

    async def list_successful(self) -> list[ResultRecord]:
        result = await self._session.execute(
            select(ResultRecord)
            .where(ResultRecord.implementation_success.is_(True))
            .order_by(ResultRecord.actual_impact_score.desc())
        )
        return list(result.scalars().all())

    async def list_failed(self) -> list[ResultRecord]:
        result = await self._session.execute(
            select(ResultRecord)
            .where(ResultRecord.implementation_success.is_(False))
            .order_by(ResultRecord.created_at)
        )
        return list(result.scalars().all())

    async def list_negative_impact(self) -> list[ResultRecord]:
        result = await self._session.execute(
            select(ResultRecord)
            .where(ResultRecord.actual_impact_score < 0)
            .order_by(ResultRecord.actual_impact_score)
        )
        return list(result.scalars().all())

    async def list_by_type(self, improvement_type: str) -> list[ResultRecord]:
        result = await self._session.execute(
            select(ResultRecord)
            .where(ResultRecord.improvement_type == improvement_type)
            .order_by(ResultRecord.created_at)
        )
        return list(result.scalars().all())
