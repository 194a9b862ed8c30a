"""SQL implementation of CalibrationRepository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dsladvisor.models.calibration import CalibrationRecord


class SqlCalibrationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, calibration: CalibrationRecord) -> CalibrationRecord:
        self._session.add(calibration)
        await self._session.flush()
        return calibration

    async def latest(self) -> CalibrationRecord | None:
        result = await self._session.execute(
            select(CalibrationRecord)
            .order_by(CalibrationRecord.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
