"""Implementation feedback and recalibration service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from dsladvisor.feedback.learning import learn
from dsladvisor.feedback.schemas import ImprovementResult
from dsladvisor.feedback.tracker import (
    add_user_feedback,
    record_result,
    rollback,
    update_metrics,
)
from dsladvisor.heuristics import (
    IDENTITY_CALIBRATION,
    Calibration,
    LearningConfig,
    TrackingConfig,
)
from dsladvisor.models.calibration import CalibrationRecord
from dsladvisor.models.result import ResultRecord
from dsladvisor.repositories.calibration_repo import SqlCalibrationRepository
from dsladvisor.repositories.improvement_repo import SqlImprovementRepository
from dsladvisor.repositories.protocols import (
    CalibrationRepository,
    ImprovementRepository,
    ResultRepository,
)
from dsladvisor.repositories.result_repo import SqlResultRepository
from dsladvisor.resilience.errors import RecordNotFoundError
from dsladvisor.services.analysis_persistence import (
    apply_result,
    improvement_from_record,
    result_from_record,
    result_to_record,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredResult:
    result_id: str
    result: ImprovementResult


class FeedbackService:
    """Record implementation outcomes and run the learning loop.

    Every operation is a single-writer update keyed by record id,
    each in its own short-lived session.
    """

    def __init__(
        self,
        session_factory: Any,
        improvement_repo_factory: Callable[[Any], ImprovementRepository]
        | None = None,
        result_repo_factory: Callable[[Any], ResultRepository] | None = None,
        calibration_repo_factory: Callable[[Any], CalibrationRepository]
        | None = None,
        tracking_config: TrackingConfig | None = None,
        learning_config: LearningConfig | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._improvement_repo_factory = (
            improvement_repo_factory or SqlImprovementRepository
        )
        self._result_repo_factory = result_repo_factory or SqlResultRepository
        self._calibration_repo_factory = (
            calibration_repo_factory or SqlCalibrationRepository
        )
        self._tracking_config = tracking_config
        self._learning_config = learning_config

    async def record_result(
        self,
        improvement_id: str,
        before_metrics: Mapping[str, float],
        after_metrics: Mapping[str, float],
        *,
        implementation_success: bool | None = None,
        actual_effort: float | None = None,
    ) -> StoredResult:
        async with self._session_factory() as session:
            record = await self._improvement_repo_factory(session).get_by_id(
                improvement_id
            )
            if record is None:
                raise RecordNotFoundError("improvement", improvement_id)
            result = record_result(
                improvement_from_record(record),
                before_metrics,
                after_metrics,
                implementation_success=implementation_success,
                actual_effort=actual_effort,
                config=self._tracking_config,
            )
            stored = await self._result_repo_factory(session).create(
                result_to_record(improvement_id, result)
            )
            await session.commit()
        return StoredResult(result_id=stored.id, result=result)

    async def update_metrics(
        self, result_id: str, after_metrics: Mapping[str, float]
    ) -> ImprovementResult:
        """Re-evaluate a stored result; rolled-back results are refused."""
        async with self._session_factory() as session:
            result_repo = self._result_repo_factory(session)
            stored = await self._get_result(result_repo, result_id)
            improvement = await self._improvement_repo_factory(
                session
            ).get_by_id(stored.improvement_id)
            if improvement is None:
                raise RecordNotFoundError(
                    "improvement", stored.improvement_id
                )
            updated = update_metrics(
                result_from_record(stored),
                improvement_from_record(improvement),
                after_metrics,
                config=self._tracking_config,
            )
            await self._save(result_repo, stored, updated)
            await session.commit()
        return updated

    async def record_rollback(
        self, result_id: str, reason: str
    ) -> ImprovementResult:
        return await self._transition(
            result_id, lambda r: rollback(r, reason)
        )

    async def add_user_feedback(
        self, result_id: str, feedback: str
    ) -> ImprovementResult:
        return await self._transition(
            result_id, lambda r: add_user_feedback(r, feedback)
        )

    async def learn(self) -> Calibration:
        """Recalibrate from every stored result and persist the outcome."""
        async with self._session_factory() as session:
            records = await self._result_repo_factory(session).list_all()
            results = [result_from_record(r) for r in records]
            calibration = learn(results, self._learning_config)
            await self._calibration_repo_factory(session).create(
                CalibrationRecord(
                    result_count=len(results),
                    effort_multipliers=dict(calibration.effort_multipliers),
                    impact_multipliers=dict(calibration.impact_multipliers),
                    success_rates=dict(calibration.success_rates),
                    sample_counts=dict(calibration.sample_counts),
                    insights=list(calibration.insights),
                )
            )
            await session.commit()
        return calibration

    async def latest_calibration(self) -> Calibration:
        """The newest learned calibration, or identity when none exists."""
        async with self._session_factory() as session:
            record = await self._calibration_repo_factory(session).latest()
        if record is None:
            return IDENTITY_CALIBRATION
        return Calibration(
            effort_multipliers=dict(record.effort_multipliers),
            impact_multipliers=dict(record.impact_multipliers),
            success_rates=dict(record.success_rates),
            sample_counts=dict(record.sample_counts),
            insights=tuple(record.insights),
        )

    async def _transition(
        self,
        result_id: str,
        change: Callable[[ImprovementResult], ImprovementResult],
    ) -> ImprovementResult:
        async with self._session_factory() as session:
            repo = self._result_repo_factory(session)
            stored = await self._get_result(repo, result_id)
            updated = change(result_from_record(stored))
            await self._save(repo, stored, updated)
            await session.commit()
        return updated

    @staticmethod
    async def _get_result(
        repo: ResultRepository, result_id: str
    ) -> ResultRecord:
        stored = await repo.get_by_id(result_id)
        if stored is None:
            raise RecordNotFoundError("result", result_id)
        return stored

    @staticmethod
    async def _save(
        repo: ResultRepository,
        stored: ResultRecord,
        updated: ImprovementResult,
    ) -> None:
        apply_result(stored, updated)
        await repo.update(stored)
        logger.debug("event=result_updated id=%s", stored.id)
