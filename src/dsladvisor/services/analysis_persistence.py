"""Persist analysis results to the database."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from dsladvisor.analysis.mining.miner import observe, validate
from dsladvisor.analysis.mining.schemas import CONTEXT_FIELDS, UsagePattern
from dsladvisor.analysis.schemas import DslAnalysis
from dsladvisor.analysis.synthesis.schemas import Improvement
from dsladvisor.analysis.synthesis.synthesizer import refine
from dsladvisor.constants import ValidationStatus
from dsladvisor.feedback.schemas import ImprovementResult
from dsladvisor.models.analysis import AnalysisRecord
from dsladvisor.models.improvement import ImprovementRecord
from dsladvisor.models.pattern import PatternRecord
from dsladvisor.models.result import ResultRecord
from dsladvisor.repositories.analysis_repo import SqlAnalysisRepository
from dsladvisor.repositories.improvement_repo import (
    SqlImprovementRepository,
)
from dsladvisor.repositories.pattern_repo import SqlPatternRepository
from dsladvisor.repositories.protocols import (
    AnalysisRepository,
    ImprovementRepository,
    PatternRepository,
)
from dsladvisor.resilience.errors import RecordNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class PersistedAnalysis:
    """Ids assigned to a stored analysis and its children."""

    analysis_id: str
    pattern_ids: list[str] = field(default_factory=lambda: list[str]())
    improvement_ids: list[str] = field(default_factory=lambda: list[str]())


class AnalysisPersistenceService:
    """Atomically persist an analysis with its patterns and improvements.

    Accepts optional factory callables for repos. Defaults create
    SqlXxx repos (production). Tests can inject fakes.
    """

    def __init__(
        self,
        session_factory: Any,
        analysis_repo_factory: Callable[[Any], AnalysisRepository]
        | None = None,
        pattern_repo_factory: Callable[[Any], PatternRepository]
        | None = None,
        improvement_repo_factory: Callable[[Any], ImprovementRepository]
        | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._analysis_repo_factory = (
            analysis_repo_factory or SqlAnalysisRepository
        )
        self._pattern_repo_factory = (
            pattern_repo_factory or SqlPatternRepository
        )
        self._improvement_repo_factory = (
            improvement_repo_factory or SqlImprovementRepository
        )

    async def persist(self, analysis: DslAnalysis) -> PersistedAnalysis:
        """Write the analysis and its children in one session."""
        async with self._session_factory() as session:
            analysis_repo = self._analysis_repo_factory(session)
            pattern_repo = self._pattern_repo_factory(session)
            improvement_repo = self._improvement_repo_factory(session)

            record = await analysis_repo.create(analysis_to_record(analysis))

            patterns = [
                pattern_to_record(record.id, p) for p in analysis.patterns
            ]
            await pattern_repo.bulk_insert(patterns)

            improvements = [
                improvement_to_record(record.id, imp)
                for imp in analysis.improvements
            ]
            await improvement_repo.bulk_insert(improvements)

            await session.commit()

        logger.info(
            "event=analysis_persisted id=%s patterns=%d improvements=%d",
            record.id,
            len(patterns),
            len(improvements),
        )
        return PersistedAnalysis(
            analysis_id=record.id,
            pattern_ids=[p.id for p in patterns],
            improvement_ids=[i.id for i in improvements],
        )

    async def list_improvements(
        self, analysis_id: str
    ) -> list[tuple[str, Improvement]]:
        """Stored improvements of one analysis as (id, improvement), ranked.

        Raises :class:`RecordNotFoundError` for an unknown analysis.
        """
        async with self._session_factory() as session:
            analysis_repo = self._analysis_repo_factory(session)
            if await analysis_repo.get_by_id(analysis_id) is None:
                raise RecordNotFoundError("analysis", analysis_id)
            records = await self._improvement_repo_factory(
                session
            ).list_by_analysis(analysis_id)
            return [(r.id, improvement_from_record(r)) for r in records]

    async def delete(self, analysis_id: str) -> None:
        async with self._session_factory() as session:
            await self._analysis_repo_factory(session).delete(analysis_id)
            await session.commit()
        logger.info("event=analysis_deleted id=%s", analysis_id)

    async def reobserve_pattern(
        self,
        pattern_id: str,
        context: dict[str, dict[str, Any]] | None = None,
    ) -> UsagePattern:
        """Record one more consistent observation of a stored pattern."""
        return await self._update_pattern(
            pattern_id, lambda p: observe(p, context=context)
        )

    async def validate_pattern(
        self, pattern_id: str, status: ValidationStatus
    ) -> UsagePattern:
        return await self._update_pattern(
            pattern_id, lambda p: validate(p, status)
        )

    async def refine_improvement(
        self,
        improvement_id: str,
        *,
        effort_score: float | None = None,
        impact_score: float | None = None,
    ) -> Improvement:
        """Re-estimate a stored improvement and recompute its priority.

        Raises :class:`ValidationFailure` when the new estimate is
        inconsistent or infeasible; the stored record is left untouched.
        """
        async with self._session_factory() as session:
            repo = self._improvement_repo_factory(session)
            record = await repo.get_by_id(improvement_id)
            if record is None:
                raise RecordNotFoundError("improvement", improvement_id)
            refined = refine(
                improvement_from_record(record),
                effort_score=effort_score,
                impact_score=impact_score,
            )
            record.effort_score = refined.effort_score
            record.impact_score = refined.impact_score
            record.priority_score = refined.priority_score
            record.value_ratio = refined.value_ratio
            record.payload_json = refined.model_dump(mode="json")
            await repo.update(record)
            await session.commit()
        return refined

    async def _update_pattern(
        self,
        pattern_id: str,
        change: Callable[[UsagePattern], UsagePattern],
    ) -> UsagePattern:
        async with self._session_factory() as session:
            repo = self._pattern_repo_factory(session)
            record = await repo.get_by_id(pattern_id)
            if record is None:
                raise RecordNotFoundError("pattern", pattern_id)
            updated = change(pattern_from_record(record))
            record.frequency = updated.frequency
            record.confidence_score = updated.confidence_score
            record.validation_status = updated.validation_status
            record.contexts_json = {
                name: getattr(updated, name) for name in CONTEXT_FIELDS
            }
            await repo.update(record)
            await session.commit()
        return updated


# -- Record mapping --


def analysis_to_record(analysis: DslAnalysis) -> AnalysisRecord:
    return AnalysisRecord(
        dsl_name=analysis.dsl_name,
        analysis_confidence=analysis.analysis_confidence,
        sample_size=analysis.sample_size,
        files_scanned=analysis.files_scanned,
        partial=analysis.partial,
        insufficient_evidence=analysis.insufficient_evidence is not None,
        total_friction_points=analysis.total_friction_points,
        overall_health_score=analysis.overall_health_score,
        improvement_potential=analysis.improvement_potential,
        schema_json=analysis.schema_description.model_dump(mode="json"),
        friction_json=[
            p.model_dump(mode="json") for p in analysis.friction_points
        ],
        warnings_json=[w.model_dump(mode="json") for w in analysis.warnings],
        roots_json=[r.model_dump(mode="json") for r in analysis.roots],
    )


def pattern_to_record(analysis_id: str, pattern: UsagePattern) -> PatternRecord:
    return PatternRecord(
        analysis_id=analysis_id,
        pattern_type=pattern.pattern_type,
        construct_name=pattern.construct_name,
        frequency=pattern.frequency,
        confidence_score=pattern.confidence_score,
        validation_status=pattern.validation_status,
        example_snippet=pattern.example_snippet,
        contexts_json={
            "error_context": pattern.error_context,
            "user_context": pattern.user_context,
            "performance_context": pattern.performance_context,
            "business_context": pattern.business_context,
        },
    )


def pattern_from_record(record: PatternRecord) -> UsagePattern:
    return UsagePattern.model_validate({
        "pattern_type": record.pattern_type,
        "construct_name": record.construct_name,
        "frequency": record.frequency,
        "confidence_score": record.confidence_score,
        "validation_status": record.validation_status,
        "example_snippet": record.example_snippet,
        **record.contexts_json,
    })


def improvement_to_record(
    analysis_id: str, improvement: Improvement
) -> ImprovementRecord:
    return ImprovementRecord(
        analysis_id=analysis_id,
        rank=improvement.rank,
        title=improvement.title,
        improvement_type=improvement.improvement_type,
        effort_score=improvement.effort_score,
        impact_score=improvement.impact_score,
        priority_score=improvement.priority_score,
        value_ratio=improvement.value_ratio,
        breaking_changes=improvement.breaking_changes,
        payload_json=improvement.model_dump(mode="json"),
    )


def improvement_from_record(record: ImprovementRecord) -> Improvement:
    return Improvement.model_validate(record.payload_json)


def result_to_record(
    improvement_id: str, result: ImprovementResult
) -> ResultRecord:
    record = ResultRecord(improvement_id=improvement_id)
    apply_result(record, result)
    return record


def apply_result(record: ResultRecord, result: ImprovementResult) -> None:
    """Copy a (new) result state onto its stored record."""
    record.improvement_type = result.improvement_type
    record.actual_impact_score = result.actual_impact_score
    record.implementation_success = result.implementation_success
    record.rolled_back = result.rolled_back
    record.payload_json = result.model_dump(mode="json")


def result_from_record(record: ResultRecord) -> ImprovementResult:
    return ImprovementResult.model_validate(record.payload_json)
