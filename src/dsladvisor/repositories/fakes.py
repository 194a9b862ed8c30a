"""In-memory fake repositories for testing.

Dict-backed implementations of all 5 repository protocols, plus a
session stand-in so services can run on them.
No SQLAlchemy sessions, no I/O: instant operations for unit tests.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from dsladvisor.constants import (
    HIGH_PRIORITY_MIN,
    ID_HEX_LENGTH,
    LOW_EFFORT_HIGH_IMPACT_MIN,
    LOW_EFFORT_MAX,
)
from dsladvisor.models.analysis import AnalysisRecord
from dsladvisor.models.calibration import CalibrationRecord
from dsladvisor.models.improvement import ImprovementRecord
from dsladvisor.models.pattern import PatternRecord
from dsladvisor.models.result import ResultRecord


def _new_id() -> str:
    return uuid.uuid4().hex[:ID_HEX_LENGTH]


class FakeResultRepository:
    """Dict-backed ResultRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, ResultRecord] = {}

    async def get_by_id(self, result_id: str) -> ResultRecord | None:
        return self._store.get(result_id)

    async def create(self, result: ResultRecord) -> ResultRecord:
        if not result.id:
            result.id = _new_id()
        now = datetime.now(UTC)
        result.created_at = now
        result.updated_at = now
        self._store[result.id] = result
        return result

    async def update(self, result: ResultRecord) -> ResultRecord:
        result.updated_at = datetime.now(UTC)
        self._store[result.id] = result
        return result

    async def list_all(self) -> list[ResultRecord]:
        return list(self._store.values())

    async def list_by_improvement(
        self, improvement_id: str
    ) -> list[ResultRecord]:
        return [
            r for r in self._store.values()
            if r.improvement_id == improvement_id
        ]

    async def list_successful(self) -> list[ResultRecord]:
        return sorted(
            (r for r in self._store.values() if r.implementation_success),
            key=lambda r: -r.actual_impact_score,
        )

    async def list_failed(self) -> list[ResultRecord]:
        return [
            r for r in self._store.values() if not r.implementation_success
        ]

    async def list_negative_impact(self) -> list[ResultRecord]:
        return sorted(
            (r for r in self._store.values() if r.actual_impact_score < 0),
            key=lambda r: r.actual_impact_score,
        )

    async def list_by_type(self, improvement_type: str) -> list[ResultRecord]:
        return [
            r for r in self._store.values()
            if r.improvement_type == improvement_type
        ]

    def delete_for_improvements(self, improvement_ids: set[str]) -> None:
        for rid in [
            rid for rid, r in self._store.items()
            if r.improvement_id in improvement_ids
        ]:
            del self._store[rid]


class FakeImprovementRepository:
    """Dict-backed ImprovementRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, ImprovementRecord] = {}

    async def get_by_id(
        self, improvement_id: str
    ) -> ImprovementRecord | None:
        return self._store.get(improvement_id)

    async def bulk_insert(self, improvements: list[ImprovementRecord]) -> None:
        for imp in improvements:
            if not imp.id:
                imp.id = _new_id()
            imp.created_at = datetime.now(UTC)
            self._store[imp.id] = imp

    async def list_by_analysis(
        self, analysis_id: str
    ) -> list[ImprovementRecord]:
        return sorted(
            (i for i in self._store.values() if i.analysis_id == analysis_id),
            key=lambda i: i.rank or 0,
        )

    async def list_by_type(
        self, improvement_type: str
    ) -> list[ImprovementRecord]:
        return sorted(
            (
                i for i in self._store.values()
                if i.improvement_type == improvement_type
            ),
            key=lambda i: -i.value_ratio,
        )

    async def list_high_priority(
        self, min_priority: float = HIGH_PRIORITY_MIN
    ) -> list[ImprovementRecord]:
        return sorted(
            (i for i in self._store.values() if i.priority_score >= min_priority),
            key=lambda i: -i.priority_score,
        )

    async def list_low_effort_high_impact(self) -> list[ImprovementRecord]:
        return sorted(
            (
                i for i in self._store.values()
                if i.effort_score <= LOW_EFFORT_MAX
                and i.impact_score >= LOW_EFFORT_HIGH_IMPACT_MIN
            ),
            key=lambda i: -i.value_ratio,
        )

    async def list_non_breaking(
        self, analysis_id: str
    ) -> list[ImprovementRecord]:
        return [
            i for i in await self.list_by_analysis(analysis_id)
            if not i.breaking_changes
        ]

    async def update(self, improvement: ImprovementRecord) -> ImprovementRecord:
        self._store[improvement.id] = improvement
        return improvement

    def delete_for_analysis(self, analysis_id: str) -> set[str]:
        removed = {
            iid for iid, i in self._store.items()
            if i.analysis_id == analysis_id
        }
        for iid in removed:
            del self._store[iid]
        return removed


class FakePatternRepository:
    """Dict-backed PatternRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, PatternRecord] = {}

    async def get_by_id(self, pattern_id: str) -> PatternRecord | None:
        return self._store.get(pattern_id)

    async def bulk_insert(self, patterns: list[PatternRecord]) -> None:
        now = datetime.now(UTC)
        for pattern in patterns:
            if not pattern.id:
                pattern.id = _new_id()
            pattern.created_at = now
            pattern.updated_at = now
            self._store[pattern.id] = pattern

    async def list_by_analysis(self, analysis_id: str) -> list[PatternRecord]:
        return sorted(
            (p for p in self._store.values() if p.analysis_id == analysis_id),
            key=lambda p: (p.construct_name, p.pattern_type),
        )

    async def list_by_type(
        self, analysis_id: str, pattern_type: str
    ) -> list[PatternRecord]:
        return sorted(
            (
                p for p in self._store.values()
                if p.analysis_id == analysis_id
                and p.pattern_type == pattern_type
            ),
            key=lambda p: -p.frequency,
        )

    async def list_by_construct(
        self, construct_name: str
    ) -> list[PatternRecord]:
        return sorted(
            (
                p for p in self._store.values()
                if p.construct_name == construct_name
            ),
            key=lambda p: -p.confidence_score,
        )

    async def update(self, pattern: PatternRecord) -> PatternRecord:
        pattern.updated_at = datetime.now(UTC)
        self._store[pattern.id] = pattern
        return pattern

    def delete_for_analysis(self, analysis_id: str) -> None:
        for pid in [
            pid for pid, p in self._store.items()
            if p.analysis_id == analysis_id
        ]:
            del self._store[pid]


class FakeAnalysisRepository:
    """Dict-backed AnalysisRepository for testing.

    Emulates ``ON DELETE CASCADE`` when wired to the child fakes.
    """

    def __init__(
        self,
        patterns: FakePatternRepository | None = None,
        improvements: FakeImprovementRepository | None = None,
        results: FakeResultRepository | None = None,
    ) -> None:
        self._store: dict[str, AnalysisRecord] = {}
        self._patterns = patterns
        self._improvements = improvements
        self._results = results

    async def get_by_id(self, analysis_id: str) -> AnalysisRecord | None:
        return self._store.get(analysis_id)

    async def create(self, analysis: AnalysisRecord) -> AnalysisRecord:
        if not analysis.id:
            analysis.id = _new_id()
        analysis.created_at = datetime.now(UTC)
        self._store[analysis.id] = analysis
        return analysis

    async def list_by_dsl(self, dsl_name: str) -> list[AnalysisRecord]:
        return sorted(
            (a for a in self._store.values() if a.dsl_name == dsl_name),
            key=lambda a: a.created_at,
            reverse=True,
        )

    async def list_min_confidence(
        self, min_confidence: float
    ) -> list[AnalysisRecord]:
        return sorted(
            (
                a for a in self._store.values()
                if a.analysis_confidence >= min_confidence
            ),
            key=lambda a: -a.analysis_confidence,
        )

    async def list_with_friction(self) -> list[AnalysisRecord]:
        return sorted(
            (a for a in self._store.values() if a.total_friction_points > 0),
            key=lambda a: a.created_at,
            reverse=True,
        )

    async def delete(self, analysis_id: str) -> None:
        if self._store.pop(analysis_id, None) is None:
            return
        if self._patterns is not None:
            self._patterns.delete_for_analysis(analysis_id)
        if self._improvements is not None:
            removed = self._improvements.delete_for_analysis(analysis_id)
            if self._results is not None:
                self._results.delete_for_improvements(removed)


class FakeCalibrationRepository:
    """List-backed CalibrationRepository for testing."""

    def __init__(self) -> None:
        self._items: list[CalibrationRecord] = []

    async def create(self, calibration: CalibrationRecord) -> CalibrationRecord:
        if not calibration.id:
            calibration.id = _new_id()
        calibration.created_at = datetime.now(UTC)
        self._items.append(calibration)
        return calibration

    async def latest(self) -> CalibrationRecord | None:
        return self._items[-1] if self._items else None


class FakeSession:
    """Stand-in for ``AsyncSession`` when services run on fake repos."""

    def __init__(self) -> None:
        self.commits = 0

    async def __aenter__(self) -> FakeSession:
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None

    async def commit(self) -> None:
        self.commits += 1


class FakeSessionFactory:
    """Callable returning one shared FakeSession, like ``async_sessionmaker``."""

    def __init__(self) -> None:
        self.session = FakeSession()

    def __call__(self) -> FakeSession:
        return self.session
