"""Protocol-based repository interfaces.

SQL implementations satisfy these protocols structurally (no inheritance).
Test doubles can be plain classes or mocks matching the same signature.
"""

from typing import Protocol

from dsladvisor.models.analysis import AnalysisRecord
from dsladvisor.models.calibration import CalibrationRecord
from dsladvisor.models.improvement import ImprovementRecord
from dsladvisor.models.pattern import PatternRecord
from dsladvisor.models.result import ResultRecord


class AnalysisRepository(Protocol):
    async def get_by_id(self, analysis_id: str) -> AnalysisRecord | None: ...
    async def create(self, analysis: AnalysisRecord) -> AnalysisRecord: ...
    async def list_by_dsl(self, dsl_name: str) -> list[AnalysisRecord]: ...
    async def list_min_confidence(
        self, min_confidence: float
    ) -> list[AnalysisRecord]: ...
    async def list_with_friction(self) -> list[AnalysisRecord]: ...
    async def delete(self, analysis_id: str) -> None: ...


class PatternRepository(Protocol):
    async def get_by_id(self, pattern_id: str) -> PatternRecord | None: ...
    async def bulk_insert(self, patterns: list[PatternRecord]) -> None: ...
    async def list_by_analysis(
        self, analysis_id: str
    ) -> list[PatternRecord]: ...
    async def list_by_type(
        self, analysis_id: str, pattern_type: str
    ) -> list[PatternRecord]: ...
    async def list_by_construct(
        self, construct_name: str
    ) -> list[PatternRecord]: ...
    async def update(self, pattern: PatternRecord) -> PatternRecord: ...


class ImprovementRepository(Protocol):
    async def get_by_id(
        self, improvement_id: str
    ) -> ImprovementRecord | None: ...
    async def bulk_insert(
        self, improvements: list[ImprovementRecord]
    ) -> None: ...
    async def list_by_analysis(
        self, analysis_id: str
    ) -> list[ImprovementRecord]: ...
    async def list_by_type(
        self, improvement_type: str
    ) -> list[ImprovementRecord]: ...
    async def list_high_priority(
        self, min_priority: float = ...
    ) -> list[ImprovementRecord]: ...
    async def list_low_effort_high_impact(self) -> list[ImprovementRecord]: ...
    async def list_non_breaking(
        self, analysis_id: str
    ) -> list[ImprovementRecord]: ...
    async def update(
        self, improvement: ImprovementRecord
    ) -> ImprovementRecord: ...


class ResultRepository(Protocol):
    async def get_by_id(self, result_id: str) -> ResultRecord | None: ...
    async def create(self, result: ResultRecord) -> ResultRecord: ...
    async def update(self, result: ResultRecord) -> ResultRecord: ...
    async def list_all(self) -> list[ResultRecord]: ...
    async def list_by_improvement(
        self, improvement_id: str
    ) -> list[ResultRecord]: ...
    async def list_successful(self) -> list[ResultRecord]: ...
    async def list_failed(self) -> list[ResultRecord]: ...
    async def list_negative_impact(self) -> list[ResultRecord]: ...
    async def list_by_type(
        self, improvement_type: str
    ) -> list[ResultRecord]: ...


class CalibrationRepository(Protocol):
    async def create(
        self, calibration: CalibrationRecord
    ) -> CalibrationRecord: ...
    async def latest(self) -> CalibrationRecord | None: ...
