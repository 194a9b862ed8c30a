"""SQLAlchemy ORM models."""

from dsladvisor.models.analysis import AnalysisRecord
from dsladvisor.models.base import Base
from dsladvisor.models.calibration import CalibrationRecord
from dsladvisor.models.improvement import ImprovementRecord
from dsladvisor.models.pattern import PatternRecord
from dsladvisor.models.result import ResultRecord

__all__ = [
    "AnalysisRecord",
    "Base",
    "CalibrationRecord",
    "ImprovementRecord",
    "PatternRecord",
    "ResultRecord",
]
