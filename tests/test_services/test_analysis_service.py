"""End-to-end tests for the analysis pipeline over a real corpus on disk."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

import pytest

from dsladvisor.config import Settings
from dsladvisor.constants import (
    FrictionCategory,
    ImprovementType,
    Severity,
    StageProgress,
)
from dsladvisor.logger import RunLogger
from dsladvisor.resilience.errors import (
    CorpusUnreadableError,
    IntrospectionError,
)
from dsladvisor.services.analysis_service import analyze
from dsladvisor.services.events import StageEvent
from tests.conftest import flat_definition, make_handle, resource_definition

STAGES = [
    "introspection",
    "scan",
    "mining",
    "friction",
    "synthesis",
    "prioritization",
]


def _error_corpus(root: Path, count: int = 45) -> Path:
    """A corpus whose only evidence is ``count`` failed attribute uses."""
    root.mkdir(parents=True, exist_ok=True)
    line = json.dumps({"construct": "attribute", "outcome": "error"})
    (root / "errors.jsonl").write_text("\n".join([line] * count) + "\n")
    return root


@pytest.fixture
def run_logger(tmp_path: Path):
    runs = logging.getLogger("dsladvisor.runs")
    runs.handlers.clear()
    yield RunLogger(tmp_path / "logs")
    for handler in runs.handlers:
        handler.close()
    runs.handlers.clear()


class TestScenarios:
    async def test_oversized_schema(self, tmp_path: Path) -> None:
        corpus = tmp_path / "empty"
        corpus.mkdir()
        analysis = await analyze(make_handle(flat_definition(25)), [corpus])

        (point,) = analysis.friction_points
        assert point.category == FrictionCategory.COGNITIVE_OVERLOAD
        assert point.severity == Severity.MEDIUM

        (improvement,) = analysis.improvements
        assert improvement.improvement_type == ImprovementType.SIMPLIFICATION
        assert improvement.title == "Simplify the structure of flat"
        assert improvement.effort_score == 3.0
        assert improvement.impact_score == pytest.approx(0.595)
        assert improvement.rank == 1

    async def test_error_prone_construct(self, tmp_path: Path) -> None:
        corpus = _error_corpus(tmp_path / "corpus")
        analysis = await analyze(make_handle(resource_definition()), [corpus])

        (point,) = analysis.friction_points
        assert point.category == FrictionCategory.ERROR_PRONE
        assert point.construct == "attribute"
        assert point.severity == Severity.HIGH
        assert point.frequency == 45

        (improvement,) = analysis.improvements
        assert improvement.improvement_type == ImprovementType.VALIDATION
        assert improvement.breaking_changes is False
        assert improvement.title == "Add validation for attribute"

        assert analysis.sample_size == 45
        assert analysis.files_scanned == 1
        assert analysis.insufficient_evidence is None
        assert analysis.error_occurrences == 45
        # 20+ samples, with error and co-occurrence evidence only
        assert analysis.analysis_confidence == pytest.approx(0.525)


class TestAnalyze:
    async def test_progress_events(self, tmp_path: Path) -> None:
        corpus = _error_corpus(tmp_path / "corpus", count=3)
        events: list[StageEvent] = []
        await analyze(
            make_handle(resource_definition()),
            [corpus],
            on_progress=events.append,
        )

        done = [e.name for e in events if e.status == StageProgress.DONE]
        assert done == STAGES
        progress = [e for e in events if e.completed is not None]
        assert [(e.completed, e.total, e.percent) for e in progress] == [
            (1, 1, 100.0)
        ]
        assert events[0].label == "Introspecting DSL schema"

    async def test_insufficient_evidence_still_completes(
        self, tmp_path: Path
    ) -> None:
        corpus = _error_corpus(tmp_path / "corpus", count=3)
        analysis = await analyze(make_handle(resource_definition()), [corpus])

        assert analysis.insufficient_evidence is not None
        assert analysis.insufficient_evidence.minimum == 10
        assert analysis.friction_points == ()
        assert analysis.analysis_confidence == pytest.approx(0.3)

    async def test_min_sample_size_from_settings(self, tmp_path: Path) -> None:
        corpus = _error_corpus(tmp_path / "corpus", count=3)
        analysis = await analyze(
            make_handle(resource_definition()),
            [corpus],
            settings=Settings(min_sample_size=3),
        )
        assert analysis.insufficient_evidence is None

    async def test_introspection_error_propagates(self, tmp_path: Path) -> None:
        events: list[StageEvent] = []
        with pytest.raises(IntrospectionError):
            await analyze(object(), [tmp_path], on_progress=events.append)
        assert events[-1].name == "introspection"
        assert events[-1].status == StageProgress.ERROR

    async def test_unreadable_corpus_propagates(self, tmp_path: Path) -> None:
        events: list[StageEvent] = []
        with pytest.raises(CorpusUnreadableError):
            await analyze(
                make_handle(resource_definition()),
                [tmp_path / "missing"],
                on_progress=events.append,
            )
        failed = [e.name for e in events if e.status == StageProgress.ERROR]
        assert failed == ["scan"]

    async def test_cancelled_scan_marks_partial(self, tmp_path: Path) -> None:
        corpus = _error_corpus(tmp_path / "corpus")
        cancel = threading.Event()
        cancel.set()
        analysis = await analyze(
            make_handle(resource_definition()), [corpus], cancel_event=cancel
        )
        assert analysis.partial is True
        assert analysis.files_scanned == 0
        # floor confidence, half evidence, partial penalty
        assert analysis.analysis_confidence == pytest.approx(0.16)

    async def test_deterministic(self, tmp_path: Path) -> None:
        corpus = _error_corpus(tmp_path / "corpus")
        first = await analyze(make_handle(resource_definition()), [corpus])
        second = await analyze(make_handle(resource_definition()), [corpus])
        assert first == second

    async def test_run_log_written(
        self, tmp_path: Path, run_logger: RunLogger
    ) -> None:
        corpus = _error_corpus(tmp_path / "corpus")
        await analyze(
            make_handle(resource_definition()),
            [corpus],
            run_logger=run_logger,
        )
        lines = (tmp_path / "logs" / "runs.log").read_text().splitlines()
        entries = [json.loads(line) for line in lines]
        assert [e["type"] for e in entries][-1] == "run"
        assert entries[-1]["dsl_name"] == "resource"
        assert entries[-1]["improvement_count"] == 1
