"""Tests for singleton logging configuration and the run logger."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from dsladvisor.logger import RunLogger
from dsladvisor.logging_config import (
    _SUPPRESSED_LOGGERS,
    LOG_DATEFMT,
    LOG_FORMAT,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset_flag() -> None:
    """Reset the singleton flag before each test."""
    import dsladvisor.logging_config as mod

    mod._configured = False


def test_setup_logging_is_idempotent() -> None:
    with patch("dsladvisor.logging_config.logging.basicConfig") as mock_bc:
        setup_logging()
        setup_logging()  # second call is no-op
        mock_bc.assert_called_once()


def test_setup_logging_passes_format_and_level() -> None:
    with patch("dsladvisor.logging_config.logging.basicConfig") as mock_bc:
        setup_logging("debug")
    mock_bc.assert_called_once_with(
        level=logging.DEBUG, format=LOG_FORMAT, datefmt=LOG_DATEFMT
    )


def test_third_party_loggers_suppressed() -> None:
    with patch("dsladvisor.logging_config.logging.basicConfig"):
        setup_logging()
    for name in _SUPPRESSED_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


class TestRunLogger:
    def _lines(self, log_dir: Path) -> list[dict[str, object]]:
        for handler in logging.getLogger("dsladvisor.runs").handlers:
            handler.flush()
        text = (log_dir / "runs.log").read_text()
        return [json.loads(line) for line in text.splitlines() if line]

    @pytest.fixture
    def run_logger(self, tmp_path: Path):
        runs = logging.getLogger("dsladvisor.runs")
        for handler in list(runs.handlers):
            runs.removeHandler(handler)
            handler.close()
        yield RunLogger(tmp_path, "INFO")
        for handler in list(runs.handlers):
            runs.removeHandler(handler)
            handler.close()

    def test_stage_and_run_records(
        self, run_logger: RunLogger, tmp_path: Path
    ) -> None:
        run_logger.log_stage("r1", "scan", "done", 12.5)
        run_logger.log_run("r1", "resource", 40, 2, 1, 0.7, 99.0)

        stage, run = self._lines(tmp_path)
        assert stage["type"] == "stage"
        assert stage["stage"] == "scan"
        assert stage["error"] is None
        assert run["type"] == "run"
        assert run["dsl_name"] == "resource"
        assert run["sample_size"] == 40

    def test_error_message_truncated(
        self, run_logger: RunLogger, tmp_path: Path
    ) -> None:
        run_logger.log_error("r1", "scan", "x" * 500)

        (record,) = self._lines(tmp_path)
        assert record["type"] == "error"
        assert len(str(record["error"])) == 200
