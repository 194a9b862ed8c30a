"""Structured JSON logger for analysis runs and feedback events."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from dsladvisor.constants import ERROR_TRUNCATION_CHARS
from dsladvisor.logging_config import LOG_DATEFMT, LOG_FORMAT

__all__ = ["RunLogger", "LOG_FORMAT", "LOG_DATEFMT"]


class RunLogger:
    """Structured JSON-lines logger with run_id correlation."""

    def __init__(self, log_dir: Path, level: str = "INFO") -> None:
        self._log_dir = log_dir
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger("dsladvisor.runs")
        self._logger.setLevel(getattr(logging, level.upper()))

        if not self._logger.handlers:
            handler = logging.FileHandler(log_dir / "runs.log")
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)

    def log_run(
        self,
        run_id: str,
        dsl_name: str,
        sample_size: int,
        friction_count: int,
        improvement_count: int,
        confidence: float,
        duration_ms: float,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "run",
                "timestamp": datetime.now(UTC).isoformat(),
                "run_id": run_id,
                "dsl_name": dsl_name[:ERROR_TRUNCATION_CHARS],
                "sample_size": sample_size,
                "friction_count": friction_count,
                "improvement_count": improvement_count,
                "confidence": confidence,
                "duration_ms": duration_ms,
            })
        )

    def log_stage(
        self,
        run_id: str,
        stage_name: str,
        status: str,
        duration_ms: float,
        error: str | None = None,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "stage",
                "timestamp": datetime.now(UTC).isoformat(),
                "run_id": run_id,
                "stage": stage_name,
                "status": status,
                "duration_ms": duration_ms,
                "error": error[:ERROR_TRUNCATION_CHARS] if error else None,
            })
        )

    def log_warning(
        self,
        run_id: str,
        component: str,
        message: str,
    ) -> None:
        self._logger.warning(
            json.dumps({
                "type": "warning",
                "timestamp": datetime.now(UTC).isoformat(),
                "run_id": run_id,
                "component": component,
                "message": message[:ERROR_TRUNCATION_CHARS],
            })
        )

    def log_error(
        self,
        run_id: str,
        component: str,
        error: str,
    ) -> None:
        self._logger.error(
            json.dumps({
                "type": "error",
                "timestamp": datetime.now(UTC).isoformat(),
                "run_id": run_id,
                "component": component,
                "error": error[:ERROR_TRUNCATION_CHARS],
            })
        )
