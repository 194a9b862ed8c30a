"""Pipeline orchestration: runs the full analysis pipeline."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
import uuid
from collections.abc import Callable, Sequence
from pathlib import Path

from dsladvisor.analysis.assessment import (
    analysis_confidence,
    insufficient_evidence,
)
from dsladvisor.analysis.friction.detector import detect_friction
from dsladvisor.analysis.mining.miner import mine_patterns
from dsladvisor.analysis.prioritizer import prioritize
from dsladvisor.analysis.schemas import DslAnalysis
from dsladvisor.analysis.synthesis.synthesizer import synthesize_all
from dsladvisor.config import Settings
from dsladvisor.constants import ID_HEX_LENGTH, StageProgress
from dsladvisor.heuristics import (
    DEFAULT_ESTIMATION_CONFIG,
    IDENTITY_CALIBRATION,
    Calibration,
    ComplexityWeights,
    FrictionThresholds,
    MiningConfig,
)
from dsladvisor.introspection.introspector import (
    construct_keywords,
    introspect,
)
from dsladvisor.introspection.schemas import SchemaDescription
from dsladvisor.logger import RunLogger
from dsladvisor.scanning.scanner import CancelSignal, scan_corpus
from dsladvisor.scanning.schemas import CorpusLocator, ScanResult
from dsladvisor.services.events import ProgressCallback, StageEvent

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class _RunContext:
    """Per-run reporting state shared by the stage helpers."""

    run_id: str
    on_progress: ProgressCallback | None = None
    run_logger: RunLogger | None = None

    def report(self, event: StageEvent) -> None:
        if self.on_progress:
            self.on_progress(event)

    def running(self, name: str, message: str = "") -> None:
        self.report(
            StageEvent(name=name, status=StageProgress.RUNNING, message=message)
        )

    def done(
        self, name: str, duration_ms: float, message: str = ""
    ) -> None:
        self.report(
            StageEvent(
                name=name,
                status=StageProgress.DONE,
                message=message,
                duration_ms=duration_ms,
            )
        )
        if self.run_logger:
            self.run_logger.log_stage(
                self.run_id, name, StageProgress.DONE, duration_ms
            )

    def failed(self, name: str, duration_ms: float, exc: BaseException) -> None:
        self.report(
            StageEvent(
                name=name,
                status=StageProgress.ERROR,
                message=str(exc),
                duration_ms=duration_ms,
            )
        )
        if self.run_logger:
            self.run_logger.log_stage(
                self.run_id, name, StageProgress.ERROR, duration_ms, str(exc)
            )
            self.run_logger.log_error(self.run_id, name, str(exc))


async def analyze(
    dsl_handle: object,
    corpus_locator: CorpusLocator | Sequence[Path | str],
    *,
    settings: Settings | None = None,
    calibration: Calibration | None = None,
    cancel_event: CancelSignal | None = None,
    on_progress: ProgressCallback | None = None,
    run_logger: RunLogger | None = None,
    weights: ComplexityWeights | None = None,
    mining_config: MiningConfig | None = None,
    thresholds: FrictionThresholds | None = None,
) -> DslAnalysis:
    """Run introspection and the corpus scan, then the scoring stages.

    Introspection and scanning run concurrently; mining, friction
    detection, synthesis and prioritization follow in order over
    immutable inputs. ``IntrospectionError`` and
    ``CorpusUnreadableError`` propagate: the caller gets either a
    complete analysis with its confidence or a fatal error.
    """
    cfg = settings or Settings()
    cal = calibration or IDENTITY_CALIBRATION
    ctx = _RunContext(
        run_id=uuid.uuid4().hex[:ID_HEX_LENGTH],
        on_progress=on_progress,
        run_logger=run_logger,
    )
    t0 = time.monotonic()

    schema, scan = await _phase_gather(
        ctx, dsl_handle, corpus_locator, cfg, cancel_event, weights
    )

    mining = _run_stage_sync(
        ctx, "mining", lambda: mine_patterns(scan.observations, mining_config)
    )
    points = _run_stage_sync(
        ctx,
        "friction",
        lambda: detect_friction(
            schema, mining, thresholds=thresholds, calibration=cal
        ),
    )
    estimation = dataclasses.replace(
        DEFAULT_ESTIMATION_CONFIG,
        max_non_breaking_constructs=cfg.max_non_breaking_constructs,
    )
    improvements = _run_stage_sync(
        ctx,
        "synthesis",
        lambda: synthesize_all(
            points, schema, config=estimation, calibration=cal
        ),
    )
    ranked = _run_stage_sync(
        ctx, "prioritization", lambda: prioritize(improvements, estimation)
    )

    sample_size = scan.total_occurrences
    confidence = analysis_confidence(sample_size, mining, partial=scan.partial)
    shortfall = insufficient_evidence(sample_size, cfg.min_sample_size)
    if shortfall is not None:
        logger.warning(
            "event=insufficient_evidence run=%s sample_size=%d minimum=%d",
            ctx.run_id,
            sample_size,
            cfg.min_sample_size,
        )
        if run_logger:
            run_logger.log_warning(ctx.run_id, "analysis", shortfall.message)
    if scan.partial and run_logger:
        run_logger.log_warning(
            ctx.run_id, "scan", "Scan cancelled; analysis uses partial evidence"
        )

    analysis = DslAnalysis(
        dsl_name=schema.dsl_name,
        schema_description=schema,
        patterns=mining.patterns,
        friction_points=tuple(points),
        improvements=tuple(ranked),
        analysis_confidence=confidence,
        sample_size=sample_size,
        files_scanned=scan.files_scanned,
        naming_consistency=mining.naming_consistency,
        partial=scan.partial,
        warnings=scan.warnings,
        insufficient_evidence=shortfall,
        roots=scan.roots,
    )
    duration_ms = _elapsed(t0)
    logger.info(
        "event=analysis_complete run=%s dsl=%s samples=%d frictions=%d "
        "improvements=%d confidence=%.3f duration_ms=%.0f",
        ctx.run_id,
        analysis.dsl_name,
        sample_size,
        analysis.total_friction_points,
        len(analysis.improvements),
        confidence,
        duration_ms,
    )
    if run_logger:
        run_logger.log_run(
            ctx.run_id,
            analysis.dsl_name,
            sample_size,
            analysis.total_friction_points,
            len(analysis.improvements),
            confidence,
            duration_ms,
        )
    return analysis


# -- Pipeline phase functions --


async def _phase_gather(
    ctx: _RunContext,
    dsl_handle: object,
    corpus_locator: CorpusLocator | Sequence[Path | str],
    cfg: Settings,
    cancel_event: CancelSignal | None,
    weights: ComplexityWeights | None,
) -> tuple[SchemaDescription, ScanResult]:
    """Introspect the DSL and scan the corpus concurrently.

    The construct keywords are read first since the scanner needs
    them; the full schema walk then overlaps the file scan.
    """
    ctx.running("introspection", "Enumerating sections and entities...")
    t_intro = time.monotonic()
    try:
        keywords = await asyncio.to_thread(construct_keywords, dsl_handle)
    except Exception as exc:
        ctx.failed("introspection", _elapsed(t_intro), exc)
        raise

    ctx.running("scan", f"Scanning for {len(keywords)} constructs...")

    def _on_file(completed: int, total: int) -> None:
        ctx.report(
            StageEvent(
                name="scan",
                status=StageProgress.RUNNING,
                completed=completed,
                total=total,
                percent=round(100 * completed / total, 1) if total else 100.0,
            )
        )

    async def _introspect() -> tuple[SchemaDescription, float]:
        schema = await asyncio.to_thread(introspect, dsl_handle, weights)
        return schema, _elapsed(t_intro)

    async def _scan() -> tuple[ScanResult, float]:
        t_scan = time.monotonic()
        scan = await scan_corpus(
            corpus_locator,
            keywords,
            settings=cfg,
            cancel_event=cancel_event,
            on_file=_on_file,
        )
        return scan, _elapsed(t_scan)

    intro_out, scan_out = await asyncio.gather(
        _introspect(), _scan(), return_exceptions=True
    )
    if isinstance(intro_out, BaseException):
        ctx.failed("introspection", _elapsed(t_intro), intro_out)
        raise intro_out
    schema, intro_ms = intro_out
    ctx.done(
        "introspection",
        intro_ms,
        f"{schema.section_count} sections, {schema.entity_count} entities",
    )
    if isinstance(scan_out, BaseException):
        ctx.failed("scan", _elapsed(t_intro), scan_out)
        raise scan_out
    scan, scan_ms = scan_out
    ctx.done(
        "scan",
        scan_ms,
        f"{scan.total_occurrences} occurrences in {scan.files_scanned} files"
        + (" (partial)" if scan.partial else ""),
    )
    return schema, scan


def _run_stage_sync[T](
    ctx: _RunContext,
    name: str,
    fn: Callable[[], T],
) -> T:
    """Run a pure stage with progress reporting; errors propagate."""
    ctx.running(name)
    t0 = time.monotonic()
    try:
        out = fn()
    except Exception as exc:
        logger.exception("event=stage_failed stage=%s", name)
        ctx.failed(name, _elapsed(t0), exc)
        raise
    ctx.done(name, _elapsed(t0))
    return out


def _elapsed(t0: float) -> float:
    return (time.monotonic() - t0) * 1000
