"""CLI entry point: ``dsladvisor analyze``, ``record-result``, ``learn``..."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dsladvisor import __version__
from dsladvisor.config import (
    Settings,
    create_app_engine,
    create_session_factory,
)
from dsladvisor.constants import StageProgress
from dsladvisor.logging_config import setup_logging
from dsladvisor.resilience.errors import DslAdvisorError

type SessionFactory = async_sessionmaker[AsyncSession]


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"dsladvisor {__version__}")
        return

    commands: dict[str, Callable[[argparse.Namespace, Settings], None]] = {
        "analyze": _run_analyze,
        "improvements": _run_improvements,
        "record-result": _run_record_result,
        "rollback": _run_rollback,
        "feedback": _run_feedback,
        "learn": _run_learn,
    }
    handler = commands.get(args.command or "")
    if handler is None:
        parser.print_help()
        return

    settings = Settings()
    verbose = getattr(args, "verbose", False)
    setup_logging("DEBUG" if verbose else settings.log_level)
    try:
        handler(args, settings)
    except DslAdvisorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dsladvisor",
        description=(
            "Evidence-based DSL improvement advisor: "
            "mines usage friction and ranks redesigns."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Analyze a DSL against a corpus")
    analyze.add_argument(
        "definition",
        type=str,
        help="Path to the DSL definition (YAML)",
    )
    analyze.add_argument(
        "corpus",
        nargs="+",
        help="One or more corpus directories or git checkouts",
    )
    analyze.add_argument(
        "--json",
        action="store_true",
        help="Print the full analysis as JSON",
    )
    analyze.add_argument(
        "--no-persist",
        action="store_true",
        help="Do not store the analysis in the database",
    )
    analyze.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    _add_db_argument(analyze)

    improvements = sub.add_parser(
        "improvements", help="List stored improvements of an analysis"
    )
    improvements.add_argument("analysis_id", help="Analysis id")
    _add_db_argument(improvements)

    record = sub.add_parser(
        "record-result",
        help="Record before/after metrics for an applied improvement",
    )
    record.add_argument("improvement_id", help="Improvement id")
    record.add_argument(
        "--before",
        nargs="+",
        type=_metric_pair,
        required=True,
        metavar="KEY=VALUE",
        help="Metrics measured before the change",
    )
    record.add_argument(
        "--after",
        nargs="+",
        type=_metric_pair,
        required=True,
        metavar="KEY=VALUE",
        help="Metrics measured after the change",
    )
    record.add_argument(
        "--effort",
        type=float,
        default=None,
        help="Actual effort spent, on the 0-10 estimate scale",
    )
    _add_db_argument(record)

    rollback = sub.add_parser("rollback", help="Mark a result as rolled back")
    rollback.add_argument("result_id", help="Result id")
    rollback.add_argument(
        "--reason", required=True, help="Why the change was reverted"
    )
    _add_db_argument(rollback)

    feedback = sub.add_parser(
        "feedback", help="Attach user feedback to a result"
    )
    feedback.add_argument("result_id", help="Result id")
    feedback.add_argument("text", help="Free-text feedback")
    _add_db_argument(feedback)

    learn = sub.add_parser(
        "learn", help="Recalibrate estimates from every recorded result"
    )
    _add_db_argument(learn)

    return parser


def _add_db_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        default=None,
        help="Database path override (default: from settings)",
    )


def _metric_pair(raw: str) -> tuple[str, float]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        msg = f"expected KEY=VALUE, got '{raw}'"
        raise argparse.ArgumentTypeError(msg)
    try:
        return key.strip(), float(value)
    except ValueError:
        msg = f"metric '{key}' has non-numeric value '{value}'"
        raise argparse.ArgumentTypeError(msg) from None


# -- Command runners --


def _run_analyze(args: argparse.Namespace, settings: Settings) -> None:
    from dsladvisor.introspection.definition_loader import load_definition
    from dsladvisor.logger import RunLogger
    from dsladvisor.services.analysis_persistence import (
        AnalysisPersistenceService,
    )
    from dsladvisor.services.analysis_service import analyze
    from dsladvisor.services.events import StageEvent
    from dsladvisor.services.feedback_service import FeedbackService

    handle = load_definition(Path(args.definition))

    def on_progress(event: StageEvent) -> None:
        if (
            args.verbose
            and event.status == StageProgress.RUNNING
            and event.completed is None
        ):
            print(f"  {event.message or event.label}...", file=sys.stderr)

    async def _go(session_factory: SessionFactory) -> dict[str, Any]:
        calibration = await FeedbackService(
            session_factory
        ).latest_calibration()
        analysis = await analyze(
            handle,
            args.corpus,
            settings=settings,
            calibration=calibration,
            on_progress=on_progress,
            run_logger=RunLogger(settings.log_dir, settings.log_level),
        )
        out: dict[str, Any] = {"analysis": analysis}
        if not args.no_persist:
            stored = await AnalysisPersistenceService(
                session_factory
            ).persist(analysis)
            out["stored"] = stored
        return out

    out = _with_database(settings, args.db, _go)
    analysis = out["analysis"]
    stored = out.get("stored")

    if args.json:
        payload = analysis.model_dump(mode="json")
        if stored is not None:
            payload["id"] = stored.analysis_id
            payload["improvement_ids"] = stored.improvement_ids
        print(json.dumps(payload, indent=2))
        return

    print(f"DSL: {analysis.dsl_name}")
    if stored is not None:
        print(f"Analysis id: {stored.analysis_id}")
    print(
        f"Confidence: {analysis.analysis_confidence:.2f} "
        f"({analysis.sample_size} occurrences, "
        f"{analysis.files_scanned} files)"
    )
    if analysis.insufficient_evidence is not None:
        print(f"Warning: {analysis.insufficient_evidence.message}")
    if analysis.warnings:
        print(f"Skipped files: {len(analysis.warnings)}")
    print(f"Health: {analysis.overall_health_score:.2f}")
    print(f"\nFriction points ({analysis.total_friction_points}):")
    for point in analysis.friction_points:
        print(
            f"  [{point.severity}] {point.category} "
            f"{point.construct}: {point.evidence}"
        )
    print(f"\nImprovements ({len(analysis.improvements)}):")
    ids = stored.improvement_ids if stored is not None else []
    for i, imp in enumerate(analysis.improvements):
        ident = f" ({ids[i]})" if i < len(ids) else ""
        print(
            f"  {imp.rank}. {imp.title}{ident} "
            f"effort={imp.effort_score:.1f} impact={imp.impact_score:.2f} "
            f"priority={imp.priority_score:.2f}"
            + (" BREAKING" if imp.breaking_changes else "")
        )


def _run_improvements(args: argparse.Namespace, settings: Settings) -> None:
    from dsladvisor.services.analysis_persistence import (
        AnalysisPersistenceService,
    )

    rows = _with_database(
        settings,
        args.db,
        lambda sf: AnalysisPersistenceService(sf).list_improvements(
            args.analysis_id
        ),
    )
    for improvement_id, imp in rows:
        print(
            f"{imp.rank}. [{improvement_id}] {imp.title} "
            f"({imp.improvement_type}) value={imp.value_ratio:.3f} "
            f"effort={imp.effort_score:.1f} impact={imp.impact_score:.2f}"
        )


def _run_record_result(args: argparse.Namespace, settings: Settings) -> None:
    from dsladvisor.services.feedback_service import FeedbackService

    stored = _with_database(
        settings,
        args.db,
        lambda sf: FeedbackService(sf).record_result(
            args.improvement_id,
            dict(args.before),
            dict(args.after),
            actual_effort=args.effort,
        ),
    )
    result = stored.result
    print(f"Result id: {stored.result_id}")
    print(f"Actual impact: {result.actual_impact_score:+.3f}")
    print(f"Success: {result.implementation_success}")
    for criterion in result.success_criteria_met:
        print(f"  met: {criterion}")
    for criterion in result.success_criteria_failed:
        print(f"  failed: {criterion}")
    for insight in result.learning_insights:
        print(f"  insight: {insight}")


def _run_rollback(args: argparse.Namespace, settings: Settings) -> None:
    from dsladvisor.services.feedback_service import FeedbackService

    result = _with_database(
        settings,
        args.db,
        lambda sf: FeedbackService(sf).record_rollback(
            args.result_id, args.reason
        ),
    )
    print(
        f"Rolled back '{result.improvement_title}' "
        f"(impact {result.actual_impact_score:+.2f})"
    )


def _run_feedback(args: argparse.Namespace, settings: Settings) -> None:
    from dsladvisor.services.feedback_service import FeedbackService

    result = _with_database(
        settings,
        args.db,
        lambda sf: FeedbackService(sf).add_user_feedback(
            args.result_id, args.text
        ),
    )
    print(result.learning_insights[-1])


def _run_learn(args: argparse.Namespace, settings: Settings) -> None:
    from dsladvisor.services.feedback_service import FeedbackService

    calibration = _with_database(
        settings, args.db, lambda sf: FeedbackService(sf).learn()
    )
    for improvement_type, count in sorted(calibration.sample_counts.items()):
        print(
            f"{improvement_type}: {count} results, "
            f"success {calibration.success_rates[improvement_type]:.0%}, "
            f"effort x{calibration.effort_multiplier(improvement_type):.2f}, "
            f"impact x{calibration.impact_multiplier(improvement_type):.2f}"
        )
    for insight in calibration.insights:
        print(f"  {insight}")


# -- Database plumbing --


def _database_url(settings: Settings, db: str | None) -> str:
    url = f"sqlite:///{db}" if db else settings.database_url
    if url.startswith("sqlite:///") and not url.endswith(":memory:"):
        db_path = Path(url[len("sqlite:///"):])
        db_path.parent.mkdir(parents=True, exist_ok=True)
    return url


def _with_database[T](
    settings: Settings,
    db: str | None,
    fn: Callable[[SessionFactory], Awaitable[T]],
) -> T:
    """Create the engine and tables, run ``fn``, dispose the engine."""
    from dsladvisor.models import Base

    async def _go() -> T:
        engine = create_app_engine(
            _database_url(settings, db), echo=settings.debug_mode
        )
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            return await fn(create_session_factory(engine))
        finally:
            await engine.dispose()

    return asyncio.run(_go())


if __name__ == "__main__":
    main()
