"""Tests for CLI argument parsing and the command runners."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import pytest
import yaml

from dsladvisor.cli import _build_parser, _metric_pair, main
from dsladvisor.config import create_app_engine
from tests.conftest import resource_definition


class TestArgParser:
    def test_version_flag(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["--version"])
        assert args.version is True

    def test_analyze_defaults(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["analyze", "dsl.yaml", "/tmp/corpus"])
        assert args.command == "analyze"
        assert args.definition == "dsl.yaml"
        assert args.corpus == ["/tmp/corpus"]
        assert args.json is False
        assert args.no_persist is False
        assert args.verbose is False
        assert args.db is None

    def test_analyze_with_options(self) -> None:
        parser = _build_parser()
        args = parser.parse_args([
            "analyze",
            "dsl.yaml",
            "a",
            "b",
            "--json",
            "--no-persist",
            "-v",
            "--db",
            "/tmp/x.db",
        ])
        assert args.corpus == ["a", "b"]
        assert args.json is True
        assert args.no_persist is True
        assert args.verbose is True
        assert args.db == "/tmp/x.db"

    def test_record_result(self) -> None:
        parser = _build_parser()
        args = parser.parse_args([
            "record-result",
            "imp-1",
            "--before",
            "error_rate=0.15",
            "--after",
            "error_rate=0.08",
            "--effort",
            "3",
        ])
        assert args.improvement_id == "imp-1"
        assert args.before == [("error_rate", 0.15)]
        assert args.after == [("error_rate", 0.08)]
        assert args.effort == 3.0

    def test_rollback_requires_reason(self) -> None:
        parser = _build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["rollback", "res-1"])

    def test_feedback_and_learn(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["feedback", "res-1", "much clearer"])
        assert (args.result_id, args.text) == ("res-1", "much clearer")
        assert parser.parse_args(["learn"]).command == "learn"


class TestMetricPair:
    def test_valid(self) -> None:
        assert _metric_pair("latency_ms=120") == ("latency_ms", 120.0)
        assert _metric_pair(" error_rate =0.1") == ("error_rate", 0.1)

    @pytest.mark.parametrize("raw", ["error_rate", "=0.1", "error_rate=high"])
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            _metric_pair(raw)


def test_version_output(capsys: pytest.CaptureFixture[str]) -> None:
    main(["--version"])
    assert capsys.readouterr().out.strip() == "dsladvisor 0.1.0"


class TestCommands:
    @pytest.fixture
    def workspace(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
        runs = logging.getLogger("dsladvisor.runs")
        runs.handlers.clear()
        definition = tmp_path / "resource.yaml"
        definition.write_text(yaml.safe_dump(resource_definition()))
        corpus = tmp_path / "corpus"
        corpus.mkdir()
        line = json.dumps({"construct": "attribute", "outcome": "error"})
        (corpus / "errors.jsonl").write_text("\n".join([line] * 45) + "\n")
        yield tmp_path
        for handler in runs.handlers:
            handler.close()
        runs.handlers.clear()

    def test_analyze_record_and_learn(
        self, workspace: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        db = str(workspace / "advisor.db")
        main([
            "analyze",
            str(workspace / "resource.yaml"),
            str(workspace / "corpus"),
            "--json",
            "--db",
            db,
        ])
        payload = json.loads(capsys.readouterr().out)
        assert payload["dsl_name"] == "resource"
        assert payload["improvements"][0]["title"] == (
            "Add validation for attribute"
        )
        (improvement_id,) = payload["improvement_ids"]

        main(["improvements", payload["id"], "--db", db])
        assert improvement_id in capsys.readouterr().out

        main([
            "record-result",
            improvement_id,
            "--before",
            "error_rate=0.15",
            "--after",
            "error_rate=0.08",
            "--db",
            db,
        ])
        out = capsys.readouterr().out
        assert "Success: True" in out
        assert "met: Error rate for attribute reduced by at least 20%" in out

        main(["learn", "--db", db])
        assert "validation: 1 results, success 100%" in capsys.readouterr().out

    def test_unknown_analysis_exits(
        self, workspace: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["improvements", "missing", "--db", str(workspace / "a.db")])
        assert exc_info.value.code == 1
        assert "Unknown analysis id: missing" in capsys.readouterr().err

    def test_missing_definition_exits(
        self, workspace: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit):
            main([
                "analyze",
                str(workspace / "absent.yaml"),
                str(workspace / "corpus"),
                "--no-persist",
            ])
        assert "DSL definition not found" in capsys.readouterr().err

    def test_debug_mode_echoes_sql(
        self,
        workspace: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("DEBUG_MODE", "true")
        echoes: list[bool] = []

        def _engine(url: str, *, echo: bool = False):
            echoes.append(echo)
            return create_app_engine(url, echo=echo)

        monkeypatch.setattr("dsladvisor.cli.create_app_engine", _engine)
        main(["learn", "--db", str(workspace / "a.db")])
        assert echoes == [True]
