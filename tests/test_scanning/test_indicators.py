"""Tests for error indicators, outcome inference and evidence logs."""

from __future__ import annotations

import pytest

from dsladvisor.constants import Outcome
from dsladvisor.resilience.errors import SourceParseError
from dsladvisor.scanning.evidence import parse_evidence
from dsladvisor.scanning.indicators import infer_outcome, scan_indicators
from dsladvisor.scanning.schemas import FileIndicators


class TestScanIndicators:
    def test_counts_markers(self) -> None:
        lines = [
            "# TODO: fix the default",
            "attribute :email, :string",
            "try do",
            "  # HACK around nil handling",
            "rescue e ->",
        ]
        ind = scan_indicators(lines)
        assert ind.todo_markers == 1
        assert ind.workaround_markers == 1
        assert ind.exception_blocks == 2
        # the HACK line is the only comment without a note marker
        assert ind.commented_code_ratio == pytest.approx(0.2)
        assert ind.has_error_indicators is True

    def test_clean_file(self) -> None:
        ind = scan_indicators(["attribute :email", "", "attribute :name"])
        assert ind == FileIndicators()
        assert ind.has_error_indicators is False

    def test_empty_file(self) -> None:
        assert scan_indicators([]).commented_code_ratio == 0.0


class TestInferOutcome:
    def test_marker_on_line_above_is_error(self) -> None:
        lines = ["# FIXME: rejects nil", "attribute :email"]
        ind = scan_indicators(lines)
        assert infer_outcome(lines, 2, ind) == Outcome.ERROR

    def test_marker_on_same_line_is_error(self) -> None:
        lines = ["attribute :email  # BUG: wrong type"]
        ind = scan_indicators(lines)
        assert infer_outcome(lines, 1, ind) == Outcome.ERROR

    def test_workaround_marker(self) -> None:
        lines = ["# workaround for missing default", "attribute :email"]
        ind = scan_indicators(lines)
        assert infer_outcome(lines, 2, ind) == Outcome.WORKAROUND

    def test_clean_file_is_success(self) -> None:
        lines = ["attribute :email"]
        assert infer_outcome(lines, 1, scan_indicators(lines)) == Outcome.SUCCESS

    def test_unknown_when_file_has_indicators_elsewhere(self) -> None:
        lines = ["# TODO later", "", "", "attribute :email"]
        ind = scan_indicators(lines)
        assert infer_outcome(lines, 4, ind) is None


class TestParseEvidence:
    def test_records_become_occurrences(self) -> None:
        text = "\n".join([
            '{"construct": "attribute", "name": "email", "outcome": "error",'
            ' "message": "nil not allowed", "duration_ms": 12.5}',
            "not json",
            '{"construct": "other"}',
            "[1, 2]",
            '{"construct": "attribute", "outcome": "SUCCESS", "option_count": 2}',
        ])
        first, second = parse_evidence(text, frozenset({"attribute"}))

        assert first.construct == "attribute"
        assert first.name == "email"
        assert first.line == 1
        assert first.outcome == Outcome.ERROR
        assert first.message == "nil not allowed"
        assert first.duration_ms == 12.5

        assert second.line == 5
        assert second.outcome == Outcome.SUCCESS
        assert second.option_count == 2
        assert second.complexity == pytest.approx(2.0)

    def test_empty_keywords_accept_everything(self) -> None:
        text = '{"construct": "a"}\n{"construct": "b"}\n'
        assert len(parse_evidence(text, frozenset())) == 2

    def test_record_without_construct_is_skipped(self) -> None:
        text = '{"name": "x"}\n{"construct": "a", "outcome": "bogus"}\n'
        (occ,) = parse_evidence(text, frozenset())
        assert occ.construct == "a"
        assert occ.outcome is None

    def test_all_malformed_raises(self) -> None:
        with pytest.raises(SourceParseError, match="no parseable"):
            parse_evidence("nope\nstill nope\n", frozenset())

    def test_blank_file_is_empty(self) -> None:
        assert parse_evidence("\n\n", frozenset()) == []
