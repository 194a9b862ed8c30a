"""Tests for the tree-sitter and line-based construct front ends."""

from __future__ import annotations

import pytest

from dsladvisor.resilience.errors import SourceParseError
from dsladvisor.scanning.front_ends import (
    extract_constructs,
    extract_lines,
    language_for,
)

KEYWORDS = frozenset({"attribute", "timestamps"})


class TestLanguageFor:
    def test_known_suffixes(self) -> None:
        assert language_for(".py") == "python"
        assert language_for(".EXS") == "elixir"
        assert language_for(".jsonl") == "evidence"

    def test_unknown_suffix_is_text(self) -> None:
        assert language_for(".md") == "text"


class TestPythonFrontEnd:
    def test_calls_with_names_and_options(self) -> None:
        source = (
            "from dsl import attribute, timestamps\n"
            "\n"
            'attribute("email", type="string", allow_nil=False)\n'
            'dsl.attribute("name")\n'
            "timestamps()\n"
            'other("ignored")\n'
        )
        matches = extract_constructs(source, "python", KEYWORDS)

        assert [(m.construct, m.name, m.line) for m in matches] == [
            ("attribute", "email", 3),
            ("attribute", "name", 4),
            ("timestamps", None, 5),
        ]
        assert matches[0].option_count == 2
        assert matches[1].option_count == 0
        assert matches[0].snippet.startswith('attribute("email"')

    def test_nested_calls_found_in_source_order(self) -> None:
        source = 'attribute("created", default=timestamps())\n'
        matches = extract_constructs(source, "python", KEYWORDS)
        assert [m.construct for m in matches] == ["attribute", "timestamps"]

    def test_syntax_error_raises(self) -> None:
        with pytest.raises(SourceParseError):
            extract_constructs("attribute(\n", "python", KEYWORDS)

    def test_no_keywords_finds_nothing(self) -> None:
        assert extract_constructs('attribute("x")\n', "python", frozenset()) == []


class TestLineFrontEnd:
    def test_elixir_style_declarations(self) -> None:
        source = (
            "attributes do\n"
            "  attribute :email, :string, allow_nil?: false\n"
            "  attribute :display_name, :string\n"
            "  timestamps()\n"
            "end\n"
        )
        matches = extract_lines(source, KEYWORDS)

        assert [(m.construct, m.name, m.line) for m in matches] == [
            ("attribute", "email", 2),
            ("attribute", "display_name", 3),
            ("timestamps", None, 4),
        ]
        assert matches[0].option_count == 1
        assert matches[1].option_count == 0

    def test_yaml_list_item(self) -> None:
        (match,) = extract_lines("- attribute: email\n", KEYWORDS)
        assert match.construct == "attribute"
        assert match.name == "email"

    def test_keyword_prefix_is_not_a_match(self) -> None:
        assert extract_lines("attributes do\n", KEYWORDS) == []

    def test_mid_line_use_ignored(self) -> None:
        assert extract_lines("x = 1  # attribute :email\n", KEYWORDS) == []
