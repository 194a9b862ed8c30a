"""Language front ends that find DSL construct uses in source text.

Python is parsed with tree-sitter: a construct use is a call whose
callee (``attribute(...)`` or ``dsl.attribute(...)``) is a construct
keyword. Every other language goes through the line front end, which
recognises ``keyword :name``, ``keyword name``, ``keyword: name`` and
``keyword("name")`` at the start of a line, as well as a bare
``keyword`` or ``keyword()``.
"""

from __future__ import annotations

import importlib
import re
import threading
from typing import NamedTuple

import tree_sitter

from dsladvisor.resilience.errors import SourceParseError

EXTENSION_LANGUAGES: dict[str, str] = {
    ".py": "python",
    ".ex": "elixir",
    ".exs": "elixir",
    ".rb": "ruby",
    ".js": "javascript",
    ".ts": "typescript",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".jsonl": "evidence",
}

GRAMMAR_MODULES: dict[str, str] = {
    "python": "tree_sitter_python",
}

_OPTION_RE = re.compile(r"[A-Za-z_]\w*[?!]?:\s|\b[A-Za-z_]\w*\s*=(?!=)")
_SNIPPET_CHARS = 200


class ConstructMatch(NamedTuple):
    construct: str
    name: str | None
    line: int  # 1-based
    option_count: int
    snippet: str


def language_for(suffix: str) -> str:
    return EXTENSION_LANGUAGES.get(suffix.lower(), "text")


def extract_constructs(
    text: str, language: str, keywords: frozenset[str]
) -> list[ConstructMatch]:
    """Dispatch to the front end for ``language``."""
    if not keywords:
        return []
    if language in GRAMMAR_MODULES:
        parser = _get_parser(language)
        if parser is not None:
            return extract_python_calls(parser, text, keywords)
    return extract_lines(text, keywords)


# ---------------------------------------------------------------------------
# Line front end
# ---------------------------------------------------------------------------


def _line_pattern(keywords: frozenset[str]) -> re.Pattern[str]:
    alternation = "|".join(
        re.escape(k) for k in sorted(keywords, key=lambda k: (-len(k), k))
    )
    return re.compile(
        r"^\s*-?\s*(?P<kw>" + alternation + r")(?![\w?!])"
        r"(?:(?:\s*\(\s*|:\s+|\s+)"
        r"[:\"']?(?P<name>[A-Za-z_][\w\-]*[?!]?))?"
    )


def extract_lines(
    text: str, keywords: frozenset[str]
) -> list[ConstructMatch]:
    pattern = _line_pattern(keywords)
    matches: list[ConstructMatch] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        m = pattern.match(line)
        if m is None:
            continue
        rest = line[m.end():]
        matches.append(
            ConstructMatch(
                construct=m.group("kw"),
                name=m.group("name"),
                line=lineno,
                option_count=len(_OPTION_RE.findall(rest)),
                snippet=line.strip()[:_SNIPPET_CHARS],
            )
        )
    return matches


# ---------------------------------------------------------------------------
# tree-sitter front end
# ---------------------------------------------------------------------------


def extract_python_calls(
    parser: tree_sitter.Parser,
    text: str,
    keywords: frozenset[str],
) -> list[ConstructMatch]:
    """Collect construct calls from a Python module.

    Raises :class:`SourceParseError` when the tree has syntax errors.
    """
    tree = parser.parse(text.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        msg = "syntax error in Python source"
        raise SourceParseError(msg)

    lines = text.splitlines()
    found: list[tuple[int, int, ConstructMatch]] = []
    stack: list[tree_sitter.Node] = [root]
    while stack:
        node = stack.pop()
        if node.type == "call":
            keyword = _callee_name(node)
            if keyword in keywords:
                row, col = node.start_point[0], node.start_point[1]
                name, options = _call_arguments(node)
                snippet = lines[row].strip() if row < len(lines) else ""
                found.append(
                    (
                        row,
                        col,
                        ConstructMatch(
                            construct=keyword,
                            name=name,
                            line=row + 1,
                            option_count=options,
                            snippet=snippet[:_SNIPPET_CHARS],
                        ),
                    )
                )
        stack.extend(reversed(node.children))
    found.sort(key=lambda item: (item[0], item[1]))
    return [m for _, _, m in found]


def _node_text(node: tree_sitter.Node | None) -> str | None:
    if node is None or not node.text:
        return None
    return node.text.decode("utf-8")


def _callee_name(call: tree_sitter.Node) -> str | None:
    func = call.child_by_field_name("function")
    if func is None:
        return None
    if func.type == "identifier":
        return _node_text(func)
    if func.type == "attribute":
        return _node_text(func.child_by_field_name("attribute"))
    return None


def _call_arguments(call: tree_sitter.Node) -> tuple[str | None, int]:
    """Return (first positional argument as a name, keyword arg count)."""
    args = call.child_by_field_name("arguments")
    if args is None:
        return None, 0
    name: str | None = None
    options = 0
    for child in args.named_children:
        if child.type == "keyword_argument":
            options += 1
        elif child.type == "comment":
            continue
        elif name is None:
            name = _argument_name(child)
    return name, options


def _argument_name(node: tree_sitter.Node) -> str | None:
    if node.type == "string":
        for child in node.named_children:
            if child.type == "string_content":
                return _node_text(child)
        raw = _node_text(node)
        return raw.strip("\"'") if raw else None
    if node.type in ("identifier", "attribute"):
        return _node_text(node)
    return None


# ---------------------------------------------------------------------------
# Parser cache
# ---------------------------------------------------------------------------

# tree-sitter parsers are not safe to share across scan worker threads
_local = threading.local()


def _get_parser(language: str) -> tree_sitter.Parser | None:
    """Get or create a per-thread cached tree-sitter parser."""
    cache: dict[str, tree_sitter.Parser] = getattr(_local, "parsers", None) or {}
    _local.parsers = cache
    if language in cache:
        return cache[language]

    module_name = GRAMMAR_MODULES.get(language)
    if module_name is None:
        return None

    try:
        mod = importlib.import_module(module_name)
        capsule: object = mod.language()
        lang = tree_sitter.Language(capsule)
        parser = tree_sitter.Parser(lang)
        cache[language] = parser
        return parser
    except (ImportError, AttributeError):
        return None
