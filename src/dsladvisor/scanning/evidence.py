"""JSON-lines evidence logs: error reports and telemetry per construct.

Each line is one record::

    {"construct": "attribute", "name": "email", "outcome": "error",
     "message": "nil not allowed", "duration_ms": 12.5}

Only ``construct`` is required. Malformed lines are skipped; a file
where no line parses is rejected as a whole.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from dsladvisor.constants import Outcome
from dsladvisor.resilience.errors import SourceParseError
from dsladvisor.scanning.schemas import (
    ConstructOccurrence,
    occurrence_complexity,
)

logger = logging.getLogger(__name__)

_OUTCOMES = {o.value: o for o in Outcome}


def parse_evidence(
    text: str,
    keywords: frozenset[str],
    *,
    source: str = "",
) -> list[ConstructOccurrence]:
    """Turn evidence records into occurrences with explicit outcomes.

    Records naming a construct outside ``keywords`` are ignored when
    ``keywords`` is non-empty.
    """
    occurrences: list[ConstructOccurrence] = []
    parsed = 0
    malformed = 0
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            record: Any = json.loads(line)
        except json.JSONDecodeError:
            malformed += 1
            continue
        if not isinstance(record, dict):
            malformed += 1
            continue
        parsed += 1
        occurrence = _to_occurrence(record, lineno)  # pyright: ignore[reportUnknownArgumentType]
        if occurrence is None:
            malformed += 1
            continue
        if keywords and occurrence.construct not in keywords:
            continue
        occurrences.append(occurrence)

    if parsed == 0 and malformed > 0:
        msg = f"no parseable evidence records ({malformed} malformed)"
        raise SourceParseError(msg)
    if malformed:
        logger.debug(
            "event=evidence_lines_skipped source=%s count=%d",
            source,
            malformed,
        )
    return occurrences


def _to_occurrence(
    record: dict[str, Any], lineno: int
) -> ConstructOccurrence | None:
    construct = record.get("construct")
    if not isinstance(construct, str) or not construct:
        return None
    name = record.get("name")
    message = record.get("message")
    duration = record.get("duration_ms")
    options = record.get("option_count", 0)
    if not isinstance(options, int) or isinstance(options, bool):
        options = 0
    return ConstructOccurrence(
        construct=construct,
        name=name if isinstance(name, str) else None,
        line=lineno,
        option_count=options,
        complexity=occurrence_complexity(options),
        outcome=_OUTCOMES.get(str(record.get("outcome", "")).lower()),
        message=message if isinstance(message, str) else None,
        snippet=message if isinstance(message, str) else None,
        duration_ms=(
            float(duration)
            if isinstance(duration, (int, float))
            and not isinstance(duration, bool)
            else None
        ),
    )
