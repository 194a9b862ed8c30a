"""Error taxonomy and per-file scan failure classification.

Fatal errors (introspection, unreadable corpus) propagate to the caller.
Per-file failures never do: they are classified here and recorded as
ScanWarning values so a single bad file cannot abort a scan.
"""

from __future__ import annotations

from enum import Enum


class DslAdvisorError(Exception):
    """Base class for all advisor errors."""


class IntrospectionError(DslAdvisorError):
    """The DSL handle lacks the enumeration capability, or it failed."""


class CorpusUnreadableError(DslAdvisorError):
    """The corpus locator itself cannot be read."""


class ValidationFailure(DslAdvisorError):
    """An improvement's internal effort/impact relationship is inconsistent."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class ResultStateError(DslAdvisorError):
    """A terminal (rolled-back) result was asked to change state."""


class RecordNotFoundError(DslAdvisorError):
    """A referenced record id does not exist in the store."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"Unknown {kind} id: {record_id}")
        self.kind = kind
        self.record_id = record_id


class FileTooLargeError(DslAdvisorError):
    """A corpus file exceeds the configured byte limit."""


class BinaryFileError(DslAdvisorError):
    """A corpus file looks binary (null byte in its head)."""


class SourceParseError(DslAdvisorError):
    """A language front end rejected a file's syntax."""


class ScanFailure(Enum):
    READ_ERROR = "read_error"  # OSError: permissions, vanished file
    DECODE_ERROR = "decode_error"  # not valid UTF-8 text
    PARSE_ERROR = "parse_error"  # front end rejected syntax
    TOO_LARGE = "too_large"  # over scan_max_file_bytes
    BINARY = "binary"  # null byte detected
    UNKNOWN = "unknown"  # unclassified


def classify_scan_error(error: Exception) -> ScanFailure:
    """Map an exception raised while scanning one file to a reason.

    Checks the advisor's own types first, then standard library
    types, then falls back to message matching for untyped errors.
    """
    if isinstance(error, FileTooLargeError):
        return ScanFailure.TOO_LARGE
    if isinstance(error, BinaryFileError):
        return ScanFailure.BINARY
    if isinstance(error, SourceParseError):
        return ScanFailure.PARSE_ERROR
    if isinstance(error, UnicodeDecodeError):
        return ScanFailure.DECODE_ERROR
    if isinstance(error, (SyntaxError, ValueError)):
        return ScanFailure.PARSE_ERROR
    if isinstance(error, OSError):
        return ScanFailure.READ_ERROR

    msg = str(error).lower()
    if "decode" in msg or "codec" in msg:
        return ScanFailure.DECODE_ERROR
    if "syntax" in msg or "parse" in msg:
        return ScanFailure.PARSE_ERROR
    if "permission" in msg or "no such file" in msg:
        return ScanFailure.READ_ERROR

    return ScanFailure.UNKNOWN
