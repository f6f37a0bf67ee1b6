"""Error kinds surfaced by the conversion pipeline.

Core operations never raise for expected bad input; they return result
objects carrying an ``ErrorCode``. Formatting with a remediation hint
happens only at the CLI boundary via ``format_error``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum

from rich.markup import escape


class ErrorCode(Enum):
    PARSE_FAILED = "PARSE_FAILED"
    INVALID_FRONTMATTER = "INVALID_FRONTMATTER"
    UNKNOWN_AGENT = "UNKNOWN_AGENT"
    UNSUPPORTED_CONVERSION = "UNSUPPORTED_CONVERSION"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    FILE_WRITE_ERROR = "FILE_WRITE_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    SCHEMA_INVALID = "SCHEMA_INVALID"
    RENDER_FAILED = "RENDER_FAILED"
    ROUND_TRIP_DRIFT = "ROUND_TRIP_DRIFT"  # Non-fatal, reported only


ERROR_SUGGESTIONS: dict[ErrorCode, str] = {
    ErrorCode.PARSE_FAILED: (
        "Check that the file has valid YAML frontmatter (--- delimiters) "
        "and valid markdown content."
    ),
    ErrorCode.INVALID_FRONTMATTER: (
        "Ensure frontmatter fields match the expected schema for the agent type."
    ),
    ErrorCode.UNKNOWN_AGENT: (
        "Use --from <agent> to specify the source agent, or check that the "
        "file path matches agent conventions."
    ),
    ErrorCode.UNSUPPORTED_CONVERSION: (
        "No parser or renderer is registered for that agent. "
        "Run `cace matrix` to list supported conversions."
    ),
    ErrorCode.FILE_NOT_FOUND: "Verify the file path exists and is accessible.",
    ErrorCode.FILE_READ_ERROR: (
        "Check file permissions and ensure the file is not locked by another process."
    ),
    ErrorCode.FILE_WRITE_ERROR: "Check write permissions for the output directory.",
    ErrorCode.VALIDATION_FAILED: (
        "Run `cace validate <file> --verbose` for detailed validation errors."
    ),
    ErrorCode.SCHEMA_INVALID: (
        "The component spec does not match the expected schema. Check required fields."
    ),
    ErrorCode.RENDER_FAILED: (
        "The component could not be rendered for the target agent. "
        "Check conversion warnings."
    ),
    ErrorCode.ROUND_TRIP_DRIFT: (
        "Semantic changes detected after round-trip conversion. Review the diff output."
    ),
}


@dataclass
class CaceError:
    """A user-facing error with an optional remediation hint."""

    code: ErrorCode
    message: str
    details: str = ""
    suggestion: str = ""
    context: dict = field(default_factory=dict)

    def __post_init__(self):
        if not self.suggestion:
            self.suggestion = ERROR_SUGGESTIONS.get(self.code, "")


class CaceException(Exception):
    """Raised at the file/CLI boundary only, wrapping a ``CaceError``."""

    def __init__(self, error: CaceError):
        super().__init__(f"[{error.code.value}] {error.message}")
        self.error = error


def format_error(error: CaceError, markup: bool = True) -> str:
    """Format an error for console output (rich markup when ``markup``)."""

    def style(tag: str, text: str) -> str:
        return f"[{tag}]{escape(text)}[/]" if markup else text

    lines = [style("red", f"Error [{error.code.value}]: {error.message}")]
    if error.details:
        lines.append(style("dim", f"  Details: {error.details}"))
    if error.suggestion:
        lines.append(style("yellow", f"  Suggestion: {error.suggestion}"))
    if error.context:
        lines.append(style("dim", f"  Context: {json.dumps(error.context, default=str)}"))
    return "\n".join(lines)
