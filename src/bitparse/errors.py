"""Evaluation errors and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bitparse.source import Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class ErrorKind(Enum):
    """Classification of evaluation failures; the value is the error code."""

    UNRECOGNIZED_TOKEN = "E100"
    UNRECOGNIZED_NUMBER = "E101"
    SYNTAX_ERROR = "E102"
    MISSING_OPEN_BRACKET = "E103"
    UNEXPECTED_OPEN_BRACKET = "E104"
    INSUFFICIENT_OPERANDS = "E105"
    DIVIDE_BY_ZERO = "E106"
    NO_INPUT = "E107"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors.

    ``source`` is the expression text the spans point into; without it
    only the header, locators and notes are rendered.
    """

    def __init__(self, *, color: bool = True, source: str | None = None) -> None:
        self.color = color
        # Only \n starts a new line, matching the lexer's line count
        self._lines = source.split("\n") if source is not None else []

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def _get_source_line(self, line_num: int) -> str | None:
        if 1 <= line_num <= len(self._lines):
            return self._lines[line_num - 1]
        return None

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E106]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            span = label.span
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}")
            gutter = f"{span.start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")

            source_line = self._get_source_line(span.start_line)
            if source_line is not None:
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
                )
                if span.start_line == span.end_line:
                    caret_len = max(1, span.end_col - span.start_col + 1)
                    padding = " " * (span.start_col - 1)
                    carets = "^" * caret_len
                    lines.append(
                        f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                        f"{padding}{self._c(color)}{carets}{self._c(_RESET)}"
                    )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


class EvalError(Exception):
    """An expression failed to evaluate."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        span: Span | None = None,
        *,
        label: str = "",
        notes: list[str] | None = None,
    ) -> None:
        self.kind = kind
        labels = [DiagnosticLabel(span=span, message=label)] if span is not None else []
        self.diagnostic = Diagnostic(
            severity=Severity.ERROR,
            code=kind.value,
            message=message,
            labels=labels,
            notes=notes or [],
        )
        super().__init__(message)
