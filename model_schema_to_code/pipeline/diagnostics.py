"""
Non-fatal diagnostics collected during resolution and generation.

Diagnostics describe conditions the generator degrades around (a disabled
capability, a dangling reference, ...). They are logged through loguru and
kept on a sink so callers can inspect them after a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from loguru import logger


class Severity(str, Enum):
    """Severity of a diagnostic."""

    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic message with enough context to find its source."""

    severity: Severity
    code: str  # e.g. "naming-disabled", "identifier-disabled"
    message: str
    entity: str | None = None
    field: str | None = None

    def __str__(self) -> str:
        location = ".".join(part for part in (self.entity, self.field) if part)
        prefix = f"[{self.code}] {location}: " if location else f"[{self.code}] "
        return prefix + self.message


@dataclass
class DiagnosticSink:
    """Collects diagnostics for one generation run."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def warn(self, code: str, message: str, entity: str | None = None, field: str | None = None) -> Diagnostic:
        """Record and log a warning."""
        diagnostic = Diagnostic(Severity.WARNING, code, message, entity, field)
        self.diagnostics.append(diagnostic)
        logger.warning(str(diagnostic))
        return diagnostic

    def error(self, code: str, message: str, entity: str | None = None, field: str | None = None) -> Diagnostic:
        """Record and log an error."""
        diagnostic = Diagnostic(Severity.ERROR, code, message, entity, field)
        self.diagnostics.append(diagnostic)
        logger.error(str(diagnostic))
        return diagnostic

    def extend(self, other: DiagnosticSink) -> None:
        """Append the diagnostics of another sink without logging them again."""
        self.diagnostics.extend(other.diagnostics)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    def codes(self) -> list[str]:
        """Codes of all collected diagnostics, in order."""
        return [d.code for d in self.diagnostics]
