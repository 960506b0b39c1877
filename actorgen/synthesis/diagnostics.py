"""
Structured diagnostics for the synthesis pipeline.

Every path that skips a declaration reports a diagnostic instead of doing
nothing, so a misspelled suffix or reply field is visible to the author.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..exceptions import SynthesisError

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """
    How serious a diagnostic is.

    INFO
        A deliberate, supported shape that produced no output.
    WARNING
        Probably an authoring mistake; output is still produced for the rest.
    ERROR
        The module cannot be synthesized as written.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """
    A single finding reported by a pipeline stage.

    Attributes
    ----------
    severity:
        See `Severity`.
    code:
        Stable, kebab-case identifier of the finding (e.g. `orphan-message-set`).
    message:
        Human-readable explanation.
    declaration:
        Name of the declaration concerned, if any.
    lineno:
        Source line of the node concerned, if known.
    """

    severity: Severity
    code: str
    message: str
    declaration: Optional[str] = None
    lineno: Optional[int] = None

    def __str__(self) -> str:
        where = f"line {self.lineno}: " if self.lineno is not None else ""
        return f"{where}{self.severity.value} {self.code}: {self.message}"


@dataclass(slots=True)
class DiagnosticReport:
    """
    Collects diagnostics for one pipeline run.

    With `strict=True` warnings are recorded as errors.
    """

    strict: bool = False
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def info(self, code: str, message: str, *, declaration: str | None = None, node: ast.AST | None = None) -> None:
        self._add(Severity.INFO, code, message, declaration, node)

    def warning(self, code: str, message: str, *, declaration: str | None = None, node: ast.AST | None = None) -> None:
        self._add(Severity.WARNING, code, message, declaration, node)

    def error(self, code: str, message: str, *, declaration: str | None = None, node: ast.AST | None = None) -> None:
        self._add(Severity.ERROR, code, message, declaration, node)

    def _add(
        self,
        severity: Severity,
        code: str,
        message: str,
        declaration: str | None,
        node: ast.AST | None,
    ) -> None:
        if self.strict and severity is Severity.WARNING:
            severity = Severity.ERROR
        diagnostic = Diagnostic(
            severity=severity,
            code=code,
            message=message,
            declaration=declaration,
            lineno=getattr(node, "lineno", None),
        )
        self.diagnostics.append(diagnostic)
        logger.log(_LOG_LEVELS[severity], "%s", diagnostic)

    def codes(self) -> list[str]:
        return [d.code for d in self.diagnostics]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.diagnostics)

    def raise_for_errors(self) -> None:
        """Raise `SynthesisError` if any error was reported."""
        if self.has_errors:
            raise SynthesisError(self.errors)
