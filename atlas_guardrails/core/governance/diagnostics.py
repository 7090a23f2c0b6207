# atlas_guardrails/core/governance/diagnostics.py
"""
Diagnostics – The output contract of the guard rails.

Policy violations are never raised. Every violation becomes one immutable
Diagnostic handed to a sink. Whether an error actually stops a deployment is
decided by the host through an explicit EnforcementMode, not by the rules.
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional, Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ViolationCode(str, Enum):
    """Policy taxonomy of the guard rails."""
    CARDINALITY_EXCEEDED = "cardinality_exceeded"
    MISSING_REQUIRED_FLAG = "missing_required_flag"
    UNAPPROVED_VALUE = "unapproved_value"


class Diagnostic(BaseModel):
    """A single finding attached to a node of the construct tree."""
    severity: Severity
    node_path: str = Field(..., description="Path of the offending construct")
    message: str = Field(..., description="Human-readable description")
    code: Optional[ViolationCode] = None
    aspect: Optional[str] = Field(None, description="Name of the aspect that emitted the finding")

    class Config:
        frozen = True

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.node_path}: {self.message}"


class DiagnosticSink(Protocol):
    def emit(self, diagnostic: Diagnostic) -> None:
        ...


class DiagnosticCollector:
    """Append-only sink keeping diagnostics in emission order."""

    def __init__(self):
        self._diagnostics: List[Diagnostic] = []

    def emit(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self._diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self._diagnostics if d.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self._diagnostics)

    def for_path(self, path: str) -> List[Diagnostic]:
        return [d for d in self._diagnostics if d.node_path == path]

    def __len__(self) -> int:
        return len(self._diagnostics)


class LoggingSink:
    """Sink that logs every diagnostic and optionally forwards it to another sink."""

    def __init__(self, forward_to: Optional[DiagnosticSink] = None, log: Optional[logging.Logger] = None):
        self._forward_to = forward_to
        self._log = log or logger

    def emit(self, diagnostic: Diagnostic) -> None:
        if diagnostic.severity is Severity.ERROR:
            self._log.error(str(diagnostic))
        else:
            self._log.warning(str(diagnostic))
        if self._forward_to is not None:
            self._forward_to.emit(diagnostic)


class EnforcementMode(str, Enum):
    """How the host interprets diagnostics when deciding to block a deployment."""
    ADVISORY = "advisory"              # never block
    BLOCK_ON_ERROR = "block_on_error"  # block on any error
    STRICT = "strict"                  # block on any error or warning


def is_blocking(diagnostics: Iterable[Diagnostic], mode: EnforcementMode) -> bool:
    """Return True if the diagnostics must stop the deployment under ``mode``."""
    mode = EnforcementMode(mode)
    if mode is EnforcementMode.ADVISORY:
        return False
    if mode is EnforcementMode.STRICT:
        return any(True for _ in diagnostics)
    return any(d.severity is Severity.ERROR for d in diagnostics)


__all__ = [
    "Severity",
    "ViolationCode",
    "Diagnostic",
    "DiagnosticSink",
    "DiagnosticCollector",
    "LoggingSink",
    "EnforcementMode",
    "is_blocking",
]
