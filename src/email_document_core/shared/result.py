"""Diagnostic types and the exception hierarchy shared by all components.

Readers and the recovery parser follow a never-fail philosophy: instead of
raising on every irregularity they record ``DiagnosticEntry`` objects so the
caller can inspect what was coerced, skipped or repaired.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Input was coerced or partially dropped
    ERROR = auto()      # Input was rejected


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


class DiagnosticsMixin:
    """Helpers for result objects that carry a ``diagnostics`` list."""

    diagnostics: List[DiagnosticEntry]
    correlation_id: Optional[str]

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_warnings(self) -> bool:
        """Check if any input was coerced or dropped."""
        return any(
            diag.severity in (DiagnosticSeverity.WARNING, DiagnosticSeverity.ERROR)
            for diag in self.diagnostics
        )


class EmailDocumentError(Exception):
    """Base exception for the email document core."""


class RecoveryError(EmailDocumentError):
    """Raised when raw text cannot be turned into a valid document."""

    def __init__(self, reason: str, raw_input: Optional[str] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw_input = raw_input
