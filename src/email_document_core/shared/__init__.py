"""Shared utilities for the email document core.

This module provides shared configuration objects, diagnostic types, the
exception hierarchy and logging utilities used across all components.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    EditorConfig,
    HistoryConfig,
    RecoveryConfig,
    SerializerConfig,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    DiagnosticsMixin,
    EmailDocumentError,
    RecoveryError,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "EditorConfig",
    "HistoryConfig",
    "RecoveryConfig",
    "SerializerConfig",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "new_correlation_id",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "DiagnosticsMixin",
    "EmailDocumentError",
    "RecoveryError",
]
