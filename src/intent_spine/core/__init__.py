"""Core primitives shared by every intent-spine layer: errors, results, logging, settings."""

from intent_spine.core.errors import (
    CatalogLookupError,
    ConfigError,
    ConversionError,
    ErrorCategory,
    ErrorContext,
    ExecutionStateError,
    ExternalRejection,
    IndexerError,
    IntentError,
    MissingField,
    UnknownActionKind,
    UnparsedAction,
    ValidationError,
)
from intent_spine.core.logging import LogContext, configure_logging, get_logger
from intent_spine.core.result import Err, Ok, Result

__all__ = [
    "CatalogLookupError",
    "ConfigError",
    "ConversionError",
    "ErrorCategory",
    "ErrorContext",
    "ExecutionStateError",
    "ExternalRejection",
    "IndexerError",
    "IntentError",
    "MissingField",
    "UnknownActionKind",
    "UnparsedAction",
    "ValidationError",
    "LogContext",
    "configure_logging",
    "get_logger",
    "Err",
    "Ok",
    "Result",
]
