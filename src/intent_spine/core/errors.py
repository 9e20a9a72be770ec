"""
Structured error types for intent-spine.

Every failure raised by the catalog, staging, execution and conversion layers
is an ``IntentError`` carrying a category, an explicit retry flag and an
``ErrorContext`` with the action kind, batch index and field name needed to
diagnose it without re-deriving state.

Manifesto:
    - **Typed taxonomy:** One subclass per failure domain
    - **Never retried in core:** Only indexer transport failures are retryable
    - **Rich context:** Kind, index and field travel with the error
    - **Error chaining:** Original exceptions preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        IntentError                               │
        │       (category, retryable, context, cause)                      │
        ├─────────────────────────────────────────────────────────────────┤
        │  CatalogLookupError   ValidationError      ConversionError       │
        │  (CATALOG)            (VALIDATION)         (CONVERSION)          │
        │                                                 │                │
        │                               UnknownActionKind │ UnparsedAction │
        │                               MissingField                       │
        │                                                                  │
        │  ExternalRejection    ExecutionStateError  IndexerError          │
        │  (LEDGER)             (STATE)              (INDEXER)             │
        │                                                                  │
        │  ConfigError                                                     │
        │  (CONFIG)                                                        │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> err = MissingField("lp_type", action_kind="create_pool_with_mint")
    >>> err.to_dict()["context"]
    {'action_kind': 'create_pool_with_mint', 'field': 'lp_type'}

    >>> ValidationError("bad amount").with_context(batch_index=3).context.batch_index
    3

Guardrails:
    ❌ DON'T: Retry an ExternalRejection - the ledger's answer is final
    ✅ DO: Abort the whole multi-step flow on the first error

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for chaining

Tags:
    error-handling, exception-hierarchy, error-context, intent-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification and log routing."""

    CATALOG = "CATALOG"          # Unknown action id / marker type
    VALIDATION = "VALIDATION"    # Bad staged parameter, caught before any call
    CONVERSION = "CONVERSION"    # Observed action could not become a config
    LEDGER = "LEDGER"            # Ledger refused a call
    STATE = "STATE"              # Handle or builder reused
    INDEXER = "INDEXER"          # Indexer/backend request failed
    CONFIG = "CONFIG"            # Missing package ids, incomplete dispatch table
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an ``IntentError``.

    Only fields that are set appear in ``to_dict()``; anything that does not
    fit a typed field goes into ``metadata``.

    Attributes:
        action_kind: Catalog id of the action involved
        batch_index: Position of the action in its batch
        field: Parameter or config field name
        intent_id: Raise or proposal id the batch belongs to
        call_target: ``pkg::module::function`` of the rejected call
        url: Indexer URL being accessed
        http_status: HTTP status returned by the indexer
        metadata: Additional key-value pairs
    """

    action_kind: str | None = None
    batch_index: int | None = None
    field: str | None = None
    intent_id: str | None = None
    call_target: str | None = None
    url: str | None = None
    http_status: int | None = None
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["action_kind", "batch_index", "field", "intent_id",
                    "call_target", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class IntentError(Exception):
    """
    Base exception for all intent-spine errors.

    Subclasses set ``default_category`` and ``default_retryable``. Context can
    be given at construction through the common keyword shortcuts
    (``action_kind``, ``batch_index``, ``field``) or added afterwards with
    ``with_context()``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        action_kind: str | None = None,
        batch_index: int | None = None,
        field: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if action_kind is not None:
            self.context.action_kind = action_kind
        if batch_index is not None:
            self.context.batch_index = batch_index
        if field is not None:
            self.context.field = field

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> IntentError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ValidationError("bad value").with_context(batch_index=2)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CATALOG
# =============================================================================


class CatalogLookupError(IntentError):
    """
    No catalog definition for the requested id or marker type.

    Always fatal. A lookup miss means the caller and the catalog disagree
    about the set of action kinds; retrying cannot change that.
    """

    default_category = ErrorCategory.CATALOG

    def __init__(self, key: str, *, available: list[str] | None = None, **kwargs: Any):
        message = kwargs.pop("message", None) or f"No action definition for {key!r}"
        super().__init__(message, **kwargs)
        self.key = key
        self.available = available or []


# =============================================================================
# VALIDATION
# =============================================================================


class ValidationError(IntentError):
    """
    A staged parameter is missing or malformed.

    Raised before any external call is composed; fully correctable by the
    caller.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, value: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


# =============================================================================
# CONVERSION
# =============================================================================


class ConversionError(IntentError):
    """An observed action could not be turned into an execution config."""

    default_category = ErrorCategory.CONVERSION

    def __init__(self, action_type: str, reason: str, **kwargs: Any):
        super().__init__(f"Cannot convert action {action_type!r}: {reason}", **kwargs)
        self.action_type = action_type
        self.reason = reason


class UnknownActionKind(ConversionError):
    """Neither the marker type nor the kind id matched a catalog entry."""

    def __init__(self, action_type: str, full_type: str | None = None, **kwargs: Any):
        reason = f"unknown marker type {full_type!r}" if full_type else "unknown action kind"
        super().__init__(action_type, reason, **kwargs)
        self.full_type = full_type


class UnparsedAction(ConversionError):
    """The indexer flagged the action as not fully parsed."""

    def __init__(self, action_type: str, **kwargs: Any):
        super().__init__(action_type, "action was not parsed by the indexer (is_known=false)", **kwargs)


class MissingField(ConversionError):
    """A field required to build the execution call is absent."""

    def __init__(self, name: str, *, action_kind: str | None = None, **kwargs: Any):
        super().__init__(action_kind or "?", f"missing required field {name!r}",
                         action_kind=action_kind, field=name, **kwargs)
        self.name = name


# =============================================================================
# LEDGER / STATE
# =============================================================================


class ExternalRejection(IntentError):
    """
    The ledger refused a call.

    Opaque and terminal: wrong arity or order, missing capability, unresolved
    outcome, double execution. Never reinterpreted or retried here.
    """

    default_category = ErrorCategory.LEDGER

    def __init__(self, message: str, *, command_index: int | None = None,
                 call_target: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.command_index = command_index
        if call_target is not None:
            self.context.call_target = call_target
        if command_index is not None:
            self.context.metadata["command_index"] = command_index


class ExecutionStateError(IntentError):
    """A single-use value (execution handle, spec builder) was reused."""

    default_category = ErrorCategory.STATE


# =============================================================================
# INDEXER / CONFIG
# =============================================================================


class IndexerError(IntentError):
    """
    Request to the indexing backend failed.

    Transport errors and 5xx responses are retryable; 4xx are not.
    """

    default_category = ErrorCategory.INDEXER

    def __init__(self, message: str, *, url: str | None = None,
                 http_status: int | None = None, **kwargs: Any):
        if "retryable" not in kwargs:
            kwargs["retryable"] = http_status is None or http_status >= 500
        super().__init__(message, **kwargs)
        self.context.url = url
        self.context.http_status = http_status


class ConfigError(IntentError):
    """Configuration is missing or inconsistent. Never retryable."""

    default_category = ErrorCategory.CONFIG


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, IntentError):
        return error.retryable
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "IntentError",
    "CatalogLookupError",
    "ValidationError",
    "ConversionError",
    "UnknownActionKind",
    "UnparsedAction",
    "MissingField",
    "ExternalRejection",
    "ExecutionStateError",
    "IndexerError",
    "ConfigError",
    "is_retryable",
]
