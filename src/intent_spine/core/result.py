"""
Result envelope for per-item success/failure handling.

Batch conversion needs two policies over the same per-action step: stop at
the first failure, or keep going and report every failure with its index.
Wrapping each step in ``Ok``/``Err`` lets both policies share one loop body.

Manifesto:
    - **Errors as values:** A failed conversion is data, not control flow
    - **Batch-friendly:** ``collect_results`` (fail-fast) and
      ``partition_results`` (collect-all) over the same list
    - **Immutability:** Frozen, slotted dataclasses

Examples:
    >>> results = [Ok(1), Err(ValueError("bad")), Ok(3)]
    >>> collect_results(results).is_err()
    True
    >>> partition_results(results)[0]
    [1, 3]

Tags:
    result-type, error-handling, batch-processing, intent-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from intent_spine.core.errors import IntentError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result containing an error; ``map`` short-circuits."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.error, IntentError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {
                "error_type": type(self.error).__name__,
                "message": str(self.error),
            },
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(f: Callable[[], T], *, catch: tuple[type[Exception], ...] = (IntentError,)) -> Result[T]:
    """
    Execute ``f`` and wrap its outcome.

    Only exceptions in ``catch`` become ``Err``; anything else propagates, so
    programming errors are never turned into data.
    """
    try:
        return Ok(f())
    except catch as e:
        return Err(e)


def collect_results(results: list[Result[T]]) -> Result[list[T]]:
    """Collect into ``Ok(list)`` or return the first ``Err`` (fail-fast)."""
    values = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                return Err(error)
    return Ok(values)


def partition_results(results: list[Result[T]]) -> tuple[list[T], list[Exception]]:
    """Split results into (values, errors), keeping order within each list."""
    values = []
    errors = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                errors.append(error)
    return values, errors


__all__ = [
    "Ok",
    "Err",
    "Result",
    "try_result",
    "collect_results",
    "partition_results",
]
