"""Dispatch Table — action kind → execution handler.

Manifesto:
Replay must never silently skip an action. Every catalog kind maps to a
handler that issues exactly one execution call (plus whatever witnesses,
keys or borrowed capabilities that call needs). The table is checked
against the catalog at startup, so a kind without a handler is a
configuration error rather than a gap discovered mid-replay.

ARCHITECTURE
────────────
::

    DispatchTable
      ├── .register(kind, handler)          ─ store handler
      ├── .register_category(cat, handler)  ─ every kind of a category
      ├── .get(kind) / .has(kind)           ─ lookup
      ├── .list_handlers()                  ─ registered kinds
      ├── .verify_complete(catalog)         ─ every kind covered
      └── .dispatch(handle, config)         ─ one execution call

    Decorators (built-in handlers, handlers/ package):
      handles(*kinds)                 → kind-specific handler
      handles_category(*categories)   → category-wide handler

    get_default_table()     ─ built-in table, verified, module-level singleton
    reset_default_table()   ─ clear for testing

BEST PRACTICES
──────────────
- Pass an explicit ``DispatchTable`` in tests that replace a handler.
- Kind-specific handlers win over category handlers.

Tags:
    execution, dispatch, handler-registry, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from intent_spine.catalog.definitions import ActionCategory, ActionDefinition
from intent_spine.catalog.registry import ActionCatalog, get_default_catalog
from intent_spine.core.errors import CatalogLookupError, ConfigError, ValidationError
from intent_spine.core.logging import get_logger
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import ExecutionHandle
from intent_spine.ledger.transaction import Result

logger = get_logger(__name__)

Handler = Callable[[ExecutionHandle, ActionDefinition, ExecutionConfig], Result]


class DispatchTable:
    """Injectable kind → handler table.

    Example:
        >>> table = DispatchTable()
        >>> table.register("memo", emit_memo)
        >>> table.verify_complete(catalog)
        Traceback (most recent call last):
        ConfigError: No execution handler for 64 catalog kinds: ...
    """

    def __init__(self):
        self._handlers: dict[str, Handler] = {}
        self._metadata: dict[str, dict[str, Any]] = {}

    def register(self, kind: str, handler: Handler, description: str | None = None) -> None:
        self._handlers[kind] = handler
        self._metadata[kind] = {
            "kind": kind,
            "handler": getattr(handler, "__qualname__", repr(handler)),
            "description": description or handler.__doc__,
        }

    def register_category(self, category: ActionCategory, handler: Handler,
                          catalog: ActionCatalog | None = None) -> None:
        """Register ``handler`` for every kind of ``category`` not already covered."""
        for definition in (catalog or get_default_catalog()).list_by_category(category):
            if definition.id not in self._handlers:
                self.register(definition.id, handler)

    def get(self, kind: str) -> Handler:
        """Handler for ``kind``.

        Raises:
            CatalogLookupError: No handler registered
        """
        try:
            return self._handlers[kind]
        except KeyError:
            raise CatalogLookupError(
                kind, available=sorted(self._handlers),
                message=f"No execution handler registered for {kind!r}",
            ) from None

    def has(self, kind: str) -> bool:
        return kind in self._handlers

    def get_metadata(self, kind: str) -> dict[str, Any] | None:
        return self._metadata.get(kind)

    def list_handlers(self) -> list[str]:
        return sorted(self._handlers)

    def unregister(self, kind: str) -> bool:
        if kind in self._handlers:
            del self._handlers[kind]
            del self._metadata[kind]
            return True
        return False

    def clear(self) -> None:
        self._handlers.clear()
        self._metadata.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    def verify_complete(self, catalog: ActionCatalog | None = None) -> None:
        """Every catalog kind must have a handler.

        Raises:
            ConfigError: Listing the uncovered kinds
        """
        missing = [d.id for d in (catalog or get_default_catalog()) if d.id not in self._handlers]
        if missing:
            raise ConfigError(
                f"No execution handler for {len(missing)} catalog kinds: {', '.join(missing)}"
            ).with_context(missing=missing)

    def dispatch(self, handle: ExecutionHandle, config: ExecutionConfig) -> Result:
        """Issue the execution call for one action on an open handle.

        Raises:
            ExecutionStateError: Handle finalized or aborted
            CatalogLookupError: Unknown kind or no handler
            ValidationError: Kind not allowed for the handle's trigger
            MissingField: A type slot or extra needed by the call is absent
        """
        handle.require_open()
        definition = handle.catalog.lookup_by_id(config.kind)
        if not definition.supports(handle.context):
            raise ValidationError(
                f"{config.kind} cannot execute in a {handle.context.value} intent",
                action_kind=config.kind, batch_index=len(handle.dispatched),
            )
        handler = self.get(config.kind)
        result = handler(handle, definition, config)
        handle._record(config.kind)
        logger.debug(
            "dispatch.action",
            intent_id=handle.intent_id, index=len(handle.dispatched) - 1, kind=config.kind,
        )
        return result

    @classmethod
    def builtin(cls, catalog: ActionCatalog | None = None) -> DispatchTable:
        """Table of the built-in handlers, kind handlers first."""
        from intent_spine.execution import handlers  # noqa: F401  (registers built-ins)

        table = cls()
        for kind, handler in _KIND_HANDLERS.items():
            table.register(kind, handler)
        for category, handler in _CATEGORY_HANDLERS.items():
            table.register_category(category, handler, catalog)
        return table


# === BUILT-IN REGISTRATIONS ===

_KIND_HANDLERS: dict[str, Handler] = {}
_CATEGORY_HANDLERS: dict[ActionCategory, Handler] = {}


def handles(*kinds: str) -> Callable[[Handler], Handler]:
    """Register a built-in handler for specific kinds.

    Example:
        >>> @handles("return_metadata")
        ... def return_metadata(handle, definition, config):
        ...     ...
    """

    def decorator(func: Handler) -> Handler:
        for kind in kinds:
            _KIND_HANDLERS[kind] = func
        return func

    return decorator


def handles_category(*categories: ActionCategory) -> Callable[[Handler], Handler]:
    """Register a built-in handler for every kind of the given categories."""

    def decorator(func: Handler) -> Handler:
        for category in categories:
            _CATEGORY_HANDLERS[category] = func
        return func

    return decorator


# === GLOBAL DEFAULT TABLE ===

_default_table: DispatchTable | None = None


def get_default_table() -> DispatchTable:
    """Built-in table, checked for completeness on first access."""
    global _default_table
    if _default_table is None:
        table = DispatchTable.builtin()
        table.verify_complete()
        _default_table = table
    return _default_table


def reset_default_table() -> None:
    global _default_table
    _default_table = None


def dispatch(handle: ExecutionHandle, config: ExecutionConfig,
             table: DispatchTable | None = None) -> Result:
    return (table if table is not None else get_default_table()).dispatch(handle, config)
