"""
Action Catalog — lookup over the static definition table.

Manifesto:
Staging adapters, the dispatch table and the converter all resolve action
kinds here. The catalog is built once from ``ALL_ACTIONS``, checks its own
invariants on construction, and is read-only afterwards.

ARCHITECTURE
────────────
::

    ActionCatalog
      ├── .lookup_by_id(id)              ─ raises CatalogLookupError
      ├── .lookup_by_marker_type(type)   ─ raises CatalogLookupError
      ├── .find_by_id / find_by_marker_type  ─ None when absent
      ├── .list_by_category(cat)
      ├── .list_by_context(ctx)
      ├── .list_by_package(pkg)
      ├── .validate_for_context(ids, ctx) → ContextCheck
      └── .bind(packages)                ─ also match deployed-address markers

    get_default_catalog()   ─ module-level singleton
    reset_default_catalog() ─ clear for testing

Marker types are compared on ``module::Struct`` plus the package: the alias
form (``account_actions::vault::CreateStream``) always matches; the hex form
(``0x…::vault::CreateStream``) matches once the catalog is bound to a
``PackageConfig``. Generic parameterization is ignored for matching.

Tags:
    catalog, registry, lookup, marker-type, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from intent_spine.catalog.definitions import ActionCategory, ActionDefinition, IntentContext
from intent_spine.catalog.shapes import SLOTS
from intent_spine.catalog.table import ALL_ACTIONS
from intent_spine.core.errors import CatalogLookupError
from intent_spine.core.logging import get_logger
from intent_spine.ledger.packages import PackageConfig, PackageKey
from intent_spine.ledger.types import is_hex_address, normalize_address, parse_type_tag

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContextCheck:
    valid: bool
    unsupported: tuple[str, ...] = ()


class CatalogInvariantError(ValueError):
    """The definition table violates a catalog invariant."""


def check_invariants(definitions: Iterable[ActionDefinition]) -> None:
    """Raise ``CatalogInvariantError`` on the first broken table invariant."""
    seen_ids: set[str] = set()
    seen_markers: set[str] = set()
    for d in definitions:
        if d.id in seen_ids:
            raise CatalogInvariantError(f"Duplicate action id: {d.id}")
        seen_ids.add(d.id)
        if d.marker_type in seen_markers:
            raise CatalogInvariantError(f"Duplicate marker type: {d.marker_type}")
        seen_markers.add(d.marker_type)
        if d.package_alias != d.package.alias:
            raise CatalogInvariantError(
                f"{d.id}: marker type {d.marker_type} is not under package alias {d.package.alias}"
            )
        if not d.contexts:
            raise CatalogInvariantError(f"{d.id}: no supported context")
        if len(set(d.type_params)) != len(d.type_params):
            raise CatalogInvariantError(f"{d.id}: repeated type slot")
        if d.execution_shape.type_args.count(SLOTS) != 1:
            raise CatalogInvariantError(f"{d.id}: execution type template must place the slots once")
        names = [p.name for p in d.params]
        if len(set(names)) != len(names):
            raise CatalogInvariantError(f"{d.id}: repeated parameter name")
        if d.resource is not None:
            if d.resource.name_param not in names:
                raise CatalogInvariantError(f"{d.id}: resource name parameter {d.resource.name_param} not declared")
            if d.resource.slot not in d.type_params:
                raise CatalogInvariantError(f"{d.id}: resource slot {d.resource.slot.value} not declared")
        extras = {p.name for p in d.execution_extras}
        missing = set(d.execution_shape.extra_fields) - extras
        if missing:
            raise CatalogInvariantError(f"{d.id}: execution shape uses undeclared extras {sorted(missing)}")


class ActionCatalog:
    """Read-only lookup over a set of ``ActionDefinition``."""

    def __init__(
        self,
        definitions: Iterable[ActionDefinition] = ALL_ACTIONS,
        packages: PackageConfig | None = None,
    ):
        definitions = tuple(definitions)
        check_invariants(definitions)
        self._definitions = definitions
        self._by_id = {d.id: d for d in definitions}
        self._by_marker = {(d.package, d.marker_name): d for d in definitions}
        self._alias_to_key = {key.alias: key for key in PackageKey}
        self.packages = packages

    def bind(self, packages: PackageConfig) -> ActionCatalog:
        """Catalog over the same table that also matches deployed-address marker types."""
        return ActionCatalog(self._definitions, packages)

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions)

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._by_id

    # ── lookups ──────────────────────────────────────────────────

    def find_by_id(self, action_id: str) -> ActionDefinition | None:
        return self._by_id.get(action_id)

    def lookup_by_id(self, action_id: str) -> ActionDefinition:
        """Definition for ``action_id``.

        Raises:
            CatalogLookupError: If no such action is registered
        """
        definition = self._by_id.get(action_id)
        if definition is None:
            raise CatalogLookupError(action_id, available=self.action_ids())
        return definition

    def find_by_marker_type(self, marker_type: str) -> ActionDefinition | None:
        try:
            tag = parse_type_tag(marker_type)
        except ValueError:
            return None
        if not tag.is_struct:
            return None
        key = self._package_key(tag.address)
        if key is None:
            return None
        return self._by_marker.get((key, tag.module_name))

    def lookup_by_marker_type(self, marker_type: str) -> ActionDefinition:
        """Definition whose marker type matches, ignoring generic parameters.

        Raises:
            CatalogLookupError: If no definition has this marker type
        """
        definition = self.find_by_marker_type(marker_type)
        if definition is None:
            raise CatalogLookupError(marker_type)
        return definition

    def _package_key(self, address: str) -> PackageKey | None:
        if address in self._alias_to_key:
            return self._alias_to_key[address]
        if self.packages is not None and is_hex_address(address):
            return self.packages.key_for_address(normalize_address(address))
        return None

    # ── listings ─────────────────────────────────────────────────

    def action_ids(self) -> list[str]:
        return [d.id for d in self._definitions]

    def list_by_category(self, category: ActionCategory | str) -> list[ActionDefinition]:
        category = ActionCategory(category)
        return [d for d in self._definitions if d.category is category]

    def list_by_context(self, context: IntentContext | str) -> list[ActionDefinition]:
        context = IntentContext(context)
        return [d for d in self._definitions if context in d.contexts]

    def list_by_package(self, package: PackageKey | str) -> list[ActionDefinition]:
        package = PackageKey(package)
        return [d for d in self._definitions if d.package is package]

    def categories(self) -> list[ActionCategory]:
        return sorted({d.category for d in self._definitions}, key=lambda c: c.value)

    def is_supported(self, action_id: str, context: IntentContext | str) -> bool:
        definition = self._by_id.get(action_id)
        return definition is not None and IntentContext(context) in definition.contexts

    def validate_for_context(self, action_ids: Iterable[str], context: IntentContext | str) -> ContextCheck:
        """Which of ``action_ids`` cannot be staged under ``context``. Unknown ids count as unsupported."""
        unsupported = tuple(a for a in action_ids if not self.is_supported(a, context))
        return ContextCheck(valid=not unsupported, unsupported=unsupported)


# === GLOBAL DEFAULT CATALOG ===

_default_catalog: ActionCatalog | None = None


def get_default_catalog() -> ActionCatalog:
    """Catalog over the full definition table, created on first access."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = ActionCatalog()
        logger.debug("catalog.loaded", actions=len(_default_catalog))
    return _default_catalog


def reset_default_catalog() -> None:
    """Reset the global catalog (for testing)."""
    global _default_catalog
    _default_catalog = None
