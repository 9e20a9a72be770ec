"""
Action Catalog — the single table staging, execution and conversion derive from.

MODULE MAP
──────────
1. params.py       ─ ParamType, ParamDef, TypeSlot, composite values
2. shapes.py       ─ execution type-arg / argument templates, capabilities
3. definitions.py  ─ ActionDefinition and its enums
4. table.py        ─ the static definition table
5. registry.py     ─ ActionCatalog lookups

Example:
    >>> from intent_spine.catalog import get_default_catalog
    >>> catalog = get_default_catalog()
    >>> catalog.lookup_by_marker_type("account_actions::vault::CreateStream<0x2::sui::SUI>").id
    'create_stream'
"""

from intent_spine.catalog.definitions import (
    ActionCategory,
    ActionDefinition,
    IntentContext,
    ResourceKind,
    ResourceRole,
    ResourceUse,
)
from intent_spine.catalog.params import (
    ConditionalMetadata,
    ParamDef,
    ParamType,
    SignedU128,
    TierSpec,
    TypeSlot,
    to_snake_case,
)
from intent_spine.catalog.registry import (
    ActionCatalog,
    CatalogInvariantError,
    ContextCheck,
    get_default_catalog,
    reset_default_catalog,
)
from intent_spine.catalog.shapes import CapabilityUse, ContextTypes, ExecutionShape
from intent_spine.catalog.table import ALL_ACTIONS

__all__ = [
    "ActionCategory",
    "ActionDefinition",
    "IntentContext",
    "ResourceKind",
    "ResourceRole",
    "ResourceUse",
    "ConditionalMetadata",
    "ParamDef",
    "ParamType",
    "SignedU128",
    "TierSpec",
    "TypeSlot",
    "to_snake_case",
    "ActionCatalog",
    "CatalogInvariantError",
    "ContextCheck",
    "get_default_catalog",
    "reset_default_catalog",
    "CapabilityUse",
    "ContextTypes",
    "ExecutionShape",
    "ALL_ACTIONS",
]
