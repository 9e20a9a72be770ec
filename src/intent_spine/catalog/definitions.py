"""
Action definitions.

Manifesto:
An action kind is described exactly once. The staging call, the execution
call and the marker type an indexer reports are all derived from the same
``ActionDefinition``; parameter lists are never restated anywhere else.

ARCHITECTURE
────────────
::

    ActionDefinition
      ├── staging_target(packages)    ─ {pkg}::{staging_module}::{staging_function}
      ├── execution_target(packages)  ─ {pkg}::{execution_module}::{execution_function}
      ├── marker_type                 ─ alias::module::Struct
      ├── params / type_params        ─ ordered, typed
      ├── execution_shape             ─ type-arg + argument templates
      ├── resource                    ─ produces / consumes a named resource
      └── capability                  ─ admin cap borrowed for the call

Tags:
    catalog, action-definition, marker-type, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from intent_spine.catalog.params import ParamDef, TypeSlot
from intent_spine.catalog.shapes import CapabilityUse, ExecutionShape
from intent_spine.ledger.packages import PackageConfig, PackageKey
from intent_spine.ledger.types import coin_type_of, normalize_type


class IntentContext(str, Enum):
    """Trigger an intent is bound to."""

    LAUNCHPAD = "launchpad"
    PROPOSAL = "proposal"


class ActionCategory(str, Enum):
    TRANSFER = "transfer"
    VAULT = "vault"
    CURRENCY = "currency"
    STREAM = "stream"
    MEMO = "memo"
    PACKAGE_UPGRADE = "package_upgrade"
    ACCESS_CONTROL = "access_control"
    CONFIG = "config"
    QUOTA = "quota"
    LIQUIDITY = "liquidity"
    DISSOLUTION = "dissolution"
    PACKAGE_REGISTRY = "package_registry"
    PROTOCOL_ADMIN = "protocol_admin"
    ORACLE = "oracle"


class ResourceRole(str, Enum):
    PRODUCES = "produces"
    CONSUMES = "consumes"


class ResourceKind(str, Enum):
    COIN = "coin"
    OBJECT = "object"

    def accepts(self, produced: ResourceKind) -> bool:
        """Whether a consumer of this kind can take a produced resource of ``produced``.

        Coins are objects, so an object consumer takes either kind.
        """
        return self is ResourceKind.OBJECT or produced is self


@dataclass(frozen=True)
class ResourceUse:
    """A named entry an action puts into or takes out of the execution resource bag."""

    role: ResourceRole
    kind: ResourceKind
    slot: TypeSlot
    name_param: str = "resource_name"

    def resource_type(self, type_args: dict[TypeSlot, str]) -> str:
        """Object type stored under the resource name."""
        value = type_args[self.slot]
        if self.kind is ResourceKind.COIN:
            return coin_type_of(value)
        return normalize_type(value)


@dataclass(frozen=True)
class ActionDefinition:
    """One supported action kind."""

    id: str
    display_name: str
    category: ActionCategory
    package: PackageKey
    staging_module: str
    staging_function: str
    execution_module: str
    execution_function: str
    marker_type: str
    params: tuple[ParamDef, ...]
    type_params: tuple[TypeSlot, ...]
    contexts: frozenset[IntentContext]
    execution_shape: ExecutionShape
    resource: ResourceUse | None = None
    execution_extras: tuple[ParamDef, ...] = ()
    capability: CapabilityUse | None = None
    description: str = ""
    _param_index: dict[str, ParamDef] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_param_index", {p.name: p for p in self.params})

    @property
    def package_alias(self) -> str:
        return self.marker_type.split("::", 1)[0]

    @property
    def marker_name(self) -> str:
        """``module::Struct`` part of the marker type."""
        return self.marker_type.split("::", 1)[1]

    @property
    def shape(self) -> ExecutionShape:
        """Execution shape including the capability argument when one is borrowed."""
        if self.capability is None:
            return self.execution_shape
        return self.execution_shape.with_capability()

    def staging_target(self, packages: PackageConfig) -> str:
        return packages.target(self.package, self.staging_module, self.staging_function)

    def execution_target(self, packages: PackageConfig) -> str:
        return packages.target(self.package, self.execution_module, self.execution_function)

    def marker_type_for(self, packages: PackageConfig) -> str:
        """Marker type with the package alias replaced by its deployed address."""
        return f"{packages.address(self.package)}::{self.marker_name}"

    def param(self, name: str) -> ParamDef | None:
        return self._param_index.get(name)

    def supports(self, context: IntentContext) -> bool:
        return context in self.contexts

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "category": self.category.value,
            "package": self.package.value,
            "staging": f"{self.staging_module}::{self.staging_function}",
            "execution": f"{self.execution_module}::{self.execution_function}",
            "marker_type": self.marker_type,
            "params": [{"name": p.name, "type": p.type.value, "optional": p.optional} for p in self.params],
            "type_params": [s.value for s in self.type_params],
            "contexts": sorted(c.value for c in self.contexts),
            "description": self.description,
        }
