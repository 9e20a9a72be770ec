"""Execution config: everything the dispatch table needs for one action."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from intent_spine.catalog.params import TypeSlot, normalize_keys
from intent_spine.catalog.registry import ActionCatalog, get_default_catalog
from intent_spine.core.errors import MissingField
from intent_spine.ledger.types import normalize_type
from intent_spine.staging.builder import StagedAction


def _freeze(values: Mapping[Any, Any] | None) -> Mapping[Any, Any]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True)
class ExecutionConfig:
    """
    Typed execution plan for one action.

    Attributes:
        kind: Catalog id
        type_args: Resolved type slots
        params: Canonical (snake_case) parameter values
        extras: Execution-only fields with no staged encoding
            (``lp_type``, ``lp_treasury_cap_id``, ``lp_metadata_id``)
    """

    kind: str
    type_args: Mapping[TypeSlot, str] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    extras: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type_args", _freeze(
            {TypeSlot(slot): normalize_type(value) for slot, value in self.type_args.items()}
        ))
        object.__setattr__(self, "params", _freeze(self.params))
        object.__setattr__(self, "extras", _freeze(self.extras))

    def type_arg(self, slot: TypeSlot) -> str:
        try:
            return self.type_args[slot]
        except KeyError:
            raise MissingField(slot.field, action_kind=self.kind) from None

    def extra(self, name: str) -> Any:
        value = self.extras.get(name)
        if value is None:
            raise MissingField(name, action_kind=self.kind)
        return value

    @classmethod
    def build(cls, kind: str, *, extras: Mapping[str, Any] | None = None,
              catalog: ActionCatalog | None = None, **fields: Any) -> ExecutionConfig:
        """Config from flat fields; slot fields (``coin_type``) become type args.

        Example:
            >>> ExecutionConfig.build("mint", coin_type="0x2::sui::SUI", amount=5)
        """
        definition = (catalog or get_default_catalog()).lookup_by_id(kind)
        values = normalize_keys(fields)
        type_args = {s: values.pop(s.field) for s in definition.type_params if s.field in values}
        return cls(kind, type_args, values, extras or {})

    @classmethod
    def from_staged(cls, action: StagedAction, catalog: ActionCatalog | None = None,
                    extras: Mapping[str, Any] | None = None) -> ExecutionConfig:
        definition = (catalog or get_default_catalog()).lookup_by_id(action.kind)
        return cls(action.kind, action.type_arg_map(definition), action.values, extras or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "type_args": {slot.value: value for slot, value in self.type_args.items()},
            "params": dict(self.params),
            "extras": dict(self.extras),
        }
