"""
Staging adapters — caller config → StagedAction.

``stage_action`` is the one adapter. Per-kind adapters (``add_<kind>``) are
generated from the catalog at import time into ``ADAPTERS`` and fetched with
``adapter_for(kind)``, so no parameter list is ever written twice.

Validation happens here, before any call is composed:

- unregistered kind                        → CatalogLookupError
- kind not allowed in the builder context  → ValidationError
- missing required parameter               → ValidationError(field=…)
- value of the wrong type or out of range  → ValidationError(field=…)
- wrong number of type arguments           → ValidationError(field="type_args")

Config keys may be camelCase (``amountPerIteration``); they are normalized to
the catalog's snake_case names. Type slots are read from their field
(``coin_type``, ``asset_type``, …) or from an explicit ``type_args`` list in
declared slot order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from intent_spine.catalog.definitions import ActionDefinition, IntentContext
from intent_spine.catalog.params import normalize_keys
from intent_spine.catalog.registry import ActionCatalog
from intent_spine.catalog.table import ALL_ACTIONS
from intent_spine.core.errors import CatalogLookupError, ValidationError
from intent_spine.ledger.types import normalize_type
from intent_spine.staging.builder import IntentBatch, ResourceBinding, SpecBuilder, StagedAction

_KIND_KEYS = ("type", "action", "kind")


def _resolve_type_args(
    definition: ActionDefinition,
    values: Mapping[str, Any],
    explicit: Sequence[str] | None,
) -> tuple[str, ...]:
    slots = definition.type_params
    if explicit is not None:
        if isinstance(explicit, str) or len(explicit) != len(slots):
            raise ValidationError(
                f"{definition.id} takes {len(slots)} type argument(s) "
                f"({', '.join(s.value for s in slots) or 'none'}), got {explicit!r}",
                action_kind=definition.id, field="type_args", value=explicit,
            )
        raw = list(explicit)
    else:
        raw = []
        for slot in slots:
            value = values.get(slot.field)
            if value is None:
                raise ValidationError(
                    f"{definition.id} requires type argument {slot.value} (field {slot.field!r})",
                    action_kind=definition.id, field=slot.field,
                )
            raw.append(value)

    resolved = []
    for slot, value in zip(slots, raw):
        try:
            resolved.append(normalize_type(value))
        except (TypeError, ValueError, AttributeError) as e:
            raise ValidationError(
                f"{definition.id}: invalid {slot.value} {value!r}",
                action_kind=definition.id, field=slot.field, value=value, cause=e,
            ) from e
    return tuple(resolved)


def stage_action(
    builder: SpecBuilder,
    kind: str,
    config: Mapping[str, Any] | None = None,
) -> StagedAction:
    """
    Validate, encode and append one action.

    Args:
        builder: Open builder the action is appended to
        kind: Catalog id (``create_stream``)
        config: Parameter values, type slot fields, optional ``type_args``

    Returns:
        The appended ``StagedAction``

    Raises:
        CatalogLookupError: Unknown kind
        ValidationError: Context, parameter or type-argument problem
        ExecutionStateError: The builder was already submitted
    """
    builder._ensure_open()
    definition = builder.catalog.lookup_by_id(kind)
    if not definition.supports(builder.context):
        raise ValidationError(
            f"{kind} cannot be staged in a {builder.context.value} intent",
            action_kind=kind, batch_index=len(builder),
        )

    values = normalize_keys(config or {})
    for key in _KIND_KEYS:
        values.pop(key, None)
    type_args = _resolve_type_args(definition, values, values.pop("type_args", None))

    coerced: dict[str, Any] = {}
    arguments: list[bytes] = []
    for param in definition.params:
        raw = values.get(param.name)
        if raw is None and not param.optional:
            raise ValidationError(
                f"Missing required parameter {param.name!r} for {kind}",
                action_kind=kind, field=param.name, batch_index=len(builder),
            )
        try:
            value = param.coerce(raw)
            encoded = param.encode(value)
        except (TypeError, ValueError, KeyError) as e:
            raise ValidationError(
                f"Invalid {param.type.value} for {kind}.{param.name}: {e}",
                action_kind=kind, field=param.name, value=raw, batch_index=len(builder), cause=e,
            ) from e
        coerced[param.name] = value
        arguments.append(encoded)

    binding = None
    if definition.resource is not None:
        use = definition.resource
        binding = ResourceBinding(
            role=use.role,
            kind=use.kind,
            name=coerced[use.name_param],
            object_type=use.resource_type(dict(zip(definition.type_params, type_args))),
        )

    return builder._append(definition, type_args, tuple(arguments), coerced, binding)


def stage_actions(builder: SpecBuilder, configs: Iterable[Mapping[str, Any]]) -> list[StagedAction]:
    """Stage a list of ``{"type": kind, **config}`` records in order."""
    staged = []
    for position, config in enumerate(configs):
        kind = next((config[k] for k in _KIND_KEYS if k in config), None)
        if kind is None:
            raise ValidationError(
                "Action config has no 'type'", batch_index=position, field="type",
            )
        staged.append(stage_action(builder, kind, config))
    return staged


def stage_batch(
    context: IntentContext | str,
    configs: Iterable[Mapping[str, Any]],
    catalog: ActionCatalog | None = None,
) -> IntentBatch:
    """New builder, stage every config, submit."""
    builder = SpecBuilder(context, catalog)
    stage_actions(builder, configs)
    return builder.submit()


# =============================================================================
# GENERATED PER-KIND ADAPTERS
# =============================================================================


def _make_adapter(definition: ActionDefinition) -> Callable[..., StagedAction]:
    kind = definition.id

    def adapter(builder: SpecBuilder, config: Mapping[str, Any] | None = None, **fields: Any) -> StagedAction:
        return stage_action(builder, kind, {**(config or {}), **fields})

    adapter.__name__ = f"add_{kind}"
    adapter.__qualname__ = adapter.__name__
    params = ", ".join(p.name for p in definition.params) or "no parameters"
    slots = ", ".join(s.value for s in definition.type_params)
    adapter.__doc__ = (
        f"Stage ``{kind}``. {definition.description}.\n\n"
        f"Parameters: {params}." + (f" Type slots: {slots}." if slots else "")
    )
    return adapter


ADAPTERS: dict[str, Callable[..., StagedAction]] = {d.id: _make_adapter(d) for d in ALL_ACTIONS}


def adapter_for(kind: str) -> Callable[..., StagedAction]:
    try:
        return ADAPTERS[kind]
    except KeyError:
        raise CatalogLookupError(kind, available=sorted(ADAPTERS)) from None


__all__ = [
    "ADAPTERS",
    "adapter_for",
    "stage_action",
    "stage_actions",
    "stage_batch",
]
