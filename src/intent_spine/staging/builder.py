"""
Spec Builder — the append-only, submit-once list of staged actions.

Manifesto:
Append order is execution order. A builder only ever grows, its entries are
frozen when appended, and ``submit()`` hands back an immutable ``IntentBatch``
exactly once. Anything that depends on order (the resource bag in
particular) is checked at submit time, before a single call is composed.

ARCHITECTURE
────────────
::

    SpecBuilder(context)
      ├── ._append(definition, type_args, arguments, values)  ─ via adapters
      ├── .validate_resources()  ─ producer-before-consumer, names, types
      └── .submit()              ─ → IntentBatch, builder consumed

    IntentBatch
      ├── .batch_ref
      ├── .actions               ─ tuple[StagedAction, ...]
      └── .compose(tx, packages) ─ action_spec_builder::new + staging calls

Tags:
    staging, spec-builder, resource-bag, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from intent_spine.catalog.definitions import (
    ActionDefinition,
    IntentContext,
    ResourceKind,
    ResourceRole,
)
from intent_spine.catalog.params import TypeSlot
from intent_spine.catalog.registry import ActionCatalog, get_default_catalog
from intent_spine.core.errors import ExecutionStateError, ValidationError
from intent_spine.core.logging import get_logger
from intent_spine.ledger.packages import PackageConfig, PackageKey
from intent_spine.ledger.transaction import Result, Transaction

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResourceBinding:
    """A staged action's use of one named resource-bag entry."""

    role: ResourceRole
    kind: ResourceKind
    name: str
    object_type: str


@dataclass(frozen=True)
class StagedAction:
    """One appended entry. Never mutated after append."""

    index: int
    kind: str
    type_args: tuple[str, ...]
    arguments: tuple[bytes, ...]
    values: Mapping[str, Any]
    resource: ResourceBinding | None = None

    def type_arg_map(self, definition: ActionDefinition) -> dict[TypeSlot, str]:
        return dict(zip(definition.type_params, self.type_args))


def action_spec_builder_target(packages: PackageConfig, function: str) -> str:
    return packages.target(PackageKey.ACCOUNT_ACTIONS, "action_spec_builder", function)


@dataclass(frozen=True)
class IntentBatch:
    """The committed, ordered staged list of one submitted builder."""

    batch_ref: str
    context: IntentContext
    actions: tuple[StagedAction, ...]
    catalog: ActionCatalog = field(repr=False, compare=False, default_factory=get_default_catalog)

    def __len__(self) -> int:
        return len(self.actions)

    @property
    def kinds(self) -> list[str]:
        return [a.kind for a in self.actions]

    def compose(self, tx: Transaction, packages: PackageConfig) -> Result:
        """Emit ``action_spec_builder::new`` followed by one staging call per action.

        Returns the builder result, ready to be handed to a stage-intent or
        ``into_vector`` call.
        """
        builder = tx.move_call(action_spec_builder_target(packages, "new"))
        for action in self.actions:
            definition = self.catalog.lookup_by_id(action.kind)
            tx.move_call(
                definition.staging_target(packages),
                type_arguments=action.type_args,
                arguments=[builder, *(tx.pure(arg) for arg in action.arguments)],
            )
        logger.debug("staging.composed", batch_ref=self.batch_ref, actions=len(self.actions))
        return builder


class SpecBuilder:
    """
    Append-only staged action list bound to one trigger context.

    Example:
        >>> builder = SpecBuilder(IntentContext.LAUNCHPAD)
        >>> add_memo(builder, {"message": "gm"})
        >>> batch = builder.submit()
        >>> batch.kinds
        ['memo']
    """

    def __init__(self, context: IntentContext | str, catalog: ActionCatalog | None = None):
        self.context = IntentContext(context)
        self.catalog = catalog or get_default_catalog()
        self.batch_ref = uuid.uuid4().hex
        self._actions: list[StagedAction] = []
        self._submitted = False

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def actions(self) -> tuple[StagedAction, ...]:
        return tuple(self._actions)

    @property
    def submitted(self) -> bool:
        return self._submitted

    def _ensure_open(self) -> None:
        if self._submitted:
            raise ExecutionStateError(
                f"Spec builder {self.batch_ref} was already submitted",
            ).with_context(intent_id=self.batch_ref)

    def _append(
        self,
        definition: ActionDefinition,
        type_args: tuple[str, ...],
        arguments: tuple[bytes, ...],
        values: dict[str, Any],
        resource: ResourceBinding | None = None,
    ) -> StagedAction:
        self._ensure_open()
        staged = StagedAction(
            index=len(self._actions),
            kind=definition.id,
            type_args=type_args,
            arguments=arguments,
            values=MappingProxyType(dict(values)),
            resource=resource,
        )
        self._actions.append(staged)
        logger.debug("staging.appended", batch_ref=self.batch_ref, index=staged.index, kind=staged.kind)
        return staged

    def validate_resources(self) -> None:
        """
        Check the resource-bag dependencies of the staged order.

        Every consumer needs a strictly earlier producer of the same name with
        a compatible kind and the same object type; every produced entry must
        be consumed before the batch ends, and a name cannot be produced again
        while still live.

        Raises:
            ValidationError: With the offending batch index and kind
        """
        live: dict[str, ResourceBinding] = {}
        producer_index: dict[str, int] = {}
        for action in self._actions:
            binding = action.resource
            if binding is None:
                continue
            if binding.role is ResourceRole.PRODUCES:
                if binding.name in live:
                    raise ValidationError(
                        f"Resource {binding.name!r} is produced again before index "
                        f"{producer_index[binding.name]} output was consumed",
                        action_kind=action.kind, batch_index=action.index, field="resource_name",
                    )
                live[binding.name] = binding
                producer_index[binding.name] = action.index
                continue

            produced = live.pop(binding.name, None)
            if produced is None:
                raise ValidationError(
                    f"Resource {binding.name!r} is consumed with no earlier producer",
                    action_kind=action.kind, batch_index=action.index, field="resource_name",
                )
            if not binding.kind.accepts(produced.kind) or produced.object_type != binding.object_type:
                raise ValidationError(
                    f"Resource {binding.name!r} holds {produced.object_type}, "
                    f"but {action.kind} expects {binding.object_type}",
                    action_kind=action.kind, batch_index=action.index, field="resource_name",
                )

        if live:
            name, binding = next(iter(live.items()))
            index = producer_index[name]
            raise ValidationError(
                f"Resource {name!r} ({binding.object_type}) is produced but never consumed",
                action_kind=self._actions[index].kind, batch_index=index, field="resource_name",
            )

    def submit(self) -> IntentBatch:
        """Consume the builder and return the committed batch.

        Raises:
            ExecutionStateError: If the builder was already submitted
            ValidationError: If the resource-bag dependencies are broken
        """
        self._ensure_open()
        self.validate_resources()
        self._submitted = True
        batch = IntentBatch(self.batch_ref, self.context, tuple(self._actions), self.catalog)
        logger.info("staging.submitted", batch_ref=self.batch_ref, context=self.context.value, actions=len(batch))
        return batch


def new_builder(context: IntentContext | str, catalog: ActionCatalog | None = None) -> SpecBuilder:
    return SpecBuilder(context, catalog)
