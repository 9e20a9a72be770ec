"""
Execution call rendering.

A definition's ``ExecutionShape`` is rendered against an open handle:
context tokens become the trigger's config/outcome/witness types, ``SLOTS``
becomes the action's resolved type slots in declared order, and argument
tokens become the executable, shared objects and freshly issued witnesses.
"""

from __future__ import annotations

from intent_spine.catalog.definitions import ActionDefinition
from intent_spine.catalog.shapes import (
    ACCOUNT,
    CAP,
    CLOCK,
    EXECUTABLE,
    INTENT_WITNESS,
    METADATA_KEY,
    REGISTRY,
    SLOTS,
    VERSION,
    extra_field,
)
from intent_spine.core.errors import ValidationError
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import ExecutionHandle
from intent_spine.ledger.transaction import Argument, Result


def render_type_args(handle: ExecutionHandle, definition: ActionDefinition,
                     config: ExecutionConfig) -> list[str]:
    """Type arguments in the shape's order.

    Raises:
        MissingField: A type slot or type extra is absent
    """
    rendered: list[str] = []
    for token in definition.shape.type_args:
        if token == SLOTS:
            rendered.extend(config.type_arg(slot) for slot in definition.type_params)
        elif (name := extra_field(token)) is not None:
            rendered.append(config.extra(name))
        else:
            rendered.append(handle.context_types.resolve(token))
    return rendered


def render_arguments(
    handle: ExecutionHandle,
    definition: ActionDefinition,
    config: ExecutionConfig,
    *,
    cap: Argument | None = None,
    metadata_key: Argument | None = None,
) -> list[Argument]:
    tx = handle.tx
    rendered: list[Argument] = []
    for token in definition.shape.arguments:
        if token == EXECUTABLE:
            rendered.append(handle.executable)
        elif token == ACCOUNT:
            rendered.append(handle.account)
        elif token == REGISTRY:
            rendered.append(handle.registry)
        elif token == CLOCK:
            rendered.append(handle.clock)
        elif token == VERSION:
            rendered.append(handle.version_witness())
        elif token == INTENT_WITNESS:
            rendered.append(handle.intent_witness())
        elif token in (CAP, METADATA_KEY):
            value = cap if token == CAP else metadata_key
            if value is None:
                raise ValidationError(
                    f"{definition.id} needs a {token.lower()} argument",
                    action_kind=definition.id,
                )
            rendered.append(value)
        elif (name := extra_field(token)) is not None:
            rendered.append(tx.object(config.extra(name)))
        else:
            raise ValueError(f"Unknown argument token {token!r}")
    return rendered


def issue_execution_call(
    handle: ExecutionHandle,
    definition: ActionDefinition,
    config: ExecutionConfig,
    *,
    cap: Argument | None = None,
    metadata_key: Argument | None = None,
) -> Result:
    """Compose ``{pkg}::{execution_module}::{execution_function}`` for one action."""
    type_args = render_type_args(handle, definition, config)
    arguments = render_arguments(handle, definition, config, cap=cap, metadata_key=metadata_key)
    return handle.tx.move_call(
        definition.execution_target(handle.packages),
        type_arguments=type_args,
        arguments=arguments,
    )
