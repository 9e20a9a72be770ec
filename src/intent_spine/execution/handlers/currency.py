"""Currency actions: treasury-cap operations and the post-raise cap/metadata return."""

from __future__ import annotations

from intent_spine.catalog.definitions import ActionCategory, ActionDefinition
from intent_spine.catalog.params import TypeSlot
from intent_spine.core.errors import ValidationError
from intent_spine.execution.calls import issue_execution_call
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import ExecutionHandle
from intent_spine.execution.dispatch import handles, handles_category
from intent_spine.ledger.transaction import Result
from intent_spine.ledger.types import parse_type_tag


def metadata_key_call(handle: ExecutionHandle, key_type: str, coin_type: str) -> Result:
    """``{addr}::{module}::coin_metadata_key<CoinType>()`` for a ``…::CoinMetadataKey<…>`` type."""
    tag = parse_type_tag(key_type)
    if not tag.is_struct:
        raise ValidationError(f"KeyType must be a struct type, got {key_type!r}", field="key_type")
    return handle.tx.move_call(
        f"{tag.address}::{tag.module}::coin_metadata_key",
        type_arguments=[coin_type],
    )


@handles_category(ActionCategory.CURRENCY)
def execute_currency_action(handle: ExecutionHandle, definition: ActionDefinition,
                            config: ExecutionConfig) -> Result:
    return issue_execution_call(handle, definition, config)


@handles("return_metadata")
def return_metadata(handle: ExecutionHandle, definition: ActionDefinition,
                    config: ExecutionConfig) -> Result:
    """Derive the metadata key, then remove the metadata from the account.

    Both KeyType and CoinType must be resolved; a missing slot raises
    ``MissingField`` before anything is composed.
    """
    key_type = config.type_arg(TypeSlot.KEY_TYPE)
    coin_type = config.type_arg(TypeSlot.COIN_TYPE)
    key = metadata_key_call(handle, key_type, coin_type)
    return issue_execution_call(handle, definition, config, metadata_key=key)
