"""DAO-level futarchy actions: config, quotas, liquidity and dissolution."""

from __future__ import annotations

from intent_spine.catalog.definitions import ActionCategory, ActionDefinition
from intent_spine.execution.calls import issue_execution_call
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import ExecutionHandle
from intent_spine.execution.dispatch import handles, handles_category
from intent_spine.ledger.transaction import Result


@handles_category(ActionCategory.CONFIG, ActionCategory.QUOTA, ActionCategory.DISSOLUTION)
def execute_dao_action(handle: ExecutionHandle, definition: ActionDefinition,
                       config: ExecutionConfig) -> Result:
    return issue_execution_call(handle, definition, config)


@handles_category(ActionCategory.LIQUIDITY)
def execute_liquidity_action(handle: ExecutionHandle, definition: ActionDefinition,
                             config: ExecutionConfig) -> Result:
    return issue_execution_call(handle, definition, config)


@handles("create_pool_with_mint")
def create_pool_with_mint(handle: ExecutionHandle, definition: ActionDefinition,
                          config: ExecutionConfig) -> Result:
    """Create the spot pool; the LP type and LP treasury/metadata objects come from extras.

    Raises:
        MissingField: ``lp_type``, ``lp_treasury_cap_id`` or ``lp_metadata_id`` absent
    """
    for name in definition.shape.extra_fields:
        config.extra(name)
    return issue_execution_call(handle, definition, config)
