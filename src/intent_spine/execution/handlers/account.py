"""Account-level actions from the account_actions package."""

from __future__ import annotations

from intent_spine.catalog.definitions import ActionCategory, ActionDefinition
from intent_spine.execution.calls import issue_execution_call
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import ExecutionHandle
from intent_spine.execution.dispatch import handles_category
from intent_spine.ledger.transaction import Result


@handles_category(
    ActionCategory.TRANSFER,
    ActionCategory.VAULT,
    ActionCategory.STREAM,
    ActionCategory.MEMO,
    ActionCategory.PACKAGE_UPGRADE,
    ActionCategory.ACCESS_CONTROL,
)
def execute_account_action(handle: ExecutionHandle, definition: ActionDefinition,
                           config: ExecutionConfig) -> Result:
    """One ``do_*`` call; resource-bag moves happen inside the call."""
    return issue_execution_call(handle, definition, config)
