"""Oracle grant actions."""

from __future__ import annotations

from intent_spine.catalog.definitions import ActionCategory, ActionDefinition
from intent_spine.execution.calls import issue_execution_call
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import ExecutionHandle
from intent_spine.execution.dispatch import handles_category
from intent_spine.ledger.transaction import Result


@handles_category(ActionCategory.ORACLE)
def execute_oracle_action(handle: ExecutionHandle, definition: ActionDefinition,
                          config: ExecutionConfig) -> Result:
    return issue_execution_call(handle, definition, config)
