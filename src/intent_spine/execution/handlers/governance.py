"""Governance-admin actions that run with an admin capability borrowed from the account."""

from __future__ import annotations

from intent_spine.catalog.definitions import ActionCategory, ActionDefinition
from intent_spine.execution.calls import issue_execution_call
from intent_spine.execution.capability import with_borrowed_capability
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import ExecutionHandle
from intent_spine.execution.dispatch import handles_category
from intent_spine.ledger.transaction import Result


@handles_category(ActionCategory.PACKAGE_REGISTRY, ActionCategory.PROTOCOL_ADMIN)
def execute_admin_action(handle: ExecutionHandle, definition: ActionDefinition,
                         config: ExecutionConfig) -> Result:
    """Borrow, call, return. Definitions without a capability are called directly."""
    if definition.capability is None:
        return issue_execution_call(handle, definition, config)
    with with_borrowed_capability(handle, definition.capability) as cap:
        return issue_execution_call(handle, definition, config, cap=cap)
