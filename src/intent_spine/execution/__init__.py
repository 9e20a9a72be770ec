"""
Execution Context and Dispatch Table.

MODULE MAP
──────────
1. config.py      ─ ExecutionConfig
2. context.py     ─ ExecutionHandle, targets, begin/finalize/abort
3. calls.py       ─ execution call rendering from ExecutionShape
4. capability.py  ─ with_borrowed_capability
5. dispatch.py    ─ DispatchTable, built-in registrations
6. handlers/      ─ per-category handlers
7. executor.py    ─ execute_batch
"""

from intent_spine.execution.capability import with_borrowed_capability
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import (
    ExecutionHandle,
    ExecutionTarget,
    HandleState,
    LaunchpadTarget,
    ProposalTarget,
    abort_execution,
    begin_execution,
    finalize_execution,
)
from intent_spine.execution.dispatch import (
    DispatchTable,
    dispatch,
    get_default_table,
    handles,
    handles_category,
    reset_default_table,
)
from intent_spine.execution.executor import ExecutionResult, execute_batch

__all__ = [
    "with_borrowed_capability",
    "ExecutionConfig",
    "ExecutionHandle",
    "ExecutionTarget",
    "HandleState",
    "LaunchpadTarget",
    "ProposalTarget",
    "abort_execution",
    "begin_execution",
    "finalize_execution",
    "DispatchTable",
    "dispatch",
    "get_default_table",
    "handles",
    "handles_category",
    "reset_default_table",
    "ExecutionResult",
    "execute_batch",
]
