"""Batch executor: begin, dispatch every config in order, finalize."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from intent_spine.catalog.registry import ActionCatalog
from intent_spine.core.errors import IntentError
from intent_spine.core.logging import LogContext, get_logger
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import (
    ExecutionTarget,
    abort_execution,
    begin_execution,
    finalize_execution,
)
from intent_spine.execution.dispatch import DispatchTable, get_default_table
from intent_spine.ledger.client import ExecutionReceipt, LedgerClient
from intent_spine.ledger.packages import PackageConfig
from intent_spine.ledger.transaction import Transaction

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    intent_id: str
    kinds: tuple[str, ...]
    receipt: ExecutionReceipt

    @property
    def digest(self) -> str:
        return self.receipt.digest


def execute_batch(
    ledger: LedgerClient,
    packages: PackageConfig,
    target: ExecutionTarget,
    configs: Iterable[ExecutionConfig],
    *,
    sender: str,
    table: DispatchTable | None = None,
    catalog: ActionCatalog | None = None,
    transaction: Transaction | None = None,
) -> ExecutionResult:
    """
    Replay a resolved intent in one transaction.

    Args:
        ledger: Where the transaction is submitted
        packages: Deployed package ids
        target: Resolved launchpad raise or finalized proposal
        configs: One config per staged action, in staged order
        sender: Transaction sender (any third party)
        table: Dispatch table (built-in table by default)
        transaction: Existing transaction to append to

    Returns:
        ExecutionResult with the dispatched kinds and the ledger receipt

    Raises:
        ExternalRejection: The ledger refused the transaction
        CatalogLookupError / ValidationError / MissingField: Bad config, nothing submitted
    """
    table = table if table is not None else get_default_table()
    configs = list(configs)
    with LogContext(intent_id=target.intent_id, trigger=target.context.value):
        handle = begin_execution(ledger, packages, target, sender=sender,
                                 transaction=transaction, catalog=catalog)
        try:
            for index, config in enumerate(configs):
                try:
                    table.dispatch(handle, config)
                except IntentError as e:
                    if e.context.batch_index is None:
                        e.with_context(batch_index=index)
                    raise
        except Exception:
            abort_execution(handle)
            raise
        receipt = finalize_execution(handle)
    return ExecutionResult(handle.intent_id, tuple(handle.dispatched), receipt)
