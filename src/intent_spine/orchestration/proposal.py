"""
Proposal workflow — per-outcome intents, finalization and janitor calls.

Outcome 0 is always REJECT and never carries actions. Every other outcome
may carry one intent; after trading ends the proposal is finalized against
the spot pool and only the winning outcome's intent is replayed, through
the escrow-aware executor. Intents that lost, or that were never executed
before they expired, are removed by the janitor.

Tags:
    orchestration, proposal, futarchy, workflow, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from intent_spine.catalog.definitions import IntentContext
from intent_spine.catalog.registry import ActionCatalog, get_default_catalog
from intent_spine.core.errors import ValidationError
from intent_spine.core.logging import LogContext, get_logger
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import ProposalTarget
from intent_spine.execution.dispatch import DispatchTable
from intent_spine.execution.executor import ExecutionResult, execute_batch
from intent_spine.ledger.client import ExecutionReceipt, LedgerClient
from intent_spine.ledger.packages import PackageConfig, PackageKey
from intent_spine.ledger.transaction import Transaction
from intent_spine.ledger.types import normalize_address
from intent_spine.staging.adapters import stage_batch
from intent_spine.staging.builder import IntentBatch, action_spec_builder_target

logger = get_logger(__name__)

REJECT_OUTCOME = 0
DEFAULT_MAX_ACTIONS_PER_OUTCOME = 10
DEFAULT_CLEANUP_LIMIT = 20


class ProposalWorkflow:
    """
    Proposal-side intent lifecycle.

    The ``ProposalTarget`` doubles as the proposal reference: staging only
    reads its id and coin types, finalize and execute need all of it.

    Example:
        >>> workflow = ProposalWorkflow(ledger, packages, sender=PROPOSER)
        >>> workflow.add_actions_to_outcome(target, 1, [{"type": "memo", "message": "yes"}])
        >>> workflow.finalize_proposal(target)
        >>> workflow.execute_actions(target, configs)
    """

    def __init__(
        self,
        ledger: LedgerClient,
        packages: PackageConfig,
        *,
        sender: str,
        catalog: ActionCatalog | None = None,
        table: DispatchTable | None = None,
        max_actions_per_outcome: int = DEFAULT_MAX_ACTIONS_PER_OUTCOME,
    ):
        self.ledger = ledger
        self.packages = packages
        self.sender = normalize_address(sender)
        self.catalog = catalog or get_default_catalog()
        self.table = table
        self.max_actions_per_outcome = max_actions_per_outcome

    def _submit(self, tx: Transaction, step: str, sender: str | None = None) -> ExecutionReceipt:
        receipt = self.ledger.execute(tx, sender=normalize_address(sender) if sender else self.sender)
        logger.info("proposal.step", step=step, digest=receipt.digest)
        return receipt

    def build_batch(self, actions: Iterable[Mapping[str, Any]] | IntentBatch) -> IntentBatch:
        if isinstance(actions, IntentBatch):
            if actions.context is not IntentContext.PROPOSAL:
                raise ValidationError(f"Cannot attach a {actions.context.value} batch to a proposal")
            return actions
        return stage_batch(IntentContext.PROPOSAL, actions, self.catalog)

    def add_actions_to_outcome(
        self,
        proposal: ProposalTarget,
        outcome: int,
        actions: Iterable[Mapping[str, Any]] | IntentBatch,
    ) -> IntentBatch:
        """
        Attach an intent to one outcome of a proposal.

        Raises:
            ValidationError: Outcome 0, or a bad action config (nothing submitted)
            ExternalRejection: Proposal finalized, outcome already set, too many actions
        """
        if outcome == REJECT_OUTCOME:
            raise ValidationError(
                "Outcome 0 is REJECT and cannot carry actions", field="outcome", value=outcome,
            ).with_context(intent_id=proposal.proposal_id)
        if outcome < 0:
            raise ValidationError("Outcome must be positive", field="outcome", value=outcome)
        batch = self.build_batch(actions)
        with LogContext(batch_ref=batch.batch_ref, intent_id=proposal.proposal_id):
            tx = Transaction()
            builder = batch.compose(tx, self.packages)
            vector = tx.move_call(action_spec_builder_target(self.packages, "into_vector"), arguments=[builder])
            tx.move_call(
                self.packages.target(PackageKey.FUTARCHY_MARKETS_CORE, "proposal", "set_intent_spec_for_outcome"),
                type_arguments=[proposal.asset_type, proposal.stable_type],
                arguments=[
                    tx.object(proposal.proposal_id),
                    tx.pure_u64(outcome),
                    vector,
                    tx.pure_u64(self.max_actions_per_outcome),
                ],
            )
            self._submit(tx, "set_intent_spec_for_outcome")
        return batch

    def finalize_proposal(self, proposal: ProposalTarget) -> int:
        """Finalize against the spot pool and return the winning outcome."""
        tx = Transaction()
        packages = self.packages
        tx.move_call(
            packages.target(PackageKey.FUTARCHY_GOVERNANCE, "proposal_lifecycle", "finalize_proposal_with_spot_pool"),
            type_arguments=[proposal.asset_type, proposal.stable_type, proposal.lp_type],
            arguments=[
                tx.object(proposal.account_id),
                tx.object(packages.package_registry_id),
                tx.object(proposal.proposal_id),
                tx.object(proposal.escrow_id),
                tx.object(proposal.spot_pool_id),
                tx.object(packages.clock_id),
            ],
        )
        receipt = self._submit(tx, "finalize_proposal")
        [event] = receipt.events_of("ProposalFinalized")
        winner = int(event["winning_outcome"])
        logger.info("proposal.finalized", proposal_id=proposal.proposal_id, winning_outcome=winner)
        return winner

    def execute_actions(self, proposal: ProposalTarget, configs: Iterable[ExecutionConfig],
                        *, sender: str | None = None) -> ExecutionResult:
        """Replay the winning outcome's intent."""
        return execute_batch(
            self.ledger, self.packages, proposal, configs,
            sender=sender or self.sender, table=self.table, catalog=self.catalog,
        )

    def cleanup_expired_intents(self, account_id: str, *, limit: int = DEFAULT_CLEANUP_LIMIT) -> int:
        """Remove up to ``limit`` losing or lapsed intents; returns how many were removed."""
        tx = Transaction()
        packages = self.packages
        tx.move_call(
            packages.target(PackageKey.FUTARCHY_GOVERNANCE_ACTIONS, "intent_janitor",
                            "cleanup_expired_futarchy_intents"),
            arguments=[
                tx.object(account_id),
                tx.object(packages.package_registry_id),
                tx.pure_u64(limit),
                tx.object(packages.clock_id),
            ],
        )
        receipt = self._submit(tx, "cleanup_expired_intents")
        count = sum(int(e["count"]) for e in receipt.events_of("IntentsCleaned"))
        logger.info("proposal.intents_cleaned", account_id=account_id, count=count)
        return count

    def check_maintenance_needed(self, account_id: str) -> bool:
        tx = Transaction()
        packages = self.packages
        tx.move_call(
            packages.target(PackageKey.FUTARCHY_GOVERNANCE_ACTIONS, "intent_janitor", "check_maintenance_needed"),
            arguments=[
                tx.object(account_id),
                tx.object(packages.package_registry_id),
                tx.object(packages.clock_id),
            ],
        )
        receipt = self._submit(tx, "check_maintenance_needed")
        return any(bool(e["needed"]) for e in receipt.events_of("MaintenanceChecked"))


__all__ = [
    "DEFAULT_CLEANUP_LIMIT",
    "DEFAULT_MAX_ACTIONS_PER_OUTCOME",
    "REJECT_OUTCOME",
    "ProposalWorkflow",
]
