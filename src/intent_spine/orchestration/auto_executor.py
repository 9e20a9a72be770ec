"""
Auto-executor — the cranker that replays resolved intents from indexer data.

Manifesto:
Once a raise settles or a proposal finalizes, anyone may replay its intent.
The cranker knows only what the indexer reports: it fetches the record,
picks the batch of the resolved outcome, rebuilds execution configs with the
converter and submits one execution transaction. It refuses to guess: an
unresolved proposal, a REJECT win, an empty batch, missing execution ids
and any unconvertible action all stop the run before a transaction is sent.

ARCHITECTURE
────────────
::

    AutoExecutor(ledger, packages, indexer, sender=…)
      ├── execute_launchpad(raise_id)
      │     GET /launchpads/{id} → success|failure actions
      ├── execute_proposal(proposal_id)
      │     GET /proposals/{id}  → staged_actions[winning_outcome]
      └── run("launchpad" | "proposal", intent_id)
            │
            ▼
      validate_and_convert ─ any issue → ConversionError (nothing sent)
            │
            ▼
      execute_batch(target, configs) → ExecutionResult

Tags:
    orchestration, cranker, auto-executor, indexer, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from intent_spine.catalog.registry import ActionCatalog
from intent_spine.conversion.converter import ActionConverter
from intent_spine.core.errors import ConversionError, ExecutionStateError, ValidationError
from intent_spine.core.logging import LogContext, get_logger
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import LaunchpadTarget, ProposalTarget
from intent_spine.execution.dispatch import DispatchTable
from intent_spine.execution.executor import ExecutionResult, execute_batch
from intent_spine.ledger.client import LedgerClient
from intent_spine.ledger.packages import PackageConfig
from intent_spine.ledger.types import normalize_address
from intent_spine.orchestration.indexer import IndexerClient
from intent_spine.orchestration.proposal import REJECT_OUTCOME

logger = get_logger(__name__)

IntentKind = Literal["launchpad", "proposal"]
Overrides = Mapping[int, Mapping[str, Any]]

_FAILED_RAISE_STATES = frozenset({"failed", "failure", "unsuccessful"})


class AutoExecutor:
    """
    Replays resolved launchpad and proposal intents.

    Args:
        ledger: Where execution transactions are submitted
        packages: Deployed package ids
        indexer: Source of launchpad/proposal records
        sender: Address paying for the execution transaction
    """

    def __init__(
        self,
        ledger: LedgerClient,
        packages: PackageConfig,
        indexer: IndexerClient,
        *,
        sender: str,
        catalog: ActionCatalog | None = None,
        table: DispatchTable | None = None,
        converter: ActionConverter | None = None,
    ):
        self.ledger = ledger
        self.packages = packages
        self.indexer = indexer
        self.sender = normalize_address(sender)
        self.table = table
        self.converter = converter or ActionConverter(catalog, packages)
        self.catalog = self.converter.catalog

    async def run(self, kind: IntentKind, intent_id: str, **kwargs: Any) -> ExecutionResult:
        if kind == "launchpad":
            return await self.execute_launchpad(intent_id, **kwargs)
        if kind == "proposal":
            return await self.execute_proposal(intent_id, **kwargs)
        raise ValidationError(f"Unknown intent kind {kind!r}", field="kind", value=kind)

    async def execute_launchpad(
        self,
        raise_id: str,
        *,
        account_id: str | None = None,
        outcome: Literal["success", "failure"] | None = None,
        overrides: Overrides | None = None,
    ) -> ExecutionResult:
        """
        Replay the intent of a settled raise.

        ``outcome`` defaults to the indexed raise state: ``failure`` for a
        failed raise, ``success`` otherwise.

        Raises:
            IndexerError: The record could not be fetched
            ValidationError: No actions for the outcome, or no DAO account
            ConversionError: At least one action could not be converted
            ExternalRejection: The ledger refused the execution
        """
        with LogContext(intent_id=raise_id, trigger="launchpad"):
            record = await self.indexer.get_launchpad(raise_id)
            if outcome is None:
                outcome = "failure" if (record.state or "").lower() in _FAILED_RAISE_STATES else "success"
            actions = record.success_actions if outcome == "success" else record.failure_actions
            if not actions:
                raise ValidationError(
                    f"No {outcome} actions found for raise {raise_id}", field=f"{outcome}_actions",
                ).with_context(intent_id=raise_id)
            account_id = account_id or record.account_id
            if not account_id:
                raise ValidationError(
                    f"Raise {raise_id} has no DAO account yet", field="account_id",
                ).with_context(intent_id=raise_id)

            configs = self._convert(actions, overrides, raise_id)
            target = LaunchpadTarget(raise_id, account_id, record.asset_type, record.stable_type)
            logger.info("auto_executor.executing", outcome=outcome, actions=len(configs))
            return self._execute(target, configs)

    async def execute_proposal(
        self,
        proposal_id: str,
        *,
        account_id: str | None = None,
        outcome: int | None = None,
        escrow_id: str | None = None,
        spot_pool_id: str | None = None,
        overrides: Overrides | None = None,
    ) -> ExecutionResult:
        """
        Replay the winning outcome's intent of a finalized proposal.

        Raises:
            IndexerError: The record could not be fetched
            ExecutionStateError: No winning outcome yet, or REJECT won
            ValidationError: No actions, or escrow / spot pool / LP type missing
            ConversionError: At least one action could not be converted
            ExternalRejection: The ledger refused the execution
        """
        with LogContext(intent_id=proposal_id, trigger="proposal"):
            record = await self.indexer.get_proposal(proposal_id)
            outcome = outcome if outcome is not None else record.winning_outcome
            if outcome is None:
                raise ExecutionStateError(
                    f"Proposal {proposal_id} has no winning outcome; finalize it first",
                ).with_context(intent_id=proposal_id)
            if outcome == REJECT_OUTCOME:
                raise ExecutionStateError(
                    f"Outcome 0 (REJECT) won proposal {proposal_id}; there are no actions to execute",
                ).with_context(intent_id=proposal_id)
            actions = record.actions_for(outcome)
            if not actions:
                raise ValidationError(
                    f"No staged actions for outcome {outcome} of proposal {proposal_id}",
                    field="staged_actions",
                ).with_context(intent_id=proposal_id)
            account_id = account_id or record.account_id
            if not account_id:
                raise ValidationError(f"Proposal {proposal_id} has no DAO account", field="account_id")

            target = ProposalTarget(
                proposal_id=proposal_id,
                account_id=account_id,
                escrow_id=escrow_id or record.escrow_id or "",
                spot_pool_id=spot_pool_id or record.spot_pool_id or "",
                asset_type=record.asset_type,
                stable_type=record.stable_type,
                lp_type=record.lp_type or "",
            )
            configs = self._convert(actions, overrides, proposal_id)
            logger.info("auto_executor.executing", outcome=outcome, actions=len(configs))
            return self._execute(target, configs)

    def _convert(self, actions: list[dict[str, Any]], overrides: Overrides | None,
                 intent_id: str) -> list[ExecutionConfig]:
        report = self.converter.validate_and_convert(actions, overrides=overrides)
        if not report.success:
            first = report.errors[0]
            raise ConversionError(
                first.type,
                f"{len(report.errors)} of {len(actions)} action(s) failed; "
                f"first at index {first.index}: {first.error}",
                batch_index=first.index,
            ).with_context(intent_id=intent_id, errors=[e.to_dict() for e in report.errors])
        return list(report.configs)

    def _execute(self, target: LaunchpadTarget | ProposalTarget, configs: list[ExecutionConfig]) -> ExecutionResult:
        result = execute_batch(
            self.ledger, self.packages, target, configs,
            sender=self.sender, table=self.table, catalog=self.catalog,
        )
        logger.info("auto_executor.executed", digest=result.digest, kinds=list(result.kinds))
        return result
