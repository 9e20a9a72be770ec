"""
Launchpad workflow — a token raise from creation to init-action execution.

Manifesto:
A raise commits to two intents before it opens: what the DAO does if the
raise succeeds and what it does if it fails. Both are staged against the
raise, locked together with the start of contributions, and exactly one of
them is replayed after settlement. Each step here is one transaction; the
workflow never retries and never continues past an error.

ARCHITECTURE
────────────
::

    LaunchpadWorkflow(ledger, packages, sender=…)
      1. create_raise(config)                 → RaiseRef
      2. stage_actions(ref, "success", [...]) → IntentBatch
         stage_actions(ref, "failure", [...])
      3. lock_intents_and_start(ref)
      4. contribute(ref, amount)
      5. complete_raise(ref)                  → RaiseRef with account_id
           settle_raise → begin_dao_creation → finalize_and_share_dao
      6. execute_actions(ref, configs)        → ExecutionResult
      7. claim_tokens(ref)

      create_raise_with_actions(config, success, failure)  ─ 1 + 2 + 3

Tags:
    orchestration, launchpad, raise, workflow, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from intent_spine.catalog.definitions import IntentContext
from intent_spine.catalog.registry import ActionCatalog, get_default_catalog
from intent_spine.core.errors import ValidationError
from intent_spine.core.logging import LogContext, get_logger
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import LaunchpadTarget
from intent_spine.execution.dispatch import DispatchTable
from intent_spine.execution.executor import ExecutionResult, execute_batch
from intent_spine.ledger import bcs
from intent_spine.ledger.client import ExecutionReceipt, LedgerClient
from intent_spine.ledger.packages import PackageConfig, PackageKey
from intent_spine.ledger.transaction import Transaction
from intent_spine.ledger.types import normalize_address, normalize_type
from intent_spine.staging.adapters import stage_batch
from intent_spine.staging.builder import IntentBatch

logger = get_logger(__name__)

UNLIMITED_CAP = bcs.U64_MAX

RaiseOutcome = Literal["success", "failure"]


class CreateRaiseConfig(BaseModel):
    """Parameters of ``launchpad::create_raise``."""

    model_config = ConfigDict(frozen=True)

    asset_type: str
    stable_type: str
    treasury_cap_id: str
    coin_metadata_id: str
    tokens_for_sale: int = Field(gt=0, le=bcs.U64_MAX)
    min_raise_amount: int = Field(ge=0, le=bcs.U64_MAX)
    max_raise_amount: int | None = Field(default=None, ge=0, le=bcs.U64_MAX)
    allowed_caps: tuple[int, ...] = (UNLIMITED_CAP,)
    start_delay_ms: int | None = Field(default=None, ge=0)
    allow_early_completion: bool = False
    description: str = ""
    affiliate_id: str = ""
    metadata_keys: tuple[str, ...] = ()
    metadata_values: tuple[str, ...] = ()
    launchpad_fee: int = Field(default=0, ge=0)
    extra_mint_to_caller: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check(self) -> CreateRaiseConfig:
        if self.max_raise_amount is not None and self.max_raise_amount < self.min_raise_amount:
            raise ValueError("max_raise_amount must be >= min_raise_amount")
        if len(self.metadata_keys) != len(self.metadata_values):
            raise ValueError("metadata_keys and metadata_values must have the same length")
        return self


@dataclass(frozen=True)
class RaiseRef:
    """Ids of a created raise; ``account_id`` is known once the DAO exists."""

    raise_id: str
    creator_cap_id: str
    asset_type: str
    stable_type: str
    account_id: str | None = None

    @property
    def type_args(self) -> list[str]:
        return [self.asset_type, self.stable_type]

    def target(self) -> LaunchpadTarget:
        if self.account_id is None:
            raise ValidationError("Raise has no DAO account yet; run complete_raise first", field="account_id")
        return LaunchpadTarget(self.raise_id, self.account_id, self.asset_type, self.stable_type)


class LaunchpadWorkflow:
    """
    Launchpad lifecycle against one ledger.

    Example:
        >>> workflow = LaunchpadWorkflow(ledger, packages, sender=CREATOR)
        >>> ref = workflow.create_raise(CreateRaiseConfig(...))
        >>> workflow.stage_actions(ref, "success", [{"type": "memo", "message": "gm"}])
        >>> workflow.lock_intents_and_start(ref)
    """

    def __init__(
        self,
        ledger: LedgerClient,
        packages: PackageConfig,
        *,
        sender: str,
        catalog: ActionCatalog | None = None,
        table: DispatchTable | None = None,
    ):
        self.ledger = ledger
        self.packages = packages
        self.sender = normalize_address(sender)
        self.catalog = catalog or get_default_catalog()
        self.table = table

    def _target(self, function: str) -> str:
        return self.packages.target(PackageKey.FUTARCHY_FACTORY, "launchpad", function)

    def _submit(self, tx: Transaction, step: str, sender: str | None = None) -> ExecutionReceipt:
        receipt = self.ledger.execute(tx, sender=normalize_address(sender) if sender else self.sender)
        logger.info("launchpad.step", step=step, digest=receipt.digest)
        return receipt

    # ── 1. create ────────────────────────────────────────────────

    def build_create_raise(self, tx: Transaction, config: CreateRaiseConfig) -> None:
        packages = self.packages
        [fee_coin] = tx.split_coins(tx.gas, [config.launchpad_fee])
        tx.move_call(
            self._target("create_raise"),
            type_arguments=[config.asset_type, config.stable_type],
            arguments=[
                tx.object(packages.factory_id),
                tx.object(packages.fee_manager_id),
                tx.object(config.treasury_cap_id),
                tx.object(config.coin_metadata_id),
                tx.pure_string(config.affiliate_id),
                tx.pure_u64(config.tokens_for_sale),
                tx.pure_u64(config.min_raise_amount),
                tx.pure(bcs.option(bcs.u64, config.max_raise_amount)),
                tx.pure(bcs.vector(bcs.u64, config.allowed_caps)),
                tx.pure(bcs.option(bcs.u64, config.start_delay_ms)),
                tx.pure_bool(config.allow_early_completion),
                tx.pure_string(config.description),
                tx.pure(bcs.vector(bcs.string, config.metadata_keys)),
                tx.pure(bcs.vector(bcs.string, config.metadata_values)),
                fee_coin,
                tx.pure_u64(config.extra_mint_to_caller),
                tx.object(packages.clock_id),
            ],
        )

    def create_raise(self, config: CreateRaiseConfig) -> RaiseRef:
        tx = Transaction()
        self.build_create_raise(tx, config)
        receipt = self._submit(tx, "create_raise")
        ref = RaiseRef(
            raise_id=receipt.created["raise"],
            creator_cap_id=receipt.created["creator_cap"],
            asset_type=normalize_type(config.asset_type),
            stable_type=normalize_type(config.stable_type),
        )
        logger.info("launchpad.raise_created", raise_id=ref.raise_id)
        return ref

    # ── 2. stage ─────────────────────────────────────────────────

    def build_batch(self, actions: Iterable[Mapping[str, Any]] | IntentBatch) -> IntentBatch:
        if isinstance(actions, IntentBatch):
            if actions.context is not IntentContext.LAUNCHPAD:
                raise ValidationError(f"Cannot stage a {actions.context.value} batch on a raise")
            return actions
        return stage_batch(IntentContext.LAUNCHPAD, actions, self.catalog)

    def stage_actions(
        self,
        ref: RaiseRef,
        outcome: RaiseOutcome,
        actions: Iterable[Mapping[str, Any]] | IntentBatch,
    ) -> IntentBatch:
        """Stage the success or failure intent of a raise.

        Raises:
            ValidationError / CatalogLookupError: Before anything is submitted
            ExternalRejection: Raise already locked, or intent already staged
        """
        if outcome not in ("success", "failure"):
            raise ValidationError(f"Unknown raise outcome {outcome!r}", field="outcome", value=outcome)
        batch = self.build_batch(actions)
        with LogContext(batch_ref=batch.batch_ref, intent_id=ref.raise_id):
            tx = Transaction()
            builder = batch.compose(tx, self.packages)
            tx.move_call(
                self._target(f"stage_{outcome}_intent"),
                type_arguments=ref.type_args,
                arguments=[
                    tx.object(ref.raise_id),
                    tx.object(self.packages.package_registry_id),
                    tx.object(ref.creator_cap_id),
                    builder,
                    tx.object(self.packages.clock_id),
                ],
            )
            self._submit(tx, f"stage_{outcome}_intent")
        return batch

    # ── 3. lock ──────────────────────────────────────────────────

    def lock_intents_and_start(self, ref: RaiseRef) -> ExecutionReceipt:
        tx = Transaction()
        tx.move_call(
            self._target("lock_intents_and_start_raise"),
            type_arguments=ref.type_args,
            arguments=[tx.object(ref.raise_id), tx.object(ref.creator_cap_id)],
        )
        return self._submit(tx, "lock_intents_and_start_raise")

    # ── 4. contribute ────────────────────────────────────────────

    def contribute(
        self,
        ref: RaiseRef,
        amount: int,
        *,
        cap_tier: int = UNLIMITED_CAP,
        crank_fee: int = 0,
        sender: str | None = None,
    ) -> ExecutionReceipt:
        """Contribute ``amount`` of the stable coin, split from gas."""
        if amount <= 0:
            raise ValidationError("Contribution must be positive", field="amount", value=amount)
        tx = Transaction()
        [payment] = tx.split_coins(tx.gas, [amount])
        [crank_fee_coin] = tx.split_coins(tx.gas, [crank_fee])
        tx.move_call(
            self._target("contribute"),
            type_arguments=ref.type_args,
            arguments=[
                tx.object(ref.raise_id),
                tx.object(self.packages.factory_id),
                payment,
                tx.pure_u64(cap_tier),
                crank_fee_coin,
                tx.object(self.packages.clock_id),
            ],
        )
        return self._submit(tx, "contribute", sender)

    # ── 5. complete ──────────────────────────────────────────────

    def complete_raise(self, ref: RaiseRef) -> RaiseRef:
        """Settle, create the DAO and share it. The DAO exists for either outcome."""
        tx = Transaction()
        packages = self.packages
        tx.move_call(
            self._target("settle_raise"),
            type_arguments=ref.type_args,
            arguments=[tx.object(ref.raise_id), tx.object(packages.clock_id)],
        )
        unshared_dao = tx.move_call(
            self._target("begin_dao_creation"),
            type_arguments=ref.type_args,
            arguments=[
                tx.object(ref.raise_id), tx.object(packages.factory_id),
                tx.object(packages.package_registry_id), tx.object(packages.clock_id),
            ],
        )
        tx.move_call(
            self._target("finalize_and_share_dao"),
            type_arguments=ref.type_args,
            arguments=[
                tx.object(ref.raise_id), unshared_dao,
                tx.object(packages.package_registry_id), tx.object(packages.clock_id),
            ],
        )
        receipt = self._submit(tx, "complete_raise")
        completed = replace(ref, account_id=receipt.created["account"])
        logger.info("launchpad.dao_created", raise_id=ref.raise_id, account_id=completed.account_id)
        return completed

    # ── 6. execute ───────────────────────────────────────────────

    def execute_actions(self, ref: RaiseRef, configs: Iterable[ExecutionConfig],
                        *, sender: str | None = None) -> ExecutionResult:
        """Replay the intent of the settled outcome. Anyone may send this."""
        return execute_batch(
            self.ledger, self.packages, ref.target(), configs,
            sender=sender or self.sender, table=self.table, catalog=self.catalog,
        )

    # ── 7. claim ─────────────────────────────────────────────────

    def claim_tokens(self, ref: RaiseRef, *, sender: str | None = None) -> ExecutionReceipt:
        tx = Transaction()
        tx.move_call(
            self._target("claim_tokens"),
            type_arguments=ref.type_args,
            arguments=[tx.object(ref.raise_id), tx.object(self.packages.clock_id)],
        )
        return self._submit(tx, "claim_tokens", sender)

    # ── combined ─────────────────────────────────────────────────

    def create_raise_with_actions(
        self,
        config: CreateRaiseConfig,
        success_actions: Iterable[Mapping[str, Any]] | IntentBatch,
        failure_actions: Iterable[Mapping[str, Any]] | IntentBatch | None = None,
        *,
        lock: bool = True,
    ) -> RaiseRef:
        """Create, stage both intents and (by default) lock and start.

        Both batches are validated before the raise is created, so a bad
        action config never leaves a half-configured raise behind.
        """
        success = self.build_batch(success_actions)
        failure = self.build_batch(failure_actions) if failure_actions is not None else None
        ref = self.create_raise(config)
        self.stage_actions(ref, "success", success)
        if failure is not None:
            self.stage_actions(ref, "failure", failure)
        if lock:
            self.lock_intents_and_start(ref)
        return ref
