"""
Execution context — the single-use handle that brackets a replay.

Manifesto:
Between ``begin_execution`` and ``finalize_execution`` the ledger hands out
exactly one executable; every execution call consumes it in staged order
and finalize destroys it. ``ExecutionHandle`` is the client-side mirror of
that executable: it cannot be built directly, cannot be copied, and refuses
every use once finalized or aborted. The ledger enforces the same rules on
its side; the handle only makes misuse fail before a transaction is sent.

ARCHITECTURE
────────────
::

    begin_execution(ledger, packages, target, sender=…)
      └── ExecutionHandle [OPEN]
            ├── .tx / .executable / .account / .registry / .clock
            ├── .version_witness() / .intent_witness()
            ├── dispatch(handle, config)          (dispatch.py)
            └── finalize_execution(handle)
                  ├── finalize call, tx submitted
                  ├── success  → FINALIZED, receipt
                  └── rejected → ABORTED, ExternalRejection re-raised

    NOT_STARTED → OPEN → FINALIZED
                   └──→ ABORTED

Tags:
    execution, hot-potato, single-use, handle, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union

from intent_spine.catalog.definitions import IntentContext
from intent_spine.catalog.registry import ActionCatalog, get_default_catalog
from intent_spine.catalog.shapes import ContextTypes
from intent_spine.core.errors import ExecutionStateError, ExternalRejection, ValidationError
from intent_spine.core.logging import get_logger
from intent_spine.ledger.client import ExecutionReceipt, LedgerClient
from intent_spine.ledger.packages import PackageConfig, PackageKey
from intent_spine.ledger.transaction import ObjectArg, Result, Transaction
from intent_spine.ledger.types import normalize_address, normalize_type

logger = get_logger(__name__)


class HandleState(str, Enum):
    NOT_STARTED = "not_started"
    OPEN = "open"
    FINALIZED = "finalized"
    ABORTED = "aborted"


# =============================================================================
# TARGETS
# =============================================================================


@dataclass(frozen=True)
class LaunchpadTarget:
    """A settled raise whose DAO account exists."""

    raise_id: str
    account_id: str
    asset_type: str
    stable_type: str

    context: ClassVar[IntentContext] = IntentContext.LAUNCHPAD

    def __post_init__(self) -> None:
        object.__setattr__(self, "raise_id", normalize_address(self.raise_id))
        object.__setattr__(self, "account_id", normalize_address(self.account_id))
        object.__setattr__(self, "asset_type", normalize_type(self.asset_type))
        object.__setattr__(self, "stable_type", normalize_type(self.stable_type))

    @property
    def intent_id(self) -> str:
        return self.raise_id


@dataclass(frozen=True)
class ProposalTarget:
    """A finalized proposal plus the escrow and spot pool its finalize call needs."""

    proposal_id: str
    account_id: str
    escrow_id: str
    spot_pool_id: str
    asset_type: str
    stable_type: str
    lp_type: str

    context: ClassVar[IntentContext] = IntentContext.PROPOSAL

    def __post_init__(self) -> None:
        for name in ("escrow_id", "spot_pool_id", "lp_type"):
            if not getattr(self, name):
                raise ValidationError(f"Proposal execution requires {name}", field=name)
        for name in ("proposal_id", "account_id", "escrow_id", "spot_pool_id"):
            object.__setattr__(self, name, normalize_address(getattr(self, name)))
        for name in ("asset_type", "stable_type", "lp_type"):
            object.__setattr__(self, name, normalize_type(getattr(self, name)))

    @property
    def intent_id(self) -> str:
        return self.proposal_id


ExecutionTarget = Union[LaunchpadTarget, ProposalTarget]

_CONSTRUCTION_TOKEN = object()


# =============================================================================
# HANDLE
# =============================================================================


class ExecutionHandle:
    """
    Opaque single-use execution token.

    Only ``begin_execution`` creates one. Copying or pickling raises
    ``TypeError``; any use after finalize or abort raises
    ``ExecutionStateError``.
    """

    def __init__(
        self,
        token: object,
        *,
        ledger: LedgerClient,
        packages: PackageConfig,
        target: ExecutionTarget,
        sender: str,
        transaction: Transaction,
        catalog: ActionCatalog,
    ):
        if token is not _CONSTRUCTION_TOKEN:
            raise TypeError("ExecutionHandle is created by begin_execution()")
        self.ledger = ledger
        self.packages = packages
        self.target = target
        self.sender = sender
        self.tx = transaction
        self.catalog = catalog
        self.context_types = (
            ContextTypes.for_launchpad(packages)
            if target.context is IntentContext.LAUNCHPAD
            else ContextTypes.for_proposal(packages)
        )
        self.executable: Result | None = None
        self.dispatched: list[str] = []
        self.receipt: ExecutionReceipt | None = None
        self._state = HandleState.NOT_STARTED

    def __copy__(self):
        raise TypeError("ExecutionHandle cannot be copied")

    def __deepcopy__(self, memo: dict[int, Any]):
        raise TypeError("ExecutionHandle cannot be copied")

    def __reduce_ex__(self, protocol: int):
        raise TypeError("ExecutionHandle cannot be pickled")

    def __repr__(self) -> str:
        return (f"ExecutionHandle(intent_id={self.intent_id!r}, context={self.context.value}, "
                f"state={self._state.value}, dispatched={len(self.dispatched)})")

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def context(self) -> IntentContext:
        return self.target.context

    @property
    def intent_id(self) -> str:
        return self.target.intent_id

    @property
    def is_open(self) -> bool:
        return self._state is HandleState.OPEN

    def require_open(self) -> None:
        if self._state is not HandleState.OPEN:
            raise ExecutionStateError(
                f"Execution handle for {self.intent_id} is {self._state.value}",
            ).with_context(intent_id=self.intent_id)

    # ── shared call arguments ────────────────────────────────────

    @property
    def account(self) -> ObjectArg:
        return self.tx.object(self.target.account_id)

    @property
    def registry(self) -> ObjectArg:
        return self.tx.object(self.packages.package_registry_id)

    @property
    def clock(self) -> ObjectArg:
        return self.tx.object(self.packages.clock_id)

    def version_witness(self) -> Result:
        return self.tx.move_call(self.packages.target(PackageKey.ACCOUNT_ACTIONS, "version", "current"))

    def intent_witness(self) -> Result:
        return self.tx.move_call(self.context_types.intent_witness_target)

    # ── transitions (module functions only) ─────────────────────

    def _open(self, executable: Result) -> None:
        if self._state is not HandleState.NOT_STARTED:
            raise ExecutionStateError("Execution handle was already opened")
        self.executable = executable
        self._state = HandleState.OPEN

    def _record(self, kind: str) -> None:
        self.dispatched.append(kind)

    def _close(self, state: HandleState) -> None:
        self._state = state


def _begin_call(handle: ExecutionHandle) -> Result:
    tx = handle.tx
    packages = handle.packages
    target = handle.target
    if isinstance(target, LaunchpadTarget):
        return tx.move_call(
            packages.target(PackageKey.FUTARCHY_FACTORY, "dao_init_executor", "begin_execution_for_launchpad"),
            arguments=[tx.pure_id(target.raise_id), handle.account, handle.registry, handle.clock],
        )
    return tx.move_call(
        packages.target(PackageKey.FUTARCHY_GOVERNANCE, "ptb_executor", "begin_execution_with_escrow"),
        type_arguments=[target.asset_type, target.stable_type],
        arguments=[
            handle.account, handle.registry, tx.object(target.proposal_id),
            tx.object(target.escrow_id), handle.clock,
        ],
    )


def _finalize_call(handle: ExecutionHandle) -> None:
    tx = handle.tx
    packages = handle.packages
    target = handle.target
    if isinstance(target, LaunchpadTarget):
        tx.move_call(
            packages.target(PackageKey.FUTARCHY_FACTORY, "dao_init_executor", "finalize_execution"),
            arguments=[handle.account, handle.executable, handle.clock],
        )
        return
    tx.move_call(
        packages.target(PackageKey.FUTARCHY_GOVERNANCE, "ptb_executor", "finalize_execution_success_with_escrow"),
        type_arguments=[target.asset_type, target.stable_type, target.lp_type],
        arguments=[
            handle.account, handle.registry, tx.object(target.proposal_id),
            tx.object(target.spot_pool_id), tx.object(target.escrow_id),
            handle.executable, handle.clock,
        ],
    )


def begin_execution(
    ledger: LedgerClient,
    packages: PackageConfig,
    target: ExecutionTarget,
    *,
    sender: str,
    transaction: Transaction | None = None,
    catalog: ActionCatalog | None = None,
) -> ExecutionHandle:
    """
    Open an execution for the target's resolved outcome.

    The begin call is composed into ``transaction`` (a new one by default);
    the ledger checks outcome resolution, expiry and single execution when
    the transaction is submitted by ``finalize_execution``.
    """
    handle = ExecutionHandle(
        _CONSTRUCTION_TOKEN,
        ledger=ledger,
        packages=packages,
        target=target,
        sender=normalize_address(sender),
        transaction=transaction if transaction is not None else Transaction(),
        catalog=(catalog or get_default_catalog()).bind(packages),
    )
    handle._open(_begin_call(handle))
    logger.info("execution.begin", intent_id=handle.intent_id, context=handle.context.value)
    return handle


def finalize_execution(handle: ExecutionHandle) -> ExecutionReceipt:
    """
    Close the handle and submit the whole transaction.

    Raises:
        ExecutionStateError: The handle is not open
        ExternalRejection: The ledger refused; the handle is aborted
    """
    handle.require_open()
    _finalize_call(handle)
    try:
        receipt = handle.ledger.execute(handle.tx, sender=handle.sender)
    except ExternalRejection as e:
        handle._close(HandleState.ABORTED)
        logger.warning("execution.rejected", intent_id=handle.intent_id, error=e.to_dict())
        raise
    handle._close(HandleState.FINALIZED)
    handle.receipt = receipt
    logger.info(
        "execution.finalized",
        intent_id=handle.intent_id, actions=len(handle.dispatched), digest=receipt.digest,
    )
    return receipt


def abort_execution(handle: ExecutionHandle) -> None:
    """Discard an open handle without submitting anything."""
    handle.require_open()
    handle._close(HandleState.ABORTED)
    logger.info("execution.aborted", intent_id=handle.intent_id, dispatched=len(handle.dispatched))
