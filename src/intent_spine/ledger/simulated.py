"""
In-memory ledger that interprets composed transactions.

Manifesto:
The real contracts are an external collaborator reachable only through call
targets, argument order and type-argument order. ``SimulatedLedger`` stands
in for them in tests and local runs: it applies a ``Transaction`` to a copy
of its state and commits only if every command succeeds, refusing exactly
the things the contracts refuse.

ARCHITECTURE
────────────
::

    SimulatedLedger.execute(tx, sender=…)
      ├── deepcopy(state) → _Run
      ├── per command:
      │     SplitCoins
      │     MoveCall → system call table     (builder, launchpad, proposal,
      │                                       executor, witnesses, caps)
      │              → catalog staging call  (append staged spec)
      │              → catalog execution call (replay next staged spec)
      ├── end-of-transaction checks (executables finalized, caps returned,
      │                              unshared DAOs shared)
      └── commit state, return ExecutionReceipt

    Seeding / queries (test harness side):
      advance_clock, create_account, grant_capability, seed_proposal,
      set_market_winner, raise_info, proposal_info, executed_actions

Enforced:
    - staged batches are locked once committed and replayed exactly once
    - replay follows the staged order; arity and type arguments must match
    - resource-bag entries are produced before use and all consumed
    - borrowed capabilities are returned in the same transaction
    - time gates (raise window, trading period, intent expiry)

Tags:
    ledger, simulation, hot-potato, resource-bag, testing, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

import copy
import hashlib
import itertools
from dataclasses import dataclass, field
from typing import Any

from intent_spine.catalog.definitions import ActionDefinition, IntentContext, ResourceRole
from intent_spine.catalog.registry import ActionCatalog, get_default_catalog
from intent_spine.catalog.shapes import (
    ACCOUNT,
    CAP,
    CLOCK,
    EXECUTABLE,
    INTENT_WITNESS,
    METADATA_KEY,
    REGISTRY,
    SLOTS,
    VERSION,
    ContextTypes,
    extra_field,
)
from intent_spine.core.errors import ExternalRejection
from intent_spine.core.logging import get_logger
from intent_spine.ledger import bcs
from intent_spine.ledger.client import ExecutionReceipt
from intent_spine.ledger.packages import PackageConfig, PackageKey
from intent_spine.ledger.transaction import (
    GasCoin,
    MoveCall,
    ObjectArg,
    Pure,
    Result,
    SplitCoins,
    Transaction,
)
from intent_spine.ledger.types import normalize_address, normalize_type

logger = get_logger(__name__)

DEFAULT_START_MS = 1_700_000_000_000
DEFAULT_RAISE_DURATION_MS = 4 * 24 * 60 * 60 * 1000
DEFAULT_TRADING_PERIOD_MS = 3 * 24 * 60 * 60 * 1000
DEFAULT_INTENT_EXPIRY_MS = 7 * 24 * 60 * 60 * 1000
GAS_BALANCE = 10**15

RAISE_SUCCESS = "success"
RAISE_FAILURE = "failure"


class _Rejected(Exception):
    """Internal signal; surfaces as ExternalRejection with the command index."""


# =============================================================================
# ON-CHAIN VALUES
# =============================================================================


@dataclass(frozen=True)
class StagedSpec:
    kind: str
    type_args: tuple[str, ...]
    arguments: tuple[bytes, ...]
    resource_name: str | None = None


@dataclass(frozen=True)
class ExecutedAction:
    """One replayed action as recorded by the ledger."""

    index: int
    kind: str
    type_args: tuple[str, ...]
    target: str


@dataclass
class _Builder:
    specs: list[StagedSpec] = field(default_factory=list)
    consumed: bool = False


@dataclass
class _SpecVector:
    specs: tuple[StagedSpec, ...]
    consumed: bool = False


@dataclass
class _Executable:
    context: IntentContext
    intent_id: str
    account_id: str
    specs: tuple[StagedSpec, ...]
    cursor: int = 0
    bag: dict[str, str] = field(default_factory=dict)
    consumed: bool = False


@dataclass
class _Coin:
    value: int
    spent: bool = False


@dataclass
class _Cap:
    account_id: str
    cap_type: str
    returned: bool = False


@dataclass(frozen=True)
class _VersionWitness:
    pass


@dataclass(frozen=True)
class _IntentWitness:
    context: IntentContext


@dataclass(frozen=True)
class _MetadataKey:
    coin_type: str


@dataclass
class _UnsharedDao:
    raise_id: str
    shared: bool = False


# =============================================================================
# STATE
# =============================================================================


@dataclass
class RaiseState:
    raise_id: str
    creator_cap_id: str
    creator: str
    asset_type: str
    stable_type: str
    tokens_for_sale: int
    min_raise: int
    max_raise: int | None
    allow_early: bool
    start_delay_ms: int
    locked: bool = False
    start_ms: int | None = None
    deadline_ms: int | None = None
    success_specs: tuple[StagedSpec, ...] | None = None
    failure_specs: tuple[StagedSpec, ...] | None = None
    total_raised: int = 0
    contributions: dict[str, int] = field(default_factory=dict)
    settled: str | None = None
    account_id: str | None = None
    dao_started: bool = False
    executed: bool = False
    claimed: set[str] = field(default_factory=set)


@dataclass
class ProposalState:
    proposal_id: str
    account_id: str
    escrow_id: str
    spot_pool_id: str
    asset_type: str
    stable_type: str
    lp_type: str
    outcome_count: int
    trading_end_ms: int
    intents: dict[int, tuple[StagedSpec, ...]] = field(default_factory=dict)
    market_winner: int | None = None
    winning_outcome: int | None = None
    finalized_at: int | None = None
    executed: bool = False
    cleaned: set[int] = field(default_factory=set)


@dataclass
class AccountState:
    account_id: str
    caps: set[str] = field(default_factory=set)


@dataclass
class _State:
    now_ms: int
    next_id: int = 0x1000
    raises: dict[str, RaiseState] = field(default_factory=dict)
    proposals: dict[str, ProposalState] = field(default_factory=dict)
    accounts: dict[str, AccountState] = field(default_factory=dict)
    executed: dict[str, list[ExecutedAction]] = field(default_factory=dict)
    events: list[dict[str, Any]] = field(default_factory=list)

    def new_id(self) -> str:
        self.next_id += 1
        return normalize_address(hex(self.next_id))


@dataclass(frozen=True)
class ProposalInfo:
    proposal_id: str
    account_id: str
    escrow_id: str
    spot_pool_id: str
    asset_type: str
    stable_type: str
    lp_type: str
    outcome_count: int


# =============================================================================
# LEDGER
# =============================================================================


class SimulatedLedger:
    """
    All-or-nothing transaction interpreter over in-memory state.

    Example:
        >>> ledger = SimulatedLedger(packages)
        >>> receipt = ledger.execute(tx, sender=ALICE)
        >>> raise_id = receipt.created["raise"]
    """

    def __init__(
        self,
        packages: PackageConfig,
        catalog: ActionCatalog | None = None,
        *,
        start_ms: int = DEFAULT_START_MS,
        raise_duration_ms: int = DEFAULT_RAISE_DURATION_MS,
        intent_expiry_ms: int = DEFAULT_INTENT_EXPIRY_MS,
    ):
        self.packages = packages
        self.catalog = (catalog or get_default_catalog()).bind(packages)
        self.raise_duration_ms = raise_duration_ms
        self.intent_expiry_ms = intent_expiry_ms
        self._state = _State(now_ms=start_ms)
        self._digests = itertools.count(1)
        self._staging = {d.staging_target(packages): d for d in self.catalog}
        self._execution = {d.execution_target(packages): d for d in self.catalog}

    # ── time / seeding ───────────────────────────────────────────

    @property
    def now_ms(self) -> int:
        return self._state.now_ms

    def advance_clock(self, ms: int) -> int:
        if ms < 0:
            raise ValueError("Clock cannot move backwards")
        self._state.now_ms += ms
        return self._state.now_ms

    def create_account(self) -> str:
        account_id = self._state.new_id()
        self._state.accounts[account_id] = AccountState(account_id)
        return account_id

    def grant_capability(self, account_id: str, cap_type: str) -> None:
        """Deposit an admin capability into an account."""
        self._state.accounts[normalize_address(account_id)].caps.add(normalize_type(cap_type))

    def seed_proposal(
        self,
        *,
        asset_type: str,
        stable_type: str,
        lp_type: str,
        account_id: str | None = None,
        outcome_count: int = 2,
        trading_period_ms: int = DEFAULT_TRADING_PERIOD_MS,
    ) -> ProposalInfo:
        """Create a proposal (with escrow and spot pool) whose market is trading."""
        if outcome_count < 2:
            raise ValueError("A proposal needs the reject outcome plus at least one more")
        state = self._state
        account_id = normalize_address(account_id) if account_id else self.create_account()
        if account_id not in state.accounts:
            raise ValueError(f"Unknown account {account_id}")
        proposal = ProposalState(
            proposal_id=state.new_id(),
            account_id=account_id,
            escrow_id=state.new_id(),
            spot_pool_id=state.new_id(),
            asset_type=normalize_type(asset_type),
            stable_type=normalize_type(stable_type),
            lp_type=normalize_type(lp_type),
            outcome_count=outcome_count,
            trading_end_ms=state.now_ms + trading_period_ms,
        )
        state.proposals[proposal.proposal_id] = proposal
        return ProposalInfo(
            proposal.proposal_id, account_id, proposal.escrow_id, proposal.spot_pool_id,
            proposal.asset_type, proposal.stable_type, proposal.lp_type, outcome_count,
        )

    def set_market_winner(self, proposal_id: str, outcome: int) -> None:
        proposal = self._state.proposals[normalize_address(proposal_id)]
        if not 0 <= outcome < proposal.outcome_count:
            raise ValueError(f"Outcome {outcome} out of range")
        proposal.market_winner = outcome

    # ── queries ──────────────────────────────────────────────────

    def raise_info(self, raise_id: str) -> RaiseState:
        return copy.deepcopy(self._state.raises[normalize_address(raise_id)])

    def proposal_info(self, proposal_id: str) -> ProposalState:
        return copy.deepcopy(self._state.proposals[normalize_address(proposal_id)])

    def executed_actions(self, intent_id: str) -> list[ExecutedAction]:
        return list(self._state.executed.get(normalize_address(intent_id), []))

    @property
    def events(self) -> list[dict[str, Any]]:
        return list(self._state.events)

    # ── execution ────────────────────────────────────────────────

    def execute(self, transaction: Transaction, *, sender: str) -> ExecutionReceipt:
        """Apply every command or none.

        Raises:
            ExternalRejection: The first refused command, with its index and target
        """
        sender = normalize_address(sender)
        state = copy.deepcopy(self._state)
        run = _Run(self, state, sender)
        try:
            run.apply(transaction)
        except _Rejected as e:
            index = run.command_index
            target = run.current_target
            logger.info("ledger.rejected", command_index=index, call_target=target, reason=str(e))
            raise ExternalRejection(
                f"Transaction rejected at command {index}: {e}",
                command_index=index, call_target=target,
            ) from None

        self._state = state
        digest = hashlib.sha256(f"{next(self._digests)}:{len(transaction.commands)}".encode()).hexdigest()
        state.events.extend(run.events)
        logger.debug("ledger.applied", digest=digest, commands=len(transaction.commands), sender=sender)
        return ExecutionReceipt(digest=digest, created=dict(run.created), events=tuple(run.events))


class _Run:
    """One transaction interpretation over a private state copy."""

    def __init__(self, ledger: SimulatedLedger, state: _State, sender: str):
        self.ledger = ledger
        self.packages = ledger.packages
        self.state = state
        self.sender = sender
        self.results: list[Any] = []
        self.created: dict[str, str] = {}
        self.events: list[dict[str, Any]] = []
        self.command_index = 0
        self.current_target: str | None = None
        self.executables: list[_Executable] = []
        self.caps: list[_Cap] = []
        self.daos: list[_UnsharedDao] = []
        self.system = self._system_calls()

    # ── driver ───────────────────────────────────────────────────

    def apply(self, transaction: Transaction) -> None:
        for index, command in enumerate(transaction.commands):
            self.command_index = index
            self.current_target = command.target if isinstance(command, MoveCall) else None
            self.results.append(self._command(command))

        self.command_index = len(transaction.commands)
        self.current_target = None
        for exe in self.executables:
            if not exe.consumed:
                raise _Rejected(f"Executable for {exe.intent_id} was never finalized")
        for cap in self.caps:
            if not cap.returned:
                raise _Rejected(f"Borrowed capability {cap.cap_type} was not returned")
        for dao in self.daos:
            if not dao.shared:
                raise _Rejected("Unshared DAO was not finalized")

    def _command(self, command: Any) -> Any:
        if isinstance(command, MoveCall):
            return self._move_call(command)
        if isinstance(command, SplitCoins):
            source = self._coin(command.coin)
            amounts = [bcs.decode_u64(self._pure(a)) for a in command.amounts]
            if sum(amounts) > source.value:
                raise _Rejected("Insufficient coin balance for split")
            source.value -= sum(amounts)
            return tuple(_Coin(a) for a in amounts)
        raise _Rejected(f"Unsupported command {type(command).__name__}")

    def _move_call(self, call: MoveCall) -> Any:
        key = self.packages.key_for_address(call.package)
        handler = self.system.get((key, call.module, call.function)) if key else None
        if handler is not None:
            return handler(call)
        definition = self.ledger._staging.get(call.target)
        if definition is not None:
            return self._stage(definition, call)
        definition = self.ledger._execution.get(call.target)
        if definition is not None:
            return self._execute_action(definition, call)
        raise _Rejected(f"Unknown function {call.target}")

    def _system_calls(self) -> dict[tuple[PackageKey, str, str], Any]:
        K = PackageKey
        return {
            (K.ACCOUNT_ACTIONS, "action_spec_builder", "new"): self._builder_new,
            (K.ACCOUNT_ACTIONS, "action_spec_builder", "into_vector"): self._builder_into_vector,
            (K.ACCOUNT_ACTIONS, "version", "current"): lambda call: _VersionWitness(),
            (K.ACCOUNT_ACTIONS, "currency", "coin_metadata_key"): self._metadata_key,
            (K.FUTARCHY_FACTORY, "factory", "coin_metadata_key"): self._metadata_key,
            (K.FUTARCHY_FACTORY, "dao_init_executor", "dao_init_intent_witness"):
                lambda call: _IntentWitness(IntentContext.LAUNCHPAD),
            (K.FUTARCHY_CORE, "futarchy_config", "witness"): lambda call: _IntentWitness(IntentContext.PROPOSAL),
            (K.FUTARCHY_FACTORY, "launchpad", "create_raise"): self._create_raise,
            (K.FUTARCHY_FACTORY, "launchpad", "stage_success_intent"): self._stage_success,
            (K.FUTARCHY_FACTORY, "launchpad", "stage_failure_intent"): self._stage_failure,
            (K.FUTARCHY_FACTORY, "launchpad", "lock_intents_and_start_raise"): self._lock,
            (K.FUTARCHY_FACTORY, "launchpad", "contribute"): self._contribute,
            (K.FUTARCHY_FACTORY, "launchpad", "settle_raise"): self._settle,
            (K.FUTARCHY_FACTORY, "launchpad", "begin_dao_creation"): self._begin_dao_creation,
            (K.FUTARCHY_FACTORY, "launchpad", "finalize_and_share_dao"): self._finalize_and_share_dao,
            (K.FUTARCHY_FACTORY, "launchpad", "claim_tokens"): self._claim_tokens,
            (K.FUTARCHY_FACTORY, "dao_init_executor", "begin_execution_for_launchpad"): self._begin_launchpad,
            (K.FUTARCHY_FACTORY, "dao_init_executor", "finalize_execution"): self._finalize_launchpad,
            (K.FUTARCHY_MARKETS_CORE, "proposal", "set_intent_spec_for_outcome"): self._set_intent_spec,
            (K.FUTARCHY_GOVERNANCE, "proposal_lifecycle", "finalize_proposal_with_spot_pool"):
                self._finalize_proposal,
            (K.FUTARCHY_GOVERNANCE, "ptb_executor", "begin_execution_with_escrow"): self._begin_proposal,
            (K.FUTARCHY_GOVERNANCE, "ptb_executor", "finalize_execution_success_with_escrow"):
                self._finalize_proposal_execution,
            (K.FUTARCHY_GOVERNANCE_ACTIONS, "intent_janitor", "cleanup_expired_futarchy_intents"): self._cleanup,
            (K.FUTARCHY_GOVERNANCE_ACTIONS, "intent_janitor", "check_maintenance_needed"): self._maintenance,
            (K.ACCOUNT_PROTOCOL, "account", "borrow_cap"): self._borrow_cap,
            (K.ACCOUNT_PROTOCOL, "account", "return_cap"): self._return_cap,
        }

    # ── argument access ──────────────────────────────────────────

    def _value(self, arg: Any) -> Any:
        if isinstance(arg, Result):
            if arg.index >= len(self.results):
                raise _Rejected(f"Result {arg.index} used before it exists")
            value = self.results[arg.index]
            if arg.sub_index is not None:
                if not isinstance(value, tuple) or arg.sub_index >= len(value):
                    raise _Rejected(f"Result {arg.index} has no element {arg.sub_index}")
                value = value[arg.sub_index]
            return value
        if isinstance(arg, GasCoin):
            return _Coin(GAS_BALANCE)
        if isinstance(arg, ObjectArg):
            return arg.object_id
        if isinstance(arg, Pure):
            return arg.data
        raise _Rejected(f"Unsupported argument {arg!r}")

    def _typed(self, arg: Any, kind: type, what: str) -> Any:
        value = self._value(arg)
        if not isinstance(value, kind):
            raise _Rejected(f"Expected {what}, got {type(value).__name__}")
        return value

    def _pure(self, arg: Any) -> bytes:
        if not isinstance(arg, Pure):
            raise _Rejected("Expected a pure value")
        return arg.data

    def _object(self, arg: Any) -> str:
        if not isinstance(arg, ObjectArg):
            raise _Rejected("Expected an object argument")
        return arg.object_id

    def _coin(self, arg: Any) -> _Coin:
        coin = self._typed(arg, _Coin, "coin")
        if coin.spent:
            raise _Rejected("Coin was already used")
        return coin

    def _arity(self, call: MoveCall, args: int, type_args: int) -> None:
        if len(call.arguments) != args:
            raise _Rejected(f"{call.function} takes {args} arguments, got {len(call.arguments)}")
        if len(call.type_arguments) != type_args:
            raise _Rejected(f"{call.function} takes {type_args} type arguments, got {len(call.type_arguments)}")

    def _shared(self, arg: Any, expected: str, what: str) -> None:
        if self._object(arg) != expected:
            raise _Rejected(f"Wrong {what} object")

    def _event(self, kind: str, **fields: Any) -> None:
        self.events.append({"type": kind, **fields})

    # ── builder ──────────────────────────────────────────────────

    def _builder_new(self, call: MoveCall) -> _Builder:
        self._arity(call, 0, 0)
        return _Builder()

    def _open_builder(self, arg: Any) -> _Builder:
        builder = self._typed(arg, _Builder, "action spec builder")
        if builder.consumed:
            raise _Rejected("Action spec builder was already consumed")
        return builder

    def _builder_into_vector(self, call: MoveCall) -> _SpecVector:
        self._arity(call, 1, 0)
        builder = self._open_builder(call.arguments[0])
        builder.consumed = True
        return _SpecVector(tuple(builder.specs))

    def _stage(self, definition: ActionDefinition, call: MoveCall) -> None:
        if not call.arguments:
            raise _Rejected("Staging call without a builder")
        builder = self._open_builder(call.arguments[0])
        self._arity(call, 1 + len(definition.params), len(definition.type_params))
        arguments = tuple(self._pure(a) for a in call.arguments[1:])
        resource_name = None
        if definition.resource is not None:
            position = [p.name for p in definition.params].index(definition.resource.name_param)
            try:
                resource_name = bcs.decode_string(arguments[position])
            except (ValueError, UnicodeDecodeError) as e:
                raise _Rejected(f"Malformed resource name: {e}") from None
        builder.specs.append(StagedSpec(definition.id, call.type_arguments, arguments, resource_name))

    # ── launchpad ────────────────────────────────────────────────

    def _raise(self, arg: Any) -> RaiseState:
        raise_id = self._object(arg)
        found = self.state.raises.get(raise_id)
        if found is None:
            raise _Rejected(f"Unknown raise {raise_id}")
        return found

    def _raise_types(self, call: MoveCall, found: RaiseState) -> None:
        if call.type_arguments != (found.asset_type, found.stable_type):
            raise _Rejected("Type arguments do not match the raise's asset and stable types")

    def _create_raise(self, call: MoveCall) -> None:
        self._arity(call, 17, 2)
        a = call.arguments
        self._shared(a[0], self.packages.factory_id, "factory")
        self._shared(a[1], self.packages.fee_manager_id, "fee manager")
        self._object(a[2])
        self._object(a[3])
        try:
            tokens_for_sale = bcs.decode_u64(self._pure(a[5]))
            min_raise = bcs.decode_u64(self._pure(a[6]))
            max_raise = bcs.decode_option_u64(self._pure(a[7]))
            start_delay = bcs.decode_option_u64(self._pure(a[9]))
            allow_early = bcs.Reader(self._pure(a[10])).boolean()
        except ValueError as e:
            raise _Rejected(f"Malformed raise parameters: {e}") from None
        if max_raise is not None and max_raise < min_raise:
            raise _Rejected("max_raise is below min_raise")
        self._coin(a[14]).spent = True
        self._shared(a[16], self.packages.clock_id, "clock")

        state = self.state
        found = RaiseState(
            raise_id=state.new_id(),
            creator_cap_id=state.new_id(),
            creator=self.sender,
            asset_type=call.type_arguments[0],
            stable_type=call.type_arguments[1],
            tokens_for_sale=tokens_for_sale,
            min_raise=min_raise,
            max_raise=max_raise,
            allow_early=allow_early,
            start_delay_ms=start_delay or 0,
        )
        state.raises[found.raise_id] = found
        self.created["raise"] = found.raise_id
        self.created["creator_cap"] = found.creator_cap_id
        self._event("RaiseCreated", raise_id=found.raise_id, creator=self.sender)

    def _stage_intent(self, call: MoveCall, outcome: str) -> None:
        self._arity(call, 5, 2)
        found = self._raise(call.arguments[0])
        self._raise_types(call, found)
        self._shared(call.arguments[1], self.packages.package_registry_id, "package registry")
        if self._object(call.arguments[2]) != found.creator_cap_id:
            raise _Rejected("Creator cap does not belong to this raise")
        if found.locked:
            raise _Rejected("Intents are locked")
        builder = self._open_builder(call.arguments[3])
        for spec in builder.specs:
            if not self.ledger.catalog.lookup_by_id(spec.kind).supports(IntentContext.LAUNCHPAD):
                raise _Rejected(f"{spec.kind} is not allowed in a launchpad intent")
        attr = f"{outcome}_specs"
        if getattr(found, attr) is not None:
            raise _Rejected(f"{outcome} intent already staged")
        builder.consumed = True
        setattr(found, attr, tuple(builder.specs))
        self._event("IntentStaged", raise_id=found.raise_id, outcome=outcome, actions=len(builder.specs))

    def _stage_success(self, call: MoveCall) -> None:
        self._stage_intent(call, RAISE_SUCCESS)

    def _stage_failure(self, call: MoveCall) -> None:
        self._stage_intent(call, RAISE_FAILURE)

    def _lock(self, call: MoveCall) -> None:
        self._arity(call, 2, 2)
        found = self._raise(call.arguments[0])
        self._raise_types(call, found)
        if self._object(call.arguments[1]) != found.creator_cap_id:
            raise _Rejected("Creator cap does not belong to this raise")
        if found.locked:
            raise _Rejected("Raise already started")
        found.locked = True
        found.start_ms = self.state.now_ms + found.start_delay_ms
        found.deadline_ms = found.start_ms + self.ledger.raise_duration_ms
        self._event("RaiseStarted", raise_id=found.raise_id, deadline_ms=found.deadline_ms)

    def _contribute(self, call: MoveCall) -> None:
        self._arity(call, 6, 2)
        found = self._raise(call.arguments[0])
        self._raise_types(call, found)
        self._shared(call.arguments[1], self.packages.factory_id, "factory")
        if not found.locked:
            raise _Rejected("Raise has not started")
        now = self.state.now_ms
        if now < found.start_ms:
            raise _Rejected("Raise start delay has not passed")
        if now >= found.deadline_ms or found.settled:
            raise _Rejected("Raise is closed")
        payment = self._coin(call.arguments[2])
        if payment.value == 0:
            raise _Rejected("Zero contribution")
        self._coin(call.arguments[4]).spent = True
        payment.spent = True
        found.total_raised += payment.value
        found.contributions[self.sender] = found.contributions.get(self.sender, 0) + payment.value
        self._event("Contributed", raise_id=found.raise_id, amount=payment.value, contributor=self.sender)

    def _settle(self, call: MoveCall) -> None:
        self._arity(call, 2, 2)
        found = self._raise(call.arguments[0])
        self._raise_types(call, found)
        if not found.locked:
            raise _Rejected("Raise has not started")
        if found.settled:
            raise _Rejected("Raise already settled")
        filled = found.max_raise is not None and found.total_raised >= found.max_raise
        if self.state.now_ms < found.deadline_ms and not (found.allow_early and filled):
            raise _Rejected("Raise deadline has not passed")
        found.settled = RAISE_SUCCESS if found.total_raised >= found.min_raise else RAISE_FAILURE
        self._event("RaiseSettled", raise_id=found.raise_id, outcome=found.settled, total=found.total_raised)

    def _begin_dao_creation(self, call: MoveCall) -> _UnsharedDao:
        self._arity(call, 4, 2)
        found = self._raise(call.arguments[0])
        self._raise_types(call, found)
        self._shared(call.arguments[1], self.packages.factory_id, "factory")
        self._shared(call.arguments[2], self.packages.package_registry_id, "package registry")
        if not found.settled:
            raise _Rejected("Raise is not settled")
        if found.dao_started:
            raise _Rejected("DAO already created for this raise")
        found.dao_started = True
        dao = _UnsharedDao(found.raise_id)
        self.daos.append(dao)
        return dao

    def _finalize_and_share_dao(self, call: MoveCall) -> None:
        self._arity(call, 4, 2)
        found = self._raise(call.arguments[0])
        self._raise_types(call, found)
        dao = self._typed(call.arguments[1], _UnsharedDao, "unshared DAO")
        if dao.raise_id != found.raise_id or dao.shared:
            raise _Rejected("DAO does not belong to this raise")
        dao.shared = True
        account_id = self.state.new_id()
        self.state.accounts[account_id] = AccountState(account_id)
        found.account_id = account_id
        self.created["account"] = account_id
        self._event("DaoCreated", raise_id=found.raise_id, account_id=account_id)

    def _claim_tokens(self, call: MoveCall) -> None:
        self._arity(call, 2, 2)
        found = self._raise(call.arguments[0])
        self._raise_types(call, found)
        if found.settled != RAISE_SUCCESS or found.account_id is None:
            raise _Rejected("Raise did not complete successfully")
        contributed = found.contributions.get(self.sender, 0)
        if not contributed:
            raise _Rejected("Sender did not contribute")
        if self.sender in found.claimed:
            raise _Rejected("Tokens already claimed")
        found.claimed.add(self.sender)
        amount = found.tokens_for_sale * contributed // found.total_raised
        self._event("TokensClaimed", raise_id=found.raise_id, recipient=self.sender, amount=amount)

    # ── proposal ─────────────────────────────────────────────────

    def _proposal(self, arg: Any) -> ProposalState:
        proposal_id = self._object(arg)
        found = self.state.proposals.get(proposal_id)
        if found is None:
            raise _Rejected(f"Unknown proposal {proposal_id}")
        return found

    def _account(self, arg: Any, expected: str) -> None:
        if self._object(arg) != expected:
            raise _Rejected("Account does not match the intent's account")

    def _set_intent_spec(self, call: MoveCall) -> None:
        self._arity(call, 4, 2)
        found = self._proposal(call.arguments[0])
        if call.type_arguments != (found.asset_type, found.stable_type):
            raise _Rejected("Type arguments do not match the proposal")
        if found.finalized_at is not None:
            raise _Rejected("Proposal is finalized; intents are locked")
        outcome = bcs.decode_u64(self._pure(call.arguments[1]))
        if not 0 < outcome < found.outcome_count:
            raise _Rejected(f"Outcome {outcome} cannot carry actions")
        vector = self._typed(call.arguments[2], _SpecVector, "action spec vector")
        if vector.consumed:
            raise _Rejected("Action spec vector was already consumed")
        max_actions = bcs.decode_u64(self._pure(call.arguments[3]))
        if len(vector.specs) > max_actions:
            raise _Rejected(f"{len(vector.specs)} actions exceed the limit of {max_actions}")
        for spec in vector.specs:
            if not self.ledger.catalog.lookup_by_id(spec.kind).supports(IntentContext.PROPOSAL):
                raise _Rejected(f"{spec.kind} is not allowed in a proposal intent")
        if outcome in found.intents:
            raise _Rejected(f"Outcome {outcome} already has an intent")
        vector.consumed = True
        found.intents[outcome] = vector.specs
        self._event("IntentStaged", proposal_id=found.proposal_id, outcome=outcome, actions=len(vector.specs))

    def _finalize_proposal(self, call: MoveCall) -> None:
        self._arity(call, 6, 3)
        found = self._proposal(call.arguments[2])
        self._account(call.arguments[0], found.account_id)
        self._shared(call.arguments[1], self.packages.package_registry_id, "package registry")
        self._shared(call.arguments[3], found.escrow_id, "escrow")
        self._shared(call.arguments[4], found.spot_pool_id, "spot pool")
        if call.type_arguments != (found.asset_type, found.stable_type, found.lp_type):
            raise _Rejected("Type arguments do not match the proposal")
        if found.finalized_at is not None:
            raise _Rejected("Proposal already finalized")
        if self.state.now_ms < found.trading_end_ms:
            raise _Rejected("Trading period has not ended")
        if found.market_winner is None:
            raise _Rejected("Market has no result")
        found.winning_outcome = found.market_winner
        found.finalized_at = self.state.now_ms
        self._event("ProposalFinalized", proposal_id=found.proposal_id, winning_outcome=found.winning_outcome)

    def _expired_intents(self, account_id: str) -> list[tuple[ProposalState, int]]:
        now = self.state.now_ms
        expired = []
        for proposal in self.state.proposals.values():
            if proposal.account_id != account_id or proposal.finalized_at is None:
                continue
            lapsed = now > proposal.finalized_at + self.ledger.intent_expiry_ms
            for outcome in proposal.intents:
                if outcome in proposal.cleaned:
                    continue
                winning = outcome == proposal.winning_outcome
                if not winning or (lapsed and not proposal.executed):
                    expired.append((proposal, outcome))
        return expired

    def _cleanup(self, call: MoveCall) -> None:
        self._arity(call, 4, 0)
        account_id = self._object(call.arguments[0])
        self._shared(call.arguments[1], self.packages.package_registry_id, "package registry")
        limit = bcs.decode_u64(self._pure(call.arguments[2]))
        expired = self._expired_intents(account_id)[:limit]
        for proposal, outcome in expired:
            proposal.cleaned.add(outcome)
        self._event("IntentsCleaned", account_id=account_id, count=len(expired))

    def _maintenance(self, call: MoveCall) -> bool:
        self._arity(call, 3, 0)
        account_id = self._object(call.arguments[0])
        needed = bool(self._expired_intents(account_id))
        self._event("MaintenanceChecked", account_id=account_id, needed=needed)
        return needed

    # ── execution context ────────────────────────────────────────

    def _open(self, context: IntentContext, intent_id: str, account_id: str,
              specs: tuple[StagedSpec, ...]) -> _Executable:
        if any(e.intent_id == intent_id and not e.consumed for e in self.executables):
            raise _Rejected("An executable for this intent is already open")
        exe = _Executable(context, intent_id, account_id, specs)
        self.executables.append(exe)
        return exe

    def _begin_launchpad(self, call: MoveCall) -> _Executable:
        self._arity(call, 4, 0)
        try:
            reader = bcs.Reader(self._pure(call.arguments[0]))
            raise_id = normalize_address(reader.address())
        except ValueError as e:
            raise _Rejected(f"Malformed raise id: {e}") from None
        found = self.state.raises.get(raise_id)
        if found is None:
            raise _Rejected(f"Unknown raise {raise_id}")
        if not found.settled:
            raise _Rejected("Raise outcome is not resolved")
        if found.account_id is None:
            raise _Rejected("DAO has not been created")
        self._account(call.arguments[1], found.account_id)
        self._shared(call.arguments[2], self.packages.package_registry_id, "package registry")
        if found.executed:
            raise _Rejected("Launchpad intent already executed")
        specs = found.success_specs if found.settled == RAISE_SUCCESS else found.failure_specs
        return self._open(IntentContext.LAUNCHPAD, found.raise_id, found.account_id, specs or ())

    def _finalize_launchpad(self, call: MoveCall) -> None:
        self._arity(call, 3, 0)
        exe = self._typed(call.arguments[1], _Executable, "executable")
        self._account(call.arguments[0], exe.account_id)
        if exe.context is not IntentContext.LAUNCHPAD:
            raise _Rejected("Executable is not a launchpad executable")
        self._close(exe)
        self.state.raises[exe.intent_id].executed = True

    def _begin_proposal(self, call: MoveCall) -> _Executable:
        self._arity(call, 5, 2)
        found = self._proposal(call.arguments[2])
        self._account(call.arguments[0], found.account_id)
        self._shared(call.arguments[1], self.packages.package_registry_id, "package registry")
        self._shared(call.arguments[3], found.escrow_id, "escrow")
        if call.type_arguments != (found.asset_type, found.stable_type):
            raise _Rejected("Type arguments do not match the proposal")
        if found.finalized_at is None:
            raise _Rejected("Proposal outcome is not resolved")
        if found.winning_outcome == 0:
            raise _Rejected("Reject outcome won; nothing to execute")
        if found.executed:
            raise _Rejected("Proposal intent already executed")
        outcome = found.winning_outcome
        if outcome in found.cleaned or self.state.now_ms > found.finalized_at + self.ledger.intent_expiry_ms:
            raise _Rejected("Intent expired")
        if outcome not in found.intents:
            raise _Rejected(f"Outcome {outcome} has no intent")
        return self._open(IntentContext.PROPOSAL, found.proposal_id, found.account_id, found.intents[outcome])

    def _finalize_proposal_execution(self, call: MoveCall) -> None:
        self._arity(call, 7, 3)
        found = self._proposal(call.arguments[2])
        self._account(call.arguments[0], found.account_id)
        self._shared(call.arguments[3], found.spot_pool_id, "spot pool")
        self._shared(call.arguments[4], found.escrow_id, "escrow")
        if call.type_arguments != (found.asset_type, found.stable_type, found.lp_type):
            raise _Rejected("Type arguments do not match the proposal")
        exe = self._typed(call.arguments[5], _Executable, "executable")
        if exe.context is not IntentContext.PROPOSAL or exe.intent_id != found.proposal_id:
            raise _Rejected("Executable does not belong to this proposal")
        self._close(exe)
        found.executed = True

    def _close(self, exe: _Executable) -> None:
        if exe.consumed:
            raise _Rejected("Executable already finalized")
        if exe.cursor != len(exe.specs):
            raise _Rejected(f"Only {exe.cursor} of {len(exe.specs)} staged actions were executed")
        if exe.bag:
            raise _Rejected(f"Resources left in the execution bag: {sorted(exe.bag)}")
        exe.consumed = True
        self._event("IntentExecuted", intent_id=exe.intent_id, context=exe.context.value, actions=exe.cursor)

    # ── capabilities / keys ──────────────────────────────────────

    def _borrow_cap(self, call: MoveCall) -> _Cap:
        self._arity(call, 3, 2)
        account_id = self._object(call.arguments[0])
        account = self.state.accounts.get(account_id)
        if account is None:
            raise _Rejected(f"Unknown account {account_id}")
        self._shared(call.arguments[1], self.packages.package_registry_id, "package registry")
        self._typed(call.arguments[2], _VersionWitness, "version witness")
        cap_type = call.type_arguments[1]
        if cap_type not in account.caps:
            raise _Rejected(f"Account holds no {cap_type}")
        if any(c.cap_type == cap_type and not c.returned for c in self.caps):
            raise _Rejected(f"{cap_type} is already borrowed")
        cap = _Cap(account_id, cap_type)
        self.caps.append(cap)
        return cap

    def _return_cap(self, call: MoveCall) -> None:
        self._arity(call, 3, 2)
        cap = self._typed(call.arguments[1], _Cap, "capability")
        if cap.returned:
            raise _Rejected("Capability already returned")
        if self._object(call.arguments[0]) != cap.account_id or call.type_arguments[1] != cap.cap_type:
            raise _Rejected("Capability returned to the wrong account or type")
        cap.returned = True

    def _metadata_key(self, call: MoveCall) -> _MetadataKey:
        self._arity(call, 0, 1)
        return _MetadataKey(call.type_arguments[0])

    # ── replay ───────────────────────────────────────────────────

    def _execute_action(self, definition: ActionDefinition, call: MoveCall) -> None:
        shape = definition.shape
        if len(call.arguments) != len(shape.arguments):
            raise _Rejected(f"{definition.id} takes {len(shape.arguments)} arguments, got {len(call.arguments)}")
        exe = self._typed(call.arguments[shape.arguments.index(EXECUTABLE)], _Executable, "executable")
        if exe.consumed:
            raise _Rejected("Executable already finalized")
        if exe.cursor >= len(exe.specs):
            raise _Rejected(f"{definition.id} executed beyond the {len(exe.specs)} staged actions")
        spec = exe.specs[exe.cursor]
        if spec.kind != definition.id:
            raise _Rejected(f"Staged action {exe.cursor} is {spec.kind}, not {definition.id}")

        self._check_type_args(definition, call, exe, spec)
        slots = dict(zip(definition.type_params, spec.type_args))
        for token, arg in zip(shape.arguments, call.arguments):
            self._check_argument(definition, token, arg, exe, slots)

        if definition.resource is not None:
            use = definition.resource
            name = spec.resource_name
            object_type = use.resource_type(slots)
            if use.role is ResourceRole.PRODUCES:
                if name in exe.bag:
                    raise _Rejected(f"Resource {name!r} already exists")
                exe.bag[name] = object_type
            else:
                held = exe.bag.pop(name, None)
                if held is None:
                    raise _Rejected(f"Resource {name!r} not found")
                if held != object_type:
                    raise _Rejected(f"Resource {name!r} is {held}, expected {object_type}")

        self.state.executed.setdefault(exe.intent_id, []).append(
            ExecutedAction(exe.cursor, definition.id, call.type_arguments, call.target)
        )
        exe.cursor += 1

    def _check_type_args(self, definition: ActionDefinition, call: MoveCall,
                         exe: _Executable, spec: StagedSpec) -> None:
        template = definition.shape.type_args
        expected_len = len(template) - 1 + len(spec.type_args)
        if len(call.type_arguments) != expected_len:
            raise _Rejected(
                f"{definition.id} takes {expected_len} type arguments, got {len(call.type_arguments)}"
            )
        if exe.context is IntentContext.LAUNCHPAD:
            types = ContextTypes.for_launchpad(self.packages)
        else:
            types = ContextTypes.for_proposal(self.packages)
        position = 0
        for token in template:
            if token == SLOTS:
                actual = call.type_arguments[position:position + len(spec.type_args)]
                if actual != spec.type_args:
                    raise _Rejected(f"{definition.id} type arguments differ from the staged ones")
                position += len(spec.type_args)
                continue
            if extra_field(token) is None and call.type_arguments[position] != normalize_type(types.resolve(token)):
                raise _Rejected(f"{definition.id}: wrong {token.lower()} type argument at {position}")
            position += 1

    def _check_argument(self, definition: ActionDefinition, token: str, arg: Any,
                        exe: _Executable, slots: dict) -> None:
        if token == EXECUTABLE:
            return
        if token == ACCOUNT:
            self._account(arg, exe.account_id)
        elif token == REGISTRY:
            self._shared(arg, self.packages.package_registry_id, "package registry")
        elif token == CLOCK:
            self._shared(arg, self.packages.clock_id, "clock")
        elif token == VERSION:
            self._typed(arg, _VersionWitness, "version witness")
        elif token == INTENT_WITNESS:
            witness = self._typed(arg, _IntentWitness, "intent witness")
            if witness.context is not exe.context:
                raise _Rejected("Intent witness belongs to another executor")
        elif token == CAP:
            cap = self._typed(arg, _Cap, "capability")
            wanted = normalize_type(definition.capability.type_tag(self.packages))
            if cap.returned or cap.cap_type != wanted or cap.account_id != exe.account_id:
                raise _Rejected(f"{definition.id} needs a borrowed {wanted}")
        elif token == METADATA_KEY:
            key = self._typed(arg, _MetadataKey, "metadata key")
            coin_types = [v for s, v in slots.items() if s.field == "coin_type"]
            if coin_types and key.coin_type != coin_types[0]:
                raise _Rejected("Metadata key is for another coin type")
        elif extra_field(token) is not None:
            self._object(arg)
