"""
Execution call shapes.

Every execution call is one of a handful of shapes: an ordered template for
its type arguments and an ordered template for its arguments. Templates are
token tuples; the execution layer renders them against an open handle.

Type-argument tokens:
    CONFIG / OUTCOME / WITNESS  ─ context types of the trigger
    SLOTS                       ─ the action's own type slots, declared order
    extra:<field>               ─ a type taken from the config's extras

Argument tokens:
    EXECUTABLE, ACCOUNT, REGISTRY, CLOCK, VERSION, INTENT_WITNESS,
    METADATA_KEY (result of a preceding ``coin_metadata_key`` call),
    CAP (borrowed capability), extra:<field> (object id from the extras)

Tags:
    catalog, execution-shape, type-arguments, intent-spine
"""

from __future__ import annotations

from dataclasses import dataclass

from intent_spine.ledger.packages import PackageConfig, PackageKey

CONFIG = "CONFIG"
OUTCOME = "OUTCOME"
WITNESS = "WITNESS"
SLOTS = "SLOTS"

EXECUTABLE = "EXECUTABLE"
ACCOUNT = "ACCOUNT"
REGISTRY = "REGISTRY"
CLOCK = "CLOCK"
VERSION = "VERSION"
INTENT_WITNESS = "INTENT_WITNESS"
METADATA_KEY = "METADATA_KEY"
CAP = "CAP"

EXTRA_PREFIX = "extra:"


def extra(field: str) -> str:
    return f"{EXTRA_PREFIX}{field}"


def extra_field(token: str) -> str | None:
    """Field name of an ``extra:<field>`` token, None for any other token."""
    if token.startswith(EXTRA_PREFIX):
        return token[len(EXTRA_PREFIX):]
    return None


# ── type-argument templates ──────────────────────────────────────

T_ACCOUNT = (CONFIG, OUTCOME, SLOTS, WITNESS)
T_OUTCOME = (OUTCOME, SLOTS, WITNESS)
T_OUTCOME_TRAILING = (OUTCOME, WITNESS, SLOTS)
T_LEADING = (SLOTS, OUTCOME, WITNESS)
T_POOL = (CONFIG, OUTCOME, SLOTS, extra("lp_type"), WITNESS)

# ── argument patterns ────────────────────────────────────────────

A_STANDARD = (EXECUTABLE, ACCOUNT, REGISTRY, VERSION, INTENT_WITNESS)
A_CLOCK_FIRST = (EXECUTABLE, ACCOUNT, REGISTRY, CLOCK, VERSION, INTENT_WITNESS)
A_CLOCK_LAST = (EXECUTABLE, ACCOUNT, REGISTRY, VERSION, INTENT_WITNESS, CLOCK)
A_TRANSFER = (EXECUTABLE, INTENT_WITNESS)
A_MEMO = (EXECUTABLE, ACCOUNT, INTENT_WITNESS, CLOCK)
A_POOL = (
    EXECUTABLE, ACCOUNT, REGISTRY,
    extra("lp_treasury_cap_id"), extra("lp_metadata_id"),
    CLOCK, VERSION, INTENT_WITNESS,
)
A_METADATA = (EXECUTABLE, ACCOUNT, REGISTRY, METADATA_KEY, VERSION, INTENT_WITNESS)


@dataclass(frozen=True)
class ExecutionShape:
    """Type-argument template plus argument template of one execution call."""

    type_args: tuple[str, ...]
    arguments: tuple[str, ...]

    def __post_init__(self) -> None:
        if self.type_args.count(SLOTS) != 1:
            raise ValueError("Execution type template must place the action slots exactly once")

    def with_capability(self) -> ExecutionShape:
        """Same shape with the borrowed capability passed right after the registry."""
        if CAP in self.arguments:
            return self
        at = self.arguments.index(REGISTRY) + 1
        return ExecutionShape(self.type_args, self.arguments[:at] + (CAP,) + self.arguments[at:])

    @property
    def extra_fields(self) -> tuple[str, ...]:
        fields = (extra_field(t) for t in self.type_args + self.arguments)
        return tuple(f for f in fields if f is not None)


ACCOUNT_STANDARD = ExecutionShape(T_ACCOUNT, A_STANDARD)
ACCOUNT_CLOCK_FIRST = ExecutionShape(T_ACCOUNT, A_CLOCK_FIRST)
ACCOUNT_CLOCK_LAST = ExecutionShape(T_ACCOUNT, A_CLOCK_LAST)
ACCOUNT_MEMO = ExecutionShape(T_ACCOUNT, A_MEMO)
ACCOUNT_METADATA = ExecutionShape(T_ACCOUNT, A_METADATA)
ACCOUNT_POOL = ExecutionShape(T_POOL, A_POOL)
OUTCOME_STANDARD = ExecutionShape(T_OUTCOME, A_STANDARD)
OUTCOME_CLOCK_FIRST = ExecutionShape(T_OUTCOME, A_CLOCK_FIRST)
OUTCOME_CLOCK_LAST = ExecutionShape(T_OUTCOME, A_CLOCK_LAST)
OUTCOME_TRANSFER = ExecutionShape(T_OUTCOME, A_TRANSFER)
OUTCOME_TRAILING_CLOCK_LAST = ExecutionShape(T_OUTCOME_TRAILING, A_CLOCK_LAST)
LEADING_CLOCK_LAST = ExecutionShape(T_LEADING, A_CLOCK_LAST)


@dataclass(frozen=True)
class CapabilityUse:
    """Admin capability an action borrows from the account for one call."""

    package: PackageKey
    module: str
    name: str

    def type_tag(self, packages: PackageConfig) -> str:
        return f"{packages.address(self.package)}::{self.module}::{self.name}"


FACTORY_OWNER_CAP = CapabilityUse(PackageKey.FUTARCHY_FACTORY, "factory", "FactoryOwnerCap")
VALIDATOR_ADMIN_CAP = CapabilityUse(PackageKey.FUTARCHY_FACTORY, "factory", "ValidatorAdminCap")
FEE_ADMIN_CAP = CapabilityUse(PackageKey.FUTARCHY_MARKETS_CORE, "fee", "FeeAdminCap")
PACKAGE_ADMIN_CAP = CapabilityUse(PackageKey.ACCOUNT_PROTOCOL, "package_registry", "PackageAdminCap")


@dataclass(frozen=True)
class ContextTypes:
    """Config, outcome and witness types of one trigger, plus its intent-witness call."""

    config_type: str
    outcome_type: str
    witness_type: str
    intent_witness_target: str

    @classmethod
    def for_launchpad(cls, packages: PackageConfig) -> ContextTypes:
        factory = packages.futarchy_factory
        core = packages.futarchy_core
        return cls(
            config_type=f"{core}::futarchy_config::FutarchyConfig",
            outcome_type=f"{factory}::dao_init_outcome::DaoInitOutcome",
            witness_type=f"{factory}::dao_init_executor::DaoInitIntent",
            intent_witness_target=f"{factory}::dao_init_executor::dao_init_intent_witness",
        )

    @classmethod
    def for_proposal(cls, packages: PackageConfig) -> ContextTypes:
        core = packages.futarchy_core
        return cls(
            config_type=f"{core}::futarchy_config::FutarchyConfig",
            outcome_type=f"{core}::futarchy_config::FutarchyOutcome",
            witness_type=f"{core}::futarchy_config::ConfigWitness",
            intent_witness_target=f"{core}::futarchy_config::witness",
        )

    def resolve(self, token: str) -> str:
        if token == CONFIG:
            return self.config_type
        if token == OUTCOME:
            return self.outcome_type
        if token == WITNESS:
            return self.witness_type
        raise KeyError(token)
