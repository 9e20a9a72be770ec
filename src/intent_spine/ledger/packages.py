"""On-chain package ids and shared objects the call targets are built from."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

from intent_spine.ledger.types import normalize_address

DEFAULT_CLOCK_ID = "0x6"


class PackageKey(str, Enum):
    """Deployed Move packages. Values are the ``PackageConfig`` field names."""

    ACCOUNT_PROTOCOL = "account_protocol"
    ACCOUNT_ACTIONS = "account_actions"
    FUTARCHY_CORE = "futarchy_core"
    FUTARCHY_ACTIONS = "futarchy_actions"
    FUTARCHY_GOVERNANCE = "futarchy_governance"
    FUTARCHY_GOVERNANCE_ACTIONS = "futarchy_governance_actions"
    FUTARCHY_ORACLE_ACTIONS = "futarchy_oracle_actions"
    FUTARCHY_FACTORY = "futarchy_factory"
    FUTARCHY_MARKETS_CORE = "futarchy_markets_core"

    @property
    def alias(self) -> str:
        """Named address used in marker types (``account_actions::vault::…``)."""
        return _ALIASES.get(self, self.value)


_ALIASES = {
    PackageKey.FUTARCHY_ORACLE_ACTIONS: "futarchy_oracle",
}


class PackageConfig(BaseModel):
    """
    Package ids plus the shared objects every execution call touches.

    All ids are normalized to 32-byte ``0x`` hex on construction, so targets
    built from them compare equal to what an indexer reports.
    """

    model_config = ConfigDict(frozen=True, validate_default=True)

    account_protocol: str
    account_actions: str
    futarchy_core: str
    futarchy_actions: str
    futarchy_governance: str
    futarchy_governance_actions: str
    futarchy_oracle_actions: str
    futarchy_factory: str
    futarchy_markets_core: str

    package_registry_id: str
    factory_id: str
    fee_manager_id: str
    clock_id: str = DEFAULT_CLOCK_ID

    @field_validator("*")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_address(value)

    def address(self, key: PackageKey) -> str:
        return getattr(self, key.value)

    def target(self, key: PackageKey, module: str, function: str) -> str:
        return f"{self.address(key)}::{module}::{function}"

    def key_for_address(self, address: str) -> PackageKey | None:
        """Reverse lookup of a package id."""
        address = normalize_address(address)
        for key in PackageKey:
            if self.address(key) == address:
                return key
        return None
