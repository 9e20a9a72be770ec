"""Ledger boundary.

The ledger is an external collaborator: it receives a ``Transaction`` and
either applies every command or none. A refusal surfaces as
``ExternalRejection`` and is never reinterpreted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from intent_spine.ledger.transaction import Transaction


@dataclass(frozen=True)
class ExecutionReceipt:
    """What a successfully applied transaction reports back."""

    digest: str
    created: dict[str, str] = field(default_factory=dict)
    events: tuple[dict[str, Any], ...] = ()

    def events_of(self, kind: str) -> list[dict[str, Any]]:
        return [e for e in self.events if e.get("type") == kind]


@runtime_checkable
class LedgerClient(Protocol):
    """Anything that can apply a transaction atomically."""

    def execute(self, transaction: Transaction, *, sender: str) -> ExecutionReceipt:
        """Apply all commands or none.

        Raises:
            ExternalRejection: The ledger refused the transaction
        """
        ...
