"""Ledger boundary: type tags, BCS encoding, transaction composition, package ids."""

from intent_spine.ledger.client import ExecutionReceipt, LedgerClient
from intent_spine.ledger.packages import DEFAULT_CLOCK_ID, PackageConfig, PackageKey
from intent_spine.ledger.transaction import MoveCall, ObjectArg, Pure, Result, Transaction
from intent_spine.ledger.types import TypeTag, normalize_address, normalize_type, parse_type_tag

__all__ = [
    "ExecutionReceipt",
    "LedgerClient",
    "DEFAULT_CLOCK_ID",
    "PackageConfig",
    "PackageKey",
    "MoveCall",
    "ObjectArg",
    "Pure",
    "Result",
    "Transaction",
    "TypeTag",
    "normalize_address",
    "normalize_type",
    "parse_type_tag",
]
