"""Borrow an admin capability from the account for exactly one step."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from intent_spine.catalog.shapes import CapabilityUse
from intent_spine.core.logging import get_logger
from intent_spine.execution.context import ExecutionHandle
from intent_spine.ledger.packages import PackageKey
from intent_spine.ledger.transaction import Result

logger = get_logger(__name__)


@contextmanager
def with_borrowed_capability(handle: ExecutionHandle, capability: CapabilityUse) -> Iterator[Result]:
    """
    Borrow ``capability`` from the account, yield it, return it.

    Example:
        >>> with with_borrowed_capability(handle, FEE_ADMIN_CAP) as cap:
        ...     issue_execution_call(handle, definition, config, cap=cap)

    The borrow and the return land in the same transaction around whatever
    the block composes. If the block raises, nothing is returned and the
    error propagates; the transaction is never submitted.
    """
    handle.require_open()
    packages = handle.packages
    tx = handle.tx
    type_args = [handle.context_types.config_type, capability.type_tag(packages)]
    cap = tx.move_call(
        packages.target(PackageKey.ACCOUNT_PROTOCOL, "account", "borrow_cap"),
        type_arguments=type_args,
        arguments=[handle.account, handle.registry, handle.version_witness()],
    )
    logger.debug("capability.borrowed", intent_id=handle.intent_id, capability=capability.name)
    yield cap
    tx.move_call(
        packages.target(PackageKey.ACCOUNT_PROTOCOL, "account", "return_cap"),
        type_arguments=type_args,
        arguments=[handle.account, cap, handle.version_witness()],
    )
    logger.debug("capability.returned", intent_id=handle.intent_id, capability=capability.name)
