"""Admin actions borrow their capability from the account and return it in the same transaction."""

import pytest

from intent_spine.catalog.shapes import FACTORY_OWNER_CAP
from intent_spine.core.errors import ExternalRejection
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import begin_execution, finalize_execution
from intent_spine.execution.dispatch import dispatch
from intent_spine.execution.executor import execute_batch
from intent_spine.ledger.transaction import ObjectArg
from intent_spine.ledger.types import normalize_address, normalize_type

from _support.harness import resolve_proposal, seed_proposal_target
from _support.samples import CRANKER

PAUSE = ExecutionConfig.build("set_factory_paused", paused=True)


@pytest.fixture
def paused_proposal(ledger, proposals):
    target = seed_proposal_target(ledger)
    proposals.add_actions_to_outcome(target, 1, [{"type": "set_factory_paused", "paused": True}])
    resolve_proposal(ledger, proposals, target, winner=1)
    return target


def test_borrow_call_return(ledger, packages, catalog, paused_proposal):
    ledger.grant_capability(paused_proposal.account_id, FACTORY_OWNER_CAP.type_tag(packages))
    result = execute_batch(ledger, packages, paused_proposal, [PAUSE], sender=CRANKER)
    assert result.kinds == ("set_factory_paused",)

    executed = ledger.executed_actions(paused_proposal.proposal_id)
    assert [a.kind for a in executed] == ["set_factory_paused"]
    assert executed[0].target == catalog.lookup_by_id("set_factory_paused").execution_target(packages)


def test_call_sequence(ledger, packages, paused_proposal):
    """borrow_cap, then the admin call, then return_cap, all for the same cap type."""
    ledger.grant_capability(paused_proposal.account_id, FACTORY_OWNER_CAP.type_tag(packages))
    handle = begin_execution(ledger, packages, paused_proposal, sender=CRANKER)
    dispatch(handle, PAUSE)

    calls = handle.tx.move_calls
    functions = [c.function for c in calls]
    borrow = functions.index("borrow_cap")
    admin_call = functions.index("do_set_factory_paused")
    give_back = functions.index("return_cap")
    assert borrow < admin_call < give_back

    assert len(handle.tx.calls_to("account", "borrow_cap")) == 1

    cap_type = normalize_type(FACTORY_OWNER_CAP.type_tag(packages))
    assert calls[borrow].type_arguments[1] == cap_type
    assert calls[give_back].type_arguments[1] == cap_type
    finalize_execution(handle)


def test_missing_capability_rejected(ledger, packages, paused_proposal):
    with pytest.raises(ExternalRejection, match="holds no") as exc_info:
        execute_batch(ledger, packages, paused_proposal, [PAUSE], sender=CRANKER)
    assert exc_info.value.context.call_target.endswith("::account::borrow_cap")
    assert ledger.executed_actions(paused_proposal.proposal_id) == []


def test_admin_call_arguments(ledger, packages, paused_proposal):
    """The admin call takes account, registry and clock; factory and fee manager are not passed."""
    ledger.grant_capability(paused_proposal.account_id, FACTORY_OWNER_CAP.type_tag(packages))
    handle = begin_execution(ledger, packages, paused_proposal, sender=CRANKER)
    dispatch(handle, PAUSE)

    [admin] = [c for c in handle.tx.move_calls if c.function == "do_set_factory_paused"]
    objects = [a.object_id for a in admin.arguments if isinstance(a, ObjectArg)]
    assert objects == [
        normalize_address(paused_proposal.account_id),
        normalize_address(packages.package_registry_id),
        normalize_address(packages.clock_id),
    ]
    assert len(admin.arguments) == 6
    finalize_execution(handle)
