"""
Type-argument arity across the whole catalog.

For every definition, the staging call carries exactly the declared slots and
the execution call carries the shape's fixed arguments plus the same slots,
in the same order, at the shape's slot position.
"""

import pytest

from intent_spine.catalog.definitions import IntentContext
from intent_spine.catalog.shapes import SLOTS
from intent_spine.catalog.table import ALL_ACTIONS
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import LaunchpadTarget, ProposalTarget, abort_execution, begin_execution
from intent_spine.execution.dispatch import dispatch
from intent_spine.ledger.transaction import Transaction
from intent_spine.staging.adapters import stage_action
from intent_spine.staging.builder import IntentBatch, SpecBuilder

from _support.samples import ASSET, CRANKER, LP, STABLE, sample_config, sample_extras


def _target(context):
    if context is IntentContext.LAUNCHPAD:
        return LaunchpadTarget("0x501", "0x502", ASSET, STABLE)
    return ProposalTarget("0x601", "0x602", "0x603", "0x604", ASSET, STABLE, LP)


@pytest.mark.parametrize("context", list(IntentContext), ids=lambda c: c.value)
@pytest.mark.parametrize("definition", ALL_ACTIONS, ids=lambda d: d.id)
def test_staging_and_execution_arity(ledger, packages, catalog, definition, context):
    if not definition.supports(context):
        pytest.skip(f"{definition.id} is not available in {context.value} intents")

    # Resource-bag checks run on submit, so the batch is assembled directly.
    builder = SpecBuilder(context)
    staged = stage_action(builder, definition.id, sample_config(definition))
    n = len(definition.type_params)
    assert len(staged.type_args) == n

    tx = Transaction()
    IntentBatch(builder.batch_ref, context, (staged,), catalog).compose(tx, packages)
    [staging_call] = [c for c in tx.move_calls if c.target == definition.staging_target(packages)]
    assert staging_call.type_arguments == staged.type_args

    handle = begin_execution(ledger, packages, _target(context), sender=CRANKER)
    config = ExecutionConfig.from_staged(staged, catalog, extras=sample_extras(definition))
    dispatch(handle, config)

    [execution_call] = [c for c in handle.tx.move_calls if c.target == definition.execution_target(packages)]
    template = definition.execution_shape.type_args
    assert len(execution_call.type_arguments) == len(template) - 1 + n
    position = template.index(SLOTS)
    assert execution_call.type_arguments[position:position + n] == staged.type_args
    assert handle.dispatched == [definition.id]
    abort_execution(handle)
