"""Tests for the kind → handler DispatchTable."""

import pytest

from intent_spine.catalog.definitions import ActionCategory
from intent_spine.core.errors import CatalogLookupError, ConfigError, MissingField, ValidationError
from intent_spine.execution.config import ExecutionConfig
from intent_spine.execution.context import begin_execution, abort_execution
from intent_spine.execution.dispatch import DispatchTable, get_default_table, reset_default_table
from intent_spine.execution.executor import execute_batch

from _support.harness import RecordingTable, raise_config, resolve_proposal, seed_proposal_target, settle_raise
from _support.samples import CRANKER, SUI


def noop(handle, definition, config):
    """Does nothing."""
    return handle.executable


class TestRegistration:
    def test_register_and_get(self):
        table = DispatchTable()
        table.register("memo", noop, description="test memo")
        assert table.has("memo")
        assert table.get("memo") is noop
        assert len(table) == 1
        assert table.get_metadata("memo") == {"kind": "memo", "handler": "noop", "description": "test memo"}

    def test_description_defaults_to_docstring(self):
        table = DispatchTable()
        table.register("memo", noop)
        assert table.get_metadata("memo")["description"] == "Does nothing."

    def test_get_unknown(self):
        table = DispatchTable()
        table.register("memo", noop)
        with pytest.raises(CatalogLookupError, match="No execution handler registered") as exc_info:
            table.get("mint")
        assert exc_info.value.available == ["memo"]

    def test_unregister_and_clear(self):
        table = DispatchTable()
        table.register("memo", noop)
        table.register("mint", noop)
        assert table.unregister("memo") is True
        assert table.unregister("memo") is False
        assert table.list_handlers() == ["mint"]
        table.clear()
        assert len(table) == 0
        assert table.get_metadata("mint") is None

    def test_register_category_keeps_specific_handlers(self, catalog):
        table = DispatchTable()
        table.register("mint", noop)
        table.register_category(ActionCategory.CURRENCY, lambda h, d, c: None)
        currency = {d.id for d in catalog.list_by_category(ActionCategory.CURRENCY)}
        assert set(table.list_handlers()) == currency
        assert table.get("mint") is noop


class TestCompleteness:
    def test_builtin_table_is_complete(self, catalog):
        table = DispatchTable.builtin()
        table.verify_complete()
        assert set(table.list_handlers()) == set(catalog.action_ids())

    def test_empty_table_lists_missing_kinds(self, catalog):
        with pytest.raises(ConfigError) as exc_info:
            DispatchTable().verify_complete()
        assert exc_info.value.context.metadata["missing"] == [d.id for d in catalog]

    def test_default_table_is_cached(self):
        first = get_default_table()
        assert get_default_table() is first
        reset_default_table()
        assert get_default_table() is not first


class TestDispatch:
    def test_proposal_replays_in_staged_order(self, ledger, packages, proposals):
        """Repeated kinds are dispatched once per occurrence, in order."""
        target = seed_proposal_target(ledger)
        proposals.add_actions_to_outcome(target, 1, [
            {"type": "memo", "message": "a"},
            {"type": "memo", "message": "b"},
            {"type": "mint", "coin_type": SUI, "amount": 10},
            {"type": "memo", "message": "a"},
        ])
        resolve_proposal(ledger, proposals, target, winner=1)

        table = RecordingTable()
        configs = [
            ExecutionConfig.build("memo", message="a"),
            ExecutionConfig.build("memo", message="b"),
            ExecutionConfig.build("mint", coin_type=SUI, amount=10),
            ExecutionConfig.build("memo", message="a"),
        ]
        result = execute_batch(ledger, packages, target, configs, sender=CRANKER, table=table)
        assert table.kinds == ["memo", "memo", "mint", "memo"]
        assert result.kinds == ("memo", "memo", "mint", "memo")
        assert [(a.index, a.kind) for a in ledger.executed_actions(target.proposal_id)] == [
            (0, "memo"), (1, "memo"), (2, "mint"), (3, "memo"),
        ]

    def test_kind_outside_context(self, ledger, packages, launchpad):
        """A proposal-only kind is refused on a launchpad handle before any call."""
        ref = launchpad.create_raise_with_actions(raise_config(), [{"type": "memo", "message": "gm"}])
        ref = settle_raise(ledger, launchpad, ref, contribution=20_000)
        handle = begin_execution(ledger, packages, ref.target(), sender=CRANKER)
        calls_before = len(handle.tx.commands)
        with pytest.raises(ValidationError, match="cannot execute in a launchpad intent"):
            get_default_table().dispatch(handle, ExecutionConfig.build("set_factory_paused", paused=True))
        assert len(handle.tx.commands) == calls_before
        assert handle.dispatched == []
        abort_execution(handle)

    def test_return_metadata_needs_key_type(self, ledger, packages, launchpad):
        """A metadata return without its key type is refused before any call is composed."""
        ref = launchpad.create_raise_with_actions(raise_config(), [{"type": "memo", "message": "gm"}])
        ref = settle_raise(ledger, launchpad, ref, contribution=20_000)
        handle = begin_execution(ledger, packages, ref.target(), sender=CRANKER)
        calls_before = len(handle.tx.commands)
        config = ExecutionConfig.build("return_metadata", coin_type=SUI, recipient="0xbeef")
        with pytest.raises(MissingField) as exc_info:
            get_default_table().dispatch(handle, config)
        assert exc_info.value.name == "key_type"
        assert exc_info.value.context.action_kind == "return_metadata"
        assert len(handle.tx.commands) == calls_before
        assert handle.dispatched == []
        abort_execution(handle)

    def test_failure_mid_batch_aborts_and_submits_nothing(self, ledger, packages, launchpad):
        ref = launchpad.create_raise_with_actions(raise_config(), [
            {"type": "memo", "message": "a"},
            {"type": "mint", "coin_type": SUI, "amount": 1},
        ])
        ref = settle_raise(ledger, launchpad, ref, contribution=20_000)
        table = DispatchTable()
        table.register("memo", get_default_table().get("memo"))
        with pytest.raises(CatalogLookupError) as exc_info:
            execute_batch(ledger, packages, ref.target(), [
                ExecutionConfig.build("memo", message="a"),
                ExecutionConfig.build("mint", coin_type=SUI, amount=1),
            ], sender=CRANKER, table=table)
        assert exc_info.value.context.batch_index == 1
        assert ledger.executed_actions(ref.raise_id) == []
