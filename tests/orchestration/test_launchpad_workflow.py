"""
Launchpad lifecycle end to end on the simulated ledger.

create → stage → lock → contribute → complete → execute, for both raise
outcomes, with execution configs rebuilt from indexer-style records.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from intent_spine.catalog.params import TypeSlot
from intent_spine.conversion import ActionConverter, project_batch
from intent_spine.core.errors import ExternalRejection, MissingField, ValidationError
from intent_spine.execution.config import ExecutionConfig
from intent_spine.ledger.types import normalize_type
from intent_spine.orchestration.launchpad import LaunchpadWorkflow
from intent_spine.staging.adapters import stage_batch

from _support.harness import RecordingTable, raise_config, settle_raise
from _support.samples import ASSET, CRANKER, CREATOR, POOL_EXTRAS, RECIPIENT, STABLE


def stream_action():
    return {
        "type": "create_stream", "coin_type": STABLE, "vault_name": "treasury", "beneficiary": RECIPIENT,
        "amount_per_iteration": 1_000, "start_time": 1_800_000_000_000, "iterations_total": 12,
        "iteration_period_ms": 2_592_000_000, "max_per_withdrawal": 1_000,
    }


def pool_action():
    return {
        "type": "create_pool_with_mint", "asset_type": ASSET, "stable_type": STABLE, "vault_name": "treasury",
        "asset_amount": 500_000, "stable_amount": 5_000, "fee_bps": 30, "launch_fee_duration_ms": 0,
    }


class TestSuccessPath:
    """A filled raise replays its success intent."""

    def test_stream_and_pool(self, ledger, packages):
        table = RecordingTable()
        workflow = LaunchpadWorkflow(ledger, packages, sender=CREATOR, table=table)
        ref = workflow.create_raise_with_actions(raise_config(), [stream_action(), pool_action()])
        ref = settle_raise(ledger, workflow, ref, contribution=20_000)
        assert ledger.raise_info(ref.raise_id).settled == "success"

        staged = stage_batch("launchpad", [stream_action(), pool_action()])
        records = project_batch(staged)
        configs = ActionConverter().convert_batch(records, overrides={1: POOL_EXTRAS})

        result = workflow.execute_actions(ref, configs, sender=CRANKER)
        assert table.kinds == ["create_stream", "create_pool_with_mint"]
        assert result.kinds == ("create_stream", "create_pool_with_mint")
        assert result.intent_id == ref.raise_id
        assert [a.kind for a in ledger.executed_actions(ref.raise_id)] == ["create_stream", "create_pool_with_mint"]
        assert any(e["type"] == "IntentExecuted" for e in result.receipt.events)

    def test_execute_twice(self, ledger, launchpad):
        ref = launchpad.create_raise_with_actions(raise_config(), [{"type": "memo", "message": "gm"}])
        ref = settle_raise(ledger, launchpad, ref, contribution=20_000)
        launchpad.execute_actions(ref, [ExecutionConfig.build("memo", message="gm")])
        with pytest.raises(ExternalRejection, match="Launchpad intent already executed"):
            launchpad.execute_actions(ref, [ExecutionConfig.build("memo", message="gm")])

    def test_pool_without_extras_submits_nothing(self, ledger, launchpad):
        ref = launchpad.create_raise_with_actions(raise_config(), [pool_action()])
        ref = settle_raise(ledger, launchpad, ref, contribution=20_000)
        events_before = len(ledger.events)
        fields = {k: v for k, v in pool_action().items() if k != "type"}
        config = ExecutionConfig.build("create_pool_with_mint", **fields)
        with pytest.raises(MissingField) as exc_info:
            launchpad.execute_actions(ref, [config])
        assert exc_info.value.context.field == "lp_type"
        assert len(ledger.events) == events_before


class TestFailurePath:
    """An under-subscribed raise replays its failure intent."""

    def test_return_cap_and_metadata(self, ledger, launchpad, packages):
        key_type = f"{packages.account_actions}::currency::CoinMetadataKey<{ASSET}>"
        failure = [
            {"type": "return_treasury_cap", "coin_type": ASSET, "recipient": CREATOR},
            {"type": "return_metadata", "key_type": key_type, "coin_type": ASSET, "recipient": CREATOR},
        ]
        ref = launchpad.create_raise_with_actions(raise_config(), [{"type": "memo", "message": "won"}], failure)
        ref = settle_raise(ledger, launchpad, ref, contribution=0)
        assert ledger.raise_info(ref.raise_id).settled == "failure"

        records = project_batch(stage_batch("launchpad", failure))
        assert all(r.coin_type is None for r in records)
        configs = ActionConverter().convert_batch(records)
        assert configs[1].type_arg(TypeSlot.KEY_TYPE) == normalize_type(key_type)
        assert configs[1].type_arg(TypeSlot.COIN_TYPE) == normalize_type(ASSET)

        result = launchpad.execute_actions(ref, configs, sender=CRANKER)
        assert result.kinds == ("return_treasury_cap", "return_metadata")

    def test_success_configs_refused_on_failed_raise(self, ledger, launchpad):
        ref = launchpad.create_raise_with_actions(
            raise_config(), [{"type": "memo", "message": "won"}],
            [{"type": "return_treasury_cap", "coin_type": ASSET, "recipient": CREATOR}],
        )
        ref = settle_raise(ledger, launchpad, ref, contribution=0)
        with pytest.raises(ExternalRejection, match="is return_treasury_cap, not memo"):
            launchpad.execute_actions(ref, [ExecutionConfig.build("memo", message="won")])


class TestLifecycle:
    def test_config_validation(self):
        with pytest.raises(PydanticValidationError, match="max_raise_amount must be >= min_raise_amount"):
            raise_config(max_raise_amount=1)
        with pytest.raises(PydanticValidationError):
            raise_config(tokens_for_sale=0)
        with pytest.raises(PydanticValidationError, match="same length"):
            raise_config(metadata_keys=("a",))

    def test_bad_action_creates_nothing(self, ledger, launchpad):
        """Both batches are validated before the raise exists."""
        with pytest.raises(ValidationError):
            launchpad.create_raise_with_actions(
                raise_config(), [{"type": "memo", "message": "ok"}], [{"type": "mint", "coin_type": ASSET}],
            )
        assert ledger.events == []

    def test_unknown_outcome(self, launchpad):
        ref = launchpad.create_raise(raise_config())
        with pytest.raises(ValidationError) as exc_info:
            launchpad.stage_actions(ref, "maybe", [])
        assert exc_info.value.context.field == "outcome"

    def test_proposal_batch_refused(self, launchpad):
        batch = stage_batch("proposal", [{"type": "memo", "message": "x"}])
        with pytest.raises(ValidationError, match="proposal batch"):
            launchpad.build_batch(batch)

    def test_target_needs_account(self, launchpad):
        ref = launchpad.create_raise(raise_config())
        with pytest.raises(ValidationError) as exc_info:
            ref.target()
        assert exc_info.value.context.field == "account_id"

    def test_contribution_must_be_positive(self, launchpad):
        ref = launchpad.create_raise(raise_config())
        with pytest.raises(ValidationError):
            launchpad.contribute(ref, 0)

    def test_raise_ref_types_are_normalized(self, launchpad):
        ref = launchpad.create_raise(raise_config())
        assert ref.type_args == [normalize_type(ASSET), normalize_type(STABLE)]


class TestClaims:
    def test_pro_rata_claim(self, ledger, launchpad):
        ref = launchpad.create_raise_with_actions(raise_config(), [{"type": "memo", "message": "gm"}])
        launchpad.contribute(ref, 20_000)
        launchpad.contribute(ref, 10_000, sender=CRANKER)
        ref = settle_raise(ledger, launchpad, ref, contribution=0)

        receipt = launchpad.claim_tokens(ref)
        [claimed] = receipt.events_of("TokensClaimed")
        assert claimed["amount"] == 1_000_000 * 20_000 // 30_000
        with pytest.raises(ExternalRejection, match="Tokens already claimed"):
            launchpad.claim_tokens(ref)

    def test_non_contributor(self, ledger, launchpad):
        ref = launchpad.create_raise_with_actions(raise_config(), [{"type": "memo", "message": "gm"}])
        ref = settle_raise(ledger, launchpad, ref, contribution=20_000)
        with pytest.raises(ExternalRejection, match="Sender did not contribute"):
            launchpad.claim_tokens(ref, sender=CRANKER)

    def test_no_claims_after_failure(self, ledger, launchpad):
        ref = launchpad.create_raise_with_actions(raise_config(), [{"type": "memo", "message": "gm"}])
        ref = settle_raise(ledger, launchpad, ref, contribution=5_000)
        with pytest.raises(ExternalRejection, match="did not complete successfully"):
            launchpad.claim_tokens(ref)
