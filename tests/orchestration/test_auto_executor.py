"""
AutoExecutor end to end: ledger state from the workflows, records from a
mocked indexer, execution back on the ledger.
"""

from __future__ import annotations

import httpx
import pytest

from intent_spine.core.errors import ConversionError, ExecutionStateError, IndexerError, ValidationError
from intent_spine.orchestration.auto_executor import AutoExecutor
from intent_spine.orchestration.indexer import IndexerClient

from _support.harness import raise_config, resolve_proposal, seed_proposal_target, settle_raise
from _support.samples import ASSET, CRANKER, CREATOR, LP, STABLE

MEMO_GM = {"type": "memo", "fullType": "account_actions::memo::Memo", "params": {"message": "gm"}}
RETURN_CAP = {
    "type": "return_treasury_cap",
    "fullType": f"account_actions::currency::RemoveTreasuryCap<{ASSET}>",
    "params": [{"type": "address", "name": "recipient", "value": CREATOR}],
}


def serving(routes: dict[str, dict]) -> IndexerClient:
    """Indexer answering ``{"data": record}`` for known paths and 404 otherwise."""

    def handler(request: httpx.Request) -> httpx.Response:
        record = routes.get(request.url.path)
        if record is None:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, json={"data": record})

    return IndexerClient("https://indexer.test", transport=httpx.MockTransport(handler))


def cranker(ledger, packages, routes) -> AutoExecutor:
    return AutoExecutor(ledger, packages, serving(routes), sender=CRANKER)


def launchpad_record(ref, state, **fields):
    record = {
        "raiseId": ref.raise_id,
        "daoId": ref.account_id,
        "assetType": ASSET,
        "stableType": STABLE,
        "state": state,
        "successActions": [MEMO_GM],
        "failureActions": [RETURN_CAP],
    }
    record.update(fields)
    return record


def proposal_record(target, winner, actions, **fields):
    record = {
        "proposalId": target.proposal_id,
        "daoId": target.account_id,
        "assetType": ASSET,
        "stableType": STABLE,
        "lpType": LP,
        "escrowId": target.escrow_id,
        "spotPoolId": target.spot_pool_id,
        "winningOutcome": winner,
        "stagedActions": {"1": actions},
    }
    record.update(fields)
    return record


@pytest.fixture
def staged_raise(launchpad):
    """Raise with a memo on success and a treasury-cap return on failure, not yet settled."""
    return launchpad.create_raise_with_actions(
        raise_config(),
        [{"type": "memo", "message": "gm"}],
        [{"type": "return_treasury_cap", "coin_type": ASSET, "recipient": CREATOR}],
    )


@pytest.fixture
def finalized(ledger, proposals):
    target = seed_proposal_target(ledger)
    proposals.add_actions_to_outcome(target, 1, [{"type": "memo", "message": "gm"}])
    resolve_proposal(ledger, proposals, target, winner=1)
    return target


class TestLaunchpad:
    @pytest.mark.asyncio
    async def test_success_intent(self, ledger, packages, launchpad, staged_raise):
        ref = settle_raise(ledger, launchpad, staged_raise, contribution=20_000)
        executor = cranker(ledger, packages, {f"/launchpads/{ref.raise_id}": launchpad_record(ref, "successful")})

        async with executor.indexer:
            result = await executor.execute_launchpad(ref.raise_id)

        assert result.kinds == ("memo",)
        assert [a.kind for a in ledger.executed_actions(ref.raise_id)] == ["memo"]

    @pytest.mark.asyncio
    async def test_failed_state_picks_failure_intent(self, ledger, packages, launchpad, staged_raise):
        ref = settle_raise(ledger, launchpad, staged_raise, contribution=0)
        executor = cranker(ledger, packages, {f"/launchpads/{ref.raise_id}": launchpad_record(ref, "failed")})

        async with executor.indexer:
            result = await executor.run("launchpad", ref.raise_id)

        assert result.kinds == ("return_treasury_cap",)

    @pytest.mark.asyncio
    async def test_explicit_outcome(self, ledger, packages, launchpad, staged_raise):
        ref = settle_raise(ledger, launchpad, staged_raise, contribution=0)
        executor = cranker(ledger, packages, {f"/launchpads/{ref.raise_id}": launchpad_record(ref, None)})

        async with executor.indexer:
            result = await executor.execute_launchpad(ref.raise_id, outcome="failure")

        assert result.kinds == ("return_treasury_cap",)

    @pytest.mark.asyncio
    async def test_no_actions_for_outcome(self, ledger, packages, launchpad, staged_raise):
        ref = settle_raise(ledger, launchpad, staged_raise, contribution=20_000)
        record = launchpad_record(ref, "successful", successActions=[])
        executor = cranker(ledger, packages, {f"/launchpads/{ref.raise_id}": record})

        async with executor.indexer:
            with pytest.raises(ValidationError, match="No success actions") as exc_info:
                await executor.execute_launchpad(ref.raise_id)

        assert exc_info.value.context.field == "success_actions"

    @pytest.mark.asyncio
    async def test_dao_not_created(self, ledger, packages, staged_raise):
        path = f"/launchpads/{staged_raise.raise_id}"
        executor = cranker(ledger, packages, {path: launchpad_record(staged_raise, "active")})

        async with executor.indexer:
            with pytest.raises(ValidationError, match="no DAO account") as exc_info:
                await executor.execute_launchpad(staged_raise.raise_id)

        assert exc_info.value.context.field == "account_id"

    @pytest.mark.asyncio
    async def test_unknown_raise(self, ledger, packages):
        executor = cranker(ledger, packages, {})

        async with executor.indexer:
            with pytest.raises(IndexerError) as exc_info:
                await executor.execute_launchpad("0x404")

        assert exc_info.value.context.http_status == 404
        assert ledger.events == []


class TestProposal:
    @pytest.mark.asyncio
    async def test_winning_outcome(self, ledger, packages, finalized):
        path = f"/proposals/{finalized.proposal_id}"
        executor = cranker(ledger, packages, {path: proposal_record(finalized, 1, [MEMO_GM])})

        async with executor.indexer:
            result = await executor.run("proposal", finalized.proposal_id)

        assert result.intent_id == finalized.proposal_id
        assert [a.kind for a in ledger.executed_actions(finalized.proposal_id)] == ["memo"]

    @pytest.mark.asyncio
    async def test_reject_won(self, ledger, packages, finalized):
        path = f"/proposals/{finalized.proposal_id}"
        executor = cranker(ledger, packages, {path: proposal_record(finalized, 0, [MEMO_GM])})

        async with executor.indexer:
            with pytest.raises(ExecutionStateError, match="REJECT"):
                await executor.execute_proposal(finalized.proposal_id)

        assert ledger.executed_actions(finalized.proposal_id) == []

    @pytest.mark.asyncio
    async def test_not_finalized(self, ledger, packages, finalized):
        path = f"/proposals/{finalized.proposal_id}"
        executor = cranker(ledger, packages, {path: proposal_record(finalized, None, [MEMO_GM])})

        async with executor.indexer:
            with pytest.raises(ExecutionStateError, match="finalize it first"):
                await executor.execute_proposal(finalized.proposal_id)

    @pytest.mark.asyncio
    async def test_missing_escrow(self, ledger, packages, finalized):
        record = proposal_record(finalized, 1, [MEMO_GM])
        del record["escrowId"]
        executor = cranker(ledger, packages, {f"/proposals/{finalized.proposal_id}": record})

        async with executor.indexer:
            with pytest.raises(ValidationError) as exc_info:
                await executor.execute_proposal(finalized.proposal_id)
            result = await executor.execute_proposal(finalized.proposal_id, escrow_id=finalized.escrow_id)

        assert exc_info.value.context.field == "escrow_id"
        assert result.kinds == ("memo",)

    @pytest.mark.asyncio
    async def test_conversion_failure_submits_nothing(self, ledger, packages, finalized):
        """Every record is checked before anything is sent."""
        record = proposal_record(finalized, 1, [MEMO_GM, {"type": "teleport"}, {"type": "warp"}])
        executor = cranker(ledger, packages, {f"/proposals/{finalized.proposal_id}": record})
        events_before = len(ledger.events)

        async with executor.indexer:
            with pytest.raises(ConversionError, match="2 of 3") as exc_info:
                await executor.execute_proposal(finalized.proposal_id)

        err = exc_info.value
        assert err.context.batch_index == 1
        assert [e["index"] for e in err.context.metadata["errors"]] == [1, 2]
        assert len(ledger.events) == events_before
        assert ledger.executed_actions(finalized.proposal_id) == []


@pytest.mark.asyncio
async def test_unknown_intent_kind(ledger, packages):
    executor = cranker(ledger, packages, {})
    async with executor.indexer:
        with pytest.raises(ValidationError, match="Unknown intent kind"):
            await executor.run("bounty", "0x1")
