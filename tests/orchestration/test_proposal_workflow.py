"""
Proposal lifecycle on the simulated ledger.

Outcome intents, finalization, winning-outcome replay, REJECT, expiry and the
janitor calls.
"""

import pytest

from intent_spine.core.errors import ExternalRejection, ValidationError
from intent_spine.execution.config import ExecutionConfig
from intent_spine.ledger.simulated import DEFAULT_INTENT_EXPIRY_MS
from intent_spine.orchestration.proposal import (
    DEFAULT_MAX_ACTIONS_PER_OUTCOME,
    REJECT_OUTCOME,
    ProposalWorkflow,
)
from intent_spine.staging.adapters import stage_batch

from _support.harness import resolve_proposal, seed_proposal_target
from _support.samples import CRANKER, CREATOR, SUI

YES = [{"type": "memo", "message": "yes"}, {"type": "mint", "coin_type": SUI, "amount": 100}]
YES_CONFIGS = [ExecutionConfig.build("memo", message="yes"), ExecutionConfig.build("mint", coin_type=SUI, amount=100)]


class TestOutcomeIntents:
    def test_reject_outcome_carries_nothing(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        with pytest.raises(ValidationError) as exc_info:
            proposals.add_actions_to_outcome(target, REJECT_OUTCOME, YES)
        assert exc_info.value.context.field == "outcome"
        assert exc_info.value.context.intent_id == target.proposal_id

    def test_negative_outcome(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        with pytest.raises(ValidationError):
            proposals.add_actions_to_outcome(target, -1, YES)

    def test_outcome_out_of_range(self, ledger, proposals):
        target = seed_proposal_target(ledger, outcome_count=2)
        with pytest.raises(ExternalRejection, match="Outcome 2 cannot carry actions"):
            proposals.add_actions_to_outcome(target, 2, YES)

    def test_one_intent_per_outcome(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        proposals.add_actions_to_outcome(target, 1, YES)
        with pytest.raises(ExternalRejection, match="Outcome 1 already has an intent"):
            proposals.add_actions_to_outcome(target, 1, YES)

    def test_action_limit(self, ledger, packages):
        workflow = ProposalWorkflow(ledger, packages, sender=CREATOR, max_actions_per_outcome=1)
        target = seed_proposal_target(ledger)
        with pytest.raises(ExternalRejection, match="2 actions exceed the limit of 1"):
            workflow.add_actions_to_outcome(target, 1, YES)

    def test_default_limit(self, proposals):
        assert proposals.max_actions_per_outcome == DEFAULT_MAX_ACTIONS_PER_OUTCOME

    def test_launchpad_batch_refused(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        with pytest.raises(ValidationError, match="launchpad batch"):
            proposals.add_actions_to_outcome(target, 1, stage_batch("launchpad", [{"type": "memo", "message": "x"}]))

    def test_launchpad_only_kind(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        with pytest.raises(ValidationError):
            proposals.add_actions_to_outcome(target, 1, [
                {"type": "return_treasury_cap", "coin_type": SUI, "recipient": "0xbeef"},
            ])

    def test_locked_after_finalize(self, ledger, proposals):
        target = seed_proposal_target(ledger, outcome_count=3)
        proposals.add_actions_to_outcome(target, 1, YES)
        resolve_proposal(ledger, proposals, target, winner=1)
        with pytest.raises(ExternalRejection, match="intents are locked"):
            proposals.add_actions_to_outcome(target, 2, YES)


class TestFinalizeAndExecute:
    def test_winner_replayed(self, ledger, proposals):
        target = seed_proposal_target(ledger, outcome_count=3)
        proposals.add_actions_to_outcome(target, 1, [{"type": "memo", "message": "one"}])
        proposals.add_actions_to_outcome(target, 2, YES)
        assert resolve_proposal(ledger, proposals, target, winner=2) == 2

        result = proposals.execute_actions(target, YES_CONFIGS, sender=CRANKER)
        assert result.kinds == ("memo", "mint")
        assert [a.kind for a in ledger.executed_actions(target.proposal_id)] == ["memo", "mint"]

    def test_finalize_before_trading_ends(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        ledger.set_market_winner(target.proposal_id, 1)
        with pytest.raises(ExternalRejection, match="Trading period has not ended"):
            proposals.finalize_proposal(target)

    def test_finalize_twice(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        resolve_proposal(ledger, proposals, target, winner=1)
        with pytest.raises(ExternalRejection, match="Proposal already finalized"):
            proposals.finalize_proposal(target)

    def test_execute_unresolved(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        proposals.add_actions_to_outcome(target, 1, YES)
        with pytest.raises(ExternalRejection, match="Proposal outcome is not resolved"):
            proposals.execute_actions(target, YES_CONFIGS)

    def test_reject_wins(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        proposals.add_actions_to_outcome(target, 1, YES)
        assert resolve_proposal(ledger, proposals, target, winner=REJECT_OUTCOME) == REJECT_OUTCOME
        with pytest.raises(ExternalRejection, match="Reject outcome won"):
            proposals.execute_actions(target, YES_CONFIGS)

    def test_winner_without_intent(self, ledger, proposals):
        target = seed_proposal_target(ledger, outcome_count=3)
        proposals.add_actions_to_outcome(target, 1, YES)
        resolve_proposal(ledger, proposals, target, winner=2)
        with pytest.raises(ExternalRejection, match="Outcome 2 has no intent"):
            proposals.execute_actions(target, [])

    def test_expired(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        proposals.add_actions_to_outcome(target, 1, YES)
        resolve_proposal(ledger, proposals, target, winner=1)
        ledger.advance_clock(DEFAULT_INTENT_EXPIRY_MS + 1)
        with pytest.raises(ExternalRejection, match="Intent expired"):
            proposals.execute_actions(target, YES_CONFIGS)

    def test_execute_twice(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        proposals.add_actions_to_outcome(target, 1, YES)
        resolve_proposal(ledger, proposals, target, winner=1)
        proposals.execute_actions(target, YES_CONFIGS)
        with pytest.raises(ExternalRejection, match="Proposal intent already executed"):
            proposals.execute_actions(target, YES_CONFIGS)


class TestJanitor:
    def test_losing_intents_are_cleaned(self, ledger, proposals):
        target = seed_proposal_target(ledger, outcome_count=3)
        proposals.add_actions_to_outcome(target, 1, YES)
        proposals.add_actions_to_outcome(target, 2, [{"type": "memo", "message": "two"}])
        assert proposals.check_maintenance_needed(target.account_id) is False

        resolve_proposal(ledger, proposals, target, winner=1)
        assert proposals.check_maintenance_needed(target.account_id) is True
        assert proposals.cleanup_expired_intents(target.account_id) == 1
        assert proposals.check_maintenance_needed(target.account_id) is False
        assert proposals.cleanup_expired_intents(target.account_id) == 0

    def test_lapsed_winner_is_cleaned(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        proposals.add_actions_to_outcome(target, 1, YES)
        resolve_proposal(ledger, proposals, target, winner=1)
        assert proposals.check_maintenance_needed(target.account_id) is False

        ledger.advance_clock(DEFAULT_INTENT_EXPIRY_MS + 1)
        assert proposals.cleanup_expired_intents(target.account_id) == 1

    def test_executed_winner_is_kept(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        proposals.add_actions_to_outcome(target, 1, YES)
        resolve_proposal(ledger, proposals, target, winner=1)
        proposals.execute_actions(target, YES_CONFIGS)
        ledger.advance_clock(DEFAULT_INTENT_EXPIRY_MS + 1)
        assert proposals.cleanup_expired_intents(target.account_id) == 0

    def test_cleanup_limit(self, ledger, proposals):
        target = seed_proposal_target(ledger, outcome_count=4)
        for outcome in (1, 2, 3):
            proposals.add_actions_to_outcome(target, outcome, [{"type": "memo", "message": str(outcome)}])
        resolve_proposal(ledger, proposals, target, winner=1)
        assert proposals.cleanup_expired_intents(target.account_id, limit=1) == 1
        assert proposals.cleanup_expired_intents(target.account_id) == 1

    def test_cleaned_winner_cannot_execute(self, ledger, proposals):
        target = seed_proposal_target(ledger)
        proposals.add_actions_to_outcome(target, 1, YES)
        resolve_proposal(ledger, proposals, target, winner=1)
        ledger.advance_clock(DEFAULT_INTENT_EXPIRY_MS + 1)
        proposals.cleanup_expired_intents(target.account_id)
        with pytest.raises(ExternalRejection, match="Intent expired"):
            proposals.execute_actions(target, YES_CONFIGS)
