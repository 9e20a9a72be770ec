"""
Workflow orchestrators.

MODULE MAP
──────────
1. launchpad.py      ─ LaunchpadWorkflow: raise lifecycle and init actions
2. proposal.py       ─ ProposalWorkflow: per-outcome intents, janitor
3. indexer.py        ─ IndexerClient (httpx)
4. auto_executor.py  ─ AutoExecutor: replay resolved intents from indexer data
"""

from intent_spine.orchestration.auto_executor import AutoExecutor
from intent_spine.orchestration.indexer import IndexerClient, LaunchpadRecord, ProposalRecord
from intent_spine.orchestration.launchpad import (
    UNLIMITED_CAP,
    CreateRaiseConfig,
    LaunchpadWorkflow,
    RaiseRef,
)
from intent_spine.orchestration.proposal import REJECT_OUTCOME, ProposalWorkflow

__all__ = [
    "AutoExecutor",
    "IndexerClient",
    "LaunchpadRecord",
    "ProposalRecord",
    "UNLIMITED_CAP",
    "CreateRaiseConfig",
    "LaunchpadWorkflow",
    "RaiseRef",
    "REJECT_OUTCOME",
    "ProposalWorkflow",
]
