"""
intent-spine: outcome-gated intent batches for futarchy governance accounts.

A batch of actions is staged against a raise or a proposal outcome, locked,
and replayed exactly once after the outcome resolves. Every representation
of an action (staging call, execution call, indexer record) is derived from
one catalog entry.

Layers:
    catalog        ─ ActionDefinition table and lookups
    staging        ─ SpecBuilder and per-kind adapters
    execution      ─ single-use ExecutionHandle, DispatchTable, execute_batch
    conversion     ─ indexer record → ExecutionConfig
    orchestration  ─ launchpad / proposal workflows, auto-executor
    ledger         ─ transaction composition and the ledger boundary
"""

__version__ = "0.4.0"

from intent_spine.catalog import ActionCatalog, ActionDefinition, IntentContext, get_default_catalog
from intent_spine.conversion import ActionConverter, convert, convert_batch, validate_and_convert
from intent_spine.core import configure_logging, get_logger
from intent_spine.core.errors import IntentError
from intent_spine.core.settings import IntentSettings, get_settings
from intent_spine.execution import (
    DispatchTable,
    ExecutionConfig,
    ExecutionHandle,
    LaunchpadTarget,
    ProposalTarget,
    begin_execution,
    dispatch,
    execute_batch,
    finalize_execution,
)
from intent_spine.orchestration import AutoExecutor, IndexerClient, LaunchpadWorkflow, ProposalWorkflow
from intent_spine.staging import SpecBuilder, stage_actions, stage_batch

__all__ = [
    "__version__",
    "ActionCatalog",
    "ActionDefinition",
    "IntentContext",
    "get_default_catalog",
    "ActionConverter",
    "convert",
    "convert_batch",
    "validate_and_convert",
    "configure_logging",
    "get_logger",
    "IntentError",
    "IntentSettings",
    "get_settings",
    "DispatchTable",
    "ExecutionConfig",
    "ExecutionHandle",
    "LaunchpadTarget",
    "ProposalTarget",
    "begin_execution",
    "dispatch",
    "execute_batch",
    "finalize_execution",
    "AutoExecutor",
    "IndexerClient",
    "LaunchpadWorkflow",
    "ProposalWorkflow",
    "SpecBuilder",
    "stage_actions",
    "stage_batch",
]
