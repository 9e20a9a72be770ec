"""Spec Builder and staging adapters."""

from intent_spine.staging.adapters import (
    ADAPTERS,
    adapter_for,
    stage_action,
    stage_actions,
    stage_batch,
)
from intent_spine.staging.builder import (
    IntentBatch,
    ResourceBinding,
    SpecBuilder,
    StagedAction,
    new_builder,
)

__all__ = [
    "ADAPTERS",
    "adapter_for",
    "stage_action",
    "stage_actions",
    "stage_batch",
    "IntentBatch",
    "ResourceBinding",
    "SpecBuilder",
    "StagedAction",
    "new_builder",
]
