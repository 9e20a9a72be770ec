"""Staged action → the record an indexer would emit for it.

Used by the executor tests and by callers that want to hand a freshly staged
batch to code written against indexer records.
"""

from __future__ import annotations

from typing import Any, Literal

from intent_spine.catalog.registry import ActionCatalog, get_default_catalog
from intent_spine.conversion.models import RawObservedAction
from intent_spine.ledger.packages import PackageConfig
from intent_spine.staging.builder import IntentBatch, StagedAction

ParamEncoding = Literal["keyed", "flat"]


def project_staged(
    action: StagedAction,
    *,
    catalog: ActionCatalog | None = None,
    packages: PackageConfig | None = None,
    encoding: ParamEncoding = "keyed",
) -> RawObservedAction:
    """
    Project one staged action.

    The marker type carries the type slots as generic parameters in declared
    order; no inline ``coin_type`` is emitted. With ``packages`` the marker
    uses the deployed address instead of the named alias.
    """
    definition = (catalog or get_default_catalog()).lookup_by_id(action.kind)
    marker = definition.marker_type_for(packages) if packages is not None else definition.marker_type
    if action.type_args:
        marker = f"{marker}<{', '.join(action.type_args)}>"

    projected = {
        p.wire_name: p.project(action.values[p.name])
        for p in definition.params
        if action.values.get(p.name) is not None
    }
    params: list[dict[str, Any]] | dict[str, Any]
    if encoding == "flat":
        types = {p.wire_name: p.type.value for p in definition.params}
        params = [{"type": types[name], "name": name, "value": value} for name, value in projected.items()]
    else:
        params = projected

    return RawObservedAction.model_validate({
        "index": action.index,
        "type": action.kind,
        "fullType": marker,
        "packageId": packages.address(definition.package) if packages is not None else None,
        "params": params,
        "isKnown": True,
        "phase": "staged",
    })


def project_batch(batch: IntentBatch, **kwargs: Any) -> list[RawObservedAction]:
    kwargs.setdefault("catalog", batch.catalog)
    return [project_staged(action, **kwargs) for action in batch.actions]
