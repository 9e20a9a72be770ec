"""
CLI: ``intent-spine convert`` — check indexer action records offline.

Reads a JSON array of action records (or an indexer payload holding one) and
reports, per index, the execution config it converts to or why it cannot.
Exits 1 when any record fails, so it can gate a cranker run.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer

from intent_spine.cli.utils import fail, print_json, print_table
from intent_spine.conversion.converter import ActionConverter
from intent_spine.core.errors import ConfigError
from intent_spine.core.settings import get_settings

_ACTION_KEYS = ("actions", "success_actions", "successActions", "staged_actions", "stagedActions")


def _read_json(source: str) -> Any:
    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    except OSError as e:
        fail(f"Cannot read {source}: {e.strerror or e}")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        fail(f"{source} is not valid JSON: {e}")


def extract_records(payload: Any) -> list[dict[str, Any]]:
    """The record list inside ``payload``.

    Accepts a bare list, ``{"data": …}`` envelopes and the first action-list
    key of a launchpad or proposal record. For ``staged_actions`` the single
    outcome present is used.
    """
    if isinstance(payload, dict) and isinstance(payload.get("data"), (dict, list)):
        payload = payload["data"]
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _ACTION_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
            if isinstance(value, dict) and len(value) == 1:
                [records] = value.values()
                return records
    raise ValueError("No action record list found in payload")


def convert_records(
    source: str = typer.Argument(..., help="JSON file with action records, or - for stdin."),
    overrides_file: Path | None = typer.Option(
        None, "--overrides", help="JSON object mapping record index to extra fields (lp_type, ...).",
    ),
    bind: bool = typer.Option(
        False, "--bind", help="Also match deployed-address marker types (needs INTENT_* package ids).",
    ),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Convert indexer action records to execution configs."""
    try:
        records = extract_records(_read_json(source))
    except ValueError as e:
        fail(str(e))

    overrides = None
    if overrides_file is not None:
        overrides = {int(k): v for k, v in json.loads(overrides_file.read_text(encoding="utf-8")).items()}

    packages = None
    if bind:
        try:
            packages = get_settings().packages()
        except ConfigError as e:
            fail(e)

    report = ActionConverter(packages=packages).validate_and_convert(records, overrides=overrides)

    if json_out:
        print_json(report.to_dict())
    elif report.success:
        print_table(
            [
                {
                    "index": i,
                    "kind": c.kind,
                    "type_args": {s.value: v for s, v in c.type_args.items()},
                    "params": dict(c.params),
                }
                for i, c in enumerate(report.configs)
            ],
            title=f"{len(report.configs)} action(s) convert",
        )
    else:
        print_table([e.to_dict() for e in report.errors], title=f"{len(report.errors)} action(s) failed")

    if not report.success:
        raise typer.Exit(code=1)
