"""
CLI: ``intent-spine config`` — inspect environment-driven settings.
"""

from __future__ import annotations

import typer

from intent_spine.cli.utils import fail, print_fields, print_json
from intent_spine.core.errors import ConfigError
from intent_spine.core.settings import get_settings

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_settings(json_out: bool = typer.Option(False, "--json")) -> None:
    """Show the resolved INTENT_* settings."""
    data = get_settings().model_dump()
    if json_out:
        print_json(data)
    else:
        print_fields(data, title="Settings")


@app.command("check")
def check_packages(json_out: bool = typer.Option(False, "--json")) -> None:
    """Validate that every package and shared object id is configured."""
    try:
        packages = get_settings().packages()
    except ConfigError as e:
        fail(e)
    if json_out:
        print_json(packages.model_dump())
    else:
        print_fields(packages.model_dump(), title="Packages")
