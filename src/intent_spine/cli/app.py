"""
Root Typer application for the intent-spine CLI.

Offline tooling around the catalog and the converter; nothing here signs or
submits transactions.
"""

from __future__ import annotations

import sys

import typer
from typer import Typer

from intent_spine.core.logging import configure_logging
from intent_spine.core.settings import get_settings

app = Typer(
    name="intent-spine",
    help="intent-spine — stage, convert and replay outcome-gated intent batches.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from intent_spine import __version__

        typer.echo(f"intent-spine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """intent-spine CLI — browse the action catalog and check indexer records."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else "WARNING",
        json_format=settings.log_json,
        service=settings.service_name,
        stream=sys.stderr,
    )


from intent_spine.cli.catalog import app as catalog_app  # noqa: E402
from intent_spine.cli.config import app as config_app  # noqa: E402
from intent_spine.cli.convert import convert_records  # noqa: E402

app.add_typer(catalog_app, name="catalog", help="Browse action definitions.")
app.add_typer(config_app, name="config", help="Settings and package ids.")
app.command("convert")(convert_records)
