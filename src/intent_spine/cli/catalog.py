"""
CLI: ``intent-spine catalog`` — browse the action catalog.
"""

from __future__ import annotations

import typer

from intent_spine.catalog.definitions import ActionCategory, IntentContext
from intent_spine.catalog.registry import get_default_catalog
from intent_spine.cli.utils import fail, print_fields, print_json, print_table
from intent_spine.core.errors import CatalogLookupError

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_actions(
    category: str | None = typer.Option(None, "--category", "-c", help="Only this category."),
    context: str | None = typer.Option(None, "--context", help="Only actions stageable in launchpad/proposal."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List action kinds."""
    catalog = get_default_catalog()
    definitions = list(catalog)
    if category:
        if category not in {c.value for c in ActionCategory}:
            fail(f"Unknown category {category!r}")
        definitions = [d for d in definitions if d.category.value == category]
    if context:
        if context not in {c.value for c in IntentContext}:
            fail(f"Unknown context {context!r}; expected launchpad or proposal")
        definitions = [d for d in definitions if d.supports(IntentContext(context))]

    if json_out:
        print_json([d.to_dict() for d in definitions])
        return
    print_table(
        [
            {
                "id": d.id,
                "category": d.category.value,
                "marker_type": d.marker_type,
                "type_params": [s.value for s in d.type_params],
                "contexts": sorted(c.value for c in d.contexts),
            }
            for d in definitions
        ],
        title=f"Actions ({len(definitions)})",
    )


@app.command("show")
def show_action(
    action_id: str = typer.Argument(..., help="Catalog id, e.g. create_stream."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one action definition with its parameters."""
    try:
        definition = get_default_catalog().lookup_by_id(action_id)
    except CatalogLookupError as e:
        fail(e)

    data = definition.to_dict()
    if json_out:
        print_json(data)
        return
    params = data.pop("params")
    print_fields(data, title=definition.display_name)
    print_table(params, title="Parameters")
