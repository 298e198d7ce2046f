"""artframe sources: list, add, remove and select content sources."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from artframe.cli.common import console, load_cli_config, open_store, resolve_db
from artframe.cli.errors import err_source_not_found, err_write_failed
from artframe.db.models import Source
from artframe.errors import WriteFailure
from artframe.provider.addresses import SOURCES_ADDRESS, source_address

sources_app = typer.Typer(help="Manage content sources.", no_args_is_help=True)

_DbOption = Annotated[
    Path | None,
    typer.Option("--db", help="Path to the artframe database (default from config)."),
]


@sources_app.command("list")
def list_cmd(db: _DbOption = None) -> None:
    """List all sources, selected first."""
    cfg = load_cli_config()
    with open_store(resolve_db(db, cfg)) as store:
        with store.query(SOURCES_ADDRESS) as rows:
            sources = [Source.from_row(r) for r in rows]

    if not sources:
        console.print("[dim]No sources.[/]  Add one with:  artframe sources add <component>")
        return

    table = Table(title="Sources")
    table.add_column("ID", justify="right")
    table.add_column("Component")
    table.add_column("Selected", justify="center")
    table.add_column("Network", justify="center")
    table.add_column("Next", justify="center")
    table.add_column("Description", style="dim")
    for s in sources:
        table.add_row(
            str(s.id),
            s.component_ref,
            "[green]✓[/]" if s.is_selected else "",
            "✓" if s.wants_network else "",
            "✓" if s.supports_next_command else "",
            s.description or "",
        )
    console.print(table)


@sources_app.command("add")
def add_cmd(
    component: Annotated[str, typer.Argument(help="Component reference of the source.")],
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="Human-readable description.")
    ] = None,
    wants_network: Annotated[
        bool, typer.Option("--wants-network", help="Source needs network access.")
    ] = False,
    supports_next: Annotated[
        bool, typer.Option("--supports-next", help="Source supports the next-artwork command.")
    ] = False,
    commands: Annotated[
        str | None, typer.Option("--commands", help="Serialized command list.")
    ] = None,
    db: _DbOption = None,
) -> None:
    """Register a new source."""
    cfg = load_cli_config()
    values: dict[str, object] = {
        "component_ref": component,
        "is_selected": False,
        "wants_network": wants_network,
        "supports_next_command": supports_next,
    }
    if description is not None:
        values["description"] = description
    if commands is not None:
        values["commands"] = commands

    with open_store(resolve_db(db, cfg)) as store:
        try:
            address = store.insert(SOURCES_ADDRESS, values)
        except WriteFailure as exc:
            console.print(err_write_failed(str(exc)))
            raise typer.Exit(1) from exc
    console.print(f"[green]✓[/] Added {component} at {address}")


@sources_app.command("remove")
def remove_cmd(
    source_id: Annotated[int, typer.Argument(min=1, help="ID of the source to remove.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt.")] = False,
    db: _DbOption = None,
) -> None:
    """Remove a source; its artwork is removed with it."""
    cfg = load_cli_config()
    with open_store(resolve_db(db, cfg)) as store:
        address = source_address(source_id)
        with store.query(address, projection=["component_ref"]) as rows:
            existing = rows.fetchone()
        if existing is None:
            console.print(err_source_not_found(source_id))
            raise typer.Exit(0)

        if not yes and not typer.confirm(
            f"Remove source {existing['component_ref']} and its artwork?", default=False
        ):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

        store.delete(address)
    console.print(f"[green]✓[/] Removed: {existing['component_ref']}")


@sources_app.command("select")
def select_cmd(
    source_id: Annotated[int, typer.Argument(min=1, help="ID of the source to select.")],
    db: _DbOption = None,
) -> None:
    """Make one source the selected source, deselecting all others."""
    cfg = load_cli_config()
    with open_store(resolve_db(db, cfg)) as store:
        try:
            with store.batch() as session:
                store.update(SOURCES_ADDRESS, {"is_selected": False}, session=session)
                if not store.update(
                    source_address(source_id), {"is_selected": True}, session=session
                ):
                    raise LookupError(source_id)
        except LookupError:
            console.print(err_source_not_found(source_id))
            raise typer.Exit(1)
    console.print(f"[green]✓[/] Selected source {source_id}")
