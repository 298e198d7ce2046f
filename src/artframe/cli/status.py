"""artframe status command.

Shows the database, the registered sources, the current artwork and whether
its image file is available.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.panel import Panel

from artframe.cli.common import (
    console,
    load_cli_config,
    open_db,
    payload_gate,
    resolve_db,
    resolve_prefs,
)
from artframe.db.migrations import current_version
from artframe.db.models import Artwork, Source
from artframe.provider.addresses import ARTWORK_ADDRESS, SOURCES_ADDRESS
from artframe.provider.store import ArtworkStore


def status_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the artframe database (default from config)."),
    ] = None,
    prefs: Annotated[
        Path | None,
        typer.Option("--prefs", help="Path to the preferences file (default from config)."),
    ] = None,
) -> None:
    """Show database, sources and current artwork."""
    cfg = load_cli_config()
    db_path = resolve_db(db, cfg)

    if not db_path.exists():
        console.print(
            Panel(
                f"[yellow]No database at {db_path}.[/]\n"
                "  Run:  artframe init",
                title="[bold]Database[/]",
                expand=False,
            )
        )
        raise typer.Exit(0)

    conn = open_db(db_path)
    try:
        store = ArtworkStore(conn)
        with store.query(SOURCES_ADDRESS) as rows:
            sources = [Source.from_row(r) for r in rows]
        with store.query(ARTWORK_ADDRESS) as rows:
            row = rows.fetchone()
        version = current_version(conn)
    finally:
        conn.close()

    size_kb = db_path.stat().st_size / 1024
    console.print(
        Panel(
            f"Path:    {db_path} ({size_kb:.1f} KB)\nSchema:  v{version}",
            title="[bold]Database[/]",
            expand=False,
        )
    )

    selected = next((s.component_ref for s in sources if s.is_selected), None)
    lines = [f"Sources: [bold]{len(sources)}[/]"]
    lines.append(f"Selected: {selected}" if selected else "[dim]No source selected.[/]")
    console.print(Panel("\n".join(lines), title="[bold]Sources[/]", expand=False))

    if row is None:
        art_lines = ["[dim]No current artwork.[/]"]
    else:
        art = Artwork.from_row(row)
        art_lines = [
            f"Title:   [bold]{art.title or '—'}[/]",
            f"Byline:  {art.byline or '—'}",
            f"Source:  {art.source_ref}",
        ]
    location = payload_gate(resolve_prefs(prefs, cfg)).current_artwork_payload_location()
    if location is None:
        art_lines.append("File:    [dim]none recorded[/]")
    elif location.is_file():
        art_lines.append(f"File:    {location} [green]✓[/]")
    else:
        art_lines.append(f"File:    {location} [yellow]✗ missing[/]")
    console.print(Panel("\n".join(art_lines), title="[bold]Artwork[/]", expand=False))
