"""artframe artwork: show and set the current artwork, manage its file."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from artframe.cli.common import (
    console,
    load_cli_config,
    open_store,
    payload_gate,
    resolve_db,
    resolve_prefs,
)
from artframe.cli.errors import (
    err_invalid_payload,
    err_no_artwork,
    err_no_payload,
    err_write_failed,
)
from artframe.db.models import Artwork
from artframe.errors import NotFound, WriteFailure
from artframe.provider.addresses import ARTWORK_ADDRESS

artwork_app = typer.Typer(help="Show and set the current artwork.", no_args_is_help=True)

_DbOption = Annotated[
    Path | None,
    typer.Option("--db", help="Path to the artframe database (default from config)."),
]
_PrefsOption = Annotated[
    Path | None,
    typer.Option("--prefs", help="Path to the preferences file (default from config)."),
]


@artwork_app.command("show")
def show_cmd(db: _DbOption = None) -> None:
    """Show the current artwork."""
    cfg = load_cli_config()
    with open_store(resolve_db(db, cfg)) as store:
        with store.query(ARTWORK_ADDRESS) as rows:
            row = rows.fetchone()

    if row is None:
        console.print(err_no_artwork())
        raise typer.Exit(0)

    art = Artwork.from_row(row)
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for name in ("title", "byline", "attribution", "source_ref", "image_uri", "token"):
        table.add_row(name, getattr(art, name) or "[dim]—[/]")
    console.print(table)


@artwork_app.command("set")
def set_cmd(
    source: Annotated[str, typer.Option("--source", "-s", help="Component reference of the source.")],
    image_uri: Annotated[str | None, typer.Option("--image-uri", help="Image location.")] = None,
    title: Annotated[str | None, typer.Option("--title")] = None,
    byline: Annotated[str | None, typer.Option("--byline")] = None,
    attribution: Annotated[str | None, typer.Option("--attribution")] = None,
    token: Annotated[str | None, typer.Option("--token", help="Identity/dedup token.")] = None,
    view_intent: Annotated[str | None, typer.Option("--view-intent")] = None,
    meta_font: Annotated[str | None, typer.Option("--meta-font")] = None,
    db: _DbOption = None,
) -> None:
    """Replace the current artwork."""
    cfg = load_cli_config()
    values = {
        "source_ref": source,
        "image_uri": image_uri,
        "title": title,
        "byline": byline,
        "attribution": attribution,
        "token": token,
        "view_intent": view_intent,
        "meta_font": meta_font,
    }
    with open_store(resolve_db(db, cfg)) as store:
        try:
            store.insert(ARTWORK_ADDRESS, values)
        except WriteFailure as exc:
            console.print(err_write_failed(str(exc)))
            raise typer.Exit(1) from exc
    console.print(f"[green]✓[/] Current artwork set from {source}")


@artwork_app.command("payload")
def payload_cmd(
    path: Annotated[Path, typer.Argument(help="Downloaded image file of the current artwork.")],
    prefs: _PrefsOption = None,
) -> None:
    """Record where the current artwork's image file lives."""
    cfg = load_cli_config()
    gate = payload_gate(resolve_prefs(prefs, cfg))
    if not gate.record_current_artwork_payload_location(path):
        console.print(err_invalid_payload(str(path)))
        raise typer.Exit(1)
    console.print(f"[green]✓[/] Recorded {path.resolve()}")


@artwork_app.command("export")
def export_cmd(
    output: Annotated[Path, typer.Argument(help="Where to write a copy of the image.")],
    prefs: _PrefsOption = None,
) -> None:
    """Copy the current artwork's image file to OUTPUT."""
    cfg = load_cli_config()
    gate = payload_gate(resolve_prefs(prefs, cfg))
    try:
        with gate.open_current_artwork_payload(ARTWORK_ADDRESS) as src:
            with output.open("wb") as dst:
                shutil.copyfileobj(src, dst)
    except NotFound as exc:
        console.print(err_no_payload(str(exc)))
        raise typer.Exit(1) from exc
    console.print(f"[green]✓[/] Wrote {output}")
