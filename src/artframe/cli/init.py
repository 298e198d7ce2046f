"""artframe init: create the database and bring its schema up to date."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from artframe.cli.common import console, load_cli_config, open_db, resolve_db
from artframe.db.migrations import current_version


def init_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the artframe database (default from config)."),
    ] = None,
) -> None:
    """Create the database (or migrate an existing one)."""
    cfg = load_cli_config()
    db_path = resolve_db(db, cfg)
    existed = db_path.exists()

    conn = open_db(db_path)
    try:
        version = current_version(conn)
    finally:
        conn.close()

    verb = "Migrated" if existed else "Created"
    console.print(f"[green]✓[/] {verb} {db_path} (schema v{version})")
