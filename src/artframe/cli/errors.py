"""artframe rich error messages: actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from artframe.cli.errors import err_no_db
    console.print(err_no_db(str(db)))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_db(db_path: str) -> str:
    """No database at *db_path*."""
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  artframe init"
    )


def err_source_not_found(source_id: int) -> str:
    """Source id not present in the database."""
    return (
        f"[yellow]Source not found:[/] no source with id {source_id}.\n"
        "  Run:  artframe sources list  to see all sources."
    )


def err_no_artwork() -> str:
    """No current artwork row yet."""
    return (
        "[yellow]No current artwork.[/]\n"
        "  Run:  artframe artwork set --source <component>"
    )


def err_write_failed(detail: str) -> str:
    """The store rejected a write (constraint violation)."""
    return (
        f"[red]Error:[/] The database rejected the write: {detail}\n"
        "  Artwork must reference an existing source, and component references must be unique."
    )


def err_no_payload(detail: str) -> str:
    """No downloaded artwork file is available."""
    return (
        f"[yellow]No artwork file:[/] {detail}\n"
        "  Record one with:  artframe artwork payload <path>"
    )


def err_invalid_payload(path: str) -> str:
    """Path given for the artwork payload is not an existing file."""
    return (
        f"[red]Error:[/] '{path}' is not an existing file.\n"
        "  Pass the path of the downloaded artwork image."
    )


def err_config(detail: str) -> str:
    """Configuration could not be loaded."""
    return (
        f"[red]Error:[/] Invalid configuration: {detail}\n"
        "  Fix artframe.yaml or ~/.artframe/config.yaml."
    )
