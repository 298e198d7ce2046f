"""artframe CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from artframe.cli.artwork import artwork_app
from artframe.cli.init import init_cmd
from artframe.cli.sources import sources_app
from artframe.cli.status import status_cmd


def _version() -> str:
    try:
        return importlib.metadata.version("artframe")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"artframe {_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="artframe",
    help=(
        "artframe: local store for artwork sources and the current artwork.\n\n"
        "  artframe sources   Manage the sources that produce artwork.\n"
        "  artframe artwork   Show or set the current artwork and its image file."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """artframe: local store for artwork sources and the current artwork."""


app.command("init")(init_cmd)
app.command("status")(status_cmd)
app.add_typer(sources_app, name="sources")
app.add_typer(artwork_app, name="artwork")


@app.command("version")
def version_cmd() -> None:
    """Show the installed artframe version."""
    typer.echo(f"artframe {_version()}")


if __name__ == "__main__":
    app()
