"""Helpers shared by the artframe CLI commands."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console

from artframe.cli.errors import err_config, err_no_db
from artframe.config import ArtframeConfig, ConfigError, load_config
from artframe.db.connection import Database
from artframe.db.schema import initialize
from artframe.log import configure_logging
from artframe.provider.payload import PayloadGate, Preferences
from artframe.provider.store import ArtworkStore

console = Console()


def load_cli_config() -> ArtframeConfig:
    """Load config and install logging, exiting with a readable error on failure."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from exc
    configure_logging(cfg.logging.level)
    return cfg


def resolve_db(db: Path | None, cfg: ArtframeConfig) -> Path:
    return db if db is not None else cfg.storage.db_path


def resolve_prefs(prefs: Path | None, cfg: ArtframeConfig) -> Path:
    return prefs if prefs is not None else cfg.storage.preferences_path


def open_db(db_path: Path) -> sqlite3.Connection:
    conn = Database(db_path).connect()
    initialize(conn)
    return conn


@contextmanager
def open_store(db_path: Path) -> Iterator[ArtworkStore]:
    """Yield a store over an existing database; exit 1 if it is missing."""
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)
    conn = open_db(db_path)
    try:
        yield ArtworkStore(conn)
    finally:
        conn.close()


def payload_gate(prefs_path: Path) -> PayloadGate:
    return PayloadGate(Preferences(prefs_path))
