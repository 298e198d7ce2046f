"""artframe database layer."""

from artframe.db.connection import Database
from artframe.db.migrations import FK_VERSION, MIGRATIONS, current_version, run_migrations
from artframe.db.schema import initialize

__all__ = [
    "Database",
    "initialize",
    "run_migrations",
    "current_version",
    "MIGRATIONS",
    "FK_VERSION",
]
