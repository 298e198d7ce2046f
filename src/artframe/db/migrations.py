"""Forward-only migration runner for the artframe database schema.

Version 3 introduces the artwork → sources foreign key. SQLite cannot add a
foreign key to an existing table, and older artwork rows carry no reliable
source reference, so upgrading from any earlier version drops and recreates
the artwork table. Stored artwork is lost; sources survive.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# schema_version is the bootstrap table, created before migrations run.
_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

_V1_SQL = """
CREATE TABLE IF NOT EXISTS sources (
    id                      INTEGER PRIMARY KEY AUTOINCREMENT,
    component_ref           TEXT,
    is_selected             INTEGER,
    description             TEXT,
    wants_network           INTEGER,
    supports_next_command   INTEGER,
    commands                TEXT
);

CREATE TABLE IF NOT EXISTS artwork (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    source_ref      TEXT,
    image_uri       TEXT,
    title           TEXT,
    byline          TEXT,
    attribution     TEXT,
    token           TEXT,
    meta_font       TEXT,
    view_intent     TEXT
);
"""

# A foreign key parent column must carry a unique index in SQLite.
_V2_SQL = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_sources_component_ref
    ON sources(component_ref);
"""

_V3_SQL = """
DROP TABLE IF EXISTS artwork;

CREATE TABLE artwork (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    source_ref      TEXT,
    image_uri       TEXT,
    title           TEXT,
    byline          TEXT,
    attribution     TEXT,
    token           TEXT,
    meta_font       TEXT,
    view_intent     TEXT,
    CONSTRAINT fk_source_artwork FOREIGN KEY (source_ref)
        REFERENCES sources (component_ref) ON DELETE CASCADE
);
"""

FK_VERSION = 3

# Append-only. Each entry: (version: int, sql: str).
# executescript() issues an implicit COMMIT before running.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
    (2, _V2_SQL),
    (FK_VERSION, _V3_SQL),
]


def current_version(conn: sqlite3.Connection) -> int:
    """Return the highest applied migration version (0 if none applied)."""
    conn.execute(_CREATE_SCHEMA_VERSION)
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    return row[0] if row[0] is not None else 0


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations in ascending version order.

    Idempotent: safe to call on a database at any version.
    """
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()

    current = current_version(conn)

    for version, sql in MIGRATIONS:
        if version > current:
            if version == FK_VERSION and current > 0:
                logger.warning(
                    "Upgrading schema from v%d: artwork table is dropped and recreated",
                    current,
                )
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )
            conn.commit()
            logger.info("Applied schema migration v%d", version)
