"""Tests for the forward-only migration runner."""

from __future__ import annotations

import logging

from artframe.db.connection import Database
from artframe.db.migrations import FK_VERSION, MIGRATIONS, current_version, run_migrations


def _fresh_conn(tmp_path):
    """Open a new connection without running migrations."""
    db = Database(tmp_path / "test.db")
    return db.connect()


def _table_exists(conn, name: str) -> bool:
    return conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (name,)
    ).fetchone() is not None


def _apply_up_to(conn, version: int) -> None:
    """Bring a fresh database to an older schema version by hand."""
    conn.execute(
        "CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL, "
        "applied_at DATETIME NOT NULL DEFAULT (datetime('now')))"
    )
    for v, sql in MIGRATIONS:
        if v <= version:
            conn.executescript(sql)
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (v,))
    conn.commit()


# --- Bootstrap ---

def test_current_version_zero_on_fresh_db(tmp_path):
    conn = _fresh_conn(tmp_path)
    assert current_version(conn) == 0
    conn.close()


def test_run_migrations_records_version(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    assert current_version(conn) == MIGRATIONS[-1][0]
    conn.close()


def test_migrations_end_at_fk_version():
    assert MIGRATIONS[-1][0] == FK_VERSION
    versions = [v for v, _ in MIGRATIONS]
    assert versions == sorted(versions)


# --- Idempotency ---

def test_run_migrations_idempotent(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    run_migrations(conn)
    count = conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
    assert count == len(MIGRATIONS)
    conn.close()


def test_run_migrations_creates_tables(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    assert _table_exists(conn, "sources")
    assert _table_exists(conn, "artwork")
    conn.close()


# --- Upgrade across the foreign-key version ---

def test_upgrade_from_v1_drops_artwork_keeps_sources(tmp_path):
    conn = _fresh_conn(tmp_path)
    _apply_up_to(conn, 1)
    conn.execute("INSERT INTO sources (component_ref) VALUES ('com.example/.Src')")
    conn.execute("INSERT INTO artwork (source_ref, title) VALUES ('gone', 'Old')")
    conn.commit()

    run_migrations(conn)

    assert current_version(conn) == FK_VERSION
    assert conn.execute("SELECT COUNT(*) FROM artwork").fetchone()[0] == 0
    assert conn.execute("SELECT component_ref FROM sources").fetchone()[0] == "com.example/.Src"
    assert conn.execute("PRAGMA foreign_key_list(artwork)").fetchall()
    conn.close()


def test_upgrade_from_v2_logs_destructive_step(tmp_path, caplog):
    conn = _fresh_conn(tmp_path)
    _apply_up_to(conn, 2)
    with caplog.at_level(logging.WARNING, logger="artframe.db.migrations"):
        run_migrations(conn)
    assert any("dropped and recreated" in r.getMessage() for r in caplog.records)
    conn.close()


def test_fresh_install_does_not_warn(tmp_path, caplog):
    conn = _fresh_conn(tmp_path)
    with caplog.at_level(logging.WARNING, logger="artframe.db.migrations"):
        run_migrations(conn)
    assert not caplog.records
    conn.close()
