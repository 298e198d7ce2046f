"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from artframe.db.connection import Database
from artframe.db.schema import initialize
from artframe.provider.notifications import LocalBroadcaster
from artframe.provider.store import ArtworkStore


class RecordingBroadcaster(LocalBroadcaster):
    """LocalBroadcaster that also keeps every event it delivers, in order."""

    def __init__(self) -> None:
        super().__init__()
        self.changes: list[str] = []
        self.broadcasts: list[str] = []

    def notify_change(self, address: str) -> None:
        self.changes.append(address)
        super().notify_change(address)

    def send_broadcast(self, action: str) -> None:
        self.broadcasts.append(action)
        super().send_broadcast(action)

    def reset(self) -> None:
        self.changes.clear()
        self.broadcasts.clear()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep tests away from ~/.artframe, the CWD's artframe.yaml and ARTFRAME_* vars."""
    monkeypatch.setattr(
        "artframe.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global" / "config.yaml"
    )
    for var in ("ARTFRAME_DB", "ARTFRAME_PREFERENCES", "ARTFRAME_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / "artframe.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def store(tmp_db, broadcaster):
    return ArtworkStore(tmp_db, broadcaster)
