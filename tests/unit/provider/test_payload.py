"""Tests for the current-artwork payload gate and preferences."""

from __future__ import annotations

import logging

import pytest
import yaml

from artframe.errors import NotFound, UnrecognizedAddress, UnsupportedMode
from artframe.provider.payload import CURRENT_ARTWORK_LOCATION, PayloadGate, Preferences


@pytest.fixture
def gate(tmp_path):
    return PayloadGate(Preferences(tmp_path / "prefs" / "preferences.yaml"))


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "current.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0 fake jpeg")
    return path


def test_open_without_recorded_location_is_not_found(gate):
    with pytest.raises(NotFound, match="No artwork image is set"):
        gate.open_current_artwork_payload("/artwork")


def test_not_found_is_file_not_found_error(gate):
    with pytest.raises(FileNotFoundError):
        gate.open_current_artwork_payload("/artwork")


def test_record_then_open_reads_bytes(gate, image):
    assert gate.record_current_artwork_payload_location(image) is True
    with gate.open_current_artwork_payload("/artwork") as fh:
        assert fh.read() == image.read_bytes()


def test_payload_handle_is_read_only(gate, image):
    gate.record_current_artwork_payload_location(image)
    with gate.open_current_artwork_payload("/artwork") as fh:
        assert fh.readable()
        assert not fh.writable()


def test_record_missing_file_returns_false(gate, tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="artframe.provider.payload"):
        assert gate.record_current_artwork_payload_location(tmp_path / "nope.jpg") is False
    assert caplog.records
    assert gate.current_artwork_payload_location() is None


def test_record_none_returns_false(gate):
    assert gate.record_current_artwork_payload_location(None) is False


def test_record_directory_returns_false(gate, tmp_path):
    assert gate.record_current_artwork_payload_location(tmp_path) is False


def test_failed_record_keeps_previous_location(gate, image, tmp_path):
    gate.record_current_artwork_payload_location(image)
    gate.record_current_artwork_payload_location(tmp_path / "missing.jpg")
    assert gate.current_artwork_payload_location() == image.resolve()


def test_recorded_file_deleted_later_is_not_found(gate, image):
    gate.record_current_artwork_payload_location(image)
    image.unlink()
    with pytest.raises(NotFound, match="does not exist"):
        gate.open_current_artwork_payload("/artwork")


@pytest.mark.parametrize("mode", ["w", "rw", "rb", "a", ""])
def test_non_read_mode_rejected(gate, image, mode):
    gate.record_current_artwork_payload_location(image)
    with pytest.raises(UnsupportedMode):
        gate.open_current_artwork_payload("/artwork", mode)


@pytest.mark.parametrize("address", ["/sources", "/sources/1", "/bogus"])
def test_non_artwork_address_rejected(gate, image, address):
    gate.record_current_artwork_payload_location(image)
    with pytest.raises(UnrecognizedAddress):
        gate.open_current_artwork_payload(address)


def test_location_stored_as_absolute_path(gate, image, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    gate.record_current_artwork_payload_location("current.jpg")
    data = yaml.safe_load(gate.preferences.path.read_text(encoding="utf-8"))
    assert data[CURRENT_ARTWORK_LOCATION] == str(image.resolve())


def test_preferences_preserve_other_keys(tmp_path):
    prefs = Preferences(tmp_path / "preferences.yaml")
    prefs.set("theme", "dark")
    prefs.set(CURRENT_ARTWORK_LOCATION, "/tmp/x.jpg")
    assert prefs.get("theme") == "dark"
    assert prefs.get(CURRENT_ARTWORK_LOCATION) == "/tmp/x.jpg"


def test_preferences_missing_or_empty_file(tmp_path):
    path = tmp_path / "preferences.yaml"
    prefs = Preferences(path)
    assert prefs.get("anything") is None
    path.write_text("", encoding="utf-8")
    assert prefs.get("anything", "fallback") == "fallback"


def test_corrupt_preferences_file_is_not_found(tmp_path):
    prefs = tmp_path / "preferences.yaml"
    prefs.write_text("current_artwork_location: [unclosed\n", encoding="utf-8")
    gate = PayloadGate(Preferences(prefs))

    assert gate.current_artwork_payload_location() is None
    with pytest.raises(NotFound):
        gate.open_current_artwork_payload("/artwork")


@pytest.mark.parametrize("value", [42, ["a.jpg"], {"path": "a.jpg"}, True])
def test_non_string_location_is_not_found(tmp_path, value):
    prefs = Preferences(tmp_path / "preferences.yaml")
    prefs.set(CURRENT_ARTWORK_LOCATION, value)
    gate = PayloadGate(prefs)

    with pytest.raises(NotFound, match="No artwork image is set"):
        gate.open_current_artwork_payload("/artwork")
