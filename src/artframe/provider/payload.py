"""Read-only access to the current artwork's downloaded bytes.

Whoever downloads artwork records where the file landed; readers then open
it through ``/artwork`` instead of fetching it again. The location lives in
a small YAML preferences file, outside the database.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, BinaryIO

import yaml

from artframe.errors import NotFound, UnrecognizedAddress, UnsupportedMode
from artframe.provider.addresses import ArtworkCollection, resolve

logger = logging.getLogger(__name__)

CURRENT_ARTWORK_LOCATION = "current_artwork_location"

_READ_ONLY = "r"


class Preferences:
    """Key/value preference state persisted as a YAML mapping."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(yaml.safe_dump(data, sort_keys=True), encoding="utf-8")


class PayloadGate:
    """Grants read-only access to the file behind the current artwork."""

    def __init__(self, preferences: Preferences) -> None:
        self.preferences = preferences

    def record_current_artwork_payload_location(self, path: Path | str | None) -> bool:
        """Remember *path* as the current artwork's local file.

        Returns:
            True if stored; False if *path* is not an existing file or the
            preferences could not be written. Never raises.
        """
        if path is None or not Path(path).is_file():
            logger.warning("File %s is not valid", path)
            return False
        try:
            self.preferences.set(CURRENT_ARTWORK_LOCATION, str(Path(path).resolve()))
        except (OSError, yaml.YAMLError):
            logger.exception("Could not record artwork location %s", path)
            return False
        return True

    def current_artwork_payload_location(self) -> Path | None:
        """Return the recorded location, or None if nothing usable is recorded."""
        try:
            location = self.preferences.get(CURRENT_ARTWORK_LOCATION)
        except yaml.YAMLError:
            logger.warning("Preferences file %s is not valid YAML", self.preferences.path)
            return None
        if not isinstance(location, str) or not location:
            return None
        return Path(location)

    def open_current_artwork_payload(self, address: str, mode: str = _READ_ONLY) -> BinaryIO:
        """Open the current artwork file for reading.

        Args:
            address: Must be the artwork collection address.
            mode: Only ``"r"`` is accepted.

        Raises:
            UnrecognizedAddress: *address* is not ``/artwork``.
            UnsupportedMode: *mode* is anything but read-only.
            NotFound: Nothing recorded yet, or the recorded file is gone.
        """
        if not isinstance(resolve(address), ArtworkCollection):
            raise UnrecognizedAddress(address)
        if mode != _READ_ONLY:
            raise UnsupportedMode(
                f"Invalid mode for opening file: {mode!r}. Only 'r' is valid"
            )
        location = self.current_artwork_payload_location()
        if location is None:
            raise NotFound("No artwork image is set")
        if not location.is_file():
            raise NotFound(f"File {location} does not exist")
        return location.open("rb")
