"""Change notification: observer registry, broadcast transport and batching.

Two kinds of event leave the store:

- fine-grained: "the resource at this address changed", delivered to
  observers registered on that address (or on an ancestor/descendant of it);
- coarse: "something in the artwork/sources collection changed", delivered
  to broadcast subscribers as an action string.

Outside a batch every recorded change is emitted at once, coarse event
included. Inside a batch changes are buffered on a ChangeSession and emitted
when the batch ends: every buffered address still gets its fine-grained
event, in the order first recorded, but the sources collection gets at most
one coarse event for the whole batch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from artframe.provider.addresses import ARTWORK_ADDRESS, is_sources_address

logger = logging.getLogger(__name__)

ACTION_ARTWORK_CHANGED = "artframe.action.ARTWORK_CHANGED"
ACTION_SOURCES_CHANGED = "artframe.action.SOURCES_CHANGED"

Callback = Callable[[str], None]


class Broadcaster(Protocol):
    """Transport that delivers change events to the outside world."""

    def notify_change(self, address: str) -> None: ...

    def send_broadcast(self, action: str) -> None: ...

    def register_observer(self, address: str, callback: Callback) -> None: ...

    def unregister_observer(self, address: str, callback: Callback) -> None: ...


def _related(registered: str, changed: str) -> bool:
    return (
        registered == changed
        or changed.startswith(registered + "/")
        or registered.startswith(changed + "/")
    )


class LocalBroadcaster:
    """In-process Broadcaster with address observers and action subscribers.

    A failing callback is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._observers: dict[str, list[Callback]] = {}
        self._subscribers: dict[str, list[Callback]] = {}

    def register_observer(self, address: str, callback: Callback) -> None:
        self._observers.setdefault(address, []).append(callback)

    def unregister_observer(self, address: str, callback: Callback) -> None:
        callbacks = self._observers.get(address, [])
        if callback in callbacks:
            callbacks.remove(callback)
        if not callbacks:
            self._observers.pop(address, None)

    def subscribe(self, action: str, callback: Callback) -> None:
        self._subscribers.setdefault(action, []).append(callback)

    def unsubscribe(self, action: str, callback: Callback) -> None:
        callbacks = self._subscribers.get(action, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def notify_change(self, address: str) -> None:
        targets = [
            cb
            for registered, callbacks in list(self._observers.items())
            if _related(registered, address)
            for cb in list(callbacks)
        ]
        for cb in targets:
            _deliver(cb, address)

    def send_broadcast(self, action: str) -> None:
        for cb in list(self._subscribers.get(action, [])):
            _deliver(cb, action)


def _deliver(callback: Callback, payload: str) -> None:
    try:
        callback(payload)
    except Exception:
        logger.exception("Change callback %r failed for %s", callback, payload)


@dataclass
class ChangeSession:
    """Notification state of one batch, owned by whoever opened it.

    ``pending`` is an insertion-ordered set (dict keys) of changed addresses.
    """

    open: bool = True
    pending: dict[str, None] = field(default_factory=dict)

    def add(self, address: str) -> None:
        self.pending.setdefault(address, None)

    @property
    def addresses(self) -> list[str]:
        return list(self.pending)


class NotificationCoalescer:
    """Records changes and turns them into fine-grained and coarse events."""

    def __init__(self, broadcaster: Broadcaster) -> None:
        self.broadcaster = broadcaster

    def begin_batch(self) -> ChangeSession:
        """Open a batch. Pair with end_batch() or discard()."""
        return ChangeSession()

    def record_change(self, address: str, session: ChangeSession | None = None) -> None:
        """Buffer *address* on an open *session*, or emit it immediately."""
        if session is not None and session.open:
            session.add(address)
            return
        self._emit(address)
        if address == ARTWORK_ADDRESS:
            self._broadcast(ACTION_ARTWORK_CHANGED)
        elif is_sources_address(address):
            self._broadcast(ACTION_SOURCES_CHANGED)

    def end_batch(self, session: ChangeSession) -> None:
        """Close *session* and emit its buffered changes.

        One fine-grained event per buffered address in insertion order, one
        artwork broadcast per artwork address, and a single sources
        broadcast if any source address changed. Pending changes are cleared
        even if emission fails.
        """
        session.open = False
        sources_changed = False
        try:
            for address in session.addresses:
                self._emit(address)
                if address == ARTWORK_ADDRESS:
                    self._broadcast(ACTION_ARTWORK_CHANGED)
                elif is_sources_address(address):
                    sources_changed = True
            if sources_changed:
                self._broadcast(ACTION_SOURCES_CHANGED)
        finally:
            session.pending.clear()

    def discard(self, session: ChangeSession) -> None:
        """Close *session* without emitting anything (its writes rolled back)."""
        session.open = False
        if session.pending:
            logger.debug("Discarding %d pending change(s)", len(session.pending))
        session.pending.clear()

    def _emit(self, address: str) -> None:
        try:
            self.broadcaster.notify_change(address)
        except Exception:
            logger.exception("Failed to notify change for %s", address)

    def _broadcast(self, action: str) -> None:
        try:
            self.broadcaster.send_broadcast(action)
        except Exception:
            logger.exception("Failed to send broadcast %s", action)
