"""Addressable resources: address resolution, CRUD, notifications, payloads."""

from artframe.provider.addresses import (
    ARTWORK_ADDRESS,
    SOURCES_ADDRESS,
    ArtworkCollection,
    SourceItem,
    SourcesCollection,
    kind_of,
    resolve,
    source_address,
)
from artframe.provider.notifications import (
    ACTION_ARTWORK_CHANGED,
    ACTION_SOURCES_CHANGED,
    ChangeSession,
    LocalBroadcaster,
    NotificationCoalescer,
)
from artframe.provider.payload import PayloadGate, Preferences
from artframe.provider.store import (
    ArtworkStore,
    DeleteOp,
    InsertOp,
    OperationResult,
    ResultSet,
    UpdateOp,
    UpsertOutcome,
)

__all__ = [
    "ARTWORK_ADDRESS",
    "SOURCES_ADDRESS",
    "ACTION_ARTWORK_CHANGED",
    "ACTION_SOURCES_CHANGED",
    "ArtworkCollection",
    "SourcesCollection",
    "SourceItem",
    "resolve",
    "kind_of",
    "source_address",
    "ChangeSession",
    "LocalBroadcaster",
    "NotificationCoalescer",
    "ArtworkStore",
    "ResultSet",
    "UpsertOutcome",
    "InsertOp",
    "UpdateOp",
    "DeleteOp",
    "OperationResult",
    "PayloadGate",
    "Preferences",
]
