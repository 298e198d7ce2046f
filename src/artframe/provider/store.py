"""Addressable CRUD store for sources and the current artwork.

Every operation takes a resource address (see artframe.provider.addresses)
and dispatches on its resolved kind:

- ``/artwork`` is a singleton. insert() upserts the row at identity 1;
  update() and delete() are refused.
- ``/sources`` and ``/sources/<id>`` behave like an ordinary table. Item
  addresses AND their identity constraint with any caller filter.

Writes either commit and notify immediately, or join an open batch by
passing its ChangeSession; a batch commits as one transaction and its
notifications are coalesced when it ends.
"""

from __future__ import annotations

import enum
import logging
import sqlite3
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from artframe.db.filters import Eq, Filter, SortKey, and_, compile_filter, compile_order
from artframe.db.models import (
    ARTWORK_COLUMNS,
    ARTWORK_REQUIRED,
    ARTWORK_SINGLETON_ID,
    ARTWORK_TABLE,
    SOURCE_COLUMNS,
    SOURCE_REQUIRED,
    SOURCES_TABLE,
    decode_row,
    encode_values,
)
from artframe.errors import (
    MissingRequiredField,
    UnknownField,
    UnrecognizedAddress,
    UnsupportedOperation,
    WriteFailure,
)
from artframe.provider.addresses import (
    ARTWORK_ADDRESS,
    ArtworkCollection,
    SourceItem,
    SourcesCollection,
    kind_of,
    resolve,
    source_address,
)
from artframe.provider.notifications import (
    Broadcaster,
    Callback,
    ChangeSession,
    LocalBroadcaster,
    NotificationCoalescer,
)

logger = logging.getLogger(__name__)

DEFAULT_SOURCES_ORDER: tuple[SortKey, ...] = (
    SortKey("is_selected", descending=True),
    SortKey("component_ref"),
)


class UpsertOutcome(enum.Enum):
    UPDATED = "updated"
    INSERTED = "inserted"


# ------------------------------------------------------------------
# Batch operations
# ------------------------------------------------------------------


@dataclass(frozen=True)
class InsertOp:
    address: str
    values: Mapping[str, Any]


@dataclass(frozen=True)
class UpdateOp:
    address: str
    values: Mapping[str, Any]
    where: Filter | None = None


@dataclass(frozen=True)
class DeleteOp:
    address: str
    where: Filter | None = None


Operation = InsertOp | UpdateOp | DeleteOp


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one batched operation: an address for inserts, a count otherwise."""

    address: str | None = None
    count: int | None = None


# ------------------------------------------------------------------
# Query results
# ------------------------------------------------------------------


@dataclass(eq=False)
class ResultSet:
    """Lazy, restartable query result that tracks changes to its address.

    Iterating runs the query afresh each time, so a result set re-read after
    a change reflects the new rows. ``stale`` becomes True once a change to
    the address (or a related one) has been observed.
    """

    conn: sqlite3.Connection
    sql: str
    params: list[Any]
    address: str
    broadcaster: Broadcaster
    stale: bool = False
    _observers: list[Callback] = field(default_factory=list, repr=False)
    _closed: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        self.broadcaster.register_observer(self.address, self._on_change)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        for row in self.conn.execute(self.sql, self.params):
            yield decode_row(row)

    def fetchall(self) -> list[dict[str, Any]]:
        return list(self)

    def fetchone(self) -> dict[str, Any] | None:
        return next(iter(self), None)

    def register_observer(self, callback: Callback) -> None:
        """Call *callback(address)* on each subsequent change to this result's address."""
        self._observers.append(callback)

    def unregister_observer(self, callback: Callback) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _on_change(self, address: str) -> None:
        self.stale = True
        for cb in list(self._observers):
            cb(address)

    def close(self) -> None:
        """Stop tracking changes. Safe to call twice."""
        if not self._closed:
            self.broadcaster.unregister_observer(self.address, self._on_change)
            self._closed = True

    def __enter__(self) -> ResultSet:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


# ------------------------------------------------------------------
# Store
# ------------------------------------------------------------------


class ArtworkStore:
    """CRUD dispatcher over the sources and artwork tables.

    The connection is owned by the caller and must be closed after use.
    One store per connection; a single writer is assumed.

    While a batch is open every write must pass its session. A write
    without one raises RuntimeError instead of being committed and
    broadcast on its own, since it would land in the batch's transaction.
    """

    def __init__(self, conn: sqlite3.Connection, broadcaster: Broadcaster | None = None) -> None:
        """Initialise with an open, migrated database connection.

        Args:
            conn: An open sqlite3.Connection with the schema initialised
                (see artframe.db.schema.initialize).
            broadcaster: Change transport. Defaults to an in-process
                LocalBroadcaster.
        """
        self._conn = conn
        self.broadcaster: Broadcaster = broadcaster if broadcaster is not None else LocalBroadcaster()
        self.notifications = NotificationCoalescer(self.broadcaster)
        self._active: ChangeSession | None = None

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def insert(
        self,
        address: str,
        values: Mapping[str, Any] | None,
        *,
        session: ChangeSession | None = None,
    ) -> str:
        """Create a resource and return its address.

        Artwork inserts upsert the singleton row; source inserts return the
        new item's address.

        Raises:
            UnrecognizedAddress: *address* is not a collection address.
            MissingRequiredField: The required field is absent.
            WriteFailure: The store rejected the row.
        """
        match resolve(address):
            case ArtworkCollection():
                self.upsert_singleton(ARTWORK_SINGLETON_ID, values, session=session)
                return ARTWORK_ADDRESS
            case SourcesCollection():
                return self._insert_source(values, session)
            case SourceItem():
                raise UnrecognizedAddress(address)

    def upsert_singleton(
        self,
        row_id: int,
        values: Mapping[str, Any] | None,
        *,
        session: ChangeSession | None = None,
    ) -> UpsertOutcome:
        """Write *values* to the artwork row at *row_id*, creating it if absent."""
        self._check_session(session)
        data = self._writable(values, ARTWORK_COLUMNS, required=ARTWORK_REQUIRED)
        assignments = ", ".join(f"{col} = ?" for col in data)
        cur = self._write(
            f"UPDATE {ARTWORK_TABLE} SET {assignments} WHERE id = ?",  # noqa: S608
            [*data.values(), row_id],
            session,
        )
        if cur.rowcount == 1:
            outcome = UpsertOutcome.UPDATED
        else:
            columns = ", ".join(["id", *data])
            placeholders = ", ".join("?" * (len(data) + 1))
            cur = self._write(
                f"INSERT INTO {ARTWORK_TABLE} ({columns}) VALUES ({placeholders})",  # noqa: S608
                [row_id, *data.values()],
                session,
            )
            if not cur.lastrowid:
                self._abort(session)
                raise WriteFailure(f"Failed to insert row into {ARTWORK_ADDRESS}")
            outcome = UpsertOutcome.INSERTED
        self._changed(ARTWORK_ADDRESS, session)
        return outcome

    def _insert_source(self, values: Mapping[str, Any] | None, session: ChangeSession | None) -> str:
        self._check_session(session)
        data = self._writable(values, SOURCE_COLUMNS, required=SOURCE_REQUIRED)
        columns = ", ".join(data)
        placeholders = ", ".join("?" * len(data))
        cur = self._write(
            f"INSERT INTO {SOURCES_TABLE} ({columns}) VALUES ({placeholders})",  # noqa: S608
            list(data.values()),
            session,
        )
        if not cur.lastrowid or cur.lastrowid <= 0:
            self._abort(session)
            raise WriteFailure("Failed to insert row into /sources")
        item = source_address(cur.lastrowid)
        self._changed(item, session)
        return item

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def query(
        self,
        address: str,
        projection: Sequence[str] | None = None,
        where: Filter | None = None,
        order_by: Iterable[SortKey] | None = None,
    ) -> ResultSet:
        """Return the rows behind *address* as a lazy ResultSet.

        Args:
            address: Any known resource address.
            projection: Columns to return (all columns when omitted).
            where: Optional filter; item addresses narrow it to their id.
            order_by: Sort keys. Sources default to selected first, then
                by component reference.

        Raises:
            UnrecognizedAddress: Unknown address.
            UnknownField: A projected, filtered or sorted column is unknown.
        """
        resource = resolve(address)
        match resource:
            case ArtworkCollection():
                table, columns, default_order = ARTWORK_TABLE, ARTWORK_COLUMNS, ()
            case SourcesCollection():
                table, columns, default_order = SOURCES_TABLE, SOURCE_COLUMNS, DEFAULT_SOURCES_ORDER
            case SourceItem(id=source_id):
                table, columns, default_order = SOURCES_TABLE, SOURCE_COLUMNS, DEFAULT_SOURCES_ORDER
                where = and_(Eq("id", source_id), where)

        selected = list(projection) if projection else list(columns)
        for col in selected:
            if col not in columns:
                raise UnknownField(col, columns)
        where_sql, params = compile_filter(where, columns)
        order_sql = compile_order(order_by, columns) or compile_order(default_order, columns)

        sql = f"SELECT {', '.join(selected)} FROM {table} WHERE {where_sql}"  # noqa: S608
        if order_sql:
            sql += f" ORDER BY {order_sql}"
        return ResultSet(self._conn, sql, params, resource.address, self.broadcaster)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(
        self,
        address: str,
        values: Mapping[str, Any] | None,
        where: Filter | None = None,
        *,
        session: ChangeSession | None = None,
    ) -> int:
        """Update sources matching *address* and *where*; return the row count.

        If nothing matched but *values* carries a component reference, the
        values are inserted as a new source instead and 1 is returned.

        Raises:
            UnsupportedOperation: *address* is the artwork collection.
        """
        resource = resolve(address)
        match resource:
            case ArtworkCollection():
                raise UnsupportedOperation(
                    "Updates are not allowed: insert does an insert or update operation"
                )
            case SourcesCollection():
                scoped = where
            case SourceItem(id=source_id):
                scoped = and_(Eq("id", source_id), where)

        self._check_session(session)
        data = self._writable(values, SOURCE_COLUMNS)
        if not data:
            raise ValueError("update() needs at least one value")
        where_sql, params = compile_filter(scoped, SOURCE_COLUMNS)
        assignments = ", ".join(f"{col} = ?" for col in data)
        cur = self._write(
            f"UPDATE {SOURCES_TABLE} SET {assignments} WHERE {where_sql}",  # noqa: S608
            [*data.values(), *params],
            session,
        )
        count = cur.rowcount
        if count > 0:
            self._changed(resource.address, session)
        elif SOURCE_REQUIRED in data:
            # Update of a missing source with a component reference turns
            # into an insert; this can hide a wrong id on the caller's side.
            logger.warning(
                "Update of %s matched no rows; inserting %s instead",
                address,
                data[SOURCE_REQUIRED],
            )
            self._insert_source(data, session)
            count = 1
        else:
            self._commit_unless(session)
        return count

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete(
        self,
        address: str,
        where: Filter | None = None,
        *,
        session: ChangeSession | None = None,
    ) -> int:
        """Delete sources matching *address* and *where*; return the row count.

        Artwork owned by a deleted source is removed by the foreign key
        cascade.

        Raises:
            UnsupportedOperation: *address* is the artwork collection.
        """
        resource = resolve(address)
        match resource:
            case ArtworkCollection():
                raise UnsupportedOperation("Deletes are not supported")
            case SourcesCollection():
                scoped = where
            case SourceItem(id=source_id):
                scoped = and_(Eq("id", source_id), where)

        self._check_session(session)
        where_sql, params = compile_filter(scoped, SOURCE_COLUMNS)
        cur = self._write(
            f"DELETE FROM {SOURCES_TABLE} WHERE {where_sql}",  # noqa: S608
            params,
            session,
        )
        count = cur.rowcount
        if count > 0:
            self._changed(resource.address, session)
        else:
            self._commit_unless(session)
        return count

    def kind_of(self, address: str) -> str:
        """Return the content-kind label for *address*."""
        return kind_of(address)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def begin_batch(self) -> ChangeSession:
        """Open a batch: one transaction, notifications held until it ends.

        Raises:
            RuntimeError: A batch is already open on this store.
        """
        if self._active is not None:
            raise RuntimeError("A batch is already open on this store")
        self._active = self.notifications.begin_batch()
        return self._active

    def end_batch(self, session: ChangeSession, *, commit: bool = True) -> None:
        """Close *session*: commit and emit, or roll back and drop its changes."""
        if session is not self._active:
            raise RuntimeError("Session is not the open batch of this store")
        self._active = None
        if not commit:
            self._conn.rollback()
            self.notifications.discard(session)
            return
        try:
            self._conn.commit()
        except sqlite3.Error:
            self._conn.rollback()
            self.notifications.discard(session)
            raise
        logger.debug("Committed batch with %d change(s)", len(session.pending))
        self.notifications.end_batch(session)

    @contextmanager
    def batch(self) -> Iterator[ChangeSession]:
        """Context manager around begin_batch()/end_batch().

        Usage::

            with store.batch() as session:
                store.update("/sources", {"is_selected": False}, session=session)
                store.update("/sources/3", {"is_selected": True}, session=session)
        """
        session = self.begin_batch()
        try:
            yield session
        except BaseException:
            self.end_batch(session, commit=False)
            raise
        self.end_batch(session)

    def apply_batch(self, operations: Iterable[Operation]) -> list[OperationResult]:
        """Apply *operations* atomically; all take effect or none do."""
        results: list[OperationResult] = []
        with self.batch() as session:
            for op in operations:
                match op:
                    case InsertOp(address=address, values=values):
                        results.append(
                            OperationResult(address=self.insert(address, values, session=session))
                        )
                    case UpdateOp(address=address, values=values, where=where):
                        results.append(
                            OperationResult(count=self.update(address, values, where, session=session))
                        )
                    case DeleteOp(address=address, where=where):
                        results.append(
                            OperationResult(count=self.delete(address, where, session=session))
                        )
                    case _:
                        raise TypeError(f"Not a batch operation: {op!r}")
        return results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_session(self, session: ChangeSession | None) -> None:
        if session is None and self._active is not None:
            raise RuntimeError("A batch is open; pass its session to write")
        if session is not None and session is not self._active:
            raise RuntimeError("Session is closed or belongs to another store")

    @staticmethod
    def _writable(
        values: Mapping[str, Any] | None,
        columns: tuple[str, ...],
        required: str | None = None,
    ) -> dict[str, Any]:
        data = dict(values or {})
        if required is not None and required not in data:
            raise MissingRequiredField(required, data)
        writable = tuple(c for c in columns if c != "id")
        for key in data:
            if key not in writable:
                raise UnknownField(key, writable)
        return encode_values(data)

    def _write(self, sql: str, params: list[Any], session: ChangeSession | None) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.IntegrityError as exc:
            self._abort(session)
            raise WriteFailure(str(exc)) from exc

    def _abort(self, session: ChangeSession | None) -> None:
        # Inside a batch the whole transaction is rolled back by end_batch().
        if session is None:
            self._conn.rollback()

    def _commit_unless(self, session: ChangeSession | None) -> None:
        if session is None:
            self._conn.commit()

    def _changed(self, address: str, session: ChangeSession | None) -> None:
        self._commit_unless(session)
        self.notifications.record_change(address, session)
