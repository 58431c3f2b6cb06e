"""
In-Memory Storage Implementation

Keeps collections in a dict for the lifetime of the process. Used by the
test suite and by the "memory" storage backend for local demos.

Behaves like the real backend where the tracker can observe it:
- IDs are assigned by the store
- The server timestamp sentinel is replaced with the store's clock
- Every change pushes the full collection to all listeners
- batch_delete is all-or-nothing

Failures can be injected per operation with `fail_next`.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

from expense_tracker.services.storage.interface import (
    ErrorCallback,
    ExpenseStoreInterface,
    NotFoundError,
    SnapshotCallback,
    StorageError,
    StoredDocument,
    Subscription,
)


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class _Listener:
    def __init__(self, on_change: SnapshotCallback, on_error: ErrorCallback):
        self.on_change = on_change
        self.on_error = on_error


class InMemorySubscription(Subscription):
    def __init__(self, store: "InMemoryExpenseStore", path: str, listener: _Listener):
        self._store = store
        self._path = path
        self._listener = listener

    def unsubscribe(self) -> None:
        self._store._remove_listener(self._path, self._listener)


class InMemoryExpenseStore(ExpenseStoreInterface):
    """
    Dict-backed document store.

    Args:
        clock: Source of server timestamps. Timestamps handed out are
               always strictly increasing, even if the clock repeats.
        strict_deletes: Raise NotFoundError when deleting a missing
                        document (Firestore itself ignores those).
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        strict_deletes: bool = False,
    ):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._strict_deletes = strict_deletes
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._listeners: dict[str, list[_Listener]] = {}
        self._last_timestamp: Optional[datetime] = None
        self._failures: dict[str, Exception] = {}
        # (operation, collection_path) for every call, in order
        self.calls: list[tuple[str, str]] = []

    @property
    def server_timestamp(self) -> Any:
        return SERVER_TIMESTAMP

    # ------------------------------------------------------------------
    # Test hooks
    # ------------------------------------------------------------------

    def fail_next(self, operation: str, error: Optional[Exception] = None) -> None:
        """Make the next call of `operation` fail (create, delete_one, list_all, batch_delete, subscribe)."""
        self._failures[operation] = error or StorageError(f"Injected {operation} failure")

    def documents(self, collection_path: str) -> dict[str, dict[str, Any]]:
        """Copy of a collection's current contents."""
        return {k: dict(v) for k, v in self._collections.get(collection_path, {}).items()}

    def listener_count(self, collection_path: str) -> int:
        return len(self._listeners.get(collection_path, []))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _record(self, operation: str, collection_path: str) -> None:
        self.calls.append((operation, collection_path))
        error = self._failures.pop(operation, None)
        if error is not None:
            raise error

    def _now(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _snapshot(self, collection_path: str) -> list[StoredDocument]:
        return [
            (doc_id, dict(data))
            for doc_id, data in self._collections.get(collection_path, {}).items()
        ]

    def _notify(self, collection_path: str) -> None:
        snapshot = self._snapshot(collection_path)
        for listener in list(self._listeners.get(collection_path, [])):
            listener.on_change(list(snapshot))

    def _remove_listener(self, collection_path: str, listener: _Listener) -> None:
        listeners = self._listeners.get(collection_path, [])
        if listener in listeners:
            listeners.remove(listener)

    # ------------------------------------------------------------------
    # ExpenseStoreInterface
    # ------------------------------------------------------------------

    async def create(self, collection_path: str, data: dict[str, Any]) -> str:
        self._record("create", collection_path)
        doc_id = uuid4().hex[:20]
        stored = {
            key: (self._now() if value is SERVER_TIMESTAMP else value)
            for key, value in data.items()
        }
        self._collections.setdefault(collection_path, {})[doc_id] = stored
        self._notify(collection_path)
        return doc_id

    def subscribe(
        self,
        collection_path: str,
        on_change: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        listener = _Listener(on_change, on_error)
        subscription = InMemorySubscription(self, collection_path, listener)
        try:
            self._record("subscribe", collection_path)
        except Exception as e:
            on_error(e)
            return subscription
        self._listeners.setdefault(collection_path, []).append(listener)
        on_change(self._snapshot(collection_path))
        return subscription

    async def delete_one(self, collection_path: str, doc_id: str) -> None:
        self._record("delete_one", collection_path)
        collection = self._collections.get(collection_path, {})
        if doc_id not in collection:
            if self._strict_deletes:
                raise NotFoundError(f"Document not found: {doc_id}")
            return
        del collection[doc_id]
        self._notify(collection_path)

    async def list_all(self, collection_path: str) -> list[StoredDocument]:
        self._record("list_all", collection_path)
        return self._snapshot(collection_path)

    async def batch_delete(self, collection_path: str, doc_ids: list[str]) -> None:
        self._record("batch_delete", collection_path)
        collection = self._collections.get(collection_path, {})
        for doc_id in doc_ids:
            collection.pop(doc_id, None)
        self._notify(collection_path)
