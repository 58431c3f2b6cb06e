"""
Abstract Document Store Interface

DESIGN DECISION: We define an abstract interface for the document store.
This allows us to:
1. Use Firestore in production
2. Use in-memory storage for testing and local demo mode
3. Keep the record store adapter decoupled from any SDK

The interface mirrors what the tracker needs from a document database
and nothing more: create, delete one, list, atomic multi-delete, and a
live subscription that pushes the full collection on every change.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable


# A stored document: (document id, document data)
StoredDocument = tuple[str, dict[str, Any]]

SnapshotCallback = Callable[[list[StoredDocument]], None]
ErrorCallback = Callable[[Exception], None]


def expense_collection_path(namespace: str, app_id: str, user_id: str) -> str:
    """Path of one user's expense collection."""
    return f"{namespace}/{app_id}/users/{user_id}/expenses"


class Subscription(ABC):
    """Handle for a live collection subscription."""

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop receiving snapshots. Safe to call more than once."""
        pass


class ExpenseStoreInterface(ABC):
    """
    Abstract interface for the per-user document store.

    Any backend (Firestore, in-memory) must implement these methods.
    Callbacks passed to `subscribe` may be invoked from a thread other
    than the caller's event loop.
    """

    @property
    @abstractmethod
    def server_timestamp(self) -> Any:
        """Sentinel the backend replaces with its own clock on write."""
        pass

    @abstractmethod
    async def create(self, collection_path: str, data: dict[str, Any]) -> str:
        """
        Create a document with a backend-assigned ID.

        Args:
            collection_path: Collection to write into
            data: Document fields (may contain `server_timestamp`)

        Returns:
            The new document's ID

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def subscribe(
        self,
        collection_path: str,
        on_change: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        """
        Listen to a collection.

        `on_change` receives the full current document set once right
        away and again after every change. `on_error` receives any
        failure of the listener.
        """
        pass

    @abstractmethod
    async def delete_one(self, collection_path: str, doc_id: str) -> None:
        """
        Delete a single document.

        Raises:
            StorageError: If the delete fails
        """
        pass

    @abstractmethod
    async def list_all(self, collection_path: str) -> list[StoredDocument]:
        """
        Fetch every document currently in the collection.

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def batch_delete(self, collection_path: str, doc_ids: list[str]) -> None:
        """
        Delete many documents atomically (all or nothing).

        Raises:
            StorageError: If the batch fails; no document is deleted
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class BackendUnavailableError(StorageError):
    """Could not connect to the storage backend."""
    pass
