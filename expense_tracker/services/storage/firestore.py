"""
Firestore Storage Implementation

DESIGN DECISION: Firestore is the production backend because:
1. Per-user collections map directly onto the data model
2. Server timestamps give a single clock for ordering
3. Snapshot listeners push changes, so nothing has to poll
4. Batched writes give us an atomic clear-all

TRADEOFFS:
- The firebase-admin SDK is synchronous; every call is moved off the
  event loop with asyncio.to_thread
- Snapshot callbacks run on the SDK's watch thread
- A batch holds at most 500 writes; larger clears fail as one error

Operations are NOT retried. Only the initial connection is.
"""

import asyncio
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from expense_tracker.config import FirebaseSettings, get_settings
from expense_tracker.services.storage.interface import (
    BackendUnavailableError,
    ErrorCallback,
    ExpenseStoreInterface,
    SnapshotCallback,
    StorageError,
    StoredDocument,
    Subscription,
)


class FirestoreClient:
    """
    Low-level Firestore client wrapper.

    Handles firebase-admin initialization and provides retry logic
    for establishing the connection.
    """

    def __init__(self, settings: Optional[FirebaseSettings] = None):
        self._settings = settings or get_settings().firebase
        self._client = None

    @retry(
        retry=retry_if_not_exception_type(FileNotFoundError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _initialize(self):
        try:
            app = firebase_admin.get_app()
        except ValueError:
            cred = credentials.Certificate(self._settings.credentials_path)
            options = {}
            if self._settings.project_id:
                options["projectId"] = self._settings.project_id
            app = firebase_admin.initialize_app(cred, options or None)
        return firestore.client(app)

    def connect(self):
        """
        Establish connection to Firestore.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                self._client = self._initialize()
            except FileNotFoundError:
                raise BackendUnavailableError(
                    f"Firebase credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise BackendUnavailableError(f"Failed to connect to Firestore: {e}") from e

        return self._client

    def collection(self, collection_path: str):
        """Get a collection reference for a slash-separated path."""
        return self.connect().collection(collection_path)

    def batch(self):
        return self.connect().batch()


class FirestoreSubscription(Subscription):
    """Wraps a Firestore watch handle."""

    def __init__(self, watch):
        self._watch = watch

    def unsubscribe(self) -> None:
        if self._watch is not None:
            self._watch.unsubscribe()
            self._watch = None


class FirestoreExpenseStore(ExpenseStoreInterface):
    """
    Firestore implementation of the document store.

    One document per expense, stored under the user's collection path.
    """

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    @property
    def server_timestamp(self) -> Any:
        return firestore.SERVER_TIMESTAMP

    async def create(self, collection_path: str, data: dict[str, Any]) -> str:
        """Add a document with an auto-generated ID."""
        try:
            collection = self._client.collection(collection_path)
            _, ref = await asyncio.to_thread(collection.add, data)
            return ref.id
        except Exception as e:
            raise StorageError(f"Failed to create document: {e}") from e

    def subscribe(
        self,
        collection_path: str,
        on_change: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        """Attach a snapshot listener to the collection."""

        def handle_snapshot(docs, changes, read_time):
            try:
                snapshot = [(doc.id, doc.to_dict() or {}) for doc in docs]
            except Exception as e:
                on_error(StorageError(f"Failed to read snapshot: {e}"))
                return
            on_change(snapshot)

        try:
            watch = self._client.collection(collection_path).on_snapshot(handle_snapshot)
        except Exception as e:
            on_error(StorageError(f"Failed to subscribe: {e}"))
            return FirestoreSubscription(None)
        return FirestoreSubscription(watch)

    async def delete_one(self, collection_path: str, doc_id: str) -> None:
        """Delete a document by ID."""
        try:
            ref = self._client.collection(collection_path).document(doc_id)
            await asyncio.to_thread(ref.delete)
        except Exception as e:
            raise StorageError(f"Failed to delete document {doc_id}: {e}") from e

    async def list_all(self, collection_path: str) -> list[StoredDocument]:
        """Read the whole collection once."""

        def fetch() -> list[StoredDocument]:
            docs = self._client.collection(collection_path).stream()
            return [(doc.id, doc.to_dict() or {}) for doc in docs]

        try:
            return await asyncio.to_thread(fetch)
        except Exception as e:
            raise StorageError(f"Failed to list documents: {e}") from e

    async def batch_delete(self, collection_path: str, doc_ids: list[str]) -> None:
        """Delete all given documents in one batched write."""

        def commit() -> None:
            collection = self._client.collection(collection_path)
            batch = self._client.batch()
            for doc_id in doc_ids:
                batch.delete(collection.document(doc_id))
            batch.commit()

        try:
            await asyncio.to_thread(commit)
        except Exception as e:
            raise StorageError(f"Failed to delete {len(doc_ids)} documents: {e}") from e
