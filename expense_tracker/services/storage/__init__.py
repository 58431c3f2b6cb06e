"""
Storage Services Package

Provides the abstract document store interface and its implementations:
Firestore for production, in-memory for tests and local demos.
"""

from expense_tracker.services.storage.interface import (
    BackendUnavailableError,
    ExpenseStoreInterface,
    NotFoundError,
    StorageError,
    StoredDocument,
    Subscription,
    expense_collection_path,
)
from expense_tracker.services.storage.firestore import (
    FirestoreClient,
    FirestoreExpenseStore,
)
from expense_tracker.services.storage.memory import InMemoryExpenseStore

__all__ = [
    # Interface
    "ExpenseStoreInterface",
    "StoredDocument",
    "Subscription",
    "expense_collection_path",
    # Exceptions
    "BackendUnavailableError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "FirestoreClient",
    "FirestoreExpenseStore",
    "InMemoryExpenseStore",
]
