"""Services package."""

from expense_tracker.services.auth import (
    AuthError,
    AuthProviderInterface,
    FirebaseAuthProvider,
    Identity,
    InMemoryAuthProvider,
)
from expense_tracker.services.storage import (
    BackendUnavailableError,
    ExpenseStoreInterface,
    FirestoreClient,
    FirestoreExpenseStore,
    InMemoryExpenseStore,
    NotFoundError,
    StorageError,
    Subscription,
    expense_collection_path,
)
from expense_tracker.services.context import BackendContext, create_backend_context

__all__ = [
    # Auth services
    "AuthError",
    "AuthProviderInterface",
    "FirebaseAuthProvider",
    "Identity",
    "InMemoryAuthProvider",
    # Storage services
    "BackendUnavailableError",
    "ExpenseStoreInterface",
    "FirestoreClient",
    "FirestoreExpenseStore",
    "InMemoryExpenseStore",
    "NotFoundError",
    "StorageError",
    "Subscription",
    "expense_collection_path",
    # Context
    "BackendContext",
    "create_backend_context",
]
