"""
Backend Context

DESIGN DECISION: Backend handles (auth provider, document store) are
built once by the process entry point and passed explicitly to the
identity resolver and the record store adapter. Nothing reaches for a
module-level client.

A context without a store is valid: it means the backend is not
configured, and the tracker runs with persistence disabled.
"""

from typing import Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.config import AppSettings, Settings, get_settings
from expense_tracker.services.auth import (
    AuthProviderInterface,
    FirebaseAuthProvider,
    InMemoryAuthProvider,
)
from expense_tracker.services.storage import (
    ExpenseStoreInterface,
    FirestoreClient,
    FirestoreExpenseStore,
    InMemoryExpenseStore,
    expense_collection_path,
)


class BackendContext:
    """Everything a session needs to talk to the backend."""

    def __init__(
        self,
        auth: Optional[AuthProviderInterface],
        store: Optional[ExpenseStoreInterface],
        app_settings: AppSettings,
    ):
        self.auth = auth
        self.store = store
        self.app_settings = app_settings

    @property
    def is_configured(self) -> bool:
        """True when expenses can actually be stored."""
        return self.store is not None

    @property
    def initial_auth_token(self) -> Optional[str]:
        return self.app_settings.initial_auth_token

    def collection_path(self, user_id: str) -> str:
        return expense_collection_path(
            namespace=self.app_settings.collection_namespace,
            app_id=self.app_settings.app_id,
            user_id=user_id,
        )


def create_backend_context(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> BackendContext:
    """
    Factory function to build the backend context.

    Falls back to a context without storage when Firebase is not
    configured or cannot be reached, so the UI still renders.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    audit_logger = audit_logger or AuditLogger()

    if app_settings.storage_backend == "memory":
        return BackendContext(
            auth=InMemoryAuthProvider(),
            store=InMemoryExpenseStore(),
            app_settings=app_settings,
        )

    try:
        firebase_settings = settings.firebase
        client = FirestoreClient(firebase_settings)
        client.connect()
        return BackendContext(
            auth=FirebaseAuthProvider(firebase_settings),
            store=FirestoreExpenseStore(client),
            app_settings=app_settings,
        )
    except Exception as e:
        # Storage not configured - continue without it
        audit_logger.log_configuration_missing(str(e))
        return BackendContext(auth=None, store=None, app_settings=app_settings)
