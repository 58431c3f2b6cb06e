"""
Record Store Adapter

Binds one user's expense collection to the session:
- Opens exactly one live subscription and turns every push into a
  SnapshotReceived event (full snapshot, newest first)
- Validates and writes new expenses
- Deletes one expense, or all of them in a single atomic batch

The adapter never touches view state. Writes return or raise; the
new list always arrives through the subscription.
"""

from datetime import date
from typing import Callable, Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.models.audit import AuditEventType
from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    format_amount,
    new_expense_document,
    sort_newest_first,
)
from expense_tracker.services.context import BackendContext
from expense_tracker.services.storage import StorageError, StoredDocument, Subscription
from expense_tracker.session.events import SnapshotReceived, SubscriptionFailed, TrackerEvent


class TrackerError(Exception):
    """Base exception for rejected user actions."""
    pass


class ExpenseValidationError(TrackerError):
    """The draft cannot be submitted (empty name or non-positive amount)."""
    pass


class NothingToClearError(TrackerError):
    """Clear-all was requested while the list is empty."""
    pass


class ExpenseRecords:
    """
    Record store adapter for one session user.

    Args:
        context: Backend context; must have a store
        user_id: Session user whose collection is used
        publish: Receives SnapshotReceived / SubscriptionFailed events.
                 May be called from a backend thread.
        today: Source of the creation date shown next to each expense
    """

    def __init__(
        self,
        context: BackendContext,
        user_id: str,
        publish: Callable[[TrackerEvent], None],
        audit_logger: Optional[AuditLogger] = None,
        today: Callable[[], date] = date.today,
    ):
        if context.store is None:
            raise StorageError("No document store configured")
        self._context = context
        self._store = context.store
        self._user_id = user_id
        self._publish = publish
        self._audit_logger = audit_logger or AuditLogger()
        self._today = today
        self._subscription: Optional[Subscription] = None

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def collection_path(self) -> str:
        return self._context.collection_path(self._user_id)

    @property
    def is_open(self) -> bool:
        return self._subscription is not None

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Start listening to the collection. Idempotent."""
        if self._subscription is not None:
            return
        self._audit_logger.log_subscription_opened(self._user_id, self.collection_path)
        self._subscription = self._store.subscribe(
            self.collection_path,
            self._handle_snapshot,
            self._handle_error,
        )

    def close(self) -> None:
        if self._subscription is None:
            return
        self._subscription.unsubscribe()
        self._subscription = None
        self._audit_logger.log_subscription_closed(self._user_id, self.collection_path)

    def _handle_snapshot(self, documents: list[StoredDocument]) -> None:
        expenses = sort_newest_first(
            Expense.from_document(doc_id, data) for doc_id, data in documents
        )
        self._audit_logger.log_snapshot(self._user_id, len(expenses))
        self._publish(SnapshotReceived(user_id=self._user_id, expenses=tuple(expenses)))

    def _handle_error(self, error: Exception) -> None:
        self._audit_logger.log_subscription_failed(self._user_id, str(error))
        self._publish(SubscriptionFailed(user_id=self._user_id, message=str(error)))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add(self, draft: ExpenseDraft) -> str:
        """
        Write a new expense from the draft.

        Returns:
            The new expense's ID

        Raises:
            ExpenseValidationError: Empty name or amount <= 0 (nothing is written)
            StorageError: The backend rejected the write
        """
        if not draft.name.strip():
            self._audit_logger.log_validation_failed(self._user_id, "empty name")
            raise ExpenseValidationError("Please enter a name and a valid amount.")
        if draft.amount <= 0:
            self._audit_logger.log_validation_failed(self._user_id, "amount must be positive")
            raise ExpenseValidationError("Please enter a name and a valid amount.")

        document = new_expense_document(
            draft,
            day=self._today(),
            date_format=self._context.app_settings.date_format,
            server_timestamp=self._store.server_timestamp,
        )
        try:
            expense_id = await self._store.create(self.collection_path, document)
        except StorageError as e:
            self._audit_logger.log_operation_failed(
                AuditEventType.SAVE_FAILED, self._user_id, str(e)
            )
            raise

        self._audit_logger.log_expense_added(
            self._user_id, expense_id, document["name"], format_amount(draft.amount)
        )
        return expense_id

    async def delete(self, expense_id: str) -> None:
        """
        Delete one expense by ID.

        Raises:
            StorageError: The backend rejected the delete
        """
        try:
            await self._store.delete_one(self.collection_path, expense_id)
        except StorageError as e:
            self._audit_logger.log_operation_failed(
                AuditEventType.DELETE_FAILED, self._user_id, str(e), expense_id=expense_id
            )
            raise
        self._audit_logger.log_expense_deleted(self._user_id, expense_id)

    async def clear_all(self, visible_count: int) -> int:
        """
        Delete every expense in the collection in one atomic batch.

        `visible_count` is the size of the list the user is looking at;
        when it is zero nothing is sent to the backend.

        Returns:
            Number of expenses deleted

        Raises:
            NothingToClearError: The visible list is empty
            StorageError: Listing or the batch delete failed (nothing deleted)
        """
        if visible_count <= 0:
            raise NothingToClearError("No expenses to clear.")

        try:
            documents = await self._store.list_all(self.collection_path)
            doc_ids = [doc_id for doc_id, _ in documents]
            await self._store.batch_delete(self.collection_path, doc_ids)
        except StorageError as e:
            self._audit_logger.log_operation_failed(
                AuditEventType.CLEAR_FAILED, self._user_id, str(e)
            )
            raise

        self._audit_logger.log_expenses_cleared(self._user_id, len(doc_ids))
        return len(doc_ids)
