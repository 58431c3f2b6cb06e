"""
Expense Tracker Controller

This module ties together all the session components:
1. Identity resolver → decides whose collection is shown
2. Record store adapter → one subscription per user, writes
3. Status message box → transient feedback for every action

DESIGN DECISION: All backend notifications go through one event
channel (an asyncio.Queue) and are applied by a single pump task with
the pure `apply_event` transition. Backend threads only ever enqueue.

Writes are NOT serialized. Two quick clicks dispatch two concurrent
requests; whatever the subscription pushes last is what the user sees.
"""

import asyncio
import threading
from typing import Optional, Union

from expense_tracker.audit import AuditLogger
from expense_tracker.config import Settings, get_settings
from expense_tracker.models.expense import Expense, ExpenseCategory, ExpenseDraft
from expense_tracker.services.context import BackendContext, create_backend_context
from expense_tracker.services.storage import StorageError
from expense_tracker.session import (
    ExpenseRecords,
    ExpenseValidationError,
    IdentityResolved,
    IdentityResolver,
    NothingToClearError,
    PersistenceDisabled,
    StatusMessage,
    StatusMessageBox,
    SubscriptionFailed,
    TrackerEvent,
    TrackerState,
    apply_event,
    reset_draft,
    update_draft,
)


# User-facing status messages. Anything starting with "Error" is shown as an error.
MSG_NOT_READY = "Error: Database connection not ready."
MSG_INVALID_DRAFT = "Error: Please enter a name and a valid amount."
MSG_ADDED = "Success! Expense added."
MSG_ADD_FAILED = "Error adding expense. Check the logs."
MSG_DELETED = "Expense deleted."
MSG_DELETE_FAILED = "Error deleting expense. Check the logs."
MSG_NOTHING_TO_CLEAR = "No expenses to clear."
MSG_CLEARED = "All expenses cleared."
MSG_CLEAR_FAILED = "Error clearing all expenses. Check the logs."
MSG_FETCH_FAILED = "Error fetching data: {detail}"


class ExpenseTrackerController:
    """
    View-independent controller for one tracker session.

    Lifecycle:
        controller = ExpenseTrackerController(context)
        await controller.start()
        ... user actions ...
        await controller.shutdown()

    All methods must be called from the event loop `start()` ran on.
    """

    def __init__(
        self,
        context: BackendContext,
        audit_logger: Optional[AuditLogger] = None,
        status_ttl_seconds: Optional[float] = None,
    ):
        self._context = context
        self._audit_logger = audit_logger or AuditLogger()
        ttl = status_ttl_seconds or context.app_settings.status_message_ttl_seconds
        self._status = StatusMessageBox(ttl)
        self._state = TrackerState()
        self._resolver: Optional[IdentityResolver] = None
        self._records: Optional[ExpenseRecords] = None

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._events: Optional[asyncio.Queue] = None
        self._pump_task: Optional[asyncio.Task] = None
        self._pending = 0
        self._pending_lock = threading.Lock()
        self._closed = False

    # ------------------------------------------------------------------
    # Read side (what the view renders)
    # ------------------------------------------------------------------

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_configured(self) -> bool:
        return self._context.is_configured

    @property
    def user_id(self) -> Optional[str]:
        return self._state.user_id

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._state.expenses

    @property
    def draft(self) -> ExpenseDraft:
        return self._state.draft

    @property
    def total_display(self) -> str:
        return self._state.total_display

    @property
    def status(self) -> Optional[StatusMessage]:
        return self._status.message

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the event pump and resolve the session identity."""
        self._loop = asyncio.get_running_loop()
        self._events = asyncio.Queue()
        self._pump_task = self._loop.create_task(self._pump())

        if not self._context.is_configured:
            self.publish(PersistenceDisabled())
            return

        self._resolver = IdentityResolver(
            auth=self._context.auth,
            publish=self.publish,
            audit_logger=self._audit_logger,
            initial_token=self._context.initial_auth_token,
        )
        await self._resolver.start()

    async def shutdown(self) -> None:
        """Tear down subscriptions, the status timer and the pump."""
        self._closed = True
        if self._resolver is not None:
            self._resolver.stop()
        if self._records is not None:
            self._records.close()
            self._records = None
        self._status.close()
        if self._pump_task is not None:
            self._pump_task.cancel()
            try:
                await self._pump_task
            except asyncio.CancelledError:
                pass
            self._pump_task = None

    async def settle(self) -> None:
        """Wait until every published event has been applied."""
        while self._pending and self._pump_task is not None:
            await asyncio.sleep(0)

    # ------------------------------------------------------------------
    # Event channel
    # ------------------------------------------------------------------

    def publish(self, event: TrackerEvent) -> None:
        """Enqueue an event. Safe to call from any thread."""
        if self._closed or self._loop is None:
            return
        with self._pending_lock:
            self._pending += 1
        try:
            self._loop.call_soon_threadsafe(self._events.put_nowait, event)
        except RuntimeError:
            # Loop already closed
            with self._pending_lock:
                self._pending -= 1

    async def _pump(self) -> None:
        while True:
            event = await self._events.get()
            try:
                self._handle(event)
            except Exception as e:
                self._audit_logger.log_external_service_error("event_pump", str(e))
            finally:
                with self._pending_lock:
                    self._pending -= 1
                self._events.task_done()

    def _handle(self, event: TrackerEvent) -> None:
        previous_user = self._state.user_id
        self._state = apply_event(self._state, event)

        if isinstance(event, IdentityResolved) and self._state.user_id != previous_user:
            self._switch_subscription(self._state.user_id)
        elif isinstance(event, SubscriptionFailed) and event.user_id == self._state.user_id:
            self._status.set(MSG_FETCH_FAILED.format(detail=event.message))

    def _switch_subscription(self, user_id: str) -> None:
        if self._records is not None:
            self._records.close()
        self._records = ExpenseRecords(
            context=self._context,
            user_id=user_id,
            publish=self.publish,
            audit_logger=self._audit_logger,
        )
        self._records.open()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def _writable_records(self) -> Optional[ExpenseRecords]:
        if self._state.is_loading or self._records is None:
            return None
        return self._records

    def update_draft(
        self,
        name: Optional[str] = None,
        amount=None,
        category: Optional[Union[ExpenseCategory, str]] = None,
    ) -> ExpenseDraft:
        """Apply form input. Only the draft changes."""
        self._state = update_draft(self._state, name=name, amount=amount, category=category)
        return self._state.draft

    async def add_expense(self) -> bool:
        """Submit the current draft. Returns True if the expense was written."""
        records = self._writable_records()
        if records is None:
            self._status.set(MSG_NOT_READY)
            return False

        try:
            await records.add(self._state.draft)
        except ExpenseValidationError:
            self._status.set(MSG_INVALID_DRAFT)
            return False
        except StorageError:
            self._status.set(MSG_ADD_FAILED)
            return False

        self._state = reset_draft(self._state)
        self._status.set(MSG_ADDED)
        return True

    async def delete_expense(self, expense_id: str) -> bool:
        """Delete one expense. Does nothing while persistence is unavailable."""
        records = self._writable_records()
        if records is None:
            return False

        try:
            await records.delete(expense_id)
        except StorageError:
            self._status.set(MSG_DELETE_FAILED)
            return False

        self._status.set(MSG_DELETED)
        return True

    async def clear_all(self) -> bool:
        """Delete every expense. Does nothing while persistence is unavailable."""
        records = self._writable_records()
        if records is None:
            return False

        try:
            await records.clear_all(len(self._state.expenses))
        except NothingToClearError:
            self._status.set(MSG_NOTHING_TO_CLEAR)
            return False
        except StorageError:
            self._status.set(MSG_CLEAR_FAILED)
            return False

        self._status.set(MSG_CLEARED)
        return True


def create_controller(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> ExpenseTrackerController:
    """
    Factory function to create a controller wired to the configured backend.

    Falls back to a controller without persistence when the backend
    is not configured.
    """
    settings = settings or get_settings()
    audit_logger = audit_logger or AuditLogger()
    context = create_backend_context(settings, audit_logger)
    return ExpenseTrackerController(context, audit_logger=audit_logger)
