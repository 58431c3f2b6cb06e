"""Session package: identity, record store adapter, state and status message."""

from expense_tracker.session.events import (
    IdentityResolved,
    PersistenceDisabled,
    SnapshotReceived,
    SubscriptionFailed,
    TrackerEvent,
    TrackerPhase,
    TrackerState,
    apply_event,
    reset_draft,
    update_draft,
)
from expense_tracker.session.identity import IdentityResolver
from expense_tracker.session.records import (
    ExpenseRecords,
    ExpenseValidationError,
    NothingToClearError,
    TrackerError,
)
from expense_tracker.session.status import StatusMessage, StatusMessageBox

__all__ = [
    # State and events
    "IdentityResolved",
    "PersistenceDisabled",
    "SnapshotReceived",
    "SubscriptionFailed",
    "TrackerEvent",
    "TrackerPhase",
    "TrackerState",
    "apply_event",
    "reset_draft",
    "update_draft",
    # Components
    "ExpenseRecords",
    "IdentityResolver",
    "StatusMessage",
    "StatusMessageBox",
    # Exceptions
    "ExpenseValidationError",
    "NothingToClearError",
    "TrackerError",
]
