"""
Audit Models for Expense Tracker

Every significant action in the system is described by an AuditEvent.
This provides:
1. Traceability of every write the user triggered
2. Debugging information when the backend misbehaves
3. A single place where event names and payloads are defined

Events are logged locally; the tracker keeps no history of them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session / identity
    CONFIGURATION_MISSING = "configuration_missing"
    SIGN_IN_FAILED = "sign_in_failed"
    IDENTITY_RESOLVED = "identity_resolved"
    IDENTITY_SYNTHESIZED = "identity_synthesized"

    # Subscription
    SUBSCRIPTION_OPENED = "subscription_opened"
    SUBSCRIPTION_CLOSED = "subscription_closed"
    SUBSCRIPTION_FAILED = "subscription_failed"
    SNAPSHOT_RECEIVED = "snapshot_received"

    # User actions
    VALIDATION_FAILED = "validation_failed"
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSES_CLEARED = "expenses_cleared"

    # Failures
    SAVE_FAILED = "save_failed"
    DELETE_FAILED = "delete_failed"
    CLEAR_FAILED = "clear_failed"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Scope - whose data is this about?
    user_id: Optional[str] = Field(
        default=None,
        description="Session user the event belongs to"
    )
    expense_id: Optional[str] = Field(
        default=None,
        description="Expense document the event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "expense_id": self.expense_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(user_id, expense_id, "Coffee", "4.50")
        event = AuditEventBuilder.sign_in_failed("anonymous", str(exc))
    """

    @staticmethod
    def configuration_missing(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIGURATION_MISSING,
            severity=AuditSeverity.ERROR,
            description="Backend configuration not found; persistence disabled",
            error_message=error_message,
        )

    @staticmethod
    def sign_in_failed(method: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Sign-in failed ({method})",
            details={"method": method},
            error_message=error_message,
        )

    @staticmethod
    def identity_resolved(user_id: str, is_anonymous: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_RESOLVED,
            user_id=user_id,
            description="Session identity resolved",
            details={"is_anonymous": is_anonymous},
        )

    @staticmethod
    def identity_synthesized(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_SYNTHESIZED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description="No signed-in user; using a local session identity",
        )

    @staticmethod
    def subscription_opened(user_id: str, path: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_OPENED,
            user_id=user_id,
            description="Listening for expense changes",
            details={"path": path},
        )

    @staticmethod
    def subscription_closed(user_id: str, path: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_CLOSED,
            user_id=user_id,
            description="Stopped listening for expense changes",
            details={"path": path},
        )

    @staticmethod
    def subscription_failed(user_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description="Expense subscription reported an error",
            error_message=error_message,
        )

    @staticmethod
    def snapshot_received(user_id: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_RECEIVED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            description=f"Snapshot with {count} expenses",
            details={"count": count},
        )

    @staticmethod
    def validation_failed(user_id: Optional[str], reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description=f"Input rejected: {reason}",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def expense_added(
        user_id: str,
        expense_id: str,
        name: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            user_id=user_id,
            expense_id=expense_id,
            description=f"Expense added: {name} - {amount}",
            details={"name": name, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(user_id: str, expense_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            user_id=user_id,
            expense_id=expense_id,
            description="Expense deleted",
            is_user_action=True,
        )

    @staticmethod
    def expenses_cleared(user_id: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_CLEARED,
            user_id=user_id,
            description=f"Cleared {count} expenses",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def operation_failed(
        event_type: AuditEventType,
        user_id: Optional[str],
        error_message: str,
        expense_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            expense_id=expense_id,
            description=f"Operation failed: {event_type.value}",
            error_message=error_message,
        )

    @staticmethod
    def external_service_error(service: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
        )
