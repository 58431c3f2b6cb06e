"""
Audit Logger

Every significant action in the system is logged: sign-in outcome,
subscription lifecycle, each add/delete/clear and every failure.

The audit logger:
- Writes structured (JSON) log lines through structlog
- Never raises - a logging problem must not break the tracker
- Tags every event with the session user it belongs to
"""

import logging
import sys
from typing import Optional

import structlog

from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and therefore structlog) to stderr at `level`."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    One instance is shared by the identity resolver, the record store
    adapter and the controller of a session.
    """

    def __init__(self, name: str = "expense_tracker"):
        self._logger = structlog.get_logger(name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_configuration_missing(self, error_message: str) -> None:
        self.log(AuditEventBuilder.configuration_missing(error_message))

    def log_sign_in_failed(self, method: str, error_message: str) -> None:
        self.log(AuditEventBuilder.sign_in_failed(method, error_message))

    def log_identity(self, user_id: str, is_anonymous: bool, synthesized: bool) -> None:
        """Log which identity the session adopted."""
        if synthesized:
            self.log(AuditEventBuilder.identity_synthesized(user_id))
        else:
            self.log(AuditEventBuilder.identity_resolved(user_id, is_anonymous))

    def log_subscription_opened(self, user_id: str, path: str) -> None:
        self.log(AuditEventBuilder.subscription_opened(user_id, path))

    def log_subscription_closed(self, user_id: str, path: str) -> None:
        self.log(AuditEventBuilder.subscription_closed(user_id, path))

    def log_subscription_failed(self, user_id: str, error_message: str) -> None:
        self.log(AuditEventBuilder.subscription_failed(user_id, error_message))

    def log_snapshot(self, user_id: str, count: int) -> None:
        self.log(AuditEventBuilder.snapshot_received(user_id, count))

    def log_validation_failed(self, user_id: Optional[str], reason: str) -> None:
        self.log(AuditEventBuilder.validation_failed(user_id, reason))

    def log_expense_added(
        self,
        user_id: str,
        expense_id: str,
        name: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.expense_added(user_id, expense_id, name, amount))

    def log_expense_deleted(self, user_id: str, expense_id: str) -> None:
        self.log(AuditEventBuilder.expense_deleted(user_id, expense_id))

    def log_expenses_cleared(self, user_id: str, count: int) -> None:
        self.log(AuditEventBuilder.expenses_cleared(user_id, count))

    def log_operation_failed(
        self,
        event_type: AuditEventType,
        user_id: Optional[str],
        error_message: str,
        expense_id: Optional[str] = None,
    ) -> None:
        self.log(
            AuditEventBuilder.operation_failed(
                event_type=event_type,
                user_id=user_id,
                error_message=error_message,
                expense_id=expense_id,
            )
        )

    def log_external_service_error(self, service: str, error_message: str) -> None:
        self.log(AuditEventBuilder.external_service_error(service, error_message))
