"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    DEFAULT_CATEGORY,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    format_amount,
    format_date,
    new_expense_document,
    parse_amount,
    sort_newest_first,
    total_amount,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "DEFAULT_CATEGORY",
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "format_amount",
    "format_date",
    "new_expense_document",
    "parse_amount",
    "sort_newest_first",
    "total_amount",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
