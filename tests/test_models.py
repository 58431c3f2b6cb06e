"""Tests for expense and audit models."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from expense_tracker.models.expense import (
    DEFAULT_CATEGORY,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    format_amount,
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


T0 = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def make_expense(expense_id: str, amount: str = "1.00", created_at=T0, **kwargs) -> Expense:
    return Expense(
        id=expense_id,
        name=kwargs.pop("name", expense_id),
        amount=amount,
        created_at=created_at,
        **kwargs,
    )


class TestAmountParsing:
    """Tests for numeric input parsing and formatting."""

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "NaN", "Infinity", "-inf", True])
    def test_invalid_input_becomes_zero(self, raw):
        """Test that anything non-numeric parses to 0."""
        assert parse_amount(raw) == Decimal("0")

    def test_parses_numbers_and_strings(self):
        assert parse_amount(4.5) == Decimal("4.5")
        assert parse_amount("1200") == Decimal("1200")
        assert parse_amount(" 12.345 ") == Decimal("12.345")
        assert parse_amount(Decimal("7.10")) == Decimal("7.10")

    def test_negative_numbers_are_kept(self):
        """Test that sign is preserved - rejecting it is the submit check's job."""
        assert parse_amount("-5") == Decimal("-5")

    def test_format_amount_two_decimals(self):
        assert format_amount(Decimal("4.5")) == "4.50"
        assert format_amount(Decimal("1200")) == "1200.00"
        assert format_amount(Decimal("0.005")) == "0.01"
        assert format_amount(Decimal("0")) == "0.00"

    def test_amounts_have_no_upper_bound(self):
        """Test amounts with more integer digits than the default decimal precision."""
        assert parse_amount("1e30") == Decimal("1e30")
        assert format_amount(Decimal("1e30")) == "1" + "0" * 30 + ".00"
        assert format_amount(Decimal("123456789012345678901234567890.125")) == (
            "123456789012345678901234567890.13"
        )


class TestExpenseDraft:
    """Tests for the transient form draft."""

    def test_defaults(self):
        draft = ExpenseDraft()
        assert draft.name == ""
        assert draft.amount == Decimal("0")
        assert draft.category == ExpenseCategory.FOOD
        assert DEFAULT_CATEGORY == ExpenseCategory.FOOD

    @pytest.mark.parametrize(
        "name,amount,valid",
        [
            ("Coffee", Decimal("4.5"), True),
            ("", Decimal("10"), False),
            ("   ", Decimal("10"), False),
            ("Coffee", Decimal("0"), False),
            ("Coffee", Decimal("-1"), False),
        ],
    )
    def test_is_valid(self, name, amount, valid):
        assert ExpenseDraft(name=name, amount=amount).is_valid is valid

    def test_draft_is_immutable(self):
        draft = ExpenseDraft(name="Coffee")
        with pytest.raises(Exception):
            draft.name = "Tea"


class TestExpenseDocuments:
    """Tests for the wire shape of stored expenses."""

    def test_new_expense_document(self):
        """Test that a draft becomes the stored document shape."""
        sentinel = object()
        draft = ExpenseDraft(name="  Coffee ", amount=Decimal("4.5"), category=ExpenseCategory.FOOD)
        doc = new_expense_document(draft, date(2026, 10, 17), "%d %B %Y", sentinel)
        assert doc == {
            "name": "Coffee",
            "amount": "4.50",
            "category": "Food",
            "date": "17 October 2026",
            "createdAt": sentinel,
        }

    def test_from_document(self):
        expense = Expense.from_document(
            "abc",
            {
                "name": "Rent",
                "amount": "1200.00",
                "category": "Housing",
                "date": "1 October 2026",
                "createdAt": T0,
            },
        )
        assert expense.id == "abc"
        assert expense.category == ExpenseCategory.HOUSING
        assert expense.amount_value == Decimal("1200.00")
        assert expense.created_at == T0

    def test_from_document_tolerates_odd_data(self):
        """Test unknown category, missing timestamp and bad amount."""
        expense = Expense.from_document("x", {"name": "Thing", "amount": "oops", "category": "Pets"})
        assert expense.category == ExpenseCategory.OTHER
        assert expense.created_at is None
        assert expense.amount_value == Decimal("0")
        assert expense.date == ""


class TestExpenseList:
    """Tests for ordering and totals."""

    def test_sort_newest_first(self):
        old = make_expense("old", created_at=T0)
        new = make_expense("new", created_at=T0 + timedelta(minutes=5))
        mid = make_expense("mid", created_at=T0 + timedelta(minutes=1))
        assert [e.id for e in sort_newest_first([old, new, mid])] == ["new", "mid", "old"]

    def test_pending_records_sort_as_newest(self):
        """Test that records without a server timestamp come first, in arrival order."""
        confirmed = make_expense("confirmed", created_at=T0 + timedelta(days=1))
        pending_a = make_expense("pending-a", created_at=None)
        pending_b = make_expense("pending-b", created_at=None)
        ordered = sort_newest_first([confirmed, pending_a, pending_b])
        assert [e.id for e in ordered] == ["pending-a", "pending-b", "confirmed"]

    def test_total_amount(self):
        expenses = [make_expense("a", "4.50"), make_expense("b", "1200.00")]
        assert total_amount(expenses) == Decimal("1204.50")
        assert format_amount(total_amount(expenses)) == "1204.50"

    def test_total_of_huge_amounts_is_exact(self):
        expenses = [make_expense("a", "1" + "0" * 40 + ".00"), make_expense("b", "0.01")]
        assert format_amount(total_amount(expenses)) == "1" + "0" * 40 + ".01"

    def test_total_of_nothing(self):
        assert format_amount(total_amount([])) == "0.00"


class TestExpenseCategories:
    """Tests for the expense category enum."""

    def test_all_categories_exist(self):
        expected = ["Food", "Housing", "Transport", "Entertainment", "Other"]
        assert [c.value for c in ExpenseCategory] == expected

    def test_from_wire_falls_back_to_other(self):
        assert ExpenseCategory.from_wire("Transport") == ExpenseCategory.TRANSPORT
        assert ExpenseCategory.from_wire(None) == ExpenseCategory.OTHER


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.expense_added("user-1", "doc-1", "Coffee", "4.50")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["user_id"] == "user-1"
        assert log_dict["expense_id"] == "doc-1"
        assert log_dict["details"] == {"name": "Coffee", "amount": "4.50"}
        assert log_dict["is_user_action"] is True

    def test_failure_events_are_errors(self):
        event = AuditEventBuilder.operation_failed(
            AuditEventType.DELETE_FAILED, "user-1", "boom", expense_id="doc-1"
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "boom"
        assert event.event_type == AuditEventType.DELETE_FAILED

    def test_sign_in_failed(self):
        event = AuditEventBuilder.sign_in_failed("anonymous", "network down")
        assert event.severity == AuditSeverity.ERROR
        assert event.details["method"] == "anonymous"

    def test_synthesized_identity_is_warning(self):
        event = AuditEventBuilder.identity_synthesized("local-id")
        assert event.severity == AuditSeverity.WARNING
        assert event.user_id == "local-id"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
