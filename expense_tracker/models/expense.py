"""
Core Data Models for Expense Tracker

These models define the schemas for everything flowing between the
form, the record store and the list view:
1. ExpenseDraft - what the user is typing (transient, never stored)
2. Expense - a stored record, as read back from the backend
3. The wire shape - the document written to the per-user collection

DESIGN DECISION: Amounts are Decimals in memory and fixed two-decimal
strings on the wire. Floats never touch money.
"""

from datetime import date, datetime
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    ROUND_HALF_UP,
    Decimal,
    InvalidOperation,
    localcontext,
)
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


TWO_PLACES = Decimal("0.01")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: A closed set keeps the category selector simple
    and the badges predictable. Unknown values read back from the
    backend are shown as OTHER.
    """
    FOOD = "Food"
    HOUSING = "Housing"
    TRANSPORT = "Transport"
    ENTERTAINMENT = "Entertainment"
    OTHER = "Other"

    @classmethod
    def from_wire(cls, value: Any) -> "ExpenseCategory":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


DEFAULT_CATEGORY = ExpenseCategory.FOOD


# =============================================================================
# AMOUNT HELPERS
# =============================================================================

def parse_amount(value: Any) -> Decimal:
    """
    Parse user input into an amount.

    Anything that isn't a finite number becomes 0 - the form never
    raises on bad input, the "> 0" check at submit time catches it.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip()
        if not text:
            return Decimal("0")
        try:
            amount = Decimal(text)
        except (InvalidOperation, ValueError):
            return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def format_amount(amount: Decimal) -> str:
    """
    Format an amount with exactly two decimal places.

    Amounts have no upper bound, so the precision grows with the number
    of integer digits instead of using the default 28.
    """
    with localcontext() as ctx:
        ctx.prec = max(28, amount.adjusted() + 3)
        ctx.Emax = MAX_EMAX
        return str(amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def format_date(day: date, date_format: str) -> str:
    """Human-readable date stored alongside each expense."""
    return day.strftime(date_format)


# =============================================================================
# DRAFT (form state)
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    In-progress form input.

    Exists only in view state. The name is kept exactly as typed;
    it is stripped when the expense is written.
    """
    model_config = ConfigDict(frozen=True)

    name: str = ""
    amount: Decimal = Decimal("0")
    category: ExpenseCategory = DEFAULT_CATEGORY

    @property
    def is_valid(self) -> bool:
        """A draft can be submitted once it has a name and a positive amount."""
        return bool(self.name.strip()) and self.amount > 0


# =============================================================================
# STORED EXPENSE
# =============================================================================

class Expense(BaseModel):
    """
    A stored expense record.

    `created_at` is the server-assigned timestamp. It is None for a
    record the backend has not confirmed yet (a pending local write).
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Backend-assigned document ID")
    name: str = Field(..., description="Display name")
    amount: str = Field(..., description="Amount as a fixed two-decimal string")
    category: ExpenseCategory = DEFAULT_CATEGORY
    date: str = Field(default="", description="Human-readable date, set at creation")
    created_at: Optional[datetime] = Field(
        default=None,
        description="Server timestamp, used only for ordering"
    )

    @property
    def amount_value(self) -> Decimal:
        """Amount as a Decimal (unparsable stored values count as 0)."""
        return parse_amount(self.amount)

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Expense":
        """Build an Expense from a stored document."""
        created_at = data.get("createdAt")
        return cls(
            id=doc_id,
            name=str(data.get("name", "")),
            amount=str(data.get("amount", "0")),
            category=ExpenseCategory.from_wire(data.get("category")),
            date=str(data.get("date") or ""),
            created_at=created_at if isinstance(created_at, datetime) else None,
        )


def new_expense_document(
    draft: ExpenseDraft,
    day: date,
    date_format: str,
    server_timestamp: Any,
) -> dict[str, Any]:
    """
    Build the document written for a new expense.

    `server_timestamp` is the store's sentinel; the backend replaces it
    with its own clock when the write lands.
    """
    return {
        "name": draft.name.strip(),
        "amount": format_amount(draft.amount),
        "category": draft.category.value,
        "date": format_date(day, date_format),
        "createdAt": server_timestamp,
    }


# =============================================================================
# LIST HELPERS
# =============================================================================

def sort_newest_first(expenses: Iterable[Expense]) -> list[Expense]:
    """
    Order expenses by server timestamp, newest first.

    Records without a timestamp yet were just submitted, so they count
    as the newest and stay on top in arrival order.
    """
    items = list(expenses)
    pending = [e for e in items if e.created_at is None]
    confirmed = [e for e in items if e.created_at is not None]
    confirmed.sort(key=lambda e: e.created_at, reverse=True)
    return pending + confirmed


def total_amount(expenses: Iterable[Expense]) -> Decimal:
    """Running total of all visible expenses. Exact, never rounded."""
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        return sum((e.amount_value for e in expenses), Decimal("0"))
