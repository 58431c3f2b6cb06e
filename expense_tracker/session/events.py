"""
Session State and Events

The controller never mutates its state from backend callbacks. Backend
callbacks publish events; the controller applies each one with
`apply_event`, a pure function from (state, event) to the next state.

State machine per session:  LOADING -> READY
READY is the only steady state. Failures become status messages and
never move the session out of READY.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from expense_tracker.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    format_amount,
    parse_amount,
    sort_newest_first,
    total_amount,
)


class TrackerPhase(str, Enum):
    LOADING = "loading"
    READY = "ready"


# =============================================================================
# EVENTS
# =============================================================================

class IdentityResolved(BaseModel):
    """The session now belongs to `user_id`."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    synthesized: bool = False


class PersistenceDisabled(BaseModel):
    """No backend is configured; the session is ready but cannot store anything."""
    model_config = ConfigDict(frozen=True)


class SnapshotReceived(BaseModel):
    """Full current contents of `user_id`'s collection."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    expenses: tuple[Expense, ...] = ()


class SubscriptionFailed(BaseModel):
    """The live subscription for `user_id` reported an error."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    message: str


TrackerEvent = Union[IdentityResolved, PersistenceDisabled, SnapshotReceived, SubscriptionFailed]


# =============================================================================
# STATE
# =============================================================================

class TrackerState(BaseModel):
    """Everything the view renders, except the status message."""
    model_config = ConfigDict(frozen=True)

    phase: TrackerPhase = TrackerPhase.LOADING
    user_id: Optional[str] = None
    expenses: tuple[Expense, ...] = ()
    draft: ExpenseDraft = ExpenseDraft()

    @property
    def is_loading(self) -> bool:
        return self.phase == TrackerPhase.LOADING

    @property
    def total(self) -> Decimal:
        return total_amount(self.expenses)

    @property
    def total_display(self) -> str:
        return format_amount(self.total)


def apply_event(state: TrackerState, event: TrackerEvent) -> TrackerState:
    """Return the state that results from applying `event` to `state`."""
    if isinstance(event, IdentityResolved):
        if event.user_id == state.user_id:
            return state.model_copy(update={"phase": TrackerPhase.READY})
        # New scope: nothing of the previous user's list stays visible
        return state.model_copy(update={
            "phase": TrackerPhase.READY,
            "user_id": event.user_id,
            "expenses": (),
        })

    if isinstance(event, PersistenceDisabled):
        return state.model_copy(update={"phase": TrackerPhase.READY})

    if isinstance(event, SnapshotReceived):
        # Late snapshot from a subscription that has since been replaced
        if event.user_id != state.user_id:
            return state
        return state.model_copy(update={
            "expenses": tuple(sort_newest_first(event.expenses)),
        })

    if isinstance(event, SubscriptionFailed):
        return state

    raise TypeError(f"Unknown event: {event!r}")


def update_draft(
    state: TrackerState,
    name: Optional[str] = None,
    amount=None,
    category: Optional[Union[ExpenseCategory, str]] = None,
) -> TrackerState:
    """Apply form input to the draft. Amount input that isn't a number becomes 0."""
    changes = {}
    if name is not None:
        changes["name"] = name
    if amount is not None:
        changes["amount"] = parse_amount(amount)
    if category is not None:
        changes["category"] = ExpenseCategory.from_wire(
            category.value if isinstance(category, ExpenseCategory) else category
        )
    if not changes:
        return state
    return state.model_copy(update={"draft": state.draft.model_copy(update=changes)})


def reset_draft(state: TrackerState) -> TrackerState:
    return state.model_copy(update={"draft": ExpenseDraft()})
