"""
Streamlit Frontend for Expense Tracker

A single page:
1. Form - name, amount, category, "Add Expense" and "Clear All"
2. Status message - feedback for the last action, disappears on its own
3. Live list - newest first, one delete button per expense
4. Running total

The controller lives on its own event loop thread, one per browser
session, because its subscription outlives a single Streamlit rerun.
The list is redrawn on a timer so pushes from the backend show up
without user interaction.
"""

import asyncio
import atexit
import html
import threading
import time

import streamlit as st

from expense_tracker.audit import configure_logging
from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.controller import ExpenseTrackerController, create_controller
from expense_tracker.models.expense import DEFAULT_CATEGORY, ExpenseCategory


# Page configuration
st.set_page_config(
    page_title="Personal Expense Tracker",
    page_icon="💰",
    layout="centered",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .success-box {
        padding: 12px;
        background-color: #d4edda;
        border-radius: 10px;
        text-align: center;
        margin: 10px 0;
    }
    .error-box {
        padding: 12px;
        background-color: #dc3545;
        color: white;
        border-radius: 10px;
        text-align: center;
        margin: 10px 0;
    }
    .badge {
        padding: 2px 8px;
        border-radius: 999px;
        font-size: 0.8em;
        font-weight: 500;
    }
    .badge-Food { background-color: #dcfce7; color: #15803d; }
    .badge-Housing { background-color: #fee2e2; color: #b91c1c; }
    .badge-Transport { background-color: #dbeafe; color: #1d4ed8; }
    .badge-Entertainment { background-color: #f3e8ff; color: #7e22ce; }
    .badge-Other { background-color: #f3f4f6; color: #374151; }
    .total-box {
        padding: 16px;
        background-color: #6366f1;
        color: white;
        border-radius: 12px;
        margin-top: 20px;
    }
    .big-number {
        font-size: 2em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


class TrackerRuntime:
    """Runs one controller on a dedicated event loop thread."""

    def __init__(self, controller: ExpenseTrackerController):
        self.controller = controller
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever,
            name="expense-tracker-loop",
            daemon=True,
        )
        self._thread.start()
        self._closed = False
        self.call(self._start())

    async def _start(self) -> None:
        await self.controller.start()
        await self.controller.settle()

    async def _update_draft(self, **changes):
        return self.controller.update_draft(**changes)

    def call(self, coro):
        """Run a coroutine on the controller's loop and wait for its result."""
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def update_draft(self, **changes):
        return self.call(self._update_draft(**changes))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.call(self.controller.shutdown())
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)


def get_runtime() -> TrackerRuntime:
    """Get or create this browser session's runtime."""
    if "runtime" not in st.session_state:
        with st.spinner("Loading Expense Tracker..."):
            runtime = TrackerRuntime(create_controller())
        atexit.register(runtime.close)
        st.session_state.runtime = runtime
    return st.session_state.runtime


# -----------------------------------------------------------------------------
# Widget callbacks
# -----------------------------------------------------------------------------

def sync_form_from_draft(runtime: TrackerRuntime) -> None:
    draft = runtime.controller.draft
    st.session_state.expense_name = draft.name
    st.session_state.expense_amount = float(draft.amount)
    st.session_state.expense_category = draft.category.value


def on_name_change() -> None:
    get_runtime().update_draft(name=st.session_state.expense_name)


def on_amount_change() -> None:
    get_runtime().update_draft(amount=st.session_state.expense_amount)


def on_category_change() -> None:
    get_runtime().update_draft(category=st.session_state.expense_category)


def on_add() -> None:
    runtime = get_runtime()
    runtime.update_draft(
        name=st.session_state.expense_name,
        amount=st.session_state.expense_amount,
        category=st.session_state.expense_category,
    )
    if runtime.call(runtime.controller.add_expense()):
        sync_form_from_draft(runtime)


def on_clear_all() -> None:
    runtime = get_runtime()
    runtime.call(runtime.controller.clear_all())


def on_delete(expense_id: str) -> None:
    runtime = get_runtime()
    runtime.call(runtime.controller.delete_expense(expense_id))


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------

def render_form() -> None:
    """Render the expense input form."""
    if "expense_name" not in st.session_state:
        st.session_state.expense_name = ""
        st.session_state.expense_amount = 0.0
        st.session_state.expense_category = DEFAULT_CATEGORY.value

    st.text_input(
        "Expense Name",
        key="expense_name",
        placeholder="e.g., Groceries, Rent, Coffee",
        on_change=on_name_change,
    )

    col1, col2 = st.columns(2)
    with col1:
        st.number_input(
            "Amount ($)",
            key="expense_amount",
            min_value=0.0,
            step=0.01,
            format="%.2f",
            on_change=on_amount_change,
        )
    with col2:
        st.selectbox(
            "Category",
            options=[c.value for c in ExpenseCategory],
            key="expense_category",
            on_change=on_category_change,
        )

    col1, col2 = st.columns(2)
    with col1:
        st.button("Add Expense", type="primary", on_click=on_add)
    with col2:
        st.button("Clear All", on_click=on_clear_all)


@st.fragment(run_every=get_settings().app.refresh_interval_seconds)
def render_live_view() -> None:
    """Status message, expense list and total. Redrawn on a timer."""
    controller = get_runtime().controller

    status = controller.status
    if status is not None:
        css_class = "error-box" if status.is_error else "success-box"
        st.markdown(
            f'<div class="{css_class}">{html.escape(status.text)}</div>',
            unsafe_allow_html=True,
        )

    st.subheader("Recent Transactions")
    expenses = controller.expenses
    if not expenses:
        st.markdown("*No expenses recorded yet.*")
    for expense in expenses:
        col1, col2, col3 = st.columns([6, 2, 1])
        with col1:
            st.markdown(f"**{expense.name}**")
            st.markdown(
                f'<span class="badge badge-{expense.category.value}">'
                f"{expense.category.value}</span> {expense.date}",
                unsafe_allow_html=True,
            )
        with col2:
            st.markdown(f"**${expense.amount}**")
        with col3:
            st.button(
                "🗑️",
                key=f"delete-{expense.id}",
                help="Delete expense",
                on_click=on_delete,
                args=(expense.id,),
            )

    st.markdown(f"""
    <div class="total-box">
        <div>Total Expenses</div>
        <div class="big-number">${controller.total_display}</div>
    </div>
    """, unsafe_allow_html=True)


def render_connection_status() -> None:
    """Sidebar panel showing which configuration sections are valid."""
    st.sidebar.markdown("### Connection Status")
    status = validate_all_settings()
    for name, key in [("Firebase", "firebase"), ("App settings", "app")]:
        if status.get(key, False):
            st.sidebar.success(f"✅ {name}")
        else:
            st.sidebar.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")


def main():
    """Main application entry point."""
    configure_logging(get_settings().app.log_level)
    runtime = get_runtime()
    controller = runtime.controller

    st.title("💰 Personal Expense Tracker")

    if controller.is_loading:
        st.info("Loading Expense Tracker...")
        time.sleep(0.2)
        st.rerun()

    if controller.is_configured:
        st.caption(f"User ID: {controller.user_id} (Private Data Store)")
    else:
        st.warning(
            "Storage is not configured - expenses cannot be saved. "
            "See the connection status in the sidebar."
        )

    render_form()
    render_live_view()
    render_connection_status()


if __name__ == "__main__":
    main()
