"""
Shared fixtures for Expense Tracker tests.

Test strategy:
1. Unit tests for models, settings and each session component
2. Controller scenarios against the in-memory backend
3. No real API calls in tests (in-memory backends and mocks only)
"""

import asyncio
from datetime import date

import pytest

from expense_tracker.config import AppSettings
from expense_tracker.services.auth import InMemoryAuthProvider
from expense_tracker.services.context import BackendContext
from expense_tracker.services.storage import InMemoryExpenseStore


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def make_context(auth=None, store=None, **app_overrides) -> BackendContext:
    """Build a backend context with explicit app settings."""
    app_overrides.setdefault("storage_backend", "memory")
    return BackendContext(auth=auth, store=store, app_settings=AppSettings(**app_overrides))


@pytest.fixture
def store() -> InMemoryExpenseStore:
    return InMemoryExpenseStore()


@pytest.fixture
def auth() -> InMemoryAuthProvider:
    return InMemoryAuthProvider()


@pytest.fixture
def context(auth, store) -> BackendContext:
    return make_context(auth=auth, store=store)


@pytest.fixture
def today() -> date:
    return date(2026, 10, 17)
