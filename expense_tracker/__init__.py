"""
Expense Tracker - Source Package

A personal expense tracker: record spending entries, see them in a
live list with a running total, backed by a per-user Firestore collection.

PRINCIPLES:
1. The backend is the source of truth - local state mirrors the subscription
2. Failures never block the user - they become status messages
3. Backend handles are passed explicitly, never held in module globals
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
