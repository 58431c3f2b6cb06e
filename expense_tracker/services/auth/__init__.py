"""Auth services package."""

from expense_tracker.services.auth.interface import (
    AuthError,
    AuthProviderInterface,
    Identity,
)
from expense_tracker.services.auth.firebase_auth import FirebaseAuthProvider
from expense_tracker.services.auth.memory import InMemoryAuthProvider

__all__ = [
    "AuthError",
    "AuthProviderInterface",
    "FirebaseAuthProvider",
    "Identity",
    "InMemoryAuthProvider",
]
