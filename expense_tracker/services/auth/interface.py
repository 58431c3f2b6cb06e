"""
Abstract Auth Provider Interface

The tracker needs three things from an identity provider:
1. Anonymous sign-in
2. Sign-in with a bootstrap token supplied by the host
3. Notifications whenever the signed-in identity changes

Everything else (password flows, linking, sign-out UI) is out of scope.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """A signed-in user as reported by the auth provider."""
    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1, description="Stable opaque user ID")
    is_anonymous: bool = False


IdentityCallback = Callable[[Optional[Identity]], None]
Unsubscribe = Callable[[], None]


class AuthProviderInterface(ABC):
    """
    Abstract interface for the auth collaborator.

    Implementations notify registered callbacks after every successful
    sign-in, and with None when the user is signed out.
    """

    def __init__(self):
        self._callbacks: list[IdentityCallback] = []
        self._current: Optional[Identity] = None

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._current

    def on_identity_change(self, callback: IdentityCallback) -> Unsubscribe:
        """
        Register for identity changes.

        If a user is already signed in, the callback is invoked with it
        immediately. Returns a function that removes the callback.
        """
        self._callbacks.append(callback)
        if self._current is not None:
            callback(self._current)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def _set_identity(self, identity: Optional[Identity]) -> None:
        self._current = identity
        for callback in list(self._callbacks):
            callback(identity)

    @abstractmethod
    async def sign_in_anonymously(self) -> Identity:
        """
        Create and sign in an anonymous user.

        Raises:
            AuthError: If sign-in fails
        """
        pass

    @abstractmethod
    async def sign_in_with_token(self, token: str) -> Identity:
        """
        Sign in with a custom token issued by the host environment.

        Raises:
            AuthError: If the token is rejected or sign-in fails
        """
        pass


class AuthError(Exception):
    """Sign-in failed."""
    pass
