"""In-process auth provider for tests and the "memory" storage backend."""

from typing import Optional
from uuid import uuid4

from expense_tracker.services.auth.interface import (
    AuthError,
    AuthProviderInterface,
    Identity,
)


class InMemoryAuthProvider(AuthProviderInterface):
    """
    Issues identities without any network.

    Args:
        tokens: Accepted custom tokens mapped to the uid they sign in as.
        fail_with: If set, every sign-in raises this error.
    """

    def __init__(
        self,
        tokens: Optional[dict[str, str]] = None,
        fail_with: Optional[Exception] = None,
    ):
        super().__init__()
        self._tokens = dict(tokens or {})
        self._fail_with = fail_with
        self.sign_in_calls: list[str] = []

    async def sign_in_anonymously(self) -> Identity:
        self.sign_in_calls.append("anonymous")
        if self._fail_with is not None:
            raise self._fail_with
        identity = Identity(uid=f"anon-{uuid4().hex[:12]}", is_anonymous=True)
        self._set_identity(identity)
        return identity

    async def sign_in_with_token(self, token: str) -> Identity:
        self.sign_in_calls.append("token")
        if self._fail_with is not None:
            raise self._fail_with
        uid = self._tokens.get(token)
        if uid is None:
            raise AuthError("Invalid custom token")
        identity = Identity(uid=uid, is_anonymous=False)
        self._set_identity(identity)
        return identity

    def switch_user(self, identity: Optional[Identity]) -> None:
        """Simulate the provider reporting a different user (or none)."""
        self._set_identity(identity)
