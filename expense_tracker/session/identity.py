"""
Identity Resolver

Establishes the user ID that scopes the session's expense collection.

FLOW:
1. Register for identity changes with the auth provider
2. Sign in once - with the host's bootstrap token if there is one,
   anonymously otherwise
3. Every identity notification becomes an IdentityResolved event;
   "no user" becomes a random local ID so the tracker stays usable

Sign-in failures are logged and swallowed. There is no retry: if
sign-in fails, the session runs under a local ID that is not persisted
anywhere and changes on every start.
"""

from typing import Callable, Optional
from uuid import uuid4

from expense_tracker.audit import AuditLogger
from expense_tracker.services.auth import AuthProviderInterface, Identity
from expense_tracker.session.events import IdentityResolved


class IdentityResolver:
    """Turns auth provider notifications into IdentityResolved events."""

    def __init__(
        self,
        auth: Optional[AuthProviderInterface],
        publish: Callable[[IdentityResolved], None],
        audit_logger: Optional[AuditLogger] = None,
        initial_token: Optional[str] = None,
    ):
        self._auth = auth
        self._publish = publish
        self._audit_logger = audit_logger or AuditLogger()
        self._initial_token = initial_token
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._notified = False

    async def start(self) -> None:
        """Sign in and publish the first identity. Never raises on auth errors."""
        if self._auth is None:
            self._handle_identity(None)
            return

        self._unsubscribe = self._auth.on_identity_change(self._handle_identity)

        method = "token" if self._initial_token else "anonymous"
        try:
            if self._initial_token:
                await self._auth.sign_in_with_token(self._initial_token)
            else:
                await self._auth.sign_in_anonymously()
        except Exception as e:
            self._audit_logger.log_sign_in_failed(method, str(e))

        # Sign-in failed without the provider reporting anything: the
        # session still has to leave the loading state.
        if not self._notified:
            self._handle_identity(None)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_identity(self, identity: Optional[Identity]) -> None:
        self._notified = True
        if identity is None:
            user_id = str(uuid4())
            self._audit_logger.log_identity(user_id, is_anonymous=True, synthesized=True)
            self._publish(IdentityResolved(user_id=user_id, synthesized=True))
            return

        self._audit_logger.log_identity(
            identity.uid,
            is_anonymous=identity.is_anonymous,
            synthesized=False,
        )
        self._publish(IdentityResolved(user_id=identity.uid))
