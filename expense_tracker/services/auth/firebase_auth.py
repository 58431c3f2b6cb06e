"""
Firebase Authentication via the Identity Toolkit REST API

The firebase-admin SDK can mint and verify tokens but cannot sign a
user in, so client sign-in goes through the public REST endpoints:
- accounts:signUp (no email/password) creates an anonymous user
- accounts:signInWithCustomToken exchanges a custom token for an ID token
- accounts:lookup resolves an ID token to the user's local ID

Requests are blocking and run off the event loop. Sign-in is not
retried; the caller decides what a failure means.
"""

import asyncio
from typing import Any, Optional

import requests

from expense_tracker.config import FirebaseSettings, get_settings
from expense_tracker.services.auth.interface import (
    AuthError,
    AuthProviderInterface,
    Identity,
)


IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"


class FirebaseAuthProvider(AuthProviderInterface):
    """Signs users in against Firebase Authentication."""

    def __init__(
        self,
        settings: Optional[FirebaseSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__()
        self._settings = settings or get_settings().firebase
        self._session = session or requests.Session()
        self._id_token: Optional[str] = None

    def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST to an Identity Toolkit endpoint and return the JSON body."""
        try:
            response = self._session.post(
                f"{IDENTITY_TOOLKIT_URL}/accounts:{endpoint}",
                params={"key": self._settings.api_key},
                json=payload,
                timeout=self._settings.auth_timeout_seconds,
            )
        except requests.RequestException as e:
            raise AuthError(f"Auth request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200:
            message = body.get("error", {}).get("message") if isinstance(body, dict) else None
            raise AuthError(
                f"Auth request rejected ({response.status_code}): {message or response.text}"
            )
        return body

    def _anonymous_sign_up(self) -> Identity:
        body = self._post("signUp", {"returnSecureToken": True})
        self._id_token = body.get("idToken")
        local_id = body.get("localId")
        if not local_id:
            raise AuthError("Anonymous sign-in returned no user ID")
        return Identity(uid=local_id, is_anonymous=True)

    def _custom_token_sign_in(self, token: str) -> Identity:
        body = self._post(
            "signInWithCustomToken",
            {"token": token, "returnSecureToken": True},
        )
        id_token = body.get("idToken")
        if not id_token:
            raise AuthError("Custom token sign-in returned no ID token")
        self._id_token = id_token

        lookup = self._post("lookup", {"idToken": id_token})
        users = lookup.get("users") or []
        if not users or not users[0].get("localId"):
            raise AuthError("Could not resolve the signed-in user")
        return Identity(uid=users[0]["localId"], is_anonymous=False)

    async def sign_in_anonymously(self) -> Identity:
        identity = await asyncio.to_thread(self._anonymous_sign_up)
        self._set_identity(identity)
        return identity

    async def sign_in_with_token(self, token: str) -> Identity:
        identity = await asyncio.to_thread(self._custom_token_sign_in, token)
        self._set_identity(identity)
        return identity
