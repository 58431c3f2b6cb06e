"""
Transient Status Message

Only the latest message is kept. Setting a message cancels the pending
expiry and schedules a new one, so every message gets the full TTL
from the moment it was set.
"""

import asyncio
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StatusMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    set_at: float

    @property
    def is_error(self) -> bool:
        return self.text.startswith("Error")


class StatusMessageBox:
    """Holds the current status message and clears it after `ttl_seconds`."""

    def __init__(self, ttl_seconds: float = 3.0):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = ttl_seconds
        self._message: Optional[StatusMessage] = None
        self._timer: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def message(self) -> Optional[StatusMessage]:
        return self._message

    @property
    def text(self) -> Optional[str]:
        return self._message.text if self._message else None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def set(self, text: str) -> Optional[StatusMessage]:
        """
        Replace the current message and re-arm the expiry. Needs a running loop.

        Ignored once the box is closed; returns None in that case.
        """
        if self._closed:
            return None
        loop = asyncio.get_running_loop()
        self._cancel_timer()
        message = StatusMessage(text=text, set_at=loop.time())
        self._message = message
        self._timer = loop.create_task(self._expire(message))
        return message

    def clear(self) -> None:
        self._cancel_timer()
        self._message = None

    def close(self) -> None:
        """Cancel the pending expiry and ignore any later messages (shutdown)."""
        self._closed = True
        self.clear()

    async def _expire(self, message: StatusMessage) -> None:
        await asyncio.sleep(self._ttl)
        if self._message is message:
            self._message = None
            self._timer = None

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
