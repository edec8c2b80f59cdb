"""Connection supervisor — reconnect with linear backoff and a retry cap.

The session object reports lifecycle events (connected, disconnected,
logged on); the supervisor decides whether to reconnect. Disconnects that
were asked for (by us or announced by the server) are not failures.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger

from enginetags.cdn.protocols import Session, SessionError
from enginetags.config.schema import SessionConfig

Sleeper = Callable[[float], Awaitable[None]]


class ConnectionSupervisor:
    def __init__(
        self,
        session: Session,
        config: Optional[SessionConfig] = None,
        *,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.session = session
        self.config = config or SessionConfig()
        self._sleep = sleep

        self.running = False
        self.connecting = False
        self.connected = False
        self.logged_on = False
        self.expecting_disconnect = False
        self.failed_attempts = 0
        self.cell_id = 0

    def _reset_connection_flags(self) -> None:
        self.expecting_disconnect = False

    def connect(self) -> None:
        self.running = True
        self.connected = False
        self.connecting = True
        self.failed_attempts = 0
        self._reset_connection_flags()
        logger.info("Connecting to content network...")
        self.session.connect()

    def disconnect(self) -> None:
        """Disconnect on purpose; no reconnect will follow."""
        self.expecting_disconnect = True
        self.running = False
        self.session.disconnect()

    def expect_disconnect(self) -> None:
        """The server announced it will drop us; don't treat it as a failure."""
        self.expecting_disconnect = True

    def on_connected(self) -> None:
        self.connecting = False
        self.connected = True
        self.failed_attempts = 0
        logger.info("Connected, logging in...")

    def on_logged_on(self, ok: bool, cell_id: int = 0, detail: str = "") -> None:
        if not ok:
            self.running = False
            raise SessionError(f"Unable to log in: {detail or 'rejected'}")
        self.logged_on = True
        self.cell_id = cell_id
        logger.info("Logged in, suggested cell id {}", cell_id)

    async def on_disconnected(self, user_initiated: bool = False) -> bool:
        """Handle a disconnect. Returns True if a reconnect was issued.

        Raises SessionError once ``max_reconnect_attempts`` consecutive
        attempts have failed.
        """
        self.connected = False
        self.logged_on = False

        if user_initiated or self.expecting_disconnect:
            logger.info("Disconnected from content network")
            return False

        limit = self.config.max_reconnect_attempts
        if self.failed_attempts >= limit:
            self.running = False
            raise SessionError(f"Could not connect after {limit} tries")

        if not self.running:
            return False

        if self.connecting:
            logger.warning("Connection failed, trying again")
        else:
            logger.warning("Lost connection, reconnecting")

        self.failed_attempts += 1
        self.connecting = True
        await self._sleep(self.config.reconnect_delay * self.failed_attempts)
        self._reset_connection_flags()
        self.session.connect()
        return True
