"""Self-refreshing pool of content servers.

A background task polls the server directory and publishes a new,
weight-ordered tuple of eligible servers on every successful refresh.
Readers and the refresh task share one lock, held only to swap or to
read the current tuple, never across an await. Readiness is a one-shot
event set by the first refresh that publishes at least one server and
never cleared afterwards.
"""

from __future__ import annotations

import asyncio
import threading
from typing import List, Optional, Tuple

from loguru import logger

from enginetags.cdn.models import Server
from enginetags.cdn.protocols import PoolError, RateLimitedError, ServerDirectory, Session
from enginetags.config.schema import PoolConfig


class ServerPool:
    """Weight-ordered content servers, refreshed in the background.

    Must be constructed inside a running event loop; the refresh task
    starts immediately. Use ``async with`` or call :meth:`aclose` to stop it.
    """

    def __init__(
        self,
        session: Session,
        directory: ServerDirectory,
        config: Optional[PoolConfig] = None,
    ) -> None:
        self.session = session
        self.directory = directory
        self.config = config or PoolConfig()
        self.running = True
        self.refresh_count = 0

        self._eligible_types = frozenset(self.config.eligible_types)
        self._lock = threading.Lock()
        self._servers: Tuple[Server, ...] = ()
        self._ready = asyncio.Event()
        self._wake = asyncio.Event()
        self._stop_requested = False
        self._error: Optional[BaseException] = None
        self._loop = asyncio.get_running_loop()
        self._task = self._loop.create_task(
            self._refresh_loop(), name="server-pool-refresh"
        )

    # ---- queries ----

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    @property
    def servers(self) -> Tuple[Server, ...]:
        with self._lock:
            return self._servers

    def select_for_package(self, package_id: int) -> List[Server]:
        """Eligible servers allowed to serve *package_id*, most preferred first."""
        self._raise_if_dead()
        with self._lock:
            return [s for s in self._servers if s.serves(package_id)]

    async def wait_until_ready(self) -> None:
        """Return once the pool has published servers at least once.

        There is no timeout; wrap in ``asyncio.wait_for`` if the session may
        never connect. Raises PoolError if the refresh loop ends first.
        """
        if self._ready.is_set():
            return
        waiter = asyncio.ensure_future(self._ready.wait())
        try:
            await asyncio.wait({waiter, self._task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
        if not self._ready.is_set():
            self._raise_if_dead()
            raise PoolError("server pool stopped before any servers were available")

    # ---- lifecycle ----

    def close(self) -> None:
        """Ask the refresh loop to stop at its next check.

        Safe to call from any thread; the wake-up is scheduled on the
        pool's own loop.
        """
        self._stop_requested = True
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None
        if current is self._loop:
            self._wake.set()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._wake.set)

    async def aclose(self) -> None:
        """Stop the refresh loop and wait for it to exit.

        An in-flight directory request is not interrupted.
        """
        self.close()
        await self._task

    async def __aenter__(self) -> "ServerPool":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ---- refresh loop ----

    def _raise_if_dead(self) -> None:
        if self._error is not None:
            raise PoolError(f"server pool refresh failed: {self._error}") from self._error

    async def _refresh_loop(self) -> None:
        try:
            while not self._stop_requested:
                delay = self.config.refresh_interval
                try:
                    if self.session.is_connected and not await self._refresh_once():
                        return
                except RateLimitedError:
                    delay = self.config.rate_limit_backoff
                    logger.warning("Server directory is rate limiting, retrying in {}s", delay)
                await self._sleep(delay)
        except Exception as exc:
            self._error = exc
            logger.opt(exception=exc).error("Server pool refresh loop died")
        finally:
            self.running = False
            logger.debug("Server pool refresh loop exited after {} refreshes", self.refresh_count)

    async def _refresh_once(self) -> bool:
        """Fetch and publish one server list. Returns False if asked to stop."""
        servers = await self.directory.load_servers(
            self.session.configuration, self.session.cell_id
        )
        if not servers:
            logger.debug("Server directory returned no servers, keeping current pool")
            return True

        eligible = tuple(
            sorted(
                (s for s in servers if s.type in self._eligible_types),
                key=lambda s: s.weighted_load,
            )
        )

        with self._lock:
            if self._stop_requested:
                self._ready.set()
                return False
            self._servers = eligible
            self.refresh_count += 1
            if eligible:
                self._ready.set()

        logger.debug("Server pool refreshed: {} of {} servers eligible", len(eligible), len(servers))
        return True

    async def _sleep(self, delay: float) -> None:
        try:
            await asyncio.wait_for(self._wake.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
