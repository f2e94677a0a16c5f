"""Shared upstream HTTP session with lazy construction and a fixed time-to-live.

The cached object is an httpx.AsyncClient (connection pool + cookie jar). It is
not an upstream-issued token: credentials are still sent with every request.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

SESSION_TTL_SECONDS = 50 * 60
LIST_TIMEOUT_SECONDS = 30.0

ClientFactory = Callable[[], httpx.AsyncClient | Awaitable[httpx.AsyncClient]]


def build_http_client(
    timeout: float = LIST_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        transport=transport,
    )


class SessionCache:
    def __init__(
        self,
        factory: ClientFactory | None = None,
        ttl: float = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        grace_period: float = 2 * LIST_TIMEOUT_SECONDS,
    ):
        self._factory = factory or build_http_client
        self._ttl = ttl
        self._clock = clock
        self._grace_period = grace_period
        self._lock = asyncio.Lock()
        self._client: httpx.AsyncClient | None = None
        self._created_at = 0.0
        self._retired: set[httpx.AsyncClient] = set()
        self._closers: set[asyncio.Task] = set()
        self.builds = 0

    def _valid_client(self) -> httpx.AsyncClient | None:
        client = self._client
        if client is not None and self._clock() - self._created_at < self._ttl:
            return client
        return None

    async def acquire(self) -> httpx.AsyncClient:
        client = self._valid_client()
        if client is not None:
            return client

        async with self._lock:
            # Another caller may have rebuilt while we waited for the lock.
            client = self._valid_client()
            if client is not None:
                return client

            if self._client is not None:
                logger.info("Upstream HTTP session expired, rebuilding")
                self._retire(self._client)
                self._client = None

            logger.info("Creating upstream HTTP session")
            client = self._factory()
            if inspect.isawaitable(client):
                client = await client

            self._client = client
            self._created_at = self._clock()
            self.builds += 1
            return client

    def invalidate(self) -> None:
        """Drop the current session so the next acquire() starts from a clean transport."""
        if self._client is None:
            return
        logger.warning("Invalidating upstream HTTP session")
        self._retire(self._client)
        self._client = None

    def _retire(self, client: httpx.AsyncClient) -> None:
        # Upstream calls are bounded by the listing timeout, so in-flight requests
        # on the old client finish within the grace period.
        self._retired.add(client)
        task = asyncio.get_running_loop().create_task(self._close_later(client))
        self._closers.add(task)
        task.add_done_callback(self._closers.discard)

    async def _close_later(self, client: httpx.AsyncClient) -> None:
        await asyncio.sleep(self._grace_period)
        self._retired.discard(client)
        await client.aclose()

    async def aclose(self) -> None:
        for task in list(self._closers):
            task.cancel()
        await asyncio.gather(*self._closers, return_exceptions=True)

        clients = list(self._retired)
        if self._client is not None:
            clients.append(self._client)
        self._client = None
        self._retired.clear()
        for client in clients:
            await client.aclose()
