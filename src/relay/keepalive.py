"""Periodic keep-alive ping that stops an idle upstream host from sleeping."""

from __future__ import annotations

import asyncio
import contextlib
import logging

import httpx

logger = logging.getLogger(__name__)


class KeepAlive:
    """Background task issuing ``GET url`` every ``interval`` seconds."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        interval: float = 10.0,
        timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._url = url
        self._interval = interval
        self._timeout = timeout
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def ping(self) -> bool:
        """Send one ping. Failures are logged, never raised."""
        try:
            resp = await self._http.get(self._url, timeout=self._timeout)
        except httpx.HTTPError as exc:
            logger.warning("Keep-alive request to %s failed: %s", self._url, exc)
            return False
        if resp.is_error:
            logger.warning("Keep-alive request to %s returned %d", self._url, resp.status_code)
            return False
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.ping()

    def start(self) -> None:
        if self.running:
            return
        logger.info("Starting keep-alive for %s every %ss", self._url, self._interval)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
