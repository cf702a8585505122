"""Redirect Resolver - resolve short codes and count clicks.

``resolve()`` reads the mapping and returns its original URL straight away.
The click increment is dispatched as a detached asyncio task that the caller
never awaits; its failure is logged and counted, and never changes the
redirect outcome. Pending tasks are held in a set so they are not garbage
collected mid-flight, and ``drain()`` lets the owning process wait for them
on shutdown.
"""

import asyncio
import logging
from typing import Union

from prometheus_client import Counter

from app.enums import RequestStatus
from app.errors import NotFoundError
from app.registry import URLRegistry

__all__ = ["RedirectResolver"]

REDIRECT_REQUESTS_TOTAL = Counter(
    "url_shortener_redirect_requests_total",
    "Total redirect lookups by outcome",
    ["status"],
)
CLICK_INCREMENT_FAILURES_TOTAL = Counter(
    "url_shortener_click_increment_failures_total",
    "Click increments that failed in the background",
)


class RedirectResolver:
    def __init__(self, registry: URLRegistry, logger: Union[logging.Logger, logging.LoggerAdapter]):
        self._registry = registry
        self._logger = logger
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of click increments still in flight."""
        return len(self._pending)

    async def resolve(self, short_code: str) -> str:
        """Return the original URL for ``short_code`` and schedule a click increment.

        Raises:
            NotFoundError: No mapping exists for ``short_code``.
            StoreUnavailableError: The lookup itself failed.
        """
        try:
            url = await self._registry.find_by_code(short_code)
        except Exception:
            REDIRECT_REQUESTS_TOTAL.labels(status=RequestStatus.ERROR).inc()
            raise

        if url is None:
            REDIRECT_REQUESTS_TOTAL.labels(status=RequestStatus.NOT_FOUND).inc()
            raise NotFoundError(f"Short code not found: {short_code}")

        task = asyncio.create_task(self._increment_clicks(short_code))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

        REDIRECT_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
        return url.original_url

    async def drain(self) -> None:
        """Wait for every in-flight click increment to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _increment_clicks(self, short_code: str) -> None:
        try:
            await self._registry.increment_clicks(short_code)
        except Exception as exc:
            CLICK_INCREMENT_FAILURES_TOTAL.inc()
            self._logger.error(f"Click increment failed for {short_code}: {exc}")
