"""Explicit TTL cache for slow-changing lookups.

Used for notification fan-out recipients. Authorization code must never
read from it: actor role and status are always loaded fresh.
"""
from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

import structlog

T = TypeVar("T")

log = structlog.get_logger(__name__)


class TTLCache(Generic[T]):
    """Holds one value together with when it was fetched and how long it lives.

    ``get_or_refresh`` returns the cached value while it is fresh and calls
    the loader otherwise. Concurrent refreshes are serialised so the loader
    runs once per expiry.
    """

    def __init__(
        self,
        ttl_seconds: float,
        *,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._data: T | None = None
        self._fetched_at: float | None = None
        self._lock = asyncio.Lock()

    @property
    def fetched_at(self) -> float | None:
        return self._fetched_at

    def is_fresh(self) -> bool:
        if self._fetched_at is None:
            return False
        return (self._clock() - self._fetched_at) < self.ttl_seconds

    async def get_or_refresh(self, loader: Callable[[], Awaitable[T]]) -> T:
        if self.is_fresh():
            return self._data  # type: ignore[return-value]

        async with self._lock:
            # Another waiter may have refreshed while we queued on the lock.
            if self.is_fresh():
                return self._data  # type: ignore[return-value]

            data = await loader()
            self._data = data
            self._fetched_at = self._clock()
            log.debug("cache_refreshed", cache=self.name)
            return data

    def invalidate(self) -> None:
        self._data = None
        self._fetched_at = None
