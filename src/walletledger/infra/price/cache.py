"""In-memory TTL cache for price lookups with in-flight request sharing."""

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Hashable
from typing import Any

logger = logging.getLogger(__name__)


class PriceCache:
    """Cache-or-fetch keyed by arbitrary hashable keys.

    Concurrent callers asking for the same key while a fetch is running share
    that fetch. A None result is returned but not stored. When full, the oldest
    entry is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = 86_400,
        max_entries: int = 50_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()
        self._inflight: dict[Hashable, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> Any | None:
        item = self._entries.get(key)
        if item is None:
            return None
        stored_at, value = item
        if (self._clock() - stored_at) > self.ttl:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        if value is None:
            return
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), value)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    async def get_or_fetch(self, key: Hashable, fetcher: Callable[[], Awaitable[Any]]) -> Any | None:
        cached = self.get(key)
        if cached is not None:
            return cached

        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await fetcher()
        except Exception as exc:
            future.set_exception(exc)
            # mark retrieved so an unobserved failure is not logged by the loop
            future.exception()
            raise
        else:
            self.set(key, value)
            future.set_result(value)
            return value
        finally:
            if not future.done():
                future.cancel()
            self._inflight.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
