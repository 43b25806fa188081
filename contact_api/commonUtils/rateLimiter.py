import math
import time
from typing import Optional

from limits import RateLimitItemPerSecond
from limits.aio.strategies import FixedWindowRateLimiter
from limits.storage import storage_from_string

ASYNC_SCHEME_PREFIX = "async+"


class RateLimitExceeded(Exception):
    def __init__(self, key: str, retry_after: int):
        super().__init__(f"Rate limit exceeded for {key}, retry in {retry_after}s")
        self.key = key
        self.retry_after = retry_after


class RateLimiter:
    """
    Fixed quota of points per window per key. The window opens on the first hit of a key.

    State lives in the configured `limits` storage, always used through its asyncio
    variant. The default "memory://" store is per process and lost on restart; point
    storage_uri at a shared store (redis://...) when running more than one instance.
    """

    def __init__(self, points: int, window_seconds: int, storage_uri: str = "memory://"):
        self.points = points
        self.window_seconds = window_seconds
        if not storage_uri.startswith(ASYNC_SCHEME_PREFIX):
            storage_uri = ASYNC_SCHEME_PREFIX + storage_uri
        self.storage = storage_from_string(storage_uri)
        self._item = RateLimitItemPerSecond(points, window_seconds)
        self._strategy = FixedWindowRateLimiter(self.storage)

    async def consume(self, key: str) -> None:
        """Take one point for key, raise RateLimitExceeded when the window is used up."""
        if await self._strategy.hit(self._item, key):
            return

        reset_time, _remaining = await self._strategy.get_window_stats(self._item, key)
        retry_after = max(1, math.ceil(reset_time - time.time()))
        raise RateLimitExceeded(key, retry_after)

    async def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            await self.storage.reset()
        else:
            await self._strategy.clear(self._item, key)
