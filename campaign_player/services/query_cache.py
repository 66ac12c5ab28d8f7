from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

QueryKey = tuple[Any, ...]


class QueryCache:
    """
    Read-through cache for dashboard queries, keyed by resource name and request parameters.

    Mutations invalidate whole key prefixes; entries are only ever dropped, never patched in place.
    """

    def __init__(self, *, ttl_seconds: float = 30.0, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[QueryKey, tuple[float, Any]] = {}

    def __contains__(self, key: QueryKey) -> bool:
        return self._lookup(key) is not _MISSING

    def __len__(self) -> int:
        return len(self._entries)

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        cached = self._lookup(key)
        if cached is not _MISSING:
            return cached
        value = await loader()
        self._entries[key] = (self._clock(), value)
        return value

    def invalidate(self, *prefix: Any) -> int:
        doomed = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in doomed:
            del self._entries[key]
        if doomed:
            logger.debug("Invalidated cached queries", extra={"prefix": list(prefix), "count": len(doomed)})
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def _lookup(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        stored_at, value = entry
        if self._clock() - stored_at > self._ttl:
            del self._entries[key]
            return _MISSING
        return value


_MISSING = object()
