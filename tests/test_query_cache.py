from __future__ import annotations

import asyncio

from campaign_player.services.query_cache import QueryCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_fetch_reuses_cached_value_until_ttl_expires():
    clock = FakeClock()
    cache = QueryCache(ttl_seconds=10, clock=clock)
    loads: list[int] = []

    async def loader() -> int:
        loads.append(1)
        return len(loads)

    assert asyncio.run(cache.fetch(("campaigns", 1), loader)) == 1
    assert asyncio.run(cache.fetch(("campaigns", 1), loader)) == 1
    clock.now = 11
    assert asyncio.run(cache.fetch(("campaigns", 1), loader)) == 2
    assert len(loads) == 2


def test_invalidate_drops_keys_by_prefix_only():
    cache = QueryCache()

    async def loader() -> str:
        return "value"

    for key in [("campaigns", 1), ("campaigns", 2), ("campaign", 5, "user:1"), ("campaign", 6, "user:1")]:
        asyncio.run(cache.fetch(key, loader))

    assert cache.invalidate("campaigns") == 2
    assert cache.invalidate("campaign", 5) == 1
    assert ("campaign", 6, "user:1") in cache
    assert ("campaigns", 1) not in cache
    assert len(cache) == 1


def test_failed_loads_are_not_cached():
    cache = QueryCache()
    attempts: list[int] = []

    async def loader() -> str:
        attempts.append(1)
        raise RuntimeError("down")

    for _ in range(2):
        try:
            asyncio.run(cache.fetch(("videos",), loader))
        except RuntimeError:
            pass

    assert len(attempts) == 2
    assert len(cache) == 0
