"""Per-market exclusive locks.

Book matching, curve execution and cancellation all read-then-write market
state, so every mutation of one market runs under that market's lock.
Different markets never share a lock and proceed in parallel.
"""

import asyncio
from collections import defaultdict


class MarketLockRegistry:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def for_market(self, market_id: str) -> asyncio.Lock:
        return self._locks[market_id]

    def __len__(self) -> int:
        return len(self._locks)
