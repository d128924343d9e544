"""
In-memory cache store with TTL support.

Process-local, so only suitable for a single instance (dev and tests).
Values are stored JSON-encoded, matching what RedisCacheStore returns.

Dependencies: asyncio
System role: Cache backend for local development
"""

import asyncio
import json
import time
from typing import Any, Callable

from knowledge_context.boundary.cache.base_cache import CacheHit, CacheStore


class MemoryCacheStore(CacheStore):
    """Dict-backed cache guarded by an asyncio lock."""

    def __init__(self, default_ttl: int = 300, clock: Callable[[], float] = time.time) -> None:
        """
        Initialize an empty store.

        Args:
            default_ttl: TTL in seconds when set() receives none
            clock: Time source in epoch seconds
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, tuple[str, float, float]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> CacheHit | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            payload, stored_at, expires_at = entry
            now = self._clock()
            if now >= expires_at:
                del self._entries[key]
                return None
            return CacheHit(value=json.loads(payload), age_seconds=now - stored_at)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl
        payload = json.dumps(value, default=str)
        async with self._lock:
            now = self._clock()
            self._entries[key] = (payload, now, now + ttl)
            expired = [k for k, (_, _, expires_at) in self._entries.items() if now >= expires_at]
            for k in expired:
                del self._entries[k]

    async def invalidate(self, prefix: str) -> int:
        async with self._lock:
            matching = [key for key in self._entries if key.startswith(prefix)]
            for key in matching:
                del self._entries[key]
            return len(matching)
