"""
Redis-backed cache store.

Shared by every service instance. Each value is wrapped in a JSON
envelope carrying its store time; expiry is delegated to Redis (SET EX).
Prefix invalidation walks matching keys with SCAN.

Dependencies: redis (redis.asyncio)
System role: Cache backend for multi-instance deployments
"""

import json
import logging
import time
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from knowledge_context.boundary.cache.base_cache import CacheHit, CacheStore
from knowledge_context.core.exceptions import CacheError

logger = logging.getLogger(__name__)

SCAN_BATCH = 500


def _escape_glob(value: str) -> str:
    for char in ("\\", "*", "?", "[", "]"):
        value = value.replace(char, f"\\{char}")
    return value


class RedisCacheStore(CacheStore):
    """Cache store over a Redis connection pool."""

    def __init__(
        self,
        url: str,
        key_prefix: str = "kc:",
        default_ttl: int = 300,
        client: redis.Redis | None = None,
    ) -> None:
        """
        Initialize store.

        Args:
            url: Redis connection URL
            key_prefix: Namespace prepended to every key
            default_ttl: TTL in seconds when set() receives none
            client: Pre-built client (tests)
        """
        self.key_prefix = key_prefix
        self.default_ttl = default_ttl
        self._client = client or redis.Redis.from_url(url, decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> CacheHit | None:
        try:
            raw = await self._client.get(self._key(key))
        except RedisError as e:
            raise CacheError(f"Cache read failed: {e}", {"key": key}) from e
        if raw is None:
            return None
        envelope = json.loads(raw)
        return CacheHit(
            value=envelope["value"],
            age_seconds=max(0.0, time.time() - envelope["stored_at"]),
        )

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        envelope = json.dumps({"stored_at": time.time(), "value": value}, default=str)
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl
        try:
            await self._client.set(self._key(key), envelope, ex=ttl)
        except RedisError as e:
            raise CacheError(f"Cache write failed: {e}", {"key": key}) from e

    async def invalidate(self, prefix: str) -> int:
        pattern = f"{_escape_glob(self._key(prefix))}*"
        deleted = 0
        batch: list[str] = []
        try:
            async for key in self._client.scan_iter(match=pattern, count=SCAN_BATCH):
                batch.append(key)
                if len(batch) >= SCAN_BATCH:
                    deleted += await self._client.delete(*batch)
                    batch = []
            if batch:
                deleted += await self._client.delete(*batch)
        except RedisError as e:
            raise CacheError(f"Cache invalidation failed: {e}", {"prefix": prefix}) from e
        logger.info(f"{__name__}:invalidate - Removed {deleted} keys for prefix {prefix!r}")
        return deleted

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning(f"{__name__}:ping - Redis unreachable: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
