"""Tests for the in-memory and Redis cache stores."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from knowledge_context.boundary.cache import redis_cache
from knowledge_context.boundary.cache.memory_cache import MemoryCacheStore
from knowledge_context.boundary.cache.redis_cache import RedisCacheStore
from knowledge_context.core.exceptions import CacheError


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestMemoryCacheStore:
    """Test MemoryCacheStore."""

    async def test_hit_reports_age(self) -> None:
        clock = FakeClock()
        store = MemoryCacheStore(default_ttl=60, clock=clock)

        await store.set("user_context:a", {"goals": [1, 2]})
        clock.now += 12.5
        hit = await store.get("user_context:a")

        assert hit.value == {"goals": [1, 2]}
        assert hit.age_seconds == 12.5

    async def test_entries_expire(self) -> None:
        clock = FakeClock()
        store = MemoryCacheStore(default_ttl=60, clock=clock)

        await store.set("short", "x", ttl_seconds=5)
        await store.set("default", "y")
        clock.now += 5

        assert await store.get("short") is None
        assert (await store.get("default")).value == "y"
        clock.now += 55
        assert await store.get("default") is None

    async def test_values_are_copied(self) -> None:
        store = MemoryCacheStore()
        value = {"items": [1]}

        await store.set("k", value)
        value["items"].append(2)

        assert (await store.get("k")).value == {"items": [1]}

    async def test_prefix_invalidation(self) -> None:
        store = MemoryCacheStore()
        await store.set("user_context:a", 1)
        await store.set("user_context:ab", 2)
        await store.set("other:a", 3)

        removed = await store.invalidate("user_context:a")

        assert removed == 2
        assert await store.get("user_context:a") is None
        assert (await store.get("other:a")).value == 3

    async def test_ping(self) -> None:
        assert await MemoryCacheStore().ping() is True


def scan_results(*keys):
    async def _scan(*args, **kwargs):
        for key in keys:
            yield key

    return _scan


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock()
    client.delete = AsyncMock(side_effect=lambda *keys: len(keys))
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def store(client) -> RedisCacheStore:
    return RedisCacheStore("redis://unused", key_prefix="kc:", default_ttl=300, client=client)


class TestRedisCacheStore:
    """Test RedisCacheStore against a mocked client."""

    async def test_set_wraps_value_with_store_time(self, store, client) -> None:
        await store.set("user_context:a", {"goals": []}, ttl_seconds=30)

        key, payload = client.set.call_args[0]
        envelope = json.loads(payload)
        assert key == "kc:user_context:a"
        assert envelope["value"] == {"goals": []}
        assert isinstance(envelope["stored_at"], float)
        assert client.set.call_args.kwargs == {"ex": 30}

    async def test_default_ttl(self, store, client) -> None:
        await store.set("k", 1)

        assert client.set.call_args.kwargs == {"ex": 300}

    async def test_get_unwraps_envelope(self, store, client, monkeypatch) -> None:
        monkeypatch.setattr(redis_cache, "time", SimpleNamespace(time=lambda: 110.0))
        client.get.return_value = json.dumps({"stored_at": 100.0, "value": [1, 2]})

        hit = await store.get("k")

        client.get.assert_awaited_once_with("kc:k")
        assert hit.value == [1, 2]
        assert hit.age_seconds == 10.0

    async def test_miss(self, store) -> None:
        assert await store.get("k") is None

    async def test_errors_become_cache_errors(self, store, client) -> None:
        client.get.side_effect = RedisConnectionError("refused")
        client.set.side_effect = RedisConnectionError("refused")

        with pytest.raises(CacheError):
            await store.get("k")
        with pytest.raises(CacheError):
            await store.set("k", 1)

    async def test_invalidate_deletes_scanned_keys(self, store, client) -> None:
        client.scan_iter = MagicMock(side_effect=scan_results("kc:user_context:a", "kc:user_context:ab"))

        removed = await store.invalidate("user_context:a")

        assert removed == 2
        assert client.scan_iter.call_args.kwargs["match"] == "kc:user_context:a*"
        client.delete.assert_awaited_once_with("kc:user_context:a", "kc:user_context:ab")

    async def test_invalidate_escapes_glob_characters(self, store, client) -> None:
        client.scan_iter = MagicMock(side_effect=scan_results())

        removed = await store.invalidate("odd*[key]")

        assert removed == 0
        assert client.scan_iter.call_args.kwargs["match"] == "kc:odd\\*\\[key\\]*"
        client.delete.assert_not_awaited()

    async def test_ping_failure_reports_false(self, store, client) -> None:
        client.ping.side_effect = RedisConnectionError("refused")

        assert await store.ping() is False

    async def test_close(self, store, client) -> None:
        await store.close()

        client.aclose.assert_awaited_once()
