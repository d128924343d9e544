"""Tests for vector store and cache store selection."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from knowledge_context.boundary.cache import cache_factory
from knowledge_context.boundary.cache.memory_cache import MemoryCacheStore
from knowledge_context.boundary.cache.redis_cache import RedisCacheStore
from knowledge_context.boundary.vdb.numpy_store import NumpyVectorStore
from knowledge_context.boundary.vdb.pgvector_store import PgVectorStore
from knowledge_context.boundary.vdb.vector_store_factory import get_vector_store
from knowledge_context.configs.cache import CacheSettings


@pytest.mark.parametrize("store_type,expected", [("pgvector", PgVectorStore), ("NUMPY", NumpyVectorStore)])
def test_vector_store_selection(store_type, expected) -> None:
    session = MagicMock()

    store = get_vector_store(session, store_type=store_type)

    assert isinstance(store, expected)
    assert store.session is session


def test_vector_store_from_settings() -> None:
    assert isinstance(get_vector_store(MagicMock()), NumpyVectorStore)


def test_unknown_vector_store() -> None:
    with pytest.raises(ValueError):
        get_vector_store(MagicMock(), store_type="faiss")


@pytest.mark.parametrize("backend,expected", [("redis", RedisCacheStore), ("memory", MemoryCacheStore)])
def test_cache_store_selection(monkeypatch, backend, expected) -> None:
    settings = SimpleNamespace(cache=CacheSettings(backend=backend, user_context_ttl_seconds=42))
    monkeypatch.setattr(cache_factory, "get_settings", lambda: settings)

    store = cache_factory.get_cache_store()

    assert isinstance(store, expected)
    assert store.default_ttl == 42


def test_unknown_cache_backend(monkeypatch) -> None:
    settings = SimpleNamespace(cache=CacheSettings(backend="memcached"))
    monkeypatch.setattr(cache_factory, "get_settings", lambda: settings)

    with pytest.raises(ValueError):
        cache_factory.get_cache_store()
