"""
Shared cache interface.

Values are JSON-serializable structures. Every hit reports how long ago
the value was stored so callers can surface staleness.

Dependencies: None
System role: Cache contract for per-user context summaries
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheHit:
    """Cached value with its age."""

    value: Any
    age_seconds: float


class CacheStore(ABC):
    """Key/value cache with per-entry TTL and prefix invalidation."""

    @abstractmethod
    async def get(self, key: str) -> CacheHit | None:
        """
        Look up a key.

        Args:
            key: Cache key

        Returns:
            CacheHit if present and not expired, None otherwise

        Raises:
            CacheError: When the backend cannot be reached
        """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """
        Store a JSON-serializable value.

        Args:
            key: Cache key
            value: Value to store
            ttl_seconds: Time-to-live (store default if None)

        Raises:
            CacheError: When the backend cannot be reached
        """

    @abstractmethod
    async def invalidate(self, prefix: str) -> int:
        """
        Remove every key starting with prefix.

        Args:
            prefix: Key prefix

        Returns:
            int: Number of keys removed

        Raises:
            CacheError: When the backend cannot be reached
        """

    async def ping(self) -> bool:
        """Whether the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release backend connections."""
        return None
