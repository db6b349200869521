"""Abstract cache backend interface (port)."""

from abc import ABC, abstractmethod


class CacheBackend(ABC):
    """Port — a size-bounded, TTL-based byte store with LRU eviction.

    Every method raises ``CacheError`` on backend failure. A missing key is
    reported by ``get`` returning ``None``.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        ...

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def keys(self, pattern: str) -> list[str]:
        """Return every key matching a glob-style pattern such as ``doc:*``."""
        ...
