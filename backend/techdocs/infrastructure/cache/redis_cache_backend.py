"""Redis implementation of the CacheBackend port."""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from techdocs.application.interfaces import CacheBackend
from techdocs.domain.exceptions import CacheError

logger = logging.getLogger(__name__)

EVICTION_POLICY = "allkeys-lru"


class RedisCacheBackend(CacheBackend):
    """Byte store on a Redis server with TTL expiry and LRU eviction.

    ``open()`` verifies connectivity and, when ``configure_server`` is set,
    applies the memory ceiling and eviction policy with CONFIG SET. Servers
    that forbid CONFIG (managed Redis) are left as they are.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        *,
        max_memory_bytes: int | None = None,
        configure_server: bool = True,
        client: aioredis.Redis | None = None,
    ):
        self._redis_url = redis_url
        self._max_memory_bytes = max_memory_bytes
        self._configure_server = configure_server
        self._client = client

    @property
    def client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(self._redis_url, decode_responses=False)
        return self._client

    async def open(self) -> None:
        try:
            await self.client.ping()
        except RedisError as exc:
            raise CacheError(f"Redis is unreachable at {self._redis_url}: {exc}") from exc

        if not self._configure_server:
            return
        try:
            if self._max_memory_bytes:
                await self.client.config_set("maxmemory", str(self._max_memory_bytes))
            await self.client.config_set("maxmemory-policy", EVICTION_POLICY)
            logger.info(
                "Redis cache configured (maxmemory=%s, policy=%s)",
                self._max_memory_bytes,
                EVICTION_POLICY,
            )
        except RedisError as exc:
            logger.warning("Could not configure Redis eviction, using server defaults: %s", exc)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, key: str) -> bytes | None:
        try:
            return await self.client.get(key)
        except RedisError as exc:
            raise CacheError(f"Cache get failed for {key!r}: {exc}") from exc

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        try:
            if ttl_seconds > 0:
                await self.client.setex(key, ttl_seconds, value)
            else:
                await self.client.set(key, value)
        except RedisError as exc:
            raise CacheError(f"Cache set failed for {key!r}: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as exc:
            raise CacheError(f"Cache delete failed for {key!r}: {exc}") from exc

    async def keys(self, pattern: str) -> list[str]:
        try:
            found = [key async for key in self.client.scan_iter(match=pattern, count=500)]
        except RedisError as exc:
            raise CacheError(f"Cache scan failed for {pattern!r}: {exc}") from exc
        return [k.decode() if isinstance(k, bytes) else k for k in found]
