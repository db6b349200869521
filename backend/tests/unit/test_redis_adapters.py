"""Unit tests for the Redis cache backend and stream job queue."""

import fnmatch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from techdocs.domain.exceptions import CacheError, JobQueueError
from techdocs.infrastructure.cache import RedisCacheBackend
from techdocs.infrastructure.queue import RedisStreamJobQueue


# ── Helpers ──


class StubRedis:
    """The subset of redis.asyncio.Redis the adapters call, held in memory."""

    def __init__(self):
        self.values: dict[str, bytes] = {}
        self.expiry: dict[str, int] = {}
        self.config: dict[str, str] = {}
        self.streams: dict[str, list[tuple[bytes, dict]]] = {}
        self.groups: set[tuple[str, str]] = set()
        self.acked: list[bytes] = []
        self.down = False
        self.config_forbidden = False
        self.closed = False

    def _check(self):
        if self.down:
            raise RedisConnectionError("Connection refused")

    async def ping(self):
        self._check()
        return True

    async def config_set(self, name, value):
        if self.config_forbidden:
            raise ResponseError("unknown command 'CONFIG'")
        self.config[name] = value

    async def aclose(self):
        self.closed = True

    async def get(self, key):
        self._check()
        return self.values.get(key)

    async def setex(self, key, ttl, value):
        self._check()
        self.values[key] = value
        self.expiry[key] = ttl

    async def set(self, key, value):
        self._check()
        self.values[key] = value

    async def delete(self, key):
        self._check()
        self.values.pop(key, None)

    async def scan_iter(self, match=None, count=None):
        self._check()
        for key in list(self.values):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key.encode()

    async def xgroup_create(self, name, groupname, id="$", mkstream=False):
        self._check()
        if (name, groupname) in self.groups:
            raise ResponseError("BUSYGROUP Consumer Group name already exists")
        self.groups.add((name, groupname))
        self.streams.setdefault(name, [])

    async def xadd(self, name, fields):
        self._check()
        stream = self.streams.setdefault(name, [])
        message_id = f"{len(stream) + 1}-0".encode()
        stream.append((message_id, dict(fields)))
        return message_id

    async def xreadgroup(self, groupname, consumername, streams, count=None, block=None):
        self._check()
        (name,) = streams
        stream = self.streams.get(name, [])
        if not stream:
            return []
        return [[name.encode(), [stream.pop(0)]]]

    async def xack(self, name, groupname, *ids):
        self._check()
        self.acked.extend(ids)
        return len(ids)


# ── Cache backend ──


@pytest.mark.asyncio
async def test_open_configures_memory_ceiling_and_lru_policy():
    client = StubRedis()
    backend = RedisCacheBackend(max_memory_bytes=1024, client=client)

    await backend.open()

    assert client.config == {"maxmemory": "1024", "maxmemory-policy": "allkeys-lru"}


@pytest.mark.asyncio
async def test_open_tolerates_forbidden_config():
    client = StubRedis()
    client.config_forbidden = True

    await RedisCacheBackend(max_memory_bytes=1024, client=client).open()


@pytest.mark.asyncio
async def test_open_skips_config_when_disabled():
    client = StubRedis()

    await RedisCacheBackend(max_memory_bytes=1024, configure_server=False, client=client).open()

    assert client.config == {}


@pytest.mark.asyncio
async def test_open_unreachable_server_raises_cache_error():
    client = StubRedis()
    client.down = True

    with pytest.raises(CacheError):
        await RedisCacheBackend(client=client).open()


@pytest.mark.asyncio
async def test_set_uses_expiry_only_when_ttl_positive():
    client = StubRedis()
    backend = RedisCacheBackend(client=client)

    await backend.set("doc:1", b"one", 60)
    await backend.set("doc:2", b"two", 0)

    assert client.expiry == {"doc:1": 60}
    assert await backend.get("doc:2") == b"two"
    assert await backend.get("missing") is None


@pytest.mark.asyncio
async def test_keys_decodes_scanned_keys():
    client = StubRedis()
    backend = RedisCacheBackend(client=client)
    await backend.set("doc:1", b"a", 60)
    await backend.set("doc:2", b"b", 60)
    await backend.set("emb:x", b"c", 60)

    assert sorted(await backend.keys("doc:*")) == ["doc:1", "doc:2"]

    await backend.delete("doc:1")
    assert await backend.keys("doc:*") == ["doc:2"]


@pytest.mark.asyncio
async def test_operations_wrap_redis_errors():
    client = StubRedis()
    backend = RedisCacheBackend(client=client)
    client.down = True

    for call in (
        backend.get("k"),
        backend.set("k", b"v", 10),
        backend.delete("k"),
        backend.keys("*"),
    ):
        with pytest.raises(CacheError):
            await call


@pytest.mark.asyncio
async def test_close_releases_the_client():
    client = StubRedis()
    backend = RedisCacheBackend(client=client)

    await backend.close()

    assert client.closed is True


# ── Stream job queue ──


@pytest.mark.asyncio
async def test_publish_then_consume_returns_payload_and_acks():
    client = StubRedis()
    queue = RedisStreamJobQueue(client, topic="scrape-jobs", group="scraper-workers")

    await queue.publish("scrape-jobs", b'{"url": "https://example.com"}')
    payload = await queue.consume()

    assert payload == b'{"url": "https://example.com"}'
    assert client.acked == [b"1-0"]
    assert ("scrape-jobs", "scraper-workers") in client.groups


@pytest.mark.asyncio
async def test_existing_group_is_reused():
    client = StubRedis()
    client.groups.add(("scrape-jobs", "scraper-workers"))
    queue = RedisStreamJobQueue(client)

    await queue.ensure_group()
    await queue.ensure_group()


@pytest.mark.asyncio
async def test_decoded_string_payload_is_returned_as_bytes():
    client = StubRedis()
    client.streams["scrape-jobs"] = [(b"1-0", {"payload": '{"url": "u"}'})]
    queue = RedisStreamJobQueue(client)

    assert await queue.consume() == b'{"url": "u"}'


@pytest.mark.asyncio
async def test_queue_errors_wrap_redis_errors():
    client = StubRedis()
    queue = RedisStreamJobQueue(client)
    client.down = True

    with pytest.raises(JobQueueError):
        await queue.publish("scrape-jobs", b"{}")
    with pytest.raises(JobQueueError):
        await queue.consume()
