"""Redis Streams implementation of the JobQueue port.

Jobs are appended with XADD under a single ``payload`` field and read through
a consumer group, so several worker processes share one stream and each job
is delivered to one of them. A message is acknowledged as soon as it is
handed to the caller.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError, ResponseError

from techdocs.application.interfaces import JobQueue
from techdocs.domain.exceptions import JobQueueError

logger = logging.getLogger(__name__)

PAYLOAD_FIELD = b"payload"


class RedisStreamJobQueue(JobQueue):
    """At-least-once job transport over a Redis stream and consumer group."""

    def __init__(
        self,
        client: aioredis.Redis,
        topic: str = "scrape-jobs",
        group: str = "scraper-workers",
        consumer: str = "worker-1",
        *,
        block_ms: int = 5000,
    ):
        self._client = client
        self._topic = topic
        self._group = group
        self._consumer = consumer
        self._block_ms = block_ms
        self._group_ready = False

    @property
    def topic(self) -> str:
        return self._topic

    async def ensure_group(self) -> None:
        """Create the consumer group (and the stream) if they do not exist."""
        if self._group_ready:
            return
        try:
            await self._client.xgroup_create(self._topic, self._group, id="0", mkstream=True)
            logger.info("Created consumer group %s on %s", self._group, self._topic)
        except ResponseError as exc:
            if "BUSYGROUP" not in str(exc):
                raise JobQueueError(f"Could not create consumer group {self._group}: {exc}") from exc
        except RedisError as exc:
            raise JobQueueError(f"Could not create consumer group {self._group}: {exc}") from exc
        self._group_ready = True

    async def publish(self, topic: str, payload: bytes) -> None:
        try:
            message_id = await self._client.xadd(topic, {PAYLOAD_FIELD: payload})
        except RedisError as exc:
            raise JobQueueError(f"Failed to publish to {topic}: {exc}") from exc
        logger.debug("Published message %s to %s", message_id, topic)

    async def consume(self) -> bytes:
        await self.ensure_group()
        while True:
            try:
                response = await self._client.xreadgroup(
                    self._group,
                    self._consumer,
                    {self._topic: ">"},
                    count=1,
                    block=self._block_ms,
                )
            except RedisError as exc:
                raise JobQueueError(f"Failed to read from {self._topic}: {exc}") from exc

            if not response:
                continue

            _stream, messages = response[0]
            message_id, fields = messages[0]
            try:
                await self._client.xack(self._topic, self._group, message_id)
            except RedisError as exc:
                raise JobQueueError(f"Failed to acknowledge {message_id!r}: {exc}") from exc

            payload = fields.get(PAYLOAD_FIELD)
            if payload is None:
                payload = fields.get(PAYLOAD_FIELD.decode(), b"")
            return payload.encode() if isinstance(payload, str) else payload
