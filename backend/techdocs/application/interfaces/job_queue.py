"""Abstract job queue interface (port)."""

from abc import ABC, abstractmethod


class JobQueue(ABC):
    """Port — at-least-once message transport for scrape jobs.

    No ordering guarantee is assumed by consumers.
    """

    @abstractmethod
    async def publish(self, topic: str, payload: bytes) -> None:
        """Append a message to ``topic``.

        Raises:
            JobQueueError: If the message could not be published.
        """
        ...

    @abstractmethod
    async def consume(self) -> bytes:
        """Wait for and return the next message payload.

        Raises:
            JobQueueError: If the read fails.
        """
        ...
