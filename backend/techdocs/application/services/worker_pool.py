"""Worker pool — a fixed set of asyncio workers draining a bounded queue.

Submission waits while the queue is full, which is what throttles the
ingestion reader when workers fall behind. Shutdown stops idle workers at
once, lets busy workers finish their current job and discards whatever is
still queued, unless a drain timeout is given.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

JobHandler = Callable[[Any], Awaitable[Any]]


class WorkerPool:
    """Runs ``handler(job)`` for submitted jobs on ``workers`` concurrent tasks."""

    def __init__(self, handler: JobHandler, workers: int = 5, queue_size: int | None = None):
        if workers < 1:
            raise ValueError("WorkerPool needs at least one worker")
        self._handler = handler
        self._worker_count = workers
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size or workers * 2)
        self._stopping = asyncio.Event()
        self._workers: list[asyncio.Task] = []
        self._discarded = 0

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    @property
    def pending(self) -> int:
        """Number of jobs waiting in the queue."""
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return bool(self._workers) and not self._stopping.is_set()

    def start(self) -> None:
        """Spawn the worker tasks."""
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._run_worker(i), name=f"ingestion-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info("WorkerPool started with %d workers (queue capacity %d)", self._worker_count, self.capacity)

    async def submit(self, job: Any) -> bool:
        """Queue a job, waiting for a free slot.

        Returns False only when the pool is shutting down, in which case the
        job was not accepted.
        """
        if self._stopping.is_set():
            return False

        put = asyncio.ensure_future(self._queue.put(job))
        stop = asyncio.ensure_future(self._stopping.wait())
        try:
            await asyncio.wait({put, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop.cancel()
            if not put.done():
                put.cancel()

        return put.done() and not put.cancelled()

    async def shutdown(self, drain_timeout: float | None = None) -> int:
        """Stop the workers and return the number of discarded jobs."""
        if drain_timeout and self._workers:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
            except asyncio.TimeoutError:
                logger.warning("WorkerPool drain timed out after %.1fs", drain_timeout)

        self._stopping.set()
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)

        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
            self._discarded += 1

        if self._discarded:
            logger.warning("WorkerPool stopped, discarded %d queued jobs", self._discarded)
        else:
            logger.info("WorkerPool stopped")
        return self._discarded

    async def _run_worker(self, index: int) -> None:
        while not self._stopping.is_set():
            get = asyncio.ensure_future(self._queue.get())
            stop = asyncio.ensure_future(self._stopping.wait())
            await asyncio.wait({get, stop}, return_when=asyncio.FIRST_COMPLETED)
            stop.cancel()

            if self._stopping.is_set():
                # Stop wins over a job fetched at the same moment.
                get.cancel()
                if get.done() and not get.cancelled():
                    self._queue.task_done()
                    self._discarded += 1
                break

            job = get.result()
            try:
                await self._handler(job)
            except Exception:
                logger.exception("Worker %d failed to process job", index)
            finally:
                self._queue.task_done()
