"""Unit tests for the WorkerPool."""

import asyncio

import pytest

from techdocs.application.services.worker_pool import WorkerPool


# ── Helpers ──


class BlockingHandler:
    """Records jobs and holds each one until ``release`` is set."""

    def __init__(self):
        self.release = asyncio.Event()
        self.started: list = []
        self.finished: list = []

    async def __call__(self, job):
        self.started.append(job)
        await self.release.wait()
        self.finished.append(job)


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


# ── Tests ──


def test_default_capacity_is_twice_the_worker_count():
    pool = WorkerPool(BlockingHandler(), workers=3)
    assert pool.capacity == 6


def test_rejects_zero_workers():
    with pytest.raises(ValueError):
        WorkerPool(BlockingHandler(), workers=0)


@pytest.mark.asyncio
async def test_processes_every_submitted_job():
    done = []

    async def handler(job):
        done.append(job)

    pool = WorkerPool(handler, workers=3)
    pool.start()
    for i in range(10):
        assert await pool.submit(i) is True

    discarded = await pool.shutdown(drain_timeout=1.0)

    assert sorted(done) == list(range(10))
    assert discarded == 0


@pytest.mark.asyncio
async def test_submit_blocks_while_queue_is_full():
    """With one busy worker and a full queue, the next submit waits for a slot."""
    handler = BlockingHandler()
    pool = WorkerPool(handler, workers=1, queue_size=1)
    pool.start()

    assert await pool.submit("a") is True
    await _settle()
    assert handler.started == ["a"]
    assert await pool.submit("b") is True
    assert pool.pending == 1

    blocked = asyncio.create_task(pool.submit("c"))
    await asyncio.sleep(0.05)
    assert not blocked.done()

    handler.release.set()
    assert await asyncio.wait_for(blocked, timeout=1.0) is True

    await pool.shutdown(drain_timeout=1.0)
    assert handler.finished == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_shutdown_discards_queued_jobs_and_lets_running_job_finish():
    handler = BlockingHandler()
    pool = WorkerPool(handler, workers=1, queue_size=5)
    pool.start()
    for job in ("a", "b", "c"):
        await pool.submit(job)
    await _settle()

    shutdown = asyncio.create_task(pool.shutdown())
    await _settle()
    handler.release.set()
    discarded = await asyncio.wait_for(shutdown, timeout=1.0)

    assert handler.finished == ["a"]
    assert discarded == 2
    assert pool.pending == 0
    assert pool.is_running is False


@pytest.mark.asyncio
async def test_submit_after_shutdown_is_rejected():
    pool = WorkerPool(BlockingHandler(), workers=1)
    pool.start()
    await pool.shutdown()

    assert await pool.submit("late") is False


@pytest.mark.asyncio
async def test_blocked_submit_returns_false_when_pool_shuts_down():
    handler = BlockingHandler()
    pool = WorkerPool(handler, workers=1, queue_size=1)
    pool.start()
    await pool.submit("a")
    await _settle()
    await pool.submit("b")

    blocked = asyncio.create_task(pool.submit("c"))
    await _settle()
    shutdown = asyncio.create_task(pool.shutdown())
    await _settle()

    assert await asyncio.wait_for(blocked, timeout=1.0) is False
    handler.release.set()
    await asyncio.wait_for(shutdown, timeout=1.0)


@pytest.mark.asyncio
async def test_handler_exception_does_not_kill_the_worker():
    done = []

    async def handler(job):
        if job == "bad":
            raise RuntimeError("boom")
        done.append(job)

    pool = WorkerPool(handler, workers=1)
    pool.start()
    await pool.submit("bad")
    await pool.submit("good")

    await pool.shutdown(drain_timeout=1.0)

    assert done == ["good"]
