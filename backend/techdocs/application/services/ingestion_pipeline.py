"""Ingestion pipeline — turns queued scrape jobs into indexed documents.

Per job:
    dequeued → dedup_checked → extracted → embedded → persisted

One reader task consumes the job queue and submits each job to a bounded
WorkerPool. Workers talk to the document store, vector index and embedding
provider directly; the read caches are not involved. A job that fails at
any stage is logged and dropped. Jobs are never retried or re-queued.
"""

import asyncio
import logging
from collections import Counter

from techdocs.application.interfaces import (
    DocumentRepository,
    EmbeddingProvider,
    JobQueue,
    PageExtractor,
    VectorIndex,
)
from techdocs.application.services.worker_pool import WorkerPool
from techdocs.domain.entities import (
    Document,
    ExtractedPage,
    IngestionResult,
    IngestionStage,
    IngestionStatus,
    ScrapeJob,
    generate_id,
)
from techdocs.domain.exceptions import ExtractionError
from techdocs.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("IngestionPipeline")


def build_document(page: ExtractedPage, job: ScrapeJob, source: str) -> Document:
    """Convert an extracted page to a Document, applying the job's category and tags."""
    content = page.content
    if page.examples:
        content += "\n\n## Code Examples\n\n"
        content += "".join(
            f"### Example {i}\n\n```\n{example}\n```\n\n"
            for i, example in enumerate(page.examples, start=1)
        )

    tags = list(dict.fromkeys([*page.tags, *job.tags]))
    metadata = dict(page.metadata)
    metadata["url"] = page.url
    metadata["job_id"] = job.job_id

    return Document(
        id=generate_id(source),
        title=page.title,
        content=content.strip(),
        category=job.category or page.category,
        tags=[t for t in tags if t],
        author=page.metadata.get("author", ""),
        created_at=page.fetched_at,
        updated_at=page.fetched_at,
        metadata=metadata,
    )


class IngestionPipeline:
    """Consumes scrape jobs and runs them through the worker pool."""

    def __init__(
        self,
        job_queue: JobQueue,
        document_repository: DocumentRepository,
        vector_index: VectorIndex,
        embedding_provider: EmbeddingProvider,
        extractors: list[PageExtractor],
        *,
        workers: int = 5,
        queue_size: int | None = None,
        backoff_base: float = 0.5,
        backoff_max: float = 30.0,
        drain_timeout: float | None = None,
    ) -> None:
        if not extractors:
            raise ValueError("IngestionPipeline needs at least one extractor")
        self._job_queue = job_queue
        self._documents = document_repository
        self._vector_index = vector_index
        self._embedding_provider = embedding_provider
        self._extractors = list(extractors)
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        self._drain_timeout = drain_timeout
        self._worker_count = workers

        self._pool = WorkerPool(self.process_job, workers=workers, queue_size=queue_size)
        self._in_flight: set[str] = set()
        self._outcomes: Counter[str] = Counter()
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def pool(self) -> WorkerPool:
        return self._pool

    @property
    def stats(self) -> dict[str, int]:
        """Count of finished jobs per IngestionStatus value."""
        return dict(self._outcomes)

    # ── Lifecycle ───────────────────────────────────────────────────

    async def start(self) -> None:
        """Start the worker pool and the queue reader."""
        self._running = True
        self._pool.start()
        self._task = asyncio.create_task(self._loop(), name="ingestion-reader")
        plog.step_start(PipelineStage.PIPELINE, "Ingestion pipeline started", workers=self._worker_count)

    async def stop(self) -> None:
        """Stop reading, then shut the pool down (queued jobs are discarded)."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        discarded = await self._pool.shutdown(drain_timeout=self._drain_timeout)
        plog.step_complete(PipelineStage.COMPLETE, "Ingestion pipeline stopped", discarded=discarded)
        plog.stats(**self.stats)

    def backoff_delay(self, consecutive_failures: int) -> float:
        """Capped exponential delay before the next read after a failure."""
        if self._backoff_base <= 0 or consecutive_failures <= 0:
            return 0.0
        return min(self._backoff_max, self._backoff_base * 2 ** (consecutive_failures - 1))

    async def _loop(self) -> None:
        """Reader loop — one consume at a time, submission blocks when the pool is full."""
        failures = 0
        while self._running:
            try:
                payload = await self._job_queue.consume()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                failures += 1
                delay = self.backoff_delay(failures)
                logger.error(
                    "Failed to read scrape job (consecutive failures=%d, retry in %.2fs): %s",
                    failures,
                    delay,
                    exc,
                )
                if delay:
                    await asyncio.sleep(delay)
                continue

            failures = 0
            await self.process_message(payload)

    # ── Job handling ────────────────────────────────────────────────

    async def process_message(self, payload: bytes) -> bool:
        """Decode a queue payload and hand it to the pool.

        Returns False when the payload is malformed or the pool is shutting down.
        """
        try:
            job = ScrapeJob.from_json(payload)
        except ValueError as exc:
            plog.step_error(PipelineStage.DEQUEUE, "Dropping malformed scrape job", error=exc)
            self._outcomes[IngestionStatus.FAILED.value] += 1
            return False

        plog.step_start(PipelineStage.DEQUEUE, f"Received {job.url}", job_id=job.job_id)
        accepted = await self._pool.submit(job)
        if not accepted:
            logger.warning("Scrape job %s rejected: pool is shutting down", job.job_id)
        return accepted

    def select_extractor(self, url: str) -> PageExtractor:
        """First registered extractor that supports the URL."""
        for extractor in self._extractors:
            if extractor.supports(url):
                return extractor
        raise ExtractionError(url, "no extractor supports this URL")

    async def process_job(self, job: ScrapeJob) -> IngestionResult:
        """Run one job through every stage. Never raises for job-level errors."""
        stage = IngestionStage.DEQUEUED
        source: str | None = None

        if job.url in self._in_flight:
            plog.step_skip(PipelineStage.DEDUP, f"{job.url} is already being ingested")
            return self._finish(job, IngestionStatus.SKIPPED_DUPLICATE, stage)

        self._in_flight.add(job.url)
        try:
            existing = await self._documents.search_text(job.url, 1)
            if existing:
                plog.step_skip(PipelineStage.DEDUP, f"{job.url} already stored as {existing[0].id}")
                return self._finish(job, IngestionStatus.SKIPPED_DUPLICATE, IngestionStage.DEDUP_CHECKED)
            stage = IngestionStage.DEDUP_CHECKED

            extractor = self.select_extractor(job.url)
            source = extractor.source
            plog.step_start(PipelineStage.EXTRACT, f"Extracting {job.url}", extractor=source)
            page = await extractor.extract(job.url)
            if not page.content.strip() and not page.examples:
                raise ExtractionError(job.url, "page has no extractable content")
            stage = IngestionStage.EXTRACTED

            document = build_document(page, job, source)
            plog.detail(f"title={document.title!r}", category=document.category, tags=len(document.tags))
            vector = await self._embedding_provider.embed(document.content)
            stage = IngestionStage.EMBEDDED
            plog.step_complete(PipelineStage.EMBED, f"Embedded {len(document.content)} chars", dims=len(vector))

            await self._documents.upsert(document)
            await self._vector_index.upsert(vector, document.vector_metadata(source))
            stage = IngestionStage.PERSISTED
            plog.step_complete(PipelineStage.PERSIST, f"Stored {document.id}", source=source)

            return self._finish(job, IngestionStatus.PERSISTED, stage, document_id=document.id, source=source)
        except Exception as exc:
            plog.step_error(PipelineStage.ERROR, f"Job {job.job_id} failed after {stage.value}", error=exc)
            return self._finish(job, IngestionStatus.FAILED, stage, source=source, error=str(exc))
        finally:
            self._in_flight.discard(job.url)

    def _finish(
        self,
        job: ScrapeJob,
        status: IngestionStatus,
        stage: IngestionStage,
        *,
        document_id: str | None = None,
        source: str | None = None,
        error: str | None = None,
    ) -> IngestionResult:
        self._outcomes[status.value] += 1
        return IngestionResult(
            job_id=job.job_id,
            url=job.url,
            status=status,
            stage=stage,
            document_id=document_id,
            source=source,
            error=error,
        )
