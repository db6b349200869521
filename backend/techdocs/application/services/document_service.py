"""Application service for document submission, search and scrape requests."""

import logging

from techdocs.application.interfaces import DocumentRepository, JobQueue, VectorIndex
from techdocs.application.services.embedding_service import EmbeddingService
from techdocs.application.services.tiered_cache import TieredCache
from techdocs.domain.entities import Document, ScrapeJob
from techdocs.domain.exceptions import CacheError, EntityNotFoundError

logger = logging.getLogger(__name__)

USER_SOURCE = "user"


class DocumentService:
    """Orchestrates document use cases. Depends on ports only (DI)."""

    def __init__(
        self,
        cache: TieredCache,
        embedding_service: EmbeddingService,
        vector_index: VectorIndex,
        document_repository: DocumentRepository,
        job_queue: JobQueue,
        scrape_topic: str = "scrape-jobs",
    ):
        self._cache = cache
        self._embedding_service = embedding_service
        self._vector_index = vector_index
        self._documents = document_repository
        self._job_queue = job_queue
        self._scrape_topic = scrape_topic

    async def add_document(self, document: Document) -> Document:
        """Embed, persist and index a document.

        The document is stored before its vector. Cached search results for
        the document's category are dropped afterwards.
        """
        document.ensure_id("doc")
        vector = await self._embedding_service.embed(document.content)

        stored = await self._documents.upsert(document)

        try:
            await self._cache.documents.set(stored)
        except CacheError as exc:
            logger.warning("Document cache write skipped for %s: %s", stored.id, exc)

        await self._vector_index.upsert(vector, stored.vector_metadata(USER_SOURCE))

        if stored.category:
            try:
                await self._cache.searches.delete_query(stored.category)
            except CacheError as exc:
                logger.warning("Search cache invalidation failed for '%s': %s", stored.category, exc)

        logger.info("Added document %s (%s)", stored.id, stored.category or "uncategorised")
        return stored

    async def get_document(self, document_id: str) -> Document:
        try:
            cached = await self._cache.documents.get(document_id)
        except CacheError as exc:
            logger.warning("Document cache read failed for %s: %s", document_id, exc)
            cached = None
        if cached is not None:
            return cached

        document = await self._documents.get_by_id(document_id)
        if document is None:
            raise EntityNotFoundError("Document", document_id)
        return document

    async def search_documents(self, query: str, limit: int = 10) -> list[Document]:
        """Free-text search through the search cache."""
        try:
            cached = await self._cache.searches.get(query, limit)
        except CacheError as exc:
            logger.warning("Search cache read failed for '%s': %s", query, exc)
            cached = None
        if cached is not None:
            return cached

        documents = await self._documents.search_text(query, limit)

        try:
            await self._cache.searches.set(query, limit, documents)
        except CacheError as exc:
            logger.warning("Search cache write skipped for '%s': %s", query, exc)
        return documents

    async def scrape_document(self, url: str, category: str = "", tags: list[str] | None = None) -> ScrapeJob:
        """Queue a URL for ingestion and return the published job."""
        job = ScrapeJob(url=url, category=category, tags=list(tags or []))
        await self._job_queue.publish(self._scrape_topic, job.to_json())
        logger.info("Queued scrape job %s for %s", job.job_id, url)
        return job
