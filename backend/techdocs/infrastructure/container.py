"""Process-wide wiring of infrastructure adapters into application services.

Both entry points (the HTTP API and the ingestion worker) build one
``ServiceContainer`` at startup and close it on shutdown. Nothing is created at
import time.
"""

import logging
from urllib.parse import urlparse

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from techdocs.application.services import (
    CacheLimits,
    ChatService,
    DocumentService,
    EmbeddingService,
    IngestionPipeline,
    TieredCache,
    TutorialService,
)
from techdocs.config import Settings, get_settings
from techdocs.infrastructure.cache import RedisCacheBackend
from techdocs.infrastructure.database.repositories import PgVectorIndex, SQLAlchemyDocumentRepository
from techdocs.infrastructure.database.session import build_engine, build_session_factory, create_schema
from techdocs.infrastructure.extractors import UniversalExtractor, W3SchoolsExtractor
from techdocs.infrastructure.ollama import OllamaClient
from techdocs.infrastructure.queue import RedisStreamJobQueue

logger = logging.getLogger(__name__)


async def ensure_database_exists(database_url: str) -> None:
    """Create the PostgreSQL database if it does not yet exist.

    Connects to the default ``postgres`` maintenance database, checks for the
    target database name, and issues ``CREATE DATABASE`` when missing.
    """
    import asyncpg

    db_name = urlparse(database_url).path.lstrip("/")
    if not db_name:
        return

    maintenance_url = database_url.rsplit("/", 1)[0] + "/postgres"
    maintenance_url = maintenance_url.replace("postgresql+asyncpg://", "postgresql://", 1)

    try:
        conn = await asyncpg.connect(maintenance_url)
        try:
            exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
            if not exists:
                # CREATE DATABASE cannot run inside a transaction block
                await conn.execute(f'CREATE DATABASE "{db_name}"')
                logger.info("Created database '%s'", db_name)
            else:
                logger.debug("Database '%s' already exists", db_name)
        finally:
            await conn.close()
    except (OSError, asyncpg.PostgresError) as exc:
        logger.warning("Could not auto-create database '%s': %s", db_name, exc)


class ServiceContainer:
    """Owns every long-lived resource: engine, Redis client, HTTP client and the services."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None
        self.http_client: httpx.AsyncClient | None = None
        self.cache_backend: RedisCacheBackend | None = None
        self.job_queue: RedisStreamJobQueue | None = None
        self.ollama: OllamaClient | None = None
        self.cache: TieredCache | None = None
        self.document_repository: SQLAlchemyDocumentRepository | None = None
        self.vector_index: PgVectorIndex | None = None
        self.embedding_service: EmbeddingService | None = None
        self.chat_service: ChatService | None = None
        self.document_service: DocumentService | None = None
        self.tutorial_service: TutorialService | None = None
        self.ingestion_pipeline: IngestionPipeline | None = None

    async def open(self) -> "ServiceContainer":
        s = self.settings

        # 1. PostgreSQL: database, pgvector extension and tables
        await ensure_database_exists(s.database_url)
        self.engine = build_engine(s.database_url)
        await create_schema(self.engine)
        self.session_factory = build_session_factory(self.engine)
        self.document_repository = SQLAlchemyDocumentRepository(self.session_factory)
        self.vector_index = PgVectorIndex(self.session_factory, dimensions=s.embedding_dimensions)

        # 2. Redis: cache backend and job stream share one client
        self.cache_backend = RedisCacheBackend(
            s.redis_url,
            max_memory_bytes=s.cache_max_memory_bytes,
            configure_server=s.cache_configure_server,
        )
        await self.cache_backend.open()
        self.cache = TieredCache(
            self.cache_backend,
            CacheLimits(
                ttl_seconds=s.cache_ttl_seconds,
                max_key_bytes=s.cache_max_key_bytes,
                max_value_bytes=s.cache_max_value_bytes,
            ),
        )
        self.job_queue = RedisStreamJobQueue(
            self.cache_backend.client,
            topic=s.scrape_topic,
            group=s.scrape_consumer_group,
            consumer=s.scrape_consumer_name,
        )

        # 3. Ollama and the shared HTTP client
        self.http_client = httpx.AsyncClient(timeout=s.ollama_timeout_seconds)
        self.ollama = OllamaClient(
            base_url=s.ollama_base_url,
            embedding_model=s.ollama_embedding_model,
            chat_model=s.ollama_chat_model,
            timeout=s.ollama_timeout_seconds,
            dimensions=s.embedding_dimensions,
            http_client=self.http_client,
        )

        # 4. Application services
        self.embedding_service = EmbeddingService(self.ollama, self.cache.embeddings)
        self.chat_service = ChatService(
            cache=self.cache,
            embedding_service=self.embedding_service,
            vector_index=self.vector_index,
            document_repository=self.document_repository,
            chat_provider=self.ollama,
        )
        self.document_service = DocumentService(
            cache=self.cache,
            embedding_service=self.embedding_service,
            vector_index=self.vector_index,
            document_repository=self.document_repository,
            job_queue=self.job_queue,
            scrape_topic=s.scrape_topic,
        )
        self.tutorial_service = TutorialService(self.document_service, self.ollama)

        logger.info("Service container ready (env=%s)", s.app_env)
        return self

    def build_ingestion_pipeline(self) -> IngestionPipeline:
        """Wire the scrape-job consumer. Only the worker process calls this."""
        s = self.settings
        extractor_options = {
            "timeout": s.scraper_timeout_seconds,
            "user_agent": s.scraper_user_agent,
        }
        self.ingestion_pipeline = IngestionPipeline(
            job_queue=self.job_queue,
            document_repository=self.document_repository,
            vector_index=self.vector_index,
            embedding_provider=self.ollama,
            extractors=[
                W3SchoolsExtractor(**extractor_options),
                UniversalExtractor(**extractor_options),
            ],
            workers=s.ingestion_workers,
            backoff_base=s.ingestion_backoff_base_seconds,
            backoff_max=s.ingestion_backoff_max_seconds,
            drain_timeout=s.ingestion_drain_timeout_seconds,
        )
        return self.ingestion_pipeline

    async def close(self) -> None:
        if self.ingestion_pipeline is not None:
            await self.ingestion_pipeline.stop()
        if self.chat_service is not None:
            await self.chat_service.wait_for_background_tasks()
        if self.http_client is not None:
            await self.http_client.aclose()
        if self.cache_backend is not None:
            await self.cache_backend.close()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("Service container closed")
