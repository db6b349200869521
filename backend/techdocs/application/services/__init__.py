from .tiered_cache import (
    CacheLimits,
    ChatCache,
    DocumentCache,
    EmbeddingCache,
    SearchCache,
    TieredCache,
)
from .embedding_service import EmbeddingService
from .chat_service import ChatService
from .document_service import DocumentService
from .tutorial_service import TutorialResult, TutorialService
from .worker_pool import WorkerPool
from .ingestion_pipeline import IngestionPipeline

__all__ = [
    "CacheLimits",
    "ChatCache",
    "DocumentCache",
    "EmbeddingCache",
    "SearchCache",
    "TieredCache",
    "EmbeddingService",
    "ChatService",
    "DocumentService",
    "TutorialResult",
    "TutorialService",
    "WorkerPool",
    "IngestionPipeline",
]
