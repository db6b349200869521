from .cache_backend import CacheBackend
from .chat_provider import ChatProvider
from .document_repository import DocumentRepository
from .embedding_provider import EmbeddingProvider
from .job_queue import JobQueue
from .page_extractor import PageExtractor
from .vector_index import VectorIndex

__all__ = [
    "CacheBackend",
    "ChatProvider",
    "DocumentRepository",
    "EmbeddingProvider",
    "JobQueue",
    "PageExtractor",
    "VectorIndex",
]
