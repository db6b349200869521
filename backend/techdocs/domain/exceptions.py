"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class ChatProviderError(Exception):
    """Raised when a completion provider returns an error."""

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")


class EmbeddingProviderError(Exception):
    """Raised when an embedding provider fails or returns an unusable vector."""

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")


class CacheError(Exception):
    """Raised when the cache backend fails.

    A cache miss is never reported through this exception.
    """


class CacheSizeLimitError(CacheError):
    """Raised when a key or value exceeds the configured cache limits."""

    def __init__(self, what: str, size: int, limit: int):
        self.what = what
        self.size = size
        self.limit = limit
        super().__init__(f"cache {what} size {size} exceeds limit {limit}")


class VectorIndexError(Exception):
    """Raised when the vector index cannot be written or queried."""


class DocumentStoreError(Exception):
    """Raised when the document store cannot be written or queried."""


class JobQueueError(Exception):
    """Raised when a job cannot be published to or consumed from the queue."""


class ExtractionError(Exception):
    """Raised when a page cannot be fetched or parsed."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(f"{url}: {message}")
