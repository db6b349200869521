"""Embedding service — cache-aside lookup in front of the embedding provider."""

import logging

from techdocs.application.interfaces.embedding_provider import EmbeddingProvider
from techdocs.application.services.tiered_cache import EmbeddingCache
from techdocs.domain.exceptions import CacheError

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Resolves text to a vector, consulting the embedding cache first.

    Cache failures are treated as misses. Provider failures propagate.
    """

    def __init__(self, embedding_provider: EmbeddingProvider, cache: EmbeddingCache | None = None):
        self._embedding_provider = embedding_provider
        self._cache = cache

    @property
    def provider(self) -> EmbeddingProvider:
        return self._embedding_provider

    async def embed(self, text: str) -> list[float]:
        """Return the embedding for ``text``, populating the cache on a miss."""
        if self._cache is not None:
            try:
                cached = await self._cache.get(text)
            except CacheError as exc:
                logger.warning("Embedding cache read failed, recomputing: %s", exc)
                cached = None
            if cached is not None:
                logger.debug("Embedding cache hit (%d chars)", len(text))
                return cached

        vector = await self._embedding_provider.embed(text)

        if self._cache is not None:
            try:
                await self._cache.set(text, vector)
            except CacheError as exc:
                logger.warning("Embedding cache write skipped: %s", exc)

        return vector

    async def embed_uncached(self, text: str) -> list[float]:
        """Call the provider directly, without reading or writing the cache."""
        return await self._embedding_provider.embed(text)
