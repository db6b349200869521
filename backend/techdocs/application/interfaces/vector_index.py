"""Abstract vector index interface (port)."""

from abc import ABC, abstractmethod
from typing import Any

from techdocs.domain.entities import SearchResult


class VectorIndex(ABC):
    """Port — stores (vector, metadata) pairs and answers nearest-neighbour queries."""

    @abstractmethod
    async def upsert(self, vector: list[float], metadata: dict[str, Any]) -> str:
        """Store a vector with its metadata and return the record id.

        Raises:
            VectorIndexError: If the write fails.
        """
        ...

    @abstractmethod
    async def query(self, vector: list[float], limit: int) -> list[SearchResult]:
        """Return up to ``limit`` nearest records, highest similarity first.

        Raises:
            VectorIndexError: If the query fails.
        """
        ...
