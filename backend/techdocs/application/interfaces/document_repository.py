"""Abstract repository interface (port) for documents."""

from abc import ABC, abstractmethod

from techdocs.domain.entities import Document


class DocumentRepository(ABC):
    """Port — durable document storage with upsert-on-id semantics."""

    @abstractmethod
    async def upsert(self, document: Document) -> Document:
        """Insert or replace a document. An existing ``created_at`` is preserved."""
        ...

    @abstractmethod
    async def get_by_id(self, document_id: str) -> Document | None:
        ...

    @abstractmethod
    async def search_text(self, query: str, limit: int = 10) -> list[Document]:
        """Case-insensitive substring search, newest first."""
        ...
