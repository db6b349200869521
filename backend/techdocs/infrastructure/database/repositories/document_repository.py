"""Concrete document repository backed by PostgreSQL."""

import logging

from sqlalchemy import Text, cast, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from techdocs.application.interfaces import DocumentRepository
from techdocs.domain.entities import Document
from techdocs.domain.exceptions import DocumentStoreError
from techdocs.infrastructure.database.models import DocumentModel

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLAlchemyDocumentRepository(DocumentRepository):
    """Implements the DocumentRepository port.

    Opens one session per operation so the repository can be shared by
    concurrent requests and ingestion workers.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @staticmethod
    def _to_entity(model: DocumentModel) -> Document:
        """Map ORM model → domain entity."""
        return Document(
            id=model.id,
            title=model.title,
            content=model.content,
            category=model.category,
            tags=list(model.tags or []),
            author=model.author,
            created_at=model.created_at,
            updated_at=model.updated_at,
            metadata=dict(model.metadata_ or {}),
        )

    @staticmethod
    def _row_to_entity(row) -> Document:
        """Map a Core result mapping (keyed by column name) → domain entity."""
        return Document(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            category=row["category"],
            tags=list(row["tags"] or []),
            author=row["author"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            metadata=dict(row["metadata"] or {}),
        )

    async def upsert(self, document: Document) -> Document:
        """Insert the document or replace every field except created_at."""
        document.ensure_id("doc")
        document.touch()

        table = DocumentModel.__table__
        stmt = pg_insert(table).values(
            {
                "id": document.id,
                "title": document.title,
                "content": document.content,
                "category": document.category,
                "tags": list(document.tags),
                "author": document.author,
                "created_at": document.created_at,
                "updated_at": document.updated_at,
                "metadata": dict(document.metadata),
            }
        )
        # created_at is not updated on conflict; the first write's value is kept.
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.id],
            set_={
                "title": stmt.excluded.title,
                "content": stmt.excluded.content,
                "category": stmt.excluded.category,
                "tags": stmt.excluded.tags,
                "author": stmt.excluded.author,
                "updated_at": stmt.excluded.updated_at,
                "metadata": stmt.excluded["metadata"],
            },
        ).returning(*table.c)

        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).mappings().one()
                await session.commit()
            stored = self._row_to_entity(row)
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to upsert document {document.id}: {exc}") from exc

        logger.debug("Upserted document %s", stored.id)
        return stored

    async def get_by_id(self, document_id: str) -> Document | None:
        try:
            async with self._session_factory() as session:
                model = await session.get(DocumentModel, document_id)
                return self._to_entity(model) if model else None
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to load document {document_id}: {exc}") from exc

    async def search_text(self, query: str, limit: int = 10) -> list[Document]:
        """ILIKE match over title, content, category and metadata, newest first."""
        pattern = f"%{_escape_like(query)}%"
        stmt = (
            select(DocumentModel)
            .where(
                or_(
                    DocumentModel.title.ilike(pattern, escape="\\"),
                    DocumentModel.content.ilike(pattern, escape="\\"),
                    DocumentModel.category.ilike(pattern, escape="\\"),
                    cast(DocumentModel.metadata_, Text).ilike(pattern, escape="\\"),
                )
            )
            .order_by(DocumentModel.created_at.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                result = await session.scalars(stmt)
                return [self._to_entity(m) for m in result.all()]
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Document search failed for {query!r}: {exc}") from exc
