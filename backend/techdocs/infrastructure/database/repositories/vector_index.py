"""pgvector implementation of the VectorIndex port — cosine similarity search."""

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from techdocs.application.interfaces import VectorIndex
from techdocs.domain.entities import SearchResult
from techdocs.domain.exceptions import VectorIndexError
from techdocs.infrastructure.database.models import EMBEDDING_DIMENSIONS, VectorRecordModel

logger = logging.getLogger(__name__)


class PgVectorIndex(VectorIndex):
    """Concrete vector index backed by PostgreSQL + pgvector."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dimensions: int = EMBEDDING_DIMENSIONS,
    ):
        self._session_factory = session_factory
        self._dimensions = dimensions

    def _check_dimensions(self, vector: list[float]) -> None:
        if len(vector) != self._dimensions:
            raise VectorIndexError(
                f"Expected a {self._dimensions}-dimensional vector, got {len(vector)}"
            )

    async def upsert(self, vector: list[float], metadata: dict[str, Any]) -> str:
        self._check_dimensions(vector)
        record_id = uuid.uuid4().hex
        model = VectorRecordModel(
            id=record_id,
            document_id=str(metadata["document_id"]) if metadata.get("document_id") else None,
            embedding=list(vector),
            metadata_=dict(metadata),
        )
        try:
            async with self._session_factory() as session:
                session.add(model)
                await session.commit()
        except SQLAlchemyError as exc:
            raise VectorIndexError(f"Failed to store vector: {exc}") from exc

        logger.debug("Stored vector %s for document %s", record_id, model.document_id)
        return record_id

    async def query(self, vector: list[float], limit: int) -> list[SearchResult]:
        """Nearest records by cosine distance; score is ``1 - distance`` clamped to [0, 1]."""
        self._check_dimensions(vector)
        distance = VectorRecordModel.embedding.cosine_distance(vector).label("distance")
        stmt = (
            select(VectorRecordModel.id, VectorRecordModel.metadata_, distance)
            .order_by(distance)
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as exc:
            raise VectorIndexError(f"Vector search failed: {exc}") from exc

        return [
            SearchResult(
                id=row.id,
                score=min(1.0, max(0.0, 1.0 - float(row.distance))),
                metadata=dict(row.metadata_ or {}),
            )
            for row in rows
        ]
