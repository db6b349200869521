"""Integration tests for the PostgreSQL document repository and pgvector index."""

import uuid

import pytest
import pytest_asyncio
from sqlalchemy import delete

from techdocs.config import get_settings
from techdocs.domain.entities import Document
from techdocs.infrastructure.database import models
from techdocs.infrastructure.database.repositories import PgVectorIndex, SQLAlchemyDocumentRepository
from techdocs.infrastructure.database.session import build_engine, build_session_factory, create_schema


@pytest_asyncio.fixture
async def session_factory():
    engine = build_engine(get_settings().database_url)
    try:
        await create_schema(engine)
    except Exception as exc:  # pragma: no cover - environment dependent
        await engine.dispose()
        pytest.skip(f"PostgreSQL not reachable in this environment: {exc}")

    factory = build_session_factory(engine)
    yield factory
    await engine.dispose()


async def _cleanup(factory, document_ids: list[str]) -> None:
    async with factory() as session:
        await session.execute(delete(models.VectorRecordModel).where(models.VectorRecordModel.document_id.in_(document_ids)))
        await session.execute(delete(models.DocumentModel).where(models.DocumentModel.id.in_(document_ids)))
        await session.commit()


def _unit_vector(index: int) -> list[float]:
    vector = [0.0] * models.EMBEDDING_DIMENSIONS
    vector[index] = 1.0
    return vector


@pytest.mark.asyncio
async def test_upsert_replaces_fields_but_keeps_created_at(session_factory):
    repo = SQLAlchemyDocumentRepository(session_factory)
    doc_id = f"doc_{uuid.uuid4().hex}"
    try:
        first = await repo.upsert(Document(id=doc_id, title="First", content="v1", category="CSS"))
        second = await repo.upsert(
            Document(id=doc_id, title="Second", content="v2", category="CSS", metadata={"url": "https://x"})
        )
        loaded = await repo.get_by_id(doc_id)

        assert loaded.title == "Second"
        assert loaded.content == "v2"
        assert loaded.metadata == {"url": "https://x"}
        assert loaded.created_at == first.created_at
        assert second.updated_at >= first.updated_at
    finally:
        await _cleanup(session_factory, [doc_id])


@pytest.mark.asyncio
async def test_search_text_matches_metadata_url(session_factory):
    repo = SQLAlchemyDocumentRepository(session_factory)
    doc_id = f"doc_{uuid.uuid4().hex}"
    url = f"https://example.com/{uuid.uuid4().hex}"
    try:
        await repo.upsert(Document(id=doc_id, title="Page", content="body", metadata={"url": url}))

        found = await repo.search_text(url, 1)

        assert [d.id for d in found] == [doc_id]
        assert await repo.get_by_id(f"doc_{uuid.uuid4().hex}") is None
    finally:
        await _cleanup(session_factory, [doc_id])


@pytest.mark.asyncio
async def test_vector_query_orders_by_cosine_similarity(session_factory):
    repo = SQLAlchemyDocumentRepository(session_factory)
    index = PgVectorIndex(session_factory)
    near_id = f"doc_{uuid.uuid4().hex}"
    far_id = f"doc_{uuid.uuid4().hex}"
    try:
        for doc_id in (near_id, far_id):
            await repo.upsert(Document(id=doc_id, title=doc_id, content="body"))
        await index.upsert(_unit_vector(0), {"document_id": near_id, "source": "user"})
        await index.upsert(_unit_vector(1), {"document_id": far_id, "source": "user"})

        results = await index.query(_unit_vector(0), 50)
        ours = [r for r in results if r.document_id in (near_id, far_id)]

        assert ours[0].document_id == near_id
        assert ours[0].score == pytest.approx(1.0)
        assert ours[1].score == pytest.approx(0.0)
    finally:
        await _cleanup(session_factory, [near_id, far_id])
