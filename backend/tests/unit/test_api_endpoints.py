"""Endpoint tests — the real routers over services wired to in-memory fakes."""

import json
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from fakes import (
    FakeCacheBackend,
    FakeChatProvider,
    FakeDocumentRepository,
    FakeEmbeddingProvider,
    FakeJobQueue,
    FakeVectorIndex,
)
from techdocs.application.services import (
    ChatService,
    DocumentService,
    EmbeddingService,
    TieredCache,
    TutorialService,
)
from techdocs.domain.exceptions import ChatProviderError
from techdocs.main import create_app


# ── Helpers ──


class Stack:
    """Services over fakes, mounted where the lifespan would put the container."""

    def __init__(self):
        self.backend = FakeCacheBackend()
        self.queue = FakeJobQueue()
        self.provider = FakeChatProvider(reply="# Answer")
        cache = TieredCache(self.backend)
        embedding_service = EmbeddingService(FakeEmbeddingProvider(), cache.embeddings)
        vectors = FakeVectorIndex()
        documents = FakeDocumentRepository()
        self.chat_service = ChatService(
            cache=cache,
            embedding_service=embedding_service,
            vector_index=vectors,
            document_repository=documents,
            chat_provider=self.provider,
        )
        self.document_service = DocumentService(cache, embedding_service, vectors, documents, self.queue)
        self.tutorial_service = TutorialService(self.document_service, self.provider)

        self.app = create_app()
        self.app.state.container = SimpleNamespace(
            chat_service=self.chat_service,
            document_service=self.document_service,
            tutorial_service=self.tutorial_service,
        )

    def client(self) -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=self.app), base_url="http://test")


# ── Chat ──


@pytest.mark.asyncio
async def test_chat_returns_answer():
    stack = Stack()

    async with stack.client() as client:
        response = await client.post("/api/v1/chat", json={"message": "What is flexbox?"})
    await stack.chat_service.wait_for_background_tasks()

    assert response.status_code == 200
    data = response.json()
    assert data["response"] == "# Answer"
    assert data["grounded"] is False


@pytest.mark.asyncio
async def test_chat_history_roundtrip_and_insights():
    stack = Stack()

    async with stack.client() as client:
        await client.post("/api/v1/chat/history", json={"session_id": "s1", "message": "Explain grids"})
        history = await client.get("/api/v1/chat/history", params={"session_id": "s1"})
        insights = await client.get("/api/v1/chat/insights", params={"session_id": "s1"})
    await stack.chat_service.wait_for_background_tasks()

    assert [m["role"] for m in history.json()["messages"]] == ["user", "assistant"]
    assert insights.json()["total_messages"] == 2


@pytest.mark.asyncio
async def test_provider_failure_maps_to_bad_gateway():
    stack = Stack()
    stack.provider.error = ChatProviderError("ollama", 503, "model busy")

    async with stack.client() as client:
        response = await client.post("/api/v1/chat", json={"message": "hi"})

    assert response.status_code == 502
    assert response.json()["detail"] == "[ollama] model busy"


@pytest.mark.asyncio
async def test_cache_failure_on_history_maps_to_internal_error():
    stack = Stack()
    stack.backend.fail_reads = True

    async with stack.client() as client:
        response = await client.get("/api/v1/chat/history", params={"session_id": "s1"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"


@pytest.mark.asyncio
async def test_empty_message_is_rejected():
    stack = Stack()

    async with stack.client() as client:
        response = await client.post("/api/v1/chat", json={"message": ""})

    assert response.status_code == 422


# ── Documents ──


@pytest.mark.asyncio
async def test_add_get_and_search_documents():
    stack = Stack()

    async with stack.client() as client:
        created = await client.post(
            "/api/v1/documents",
            json={"title": "CSS Grid", "content": "Grid is a two-dimensional layout system.", "category": "CSS"},
        )
        doc_id = created.json()["id"]
        fetched = await client.get(f"/api/v1/documents/{doc_id}")
        found = await client.get("/api/v1/documents/search", params={"q": "grid"})

    assert created.status_code == 201
    assert doc_id.startswith("doc_")
    assert fetched.json()["title"] == "CSS Grid"
    assert found.json()["count"] == 1


@pytest.mark.asyncio
async def test_unknown_document_is_not_found():
    stack = Stack()

    async with stack.client() as client:
        response = await client.get("/api/v1/documents/doc_missing")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_scrape_is_accepted_and_published():
    stack = Stack()

    async with stack.client() as client:
        response = await client.post(
            "/api/v1/scrape",
            json={"url": "https://www.w3schools.com/css/", "category": "CSS", "tags": ["tutorial"]},
        )

    assert response.status_code == 202
    data = response.json()
    assert data["status"] == "queued"
    (topic, payload) = stack.queue.published[0]
    assert topic == "scrape-jobs"
    assert json.loads(payload)["job_id"] == data["job_id"]


@pytest.mark.asyncio
async def test_scrape_rejects_non_http_url():
    stack = Stack()

    async with stack.client() as client:
        response = await client.post("/api/v1/scrape", json={"url": "ftp://example.com/file"})

    assert response.status_code == 422
    assert stack.queue.published == []


# ── Tutorials ──


@pytest.mark.asyncio
async def test_tutorial_without_content_queues_a_scrape():
    stack = Stack()

    async with stack.client() as client:
        response = await client.post(
            "/api/v1/tutorials/generate",
            json={"url": "https://www.w3schools.com/css/", "topic": "CSS"},
        )

    data = response.json()
    assert response.status_code == 200
    assert data["queued"] is True
    assert data["job_id"]
    assert len(stack.queue.published) == 1
