"""Unit tests for the OllamaClient."""

import json

import httpx
import pytest

from techdocs.domain.exceptions import ChatProviderError, EmbeddingProviderError
from techdocs.infrastructure.ollama import OllamaClient


# ── Helpers ──


def _client(handler) -> OllamaClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OllamaClient(
        base_url="http://ollama:11434/",
        embedding_model="nomic-embed-text",
        chat_model="llama3.2:1b",
        http_client=http_client,
    )


def _fixed(status_code: int, **kwargs) -> OllamaClient:
    return _client(lambda request: httpx.Response(status_code, **kwargs))


# ── Embeddings ──


@pytest.mark.asyncio
async def test_embed_posts_model_and_prompt():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"embedding": [1, 0.5, -0.25]})

    vector = await _client(handler).embed("What is flexbox?")

    assert vector == [1.0, 0.5, -0.25]
    assert captured["url"] == "http://ollama:11434/api/embeddings"
    assert captured["body"] == {"model": "nomic-embed-text", "prompt": "What is flexbox?"}


@pytest.mark.asyncio
async def test_embed_http_error_raises_with_status():
    client = _fixed(500, text="model not found")

    with pytest.raises(EmbeddingProviderError) as exc_info:
        await client.embed("text")

    assert exc_info.value.status_code == 500
    assert exc_info.value.provider == "ollama"
    assert "model not found" in exc_info.value.message


@pytest.mark.asyncio
async def test_embed_empty_vector_is_an_error():
    with pytest.raises(EmbeddingProviderError):
        await _fixed(200, json={"embedding": []}).embed("text")


@pytest.mark.asyncio
async def test_embed_connection_failure_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(EmbeddingProviderError) as exc_info:
        await _client(handler).embed("text")

    assert exc_info.value.status_code == 0


# ── Completions ──


@pytest.mark.asyncio
async def test_complete_parses_generate_response():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "model": "llama3.2:1b",
                "response": "# Flexbox\n\nA layout model.",
                "done": True,
                "done_reason": "stop",
                "prompt_eval_count": 42,
                "eval_count": 17,
            },
        )

    result = await _client(handler).complete("Explain flexbox")

    assert captured["url"] == "http://ollama:11434/api/generate"
    assert captured["body"] == {"model": "llama3.2:1b", "prompt": "Explain flexbox", "stream": False}
    assert result.content == "# Flexbox\n\nA layout model."
    assert result.provider == "ollama"
    assert result.finish_reason == "stop"
    assert result.usage.prompt_tokens == 42
    assert result.usage.completion_tokens == 17
    assert result.usage.total_tokens == 59


@pytest.mark.asyncio
async def test_complete_without_usage_counts_defaults_to_zero():
    result = await _fixed(200, json={"response": "ok"}).complete("hi")

    assert result.model == "llama3.2:1b"
    assert result.usage.total_tokens == 0
    assert result.finish_reason == "stop"


@pytest.mark.asyncio
async def test_complete_error_body_is_parsed():
    client = _fixed(404, json={"error": "model 'llama3.2:1b' not found"})

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete("hi")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "model 'llama3.2:1b' not found"


@pytest.mark.asyncio
async def test_complete_non_json_error_uses_body_text():
    with pytest.raises(ChatProviderError) as exc_info:
        await _fixed(502, text="Bad Gateway").complete("hi")

    assert exc_info.value.message == "Bad Gateway"


def test_provider_properties():
    client = OllamaClient(dimensions=384)
    assert client.provider_name == "ollama"
    assert client.dimensions == 384
