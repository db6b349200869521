"""Ollama API client — implements both the ChatProvider and EmbeddingProvider ports.

Talks to a local Ollama server (default http://localhost:11434):
    POST /api/embeddings  {model, prompt}          → {embedding: [...]}
    POST /api/generate    {model, prompt, stream}  → {response: "..."}
"""

import logging
from typing import Any

import httpx

from techdocs.application.interfaces.chat_provider import ChatProvider
from techdocs.application.interfaces.embedding_provider import EmbeddingProvider
from techdocs.domain.entities import ChatCompletionResult, TokenUsage
from techdocs.domain.exceptions import ChatProviderError, EmbeddingProviderError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "ollama"


class OllamaClient(ChatProvider, EmbeddingProvider):
    """Infrastructure adapter for the Ollama HTTP API.

    Pass a shared ``http_client`` for connection pooling; without one a
    short-lived client is created per call.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        embedding_model: str = "nomic-embed-text",
        chat_model: str = "llama3.2:1b",
        timeout: float = 60.0,
        dimensions: int = 768,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._embedding_model = embedding_model
        self._chat_model = chat_model
        self._timeout = timeout
        self._dimensions = dimensions
        self._http_client = http_client

    @property
    def provider_name(self) -> str:
        return PROVIDER_NAME

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        client = await self._get_client()
        should_close = self._http_client is None
        try:
            return await client.post(f"{self._base_url}{path}", json=payload)
        finally:
            if should_close:
                await client.aclose()

    async def embed(self, text: str) -> list[float]:
        payload = {"model": self._embedding_model, "prompt": text}
        try:
            response = await self._post("/api/embeddings", payload)
        except httpx.HTTPError as exc:
            raise EmbeddingProviderError(PROVIDER_NAME, 0, f"Request failed: {exc}") from exc

        if response.status_code != 200:
            error_text = response.text[:500]
            logger.error("Ollama embeddings error %d: %s", response.status_code, error_text)
            raise EmbeddingProviderError(PROVIDER_NAME, response.status_code, error_text)

        embedding = response.json().get("embedding")
        if not embedding:
            raise EmbeddingProviderError(PROVIDER_NAME, response.status_code, "Response contained no embedding")

        logger.debug("Generated embedding (model=%s, dims=%d)", self._embedding_model, len(embedding))
        return [float(v) for v in embedding]

    async def complete(self, prompt: str) -> ChatCompletionResult:
        payload = {"model": self._chat_model, "prompt": prompt, "stream": False}
        try:
            response = await self._post("/api/generate", payload)
        except httpx.HTTPError as exc:
            raise ChatProviderError(PROVIDER_NAME, 0, f"Request failed: {exc}") from exc

        if response.status_code != 200:
            self._raise_provider_error(response)

        data = response.json()
        prompt_tokens = int(data.get("prompt_eval_count") or 0)
        completion_tokens = int(data.get("eval_count") or 0)

        logger.info(
            "Ollama completion: model=%s tokens=%d/%d",
            data.get("model", self._chat_model),
            prompt_tokens,
            completion_tokens,
        )
        return ChatCompletionResult(
            model=data.get("model", self._chat_model),
            content=data.get("response", ""),
            finish_reason=data.get("done_reason") or "stop",
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            provider=PROVIDER_NAME,
        )

    @staticmethod
    def _raise_provider_error(response: httpx.Response) -> None:
        """Parse an Ollama error body and raise ChatProviderError."""
        try:
            message = response.json().get("error", response.text)
        except ValueError:
            message = response.text
        logger.error("Ollama generate error %d: %s", response.status_code, str(message)[:500])
        raise ChatProviderError(PROVIDER_NAME, response.status_code, str(message)[:500])
