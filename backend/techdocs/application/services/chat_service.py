"""Chat service — retrieval-augmented answering over the knowledge base.

Flow for a chat turn:
    1. Resolve the query embedding (embedding cache, then provider)
    2. Retrieve the top matches from the vector index
    3. Keep matches scoring above the similarity threshold and resolve their
       documents (document cache, then store)
    4. Build a grounded or ungrounded tutorial prompt
    5. Call the completion provider
    6. Schedule a detached learning write-back of the answer
    7. (history variant) append the user and assistant messages to the session
"""

import asyncio
import logging
from collections import Counter
from typing import Any

from techdocs.application.interfaces import ChatProvider, DocumentRepository, VectorIndex
from techdocs.application.services.embedding_service import EmbeddingService
from techdocs.application.services.prompt_templates import (
    build_chat_prompt,
    build_history_prompt,
    format_context_entry,
)
from techdocs.application.services.tiered_cache import TieredCache
from techdocs.domain.entities import (
    ChatAnswer,
    ChatMessage,
    ChatSession,
    Document,
    MessageRole,
    generate_id,
)
from techdocs.domain.exceptions import CacheError, DocumentStoreError

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.7
TOP_K = 5
HISTORY_LIMIT = 10
INSIGHTS_HISTORY_LIMIT = 50

LEARNING_CATEGORY = "AI_Response"
LEARNING_AUTHOR = "AI_Assistant"
LEARNING_TAGS = ("ai-response", "user-generated", "learning")
LEARNING_SOURCE = "ai-response"
_TITLE_QUERY_MAX = 50


def _truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


class ChatService:
    """Orchestrates a chat turn. Depends on ports only (DI)."""

    def __init__(
        self,
        cache: TieredCache,
        embedding_service: EmbeddingService,
        vector_index: VectorIndex,
        document_repository: DocumentRepository,
        chat_provider: ChatProvider,
    ):
        self._cache = cache
        self._embedding_service = embedding_service
        self._vector_index = vector_index
        self._documents = document_repository
        self._chat_provider = chat_provider
        self._background_tasks: set[asyncio.Task] = set()

    # ── Chat entry points ───────────────────────────────────────────

    async def chat(self, message: str) -> ChatAnswer:
        """Answer a single message without conversation history."""
        context, document_ids = await self._retrieve_context(message)
        prompt = build_chat_prompt(message, context)

        result = await self._chat_provider.complete(prompt)

        self._schedule_learning(message, result.content, grounded=bool(context))
        return ChatAnswer(
            content=result.content,
            grounded=bool(context),
            context_document_ids=document_ids,
            model=result.model,
        )

    async def chat_with_history(self, session_id: str, message: str) -> ChatAnswer:
        """Answer a message in the context of the session's last messages.

        Both the user message and the answer are appended to the session once
        the answer is produced. Append failures are logged, not raised.
        """
        try:
            history = await self._cache.chats.get_history(session_id, HISTORY_LIMIT)
        except CacheError as exc:
            logger.warning("Chat history unavailable for %s, continuing without it: %s", session_id, exc)
            history = []

        context, document_ids = await self._retrieve_context(message)
        prompt = build_history_prompt(message, context, history)

        result = await self._chat_provider.complete(prompt)

        self._schedule_learning(message, result.content, grounded=bool(context))

        for role, content in ((MessageRole.USER, message), (MessageRole.ASSISTANT, result.content)):
            try:
                await self._cache.chats.add_message(session_id, ChatMessage(role=role.value, content=content))
            except CacheError as exc:
                logger.error("Failed to append %s message to session %s: %s", role.value, session_id, exc)

        return ChatAnswer(
            content=result.content,
            grounded=bool(context),
            context_document_ids=document_ids,
            model=result.model,
        )

    # ── Sessions ────────────────────────────────────────────────────

    async def get_session(self, session_id: str) -> ChatSession:
        """Return the session, creating an empty one on first use."""
        session = await self._cache.chats.get_session(session_id)
        if session is None:
            session = ChatSession(id=session_id)
            await self._cache.chats.set_session(session)
            logger.info("Created chat session %s", session_id)
        return session

    async def add_message(self, session_id: str, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content, id=generate_id("msg"))
        await self._cache.chats.add_message(session_id, message)
        return message

    async def get_history(self, session_id: str, limit: int = HISTORY_LIMIT) -> list[ChatMessage]:
        return await self._cache.chats.get_history(session_id, limit)

    async def get_conversation_insights(self, session_id: str) -> dict[str, Any]:
        """Summarise the last messages of a session.

        ``topics`` holds up to five words longer than three characters that
        appear more than once across the user's messages, most frequent first.
        """
        history = await self._cache.chats.get_history(session_id, INSIGHTS_HISTORY_LIMIT)

        user_questions = [m.content for m in history if m.role == MessageRole.USER.value]
        ai_responses = [m.content for m in history if m.role == MessageRole.ASSISTANT.value]

        words = " ".join(user_questions).lower().split()
        counts = Counter(w for w in words if len(w) > 3)
        topics = [word for word, count in counts.most_common() if count > 1][:5]

        return {
            "total_messages": len(history),
            "user_questions": user_questions,
            "ai_responses": ai_responses,
            "topics": topics,
        }

    # ── Retrieval ───────────────────────────────────────────────────

    async def _retrieve_context(self, message: str) -> tuple[list[str], list[str]]:
        """Return context entries and the ids of the documents they came from.

        Embedding and vector search failures propagate. Matches at or below the
        threshold, or whose document cannot be resolved, are dropped.
        """
        vector = await self._embedding_service.embed(message)
        results = await self._vector_index.query(vector, TOP_K)

        context: list[str] = []
        document_ids: list[str] = []
        for result in results:
            if result.score <= SIMILARITY_THRESHOLD:
                continue
            document_id = result.document_id
            if not document_id:
                continue
            document = await self._resolve_document(document_id)
            if document is None:
                continue
            context.append(format_context_entry(document.title, document.content))
            document_ids.append(document.id)

        logger.info(
            "Retrieved %d matches, %d above threshold for query (%d chars)",
            len(results),
            len(context),
            len(message),
        )
        return context, document_ids

    async def _resolve_document(self, document_id: str) -> Document | None:
        try:
            cached = await self._cache.documents.get(document_id)
        except CacheError as exc:
            logger.warning("Document cache read failed for %s: %s", document_id, exc)
            cached = None
        if cached is not None:
            return cached

        try:
            document = await self._documents.get_by_id(document_id)
        except DocumentStoreError as exc:
            logger.warning("Document store lookup failed for %s: %s", document_id, exc)
            return None
        if document is None:
            return None

        try:
            await self._cache.documents.set(document)
        except CacheError as exc:
            logger.debug("Document cache write skipped for %s: %s", document_id, exc)
        return document

    # ── Learning write-back ─────────────────────────────────────────

    def _schedule_learning(self, query: str, answer: str, *, grounded: bool) -> None:
        task = asyncio.create_task(self._store_for_learning(query, answer, grounded))
        self._background_tasks.add(task)
        task.add_done_callback(self._on_learning_done)

    def _on_learning_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Learning write-back failed", exc_info=exc)

    async def _store_for_learning(self, query: str, answer: str, grounded: bool) -> None:
        vector = await self._embedding_service.embed_uncached(answer)

        document = Document(
            id=generate_id("response"),
            title=f"AI Response: {_truncate(query, _TITLE_QUERY_MAX)}",
            content=answer,
            category=LEARNING_CATEGORY,
            tags=list(LEARNING_TAGS),
            author=LEARNING_AUTHOR,
            metadata={
                "user_query": query,
                "was_based_on_scraped": str(grounded).lower(),
                "response_type": "tutorial",
            },
        )
        await self._documents.upsert(document)

        try:
            await self._cache.documents.set(document)
        except CacheError as exc:
            logger.debug("Document cache write skipped for %s: %s", document.id, exc)

        metadata = document.vector_metadata(LEARNING_SOURCE)
        metadata.update(
            {
                "user_query": query,
                "response_type": "tutorial",
                "learning_data": True,
            }
        )
        await self._vector_index.upsert(vector, metadata)
        logger.info("Stored AI response for learning: %s", document.id)

    async def wait_for_background_tasks(self) -> None:
        """Wait for every pending learning write-back to finish."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)
