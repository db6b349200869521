"""Tiered cache layer — four logical caches over one cache backend.

Namespaces:
    doc:     Document by id
    emb:     embedding vector by SHA-256 of its source text
    search:  text-search results by literal (query, limit)
    chat:    chat session (full message history)

All namespaces share one TTL and the backend's physical memory budget.
Writes whose key or value exceed the configured limits raise
``CacheSizeLimitError`` and are not stored. A miss returns ``None``; a
backend failure raises ``CacheError`` so callers can tell the two apart.
"""

import asyncio
import hashlib
import json
import logging
import re
import weakref
from dataclasses import dataclass

from techdocs.application.interfaces import CacheBackend
from techdocs.domain.entities import ChatMessage, ChatSession, Document
from techdocs.domain.exceptions import CacheError, CacheSizeLimitError

logger = logging.getLogger(__name__)

DOCUMENT_PREFIX = "doc:"
EMBEDDING_PREFIX = "emb:"
SEARCH_PREFIX = "search:"
CHAT_PREFIX = "chat:"

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _glob_escape(value: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", value)


@dataclass(frozen=True)
class CacheLimits:
    """TTL and size limits shared by every namespace."""

    ttl_seconds: int = 24 * 60 * 60
    max_key_bytes: int = 1024
    max_value_bytes: int = 5 * 1024 * 1024


class _Namespace:
    """Common get/set plumbing with size-limit enforcement."""

    def __init__(self, backend: CacheBackend, limits: CacheLimits):
        self._backend = backend
        self._limits = limits

    def _key_fits(self, key: str) -> bool:
        return len(key.encode("utf-8")) <= self._limits.max_key_bytes

    async def _get_raw(self, key: str) -> bytes | None:
        # An oversized key can never have been written.
        if not self._key_fits(key):
            return None
        return await self._backend.get(key)

    async def _set_raw(self, key: str, value: bytes) -> None:
        key_size = len(key.encode("utf-8"))
        if key_size > self._limits.max_key_bytes:
            raise CacheSizeLimitError("key", key_size, self._limits.max_key_bytes)
        if len(value) > self._limits.max_value_bytes:
            raise CacheSizeLimitError("value", len(value), self._limits.max_value_bytes)
        await self._backend.set(key, value, self._limits.ttl_seconds)

    async def _get_json(self, key: str):
        raw = await self._get_raw(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CacheError(f"Corrupt cache entry {key!r}: {exc}") from exc

    async def _set_json(self, key: str, value) -> None:
        await self._set_raw(key, json.dumps(value).encode("utf-8"))


class DocumentCache(_Namespace):
    """Documents keyed by id."""

    @staticmethod
    def key(document_id: str) -> str:
        return f"{DOCUMENT_PREFIX}{document_id}"

    async def get(self, document_id: str) -> Document | None:
        data = await self._get_json(self.key(document_id))
        if data is None:
            return None
        try:
            return Document.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise CacheError(f"Corrupt cached document {document_id!r}: {exc}") from exc

    async def set(self, document: Document) -> None:
        await self._set_json(self.key(document.id), document.to_dict())

    async def delete(self, document_id: str) -> None:
        await self._backend.delete(self.key(document_id))

    async def invalidate_by_category(self, category: str) -> int:
        """Delete every cached document whose category equals ``category``.

        Scans all ``doc:*`` keys, so cost grows with the number of cached
        documents rather than the size of the category.
        """
        deleted = 0
        for key in await self._backend.keys(f"{DOCUMENT_PREFIX}*"):
            raw = await self._backend.get(key)
            if raw is None:
                continue
            try:
                cached_category = json.loads(raw).get("category")
            except (UnicodeDecodeError, json.JSONDecodeError, AttributeError):
                logger.debug("Skipping undecodable cache entry %s", key)
                continue
            if cached_category == category:
                await self._backend.delete(key)
                deleted += 1

        logger.info("Invalidated %d cached documents for category '%s'", deleted, category)
        return deleted


class EmbeddingCache(_Namespace):
    """Embedding vectors keyed by a SHA-256 hash of the source text."""

    @staticmethod
    def key(text: str) -> str:
        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        return f"{EMBEDDING_PREFIX}{digest}"

    async def get(self, text: str) -> list[float] | None:
        data = await self._get_json(self.key(text))
        if data is None:
            return None
        if not isinstance(data, list):
            raise CacheError("Corrupt cached embedding: expected a list")
        return [float(v) for v in data]

    async def set(self, text: str, vector: list[float]) -> None:
        await self._set_json(self.key(text), list(vector))

    async def delete(self, text: str) -> None:
        await self._backend.delete(self.key(text))


class SearchCache(_Namespace):
    """Text-search results keyed by the literal (query, limit) pair.

    Queries are not normalised: "CSS" and "css" are separate entries.
    """

    @staticmethod
    def key(query: str, limit: int) -> str:
        return f"{SEARCH_PREFIX}query:{query}:limit:{limit}"

    async def get(self, query: str, limit: int) -> list[Document] | None:
        data = await self._get_json(self.key(query, limit))
        if data is None:
            return None
        try:
            return [Document.from_dict(d) for d in data]
        except (KeyError, TypeError, ValueError) as exc:
            raise CacheError(f"Corrupt cached search for {query!r}: {exc}") from exc

    async def set(self, query: str, limit: int, documents: list[Document]) -> None:
        await self._set_json(self.key(query, limit), [d.to_dict() for d in documents])

    async def delete(self, query: str, limit: int) -> None:
        await self._backend.delete(self.key(query, limit))

    async def delete_query(self, query: str) -> int:
        """Delete the cached results for ``query`` at every limit."""
        pattern = f"{SEARCH_PREFIX}query:{_glob_escape(query)}:limit:*"
        keys = await self._backend.keys(pattern)
        for key in keys:
            await self._backend.delete(key)
        return len(keys)


class ChatCache(_Namespace):
    """Chat sessions, stored whole and rewritten on every append."""

    def __init__(self, backend: CacheBackend, limits: CacheLimits):
        super().__init__(backend, limits)
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    @staticmethod
    def key(session_id: str) -> str:
        return f"{CHAT_PREFIX}{session_id}"

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    async def get_session(self, session_id: str) -> ChatSession | None:
        data = await self._get_json(self.key(session_id))
        if data is None:
            return None
        try:
            return ChatSession.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise CacheError(f"Corrupt cached session {session_id!r}: {exc}") from exc

    async def set_session(self, session: ChatSession) -> None:
        await self._set_json(self.key(session.id), session.to_dict())

    async def add_message(self, session_id: str, message: ChatMessage) -> ChatSession:
        """Append a message, creating the session if needed.

        Appends to one session are serialised within this process. Writers in
        other processes still race (last writer wins).
        """
        lock = self._lock_for(session_id)
        async with lock:
            session = await self.get_session(session_id)
            if session is None:
                session = ChatSession(id=session_id)
            session.append(message)
            await self.set_session(session)
            return session

    async def get_history(self, session_id: str, limit: int) -> list[ChatMessage]:
        """Return the last ``min(len, limit)`` messages in append order."""
        session = await self.get_session(session_id)
        if session is None:
            return []
        return session.last(limit)


class TieredCache:
    """Bundles the four logical caches over a single backend connection."""

    def __init__(self, backend: CacheBackend, limits: CacheLimits | None = None):
        self.limits = limits or CacheLimits()
        self.backend = backend
        self.documents = DocumentCache(backend, self.limits)
        self.embeddings = EmbeddingCache(backend, self.limits)
        self.searches = SearchCache(backend, self.limits)
        self.chats = ChatCache(backend, self.limits)
