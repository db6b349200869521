"""Domain entities — pure Python business objects, no framework dependencies."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def generate_id(prefix: str) -> str:
    """Return a unique identifier such as ``doc_3f2a...``."""
    return f"{prefix}_{uuid.uuid4().hex}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Document:
    """A stored piece of knowledge: scraped page, user submission or AI answer.

    Identity is ``id``. Writing a document whose id already exists replaces
    every field except ``created_at``.
    """

    title: str
    content: str
    category: str = ""
    tags: list[str] = field(default_factory=list)
    author: str = ""
    id: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    metadata: dict[str, str] = field(default_factory=dict)

    def ensure_id(self, prefix: str = "doc") -> str:
        """Assign a generated id when none is set, and return the id."""
        if not self.id:
            self.id = generate_id(prefix)
        return self.id

    def touch(self) -> None:
        """Refresh the updated_at timestamp."""
        self.updated_at = _utcnow()

    def vector_metadata(self, source: str) -> dict[str, Any]:
        """Metadata stored alongside this document's vector."""
        return {
            "document_id": self.id,
            "title": self.title,
            "category": self.category,
            "tags": list(self.tags),
            "author": self.author,
            "source": source,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "tags": list(self.tags),
            "author": self.author,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            content=data.get("content", ""),
            category=data.get("category", ""),
            tags=list(data.get("tags") or []),
            author=data.get("author", ""),
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else _utcnow(),
            updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else _utcnow(),
            metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
        )
