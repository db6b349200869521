"""Domain entities for chat sessions and their message history."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .document import generate_id


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class ChatMessage:
    """A single message appended to a chat session. Immutable once appended."""

    role: str  # "user" | "assistant"
    content: str
    id: str = field(default_factory=lambda: generate_id("msg"))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        return cls(
            id=data["id"],
            role=data["role"],
            content=data.get("content", ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class ChatSession:
    """One conversation. Created lazily on first use, kept only in the chat cache.

    ``messages`` is ordered by append order.
    """

    id: str
    user_id: str = "anonymous"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    messages: list[ChatMessage] = field(default_factory=list)

    def append(self, message: ChatMessage) -> None:
        """Append a message and refresh the updated_at timestamp."""
        self.messages.append(message)
        self.updated_at = datetime.now(timezone.utc)

    def last(self, limit: int) -> list[ChatMessage]:
        """Return the last ``min(len(messages), limit)`` messages in order."""
        if limit <= 0:
            return []
        return list(self.messages[-limit:])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "messages": [m.to_dict() for m in self.messages],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatSession":
        return cls(
            id=data["id"],
            user_id=data.get("user_id", "anonymous"),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            messages=[ChatMessage.from_dict(m) for m in data.get("messages", [])],
        )
