"""Domain entities for the vector index."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SearchResult:
    """A query-time match from the vector index; never persisted."""

    id: str
    score: float  # cosine similarity in [0, 1]
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def document_id(self) -> str | None:
        value = self.metadata.get("document_id")
        return str(value) if value else None
