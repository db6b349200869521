"""Domain entity for a fetched and parsed web page."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class ExtractedPage:
    """Structured content produced by a page extractor, before it becomes a Document."""

    url: str
    title: str
    content: str
    category: str = ""
    tags: list[str] = field(default_factory=list)
    examples: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
