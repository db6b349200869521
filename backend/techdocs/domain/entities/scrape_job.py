"""Domain entities for scrape jobs and their ingestion outcome."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from .document import generate_id


class IngestionStage(str, Enum):
    """States a scrape job passes through, in order."""

    DEQUEUED = "dequeued"
    DEDUP_CHECKED = "dedup_checked"
    EXTRACTED = "extracted"
    EMBEDDED = "embedded"
    PERSISTED = "persisted"


class IngestionStatus(str, Enum):
    """Terminal outcome of a scrape job."""

    PERSISTED = "persisted"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    FAILED = "failed"


@dataclass
class ScrapeJob:
    """A request to fetch one URL and add it to the knowledge base.

    Delivered at-least-once, so the same job may be seen twice.
    """

    url: str
    category: str = ""
    tags: list[str] = field(default_factory=list)
    job_id: str = field(default_factory=lambda: generate_id("job"))

    def to_json(self) -> bytes:
        return json.dumps(
            {
                "url": self.url,
                "category": self.category,
                "tags": list(self.tags),
                "job_id": self.job_id,
            }
        ).encode("utf-8")

    @classmethod
    def from_json(cls, payload: bytes | str) -> "ScrapeJob":
        """Decode a job payload. Raises ValueError on malformed input."""
        try:
            data = json.loads(payload)
        except (TypeError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ValueError(f"Invalid scrape job payload: {exc}") from exc

        if not isinstance(data, dict) or not data.get("url"):
            raise ValueError("Scrape job payload must be an object with a 'url'")

        tags = data.get("tags") or []
        if not isinstance(tags, list):
            raise ValueError("Scrape job 'tags' must be a list")

        return cls(
            url=str(data["url"]),
            category=str(data.get("category") or ""),
            tags=[str(t) for t in tags],
            job_id=str(data.get("job_id") or generate_id("job")),
        )


@dataclass
class IngestionResult:
    """Outcome of processing one scrape job."""

    job_id: str
    url: str
    status: IngestionStatus
    stage: IngestionStage
    document_id: str | None = None
    source: str | None = None
    error: str | None = None
    finished_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
