"""Pydantic v2 schemas (DTOs) for tutorial generation."""

from pydantic import BaseModel, Field


class TutorialRequest(BaseModel):
    url: str = Field(..., pattern=r"^https?://", max_length=2048)
    topic: str = Field(..., min_length=1, max_length=200)


class TutorialResponse(BaseModel):
    topic: str
    tutorial: str
    queued: bool = False
    job_id: str | None = None
    source_document_ids: list[str] = Field(default_factory=list)
