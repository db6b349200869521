"""Pydantic v2 schemas (DTOs) for documents and scrape requests."""

from datetime import datetime

from pydantic import BaseModel, Field


class DocumentCreate(BaseModel):
    """Schema for submitting a document."""

    id: str | None = Field(default=None, max_length=255)
    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    category: str = Field(default="", max_length=100)
    tags: list[str] = Field(default_factory=list)
    author: str = Field(default="", max_length=255)
    metadata: dict[str, str] = Field(default_factory=dict)


class DocumentResponse(BaseModel):
    """Schema returned to API consumers."""

    id: str
    title: str
    content: str
    category: str
    tags: list[str]
    author: str
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, str]

    model_config = {"from_attributes": True}


class DocumentSearchResponse(BaseModel):
    query: str
    documents: list[DocumentResponse]
    count: int


class ScrapeRequest(BaseModel):
    """Schema for queueing a URL for ingestion."""

    url: str = Field(..., pattern=r"^https?://", max_length=2048)
    category: str = Field(default="", max_length=100)
    tags: list[str] = Field(default_factory=list)


class ScrapeResponse(BaseModel):
    job_id: str
    url: str
    status: str = "queued"
