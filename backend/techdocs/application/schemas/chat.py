"""Pydantic v2 schemas (DTOs) for chat requests and responses."""

from datetime import datetime

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request schema for a single-turn chat."""

    message: str = Field(..., min_length=1, description="The user's question")


class ChatHistoryRequest(BaseModel):
    """Request schema for a chat turn within a session."""

    session_id: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    """Generated answer."""

    response: str
    grounded: bool
    context_document_ids: list[str] = Field(default_factory=list)
    session_id: str | None = None


class ChatMessageResponse(BaseModel):
    id: str
    role: str
    content: str
    timestamp: datetime

    model_config = {"from_attributes": True}


class ChatHistoryResponse(BaseModel):
    session_id: str
    messages: list[ChatMessageResponse]


class ConversationInsightsResponse(BaseModel):
    session_id: str
    total_messages: int
    user_questions: list[str]
    ai_responses: list[str]
    topics: list[str]
