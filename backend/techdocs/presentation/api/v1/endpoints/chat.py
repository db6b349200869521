"""Chat endpoints — grounded answers, session history and insights."""

from fastapi import APIRouter, Depends, Query

from techdocs.application.schemas import (
    ChatHistoryRequest,
    ChatHistoryResponse,
    ChatMessageResponse,
    ChatRequest,
    ChatResponse,
    ConversationInsightsResponse,
)
from techdocs.application.services import ChatService
from techdocs.application.services.chat_service import HISTORY_LIMIT
from techdocs.infrastructure.dependencies import get_chat_service

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Answer a single question, grounded in stored documents when any are similar enough."""
    answer = await service.chat(request.message)
    return ChatResponse(
        response=answer.content,
        grounded=answer.grounded,
        context_document_ids=answer.context_document_ids,
    )


@router.post("/history", response_model=ChatResponse)
async def chat_with_history(
    request: ChatHistoryRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Answer a question in the context of a session's recent messages.

    The question and the answer are appended to the session afterwards.
    """
    answer = await service.chat_with_history(request.session_id, request.message)
    return ChatResponse(
        response=answer.content,
        grounded=answer.grounded,
        context_document_ids=answer.context_document_ids,
        session_id=request.session_id,
    )


@router.get("/history", response_model=ChatHistoryResponse)
async def get_chat_history(
    session_id: str = Query(..., min_length=1),
    limit: int = Query(HISTORY_LIMIT, ge=0, le=500),
    service: ChatService = Depends(get_chat_service),
) -> ChatHistoryResponse:
    """Return the last ``limit`` messages of a session, oldest first."""
    messages = await service.get_history(session_id, limit)
    return ChatHistoryResponse(
        session_id=session_id,
        messages=[ChatMessageResponse.model_validate(m) for m in messages],
    )


@router.get("/insights", response_model=ConversationInsightsResponse)
async def get_conversation_insights(
    session_id: str = Query(..., min_length=1),
    service: ChatService = Depends(get_chat_service),
) -> ConversationInsightsResponse:
    insights = await service.get_conversation_insights(session_id)
    return ConversationInsightsResponse(session_id=session_id, **insights)
