from .chat import (
    ChatHistoryRequest,
    ChatHistoryResponse,
    ChatMessageResponse,
    ChatRequest,
    ChatResponse,
    ConversationInsightsResponse,
)
from .document import (
    DocumentCreate,
    DocumentResponse,
    DocumentSearchResponse,
    ScrapeRequest,
    ScrapeResponse,
)
from .tutorial import TutorialRequest, TutorialResponse

__all__ = [
    "ChatHistoryRequest",
    "ChatHistoryResponse",
    "ChatMessageResponse",
    "ChatRequest",
    "ChatResponse",
    "ConversationInsightsResponse",
    "DocumentCreate",
    "DocumentResponse",
    "DocumentSearchResponse",
    "ScrapeRequest",
    "ScrapeResponse",
    "TutorialRequest",
    "TutorialResponse",
]
