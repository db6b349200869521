from .document import Document, generate_id
from .chat_session import ChatMessage, ChatSession, MessageRole
from .completion import ChatAnswer, ChatCompletionResult, TokenUsage
from .vector import SearchResult
from .scrape_job import IngestionResult, IngestionStage, IngestionStatus, ScrapeJob
from .extracted_page import ExtractedPage

__all__ = [
    "Document",
    "generate_id",
    "ChatMessage",
    "ChatSession",
    "MessageRole",
    "ChatAnswer",
    "ChatCompletionResult",
    "TokenUsage",
    "SearchResult",
    "IngestionResult",
    "IngestionStage",
    "IngestionStatus",
    "ScrapeJob",
    "ExtractedPage",
]
