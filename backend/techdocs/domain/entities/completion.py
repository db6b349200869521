"""Domain entities for completion results — framework-independent."""

from dataclasses import dataclass, field


@dataclass
class TokenUsage:
    """Token usage statistics from a completion."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ChatCompletionResult:
    """Result from a completion call."""

    model: str
    content: str
    finish_reason: str  # "stop" | "length" | "error"
    usage: TokenUsage = field(default_factory=TokenUsage)
    provider: str = ""


@dataclass
class ChatAnswer:
    """A generated answer and whether it was grounded in stored documents."""

    content: str
    grounded: bool
    context_document_ids: list[str] = field(default_factory=list)
    model: str = ""
