"""Abstract completion provider interface — port for model server adapters."""

from abc import ABC, abstractmethod

from techdocs.domain.entities import ChatCompletionResult


class ChatProvider(ABC):
    """Port — defines what the application layer needs from any completion model."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this provider (e.g. 'ollama')."""
        ...

    @abstractmethod
    async def complete(self, prompt: str) -> ChatCompletionResult:
        """Turn a prompt into free text.

        Args:
            prompt: The fully assembled prompt.

        Returns:
            A ChatCompletionResult with the generated content.

        Raises:
            ChatProviderError: If the provider returns an error.
        """
        ...
