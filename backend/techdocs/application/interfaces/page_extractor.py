"""Abstract page extractor interface (port)."""

from abc import ABC, abstractmethod

from techdocs.domain.entities import ExtractedPage


class PageExtractor(ABC):
    """Port for source-specific HTML extraction.

    The ingestion pipeline asks each registered extractor, in order, whether it
    supports a URL and uses the first that does.
    """

    @property
    @abstractmethod
    def source(self) -> str:
        """Tag recorded in vector metadata for pages this extractor produced."""
        ...

    @abstractmethod
    def supports(self, url: str) -> bool:
        ...

    @abstractmethod
    async def extract(self, url: str) -> ExtractedPage:
        """Fetch and parse ``url``.

        Raises:
            ExtractionError: If the page cannot be fetched or parsed.
        """
        ...
