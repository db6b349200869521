"""Tutorial service — generate a tutorial from documents already stored for a topic."""

import logging
from dataclasses import dataclass, field

from techdocs.application.interfaces import ChatProvider
from techdocs.application.services.document_service import DocumentService
from techdocs.application.services.prompt_templates import build_topic_prompt, format_context_entry
from techdocs.domain.entities import Document

logger = logging.getLogger(__name__)

FULL_SEARCH_LIMIT = 10
QUICK_SEARCH_LIMIT = 5
SCRAPE_TAGS = ("tutorial", "documentation")


@dataclass
class TutorialResult:
    """Generated tutorial, or a notice that source content has been queued."""

    topic: str
    content: str
    queued: bool = False
    job_id: str | None = None
    source_document_ids: list[str] = field(default_factory=list)


def _matches_topic(document: Document, topic: str) -> bool:
    needle = topic.lower()
    return needle in document.title.lower() or needle in document.category.lower()


class TutorialService:
    """Builds tutorials from scraped documentation, queueing a scrape when none exists."""

    def __init__(self, document_service: DocumentService, chat_provider: ChatProvider):
        self._document_service = document_service
        self._chat_provider = chat_provider

    async def generate_tutorial(self, url: str, topic: str, *, quick: bool = False) -> TutorialResult:
        limit = QUICK_SEARCH_LIMIT if quick else FULL_SEARCH_LIMIT
        candidates = await self._document_service.search_documents(topic, limit)
        relevant = [d for d in candidates if _matches_topic(d, topic)]

        if not relevant:
            job = await self._document_service.scrape_document(url, topic, list(SCRAPE_TAGS))
            if quick:
                message = (
                    f"I'm scraping content for {topic}. The tutorial will be available shortly. "
                    "Please try again in a few minutes."
                )
            else:
                message = (
                    f"I've queued a scraping job for {topic}. The tutorial will be generated once "
                    "the content is scraped and processed. Please try again in a few minutes."
                )
            logger.info("No stored content for '%s', queued job %s", topic, job.job_id)
            return TutorialResult(topic=topic, content=message, queued=True, job_id=job.job_id)

        context = [format_context_entry(d.title, d.content) for d in relevant]
        result = await self._chat_provider.complete(build_topic_prompt(topic, context, quick=quick))

        return TutorialResult(
            topic=topic,
            content=result.content,
            source_document_ids=[d.id for d in relevant],
        )
