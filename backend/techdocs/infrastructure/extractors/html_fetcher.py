"""Shared HTTP fetching and parsing for the HTML page extractors."""

import logging
from abc import abstractmethod
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from techdocs.application.interfaces import PageExtractor
from techdocs.domain.entities import ExtractedPage
from techdocs.domain.exceptions import ExtractionError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; TechDocsAI/1.0)"

MAX_REDIRECTS = 10
MIN_TEXT_LENGTH = 10


def text_of(element) -> str:
    return element.get_text(" ", strip=True) if element is not None else ""


def meta_content(soup: BeautifulSoup, *, name: str | None = None, prop: str | None = None) -> str:
    """Content attribute of the first matching <meta> tag, or ""."""
    attrs = {"name": name} if name else {"property": prop}
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return (tag.get("content") or "").strip()


def dedupe(items: list[str]) -> list[str]:
    """Drop repeats while keeping first-seen order."""
    seen: set[str] = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


class HtmlPageExtractor(PageExtractor):
    """Base class: GET the page with httpx, parse it with BeautifulSoup, then ``parse()``.

    Pass a shared ``http_client`` for connection pooling; without one a
    short-lived client is created per call.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._timeout = timeout
        self._user_agent = user_agent
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
        )

    async def fetch(self, url: str) -> str:
        """Return the response body of ``url``; any non-200 answer is an ExtractionError."""
        headers = {
            "User-Agent": self._user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }
        client = await self._get_client()
        should_close = self._http_client is None
        try:
            response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise ExtractionError(url, f"failed to fetch page: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code != 200:
            raise ExtractionError(url, f"HTTP error: {response.status_code}")
        return response.text

    async def extract(self, url: str) -> ExtractedPage:
        logger.info("Scraping %s (%s)", url, self.source)
        html = await self.fetch(url)
        soup = BeautifulSoup(html, "html.parser")
        page = self.parse(url, soup)
        logger.debug(
            "Extracted %r from %s: %d chars, %d examples",
            page.title,
            url,
            len(page.content),
            len(page.examples),
        )
        return page

    @abstractmethod
    def parse(self, url: str, soup: BeautifulSoup) -> ExtractedPage:
        """Turn a parsed document into an ExtractedPage. Must not do I/O."""
        ...

    @staticmethod
    def is_http_url(url: str) -> bool:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
