"""Universal extractor — heuristic content extraction for any documentation site.

The page title, category, main content, code examples, tags and metadata are
each derived with a fixed chain of fallbacks so that unknown sites still
produce a usable document.
"""

import logging
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from techdocs.domain.entities import ExtractedPage
from techdocs.infrastructure.extractors.html_fetcher import (
    MIN_TEXT_LENGTH,
    HtmlPageExtractor,
    dedupe,
    meta_content,
    text_of,
)

logger = logging.getLogger(__name__)

SOURCE = "universal"

UNTITLED = "Untitled Document"
DEFAULT_CATEGORY = "Documentation"

NOISE_SELECTOR = (
    "script, style, nav, header, footer, aside, .sidebar, .navigation, "
    ".menu, .ads, .advertisement, .social, .share"
)

CONTENT_SELECTORS = (
    "main",
    "article",
    ".content",
    ".main-content",
    ".post-content",
    ".entry-content",
    ".article-content",
    ".documentation",
    ".docs",
    "#content",
    "#main",
    "body",
)

CODE_SELECTORS = (
    "pre code",
    "pre",
    ".highlight",
    ".code",
    ".codehilite",
    "code[class*='language-']",
    ".example code",
    ".code-example",
)

HOST_CATEGORIES = (
    ("stackoverflow.com", "Q&A"),
    ("github.com", "Repository"),
    ("docs.python.org", "Python"),
    ("nodejs.org", "Node.js"),
    ("reactjs.org", "React"),
    ("react.dev", "React"),
    ("vuejs.org", "Vue.js"),
    ("angular.io", "Angular"),
    ("go.dev", "Go"),
    ("golang.org", "Go"),
    ("rust-lang.org", "Rust"),
    ("java.com", "Java"),
)

W3SCHOOLS_PATHS = (
    ("/html/", "HTML"),
    ("/css/", "CSS"),
    ("/js/", "JavaScript"),
    ("/python/", "Python"),
    ("/sql/", "SQL"),
    ("/react/", "React"),
    ("/nodejs/", "Node.js"),
)

MDN_PATHS = (
    ("/html", "HTML"),
    ("/css", "CSS"),
    ("/javascript", "JavaScript"),
    ("/api", "Web API"),
    ("/http", "HTTP"),
)

# Checked in order; longer names first so "javascript" is not read as "java".
PATH_TECHNOLOGIES = (
    ("nodejs", "Node.js"),
    ("javascript", "JavaScript"),
    ("kubernetes", "Kubernetes"),
    ("golang", "Go"),
    ("csharp", "C#"),
    ("python", "Python"),
    ("angular", "Angular"),
    ("docker", "Docker"),
    ("react", "React"),
    ("azure", "Azure"),
    ("html", "HTML"),
    ("java", "Java"),
    ("rust", "Rust"),
    ("ruby", "Ruby"),
    ("css", "CSS"),
    ("php", "PHP"),
    ("cpp", "C++"),
    ("vue", "Vue.js"),
    ("aws", "AWS"),
    ("gcp", "Google Cloud"),
    ("js", "JavaScript"),
)

CONTENT_TECHNOLOGIES = (
    ("javascript", "JavaScript"),
    ("kubernetes", "Kubernetes"),
    ("python", "Python"),
    ("golang", "Go"),
    ("angular", "Angular"),
    ("docker", "Docker"),
    ("react", "React"),
    ("html", "HTML"),
    ("java", "Java"),
    ("rust", "Rust"),
    ("ruby", "Ruby"),
    ("node", "Node.js"),
    ("css", "CSS"),
    ("php", "PHP"),
    ("vue", "Vue.js"),
)

CODE_LANGUAGES = (
    ("javascript", "JavaScript"),
    ("python", "Python"),
    ("csharp", "C#"),
    ("shell", "Shell"),
    ("json", "JSON"),
    ("yaml", "YAML"),
    ("java", "Java"),
    ("html", "HTML"),
    ("ruby", "Ruby"),
    ("rust", "Rust"),
    ("bash", "Bash"),
    ("css", "CSS"),
    ("php", "PHP"),
    ("cpp", "C++"),
    ("sql", "SQL"),
    ("xml", "XML"),
    ("js", "JavaScript"),
    ("go", "Go"),
)

HOST_TAGS = (
    ("github.com", ("github", "repository")),
    ("stackoverflow.com", ("stackoverflow", "qa")),
    ("medium.com", ("medium", "article")),
)

CONTENT_TAGS = (
    "tutorial", "guide", "documentation", "api", "reference",
    "example", "demo", "sample", "code", "programming",
    "development", "web", "mobile", "frontend", "backend",
)

META_FIELDS = (
    ("description", "name", "description"),
    ("author", "name", "author"),
    ("keywords", "name", "keywords"),
    ("og:title", "property", "og:title"),
    ("og:description", "property", "og:description"),
    ("og:type", "property", "og:type"),
    ("twitter:title", "name", "twitter:title"),
)

DATE_SELECTORS = (
    "meta[property='article:published_time']",
    "meta[name='date']",
    "time[datetime]",
    ".date",
    ".published",
    ".post-date",
)

CONTAINER_TAGS = {"div", "section", "article", "main"}
HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}


def _first_match(value: str, table) -> str:
    for needle, label in table:
        if needle in value:
            return label
    return ""


class UniversalExtractor(HtmlPageExtractor):
    """Extractor for any http(s) URL. Register it after site-specific extractors."""

    @property
    def source(self) -> str:
        return SOURCE

    def supports(self, url: str) -> bool:
        return self.is_http_url(url)

    def parse(self, url: str, soup: BeautifulSoup) -> ExtractedPage:
        parsed = urlparse(url)
        title = self.extract_title(soup)
        category = self.extract_category(url, soup)
        content = self.extract_main_content(soup)
        examples = self.extract_code_examples(soup)
        tags = self.extract_tags(soup, category, parsed.netloc.lower())
        metadata = self.extract_metadata(url, soup)

        return ExtractedPage(
            url=url,
            title=title,
            content=content,
            category=category,
            tags=tags,
            examples=examples,
            metadata=metadata,
        )

    # ── Title ───────────────────────────────────────────────────────

    @staticmethod
    def extract_title(soup: BeautifulSoup) -> str:
        for candidate in (
            text_of(soup.select_one("h1")),
            text_of(soup.select_one("article h1, .article-title, .post-title")),
            meta_content(soup, prop="og:title"),
            text_of(soup.find("title")),
        ):
            if candidate:
                return candidate
        return UNTITLED

    # ── Category ────────────────────────────────────────────────────

    @staticmethod
    def extract_category(url: str, soup: BeautifulSoup) -> str:
        """Known host, then technology named in the path, then most-mentioned technology."""
        parsed = urlparse(url)
        host = parsed.netloc.lower()
        path = parsed.path.lower()

        if "w3schools.com" in host:
            return _first_match(path, W3SCHOOLS_PATHS) or "Web Development"
        if "developer.mozilla.org" in host or "mdn.mozilla.org" in host:
            return _first_match(path, MDN_PATHS) or "Web Development"

        category = _first_match(host, HOST_CATEGORIES)
        if category:
            return category

        category = _first_match(path, PATH_TECHNOLOGIES)
        if category:
            return category

        text = soup.get_text(" ").lower()
        best, best_count = DEFAULT_CATEGORY, 0
        for needle, label in CONTENT_TECHNOLOGIES:
            count = text.count(needle)
            if count > best_count:
                best, best_count = label, count
        return best

    # ── Content ─────────────────────────────────────────────────────

    def extract_main_content(self, soup: BeautifulSoup) -> str:
        """Strip page chrome, pick the main container, and flatten it to Markdown-like text.

        Mutates ``soup``.
        """
        for element in soup.select(NOISE_SELECTOR):
            element.decompose()

        container = None
        for selector in CONTENT_SELECTORS:
            container = soup.select_one(selector)
            if container is not None:
                break
        if container is None:
            return soup.get_text(" ", strip=True)

        parts: list[str] = []
        self._walk(container, parts)
        return "".join(parts).strip()

    def _walk(self, node: Tag, parts: list[str]) -> None:
        for child in node.children:
            if not isinstance(child, Tag):
                continue
            name = child.name
            if name in HEADING_TAGS:
                text = text_of(child)
                if text:
                    parts.append(f"\n{'#' * int(name[1])} {text}\n")
            elif name == "p":
                text = text_of(child)
                if len(text) > MIN_TEXT_LENGTH:
                    parts.append(text + "\n\n")
            elif name in ("ul", "ol"):
                for i, li in enumerate(child.find_all("li"), start=1):
                    text = text_of(li)
                    if text:
                        parts.append(f"{i}. {text}\n" if name == "ol" else f"• {text}\n")
                parts.append("\n")
            elif name == "blockquote":
                text = text_of(child)
                if text:
                    parts.append(f"> {text}\n\n")
            elif name == "table":
                parts.append("| Table |\n|-------|\n")
                for tr in child.find_all("tr"):
                    row = [text_of(cell) for cell in tr.find_all(["td", "th"])]
                    if row:
                        parts.append("| " + " | ".join(row) + " |\n")
                parts.append("\n")
            elif name in CONTAINER_TAGS:
                self._walk(child, parts)

    # ── Code examples ───────────────────────────────────────────────

    @staticmethod
    def detect_language(element: Tag) -> str:
        classes = element.get("class") or []
        return _first_match(" ".join(classes).lower(), CODE_LANGUAGES)

    def extract_code_examples(self, soup: BeautifulSoup) -> list[str]:
        examples = []
        for selector in CODE_SELECTORS:
            for element in soup.select(selector):
                code = element.get_text().strip()
                if len(code) <= MIN_TEXT_LENGTH:
                    continue
                language = self.detect_language(element)
                examples.append(f"{language}:\n{code}" if language else code)
        return dedupe(examples)

    # ── Tags ────────────────────────────────────────────────────────

    @staticmethod
    def extract_tags(soup: BeautifulSoup, category: str, host: str) -> list[str]:
        tags = [category, "documentation"]

        for needle, extra in HOST_TAGS:
            if needle in host:
                tags.extend(extra)
                break

        keywords = meta_content(soup, name="keywords")
        tags.extend(k.strip() for k in keywords.split(",") if k.strip())

        text = soup.get_text(" ").lower()
        tags.extend(tag for tag in CONTENT_TAGS if tag in text)
        return dedupe(tags)

    # ── Metadata ────────────────────────────────────────────────────

    @staticmethod
    def extract_metadata(url: str, soup: BeautifulSoup) -> dict[str, str]:
        metadata = {
            "url": url,
            "domain": urlparse(url).netloc,
            "source": "universal-scraper",
        }

        for key, attr, value in META_FIELDS:
            content = meta_content(soup, **({"name": value} if attr == "name" else {"prop": value}))
            if content:
                metadata[key] = content

        for selector in DATE_SELECTORS:
            element = soup.select_one(selector)
            if element is None:
                continue
            date = (element.get("content") or element.get("datetime") or text_of(element)).strip()
            if date:
                metadata["published_date"] = date
                break

        html = soup.find("html")
        if html is not None and html.get("lang"):
            metadata["language"] = html["lang"]

        return metadata
