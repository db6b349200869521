"""W3Schools extractor — tutorial pages on w3schools.com."""

from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from techdocs.domain.entities import ExtractedPage
from techdocs.infrastructure.extractors.html_fetcher import (
    MIN_TEXT_LENGTH,
    HtmlPageExtractor,
    dedupe,
    text_of,
)

SOURCE = "w3schools"

DEFAULT_CATEGORY = "Web Development"

NOISE_SELECTOR = "nav, .w3-bar, .w3-sidebar, .w3-hide, .ad, .advertisement, script, style"

MAIN_SELECTORS = (
    "#main",
    ".main",
    ".content",
    ".tutorial-content",
    ".w3-container",
    "article",
    "section",
    ".chapter",
)

CODE_SELECTORS = (
    "pre",
    "code",
    ".w3-code",
    ".w3-example",
    ".example",
    ".code-example",
    ".demo-code",
)

PATH_CATEGORIES = (
    ("/html/", "HTML"),
    ("/css/", "CSS"),
    ("/js/", "JavaScript"),
    ("/python/", "Python"),
    ("/sql/", "SQL"),
    ("/php/", "PHP"),
    ("/java/", "Java"),
    ("/cpp/", "C++"),
    ("/csharp/", "C#"),
    ("/react/", "React"),
    ("/bootstrap/", "Bootstrap"),
    ("/jquery/", "jQuery"),
    ("/nodejs/", "Node.js"),
    ("/mongodb/", "MongoDB"),
    ("/git/", "Git"),
    ("/typescript/", "TypeScript"),
    ("/django/", "Django"),
    ("/postgresql/", "PostgreSQL"),
)

BLOCK_TAGS = ["ul", "ol", "table", "dl", "blockquote"]
RENDERED_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6", "p", *BLOCK_TAGS]

BREADCRUMB_CATEGORIES = ("HTML", "CSS", "JavaScript", "Python", "SQL")

CATEGORY_TAGS = {
    "HTML": ("web", "markup", "semantic"),
    "CSS": ("styling", "design", "layout"),
    "JavaScript": ("programming", "frontend", "es6"),
    "Python": ("programming", "backend", "data-science"),
    "SQL": ("database", "query", "data"),
    "React": ("frontend", "javascript", "framework"),
    "Node.js": ("backend", "javascript", "server"),
}

CONTENT_TAGS = (
    ("API", "api"),
    ("function", "functions"),
    ("class", "classes"),
    ("object", "objects"),
)

# "javascript" before "js" so the longer name wins.
CODE_LANGUAGES = (
    ("html", "HTML"),
    ("css", "CSS"),
    ("javascript", "JavaScript"),
    ("js", "JavaScript"),
    ("python", "Python"),
    ("sql", "SQL"),
)


class W3SchoolsExtractor(HtmlPageExtractor):
    """Extractor tuned to the W3Schools page layout."""

    @property
    def source(self) -> str:
        return SOURCE

    def supports(self, url: str) -> bool:
        return self.is_http_url(url) and "w3schools.com" in urlparse(url).netloc.lower()

    def parse(self, url: str, soup: BeautifulSoup) -> ExtractedPage:
        title = text_of(soup.select_one("h1")) or text_of(soup.find("title"))
        category = self.extract_category(url, soup)
        content = self.extract_main_content(soup)
        examples = self.extract_examples(soup)
        tags = self.extract_tags(soup, category)
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

    @staticmethod
    def extract_category(url: str, soup: BeautifulSoup) -> str:
        path = urlparse(url).path.lower()
        for needle, category in PATH_CATEGORIES:
            if needle in path:
                return category

        breadcrumb = " ".join(text_of(el) for el in soup.select(".breadcrumb, .nav, .w3-bar"))
        for category in BREADCRUMB_CATEGORIES:
            if category in breadcrumb:
                return category
        return DEFAULT_CATEGORY

    @staticmethod
    def extract_main_content(soup: BeautifulSoup) -> str:
        """Flatten the tutorial body to plain text. Mutates ``soup``."""
        for element in soup.select(NOISE_SELECTOR):
            element.decompose()

        container = None
        for selector in MAIN_SELECTORS:
            container = soup.select_one(selector)
            if container is not None:
                break
        if container is None:
            container = soup.body or soup

        parts: list[str] = []
        for element in container.find_all(RENDERED_TAGS):
            enclosing = element.find_parent(BLOCK_TAGS)
            if enclosing is not None and any(p is container for p in enclosing.parents):
                # Rendered as part of its enclosing list or table.
                continue
            _render(element, parts)
        return "".join(parts).strip()

    @staticmethod
    def extract_examples(soup: BeautifulSoup) -> list[str]:
        examples = []
        for selector in CODE_SELECTORS:
            for element in soup.select(selector):
                code = element.get_text().strip()
                if len(code) <= MIN_TEXT_LENGTH:
                    continue
                code = code.replace("\n\n", "\n").strip()
                classes = " ".join(element.get("class") or []).lower()
                for needle, language in CODE_LANGUAGES:
                    if needle in classes:
                        code = f"{language}:\n{code}"
                        break
                examples.append(code)
        return dedupe(examples)

    @staticmethod
    def extract_tags(soup: BeautifulSoup, category: str) -> list[str]:
        tags = [category, "tutorial", "documentation", "w3schools"]
        tags.extend(CATEGORY_TAGS.get(category, ()))
        text = soup.get_text(" ")
        tags.extend(tag for needle, tag in CONTENT_TAGS if needle in text)
        return dedupe(tags)

    @staticmethod
    def extract_metadata(url: str, soup: BeautifulSoup) -> dict[str, str]:
        metadata: dict[str, str] = {}
        for meta in soup.find_all("meta"):
            name, content = meta.get("name"), meta.get("content")
            if name and content is not None:
                metadata[name] = content

        author = " ".join(text_of(el) for el in soup.select(".author, .byline")).strip()
        metadata["author"] = author or "W3Schools"

        modified = " ".join(text_of(el) for el in soup.select(".modified, .updated, .date")).strip()
        if modified:
            metadata["last_modified"] = modified

        metadata["source"] = "W3Schools"
        metadata["url"] = url
        return metadata


def _render(element: Tag, parts: list[str]) -> None:
    name = element.name
    if name.startswith("h") and len(name) == 2:
        text = text_of(element)
        if text:
            parts.append(f"\n{name.upper()}: {text}\n")
    elif name == "p":
        text = text_of(element)
        if len(text) > MIN_TEXT_LENGTH:
            parts.append(text + "\n\n")
    elif name in ("ul", "ol"):
        for i, li in enumerate(element.find_all("li"), start=1):
            text = text_of(li)
            if text:
                parts.append(f"{i}. {text}\n" if name == "ol" else f"• {text}\n")
        parts.append("\n")
    elif name == "table":
        parts.append("Table:\n")
        for tr in element.find_all("tr"):
            cells = [text_of(cell) for cell in tr.find_all(["td", "th"])]
            row = "".join(f"{cell} | " for cell in cells if cell)
            if row:
                parts.append(row + "\n")
        parts.append("\n")
    elif name == "dl":
        for dt in element.find_all("dt"):
            term = text_of(dt)
            if term:
                parts.append(f"Term: {term}\n")
        for dd in element.find_all("dd"):
            definition = text_of(dd)
            if definition:
                parts.append(f"Definition: {definition}\n\n")
    elif name == "blockquote":
        quote = text_of(element)
        if quote:
            parts.append(f"Quote: {quote}\n\n")
