"""Unit tests for the HTML page extractors."""

import httpx
import pytest
from bs4 import BeautifulSoup

from techdocs.domain.exceptions import ExtractionError
from techdocs.infrastructure.extractors import UniversalExtractor, W3SchoolsExtractor


# ── Helpers ──

GUIDE_HTML = """
<html lang="en">
<head>
  <title>Page Title</title>
  <meta name="description" content="Learn flexbox">
  <meta name="keywords" content="flexbox, layout">
  <meta property="og:type" content="article">
  <meta property="article:published_time" content="2024-03-01">
</head>
<body>
  <nav>Home Docs</nav>
  <main>
    <h1>Flexbox Guide</h1>
    <p>Flexbox is a one-dimensional layout method.</p>
    <p>Short</p>
    <ul><li>Rows</li><li>Columns</li></ul>
    <ol><li>First</li><li>Second</li></ol>
    <blockquote>Use gap for spacing.</blockquote>
    <table><tr><th>Property</th><th>Value</th></tr><tr><td>display</td><td>flex</td></tr></table>
    <div><h2>Example</h2><pre><code class="language-css">.box { display: flex; }</code></pre></div>
  </main>
  <footer>Copyright footer text</footer>
</body>
</html>
"""

W3_HTML = """
<html>
<head>
  <title>CSS Selectors</title>
  <meta name="description" content="CSS selectors tutorial">
  <meta name="keywords" content="CSS, selectors">
</head>
<body>
  <div class="w3-bar">Tutorials References Exercises</div>
  <div id="main">
    <h1>CSS <span class="color_h1">Selectors</span></h1>
    <p>A CSS selector selects the HTML element(s) you want to style.</p>
    <ul><li>Simple selectors</li><li>Combinator selectors <p>nested paragraph text here</p></li></ul>
    <table><tr><th>Selector</th><th>Example</th></tr><tr><td>.class</td><td>.intro</td></tr></table>
    <dl><dt>Element selector</dt><dd>Selects HTML elements based on the element name.</dd></dl>
    <blockquote><p>Every element has a default display value.</p></blockquote>
    <div class="w3-example"><h3>Example</h3><div class="w3-code notranslate cssHigh">p {
  text-align: center;

  color: red;
}</div></div>
  </div>
  <div class="author">Refsnes Data</div>
</body>
</html>
"""


def _serving(html: str, status_code: int = 200) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=html, headers={"content-type": "text/html"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


# ── Universal extractor ──


@pytest.mark.asyncio
async def test_universal_extracts_structured_content():
    extractor = UniversalExtractor(http_client=_serving(GUIDE_HTML))

    page = await extractor.extract("https://docs.example.com/css/flexbox")

    assert page.title == "Flexbox Guide"
    assert page.category == "CSS"
    assert page.content.startswith("# Flexbox Guide\nFlexbox is a one-dimensional layout method.\n\n")
    assert "Short" not in page.content
    assert "• Rows\n• Columns\n" in page.content
    assert "1. First\n2. Second\n" in page.content
    assert "> Use gap for spacing." in page.content
    assert "| Table |\n|-------|\n| Property | Value |\n| display | flex |\n" in page.content
    assert "## Example" in page.content
    assert "Home Docs" not in page.content
    assert "Copyright" not in page.content
    assert page.examples[0] == "CSS:\n.box { display: flex; }"


@pytest.mark.asyncio
async def test_universal_tags_and_metadata():
    extractor = UniversalExtractor(http_client=_serving(GUIDE_HTML))

    page = await extractor.extract("https://docs.example.com/css/flexbox")

    assert page.tags[:4] == ["CSS", "documentation", "flexbox", "layout"]
    assert "guide" in page.tags
    assert len(page.tags) == len(set(page.tags))
    assert page.metadata["url"] == "https://docs.example.com/css/flexbox"
    assert page.metadata["domain"] == "docs.example.com"
    assert page.metadata["source"] == "universal-scraper"
    assert page.metadata["description"] == "Learn flexbox"
    assert page.metadata["og:type"] == "article"
    assert page.metadata["published_date"] == "2024-03-01"
    assert page.metadata["language"] == "en"


@pytest.mark.parametrize(
    "html, expected",
    [
        ("<html><head><title>Doc</title><meta property='og:title' content='OG Title'></head></html>", "OG Title"),
        ("<html><head><title>Only Title</title></head><body><p>text</p></body></html>", "Only Title"),
        ("<html><body><p>nothing</p></body></html>", "Untitled Document"),
    ],
)
def test_universal_title_fallbacks(html, expected):
    assert UniversalExtractor.extract_title(_soup(html)) == expected


@pytest.mark.parametrize(
    "url, body, expected",
    [
        ("https://www.w3schools.com/js/default.asp", "", "JavaScript"),
        ("https://www.w3schools.com/about/", "", "Web Development"),
        ("https://developer.mozilla.org/en-US/docs/Web/CSS/flex", "", "CSS"),
        ("https://stackoverflow.com/questions/1", "", "Q&A"),
        ("https://example.com/tutorials/javascript/arrays", "", "JavaScript"),
        ("https://example.com/posts/42", "Python is great. I like python and rust.", "Python"),
        ("https://example.com/posts/42", "Nothing technical here.", "Documentation"),
    ],
)
def test_universal_category_detection(url, body, expected):
    soup = _soup(f"<html><body><p>{body}</p></body></html>")
    assert UniversalExtractor.extract_category(url, soup) == expected


def test_universal_supports_any_http_url():
    extractor = UniversalExtractor()
    assert extractor.supports("https://example.com/page")
    assert extractor.supports("http://localhost:8000/docs")
    assert not extractor.supports("ftp://example.com/file")
    assert not extractor.supports("not a url")


@pytest.mark.asyncio
async def test_http_error_raises_extraction_error():
    extractor = UniversalExtractor(http_client=_serving("missing", status_code=404))

    with pytest.raises(ExtractionError) as exc_info:
        await extractor.extract("https://example.com/missing")

    assert exc_info.value.message == "HTTP error: 404"


@pytest.mark.asyncio
async def test_connection_failure_raises_extraction_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    extractor = UniversalExtractor(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    with pytest.raises(ExtractionError):
        await extractor.extract("https://example.com/")


# ── W3Schools extractor ──


@pytest.mark.asyncio
async def test_w3schools_extracts_tutorial_page():
    extractor = W3SchoolsExtractor(http_client=_serving(W3_HTML))

    page = await extractor.extract("https://www.w3schools.com/css/css_selectors.asp")

    assert page.title == "CSS Selectors"
    assert page.category == "CSS"
    assert page.content.startswith("H1: CSS Selectors\n")
    assert "A CSS selector selects the HTML element(s) you want to style." in page.content
    assert "• Simple selectors\n• Combinator selectors nested paragraph text here\n" in page.content
    assert page.content.count("nested paragraph text here") == 1
    assert "Table:\nSelector | Example | \n.class | .intro | \n" in page.content
    assert "Term: Element selector\nDefinition: Selects HTML elements based on the element name.\n" in page.content
    assert "Quote: Every element has a default display value." in page.content
    assert page.content.count("Every element has a default display value.") == 1
    assert "H3: Example" in page.content
    assert "Tutorials References" not in page.content


@pytest.mark.asyncio
async def test_w3schools_examples_tags_and_metadata():
    extractor = W3SchoolsExtractor(http_client=_serving(W3_HTML))

    page = await extractor.extract("https://www.w3schools.com/css/css_selectors.asp")

    assert page.examples[0] == "CSS:\np {\n  text-align: center;\n  color: red;\n}"
    assert page.tags == [
        "CSS",
        "tutorial",
        "documentation",
        "w3schools",
        "styling",
        "design",
        "layout",
        "classes",
    ]
    assert page.metadata["description"] == "CSS selectors tutorial"
    assert page.metadata["keywords"] == "CSS, selectors"
    assert page.metadata["author"] == "Refsnes Data"
    assert page.metadata["source"] == "W3Schools"
    assert page.metadata["url"] == "https://www.w3schools.com/css/css_selectors.asp"
    assert "last_modified" not in page.metadata


def test_w3schools_category_falls_back_to_breadcrumb():
    soup = _soup('<html><body><div class="breadcrumb">Home &gt; JavaScript</div></body></html>')
    url = "https://www.w3schools.com/whatis/whatis_htmldom.asp"

    assert W3SchoolsExtractor.extract_category(url, soup) == "JavaScript"
    assert W3SchoolsExtractor.extract_category(url, _soup("<html></html>")) == "Web Development"


def test_w3schools_defaults_author():
    metadata = W3SchoolsExtractor.extract_metadata("https://www.w3schools.com/", _soup("<html></html>"))
    assert metadata["author"] == "W3Schools"


def test_w3schools_supports_only_its_own_host():
    extractor = W3SchoolsExtractor()
    assert extractor.supports("https://www.w3schools.com/css/")
    assert not extractor.supports("https://example.com/w3schools.com")
