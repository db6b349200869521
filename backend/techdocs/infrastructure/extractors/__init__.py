from .html_fetcher import HtmlPageExtractor
from .universal_extractor import UniversalExtractor
from .w3schools_extractor import W3SchoolsExtractor

__all__ = ["HtmlPageExtractor", "UniversalExtractor", "W3SchoolsExtractor"]
