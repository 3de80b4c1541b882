from __future__ import annotations

from typing import Callable, Iterable

from bs4 import BeautifulSoup, Tag

from readyscan.text import attr

from .detection import DetectionStrategy, HeuristicDetector
from .models import ContentTypeBreakdown, ContentTypeStat, percent

TEXT_TAGS = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "td", "th")
STRUCTURED_TAGS = ("table", "ul", "ol", "dl")


def _stat(elements: Iterable[Tag], accept: Callable[[Tag], bool]) -> ContentTypeStat:
    elements = list(elements)
    extractable = sum(1 for el in elements if accept(el))
    return ContentTypeStat(extractable=extractable, total=len(elements), percentage=percent(extractable, len(elements)))


def analyze_content_types(soup: BeautifulSoup, detector: DetectionStrategy | None = None) -> ContentTypeBreakdown:
    """Share of visible text, described images, links and structured blocks."""
    detector = detector or HeuristicDetector()

    def visible(el: Tag) -> bool:
        return not detector.is_hidden(el)

    return ContentTypeBreakdown(
        text=_stat(soup.find_all(TEXT_TAGS), visible),
        images=_stat(soup.find_all("img"), lambda el: visible(el) and bool(attr(el, "alt").strip())),
        links=_stat(soup.find_all("a", href=True), visible),
        structured=_stat(soup.find_all(STRUCTURED_TAGS), visible),
    )
