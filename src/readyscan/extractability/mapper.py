"""
Extractability map: a bounded, document-order sample of content elements,
each classified by how its text reaches a non-interactive reader.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag

from readyscan.config import ExtractabilityConfig
from readyscan.document import PARSER, Document
from readyscan.text import attr, element_text

from .content_types import analyze_content_types
from .detection import DetectionStrategy, HeuristicDetector
from .models import (
    ContentSource,
    ExtractabilityIssue,
    ExtractabilityLevel,
    ExtractabilityMap,
    ExtractabilityScore,
    ExtractabilitySummary,
    ExtractableNode,
    percent,
)

logger = structlog.get_logger(__name__)

CONTENT_TAGS = frozenset(
    {
        "p", "h1", "h2", "h3", "h4", "h5", "h6", "article", "section", "main", "div",
        "span", "li", "td", "th", "blockquote", "pre", "code",
    }
)
SNAPSHOT_ATTRIBUTES = ("id", "class", "role", "aria-hidden", "data-lazy")


def classify_level(source: ContentSource, *, is_hidden: bool, has_text: bool, requires_interaction: bool) -> ExtractabilityLevel:
    if source is ContentSource.SHADOW_DOM or (is_hidden and not has_text):
        return ExtractabilityLevel.IMPOSSIBLE
    if requires_interaction or source is ContentSource.IFRAME:
        return ExtractabilityLevel.DIFFICULT
    if source is ContentSource.CLIENT_RENDERED or is_hidden:
        return ExtractabilityLevel.MODERATE
    return ExtractabilityLevel.EASY


def _depth(element: Tag) -> int:
    return sum(1 for parent in element.parents if not isinstance(parent, BeautifulSoup))


def _selector(element: Tag) -> str:
    element_id = attr(element, "id")
    if element_id:
        return f"#{element_id}"
    classes = attr(element, "class").split()
    if classes:
        return f"{element.name}.{classes[0]}"
    index = 1 + sum(1 for sibling in element.previous_siblings if isinstance(sibling, Tag))
    return f"{element.name}:nth-child({index})"


def _iframe_fragment(iframe: Tag) -> BeautifulSoup | None:
    """Markup carried as raw text inside an iframe, parsed on its own."""
    raw = "".join(str(s) for s in iframe.children if isinstance(s, NavigableString))
    if "<" not in raw:
        return None
    return BeautifulSoup(raw, PARSER)


class ExtractabilityMapper:
    """Builds an :class:`ExtractabilityMap` for a document."""

    def __init__(self, config: ExtractabilityConfig | None = None, detector: DetectionStrategy | None = None) -> None:
        self.config = config or ExtractabilityConfig()
        self.detector = detector or HeuristicDetector()
        self.logger = logger.bind(component="extractability_mapper")

    def _candidates(self, soup: BeautifulSoup) -> Iterator[Tuple[Tag, bool, int]]:
        """Content elements in document order as ``(element, in_iframe, depth_offset)``."""
        for element in soup.find_all(True):
            if element.name == "iframe":
                fragment = _iframe_fragment(element)
                if fragment is not None:
                    offset = _depth(element) + 1
                    for nested in fragment.find_all(CONTENT_TAGS):
                        yield nested, True, offset
                continue
            if element.name in CONTENT_TAGS:
                yield element, element.find_parent("iframe") is not None, 0

    def build(self, document: Document) -> ExtractabilityMap:
        nodes: List[ExtractableNode] = []
        for element, in_iframe, depth_offset in self._candidates(document.soup):
            if len(nodes) >= self.config.max_nodes:
                break
            node = self._classify(element, in_iframe, depth_offset)
            if node is not None:
                nodes.append(node)

        summary = ExtractabilitySummary(
            total_nodes=len(nodes),
            extractable_nodes=sum(1 for n in nodes if n.extractability.is_extractable),
            hidden_nodes=sum(1 for n in nodes if n.is_hidden),
            interactive_nodes=sum(1 for n in nodes if n.requires_interaction),
            iframe_nodes=sum(1 for n in nodes if n.source is ContentSource.IFRAME),
            client_rendered_nodes=sum(1 for n in nodes if n.source is ContentSource.CLIENT_RENDERED),
            server_rendered_nodes=sum(1 for n in nodes if n.source is ContentSource.SERVER_RENDERED),
        )
        total = summary.total_nodes
        score = ExtractabilityScore(
            extractability_score=percent(summary.extractable_nodes, total),
            server_rendered_percent=percent(summary.server_rendered_nodes, total),
            client_rendered_percent=percent(summary.client_rendered_nodes, total),
            hidden_content_percent=percent(summary.hidden_nodes, total),
            interactive_content_percent=percent(summary.interactive_nodes, total),
            iframe_content_percent=percent(summary.iframe_nodes, total),
        )
        noscript_count = len(document.soup.find_all("noscript"))
        issues, recommendations = self._issues(summary, score, noscript_count)

        self.logger.debug(
            "Extractability map built",
            total_nodes=total,
            extractability_score=score.extractability_score,
            issues=len(issues),
        )
        return ExtractabilityMap(
            nodes=tuple(nodes),
            summary=summary,
            score=score,
            content_types=analyze_content_types(document.soup, self.detector),
            issues=tuple(issues),
            recommendations=tuple(recommendations),
        )

    def _classify(self, element: Tag, in_iframe: bool, depth_offset: int) -> ExtractableNode | None:
        text_length = len(element_text(element))
        if text_length < self.config.min_text_length and not self.config.include_hidden:
            return None

        shadow = self.detector.is_shadow_host(element)
        interactive = self.detector.requires_interaction(element)
        hidden = self.detector.is_hidden(element)
        client_rendered = self.detector.is_client_rendered(element)

        if shadow:
            source = ContentSource.SHADOW_DOM
        elif in_iframe:
            source = ContentSource.IFRAME
        elif interactive:
            source = ContentSource.INTERACTIVE
        elif hidden:
            source = ContentSource.HIDDEN
        elif client_rendered:
            source = ContentSource.CLIENT_RENDERED
        else:
            source = ContentSource.SERVER_RENDERED

        has_text = text_length > 0
        return ExtractableNode(
            selector=_selector(element),
            tag_name=element.name,
            source=source,
            extractability=classify_level(
                source, is_hidden=hidden, has_text=has_text, requires_interaction=interactive
            ),
            text_length=text_length,
            has_text=has_text,
            is_hidden=hidden,
            requires_interaction=interactive,
            is_nested=in_iframe or shadow,
            attributes={name: attr(element, name) for name in SNAPSHOT_ATTRIBUTES if element.has_attr(name)},
            children=len(element.find_all(True, recursive=False)),
            depth=_depth(element) + depth_offset,
        )

    def _issues(
        self, summary: ExtractabilitySummary, score: ExtractabilityScore, noscript_count: int
    ) -> Tuple[List[ExtractabilityIssue], List[str]]:
        cfg = self.config
        issues: List[ExtractabilityIssue] = []
        recommendations: List[str] = []

        if score.extractability_score < cfg.low_score_threshold:
            recommendations.append(
                "Improve content extractability by reducing client-side rendering and hidden content"
            )
        if score.hidden_content_percent > cfg.hidden_threshold:
            issues.append(
                ExtractabilityIssue(
                    "hidden-content",
                    "medium",
                    f"{score.hidden_content_percent}% of content is hidden from view",
                    summary.hidden_nodes,
                )
            )
            recommendations.append("Reduce hidden content or provide alternative accessible versions")
        if score.interactive_content_percent > cfg.interactive_threshold:
            issues.append(
                ExtractabilityIssue(
                    "interactive-content",
                    "high",
                    f"{score.interactive_content_percent}% of content requires user interaction",
                    summary.interactive_nodes,
                )
            )
            recommendations.append(
                "Make interactive content accessible without JavaScript or provide server-rendered alternatives"
            )
        if score.iframe_content_percent > cfg.iframe_threshold:
            issues.append(
                ExtractabilityIssue(
                    "iframe-content",
                    "medium",
                    f"{score.iframe_content_percent}% of content is in iframes",
                    summary.iframe_nodes,
                )
            )
            recommendations.append("Minimize iframe usage or provide alternative content representations")
        if score.server_rendered_percent < cfg.server_rendered_threshold:
            issues.append(
                ExtractabilityIssue(
                    "client-rendered",
                    "high",
                    f"Only {score.server_rendered_percent}% of content is server-rendered",
                    summary.client_rendered_nodes,
                )
            )
            recommendations.append("Increase server-side rendering for better AI/bot accessibility")
        if noscript_count:
            issues.append(
                ExtractabilityIssue("noscript-fallback", "low", "Page has noscript fallback content", noscript_count)
            )
        return issues, recommendations
