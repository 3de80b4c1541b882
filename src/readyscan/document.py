"""
The immutable parsed page that every analysis stage reads.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import cached_property
from typing import Any, Mapping
from urllib.parse import ParseResult, urlparse

import structlog
from bs4 import BeautifulSoup, Tag

from readyscan.config import ScanConfig
from readyscan.text import attr, element_text

logger = structlog.get_logger(__name__)

PARSER = "html.parser"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=False)
class Document:
    """A fetched page: its URL, raw HTML, HTTP status and scan configuration.

    The parse tree is built lazily on first access and shared by every rule,
    the chunker and the extractability mapper. Consumers must treat it as
    read-only.
    """

    url: str
    html: str
    status: int | None = 200
    config: ScanConfig = field(default_factory=ScanConfig)
    headers: Mapping[str, str] = field(default_factory=dict)
    fetch_error: str | None = None
    scanned_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_html(
        cls,
        html: str,
        url: str = "about:blank",
        *,
        status: int | None = 200,
        config: ScanConfig | None = None,
    ) -> Document:
        return cls(url=url, html=html, status=status, config=config or ScanConfig())

    # --- Parse tree ---

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html or "", PARSER)

    @cached_property
    def body(self) -> Tag | BeautifulSoup:
        return self.soup.body or self.soup

    @cached_property
    def main_container(self) -> Tag | BeautifulSoup:
        """First <main>, else first <article>, else <body>, else the whole tree."""
        return self.soup.find("main") or self.soup.find("article") or self.body

    @cached_property
    def parsed_url(self) -> ParseResult:
        return urlparse(self.url)

    # --- Frequently used page facts ---

    @cached_property
    def title(self) -> str:
        tag = self.soup.find("title")
        return element_text(tag)

    @cached_property
    def lang(self) -> str:
        html_tag = self.soup.find("html")
        return attr(html_tag, "lang").strip() if isinstance(html_tag, Tag) else ""

    @cached_property
    def body_text(self) -> str:
        return element_text(self.body)

    @cached_property
    def is_https(self) -> bool:
        return self.parsed_url.scheme == "https"

    @cached_property
    def json_ld(self) -> list[dict[str, Any]]:
        """Parsed JSON-LD objects, flattened across arrays and @graph."""
        items: list[dict[str, Any]] = []
        for script in self.soup.find_all("script", attrs={"type": "application/ld+json"}):
            raw = script.string or script.get_text()
            if not raw or not raw.strip():
                continue
            try:
                data = json.loads(raw)
            except ValueError:
                logger.debug("Skipping malformed JSON-LD block", url=self.url)
                continue
            stack = [data]
            while stack:
                node = stack.pop(0)
                if isinstance(node, list):
                    stack.extend(node)
                elif isinstance(node, dict):
                    items.append(node)
                    graph = node.get("@graph")
                    if isinstance(graph, list):
                        stack.extend(graph)
        return items

    @cached_property
    def schema_types(self) -> set[str]:
        types: set[str] = set()
        for item in self.json_ld:
            value = item.get("@type")
            if isinstance(value, str):
                types.add(value)
            elif isinstance(value, list):
                types.update(str(v) for v in value)
        for tag in self.soup.find_all(attrs={"itemtype": True}):
            types.add(attr(tag, "itemtype").rstrip("/").rsplit("/", 1)[-1])
        return types

    def meta(self, name: str) -> str | None:
        """Content of <meta name=...> or <meta property=...>, matched case-insensitively."""
        wanted = name.lower()
        for tag in self.soup.find_all("meta"):
            key = (attr(tag, "name") or attr(tag, "property") or attr(tag, "http-equiv")).lower()
            if key == wanted:
                return attr(tag, "content")
        return None

    def link_rel(self, rel: str) -> list[Tag]:
        """All <link> elements whose rel list contains ``rel``."""
        wanted = rel.lower()
        found = []
        for tag in self.soup.find_all("link"):
            rels = [r.lower() for r in attr(tag, "rel").split()]
            if wanted in rels:
                found.append(tag)
        return found

    def prime(self) -> Document:
        """Build the parse tree and shared facts before concurrent readers start."""
        _ = self.soup, self.body, self.main_container, self.body_text, self.json_ld
        return self
