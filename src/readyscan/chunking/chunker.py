"""
Deterministic segmentation of the page's main text into retrieval-sized chunks.

The container's text is first walked in document order into *blocks*: runs
of text that share the same nearest block-level ancestor. Heading-based
chunking opens a chunk at each heading block; paragraph-based chunking packs
blocks into chunks bounded by a token budget. Either way the chunk texts,
joined, reproduce :meth:`Chunker.extract_text` modulo whitespace.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

from readyscan.config import ScanConfig
from readyscan.document import Document
from readyscan.text import attr, collapse_whitespace, estimate_tokens

from .models import ChunkingAnalysis, ChunkStrategy, ContentChunk

logger = structlog.get_logger(__name__)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
NOISE_TAGS = frozenset({"script", "style", "noscript", "template"})
BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "body", "caption", "dd", "details", "div", "dl", "dt",
        "fieldset", "figcaption", "figure", "footer", "form", "header", "li", "main", "nav", "ol", "p", "pre",
        "section", "summary", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul", *HEADING_TAGS,
    }
)
CODE_TAGS = frozenset({"pre", "code"})
LIST_TAGS = frozenset({"ul", "ol", "li", "dl", "dt", "dd"})
TABLE_TAGS = frozenset({"table", "thead", "tbody", "tfoot", "tr", "td", "th", "caption"})
_SKIPPED_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)

_WHITESPACE_RE = re.compile(r"\s")
_PUNCT_RUN_RE = re.compile(r"[.,!?;:]{2,}")


def noise_ratio(text: str, script_chars: int = 0) -> float:
    """Share of low-information characters in ``text``.

    ``(whitespace * 0.5 + punctuation runs * 10 + script/style chars) / len``,
    capped at 1.0 and rounded to two decimals. Empty text is pure noise.
    """
    if not text:
        return 1.0
    whitespace = len(_WHITESPACE_RE.findall(text))
    punctuation_runs = len(_PUNCT_RUN_RE.findall(text))
    noise = (whitespace * 0.5 + punctuation_runs * 10 + script_chars) / len(text)
    return round(min(1.0, noise), 2)


@dataclass
class _Block:
    element: Tag
    parts: List[str] = field(default_factory=list)
    noise_chars: int = 0

    @property
    def text(self) -> str:
        return collapse_whitespace(" ".join(self.parts))

    @property
    def is_heading(self) -> bool:
        return self.element.name in HEADING_TAGS


def _flags(blocks: List[_Block]) -> Tuple[bool, bool, bool]:
    def touches(block: _Block, names: frozenset) -> bool:
        if block.element.name in names:
            return True
        return block.element.find(list(names)) is not None

    return (
        any(touches(b, CODE_TAGS) for b in blocks),
        any(touches(b, LIST_TAGS) for b in blocks),
        any(touches(b, TABLE_TAGS) for b in blocks),
    )


class Chunker:
    """Splits a document's main container into :class:`ContentChunk` objects."""

    def __init__(self, config: ScanConfig | None = None) -> None:
        self.config = config or ScanConfig()
        self.max_tokens = self.config.max_chunk_tokens
        self.logger = logger.bind(component="chunker")

    # --- Text extraction ---

    def _blocks(self, container: Tag | BeautifulSoup) -> List[_Block]:
        blocks: List[_Block] = []
        current: Optional[_Block] = None
        pending_noise = 0

        for node in container.descendants:
            if not isinstance(node, NavigableString) or isinstance(node, _SKIPPED_STRINGS):
                continue
            in_noise = False
            owner: Tag | BeautifulSoup = container
            for parent in node.parents:
                if parent is container:
                    break
                if parent.name in NOISE_TAGS:
                    in_noise = True
                if owner is container and parent.name in BLOCK_TAGS:
                    owner = parent

            if in_noise:
                if current is not None:
                    current.noise_chars += len(node)
                else:
                    pending_noise += len(node)
                continue

            if not node.strip():
                continue
            if current is None or current.element is not owner:
                current = _Block(element=owner)  # type: ignore[arg-type]
                blocks.append(current)
                current.noise_chars += pending_noise
                pending_noise = 0
            current.parts.append(str(node))

        return [b for b in blocks if b.text]

    def extract_text(self, document: Document) -> str:
        """Main-container text, one line per block, script and style excluded."""
        return "\n".join(b.text for b in self._blocks(document.main_container))

    # --- Chunking ---

    def chunk(self, document: Document) -> ChunkingAnalysis:
        container = document.main_container
        blocks = self._blocks(container)
        heading_count = len(container.find_all(HEADING_TAGS))
        requested = self.config.chunking.strategy

        strategy: ChunkStrategy
        if requested == "auto":
            strategy = "heading-based" if heading_count >= self.config.chunking.min_headings else "paragraph-based"
        elif requested == "heading-based" and heading_count == 0:
            strategy = "paragraph-based (fallback)"
        else:
            strategy = requested

        selectors = _Selectors(container)
        if strategy == "heading-based":
            chunks = self._by_headings(selectors, blocks)
        else:
            chunks = self._by_paragraphs(selectors, blocks)

        analysis = ChunkingAnalysis.from_chunks(tuple(chunks), strategy)
        self.logger.debug(
            "Chunking complete",
            strategy=strategy,
            total_chunks=analysis.total_chunks,
            total_tokens=analysis.total_tokens,
        )
        return analysis

    def _by_headings(self, selectors: _Selectors, blocks: List[_Block]) -> List[ContentChunk]:
        groups: List[List[_Block]] = []
        for block in blocks:
            if block.is_heading or not groups:
                groups.append([block])
            else:
                groups[-1].append(block)

        chunks = []
        for group in groups:
            head = group[0]
            if head.is_heading:
                body = group[1:]
                heading_text = head.text
                content = " ".join(b.text for b in body)
                text = f"{heading_text}\n{content}" if content else heading_text
                chunks.append(
                    self._make_chunk(
                        len(chunks),
                        selectors,
                        group,
                        text,
                        noise_text=content,
                        heading=heading_text,
                        heading_level=int(head.element.name[1]),
                    )
                )
            else:
                text = " ".join(b.text for b in group)
                chunks.append(self._make_chunk(len(chunks), selectors, group, text, noise_text=text))
        return chunks

    def _by_paragraphs(self, selectors: _Selectors, blocks: List[_Block]) -> List[ContentChunk]:
        chunks: List[ContentChunk] = []
        pending: List[_Block] = []
        pending_tokens = 0

        def flush() -> None:
            nonlocal pending, pending_tokens
            if pending:
                text = "\n\n".join(b.text for b in pending)
                chunks.append(self._make_chunk(len(chunks), selectors, pending, text, noise_text=text))
            pending, pending_tokens = [], 0

        for block in blocks:
            tokens = estimate_tokens(block.text)
            if tokens > self.max_tokens:
                flush()
                words = block.text.split()
                for start in range(0, len(words), self.max_tokens):
                    piece = " ".join(words[start : start + self.max_tokens])
                    share = block.noise_chars if start == 0 else 0
                    chunks.append(
                        self._make_chunk(len(chunks), selectors, [block], piece, noise_text=piece, script_chars=share)
                    )
                continue
            if pending and pending_tokens + tokens > self.max_tokens:
                flush()
            pending.append(block)
            pending_tokens += tokens
        flush()
        return chunks

    def _make_chunk(
        self,
        index: int,
        selectors: _Selectors,
        blocks: List[_Block],
        text: str,
        *,
        noise_text: str,
        heading: Optional[str] = None,
        heading_level: Optional[int] = None,
        script_chars: Optional[int] = None,
    ) -> ContentChunk:
        if script_chars is None:
            script_chars = sum(b.noise_chars for b in blocks)
        has_code, has_lists, has_tables = _flags(blocks)
        start = selectors.for_block(blocks[0])
        end = selectors.for_block(blocks[-1]) if len(blocks) > 1 else None
        return ContentChunk(
            id=f"chunk-{index + 1}",
            start_selector=start,
            end_selector=end if end != start else None,
            token_count=estimate_tokens(text),
            text=text,
            noise_ratio=noise_ratio(noise_text or text, script_chars),
            word_count=len(text.split()),
            character_count=len(text),
            heading=heading,
            heading_level=heading_level,
            has_code=has_code,
            has_lists=has_lists,
            has_tables=has_tables,
        )


class _Selectors:
    """CSS-ish locators for blocks of one container.

    Paragraph positions are numbered once, in document order, so each lookup
    is constant time.
    """

    def __init__(self, container: Tag | BeautifulSoup) -> None:
        self.container = container
        self.positions = {id(p): i for i, p in enumerate(container.find_all("p"), 1)}

    def for_block(self, block: _Block) -> str:
        element = block.element
        element_id = attr(element, "id")
        if element_id:
            return f"#{element_id}"
        if element is self.container or not isinstance(element, Tag) or element.name == "body":
            return "body"
        if element.name == "p":
            return f"p:nth-of-type({self.positions[id(element)]})"
        return f'{element.name}:contains("{block.text[:30]}")'
