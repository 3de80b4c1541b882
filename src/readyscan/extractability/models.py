from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Literal, Optional, Tuple


class ContentSource(str, Enum):
    """How a node's content reaches a reader."""

    SERVER_RENDERED = "server-rendered"
    CLIENT_RENDERED = "client-rendered"
    INTERACTIVE = "interactive"
    HIDDEN = "hidden"
    IFRAME = "iframe"
    SHADOW_DOM = "shadow-dom"
    UNKNOWN = "unknown"


class ExtractabilityLevel(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    DIFFICULT = "difficult"
    IMPOSSIBLE = "impossible"

    @property
    def is_extractable(self) -> bool:
        return self in (ExtractabilityLevel.EASY, ExtractabilityLevel.MODERATE)


@dataclass(slots=True, frozen=True)
class ExtractableNode:
    selector: str
    tag_name: str
    source: ContentSource
    extractability: ExtractabilityLevel
    text_length: int
    has_text: bool
    is_hidden: bool
    requires_interaction: bool
    is_nested: bool
    attributes: Dict[str, str] = field(default_factory=dict)
    children: int = 0
    depth: int = 0


@dataclass(slots=True, frozen=True)
class ExtractabilitySummary:
    total_nodes: int = 0
    extractable_nodes: int = 0
    hidden_nodes: int = 0
    interactive_nodes: int = 0
    iframe_nodes: int = 0
    client_rendered_nodes: int = 0
    server_rendered_nodes: int = 0


@dataclass(slots=True, frozen=True)
class ExtractabilityScore:
    """Node-ratio percentages, each in ``[0, 100]`` and 0 for an empty sample."""

    extractability_score: int = 0
    server_rendered_percent: int = 0
    client_rendered_percent: int = 0
    hidden_content_percent: int = 0
    interactive_content_percent: int = 0
    iframe_content_percent: int = 0


@dataclass(slots=True, frozen=True)
class ContentTypeStat:
    extractable: int = 0
    total: int = 0
    percentage: int = 0


@dataclass(slots=True, frozen=True)
class ContentTypeBreakdown:
    text: ContentTypeStat = field(default_factory=ContentTypeStat)
    images: ContentTypeStat = field(default_factory=ContentTypeStat)
    links: ContentTypeStat = field(default_factory=ContentTypeStat)
    structured: ContentTypeStat = field(default_factory=ContentTypeStat)


IssueSeverity = Literal["low", "medium", "high"]


@dataclass(slots=True, frozen=True)
class ExtractabilityIssue:
    type: str
    severity: IssueSeverity
    description: str
    count: int


@dataclass(slots=True, frozen=True)
class ExtractabilityMap:
    nodes: Tuple[ExtractableNode, ...]
    summary: ExtractabilitySummary
    score: ExtractabilityScore
    content_types: ContentTypeBreakdown
    issues: Tuple[ExtractabilityIssue, ...] = ()
    recommendations: Tuple[str, ...] = ()

    def node(self, selector: str) -> Optional[ExtractableNode]:
        for node in self.nodes:
            if node.selector == selector:
                return node
        return None


def percent(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(100 * part / total)
