"""
Core contracts and dataclasses shared by every readyscan component.

The rule engine, scoring model, chunker and extractability mapper all
exchange data through the types defined here:

- ``Severity`` and ``Category`` are closed enumerations. Numeric weights for
  them live in configuration and are validated to cover every member.
- ``Finding`` is the immutable unit of output produced by rule plugins and by
  the orchestrator boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

# ============================================================================
# Enums
# ============================================================================


class Severity(Enum):
    """Severity of a finding, ordered from most to least serious."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """0 for CRITICAL up to 4 for INFO."""
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW, Severity.INFO)


class Category(Enum):
    """Closed set of finding categories."""

    READABILITY = "AIREAD"
    CRAWLABILITY = "CRAWL"
    CHUNKING = "CHUNK"
    EXTRACTION = "EXTRACT"
    TECHNICAL = "TECH"
    ACCESSIBILITY = "A11Y"
    KNOWLEDGE_GRAPH = "KG"
    HALLUCINATION = "HALL"
    MISC = "MISC"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    Category.READABILITY: "AI Readability",
    Category.CRAWLABILITY: "Crawlability",
    Category.CHUNKING: "Chunking",
    Category.EXTRACTION: "Extraction",
    Category.TECHNICAL: "Technical",
    Category.ACCESSIBILITY: "Accessibility",
    Category.KNOWLEDGE_GRAPH: "Knowledge Graph",
    Category.HALLUCINATION: "Hallucination Risk",
    Category.MISC: "Miscellaneous",
}


# ============================================================================
# Findings
# ============================================================================


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class FindingLocation:
    """Where on the page a finding applies."""

    url: str | None = None
    selector: str | None = None
    text_snippet: str | None = None
    line: int | None = None


@dataclass(slots=True, frozen=True)
class Finding:
    """A single detected issue.

    Findings are created only by rule execution or by the scan orchestrator
    and are never modified afterwards.
    """

    id: str
    title: str
    category: Category
    severity: Severity
    description: str
    remediation: str
    impact_score: float
    confidence: float = 1.0
    location: FindingLocation | None = None
    evidence: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        """Normalize enum and sequence fields and validate ranges."""
        if not isinstance(self.severity, Severity):
            object.__setattr__(self, "severity", Severity(self.severity))
        if not isinstance(self.category, Category):
            object.__setattr__(self, "category", Category(self.category))
        if not isinstance(self.evidence, tuple):
            object.__setattr__(self, "evidence", tuple(str(e) for e in self.evidence))
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))
        if not (0 <= self.impact_score <= 100):
            raise ValueError(f"impact_score must be between 0 and 100, got {self.impact_score}")
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"confidence must be between 0.0 and 1.0, got {self.confidence}")

    @property
    def weighted_key(self) -> tuple[Any, ...]:
        """Total ordering key used wherever findings need a stable order."""
        return (-self.impact_score, self.severity.rank, self.title, self.id, self.description)

    def mentions(self, *keywords: str) -> bool:
        """True if the title contains any keyword, case-insensitively."""
        title = self.title.lower()
        return any(k.lower() in title for k in keywords)


def count_by_category(findings: Iterable[Finding]) -> dict[Category, int]:
    counts: dict[Category, int] = {}
    for finding in findings:
        counts[finding.category] = counts.get(finding.category, 0) + 1
    return counts
