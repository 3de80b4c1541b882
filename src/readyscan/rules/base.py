"""
Rule plugin contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, Union, runtime_checkable

from readyscan.document import Document
from readyscan.protocols import Category, Finding, FindingLocation, Severity

RuleOutcome = Union[Finding, Sequence[Finding], None]


@dataclass(slots=True, frozen=True)
class RuleMeta:
    """Static description of a rule."""

    id: str
    title: str
    category: Category
    severity: Severity
    priority: int = 100
    tags: tuple[str, ...] = ()
    description: str = ""


@runtime_checkable
class Rule(Protocol):
    """A deterministic check over a parsed document.

    ``evaluate`` must not mutate the document and must not depend on any other
    rule's output.
    """

    meta: RuleMeta

    def evaluate(self, document: Document) -> RuleOutcome:
        """Return no finding, one finding, or several findings."""
        ...


class BaseRule:
    """Convenience base class carrying the rule's metadata and a finding factory."""

    def __init__(self, meta: RuleMeta) -> None:
        self.meta = meta

    def evaluate(self, document: Document) -> RuleOutcome:
        raise NotImplementedError

    def finding(
        self,
        document: Document,
        *,
        id: str | None = None,
        title: str | None = None,
        severity: Severity | None = None,
        description: str = "",
        remediation: str = "",
        impact: float = 10,
        confidence: float = 1.0,
        selector: str | None = None,
        text_snippet: str | None = None,
        evidence: Iterable[str] = (),
        tags: Iterable[str] | None = None,
        category: Category | None = None,
    ) -> Finding:
        """Build a finding stamped with this rule's category and the scan timestamp."""
        return Finding(
            id=id or self.meta.id,
            title=title or self.meta.title,
            category=category or self.meta.category,
            severity=severity or self.meta.severity,
            description=description,
            remediation=remediation,
            impact_score=impact,
            confidence=confidence,
            location=FindingLocation(url=document.url, selector=selector, text_snippet=text_snippet),
            evidence=tuple(str(e) for e in evidence),
            tags=tuple(tags if tags is not None else self.meta.tags),
            timestamp=document.scanned_at,
        )


def as_findings(outcome: RuleOutcome) -> list[Finding]:
    """Normalize a rule outcome to a list."""
    if outcome is None:
        return []
    if isinstance(outcome, Finding):
        return [outcome]
    return list(outcome)
