"""
Heading presence and structure checks.
"""

from __future__ import annotations

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import element_text

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


class H1Rule(BaseRule):
    """Exactly one non-empty H1 is expected."""

    def evaluate(self, document: Document) -> RuleOutcome:
        h1s = [h for h in document.soup.find_all("h1") if element_text(h)]
        if not h1s:
            return self.finding(
                document,
                id="AIREAD-001",
                title="Missing H1",
                severity=Severity.CRITICAL,
                description="The HTML document does not contain any H1 headings.",
                remediation="Add at least one H1 heading to the HTML document to improve accessibility and SEO.",
                impact=40,
                evidence=["No <h1> tags found in the document."],
            )
        if len(h1s) > 1:
            return self.finding(
                document,
                id="AIREAD-002",
                title="Multiple H1 Headings",
                severity=Severity.HIGH,
                description=f"The HTML document contains multiple H1 headings ({len(h1s)} found).",
                remediation="Consider using a single H1 heading for better SEO practices.",
                impact=20,
                confidence=0.95,
                selector="h1",
                text_snippet=element_text(h1s[0])[:200],
                evidence=[f"count: {len(h1s)}"],
            )
        return None


class HeadingStructureRule(BaseRule):
    """A page with a single heading gives agents no section structure."""

    def evaluate(self, document: Document) -> RuleOutcome:
        headings = document.soup.find_all(HEADING_TAGS)
        if len(headings) != 1:
            return None
        return self.finding(
            document,
            description=(
                "The page has only one heading. Multiple heading levels help AI agents understand content structure."
            ),
            remediation="Add H2-H6 headings to organize content into logical sections.",
            impact=15,
            confidence=0.8,
            selector=headings[0].name,
            text_snippet=element_text(headings[0])[:100],
            evidence=[f"Only heading: <{headings[0].name}>"],
        )


register(
    RuleMeta(
        id="AIREAD-001",
        title="Missing H1",
        category=Category.READABILITY,
        severity=Severity.CRITICAL,
        priority=10,
        tags=("seo", "accessibility"),
        description="Checks that the document contains exactly one non-empty H1 heading.",
    ),
    H1Rule,
)

register(
    RuleMeta(
        id="AIREAD-003",
        title="Poor heading structure",
        category=Category.READABILITY,
        severity=Severity.MEDIUM,
        priority=10,
        tags=("structure", "headings"),
        description="Checks that content is organized under more than one heading.",
    ),
    HeadingStructureRule,
)
