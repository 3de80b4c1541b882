"""
Semantic HTML5 structure: main container, landmarks and heading hierarchy.
"""

from __future__ import annotations

from bs4 import Tag

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register

from .headings import HEADING_TAGS


class SemanticStructureRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        has_main = soup.find("main") is not None
        has_article = soup.find("article") is not None

        if not has_main and not has_article:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-014",
                    title="Missing main semantic container",
                    severity=Severity.HIGH,
                    description=(
                        "The page lacks a <main> or <article> element. These semantic containers help AI agents "
                        "identify the primary content."
                    ),
                    remediation=(
                        "Wrap your main content in a <main> element, or use <article> for article-type content. "
                        "This helps AI understand what content is most important."
                    ),
                    impact=25,
                    evidence=["No <main> or <article> element found"],
                    tags=["semantic", "html5", "structure"],
                )
            )

        body = soup.body
        children = [child for child in body.children if isinstance(child, Tag)] if body else []
        if children and all(child.name == "div" for child in children):
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-015",
                    title="Poor semantic structure (div soup)",
                    severity=Severity.MEDIUM,
                    description=(
                        "The page uses only <div> elements for structure. Semantic HTML5 elements help AI agents "
                        "understand content organization."
                    ),
                    remediation=(
                        "Replace generic <div> elements with semantic alternatives: <header>, <nav>, <main>, "
                        "<article>, <section>, <aside>, <footer>."
                    ),
                    impact=20,
                    confidence=0.9,
                    evidence=["Body contains only div elements"],
                    tags=["semantic", "html5", "accessibility"],
                )
            )

        missing = [name for name in ("header", "nav", "footer") if soup.find(name) is None]
        if missing:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-015a",
                    title="Missing semantic landmark elements",
                    severity=Severity.LOW,
                    description=(
                        f"The page is missing {len(missing)} semantic landmark(s): {', '.join(missing)}. These "
                        "elements help AI agents navigate and understand page structure."
                    ),
                    remediation=(
                        "Add semantic landmark elements: use <header> for page headers, <nav> for navigation, "
                        "and <footer> for page footers."
                    ),
                    impact=10,
                    confidence=0.8,
                    evidence=[f"Missing landmarks: {', '.join(missing)}"],
                    tags=["semantic", "landmarks", "structure"],
                )
            )

        levels = [int(h.name[1]) for h in soup.find_all(HEADING_TAGS)]
        if any(b - a > 1 for a, b in zip(levels, levels[1:])):
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-016",
                    title="Broken heading hierarchy",
                    severity=Severity.MEDIUM,
                    description=(
                        "The page has skipped heading levels (e.g., h1 to h3 without h2). A proper heading "
                        "hierarchy helps AI agents understand content structure."
                    ),
                    remediation="Ensure heading levels follow sequential order: h1, h2, h3. Don't skip levels in the hierarchy.",
                    impact=15,
                    evidence=[f"Heading levels found: {', '.join(map(str, levels))}"],
                    tags=["headings", "hierarchy", "structure"],
                )
            )

        for article in soup.find_all("article"):
            if article.find(HEADING_TAGS) is None:
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-017",
                        title="Article missing heading",
                        severity=Severity.MEDIUM,
                        description=(
                            "An <article> element lacks a heading. Articles should have clear headings to help "
                            "AI agents understand the content topic."
                        ),
                        remediation="Add a heading (h1-h6) at the start of each <article> element.",
                        impact=10,
                        selector="article",
                        evidence=["Article without heading found"],
                        tags=["article", "headings", "structure"],
                    )
                )

        return findings


register(
    RuleMeta(
        id="AIREAD-014",
        title="Semantic HTML structure issues",
        category=Category.READABILITY,
        severity=Severity.MEDIUM,
        priority=12,
        tags=("semantic", "html", "structure"),
        description="Checks for semantic containers, landmarks and a sequential heading hierarchy.",
    ),
    SemanticStructureRule,
)
