"""
Descriptive headings, alt text, link text and empty paragraphs.
"""

from __future__ import annotations

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr, element_text

from .headings import HEADING_TAGS

VAGUE_HEADINGS = {"click here", "read more", "learn more", "introduction", "welcome", "overview", "untitled"}
GENERIC_LINK_TEXT = {"click here", "read more", "here", "more", "link", "this", "click", "more info", "learn more"}


class ContentQualityRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        vague = []
        for heading in soup.find_all(HEADING_TAGS):
            text = element_text(heading).lower()
            if len(text) < 3 or text in VAGUE_HEADINGS:
                vague.append(text[:50])
        if vague:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-018",
                    title="Vague or non-descriptive headings",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {len(vague)} heading(s) with generic or non-descriptive text. Clear, descriptive "
                        "headings help AI agents understand content structure and meaning."
                    ),
                    remediation=(
                        'Replace generic headings like "Introduction" or "Overview" with specific, descriptive '
                        "titles that convey the actual content topic."
                    ),
                    impact=15,
                    confidence=0.85,
                    evidence=[f"Vague headings: {', '.join(vague[:3])}"],
                    tags=["headings", "content-quality", "clarity"],
                )
            )

        without_alt = [attr(img, "src")[:50] or "unknown" for img in soup.find_all("img") if img.get("alt") is None]
        if without_alt:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-019",
                    title="Images missing alt text",
                    severity=Severity.HIGH,
                    description=(
                        f"Found {len(without_alt)} image(s) without alt attributes. Alt text is crucial for AI "
                        "agents to understand image content and context."
                    ),
                    remediation=(
                        "Add descriptive alt text to all content images. For decorative images, use alt=\"\" to "
                        "indicate they can be safely ignored."
                    ),
                    impact=25,
                    selector="img:not([alt])",
                    evidence=[f"Images without alt: {len(without_alt)}", f"Examples: {', '.join(without_alt[:2])}"],
                    tags=["accessibility", "images", "alt-text"],
                )
            )

        generic_links = [
            text for text in (element_text(a).lower() for a in soup.find_all("a")) if text in GENERIC_LINK_TEXT
        ]
        if generic_links:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-020",
                    title="Non-descriptive link text",
                    severity=Severity.MEDIUM,
                    description=(
                        f'Found {len(generic_links)} link(s) with generic text like "click here" or "read more". '
                        "Descriptive link text helps AI agents understand link purpose and context."
                    ),
                    remediation=(
                        "Use descriptive link text that explains where the link goes or what action it performs. "
                        'Instead of "click here", use "view the pricing page" or "download the user guide".'
                    ),
                    impact=15,
                    evidence=[f"Generic link text found: {', '.join(generic_links[:5])}"],
                    tags=["links", "accessibility", "content-quality"],
                )
            )

        empty_paragraphs = sum(1 for p in soup.find_all("p") if not element_text(p).replace("\xa0", ""))
        if empty_paragraphs > 3:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-021",
                    title="Excessive empty paragraphs",
                    severity=Severity.LOW,
                    description=(
                        f"Found {empty_paragraphs} empty <p> elements. These add noise for AI parsing and suggest "
                        "poor semantic HTML usage."
                    ),
                    remediation="Remove empty <p> tags used for spacing. Use CSS margins/padding instead for layout control.",
                    impact=5,
                    evidence=[f"Empty paragraphs: {empty_paragraphs}"],
                    tags=["content-quality", "semantic", "cleanup"],
                )
            )

        return findings


register(
    RuleMeta(
        id="AIREAD-018",
        title="Content quality issues for AI",
        category=Category.READABILITY,
        severity=Severity.MEDIUM,
        priority=10,
        tags=("quality", "accessibility", "content"),
        description="Checks descriptive headings, alt text and link text.",
    ),
    ContentQualityRule,
)
