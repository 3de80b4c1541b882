"""
Link structure that crawlers rely on to move through a site.
"""

from __future__ import annotations

from urllib.parse import urlparse

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr


def is_external(href: str, host: str) -> bool:
    """Absolute http(s) links to another host are external; everything else is internal."""
    if not href.startswith("http"):
        return False
    try:
        return urlparse(href).hostname != host
    except ValueError:
        return False


class LinksRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        links = soup.find_all("a", href=True)

        if not links:
            return self.finding(
                document,
                id="AIREAD-041",
                title="No links found",
                severity=Severity.HIGH,
                description=(
                    "The page contains no links. This creates a dead-end for AI crawlers and limits content "
                    "discoverability."
                ),
                remediation="Add relevant internal and external links to improve navigation and content relationships.",
                impact=30,
                evidence=["No <a href> elements found"],
                tags=["links", "navigation", "crawlability"],
            )

        findings = []
        hrefs = [attr(a, "href").strip() for a in links]
        host = document.parsed_url.hostname

        empty = sum(1 for h in hrefs if h in ("", "#"))
        javascript = sum(1 for h in hrefs if h.lower().startswith("javascript:"))
        if empty or javascript:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-042",
                    title="Non-functional links detected",
                    severity=Severity.MEDIUM,
                    description=(
                        f'Found {empty + javascript} link(s) with empty hrefs, "#", or javascript: URLs. AI crawlers '
                        "cannot follow these links."
                    ),
                    remediation=(
                        "Replace javascript: and empty href links with proper URLs. Use buttons for non-navigation "
                        "actions."
                    ),
                    impact=15,
                    evidence=[f"Empty/hash links: {empty}", f"JavaScript links: {javascript}"],
                    tags=["links", "crawlability", "accessibility"],
                )
            )

        external = [a for a, h in zip(links, hrefs) if is_external(h, host)]
        internal_count = len(links) - len(external)
        if internal_count == 0 and external:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-043",
                    title="No internal links",
                    severity=Severity.MEDIUM,
                    description=(
                        "The page has no internal links. Internal linking helps AI crawlers discover and understand "
                        "site structure."
                    ),
                    remediation="Add internal links to related content, category pages, or navigation elements.",
                    impact=20,
                    evidence=["Internal links: 0", f"External links: {len(external)}"],
                    tags=["links", "internal-linking", "site-structure"],
                )
            )

        without_rel = sum(1 for a in external if not a.has_attr("rel"))
        if without_rel:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-044",
                    title="External links missing rel attributes",
                    severity=Severity.LOW,
                    description=(
                        f"Found {without_rel} external link(s) without rel attributes. While not critical, rel "
                        "attributes help AI understand link relationships."
                    ),
                    remediation=(
                        'Add rel="noopener" for security, rel="nofollow" for untrusted links, or rel="sponsored" for '
                        "paid links."
                    ),
                    impact=5,
                    evidence=[f"External links without rel: {without_rel}"],
                    tags=["links", "security", "best-practices"],
                )
            )

        text_length = len(document.body_text)
        density = len(links) / (text_length / 100) if text_length else 0.0
        if density > 5:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-045",
                    title="High link density",
                    severity=Severity.LOW,
                    description=(
                        f"Link density is {density:.2f} links per 100 characters. High link density may be seen as "
                        "spammy by AI crawlers."
                    ),
                    remediation="Reduce the number of links relative to content. Focus on high-value, relevant links.",
                    impact=10,
                    confidence=0.7,
                    evidence=[
                        f"Total links: {len(links)}",
                        f"Text length: {text_length} chars",
                        f"Density: {density:.2f} links/100 chars",
                    ],
                    tags=["links", "spam-signals", "quality"],
                )
            )

        return findings


register(
    RuleMeta(
        id="AIREAD-041",
        title="Link structure and navigation issues",
        category=Category.READABILITY,
        severity=Severity.MEDIUM,
        priority=11,
        tags=("links", "navigation", "crawlability"),
        description="Analyzes internal links, external links and link attributes.",
    ),
    LinksRule,
)
