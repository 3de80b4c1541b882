"""
Meta tags that block agents or that agents rely on.
"""

from __future__ import annotations

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register

OG_TAGS = ("og:title", "og:description", "og:image")


class MetaTagsRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        findings = []

        robots = document.meta("robots")
        if robots is not None and "noai" in robots.lower():
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-010",
                    title="Meta robots tag blocks AI",
                    severity=Severity.HIGH,
                    description='The page contains a meta robots tag with "noai" directive, which blocks AI indexing.',
                    remediation=(
                        'Remove the "noai" directive from the robots meta tag if you want AI agents to index this content.'
                    ),
                    impact=35,
                    selector='meta[name="robots"]',
                    evidence=[robots],
                    tags=["meta", "ai-agents", "indexing", "robots"],
                )
            )

        googlebot = document.meta("googlebot")
        if googlebot is not None and "noai" in googlebot.lower():
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-011",
                    title="Googlebot meta tag blocks AI content",
                    severity=Severity.HIGH,
                    description="The page contains a googlebot meta tag that blocks AI from using the content.",
                    remediation=(
                        'Remove the "noai" directive from the googlebot meta tag to allow '
                        "Google's AI features to use this content."
                    ),
                    impact=30,
                    selector='meta[name="googlebot"]',
                    evidence=[googlebot],
                    tags=["meta", "ai-agents", "google", "robots"],
                )
            )

        missing = [tag for tag in OG_TAGS if document.meta(tag) is None]
        if missing:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-012",
                    title="Missing OpenGraph meta tags",
                    severity=Severity.MEDIUM,
                    description=(
                        f"The page is missing {len(missing)} important OpenGraph meta tag(s): {', '.join(missing)}. "
                        "These help AI agents understand and share your content better."
                    ),
                    remediation=(
                        "Add missing OpenGraph meta tags (og:title, og:description, og:image) to improve how "
                        "AI agents and social platforms understand your content."
                    ),
                    impact=15,
                    evidence=[f"Missing tags: {', '.join(missing)}"],
                    tags=["meta", "opengraph", "seo"],
                )
            )

        if not document.soup.find("script", attrs={"type": "application/ld+json"}):
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-013",
                    title="Missing structured data (JSON-LD)",
                    severity=Severity.MEDIUM,
                    description=(
                        "The page lacks structured data in JSON-LD format. Structured data helps AI agents "
                        "understand the content type, author, dates, and other metadata."
                    ),
                    remediation=(
                        "Add Schema.org structured data using JSON-LD format. Consider using Article, WebPage, "
                        "Organization, or other relevant schemas."
                    ),
                    impact=20,
                    evidence=['No <script type="application/ld+json"> found'],
                    tags=["structured-data", "schema", "ai-agents"],
                )
            )

        return findings


register(
    RuleMeta(
        id="AIREAD-010",
        title="AI-blocking meta tags detected",
        category=Category.READABILITY,
        severity=Severity.HIGH,
        priority=8,
        tags=("meta", "ai-agents", "seo"),
        description="Detects meta tags that prevent AI agents from using content, and missing descriptive metadata.",
    ),
    MetaTagsRule,
)
