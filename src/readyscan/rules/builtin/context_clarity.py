"""
Page-level context: title, description, breadcrumbs, authorship and dates.
"""

from __future__ import annotations

from bs4 import Tag

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr, class_list, element_text


def has_breadcrumbs(document: Document) -> bool:
    soup = document.soup
    if soup.find(attrs={"itemtype": lambda v: bool(v) and "BreadcrumbList" in v}):
        return True
    if soup.find("nav", attrs={"aria-label": lambda v: bool(v) and "breadcrumb" in v.lower()}):
        return True
    return soup.find(class_=["breadcrumb", "breadcrumbs"]) is not None


def _has_author(article: Tag) -> bool:
    for tag in article.find_all(True):
        if "author" in attr(tag, "rel").split() or attr(tag, "itemprop") == "author":
            if element_text(tag):
                return True
        if {"author", "byline"} & set(class_list(tag)) and element_text(tag):
            return True
    return False


def _has_date(article: Tag) -> bool:
    if article.find("time", attrs={"datetime": True}):
        return True
    if article.find(attrs={"itemprop": ["datePublished", "dateModified"]}):
        return True
    return article.find(class_=["published", "date"]) is not None


class ContextClarityRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        title = document.title
        if len(title) < 3:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-028",
                    title="Missing or inadequate page title",
                    severity=Severity.HIGH,
                    description=(
                        "The page lacks a proper <title> element. Page titles provide essential context for AI agents."
                    ),
                    remediation=(
                        "Add a descriptive <title> element that clearly describes the page content. Aim for 50-60 "
                        "characters."
                    ),
                    impact=25,
                    evidence=[f'Title: "{title or "none"}"'],
                    tags=["title", "metadata", "context"],
                )
            )
        elif len(title) > 100:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-029",
                    title="Page title too long",
                    severity=Severity.LOW,
                    description=(
                        f"The page title is {len(title)} characters. Titles over 60 characters may be truncated "
                        "and provide less effective context."
                    ),
                    remediation="Shorten the page title to 50-60 characters while keeping it descriptive.",
                    impact=5,
                    evidence=[f"Title length: {len(title)} chars"],
                    tags=["title", "metadata", "optimization"],
                )
            )

        description = (document.meta("description") or "").strip()
        if len(description) < 50:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-030",
                    title="Missing or short meta description",
                    severity=Severity.MEDIUM,
                    description=(
                        "The page lacks a proper meta description. Descriptions help AI agents understand page "
                        "content and purpose."
                    ),
                    remediation="Add a meta description tag with 150-160 characters that summarizes the page content.",
                    impact=20,
                    evidence=[f"Description length: {len(description)} chars"],
                    tags=["meta", "description", "context"],
                )
            )

        depth = len([part for part in document.parsed_url.path.split("/") if part])
        if depth > 1 and not has_breadcrumbs(document):
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-031",
                    title="Missing breadcrumb navigation",
                    severity=Severity.LOW,
                    description=(
                        "The page lacks breadcrumb navigation. Breadcrumbs help AI agents understand the page's "
                        "position in the site hierarchy."
                    ),
                    remediation=(
                        "Add breadcrumb navigation with Schema.org BreadcrumbList markup to provide hierarchical "
                        "context."
                    ),
                    impact=10,
                    confidence=0.7,
                    evidence=[f"URL depth: {depth} levels"],
                    tags=["breadcrumbs", "navigation", "context"],
                )
            )

        for article in soup.find_all("article"):
            if not _has_author(article):
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-032",
                        title="Article missing author information",
                        severity=Severity.MEDIUM,
                        description=(
                            "The article lacks clear author information. Author attribution helps AI agents assess "
                            "credibility and context."
                        ),
                        remediation=(
                            'Add author information using semantic markup: rel="author", itemprop="author", or '
                            "Schema.org Person."
                        ),
                        impact=15,
                        confidence=0.8,
                        selector="article",
                        evidence=["No author information found"],
                        tags=["article", "author", "metadata"],
                    )
                )
            if not _has_date(article):
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-033",
                        title="Article missing timestamp",
                        severity=Severity.MEDIUM,
                        description=(
                            "The article lacks a publication or modification date. Timestamps help AI agents "
                            "assess content freshness and relevance."
                        ),
                        remediation=(
                            'Add publication date using <time datetime="..."> elements or Schema.org '
                            "datePublished/dateModified properties."
                        ),
                        impact=15,
                        confidence=0.85,
                        selector="article",
                        evidence=["No timestamp found"],
                        tags=["article", "timestamp", "metadata"],
                    )
                )

        if not document.lang:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-034",
                    title="Missing language declaration",
                    severity=Severity.MEDIUM,
                    description=(
                        "The HTML element lacks a lang attribute. Language declaration helps AI agents apply "
                        "appropriate language processing."
                    ),
                    remediation='Add a lang attribute to the <html> element (e.g., lang="en" for English).',
                    impact=15,
                    evidence=["No lang attribute on <html>"],
                    tags=["language", "i18n", "accessibility"],
                )
            )

        if not document.meta("viewport"):
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-035",
                    title="Missing viewport meta tag",
                    severity=Severity.LOW,
                    description=(
                        "The page lacks a viewport meta tag. While primarily for responsive design, this affects "
                        "how AI agents with visual capabilities interpret the page."
                    ),
                    remediation='Add <meta name="viewport" content="width=device-width, initial-scale=1.0"> to the <head>.',
                    impact=5,
                    evidence=["No viewport meta tag"],
                    tags=["viewport", "responsive", "meta"],
                )
            )

        canonical = document.link_rel("canonical")
        if not canonical or not attr(canonical[0], "href"):
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-036",
                    title="Missing canonical URL",
                    severity=Severity.LOW,
                    description=(
                        "The page lacks a canonical URL. Canonical tags help AI agents identify the authoritative "
                        "version of content."
                    ),
                    remediation='Add <link rel="canonical" href="..."> to indicate the preferred URL for this content.',
                    impact=10,
                    evidence=["No canonical link tag"],
                    tags=["canonical", "seo", "deduplication"],
                )
            )

        return findings


register(
    RuleMeta(
        id="AIREAD-028",
        title="Context clarity issues",
        category=Category.READABILITY,
        severity=Severity.MEDIUM,
        priority=9,
        tags=("context", "metadata", "navigation"),
        description="Checks breadcrumbs, page titles, descriptions, timestamps and author information.",
    ),
    ContextClarityRule,
)
