"""
Indexing directives, canonical URLs and crawl-budget signals.

HTTP error statuses are reported by the scan boundary, not here.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr, element_text

HREFLANG_RE = re.compile(r"^[a-z]{2}(-[A-Z]{2})?$")
ABSOLUTE_URL_RE = re.compile(r"^https?://.+")


def _is_soft_404(title: str, h1: str) -> bool:
    return any(marker in text for text in (title, h1) for marker in ("404", "not found"))


def _resolve(base: str, href: str) -> str | None:
    """``href`` made absolute against ``base``, or None when it cannot be parsed."""
    try:
        resolved = urljoin(base, href)
        urlparse(resolved)
    except ValueError:
        return None
    return resolved


class CrawlabilityRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        url = document.url
        findings = []

        title = document.title.lower()
        first_h1 = element_text(soup.find("h1")).lower()
        if document.status == 200 and _is_soft_404(title, first_h1):
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-002",
                    title="Soft 404 detected",
                    severity=Severity.HIGH,
                    description=(
                        'Page returns 200 OK but contains "404" or "not found" in title/heading. This confuses AI '
                        "crawlers."
                    ),
                    remediation="Return proper 404 status code for missing pages instead of 200 OK.",
                    impact=30,
                    confidence=0.9,
                    evidence=[f"HTTP Status: {document.status}", f"Title: {title[:100]}"],
                    tags=["soft-404", "status", "error"],
                )
            )

        canonical_links = document.link_rel("canonical")
        canonical = attr(canonical_links[0], "href") if canonical_links else ""
        if not canonical:
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-003",
                    title="Missing canonical tag",
                    severity=Severity.HIGH,
                    description="No canonical URL specified. This can cause duplicate content issues for AI crawlers.",
                    remediation='Add <link rel="canonical" href="..."> to specify the preferred URL version.',
                    impact=25,
                    evidence=["No canonical tag found"],
                    tags=["canonical", "duplicate-content", "seo"],
                )
            )
        else:
            resolved = _resolve(url, canonical)
            if resolved is None or not urlparse(resolved).scheme:
                findings.append(
                    self.finding(
                        document,
                        id="CRAWL-005",
                        title="Invalid canonical URL format",
                        severity=Severity.HIGH,
                        description="Canonical URL cannot be parsed. AI crawlers may ignore it.",
                        remediation="Ensure canonical URL is a valid absolute URL.",
                        impact=22,
                        evidence=[f"Canonical: {canonical}"],
                        tags=["canonical", "validation", "url"],
                    )
                )
            else:
                if resolved != url:
                    findings.append(
                        self.finding(
                            document,
                            id="CRAWL-004",
                            title="Canonical points to different URL",
                            severity=Severity.MEDIUM,
                            description=(
                                "Canonical URL differs from current page URL. This tells AI crawlers to index a "
                                "different URL."
                            ),
                            remediation=(
                                "Ensure canonical URL matches the current page URL unless intentionally consolidating "
                                "duplicate content."
                            ),
                            impact=20,
                            evidence=[f"Current: {url}", f"Canonical: {resolved}"],
                            tags=["canonical", "url", "duplicate-content"],
                        )
                    )
                if canonical.startswith("http") and not ABSOLUTE_URL_RE.match(canonical):
                    findings.append(
                        self.finding(
                            document,
                            id="CRAWL-005",
                            title="Invalid canonical URL format",
                            severity=Severity.HIGH,
                            description="Canonical URL has invalid format. AI crawlers may ignore it.",
                            remediation=(
                                "Ensure canonical URL is a valid absolute URL (starts with http:// or https://)."
                            ),
                            impact=22,
                            evidence=[f"Canonical: {canonical}"],
                            tags=["canonical", "validation", "url"],
                        )
                    )

        robots = (document.meta("robots") or "").lower()
        if canonical and "noindex" in robots:
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-006",
                    title="Canonical and noindex conflict",
                    severity=Severity.HIGH,
                    description=(
                        "Page has both canonical tag and noindex directive. This sends conflicting signals to AI "
                        "crawlers."
                    ),
                    remediation="Remove canonical tag from noindexed pages, or remove noindex if page should be indexed.",
                    impact=25,
                    evidence=[f"Canonical: {canonical}", f"Robots: {robots}"],
                    tags=["canonical", "noindex", "conflict"],
                )
            )

        if not document.link_rel("sitemap"):
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-007",
                    title="No sitemap reference in page",
                    severity=Severity.MEDIUM,
                    description=(
                        "No sitemap link found in page. While not required, sitemap references help AI crawlers "
                        "discover content."
                    ),
                    remediation=(
                        'Add <link rel="sitemap" type="application/xml" href="/sitemap.xml"> to help crawlers find '
                        "your sitemap."
                    ),
                    impact=15,
                    confidence=0.7,
                    evidence=["No sitemap link in HTML"],
                    tags=["sitemap", "discovery", "crawling"],
                )
            )

        if "noindex" in robots:
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-008",
                    title="Page has noindex directive",
                    severity=Severity.CRITICAL,
                    description='Meta robots tag contains "noindex". This prevents AI crawlers from indexing the page.',
                    remediation='Remove "noindex" from meta robots tag if you want AI crawlers to index this page.',
                    impact=40,
                    evidence=[f"Meta robots: {robots}"],
                    tags=["noindex", "robots", "indexing"],
                )
            )
        if "nofollow" in robots:
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-009",
                    title="Page has nofollow directive",
                    severity=Severity.HIGH,
                    description=(
                        'Meta robots tag contains "nofollow". This prevents AI crawlers from following links on the page.'
                    ),
                    remediation='Remove "nofollow" from meta robots tag if you want AI crawlers to discover linked pages.',
                    impact=30,
                    evidence=[f"Meta robots: {robots}"],
                    tags=["nofollow", "robots", "links"],
                )
            )

        findings.extend(self._hreflang(document))

        refresh = document.meta("refresh")
        if refresh is not None:
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-012",
                    title="Meta refresh redirect detected",
                    severity=Severity.MEDIUM,
                    description=(
                        "Page uses meta refresh redirect. AI crawlers prefer server-side 301/302 redirects for better "
                        "performance."
                    ),
                    remediation="Use server-side HTTP 301 or 302 redirects instead of meta refresh.",
                    impact=18,
                    evidence=[f"Meta refresh: {refresh}"],
                    tags=["redirect", "meta-refresh", "performance"],
                )
            )

        if document.parsed_url.scheme in ("http", "https") and document.parsed_url.path in ("", "/"):
            if soup.find("h1") is None:
                findings.append(
                    self.finding(
                        document,
                        id="CRAWL-013",
                        title="Homepage missing H1",
                        severity=Severity.LOW,
                        description=(
                            "Homepage has no H1 heading. This is important for AI crawlers to understand your "
                            "site's purpose."
                        ),
                        remediation="Add a clear H1 heading to your homepage describing your site or business.",
                        impact=12,
                        evidence=["No H1 found on homepage"],
                        tags=["homepage", "h1", "structure"],
                    )
                )

        resources = (
            len(soup.find_all("script", src=True))
            + len(soup.find_all("link", href=True))
            + len(soup.find_all("img", src=True))
            + len(soup.find_all("iframe", src=True))
        )
        if resources > 100:
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-014",
                    title="Excessive external resources",
                    severity=Severity.LOW,
                    description=(
                        f"Page loads {resources} external resources. This wastes crawl budget and slows down AI "
                        "crawler processing."
                    ),
                    remediation=(
                        "Consolidate resources, use sprite sheets, inline critical assets, and defer non-critical loads."
                    ),
                    impact=10,
                    confidence=0.8,
                    evidence=[f"Total external resources: {resources}"],
                    tags=["crawl-budget", "resources", "performance"],
                )
            )

        pagination = sum(
            1
            for a in soup.find_all("a")
            if "page=" in attr(a, "href")
            or "?p=" in attr(a, "href")
            or "next" in attr(a, "aria-label").lower()
            or "previous" in attr(a, "aria-label").lower()
        )
        if pagination and not document.link_rel("prev") and not document.link_rel("next"):
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-015",
                    title="Pagination without rel prev/next",
                    severity=Severity.LOW,
                    description=(
                        'Page appears to have pagination but lacks rel="prev"/rel="next" links. These help AI crawlers '
                        "understand page sequences."
                    ),
                    remediation='Add <link rel="prev" href="..."> and <link rel="next" href="..."> tags for paginated content.',
                    impact=8,
                    confidence=0.7,
                    evidence=[f"Pagination links found: {pagination}"],
                    tags=["pagination", "navigation", "crawling"],
                )
            )

        return findings

    def _hreflang(self, document: Document) -> list:
        alternates = [tag for tag in document.link_rel("alternate") if tag.has_attr("hreflang")]
        if not alternates:
            return []

        findings = []
        current_path = document.parsed_url.path
        has_self_reference = False
        for tag in alternates:
            if attr(tag, "hreflang") not in (document.lang, "x-default"):
                continue
            resolved = _resolve(document.url, attr(tag, "href"))
            # unparseable hrefs are skipped
            if resolved is not None and urlparse(resolved).path == current_path:
                has_self_reference = True
                break
        if not has_self_reference:
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-010",
                    title="Missing hreflang self-reference",
                    severity=Severity.LOW,
                    description=(
                        "Hreflang tags present but no self-reference found. This is a best practice for international SEO."
                    ),
                    remediation="Add a self-referential hreflang link pointing to the current page in its own language.",
                    impact=10,
                    confidence=0.8,
                    evidence=[f"Hreflang tags: {len(alternates)}", f"Page lang: {document.lang or 'not set'}"],
                    tags=["hreflang", "i18n", "validation"],
                )
            )

        invalid = sum(
            1
            for tag in alternates
            if attr(tag, "hreflang") not in ("", "x-default") and not HREFLANG_RE.match(attr(tag, "hreflang"))
        )
        if invalid:
            findings.append(
                self.finding(
                    document,
                    id="CRAWL-011",
                    title="Invalid hreflang syntax",
                    severity=Severity.MEDIUM,
                    description=(
                        f'Found {invalid} hreflang tag(s) with invalid language codes. Use ISO 639-1 format (e.g., "en", '
                        '"en-US").'
                    ),
                    remediation="Correct hreflang values to use valid ISO 639-1 language codes.",
                    impact=15,
                    evidence=[f"Invalid hreflang tags: {invalid}"],
                    tags=["hreflang", "validation", "i18n"],
                )
            )
        return findings


register(
    RuleMeta(
        id="CRAWL-001",
        title="Crawlability and site navigation",
        category=Category.CRAWLABILITY,
        severity=Severity.HIGH,
        priority=5,
        tags=("crawlability", "robots", "sitemap", "canonical"),
        description="Checks indexing directives, canonical tags, hreflang, redirects and crawl budget.",
    ),
    CrawlabilityRule,
)
