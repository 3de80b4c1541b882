"""
Page weight and resource loading that affect crawl budget.
"""

from __future__ import annotations

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr


def _is_remote(url: str) -> bool:
    return url.startswith("http") or url.startswith("//")


class PerformanceRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        external_scripts = sum(1 for s in soup.find_all("script", src=True) if _is_remote(attr(s, "src")))
        external_styles = sum(1 for link in document.link_rel("stylesheet") if _is_remote(attr(link, "href")))

        if external_scripts > 10:
            findings.append(
                self.finding(
                    document,
                    id="TECH-001",
                    title="Excessive external scripts",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {external_scripts} external script files. Too many external resources slow down page "
                        "loading and may impact AI crawler efficiency."
                    ),
                    remediation=(
                        "Bundle and minify scripts, consider lazy loading non-critical scripts, and reduce "
                        "third-party dependencies."
                    ),
                    impact=15,
                    evidence=[f"External scripts: {external_scripts}"],
                    tags=["performance", "scripts", "optimization"],
                )
            )

        if external_styles > 5:
            findings.append(
                self.finding(
                    document,
                    id="TECH-002",
                    title="Excessive external stylesheets",
                    severity=Severity.LOW,
                    description=(
                        f"Found {external_styles} external stylesheet files. Multiple CSS files increase page load time."
                    ),
                    remediation=(
                        "Combine CSS files, consider critical CSS inlining, and minimize external stylesheet requests."
                    ),
                    impact=10,
                    evidence=[f"External stylesheets: {external_styles}"],
                    tags=["performance", "css", "optimization"],
                )
            )

        head = soup.head
        blocking = 0
        if head is not None:
            blocking = sum(
                1
                for s in head.find_all("script", src=True)
                if not s.has_attr("async") and not s.has_attr("defer")
            )
        if blocking:
            findings.append(
                self.finding(
                    document,
                    id="TECH-003",
                    title="Render-blocking scripts in head",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {blocking} script(s) in <head> without async or defer attributes. These block page "
                        "rendering."
                    ),
                    remediation="Add async or defer attributes to script tags, or move scripts to the end of <body>.",
                    impact=15,
                    selector="head script[src]:not([async]):not([defer])",
                    evidence=[f"Render-blocking scripts: {blocking}"],
                    tags=["performance", "rendering", "scripts"],
                )
            )

        size_kb = round(len(document.html.encode("utf-8")) / 1024)
        if size_kb > 100:
            findings.append(
                self.finding(
                    document,
                    id="TECH-004",
                    title="Large HTML document size",
                    severity=Severity.MEDIUM,
                    description=(
                        f"HTML document is {size_kb}KB. Large HTML files slow down initial page load and consume more "
                        "crawl budget."
                    ),
                    remediation=(
                        "Reduce HTML size by removing unnecessary markup, inline styles, and comments. Consider code "
                        "splitting or pagination."
                    ),
                    impact=20,
                    evidence=[f"HTML size: {size_kb}KB"],
                    tags=["performance", "size", "optimization"],
                )
            )

        large_inline = sum(
            1 for s in soup.find_all("script") if not s.has_attr("src") and len(s.string or "") > 5000
        )
        if large_inline:
            findings.append(
                self.finding(
                    document,
                    id="TECH-005",
                    title="Large inline scripts",
                    severity=Severity.LOW,
                    description=(
                        f"Found {large_inline} large inline script(s). Inline scripts increase HTML size and make "
                        "content harder to parse."
                    ),
                    remediation="Move large scripts to external files. This improves caching and reduces HTML bloat.",
                    impact=10,
                    confidence=0.9,
                    evidence=[f"Large inline scripts: {large_inline}"],
                    tags=["performance", "scripts", "inline"],
                )
            )

        iframes = len(soup.find_all("iframe"))
        if iframes > 3:
            findings.append(
                self.finding(
                    document,
                    id="TECH-006",
                    title="Excessive iframes",
                    severity=Severity.LOW,
                    description=(
                        f"Found {iframes} iframe elements. Multiple iframes can significantly slow down page load and "
                        "complicate content extraction for AI."
                    ),
                    remediation=(
                        "Reduce the number of iframes. Consider alternative approaches like lazy loading or direct "
                        "content embedding."
                    ),
                    impact=12,
                    evidence=[f"Iframes: {iframes}"],
                    tags=["performance", "iframes", "complexity"],
                )
            )

        return findings


register(
    RuleMeta(
        id="TECH-001",
        title="Performance issues affecting AI crawlers",
        category=Category.TECHNICAL,
        severity=Severity.MEDIUM,
        priority=14,
        tags=("performance", "crawling", "technical"),
        description="Checks resource counts, render blocking and document size.",
    ),
    PerformanceRule,
)
