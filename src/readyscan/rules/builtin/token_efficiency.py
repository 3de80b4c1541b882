"""
Markup overhead and repetition that waste an agent's token budget.
"""

from __future__ import annotations

from collections import Counter

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr, class_list, element_text, estimate_tokens


def _is_hidden(tag) -> bool:
    style = attr(tag, "style").replace(" ", "").lower()
    return "display:none" in style or tag.has_attr("hidden") or "hidden" in class_list(tag)


class TokenEfficiencyRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        text_tokens = estimate_tokens(document.body_text)
        html_tokens = estimate_tokens(document.html)
        ratio = text_tokens / html_tokens if html_tokens else 0.0
        if ratio < 0.1:
            findings.append(
                self.finding(
                    document,
                    id="CHUNK-002",
                    title="Poor content-to-code ratio",
                    severity=Severity.HIGH,
                    description=(
                        f"Content-to-code ratio is {ratio * 100:.1f}%. The HTML contains significantly more markup "
                        "than actual content, wasting tokens."
                    ),
                    remediation=(
                        "Reduce excessive HTML markup, inline styles, and unnecessary wrapper elements. Consider "
                        "server-side rendering or static generation instead of heavy client-side rendering."
                    ),
                    impact=30,
                    confidence=0.9,
                    evidence=[f"Text tokens: ~{text_tokens}", f"HTML tokens: ~{html_tokens}", f"Ratio: {ratio * 100:.1f}%"],
                    tags=["tokens", "performance", "efficiency"],
                )
            )

        navs = soup.find_all("nav")
        if len(navs) > 1:
            nav_tokens = sum(estimate_tokens(element_text(nav)) for nav in navs)
            findings.append(
                self.finding(
                    document,
                    id="CHUNK-003",
                    title="Duplicate navigation elements",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {len(navs)} <nav> elements. Multiple navigation sections waste ~{nav_tokens} tokens "
                        "with repetitive content."
                    ),
                    remediation=(
                        "Consolidate navigation into a single element. If multiple navs are needed, ensure they "
                        "serve distinct purposes and contain unique content."
                    ),
                    impact=15,
                    confidence=0.85,
                    selector="nav",
                    evidence=[f"Navigation count: {len(navs)}", f"Estimated wasted tokens: ~{nav_tokens}"],
                    tags=["tokens", "navigation", "duplication"],
                )
            )

        styled = soup.find_all(attrs={"style": True})
        if len(styled) > 20:
            style_tokens = sum(estimate_tokens(attr(tag, "style")) for tag in styled)
            findings.append(
                self.finding(
                    document,
                    id="CHUNK-004",
                    title="Excessive inline styles",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {len(styled)} elements with inline styles, consuming ~{style_tokens} tokens. Inline "
                        "styles add noise for AI parsing."
                    ),
                    remediation=(
                        "Move inline styles to CSS classes or external stylesheets. This reduces HTML size and "
                        "improves token efficiency."
                    ),
                    impact=10,
                    evidence=[f"Elements with inline styles: {len(styled)}", f"Estimated style tokens: ~{style_tokens}"],
                    tags=["tokens", "css", "efficiency"],
                )
            )

        hidden = [tag for tag in soup.find_all(True) if _is_hidden(tag)]
        if len(hidden) > 5:
            hidden_tokens = sum(estimate_tokens(element_text(tag)) for tag in hidden)
            if hidden_tokens > 50:
                findings.append(
                    self.finding(
                        document,
                        id="CHUNK-005",
                        title="Hidden content wasting tokens",
                        severity=Severity.MEDIUM,
                        description=(
                            f"Found {len(hidden)} hidden elements containing ~{hidden_tokens} tokens. Hidden content "
                            "still consumes tokens but provides no value to AI agents."
                        ),
                        remediation=(
                            "Remove hidden content from the HTML or use progressive disclosure patterns. Consider "
                            "server-side rendering to exclude hidden content from initial HTML."
                        ),
                        impact=15,
                        confidence=0.9,
                        evidence=[f"Hidden elements: {len(hidden)}", f"Estimated hidden tokens: ~{hidden_tokens}"],
                        tags=["tokens", "hidden-content", "efficiency"],
                    )
                )

        texts = Counter(
            text for text in (element_text(tag) for tag in soup.find_all(["p", "li", "div"])) if len(text) > 30
        )
        duplicates = sorted((text, count) for text, count in texts.items() if count > 2)
        if duplicates:
            wasted = sum(estimate_tokens(text) * (count - 1) for text, count in duplicates)
            findings.append(
                self.finding(
                    document,
                    id="CHUNK-006",
                    title="Repetitive text content",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {len(duplicates)} text pattern(s) repeated multiple times, wasting ~{wasted} tokens. "
                        "Repetitive disclaimers or boilerplate hurt token efficiency."
                    ),
                    remediation=(
                        "Consolidate repetitive text into a single location. Use references or footnotes instead of "
                        "repeating the same text multiple times."
                    ),
                    impact=20,
                    confidence=0.85,
                    evidence=[
                        f"Repetitive patterns: {len(duplicates)}",
                        f"Wasted tokens: ~{wasted}",
                        f'Example: "{duplicates[0][0][:100]}..."',
                    ],
                    tags=["tokens", "duplication", "content"],
                )
            )

        return findings


register(
    RuleMeta(
        id="CHUNK-002",
        title="Token efficiency issues",
        category=Category.CHUNKING,
        severity=Severity.MEDIUM,
        priority=15,
        tags=("tokens", "efficiency", "performance"),
        description="Detects repetitive content, boilerplate and poor content-to-code ratios.",
    ),
    TokenEfficiencyRule,
)
