"""
Accessibility features that double as structure hints for agents.
"""

from __future__ import annotations

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr, element_text

from .headings import HEADING_TAGS

LANDMARK_ROLES = ["main", "navigation", "banner", "contentinfo", "complementary"]
LABELLED_INPUT_TYPES = {"text", "email", "password", "search"}
ARIA_ATTRS = ("aria-label", "aria-labelledby", "aria-describedby", "role")


class AccessibilityRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        if not soup.find(attrs={"role": LANDMARK_ROLES}) and not soup.find(["main", "nav", "header", "footer", "aside"]):
            findings.append(
                self.finding(
                    document,
                    id="A11Y-001",
                    title="No ARIA landmarks or semantic elements",
                    severity=Severity.HIGH,
                    description=(
                        "The page lacks ARIA landmark roles and semantic HTML5 elements. These help AI agents identify "
                        "and navigate content sections."
                    ),
                    remediation=(
                        'Add ARIA landmark roles (role="main", role="navigation", etc.) or use semantic HTML5 elements '
                        "(<main>, <nav>, <header>, <footer>)."
                    ),
                    impact=25,
                    evidence=["No landmarks found"],
                    tags=["accessibility", "aria", "landmarks"],
                )
            )

        label_targets = {attr(label, "for") for label in soup.find_all("label") if attr(label, "for")}
        fields = [
            tag
            for tag in soup.find_all(["input", "textarea", "select"])
            if tag.name != "input" or attr(tag, "type").lower() in LABELLED_INPUT_TYPES
        ]
        unlabeled = sum(
            1
            for tag in fields
            if attr(tag, "id") not in label_targets
            and not attr(tag, "aria-label")
            and not attr(tag, "aria-labelledby")
            and tag.find_parent("label") is None
        )
        if unlabeled:
            findings.append(
                self.finding(
                    document,
                    id="A11Y-002",
                    title="Form inputs without labels",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {unlabeled} form input(s) without associated labels or ARIA labels. Labels help AI "
                        "agents understand form purpose and context."
                    ),
                    remediation=(
                        "Add <label> elements associated with inputs via for/id attributes, or use "
                        "aria-label/aria-labelledby attributes."
                    ),
                    impact=15,
                    selector="input, textarea, select",
                    evidence=[f"Unlabeled inputs: {unlabeled}"],
                    tags=["forms", "labels", "accessibility"],
                )
            )

        buttons = soup.find_all("button") + [
            tag for tag in soup.find_all(attrs={"role": "button"}) if tag.name != "button"
        ]
        silent_buttons = sum(
            1
            for b in buttons
            if not element_text(b) and not attr(b, "aria-label") and not attr(b, "aria-labelledby") and not attr(b, "title")
        )
        if silent_buttons:
            findings.append(
                self.finding(
                    document,
                    id="A11Y-003",
                    title="Buttons without accessible text",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {silent_buttons} button(s) without text or ARIA labels. AI agents need text to "
                        "understand button purpose."
                    ),
                    remediation="Add visible text to buttons, or use aria-label attribute for icon-only buttons.",
                    impact=15,
                    selector="button",
                    evidence=[f"Buttons without text: {silent_buttons}"],
                    tags=["buttons", "accessibility", "labels"],
                )
            )

        navs = soup.find_all("nav")
        has_skip_link = any(
            attr(a, "href").startswith("#")
            and "skip" in element_text(a).lower()
            and ("content" in element_text(a).lower() or "main" in element_text(a).lower())
            for a in soup.find_all("a", href=True)
        )
        if navs and not has_skip_link:
            findings.append(
                self.finding(
                    document,
                    id="A11Y-004",
                    title="Missing skip navigation link",
                    severity=Severity.LOW,
                    description=(
                        'The page lacks a "skip to main content" link. While primarily for accessibility, this also '
                        "helps AI agents identify main content."
                    ),
                    remediation="Add a skip link at the beginning of the page that jumps to the main content area.",
                    impact=8,
                    confidence=0.8,
                    evidence=["No skip link found"],
                    tags=["navigation", "accessibility", "skip-links"],
                )
            )

        unlabeled_navs = sum(
            1
            for nav in navs
            if nav.find(HEADING_TAGS) is None and not attr(nav, "aria-label") and not attr(nav, "aria-labelledby")
        )
        if unlabeled_navs:
            findings.append(
                self.finding(
                    document,
                    id="A11Y-005",
                    title="Navigation without labels",
                    severity=Severity.LOW,
                    description=(
                        f"Found {unlabeled_navs} <nav> element(s) without headings or ARIA labels. Labels help AI "
                        "agents distinguish between different navigation sections."
                    ),
                    remediation=(
                        'Add aria-label to <nav> elements (e.g., aria-label="Main navigation") or include a heading '
                        "within the nav."
                    ),
                    impact=10,
                    confidence=0.9,
                    selector="nav",
                    evidence=[f"Unlabeled navigation sections: {unlabeled_navs}"],
                    tags=["navigation", "labels", "accessibility"],
                )
            )

        scope_issues = sum(
            1
            for table in soup.find_all("table")
            if table.find("th") is not None and table.find("th", attrs={"scope": True}) is None
        )
        if scope_issues:
            findings.append(
                self.finding(
                    document,
                    id="A11Y-006",
                    title="Table headers missing scope attributes",
                    severity=Severity.LOW,
                    description=(
                        f"Found {scope_issues} table(s) with headers but no scope attributes. Scope helps AI agents "
                        "understand header relationships."
                    ),
                    remediation='Add scope="col" or scope="row" to <th> elements to clarify whether they are column or row headers.',
                    impact=8,
                    selector="table",
                    evidence=[f"Tables with scope issues: {scope_issues}"],
                    tags=["tables", "scope", "accessibility"],
                )
            )

        elements = soup.find_all(True)
        with_aria = sum(1 for tag in elements if any(tag.has_attr(a) for a in ARIA_ATTRS))
        ratio = with_aria / len(elements) if elements else 0.0
        if ratio > 0.3:
            findings.append(
                self.finding(
                    document,
                    id="A11Y-007",
                    title="Excessive ARIA usage",
                    severity=Severity.LOW,
                    description=(
                        f"{ratio * 100:.1f}% of elements have ARIA attributes. Overuse of ARIA can add noise for AI parsing."
                    ),
                    remediation=(
                        "Use semantic HTML5 elements instead of ARIA roles where possible. ARIA should supplement, not "
                        "replace, semantic HTML."
                    ),
                    impact=5,
                    confidence=0.7,
                    evidence=[
                        f"Elements with ARIA: {with_aria}",
                        f"Total elements: {len(elements)}",
                        f"Ratio: {ratio * 100:.1f}%",
                    ],
                    tags=["aria", "semantic", "best-practices"],
                )
            )

        return findings


register(
    RuleMeta(
        id="A11Y-001",
        title="Accessibility issues affecting AI comprehension",
        category=Category.ACCESSIBILITY,
        severity=Severity.MEDIUM,
        priority=12,
        tags=("accessibility", "aria", "a11y"),
        description="Checks landmarks, labels and ARIA usage that also help agents understand structure.",
    ),
    AccessibilityRule,
)
