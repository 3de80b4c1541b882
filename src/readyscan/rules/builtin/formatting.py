"""
Lists, tables, code blocks and quotes marked up the way parsers expect.
"""

from __future__ import annotations

from bs4 import Tag

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr, element_text


def _class_contains(tag: Tag, fragment: str) -> bool:
    return fragment in attr(tag, "class")


class FormattingRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        fake_lists = 0
        for div in soup.find_all("div"):
            if not (_class_contains(div, "list") or _class_contains(div, "item")):
                continue
            items = [c for c in div.find_all("div", recursive=False) if _class_contains(c, "item")]
            if len(items) > 2:
                fake_lists += 1
        if fake_lists:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-022",
                    title="Fake lists using divs",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {fake_lists} potential list(s) created with <div> elements instead of proper "
                        "<ul>/<ol> tags. AI agents may not recognize these as lists."
                    ),
                    remediation=(
                        "Use semantic <ul> or <ol> elements for lists. This helps AI agents understand the content "
                        "structure and relationship between items."
                    ),
                    impact=15,
                    confidence=0.7,
                    evidence=[f"Potential div-based lists: {fake_lists}"],
                    tags=["lists", "semantic", "structure"],
                )
            )

        tables = soup.find_all("table")
        poor_tables = sum(1 for t in tables if t.find("thead") is None and t.find("th") is None)
        uncaptioned = sum(1 for t in tables if t.find("caption") is None)
        if poor_tables:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-023",
                    title="Tables missing semantic structure",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {poor_tables} table(s) without <thead> or <th> elements. Proper table structure "
                        "helps AI agents understand headers and data relationships."
                    ),
                    remediation=(
                        "Add <thead> sections and use <th> elements for table headers. Consider adding <caption> "
                        "to describe the table purpose."
                    ),
                    impact=15,
                    selector="table",
                    evidence=[f"Tables without proper headers: {poor_tables}"],
                    tags=["tables", "accessibility", "structure"],
                )
            )
        if uncaptioned:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-023a",
                    title="Tables missing captions",
                    severity=Severity.LOW,
                    description=(
                        f"Found {uncaptioned} table(s) without <caption> elements. Captions help AI agents "
                        "understand the table's purpose and context."
                    ),
                    remediation="Add <caption> elements to tables to describe their purpose and content.",
                    impact=8,
                    confidence=0.9,
                    selector="table",
                    evidence=[f"Tables without captions: {uncaptioned}"],
                    tags=["tables", "accessibility", "context"],
                )
            )

        bare_pre = sum(1 for pre in soup.find_all("pre") if pre.find("code") is None and len(element_text(pre)) > 50)
        if bare_pre:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-024",
                    title="Code blocks missing semantic markup",
                    severity=Severity.LOW,
                    description=(
                        f"Found {bare_pre} <pre> block(s) without <code> elements. Wrapping code in <code> tags "
                        "helps AI agents identify programming content."
                    ),
                    remediation=(
                        "Wrap code content in <pre><code> tags instead of just <pre>. This semantic markup helps AI "
                        "distinguish code from regular preformatted text."
                    ),
                    impact=10,
                    confidence=0.9,
                    selector="pre",
                    evidence=[f"Pre blocks without code tags: {bare_pre}"],
                    tags=["code", "semantic", "formatting"],
                )
            )

        improper = sum(
            1
            for lst in soup.find_all(["ul", "ol"])
            for child in lst.find_all(True, recursive=False)
            if child.name != "li"
        )
        if improper:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-025",
                    title="Improper list nesting",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {improper} non-<li> element(s) as direct children of lists. Lists should only "
                        "contain <li> elements as direct children."
                    ),
                    remediation=(
                        "Ensure <ul> and <ol> elements only contain <li> as direct children. Nest other elements "
                        "inside the <li> tags."
                    ),
                    impact=10,
                    evidence=[f"Invalid list children: {improper}"],
                    tags=["lists", "html-validity", "structure"],
                )
            )

        for dl in soup.find_all("dl"):
            if dl.find("dt") is None or dl.find("dd") is None:
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-026",
                        title="Malformed definition list",
                        severity=Severity.LOW,
                        description=(
                            "Found a <dl> element without proper <dt>/<dd> pairs. Definition lists help AI agents "
                            "understand term-definition relationships."
                        ),
                        remediation=(
                            "Ensure definition lists contain both <dt> (term) and <dd> (definition) elements in "
                            "proper pairs."
                        ),
                        impact=5,
                        selector="dl",
                        evidence=["Definition list missing dt or dd elements"],
                        tags=["lists", "semantic", "definitions"],
                    )
                )

        uncited = sum(
            1
            for quote in soup.find_all("blockquote")
            if not attr(quote, "cite") and quote.find("cite") is None and len(element_text(quote)) > 50
        )
        if uncited:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-027",
                    title="Blockquotes missing citations",
                    severity=Severity.LOW,
                    description=(
                        f"Found {uncited} <blockquote>(s) without citation information. Citations help AI agents "
                        "understand quote sources and context."
                    ),
                    remediation=(
                        "Add cite attribute to <blockquote> elements or include a <cite> element to provide source "
                        "information."
                    ),
                    impact=8,
                    confidence=0.8,
                    selector="blockquote",
                    evidence=[f"Blockquotes without citations: {uncited}"],
                    tags=["quotes", "citations", "semantic"],
                )
            )

        return findings


register(
    RuleMeta(
        id="AIREAD-022",
        title="AI-friendly formatting issues",
        category=Category.READABILITY,
        severity=Severity.MEDIUM,
        priority=11,
        tags=("formatting", "accessibility", "structure"),
        description="Checks lists, tables and code blocks for parser-friendly markup.",
    ),
    FormattingRule,
)
