"""
Detects pages whose content only exists after client-side rendering.
"""

from __future__ import annotations

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import element_text

MIN_BODY_CHARS = 200
HEAVY_SCRIPT_COUNT = 10


class ExtractionRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        main_text = element_text(soup.find("main"))
        article_text = element_text(soup.find("article"))
        body_text = document.body_text
        script_count = len(soup.find_all("script"))
        has_next_data = "__NEXT_DATA__" in document.html

        if main_text or article_text or len(body_text) >= MIN_BODY_CHARS:
            return None
        if script_count <= HEAVY_SCRIPT_COUNT and not has_next_data:
            return None

        return self.finding(
            document,
            description=(
                "The HTML document appears to have minimal extractable content, which may indicate issues "
                "with content extraction."
            ),
            remediation=(
                "Review the HTML structure and ensure that meaningful content is present within <main> or "
                "<article> tags. Consider improving the content delivery method if necessary."
            ),
            impact=40,
            confidence=0.9,
            evidence=[
                f"Main text length: {len(main_text)}",
                f"Article text length: {len(article_text)}",
                f"Body text length: {len(body_text)}",
                f"Script tag count: {script_count}",
                f"Contains __NEXT_DATA__: {has_next_data}",
            ],
            tags=["content", "extraction", "performance"],
        )


register(
    RuleMeta(
        id="EXTRACT-001",
        title="Potential Content Extraction Issue",
        category=Category.EXTRACTION,
        severity=Severity.CRITICAL,
        priority=15,
        tags=("content", "extraction"),
        description="Flags pages with almost no server-rendered text but heavy script payloads.",
    ),
    ExtractionRule,
)
