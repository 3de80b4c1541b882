"""
Checks that the primary content fits a single retrieval window.
"""

from __future__ import annotations

from bs4 import Tag

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import collapse_whitespace, estimate_tokens


def _section_tokens(container: Tag) -> int:
    """Tokens of the container, or of the siblings following each <h2> when it has any."""
    h2s = container.find_all("h2")
    if not h2s:
        return estimate_tokens(collapse_whitespace(container.get_text(" ")))

    total = 0
    for h2 in h2s:
        for sibling in h2.next_siblings:
            if isinstance(sibling, Tag):
                if sibling.name == "h2":
                    break
                total += estimate_tokens(collapse_whitespace(sibling.get_text(" ")))
    return total


class ChunkWindowRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        total_tokens = _section_tokens(document.main_container)
        max_window = document.config.max_chunk_tokens
        if total_tokens <= max_window:
            return None
        return self.finding(
            document,
            description=(
                f"The content chunk contains approximately {total_tokens} tokens, which exceeds the "
                f"recommended maximum of {max_window} tokens."
            ),
            remediation=(
                "Consider splitting the content into smaller chunks or sections to fit within the recommended "
                f"token limit of {max_window} tokens for better processing performance."
            ),
            impact=30,
            confidence=0.9,
            evidence=[f"Total tokens: {total_tokens}", f"Recommended max tokens: {max_window}"],
            tags=["performance", "llm", "embeddings"],
        )


register(
    RuleMeta(
        id="CHUNK-001",
        title="Chunk exceeds recommended token/window size",
        category=Category.CHUNKING,
        severity=Severity.CRITICAL,
        priority=20,
        tags=("performance", "llm"),
        description="Checks if the primary content exceeds the configured chunk token budget.",
    ),
    ChunkWindowRule,
)
