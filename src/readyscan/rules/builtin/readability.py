"""
Paragraphing and inline semantics of the main content.
"""

from __future__ import annotations

import re

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import element_text

LIST_PATTERN_RE = re.compile(r"(?:\n|^)\d+\.\s|\n[-•*]\s")
DATE_RE = re.compile(
    r"\b\d{1,2}[-/]\d{1,2}[-/]\d{2,4}\b|\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+\d{1,2},?\s+\d{4}\b",
    re.IGNORECASE,
)
ABBR_RE = re.compile(r"\b[A-Z]{2,}\b")
QUOTE_RE = re.compile(r"[\"“”].*?[\"“”]|«.*?»")


class ReadabilityRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        paragraph_texts = [element_text(p) for p in soup.find_all("p")]
        substantial = [t for t in paragraph_texts if len(t) > 50]
        long_paragraphs = sum(1 for t in substantial if len(t) > 1000)
        if long_paragraphs and long_paragraphs / len(substantial) > 0.3:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-046",
                    title="Excessively long paragraphs",
                    severity=Severity.LOW,
                    description=(
                        f"{long_paragraphs} paragraph(s) exceed 1000 characters. Long paragraphs are harder for AI "
                        "to process and extract key information."
                    ),
                    remediation="Break long paragraphs into smaller, focused paragraphs. Aim for 3-5 sentences per paragraph.",
                    impact=10,
                    confidence=0.8,
                    evidence=[
                        f"Long paragraphs: {long_paragraphs}",
                        f"Total paragraphs: {len(substantial)}",
                        f"Percentage: {long_paragraphs / len(substantial) * 100:.1f}%",
                    ],
                    tags=["readability", "paragraphs", "content"],
                )
            )

        raw_content = document.main_container.get_text()
        content = raw_content.strip()
        main_paragraphs = sum(len(c.find_all("p")) for c in soup.find_all(["main", "article"]))
        paragraph_count = main_paragraphs or len(paragraph_texts)
        if len(content) > 2000 and paragraph_count < 3:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-047",
                    title="Wall of text - insufficient paragraph breaks",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Content has {len(content)} characters but only {paragraph_count} paragraph(s). Large blocks "
                        "of unstructured text are difficult for AI to parse."
                    ),
                    remediation=(
                        "Break content into smaller paragraphs with clear topic separation. Add headings to organize "
                        "content sections."
                    ),
                    impact=15,
                    confidence=0.9,
                    evidence=[
                        f"Content length: {len(content)} chars",
                        f"Paragraphs: {paragraph_count}",
                        f"Avg chars per paragraph: {round(len(content) / max(1, paragraph_count))}",
                    ],
                    tags=["readability", "structure", "paragraphs"],
                )
            )

        word_count = len(content.split())
        if word_count > 500 and not soup.find(["strong", "b", "em", "i"]):
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-048",
                    title="No text emphasis used",
                    severity=Severity.LOW,
                    description=(
                        "Content lacks emphasis elements (<strong>, <em>). Emphasis helps AI identify important "
                        "concepts and keywords."
                    ),
                    remediation=(
                        "Use <strong> for important content and <em> for emphasis. This helps AI understand which parts "
                        "are most significant."
                    ),
                    impact=5,
                    confidence=0.7,
                    evidence=[f"Word count: {word_count}", "No emphasis elements found"],
                    tags=["emphasis", "content", "semantic"],
                )
            )

        text_list_items = len(LIST_PATTERN_RE.findall(raw_content))
        if text_list_items > 3 and not soup.find(["ul", "ol"]):
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-049",
                    title="Unstructured lists detected",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {text_list_items} potential list items using bullets or numbers in plain text. These "
                        "should be proper HTML lists."
                    ),
                    remediation="Convert plain text lists (using -, •, or 1., 2., etc.) to semantic <ul> or <ol> elements.",
                    impact=15,
                    confidence=0.75,
                    evidence=[f"Potential list items: {text_list_items}"],
                    tags=["lists", "structure", "semantic"],
                )
            )

        dates = DATE_RE.findall(content)
        if dates and not soup.find("time", attrs={"datetime": True}):
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-050",
                    title="Dates not marked up with time elements",
                    severity=Severity.LOW,
                    description=(
                        "Content contains dates but they are not wrapped in <time> elements. Machine-readable dates "
                        "help AI understand temporal context."
                    ),
                    remediation='Wrap dates in <time datetime="YYYY-MM-DD"> elements to make them machine-readable.',
                    impact=8,
                    confidence=0.8,
                    evidence=[f"Date patterns found: {len(dates)}"],
                    tags=["time", "dates", "semantic"],
                )
            )

        marked_abbrs = len(soup.find_all("abbr", attrs={"title": True}))
        abbreviations = len(set(ABBR_RE.findall(content)))
        if abbreviations > 5 and marked_abbrs == 0:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-051",
                    title="Abbreviations without markup",
                    severity=Severity.LOW,
                    description=(
                        f"Found {abbreviations} potential abbreviation(s) without <abbr> markup. Expanded "
                        "abbreviations help AI understand specialized terms."
                    ),
                    remediation='Use <abbr title="Full Name">ABBR</abbr> to provide expansions for abbreviations and acronyms.',
                    impact=8,
                    confidence=0.6,
                    evidence=[f"Potential abbreviations: {abbreviations}", f"Marked up: {marked_abbrs}"],
                    tags=["abbreviations", "semantic", "clarity"],
                )
            )

        semantic_quotes = len(soup.find_all(["q", "blockquote"]))
        quote_marks = len(QUOTE_RE.findall(content))
        if quote_marks > 3 and semantic_quotes == 0:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-052",
                    title="Quotes not properly marked up",
                    severity=Severity.LOW,
                    description=(
                        f"Found {quote_marks} quotation(s) using quote marks but no <q> or <blockquote> elements. "
                        "Semantic quote markup helps AI identify quoted content."
                    ),
                    remediation="Use <q> for inline quotes and <blockquote> for longer quotations instead of plain quote marks.",
                    impact=5,
                    confidence=0.7,
                    evidence=[f"Quote marks found: {quote_marks}", f"Semantic quotes: {semantic_quotes}"],
                    tags=["quotes", "semantic", "markup"],
                )
            )

        return findings


register(
    RuleMeta(
        id="AIREAD-046",
        title="Content readability and structure",
        category=Category.READABILITY,
        severity=Severity.LOW,
        priority=13,
        tags=("readability", "content", "structure"),
        description="Analyzes paragraph length, emphasis, lists and inline semantics.",
    ),
    ReadabilityRule,
)
