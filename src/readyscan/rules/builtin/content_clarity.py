"""
Summary, density, reading level and fact extractability of the main content.

Reading level uses the Flesch-Kincaid grade from textstat, the same
readability library the quality scorers rely on.
"""

from __future__ import annotations

import re
from collections import Counter

import structlog
import textstat
from bs4 import Tag

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr, class_list, element_text

QUESTION_WORD_RE = re.compile(r"\b(what|why|how|when|where|who)\b", re.IGNORECASE)
ACTION_START_RE = re.compile(r"^(learn|discover|find|get|explore|see)", re.IGNORECASE)
ENTITY_SPLIT_RE = re.compile(r"[-–—|:]")
CAPITALIZED_RE = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\b")
ACRONYM_RE = re.compile(r"\b[A-Z]{2,}\b")
NUMBER_RE = re.compile(r"\d{1,3}(,\d{3})*(\.\d+)?%?")
EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"(\+\d{1,3}[-.\s]?)?(\(?\d{3}\)?[-.\s]?)?\d{3}[-.\s]?\d{4}")
ISO_DATE_RE = re.compile(r"\b(20\d{2})[/-](0[1-9]|1[0-2])[/-](0[1-9]|[12]\d|3[01])\b")
CTA_RE = re.compile(r"buy|purchase|sign up|subscribe|download|get started|contact|learn more|try|demo", re.IGNORECASE)
FEATURE_HEADING_RE = re.compile(r"features|benefits|advantages", re.IGNORECASE)
VAGUE_ANCHOR_RE = re.compile(r"^(here|click|link|more)$", re.IGNORECASE)
HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)

# Reading level is noise on very short pages.
MIN_WORDS_FOR_READING_LEVEL = 100

logger = structlog.get_logger(__name__)


def _reading_grade(text: str) -> int | None:
    """Rounded Flesch-Kincaid grade, or None when textstat cannot score the text."""
    try:
        return round(textstat.flesch_kincaid_grade(text))
    except (LookupError, ValueError, ZeroDivisionError) as e:
        # missing syllable dictionaries surface as LookupError
        logger.warning("Reading level unavailable", error_type=type(e).__name__, error=str(e))
        return None


def _marker_match(tag: Tag, *markers: str) -> bool:
    haystack = " ".join(class_list(tag) + [attr(tag, "id")]).lower()
    return any(marker in haystack for marker in markers)


def _find_marked(document: Document, *markers: str) -> list[Tag]:
    return [tag for tag in document.soup.find_all(True) if _marker_match(tag, *markers)]


class ContentClarityRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        container = soup.find(["main", "article"]) or soup.find(attrs={"role": "main"}) or document.body
        body_text = container.get_text(" ")
        paragraphs = container.find_all("p")
        paragraph_texts = [element_text(p) for p in paragraphs]
        first_paragraph = paragraph_texts[0] if paragraph_texts else ""

        summaries = _find_marked(document, "summary", "intro")
        has_summary = bool(summaries)
        if not has_summary and len(first_paragraph) < 50:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-080",
                    title="Missing summary or intro section",
                    severity=Severity.MEDIUM,
                    description=(
                        "No clear summary or introduction section found. AI agents benefit from explicit page summaries."
                    ),
                    remediation="Add a clear introduction or summary section at the start of your content.",
                    impact=15,
                    confidence=0.7,
                    evidence=["No summary section detected", f"First paragraph length: {len(first_paragraph)}"],
                    tags=["summary", "structure", "clarity"],
                )
            )
        else:
            summary_text = element_text(summaries[0]) if has_summary else first_paragraph
            findings.extend(self._summary_checks(document, summary_text))

        if first_paragraph:
            if (
                not QUESTION_WORD_RE.search(first_paragraph[:100])
                and not ACTION_START_RE.match(first_paragraph)
                and len(first_paragraph.split()) < 15
            ):
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-084",
                        title="First paragraph unclear purpose",
                        severity=Severity.LOW,
                        description=(
                            "First paragraph does not clearly describe the page purpose or answer key questions."
                        ),
                        remediation="Start with a clear statement of what the page offers or answers.",
                        impact=12,
                        confidence=0.6,
                        text_snippet=first_paragraph[:100],
                        evidence=[f"First paragraph: {first_paragraph[:100]}..."],
                        tags=["intro", "clarity", "purpose"],
                    )
                )

        has_product = bool({"Product", "Offer"} & document.schema_types)
        has_pricing = bool(_find_marked(document, "price")) or soup.find(attrs={"itemprop": "price"}) is not None
        if has_product and not has_pricing:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-085",
                    title="Pricing not visible",
                    severity=Severity.LOW,
                    description="Product detected but pricing information is not clearly visible on the page.",
                    remediation="Display pricing information prominently for products/services.",
                    impact=8,
                    confidence=0.7,
                    evidence=["Product schema present", "No visible pricing"],
                    tags=["pricing", "product", "visibility"],
                )
            )

        has_feature_list = any(tag.find(["ul", "ol"]) for tag in _find_marked(document, "feature"))
        has_feature_heading = any(
            FEATURE_HEADING_RE.search(element_text(h)) for h in soup.find_all(["h2", "h3", "h4"])
        )
        if has_product and not has_feature_list and not has_feature_heading:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-086",
                    title="Features not clearly listed",
                    severity=Severity.LOW,
                    description="Product page lacks a clear features or benefits section with structured lists.",
                    remediation='Add a "Features" or "Benefits" section with bullet points or ordered list.',
                    impact=10,
                    confidence=0.7,
                    evidence=["No structured features list found"],
                    tags=["features", "product", "structure"],
                )
            )

        lists = [lst for lst in soup.find_all(["ul", "ol"]) if len(lst.find_all("li")) >= 3]
        if not lists and len(paragraphs) > 5:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-087",
                    title="No bullet or ordered lists",
                    severity=Severity.LOW,
                    description="Page has substantial content but no lists. Lists improve scannability for AI and users.",
                    remediation="Break up content with bullet points or numbered lists where appropriate.",
                    impact=8,
                    confidence=0.8,
                    evidence=[f"Paragraphs: {len(paragraphs)}", "Lists: 0"],
                    tags=["lists", "structure", "scannability"],
                )
            )

        question_headings = sum(
            1 for h in soup.find_all(["h2", "h3", "h4", "h5", "h6"]) if element_text(h).endswith("?")
        )
        has_faq = bool(_find_marked(document, "faq")) or "FAQPage" in document.schema_types
        if question_headings > 2 and not has_faq:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-088",
                    title="FAQ section not structured",
                    severity=Severity.LOW,
                    description=f"Found {question_headings} question-style headings but no structured FAQ section.",
                    remediation="Create a dedicated FAQ section with proper markup or schema.",
                    impact=10,
                    confidence=0.7,
                    evidence=[f"Question headings: {question_headings}"],
                    tags=["faq", "structure", "questions"],
                )
            )

        text_length = len(element_text(container))
        content_ratio = text_length / len(document.html) if document.html else 0.0
        if content_ratio < 0.1:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-089",
                    title="Content density too low",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Content-to-code ratio is {content_ratio * 100:.1f}%. Too much markup relative to content."
                    ),
                    remediation="Increase text content or reduce excessive HTML markup/scripts.",
                    impact=15,
                    confidence=0.9,
                    evidence=[f"Content ratio: {content_ratio * 100:.1f}%", "Optimal: >10%"],
                    tags=["density", "content-ratio", "quality"],
                )
            )
        elif content_ratio > 0.6:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-090",
                    title="Content density too high",
                    severity=Severity.LOW,
                    description=(
                        f"Content-to-code ratio is {content_ratio * 100:.1f}%. May lack proper structure and formatting."
                    ),
                    remediation="Add semantic HTML structure, headings, and formatting to improve organization.",
                    impact=8,
                    confidence=0.7,
                    evidence=[f"Content ratio: {content_ratio * 100:.1f}%"],
                    tags=["density", "structure", "formatting"],
                )
            )

        words = body_text.split()
        sentence_count = len([s for s in re.split(r"[.!?]+", body_text) if len(s.strip()) > 10])
        avg_words_per_sentence = len(words) / max(sentence_count, 1)
        grade = _reading_grade(body_text) if len(words) >= MIN_WORDS_FOR_READING_LEVEL else None
        if grade is not None:
            if grade < 6:
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-091",
                        title="Reading level too simple",
                        severity=Severity.INFO,
                        description=f"Estimated reading level: Grade {grade}. Content may be oversimplified.",
                        remediation="Consider adding more detail and depth appropriate for your audience.",
                        impact=5,
                        confidence=0.5,
                        evidence=[f"Estimated grade level: {grade}", "Recommended: Grade 6-10"],
                        tags=["readability", "reading-level", "quality"],
                    )
                )
            elif grade > 12:
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-092",
                        title="Reading level too complex",
                        severity=Severity.LOW,
                        description=(
                            f"Estimated reading level: Grade {grade}. Content may be too complex for general audiences."
                        ),
                        remediation="Simplify language and sentence structure for broader accessibility.",
                        impact=10,
                        confidence=0.5,
                        evidence=[f"Estimated grade level: {grade}", "Recommended: Grade 6-10"],
                        tags=["readability", "reading-level", "complexity"],
                    )
                )

        prefixes = Counter(text[:100] for text in paragraph_texts if len(text[:100]) > 50)
        duplicates = sum(1 for count in prefixes.values() if count > 1)
        if duplicates:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-093",
                    title="Duplicate content detected",
                    severity=Severity.LOW,
                    description=f"Found {duplicates} instances of duplicate paragraphs across the page.",
                    remediation="Remove or consolidate duplicate content to avoid redundancy.",
                    impact=10,
                    confidence=0.8,
                    evidence=[f"Duplicate paragraphs: {duplicates}"],
                    tags=["duplicate", "quality", "redundancy"],
                )
            )

        clarity_score, clarity_issues = 100, []
        if not has_summary:
            clarity_score -= 10
            clarity_issues.append("No summary")
        if not lists:
            clarity_score -= 8
            clarity_issues.append("No lists")
        if avg_words_per_sentence > 25:
            clarity_score -= 15
            clarity_issues.append("Long sentences")
        if content_ratio < 0.15:
            clarity_score -= 12
            clarity_issues.append("Low content density")
        if paragraph_texts and sum(1 for t in paragraph_texts if len(t) > 1000) > len(paragraph_texts) / 2:
            clarity_score -= 10
            clarity_issues.append("Long paragraphs")
        if clarity_score < 60:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-094",
                    title="Low clarity score",
                    severity=Severity.MEDIUM,
                    description=f"Content clarity score: {clarity_score}/100. Multiple readability issues detected.",
                    remediation="Improve structure, readability, and organization. Issues: " + ", ".join(clarity_issues),
                    impact=20,
                    confidence=0.7,
                    evidence=[f"Clarity score: {clarity_score}", f"Issues: {', '.join(clarity_issues)}"],
                    tags=["clarity", "readability", "score"],
                )
            )

        acronyms = ACRONYM_RE.findall(body_text)
        jargon_density = len(acronyms) / max(len(words), 1)
        if jargon_density > 0.05:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-095",
                    title="Excessive jargon detected",
                    severity=Severity.LOW,
                    description=f"High density of technical terms/acronyms: {jargon_density * 100:.1f}% of words.",
                    remediation="Define acronyms on first use and consider adding a glossary for technical terms.",
                    impact=8,
                    confidence=0.6,
                    evidence=[f"Acronyms found: {len(acronyms)}", f"Density: {jargon_density * 100:.1f}%"],
                    tags=["jargon", "technical", "accessibility"],
                )
            )

        findings.extend(self._entity_and_fact_checks(document, body_text, paragraphs, has_product))
        findings.extend(self._paragraph_and_link_checks(document, paragraph_texts))
        findings.extend(self._page_hygiene_checks(document, body_text))
        return findings

    def _summary_checks(self, document: Document, summary_text: str) -> list:
        findings = []
        word_count = len(summary_text.split())
        if word_count < 40:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-081",
                    title="Summary too short",
                    severity=Severity.LOW,
                    description=f"Summary is only {word_count} words. Optimal length is 40-120 words for AI comprehension.",
                    remediation="Expand the summary to 40-120 words to provide sufficient context.",
                    impact=8,
                    confidence=0.9,
                    evidence=[f"Word count: {word_count}", "Optimal: 40-120 words"],
                    tags=["summary", "length", "clarity"],
                )
            )
        elif word_count > 120:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-082",
                    title="Summary too long",
                    severity=Severity.LOW,
                    description=(
                        f"Summary is {word_count} words. Optimal length is 40-120 words for concise AI understanding."
                    ),
                    remediation="Condense the summary to 40-120 words for better scannability.",
                    impact=6,
                    confidence=0.9,
                    evidence=[f"Word count: {word_count}", "Optimal: 40-120 words"],
                    tags=["summary", "length", "clarity"],
                )
            )

        heading = document.title or element_text(document.soup.find("h1"))
        entity = ENTITY_SPLIT_RE.split(heading)[0].strip()
        if len(entity) > 3 and entity.lower()[:20] not in summary_text.lower():
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-083",
                    title="Summary missing main entity",
                    severity=Severity.LOW,
                    description="Summary does not mention the main entity, product, or organization name.",
                    remediation="Include the main subject/entity name in the opening summary for clarity.",
                    impact=10,
                    confidence=0.6,
                    evidence=[f"Main entity: {entity[:50]}"],
                    tags=["summary", "entity", "clarity"],
                )
            )
        return findings

    def _entity_and_fact_checks(self, document: Document, body_text: str, paragraphs: list, has_product: bool) -> list:
        soup = document.soup
        findings = []

        heading = element_text(soup.find("h1")) or document.title
        match = CAPITALIZED_RE.search(heading)
        if match:
            entity = match.group(0)
            mentions = len(re.findall(re.escape(entity), body_text, re.IGNORECASE))
            if mentions < 2:
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-096",
                        title="Inconsistent entity references",
                        severity=Severity.LOW,
                        description=f'Main entity "{entity}" mentioned only {mentions} time(s) in content.',
                        remediation="Reference the main entity consistently throughout the content.",
                        impact=6,
                        confidence=0.5,
                        evidence=[f"Entity: {entity}", f"Mentions: {mentions}"],
                        tags=["entity", "consistency", "references"],
                    )
                )

        has_stats = soup.find("td") is not None or bool(_find_marked(document, "stat", "metric"))
        if not NUMBER_RE.search(body_text) and not has_stats and len(paragraphs) > 5:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-097",
                    title="No extractable facts or data",
                    severity=Severity.LOW,
                    description="Content lacks quantifiable facts, statistics, or data points for LLM extraction.",
                    remediation="Include specific numbers, statistics, or data points to support claims.",
                    impact=10,
                    confidence=0.7,
                    evidence=["No numbers or statistics detected"],
                    tags=["facts", "data", "extraction"],
                )
            )

        has_contact_link = any(
            attr(a, "href").startswith(("mailto:", "tel:")) for a in soup.find_all("a", href=True)
        )
        if not EMAIL_RE.search(body_text) and not PHONE_RE.search(body_text) and not has_contact_link:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-098",
                    title="No contact information",
                    severity=Severity.LOW,
                    description="Page lacks visible contact information (email, phone, or contact links).",
                    remediation="Add contact information to improve trust and AI understanding of your organization.",
                    impact=8,
                    confidence=0.8,
                    evidence=["No email, phone, or contact links found"],
                    tags=["contact", "trust", "information"],
                )
            )

        has_cta = any(CTA_RE.search(element_text(tag)) for tag in soup.find_all(["button", "a"]))
        if has_product and not has_cta:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-099",
                    title="No clear call-to-action",
                    severity=Severity.LOW,
                    description="Product/service page lacks clear call-to-action buttons or links.",
                    remediation='Add prominent CTAs like "Buy Now", "Sign Up", or "Get Started".',
                    impact=10,
                    confidence=0.7,
                    evidence=["No CTA buttons detected"],
                    tags=["cta", "conversion", "ux"],
                )
            )
        return findings

    def _paragraph_and_link_checks(self, document: Document, paragraph_texts: list[str]) -> list:
        findings = []
        total = len(paragraph_texts)
        word_counts = [len(text.split()) for text in paragraph_texts]
        short = sum(1 for n in word_counts if 0 < n < 20)
        long_ = sum(1 for n in word_counts if n > 150)

        if total > 5 and short > total * 0.7:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-100",
                    title="Too many short paragraphs",
                    severity=Severity.LOW,
                    description=f"{short} out of {total} paragraphs are very short (<20 words).",
                    remediation="Combine related short paragraphs for better flow and readability.",
                    impact=6,
                    confidence=0.8,
                    evidence=[f"Short paragraphs: {short}/{total}"],
                    tags=["paragraphs", "structure", "readability"],
                )
            )
        if long_:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-101",
                    title="Paragraphs too long",
                    severity=Severity.LOW,
                    description=f"Found {long_} paragraph(s) longer than 150 words. Break up for better readability.",
                    remediation="Split long paragraphs into smaller chunks (50-150 words ideal).",
                    impact=8,
                    confidence=0.9,
                    evidence=[f"Long paragraphs: {long_}"],
                    tags=["paragraphs", "readability", "structure"],
                )
            )

        parsed = document.parsed_url
        origin = f"{parsed.scheme}://{parsed.netloc}" if parsed.netloc else None
        vague = 0
        for a in document.soup.find_all("a", href=True):
            href = attr(a, "href")
            if not (href.startswith("/") or (origin and href.startswith(origin))):
                continue
            text = element_text(a)
            if len(text) < 3 or VAGUE_ANCHOR_RE.match(text):
                vague += 1
        if vague:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-102",
                    title="Internal links lack context",
                    severity=Severity.LOW,
                    description=f"Found {vague} internal link(s) with non-descriptive anchor text.",
                    remediation="Use descriptive anchor text that explains where the link leads.",
                    impact=8,
                    confidence=0.9,
                    evidence=[f"Links without context: {vague}"],
                    tags=["links", "context", "navigation"],
                )
            )
        return findings

    def _page_hygiene_checks(self, document: Document, body_text: str) -> list:
        soup = document.soup
        findings = []

        last_modified = document.meta("article:modified_time") or document.meta("last-modified")
        if not ISO_DATE_RE.search(body_text) and not last_modified:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-103",
                    title="No freshness indicators",
                    severity=Severity.LOW,
                    description="Page lacks date stamps or freshness indicators. AI agents prefer timestamped content.",
                    remediation="Add publication/update dates using meta tags or visible timestamps.",
                    impact=8,
                    confidence=0.6,
                    evidence=["No dates detected"],
                    tags=["freshness", "dates", "currency"],
                )
            )

        popups = [
            tag
            for tag in soup.find_all(True)
            if any(marker in " ".join(class_list(tag)).lower() for marker in ("popup", "modal", "overlay"))
            and not HIDDEN_STYLE_RE.search(attr(tag, "style"))
        ]
        if len(popups) > 2:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-104",
                    title="Intrusive popups detected",
                    severity=Severity.MEDIUM,
                    description=f"Found {len(popups)} popup/modal elements. These interfere with AI crawling.",
                    remediation="Minimize popups and ensure they don't block content from crawlers.",
                    impact=15,
                    confidence=0.7,
                    evidence=[f"Popup elements: {len(popups)}"],
                    tags=["popups", "ux", "accessibility"],
                )
            )

        anchors = {attr(tag, "id") for tag in soup.find_all(id=True)} | {
            attr(tag, "name") for tag in soup.find_all(attrs={"name": True})
        }
        fragments = [attr(a, "href").split("#", 1)[1] for a in soup.find_all("a", href=True) if "#" in attr(a, "href")]
        fragments = [f for f in fragments if f]
        broken = sum(1 for f in fragments if f not in anchors)
        if broken:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-105",
                    title="Invalid fragment identifiers",
                    severity=Severity.LOW,
                    description=f"Found {broken} link(s) with fragment identifiers that don't exist on the page.",
                    remediation="Ensure all # fragment links point to valid IDs or named anchors.",
                    impact=6,
                    confidence=0.9,
                    evidence=[f"Invalid fragments: {broken}/{len(fragments)}"],
                    tags=["fragments", "links", "navigation"],
                )
            )
        return findings


register(
    RuleMeta(
        id="AIREAD-080",
        title="Content clarity and AI-usability",
        category=Category.READABILITY,
        severity=Severity.MEDIUM,
        priority=8,
        tags=("clarity", "usability", "content-quality", "llm-friendly"),
        description="Checks summaries, readability, structure and LLM-friendly formatting.",
    ),
    ContentClarityRule,
)
