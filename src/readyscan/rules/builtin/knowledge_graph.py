"""
Structured data that lets agents build a knowledge graph of the page.
"""

from __future__ import annotations

import re

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr, element_text

from .context_clarity import has_breadcrumbs

MAIN_ENTITY_TYPES = {"Organization", "Person", "Article", "WebPage"}
ENTITY_TYPES = ("Person", "Organization", "Place")
PROPER_NOUN_RE = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+\b")


def _types_of(item: dict) -> set[str]:
    value = item.get("@type")
    if isinstance(value, str):
        return {value}
    if isinstance(value, list):
        return {str(v) for v in value}
    return set()


class KnowledgeGraphRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []
        blocks = soup.find_all("script", attrs={"type": "application/ld+json"})
        items = document.json_ld

        if not blocks:
            findings.append(
                self.finding(
                    document,
                    id="KG-001",
                    title="No Schema.org structured data",
                    severity=Severity.HIGH,
                    description=(
                        "The page lacks Schema.org structured data in JSON-LD format. This prevents AI from building "
                        "knowledge graphs from your content."
                    ),
                    remediation=(
                        "Add Schema.org structured data using JSON-LD. Consider Organization, Person, Article, Product, "
                        "or other relevant schemas."
                    ),
                    impact=30,
                    evidence=["No JSON-LD structured data found"],
                    tags=["schema", "json-ld", "knowledge-graph"],
                )
            )
        else:
            found_types = sorted({t for item in items for t in _types_of(item)})
            if not any(_types_of(item) & MAIN_ENTITY_TYPES for item in items):
                findings.append(
                    self.finding(
                        document,
                        id="KG-002",
                        title="Schema.org data lacks main entity",
                        severity=Severity.MEDIUM,
                        description=(
                            f"Found {len(blocks)} Schema.org object(s) but no main entity type (Organization, Person, "
                            "Article, WebPage, etc.)."
                        ),
                        remediation="Add a primary Schema.org type that describes the main content or purpose of the page.",
                        impact=20,
                        confidence=0.9,
                        evidence=[f"Schema types found: {', '.join(found_types) or 'none'}"],
                        tags=["schema", "entities", "knowledge-graph"],
                    )
                )

        marked_entities = sum(
            1
            for tag in soup.find_all(attrs={"itemtype": True}) + soup.find_all(attrs={"typeof": True})
            if any(kind in attr(tag, "itemtype") or attr(tag, "typeof") == kind for kind in ENTITY_TYPES)
        )
        potential_entities = len(set(PROPER_NOUN_RE.findall(document.main_container.get_text(" "))))
        if potential_entities > 10 and marked_entities == 0:
            findings.append(
                self.finding(
                    document,
                    id="KG-004",
                    title="Named entities not marked up",
                    severity=Severity.LOW,
                    description=(
                        f"Found {potential_entities} potential named entities (people, organizations, places) but no "
                        "entity markup. Entity recognition helps AI build knowledge graphs."
                    ),
                    remediation=(
                        "Use Schema.org markup or semantic HTML to identify people, organizations, and places mentioned "
                        "in content."
                    ),
                    impact=12,
                    confidence=0.6,
                    evidence=[f"Potential entities: {potential_entities}", "No entity markup found"],
                    tags=["entities", "ner", "knowledge-graph"],
                )
            )

        identities = [item for item in items if _types_of(item) & {"Organization", "Person"}]
        if identities and not any("sameAs" in item for item in identities):
            findings.append(
                self.finding(
                    document,
                    id="KG-005",
                    title="Missing sameAs relationships",
                    severity=Severity.LOW,
                    description=(
                        'Schema.org data for Organization/Person lacks "sameAs" property. This property links entities '
                        "to their social profiles and external identifiers."
                    ),
                    remediation=(
                        'Add "sameAs" property with URLs to social media profiles, Wikipedia, or other authoritative '
                        "sources."
                    ),
                    impact=10,
                    confidence=0.8,
                    evidence=["No sameAs relationships found"],
                    tags=["relationships", "schema", "identity"],
                )
            )

        depth = len([part for part in document.parsed_url.path.split("/") if part])
        if depth > 1 and "BreadcrumbList" not in document.schema_types and has_breadcrumbs(document):
            findings.append(
                self.finding(
                    document,
                    id="KG-006",
                    title="Breadcrumbs lack structured data",
                    severity=Severity.LOW,
                    description=(
                        "Page has breadcrumb navigation but no BreadcrumbList schema. Structured breadcrumbs help AI "
                        "understand site hierarchy."
                    ),
                    remediation="Add BreadcrumbList structured data to complement your breadcrumb navigation.",
                    impact=8,
                    confidence=0.9,
                    evidence=[f"URL depth: {depth}", "No BreadcrumbList schema"],
                    tags=["breadcrumbs", "schema", "hierarchy"],
                )
            )

        questions = 0
        for heading in soup.find_all(["h2", "h3", "h4"]):
            text = element_text(heading).lower()
            if text.endswith("?") or "how to" in text or "what is" in text:
                questions += 1
        if questions > 2 and "FAQPage" not in document.schema_types:
            findings.append(
                self.finding(
                    document,
                    id="KG-007",
                    title="FAQ content lacks schema markup",
                    severity=Severity.LOW,
                    description=(
                        f"Found {questions} potential FAQ items but no FAQPage schema. FAQ schema helps AI provide "
                        "direct answers."
                    ),
                    remediation="Add FAQPage structured data to mark up question-answer pairs.",
                    impact=12,
                    confidence=0.7,
                    evidence=[f"Question-style headings: {questions}"],
                    tags=["faq", "schema", "qa"],
                )
            )

        return findings


register(
    RuleMeta(
        id="KG-001",
        title="Knowledge Graph and entity markup",
        category=Category.KNOWLEDGE_GRAPH,
        severity=Severity.MEDIUM,
        priority=10,
        tags=("knowledge-graph", "entities", "schema"),
        description="Checks for structured data that helps build knowledge graphs.",
    ),
    KnowledgeGraphRule,
)
