"""
Scan orchestrator.

Runs the rule pass, chunking, extractability mapping and the optional
language-model collaborator concurrently over one read-only document, then
scores every finding and applies the presentation filters.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Tuple, TypeVar

import structlog

from readyscan.chunking import Chunker, ChunkingAnalysis
from readyscan.config import FilterConfig, ScanConfig
from readyscan.document import Document
from readyscan.extractability import DetectionStrategy, ExtractabilityMap, ExtractabilityMapper
from readyscan.observability import histogram, increment
from readyscan.protocols import Category, Finding, FindingLocation, Severity
from readyscan.rules import RuleRegistry, RuleRunner
from readyscan.scoring import ScoringEngine, legacy_scores

from .fetch import fetch_document
from .llm import LLMAnalyzer
from .models import ScanResult, SectionState

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def apply_filters(findings: List[Finding], filters: FilterConfig) -> List[Finding]:
    """Drop low-impact and low-confidence findings, then keep the top ``max_issues``.

    Survivors keep their original relative order.
    """
    kept = [
        (index, f)
        for index, f in enumerate(findings)
        if f.impact_score >= filters.min_impact_score and f.confidence >= filters.min_confidence
    ]
    if len(kept) > filters.max_issues:
        top = sorted(kept, key=lambda item: (-item[1].impact_score, item[0]))[: filters.max_issues]
        kept = sorted(top, key=lambda item: item[0])
    return [f for _, f in kept]


def boundary_findings(document: Document) -> List[Finding]:
    """Findings about the fetch itself rather than the page content."""
    location = FindingLocation(url=document.url)
    if document.fetch_error is not None:
        return [
            Finding(
                id="MISC-001",
                title="Page could not be fetched",
                category=Category.MISC,
                severity=Severity.INFO,
                description=f"The page could not be retrieved: {document.fetch_error}",
                remediation="Check the URL, DNS and network reachability, then rescan.",
                impact_score=0,
                confidence=1.0,
                location=location,
                evidence=(document.fetch_error,),
                tags=("network",),
                timestamp=document.scanned_at,
            )
        ]
    if document.status is not None and document.status >= 400:
        return [
            Finding(
                id="MISC-002",
                title="HTTP error fetching page",
                category=Category.MISC,
                severity=Severity.LOW,
                description=f"Failed to fetch page; HTTP status {document.status}",
                remediation="Check URL and network; ensure the page is accessible.",
                impact_score=2,
                confidence=0.9,
                location=location,
                evidence=(str(document.status),),
                tags=("network",),
                timestamp=document.scanned_at,
            )
        ]
    return []


class Scanner:
    """
    Composes the analysis engines into a single :class:`ScanResult`.

    The document's own configuration governs a scan; the scanner's
    configuration is the default used by :meth:`scan_html` and
    :meth:`scan_url` when building documents.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        *,
        registry: RuleRegistry | None = None,
        llm: LLMAnalyzer | None = None,
        detector: DetectionStrategy | None = None,
    ) -> None:
        self.config = config or ScanConfig()
        self.registry = registry
        self.llm = llm
        self.detector = detector
        self.logger = logger.bind(component="scanner")

    # --- Entry points ---

    async def scan_html(self, html: str, url: str = "about:blank", *, status: int | None = 200) -> ScanResult:
        return await self.scan(Document(url=url, html=html, status=status, config=self.config))

    async def scan_url(self, url: str, **fetch_kwargs: Any) -> ScanResult:
        document = await fetch_document(url, self.config, **fetch_kwargs)
        return await self.scan(document)

    def scan_sync(self, document: Document) -> ScanResult:
        return asyncio.run(self.scan(document))

    async def scan(self, document: Document) -> ScanResult:
        scan_id = uuid.uuid4().hex[:12]
        with structlog.contextvars.bound_contextvars(scan_id=scan_id):
            return await self._scan(document, scan_id)

    # --- Pipeline ---

    async def _scan(self, document: Document, scan_id: str) -> ScanResult:
        config = document.config
        start = time.perf_counter()
        self.logger.info("Scan started", url=document.url, status=document.status)

        document.prime()
        sections: Dict[str, SectionState] = {}

        runner = RuleRunner(self.registry, concurrent=True)
        chunk_task: Awaitable[Optional[ChunkingAnalysis]] = (
            asyncio.to_thread(Chunker(config).chunk, document) if config.enable_chunking else _none()
        )
        map_task: Awaitable[Optional[ExtractabilityMap]] = (
            asyncio.to_thread(ExtractabilityMapper(config.extractability, self.detector).build, document)
            if config.enable_extractability
            else _none()
        )

        (rule_findings, rules_state), (chunking, chunk_state), (mapping, map_state), llm_sections = await asyncio.gather(
            self._section("rules", runner.run(document)),
            self._section("chunking", chunk_task),
            self._section("extractability", map_task),
            self._llm_sections(document),
        )
        sections["rules"] = rules_state
        sections["chunking"] = chunk_state if config.enable_chunking else SectionState.SKIPPED
        sections["extractability"] = map_state if config.enable_extractability else SectionState.SKIPPED
        (llm, llm_state), (hallucination, hall_state), (mirror, mirror_state) = llm_sections
        sections.update(llm=llm_state, hallucination=hall_state, mirror=mirror_state)

        boundary = boundary_findings(document)
        all_findings = boundary + list(rule_findings or [])
        scoring = ScoringEngine(config.scoring).score(
            all_findings,
            extractability=mapping,
            chunking=chunking,
            llm=llm,
            hallucination=hallucination,
            mirror=mirror,
        )
        issues = boundary + apply_filters(list(rule_findings or []), config.filters)

        duration = time.perf_counter() - start
        degraded = any(state in (SectionState.FAILED, SectionState.TIMED_OUT) for state in sections.values())
        increment("scans_total", labels={"outcome": "degraded" if degraded else "ok"})
        histogram("scan_duration_seconds", duration)
        histogram("readiness_score", scoring.readiness.overall)

        self.logger.info(
            "Scan complete",
            url=document.url,
            issues=len(issues),
            total_findings=len(all_findings),
            readiness=round(scoring.readiness.overall, 1),
            grade=scoring.readiness.grade,
            duration_seconds=round(duration, 3),
        )
        return ScanResult(
            scan_id=scan_id,
            url=document.url,
            timestamp=document.scanned_at,
            issues=tuple(issues),
            scores=legacy_scores(all_findings),
            scoring=scoring,
            chunking=chunking,
            extractability=mapping,
            llm=llm,
            hallucination_report=hallucination,
            mirror_report=mirror,
            sections=sections,
            duration_seconds=duration,
        )

    async def _section(
        self, name: str, awaitable: Awaitable[T], timeout: float | None = None
    ) -> Tuple[Optional[T], SectionState]:
        """Await one section; failures and timeouts leave it empty and flagged."""
        try:
            if timeout is not None:
                return await asyncio.wait_for(awaitable, timeout=timeout), SectionState.OK
            return await awaitable, SectionState.OK
        except asyncio.TimeoutError:
            self.logger.warning("Section timed out", section=name, timeout=timeout)
            increment("section_failures_total", labels={"section": name, "state": SectionState.TIMED_OUT.value})
            return None, SectionState.TIMED_OUT
        except Exception as e:
            self.logger.warning("Section failed", section=name, error_type=type(e).__name__, error=str(e))
            increment("section_failures_total", labels={"section": name, "state": SectionState.FAILED.value})
            return None, SectionState.FAILED

    async def _llm_sections(
        self, document: Document
    ) -> Tuple[Tuple[Optional[Mapping[str, Any]], SectionState], ...]:
        llm_config = document.config.llm
        skipped: Tuple[None, SectionState] = (None, SectionState.SKIPPED)
        if self.llm is None or not llm_config.enabled:
            return skipped, skipped, skipped

        timeout = llm_config.timeout_seconds
        calls = (
            ("llm", llm_config.summary, self.llm.summarize),
            ("hallucination", llm_config.hallucination, self.llm.assess_hallucination),
            ("mirror", llm_config.mirror_test, self.llm.mirror_test),
        )
        results = await asyncio.gather(
            *(
                self._section(name, method(document), timeout) if enabled else _value(skipped)
                for name, enabled, method in calls
            )
        )
        return tuple(results)


async def _none() -> None:
    return None


async def _value(value: T) -> T:
    return value
