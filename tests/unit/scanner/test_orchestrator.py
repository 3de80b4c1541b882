"""Unit tests for the scan orchestrator."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from prometheus_client import REGISTRY as PROM_REGISTRY

from readyscan.config import FilterConfig, ScanConfig
from readyscan.document import Document
from readyscan.extractability import HeuristicDetector
from readyscan.protocols import Category, Severity
from readyscan.rules import BaseRule, RuleMeta, RuleRegistry
from readyscan.scanner import Scanner, SectionState, apply_filters, boundary_findings
from readyscan.scoring import ScoringResult

URL = "https://example.com/page"


class ImpactRule(BaseRule):
    """Emits one finding per (impact, confidence) pair."""

    PAIRS = [(5, 1.0), (30, 0.9), (12, 0.5), (20, 1.0), (9, 0.8)]

    def evaluate(self, document):
        return [
            self.finding(document, title=f"Impact {impact}", impact=impact, confidence=confidence)
            for impact, confidence in self.PAIRS
        ]


def impact_registry() -> RuleRegistry:
    registry = RuleRegistry()
    registry.register(
        RuleMeta(id="TEST-001", title="Impact", category=Category.READABILITY, severity=Severity.MEDIUM),
        ImpactRule,
    )
    return registry


class FakeLLM:
    async def summarize(self, document):
        return {"summary": "A guide.", "keyTopics": ["scanning"], "readingLevel": "Grade 8"}

    async def assess_hallucination(self, document):
        return {"hallucinationRiskScore": 20, "triggers": []}

    async def mirror_test(self, document):
        return {"summary": {"alignmentScore": 90, "critical": 0}}


class SlowSummaryLLM(FakeLLM):
    async def summarize(self, document):
        await asyncio.sleep(5)
        return {}


class BrokenHallucinationLLM(FakeLLM):
    async def assess_hallucination(self, document):
        raise RuntimeError("model unavailable")


class ExplodingDetector(HeuristicDetector):
    def is_shadow_host(self, element):
        raise RuntimeError("detector bug")


def llm_config(**llm):
    return ScanConfig(llm={"enabled": True, **llm})


class TestBoundaryFindings:
    """Findings about the fetch itself."""

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """A 404 page yields exactly one MISC finding plus a full scoring result."""
        result = await Scanner().scan_html("<html><body></body></html>", URL, status=404)

        misc = result.issues_in(Category.MISC)
        assert len(misc) == 1
        assert misc[0].title == "HTTP error fetching page"
        assert misc[0].evidence == ("404",)
        assert result.issues[0] is misc[0]
        assert isinstance(result.scoring, ScoringResult)
        assert result.scores[Category.MISC] == 98

    def test_fetch_failure(self):
        """A transport failure becomes an informational MISC-001 finding."""
        document = Document(url=URL, html="", status=None, fetch_error="ConnectError: refused")

        (finding,) = boundary_findings(document)

        assert finding.id == "MISC-001"
        assert finding.severity is Severity.INFO
        assert finding.impact_score == 0
        assert "refused" in finding.description

    def test_success_has_no_boundary_findings(self):
        """A 200 response adds nothing."""
        assert boundary_findings(Document(url=URL, html="<p>x</p>", status=200)) == []

    @pytest.mark.asyncio
    async def test_boundary_bypasses_filters(self):
        """The low-impact HTTP error survives the default impact filter."""
        result = await Scanner(registry=RuleRegistry()).scan_html("", URL, status=500)

        assert [f.id for f in result.issues] == ["MISC-002"]


class TestFilters:
    """Presentation filters."""

    def test_thresholds_and_cap_keep_order(self, make_finding):
        """Filtering drops weak findings, keeps the strongest and preserves order."""
        findings = [
            make_finding(impact=impact, confidence=confidence, title=f"Impact {impact}")
            for impact, confidence in ImpactRule.PAIRS
        ]

        kept = apply_filters(findings, FilterConfig(min_impact_score=8, min_confidence=0.7, max_issues=2))

        assert [f.title for f in kept] == ["Impact 30", "Impact 20"]

    def test_cap_preserves_relative_order(self, make_finding):
        """Survivors of the cap are returned in their original order."""
        findings = [make_finding(impact=i, title=f"F{i}") for i in (10, 40, 20, 30)]

        kept = apply_filters(findings, FilterConfig(min_impact_score=0, min_confidence=0, max_issues=3))

        assert [f.title for f in kept] == ["F40", "F20", "F30"]

    @pytest.mark.asyncio
    async def test_scoring_sees_unfiltered_findings(self):
        """Scores count every finding even when the filters hide some."""
        scanner = Scanner(registry=impact_registry())
        result = await scanner.scan_html("<p>Body</p>", URL)

        assert [f.title for f in result.issues] == ["Impact 30", "Impact 20", "Impact 9"]
        assert result.scoring.total_issues == len(ImpactRule.PAIRS)

    @pytest.mark.asyncio
    async def test_document_config_governs(self):
        """The document's configuration, not the scanner's default, selects the filters."""
        scanner = Scanner(registry=impact_registry())
        document = Document(url=URL, html="<p>Body</p>", config=ScanConfig.verbose())

        result = await scanner.scan(document)

        assert len(result.issues) == len(ImpactRule.PAIRS)

    @pytest.mark.asyncio
    async def test_strict_preset(self, flat_html):
        """Strict mode disables crawl, tech and a11y rules and caps at ten issues."""
        result = await Scanner(ScanConfig.strict()).scan_html(flat_html, URL)

        assert len(result.issues) <= 10
        hidden = {Category.CRAWLABILITY, Category.TECHNICAL, Category.ACCESSIBILITY}
        assert not any(f.category in hidden for f in result.issues)
        assert all(f.impact_score >= 15 for f in result.issues)


class TestSections:
    """Optional sections and their states."""

    @pytest.mark.asyncio
    async def test_default_sections(self, article_html):
        """Without a collaborator the model sections are skipped."""
        result = await Scanner().scan_html(article_html, URL)

        assert result.sections["rules"] is SectionState.OK
        assert result.sections["chunking"] is SectionState.OK
        assert result.sections["extractability"] is SectionState.OK
        for name in ("llm", "hallucination", "mirror"):
            assert result.sections[name] is SectionState.SKIPPED
        assert result.chunking is not None and result.chunking.total_chunks > 0
        assert result.extractability is not None
        assert result.llm is None

    @pytest.mark.asyncio
    async def test_disabled_sections(self, article_html):
        """Disabled chunking and extractability are absent and marked skipped."""
        config = ScanConfig(enable_chunking=False, enable_extractability=False)
        result = await Scanner(config).scan_html(article_html, URL)

        assert result.chunking is None
        assert result.extractability is None
        assert result.sections["chunking"] is SectionState.SKIPPED
        assert result.sections["extractability"] is SectionState.SKIPPED

    @pytest.mark.asyncio
    async def test_llm_payloads_pass_through(self, article_html):
        """Collaborator payloads reach the result and the trust dimension."""
        result = await Scanner(llm_config(), llm=FakeLLM()).scan_html(article_html, URL)

        assert result.llm["summary"] == "A guide."
        assert result.hallucination_report["hallucinationRiskScore"] == 20
        assert result.mirror_report["summary"]["alignmentScore"] == 90
        assert result.scoring.readiness.dimensions["trustworthiness"].data_availability.has_hallucination_report

    @pytest.mark.asyncio
    async def test_each_llm_call_receives_document(self, article_html):
        """Every enabled collaborator call is awaited once with the scanned document."""
        llm = AsyncMock()
        llm.summarize.return_value = {"summary": "ok"}
        llm.assess_hallucination.return_value = {"hallucinationRiskScore": 10}
        llm.mirror_test.return_value = {"summary": {"alignmentScore": 95}}
        document = Document(url=URL, html=article_html, config=llm_config())

        result = await Scanner(llm=llm).scan(document)

        for method in (llm.summarize, llm.assess_hallucination, llm.mirror_test):
            method.assert_awaited_once_with(document)
        assert result.llm == {"summary": "ok"}

    @pytest.mark.asyncio
    async def test_llm_disabled_in_config(self, article_html):
        """An attached collaborator is not called when the config disables it."""
        result = await Scanner(llm=FakeLLM()).scan_html(article_html, URL)

        assert result.llm is None
        assert result.sections["llm"] is SectionState.SKIPPED

    @pytest.mark.asyncio
    async def test_individual_toggle(self, article_html):
        """Each model call has its own switch."""
        result = await Scanner(llm_config(mirror_test=False), llm=FakeLLM()).scan_html(article_html, URL)

        assert result.sections["mirror"] is SectionState.SKIPPED
        assert result.sections["llm"] is SectionState.OK
        assert result.mirror_report is None

    @pytest.mark.asyncio
    async def test_llm_timeout(self, article_html):
        """A slow call is abandoned and flagged while the rest of the scan completes."""
        scanner = Scanner(llm_config(timeout_seconds=0.01), llm=SlowSummaryLLM())

        result = await scanner.scan_html(article_html, URL)

        assert result.sections["llm"] is SectionState.TIMED_OUT
        assert result.llm is None
        assert result.sections["hallucination"] is SectionState.OK
        assert result.scoring.readiness.overall > 0

    @pytest.mark.asyncio
    async def test_llm_failure(self, article_html):
        """A raising call is flagged as failed and counted."""
        labels = {"outcome": "degraded"}
        before = PROM_REGISTRY.get_sample_value("readyscan_scans_total", labels) or 0.0

        result = await Scanner(llm_config(), llm=BrokenHallucinationLLM()).scan_html(article_html, URL)

        assert result.sections["hallucination"] is SectionState.FAILED
        assert result.hallucination_report is None
        assert result.llm is not None
        assert PROM_REGISTRY.get_sample_value("readyscan_scans_total", labels) == before + 1

    @pytest.mark.asyncio
    async def test_engine_failure_isolated(self, article_html):
        """A crashing detector empties extractability but not the rest of the scan."""
        result = await Scanner(detector=ExplodingDetector()).scan_html(article_html, URL)

        assert result.sections["extractability"] is SectionState.FAILED
        assert result.extractability is None
        assert result.chunking is not None
        assert result.scoring is not None


class TestScanResult:
    """Result identity and entry points."""

    @pytest.mark.asyncio
    async def test_scan_metadata(self, article_html):
        """Each scan carries a short hex id, the document timestamp and a duration."""
        document = Document(url=URL, html=article_html)
        result = await Scanner().scan(document)

        assert len(result.scan_id) == 12
        int(result.scan_id, 16)
        assert result.timestamp == document.scanned_at
        assert result.duration_seconds >= 0
        assert result.overall_score == result.scoring.readiness.overall
        assert result.grade == result.scoring.readiness.grade

    def test_scan_sync(self, article_html):
        """The synchronous entry point runs its own event loop."""
        result = Scanner().scan_sync(Document(url=URL, html=article_html))

        assert result.url == URL
        assert result.sections["rules"] is SectionState.OK

    @pytest.mark.asyncio
    async def test_deterministic_apart_from_identity(self, article_html):
        """Two scans of one document differ only in id and duration."""
        document = Document(url=URL, html=article_html)
        scanner = Scanner()

        first = await scanner.scan(document)
        second = await scanner.scan(document)

        assert first.issues == second.issues
        assert first.scoring == second.scoring
        assert first.chunking == second.chunking
        assert first.extractability == second.extractability
        assert first.scan_id != second.scan_id
