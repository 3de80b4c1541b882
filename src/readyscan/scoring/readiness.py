"""
Five-dimension readiness assessment.

Every dimension is derived from a subset of findings through the shared
penalty formula, optionally refined by extractability, chunking and the
opaque payloads of the language-model collaborator. All inputs are passed
explicitly so that the same inputs always give the same assessment.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence

from readyscan.config import ScoringConfig
from readyscan.protocols import Category, Finding, Severity

from .categories import penalty_score
from .models import (
    DIMENSION_NAMES,
    AgentPerspective,
    Benchmark,
    DataAvailability,
    DimensionIssue,
    DimensionScore,
    DimensionStatus,
    Effort,
    QuickWin,
    ReadinessScore,
    Roadmap,
)

if TYPE_CHECKING:
    from readyscan.chunking.models import ChunkingAnalysis
    from readyscan.extractability.models import ExtractabilityMap

_EFFORT_RANK = {"low": 0, "medium": 1, "high": 2}


def status_for(score: float) -> DimensionStatus:
    if score >= 90:
        return "excellent"
    if score >= 75:
        return "good"
    if score >= 60:
        return "needs-work"
    return "critical"


def _band(score: float, low: str, mid: str, high: str) -> str:
    if score < 60:
        return low
    if score < 80:
        return mid
    return high


def _clamp(score: float) -> float:
    return max(0.0, min(100.0, score))


def _issues(findings: Sequence[Finding]) -> tuple[DimensionIssue, ...]:
    return tuple(DimensionIssue(title=f.title, severity=f.severity, impact=f.impact_score) for f in findings)


def _number(payload: Optional[Mapping[str, Any]], *path: str) -> Optional[float]:
    """Numeric value at ``path`` inside an opaque payload, or None."""
    node: Any = payload
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    if isinstance(node, bool) or not isinstance(node, (int, float)):
        return None
    return float(node)


def _sequence(payload: Optional[Mapping[str, Any]], key: str) -> list:
    value = payload.get(key) if isinstance(payload, Mapping) else None
    return list(value) if isinstance(value, (list, tuple)) else []


def estimate_effort(finding: Finding) -> Effort:
    title = finding.title.lower()
    remediation = finding.remediation.lower()
    if any(marker in title for marker in ("missing meta", "missing alt", "missing title")):
        return "low"
    if "structure" in title or "rewrite" in title or "redesign" in remediation:
        return "high"
    return "medium"


class ReadinessScorer:
    """Computes the readiness dimensions and everything derived from them."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def score(
        self,
        findings: Sequence[Finding],
        *,
        extractability: Optional[ExtractabilityMap] = None,
        chunking: Optional[ChunkingAnalysis] = None,
        llm: Optional[Mapping[str, Any]] = None,
        hallucination: Optional[Mapping[str, Any]] = None,
        mirror: Optional[Mapping[str, Any]] = None,
    ) -> ReadinessScore:
        ordered = sorted(findings, key=lambda f: f.weighted_key)
        weights = self.config.dimension_weights.as_dict()

        dimensions: Dict[str, DimensionScore] = {
            "content_quality": self._content_quality(ordered, chunking, llm, weights["content_quality"]),
            "discoverability": self._discoverability(ordered, weights["discoverability"]),
            "extractability": self._extractability(ordered, extractability, weights["extractability"]),
            "comprehensibility": self._comprehensibility(ordered, llm, mirror, weights["comprehensibility"]),
            "trustworthiness": self._trustworthiness(ordered, hallucination, weights["trustworthiness"]),
        }

        overall = sum(dimensions[name].score * weights[name] for name in DIMENSION_NAMES)
        confidence = round(sum(d.confidence for d in dimensions.values()) / len(dimensions), 2)

        return ReadinessScore(
            overall=overall,
            grade=self.config.grade_for(overall),
            confidence=confidence,
            dimensions=dimensions,
            quick_wins=self.quick_wins(ordered),
            roadmap=self.roadmap(ordered, dimensions),
            benchmark=self.benchmark(overall, dimensions),
            agent_perspective=self.agent_perspective(dimensions),
        )

    # --- Dimensions ---

    def _content_quality(
        self,
        findings: Sequence[Finding],
        chunking: Optional[ChunkingAnalysis],
        llm: Optional[Mapping[str, Any]],
        weight: float,
    ) -> DimensionScore:
        relevant = [f for f in findings if f.category in (Category.READABILITY, Category.EXTRACTION)]
        score = penalty_score(relevant, self.config)
        strengths: List[str] = []
        weaknesses: List[str] = []

        has_llm = bool(llm and llm.get("summary"))
        has_entities = bool(_sequence(llm, "topEntities"))
        confidence = 0.6 + (0.25 if has_llm else 0) + (0.1 if chunking is not None else 0) + (0.05 if has_entities else 0)

        if chunking is not None:
            if chunking.total_tokens >= 500:
                strengths.append(f"Substantial content ({chunking.total_tokens} words)")
            if chunking.average_noise_ratio < 0.2:
                strengths.append("Low noise ratio in content")
            elif chunking.average_noise_ratio > 0.4:
                weaknesses.append("High noise ratio")
                score = _clamp(score - 3)

        if llm:
            quality = llm.get("structureQuality")
            if quality == "excellent":
                strengths.append("Excellent content structure")
                score = _clamp(score + 2)
            elif quality == "good":
                strengths.append("Good content structure")
                score = _clamp(score + 1)
            grade = _number(llm, "readingLevel", "grade")
            if grade is not None:
                if 8 <= grade <= 14:
                    strengths.append(f"Appropriate reading level (Grade {grade:g})")
                elif grade < 6:
                    weaknesses.append("Content may be too simplistic")
                elif grade > 16:
                    weaknesses.append("Content may be too complex")
            topics = _sequence(llm, "keyTopics")
            if len(topics) > 3:
                strengths.append(f"Clear topic coverage ({len(topics)} topics)")

        if any(f.mentions("thin content") for f in relevant):
            weaknesses.append("Insufficient content depth")
        if any(f.mentions("clarity") for f in relevant):
            weaknesses.append("Content clarity issues")

        return self._dimension(
            score,
            weight,
            min(1.0, confidence),
            relevant,
            strengths,
            weaknesses,
            _band(
                score,
                "Add substantial, well-structured content with clear headings and organization",
                "Improve content structure and readability with better headings and paragraphs",
                "Maintain high content quality standards",
            ),
            DataAvailability(
                has_issues=bool(relevant),
                has_llm_data=has_llm,
                has_extractability=chunking is not None,
                has_entity_data=has_entities,
            ),
        )

    def _discoverability(self, findings: Sequence[Finding], weight: float) -> DimensionScore:
        relevant = [f for f in findings if f.category in (Category.CRAWLABILITY, Category.TECHNICAL)]
        score = penalty_score(relevant, self.config)
        strengths: List[str] = []
        weaknesses: List[str] = []

        if any("robots" in f.tags for f in relevant):
            weaknesses.append("Content blocked from crawlers")
        else:
            strengths.append("Crawlers can access content")
        if any(f.mentions("canonical") for f in relevant):
            weaknesses.append("Canonical URL issues")
        else:
            strengths.append("Proper canonical configuration")

        return self._dimension(
            score,
            weight,
            0.95,
            relevant,
            strengths,
            weaknesses,
            _band(
                score,
                "Fix critical crawlability issues - ensure content is accessible to AI crawlers",
                "Optimize meta tags and canonicals for better indexing",
                "Maintain good crawlability practices",
            ),
            DataAvailability(has_issues=bool(relevant)),
        )

    def _extractability(
        self,
        findings: Sequence[Finding],
        mapping: Optional[ExtractabilityMap],
        weight: float,
    ) -> DimensionScore:
        relevant = [f for f in findings if f.category is Category.EXTRACTION]
        strengths: List[str] = []
        weaknesses: List[str] = []

        if mapping is None:
            score = penalty_score(relevant, self.config)
            confidence = 0.6
        else:
            summary = mapping.score
            types = mapping.content_types
            score = float(summary.extractability_score)
            confidence = 1.0

            if summary.server_rendered_percent >= 90:
                strengths.append(f"{summary.server_rendered_percent}% server-rendered")
            elif summary.server_rendered_percent >= 70:
                strengths.append(f"{summary.server_rendered_percent}% server-rendered (good)")
            else:
                weaknesses.append(f"Only {summary.server_rendered_percent}% server-rendered")

            if types.text.percentage >= 90:
                strengths.append(f"{types.text.percentage}% text extractable")
            elif types.text.percentage >= 75:
                strengths.append(f"{types.text.percentage}% text extractable (acceptable)")
            else:
                weaknesses.append(f"Only {types.text.percentage}% text extractable")

            if summary.hidden_content_percent > self.config.hidden_content_threshold:
                weaknesses.append(f"{summary.hidden_content_percent}% hidden content")
                score = _clamp(score - summary.hidden_content_percent / 5)
            if summary.interactive_content_percent > 30:
                weaknesses.append(f"High interactive content ({summary.interactive_content_percent}%)")

            if types.images.percentage >= 80:
                strengths.append("Good image accessibility")
            if types.links.percentage >= 90:
                strengths.append("Links are well-structured")
            if types.structured.percentage >= 70:
                strengths.append("Good structured data coverage")
            elif types.structured.percentage < 30:
                weaknesses.append("Limited structured data")

        return self._dimension(
            score,
            weight,
            confidence,
            relevant,
            strengths,
            weaknesses,
            _band(
                score,
                "Critical: Move content to server-rendered HTML, remove dynamic/hidden content",
                "Improve: Reduce client-side rendering and hidden content",
                "Maintain high extractability with server-side rendering",
            ),
            DataAvailability(has_issues=bool(relevant), has_extractability=mapping is not None),
        )

    def _comprehensibility(
        self,
        findings: Sequence[Finding],
        llm: Optional[Mapping[str, Any]],
        mirror: Optional[Mapping[str, Any]],
        weight: float,
    ) -> DimensionScore:
        relevant = [
            f
            for f in findings
            if f.category in (Category.READABILITY, Category.KNOWLEDGE_GRAPH)
            and f.mentions("structure", "heading", "schema", "h1")
        ]
        score = penalty_score(relevant, self.config)
        strengths: List[str] = []
        weaknesses: List[str] = []

        has_llm = bool(llm and llm.get("summary"))
        has_entities = bool(_sequence(llm, "topEntities"))
        confidence = 0.7 + (0.2 if has_llm else 0) + (0.05 if has_entities else 0) + (0.05 if mirror else 0)

        if any(f.mentions("h1") for f in relevant):
            weaknesses.append("H1 structure issues")
        else:
            strengths.append("Proper H1 structure")
        if any(f.mentions("schema", "json-ld") for f in relevant):
            weaknesses.append("Structured data issues")
        else:
            strengths.append("Good structured data implementation")

        if llm:
            if llm.get("summary"):
                strengths.append("AI can generate clear summary")
                score = _clamp(score + 2)
            if llm.get("pageType"):
                strengths.append(f"Clear page type ({llm['pageType']})")
            topics = _sequence(llm, "keyTopics")
            if len(topics) >= 3:
                strengths.append(f"Well-defined topics ({len(topics)} identified)")
            elif "keyTopics" in llm and len(topics) < 2:
                weaknesses.append("Limited topic clarity")
            if len(_sequence(llm, "topEntities")) >= 5:
                strengths.append("Rich entity recognition")

        alignment = _number(mirror, "summary", "alignmentScore")
        if alignment is not None:
            if alignment >= 80:
                strengths.append("Clear messaging alignment")
                score = _clamp(score + 3)
            elif alignment < 60:
                weaknesses.append("Poor messaging alignment")
                score = _clamp(score - 5)
        critical_mismatches = _number(mirror, "summary", "critical")
        if critical_mismatches:
            weaknesses.append(f"{int(critical_mismatches)} critical messaging mismatches")

        return self._dimension(
            score,
            weight,
            min(1.0, confidence),
            relevant,
            strengths,
            weaknesses,
            _band(
                score,
                "Critical: Fix heading structure, add schema.org markup, improve semantic HTML",
                "Improve: Enhance heading hierarchy and structured data completeness",
                "Maintain clear structure with proper headings and schema",
            ),
            DataAvailability(has_issues=bool(relevant), has_llm_data=has_llm, has_entity_data=has_entities),
        )

    def _trustworthiness(
        self,
        findings: Sequence[Finding],
        report: Optional[Mapping[str, Any]],
        weight: float,
    ) -> DimensionScore:
        relevant = [f for f in findings if f.category is Category.HALLUCINATION]
        strengths: List[str] = []
        weaknesses: List[str] = []

        risk = _number(report, "hallucinationRiskScore")
        if risk is not None:
            score = max(0.0, 100.0 - risk)
            confidence = 0.95
        else:
            score = self.config.trust_baseline
            confidence = 0.5

        if relevant:
            penalty = min(
                self.config.hallucination_penalty_cap,
                len(relevant) * self.config.hallucination_penalty_per_issue,
            )
            score = max(0.0, score - penalty)

        if risk is None:
            weaknesses.append("Hallucination risk not assessed")
        else:
            if risk < 20:
                strengths.append("Low hallucination risk")
            elif risk < 40:
                strengths.append("Moderate hallucination risk")
            else:
                weaknesses.append("Elevated hallucination risk")

            total_facts = _number(report, "factCheckSummary", "totalFacts")
            verified = _number(report, "factCheckSummary", "verifiedFacts")
            if total_facts and verified is not None:
                verified_percent = verified / total_facts * 100
                if verified_percent >= 70:
                    strengths.append(f"{verified_percent:.0f}% facts verified")
                elif verified_percent < 40:
                    weaknesses.append(f"Only {verified_percent:.0f}% facts verified")
                    score = max(0.0, score - 10)
            contradictions = _number(report, "factCheckSummary", "contradictions") or 0
            if contradictions > 0:
                weaknesses.append(f"{int(contradictions)} contradictions found")
                score = max(0.0, score - contradictions * 5)
            ambiguities = _number(report, "factCheckSummary", "ambiguities") or 0
            if ambiguities > 3:
                weaknesses.append(f"{int(ambiguities)} ambiguities")

            severe = [
                t
                for t in _sequence(report, "triggers")
                if isinstance(t, Mapping) and t.get("severity") in (Severity.CRITICAL.value, Severity.HIGH.value)
            ]
            if severe:
                weaknesses.append(f"{len(severe)} high-risk hallucination triggers")

        return self._dimension(
            score,
            weight,
            confidence,
            relevant,
            strengths,
            weaknesses,
            _band(
                score,
                "Add citations, dates, and factual grounding to reduce AI hallucination risk",
                "Improve factual clarity and add more verifiable information",
                "Content has good factual grounding",
            ),
            DataAvailability(has_issues=bool(relevant), has_hallucination_report=risk is not None),
        )

    def _dimension(
        self,
        score: float,
        weight: float,
        confidence: float,
        relevant: Sequence[Finding],
        strengths: List[str],
        weaknesses: List[str],
        recommendation: str,
        availability: DataAvailability,
    ) -> DimensionScore:
        score = round(score, 1)
        return DimensionScore(
            score=score,
            weight=weight,
            status=status_for(score),
            confidence=round(confidence, 2),
            issues=_issues(relevant),
            strengths=tuple(strengths),
            weaknesses=tuple(weaknesses),
            recommendation=recommendation,
            data_availability=availability,
        )

    # --- Derived views ---

    def quick_wins(self, findings: Sequence[Finding]) -> tuple[QuickWin, ...]:
        """High-impact findings that an easy-fix keyword marks as cheap to address."""
        keywords = [k.lower() for k in self.config.quick_win_keywords]
        candidates = [
            f
            for f in findings
            if f.impact_score >= self.config.quick_win_min_impact
            and any(k in f.title.lower() or k in f.remediation.lower() for k in keywords)
        ]
        ranked = sorted(candidates, key=lambda f: (-f.impact_score, _EFFORT_RANK[estimate_effort(f)], f.weighted_key))
        return tuple(
            QuickWin(issue=f.title, impact=f.impact_score, effort=estimate_effort(f), fix=f.remediation)
            for f in ranked[: self.config.max_quick_wins]
        )

    def roadmap(self, findings: Sequence[Finding], dimensions: Mapping[str, DimensionScore]) -> Roadmap:
        limit = self.config.roadmap_bucket_size

        def entry(f: Finding) -> str:
            return f"{f.title}: {f.remediation[:80]}"

        immediate = [
            entry(f)
            for f in findings
            if f.severity is Severity.CRITICAL or (f.severity is Severity.HIGH and f.impact_score >= 20)
        ]
        short_term = [
            entry(f) for f in findings if f.severity is Severity.HIGH and 15 <= f.impact_score < 20
        ]
        long_term = [entry(f) for f in findings if f.severity is Severity.MEDIUM and f.impact_score >= 10]

        for name in DIMENSION_NAMES:
            dim = dimensions[name]
            if dim.status == "critical":
                immediate.append(f"Fix {name}: {dim.recommendation}")
            elif dim.status in ("needs-work", "good"):
                long_term.append(f"Enhance {name}: {dim.recommendation}")

        return Roadmap(
            immediate=tuple(immediate[:limit]),
            short_term=tuple(short_term[:limit]),
            long_term=tuple(long_term[:limit]),
        )

    def benchmark(self, overall: float, dimensions: Mapping[str, DimensionScore]) -> Benchmark:
        z = (overall - self.config.benchmark_mean) / self.config.benchmark_std
        percentile = round((1 + math.erf(z / math.sqrt(2))) * 50)
        top_percentile = max(1, min(99, percentile))

        mean_dimension = sum(d.score for d in dimensions.values()) / len(dimensions)
        if mean_dimension >= 85:
            best_in_class = 96
        elif mean_dimension >= 75:
            best_in_class = 94
        else:
            best_in_class = 92
        return Benchmark(
            top_percentile=top_percentile,
            best_in_class=best_in_class,
            improvement=round(max(0.0, best_in_class - overall), 1),
        )

    def agent_perspective(self, dimensions: Mapping[str, DimensionScore]) -> AgentPerspective:
        capable = self.config.agent_capability_threshold
        blocker = self.config.blocker_threshold
        quality = dimensions["content_quality"].score
        extract = dimensions["extractability"].score
        comprehend = dimensions["comprehensibility"].score
        discover = dimensions["discoverability"].score

        blockers = []
        if quality < blocker:
            blockers.append("Insufficient or unclear content")
        if extract < blocker:
            blockers.append("Content not easily extractable")
        if comprehend < blocker:
            blockers.append("Poor structure and organization")
        if discover < blocker:
            blockers.append("Content not crawlable")

        can_understand = comprehend >= capable
        return AgentPerspective(
            can_understand=can_understand,
            can_extract=extract >= capable,
            can_index=discover >= capable,
            can_answer=quality >= capable and can_understand,
            confidence=round((comprehend + extract + quality) / 300, 2),
            main_blockers=tuple(blockers),
        )
