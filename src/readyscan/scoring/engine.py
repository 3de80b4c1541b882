"""
Scoring engine facade.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Sequence

import structlog

from readyscan.config import ScoringConfig
from readyscan.protocols import Finding, Severity

from .categories import all_category_scores, weighted_overall
from .models import ScoringResult
from .readiness import ReadinessScorer

if TYPE_CHECKING:
    from readyscan.chunking.models import ChunkingAnalysis
    from readyscan.extractability.models import ExtractabilityMap

logger = structlog.get_logger(__name__)


class ScoringEngine:
    """Turns a finding list into category scores and a readiness score.

    ``score`` is pure: it reads only its arguments and the configuration, and
    the result does not depend on the order of ``findings``.
    """

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()
        self.readiness = ReadinessScorer(self.config)
        self.logger = logger.bind(component="scoring_engine")

    def score(
        self,
        findings: Sequence[Finding],
        *,
        extractability: Optional[ExtractabilityMap] = None,
        chunking: Optional[ChunkingAnalysis] = None,
        llm: Optional[Mapping[str, Any]] = None,
        hallucination: Optional[Mapping[str, Any]] = None,
        mirror: Optional[Mapping[str, Any]] = None,
    ) -> ScoringResult:
        category_scores = all_category_scores(findings, self.config)
        overall, normalized = weighted_overall(category_scores)

        breakdown: Dict[Severity, int] = {severity: 0 for severity in Severity}
        for finding in findings:
            breakdown[finding.severity] += 1

        readiness = self.readiness.score(
            findings,
            extractability=extractability,
            chunking=chunking,
            llm=llm,
            hallucination=hallucination,
            mirror=mirror,
        )

        self.logger.debug(
            "Scoring complete",
            total_issues=len(findings),
            overall_score=overall,
            readiness=round(readiness.overall, 1),
            grade=readiness.grade,
        )

        return ScoringResult(
            overall_score=overall,
            normalized_score=normalized,
            grade=self.config.grade_for(overall),
            category_scores=tuple(category_scores),
            total_issues=len(findings),
            severity_breakdown=breakdown,
            readiness=readiness,
        )
