"""
Result types of the scoring engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Tuple

from readyscan.protocols import Category, Severity

DimensionStatus = Literal["excellent", "good", "needs-work", "critical"]
Effort = Literal["low", "medium", "high"]

DIMENSION_NAMES: Tuple[str, ...] = (
    "content_quality",
    "discoverability",
    "extractability",
    "comprehensibility",
    "trustworthiness",
)


@dataclass(slots=True, frozen=True)
class SeverityBucket:
    severity: Severity
    count: int
    weighted_impact: float


@dataclass(slots=True, frozen=True)
class CategoryScore:
    """Severity-weighted penalty score of one category."""

    category: Category
    score: float
    issue_count: int
    total_impact: float
    weight: float
    buckets: Tuple[SeverityBucket, ...] = ()


@dataclass(slots=True, frozen=True)
class DimensionIssue:
    title: str
    severity: Severity
    impact: float


@dataclass(slots=True, frozen=True)
class DataAvailability:
    """Which inputs a dimension score was computed from."""

    has_issues: bool = False
    has_llm_data: bool = False
    has_extractability: bool = False
    has_hallucination_report: bool = False
    has_entity_data: bool = False


@dataclass(slots=True, frozen=True)
class DimensionScore:
    score: float
    weight: float
    status: DimensionStatus
    confidence: float
    issues: Tuple[DimensionIssue, ...]
    strengths: Tuple[str, ...]
    weaknesses: Tuple[str, ...]
    recommendation: str
    data_availability: DataAvailability


@dataclass(slots=True, frozen=True)
class QuickWin:
    issue: str
    impact: float
    effort: Effort
    fix: str


@dataclass(slots=True, frozen=True)
class Roadmap:
    immediate: Tuple[str, ...] = ()
    short_term: Tuple[str, ...] = ()
    long_term: Tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class Benchmark:
    top_percentile: int
    best_in_class: int
    improvement: float


@dataclass(slots=True, frozen=True)
class AgentPerspective:
    can_understand: bool
    can_extract: bool
    can_index: bool
    can_answer: bool
    confidence: float
    main_blockers: Tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class ReadinessScore:
    """Five-dimension readiness assessment.

    ``overall`` is the exact weighted sum of the dimension scores.
    """

    overall: float
    grade: str
    confidence: float
    dimensions: Dict[str, DimensionScore]
    quick_wins: Tuple[QuickWin, ...]
    roadmap: Roadmap
    benchmark: Benchmark
    agent_perspective: AgentPerspective


@dataclass(slots=True, frozen=True)
class ScoringResult:
    """Everything the scoring engine derives from one finding list."""

    overall_score: float
    normalized_score: float
    grade: str
    category_scores: Tuple[CategoryScore, ...]
    total_issues: int
    severity_breakdown: Dict[Severity, int]
    readiness: ReadinessScore
    max_possible_score: float = field(default=100.0)

    def category(self, category: Category) -> CategoryScore:
        for score in self.category_scores:
            if score.category is category:
                return score
        raise KeyError(category)
