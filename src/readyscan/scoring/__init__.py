from .categories import all_category_scores, category_score, legacy_scores, penalty_score, weighted_overall
from .engine import ScoringEngine
from .models import (
    DIMENSION_NAMES,
    AgentPerspective,
    Benchmark,
    CategoryScore,
    DataAvailability,
    DimensionIssue,
    DimensionScore,
    QuickWin,
    ReadinessScore,
    Roadmap,
    ScoringResult,
    SeverityBucket,
)
from .readiness import ReadinessScorer, estimate_effort, status_for

__all__ = [
    "DIMENSION_NAMES",
    "AgentPerspective",
    "Benchmark",
    "CategoryScore",
    "DataAvailability",
    "DimensionIssue",
    "DimensionScore",
    "QuickWin",
    "ReadinessScore",
    "ReadinessScorer",
    "Roadmap",
    "ScoringEngine",
    "ScoringResult",
    "SeverityBucket",
    "all_category_scores",
    "category_score",
    "estimate_effort",
    "legacy_scores",
    "penalty_score",
    "status_for",
    "weighted_overall",
]
