"""
Per-category penalty scores.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from readyscan.config import ScoringConfig
from readyscan.protocols import Category, Finding, Severity

from .models import CategoryScore, SeverityBucket

_CATEGORY_ORDER = list(Category)


def legacy_scores(findings: Iterable[Finding]) -> Dict[Category, int]:
    """Unweighted score per category that has findings.

    ``100 - min(sum(impact), 100)``, floored at 0 and rounded.
    """
    totals: Dict[Category, float] = {}
    for finding in findings:
        totals[finding.category] = totals.get(finding.category, 0.0) + finding.impact_score
    ordered = sorted(totals.items(), key=lambda item: _CATEGORY_ORDER.index(item[0]))
    return {category: max(0, round(100 - min(total, 100))) for category, total in ordered}


def weighted_impact(finding: Finding, config: ScoringConfig) -> float:
    return finding.impact_score * config.severity_multipliers[finding.severity] * config.penalty_factor


def penalty_score(findings: Sequence[Finding], config: ScoringConfig) -> float:
    """The shared penalty formula used by categories and dimensions.

    An empty subset scores ``no_findings_score``; a non-empty one never scores
    above it when ``cap_at_baseline`` is set.
    """
    if not findings:
        return config.no_findings_score
    penalty = sum(weighted_impact(f, config) for f in findings)
    score = max(0.0, 100.0 - penalty)
    if config.cap_at_baseline:
        score = min(score, config.no_findings_score)
    return round(score, 1)


def category_score(findings: Sequence[Finding], category: Category, config: ScoringConfig) -> CategoryScore:
    members = [f for f in findings if f.category is category]
    buckets: List[SeverityBucket] = []
    for severity in Severity:
        of_severity = [f for f in members if f.severity is severity]
        if of_severity:
            buckets.append(
                SeverityBucket(
                    severity=severity,
                    count=len(of_severity),
                    weighted_impact=round(sum(weighted_impact(f, config) for f in of_severity), 1),
                )
            )
    return CategoryScore(
        category=category,
        score=penalty_score(members, config),
        issue_count=len(members),
        total_impact=round(sum(weighted_impact(f, config) for f in members), 1),
        weight=config.category_weights[category],
        buckets=tuple(buckets),
    )


def all_category_scores(findings: Sequence[Finding], config: ScoringConfig) -> List[CategoryScore]:
    """Scores for every category, worst first."""
    scores = [category_score(findings, category, config) for category in Category]
    return sorted(scores, key=lambda cs: (cs.score, _CATEGORY_ORDER.index(cs.category)))


def weighted_overall(scores: Sequence[CategoryScore]) -> tuple[float, float]:
    """Return (overall, normalized).

    ``overall`` is the weight-averaged score over categories that have
    findings or carry a weight of at least 1.0. ``normalized`` divides the
    same weighted sum by the weight of every category.
    """
    counted = [cs for cs in scores if cs.issue_count > 0 or cs.weight >= 1.0]
    weighted_sum = sum(cs.score * cs.weight for cs in counted)
    total_weight = sum(cs.weight for cs in counted)
    overall = round(weighted_sum / total_weight, 1) if total_weight > 0 else 100.0
    max_weight = sum(cs.weight for cs in scores)
    normalized = round(weighted_sum / max_weight, 1) if max_weight > 0 else 0.0
    return overall, normalized
