"""Unit tests for the five-dimension readiness score."""

import random

import pytest
from hypothesis import given
from hypothesis import strategies as st

from readyscan.config import ScoringConfig
from readyscan.protocols import Category, Severity
from readyscan.scoring import DIMENSION_NAMES, ReadinessScorer, estimate_effort, status_for


@pytest.fixture
def scorer():
    return ReadinessScorer(ScoringConfig())


class TestDimensions:
    """Dimension selection and adjustment."""

    def test_no_findings(self, scorer):
        """A clean page scores 95 on finding-driven dimensions and 85 on trust."""
        result = scorer.score([])

        for name in ("content_quality", "discoverability", "extractability", "comprehensibility"):
            assert result.dimensions[name].score == 95.0
            assert result.dimensions[name].status == "excellent"
        assert result.dimensions["trustworthiness"].score == 85.0
        assert result.overall == pytest.approx(94.0)
        assert result.grade == "A"

    def test_overall_is_exact_weighted_sum(self, scorer, make_finding):
        """The overall equals the weighted sum of the dimension scores."""
        findings = [
            make_finding(Category.READABILITY, Severity.HIGH, impact=20, title="Missing H1"),
            make_finding(Category.CRAWLABILITY, Severity.CRITICAL, impact=30),
            make_finding(Category.HALLUCINATION, Severity.MEDIUM, impact=10),
        ]

        result = scorer.score(findings)
        expected = sum(result.dimensions[n].score * result.dimensions[n].weight for n in DIMENSION_NAMES)

        assert result.overall == pytest.approx(expected)

    def test_comprehensibility_uses_structure_findings_only(self, scorer, make_finding):
        """Only readability/KG findings about structure, headings, schema or H1 count."""
        structural = make_finding(Category.READABILITY, Severity.HIGH, impact=20, title="Poor heading structure")
        unrelated = make_finding(Category.READABILITY, Severity.HIGH, impact=20, title="Long paragraphs")

        with_structural = scorer.score([structural]).dimensions["comprehensibility"]
        with_unrelated = scorer.score([unrelated]).dimensions["comprehensibility"]

        assert with_structural.score == 80.0
        assert with_unrelated.score == 95.0

    def test_trust_penalty_capped(self, scorer, make_finding):
        """Each HALL finding costs 3 points, at most 20 in total."""
        few = [make_finding(Category.HALLUCINATION, Severity.LOW, impact=5) for _ in range(2)]
        many = [make_finding(Category.HALLUCINATION, Severity.LOW, impact=5) for _ in range(10)]

        assert scorer.score(few).dimensions["trustworthiness"].score == 79.0
        assert scorer.score(many).dimensions["trustworthiness"].score == 65.0

    def test_trust_from_hallucination_report(self, scorer):
        """A hallucination report replaces the trust baseline."""
        result = scorer.score([], hallucination={"hallucinationRiskScore": 30, "triggers": []})
        trust = result.dimensions["trustworthiness"]

        assert trust.score == 70.0
        assert trust.data_availability.has_hallucination_report
        assert trust.confidence == 0.95

    def test_malformed_payloads_ignored(self, scorer):
        """Opaque payloads with unexpected shapes do not break scoring."""
        result = scorer.score(
            [],
            llm={"summary": "", "readingLevel": "hard", "keyTopics": "not-a-list"},
            hallucination={"hallucinationRiskScore": "high"},
            mirror={"summary": None},
        )

        assert result.dimensions["trustworthiness"].score == 85.0

    def test_mirror_alignment_adjusts_comprehensibility(self, scorer):
        """Poor alignment costs five points."""
        result = scorer.score([], mirror={"summary": {"alignmentScore": 40, "critical": 2}})
        dim = result.dimensions["comprehensibility"]

        assert dim.score == 90.0
        assert "2 critical messaging mismatches" in dim.weaknesses

    def test_scores_bounded(self, scorer, make_finding):
        """Dimensions stay within [0, 100] under heavy penalties."""
        findings = [make_finding(c, Severity.CRITICAL, impact=100) for c in Category for _ in range(3)]

        result = scorer.score(findings)

        for dim in result.dimensions.values():
            assert 0.0 <= dim.score <= 100.0
        assert 0.0 <= result.overall <= 100.0


class TestDerivedViews:
    """Quick wins, roadmap, benchmark and agent perspective."""

    def test_quick_wins_filtered_sorted_and_capped(self, scorer, make_finding):
        """Only impact >= 15 with an easy-fix keyword qualifies; at most five, highest impact first."""
        findings = [
            make_finding(impact=15 + i, title=f"Missing element {i}", remediation="Add it.") for i in range(7)
        ]
        findings.append(make_finding(impact=90, title="Slow server", remediation="Tune backend."))
        findings.append(make_finding(impact=10, title="Missing tiny thing", remediation="Add it."))

        wins = scorer.score(findings).quick_wins

        assert len(wins) == 5
        assert [w.impact for w in wins] == [21, 20, 19, 18, 17]
        assert all(w.issue.startswith("Missing element") for w in wins)

    def test_effort_estimate(self, make_finding):
        """Meta/alt/title gaps are low effort; structural work is high."""
        assert estimate_effort(make_finding(title="Missing meta description")) == "low"
        assert estimate_effort(make_finding(title="Poor heading structure")) == "high"
        assert estimate_effort(make_finding(title="Thing", remediation="Redesign the page.")) == "high"
        assert estimate_effort(make_finding(title="Thing")) == "medium"

    def test_roadmap_buckets(self, scorer, make_finding):
        """Findings land in buckets by severity and impact."""
        findings = [
            make_finding(severity=Severity.CRITICAL, impact=5, title="Critical one"),
            make_finding(severity=Severity.HIGH, impact=25, title="High big"),
            make_finding(severity=Severity.HIGH, impact=17, title="High mid"),
            make_finding(severity=Severity.MEDIUM, impact=12, title="Medium one"),
            make_finding(severity=Severity.LOW, impact=50, title="Low one"),
        ]

        roadmap = scorer.score(findings).roadmap

        assert any(item.startswith("Critical one") for item in roadmap.immediate)
        assert any(item.startswith("High big") for item in roadmap.immediate)
        assert any(item.startswith("High mid") for item in roadmap.short_term)
        assert any(item.startswith("Medium one") for item in roadmap.long_term)
        assert not any("Low one" in item for bucket in (roadmap.immediate, roadmap.short_term, roadmap.long_term)
                       for item in bucket)

    def test_roadmap_buckets_capped(self, scorer, make_finding):
        """No bucket exceeds five entries."""
        findings = [make_finding(severity=Severity.CRITICAL, impact=30) for _ in range(9)]

        roadmap = scorer.score(findings).roadmap

        assert len(roadmap.immediate) == 5

    def test_benchmark_bounds(self, scorer, make_finding):
        """Percentile stays within 1-99 and improvement is non-negative."""
        clean = scorer.score([]).benchmark
        awful = scorer.score([make_finding(c, Severity.CRITICAL, impact=100) for c in Category]).benchmark

        assert 1 <= awful.top_percentile <= clean.top_percentile <= 99
        assert clean.best_in_class == 96
        assert clean.improvement == pytest.approx(2.0)
        assert awful.improvement > 0

    def test_agent_perspective(self, scorer, make_finding):
        """Capabilities follow the 70 threshold and blockers the 60 threshold."""
        clean = scorer.score([]).agent_perspective
        assert clean.can_understand and clean.can_extract and clean.can_index and clean.can_answer
        assert clean.main_blockers == ()
        assert clean.confidence == 0.95

        blocked = scorer.score(
            [make_finding(Category.CRAWLABILITY, Severity.CRITICAL, impact=60)]
        ).agent_perspective
        assert not blocked.can_index
        assert "Content not crawlable" in blocked.main_blockers


class TestPurity:
    """Scoring depends only on the finding multiset."""

    def test_order_independent(self, scorer, make_finding):
        """Shuffling findings gives an identical readiness score."""
        findings = [
            make_finding(category, severity, impact=impact, title=f"Missing {category.value} {impact}")
            for category, severity, impact in [
                (Category.READABILITY, Severity.HIGH, 20),
                (Category.READABILITY, Severity.HIGH, 20),
                (Category.CRAWLABILITY, Severity.CRITICAL, 40),
                (Category.KNOWLEDGE_GRAPH, Severity.MEDIUM, 15),
                (Category.TECHNICAL, Severity.LOW, 18),
                (Category.HALLUCINATION, Severity.MEDIUM, 25),
            ]
        ]
        shuffled = list(findings)
        random.Random(7).shuffle(shuffled)

        assert scorer.score(findings) == scorer.score(shuffled)

    def test_repeatable(self, scorer, make_finding):
        """The same input scored twice gives equal results."""
        findings = [make_finding(severity=Severity.HIGH, impact=30)]

        assert scorer.score(findings) == scorer.score(findings)


class TestGrades:
    """Grade table behaviour."""

    @pytest.mark.parametrize(
        "score,grade",
        [(100, "A+"), (97, "A+"), (96.9, "A"), (93, "A"), (90, "A-"), (87, "B+"), (83, "B"), (80, "B-"),
         (77, "C+"), (73, "C"), (70, "C-"), (60, "D"), (59.9, "F"), (0, "F")],
    )
    def test_boundaries(self, score, grade):
        """Each band's lower bound is inclusive."""
        assert ScoringConfig().grade_for(score) == grade

    @given(st.floats(min_value=0, max_value=100), st.floats(min_value=0, max_value=100))
    def test_grade_monotonic(self, a, b):
        """A higher score never receives a worse grade."""
        config = ScoringConfig()
        order = [band.grade for band in config.grade_table]
        low, high = sorted((a, b))

        assert order.index(config.grade_for(high)) <= order.index(config.grade_for(low))

    @pytest.mark.parametrize("score,status", [(95, "excellent"), (90, "excellent"), (80, "good"), (60, "needs-work"), (10, "critical")])
    def test_status_bands(self, score, status):
        """Dimension status follows the 90/75/60 bands."""
        assert status_for(score) == status
