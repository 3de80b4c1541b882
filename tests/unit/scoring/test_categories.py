"""Unit tests for per-category penalty scoring."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from readyscan.config import ScoringConfig
from readyscan.protocols import Category, Severity
from readyscan.scoring import all_category_scores, category_score, legacy_scores, penalty_score, weighted_overall


@pytest.fixture
def config():
    return ScoringConfig()


class TestPenaltyScore:
    """The shared penalty formula."""

    def test_no_findings_baseline(self, config):
        """An empty subset scores the 95 baseline."""
        assert penalty_score([], config) == 95.0

    def test_single_critical(self, config, make_finding):
        """One critical finding of impact 40 leaves 100 - 40 * 3 * 0.5 = 40."""
        finding = make_finding(Category.READABILITY, Severity.CRITICAL, impact=40)

        assert penalty_score([finding], config) == 40.0

    def test_floor_at_zero(self, config, make_finding):
        """Penalties beyond 100 floor at 0."""
        findings = [make_finding(severity=Severity.CRITICAL, impact=80) for _ in range(3)]

        assert penalty_score(findings, config) == 0.0

    def test_info_findings_do_not_penalize_below_baseline(self, config, make_finding):
        """Info findings weigh zero but never lift the score above the baseline."""
        findings = [make_finding(severity=Severity.INFO, impact=50)]

        assert penalty_score(findings, config) == 95.0

    def test_small_penalty_capped_at_baseline(self, config, make_finding):
        """A low finding worth less than 5 points still cannot score above 95."""
        finding = make_finding(severity=Severity.LOW, impact=4)

        assert penalty_score([finding], config) == 95.0

    def test_uncapped_configuration(self, make_finding):
        """Without the cap, a tiny penalty scores above the baseline."""
        config = ScoringConfig(cap_at_baseline=False)
        finding = make_finding(severity=Severity.LOW, impact=4)

        assert penalty_score([finding], config) == 99.0


class TestCategoryScores:
    """Category aggregation and ordering."""

    def test_category_score_fields(self, config, make_finding):
        """Issue count, buckets and weight are recorded per category."""
        findings = [
            make_finding(Category.CRAWLABILITY, Severity.HIGH, impact=20),
            make_finding(Category.CRAWLABILITY, Severity.HIGH, impact=10),
            make_finding(Category.CRAWLABILITY, Severity.LOW, impact=10),
            make_finding(Category.TECHNICAL, Severity.LOW, impact=10),
        ]

        score = category_score(findings, Category.CRAWLABILITY, config)

        assert score.issue_count == 3
        assert score.weight == 1.2
        assert score.total_impact == 32.5
        assert score.score == 67.5
        assert [(b.severity, b.count) for b in score.buckets] == [(Severity.HIGH, 2), (Severity.LOW, 1)]

    def test_all_categories_present_worst_first(self, config, make_finding):
        """Every category is scored and the list is sorted by ascending score."""
        findings = [
            make_finding(Category.KNOWLEDGE_GRAPH, Severity.CRITICAL, impact=40),
            make_finding(Category.READABILITY, Severity.MEDIUM, impact=20),
        ]

        scores = all_category_scores(findings, config)

        assert {s.category for s in scores} == set(Category)
        assert scores[0].category is Category.KNOWLEDGE_GRAPH
        assert scores[1].category is Category.READABILITY
        assert [s.score for s in scores] == sorted(s.score for s in scores)

    def test_weighted_overall_without_findings(self, config):
        """With no findings every counted category sits at 95."""
        overall, normalized = weighted_overall(all_category_scores([], config))

        assert overall == 95.0
        assert normalized < overall

    def test_low_weight_category_counted_only_with_findings(self, config, make_finding):
        """MISC (weight 0.5) affects the overall only once it has findings."""
        clean, _ = weighted_overall(all_category_scores([], config))
        misc = make_finding(Category.MISC, Severity.CRITICAL, impact=60)

        dirty, _ = weighted_overall(all_category_scores([misc], config))

        assert dirty < clean


class TestLegacyScores:
    """Unweighted per-category scores."""

    def test_only_categories_with_findings(self, make_finding):
        """Categories without findings are absent."""
        findings = [
            make_finding(Category.READABILITY, impact=30),
            make_finding(Category.READABILITY, impact=25),
            make_finding(Category.MISC, impact=2),
        ]

        assert legacy_scores(findings) == {Category.READABILITY: 45, Category.MISC: 98}

    def test_penalty_capped_at_100(self, make_finding):
        """Summed impact above 100 floors the score at 0."""
        findings = [make_finding(impact=60), make_finding(impact=60)]

        assert legacy_scores(findings) == {Category.READABILITY: 0}


severities = st.sampled_from(list(Severity))
impacts = st.integers(min_value=0, max_value=100)


class TestCategoryProperties:
    """Property tests over arbitrary finding sets."""

    @given(st.lists(st.tuples(severities, impacts), max_size=12), severities, impacts)
    def test_adding_a_finding_never_raises_score(self, existing, severity, impact):
        """Monotonic: one more finding in a category never improves its score."""
        from readyscan.protocols import Finding

        config = ScoringConfig()

        def finding(sev, imp, n):
            return Finding(
                id=f"T-{n}",
                title=f"t{n}",
                category=Category.READABILITY,
                severity=sev,
                description="",
                remediation="",
                impact_score=imp,
            )

        base = [finding(s, i, n) for n, (s, i) in enumerate(existing)]
        extra = finding(severity, impact, len(base))

        before = category_score(base, Category.READABILITY, config).score
        after = category_score(base + [extra], Category.READABILITY, config).score

        assert after <= before
        assert 0.0 <= after <= 100.0
