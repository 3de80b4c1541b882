"""Behaviour of individual built-in rules over small documents."""

import pytest

from readyscan.protocols import Category, Severity
from readyscan.rules import RuleRunner, load_builtin_rules


def evaluate(rule_id, document):
    return RuleRunner(load_builtin_rules()).registry.get(rule_id).evaluate(document)


def as_list(outcome):
    if outcome is None:
        return []
    if isinstance(outcome, (list, tuple)):
        return list(outcome)
    return [outcome]


def titles(findings):
    return {f.title for f in findings}


@pytest.fixture
def run_all(make_document):
    def _run(html, url="https://example.com/page", **kwargs):
        return RuleRunner().run_sync(make_document(html, url, **kwargs))

    return _run


class TestHeadingRules:
    """H1 presence and heading structure."""

    def test_missing_h1(self, make_document):
        """A page with no H1 gets a critical finding."""
        findings = as_list(evaluate("AIREAD-001", make_document("<html><body><p>Text</p></body></html>")))

        assert len(findings) == 1
        assert findings[0].title == "Missing H1"
        assert findings[0].severity is Severity.CRITICAL
        assert findings[0].impact_score == 40

    def test_multiple_h1(self, make_document):
        """Two H1s are reported as a high-severity finding."""
        html = "<html><body><h1>One</h1><h1>Two</h1></body></html>"
        findings = as_list(evaluate("AIREAD-001", make_document(html)))

        assert [f.title for f in findings] == ["Multiple H1 Headings"]
        assert findings[0].severity is Severity.HIGH

    def test_single_h1_ok(self, make_document):
        """Exactly one H1 produces nothing."""
        assert evaluate("AIREAD-001", make_document("<html><body><h1>One</h1></body></html>")) is None


class TestFlatPage:
    """A single heading over a long body with no landmarks."""

    def test_structure_findings(self, run_all, flat_html):
        """The flat page is flagged for missing container and poor heading structure."""
        found = titles(run_all(flat_html))

        assert "Missing main semantic container" in found
        assert "Poor heading structure" in found

    def test_findings_are_readability(self, run_all, flat_html):
        """Both structure findings belong to the readability category."""
        findings = [
            f for f in run_all(flat_html) if f.title in {"Missing main semantic container", "Poor heading structure"}
        ]

        assert {f.category for f in findings} == {Category.READABILITY}


class TestMetaAndCrawlRules:
    """Robots directives and indexing signals."""

    def test_noai_robots(self, run_all):
        """A noai robots directive is reported."""
        html = '<html><head><meta name="robots" content="noai, noimageai"></head><body><h1>x</h1></body></html>'

        assert "Meta robots tag blocks AI" in titles(run_all(html))

    def test_noindex_and_nofollow(self, run_all):
        """noindex is critical and nofollow high."""
        html = '<html><head><meta name="robots" content="noindex, nofollow"></head><body><h1>x</h1></body></html>'
        by_title = {f.title: f for f in run_all(html)}

        assert by_title["Page has noindex directive"].severity is Severity.CRITICAL
        assert by_title["Page has nofollow directive"].severity is Severity.HIGH

    def test_missing_schema(self, run_all):
        """Pages without JSON-LD lack Schema.org data."""
        assert "No Schema.org structured data" in titles(run_all("<html><body><h1>x</h1></body></html>"))

    def test_article_schema_present(self, run_all, article_html):
        """JSON-LD on the sample article suppresses the schema finding."""
        assert "No Schema.org structured data" not in titles(run_all(article_html))

    def test_unparseable_canonical(self, make_document):
        """A canonical href that urllib cannot parse is reported as an invalid canonical."""
        html = '<html><head><link rel="canonical" href="http://[::1"></head><body><h1>x</h1></body></html>'
        findings = as_list(evaluate("CRAWL-001", make_document(html)))
        by_id = {f.id: f for f in findings}

        assert by_id["CRAWL-005"].title == "Invalid canonical URL format"
        assert "Canonical: http://[::1" in by_id["CRAWL-005"].evidence
        assert "CRAWL-004" not in by_id

    def test_unparseable_hreflang_href_skipped(self, make_document):
        """A malformed alternate href is ignored while a valid self-reference still counts."""
        html = (
            '<html lang="en"><head>'
            '<link rel="canonical" href="https://example.com/page">'
            '<link rel="alternate" hreflang="en" href="http://[::1">'
            '<link rel="alternate" hreflang="en" href="https://example.com/page">'
            "</head><body><h1>x</h1></body></html>"
        )
        findings = as_list(evaluate("CRAWL-001", make_document(html)))

        assert "Missing hreflang self-reference" not in titles(findings)

    def test_only_unparseable_hreflang_href(self, make_document):
        """With only a malformed alternate href there is no self-reference."""
        html = (
            '<html lang="en"><head><link rel="alternate" hreflang="en" href="http://[::1"></head>'
            "<body><h1>x</h1></body></html>"
        )
        findings = as_list(evaluate("CRAWL-001", make_document(html)))

        assert "Missing hreflang self-reference" in titles(findings)


class TestContentClarityRule:
    """Clarity checks survive a reading-level failure."""

    def test_textstat_failure_skips_only_reading_level(self, make_document, monkeypatch):
        """A LookupError from textstat drops the grade check and keeps the other clarity findings."""
        from readyscan.rules.builtin import content_clarity

        def unavailable(text):
            raise LookupError("Resource cmudict not found.")

        monkeypatch.setattr(content_clarity.textstat, "flesch_kincaid_grade", unavailable)
        sentence = "Readers scan this plain paragraph for useful facts about the product and its history."
        paragraphs = "".join(f"<p>{sentence}</p>" for _ in range(8))
        html = f"<html><body><main><p>Short opener.</p>{paragraphs}</main></body></html>"
        document = make_document(html)
        assert len(document.main_container.get_text(" ").split()) >= 100

        findings = as_list(evaluate("AIREAD-080", document))
        ids = {f.id for f in findings}

        assert {"AIREAD-080", "AIREAD-084", "AIREAD-087"} <= ids
        assert not ids & {"AIREAD-091", "AIREAD-092"}


class TestSecurityRule:
    """Transport and policy checks."""

    def test_http_page(self, run_all):
        """Plain HTTP pages are flagged as critical."""
        findings = run_all("<html><body><h1>x</h1></body></html>", url="http://example.com/")
        by_title = {f.title: f for f in findings}

        assert by_title["Page not served over HTTPS"].severity is Severity.CRITICAL

    def test_csp_from_headers(self, make_document):
        """A Content-Security-Policy response header counts as a policy."""
        from readyscan.document import Document

        html = "<html><body><h1>x</h1></body></html>"
        without = make_document(html)
        with_header = Document(
            url=without.url,
            html=html,
            config=without.config,
            headers={"content-security-policy": "default-src 'self'"},
        )

        assert "No Content Security Policy" in titles(as_list(evaluate("TECH-007", without)))
        assert "No Content Security Policy" not in titles(as_list(evaluate("TECH-007", with_header)))


class TestExtractionRule:
    """Script-only shells."""

    def test_script_shell_flagged(self, make_document):
        """An empty body with many scripts is an extraction issue."""
        scripts = "".join(f'<script src="/s{i}.js"></script>' for i in range(12))
        html = f'<html><body><div id="root"></div>{scripts}</body></html>'
        findings = as_list(evaluate("EXTRACT-001", make_document(html)))

        assert len(findings) == 1
        assert findings[0].category is Category.EXTRACTION

    def test_content_page_not_flagged(self, make_document, article_html):
        """Pages with main content pass."""
        assert evaluate("EXTRACT-001", make_document(article_html)) is None


class TestChunkWindowRule:
    """Content length against the configured token budget."""

    def test_long_content_flagged(self, make_document):
        """Content above max_chunk_tokens is reported."""
        from readyscan.config import ScanConfig

        html = "<html><body><main><p>" + "word " * 300 + "</p></main></body></html>"
        document = make_document(html, config=ScanConfig(max_chunk_tokens=100))
        findings = as_list(evaluate("CHUNK-001", document))

        assert len(findings) == 1
        assert "Total tokens: 300" in findings[0].evidence

    def test_short_content_ok(self, make_document, article_html):
        """The sample article fits the default budget."""
        assert evaluate("CHUNK-001", make_document(article_html)) is None


class TestAllRulesOnMalformedHtml:
    """Malformed input is parsed best-effort and never crashes the pass."""

    @pytest.mark.parametrize(
        "html",
        [
            "",
            "<html>",
            "<div><p>unclosed <b>tags",
            "<html><body><table><tr><td>cell</table></body>",
            "not html at all",
        ],
    )
    def test_no_rule_raises(self, make_document, html):
        """Every built-in rule evaluates without raising."""
        document = make_document(html)
        for rule in load_builtin_rules():
            as_list(rule.evaluate(document))
